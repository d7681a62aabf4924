"""
Pytest configuration and fixtures
"""
import os

# Settings are read at import time; tests never touch a real database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-leave-service-tests")

from datetime import date, datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.base import Base
from app.core.deps import get_clock, get_db, get_notification_dispatcher
from app.core.security import create_access_token
from app.models.employee import Employee, Role
from app.services.notification_service import NotificationDispatcher
from app.services.policy_service import seed_default_policies
from app.services.leave_balance_service import provision_balances
from app.utils.datetime_utils import FixedClock


# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Enable foreign keys for SQLite
@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Monday, first full working week of 2026
TEST_NOW = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
TEST_YEAR = 2026


class RecordingDispatcher(NotificationDispatcher):
    """Keeps dispatched events in memory for assertions."""

    def __init__(self):
        self.events = []

    def dispatch(self, events):
        self.events.extend(events)

    def for_recipient(self, recipient_id):
        return [e for e in self.events if e.recipient_id == recipient_id]


class FailingDispatcher(NotificationDispatcher):
    """Simulates a notification backend that is down."""

    def __init__(self):
        self.calls = 0

    def dispatch(self, events):
        self.calls += 1
        raise RuntimeError("notification backend unavailable")


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock():
    return FixedClock(TEST_NOW)


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture(scope="function")
def client(db, clock, dispatcher):
    """Test client fixture with database, clock and dispatcher overrides"""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_employee(db, emp_code, first_name, role=Role.EMPLOYEE, last_name="", active=True):
    employee = Employee(
        emp_code=emp_code,
        first_name=first_name,
        last_name=last_name,
        role=role,
        join_date=date(2024, 1, 1),
        active=active,
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)
    return employee


def auth_headers(employee):
    token = create_access_token({"sub": str(employee.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def policies(db):
    return seed_default_policies(db)


@pytest.fixture
def employee(db):
    return make_employee(db, "EMP001", "John", last_name="Doe")


@pytest.fixture
def other_employee(db):
    return make_employee(db, "EMP002", "Jane", last_name="Roe")


@pytest.fixture
def hr_user(db):
    return make_employee(db, "HR001", "Helen", role=Role.HR, last_name="Hart")


@pytest.fixture
def company_admin(db):
    return make_employee(db, "ADM001", "Carl", role=Role.COMPANY_ADMIN, last_name="Admin")


@pytest.fixture
def manager(db):
    return make_employee(db, "MGR001", "Mona", role=Role.MANAGER, last_name="Lead")


@pytest.fixture
def balances(db, policies, employee, other_employee):
    """Default-quota balances for both employees in the test year"""
    return provision_balances(db, TEST_YEAR, [employee.id, other_employee.id])


@pytest.fixture
def headers_for():
    """Bearer headers for an employee: headers_for(employee)"""
    return auth_headers


@pytest.fixture
def employee_factory(db):
    """employee_factory(emp_code, first_name, role=..., active=...)"""
    def _make(emp_code, first_name, **kwargs):
        return make_employee(db, emp_code, first_name, **kwargs)
    return _make


@pytest.fixture
def failing_dispatcher():
    return FailingDispatcher()
