"""
Tests for leave policies and the balance ledger
"""
from datetime import date

import pytest
from fastapi import status
from sqlalchemy.exc import IntegrityError

from app.core.errors import IntegrityFaultError
from app.models.leave import LeaveBalance, LeaveRequest, LeaveStatus, LeaveType
from app.services.leave_balance_service import deduct_for_approval, get_balance, provision_balances
from app.services.policy_service import carry_forward_days, get_policy, seed_default_policies


EXPECTED_QUOTAS = {
    LeaveType.PAID: 20,
    LeaveType.SICK: 10,
    LeaveType.CASUAL: 10,
    LeaveType.UNPAID: 30,
    LeaveType.MATERNITY: 180,
    LeaveType.PATERNITY: 14,
}


def test_seed_default_policies(db):
    policies = seed_default_policies(db)

    assert {p.leave_type: p.annual_quota for p in policies} == EXPECTED_QUOTAS
    assert get_policy(db, LeaveType.SICK).requires_documentation is True
    assert get_policy(db, LeaveType.PAID).max_carry_forward == 5


def test_seed_default_policies_keeps_existing_rows(db, policies):
    paid = get_policy(db, LeaveType.PAID)
    paid.annual_quota = 25
    db.commit()

    again = seed_default_policies(db)

    assert len(again) == len(EXPECTED_QUOTAS)
    assert get_policy(db, LeaveType.PAID).annual_quota == 25


def test_provision_creates_one_row_per_type(db, policies, employee):
    created = provision_balances(db, 2026, [employee.id])

    assert len(created) == len(EXPECTED_QUOTAS)
    for balance in created:
        assert balance.total_allocated == EXPECTED_QUOTAS[balance.leave_type]
        assert balance.used == 0
        assert balance.remaining == balance.total_allocated


def test_provision_is_idempotent(db, policies, employee):
    provision_balances(db, 2026, [employee.id])

    assert provision_balances(db, 2026, [employee.id]) == []
    assert db.query(LeaveBalance).count() == len(EXPECTED_QUOTAS)


def test_provision_skips_inactive_employees(db, policies, employee, employee_factory):
    leaver = employee_factory("EMP099", "Gone", active=False)

    provision_balances(db, 2026)

    assert db.query(LeaveBalance).filter(LeaveBalance.employee_id == leaver.id).count() == 0
    assert db.query(LeaveBalance).filter(LeaveBalance.employee_id == employee.id).count() == len(EXPECTED_QUOTAS)


def test_provision_carries_forward_within_policy_caps(db, policies, employee):
    provision_balances(db, 2025, [employee.id])
    leftovers = {LeaveType.PAID: 8, LeaveType.CASUAL: 2, LeaveType.SICK: 7}
    for leave_type, remaining in leftovers.items():
        balance = get_balance(db, employee.id, leave_type, 2025)
        balance.used = balance.total_allocated - remaining
        balance.remaining = remaining
    db.commit()

    provision_balances(db, 2026, [employee.id])

    # PAID capped at 5, CASUAL below its cap of 3, SICK never carries
    assert get_balance(db, employee.id, LeaveType.PAID, 2026).total_allocated == 25
    assert get_balance(db, employee.id, LeaveType.CASUAL, 2026).total_allocated == 12
    assert get_balance(db, employee.id, LeaveType.SICK, 2026).total_allocated == 10
    assert get_balance(db, employee.id, LeaveType.PAID, 2026).remaining == 25


@pytest.mark.parametrize(
    "leave_type, previous_remaining, expected",
    [
        (LeaveType.PAID, 0, 0),
        (LeaveType.PAID, 3, 3),
        (LeaveType.PAID, 12, 5),
        (LeaveType.CASUAL, 4, 3),
        (LeaveType.UNPAID, 30, 0),
    ],
)
def test_carry_forward_days(db, policies, leave_type, previous_remaining, expected):
    assert carry_forward_days(get_policy(db, leave_type), previous_remaining) == expected


def test_balance_cannot_go_negative_in_storage(db, employee, balances):
    balance = get_balance(db, employee.id, LeaveType.CASUAL, 2026)
    balance.used = balance.total_allocated + 1
    balance.remaining = -1

    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_balance_must_conserve_total_in_storage(db, employee, balances):
    balance = get_balance(db, employee.id, LeaveType.CASUAL, 2026)
    balance.used = 3

    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_deduct_for_approval_without_row_is_integrity_fault(db, employee, balances):
    leave = LeaveRequest(
        employee_id=employee.id,
        leave_type=LeaveType.PAID,
        start_date=date(2027, 1, 4),
        end_date=date(2027, 1, 5),
        days_requested=2,
        balance_year=2027,
        reason="Next year trip planning",
        status=LeaveStatus.APPROVED,
    )
    db.add(leave)
    db.flush()

    with pytest.raises(IntegrityFaultError):
        deduct_for_approval(db, leave)
    db.rollback()


def test_my_balances_endpoint(client, employee, balances, headers_for):
    response = client.get("/api/v1/leaves/balances", headers=headers_for(employee))

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["year"] == 2026
    assert data["employee_id"] == employee.id
    by_type = {item["leave_type"]: item for item in data["items"]}
    assert set(by_type) == {t.value for t in EXPECTED_QUOTAS}
    assert by_type["PAID"]["remaining"] == 20
    assert by_type["PAID"]["policy"]["carry_forward_allowed"] is True
    assert by_type["MATERNITY"]["policy"]["requires_documentation"] is True


def test_my_balances_reflects_approved_leave(client, employee, hr_user, balances, headers_for):
    leave = client.post(
        "/api/v1/leaves/apply",
        json={
            "leave_type": "SICK",
            "start_date": "2026-01-06",
            "end_date": "2026-01-07",
            "reason": "Fever and doctor visit",
        },
        headers=headers_for(employee),
    ).json()
    client.post(f"/api/v1/leaves/{leave['id']}/review", json={"decision": "APPROVED"}, headers=headers_for(hr_user))

    data = client.get("/api/v1/leaves/balances", headers=headers_for(employee)).json()

    sick = next(item for item in data["items"] if item["leave_type"] == "SICK")
    assert sick["used"] == 2
    assert sick["remaining"] == 8


def test_provision_endpoint_is_reviewer_only(client, employee, hr_user, policies, headers_for):
    body = {"year": 2026}

    assert client.post("/api/v1/leaves/balances/provision", json=body, headers=headers_for(employee)).status_code == 403

    response = client.post("/api/v1/leaves/balances/provision", json=body, headers=headers_for(hr_user))

    assert response.status_code == status.HTTP_200_OK
    # Both active employees get every leave type
    assert response.json() == {"year": 2026, "created": 2 * len(EXPECTED_QUOTAS)}


def test_policies_endpoint(client, employee, policies, headers_for):
    response = client.get("/api/v1/leaves/policies", headers=headers_for(employee))

    assert response.status_code == status.HTTP_200_OK
    quotas = {p["leave_type"]: p["annual_quota"] for p in response.json()}
    assert quotas == {t.value: q for t, q in EXPECTED_QUOTAS.items()}
