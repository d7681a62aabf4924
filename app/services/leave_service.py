"""
Leave service - request lifecycle for leave management

PENDING -> APPROVED | REJECTED (reviewer) or CANCELLED (requester).
Terminal states never transition again.
"""
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload
from sqlalchemy.orm.exc import StaleDataError

from app.core.config import settings
from app.core.errors import (
    AlreadyReviewedError,
    BalanceNotFoundError,
    ConcurrentUpdateError,
    ForbiddenError,
    InsufficientBalanceError,
    InvalidRangeError,
    InvalidStateError,
    NotFoundError,
    OverlappingRequestError,
)
from app.models.employee import Employee
from app.models.leave import (
    ACTIVE_LEAVE_STATUSES,
    LeaveRequest,
    LeaveStatus,
    LeaveType,
    ReviewDecision,
)
from app.models.notification import NotificationType
from app.services import attendance_service
from app.services import leave_balance_service as balances
from app.services.notification_service import (
    NotificationDispatcher,
    NotificationEvent,
    send_notifications,
)
from app.utils.datetime_utils import Clock, is_weekend, iter_dates
from app.utils.roles import REVIEWER_ROLES, can_review

logger = logging.getLogger(__name__)


def weekdays_in_range(start_date: date, end_date: date) -> List[date]:
    """Mon-Fri dates in [start_date, end_date], inclusive."""
    return [d for d in iter_dates(start_date, end_date) if not is_weekend(d)]


def count_weekdays(start_date: date, end_date: date) -> int:
    """
    Leave days requested for a range: weekends never count.

    Examples:
        Sat-Sun -> 0, Mon-Fri -> 5, Fri-Mon -> 2
    """
    if start_date > end_date:
        return 0
    full_weeks, extra_days = divmod((end_date - start_date).days + 1, 7)
    first = start_date.weekday()
    # Monday=0 ... Friday=4
    return full_weeks * 5 + sum(1 for offset in range(extra_days) if (first + offset) % 7 < 5)


def balance_year_for(start_date: date) -> int:
    """Balance year used both when applying and when approving."""
    return start_date.year


def find_overlapping_request(
    db: Session,
    employee_id: int,
    start_date: date,
    end_date: date,
) -> Optional[LeaveRequest]:
    """
    First PENDING or APPROVED request of the employee sharing at least one
    calendar day with [start_date, end_date].
    """
    query = db.query(LeaveRequest).filter(
        LeaveRequest.employee_id == employee_id,
        LeaveRequest.status.in_(ACTIVE_LEAVE_STATUSES),
        LeaveRequest.start_date <= end_date,
        LeaveRequest.end_date >= start_date,
    )
    return query.order_by(LeaveRequest.start_date).first()


def _lock_employee(db: Session, employee_id: int) -> None:
    # Serializes check-then-insert of concurrent applications by one employee
    db.query(Employee.id).filter(Employee.id == employee_id).with_for_update().first()


def _format_day(d: date) -> str:
    return d.strftime("%a %b %d %Y")


def _leave_type_label(leave_type: LeaveType) -> str:
    return leave_type.value.lower()


def build_application_events(
    db: Session,
    employee: Employee,
    leave_request: LeaveRequest,
) -> List[NotificationEvent]:
    """One SYSTEM_ALERT per active reviewer."""
    reviewers = (
        db.query(Employee)
        .filter(Employee.role.in_(list(REVIEWER_ROLES)), Employee.active == True)  # noqa: E712
        .order_by(Employee.id)
        .all()
    )
    message = (
        f"{employee.full_name} has requested {leave_request.days_requested} days of "
        f"{_leave_type_label(leave_request.leave_type)} leave"
    )
    return [
        NotificationEvent(
            recipient_id=reviewer.id,
            type=NotificationType.SYSTEM_ALERT,
            title="New Leave Request",
            message=message,
            link=settings.LEAVE_REVIEW_LINK,
        )
        for reviewer in reviewers
    ]


def build_review_event(leave_request: LeaveRequest) -> NotificationEvent:
    """Decision notice for the requester."""
    approved = leave_request.status == LeaveStatus.APPROVED
    status_value = leave_request.status.value
    return NotificationEvent(
        recipient_id=leave_request.employee_id,
        type=NotificationType.LEAVE_APPROVED if approved else NotificationType.LEAVE_REJECTED,
        title=f"Leave Request {status_value}",
        message=(
            f"Your {_leave_type_label(leave_request.leave_type)} leave request from "
            f"{_format_day(leave_request.start_date)} to {_format_day(leave_request.end_date)} "
            f"has been {status_value.lower()}"
        ),
        link=settings.LEAVE_HISTORY_LINK,
    )


def apply_leave(
    db: Session,
    employee: Employee,
    leave_type: LeaveType,
    start_date: date,
    end_date: date,
    reason: str,
    clock: Optional[Clock] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> LeaveRequest:
    """
    Apply for leave (creates PENDING request)

    Validation order, each a distinct failure:
    1. start_date <= end_date (InvalidRangeError)
    2. days_requested = weekdays in range
    3. balance row for (employee, type, start_date.year) exists (BalanceNotFoundError)
    4. remaining >= days_requested (InsufficientBalanceError)
    5. no overlap with PENDING/APPROVED requests (OverlappingRequestError)

    The balance is not touched here; approval re-validates it.

    Args:
        db: Database session
        employee: Authenticated employee applying for leave
        leave_type: Type of leave
        start_date: First day (inclusive)
        end_date: Last day (inclusive)
        reason: Reason given by the employee
        clock: Time source (defaults to the wall clock)
        dispatcher: Receives the reviewer notifications

    Returns:
        Created LeaveRequest instance
    """
    clock = clock or Clock()

    if start_date > end_date:
        raise InvalidRangeError(start_date, end_date)

    days_requested = count_weekdays(start_date, end_date)
    year = balance_year_for(start_date)

    try:
        _lock_employee(db, employee.id)

        balance = balances.get_balance(db, employee.id, leave_type, year)
        if balance is None:
            raise BalanceNotFoundError(leave_type.value, year)

        if balance.remaining < days_requested:
            raise InsufficientBalanceError(balance.remaining, days_requested)

        overlapping = find_overlapping_request(db, employee.id, start_date, end_date)
        if overlapping:
            raise OverlappingRequestError(
                overlapping.start_date, overlapping.end_date, overlapping.status.value
            )

        leave_request = LeaveRequest(
            employee_id=employee.id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            days_requested=days_requested,
            balance_year=year,
            reason=reason,
            status=LeaveStatus.PENDING,
            created_at=clock.now(),
        )
        db.add(leave_request)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(leave_request)
    logger.info(
        "leave applied: leave_request_id=%s employee_id=%s type=%s days=%s range=%s..%s",
        leave_request.id, employee.id, leave_type.value, days_requested, start_date, end_date,
    )

    if not send_notifications(dispatcher, lambda: build_application_events(db, employee, leave_request)):
        db.rollback()
    db.refresh(leave_request)
    return leave_request


def _review_once(
    db: Session,
    leave_request_id: int,
    reviewer: Employee,
    decision: ReviewDecision,
    comments: Optional[str],
    clock: Clock,
) -> LeaveRequest:
    leave_request = (
        db.query(LeaveRequest)
        .filter(LeaveRequest.id == leave_request_id)
        .with_for_update()
        .first()
    )
    if not leave_request:
        raise NotFoundError(f"Leave request with id {leave_request_id} not found")

    if leave_request.is_terminal:
        raise AlreadyReviewedError(leave_request.status.value)

    leave_request.status = LeaveStatus(decision.value)
    leave_request.reviewed_by_id = reviewer.id
    leave_request.reviewed_at = clock.now()
    leave_request.reviewer_comments = comments

    if decision == ReviewDecision.APPROVED:
        balances.deduct_for_approval(db, leave_request)
        attendance_service.mark_leave_days(
            db,
            leave_request.employee_id,
            weekdays_in_range(leave_request.start_date, leave_request.end_date),
            notes=f"{leave_request.leave_type.value} leave",
        )

    db.commit()
    return leave_request


def review_leave(
    db: Session,
    leave_request_id: int,
    reviewer: Employee,
    decision: ReviewDecision,
    comments: Optional[str] = None,
    clock: Optional[Clock] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> LeaveRequest:
    """
    Approve or reject a PENDING leave request

    The status update, the balance deduction and the attendance marking are
    one transaction. A lost optimistic-lock race (StaleDataError) rolls the
    whole unit back and re-runs it against fresh rows.

    Raises:
        ForbiddenError: Reviewer lacks the review capability
        NotFoundError: No such request
        AlreadyReviewedError: Request is not PENDING
        IntegrityFaultError: Approval would drive the balance negative
        ConcurrentUpdateError: Retries exhausted
    """
    clock = clock or Clock()

    if not can_review(reviewer.role):
        raise ForbiddenError("You do not have permission to review leave requests")

    attempts = settings.REVIEW_MAX_RETRIES
    for attempt in range(1, attempts + 1):
        try:
            leave_request = _review_once(db, leave_request_id, reviewer, decision, comments, clock)
            break
        except StaleDataError:
            db.rollback()
            logger.warning(
                "leave review conflict: leave_request_id=%s attempt=%s/%s",
                leave_request_id, attempt, attempts,
            )
        except Exception:
            db.rollback()
            raise
    else:
        raise ConcurrentUpdateError(
            f"Leave request {leave_request_id} could not be reviewed due to concurrent updates; please retry"
        )

    db.refresh(leave_request)
    logger.info(
        "leave status transition: leave_request_id=%s before=PENDING after=%s reviewer_id=%s",
        leave_request.id, leave_request.status.value, reviewer.id,
    )

    if not send_notifications(dispatcher, lambda: [build_review_event(leave_request)]):
        db.rollback()
    db.refresh(leave_request)
    return leave_request


def cancel_leave(
    db: Session,
    leave_request_id: int,
    employee: Employee,
    clock: Optional[Clock] = None,
) -> LeaveRequest:
    """
    Cancel the caller's own PENDING request. No balance or attendance change.

    Raises:
        NotFoundError, ForbiddenError (not the owner), InvalidStateError (not PENDING)
    """
    clock = clock or Clock()
    try:
        leave_request = (
            db.query(LeaveRequest)
            .filter(LeaveRequest.id == leave_request_id)
            .with_for_update()
            .first()
        )
        if not leave_request:
            raise NotFoundError(f"Leave request with id {leave_request_id} not found")

        if leave_request.employee_id != employee.id:
            raise ForbiddenError("You can only cancel your own leave requests")

        if leave_request.is_terminal:
            raise InvalidStateError(
                f"Only pending leave requests can be cancelled (status {leave_request.status.value})"
            )

        leave_request.status = LeaveStatus.CANCELLED
        leave_request.cancelled_at = clock.now()
        db.commit()
    except StaleDataError:
        db.rollback()
        raise InvalidStateError("Leave request changed while cancelling; it can no longer be cancelled")
    except Exception:
        db.rollback()
        raise

    db.refresh(leave_request)
    logger.info(
        "leave status transition: leave_request_id=%s before=PENDING after=CANCELLED employee_id=%s",
        leave_request.id, employee.id,
    )
    return leave_request


def get_leave_request(db: Session, leave_request_id: int) -> LeaveRequest:
    leave_request = db.query(LeaveRequest).filter(LeaveRequest.id == leave_request_id).first()
    if not leave_request:
        raise NotFoundError(f"Leave request with id {leave_request_id} not found")
    return leave_request


def list_my_leaves(
    db: Session,
    employee_id: int,
    year: int,
    status: Optional[LeaveStatus] = None,
) -> List[LeaveRequest]:
    """Requests of one employee starting in ``year``, newest first."""
    query = db.query(LeaveRequest).options(joinedload(LeaveRequest.reviewed_by)).filter(
        LeaveRequest.employee_id == employee_id,
        LeaveRequest.start_date >= date(year, 1, 1),
        LeaveRequest.start_date <= date(year, 12, 31),
    )
    if status is not None:
        query = query.filter(LeaveRequest.status == status)
    return query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc()).all()


def list_pending(db: Session) -> List[LeaveRequest]:
    """All PENDING requests, oldest first so reviewers clear the queue in order."""
    return (
        db.query(LeaveRequest)
        .options(joinedload(LeaveRequest.employee))
        .filter(LeaveRequest.status == LeaveStatus.PENDING)
        .order_by(LeaveRequest.created_at.asc(), LeaveRequest.id.asc())
        .all()
    )


def list_all(
    db: Session,
    status: Optional[LeaveStatus] = None,
    employee_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[LeaveRequest]:
    query = db.query(LeaveRequest).options(
        joinedload(LeaveRequest.employee),
        joinedload(LeaveRequest.reviewed_by),
    )
    if status is not None:
        query = query.filter(LeaveRequest.status == status)
    if employee_id is not None:
        query = query.filter(LeaveRequest.employee_id == employee_id)
    if start_date is not None:
        query = query.filter(LeaveRequest.start_date >= start_date)
    if end_date is not None:
        query = query.filter(LeaveRequest.end_date <= end_date)
    return query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc()).all()
