"""
Leave balance ledger - one row per (employee, leave type, year).

- Rows are provisioned at onboarding / year rollover from the policy quota
  plus any carry-forward allowed by policy.
- Only the approval step mutates a row: used += days, remaining -= days.
- Nothing is reserved while a request is PENDING, so approval re-validates
  the row and reports a would-be negative balance as an integrity fault.
- Rows carry a version column; a concurrent writer that loses the
  compare-and-swap gets StaleDataError at flush.
"""
import logging
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from app.core.errors import IntegrityFaultError
from app.models.employee import Employee
from app.models.leave import LeaveBalance, LeavePolicy, LeaveRequest, LeaveType
from app.services.policy_service import carry_forward_days, list_policies

logger = logging.getLogger(__name__)


def get_balance(
    db: Session,
    employee_id: int,
    leave_type: LeaveType,
    year: int,
    for_update: bool = False,
) -> Optional[LeaveBalance]:
    query = db.query(LeaveBalance).filter(
        LeaveBalance.employee_id == employee_id,
        LeaveBalance.leave_type == leave_type,
        LeaveBalance.year == year,
    )
    if for_update:
        query = query.with_for_update()
    return query.first()


def get_balance_summary(
    db: Session,
    employee_id: int,
    year: int,
) -> List[Tuple[LeaveBalance, Optional[LeavePolicy]]]:
    """Balances of one employee for a year, each paired with its policy (if any)."""
    return (
        db.query(LeaveBalance, LeavePolicy)
        .outerjoin(LeavePolicy, LeavePolicy.leave_type == LeaveBalance.leave_type)
        .filter(LeaveBalance.employee_id == employee_id, LeaveBalance.year == year)
        .order_by(LeaveBalance.leave_type)
        .all()
    )


def provision_balances(
    db: Session,
    year: int,
    employee_ids: Optional[Sequence[int]] = None,
) -> List[LeaveBalance]:
    """
    Create the missing balance rows for ``year``.

    total_allocated = annual_quota + carry forward from the previous year's
    remaining (capped by max_carry_forward, only where the policy allows it).
    Existing rows are never touched.

    Args:
        db: Database session
        year: Calendar year to provision
        employee_ids: Restrict to these employees (default: all active employees)

    Returns:
        The newly created rows
    """
    policies = list_policies(db)
    query = db.query(Employee).filter(Employee.active == True)  # noqa: E712
    if employee_ids is not None:
        query = query.filter(Employee.id.in_(list(employee_ids)))
    employees = query.order_by(Employee.id).all()

    created = []
    for employee in employees:
        for policy in policies:
            if get_balance(db, employee.id, policy.leave_type, year) is not None:
                continue
            previous = get_balance(db, employee.id, policy.leave_type, year - 1)
            carried = carry_forward_days(policy, previous.remaining) if previous else 0
            total = policy.annual_quota + carried
            balance = LeaveBalance(
                employee_id=employee.id,
                leave_type=policy.leave_type,
                year=year,
                total_allocated=total,
                used=0,
                remaining=total,
            )
            db.add(balance)
            created.append(balance)
    db.commit()
    for balance in created:
        db.refresh(balance)
    logger.info(
        "Provisioned %s leave balance rows for year=%s (employees=%s)",
        len(created), year, len(employees),
    )
    return created


def deduct_for_approval(db: Session, leave_request: LeaveRequest) -> LeaveBalance:
    """
    Charge an approved request against its balance row.

    Runs inside the caller's transaction and does not commit.

    Raises:
        IntegrityFaultError: If the row is missing or would go negative
    """
    days = leave_request.days_requested
    balance = get_balance(
        db,
        leave_request.employee_id,
        leave_request.leave_type,
        leave_request.balance_year,
        for_update=True,
    )
    if balance is None:
        logger.error(
            "Integrity fault: no %s balance for employee_id=%s year=%s (leave_request_id=%s)",
            leave_request.leave_type.value, leave_request.employee_id,
            leave_request.balance_year, leave_request.id,
        )
        raise IntegrityFaultError(
            f"No {leave_request.leave_type.value} balance exists for {leave_request.balance_year}; "
            f"the request cannot be approved"
        )
    if balance.remaining < days:
        logger.error(
            "Integrity fault: balance_id=%s remaining=%s cannot cover %s days (leave_request_id=%s)",
            balance.id, balance.remaining, days, leave_request.id,
        )
        raise IntegrityFaultError(
            f"Approving would make the {leave_request.leave_type.value} balance negative "
            f"(available: {balance.remaining}, requested: {days})"
        )

    balance.used = balance.used + days
    balance.remaining = balance.remaining - days
    return balance
