"""
Leave endpoints
"""
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.errors import ForbiddenError
from app.core.deps import (
    get_clock,
    get_current_user,
    get_db,
    get_notification_dispatcher,
    require_reviewer,
)
from app.models.employee import Employee
from app.models.leave import LeaveStatus
from app.schemas.leave import (
    LeaveApplyRequest,
    LeaveBalanceOut,
    LeaveBalancesResponse,
    LeaveListItemOut,
    LeaveListResponse,
    LeaveOut,
    LeavePolicyOut,
    LeaveReviewRequest,
    ProvisionBalancesRequest,
    ProvisionBalancesResponse,
)
from app.services import leave_balance_service as balances
from app.services import leave_service
from app.services.notification_service import NotificationDispatcher
from app.services.policy_service import list_policies
from app.utils.datetime_utils import Clock
from app.utils.roles import can_review

router = APIRouter()


@router.post("/apply", response_model=LeaveOut, status_code=201)
async def apply_leave_endpoint(
    leave_data: LeaveApplyRequest,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Apply for leave (creates PENDING request)

    Validations, in order:
    - start_date <= end_date
    - a balance exists for the leave type and year
    - remaining balance covers the weekdays requested
    - no overlap with the caller's PENDING/APPROVED requests

    The balance is only charged when a reviewer approves.
    """
    return leave_service.apply_leave(
        db=db,
        employee=current_user,
        leave_type=leave_data.leave_type,
        start_date=leave_data.start_date,
        end_date=leave_data.end_date,
        reason=leave_data.reason,
        clock=clock,
        dispatcher=dispatcher,
    )


@router.post("/{leave_request_id}/review", response_model=LeaveOut)
async def review_leave_endpoint(
    leave_request_id: int,
    review_data: LeaveReviewRequest,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer),
    clock: Clock = Depends(get_clock),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Approve or reject a PENDING leave request (Website Admin, Company Admin, HR)

    On approval, in one transaction:
    - the balance is charged (used += days, remaining -= days)
    - every weekday in the range is marked LEAVE in attendance

    The requester is notified of the decision either way.
    """
    return leave_service.review_leave(
        db=db,
        leave_request_id=leave_request_id,
        reviewer=current_user,
        decision=review_data.decision,
        comments=review_data.comments,
        clock=clock,
        dispatcher=dispatcher,
    )


@router.post("/{leave_request_id}/cancel", response_model=LeaveOut)
async def cancel_leave_endpoint(
    leave_request_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
):
    """Cancel one of your own PENDING leave requests"""
    return leave_service.cancel_leave(
        db=db,
        leave_request_id=leave_request_id,
        employee=current_user,
        clock=clock,
    )


@router.get("/balances", response_model=LeaveBalancesResponse)
async def my_balances_endpoint(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
):
    """Current-year balances of the caller, with policy details"""
    year = clock.today().year
    rows = balances.get_balance_summary(db, current_user.id, year)
    items = [
        LeaveBalanceOut(
            leave_type=balance.leave_type,
            year=balance.year,
            total_allocated=balance.total_allocated,
            used=balance.used,
            remaining=balance.remaining,
            policy=LeavePolicyOut.model_validate(policy) if policy else None,
        )
        for balance, policy in rows
    ]
    return LeaveBalancesResponse(year=year, employee_id=current_user.id, items=items)


@router.post("/balances/provision", response_model=ProvisionBalancesResponse)
async def provision_balances_endpoint(
    provision_data: ProvisionBalancesRequest,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer),
):
    """Create missing balance rows for a year (onboarding / year rollover)"""
    created = balances.provision_balances(db, provision_data.year, provision_data.employee_ids)
    return ProvisionBalancesResponse(year=provision_data.year, created=len(created))


@router.get("/policies", response_model=List[LeavePolicyOut])
async def list_policies_endpoint(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Leave policies (quota, carry forward, documentation)"""
    return list_policies(db)


@router.get("/my", response_model=LeaveListResponse)
async def list_my_leaves_endpoint(
    status: Optional[LeaveStatus] = Query(None, description="Filter by status"),
    year: Optional[int] = Query(None, description="Calendar year (default: current year)"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
):
    """Caller's leave requests for a year, newest first (all statuses)"""
    leave_requests = leave_service.list_my_leaves(
        db=db,
        employee_id=current_user.id,
        year=year or clock.today().year,
        status=status,
    )
    return LeaveListResponse(
        items=[LeaveListItemOut.model_validate(req) for req in leave_requests],
        total=len(leave_requests),
    )


@router.get("/pending", response_model=LeaveListResponse)
async def list_pending_endpoint(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer),
):
    """PENDING requests awaiting review, oldest first"""
    pending = leave_service.list_pending(db)
    return LeaveListResponse(
        items=[LeaveListItemOut.model_validate(req) for req in pending],
        total=len(pending),
    )


@router.get("", response_model=LeaveListResponse)
async def list_all_endpoint(
    status: Optional[LeaveStatus] = Query(None, description="Filter by status"),
    employee_id: Optional[int] = Query(None, description="Filter by employee"),
    start_date: Optional[date] = Query(None, description="Requests starting on or after (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="Requests ending on or before (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer),
):
    """All leave requests with filters (reviewers only)"""
    leave_requests = leave_service.list_all(
        db=db,
        status=status,
        employee_id=employee_id,
        start_date=start_date,
        end_date=end_date,
    )
    return LeaveListResponse(
        items=[LeaveListItemOut.model_validate(req) for req in leave_requests],
        total=len(leave_requests),
    )


@router.get("/{leave_request_id}", response_model=LeaveListItemOut)
async def get_leave_endpoint(
    leave_request_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """One leave request (owner or reviewer)"""
    leave_request = leave_service.get_leave_request(db, leave_request_id)
    if leave_request.employee_id != current_user.id and not can_review(current_user.role):
        raise ForbiddenError("You can only view your own leave requests")
    return leave_request
