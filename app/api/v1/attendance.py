"""
Attendance endpoints (read side of the attendance ledger)
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_current_user, require_reviewer
from app.models.employee import Employee
from app.schemas.attendance import AttendanceListResponse, AttendanceOut
from app.services.attendance_service import list_attendance

router = APIRouter()


def _to_response(records) -> AttendanceListResponse:
    return AttendanceListResponse(
        items=[AttendanceOut.model_validate(r) for r in records],
        total=len(records),
    )


@router.get("/me", response_model=AttendanceListResponse)
async def my_attendance_endpoint(
    from_date: Optional[date] = Query(None, alias="from", description="Start date filter (YYYY-MM-DD)"),
    to_date: Optional[date] = Query(None, alias="to", description="End date filter (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Caller's attendance days, oldest first"""
    return _to_response(list_attendance(db, current_user.id, from_date, to_date))


@router.get("/employee/{employee_id}", response_model=AttendanceListResponse)
async def employee_attendance_endpoint(
    employee_id: int,
    from_date: Optional[date] = Query(None, alias="from", description="Start date filter (YYYY-MM-DD)"),
    to_date: Optional[date] = Query(None, alias="to", description="End date filter (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer),
):
    """Any employee's attendance days (reviewers only)"""
    return _to_response(list_attendance(db, employee_id, from_date, to_date))
