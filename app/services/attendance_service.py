"""
Attendance ledger - one row per (employee, work date)
"""
import logging
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from app.models.attendance import Attendance, AttendanceStatus

logger = logging.getLogger(__name__)


def upsert_status(
    db: Session,
    employee_id: int,
    work_date: date,
    status: AttendanceStatus,
    notes: Optional[str] = None,
) -> Attendance:
    """Set the status of one day, creating the row if needed. Does not commit."""
    record = (
        db.query(Attendance)
        .filter(Attendance.employee_id == employee_id, Attendance.work_date == work_date)
        .with_for_update()
        .first()
    )
    if record is None:
        record = Attendance(employee_id=employee_id, work_date=work_date, status=status, notes=notes)
        db.add(record)
    else:
        record.status = status
        record.notes = notes
    return record


def mark_leave_days(
    db: Session,
    employee_id: int,
    days: Iterable[date],
    notes: str,
) -> List[Attendance]:
    """
    Mark each given day as LEAVE, overwriting any earlier status for that day.
    Part of the approval unit of work; the caller commits.
    """
    records = [
        upsert_status(db, employee_id, day, AttendanceStatus.LEAVE, notes)
        for day in days
    ]
    db.flush()
    logger.debug("Marked %s attendance days as LEAVE for employee_id=%s", len(records), employee_id)
    return records


def list_attendance(
    db: Session,
    employee_id: int,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
) -> List[Attendance]:
    query = db.query(Attendance).filter(Attendance.employee_id == employee_id)
    if from_date:
        query = query.filter(Attendance.work_date >= from_date)
    if to_date:
        query = query.filter(Attendance.work_date <= to_date)
    return query.order_by(Attendance.work_date.asc()).all()
