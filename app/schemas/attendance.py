"""
Attendance schemas
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, field_serializer
from app.models.attendance import AttendanceStatus
from app.utils.datetime_utils import iso_8601_utc


class AttendanceOut(BaseModel):
    id: int
    employee_id: int
    work_date: date
    status: AttendanceStatus
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    work_hours: Optional[Decimal] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("check_in", "check_out", when_used="always")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class AttendanceListResponse(BaseModel):
    items: List[AttendanceOut]
    total: int
