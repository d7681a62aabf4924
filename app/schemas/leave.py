"""
Leave schemas
"""
from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator
from pydantic import ConfigDict
from app.utils.datetime_utils import iso_8601_utc
from app.models.leave import LeaveType, LeaveStatus, ReviewDecision
from app.schemas.employee import EmployeeRef

# Longest single request (calendar days, inclusive); maternity leave fits
MAX_LEAVE_SPAN_DAYS = 366


class LeaveApplyRequest(BaseModel):
    """Schema for applying leave"""
    leave_type: LeaveType = Field(..., description="Type of leave")
    start_date: date = Field(..., description="First day of leave (inclusive)")
    end_date: date = Field(..., description="Last day of leave (inclusive)")
    reason: str = Field(..., min_length=10, description="Please provide a detailed reason (min 10 characters)")

    @field_validator("reason")
    @classmethod
    def strip_reason(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 10:
            raise ValueError("Please provide a detailed reason (min 10 characters)")
        return v

    @model_validator(mode="after")
    def check_span(self) -> "LeaveApplyRequest":
        # Inverted ranges are left to the leave engine (INVALID_RANGE)
        if (self.end_date - self.start_date).days + 1 > MAX_LEAVE_SPAN_DAYS:
            raise ValueError(f"A leave request may span at most {MAX_LEAVE_SPAN_DAYS} calendar days")
        return self


class LeaveReviewRequest(BaseModel):
    """Schema for approving or rejecting a leave request"""
    decision: ReviewDecision = Field(..., description="APPROVED or REJECTED")
    comments: Optional[str] = Field(None, description="Optional reviewer comments")


class LeaveOut(BaseModel):
    """Schema for leave request output"""
    id: int
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    days_requested: int
    balance_year: int
    reason: str
    status: LeaveStatus
    reviewed_by_id: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    reviewer_comments: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("reviewed_at", "cancelled_at", "created_at", "updated_at", when_used="always")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)


class LeaveListItemOut(LeaveOut):
    """Leave request with employee and reviewer details (for lists)"""
    employee: Optional[EmployeeRef] = None
    reviewed_by: Optional[EmployeeRef] = None


class LeaveListResponse(BaseModel):
    """Schema for leave list response"""
    items: List[LeaveListItemOut]
    total: int


# --- Policies and balances ---


class LeavePolicyOut(BaseModel):
    leave_type: LeaveType
    annual_quota: int
    carry_forward_allowed: bool
    max_carry_forward: Optional[int] = None
    requires_documentation: bool
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class LeaveBalanceOut(BaseModel):
    """One leave type balance, with its policy for display labels."""
    leave_type: LeaveType
    year: int
    total_allocated: int
    used: int
    remaining: int
    policy: Optional[LeavePolicyOut] = None


class LeaveBalancesResponse(BaseModel):
    """GET /leaves/balances response"""
    year: int
    employee_id: int
    items: List[LeaveBalanceOut]


class ProvisionBalancesRequest(BaseModel):
    year: int = Field(..., ge=2000, le=2100, description="Calendar year to provision")
    employee_ids: Optional[List[int]] = Field(None, description="Limit to these employees (default: all active)")


class ProvisionBalancesResponse(BaseModel):
    year: int
    created: int
