"""
Database models
"""
from app.models.employee import Employee, Role
from app.models.attendance import Attendance, AttendanceStatus
from app.models.leave import (
    LeavePolicy,
    LeaveBalance,
    LeaveRequest,
    LeaveType,
    LeaveStatus,
    ReviewDecision,
    ACTIVE_LEAVE_STATUSES,
    TERMINAL_LEAVE_STATUSES,
)
from app.models.notification import Notification, NotificationType

__all__ = [
    "Employee",
    "Role",
    "Attendance",
    "AttendanceStatus",
    "LeavePolicy",
    "LeaveBalance",
    "LeaveRequest",
    "LeaveType",
    "LeaveStatus",
    "ReviewDecision",
    "ACTIVE_LEAVE_STATUSES",
    "TERMINAL_LEAVE_STATUSES",
    "Notification",
    "NotificationType",
]
