"""
Notification schemas
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, field_serializer
from app.models.notification import NotificationType
from app.utils.datetime_utils import iso_8601_utc


class NotificationOut(BaseModel):
    id: int
    recipient_id: int
    type: NotificationType
    title: str
    message: str
    link: Optional[str] = None
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    def _ser_created_at(self, dt: datetime) -> Optional[str]:
        return iso_8601_utc(dt)


class NotificationListResponse(BaseModel):
    items: List[NotificationOut]
    total: int


class UnreadCountResponse(BaseModel):
    count: int


class MarkAllReadResponse(BaseModel):
    success: bool = True
    updated: int
