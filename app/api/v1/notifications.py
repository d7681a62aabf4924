"""
Notification inbox endpoints
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_current_user
from app.models.employee import Employee
from app.schemas.notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationOut,
    UnreadCountResponse,
)
from app.services import notification_service

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_notifications_endpoint(
    unread_only: bool = Query(False, description="Only unread notifications"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Caller's latest notifications, newest first"""
    items = notification_service.list_notifications(db, current_user.id, unread_only=unread_only)
    return NotificationListResponse(
        items=[NotificationOut.model_validate(n) for n in items],
        total=len(items),
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count_endpoint(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    return UnreadCountResponse(count=notification_service.count_unread(db, current_user.id))


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read_endpoint(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    updated = notification_service.mark_all_as_read(db, current_user.id)
    return MarkAllReadResponse(updated=updated)


@router.post("/{notification_id}/read", response_model=NotificationOut)
async def mark_read_endpoint(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    """Mark one of the caller's notifications as read"""
    return notification_service.mark_as_read(db, current_user.id, notification_id)
