"""
Notification dispatch and inbox queries

The leave engine hands NotificationEvents to a dispatcher after its own
transaction has committed. Dispatch is best effort: failures are logged and
never undo the leave state change.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)

INBOX_LIMIT = 50


@dataclass(frozen=True)
class NotificationEvent:
    recipient_id: int
    type: NotificationType
    title: str
    message: str
    link: Optional[str] = None


class NotificationDispatcher:
    """Receives structured events; delivery and storage are its own concern."""

    def dispatch(self, events: Sequence[NotificationEvent]) -> None:
        raise NotImplementedError


class DatabaseNotificationDispatcher(NotificationDispatcher):
    """Stores events as in-app notifications in their own transaction."""

    def __init__(self, db: Session):
        self.db = db

    def dispatch(self, events: Sequence[NotificationEvent]) -> None:
        try:
            for event in events:
                self.db.add(
                    Notification(
                        recipient_id=event.recipient_id,
                        type=event.type,
                        title=event.title,
                        message=event.message,
                        link=event.link,
                    )
                )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise


def send_notifications(
    dispatcher: Optional[NotificationDispatcher],
    build_events: Callable[[], Sequence[NotificationEvent]],
) -> bool:
    """
    Build and dispatch events, logging and swallowing any failure.

    Building happens inside the guard too; it may query the database after
    the leave change has been committed.

    Returns:
        False if building or dispatching failed
    """
    if dispatcher is None:
        return True
    events: Sequence[NotificationEvent] = ()
    try:
        events = build_events()
        if events:
            dispatcher.dispatch(events)
    except Exception:
        logger.exception(
            "Notification dispatch failed for %s event(s) (recipients=%s)",
            len(events), [e.recipient_id for e in events],
        )
        return False
    return True


def list_notifications(
    db: Session,
    recipient_id: int,
    unread_only: bool = False,
) -> List[Notification]:
    query = db.query(Notification).filter(Notification.recipient_id == recipient_id)
    if unread_only:
        query = query.filter(Notification.is_read == False)  # noqa: E712
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(INBOX_LIMIT).all()


def count_unread(db: Session, recipient_id: int) -> int:
    return (
        db.query(Notification)
        .filter(Notification.recipient_id == recipient_id, Notification.is_read == False)  # noqa: E712
        .count()
    )


def mark_as_read(db: Session, recipient_id: int, notification_id: int) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.recipient_id == recipient_id)
        .first()
    )
    if notification is None:
        raise NotFoundError(f"Notification with id {notification_id} not found")
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_as_read(db: Session, recipient_id: int) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.recipient_id == recipient_id, Notification.is_read == False)  # noqa: E712
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return updated
