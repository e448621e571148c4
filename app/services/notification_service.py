# app/services/notification_service.py
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.data.models.notification import NotificationModel
from app.domain.errors import DeliveryError, NotFound
from app.domain.schemas import NotificationOut, NotificationType
from app.repos.notification_repo import NotificationRepo
from app.services.realtime import NOTIFICATION_NEW
from app.tasks.push import EventDispatcher
from app.utils.logging import get_logger

logger = get_logger(__name__)


def notification_to_dict(notification: NotificationModel) -> Dict[str, Any]:
    return {
        "id": notification.id,
        "title": notification.title,
        "message": notification.message,
        "type": notification.type,
        "created_by": notification.created_by,
        "created_at": notification.created_at,
    }


class NotificationService:
    """
    Broadcast powiadomien + read-tracker per user.
    Bledy bazy wychodza jako DeliveryError, bez automatycznego retry.
    """

    def __init__(self, db: Session, events: EventDispatcher):
        self.repo = NotificationRepo(db)
        self.events = events

    @contextmanager
    def _delivery(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Notification {action} failed: {e}")
            raise DeliveryError(f"Failed to {action}") from e

    def publish(self, title: str, message: str, type: NotificationType, created_by: int | None) -> Dict[str, Any]:
        with self._delivery("publish notification"):
            notification = self.repo.create(
                NotificationModel(
                    title=title.strip(),
                    message=message.strip(),
                    type=NotificationType(type).value,
                    created_by=created_by,
                    created_at=datetime.now(timezone.utc),
                )
            )

        result = notification_to_dict(notification)
        logger.info(f"[NOTIFICATION] {result['id']} published by {created_by}: {result['title']}")

        # push po commicie; nieudany push nie cofa publikacji
        self.events.emit(
            NOTIFICATION_NEW,
            NotificationOut.model_validate(result).model_dump(mode="json", by_alias=True),
        )
        return result

    def list_for_user(self, user_id: int) -> List[Dict[str, Any]]:
        with self._delivery("fetch notifications"):
            rows = self.repo.list_with_read_state(user_id)

        return [
            {
                **notification_to_dict(notification),
                "is_read": bool(is_read),
                "read_at": read_at,
            }
            for notification, is_read, read_at in rows
        ]

    def mark_read(self, user_id: int, notification_id: int) -> Dict[str, Any]:
        with self._delivery("mark notification as read"):
            if not self.repo.get(notification_id):
                raise NotFound("Notification not found")

            self.repo.upsert_read(user_id, [notification_id], datetime.now(timezone.utc))
            self.repo.commit()
            state = self.repo.get_read_state(user_id, notification_id)

        logger.info(f"User {user_id} read notification {notification_id}")

        return {
            "notification_id": state.notification_id,
            "user_id": state.user_id,
            "is_read": state.is_read,
            "read_at": state.read_at,
        }

    def mark_all_read(self, user_id: int) -> int:
        # tylko powiadomienia istniejace w momencie skanu; nowsze moga zostac nieprzeczytane
        with self._delivery("mark all notifications as read"):
            notification_ids = self.repo.list_ids()
            self.repo.upsert_read(user_id, notification_ids, datetime.now(timezone.utc))
            self.repo.commit()

        logger.info(f"User {user_id} marked {len(notification_ids)} notification(s) as read")
        return len(notification_ids)
