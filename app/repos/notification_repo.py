# app/repos/notification_repo.py
from datetime import datetime
from typing import List

from sqlalchemy import select, and_, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from app.data.models.notification import NotificationModel, UserNotificationModel


class NotificationRepo:
    def __init__(self, db: Session):
        self.db = db

    def create(self, notification: NotificationModel) -> NotificationModel:
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def get(self, notification_id: int) -> NotificationModel | None:
        return self.db.get(NotificationModel, notification_id)

    def list_ids(self) -> List[int]:
        return list(self.db.execute(select(NotificationModel.id)).scalars().all())

    def list_with_read_state(self, user_id: int):
        # left join - brak wiersza read-state = nieprzeczytane
        stmt = (
            select(
                NotificationModel,
                UserNotificationModel.is_read,
                UserNotificationModel.read_at,
            )
            .outerjoin(
                UserNotificationModel,
                and_(
                    UserNotificationModel.notification_id == NotificationModel.id,
                    UserNotificationModel.user_id == user_id,
                ),
            )
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
        )
        return self.db.execute(stmt).all()

    def get_read_state(self, user_id: int, notification_id: int) -> UserNotificationModel | None:
        return self.db.execute(
            select(UserNotificationModel).where(
                UserNotificationModel.user_id == user_id,
                UserNotificationModel.notification_id == notification_id,
            )
        ).scalar_one_or_none()

    def upsert_read(self, user_id: int, notification_ids: List[int], now: datetime) -> int:
        """
        INSERT ... ON CONFLICT (notification_id, user_id) DO UPDATE
        is_read zawsze true, read_at ustawiane tylko raz (COALESCE).
        """
        if not notification_ids:
            return 0

        dialect = self.db.get_bind().dialect.name
        insert = postgresql.insert if dialect == "postgresql" else sqlite.insert

        stmt = insert(UserNotificationModel).values(
            [
                {
                    "notification_id": notification_id,
                    "user_id": user_id,
                    "is_read": True,
                    "read_at": now,
                }
                for notification_id in notification_ids
            ]
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["notification_id", "user_id"],
            set_={
                "is_read": True,
                "read_at": func.coalesce(UserNotificationModel.read_at, stmt.excluded.read_at),
            },
        )
        result = self.db.execute(stmt)
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
