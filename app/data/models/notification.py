from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, UniqueConstraint

from app.data.database import Base


class NotificationModel(Base):
    """Broadcast - jeden rekord dla wszystkich userow."""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    title = Column(String(100), nullable=False)
    message = Column(String(500), nullable=False)
    type = Column(String(20), nullable=False, default="announcement")
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True)


class UserNotificationModel(Base):
    """Stan przeczytania per (notification, user). Brak wiersza = nieprzeczytane."""
    __tablename__ = "user_notifications"

    id = Column(Integer, primary_key=True)
    notification_id = Column(Integer, ForeignKey("notifications.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, nullable=False, index=True)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (UniqueConstraint("notification_id", "user_id", name="u_notification_user"),)
