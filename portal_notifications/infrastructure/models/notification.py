"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import Boolean, Column, DateTime, Index, String, Text

from portal_notifications.infrastructure.database import Base
from portal_notifications.utils import now_in_app_naive_datetime


class NotificationModel(Base):
    """Database representation for inbox notifications."""

    __tablename__ = "notification"
    __table_args__ = (
        Index("ix_notification_recipient_opened", "recipient_id", "opened"),
        Index(
            "ix_notification_suppression",
            "recipient_id",
            "entity_id",
            "notification_type",
            "created_at",
        ),
    )

    id = Column(String(36), primary_key=True)
    recipient_id = Column(String(36), nullable=False, index=True)
    sender_id = Column(String(36), nullable=True)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    notification_type = Column(String(60), nullable=False)
    entity_id = Column(String(36), nullable=True)
    opened = Column(Boolean, nullable=False, default=False)
    created_at = Column(
        DateTime(), nullable=False, default=now_in_app_naive_datetime, index=True
    )


__all__ = ["NotificationModel"]
