"""SQLAlchemy models for conversations and their messages."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from portal_notifications.infrastructure.database import Base
from portal_notifications.utils import now_in_app_naive_datetime


class ConversationModel(Base):
    __tablename__ = "conversation"

    id = Column(String(36), primary_key=True)
    athlete_profile_id = Column(String(36), nullable=False, index=True)
    team_profile_id = Column(String(36), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime, nullable=False, default=now_in_app_naive_datetime)


class MessageModel(Base):
    __tablename__ = "message"

    id = Column(String(36), primary_key=True)
    conversation_id = Column(
        String(36), ForeignKey("conversation.id"), nullable=False, index=True
    )
    sender_profile_id = Column(String(36), nullable=False)
    sender_role = Column(String(20), nullable=False)
    receiver_profile_id = Column(String(36), nullable=False, index=True)
    receiver_role = Column(String(20), nullable=False)
    content = Column(Text, nullable=False)
    read = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(
        DateTime, nullable=False, default=now_in_app_naive_datetime, index=True
    )

    conversation = relationship("ConversationModel", lazy="joined")


__all__ = ["ConversationModel", "MessageModel"]
