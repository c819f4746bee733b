"""SQLAlchemy models for portal accounts and their roles."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, JSON, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression

from portal_notifications.infrastructure.database import Base
from portal_notifications.utils import now_in_app_naive_datetime


class UserModel(Base):
    """Database representation of a portal account."""

    __tablename__ = "user"

    id = Column(String(36), primary_key=True)
    email = Column(String(120), nullable=False, index=True)
    first_name = Column(String(80), nullable=False, default="")
    last_name = Column(String(80), nullable=False, default="")
    phone_number = Column(String(32), nullable=True)
    account_notification_sms = Column(
        Boolean,
        nullable=False,
        default=True,
        server_default=expression.true(),
    )
    plan_features = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=now_in_app_naive_datetime)

    role_links = relationship(
        "UserRoleModel",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class UserRoleModel(Base):
    """Role granted to an account; an account may hold several."""

    __tablename__ = "user_role"

    user_id = Column(
        String(36),
        ForeignKey("user.id", ondelete="CASCADE"),
        primary_key=True,
    )
    role = Column(String(30), primary_key=True, index=True)

    user = relationship("UserModel", back_populates="role_links")


__all__ = ["UserModel", "UserRoleModel"]
