"""SQLAlchemy models for the role profiles owned by a user."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import declared_attr
from sqlalchemy.sql import expression

from portal_notifications.infrastructure.database import Base
from portal_notifications.utils import now_in_app_naive_datetime


class ProfileColumnsMixin:
    """Columns shared by every profile table."""

    id = Column(String(36), primary_key=True)
    name = Column(String(160), nullable=False)
    email = Column(String(120), nullable=True)
    created_at = Column(DateTime, nullable=False, default=now_in_app_naive_datetime)

    @declared_attr
    def user_id(cls):
        return Column(String(36), ForeignKey("user.id"), nullable=False, index=True)


class AthleteProfileModel(ProfileColumnsMixin, Base):
    __tablename__ = "athlete_profile"

    contact_number = Column(String(32), nullable=True)
    profile_image_url = Column(String(500), nullable=True)
    metrics = Column(JSON, nullable=False, default=list)
    measurements = Column(JSON, nullable=False, default=dict)
    resume_count = Column(Integer, nullable=False, default=0)
    slug = Column(String(160), nullable=True)
    is_active = Column(
        Boolean,
        nullable=False,
        default=True,
        server_default=expression.true(),
        index=True,
    )
    deactivated_at = Column(DateTime, nullable=True)
    deactivation_reason = Column(String(200), nullable=True)
    reactivated_at = Column(DateTime, nullable=True)


class TeamProfileModel(ProfileColumnsMixin, Base):
    __tablename__ = "team_profile"

    slug = Column(String(160), nullable=True)
    logo_url = Column(String(500), nullable=True)


class ScoutProfileModel(ProfileColumnsMixin, Base):
    __tablename__ = "scout_profile"


class AgentProfileModel(ProfileColumnsMixin, Base):
    __tablename__ = "agent_profile"


class AdminProfileModel(ProfileColumnsMixin, Base):
    __tablename__ = "admin_profile"

    role = Column(String(40), nullable=False, default="developer", index=True)


__all__ = [
    "AdminProfileModel",
    "AgentProfileModel",
    "AthleteProfileModel",
    "ProfileColumnsMixin",
    "ScoutProfileModel",
    "TeamProfileModel",
]
