"""Repository implementations for the notification core."""

from .conversation_repository import ConversationRepository
from .notification_repository import NotificationRepository
from .profile_registry import ProfileRegistry, RepositoryFactory, default_profile_registry
from .profile_repository import (
    AdminProfileRepository,
    AgentProfileRepository,
    AthleteProfileRepository,
    ProfileRepository,
    ScoutProfileRepository,
    TeamProfileRepository,
)
from .user_repository import UserRepository

__all__ = [
    "AdminProfileRepository",
    "AgentProfileRepository",
    "AthleteProfileRepository",
    "ConversationRepository",
    "NotificationRepository",
    "ProfileRegistry",
    "ProfileRepository",
    "RepositoryFactory",
    "ScoutProfileRepository",
    "TeamProfileRepository",
    "UserRepository",
    "default_profile_registry",
]
