"""Domain entities exposed by the notification core."""

from .conversation import (
    CONVERSATION_STATUS_ACTIVE,
    CONVERSATION_STATUS_ARCHIVED,
    Conversation,
    Message,
)
from .notification import Notification
from .profile import (
    AdminProfile,
    AgentProfile,
    AthleteProfile,
    Profile,
    ProfileKind,
    ScoutProfile,
    TeamProfile,
)
from .user import User

__all__ = [
    "CONVERSATION_STATUS_ACTIVE",
    "CONVERSATION_STATUS_ARCHIVED",
    "AdminProfile",
    "AgentProfile",
    "AthleteProfile",
    "Conversation",
    "Message",
    "Notification",
    "Profile",
    "ProfileKind",
    "ScoutProfile",
    "TeamProfile",
    "User",
]
