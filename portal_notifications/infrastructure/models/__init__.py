"""ORM models used by the notification infrastructure."""

from .conversation import ConversationModel, MessageModel
from .notification import NotificationModel
from .profile import (
    AdminProfileModel,
    AgentProfileModel,
    AthleteProfileModel,
    ScoutProfileModel,
    TeamProfileModel,
)
from .user import UserModel, UserRoleModel

__all__ = [
    "AdminProfileModel",
    "AgentProfileModel",
    "AthleteProfileModel",
    "ConversationModel",
    "MessageModel",
    "NotificationModel",
    "ScoutProfileModel",
    "TeamProfileModel",
    "UserModel",
    "UserRoleModel",
]
