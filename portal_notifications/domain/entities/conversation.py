"""Domain entities for athlete/team conversations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

CONVERSATION_STATUS_ACTIVE = "active"
CONVERSATION_STATUS_ARCHIVED = "archived"


@dataclass
class Conversation:
    """Thread opened between a team and an athlete."""

    id: str
    athlete_profile_id: str
    team_profile_id: str
    status: str = CONVERSATION_STATUS_ACTIVE
    created_at: datetime | None = None


@dataclass
class Message:
    """Single message exchanged inside a conversation."""

    id: str
    conversation_id: str
    sender_profile_id: str
    sender_role: str
    receiver_profile_id: str
    receiver_role: str
    content: str
    read: bool = False
    created_at: datetime | None = None


__all__ = [
    "CONVERSATION_STATUS_ACTIVE",
    "CONVERSATION_STATUS_ARCHIVED",
    "Conversation",
    "Message",
]
