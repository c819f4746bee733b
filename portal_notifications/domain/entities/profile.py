"""Domain entities describing the role profiles attached to a user."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar


class ProfileKind(str, Enum):
    """Kinds of role profile a portal account can own."""

    ATHLETE = "athlete"
    TEAM = "team"
    SCOUT = "scout"
    AGENT = "agent"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: "str | ProfileKind") -> "ProfileKind":
        """Return the kind matching ``value`` regardless of case."""

        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ValueError(f"Unknown profile kind '{value}'") from exc


@dataclass
class Profile:
    """Attributes shared by every role profile."""

    kind: ClassVar[ProfileKind]

    id: str
    user_id: str
    name: str
    email: str | None = None
    created_at: datetime | None = None


@dataclass
class AthleteProfile(Profile):
    """Athlete profile along with the signals used to decide activation."""

    kind: ClassVar[ProfileKind] = ProfileKind.ATHLETE

    contact_number: str | None = None
    profile_image_url: str | None = None
    metrics: list[dict[str, Any]] = field(default_factory=list)
    measurements: dict[str, Any] = field(default_factory=dict)
    resume_count: int = 0
    slug: str | None = None
    is_active: bool = True
    deactivated_at: datetime | None = None
    deactivation_reason: str | None = None
    reactivated_at: datetime | None = None

    def work_signals(self) -> list[str]:
        """Return the names of the profile sections the athlete has filled in."""

        signals: list[str] = []
        if self.profile_image_url:
            signals.append("profile_image")
        if self.metrics:
            signals.append("metrics")
        if any(value not in (None, "", [], {}) for value in self.measurements.values()):
            signals.append("measurements")
        if self.resume_count > 0:
            signals.append("resume")
        return signals

    def has_zero_work(self) -> bool:
        return not self.work_signals()


@dataclass
class TeamProfile(Profile):
    kind: ClassVar[ProfileKind] = ProfileKind.TEAM

    slug: str | None = None
    logo_url: str | None = None


@dataclass
class ScoutProfile(Profile):
    kind: ClassVar[ProfileKind] = ProfileKind.SCOUT


@dataclass
class AgentProfile(Profile):
    kind: ClassVar[ProfileKind] = ProfileKind.AGENT


@dataclass
class AdminProfile(Profile):
    kind: ClassVar[ProfileKind] = ProfileKind.ADMIN

    role: str = "developer"


__all__ = [
    "AdminProfile",
    "AgentProfile",
    "AthleteProfile",
    "Profile",
    "ProfileKind",
    "ScoutProfile",
    "TeamProfile",
]
