"""Domain entity representing a portal account."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class User:
    """Account that owns one or more role profiles."""

    id: str
    email: str
    first_name: str
    last_name: str
    roles: list[str] = field(default_factory=list)
    phone_number: str | None = None
    account_notification_sms: bool = True
    plan_features: list[str] = field(default_factory=list)
    created_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def has_role(self, role: str) -> bool:
        """Return ``True`` when ``role`` is one of the account roles."""

        return role.lower() in {value.lower() for value in self.roles}

    def is_admin(self) -> bool:
        return self.has_role("admin")

    def has_feature(self, feature: str) -> bool:
        """Return ``True`` when the current plan includes ``feature``."""

        return feature in self.plan_features

    def accepts_sms(self) -> bool:
        """Return ``True`` when the account has a phone number and SMS opt-in."""

        return bool(self.phone_number) and self.account_notification_sms


__all__ = ["User"]
