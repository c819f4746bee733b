"""SendGrid dynamic template ids and portal links used in outgoing messages."""

from __future__ import annotations

from datetime import date
from typing import Any
from urllib.parse import urlencode

from portal_notifications.config import Settings

EMAIL_VERIFY_TEMPLATE = "d-ef91fa3ddf554f33b6efdd205c181f7b"
EMAIL_VERIFIED_TEMPLATE = "d-249bb1a6027346ccbd25344eadbe14d4"
PAYMENT_SUCCESS_TEMPLATE = "d-576fe7ca1f4c4883b6b9aa04d099d4f3"
PAYMENT_FAILED_TEMPLATE = "d-e566f031748145ccbdcd199c100bfdc3"
CLAIM_CREATED_TEMPLATE = "d-afbb4777e2d249a6a7eaaab1e4cb3395"
TEAM_INVITED_TEMPLATE = "d-bd8a348f14db4bf68fa9e5428afd27a3"
PROFILE_INCOMPLETE_TEMPLATE = "d-f807153c7f5142e3963652e9b71feee9"

TEAM_INVITE_EXPIRES_IN_HOURS = 48


def portal_link(settings: Settings, path: str, **query: Any) -> str:
    """Return an absolute portal URL for ``path``."""

    url = f"{settings.portal_base_url.rstrip('/')}/{path.lstrip('/')}"
    params = {key: value for key, value in query.items() if value is not None}
    return f"{url}?{urlencode(params)}" if params else url


def auth_link(settings: Settings, path: str, **query: Any) -> str:
    url = f"{settings.auth_base_url.rstrip('/')}/{path.lstrip('/')}"
    params = {key: value for key, value in query.items() if value is not None}
    return f"{url}?{urlencode(params)}" if params else url


def base_template_data(settings: Settings, subject: str) -> dict[str, Any]:
    """Fields every transactional template expects."""

    return {
        "subject": subject,
        "supportEmail": settings.support_email,
        "logoUrl": settings.logo_url,
        "currentYear": date.today().year,
    }


__all__ = [
    "CLAIM_CREATED_TEMPLATE",
    "EMAIL_VERIFIED_TEMPLATE",
    "EMAIL_VERIFY_TEMPLATE",
    "PAYMENT_FAILED_TEMPLATE",
    "PAYMENT_SUCCESS_TEMPLATE",
    "PROFILE_INCOMPLETE_TEMPLATE",
    "TEAM_INVITED_TEMPLATE",
    "TEAM_INVITE_EXPIRES_IN_HOURS",
    "auth_link",
    "base_template_data",
    "portal_link",
]
