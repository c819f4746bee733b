"""Event handlers that turn domain events into notifications, emails and texts."""

from __future__ import annotations

import logging

from portal_notifications.application.events import EventBus

from .athletes import AthleteHandlers
from .base import EventHandlerSet, HandlerContext
from .billing import BillingHandlers
from .claims import ClaimHandlers
from .conversations import ConversationHandlers
from .registration import RegistrationHandlers
from .scouting import ScoutHandlers
from .search_reports import SearchReportHandlers
from .support import SupportHandlers
from .teams import TeamHandlers
from .users import UserHandlers

logger = logging.getLogger(__name__)

HANDLER_SETS: tuple[type[EventHandlerSet], ...] = (
    RegistrationHandlers,
    UserHandlers,
    ConversationHandlers,
    BillingHandlers,
    ClaimHandlers,
    ScoutHandlers,
    AthleteHandlers,
    SearchReportHandlers,
    SupportHandlers,
    TeamHandlers,
)


def register_notification_handlers(bus: EventBus, context: HandlerContext) -> list[EventHandlerSet]:
    """Subscribe every handler set on ``bus`` and return the instances."""

    handler_sets = [handler_set(context) for handler_set in HANDLER_SETS]
    for handler_set in handler_sets:
        handler_set.register(bus)
    logger.info("Notification handlers registered for %d events", len(bus.event_names()))
    return handler_sets


__all__ = [
    "AthleteHandlers",
    "BillingHandlers",
    "ClaimHandlers",
    "ConversationHandlers",
    "EventHandlerSet",
    "HANDLER_SETS",
    "HandlerContext",
    "RegistrationHandlers",
    "ScoutHandlers",
    "SearchReportHandlers",
    "SupportHandlers",
    "TeamHandlers",
    "UserHandlers",
    "register_notification_handlers",
]
