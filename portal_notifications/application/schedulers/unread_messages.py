"""Email, text and in-app alerts for messages an athlete has left unread."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta

from portal_notifications.application.handlers.base import EventHandlerSet, HandlerContext
from portal_notifications.application.handlers.templates import portal_link
from portal_notifications.application.notifications import (
    CHANNEL_EMAIL,
    CHANNEL_NOTIFICATION,
    CHANNEL_SMS,
    HandlerReport,
    settle_all,
)
from portal_notifications.domain.entities import Message, ProfileKind
from portal_notifications.infrastructure.repositories import ConversationRepository
from portal_notifications.utils import ensure_app_timezone, now_in_app_timezone

logger = logging.getLogger(__name__)

UNREAD_ALERT_TYPE = "message.unread_alert"
UNREAD_ALERT_DELAY = timedelta(hours=2)
UNREAD_ALERT_SUPPRESSION = timedelta(hours=24)
PREVIEW_LENGTH = 100
SMS_PREVIEW_LENGTH = 50


@dataclass
class UnreadAlertResult:
    processed: int = 0
    notifications_created: int = 0
    emails_sent: int = 0
    sms_sent: int = 0
    errors: int = 0
    suppressed: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class UnreadMessageAlertJob(EventHandlerSet):
    """Alert athletes about messages from teams that sat unread for too long.

    Only athlete receivers are alerted. A message is alerted at most once per
    suppression window, tracked through the ``message.unread_alert``
    notification left in the athlete's inbox.
    """

    def __init__(
        self,
        context: HandlerContext,
        *,
        alert_after: timedelta = UNREAD_ALERT_DELAY,
        suppression_window: timedelta = UNREAD_ALERT_SUPPRESSION,
        batch_size: int | None = 500,
    ) -> None:
        super().__init__(context)
        self.alert_after = alert_after
        self.suppression_window = suppression_window
        self.batch_size = batch_size

    async def run(self, now: datetime | None = None) -> UnreadAlertResult:
        reference = ensure_app_timezone(now) if now is not None else now_in_app_timezone()
        async with self.context.session_factory() as session:
            messages = await ConversationRepository(session).list_unread_for_role(
                receiver_role=ProfileKind.ATHLETE.value,
                created_before=reference - self.alert_after,
                limit=self.batch_size,
                unalerted_type=UNREAD_ALERT_TYPE,
                alerted_since=reference - self.suppression_window,
            )
        logger.info("Found %s unread messages awaiting an alert after %s", len(messages), self.alert_after)

        result = UnreadAlertResult()
        for message in messages:
            result.processed += 1
            try:
                await self._alert(message, result, now=reference)
            except Exception:
                logger.exception("Unread alert for message %s failed", message.id)
                result.errors += 1
        logger.info("Unread message alerts completed: %s", result.as_dict())
        return result

    async def process_message(self, message_id: str) -> UnreadAlertResult:
        """Alert the receiver of one message right away, ignoring the suppression window."""

        async with self.context.session_factory() as session:
            message = await ConversationRepository(session).get_message(message_id)
        if message is None:
            raise LookupError(f"Message {message_id} not found")

        result = UnreadAlertResult()
        if message.read:
            logger.warning("Message %s has already been read", message_id)
            return result
        if message.receiver_role != ProfileKind.ATHLETE.value:
            logger.warning("Message %s receiver is not an athlete", message_id)
            return result

        result.processed = 1
        await self._alert(message, result, suppress=False)
        return result

    async def _alert(
        self,
        message: Message,
        result: UnreadAlertResult,
        *,
        now: datetime | None = None,
        suppress: bool = True,
    ) -> HandlerReport | None:
        athlete = await self.load_profile(ProfileKind.ATHLETE, message.receiver_profile_id)
        team = await self.load_profile(message.sender_role, message.sender_profile_id)
        if athlete is None or team is None:
            logger.warning("Athlete or team not found for message %s", message.id)
            result.errors += 1
            return None

        if suppress and await self.context.store.was_alerted_within(
            athlete.id, message.id, UNREAD_ALERT_TYPE, self.suppression_window, now=now
        ):
            logger.debug("Message %s already alerted within %s", message.id, self.suppression_window)
            result.suppressed += 1
            return None

        user = await self.load_user(athlete.user_id)
        message_url = portal_link(self.settings, f"messages/{message.conversation_id}")
        report = HandlerReport(UNREAD_ALERT_TYPE).add(
            *await settle_all(
                {
                    CHANNEL_NOTIFICATION: self.notify(
                        athlete.id,
                        team.id,
                        "Unread message",
                        f"You have an unread message from {team.name}",
                        UNREAD_ALERT_TYPE,
                        message.id,
                    ),
                    CHANNEL_EMAIL: self.email(
                        athlete.email or (user.email if user else None),
                        f"New message from {team.name}",
                        html=self._email_html(athlete.name, team.name, message, message_url),
                    ),
                    CHANNEL_SMS: self._text_athlete(athlete, user, team.name, message),
                },
                context=f"unread message {message.id}",
            )
        )
        result.notifications_created += report.sent(CHANNEL_NOTIFICATION)
        result.emails_sent += report.sent(CHANNEL_EMAIL)
        result.sms_sent += report.sent(CHANNEL_SMS)
        if report.failed():
            result.errors += 1
        return report

    def _text_athlete(self, athlete, user, team_name: str, message: Message):
        if user is None:
            logger.warning("Athlete %s has no user account", athlete.id)
            return None
        phone = user.phone_number or getattr(athlete, "contact_number", None)
        if not phone:
            logger.info("No phone number for athlete %s", athlete.id)
            return None
        if not user.account_notification_sms:
            logger.info("Athlete %s has SMS alerts disabled", athlete.id)
            return None
        preview = message.content[:SMS_PREVIEW_LENGTH]
        return self.text(
            phone,
            f'You have a new message from {team_name}: "{preview}..." '
            "Log in to your account to read and respond.",
        )

    @staticmethod
    def _email_html(athlete_name: str, team_name: str, message: Message, url: str) -> str:
        return (
            f"<p>Hi {athlete_name},</p>"
            f"<p>{team_name} sent you a message you haven't read yet:</p>"
            f"<blockquote>{message.content[:PREVIEW_LENGTH]}</blockquote>"
            f'<p><a href="{url}">Read and reply</a></p>'
        )


__all__ = [
    "UNREAD_ALERT_DELAY",
    "UNREAD_ALERT_SUPPRESSION",
    "UNREAD_ALERT_TYPE",
    "UnreadAlertResult",
    "UnreadMessageAlertJob",
]
