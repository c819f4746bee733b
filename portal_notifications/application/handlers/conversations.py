"""Messaging notifications between teams and athletes."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from portal_notifications.application.notifications import (
    CHANNEL_EMAIL,
    CHANNEL_NOTIFICATION,
    CHANNEL_SMS,
    HandlerReport,
    settle_all,
)
from portal_notifications.domain.entities import Conversation, Message, ProfileKind
from portal_notifications.infrastructure.repositories import ConversationRepository

from .base import EventHandlerSet
from .templates import portal_link

logger = logging.getLogger(__name__)

CONVERSATION_STARTED = "conversation.started"
CONVERSATION_MESSAGE = "conversation.message"


class ConversationHandlers(EventHandlerSet):
    subscriptions = {
        CONVERSATION_MESSAGE: "on_message_sent",
        CONVERSATION_STARTED: "on_conversation_started",
    }

    async def _load_conversation(self, conversation_id: str) -> Conversation | None:
        async with self.context.session_factory() as session:
            return await ConversationRepository(session).get(conversation_id)

    async def _load_message(self, message_id: str) -> Message | None:
        async with self.context.session_factory() as session:
            return await ConversationRepository(session).get_message(message_id)

    async def on_message_sent(self, payload: Mapping[str, Any]) -> HandlerReport:
        """Drop a "new message" notice in the receiving party's inbox."""

        self.require(CONVERSATION_MESSAGE, payload, "message_id")
        report = HandlerReport(CONVERSATION_MESSAGE)
        message = await self._load_message(str(payload["message_id"]))
        if message is None:
            logger.warning("Message %s not found", payload["message_id"])
            report.skipped_reason = "message not found"
            return report

        receiver = await self.load_profile(message.receiver_role, message.receiver_profile_id)
        sender = await self.load_profile(message.sender_role, message.sender_profile_id)
        if receiver is None:
            logger.warning(
                "Receiver %s %s of message %s not found",
                message.receiver_role,
                message.receiver_profile_id,
                message.id,
            )
            report.skipped_reason = "receiver not found"
            return report

        report.add(
            *await settle_all(
                {
                    CHANNEL_NOTIFICATION: self.notify(
                        receiver.user_id,
                        sender.user_id if sender else None,
                        "New message",
                        "You have a new message",
                        "message",
                        message.id,
                    )
                },
                context=f"message {message.id}",
            )
        )
        return report

    async def on_conversation_started(self, payload: Mapping[str, Any]) -> HandlerReport:
        """Alert the athlete by email and SMS; the team that opened the thread is not alerted."""

        self.require(CONVERSATION_STARTED, payload, "conversation_id")
        report = HandlerReport(CONVERSATION_STARTED)
        conversation = await self._load_conversation(str(payload["conversation_id"]))
        if conversation is None:
            report.skipped_reason = "conversation not found"
            return report

        athlete = await self.load_profile(ProfileKind.ATHLETE, conversation.athlete_profile_id)
        team = await self.load_profile(ProfileKind.TEAM, conversation.team_profile_id)
        if athlete is None:
            logger.warning(
                "Athlete %s of conversation %s not found",
                conversation.athlete_profile_id,
                conversation.id,
            )
            report.skipped_reason = "athlete not found"
            return report

        user = await self.load_user(athlete.user_id)
        team_name = team.name if team else "A team"
        inbox_url = portal_link(self.settings, "messages", conversation=conversation.id)
        html = (
            f"<p>Hi {athlete.name},</p>"
            f"<p>{team_name} started a conversation with you on FreeAgent Portal.</p>"
            f'<p><a href="{inbox_url}">Read and reply</a></p>'
        )
        report.add(
            *await settle_all(
                {
                    CHANNEL_EMAIL: self.email(
                        athlete.email or (user.email if user else None),
                        f"{team_name} wants to talk with you",
                        html=html,
                    ),
                    CHANNEL_SMS: self.text_user(
                        user,
                        f"{team_name} started a conversation with you on FreeAgent Portal: {inbox_url}",
                    ),
                },
                context=f"conversation {conversation.id} started",
            )
        )
        return report


__all__ = ["CONVERSATION_MESSAGE", "CONVERSATION_STARTED", "ConversationHandlers"]
