"""Persistence layer for conversations and messages."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import and_, exists, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from portal_notifications.domain.entities import (
    CONVERSATION_STATUS_ACTIVE,
    Conversation,
    Message,
)
from portal_notifications.infrastructure.models import (
    ConversationModel,
    MessageModel,
    NotificationModel,
)
from portal_notifications.utils import ensure_app_naive_datetime, ensure_app_timezone


class ConversationRepository:
    """Read conversations and the messages exchanged in them."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, conversation_id: str) -> Conversation | None:
        model = await self.session.get(ConversationModel, conversation_id)
        return self._conversation_to_entity(model) if model else None

    async def get_message(self, message_id: str) -> Message | None:
        model = await self.session.get(MessageModel, message_id)
        return self._message_to_entity(model) if model else None

    async def list_unread_for_role(
        self,
        *,
        receiver_role: str,
        created_before: datetime,
        conversation_status: str = CONVERSATION_STATUS_ACTIVE,
        limit: int | None = 500,
        unalerted_type: str | None = None,
        alerted_since: datetime | None = None,
    ) -> Sequence[Message]:
        """Return unread messages older than ``created_before`` in live conversations.

        With ``unalerted_type`` set, messages whose receiver already holds a
        notification of that type for the message since ``alerted_since`` are
        left out, so a capped batch always reaches messages still waiting.
        """

        statement = (
            select(MessageModel)
            .join(ConversationModel, ConversationModel.id == MessageModel.conversation_id)
            .where(
                MessageModel.read.is_(False),
                MessageModel.receiver_role == receiver_role,
                MessageModel.created_at <= ensure_app_naive_datetime(created_before),
                ConversationModel.status == conversation_status,
            )
            .order_by(MessageModel.created_at)
        )
        if unalerted_type is not None:
            alerted = [
                NotificationModel.recipient_id == MessageModel.receiver_profile_id,
                NotificationModel.entity_id == MessageModel.id,
                NotificationModel.notification_type == unalerted_type,
            ]
            if alerted_since is not None:
                alerted.append(
                    NotificationModel.created_at >= ensure_app_naive_datetime(alerted_since)
                )
            statement = statement.where(~exists().where(and_(*alerted)))
        if limit is not None:
            statement = statement.limit(limit)
        result = await self.session.scalars(statement)
        return [self._message_to_entity(model) for model in result.unique().all()]

    async def create_conversation(self, conversation: Conversation) -> Conversation:
        model = ConversationModel(
            id=conversation.id or str(uuid.uuid4()),
            athlete_profile_id=conversation.athlete_profile_id,
            team_profile_id=conversation.team_profile_id,
            status=conversation.status,
        )
        if conversation.created_at is not None:
            model.created_at = ensure_app_naive_datetime(conversation.created_at)
        await self._save(model)
        return self._conversation_to_entity(model)

    async def create_message(self, message: Message) -> Message:
        model = MessageModel(
            id=message.id or str(uuid.uuid4()),
            conversation_id=message.conversation_id,
            sender_profile_id=message.sender_profile_id,
            sender_role=message.sender_role,
            receiver_profile_id=message.receiver_profile_id,
            receiver_role=message.receiver_role,
            content=message.content,
            read=message.read,
        )
        if message.created_at is not None:
            model.created_at = ensure_app_naive_datetime(message.created_at)
        await self._save(model)
        return self._message_to_entity(model)

    async def _save(self, model) -> None:
        self.session.add(model)
        try:
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            raise

    @staticmethod
    def _conversation_to_entity(model: ConversationModel) -> Conversation:
        return Conversation(
            id=model.id,
            athlete_profile_id=model.athlete_profile_id,
            team_profile_id=model.team_profile_id,
            status=model.status,
            created_at=ensure_app_timezone(model.created_at),
        )

    @staticmethod
    def _message_to_entity(model: MessageModel) -> Message:
        return Message(
            id=model.id,
            conversation_id=model.conversation_id,
            sender_profile_id=model.sender_profile_id,
            sender_role=model.sender_role,
            receiver_profile_id=model.receiver_profile_id,
            receiver_role=model.receiver_role,
            content=model.content,
            read=bool(model.read),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["ConversationRepository"]
