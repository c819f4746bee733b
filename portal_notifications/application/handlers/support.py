"""Support ticket notifications."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from portal_notifications.application.notifications import HandlerReport, settle_all

from .base import EventHandlerSet

logger = logging.getLogger(__name__)

SUPPORT_TICKET_CREATED = "support.ticket.created"
SUPPORT_TICKET_UPDATED = "support.ticket.updated"


class SupportHandlers(EventHandlerSet):
    subscriptions = {
        SUPPORT_TICKET_CREATED: "on_ticket_created",
        SUPPORT_TICKET_UPDATED: "on_ticket_updated",
    }

    async def on_ticket_created(self, payload: Mapping[str, Any]) -> HandlerReport:
        self.require(SUPPORT_TICKET_CREATED, payload, "ticket")
        ticket: Mapping[str, Any] = payload["ticket"]
        self.require(SUPPORT_TICKET_CREATED, ticket, "id", "subject")
        report = HandlerReport(SUPPORT_TICKET_CREATED)
        logger.info("Support ticket %s created: %s", ticket["id"], ticket["subject"])

        assignee = await self.load_user(payload.get("assignee_id"))
        if assignee is None:
            report.skipped_reason = "no assignee"
            return report

        report.add(
            *await settle_all(
                {
                    f"notification:{assignee.id}": self.notify(
                        assignee.id,
                        ticket.get("requester_id"),
                        "New support ticket assigned",
                        f"Ticket #{ticket['subject']} has been assigned to you.",
                        "support",
                        str(ticket["id"]),
                    )
                },
                context=f"ticket {ticket['id']}",
            )
        )
        return report

    async def on_ticket_updated(self, payload: Mapping[str, Any]) -> HandlerReport:
        """Notify the requester of agent replies and the assignee of any reply."""

        self.require(SUPPORT_TICKET_UPDATED, payload, "ticket", "author")
        ticket: Mapping[str, Any] = payload["ticket"]
        author: Mapping[str, Any] = payload["author"]
        self.require(SUPPORT_TICKET_UPDATED, ticket, "id", "subject")
        report = HandlerReport(SUPPORT_TICKET_UPDATED)
        author_name = author.get("full_name") or "Support"
        title = f"New message on ticket #{ticket['subject']}"
        message = f"{author_name} has sent a new message on ticket #{ticket['subject']}"

        attempts: dict[str, Any] = {}
        requester_id = ticket.get("requester_id")
        if not payload.get("is_user") and requester_id:
            attempts[f"notification:{requester_id}"] = self.notify(
                str(requester_id), author.get("id"), title, message, "support", str(ticket["id"])
            )

        assignee = await self.load_user(payload.get("assignee_id"))
        if assignee is not None and assignee.id != author.get("id"):
            attempts[f"notification:{assignee.id}"] = self.notify(
                assignee.id, author.get("id"), title, message, "support", str(ticket["id"])
            )

        if not attempts:
            report.skipped_reason = "no recipients"
            return report
        report.add(*await settle_all(attempts, context=f"ticket {ticket['id']}"))
        return report


__all__ = ["SUPPORT_TICKET_CREATED", "SUPPORT_TICKET_UPDATED", "SupportHandlers"]
