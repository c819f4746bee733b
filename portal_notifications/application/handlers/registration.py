"""Account lifecycle notifications: registration, email verification and password reset."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from portal_notifications.application.notifications import (
    CHANNEL_EMAIL,
    HandlerReport,
    settle_all,
)

from .base import EventHandlerSet
from .templates import (
    EMAIL_VERIFIED_TEMPLATE,
    EMAIL_VERIFY_TEMPLATE,
    auth_link,
    base_template_data,
)

logger = logging.getLogger(__name__)

USER_REGISTERED = "user.registered"
EMAIL_VERIFY = "email.verify"
EMAIL_VERIFIED = "email.verified"
PASSWORD_RESET_REQUESTED = "password.reset.requested"
PASSWORD_RESET_COMPLETED = "password.reset.completed"


class RegistrationHandlers(EventHandlerSet):
    subscriptions = {
        USER_REGISTERED: "on_user_registered",
        EMAIL_VERIFY: "on_email_verify",
        EMAIL_VERIFIED: "on_email_verified",
        PASSWORD_RESET_REQUESTED: "on_password_reset_requested",
        PASSWORD_RESET_COMPLETED: "on_password_reset_completed",
    }

    async def on_user_registered(self, payload: Mapping[str, Any]) -> HandlerReport:
        """Welcome the new account and tell every administrator about it."""

        self.require(USER_REGISTERED, payload, "user_id")
        report = HandlerReport(USER_REGISTERED)
        user = await self.load_user(payload["user_id"])
        if user is None:
            logger.warning("Registered user %s not found", payload["user_id"])
            report.skipped_reason = "user not found"
            return report

        admins = await self.load_users_with_role("admin")
        attempts: dict[str, Any] = {
            CHANNEL_EMAIL: self.email(
                user.email,
                "Welcome to FreeAgent Portal",
                html=(
                    f"<p>Hi {user.full_name},</p>"
                    "<p>Thank you for registering on FreeAgent Portal. "
                    "We are excited to have you on board!</p>"
                    "<p>Best regards,<br/>The FreeAgent Portal Team</p>"
                ),
            )
        }
        for admin in admins:
            attempts[f"notification:{admin.id}"] = self.notify(
                admin.id,
                user.id,
                "Registration Event",
                f"New user registered: {user.email}",
                "user_registered",
                user.id,
            )
        report.add(*await settle_all(attempts, context=f"user {user.id} registered"))
        return report

    async def on_email_verify(self, payload: Mapping[str, Any]) -> HandlerReport:
        self.require(EMAIL_VERIFY, payload, "user_id", "token")
        report = HandlerReport(EMAIL_VERIFY)
        user = await self.load_user(payload["user_id"])
        if user is None:
            report.skipped_reason = "user not found"
            return report

        subject = "Welcome to FreeAgent Portal - Please Verify Your Email"
        data = {
            **base_template_data(self.settings, subject),
            "firstName": user.first_name,
            "token": payload["token"],
            "verifyUrl": auth_link(self.settings, "verify-email", token=payload["token"]),
        }
        report.add(
            *await settle_all(
                {
                    CHANNEL_EMAIL: self.email(
                        user.email, subject, template_id=EMAIL_VERIFY_TEMPLATE, data=data
                    )
                },
                context=f"verify email for {user.id}",
            )
        )
        return report

    async def on_email_verified(self, payload: Mapping[str, Any]) -> HandlerReport:
        self.require(EMAIL_VERIFIED, payload, "user_id")
        report = HandlerReport(EMAIL_VERIFIED)
        user = await self.load_user(payload["user_id"])
        if user is None:
            report.skipped_reason = "user not found"
            return report

        subject = "Your Email Has Been Verified"
        data = {**base_template_data(self.settings, subject), "firstName": user.first_name}
        report.add(
            *await settle_all(
                {
                    CHANNEL_EMAIL: self.email(
                        user.email, subject, template_id=EMAIL_VERIFIED_TEMPLATE, data=data
                    )
                },
                context=f"email verified for {user.id}",
            )
        )
        return report

    async def on_password_reset_requested(self, payload: Mapping[str, Any]) -> HandlerReport:
        self.require(PASSWORD_RESET_REQUESTED, payload, "user_id", "token")
        report = HandlerReport(PASSWORD_RESET_REQUESTED)
        user = await self.load_user(payload["user_id"])
        if user is None:
            report.skipped_reason = "user not found"
            return report

        reset_url = auth_link(self.settings, "reset-password", token=payload["token"])
        html = (
            f"<p>Hi {user.first_name},</p>"
            "<p>We received a request to reset the password of your FreeAgent Portal account.</p>"
            f'<p><a href="{reset_url}">Reset your password</a></p>'
            "<p>If you did not request this, you can safely ignore this email.</p>"
        )
        report.add(
            *await settle_all(
                {CHANNEL_EMAIL: self.email(user.email, "Password Reset Request", html=html)},
                context=f"password reset for {user.id}",
            )
        )
        return report

    async def on_password_reset_completed(self, payload: Mapping[str, Any]) -> HandlerReport:
        self.require(PASSWORD_RESET_COMPLETED, payload, "user_id")
        report = HandlerReport(PASSWORD_RESET_COMPLETED)
        user = await self.load_user(payload["user_id"])
        if user is None:
            report.skipped_reason = "user not found"
            return report

        html = (
            f"<p>Hi {user.first_name},</p>"
            "<p>Your password has been reset successfully.</p>"
            f"<p>If this was not you, contact {self.settings.support_email} right away.</p>"
        )
        report.add(
            *await settle_all(
                {CHANNEL_EMAIL: self.email(user.email, "Your Password Has Been Reset", html=html)},
                context=f"password reset completed for {user.id}",
            )
        )
        return report


__all__ = [
    "EMAIL_VERIFIED",
    "EMAIL_VERIFY",
    "PASSWORD_RESET_COMPLETED",
    "PASSWORD_RESET_REQUESTED",
    "RegistrationHandlers",
    "USER_REGISTERED",
]
