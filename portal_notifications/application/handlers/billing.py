"""Payment receipts: in-app notice, receipt email and SMS, sent side by side."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from portal_notifications.application.notifications import (
    CHANNEL_EMAIL,
    CHANNEL_NOTIFICATION,
    CHANNEL_SMS,
    HandlerReport,
    settle_all,
)
from portal_notifications.domain.entities import User

from .base import EventHandlerSet
from .templates import (
    PAYMENT_FAILED_TEMPLATE,
    PAYMENT_SUCCESS_TEMPLATE,
    base_template_data,
    portal_link,
)

logger = logging.getLogger(__name__)

PAYMENT_SUCCESS = "billing.payment.success"
PAYMENT_FAILED = "billing.payment.failed"


def _amount(receipt: Mapping[str, Any]) -> str:
    return f"{float(receipt.get('amount') or 0):.2f}"


def _charge_date(receipt: Mapping[str, Any]) -> str:
    value = receipt.get("transaction_date")
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    if not isinstance(value, datetime):
        return ""
    return value.strftime("%b %d, %Y %I:%M %p")


def _product_name(receipt: Mapping[str, Any]) -> str:
    plan_name = receipt.get("plan_name")
    if not plan_name:
        return "Payment"
    cycle = "Annual" if receipt.get("billing_cycle") == "yearly" else "Monthly"
    return f"{plan_name} ({cycle})"


def _card_expiry(card: Mapping[str, Any]) -> str:
    month, year = card.get("exp_month"), card.get("exp_year")
    if not month or not year:
        return "N/A"
    return f"{int(month):02d}/{str(year)[-2:]}"


class BillingHandlers(EventHandlerSet):
    subscriptions = {
        PAYMENT_SUCCESS: "on_payment_success",
        PAYMENT_FAILED: "on_payment_failed",
    }

    async def on_payment_success(self, payload: Mapping[str, Any]) -> HandlerReport:
        return await self._handle(PAYMENT_SUCCESS, payload, succeeded=True)

    async def on_payment_failed(self, payload: Mapping[str, Any]) -> HandlerReport:
        return await self._handle(PAYMENT_FAILED, payload, succeeded=False)

    async def _handle(
        self, event_name: str, payload: Mapping[str, Any], *, succeeded: bool
    ) -> HandlerReport:
        self.require(event_name, payload, "receipt")
        receipt: Mapping[str, Any] = payload["receipt"]
        self.require(event_name, receipt, "id", "user_id", "amount")
        report = HandlerReport(event_name)

        user = await self.load_user(receipt["user_id"])
        if user is None:
            logger.warning(
                "User %s not found for %s (receipt %s)",
                receipt["user_id"],
                event_name,
                receipt["id"],
            )
            report.skipped_reason = "user not found"
            return report

        if succeeded:
            title = "Payment Successful"
            message = self._success_message(receipt)
            sms_text = (
                f"Hi {user.first_name}, your payment of ${_amount(receipt)} for "
                f"{receipt.get('plan_name') or 'your plan'} was processed successfully! "
                f"View receipt at: {portal_link(self.settings, 'billing/receipts', id=receipt['id'])}"
            )
        else:
            title = "Payment Failed"
            message = self._failure_message(receipt)
            sms_text = (
                f"Hi {user.first_name}, your payment of ${_amount(receipt)} failed: "
                f"{receipt.get('failure_reason') or 'processing error'}. "
                f"Please update your payment method: {portal_link(self.settings, 'billing/payment-method')}"
            )

        results = await settle_all(
            {
                CHANNEL_NOTIFICATION: self.notify(
                    user.id, None, title, message, "payment", str(receipt["id"])
                ),
                CHANNEL_EMAIL: self._receipt_email(user, receipt, succeeded=succeeded),
                CHANNEL_SMS: self.text_user(user, sms_text),
            },
            context=f"{event_name} receipt {receipt['id']}",
        )
        report.add(*results)
        logger.info(
            "%s handled for receipt %s: notification=%s email=%s sms=%s",
            event_name,
            receipt.get("transaction_id") or receipt["id"],
            report.sent(CHANNEL_NOTIFICATION),
            report.sent(CHANNEL_EMAIL),
            report.sent(CHANNEL_SMS),
        )
        return report

    @staticmethod
    def _success_message(receipt: Mapping[str, Any]) -> str:
        message = f"Your payment of ${_amount(receipt)} was processed successfully."
        if receipt.get("plan_name"):
            message += f" Thank you for your {receipt['plan_name']} subscription!"
        return message

    @staticmethod
    def _failure_message(receipt: Mapping[str, Any]) -> str:
        reason = receipt.get("failure_reason")
        if reason:
            return (
                f"Your payment of ${_amount(receipt)} failed: {reason}. "
                "Please update your payment method."
            )
        return (
            f"Your payment of ${_amount(receipt)} failed. "
            "Please update your payment method to continue your subscription."
        )

    def _receipt_email(self, user: User, receipt: Mapping[str, Any], *, succeeded: bool):
        if succeeded:
            subject = "Payment Confirmation - Free Agent Portal"
            template_id = PAYMENT_SUCCESS_TEMPLATE
        else:
            subject = "Payment Failed - Action Required"
            template_id = PAYMENT_FAILED_TEMPLATE

        card: Mapping[str, Any] = receipt.get("card") or {}
        amount = _amount(receipt)
        line_item_name = (
            f"{receipt['plan_name']} (1 seat)"
            if receipt.get("plan_name")
            else receipt.get("description") or "Payment"
        )
        data: dict[str, Any] = {
            **base_template_data(self.settings, subject),
            "customerName": user.full_name,
            "productName": _product_name(receipt),
            "receiptNumber": receipt.get("transaction_id"),
            "chargeDate": _charge_date(receipt),
            "currency": "$",
            "amount": amount,
            "subtotal": amount,
            "tax": "0.00",
            "discount": "0.00",
            "pmBrand": card.get("brand") or "Card",
            "pmLast4": card.get("last4") or "****",
            "pmExp": _card_expiry(card),
            "authCode": receipt.get("auth_code") or "N/A",
            "lineItems": [{"name": line_item_name, "quantity": 1, "total": amount}],
            "receiptUrl": portal_link(self.settings, "billing/receipts", id=receipt["id"]),
            "updatePaymentUrl": portal_link(self.settings, "billing/payment-method"),
        }
        if not succeeded:
            data["failureCode"] = receipt.get("failure_code") or "UNKNOWN"
            data["failureMessage"] = receipt.get("failure_reason") or (
                "Payment processing error. Please try again or contact support."
            )
        return self.email(user.email, subject, template_id=template_id, data=data)


__all__ = ["BillingHandlers", "PAYMENT_FAILED", "PAYMENT_SUCCESS"]
