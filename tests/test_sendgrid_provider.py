"""Tests for the SendGrid email provider."""

from __future__ import annotations

import json
import types

import pytest

from portal_notifications.domain.errors import ChannelConfigurationError, ChannelDeliveryError
from portal_notifications.infrastructure.channels import EmailPayload
from portal_notifications.infrastructure.channels import sendgrid_provider

pytestmark = pytest.mark.anyio


class RecordingClient:
    sent: list = []

    def __init__(self, api_key: str):
        self.api_key = api_key

    def send(self, message):
        RecordingClient.sent.append(message)
        return types.SimpleNamespace(status_code=202, body=None)


@pytest.fixture(autouse=True)
def reset_recording_client():
    RecordingClient.sent = []
    yield


def test_provider_requires_key_and_sender() -> None:
    with pytest.raises(ChannelConfigurationError):
        sendgrid_provider.SendGridEmailProvider("", "sender@example.com")


def test_template_message_carries_dynamic_data() -> None:
    provider = sendgrid_provider.SendGridEmailProvider("SG.fake", "sender@example.com")

    message = provider.build_message(
        EmailPayload(
            to="athlete@example.com",
            subject="Payment Confirmation",
            template_id="d-123",
            data={"amount": "10.00"},
        )
    ).get()

    assert message["template_id"] == "d-123"
    assert message["from"]["email"] == "sender@example.com"
    personalization = message["personalizations"][0]
    assert personalization["to"] == [{"email": "athlete@example.com"}]
    assert personalization["dynamic_template_data"] == {
        "subject": "Payment Confirmation",
        "amount": "10.00",
    }


async def test_send_uses_the_sendgrid_client(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sendgrid_provider, "SendGridAPIClient", RecordingClient)
    provider = sendgrid_provider.SendGridEmailProvider("SG.fake", "sender@example.com")

    await provider.send(EmailPayload(to="user@example.com", subject="Hi", html="<p>Hi</p>"))

    assert len(RecordingClient.sent) == 1


async def test_forbidden_error_surfaces_details(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    class FakeForbiddenError(Exception):
        status_code = 403
        body = json.dumps(
            {"errors": [{"message": "The provided authorization grant is invalid."}]}
        ).encode()

    class FailingClient(RecordingClient):
        def send(self, message):
            raise FakeForbiddenError()

    monkeypatch.setattr(sendgrid_provider, "SendGridAPIClient", FailingClient)
    provider = sendgrid_provider.SendGridEmailProvider("SG.fake", "sender@example.com")

    with caplog.at_level("ERROR"):
        with pytest.raises(ChannelDeliveryError) as excinfo:
            await provider.send(EmailPayload(to="user@example.com", subject="Hi", html="<p>Hi</p>"))

    assert excinfo.value.status_code == 403
    assert "authorization grant is invalid" in str(excinfo.value)
    assert "status 403" in caplog.text


async def test_non_success_response_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    class RejectingClient(RecordingClient):
        def send(self, message):
            return types.SimpleNamespace(
                status_code=400,
                body=b'{"errors": [{"message": "Invalid email", "field": "to"}]}',
            )

    monkeypatch.setattr(sendgrid_provider, "SendGridAPIClient", RejectingClient)
    provider = sendgrid_provider.SendGridEmailProvider("SG.fake", "sender@example.com")

    with pytest.raises(ChannelDeliveryError, match=r"HTTP 400: Invalid email \(field: to\)"):
        await provider.send(EmailPayload(to="user@example.com", subject="Hi", html="<p>Hi</p>"))
