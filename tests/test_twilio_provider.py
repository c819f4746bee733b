"""Tests for the Twilio SMS provider using an httpx mock transport."""

from __future__ import annotations

import json
from urllib.parse import parse_qs

import httpx
import pytest

from portal_notifications.domain.errors import ChannelDeliveryError
from portal_notifications.infrastructure.channels import SMSPayload
from portal_notifications.infrastructure.channels.twilio_provider import TwilioSMSProvider

pytestmark = pytest.mark.anyio


def _provider(handler) -> TwilioSMSProvider:
    return TwilioSMSProvider(
        account_sid="AC123",
        auth_token="secret",
        from_phone="+15550001111",
        base_url="https://twilio.test",
        transport=httpx.MockTransport(handler),
    )


async def test_send_posts_form_and_returns_sid() -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["Authorization"]
        captured["form"] = parse_qs(request.content.decode())
        return httpx.Response(201, json={"sid": "SM42", "status": "queued"})

    message_id = await _provider(handler).send(
        SMSPayload(to="+15551234567", message="Your payment was processed")
    )

    assert message_id == "SM42"
    assert captured["url"] == "https://twilio.test/2010-04-01/Accounts/AC123/Messages.json"
    assert captured["auth"].startswith("Basic ")
    assert captured["form"] == {
        "To": ["+15551234567"],
        "From": ["+15550001111"],
        "Body": ["Your payment was processed"],
    }


async def test_content_template_options_are_forwarded() -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["form"] = parse_qs(request.content.decode())
        return httpx.Response(201, json={"sid": "SM43"})

    await _provider(handler).send(
        SMSPayload(
            to="+15551234567",
            message="Hello",
            data={
                "content_sid": "HX99",
                "content_variables": {"message": "Hello"},
                "status_callback": "https://portal.test/sms/status",
            },
        )
    )

    form = captured["form"]
    assert form["ContentSid"] == ["HX99"]
    assert json.loads(form["ContentVariables"][0]) == {"message": "Hello"}
    assert form["StatusCallback"] == ["https://portal.test/sms/status"]


def test_messaging_service_replaces_from_number() -> None:
    provider = _provider(lambda request: httpx.Response(201, json={}))

    form = provider.build_form(
        SMSPayload(to="+15551234567", message="Hi", data={"messaging_service_sid": "MG1"})
    )

    assert "From" not in form
    assert form["MessagingServiceSid"] == "MG1"


async def test_api_error_raises_delivery_error_with_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400, json={"code": 21211, "message": "The 'To' number is not a valid phone number."}
        )

    with pytest.raises(ChannelDeliveryError) as excinfo:
        await _provider(handler).send(SMSPayload(to="+15551234567", message="Hi"))

    assert excinfo.value.status_code == 400
    assert "21211" in str(excinfo.value)


async def test_transport_error_raises_delivery_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ChannelDeliveryError, match="connection refused"):
        await _provider(handler).send(SMSPayload(to="+15551234567", message="Hi"))
