"""Tests for phone number formatting and validation."""

from __future__ import annotations

import pytest

from portal_notifications.infrastructure.channels import (
    format_phone_number,
    is_valid_phone_number,
    normalize_phone_number,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("5551234567", "+15551234567"),
        ("(555) 123-4567", "+15551234567"),
        ("15551234567", "+15551234567"),
        ("+44 20 7946 0958", "+442079460958"),
        ("+1 555 123 4567", "+15551234567"),
    ],
)
def test_format_phone_number_produces_valid_e164(raw: str, expected: str) -> None:
    formatted = format_phone_number(raw)

    assert formatted == expected
    assert is_valid_phone_number(formatted)


def test_already_valid_numbers_are_left_unchanged() -> None:
    assert format_phone_number("+15551234567") == "+15551234567"
    assert normalize_phone_number("+15551234567") == "+15551234567"


@pytest.mark.parametrize("value", [None, "", "5551234567", "+0123456", "+1 555 123", "phone"])
def test_is_valid_phone_number_rejects_non_e164(value) -> None:
    assert not is_valid_phone_number(value)


def test_normalize_phone_number_returns_none_when_unsalvageable() -> None:
    assert normalize_phone_number("call me") is None
    assert normalize_phone_number(None) is None
    assert normalize_phone_number("555-123-4567") == "+15551234567"
