"""Phone number normalisation helpers for the SMS channel."""

from __future__ import annotations

import re
from typing import Final

E164_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\+[1-9]\d{1,14}$")
_NON_DIGITS: Final[re.Pattern[str]] = re.compile(r"\D")
_NANP_REGIONS: Final[frozenset[str]] = frozenset({"US", "CA"})


def is_valid_phone_number(number: str | None) -> bool:
    """Return ``True`` when ``number`` is a well formed E.164 string."""

    if not number:
        return False
    return bool(E164_PATTERN.match(number.strip()))


def format_phone_number(number: str, region: str = "US") -> str:
    """Rewrite ``number`` to E.164 assuming ``region`` when no country code is given.

    Ten digit numbers in the US and Canada receive the ``+1`` prefix and eleven
    digit numbers starting with ``1`` only gain the ``+``. Numbers that were
    already written with a leading ``+`` keep their country code.
    """

    raw = (number or "").strip()
    digits = _NON_DIGITS.sub("", raw)
    if not digits:
        return raw

    if raw.startswith("+"):
        return f"+{digits}"

    if region.upper() in _NANP_REGIONS:
        if len(digits) == 10:
            return f"+1{digits}"
        if len(digits) == 11 and digits.startswith("1"):
            return f"+{digits}"

    return f"+{digits}"


def normalize_phone_number(number: str | None, region: str = "US") -> str | None:
    """Return ``number`` in E.164 form or ``None`` when it cannot be salvaged."""

    if not number:
        return None
    candidate = number.strip()
    if is_valid_phone_number(candidate):
        return candidate
    formatted = format_phone_number(candidate, region)
    return formatted if is_valid_phone_number(formatted) else None


__all__ = [
    "E164_PATTERN",
    "format_phone_number",
    "is_valid_phone_number",
    "normalize_phone_number",
]
