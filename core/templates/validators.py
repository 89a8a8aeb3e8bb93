"""Field validator predicates used by template specs.

Every predicate takes the raw user-entered string and returns a bool. They
never raise, so a single bad value cannot abort validation of the others.
"""

from __future__ import annotations

import math
import re

from core.utils.datetimes import default_event_end, parse_datetime

_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+\-]+@[A-Za-z0-9\-]+(?:\.[A-Za-z0-9\-]+)*\.[A-Za-z]{2,}")
_PHONE_SEPARATORS_RE = re.compile(r"[\s\-().]")
_PHONE_RE = re.compile(r"\+?[0-9]{7,15}")
_WHITESPACE_RE = re.compile(r"\s")
_SUSPICIOUS_URL_RE = re.compile(r"^\s*(?:javascript|data|vbscript):|<script", re.IGNORECASE)
_MAX_EMAIL_LENGTH = 254
_MAX_URL_LENGTH = 2048
_MAX_SSID_BYTES = 32

WIFI_AUTH_ALIASES = {
    "WPA": "WPA",
    "WPA2": "WPA",
    "WPA/WPA2": "WPA",
    "WPA3": "SAE",
    "SAE": "SAE",
    "WEP": "WEP",
    "NOPASS": "nopass",
    "NONE": "nopass",
}

_TRUE_TOKENS = frozenset({"true", "yes", "1", "on"})
_FALSE_TOKENS = frozenset({"false", "no", "0", "off"})


def is_non_blank(value: str) -> bool:
    return bool(value.strip())


def is_email(value: str) -> bool:
    text = value.strip()
    return len(text) <= _MAX_EMAIL_LENGTH and _EMAIL_RE.fullmatch(text) is not None


def is_phone(value: str) -> bool:
    cleaned = _PHONE_SEPARATORS_RE.sub("", value)
    return _PHONE_RE.fullmatch(cleaned) is not None


def is_url(value: str) -> bool:
    """Accept web addresses with or without scheme; reject script-bearing values."""

    text = value.strip()
    if not text or len(text) > _MAX_URL_LENGTH:
        return False
    if _WHITESPACE_RE.search(text):
        return False
    if _SUSPICIOUS_URL_RE.search(text):
        return False
    return "." in text or "://" in text or ":" in text


def is_digits(value: str) -> bool:
    text = value.strip()
    return text.isascii() and text.isdigit()


def is_latitude(value: str) -> bool:
    return _in_range(value, -90.0, 90.0)


def is_longitude(value: str) -> bool:
    return _in_range(value, -180.0, 180.0)


def is_datetime(value: str) -> bool:
    try:
        parse_datetime(value)
    except ValueError:
        return False
    return True


def is_event_start(value: str) -> bool:
    """Accept a start time whose default end time is still representable."""

    try:
        default_event_end(parse_datetime(value))
    except ValueError:
        return False
    return True


def is_boolean(value: str) -> bool:
    token = value.strip().lower()
    return token in _TRUE_TOKENS or token in _FALSE_TOKENS


def parse_boolean(value: str | None) -> bool:
    """Interpret a flag field; anything not explicitly true is false."""

    if value is None:
        return False
    return value.strip().lower() in _TRUE_TOKENS


def is_wifi_auth(value: str) -> bool:
    return value.strip().upper() in WIFI_AUTH_ALIASES


def is_wifi_ssid(value: str) -> bool:
    return bool(value) and len(value.encode("utf-8")) <= _MAX_SSID_BYTES


def max_length(limit: int):
    def _check(value: str) -> bool:
        return len(value) <= limit

    return _check


def _in_range(value: str, lower: float, upper: float) -> bool:
    try:
        number = float(value.strip())
    except ValueError:
        return False
    return math.isfinite(number) and lower <= number <= upper
