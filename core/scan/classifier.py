"""Ordered-rule classification of raw decoded barcode text.

Literal micro-format prefixes are checked before the looser URL, email and
phone heuristics, so structured payloads are never mistaken for prose. Prefix
matching ignores case because scanned input in the wild varies.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from core.templates.models import ContentType

_URL_RE = re.compile(r"[A-Za-z0-9]+://\S+")
_EMAIL_RE = re.compile(
    r"[A-Za-z0-9._%+\-]+@[A-Za-z0-9](?:[A-Za-z0-9\-]*[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9\-]*[A-Za-z0-9])?)*\.[A-Za-z]{2,}"
)
_PHONE_RE = re.compile(r"\+?[0-9 ()\-]+")
_GEO_COORDINATES_RE = re.compile(r"\s*-?\d+(?:\.\d+)?\s*,\s*-?\d+(?:\.\d+)?")
_MIN_PHONE_DIGITS = 7
_MAX_PHONE_DIGITS = 15


def _starts_with(text: str, *prefixes: str) -> bool:
    lowered = text.lower()
    return any(lowered.startswith(prefix.lower()) for prefix in prefixes)


def _classify_vcard(text: str) -> ContentType:
    if "end:vcard" in text.lower():
        return ContentType.CONTACT_CARD
    return ContentType.UNKNOWN


def _classify_vevent(text: str) -> ContentType:
    if "end:vevent" in text.lower():
        return ContentType.CALENDAR_EVENT
    return ContentType.UNKNOWN


def _classify_geo(text: str) -> ContentType:
    if _GEO_COORDINATES_RE.match(text[len("geo:") :]):
        return ContentType.GEO_LOCATION
    return ContentType.UNKNOWN


def _is_url(text: str) -> bool:
    return _URL_RE.fullmatch(text) is not None


def _is_email(text: str) -> bool:
    return text.count("@") == 1 and _EMAIL_RE.fullmatch(text) is not None


def _is_phone(text: str) -> bool:
    if _PHONE_RE.fullmatch(text) is None:
        return False
    digits = sum(char.isdigit() for char in text)
    return _MIN_PHONE_DIGITS <= digits <= _MAX_PHONE_DIGITS


Rule = tuple[Callable[[str], bool], Callable[[str], ContentType]]


def _constant(content_type: ContentType) -> Callable[[str], ContentType]:
    return lambda _text: content_type


_RULES: tuple[Rule, ...] = (
    (lambda text: _starts_with(text, "WIFI:"), _constant(ContentType.WIFI_CREDENTIAL)),
    (lambda text: _starts_with(text, "BEGIN:VCARD"), _classify_vcard),
    (lambda text: _starts_with(text, "MECARD:"), _constant(ContentType.CONTACT_CARD)),
    (lambda text: _starts_with(text, "BEGIN:VEVENT"), _classify_vevent),
    (lambda text: _starts_with(text, "geo:"), _classify_geo),
    (lambda text: _starts_with(text, "mailto:"), _constant(ContentType.EMAIL)),
    (lambda text: _starts_with(text, "tel:"), _constant(ContentType.PHONE_NUMBER)),
    (lambda text: _starts_with(text, "sms:", "smsto:"), _constant(ContentType.SMS)),
    (_is_url, _constant(ContentType.URL)),
    (_is_email, _constant(ContentType.EMAIL)),
    (_is_phone, _constant(ContentType.PHONE_NUMBER)),
)


def classify(raw: str) -> ContentType:
    """Return the content type of ``raw``; never raises.

    ``PLAIN_TEXT`` is prose with no recognized structure; ``UNKNOWN`` marks a
    structured prefix whose body is unusable.
    """

    text = raw.strip()
    for matches, resolve in _RULES:
        if matches(text):
            return resolve(text)
    return ContentType.PLAIN_TEXT
