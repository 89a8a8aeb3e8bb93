"""Best-effort field extraction from classified payload text.

Parsing is total: unknown segments are skipped, malformed escapes degrade to
literal text and a payload that yields nothing returns an empty mapping.
Extracted keys match the template field keys, so parsed fields can be fed
back into the payload formatter.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from types import MappingProxyType

from core.codec.escaper import EscapeRuleset, find_unescaped, split_unescaped, unescape
from core.format.payload_formatter import normalize_phone
from core.templates.models import ContentType
from core.utils.datetimes import format_iso_utc, parse_datetime

logger = logging.getLogger("codec.parser")

_LINE_SPLIT_RE = re.compile(r"\r?\n")
_FOLDED_LINE_RE = re.compile(r"\r?\n[ \t]")

_WIFI_KEYS = {"T": "auth", "S": "ssid", "P": "password", "H": "hidden"}
_MECARD_KEYS = {
    "N": "name",
    "TEL": "phone",
    "EMAIL": "email",
    "URL": "website",
    "ADR": "address",
    "ORG": "organization",
    "NOTE": "note",
}
_VCARD_KEYS = {
    "FN": "name",
    "ORG": "organization",
    "TITLE": "title",
    "TEL": "phone",
    "EMAIL": "email",
    "URL": "website",
    "ADR": "address",
    "NOTE": "note",
}
# Properties whose value is a ';'-separated list of components.
_VCARD_STRUCTURED = frozenset({"N", "ADR", "ORG"})
_VEVENT_KEYS = {
    "SUMMARY": "title",
    "DTSTART": "start",
    "DTEND": "end",
    "LOCATION": "location",
    "DESCRIPTION": "description",
}
_VEVENT_DATES = frozenset({"DTSTART", "DTEND"})


def parse(content_type: ContentType, raw: str) -> dict[str, str]:
    """Extract structured fields from ``raw`` for ``content_type``; never raises."""

    parser = _PARSERS.get(content_type)
    if parser is None:
        return {}
    try:
        return parser(raw.strip())
    except (ValueError, IndexError) as exc:
        logger.debug("parse degraded to empty mapping: type=%s error=%s", content_type.value, exc)
        return {}


def _strip_prefix(text: str, *prefixes: str) -> str:
    lowered = text.lower()
    for prefix in prefixes:
        if lowered.startswith(prefix.lower()):
            return text[len(prefix) :]
    return text


def _split_property(segment: str) -> tuple[str, str] | None:
    """Split ``NAME[;PARAMS]:value`` into an upper-cased property name and raw value."""

    position = find_unescaped(segment, ":")
    if position <= 0:
        return None
    name = segment[:position].split(";", 1)[0].strip().upper()
    return name, segment[position + 1 :]


def _parse_wifi(text: str) -> dict[str, str]:
    body = _strip_prefix(text, "WIFI:")
    fields: dict[str, str] = {}
    for segment in split_unescaped(body, ";"):
        if not segment:
            continue
        key, separator, value = segment.partition(":")
        target = _WIFI_KEYS.get(key.strip().upper())
        if not separator or target is None or target in fields:
            continue
        fields[target] = unescape(value, EscapeRuleset.WIFI)
    return fields


def _parse_contact(text: str) -> dict[str, str]:
    if text.lower().startswith("mecard:"):
        return _parse_mecard(text)
    return _parse_vcard(text)


def _parse_mecard(text: str) -> dict[str, str]:
    body = _strip_prefix(text, "MECARD:")
    fields: dict[str, str] = {}
    for segment in split_unescaped(body, ";"):
        parsed = _split_property(segment)
        if parsed is None:
            continue
        name, value = parsed
        target = _MECARD_KEYS.get(name)
        if target is None or target in fields:
            continue
        if name == "N":
            fields[target] = _mecard_name(value)
        else:
            fields[target] = unescape(value, EscapeRuleset.CARD)
    return fields


def _mecard_name(value: str) -> str:
    # An unescaped comma separates "Family,Given" in MECARD names.
    parts = [unescape(part, EscapeRuleset.CARD).strip() for part in split_unescaped(value, ",")]
    if len(parts) == 2 and all(parts):
        return f"{parts[1]} {parts[0]}"
    return unescape(value, EscapeRuleset.CARD)


def _iter_record_lines(text: str) -> list[str]:
    unfolded = _FOLDED_LINE_RE.sub("", text)
    return [line for line in _LINE_SPLIT_RE.split(unfolded) if line.strip()]


def _parse_vcard(text: str) -> dict[str, str]:
    fields: dict[str, str] = {}
    structured_name = ""
    for line in _iter_record_lines(text):
        parsed = _split_property(line)
        if parsed is None:
            continue
        name, value = parsed
        if name == "N":
            structured_name = _vcard_name(value)
            continue
        target = _VCARD_KEYS.get(name)
        if target is None or target in fields:
            continue
        if name in _VCARD_STRUCTURED:
            fields[target] = _join_components(value)
        elif name == "TEL":
            fields[target] = normalize_phone(unescape(value, EscapeRuleset.CARD)) or value
        else:
            fields[target] = unescape(value, EscapeRuleset.CARD)
    if "name" not in fields and structured_name:
        fields["name"] = structured_name
    return fields


def _join_components(value: str) -> str:
    parts = [unescape(part, EscapeRuleset.CARD).strip() for part in split_unescaped(value, ";")]
    return ", ".join(part for part in parts if part)


def _vcard_name(value: str) -> str:
    parts = [unescape(part, EscapeRuleset.CARD).strip() for part in split_unescaped(value, ";")]
    family = parts[0] if parts else ""
    given = parts[1] if len(parts) > 1 else ""
    return " ".join(part for part in (given, family) if part)


def _parse_calendar(text: str) -> dict[str, str]:
    fields: dict[str, str] = {}
    for line in _iter_record_lines(text):
        parsed = _split_property(line)
        if parsed is None:
            continue
        name, value = parsed
        target = _VEVENT_KEYS.get(name)
        if target is None or target in fields:
            continue
        if name in _VEVENT_DATES:
            fields[target] = _calendar_date(value)
        else:
            fields[target] = unescape(value, EscapeRuleset.CARD)
    return fields


def _calendar_date(value: str) -> str:
    try:
        return format_iso_utc(parse_datetime(value))
    except ValueError:
        logger.debug("calendar date kept as raw text: %r", value)
        return value.strip()


def _parse_geo(text: str) -> dict[str, str]:
    body = _strip_prefix(text, "geo:")
    body, _, query = body.partition("?")
    coordinates = body.split(";", 1)[0]
    parts = [part.strip() for part in coordinates.split(",")]

    fields: dict[str, str] = {}
    for key, part in zip(("latitude", "longitude", "altitude"), parts):
        if part:
            fields[key] = part
    for name, value in _query_params(query):
        if name == "q" and value and "query" not in fields:
            fields["query"] = value
    return fields


def _query_params(query: str) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = []
    for part in query.split("&"):
        name, separator, value = part.partition("=")
        if separator and name:
            params.append((name.strip().lower(), unescape(value, EscapeRuleset.PERCENT)))
    return params


def _parse_phone(text: str) -> dict[str, str]:
    phone = normalize_phone(text)
    return {"phone": phone} if phone else {}


def _parse_sms(text: str) -> dict[str, str]:
    lowered = text.lower()
    fields: dict[str, str] = {}
    if lowered.startswith("smsto:"):
        number, _, message = text[len("smsto:") :].partition(":")
    else:
        number, _, query = _strip_prefix(text, "sms:").partition("?")
        message = next((value for name, value in _query_params(query) if name == "body"), "")
    phone = normalize_phone(number)
    if phone:
        fields["phone"] = phone
    if message:
        fields["message"] = message
    return fields


def _parse_email(text: str) -> dict[str, str]:
    if not text.lower().startswith("mailto:"):
        return {"email": text}

    address, _, query = text[len("mailto:") :].partition("?")
    fields: dict[str, str] = {}
    if address:
        fields["email"] = unescape(address, EscapeRuleset.PERCENT)
    for name, value in _query_params(query):
        if name in {"subject", "body"} and name not in fields:
            fields[name] = value
    return fields


_PARSERS: Mapping[ContentType, Callable[[str], dict[str, str]]] = MappingProxyType(
    {
        ContentType.WIFI_CREDENTIAL: _parse_wifi,
        ContentType.CONTACT_CARD: _parse_contact,
        ContentType.CALENDAR_EVENT: _parse_calendar,
        ContentType.GEO_LOCATION: _parse_geo,
        ContentType.PHONE_NUMBER: _parse_phone,
        ContentType.SMS: _parse_sms,
        ContentType.EMAIL: _parse_email,
    }
)
