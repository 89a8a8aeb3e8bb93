"""Render a template plus field values into the payload text of a barcode.

The formatter assumes values were already validated by the registry. Absent
optional fields fall back to the field default or are omitted. Output is
deterministic: segment order, literal casing and number formatting are fixed.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from types import MappingProxyType

from core.codec.escaper import EscapeRuleset, escape
from core.templates.models import CardStyle, ContentType, Template
from core.templates.validators import WIFI_AUTH_ALIASES, parse_boolean
from core.utils.datetimes import default_event_end, format_basic_utc, parse_datetime
from core.utils.errors import UnsupportedContentTypeError

URL_SCHEME_PREFIXES = ("http://", "https://", "ftp://", "mailto:", "tel:")
VCARD_VERSION = "3.0"
CRLF = "\r\n"
GEO_PRECISION = 6

# Field order of rendered records (vCard 3.0 per RFC 2426, MECARD per DoCoMo).
VCARD_PROPERTY_ORDER = (
    ("organization", "ORG"),
    ("title", "TITLE"),
    ("phone", "TEL"),
    ("email", "EMAIL"),
    ("website", "URL"),
    ("address", "ADR"),
    ("note", "NOTE"),
)
MECARD_PROPERTY_ORDER = (
    ("phone", "TEL"),
    ("email", "EMAIL"),
    ("website", "URL"),
    ("address", "ADR"),
    ("organization", "ORG"),
    ("note", "NOTE"),
)

_PHONE_STRIP_RE = re.compile(r"[^0-9]")
_TEL_PREFIX = "tel:"

Renderer = Callable[[Template, Mapping[str, str]], str]


def format_payload(template: Template, values: Mapping[str, str]) -> str:
    """Render ``values`` with ``template``'s content-type rule.

    Raises:
        UnsupportedContentTypeError: the content type has no rendering rule.
    """

    try:
        renderer = _RENDERERS[template.content_type]
    except KeyError as exc:
        raise UnsupportedContentTypeError(template.content_type, template_id=template.id) from exc
    return renderer(template, values)


def supported_content_types() -> list[ContentType]:
    return list(_RENDERERS)


def render_keys(content_type: ContentType) -> tuple[frozenset[str], frozenset[str]] | None:
    """Return ``(required, optional)`` field keys read by a rule.

    None means the rule reads exactly the template's single field.
    """

    return _RENDER_KEYS.get(content_type)


def normalize_url(value: str, scheme: str) -> str:
    """Prefix ``scheme`` unless ``value`` already carries an allowed one."""

    text = value.strip()
    if text.lower().startswith(URL_SCHEME_PREFIXES):
        return text
    return scheme + text


def normalize_phone(value: str) -> str:
    """Keep digits and a single leading plus sign."""

    text = value.strip()
    if text.lower().startswith(_TEL_PREFIX):
        text = text[len(_TEL_PREFIX) :].strip()
    digits = _PHONE_STRIP_RE.sub("", text)
    return f"+{digits}" if text.startswith("+") else digits


def _value(template: Template, values: Mapping[str, str], key: str) -> str:
    raw = values.get(key)
    if raw is not None:
        return raw
    spec = template.get_field(key)
    if spec is not None and spec.default is not None:
        return spec.default
    return ""


def _single_value(template: Template, values: Mapping[str, str]) -> str:
    return _value(template, values, template.fields[0].key)


def _render_plain_text(template: Template, values: Mapping[str, str]) -> str:
    return _single_value(template, values)


def _render_url(template: Template, values: Mapping[str, str]) -> str:
    return normalize_url(_single_value(template, values), template.url_scheme)


def _render_phone(template: Template, values: Mapping[str, str]) -> str:
    return _TEL_PREFIX + normalize_phone(_single_value(template, values))


def _render_sms(template: Template, values: Mapping[str, str]) -> str:
    payload = "sms:" + normalize_phone(_value(template, values, "phone"))
    message = _value(template, values, "message")
    if message:
        payload += "?body=" + escape(message, EscapeRuleset.PERCENT)
    return payload


def _render_email(template: Template, values: Mapping[str, str]) -> str:
    payload = "mailto:" + _value(template, values, "email").strip()
    params = [
        f"{name}={escape(text, EscapeRuleset.PERCENT)}"
        for name in ("subject", "body")
        if (text := _value(template, values, name))
    ]
    if params:
        payload += "?" + "&".join(params)
    return payload


def _render_wifi(template: Template, values: Mapping[str, str]) -> str:
    auth = WIFI_AUTH_ALIASES.get(_value(template, values, "auth").strip().upper(), "WPA")
    segments = [f"T:{auth}"]

    ssid = _value(template, values, "ssid")
    if ssid:
        segments.append("S:" + escape(ssid, EscapeRuleset.WIFI))

    password = _value(template, values, "password")
    if password and auth != "nopass":
        segments.append("P:" + escape(password, EscapeRuleset.WIFI))

    if parse_boolean(_value(template, values, "hidden")):
        segments.append("H:true")

    return "WIFI:" + ";".join(segments) + ";;"


def _render_contact(template: Template, values: Mapping[str, str]) -> str:
    if template.card_style is CardStyle.MECARD:
        return _render_mecard(template, values)
    return _render_vcard(template, values)


def _render_vcard(template: Template, values: Mapping[str, str]) -> str:
    name = _value(template, values, "name").strip()
    lines = [
        "BEGIN:VCARD",
        f"VERSION:{VCARD_VERSION}",
        "N:" + _vcard_structured_name(name),
        "FN:" + _card_text(name),
    ]
    for key, prop in VCARD_PROPERTY_ORDER:
        text = _value(template, values, key).strip()
        if not text:
            continue
        if prop == "ADR":
            lines.append("ADR:;;" + _card_text(text) + ";;;;")
        elif prop == "TEL":
            lines.append("TEL:" + normalize_phone(text))
        else:
            lines.append(f"{prop}:{_card_text(text)}")
    lines.append("END:VCARD")
    return CRLF.join(lines) + CRLF


def _vcard_structured_name(name: str) -> str:
    given, _, family = name.rpartition(" ")
    if not given:
        given, family = family, ""
    return f"{_card_text(family)};{_card_text(given)};;;"


def _render_mecard(template: Template, values: Mapping[str, str]) -> str:
    segments = ["N:" + _card_text(_value(template, values, "name").strip())]
    for key, prop in MECARD_PROPERTY_ORDER:
        text = _value(template, values, key).strip()
        if not text:
            continue
        if prop == "TEL":
            text = normalize_phone(text)
        segments.append(f"{prop}:{_card_text(text)}")
    return "MECARD:" + ";".join(segments) + ";;"


def _render_calendar(template: Template, values: Mapping[str, str]) -> str:
    start = parse_datetime(_value(template, values, "start"))
    end_text = _value(template, values, "end")
    end = parse_datetime(end_text) if end_text.strip() else default_event_end(start)

    lines = [
        "BEGIN:VEVENT",
        "SUMMARY:" + _card_text(_value(template, values, "title").strip()),
        "DTSTART:" + format_basic_utc(start),
        "DTEND:" + format_basic_utc(end),
    ]
    for key, prop in (("location", "LOCATION"), ("description", "DESCRIPTION")):
        text = _value(template, values, key).strip()
        if text:
            lines.append(f"{prop}:{_card_text(text)}")
    lines.append("END:VEVENT")
    return CRLF.join(lines) + CRLF


def _render_geo(template: Template, values: Mapping[str, str]) -> str:
    latitude = _fixed(_value(template, values, "latitude"))
    longitude = _fixed(_value(template, values, "longitude"))
    return f"geo:{latitude},{longitude}"


def _fixed(value: str) -> str:
    number = float(value.strip())
    rendered = f"{number:.{GEO_PRECISION}f}"
    # Avoid "-0.000000" so equal coordinates produce equal payloads.
    if float(rendered) == 0.0:
        return f"{0.0:.{GEO_PRECISION}f}"
    return rendered


def _card_text(text: str) -> str:
    return escape(text.replace("\r\n", "\n").replace("\r", "\n"), EscapeRuleset.CARD)


_RENDERERS: Mapping[ContentType, Renderer] = MappingProxyType(
    {
        ContentType.PLAIN_TEXT: _render_plain_text,
        ContentType.URL: _render_url,
        ContentType.PHONE_NUMBER: _render_phone,
        ContentType.SMS: _render_sms,
        ContentType.EMAIL: _render_email,
        ContentType.WIFI_CREDENTIAL: _render_wifi,
        ContentType.CONTACT_CARD: _render_contact,
        ContentType.CALENDAR_EVENT: _render_calendar,
        ContentType.GEO_LOCATION: _render_geo,
    }
)

_RENDER_KEYS: Mapping[ContentType, tuple[frozenset[str], frozenset[str]]] = MappingProxyType(
    {
        ContentType.SMS: (frozenset({"phone"}), frozenset({"message"})),
        ContentType.EMAIL: (frozenset({"email"}), frozenset({"subject", "body"})),
        ContentType.WIFI_CREDENTIAL: (
            frozenset({"ssid", "auth"}),
            frozenset({"password", "hidden"}),
        ),
        ContentType.CONTACT_CARD: (
            frozenset({"name"}),
            frozenset(key for key, _ in VCARD_PROPERTY_ORDER + MECARD_PROPERTY_ORDER),
        ),
        ContentType.CALENDAR_EVENT: (
            frozenset({"title", "start"}),
            frozenset({"end", "location", "description"}),
        ),
        ContentType.GEO_LOCATION: (frozenset({"latitude", "longitude"}), frozenset()),
    }
)
