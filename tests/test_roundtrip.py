from __future__ import annotations

import pytest

from core.format.payload_formatter import format_payload
from core.orchestrator.pipeline import classify_payload
from core.scan.classifier import classify
from core.templates.registry import get_template, list_template_ids

_SAMPLE_VALUES: dict[str, dict[str, str]] = {
    "plain_text": {"text": "hello world"},
    "number": {"number": "42"},
    "custom_data": {"data": "id=7;kind=demo"},
    "phone": {"phone": "+1 555 0100"},
    "email": {"email": "a@b.com", "subject": "Hi there", "body": "a&b=c"},
    "sms": {"phone": "+15550100", "message": "hi & bye"},
    "contact": {
        "name": "Ada Lovelace",
        "phone": "+15550100",
        "email": "ada@example.com",
        "organization": "Acme",
        "website": "https://ada.dev",
        "address": "1 Main St",
    },
    "mecard_contact": {
        "name": "Ada",
        "phone": "5550100",
        "email": "ada@example.com",
        "note": "a;b,c",
    },
    "url": {"url": "example.com/path"},
    "secure_url": {"url": "example.com"},
    "wifi": {"ssid": "Caf;e", "password": 'p\\q:"x"', "auth": "WPA", "hidden": "true"},
    "geo_location": {"latitude": "37.774900", "longitude": "-122.419400"},
    "calendar_event": {
        "title": "Sync",
        "start": "2025-03-01T09:30:00Z",
        "end": "2025-03-01T10:00:00Z",
        "location": "Room 1, HQ",
    },
    "business_card": {"name": "Ada Lovelace", "organization": "Acme", "title": "CTO"},
}

# Template ids whose parsed fields reproduce the input values exactly.
_LOSSLESS = (
    "email",
    "sms",
    "contact",
    "mecard_contact",
    "wifi",
    "geo_location",
    "calendar_event",
    "business_card",
)


def test_samples_cover_every_template() -> None:
    assert set(_SAMPLE_VALUES) == set(list_template_ids())


@pytest.mark.parametrize("template_id", sorted(_SAMPLE_VALUES))
def test_formatted_payload_classifies_as_template_type(template_id: str) -> None:
    template = get_template(template_id)

    payload = format_payload(template, _SAMPLE_VALUES[template_id])

    assert classify(payload) is template.content_type


@pytest.mark.parametrize("template_id", _LOSSLESS)
def test_parsed_fields_reproduce_values(template_id: str) -> None:
    values = _SAMPLE_VALUES[template_id]

    result = classify_payload(format_payload(get_template(template_id), values))

    assert result.fields == values


def test_phone_roundtrip_normalizes_number() -> None:
    result = classify_payload(format_payload(get_template("phone"), {"phone": "+1 555 0100"}))

    assert result.fields == {"phone": "+15550100"}
