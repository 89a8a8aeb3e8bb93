from __future__ import annotations

import pytest

from core.format.payload_formatter import render_keys
from core.templates.models import BarcodeFormat, ContentType
from core.templates.registry import (
    get_template,
    list_template_ids,
    list_templates,
    templates_for,
    validate_values,
)
from core.utils.errors import UnknownTemplateError


def test_list_templates_is_stable_and_unique() -> None:
    ids = list_template_ids()

    assert ids[0] == "plain_text"
    assert len(ids) == len(set(ids))
    assert [template.id for template in list_templates()] == ids


def test_get_template_raises_for_unknown_id() -> None:
    with pytest.raises(UnknownTemplateError) as exc_info:
        get_template("nonexistent")

    assert exc_info.value.template_id == "nonexistent"
    assert "wifi" in exc_info.value.known


def test_every_template_matches_its_rendering_rule() -> None:
    for template in list_templates():
        expected = render_keys(template.content_type)
        keys = set(template.field_keys)
        if expected is None:
            assert len(keys) == 1, template.id
            continue
        required, optional = expected
        assert required <= keys <= required | optional, template.id


def test_every_template_default_format_is_allowed() -> None:
    for template in list_templates():
        assert template.default_format in template.allowed_formats
        assert BarcodeFormat.UNKNOWN not in template.allowed_formats


def test_templates_for_contact_card_lists_all_card_styles() -> None:
    ids = [template.id for template in templates_for(ContentType.CONTACT_CARD)]

    assert ids == ["contact", "mecard_contact", "business_card"]


def test_validate_reports_every_missing_required_field() -> None:
    report = validate_values(get_template("business_card"), {})

    assert report.ok is False
    assert report.missing_keys == ["name", "organization"]
    assert report.invalid_keys == []


def test_validate_reports_invalid_values() -> None:
    report = validate_values(
        get_template("contact"),
        {"name": "Ada", "phone": "abc", "email": "not-an-email"},
    )

    assert report.missing_keys == []
    assert report.invalid_keys == ["phone", "email"]


def test_validate_treats_empty_optional_as_omitted() -> None:
    report = validate_values(get_template("contact"), {"name": "Ada", "phone": "", "email": " "})

    assert report.ok is True


def test_validate_rejects_blank_required_value() -> None:
    report = validate_values(get_template("plain_text"), {"text": "   "})

    assert report.invalid_keys == ["text"]


def test_validate_ignores_unknown_keys() -> None:
    report = validate_values(get_template("plain_text"), {"text": "hi", "extra": "x"})

    assert report.ok is True


@pytest.mark.parametrize(
    ("template_id", "values", "invalid"),
    [
        ("geo_location", {"latitude": "91", "longitude": "0"}, ["latitude"]),
        ("geo_location", {"latitude": "0", "longitude": "-180.5"}, ["longitude"]),
        ("geo_location", {"latitude": "nan", "longitude": "abc"}, ["latitude", "longitude"]),
        ("wifi", {"ssid": "x" * 33, "auth": "WPA"}, ["ssid"]),
        ("wifi", {"ssid": "Home", "auth": "WPA5"}, ["auth"]),
        ("wifi", {"ssid": "Home", "auth": "WPA", "hidden": "maybe"}, ["hidden"]),
        ("calendar_event", {"title": "Sync", "start": "tomorrow"}, ["start"]),
        ("calendar_event", {"title": "Sync", "start": "0001-01-01T00:00:00+01:00"}, ["start"]),
        ("calendar_event", {"title": "Sync", "start": "9999-12-31T23:30:00"}, ["start"]),
        (
            "calendar_event",
            {"title": "Sync", "start": "2025-01-01T10:00:00Z", "end": "0001-01-01T00:00:00+01:00"},
            ["end"],
        ),
        ("url", {"url": "javascript:alert(1)"}, ["url"]),
        ("url", {"url": "has space.com"}, ["url"]),
        ("number", {"number": "12a"}, ["number"]),
    ],
)
def test_validate_rejects_out_of_range_values(
    template_id: str, values: dict[str, str], invalid: list[str]
) -> None:
    report = validate_values(get_template(template_id), values)

    assert report.invalid_keys == invalid


def test_wifi_auth_defaults_are_declared() -> None:
    spec = get_template("wifi").get_field("auth")

    assert spec is not None
    assert spec.required is True
    assert spec.default == "WPA"
    assert "nopass" in spec.options


def test_validate_accepts_absent_required_field_with_default() -> None:
    report = validate_values(get_template("wifi"), {"ssid": "Home"})

    assert report.ok is True
