from __future__ import annotations

import logging

import pytest

from core.history.records import (
    build_generated_record,
    build_scan_record,
    content_fingerprint,
    decode_field_values,
    encode_field_values,
    generated_record_from_row,
    generated_record_to_row,
    resolve_content_type,
    scan_record_from_row,
    scan_record_to_row,
)
from core.orchestrator.pipeline import generate_payload, scan_payload
from core.templates.models import BarcodeFormat, ContentType


def test_fingerprint_depends_on_content_and_format() -> None:
    first = content_fingerprint("hello", BarcodeFormat.QR_CODE)

    assert first == content_fingerprint("hello", BarcodeFormat.QR_CODE)
    assert first != content_fingerprint("hello", BarcodeFormat.AZTEC)
    assert first != content_fingerprint("hello!", BarcodeFormat.QR_CODE)
    assert len(first) == 64


def test_field_values_blob_is_canonical() -> None:
    assert encode_field_values({"b": "2", "a": "é"}) == '{"a":"é","b":"2"}'
    assert decode_field_values('{"a":"é","b":"2"}') == {"a": "é", "b": "2"}


def test_malformed_blob_decodes_to_empty_mapping(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="codec.history")

    assert decode_field_values("{not json") == {}
    assert decode_field_values("[1, 2]") == {}
    assert decode_field_values(None) == {}
    assert any("malformed" in record.message for record in caplog.records)


def test_generated_record_row_roundtrip() -> None:
    result = generate_payload("wifi", {"ssid": "Home", "password": "pw", "auth": "WPA"})
    record = build_generated_record(result)

    row = generated_record_to_row(record)

    assert row["content_type"] == "WIFI"
    assert row["barcode_format"] == "QR_CODE"
    assert row["formatted_content"] == "WIFI:T:WPA;S:Home;P:pw;;"
    assert row["fingerprint"] == record.fingerprint
    assert generated_record_from_row(row) == record


def test_scan_record_row_roundtrip() -> None:
    scan = scan_payload("tel:+1-555-0100", BarcodeFormat.QR_CODE)
    record = build_scan_record(scan)

    row = scan_record_to_row(record)
    restored = scan_record_from_row(row)

    assert restored == record
    assert restored.fields == {"phone": "+15550100"}


def test_unknown_tokens_degrade_gracefully() -> None:
    row = {
        "raw_content": "https://example.com",
        "content_type": "HOLOGRAM",
        "barcode_format": "MAXICODE",
        "fields": "oops",
    }

    record = scan_record_from_row(row)

    assert record.content_type is ContentType.URL
    assert record.barcode_format is BarcodeFormat.UNKNOWN
    assert record.fields == {}


def test_resolve_content_type_accepts_known_tokens() -> None:
    assert resolve_content_type("wifi", "anything") is ContentType.WIFI_CREDENTIAL
    assert resolve_content_type(None, "ada@example.com") is ContentType.EMAIL
