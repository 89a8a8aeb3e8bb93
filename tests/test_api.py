from __future__ import annotations

import logging

import httpx
import pytest

from apps.api.main import app

_HEADER = "X-Codec-Request-Id"


async def _post(path: str, **kwargs) -> httpx.Response:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        return await client.post(path, **kwargs)


async def _get(path: str) -> httpx.Response:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        return await client.get(path)


@pytest.mark.anyio
async def test_meta_lists_types_formats_and_templates() -> None:
    response = await _get("/v1/meta")

    assert response.status_code == 200
    payload = response.json()
    assert "WIFI" in payload["content_types"]
    assert "UNKNOWN" not in payload["barcode_formats"]
    assert payload["template_ids"][0] == "plain_text"
    assert payload["structured_content_types"] == ["WIFI", "CONTACT", "CALENDAR", "GEO"]
    assert "EAN_13" in payload["barcode_formats_by_kind"]["1D"]
    assert "QR_CODE" in payload["barcode_formats_by_kind"]["2D"]
    assert isinstance(payload["version"], str)
    assert response.headers[_HEADER]


@pytest.mark.anyio
async def test_templates_include_field_specs() -> None:
    response = await _get("/v1/templates")

    assert response.status_code == 200
    wifi = next(item for item in response.json()["templates"] if item["id"] == "wifi")
    auth = next(spec for spec in wifi["fields"] if spec["key"] == "auth")
    assert auth["default"] == "WPA"
    assert auth["options"] == ["WPA", "WPA3", "WEP", "nopass"]
    assert wifi["allowed_formats"] == ["QR_CODE"]
    assert wifi["content_type_name"] == "WiFi"


@pytest.mark.anyio
async def test_generate_returns_payload() -> None:
    response = await _post(
        "/v1/generate",
        json={"template_id": "wifi", "values": {"ssid": "Caf;e", "password": "p\\q"}},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["payload"] == r"WIFI:T:WPA;S:Caf\;e;P:p\\q;;"
    assert payload["content_type"] == "WIFI"
    assert payload["barcode_format"] == "QR_CODE"
    assert payload["capacity"]["within_capacity"] is True
    assert response.headers[_HEADER]


@pytest.mark.anyio
async def test_generate_unknown_template_returns_404() -> None:
    response = await _post("/v1/generate", json={"template_id": "nope"})

    assert response.status_code == 404
    payload = response.json()
    assert payload["error_code"] == "UNKNOWN_TEMPLATE"
    assert "plain_text" in payload["detail"]["known_templates"]
    assert payload["detail"]["request_id"] == response.headers[_HEADER]


@pytest.mark.anyio
async def test_generate_validation_failure_returns_every_violation() -> None:
    response = await _post(
        "/v1/generate",
        json={"template_id": "business_card", "values": {"email": "nope"}},
    )

    assert response.status_code == 422
    payload = response.json()
    assert payload["error_code"] == "VALIDATION_FAILED"
    assert payload["detail"]["missing_keys"] == ["name", "organization"]
    assert payload["detail"]["invalid_keys"] == ["email"]


@pytest.mark.anyio
async def test_generate_rejects_unknown_format() -> None:
    response = await _post(
        "/v1/generate",
        json={"template_id": "plain_text", "values": {"text": "hi"}, "barcode_format": "holo"},
    )

    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_ARGUMENT"


@pytest.mark.anyio
async def test_generate_rejects_disallowed_format() -> None:
    response = await _post(
        "/v1/generate",
        json={"template_id": "wifi", "values": {"ssid": "Home"}, "barcode_format": "EAN_13"},
    )

    assert response.status_code == 400
    payload = response.json()
    assert payload["error_code"] == "INVALID_ARGUMENT"
    assert payload["detail"]["allowed_formats"] == ["QR_CODE"]


@pytest.mark.anyio
async def test_generate_rejects_non_json_body() -> None:
    response = await _post(
        "/v1/generate", content=b"not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["message"] == "request body must be JSON"


@pytest.mark.anyio
async def test_generate_rejects_unexpected_body_keys() -> None:
    response = await _post("/v1/generate", json={"template_id": "plain_text", "extra": 1})

    assert response.status_code == 400
    assert response.json()["message"] == "request body does not match schema"


@pytest.mark.anyio
async def test_scan_classifies_and_parses() -> None:
    response = await _post("/v1/scan", json={"raw": "tel:+1-555-0100", "barcode_format": "QR_CODE"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["raw"] == "tel:+1-555-0100"
    assert payload["barcode_format"] == "QR_CODE"
    assert payload["classification"] == {"content_type": "PHONE", "fields": {"phone": "+15550100"}}


@pytest.mark.anyio
async def test_scan_rejects_oversized_text() -> None:
    response = await _post("/v1/scan", json={"raw": "x" * 8193})

    assert response.status_code == 413
    assert response.json()["error_code"] == "PAYLOAD_TOO_LARGE"


@pytest.mark.anyio
async def test_api_logs_request_id_without_field_values(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="codec.api")

    response = await _post(
        "/v1/generate",
        json={"template_id": "wifi", "values": {"ssid": "Home", "password": "s3cret-pw"}},
    )

    assert response.status_code == 200
    request_id = response.headers[_HEADER]
    messages = [record.message for record in caplog.records if record.name == "codec.api"]
    assert any('"event":"start"' in message and request_id in message for message in messages)
    assert any('"event":"done"' in message and request_id in message for message in messages)
    assert all("s3cret-pw" not in message for message in messages)


@pytest.mark.anyio
async def test_api_logs_error_code_and_stage(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="codec.api")

    response = await _post("/v1/generate", json={"template_id": "nope"})

    request_id = response.headers[_HEADER]
    messages = [record.message for record in caplog.records if record.name == "codec.api"]
    assert any(
        '"event":"error"' in message
        and request_id in message
        and '"error_code":"UNKNOWN_TEMPLATE"' in message
        and '"failure_stage":"generate"' in message
        for message in messages
    )
