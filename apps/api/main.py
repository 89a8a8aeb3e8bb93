"""FastAPI wrapper for payload generation and scan classification."""

from __future__ import annotations

import importlib.metadata
import json
import logging
import os
import time
import uuid
from functools import lru_cache
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from apps.cli.io import generation_payload
from core.format.models import CodecPolicy
from core.format.policy_loader import load_policy
from core.orchestrator.pipeline import generate_payload, scan_payload
from core.templates.models import BarcodeFormat, ContentType, SymbolKind, Template
from core.templates.registry import list_templates
from core.utils.errors import (
    BarcodeFormatError,
    CapacityExceededError,
    FieldValidationError,
    UnknownTemplateError,
)

app = FastAPI(title="barcode-payload-codec API", version="0.1.0")
logger = logging.getLogger("codec.api")

_REQUEST_ID_HEADER = "X-Codec-Request-Id"
_MAX_PAYLOAD_CHARS = 8192


class GenerateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    template_id: str
    values: dict[str, str] = Field(default_factory=dict)
    barcode_format: str | None = None


class ScanRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    raw: str
    barcode_format: str | None = None


class ApiRequestError(Exception):
    def __init__(
        self,
        *,
        status_code: int,
        error_code: str,
        message: str,
        detail: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.detail = detail or {}


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Ensure every response has a request id header."""

    request_id = uuid.uuid4().hex
    request.state.request_id = request_id
    try:
        response = await call_next(request)
    except Exception:  # noqa: BLE001
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code="INTERNAL_ERROR",
            status_code=500,
            failure_stage="middleware",
        )
        response = _error_response(
            status_code=500,
            error_code="INTERNAL_ERROR",
            message="internal server error",
            request_id=request_id,
            detail={"path": request.url.path},
        )
    response.headers.setdefault(_REQUEST_ID_HEADER, request_id)
    return response


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    """Liveness endpoint."""

    return {"status": "ok"}


@app.get("/v1/meta")
async def meta_v1(request: Request) -> JSONResponse:
    """Metadata endpoint for clients building generator forms."""

    request_id = _request_id_from_request(request)
    payload = {
        "content_types": [item.value for item in ContentType],
        "barcode_formats": [
            item.value for item in BarcodeFormat if item is not BarcodeFormat.UNKNOWN
        ],
        "structured_content_types": [item.value for item in ContentType if item.is_structured],
        "barcode_formats_by_kind": {
            kind.value: [item.value for item in BarcodeFormat.by_kind(kind)] for kind in SymbolKind
        },
        "template_ids": [template.id for template in list_templates()],
        "version": _package_version(),
    }
    return JSONResponse(status_code=200, headers={_REQUEST_ID_HEADER: request_id}, content=payload)


@app.get("/v1/templates")
async def templates_v1(request: Request) -> JSONResponse:
    """List templates with their field specs."""

    request_id = _request_id_from_request(request)
    return JSONResponse(
        status_code=200,
        headers={_REQUEST_ID_HEADER: request_id},
        content={"templates": [_template_summary(template) for template in list_templates()]},
    )


@app.post("/v1/generate", response_model=None)
async def generate_v1(request: Request) -> JSONResponse:
    """Validate and format field values into a payload."""

    request_id = _request_id_from_request(request)
    started = time.perf_counter()
    failure_stage = "parse_request"
    try:
        body = await _read_body(request, GenerateRequest)
        _log_event(
            logging.INFO, "start", request_id, route="generate", template_id=body.template_id
        )

        failure_stage = "resolve_format"
        requested_format = _resolve_format(body.barcode_format)

        failure_stage = "generate"
        result = generate_payload(
            body.template_id,
            body.values,
            policy=_api_policy(),
            barcode_format=requested_format,
        )
    except ApiRequestError as exc:
        return _api_error(exc, request_id, failure_stage)
    except UnknownTemplateError as exc:
        return _api_error(
            ApiRequestError(
                status_code=404,
                error_code="UNKNOWN_TEMPLATE",
                message=str(exc),
                detail={"template_id": exc.template_id, "known_templates": exc.known},
            ),
            request_id,
            failure_stage,
        )
    except FieldValidationError as exc:
        return _api_error(
            ApiRequestError(
                status_code=422,
                error_code="VALIDATION_FAILED",
                message=str(exc),
                detail={"missing_keys": exc.missing_keys, "invalid_keys": exc.invalid_keys},
            ),
            request_id,
            failure_stage,
        )
    except BarcodeFormatError as exc:
        return _api_error(
            ApiRequestError(
                status_code=400,
                error_code="INVALID_ARGUMENT",
                message=str(exc),
                detail={"allowed_formats": exc.allowed},
            ),
            request_id,
            failure_stage,
        )
    except CapacityExceededError as exc:
        return _api_error(
            ApiRequestError(
                status_code=422,
                error_code="CAPACITY_EXCEEDED",
                message=str(exc),
                detail={"capacity": exc.report.model_dump(mode="json")},
            ),
            request_id,
            failure_stage,
        )

    _log_event(
        logging.INFO,
        "done",
        request_id,
        route="generate",
        template_id=result.template_id,
        content_type=result.content_type.value,
        payload_length=len(result.payload),
        total_ms=_elapsed_ms(started),
    )
    return JSONResponse(
        status_code=200,
        headers={_REQUEST_ID_HEADER: request_id},
        content=generation_payload(result),
    )


@app.post("/v1/scan", response_model=None)
async def scan_v1(request: Request) -> JSONResponse:
    """Classify decoded barcode text and extract its fields."""

    request_id = _request_id_from_request(request)
    started = time.perf_counter()
    try:
        body = await _read_body(request, ScanRequest)
        if len(body.raw) > _MAX_PAYLOAD_CHARS:
            raise ApiRequestError(
                status_code=413,
                error_code="PAYLOAD_TOO_LARGE",
                message="scanned text exceeds limit",
                detail={"max_chars": _MAX_PAYLOAD_CHARS},
            )
    except ApiRequestError as exc:
        return _api_error(exc, request_id, "parse_request")

    _log_event(logging.INFO, "start", request_id, route="scan", raw_length=len(body.raw))
    result = scan_payload(body.raw, BarcodeFormat.from_token(body.barcode_format))
    _log_event(
        logging.INFO,
        "done",
        request_id,
        route="scan",
        content_type=result.classification.content_type.value,
        field_count=len(result.classification.fields),
        total_ms=_elapsed_ms(started),
    )
    return JSONResponse(
        status_code=200,
        headers={_REQUEST_ID_HEADER: request_id},
        content=result.model_dump(mode="json"),
    )


async def _read_body(request: Request, model: type[BaseModel]) -> Any:
    try:
        raw = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ApiRequestError(
            status_code=400,
            error_code="INVALID_ARGUMENT",
            message="request body must be JSON",
        ) from exc
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise ApiRequestError(
            status_code=400,
            error_code="INVALID_ARGUMENT",
            message="request body does not match schema",
            detail={"errors": exc.errors(include_url=False, include_context=False)},
        ) from exc


def _resolve_format(token: str | None) -> BarcodeFormat | None:
    if token is None:
        return None
    resolved = BarcodeFormat.from_token(token)
    if resolved is BarcodeFormat.UNKNOWN:
        raise ApiRequestError(
            status_code=400,
            error_code="INVALID_ARGUMENT",
            message=f"unsupported barcode format: {token}",
        )
    return resolved


@lru_cache(maxsize=1)
def _api_policy() -> CodecPolicy:
    policy_path = os.getenv("CODEC_POLICY_PATH")
    return load_policy(Path(policy_path) if policy_path else None)


def _template_summary(template: Template) -> dict[str, Any]:
    return {
        "id": template.id,
        "name": template.name,
        "description": template.description,
        "content_type": template.content_type.value,
        "content_type_name": template.content_type.display_name,
        "default_format": template.default_format.value,
        "allowed_formats": [item.value for item in template.allowed_formats],
        "fields": [
            {
                "key": spec.key,
                "label": spec.label,
                "required": spec.required,
                "default": spec.default,
                "options": list(spec.options),
            }
            for spec in template.fields
        ],
    }


def _request_id_from_request(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if isinstance(request_id, str) and request_id:
        return request_id
    return uuid.uuid4().hex


def _api_error(exc: ApiRequestError, request_id: str, failure_stage: str) -> JSONResponse:
    _log_event(
        logging.ERROR,
        "error",
        request_id,
        error_code=exc.error_code,
        status_code=exc.status_code,
        failure_stage=failure_stage,
    )
    return _error_response(
        status_code=exc.status_code,
        error_code=exc.error_code,
        message=exc.message,
        request_id=request_id,
        detail=exc.detail,
    )


def _error_response(
    *,
    status_code: int,
    error_code: str,
    message: str,
    request_id: str,
    detail: dict[str, Any] | None = None,
) -> JSONResponse:
    payload_detail = dict(detail or {})
    payload_detail["request_id"] = request_id

    return JSONResponse(
        status_code=status_code,
        headers={_REQUEST_ID_HEADER: request_id},
        content={
            "error_code": error_code,
            "message": message,
            "detail": payload_detail,
        },
    )


def _package_version() -> str:
    try:
        return importlib.metadata.version("barcode-payload-codec")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def _dump_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _log_event(level: int, event: str, request_id: str, **fields: Any) -> None:
    payload = {
        "event": event,
        "request_id": request_id,
        **fields,
    }
    logger.log(level, _dump_json(payload))
