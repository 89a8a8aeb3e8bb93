"""Records exchanged with the history store.

The codec does not persist anything. These helpers turn generation and scan
results into flat rows of stable string tokens plus a canonical JSON blob of
field values, and read such rows back without failing on unknown tokens.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field

from core.format.models import GenerationResult
from core.scan.classifier import classify
from core.scan.models import ScanResult
from core.templates.models import BarcodeFormat, ContentType

logger = logging.getLogger("codec.history")


@dataclass(frozen=True)
class GeneratedCodeRecord:
    """Row for one generated code."""

    template_id: str
    content_type: ContentType
    barcode_format: BarcodeFormat
    formatted_content: str
    field_values: dict[str, str] = field(default_factory=dict)

    @property
    def fingerprint(self) -> str:
        return content_fingerprint(self.formatted_content, self.barcode_format)


@dataclass(frozen=True)
class ScanHistoryRecord:
    """Row for one scan event."""

    raw_content: str
    content_type: ContentType
    barcode_format: BarcodeFormat
    fields: dict[str, str] = field(default_factory=dict)

    @property
    def fingerprint(self) -> str:
        return content_fingerprint(self.raw_content, self.barcode_format)


def content_fingerprint(content: str, barcode_format: BarcodeFormat) -> str:
    """Compute a SHA256 fingerprint used for content-based duplicate detection."""

    serialized = json.dumps(
        {"barcode_format": barcode_format.value, "content": content},
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


def encode_field_values(values: Mapping[str, str]) -> str:
    """Serialize a flat string map as canonical JSON."""

    return json.dumps(dict(values), sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def decode_field_values(blob: str | None) -> dict[str, str]:
    """Read a field-value blob; malformed blobs yield an empty mapping."""

    if not blob:
        return {}
    try:
        raw = json.loads(blob)
    except json.JSONDecodeError:
        logger.warning("discarding malformed field value blob (%d chars)", len(blob))
        return {}
    if not isinstance(raw, dict):
        return {}
    return {str(key): str(value) for key, value in raw.items() if value is not None}


def resolve_content_type(token: str | None, content: str) -> ContentType:
    """Map a persisted token, classifying ``content`` when the token is unknown."""

    resolved = ContentType.from_token(token)
    if resolved is not None:
        return resolved
    logger.info("unknown content type token %r; reclassifying stored content", token)
    return classify(content)


def build_generated_record(result: GenerationResult) -> GeneratedCodeRecord:
    return GeneratedCodeRecord(
        template_id=result.template_id,
        content_type=result.content_type,
        barcode_format=result.barcode_format,
        formatted_content=result.payload,
        field_values=dict(result.field_values),
    )


def build_scan_record(scan: ScanResult) -> ScanHistoryRecord:
    return ScanHistoryRecord(
        raw_content=scan.raw,
        content_type=scan.classification.content_type,
        barcode_format=scan.barcode_format,
        fields=dict(scan.classification.fields),
    )


def generated_record_to_row(record: GeneratedCodeRecord) -> dict[str, str]:
    row = asdict(record)
    row["content_type"] = record.content_type.value
    row["barcode_format"] = record.barcode_format.value
    row["field_values"] = encode_field_values(record.field_values)
    row["fingerprint"] = record.fingerprint
    return row


def generated_record_from_row(row: Mapping[str, object]) -> GeneratedCodeRecord:
    content = str(row.get("formatted_content") or "")
    return GeneratedCodeRecord(
        template_id=str(row.get("template_id") or ""),
        content_type=resolve_content_type(_optional_str(row.get("content_type")), content),
        barcode_format=BarcodeFormat.from_token(_optional_str(row.get("barcode_format"))),
        formatted_content=content,
        field_values=decode_field_values(_optional_str(row.get("field_values"))),
    )


def scan_record_to_row(record: ScanHistoryRecord) -> dict[str, str]:
    row = asdict(record)
    row["content_type"] = record.content_type.value
    row["barcode_format"] = record.barcode_format.value
    row["fields"] = encode_field_values(record.fields)
    row["fingerprint"] = record.fingerprint
    return row


def scan_record_from_row(row: Mapping[str, object]) -> ScanHistoryRecord:
    content = str(row.get("raw_content") or "")
    return ScanHistoryRecord(
        raw_content=content,
        content_type=resolve_content_type(_optional_str(row.get("content_type")), content),
        barcode_format=BarcodeFormat.from_token(_optional_str(row.get("barcode_format"))),
        fields=decode_field_values(_optional_str(row.get("fields"))),
    )


def _optional_str(value: object) -> str | None:
    return value if isinstance(value, str) else None
