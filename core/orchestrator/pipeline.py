"""Orchestration of the generation (fields -> payload) and scan (text -> fields) flows."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from core.format.capacity import check_capacity
from core.format.models import CodecPolicy, GenerationResult
from core.format.payload_formatter import format_payload
from core.scan.classifier import classify
from core.scan.models import ClassificationResult, ScanResult
from core.scan.parser import parse
from core.templates.models import BarcodeFormat, Template
from core.templates.registry import get_template, validate_values
from core.utils.errors import BarcodeFormatError, CapacityExceededError, FieldValidationError

logger = logging.getLogger("codec.pipeline")


def generate_payload(
    template_id: str,
    values: Mapping[str, str],
    *,
    policy: CodecPolicy | None = None,
    barcode_format: BarcodeFormat | None = None,
) -> GenerationResult:
    """Execute lookup -> validate -> format -> capacity pipeline.

    Raises:
        UnknownTemplateError: ``template_id`` is not registered.
        BarcodeFormatError: the symbol format is not allowed for the template.
        FieldValidationError: values are missing or invalid (all violations).
        CapacityExceededError: strict capacity mode and the payload does not fit.
    """

    effective_policy = policy or CodecPolicy()
    template = get_template(template_id)
    selected_format = _resolve_barcode_format(
        template, barcode_format, effective_policy.default_barcode_format
    )

    report = validate_values(template, values)
    if not report.ok:
        raise FieldValidationError(
            f"Invalid field values for template {template.id}",
            report=report,
        )

    payload = format_payload(template, values)
    capacity = None
    if effective_policy.capacity_mode != "off":
        capacity = check_capacity(
            payload, selected_format, effective_policy.render.error_correction
        )
        if effective_policy.capacity_mode == "strict" and not capacity.within_capacity:
            raise CapacityExceededError(capacity.message, report=capacity)

    logger.debug(
        "generated payload: template=%s type=%s format=%s length=%d",
        template.id,
        template.content_type.value,
        selected_format.value,
        len(payload),
    )
    return GenerationResult(
        template_id=template.id,
        content_type=template.content_type,
        barcode_format=selected_format,
        payload=payload,
        field_values={key: values[key] for key in template.field_keys if key in values},
        render=effective_policy.render,
        capacity=capacity,
    )


def classify_payload(raw: str) -> ClassificationResult:
    """Classify ``raw`` and extract fields when its type is parseable."""

    content_type = classify(raw)
    return ClassificationResult(content_type=content_type, fields=parse(content_type, raw))


def scan_payload(raw: str, barcode_format: BarcodeFormat = BarcodeFormat.UNKNOWN) -> ScanResult:
    """Build the scan-event result for text produced by a barcode detector."""

    classification = classify_payload(raw)
    logger.debug(
        "classified scan: type=%s format=%s fields=%d",
        classification.content_type.value,
        barcode_format.value,
        len(classification.fields),
    )
    return ScanResult(raw=raw, barcode_format=barcode_format, classification=classification)


def _resolve_barcode_format(
    template: Template,
    requested: BarcodeFormat | None,
    preferred: BarcodeFormat,
) -> BarcodeFormat:
    if requested is None:
        if preferred in template.allowed_formats:
            return preferred
        return template.default_format
    if requested not in template.allowed_formats:
        raise BarcodeFormatError(
            f"Barcode format {requested.value} is not allowed for template {template.id}",
            allowed=[item.value for item in template.allowed_formats],
        )
    return requested
