"""Policy loading utilities for payload generation."""

from __future__ import annotations

from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import ValidationError

from core.format.models import CodecPolicy

_LEGACY_FORMAT_TOKENS = {
    "QR": "QR_CODE",
    "EAN13": "EAN_13",
    "EAN8": "EAN_8",
    "CODE128": "CODE_128",
}


def load_policy(path: Path | None = None) -> CodecPolicy:
    """Load and validate generation policy from YAML."""

    policy_path = path or Path(__file__).with_name("policy.yaml")

    try:
        raw = yaml.safe_load(policy_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ValueError(f"Policy file not found: {policy_path}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in policy file: {policy_path}") from exc

    if not isinstance(raw, dict):
        raise ValueError(f"Policy file must contain a mapping: {policy_path}")

    normalized = _normalize_format_token(raw)

    try:
        return CodecPolicy.model_validate(normalized)
    except ValidationError as exc:
        raise ValueError(f"Invalid policy schema: {policy_path}") from exc


def _normalize_format_token(raw: dict[object, object]) -> dict[object, object]:
    normalized = dict(raw)
    value = normalized.get("default_barcode_format")
    if isinstance(value, str):
        token = value.strip().upper().replace("-", "_")
        normalized["default_barcode_format"] = _LEGACY_FORMAT_TOKENS.get(token, token)
    return normalized
