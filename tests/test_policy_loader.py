from __future__ import annotations

from pathlib import Path

import pytest

from core.format.models import ErrorCorrectionLevel
from core.format.policy_loader import load_policy
from core.templates.models import BarcodeFormat


def test_load_default_policy() -> None:
    policy = load_policy()

    assert policy.default_barcode_format is BarcodeFormat.QR_CODE
    assert policy.capacity_mode == "report"
    assert policy.render.error_correction is ErrorCorrectionLevel.MEDIUM
    assert policy.render.foreground_color == "#000000"


def test_load_policy_raises_for_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Policy file not found"):
        load_policy(tmp_path / "missing.yaml")


def test_load_policy_raises_for_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text("capacity_mode: [report\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid YAML"):
        load_policy(path)


def test_load_policy_raises_for_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text("- QR_CODE\n", encoding="utf-8")

    with pytest.raises(ValueError, match="must contain a mapping"):
        load_policy(path)


def test_load_policy_raises_for_invalid_type(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text(
        """
default_barcode_format: QR_CODE
capacity_mode: loud
""",
        encoding="utf-8",
    )

    with pytest.raises(ValueError, match="Invalid policy schema"):
        load_policy(path)


def test_load_policy_raises_for_unknown_key(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text(
        """
default_barcode_format: QR_CODE
render:
  size: 512
  dpi: 300
""",
        encoding="utf-8",
    )

    with pytest.raises(ValueError, match="Invalid policy schema"):
        load_policy(path)


def test_load_policy_raises_for_bad_color(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text(
        """
render:
  foreground_color: black
""",
        encoding="utf-8",
    )

    with pytest.raises(ValueError, match="Invalid policy schema"):
        load_policy(path)


def test_load_policy_maps_legacy_format_tokens(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text(
        """
default_barcode_format: ean13
capacity_mode: strict
render:
  error_correction: HIGH
""",
        encoding="utf-8",
    )

    policy = load_policy(path)

    assert policy.default_barcode_format is BarcodeFormat.EAN_13
    assert policy.capacity_mode == "strict"
    assert policy.render.error_correction is ErrorCorrectionLevel.HIGH
    assert policy.render.size == 512


def test_load_policy_accepts_hyphenated_format(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text("default_barcode_format: data-matrix\n", encoding="utf-8")

    assert load_policy(path).default_barcode_format is BarcodeFormat.DATA_MATRIX
