"""Data models for codec policy, render options and generation reports."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from core.templates.models import BarcodeFormat, ContentType

CapacityMode = Literal["report", "strict", "off"]


class ErrorCorrectionLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    QUARTILE = "QUARTILE"
    HIGH = "HIGH"


class EncodingMode(str, Enum):
    NUMERIC = "NUMERIC"
    ALPHANUMERIC = "ALPHANUMERIC"
    BYTE = "BYTE"


class RenderOptions(BaseModel):
    """Symbol rendering parameters passed through to the encoder untouched."""

    model_config = ConfigDict(extra="forbid")

    size: int = Field(default=512, ge=64, le=4096)
    margin: int = Field(default=1, ge=0, le=16)
    foreground_color: str = Field(default="#000000", pattern=r"^#[0-9A-Fa-f]{6}$")
    background_color: str = Field(default="#FFFFFF", pattern=r"^#[0-9A-Fa-f]{6}$")
    error_correction: ErrorCorrectionLevel = ErrorCorrectionLevel.MEDIUM


class CodecPolicy(BaseModel):
    """Generation policy loaded from YAML."""

    model_config = ConfigDict(extra="forbid")

    default_barcode_format: BarcodeFormat = BarcodeFormat.QR_CODE
    capacity_mode: CapacityMode = "report"
    render: RenderOptions = Field(default_factory=RenderOptions)


class CapacityReport(BaseModel):
    """Advisory comparison of a payload against its symbol's capacity."""

    model_config = ConfigDict(extra="forbid")

    barcode_format: BarcodeFormat
    error_correction: ErrorCorrectionLevel
    encoding_mode: EncodingMode
    length: int
    max_capacity: int
    content_error: str | None = None

    @property
    def remaining(self) -> int:
        return self.max_capacity - self.length

    @property
    def within_capacity(self) -> bool:
        return self.remaining >= 0 and self.content_error is None

    @property
    def message(self) -> str:
        if self.content_error is not None:
            return self.content_error
        if self.remaining < 0:
            return f"Exceeds limit by {-self.remaining} characters"
        if self.remaining == 0:
            return "At maximum capacity"
        if self.remaining < 10:
            return f"Only {self.remaining} characters remaining"
        return f"{self.length} / {self.max_capacity} characters"


class GenerationResult(BaseModel):
    """Formatted payload plus the context an encoder or history store needs."""

    model_config = ConfigDict(extra="forbid")

    template_id: str
    content_type: ContentType
    barcode_format: BarcodeFormat
    payload: str
    field_values: dict[str, str] = Field(default_factory=dict)
    render: RenderOptions
    capacity: CapacityReport | None = None
