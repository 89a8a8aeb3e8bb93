"""Data models for scan classification output."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from core.templates.models import BarcodeFormat, ContentType


class ClassificationResult(BaseModel):
    """Content type of a scanned payload plus any fields extracted from it.

    ``fields`` may be partial or empty; neither case is an error.
    """

    model_config = ConfigDict(extra="forbid")

    content_type: ContentType
    fields: dict[str, str] = Field(default_factory=dict)

    @property
    def has_fields(self) -> bool:
        return bool(self.fields)


class ScanResult(BaseModel):
    """One scan event: raw text, detected symbol format and its classification."""

    model_config = ConfigDict(extra="forbid")

    raw: str
    barcode_format: BarcodeFormat = BarcodeFormat.UNKNOWN
    classification: ClassificationResult
