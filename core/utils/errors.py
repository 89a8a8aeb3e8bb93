"""Custom exceptions for core logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.format.models import CapacityReport
    from core.templates.models import ContentType, ValidationReport


class FieldValidationError(Exception):
    """Raised when field values fail template validation.

    Carries every violation found, not only the first one.
    """

    def __init__(self, message: str, *, report: ValidationReport) -> None:
        super().__init__(message)
        self.report = report

    @property
    def missing_keys(self) -> list[str]:
        return list(self.report.missing_keys)

    @property
    def invalid_keys(self) -> list[str]:
        return list(self.report.invalid_keys)


class UnknownTemplateError(LookupError):
    """Raised when a template id is not registered."""

    def __init__(self, template_id: str, *, known: list[str] | None = None) -> None:
        super().__init__(f"Unknown template: {template_id}")
        self.template_id = template_id
        self.known = known or []


class FormatError(Exception):
    """Base class for payload formatting failures."""


class UnsupportedContentTypeError(FormatError):
    """Raised when a content type has no rendering rule."""

    def __init__(self, content_type: ContentType, *, template_id: str | None = None) -> None:
        target = f" (template {template_id})" if template_id else ""
        super().__init__(f"No rendering rule for content type {content_type.value}{target}")
        self.content_type = content_type
        self.template_id = template_id


class BarcodeFormatError(ValueError):
    """Raised when a barcode format is not allowed for a template."""

    def __init__(self, message: str, *, allowed: list[str] | None = None) -> None:
        super().__init__(message)
        self.allowed = allowed or []


class CapacityExceededError(Exception):
    """Raised in strict capacity mode when a payload does not fit its symbol."""

    def __init__(self, message: str, *, report: CapacityReport) -> None:
        super().__init__(message)
        self.report = report
