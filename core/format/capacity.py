"""Symbol capacity and character-set advisories for formatted payloads.

Limits are the version-40 QR maxima and the practical maxima of the other
symbologies. The checks only report; payloads are never truncated.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from core.format.models import CapacityReport, EncodingMode, ErrorCorrectionLevel
from core.templates.models import BarcodeFormat

_QR_ALPHANUMERIC = frozenset("0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ $%*+-./:")
_CODE_39_CHARSET = frozenset("0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ-. *$/+%")

_QR_LIMITS: Mapping[ErrorCorrectionLevel, Mapping[EncodingMode, int]] = MappingProxyType(
    {
        ErrorCorrectionLevel.LOW: {
            EncodingMode.NUMERIC: 7089,
            EncodingMode.ALPHANUMERIC: 4296,
            EncodingMode.BYTE: 2953,
        },
        ErrorCorrectionLevel.MEDIUM: {
            EncodingMode.NUMERIC: 5596,
            EncodingMode.ALPHANUMERIC: 3391,
            EncodingMode.BYTE: 2331,
        },
        ErrorCorrectionLevel.QUARTILE: {
            EncodingMode.NUMERIC: 3993,
            EncodingMode.ALPHANUMERIC: 2420,
            EncodingMode.BYTE: 1663,
        },
        ErrorCorrectionLevel.HIGH: {
            EncodingMode.NUMERIC: 3057,
            EncodingMode.ALPHANUMERIC: 1852,
            EncodingMode.BYTE: 1273,
        },
    }
)

_TWO_D_LIMITS: Mapping[BarcodeFormat, Mapping[EncodingMode, int]] = MappingProxyType(
    {
        BarcodeFormat.DATA_MATRIX: {
            EncodingMode.NUMERIC: 3116,
            EncodingMode.ALPHANUMERIC: 2335,
            EncodingMode.BYTE: 1556,
        },
        BarcodeFormat.AZTEC: {
            EncodingMode.NUMERIC: 3832,
            EncodingMode.ALPHANUMERIC: 3067,
            EncodingMode.BYTE: 1914,
        },
        BarcodeFormat.PDF417: {
            EncodingMode.NUMERIC: 2710,
            EncodingMode.ALPHANUMERIC: 1850,
            EncodingMode.BYTE: 1108,
        },
    }
)

_ONE_D_LIMITS: Mapping[BarcodeFormat, int] = MappingProxyType(
    {
        BarcodeFormat.EAN_8: 8,
        BarcodeFormat.EAN_13: 13,
        BarcodeFormat.UPC_A: 12,
        BarcodeFormat.UPC_E: 8,
        BarcodeFormat.CODE_39: 43,
        BarcodeFormat.CODE_93: 47,
        BarcodeFormat.CODE_128: 80,
        BarcodeFormat.ITF: 80,
        BarcodeFormat.CODABAR: 40,
    }
)

# (digit counts accepted, label) for fixed-length numeric symbologies.
_NUMERIC_LENGTHS: Mapping[BarcodeFormat, tuple[frozenset[int], str]] = MappingProxyType(
    {
        BarcodeFormat.EAN_8: (frozenset({7, 8}), "exactly 7 or 8 digits"),
        BarcodeFormat.EAN_13: (frozenset({12, 13}), "exactly 12 or 13 digits"),
        BarcodeFormat.UPC_A: (frozenset({11, 12}), "exactly 11 or 12 digits"),
        BarcodeFormat.UPC_E: (frozenset({6, 7, 8}), "6, 7, or 8 digits"),
    }
)

_DEFAULT_TWO_D_LIMIT = 1000
_DEFAULT_ONE_D_LIMIT = 80


def detect_encoding_mode(content: str) -> EncodingMode:
    if not content:
        return EncodingMode.BYTE
    if content.isascii() and content.isdigit():
        return EncodingMode.NUMERIC
    if all(char in _QR_ALPHANUMERIC for char in content.upper()):
        return EncodingMode.ALPHANUMERIC
    return EncodingMode.BYTE


def max_capacity(
    barcode_format: BarcodeFormat,
    error_correction: ErrorCorrectionLevel = ErrorCorrectionLevel.MEDIUM,
    content: str = "",
) -> int:
    """Return the maximum payload length ``barcode_format`` can carry."""

    mode = detect_encoding_mode(content)
    if barcode_format in (BarcodeFormat.QR_CODE, BarcodeFormat.UNKNOWN):
        return _QR_LIMITS[error_correction][mode]
    if barcode_format in _TWO_D_LIMITS:
        return _TWO_D_LIMITS[barcode_format].get(mode, _DEFAULT_TWO_D_LIMIT)
    return _ONE_D_LIMITS.get(barcode_format, _DEFAULT_ONE_D_LIMIT)


def payload_length(content: str, mode: EncodingMode) -> int:
    """Length in the unit the capacity tables use (bytes for byte mode)."""

    if mode is EncodingMode.BYTE:
        return len(content.encode("utf-8"))
    return len(content)


def validate_symbol_content(content: str, barcode_format: BarcodeFormat) -> str | None:
    """Return a message when ``content`` violates ``barcode_format``'s character rules."""

    if barcode_format in _NUMERIC_LENGTHS:
        lengths, label = _NUMERIC_LENGTHS[barcode_format]
        name = barcode_format.display_name
        if not (content.isascii() and content.isdigit()):
            return f"{name} requires only digits"
        if len(content) not in lengths:
            return f"{name} requires {label}"
        return None

    if barcode_format is BarcodeFormat.ITF:
        if not (content.isascii() and content.isdigit()):
            return "ITF requires only digits"
        if len(content) % 2 != 0:
            return "ITF requires an even number of digits"
        return None

    if barcode_format is BarcodeFormat.CODE_39:
        if not all(char in _CODE_39_CHARSET for char in content.upper()):
            return "Code 39 only supports: 0-9, A-Z, space, and -.*$/+%"
        return None

    return None


def check_capacity(
    content: str,
    barcode_format: BarcodeFormat,
    error_correction: ErrorCorrectionLevel = ErrorCorrectionLevel.MEDIUM,
) -> CapacityReport:
    """Build a capacity advisory for ``content`` encoded as ``barcode_format``."""

    mode = detect_encoding_mode(content)
    return CapacityReport(
        barcode_format=barcode_format,
        error_correction=error_correction,
        encoding_mode=mode,
        length=payload_length(content, mode),
        max_capacity=max_capacity(barcode_format, error_correction, content),
        content_error=validate_symbol_content(content, barcode_format),
    )
