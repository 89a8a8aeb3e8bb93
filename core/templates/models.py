"""Data models for content types, barcode formats, templates and validation."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field

FieldValidator = Callable[[str], bool]


class ContentType(str, Enum):
    """Semantic content of a payload.

    Values are the persisted tokens and must stay stable across versions.
    """

    PLAIN_TEXT = "TEXT"
    URL = "URL"
    EMAIL = "EMAIL"
    PHONE_NUMBER = "PHONE"
    SMS = "SMS"
    WIFI_CREDENTIAL = "WIFI"
    CONTACT_CARD = "CONTACT"
    CALENDAR_EVENT = "CALENDAR"
    GEO_LOCATION = "GEO"
    UNKNOWN = "UNKNOWN"

    @property
    def display_name(self) -> str:
        return _CONTENT_TYPE_NAMES[self]

    @property
    def is_structured(self) -> bool:
        return self in STRUCTURED_CONTENT_TYPES

    @classmethod
    def from_token(cls, token: str | None) -> ContentType | None:
        """Map a persisted token to a member, or None when it is not recognized."""

        if token is None:
            return None
        try:
            return cls(token.strip().upper())
        except ValueError:
            return None


_CONTENT_TYPE_NAMES: Mapping[ContentType, str] = MappingProxyType(
    {
        ContentType.PLAIN_TEXT: "Plain Text",
        ContentType.URL: "Website",
        ContentType.EMAIL: "Email",
        ContentType.PHONE_NUMBER: "Phone",
        ContentType.SMS: "SMS",
        ContentType.WIFI_CREDENTIAL: "WiFi",
        ContentType.CONTACT_CARD: "Contact",
        ContentType.CALENDAR_EVENT: "Calendar Event",
        ContentType.GEO_LOCATION: "Location",
        ContentType.UNKNOWN: "Unknown",
    }
)

STRUCTURED_CONTENT_TYPES = frozenset(
    {
        ContentType.WIFI_CREDENTIAL,
        ContentType.CONTACT_CARD,
        ContentType.CALENDAR_EVENT,
        ContentType.GEO_LOCATION,
    }
)


class SymbolKind(str, Enum):
    ONE_D = "1D"
    TWO_D = "2D"


class BarcodeFormat(str, Enum):
    """Symbol format of a barcode; orthogonal to its content type."""

    QR_CODE = "QR_CODE"
    AZTEC = "AZTEC"
    DATA_MATRIX = "DATA_MATRIX"
    PDF417 = "PDF417"
    EAN_8 = "EAN_8"
    EAN_13 = "EAN_13"
    UPC_A = "UPC_A"
    UPC_E = "UPC_E"
    CODE_39 = "CODE_39"
    CODE_93 = "CODE_93"
    CODE_128 = "CODE_128"
    ITF = "ITF"
    CODABAR = "CODABAR"
    UNKNOWN = "UNKNOWN"

    @property
    def display_name(self) -> str:
        return _FORMAT_INFO[self][0]

    @property
    def kind(self) -> SymbolKind:
        return _FORMAT_INFO[self][1]

    @classmethod
    def from_token(cls, token: str | None) -> BarcodeFormat:
        """Map a persisted token to a member, falling back to ``UNKNOWN``."""

        if not token:
            return cls.UNKNOWN
        normalized = token.strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls(normalized)
        except ValueError:
            return cls.UNKNOWN

    @classmethod
    def by_kind(cls, kind: SymbolKind) -> list[BarcodeFormat]:
        return [item for item in cls if item.kind is kind and item is not cls.UNKNOWN]


_FORMAT_INFO: Mapping[BarcodeFormat, tuple[str, SymbolKind]] = MappingProxyType(
    {
        BarcodeFormat.QR_CODE: ("QR Code", SymbolKind.TWO_D),
        BarcodeFormat.AZTEC: ("Aztec", SymbolKind.TWO_D),
        BarcodeFormat.DATA_MATRIX: ("Data Matrix", SymbolKind.TWO_D),
        BarcodeFormat.PDF417: ("PDF417", SymbolKind.TWO_D),
        BarcodeFormat.EAN_8: ("EAN-8", SymbolKind.ONE_D),
        BarcodeFormat.EAN_13: ("EAN-13", SymbolKind.ONE_D),
        BarcodeFormat.UPC_A: ("UPC-A", SymbolKind.ONE_D),
        BarcodeFormat.UPC_E: ("UPC-E", SymbolKind.ONE_D),
        BarcodeFormat.CODE_39: ("Code 39", SymbolKind.ONE_D),
        BarcodeFormat.CODE_93: ("Code 93", SymbolKind.ONE_D),
        BarcodeFormat.CODE_128: ("Code 128", SymbolKind.ONE_D),
        BarcodeFormat.ITF: ("ITF", SymbolKind.ONE_D),
        BarcodeFormat.CODABAR: ("Codabar", SymbolKind.ONE_D),
        BarcodeFormat.UNKNOWN: ("Unknown", SymbolKind.TWO_D),
    }
)


class CardStyle(str, Enum):
    """Contact-card micro-format emitted by a contact template."""

    VCARD = "vcard"
    MECARD = "mecard"


@dataclass(frozen=True)
class FieldSpec:
    """One user-entered field of a template."""

    key: str
    label: str
    required: bool = False
    validator: FieldValidator | None = None
    default: str | None = None
    options: tuple[str, ...] = ()

    def accepts(self, value: str) -> bool:
        if self.validator is None:
            return True
        return self.validator(value)


@dataclass(frozen=True)
class Template:
    """Immutable descriptor of a payload template.

    ``fields`` is the single source of truth for the keys the formatter reads.
    ``url_scheme`` applies to URL templates and ``card_style`` to contact
    templates; both are ignored by other content types.
    """

    id: str
    name: str
    content_type: ContentType
    fields: tuple[FieldSpec, ...]
    description: str = ""
    default_format: BarcodeFormat = BarcodeFormat.QR_CODE
    allowed_formats: tuple[BarcodeFormat, ...] = (BarcodeFormat.QR_CODE,)
    url_scheme: str = "http://"
    card_style: CardStyle = CardStyle.VCARD
    _field_index: Mapping[str, FieldSpec] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "_field_index", MappingProxyType({spec.key: spec for spec in self.fields})
        )

    @property
    def field_keys(self) -> list[str]:
        return [spec.key for spec in self.fields]

    @property
    def required_keys(self) -> list[str]:
        return [spec.key for spec in self.fields if spec.required]

    def get_field(self, key: str) -> FieldSpec | None:
        return self._field_index.get(key)


class ValidationReport(BaseModel):
    """Outcome of validating field values against a template."""

    model_config = ConfigDict(extra="forbid")

    template_id: str
    missing_keys: list[str] = Field(default_factory=list)
    invalid_keys: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing_keys and not self.invalid_keys
