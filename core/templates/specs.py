"""Declarative template table used by the registry and payload formatter."""

from __future__ import annotations

from core.templates import validators as v
from core.templates.models import BarcodeFormat, CardStyle, ContentType, FieldSpec, Template

_ALL_FORMATS = tuple(item for item in BarcodeFormat if item is not BarcodeFormat.UNKNOWN)
_TWO_D_WIDE = (
    BarcodeFormat.QR_CODE,
    BarcodeFormat.AZTEC,
    BarcodeFormat.DATA_MATRIX,
    BarcodeFormat.PDF417,
)
_TWO_D_COMPACT = (BarcodeFormat.QR_CODE, BarcodeFormat.AZTEC, BarcodeFormat.DATA_MATRIX)
_CARD_FORMATS = (BarcodeFormat.QR_CODE, BarcodeFormat.DATA_MATRIX)

WIFI_AUTH_OPTIONS = ("WPA", "WPA3", "WEP", "nopass")


PLAIN_TEXT_TEMPLATE = Template(
    id="plain_text",
    name="Plain Text",
    description="Simple text message or note",
    content_type=ContentType.PLAIN_TEXT,
    allowed_formats=_ALL_FORMATS,
    fields=(FieldSpec("text", "Text Content", required=True, validator=v.is_non_blank),),
)

NUMBER_TEMPLATE = Template(
    id="number",
    name="Number",
    description="Generate code for numeric data",
    content_type=ContentType.PLAIN_TEXT,
    allowed_formats=(
        BarcodeFormat.QR_CODE,
        BarcodeFormat.DATA_MATRIX,
        BarcodeFormat.EAN_13,
        BarcodeFormat.EAN_8,
        BarcodeFormat.UPC_A,
        BarcodeFormat.UPC_E,
        BarcodeFormat.CODE_128,
        BarcodeFormat.ITF,
    ),
    fields=(FieldSpec("number", "Number", required=True, validator=v.is_digits),),
)

CUSTOM_DATA_TEMPLATE = Template(
    id="custom_data",
    name="Custom Data",
    description="Any custom formatted data",
    content_type=ContentType.PLAIN_TEXT,
    allowed_formats=_ALL_FORMATS,
    fields=(FieldSpec("data", "Custom Data", required=True, validator=v.is_non_blank),),
)

# Both URL templates key their value as ``url``.
URL_TEMPLATE = Template(
    id="url",
    name="Website URL",
    description="Open a website or web page",
    content_type=ContentType.URL,
    allowed_formats=_TWO_D_WIDE,
    fields=(FieldSpec("url", "URL", required=True, validator=v.is_url),),
)

SECURE_URL_TEMPLATE = Template(
    id="secure_url",
    name="Secure Website URL",
    description="Open a website over HTTPS",
    content_type=ContentType.URL,
    allowed_formats=_TWO_D_WIDE,
    url_scheme="https://",
    fields=(FieldSpec("url", "URL", required=True, validator=v.is_url),),
)

PHONE_TEMPLATE = Template(
    id="phone",
    name="Phone Number",
    description="Create a code that calls a phone number",
    content_type=ContentType.PHONE_NUMBER,
    allowed_formats=_TWO_D_WIDE,
    fields=(FieldSpec("phone", "Phone Number", required=True, validator=v.is_phone),),
)

EMAIL_TEMPLATE = Template(
    id="email",
    name="Email Address",
    description="Compose an email on scan",
    content_type=ContentType.EMAIL,
    allowed_formats=_TWO_D_WIDE,
    fields=(
        FieldSpec("email", "Email Address", required=True, validator=v.is_email),
        FieldSpec("subject", "Subject (Optional)"),
        FieldSpec("body", "Message (Optional)"),
    ),
)

SMS_TEMPLATE = Template(
    id="sms",
    name="SMS Message",
    description="Send a pre-filled SMS message",
    content_type=ContentType.SMS,
    allowed_formats=_TWO_D_COMPACT,
    fields=(
        FieldSpec("phone", "Phone Number", required=True, validator=v.is_phone),
        FieldSpec("message", "Message (Optional)"),
    ),
)

WIFI_TEMPLATE = Template(
    id="wifi",
    name="WiFi Credentials",
    description="Share WiFi network credentials",
    content_type=ContentType.WIFI_CREDENTIAL,
    allowed_formats=(BarcodeFormat.QR_CODE,),
    fields=(
        FieldSpec("ssid", "Network Name (SSID)", required=True, validator=v.is_wifi_ssid),
        FieldSpec("password", "Password", validator=v.max_length(63)),
        FieldSpec(
            "auth",
            "Security Type",
            required=True,
            validator=v.is_wifi_auth,
            default="WPA",
            options=WIFI_AUTH_OPTIONS,
        ),
        FieldSpec("hidden", "Hidden Network", validator=v.is_boolean, default="false"),
    ),
)

CONTACT_TEMPLATE = Template(
    id="contact",
    name="Contact (vCard)",
    description="Share complete contact information",
    content_type=ContentType.CONTACT_CARD,
    allowed_formats=_CARD_FORMATS,
    card_style=CardStyle.VCARD,
    fields=(
        FieldSpec("name", "Full Name", required=True, validator=v.is_non_blank),
        FieldSpec("phone", "Phone", validator=v.is_phone),
        FieldSpec("email", "Email", validator=v.is_email),
        FieldSpec("organization", "Organization"),
        FieldSpec("website", "Website", validator=v.is_url),
        FieldSpec("address", "Address"),
    ),
)

MECARD_CONTACT_TEMPLATE = Template(
    id="mecard_contact",
    name="Contact (MECARD)",
    description="Compact contact card for older readers",
    content_type=ContentType.CONTACT_CARD,
    allowed_formats=_CARD_FORMATS,
    card_style=CardStyle.MECARD,
    fields=(
        FieldSpec("name", "Full Name", required=True, validator=v.is_non_blank),
        FieldSpec("phone", "Phone", validator=v.is_phone),
        FieldSpec("email", "Email", validator=v.is_email),
        FieldSpec("website", "Website", validator=v.is_url),
        FieldSpec("address", "Address"),
        FieldSpec("note", "Note"),
    ),
)

BUSINESS_CARD_TEMPLATE = Template(
    id="business_card",
    name="Business Card",
    description="Professional digital business card",
    content_type=ContentType.CONTACT_CARD,
    allowed_formats=_CARD_FORMATS,
    card_style=CardStyle.VCARD,
    fields=(
        FieldSpec("name", "Full Name", required=True, validator=v.is_non_blank),
        FieldSpec("title", "Job Title"),
        FieldSpec("organization", "Company", required=True, validator=v.is_non_blank),
        FieldSpec("phone", "Work Phone", validator=v.is_phone),
        FieldSpec("email", "Work Email", validator=v.is_email),
        FieldSpec("website", "Website", validator=v.is_url),
        FieldSpec("address", "Office Address"),
    ),
)

GEO_LOCATION_TEMPLATE = Template(
    id="geo_location",
    name="Geographic Location",
    description="Share GPS coordinates",
    content_type=ContentType.GEO_LOCATION,
    allowed_formats=_TWO_D_COMPACT,
    fields=(
        FieldSpec("latitude", "Latitude", required=True, validator=v.is_latitude),
        FieldSpec("longitude", "Longitude", required=True, validator=v.is_longitude),
    ),
)

CALENDAR_EVENT_TEMPLATE = Template(
    id="calendar_event",
    name="Calendar Event",
    description="Add an event to a calendar",
    content_type=ContentType.CALENDAR_EVENT,
    allowed_formats=_CARD_FORMATS,
    fields=(
        FieldSpec("title", "Event Title", required=True, validator=v.is_non_blank),
        FieldSpec("start", "Start Date/Time", required=True, validator=v.is_event_start),
        FieldSpec("end", "End Date/Time", validator=v.is_datetime),
        FieldSpec("location", "Location"),
        FieldSpec("description", "Description"),
    ),
)


TEMPLATES: tuple[Template, ...] = (
    PLAIN_TEXT_TEMPLATE,
    NUMBER_TEMPLATE,
    CUSTOM_DATA_TEMPLATE,
    PHONE_TEMPLATE,
    EMAIL_TEMPLATE,
    SMS_TEMPLATE,
    CONTACT_TEMPLATE,
    MECARD_CONTACT_TEMPLATE,
    URL_TEMPLATE,
    SECURE_URL_TEMPLATE,
    WIFI_TEMPLATE,
    GEO_LOCATION_TEMPLATE,
    CALENDAR_EVENT_TEMPLATE,
    BUSINESS_CARD_TEMPLATE,
)
