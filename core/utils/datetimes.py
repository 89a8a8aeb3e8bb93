"""Date-time parsing and rendering for calendar payloads."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

BASIC_UTC_FORMAT = "%Y%m%dT%H%M%SZ"
DEFAULT_EVENT_DURATION = timedelta(hours=1)

_BASIC_FORMATS = (
    "%Y%m%dT%H%M%SZ",
    "%Y%m%dT%H%M%S",
    "%Y%m%dT%H%MZ",
    "%Y%m%d",
)


def parse_datetime(value: str) -> datetime:
    """Parse ISO 8601 or iCalendar basic date-time text into an aware UTC datetime.

    Values without an offset are taken as UTC. Raises ``ValueError`` when the
    text matches neither representation or falls outside the datetime range
    once converted to UTC.
    """

    text = value.strip()
    if not text:
        raise ValueError("empty date-time")

    for pattern in _BASIC_FORMATS:
        try:
            parsed = datetime.strptime(text, pattern)
        except ValueError:
            continue
        return parsed.replace(tzinfo=timezone.utc)

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00").replace("z", "+00:00"))
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    except OverflowError as exc:
        raise ValueError(f"date-time out of range: {text}") from exc


def default_event_end(start: datetime) -> datetime:
    """Return ``start`` plus the default event duration.

    Raises ``ValueError`` when the end would fall past the last representable date.
    """

    try:
        return start + DEFAULT_EVENT_DURATION
    except OverflowError as exc:
        raise ValueError("event end out of range") from exc


def format_basic_utc(moment: datetime) -> str:
    """Render ``moment`` as ``YYYYMMDDTHHMMSSZ`` in UTC."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(BASIC_UTC_FORMAT)


def format_iso_utc(moment: datetime) -> str:
    """Render ``moment`` as ISO 8601 with a ``Z`` suffix, second precision."""

    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
