"""
Date, name and identifier formatting helpers for chart display.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from packages.shared import settings

# SNOMED CT concept ids used by the patient and location payloads.
SNOMED_MALE = "248153007"
SNOMED_FEMALE = "248152002"
SNOMED_INDETERMINATE = "32570681000036106"
SNOMED_WARD = "225746001"

_NHS_NUMBER_RE = re.compile(r"(\d{3})(\d{3})(\d{4})")


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning None when absent or unparseable.

    Naive values are taken as UTC so ordering is consistent across the request.
    """
    if not value:
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_date(value: str | None) -> date | None:
    if not value:
        return None
    parsed = parse_timestamp(value)
    if parsed is not None:
        return parsed.date()
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def to_display_tz(value: datetime) -> datetime:
    return value.astimezone(ZoneInfo(settings.DISPLAY_TIMEZONE))


def format_ddmmmyy(value: datetime) -> str:
    """'31 Jan 19' style date used in the chart date row."""
    local = to_display_tz(value)
    return f"{local.day} {local.strftime('%b')} {local.strftime('%y')}"


def format_dmy(value: date | datetime) -> str:
    """'31 Jan 2019' style date used on the cover page."""
    if isinstance(value, datetime):
        value = to_display_tz(value)
    return f"{value.day} {value.strftime('%b')} {value.year}"


def format_24hour(value: datetime) -> str:
    local = to_display_tz(value)
    return f"{local.hour:02d}:{local.minute:02d}"


def word_trim(value: str, length: int, overflow_suffix: str = "…") -> str:
    """Trim to at most ``length`` characters, marking the cut with an ellipsis."""
    if len(value) <= length:
        return value
    return value[: length - 1].strip() + overflow_suffix


def format_nhs_number(value: str | None) -> str:
    if not value:
        return ""
    return _NHS_NUMBER_RE.sub(r"\1 \2 \3", value, count=1)


def initials(first_name: str | None, last_name: str | None) -> str:
    return (first_name or "")[:1] + (last_name or "")[:1]


def format_number(value: int | float) -> str:
    """Render a number the way it was charted: 37.0 -> '37', 37.5 -> '37.5'."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
