"""Local wall-clock helpers shared by the occurrence resolver and the
conflict detector.

Everything here is timezone-naive: offsets are stripped, never applied.
Weekdays are Monday-based (0=Monday ... 6=Sunday).
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta

from dateutil import parser as date_parser

_OFFSET_SUFFIX = re.compile(r"([+-]\d{2}:?\d{2}|Z)$", re.IGNORECASE)
_FRACTION_SUFFIX = re.compile(r"\.\d+$")
_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DATE_HOUR_MINUTE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}$")
_DATE_TIME = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}$")
_CLOCK_TIME = re.compile(r"^\d{1,2}:\d{2}$")

_LOCAL_FORMAT = "%Y-%m-%dT%H:%M:%S"
_WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def _coerce_local_string(raw: str) -> str | None:
    working = raw.strip()
    if not working:
        return None

    working = _OFFSET_SUFFIX.sub("", working)
    working = _FRACTION_SUFFIX.sub("", working)

    if _DATE_ONLY.match(working):
        return f"{working}T00:00:00"
    if _DATE_HOUR_MINUTE.match(working):
        return f"{working}:00"
    if _DATE_TIME.match(working):
        return working

    try:
        fallback = date_parser.parse(raw)
    except (ValueError, OverflowError):
        return None
    return fallback.strftime(_LOCAL_FORMAT)


def parse_local_datetime(value: str | datetime | None) -> datetime | None:
    """Parse *value* as a naive local date-time.

    Accepts ``YYYY-MM-DD``, ``YYYY-MM-DDTHH:MM`` and ``YYYY-MM-DDTHH:MM:SS``
    (optionally with fractional seconds and a UTC offset, both dropped).
    Other strings go through ``dateutil``. Returns ``None`` for empty or
    unparsable input instead of raising.
    """
    if not value:
        return None

    if isinstance(value, datetime):
        return value.replace(tzinfo=None)

    if not isinstance(value, str):
        return None

    normalized = _coerce_local_string(value)
    if normalized is None:
        return None
    try:
        return datetime.strptime(normalized, _LOCAL_FORMAT)
    except ValueError:
        return None


def format_local_datetime(value: str | datetime | None) -> str:
    parsed = parse_local_datetime(value)
    return parsed.strftime(_LOCAL_FORMAT) if parsed else ""


def normalize_day_of_week(day: int) -> int:
    return ((day % 7) + 7) % 7


def weekday_of(value: date) -> int:
    """Monday-based weekday of a date or datetime.

    This is the only place a native weekday is read; ``date.weekday()``
    already counts from Monday, unlike ``isoweekday() % 7``.
    """
    return value.weekday()


def weekday_label(day: int) -> str:
    return _WEEKDAY_LABELS[normalize_day_of_week(day)]


def time_string_to_minutes(time: str) -> int:
    hours_raw, _, minutes_raw = time.partition(":")
    try:
        hours = int(hours_raw)
    except ValueError:
        hours = 0
    try:
        minutes = int(minutes_raw)
    except ValueError:
        minutes = 0
    return hours * 60 + minutes


def minutes_to_time_string(minutes: int) -> str:
    hours, remainder = divmod(minutes, 60)
    return f"{hours:02d}:{remainder:02d}"


def normalize_time(value: object) -> int | None:
    """Coerce a minute value from storage or a form into an int.

    Accepts ints, ``"HH:MM"`` strings and numeric strings.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        if _CLOCK_TIME.match(stripped):
            return time_string_to_minutes(stripped)
        try:
            return int(stripped)
        except ValueError:
            return None
    return None


def at_minutes(day: datetime, minutes: int) -> datetime:
    """Midnight of *day* plus *minutes* (rolls into the next day past 1440)."""
    midnight = day.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight + timedelta(minutes=minutes)
