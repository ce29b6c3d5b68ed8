"""Service for projecting a slot definition onto concrete calendar dates.

All arithmetic is on local wall-clock fields; the slot's timezone label is
never applied.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from itertools import islice

from dateutil.rrule import WEEKLY, rrule

from field_schedule.domain.models import TimeSlot
from field_schedule.services.timeutils import (
    at_minutes,
    normalize_day_of_week,
    parse_local_datetime,
    weekday_of,
)

_ONE_WEEK = timedelta(days=7)


def align_date_to_day(seed: datetime, day_of_week: int) -> datetime:
    """Return midnight of the first date on or after *seed* falling on
    *day_of_week* (Monday-based)."""
    aligned = seed.replace(hour=0, minute=0, second=0, microsecond=0)
    diff = (day_of_week - weekday_of(aligned) + 7) % 7
    return aligned + timedelta(days=diff)


def next_occurrence(
    slot: TimeSlot, reference: datetime | None = None
) -> datetime | None:
    """Return the next date-time at which *slot* is active, or ``None``.

    One-off slots yield their own start until it has passed. Weekly slots
    yield the next instance on their weekday at or after *reference*, never
    before ``start_date`` and never after ``end_date``.
    """
    start = parse_local_datetime(slot.start_date)
    if start is None:
        return None

    if reference is None:
        reference = datetime.now()
    reference = reference.replace(tzinfo=None)

    if not slot.repeating:
        occurrence = start
        if slot.start_time_minutes is not None:
            occurrence = at_minutes(start, slot.start_time_minutes)
        if occurrence < reference:
            return None
        return occurrence

    if slot.day_of_week is not None:
        slot_day = normalize_day_of_week(slot.day_of_week)
    else:
        slot_day = weekday_of(start)

    base = start.replace(hour=0, minute=0, second=0, microsecond=0)
    effective = max(reference, base)

    end = parse_local_datetime(slot.end_date)
    if end is not None and effective > end:
        return None

    aligned = align_date_to_day(effective, slot_day)
    if aligned < base:
        aligned += _ONE_WEEK

    if slot.start_time_minutes is not None:
        occurrence = at_minutes(aligned, slot.start_time_minutes)
    else:
        occurrence = aligned.replace(
            hour=start.hour,
            minute=start.minute,
            second=start.second,
            microsecond=start.microsecond,
        )

    if end is not None and occurrence > end:
        return None

    # Reference was later in the day than the slot: roll to next week.
    if occurrence < reference:
        occurrence += _ONE_WEEK
        if end is not None and occurrence > end:
            return None

    return occurrence


def upcoming_occurrences(
    slot: TimeSlot, reference: datetime | None = None, count: int = 4
) -> list[datetime]:
    """Return up to *count* upcoming occurrences of *slot*, earliest first."""
    first = next_occurrence(slot, reference)
    if first is None or count <= 0:
        return []
    if not slot.repeating:
        return [first]

    rule = rrule(WEEKLY, dtstart=first, until=parse_local_datetime(slot.end_date))
    return list(islice(rule, count))
