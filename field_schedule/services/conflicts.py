"""Service for detecting booking conflicts between weekly slots on a field."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Protocol

from field_schedule.domain.models import Conflict, Event, SlotProposal, TimeSlot
from field_schedule.services.timeutils import (
    minutes_to_time_string,
    normalize_day_of_week,
    parse_local_datetime,
    weekday_label,
)

logger = logging.getLogger(__name__)


class SlotStore(Protocol):
    """Read access to stored slots and their owning events."""

    async def list_slots_for_field(
        self, field_id: str, day_of_week: int | None = None
    ) -> list[TimeSlot]: ...

    async def get_event_by_id(self, event_id: str) -> Event | None: ...


def minutes_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open ``[start, end)`` overlap: touching ranges do NOT overlap."""
    return not (end_a <= start_b or start_a >= end_b)


def date_ranges_overlap(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    """Inclusive ``[start, end]`` overlap: sharing a single instant counts."""
    return not (end_a < start_b or start_a > end_b)


def _is_complete(candidate: SlotProposal) -> bool:
    return (
        bool(candidate.field_id)
        and candidate.day_of_week is not None
        and candidate.start_time is not None
        and candidate.end_time is not None
    )


async def check_conflicts_for_slot(
    store: SlotStore,
    candidate: SlotProposal,
    event_start: str | datetime | None,
    event_end: str | datetime | None,
    ignore_event_id: str | None = None,
) -> list[Conflict]:
    """Return existing bookings on the candidate's field that would collide.

    Only weekly (repeating) bookings are compared. A booking collides when
    it falls on the same weekday, its minute range overlaps the
    candidate's, and its owning event's date range overlaps
    ``[event_start, event_end]``. Slots owned by *ignore_event_id* are
    skipped so an event can be re-checked while it is being edited.

    An incomplete candidate is not an error: nothing is checked and ``[]`` is
    returned. Failures listing the field's slots propagate; an owning event
    that cannot be resolved only drops that one slot from consideration.
    """
    range_start = parse_local_datetime(event_start)
    range_end = parse_local_datetime(event_end)
    if not _is_complete(candidate) or range_start is None or range_end is None:
        logger.debug("Skipping conflict check for incomplete slot %s", candidate)
        return []

    day = normalize_day_of_week(candidate.day_of_week)
    existing = await store.list_slots_for_field(candidate.field_id, day)

    # Per-call memo of owning events.
    events: dict[str, Event | None] = {}
    conflicts: list[Conflict] = []

    for slot in existing:
        # One-off bookings are not weekly slots.
        if not slot.repeating:
            continue
        if ignore_event_id is not None and slot.event_id == ignore_event_id:
            continue
        if slot.day_of_week is not None and normalize_day_of_week(slot.day_of_week) != day:
            continue
        if slot.start_time_minutes is None or slot.end_time_minutes is None:
            continue
        if not minutes_overlap(
            candidate.start_time,
            candidate.end_time,
            slot.start_time_minutes,
            slot.end_time_minutes,
        ):
            continue

        event = await _resolve_event(store, slot, events)
        if event is None:
            continue

        other_start = parse_local_datetime(event.start)
        other_end = parse_local_datetime(event.end)
        if other_start is None or other_end is None:
            continue
        if not date_ranges_overlap(range_start, range_end, other_start, other_end):
            continue

        logger.info(
            "Slot %s on field %s (%s %s-%s) conflicts with %s",
            slot.id,
            candidate.field_id,
            weekday_label(day),
            minutes_to_time_string(slot.start_time_minutes),
            minutes_to_time_string(slot.end_time_minutes),
            event.name,
        )
        conflicts.append(Conflict(schedule=slot, event=event))

    return conflicts


async def _resolve_event(
    store: SlotStore, slot: TimeSlot, cache: dict[str, Event | None]
) -> Event | None:
    if not slot.event_id:
        return None
    if slot.event_id in cache:
        return cache[slot.event_id]

    try:
        event = await store.get_event_by_id(slot.event_id)
    except Exception:
        logger.warning(
            "Could not load event %s for slot %s; treating as free",
            slot.event_id,
            slot.id,
            exc_info=True,
        )
        event = None

    cache[slot.event_id] = event
    return event
