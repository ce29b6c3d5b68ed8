"""Tests for resolving a slot's next concrete occurrence."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from field_schedule.domain.models import TimeSlot
from field_schedule.services.occurrence import (
    align_date_to_day,
    next_occurrence,
    upcoming_occurrences,
)


def _weekly(**overrides) -> TimeSlot:
    """Tuesdays 09:00-10:00 from Monday 2024-01-01, open-ended."""
    defaults = dict(
        day_of_week=1,
        start_time_minutes=540,
        end_time_minutes=600,
        repeating=True,
        start_date="2024-01-01",
        end_date=None,
    )
    defaults.update(overrides)
    return TimeSlot(**defaults)


# ---------------------------------------------------------------------------
# align_date_to_day
# ---------------------------------------------------------------------------


def test_align_keeps_matching_day_and_zeroes_time():
    tuesday = datetime(2024, 1, 2, 15, 45)
    assert align_date_to_day(tuesday, 1) == datetime(2024, 1, 2)


def test_align_moves_forward_across_week_boundary():
    wednesday = datetime(2024, 1, 3, 8, 0)
    assert align_date_to_day(wednesday, 1) == datetime(2024, 1, 9)
    assert align_date_to_day(wednesday, 6) == datetime(2024, 1, 7)


# ---------------------------------------------------------------------------
# Recurring slots
# ---------------------------------------------------------------------------


def test_weekly_slot_rolls_to_following_week():
    """Reference on Wednesday: this week's Tuesday has passed."""
    assert next_occurrence(_weekly(), datetime(2024, 1, 3)) == datetime(2024, 1, 9, 9, 0)


def test_weekly_slot_same_day_before_start_time():
    assert next_occurrence(_weekly(), datetime(2024, 1, 2, 8, 0)) == datetime(
        2024, 1, 2, 9, 0
    )


def test_weekly_slot_same_day_after_start_time_rolls_a_week():
    assert next_occurrence(_weekly(), datetime(2024, 1, 2, 10, 0)) == datetime(
        2024, 1, 9, 9, 0
    )


def test_weekly_slot_exactly_at_start_is_current():
    reference = datetime(2024, 1, 2, 9, 0)
    assert next_occurrence(_weekly(), reference) == reference


def test_weekly_slot_closed_window_returns_none():
    slot = _weekly(end_date="2024-01-05")
    assert next_occurrence(slot, datetime(2024, 1, 6)) is None


def test_weekly_slot_roll_past_end_date_returns_none():
    slot = _weekly(end_date="2024-01-05")
    assert next_occurrence(slot, datetime(2024, 1, 2, 10, 0)) is None


def test_weekly_slot_occurrence_past_end_date_returns_none():
    """Reference is inside the window but the next Tuesday is not."""
    slot = _weekly(end_date="2024-01-08")
    assert next_occurrence(slot, datetime(2024, 1, 3)) is None


def test_reference_before_start_date_clamps_to_start():
    slot = _weekly(start_date="2024-02-01")  # a Thursday
    assert next_occurrence(slot, datetime(2024, 1, 1)) == datetime(2024, 2, 6, 9, 0)


def test_day_derived_from_start_date_when_missing():
    slot = _weekly(day_of_week=None, start_time_minutes=None, start_date="2024-01-03T18:30:00")
    # Wednesday at the start's own time of day
    assert next_occurrence(slot, datetime(2024, 1, 1)) == datetime(2024, 1, 3, 18, 30)
    assert next_occurrence(slot, datetime(2024, 1, 4)) == datetime(2024, 1, 10, 18, 30)


def test_out_of_range_day_is_normalized():
    slot = _weekly(day_of_week=8)
    assert next_occurrence(slot, datetime(2024, 1, 3)) == datetime(2024, 1, 9, 9, 0)


def test_repeating_wednesday_evening():
    slot = TimeSlot(
        id="slot_3",
        day_of_week=2,
        repeating=True,
        start_date="2023-12-20T00:00:00",
        start_time_minutes=18 * 60,
        end_time_minutes=19 * 60,
    )
    assert next_occurrence(slot, datetime(2024, 1, 1, 12, 0)) == datetime(2024, 1, 3, 18, 0)


def test_repeating_slot_respects_end_date():
    slot = TimeSlot(
        id="slot_4",
        day_of_week=2,
        repeating=True,
        start_date="2023-12-01T00:00:00",
        end_date="2023-12-31T00:00:00",
        start_time_minutes=9 * 60,
        end_time_minutes=10 * 60,
    )
    assert next_occurrence(slot, datetime(2024, 1, 1, 12, 0)) is None


def test_aware_reference_is_compared_on_wall_clock():
    reference = datetime(2024, 1, 2, 8, 0, tzinfo=timezone.utc)
    assert next_occurrence(_weekly(), reference) == datetime(2024, 1, 2, 9, 0)


@pytest.mark.parametrize("day", range(7))
def test_open_ended_weekly_slot_always_lands_on_its_day(day):
    slot = _weekly(day_of_week=day, start_time_minutes=17 * 60 + 15)
    reference = datetime(2024, 3, 1, 12, 0)
    for offset in range(14):
        occurrence = next_occurrence(slot, reference + timedelta(hours=13 * offset))
        assert occurrence is not None
        assert occurrence.weekday() == day
        assert (occurrence.hour, occurrence.minute) == (17, 15)


def test_occurrences_are_monotonic_in_whole_weeks():
    slot = _weekly()
    first = next_occurrence(slot, datetime(2024, 1, 3))
    later = next_occurrence(slot, datetime(2024, 2, 14, 11, 0))
    assert first <= later
    assert (later - first) % timedelta(days=7) == timedelta(0)


def test_never_returns_instant_after_end_date():
    slot = _weekly(end_date="2024-02-01T00:00:00")
    end = datetime(2024, 2, 1)
    reference = datetime(2024, 1, 1)
    while reference <= end + timedelta(days=7):
        occurrence = next_occurrence(slot, reference)
        if reference > end:
            assert occurrence is None
        if occurrence is not None:
            assert occurrence <= end
        reference += timedelta(days=1)


# ---------------------------------------------------------------------------
# One-off slots
# ---------------------------------------------------------------------------


def test_one_off_future_slot_returns_its_start():
    slot = TimeSlot(id="slot_1", day_of_week=0, repeating=False, start_date="2024-01-02T18:00:00")
    assert next_occurrence(slot, datetime(2024, 1, 1, 12, 0)) == datetime(2024, 1, 2, 18, 0)


def test_one_off_past_slot_disappears():
    slot = TimeSlot(id="slot_2", day_of_week=1, repeating=False, start_date="2023-12-15T10:00:00")
    assert next_occurrence(slot, datetime(2024, 1, 1, 12, 0)) is None


def test_one_off_start_minutes_override_time_of_day():
    slot = TimeSlot(repeating=False, start_date="2024-01-10T18:00:00", start_time_minutes=600)
    assert next_occurrence(slot, datetime(2024, 1, 1)) == datetime(2024, 1, 10, 10, 0)


def test_one_off_never_reschedules():
    slot = TimeSlot(repeating=False, start_date="2024-01-10T18:00:00")
    assert next_occurrence(slot, datetime(2024, 1, 10, 18, 0)) == datetime(2024, 1, 10, 18, 0)
    assert next_occurrence(slot, datetime(2024, 1, 10, 18, 1)) is None


# ---------------------------------------------------------------------------
# Undated / malformed slots
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("start_date", [None, "", "sometime soon"])
def test_undated_slot_has_no_occurrence(start_date):
    assert next_occurrence(_weekly(start_date=start_date), datetime(2024, 1, 3)) is None


# ---------------------------------------------------------------------------
# upcoming_occurrences
# ---------------------------------------------------------------------------


def test_upcoming_open_ended():
    assert upcoming_occurrences(_weekly(), datetime(2024, 1, 3), count=3) == [
        datetime(2024, 1, 9, 9, 0),
        datetime(2024, 1, 16, 9, 0),
        datetime(2024, 1, 23, 9, 0),
    ]


def test_upcoming_stops_at_end_date():
    slot = _weekly(end_date="2024-01-20")
    assert upcoming_occurrences(slot, datetime(2024, 1, 3), count=4) == [
        datetime(2024, 1, 9, 9, 0),
        datetime(2024, 1, 16, 9, 0),
    ]


def test_upcoming_one_off_yields_single_instant():
    slot = TimeSlot(repeating=False, start_date="2024-01-10T18:00:00")
    assert upcoming_occurrences(slot, datetime(2024, 1, 1), count=5) == [
        datetime(2024, 1, 10, 18, 0)
    ]


def test_upcoming_expired_slot_is_empty():
    slot = _weekly(end_date="2024-01-05")
    assert upcoming_occurrences(slot, datetime(2024, 2, 1)) == []
