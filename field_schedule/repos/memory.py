"""In-memory repositories for events and time slots."""

from __future__ import annotations

from field_schedule.domain.models import Event, EventType, TimeSlot
from field_schedule.errors import SlotStoreError
from field_schedule.services.timeutils import normalize_day_of_week


class EventRepository:
    """Dict-backed store for Event instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Event] = {}

    def add(self, event: Event) -> None:
        self._store[event.id] = event

    def get(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    def list_all(self) -> list[Event]:
        return list(self._store.values())

    def delete(self, event_id: str) -> None:
        self._store.pop(event_id, None)


class TimeSlotRepository:
    """Dict-backed store for TimeSlot instances, keyed by id.

    Insertion order is preserved, so listings come back in creation order.
    """

    def __init__(self) -> None:
        self._store: dict[str, TimeSlot] = {}

    def add(self, slot: TimeSlot) -> None:
        self._store[slot.id] = slot

    def get(self, slot_id: str) -> TimeSlot | None:
        return self._store.get(slot_id)

    def list_all(self) -> list[TimeSlot]:
        return list(self._store.values())

    def list_for_field(
        self, field_id: str, day_of_week: int | None = None
    ) -> list[TimeSlot]:
        slots = [s for s in self._store.values() if s.scheduled_field_id == field_id]
        if day_of_week is None:
            return slots
        day = normalize_day_of_week(day_of_week)
        return [
            s
            for s in slots
            if s.day_of_week is not None and normalize_day_of_week(s.day_of_week) == day
        ]

    def list_for_event(self, event_id: str) -> list[TimeSlot]:
        return [s for s in self._store.values() if s.event_id == event_id]

    def delete(self, slot_id: str) -> None:
        self._store.pop(slot_id, None)


class RepositorySlotStore:
    """Exposes the repositories through the async store interface used by the
    conflict detector."""

    def __init__(self, event_repo: EventRepository, slot_repo: TimeSlotRepository) -> None:
        self.event_repo = event_repo
        self.slot_repo = slot_repo

    async def list_slots_for_field(
        self, field_id: str, day_of_week: int | None = None
    ) -> list[TimeSlot]:
        try:
            return self.slot_repo.list_for_field(field_id, day_of_week)
        except Exception as exc:
            raise SlotStoreError(f"Could not list slots for field {field_id}") from exc

    async def get_event_by_id(self, event_id: str) -> Event | None:
        try:
            return self.event_repo.get(event_id)
        except Exception as exc:
            raise SlotStoreError(f"Could not load event {event_id}") from exc


# ---------------------------------------------------------------------------
# Seed data – a spring league and a weekly rental sharing one field
# ---------------------------------------------------------------------------


def seed_sample_data(event_repo: EventRepository, slot_repo: TimeSlotRepository) -> None:
    league = Event(
        name="Spring Rec League",
        event_type=EventType.LEAGUE,
        start="2026-03-02T00:00:00",
        end="2026-05-31T23:59:59",
    )
    event_repo.add(league)
    # Tuesday and Thursday evenings, 18:00-20:00 on field 1
    for day in (1, 3):
        slot_repo.add(
            TimeSlot(
                day_of_week=day,
                start_time_minutes=18 * 60,
                end_time_minutes=20 * 60,
                repeating=True,
                start_date=league.start,
                end_date=league.end,
                scheduled_field_id="field-1",
                event_id=league.id,
                timezone="America/Denver",
            )
        )

    rental = Event(
        name="Saturday morning rental",
        event_type=EventType.RENTAL,
        start="2026-01-03T00:00:00",
        end="2026-12-26T23:59:59",
    )
    event_repo.add(rental)
    slot_repo.add(
        TimeSlot(
            day_of_week=5,
            start_time_minutes=9 * 60,
            end_time_minutes=11 * 60,
            repeating=True,
            start_date=rental.start,
            scheduled_field_id="field-1",
            event_id=rental.id,
            price=4500,
            timezone="America/Denver",
        )
    )
