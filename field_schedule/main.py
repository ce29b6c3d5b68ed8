"""FastAPI application — entry point for the field scheduling service."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import FastAPI, HTTPException, Query

from field_schedule.config import Config
from field_schedule.domain.bus import EventBus
from field_schedule.domain.events import EventRemoved, SlotRemoved, SlotScheduled
from field_schedule.domain.handlers import HandlerRegistry
from field_schedule.domain.models import (
    ConflictCheckRequest,
    ConflictCheckResponse,
    Event,
    EventCreate,
    OccurrenceResponse,
    TimeSlot,
    TimeSlotCreate,
)
from field_schedule.errors import SlotStoreError
from field_schedule.repos.memory import (
    EventRepository,
    RepositorySlotStore,
    TimeSlotRepository,
    seed_sample_data,
)
from field_schedule.services.conflicts import check_conflicts_for_slot
from field_schedule.services.occurrence import next_occurrence, upcoming_occurrences

logging.basicConfig(level=Config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Field Scheduling Service")

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
event_repo = EventRepository()
slot_repo = TimeSlotRepository()
slot_store = RepositorySlotStore(event_repo, slot_repo)

handler_registry = HandlerRegistry(
    bus=event_bus,
    event_repo=event_repo,
    slot_repo=slot_repo,
)

if Config.SEED_SAMPLE_DATA:
    seed_sample_data(event_repo, slot_repo)


def _get_slot_or_404(slot_id: str) -> TimeSlot:
    slot = slot_repo.get(slot_id)
    if slot is None:
        raise HTTPException(status_code=404, detail="Slot not found")
    return slot


def _check_owner(payload: TimeSlotCreate) -> None:
    if payload.event_id is not None and event_repo.get(payload.event_id) is None:
        raise HTTPException(status_code=400, detail="Owning event not found")


# ── Events ────────────────────────────────────────────────────────────


@app.post("/events", response_model=Event, status_code=201)
def create_event(payload: EventCreate) -> Event:
    """Create a league, tournament, pickup game or rental."""
    event = Event(**payload.model_dump())
    event_repo.add(event)
    return event


@app.get("/events", response_model=list[Event])
def list_events() -> list[Event]:
    return event_repo.list_all()


@app.get("/events/{event_id}", response_model=Event)
def get_event(event_id: str) -> Event:
    event = event_repo.get(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@app.delete("/events/{event_id}", status_code=200)
def delete_event(event_id: str) -> dict:
    """Delete an event together with every slot scheduled under it."""
    if event_repo.get(event_id) is None:
        raise HTTPException(status_code=404, detail="Event not found")
    event_bus.publish(EventRemoved(event_id=event_id))
    return {"status": "deleted"}


# ── Slots ─────────────────────────────────────────────────────────────


@app.post("/slots", response_model=TimeSlot, status_code=201)
def create_slot(payload: TimeSlotCreate) -> TimeSlot:
    """Store a slot with its field association in one step."""
    _check_owner(payload)
    slot = payload.to_slot()
    slot_repo.add(slot)
    event_bus.publish(
        SlotScheduled(
            slot_id=slot.id, field_id=slot.scheduled_field_id, event_id=slot.event_id
        )
    )
    return slot


@app.get("/slots/{slot_id}", response_model=TimeSlot)
def get_slot(slot_id: str) -> TimeSlot:
    return _get_slot_or_404(slot_id)


@app.put("/slots/{slot_id}", response_model=TimeSlot)
def update_slot(slot_id: str, payload: TimeSlotCreate) -> TimeSlot:
    """Replace a slot's day, times, field or date range; the id is kept."""
    _get_slot_or_404(slot_id)
    _check_owner(payload)
    slot = payload.to_slot(slot_id=slot_id)
    slot_repo.add(slot)
    event_bus.publish(
        SlotScheduled(
            slot_id=slot.id, field_id=slot.scheduled_field_id, event_id=slot.event_id
        )
    )
    return slot


@app.delete("/slots/{slot_id}", status_code=200)
def delete_slot(slot_id: str) -> dict:
    slot = _get_slot_or_404(slot_id)
    slot_repo.delete(slot_id)
    event_bus.publish(SlotRemoved(slot_id=slot_id, field_id=slot.scheduled_field_id))
    return {"status": "deleted"}


@app.get("/fields/{field_id}/slots", response_model=list[TimeSlot])
def list_field_slots(
    field_id: str, day_of_week: int | None = Query(default=None, ge=0, le=6)
) -> list[TimeSlot]:
    return slot_repo.list_for_field(field_id, day_of_week)


@app.get("/slots/{slot_id}/occurrences", response_model=OccurrenceResponse)
def get_slot_occurrences(
    slot_id: str,
    reference: datetime | None = None,
    count: int = Query(
        default=Config.DEFAULT_OCCURRENCE_COUNT,
        ge=1,
        le=Config.MAX_OCCURRENCE_COUNT,
    ),
) -> OccurrenceResponse:
    """Project a slot onto its next concrete dates.

    *reference* defaults to the current local time; any UTC offset on it is
    ignored, the slot is compared on wall-clock time.
    """
    slot = _get_slot_or_404(slot_id)
    reference = reference or datetime.now()
    return OccurrenceResponse(
        slot_id=slot.id,
        next_occurrence=next_occurrence(slot, reference),
        upcoming=upcoming_occurrences(slot, reference, count),
    )


@app.post("/slots/check-conflicts", response_model=ConflictCheckResponse)
async def check_conflicts(payload: ConflictCheckRequest) -> ConflictCheckResponse:
    """Return existing bookings that would collide with a proposed weekly slot."""
    try:
        conflicts = await check_conflicts_for_slot(
            slot_store,
            payload.candidate,
            payload.event_start,
            payload.event_end,
            ignore_event_id=payload.ignore_event_id,
        )
    except SlotStoreError as exc:
        logger.error("Availability check failed: %s", exc)
        raise HTTPException(status_code=502, detail="Failed to check availability")
    return ConflictCheckResponse(conflicts=conflicts)
