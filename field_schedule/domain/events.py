"""Domain events emitted during the slot lifecycle."""

from __future__ import annotations

from pydantic import BaseModel


class SlotScheduled(BaseModel):
    """Fired when a slot is created or edited."""

    slot_id: str
    field_id: str
    event_id: str | None = None


class SlotRemoved(BaseModel):
    """Fired after a slot has been deleted."""

    slot_id: str
    field_id: str | None = None


class EventRemoved(BaseModel):
    """Fired when an owning event is deleted; its slots go with it."""

    event_id: str
