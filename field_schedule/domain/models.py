"""Domain models for field scheduling: slots, owning events and conflicts."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from field_schedule.services.timeutils import (
    format_local_datetime,
    normalize_time,
    parse_local_datetime,
)

try:
    from enum import StrEnum
except ImportError:  # pragma: no cover - fallback for older Python runtimes

    class StrEnum(str, Enum):
        pass


class EventType(StrEnum):
    PICKUP = "pickup"
    TOURNAMENT = "tournament"
    LEAGUE = "league"
    RENTAL = "rental"


MINUTES_PER_DAY = 1440


def _new_id() -> str:
    return str(uuid.uuid4())


class _StorageModel(BaseModel):
    """Snake_case in Python, camelCase on the wire (the store's field names)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class TimeSlot(_StorageModel):
    """A stored slot, either weekly-recurring or one-off.

    Stored slots are deliberately lenient: the resolver and the conflict
    detector decline to compute on incomplete records rather than fail.
    Write paths go through :class:`TimeSlotCreate`.
    """

    id: str = Field(default_factory=_new_id)
    day_of_week: int | None = None
    start_time_minutes: int | None = None
    end_time_minutes: int | None = None
    repeating: bool = False
    start_date: str | None = None
    end_date: str | None = None
    scheduled_field_id: str | None = None
    event_id: str | None = None
    price: int | None = None
    timezone: str | None = None


class Event(_StorageModel):
    """The league, tournament, pickup game or rental that owns slots."""

    id: str = Field(default_factory=_new_id)
    name: str
    event_type: EventType = EventType.LEAGUE
    start: str
    end: str


class Conflict(BaseModel):
    schedule: TimeSlot
    event: Event


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class EventCreate(_StorageModel):
    name: str = Field(min_length=1)
    event_type: EventType = EventType.LEAGUE
    start: str
    end: str

    @model_validator(mode="after")
    def _valid_range(self) -> EventCreate:
        start = parse_local_datetime(self.start)
        end = parse_local_datetime(self.end)
        if start is None or end is None:
            raise ValueError("start and end must be valid local date-times")
        if end < start:
            raise ValueError("end must not be before start")
        self.start = format_local_datetime(start)
        self.end = format_local_datetime(end)
        return self


class TimeSlotCreate(_StorageModel):
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    start_time_minutes: int | None = Field(default=None, ge=0, lt=MINUTES_PER_DAY)
    end_time_minutes: int | None = Field(default=None, gt=0, lt=MINUTES_PER_DAY)
    repeating: bool = False
    start_date: str
    end_date: str | None = None
    scheduled_field_id: str = Field(min_length=1)
    event_id: str | None = None
    price: int | None = Field(default=None, ge=0)
    timezone: str | None = None

    @field_validator("start_time_minutes", "end_time_minutes", mode="before")
    @classmethod
    def _coerce_minutes(cls, value: object) -> object:
        if value is None:
            return None
        minutes = normalize_time(value)
        return value if minutes is None else minutes

    @model_validator(mode="after")
    def _check_invariants(self) -> TimeSlotCreate:
        if self.repeating:
            if (
                self.day_of_week is None
                or self.start_time_minutes is None
                or self.end_time_minutes is None
            ):
                raise ValueError(
                    "repeating slots need day_of_week, start_time_minutes and end_time_minutes"
                )
        if (
            self.start_time_minutes is not None
            and self.end_time_minutes is not None
            and self.end_time_minutes <= self.start_time_minutes
        ):
            raise ValueError("end_time_minutes must be after start_time_minutes")

        start = parse_local_datetime(self.start_date)
        if start is None:
            raise ValueError("start_date must be a valid local date-time")
        if self.end_date is not None:
            end = parse_local_datetime(self.end_date)
            if end is None:
                raise ValueError("end_date must be a valid local date-time")
            if end < start:
                raise ValueError("end_date must not be before start_date")
        return self

    def to_slot(self, slot_id: str | None = None) -> TimeSlot:
        data = self.model_dump()
        if slot_id is not None:
            data["id"] = slot_id
        return TimeSlot(**data)


class SlotProposal(_StorageModel):
    """A candidate weekly slot as collected by the scheduling form.

    Every field is optional; the conflict check skips incomplete proposals.
    """

    id: str | None = None
    field_id: str | None = None
    day_of_week: int | None = None
    start_time: int | None = None
    end_time: int | None = None
    timezone: str | None = None

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _coerce_minutes(cls, value: object) -> object:
        if value is None:
            return None
        minutes = normalize_time(value)
        return value if minutes is None else minutes


class ConflictCheckRequest(_StorageModel):
    candidate: SlotProposal
    event_start: str | None = None
    event_end: str | None = None
    ignore_event_id: str | None = None


class ConflictCheckResponse(BaseModel):
    conflicts: list[Conflict] = Field(default_factory=list)


class OccurrenceResponse(_StorageModel):
    slot_id: str
    next_occurrence: datetime | None = None
    upcoming: list[datetime] = Field(default_factory=list)
