"""Domain-event handlers — wired up at application startup."""

from __future__ import annotations

import logging

from field_schedule.domain.bus import EventBus
from field_schedule.domain.events import EventRemoved, SlotRemoved, SlotScheduled
from field_schedule.repos.memory import EventRepository, TimeSlotRepository
from field_schedule.services.timeutils import minutes_to_time_string, weekday_label

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires lifecycle handlers to the bus with access to the repositories."""

    def __init__(
        self,
        bus: EventBus,
        event_repo: EventRepository,
        slot_repo: TimeSlotRepository,
    ) -> None:
        self.bus = bus
        self.event_repo = event_repo
        self.slot_repo = slot_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(SlotScheduled, self.on_slot_scheduled)
        self.bus.subscribe(SlotRemoved, self.on_slot_removed)
        self.bus.subscribe(EventRemoved, self.on_event_removed)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_slot_scheduled(self, message: SlotScheduled) -> None:
        slot = self.slot_repo.get(message.slot_id)
        if slot is None:
            return

        if slot.repeating and slot.day_of_week is not None:
            logger.info(
                "Scheduled weekly slot %s on field %s: %s %s-%s",
                slot.id,
                message.field_id,
                weekday_label(slot.day_of_week),
                minutes_to_time_string(slot.start_time_minutes or 0),
                minutes_to_time_string(slot.end_time_minutes or 0),
            )
        else:
            logger.info(
                "Scheduled one-off slot %s on field %s at %s",
                slot.id,
                message.field_id,
                slot.start_date,
            )

    def on_slot_removed(self, message: SlotRemoved) -> None:
        logger.info("Removed slot %s from field %s", message.slot_id, message.field_id)

    def on_event_removed(self, message: EventRemoved) -> None:
        # Slots never outlive their owning event.
        for slot in self.slot_repo.list_for_event(message.event_id):
            self.slot_repo.delete(slot.id)
            self.bus.publish(
                SlotRemoved(slot_id=slot.id, field_id=slot.scheduled_field_id)
            )
        self.event_repo.delete(message.event_id)
