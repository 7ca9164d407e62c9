"""Domain event handlers: wired up at application startup."""

from __future__ import annotations

import logging

from carhire.domain.bus import EventBus
from carhire.domain.events import (
    BookingCreated,
    BookingRemoved,
    BookingStatusChanged,
    BookingUpdated,
)
from carhire.domain.models import TimelineEntry, TimelineEntryType
from carhire.repos.memory import TimelineRepository

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires booking-event handlers to the bus; keeps the per-booking audit trail."""

    def __init__(self, bus: EventBus, timeline_repo: TimelineRepository) -> None:
        self.bus = bus
        self.timeline_repo = timeline_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(BookingCreated, self.on_booking_created)
        self.bus.subscribe(BookingUpdated, self.on_booking_updated)
        self.bus.subscribe(BookingStatusChanged, self.on_status_changed)
        self.bus.subscribe(BookingRemoved, self.on_booking_removed)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_booking_created(self, event: BookingCreated) -> None:
        logger.info("booking %s created for vehicle %s", event.booking_id, event.vehicle_id)
        self.timeline_repo.add(
            TimelineEntry(
                booking_id=event.booking_id,
                type=TimelineEntryType.CREATED,
                payload={"vehicle_id": event.vehicle_id},
            )
        )

    def on_booking_updated(self, event: BookingUpdated) -> None:
        if not event.changes:
            return
        logger.info("booking %s updated: %s", event.booking_id, sorted(event.changes))
        self.timeline_repo.add(
            TimelineEntry(
                booking_id=event.booking_id,
                type=TimelineEntryType.UPDATED,
                payload={"changes": event.changes},
            )
        )

    def on_status_changed(self, event: BookingStatusChanged) -> None:
        # Repeated narrowing to the same status is not an audit event
        if event.previous == event.current:
            return
        logger.info(
            "booking %s status %s -> %s", event.booking_id, event.previous, event.current
        )
        self.timeline_repo.add(
            TimelineEntry(
                booking_id=event.booking_id,
                type=TimelineEntryType.STATUS_CHANGED,
                payload={"from": str(event.previous), "to": str(event.current)},
            )
        )

    def on_booking_removed(self, event: BookingRemoved) -> None:
        logger.info("booking %s removed", event.booking_id)
        self.timeline_repo.delete_for_booking(event.booking_id)
