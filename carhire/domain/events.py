"""Domain events emitted after booking writes are committed."""

from __future__ import annotations

from pydantic import BaseModel

from carhire.domain.models import BookingStatus


class BookingCreated(BaseModel):
    """Fired when a new Booking is persisted."""

    booking_id: str
    vehicle_id: str


class BookingUpdated(BaseModel):
    """Fired after a full update; ``changes`` maps field name to ``[old, new]``."""

    booking_id: str
    changes: dict[str, list[str]]


class BookingStatusChanged(BaseModel):
    booking_id: str
    previous: BookingStatus
    current: BookingStatus


class BookingRemoved(BaseModel):
    booking_id: str
