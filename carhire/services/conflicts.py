"""Service for detecting double-bookings of a vehicle."""

from __future__ import annotations

from datetime import date

from carhire.domain.models import Booking, BookingStatus
from carhire.repos.memory import BookingRepository


def find_conflicts(
    new_start: date,
    new_end: date,
    existing_bookings: list[Booking],
) -> list[Booking]:
    """Return existing bookings whose interval overlaps the given one.

    Intervals are half-open: conflict if new_start < existing.end_date AND
    existing.start_date < new_end. A booking ending on the day another begins
    is NOT a conflict.
    """
    return [
        booking
        for booking in existing_bookings
        if new_start < booking.end_date and booking.start_date < new_end
    ]


def has_conflict(
    booking_repo: BookingRepository,
    vehicle_id: str,
    start: date,
    end: date,
    exclude_booking_id: str | None = None,
) -> bool:
    """True when an Active booking for *vehicle_id* overlaps [start, end)."""
    candidates = booking_repo.find(
        vehicle_id=vehicle_id,
        status=BookingStatus.ACTIVE,
        exclude_id=exclude_booking_id,
    )
    return bool(find_conflicts(start, end, candidates))
