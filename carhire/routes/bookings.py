"""Booking routes: thin wrappers over BookingLifecycleManager."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from carhire.deps import get_booking_manager, get_timeline_repo
from carhire.domain.models import (
    BookingCreateRequest,
    BookingOut,
    BookingUpdateRequest,
    Envelope,
    StatusRequest,
    TimelineEntry,
)
from carhire.repos.memory import TimelineRepository
from carhire.services.bookings import BookingLifecycleManager

router = APIRouter()


@router.post("", status_code=201, response_model=Envelope[BookingOut])
def create_booking(
    payload: BookingCreateRequest,
    manager: BookingLifecycleManager = Depends(get_booking_manager),
) -> Envelope[BookingOut]:
    booking = manager.create(
        payload.client, payload.vehicle, payload.start_date, payload.end_date
    )
    return Envelope(message="Booking created successfully", data=booking)


@router.get("", response_model=Envelope[list[BookingOut]])
def list_bookings(
    manager: BookingLifecycleManager = Depends(get_booking_manager),
) -> Envelope[list[BookingOut]]:
    """Return all bookings, newest first."""
    bookings = manager.list_all()
    return Envelope(count=len(bookings), data=bookings)


@router.get("/{booking_id}", response_model=Envelope[BookingOut])
def get_booking(
    booking_id: str,
    manager: BookingLifecycleManager = Depends(get_booking_manager),
) -> Envelope[BookingOut]:
    return Envelope(data=manager.get(booking_id))


@router.put("/{booking_id}", response_model=Envelope[BookingOut])
def update_booking(
    booking_id: str,
    payload: BookingUpdateRequest,
    manager: BookingLifecycleManager = Depends(get_booking_manager),
) -> Envelope[BookingOut]:
    booking = manager.update(
        booking_id,
        payload.client,
        payload.vehicle,
        payload.start_date,
        payload.end_date,
        payload.status,
    )
    return Envelope(message="Booking updated successfully", data=booking)


@router.put("/{booking_id}/status", response_model=Envelope[BookingOut])
def update_booking_status(
    booking_id: str,
    payload: StatusRequest,
    manager: BookingLifecycleManager = Depends(get_booking_manager),
) -> Envelope[BookingOut]:
    booking = manager.update_status(booking_id, payload.status)
    return Envelope(message="Booking status updated successfully", data=booking)


@router.delete("/{booking_id}", response_model=Envelope[None])
def delete_booking(
    booking_id: str,
    manager: BookingLifecycleManager = Depends(get_booking_manager),
) -> Envelope[None]:
    manager.remove(booking_id)
    return Envelope(message="Booking deleted successfully")


@router.get("/{booking_id}/timeline", response_model=Envelope[list[TimelineEntry]])
def get_booking_timeline(
    booking_id: str,
    manager: BookingLifecycleManager = Depends(get_booking_manager),
    timeline_repo: TimelineRepository = Depends(get_timeline_repo),
) -> Envelope[list[TimelineEntry]]:
    """Audit trail for one booking, oldest entry first."""
    manager.get(booking_id)
    entries = timeline_repo.list_for_booking(booking_id)
    return Envelope(count=len(entries), data=entries)
