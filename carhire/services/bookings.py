"""Booking lifecycle: create, update, status transitions and removal."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from carhire.domain.bus import EventBus
from carhire.domain.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
    validation_message,
)
from carhire.domain.events import (
    BookingCreated,
    BookingRemoved,
    BookingStatusChanged,
    BookingUpdated,
)
from carhire.domain.models import (
    Booking,
    BookingOut,
    BookingStatus,
    Client,
    ClientStatus,
    ClientSummary,
    TERMINAL_STATUSES,
    VehicleSummary,
)
from carhire.repos.memory import BookingRepository, ClientRepository, VehicleRepository
from carhire.services.conflicts import has_conflict
from carhire.services.dates import parse_calendar_date
from carhire.services.locks import VehicleLocks
from carhire.services.normalize import coerce_ref

logger = logging.getLogger(__name__)

MISSING_FIELDS = "Missing required fields: client, vehicle, startDate, endDate"
VEHICLE_UNAVAILABLE = "Vehicle is already booked during the selected dates"
INVALID_STATUS = "Invalid booking status"

# Fields whose change is recorded on the booking timeline
_TRACKED_FIELDS = ("client_id", "vehicle_id", "start_date", "end_date", "status")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class BookingLifecycleManager:
    """Owns every write to booking records.

    Each write that can introduce an overlap runs its conflict check and its
    write while holding the vehicle's lock, so at most one of several
    concurrent writers can commit an overlapping interval.
    """

    def __init__(
        self,
        booking_repo: BookingRepository,
        client_repo: ClientRepository,
        vehicle_repo: VehicleRepository,
        bus: EventBus,
        locks: VehicleLocks | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.booking_repo = booking_repo
        self.client_repo = client_repo
        self.vehicle_repo = vehicle_repo
        self.bus = bus
        self.locks = locks or VehicleLocks()
        self._today = today

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(self, client: Any, vehicle: Any, start_date: Any, end_date: Any) -> BookingOut:
        client_id, vehicle_id = coerce_ref(client), coerce_ref(vehicle)
        if not client_id or not vehicle_id or _is_blank(start_date) or _is_blank(end_date):
            raise ValidationError(MISSING_FIELDS)

        self._check_references(client_id, vehicle_id, action="create")
        start, end = self._parse_interval(start_date, end_date)
        if start < self._today():
            raise ValidationError("Start date cannot be in the past")
        self._check_order(start, end)

        with self.locks.hold(vehicle_id):
            self._ensure_free(vehicle_id, start, end)
            booking = self.booking_repo.add(
                Booking(
                    client_id=client_id,
                    vehicle_id=vehicle_id,
                    start_date=start,
                    end_date=end,
                    status=BookingStatus.ACTIVE,
                )
            )

        self.bus.publish(BookingCreated(booking_id=booking.id, vehicle_id=vehicle_id))
        return self.present(booking)

    def update(
        self,
        booking_id: str,
        client: Any,
        vehicle: Any,
        start_date: Any,
        end_date: Any,
        status: Any = None,
    ) -> BookingOut:
        """Replace client, vehicle and interval, re-running every check but the past-date one.

        *status* is written through as given; an unknown value is rejected by
        the stored model, not here.
        """
        self._require_booking(booking_id)

        client_id, vehicle_id = coerce_ref(client), coerce_ref(vehicle)
        if not client_id or not vehicle_id or _is_blank(start_date) or _is_blank(end_date):
            raise ValidationError(MISSING_FIELDS)

        self._check_references(client_id, vehicle_id, action="update")
        start, end = self._parse_interval(start_date, end_date)
        self._check_order(start, end)

        fields: dict[str, Any] = {
            "client_id": client_id,
            "vehicle_id": vehicle_id,
            "start_date": start,
            "end_date": end,
        }
        if not _is_blank(status):
            fields["status"] = status

        with self._locked_booking(booking_id, vehicle_id) as current:
            self._ensure_free(vehicle_id, start, end, exclude_booking_id=booking_id)
            try:
                updated = self.booking_repo.update(booking_id, **fields)
            except PydanticValidationError as exc:
                if any(err["loc"] and err["loc"][0] == "status" for err in exc.errors()):
                    raise ValidationError(INVALID_STATUS) from None
                raise ValidationError(validation_message(exc)) from None
            if updated is None:
                raise NotFoundError("Booking not found")

        changes = {
            name: [str(getattr(current, name)), str(getattr(updated, name))]
            for name in _TRACKED_FIELDS
            if getattr(current, name) != getattr(updated, name)
        }
        self.bus.publish(BookingUpdated(booking_id=booking_id, changes=changes))
        return self.present(updated)

    def update_status(self, booking_id: str, status: Any) -> BookingOut:
        """Move a booking to *status*.

        Narrowing to Completed/Cancelled never needs an overlap check and is
        idempotent. Moving a terminal booking back to Active re-runs the
        conflict check against the vehicle's other Active bookings.
        """
        try:
            new_status = BookingStatus(status)
        except (ValueError, TypeError):
            raise ValidationError(INVALID_STATUS) from None

        with self._locked_booking(booking_id) as current:
            if new_status == BookingStatus.ACTIVE and current.status in TERMINAL_STATUSES:
                if has_conflict(
                    self.booking_repo,
                    current.vehicle_id,
                    current.start_date,
                    current.end_date,
                    exclude_booking_id=booking_id,
                ):
                    logger.info(
                        "refused to reactivate booking %s: vehicle %s is taken",
                        booking_id,
                        current.vehicle_id,
                    )
                    raise ConflictError(
                        "Booking cannot be reactivated: " + VEHICLE_UNAVAILABLE.lower()
                    )
            updated = self.booking_repo.update(booking_id, status=new_status)
            if updated is None:
                raise NotFoundError("Booking not found")

        self.bus.publish(
            BookingStatusChanged(
                booking_id=booking_id, previous=current.status, current=new_status
            )
        )
        return self.present(updated)

    def remove(self, booking_id: str) -> None:
        if not self.booking_repo.delete(booking_id):
            raise NotFoundError("Booking not found")
        self.bus.publish(BookingRemoved(booking_id=booking_id))

    def get(self, booking_id: str) -> BookingOut:
        return self.present(self._require_booking(booking_id))

    def list_all(self) -> list[BookingOut]:
        return [self.present(b) for b in self.booking_repo.list_all()]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def present(self, booking: Booking) -> BookingOut:
        """Resolve client and vehicle references to their display fields."""
        client = self.client_repo.get(booking.client_id)
        vehicle = self.vehicle_repo.get(booking.vehicle_id)
        return BookingOut(
            id=booking.id,
            client=ClientSummary.model_validate(client.model_dump()) if client else None,
            vehicle=VehicleSummary.model_validate(vehicle.model_dump()) if vehicle else None,
            start_date=booking.start_date,
            end_date=booking.end_date,
            status=booking.status,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )

    def _require_booking(self, booking_id: str) -> Booking:
        booking = self.booking_repo.get(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        return booking

    def _check_references(self, client_id: str, vehicle_id: str, action: str) -> Client:
        client = self.client_repo.get(client_id)
        if client is None:
            raise NotFoundError("Client not found")
        if self.vehicle_repo.get(vehicle_id) is None:
            raise NotFoundError("Vehicle not found")
        if client.status == ClientStatus.SUSPENDED:
            raise ForbiddenError(
                f"Cannot {action} booking for suspended client. "
                "Client account is currently suspended."
            )
        return client

    @staticmethod
    def _parse_interval(start_date: Any, end_date: Any) -> tuple[date, date]:
        try:
            return parse_calendar_date(start_date), parse_calendar_date(end_date)
        except (ValueError, OverflowError):
            raise ValidationError("Invalid date format") from None

    @staticmethod
    def _check_order(start: date, end: date) -> None:
        if end <= start:
            raise ValidationError("End date must be after start date")

    def _ensure_free(
        self,
        vehicle_id: str,
        start: date,
        end: date,
        exclude_booking_id: str | None = None,
    ) -> None:
        if has_conflict(self.booking_repo, vehicle_id, start, end, exclude_booking_id):
            logger.info(
                "vehicle %s already booked between %s and %s", vehicle_id, start, end
            )
            raise ConflictError(VEHICLE_UNAVAILABLE)

    @contextmanager
    def _locked_booking(self, booking_id: str, *vehicle_ids: str) -> Iterator[Booking]:
        """Hold the locks of the booking's vehicle (plus *vehicle_ids*) and yield it fresh.

        Retries if the booking was moved to another vehicle between the read
        and the lock.
        """
        while True:
            seen = self._require_booking(booking_id)
            with self.locks.hold(seen.vehicle_id, *vehicle_ids):
                current = self._require_booking(booking_id)
                if current.vehicle_id == seen.vehicle_id:
                    yield current
                    return
