"""Domain models for the car-hire booking system."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import StrEnum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

PHONE_PATTERN = r"^[0-9+\-\s()]+$"
LICENSE_PLATE_PATTERN = r"^[A-Z0-9\s-]+$"
TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"


class ClientStatus(StrEnum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"


class VehicleStatus(StrEnum):
    AVAILABLE = "Available"
    BOOKED = "Booked"
    MAINTENANCE = "Maintenance"


class BookingStatus(StrEnum):
    ACTIVE = "Active"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED})


class TimelineEntryType(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    STATUS_CHANGED = "status_changed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class ApiModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Stored documents
# ---------------------------------------------------------------------------


class Client(ApiModel):
    id: str = Field(default_factory=_new_id)
    full_name: str = Field(min_length=2)
    id_or_passport: str = Field(min_length=1)
    phone: str = Field(min_length=1, pattern=PHONE_PATTERN)
    address: str | None = Field(default=None, max_length=200)
    citizenship: str = Field(min_length=1)
    license_number: str = Field(min_length=1)
    status: ClientStatus = ClientStatus.ACTIVE
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Vehicle(ApiModel):
    id: str = Field(default_factory=_new_id)
    make: str = Field(min_length=2)
    model: str = Field(min_length=2)
    year: int = Field(ge=1900)
    color: str | None = Field(default=None, max_length=50)
    license_plate: str = Field(min_length=1, pattern=LICENSE_PLATE_PATTERN)
    status: VehicleStatus = VehicleStatus.AVAILABLE
    date_out: date | None = None
    time_out: str | None = Field(default=None, pattern=TIME_PATTERN)
    date_in: date | None = None
    time_in: str | None = Field(default=None, pattern=TIME_PATTERN)
    daily_rate: float = Field(ge=0)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("year")
    @classmethod
    def _year_not_in_future(cls, value: int) -> int:
        if value > date.today().year + 1:
            raise ValueError("Year cannot be in the future")
        return value

    @model_validator(mode="after")
    def _date_out_before_date_in(self) -> Vehicle:
        if self.date_out and self.date_in and self.date_out > self.date_in:
            raise ValueError("Date out cannot be after date in")
        return self


class Booking(ApiModel):
    id: str = Field(default_factory=_new_id)
    client_id: str
    vehicle_id: str
    start_date: date
    end_date: date
    status: BookingStatus = BookingStatus.ACTIVE
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _end_after_start(self) -> Booking:
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class TimelineEntry(ApiModel):
    id: str = Field(default_factory=_new_id)
    booking_id: str
    timestamp: datetime = Field(default_factory=_utcnow)
    type: TimelineEntryType
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------

EntityRef = str | dict[str, Any] | None


class BookingCreateRequest(ApiModel):
    client: EntityRef = None
    vehicle: EntityRef = None
    start_date: str | None = None
    end_date: str | None = None


class BookingUpdateRequest(BookingCreateRequest):
    status: str | None = None


class ClientSummary(ApiModel):
    id: str
    full_name: str
    phone: str
    address: str | None = None


class VehicleSummary(ApiModel):
    id: str
    make: str
    model: str
    license_plate: str
    daily_rate: float
    color: str | None = None


class BookingOut(ApiModel):
    """A booking with its client and vehicle resolved to display fields."""

    id: str
    client: ClientSummary | None = None
    vehicle: VehicleSummary | None = None
    start_date: date
    end_date: date
    status: BookingStatus
    created_at: datetime
    updated_at: datetime


class ClientIn(ApiModel):
    full_name: str | None = None
    id_or_passport: str | None = None
    phone: str | None = None
    address: str | None = None
    citizenship: str | None = None
    license_number: str | None = None


class StatusRequest(ApiModel):
    status: str | None = None


class VehicleIn(ApiModel):
    make: str | None = None
    model: str | None = None
    year: int | None = None
    color: str | None = None
    license_plate: str | None = None
    status: str | None = None
    date_out: date | None = None
    time_out: str | None = None
    date_in: date | None = None
    time_in: str | None = None
    daily_rate: float | None = None


T = TypeVar("T")


class Envelope(ApiModel, Generic[T]):
    success: bool = True
    message: str | None = None
    count: int | None = None
    data: T | None = None
