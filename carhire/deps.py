"""Process-wide singletons and the FastAPI dependencies that hand them out."""

from __future__ import annotations

from carhire.config import get_settings
from carhire.domain.bus import EventBus
from carhire.domain.handlers import HandlerRegistry
from carhire.repos.memory import (
    BookingRepository,
    ClientRepository,
    InMemoryDatabase,
    TimelineRepository,
    VehicleRepository,
)
from carhire.services.bookings import BookingLifecycleManager
from carhire.services.clients import ClientService
from carhire.services.locks import VehicleLocks
from carhire.services.vehicles import VehicleService

settings = get_settings()

# ── Singletons (created at import time for simplicity) ────────────────
database = InMemoryDatabase()
database.connect()

event_bus = EventBus()
client_repo = ClientRepository(database)
vehicle_repo = VehicleRepository(database)
booking_repo = BookingRepository(database)
timeline_repo = TimelineRepository(database)

handler_registry = HandlerRegistry(bus=event_bus, timeline_repo=timeline_repo)

booking_manager = BookingLifecycleManager(
    booking_repo=booking_repo,
    client_repo=client_repo,
    vehicle_repo=vehicle_repo,
    bus=event_bus,
    locks=VehicleLocks(timeout=settings.VEHICLE_LOCK_TIMEOUT_SECONDS),
)
client_service = ClientService(client_repo)
vehicle_service = VehicleService(vehicle_repo)


def get_booking_manager() -> BookingLifecycleManager:
    return booking_manager


def get_timeline_repo() -> TimelineRepository:
    return timeline_repo


def get_client_service() -> ClientService:
    return client_service


def get_vehicle_service() -> VehicleService:
    return vehicle_service
