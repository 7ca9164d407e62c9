"""In-memory document store and repositories for clients, vehicles and bookings."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime, timedelta, timezone
from typing import Any, Generic, TypeVar

from carhire.domain.errors import PersistenceError
from carhire.domain.models import (
    Booking,
    BookingStatus,
    Client,
    ClientStatus,
    TimelineEntry,
    Vehicle,
    VehicleStatus,
)

logger = logging.getLogger(__name__)

COLLECTIONS = ("clients", "vehicles", "bookings", "timeline")


class InMemoryDatabase:
    """Dict-backed document database with an explicit connection lifecycle.

    Collections are only reachable between ``connect()`` and ``disconnect()``;
    any access outside that window raises PersistenceError.
    Every read and write of a collection happens under one re-entrant lock;
    readers iterate over snapshots, never over the live dicts.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Any]] = {name: {} for name in COLLECTIONS}
        self._connected = False
        self.lock = threading.RLock()

    @property
    def is_connected(self) -> bool:
        return self._connected

    def connect(self) -> None:
        if self._connected:
            return
        self._connected = True
        logger.info("in-memory database connected")

    def disconnect(self) -> None:
        if not self._connected:
            return
        self._connected = False
        logger.info("in-memory database disconnected")

    def collection(self, name: str) -> dict[str, Any]:
        if not self._connected:
            raise PersistenceError(f"database is not connected (collection {name!r})")
        try:
            return self._collections[name]
        except KeyError:
            raise PersistenceError(f"unknown collection {name!r}") from None

    def documents(self, name: str) -> list[Any]:
        """Snapshot of a collection's documents, safe to iterate while others write."""
        with self.lock:
            return list(self.collection(name).values())

    def reset(self) -> None:
        """Drop every document. Used by tests and the demo seeder."""
        with self.lock:
            for store in self._collections.values():
                store.clear()


M = TypeVar("M", Client, Vehicle, Booking)


class DocumentRepository(Generic[M]):
    """find/create/update/delete by id over one collection.

    Documents are copied on the way in and out, so callers never hold a
    reference to stored state. ``locked()`` keeps a read-check-write
    sequence atomic with respect to every other repository call.
    """

    collection_name: str

    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    @property
    def _store(self) -> dict[str, M]:
        return self._db.collection(self.collection_name)

    def _documents(self) -> list[M]:
        return self._db.documents(self.collection_name)

    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._db.lock:
            yield

    def add(self, doc: M) -> M:
        with self._db.lock:
            self._store[doc.id] = doc.model_copy(deep=True)
        return doc.model_copy(deep=True)

    def get(self, doc_id: str) -> M | None:
        with self._db.lock:
            doc = self._store.get(doc_id)
        return doc.model_copy(deep=True) if doc is not None else None

    def list_all(self) -> list[M]:
        """Newest first."""
        docs = sorted(self._documents(), key=lambda d: d.created_at, reverse=True)
        return [d.model_copy(deep=True) for d in docs]

    def update(self, doc_id: str, **fields: Any) -> M | None:
        """Replace the given fields and re-validate the whole document.

        Raises pydantic.ValidationError when the result breaks a model
        constraint; the stored document is left untouched in that case.
        """
        with self._db.lock:
            store = self._store
            current = store.get(doc_id)
            if current is None:
                return None
            data = current.model_dump()
            data.update(fields)
            data["updated_at"] = datetime.now(timezone.utc)
            updated = type(current).model_validate(data)
            store[doc_id] = updated
        return updated.model_copy(deep=True)

    def delete(self, doc_id: str) -> bool:
        with self._db.lock:
            return self._store.pop(doc_id, None) is not None


class ClientRepository(DocumentRepository[Client]):
    collection_name = "clients"

    def find(self, status: ClientStatus | None = None) -> list[Client]:
        return [c for c in self.list_all() if status is None or c.status == status]

    def find_duplicate(
        self,
        id_or_passport: str | None = None,
        phone: str | None = None,
        license_number: str | None = None,
        exclude_id: str | None = None,
    ) -> tuple[Client, str] | None:
        """Return the first other client sharing a unique field, with that field's name."""
        for client in self._documents():
            if client.id == exclude_id:
                continue
            if id_or_passport and client.id_or_passport == id_or_passport:
                return client.model_copy(), "id_or_passport"
            if phone and client.phone == phone:
                return client.model_copy(), "phone"
            if license_number and client.license_number == license_number:
                return client.model_copy(), "license_number"
        return None


class VehicleRepository(DocumentRepository[Vehicle]):
    collection_name = "vehicles"

    def find_by_license_plate(self, license_plate: str) -> Vehicle | None:
        for vehicle in self._documents():
            if vehicle.license_plate == license_plate:
                return vehicle.model_copy()
        return None


class BookingRepository(DocumentRepository[Booking]):
    collection_name = "bookings"

    def find(
        self,
        vehicle_id: str | None = None,
        client_id: str | None = None,
        status: BookingStatus | None = None,
        exclude_id: str | None = None,
    ) -> list[Booking]:
        """Filtered find; every given criterion must match."""
        return [
            b.model_copy()
            for b in self._documents()
            if (vehicle_id is None or b.vehicle_id == vehicle_id)
            and (client_id is None or b.client_id == client_id)
            and (status is None or b.status == status)
            and (exclude_id is None or b.id != exclude_id)
        ]


class TimelineRepository:
    """Audit entries per booking, stored in the ``timeline`` collection."""

    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def add(self, entry: TimelineEntry) -> None:
        with self._db.lock:
            self._db.collection("timeline")[entry.id] = entry

    def list_for_booking(self, booking_id: str) -> list[TimelineEntry]:
        return sorted(
            [e for e in self._db.documents("timeline") if e.booking_id == booking_id],
            key=lambda e: e.timestamp,
        )

    def delete_for_booking(self, booking_id: str) -> None:
        with self._db.lock:
            entries = self._db.collection("timeline")
            for entry_id in [eid for eid, e in entries.items() if e.booking_id == booking_id]:
                del entries[entry_id]


# ---------------------------------------------------------------------------
# Seed data: a small fleet with a couple of upcoming rentals
# ---------------------------------------------------------------------------


def seed_demo_data(db: InMemoryDatabase, today: date | None = None) -> None:
    """Load sample clients, vehicles and bookings into an empty database."""
    today = today or date.today()
    clients = ClientRepository(db)
    vehicles = VehicleRepository(db)
    bookings = BookingRepository(db)

    if clients.list_all() or vehicles.list_all():
        logger.info("database already has data, skipping demo seed")
        return

    alice = clients.add(
        Client(
            full_name="Alice Wanjiru",
            id_or_passport="A1234567",
            phone="+254 700 000 001",
            address="12 Riverside Drive",
            citizenship="Kenyan",
            license_number="DL-0001",
        )
    )
    brian = clients.add(
        Client(
            full_name="Brian Otieno",
            id_or_passport="B7654321",
            phone="+254 700 000 002",
            citizenship="Kenyan",
            license_number="DL-0002",
            status=ClientStatus.SUSPENDED,
        )
    )
    corolla = vehicles.add(
        Vehicle(
            make="Toyota",
            model="Corolla",
            year=2021,
            color="White",
            license_plate="KDA 123A",
            daily_rate=45.0,
        )
    )
    vehicles.add(
        Vehicle(
            make="Nissan",
            model="X-Trail",
            year=2020,
            color="Grey",
            license_plate="KDB 456B",
            daily_rate=70.0,
        )
    )
    vehicles.add(
        Vehicle(
            make="Subaru",
            model="Forester",
            year=2019,
            license_plate="KDC 789C",
            daily_rate=65.0,
            status=VehicleStatus.MAINTENANCE,
        )
    )

    bookings.add(
        Booking(
            client_id=alice.id,
            vehicle_id=corolla.id,
            start_date=today + timedelta(days=1),
            end_date=today + timedelta(days=4),
        )
    )
    bookings.add(
        Booking(
            client_id=brian.id,
            vehicle_id=corolla.id,
            start_date=today + timedelta(days=10),
            end_date=today + timedelta(days=12),
            status=BookingStatus.CANCELLED,
        )
    )
    logger.info("seeded demo data")
