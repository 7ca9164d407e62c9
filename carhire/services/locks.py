"""Per-vehicle mutual exclusion for check-then-write booking operations."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from carhire.domain.errors import PersistenceError


class VehicleLocks:
    """One lock per vehicle id, created on first use.

    ``hold`` takes several vehicles at once in sorted order, so two writers
    that need the same pair of vehicles cannot deadlock.
    """

    def __init__(self, timeout: float = 10.0) -> None:
        self.timeout = timeout
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, vehicle_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(vehicle_id)
            if lock is None:
                lock = self._locks[vehicle_id] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, *vehicle_ids: str) -> Iterator[None]:
        acquired: list[threading.Lock] = []
        try:
            for vehicle_id in sorted(set(vehicle_ids)):
                lock = self._lock_for(vehicle_id)
                if not lock.acquire(timeout=self.timeout):
                    raise PersistenceError(
                        f"timed out after {self.timeout}s waiting for vehicle {vehicle_id}"
                    )
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
