"""Tests for the conflict-detection service."""

from datetime import date

import pytest

from carhire.domain.models import Booking, BookingStatus
from carhire.repos.memory import BookingRepository, InMemoryDatabase
from carhire.services.conflicts import find_conflicts, has_conflict


def _make_booking(
    start: date,
    end: date,
    vehicle_id: str = "vehicle-1",
    status: BookingStatus = BookingStatus.ACTIVE,
) -> Booking:
    return Booking(
        client_id="client-1",
        vehicle_id=vehicle_id,
        start_date=start,
        end_date=end,
        status=status,
    )


@pytest.fixture()
def repo():
    db = InMemoryDatabase()
    db.connect()
    return BookingRepository(db)


# ---------------------------------------------------------------------------
# find_conflicts
# ---------------------------------------------------------------------------


def test_no_overlap():
    """Bookings that don't overlap should not be returned as conflicts."""
    existing = [_make_booking(date(2024, 6, 1), date(2024, 6, 5))]
    assert find_conflicts(date(2024, 6, 7), date(2024, 6, 9), existing) == []


def test_partial_overlap():
    """A request starting inside an existing booking is a conflict."""
    existing = [_make_booking(date(2024, 6, 1), date(2024, 6, 5))]
    conflicts = find_conflicts(date(2024, 6, 3), date(2024, 6, 7), existing)
    assert len(conflicts) == 1
    assert conflicts[0].start_date == date(2024, 6, 1)


def test_overlap_at_the_start():
    """A request ending inside an existing booking is a conflict."""
    existing = [_make_booking(date(2024, 6, 5), date(2024, 6, 10))]
    assert len(find_conflicts(date(2024, 6, 1), date(2024, 6, 6), existing)) == 1


def test_nested_interval():
    """A request fully inside an existing booking is a conflict."""
    existing = [_make_booking(date(2024, 6, 1), date(2024, 6, 10))]
    assert len(find_conflicts(date(2024, 6, 3), date(2024, 6, 5), existing)) == 1


def test_enclosing_interval():
    """A request that swallows an existing booking is a conflict."""
    existing = [_make_booking(date(2024, 6, 3), date(2024, 6, 5))]
    assert len(find_conflicts(date(2024, 6, 1), date(2024, 6, 10), existing)) == 1


def test_identical_interval():
    existing = [_make_booking(date(2024, 6, 1), date(2024, 6, 5))]
    assert len(find_conflicts(date(2024, 6, 1), date(2024, 6, 5), existing)) == 1


def test_back_to_back_no_conflict():
    """When existing.end_date == new start, there is no conflict (end is exclusive)."""
    existing = [_make_booking(date(2024, 6, 1), date(2024, 6, 10))]
    assert find_conflicts(date(2024, 6, 10), date(2024, 6, 12), existing) == []


def test_ends_when_existing_starts_no_conflict():
    existing = [_make_booking(date(2024, 6, 10), date(2024, 6, 12))]
    assert find_conflicts(date(2024, 6, 1), date(2024, 6, 10), existing) == []


# ---------------------------------------------------------------------------
# has_conflict against the store
# ---------------------------------------------------------------------------


def test_only_active_bookings_count(repo):
    """Completed and cancelled bookings never block a vehicle."""
    repo.add(_make_booking(date(2024, 6, 1), date(2024, 6, 5), status=BookingStatus.CANCELLED))
    repo.add(_make_booking(date(2024, 6, 1), date(2024, 6, 5), status=BookingStatus.COMPLETED))

    assert has_conflict(repo, "vehicle-1", date(2024, 6, 2), date(2024, 6, 4)) is False


def test_other_vehicles_do_not_count(repo):
    repo.add(_make_booking(date(2024, 6, 1), date(2024, 6, 5), vehicle_id="vehicle-2"))

    assert has_conflict(repo, "vehicle-1", date(2024, 6, 2), date(2024, 6, 4)) is False
    assert has_conflict(repo, "vehicle-2", date(2024, 6, 2), date(2024, 6, 4)) is True


def test_excluded_booking_is_ignored(repo):
    """A booking being edited does not conflict with itself."""
    booking = repo.add(_make_booking(date(2024, 6, 1), date(2024, 6, 5)))

    assert has_conflict(repo, "vehicle-1", date(2024, 6, 2), date(2024, 6, 6)) is True
    assert (
        has_conflict(
            repo, "vehicle-1", date(2024, 6, 2), date(2024, 6, 6), exclude_booking_id=booking.id
        )
        is False
    )
