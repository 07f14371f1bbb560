from dataclasses import replace
from datetime import date

import pytest

from courtbook.core.domain import Actor, AvailabilitySlot, BookingFilter, BookingStatus
from courtbook.core.errors import (
    BookingNotFound,
    InvalidStatus,
    InvalidTimeRange,
    LocationNotFound,
    PermissionDenied,
    ResourceNotFound,
    StartTimePast,
    TimeConflict,
)
from courtbook.core.intervals import TimeInterval

from tests.fakes import NOW, InMemoryBookings, at, build_lifecycle, span, standard_directory

ALICE = Actor("alice")
BOB = Actor("bob")
KEEPER = Actor("keeper")
ROOT = Actor("root", is_system_admin=True)


@pytest.fixture
def bookings():
    return InMemoryBookings()


@pytest.fixture
def lifecycle(bookings):
    return build_lifecycle(standard_directory(), bookings)


def test_create_booking_starts_pending(lifecycle, bookings):
    booking = lifecycle.create(ALICE, "court", span(10, 11))
    assert booking.id is not None
    assert booking.status is BookingStatus.PENDING
    assert booking.user_id == "alice"
    assert bookings.get_by_id(booking.id) == booking
    assert bookings.commits == 1


def test_create_from_times_rejects_inverted_range(lifecycle):
    with pytest.raises(InvalidTimeRange):
        lifecycle.create_from_times(ALICE, "court", at(11), at(10))


def test_create_from_times_rejects_empty_range(lifecycle):
    with pytest.raises(InvalidTimeRange):
        lifecycle.create_from_times(ALICE, "court", at(10), at(10))


@pytest.mark.parametrize("actor", [ALICE, KEEPER, ROOT])
def test_nobody_books_in_the_past(lifecycle, actor):
    with pytest.raises(StartTimePast):
        lifecycle.create(actor, "court", TimeInterval(at(7, days=-1), at(9)))


def test_start_exactly_now_is_allowed(lifecycle):
    booking = lifecycle.create(ALICE, "court", TimeInterval(NOW, at(9)))
    assert booking.start == NOW


def test_unknown_resource(lifecycle):
    with pytest.raises(ResourceNotFound):
        lifecycle.create(ALICE, "ghost-court", span(10, 11))


def test_overlapping_create_conflicts(lifecycle, bookings):
    lifecycle.create(ALICE, "court", span(10, 12))
    with pytest.raises(TimeConflict):
        lifecycle.create(BOB, "court", span(11, 13))
    assert len(bookings.rows) == 1


def test_adjacent_create_succeeds(lifecycle, bookings):
    lifecycle.create(ALICE, "court", span(10, 11))
    lifecycle.create(BOB, "court", span(11, 12))
    assert len(bookings.rows) == 2


def test_cancelled_slot_can_be_rebooked(lifecycle):
    first = lifecycle.create(ALICE, "court", span(10, 11))
    lifecycle.update_status(ALICE, first.id, "cancelled")
    second = lifecycle.create(BOB, "court", span(10, 11))
    assert second.status is BookingStatus.PENDING


def test_storage_rejection_reports_conflict(lifecycle, bookings):
    bookings.reject_next_write = True
    with pytest.raises(TimeConflict):
        lifecycle.create(ALICE, "court", span(10, 11))
    assert bookings.rows == {}
    assert bookings.commits == 0


def test_reschedule_ignores_own_interval(lifecycle):
    booking = lifecycle.create(ALICE, "court", span(10, 12))
    moved = lifecycle.reschedule(ALICE, booking.id, span(11, 13))
    assert moved.interval == span(11, 13)


def test_reschedule_into_other_booking_conflicts(lifecycle, bookings):
    lifecycle.create(ALICE, "court", span(10, 11))
    other = lifecycle.create(BOB, "court", span(12, 13))
    with pytest.raises(TimeConflict):
        lifecycle.reschedule(BOB, other.id, span(10, 12))
    assert bookings.get_by_id(other.id).interval == span(12, 13)


def test_update_single_end_keeps_the_other(lifecycle):
    booking = lifecycle.create(ALICE, "court", span(10, 11))
    updated = lifecycle.update(ALICE, booking.id, new_end=at(12))
    assert updated.interval == span(10, 12)


def test_update_end_before_kept_start_is_invalid(lifecycle):
    booking = lifecycle.create(ALICE, "court", span(10, 11))
    with pytest.raises(InvalidTimeRange):
        lifecycle.update(ALICE, booking.id, new_end=at(9))


def test_reschedule_into_the_past(lifecycle):
    booking = lifecycle.create(ALICE, "court", span(10, 11))
    with pytest.raises(StartTimePast):
        lifecycle.update(ALICE, booking.id, new_start=at(7, days=-1))


def test_booking_owner_can_cancel(lifecycle):
    booking = lifecycle.create(ALICE, "court", span(10, 11))
    cancelled = lifecycle.update_status(ALICE, booking.id, "cancelled")
    assert cancelled.status is BookingStatus.CANCELLED


def test_booking_owner_cannot_confirm(lifecycle, bookings):
    booking = lifecycle.create(ALICE, "court", span(10, 11))
    with pytest.raises(PermissionDenied):
        lifecycle.update_status(ALICE, booking.id, "confirmed")
    assert bookings.get_by_id(booking.id).status is BookingStatus.PENDING


def test_location_manager_confirms(lifecycle):
    booking = lifecycle.create(ALICE, "court", span(10, 11))
    confirmed = lifecycle.update_status(KEEPER, booking.id, BookingStatus.CONFIRMED)
    assert confirmed.status is BookingStatus.CONFIRMED


def test_stranger_cannot_touch_booking(lifecycle):
    booking = lifecycle.create(ALICE, "court", span(10, 11))
    with pytest.raises(PermissionDenied):
        lifecycle.update_status(BOB, booking.id, "cancelled")
    with pytest.raises(PermissionDenied):
        lifecycle.reschedule(BOB, booking.id, span(12, 13))
    with pytest.raises(PermissionDenied):
        lifecycle.delete(BOB, booking.id)


def test_unknown_status_rejected(lifecycle):
    booking = lifecycle.create(ALICE, "court", span(10, 11))
    with pytest.raises(InvalidStatus):
        lifecycle.update_status(KEEPER, booking.id, "finished")


def test_reactivating_into_taken_slot_conflicts(lifecycle):
    first = lifecycle.create(ALICE, "court", span(10, 11))
    lifecycle.update_status(ALICE, first.id, "cancelled")
    lifecycle.create(BOB, "court", span(10, 11))
    with pytest.raises(TimeConflict):
        lifecycle.update_status(KEEPER, first.id, "pending")


def test_unknown_booking(lifecycle):
    with pytest.raises(BookingNotFound):
        lifecycle.update_status(ROOT, "404", "cancelled")
    with pytest.raises(BookingNotFound):
        lifecycle.delete(ROOT, "404")
    with pytest.raises(BookingNotFound):
        lifecycle.get(ROOT, "404")


def test_delete_by_owner(lifecycle, bookings):
    booking = lifecycle.create(ALICE, "court", span(10, 11))
    lifecycle.delete(ALICE, booking.id)
    assert bookings.rows == {}


def test_get_visibility(lifecycle):
    booking = lifecycle.create(ALICE, "court", span(10, 11))
    assert lifecycle.get(ALICE, booking.id) == booking
    assert lifecycle.get(KEEPER, booking.id) == booking
    with pytest.raises(PermissionDenied):
        lifecycle.get(BOB, booking.id)


def test_list_is_scoped_to_caller(lifecycle):
    lifecycle.create(ALICE, "court", span(10, 11))
    lifecycle.create(BOB, "court", span(11, 12))

    mine = lifecycle.list(ALICE, BookingFilter(user_id="bob"))
    assert [b.user_id for b in mine] == ["alice"]

    everything = lifecycle.list(ROOT, BookingFilter())
    assert [b.user_id for b in everything] == ["alice", "bob"]

    only_bob = lifecycle.list(ROOT, BookingFilter(user_id="bob"))
    assert [b.user_id for b in only_bob] == ["bob"]


def test_availability_for_a_day(lifecycle):
    lifecycle.create(ALICE, "court", span(12, 13))
    cancelled = lifecycle.create(BOB, "court", span(15, 16))
    lifecycle.update_status(BOB, cancelled.id, "cancelled")
    lifecycle.create(BOB, "court", TimeInterval(at(10, days=1), at(11, days=1)))

    slots = lifecycle.get_availability("court", date(2030, 1, 2))
    assert slots == [
        AvailabilitySlot(start=at(9), end=at(12)),
        AvailabilitySlot(start=at(13), end=at(18)),
    ]


def test_availability_unknown_resource(lifecycle):
    with pytest.raises(ResourceNotFound):
        lifecycle.get_availability("ghost-court", date(2030, 1, 2))


def test_resource_without_location_writes_nothing(bookings):
    directory = standard_directory()
    directory.add_resource("orphan-court", "demolished")
    lifecycle = build_lifecycle(directory, bookings)
    with pytest.raises(LocationNotFound):
        lifecycle.create(ALICE, "orphan-court", span(10, 11))
    assert bookings.rows == {}
    assert bookings.commits == 0


def test_confirm_rechecks_booking_cancelled_and_rebooked_meanwhile(lifecycle, bookings):
    booking = lifecycle.create(ALICE, "court", span(10, 11))

    def cancel_and_rebook():
        bookings.rows[booking.id] = replace(bookings.rows[booking.id], status=BookingStatus.CANCELLED)
        bookings.add("court", "bob", span(10, 11))

    bookings.while_waiting.append(cancel_and_rebook)
    with pytest.raises(TimeConflict):
        lifecycle.update_status(KEEPER, booking.id, "confirmed")
    assert bookings.get_by_id(booking.id).status is BookingStatus.CANCELLED


def test_reschedule_keeps_status_set_meanwhile(lifecycle, bookings):
    booking = lifecycle.create(ALICE, "court", span(10, 11))

    def confirm():
        bookings.rows[booking.id] = replace(bookings.rows[booking.id], status=BookingStatus.CONFIRMED)

    bookings.while_waiting.append(confirm)
    moved = lifecycle.reschedule(ALICE, booking.id, span(12, 13))
    assert moved.interval == span(12, 13)
    assert moved.status is BookingStatus.CONFIRMED


def test_booking_deleted_meanwhile(lifecycle, bookings):
    booking = lifecycle.create(ALICE, "court", span(10, 11))
    bookings.while_waiting.append(lambda: bookings.rows.pop(booking.id))
    with pytest.raises(BookingNotFound):
        lifecycle.update_status(ALICE, booking.id, "cancelled")
