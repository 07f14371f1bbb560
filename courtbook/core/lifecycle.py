import logging
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from typing import Callable, List, Optional

from courtbook.core.authorization import AuthorizationResolver, Decision
from courtbook.core.availability import compute_availability
from courtbook.core.conflicts import ConflictDetector
from courtbook.core.domain import Actor, AvailabilitySlot, Booking, BookingFilter, BookingStatus
from courtbook.core.errors import (
    BookingNotFound,
    InvalidRange,
    InvalidTimeRange,
    OverlapRejected,
    PermissionDenied,
    StartTimePast,
    TimeConflict,
)
from courtbook.core.intervals import TimeInterval, as_utc
from courtbook.core.lookups import resolve_resource_location
from courtbook.core.ports import BookingRepository, LocationLookup, ResourceLookup

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BookingLifecycle:
    """
    Booking writes and reads on behalf of an actor.

    Every write runs inside ``BookingRepository.lock_resource`` so the
    conflict check and the write see the same state. If storage still rejects
    an overlap at write time, that is reported as TimeConflict like any other
    conflict.
    """

    def __init__(
        self,
        bookings: BookingRepository,
        resources: ResourceLookup,
        locations: LocationLookup,
        authorization: AuthorizationResolver,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.bookings = bookings
        self.resources = resources
        self.locations = locations
        self.authorization = authorization
        self.conflicts = ConflictDetector(bookings)
        self.clock = clock

    def create(self, actor: Actor, resource_id: str, interval: TimeInterval) -> Booking:
        self._ensure_not_past(interval.start)
        resolve_resource_location(self.resources, self.locations, resource_id)

        booking = Booking(id=None, resource_id=resource_id, user_id=actor.user_id, interval=interval)
        with self.bookings.lock_resource(resource_id):
            self._ensure_free(resource_id, interval)
            try:
                booking = self.bookings.create(booking)
            except OverlapRejected as exc:
                raise self._late_conflict(resource_id, interval) from exc

        logger.info(f"Created booking {booking.id} on resource {resource_id} for user {actor.user_id}: {interval}")
        return booking

    def create_from_times(self, actor: Actor, resource_id: str, start: datetime, end: datetime) -> Booking:
        return self.create(actor, resource_id, self._interval(start, end))

    def update(
        self,
        actor: Actor,
        booking_id: str,
        new_start: Optional[datetime] = None,
        new_end: Optional[datetime] = None,
        new_status=None,
    ) -> Booking:
        """
        Reschedule and/or change the status of a booking.

        Either end of the interval may be given alone; the other end is kept.
        Booking owners may only cancel; location managers and above may set
        any status.
        """
        booking = self._load(booking_id)
        decision = self._authorize_mutation(actor, booking)

        status = None
        if new_status is not None:
            status = BookingStatus.parse(new_status)
            if not decision.permits_status(status):
                logger.warning(f"User {actor.user_id} may not set booking {booking_id} to {status.value}")
                raise PermissionDenied(f"not allowed to set booking status to {status.value}")
        if new_start is not None:
            self._ensure_not_past(new_start)

        with self.bookings.lock_resource(booking.resource_id):
            # decide on the row as it is now, not as it was before the lock
            current = self._load(booking_id)
            interval = current.interval
            if new_start is not None or new_end is not None:
                interval = self._interval(
                    new_start if new_start is not None else current.start,
                    new_end if new_end is not None else current.end,
                )
            updated = replace(current, interval=interval, status=status if status is not None else current.status)
            moved = updated.interval != current.interval
            reactivated = current.is_cancelled and not updated.is_cancelled
            if (moved or reactivated) and not updated.is_cancelled:
                self._ensure_free(booking.resource_id, interval, exclude_booking_id=booking_id)
            try:
                updated = self.bookings.update(updated)
            except OverlapRejected as exc:
                raise self._late_conflict(booking.resource_id, interval) from exc

        logger.info(f"Updated booking {booking_id} by user {actor.user_id}: {updated.interval}, {updated.status.value}")
        return updated

    def reschedule(self, actor: Actor, booking_id: str, interval: TimeInterval) -> Booking:
        return self.update(actor, booking_id, new_start=interval.start, new_end=interval.end)

    def update_status(self, actor: Actor, booking_id: str, status) -> Booking:
        return self.update(actor, booking_id, new_status=status)

    def delete(self, actor: Actor, booking_id: str) -> None:
        booking = self._load(booking_id)
        self._authorize_mutation(actor, booking)
        with self.bookings.lock_resource(booking.resource_id):
            self.bookings.delete(booking_id)
        logger.info(f"Deleted booking {booking_id} by user {actor.user_id}")

    def get(self, actor: Actor, booking_id: str) -> Booking:
        booking = self._load(booking_id)
        if not self.authorization.can_view_booking(actor, booking):
            raise PermissionDenied("not allowed to view this booking")
        return booking

    def list(self, actor: Actor, booking_filter: BookingFilter) -> List[Booking]:
        """Admins see every booking; everyone else only their own."""
        if not self.authorization.is_system_admin(actor):
            booking_filter = replace(booking_filter, user_id=actor.user_id)
        return self.bookings.list(booking_filter)

    def get_availability(self, resource_id: str, day: date) -> List[AvailabilitySlot]:
        location = resolve_resource_location(self.resources, self.locations, resource_id)
        day_start = datetime.combine(day, datetime.min.time(), tzinfo=timezone.utc)
        bookings = self.bookings.list(
            BookingFilter(
                resource_id=resource_id,
                exclude_cancelled=True,
                ends_after=day_start,
                starts_before=day_start + timedelta(days=1),
            )
        )
        slots = compute_availability(day, location.opening_hours, bookings)
        logger.debug(f"Found {len(slots)} free slots for resource {resource_id} on {day.isoformat()}")
        return slots

    def _load(self, booking_id: str) -> Booking:
        booking = self.bookings.get_by_id(booking_id)
        if booking is None:
            raise BookingNotFound(f"booking {booking_id} not found")
        return booking

    def _authorize_mutation(self, actor: Actor, booking: Booking) -> Decision:
        decision = self.authorization.can_mutate_booking(actor, booking)
        if not decision.allowed:
            logger.warning(f"User {actor.user_id} not authorized to change booking {booking.id}")
            raise PermissionDenied("not allowed to change this booking")
        return decision

    def _interval(self, start: datetime, end: datetime) -> TimeInterval:
        try:
            return TimeInterval(start, end)
        except InvalidRange as exc:
            raise InvalidTimeRange(exc.message) from None

    def _ensure_not_past(self, start: datetime) -> None:
        if as_utc(start) < self.clock():
            raise StartTimePast(f"start time {start.isoformat()} is in the past")

    def _ensure_free(self, resource_id: str, interval: TimeInterval, exclude_booking_id: Optional[str] = None) -> None:
        if self.conflicts.has_conflict(resource_id, interval, exclude_booking_id):
            logger.warning(f"Overlapping booking found for resource {resource_id}, time: {interval}")
            raise TimeConflict(f"resource {resource_id} is already booked during {interval}")

    def _late_conflict(self, resource_id: str, interval: TimeInterval) -> TimeConflict:
        logger.warning(f"Storage rejected overlapping booking for resource {resource_id}, time: {interval}")
        return TimeConflict(f"resource {resource_id} is already booked during {interval}")
