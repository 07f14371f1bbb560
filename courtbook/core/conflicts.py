import logging
from typing import Iterable, List, Optional

from courtbook.core.domain import Booking
from courtbook.core.intervals import TimeInterval
from courtbook.core.ports import BookingRepository

logger = logging.getLogger(__name__)


def find_conflicts(
    candidate: TimeInterval,
    bookings: Iterable[Booking],
    exclude_booking_id: Optional[str] = None,
) -> List[Booking]:
    """
    Return the bookings that block ``candidate``.

    Cancelled bookings and the booking being moved never block. Intervals are
    half-open, so a booking ending exactly when the candidate starts is fine.
    """
    return [
        booking
        for booking in bookings
        if not booking.is_cancelled
        and (exclude_booking_id is None or booking.id != exclude_booking_id)
        and booking.interval.overlaps(candidate)
    ]


class ConflictDetector:
    def __init__(self, bookings: BookingRepository):
        self.bookings = bookings

    def has_conflict(
        self,
        resource_id: str,
        candidate: TimeInterval,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """
        Check whether ``candidate`` overlaps a live booking of ``resource_id``.

        The caller must hold the resource lock if it intends to write based
        on the answer.
        """
        conflict = self.bookings.has_overlap(resource_id, candidate, exclude_booking_id)
        if conflict:
            logger.debug(f"Conflict on resource {resource_id} for {candidate}")
        return conflict
