from datetime import date, timezone, tzinfo
from typing import Iterable, List

from courtbook.core.domain import AvailabilitySlot, Booking, OpeningHours
from courtbook.core.errors import InvalidRange, InvalidTimeRange
from courtbook.core.intervals import TimeInterval


def compute_availability(
    day: date,
    opening_hours: OpeningHours,
    bookings: Iterable[Booking],
    tz: tzinfo = timezone.utc,
) -> List[AvailabilitySlot]:
    """
    Free slots of one resource on ``day``, in ascending order.

    Bookings may arrive unsorted, overlapping each other, or reaching past the
    opening hours; cancelled ones are ignored. A fully booked day gives an
    empty list.
    """
    try:
        opening = TimeInterval.on_day(day, opening_hours.start, opening_hours.end, tz)
    except InvalidRange:
        raise InvalidTimeRange(f"opening hours on {day.isoformat()} close before they open") from None
    day_start, day_end = opening.start, opening.end

    active = sorted(
        (booking for booking in bookings if not booking.is_cancelled),
        key=lambda booking: booking.start,
    )

    slots = []
    cursor = day_start
    for booking in active:
        if booking.end <= cursor:
            continue
        # sorted by start: nothing after this one can begin before closing
        if booking.start >= day_end:
            break
        busy_from = max(booking.start, cursor)
        busy_until = min(booking.end, day_end)
        if busy_from > cursor:
            slots.append(AvailabilitySlot(start=cursor, end=busy_from))
        cursor = max(cursor, busy_until)

    if cursor < day_end:
        slots.append(AvailabilitySlot(start=cursor, end=day_end))
    return slots
