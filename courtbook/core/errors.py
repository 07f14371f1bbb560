"""Domain errors raised by the booking core.

Every error carries a stable ``code`` so callers can map it to a transport
status without string matching.
"""
from typing import Optional


class BookingError(Exception):
    """Base class for all booking domain errors."""

    code = "booking_error"
    default_message = "booking operation failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidTimeRange(BookingError):
    code = "invalid_time_range"
    default_message = "start time must be before end time"


class InvalidRange(InvalidTimeRange):
    """Raised when a TimeInterval would be empty or inverted."""

    code = "invalid_range"


class StartTimePast(BookingError):
    code = "start_time_past"
    default_message = "cannot create booking in the past"


class TimeConflict(BookingError):
    code = "time_conflict"
    default_message = "time slot already booked"


class InvalidStatus(BookingError):
    code = "invalid_status"
    default_message = "invalid booking status"


class PermissionDenied(BookingError):
    code = "permission_denied"
    default_message = "permission denied"


class RoleConflict(BookingError):
    code = "role_conflict"
    default_message = "role assignment conflicts with an existing role"


class NotFound(BookingError):
    code = "not_found"
    default_message = "not found"


class BookingNotFound(NotFound):
    code = "booking_not_found"
    default_message = "booking not found"


class ResourceNotFound(NotFound):
    code = "resource_not_found"
    default_message = "resource not found"


class LocationNotFound(NotFound):
    code = "location_not_found"
    default_message = "location not found"


class OrganizationNotFound(NotFound):
    code = "organization_not_found"
    default_message = "organization not found"


class UserNotFound(NotFound):
    code = "user_not_found"
    default_message = "user not found"


class OverlapRejected(Exception):
    """Raised by a repository when storage refuses an overlapping booking.

    This is a collaborator signal, not a domain error: the lifecycle turns it
    into TimeConflict.
    """
