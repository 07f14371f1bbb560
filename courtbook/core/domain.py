"""Plain data passed between the booking core and its callers."""
import enum
from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional

from courtbook.core.errors import InvalidStatus, InvalidTimeRange
from courtbook.core.intervals import TimeInterval


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value) -> "BookingStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidStatus(f"invalid booking status: {value!r}") from None


ALL_STATUSES = frozenset(BookingStatus)


@dataclass
class Booking:
    id: Optional[str]
    resource_id: str
    user_id: str
    interval: TimeInterval
    status: BookingStatus = BookingStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def start(self) -> datetime:
        return self.interval.start

    @property
    def end(self) -> datetime:
        return self.interval.end

    @property
    def is_cancelled(self) -> bool:
        return self.status is BookingStatus.CANCELLED


@dataclass(frozen=True)
class OpeningHours:
    start: time
    end: time

    def __post_init__(self):
        if self.start >= self.end:
            raise InvalidTimeRange(
                f"opening hours {self.start.isoformat()}-{self.end.isoformat()} must start before they end"
            )


@dataclass(frozen=True)
class AvailabilitySlot:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class Actor:
    user_id: str
    is_system_admin: bool = False


@dataclass(frozen=True)
class ResourceRef:
    id: str
    location_id: str


@dataclass(frozen=True)
class LocationRef:
    id: str
    organization_id: str
    opening_hours: OpeningHours


@dataclass(frozen=True)
class UserRef:
    id: str
    is_system_admin: bool = False


@dataclass
class BookingFilter:
    """Listing criteria; ``starts_before``/``ends_after`` select intersecting bookings."""

    user_id: Optional[str] = None
    resource_id: Optional[str] = None
    status: Optional[BookingStatus] = None
    exclude_cancelled: bool = False
    ends_after: Optional[datetime] = None
    starts_before: Optional[datetime] = None
    offset: int = 0
    limit: Optional[int] = None
