from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo

from courtbook.core.errors import InvalidRange


def as_utc(value: datetime) -> datetime:
    """Return an aware datetime in UTC; naive values are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class TimeInterval:
    """Half-open range ``[start, end)``."""

    start: datetime
    end: datetime

    def __post_init__(self):
        start = as_utc(self.start)
        end = as_utc(self.end)
        if start >= end:
            raise InvalidRange(f"interval start {start.isoformat()} must be before end {end.isoformat()}")
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @classmethod
    def on_day(cls, day: date, start: time, end: time, tz: tzinfo = timezone.utc) -> "TimeInterval":
        """Place two times of day onto ``day`` in ``tz``."""
        return cls(
            datetime.combine(day, start, tzinfo=tz),
            datetime.combine(day, end, tzinfo=tz),
        )

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "TimeInterval") -> bool:
        return self.start < other.end and other.start < self.end

    def contains(self, moment: datetime) -> bool:
        return self.start <= as_utc(moment) < self.end

    def clamp_to(self, bounds: "TimeInterval") -> "TimeInterval":
        # raises InvalidRange when the two do not overlap
        return TimeInterval(max(self.start, bounds.start), min(self.end, bounds.end))

    def __str__(self):
        return f"[{self.start.isoformat()}, {self.end.isoformat()})"
