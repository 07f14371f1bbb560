from sqlalchemy import DDL, CheckConstraint, Column, Enum, ForeignKey, Index, String, event

from courtbook.core.domain import BookingStatus
from courtbook.db import Base
from courtbook.models.types import UTCDateTime, new_id, utc_now

NO_OVERLAP_CONSTRAINT = "bookings_no_overlap"


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="bookings_time_range_valid"),
        Index("idx_bookings_resource_time", "resource_id", "start_time", "end_time"),
        Index("idx_bookings_user_time", "user_id", "start_time"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    resource_id = Column(String(36), ForeignKey("resources.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)
    status = Column(
        Enum(BookingStatus, name="booking_status", values_callable=lambda statuses: [s.value for s in statuses]),
        nullable=False,
        default=BookingStatus.PENDING,
    )
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    updated_at = Column(UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now)


# PostgreSQL only: live bookings of one resource may not overlap.
event.listen(
    Booking.__table__,
    "after_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    Booking.__table__,
    "after_create",
    DDL(
        f"ALTER TABLE bookings ADD CONSTRAINT {NO_OVERLAP_CONSTRAINT} EXCLUDE USING gist "
        "(resource_id WITH =, tstzrange(start_time, end_time, '[)') WITH &&) "
        "WHERE (status <> 'cancelled')"
    ).execute_if(dialect="postgresql"),
)
