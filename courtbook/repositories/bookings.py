import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy import exists, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from courtbook.core.domain import Booking as BookingData
from courtbook.core.domain import BookingFilter, BookingStatus
from courtbook.core.errors import BookingNotFound, OverlapRejected
from courtbook.core.intervals import TimeInterval
from courtbook.models.booking import NO_OVERLAP_CONSTRAINT, Booking
from courtbook.models.resource import Resource

logger = logging.getLogger(__name__)

# writers of one resource inside this process queue up here before touching the database
_RESOURCE_MUTEXES = defaultdict(threading.Lock)
_RESOURCE_MUTEXES_LOCK = threading.Lock()


def _resource_mutex(resource_id: str) -> threading.Lock:
    with _RESOURCE_MUTEXES_LOCK:
        return _RESOURCE_MUTEXES[resource_id]


def to_booking_data(record: Booking) -> BookingData:
    return BookingData(
        id=record.id,
        resource_id=record.resource_id,
        user_id=record.user_id,
        interval=TimeInterval(record.start_time, record.end_time),
        status=BookingStatus(record.status),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


class SqlBookingRepository:
    """Bookings stored through one SQLAlchemy session.

    Writes only flush; ``lock_resource`` owns the transaction and commits
    when its block finishes cleanly.
    """

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def lock_resource(self, resource_id: str):
        with _resource_mutex(resource_id):
            try:
                if self.db.get_bind().dialect.name == "sqlite":
                    # SQLite has no row locks: a no-op write takes the database write lock up front
                    self.db.execute(
                        update(Resource)
                        .where(Resource.id == resource_id)
                        .values(location_id=Resource.location_id)
                        .execution_options(synchronize_session=False)
                    )
                else:
                    self.db.query(Resource.id).filter(Resource.id == resource_id).with_for_update().first()
                # rows loaded before the lock may be stale
                self.db.expire_all()
                yield
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

    def create(self, booking: BookingData) -> BookingData:
        record = Booking(
            resource_id=booking.resource_id,
            user_id=booking.user_id,
            start_time=booking.start,
            end_time=booking.end,
            status=booking.status,
        )
        self.db.add(record)
        self._flush()
        return to_booking_data(record)

    def get_by_id(self, booking_id: str) -> Optional[BookingData]:
        record = self.db.get(Booking, booking_id)
        return to_booking_data(record) if record else None

    def list(self, booking_filter: BookingFilter) -> List[BookingData]:
        query = self.db.query(Booking)
        if booking_filter.user_id:
            query = query.filter(Booking.user_id == booking_filter.user_id)
        if booking_filter.resource_id:
            query = query.filter(Booking.resource_id == booking_filter.resource_id)
        if booking_filter.status:
            query = query.filter(Booking.status == booking_filter.status)
        if booking_filter.exclude_cancelled:
            query = query.filter(Booking.status != BookingStatus.CANCELLED)
        # intersection with [ends_after, starts_before)
        if booking_filter.ends_after:
            query = query.filter(Booking.end_time > booking_filter.ends_after)
        if booking_filter.starts_before:
            query = query.filter(Booking.start_time < booking_filter.starts_before)

        query = query.order_by(Booking.start_time, Booking.id).offset(booking_filter.offset)
        if booking_filter.limit is not None:
            query = query.limit(booking_filter.limit)
        return [to_booking_data(record) for record in query.all()]

    def update(self, booking: BookingData) -> BookingData:
        record = self.db.get(Booking, booking.id)
        if record is None:
            raise BookingNotFound(f"booking {booking.id} not found")
        record.start_time = booking.start
        record.end_time = booking.end
        record.status = booking.status
        self._flush()
        return to_booking_data(record)

    def delete(self, booking_id: str) -> None:
        record = self.db.get(Booking, booking_id)
        if record is None:
            raise BookingNotFound(f"booking {booking_id} not found")
        self.db.delete(record)
        self._flush()

    def has_overlap(self, resource_id: str, interval: TimeInterval, exclude_id: Optional[str] = None) -> bool:
        criteria = [
            Booking.resource_id == resource_id,
            Booking.status != BookingStatus.CANCELLED,
            Booking.start_time < interval.end,
            Booking.end_time > interval.start,
        ]
        if exclude_id:
            criteria.append(Booking.id != exclude_id)
        return self.db.query(exists().where(*criteria)).scalar()

    def _flush(self) -> None:
        try:
            self.db.flush()
        except IntegrityError as exc:
            if NO_OVERLAP_CONSTRAINT in str(exc.orig):
                logger.warning(f"Constraint {NO_OVERLAP_CONSTRAINT} rejected a booking write")
                raise OverlapRejected(str(exc.orig)) from exc
            raise
