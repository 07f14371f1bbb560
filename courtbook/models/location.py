from sqlalchemy import CheckConstraint, Column, ForeignKey, String, Time

from courtbook.db import Base
from courtbook.models.types import UTCDateTime, new_id, utc_now


class Location(Base):
    __tablename__ = "locations"
    __table_args__ = (
        CheckConstraint("opening_hours_start < opening_hours_end", name="locations_opening_hours_valid"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, index=True, nullable=False)
    opening_hours_start = Column(Time, nullable=False)
    opening_hours_end = Column(Time, nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)


class LocationManager(Base):
    __tablename__ = "location_managers"

    location_id = Column(String(36), ForeignKey("locations.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
