from sqlalchemy import Column, ForeignKey, String

from courtbook.db import Base
from courtbook.models.types import UTCDateTime, new_id, utc_now


class Resource(Base):
    __tablename__ = "resources"

    id = Column(String(36), primary_key=True, default=new_id)
    location_id = Column(String(36), ForeignKey("locations.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, index=True, nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
