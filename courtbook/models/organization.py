from sqlalchemy import Column, ForeignKey, String

from courtbook.db import Base
from courtbook.models.types import UTCDateTime, new_id, utc_now


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, index=True, nullable=False)
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)


class OrganizationManager(Base):
    __tablename__ = "organization_managers"

    organization_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
