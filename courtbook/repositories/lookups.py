from typing import Optional

from sqlalchemy.orm import Session

from courtbook.core.domain import LocationRef, OpeningHours, ResourceRef, UserRef
from courtbook.models.location import Location
from courtbook.models.resource import Resource
from courtbook.models.user import User


class SqlResourceLookup:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, resource_id: str) -> Optional[ResourceRef]:
        resource = self.db.get(Resource, resource_id)
        if resource is None:
            return None
        return ResourceRef(id=resource.id, location_id=resource.location_id)


class SqlLocationLookup:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, location_id: str) -> Optional[LocationRef]:
        location = self.db.get(Location, location_id)
        if location is None:
            return None
        return LocationRef(
            id=location.id,
            organization_id=location.organization_id,
            opening_hours=OpeningHours(location.opening_hours_start, location.opening_hours_end),
        )


class SqlUserLookup:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> Optional[UserRef]:
        user = self.db.get(User, user_id)
        if user is None:
            return None
        return UserRef(id=user.id, is_system_admin=user.is_system_admin)
