"""Organization and location staff tables. Mutators commit immediately."""
from typing import List, Optional

from sqlalchemy import exists as sql_exists
from sqlalchemy.orm import Session

from courtbook.models.location import Location, LocationManager
from courtbook.models.organization import Organization, OrganizationManager


class SqlOrganizationRoles:
    def __init__(self, db: Session):
        self.db = db

    def exists(self, org_id: str) -> bool:
        return self.db.query(sql_exists().where(Organization.id == org_id)).scalar()

    def get_owner_id(self, org_id: str) -> Optional[str]:
        return self.db.query(Organization.owner_id).filter(Organization.id == org_id).scalar()

    def is_owner_or_above(self, org_id: str, user_id: str) -> bool:
        return self.get_owner_id(org_id) == user_id

    def is_manager_or_above(self, org_id: str, user_id: str) -> bool:
        if self.is_owner_or_above(org_id, user_id):
            return True
        return self.db.query(
            sql_exists().where(OrganizationManager.organization_id == org_id, OrganizationManager.user_id == user_id)
        ).scalar()

    def add_manager(self, org_id: str, user_id: str) -> None:
        if self.db.get(OrganizationManager, (org_id, user_id)) is None:
            self.db.add(OrganizationManager(organization_id=org_id, user_id=user_id))
            self.db.commit()

    def remove_manager(self, org_id: str, user_id: str) -> None:
        self.db.query(OrganizationManager).filter(
            OrganizationManager.organization_id == org_id, OrganizationManager.user_id == user_id
        ).delete()
        self.db.commit()

    def set_owner(self, org_id: str, user_id: str) -> None:
        self.db.query(Organization).filter(Organization.id == org_id).update({Organization.owner_id: user_id})
        self.db.commit()

    def list_managers(self, org_id: str) -> List[str]:
        rows = (
            self.db.query(OrganizationManager.user_id)
            .filter(OrganizationManager.organization_id == org_id)
            .order_by(OrganizationManager.created_at, OrganizationManager.user_id)
            .all()
        )
        return [row.user_id for row in rows]


class SqlLocationRoles:
    def __init__(self, db: Session):
        self.db = db

    def is_location_manager(self, location_id: str, user_id: str) -> bool:
        return self.db.query(
            sql_exists().where(LocationManager.location_id == location_id, LocationManager.user_id == user_id)
        ).scalar()

    def is_location_manager_in_organization(self, org_id: str, user_id: str) -> bool:
        return self.db.query(
            sql_exists().where(
                LocationManager.location_id == Location.id,
                Location.organization_id == org_id,
                LocationManager.user_id == user_id,
            )
        ).scalar()

    def add_manager(self, location_id: str, user_id: str) -> None:
        if self.db.get(LocationManager, (location_id, user_id)) is None:
            self.db.add(LocationManager(location_id=location_id, user_id=user_id))
            self.db.commit()

    def remove_manager(self, location_id: str, user_id: str) -> None:
        self.db.query(LocationManager).filter(
            LocationManager.location_id == location_id, LocationManager.user_id == user_id
        ).delete()
        self.db.commit()

    def list_managers(self, location_id: str) -> List[str]:
        rows = (
            self.db.query(LocationManager.user_id)
            .filter(LocationManager.location_id == location_id)
            .order_by(LocationManager.created_at, LocationManager.user_id)
            .all()
        )
        return [row.user_id for row in rows]
