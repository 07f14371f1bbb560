"""Per-request wiring of the booking core onto a database session."""
from fastapi import Depends
from sqlalchemy.orm import Session

from courtbook.core.authorization import AuthorizationResolver, RoleAssignments
from courtbook.core.lifecycle import BookingLifecycle
from courtbook.db import get_db
from courtbook.repositories.bookings import SqlBookingRepository
from courtbook.repositories.lookups import SqlLocationLookup, SqlResourceLookup, SqlUserLookup
from courtbook.repositories.roles import SqlLocationRoles, SqlOrganizationRoles


def get_authorization(db: Session = Depends(get_db)) -> AuthorizationResolver:
    return AuthorizationResolver(
        resources=SqlResourceLookup(db),
        locations=SqlLocationLookup(db),
        organization_roles=SqlOrganizationRoles(db),
        location_roles=SqlLocationRoles(db),
    )


def get_lifecycle(
    db: Session = Depends(get_db),
    authorization: AuthorizationResolver = Depends(get_authorization),
) -> BookingLifecycle:
    return BookingLifecycle(
        bookings=SqlBookingRepository(db),
        resources=SqlResourceLookup(db),
        locations=SqlLocationLookup(db),
        authorization=authorization,
    )


def get_role_assignments(db: Session = Depends(get_db)) -> RoleAssignments:
    return RoleAssignments(
        organization_roles=SqlOrganizationRoles(db),
        location_roles=SqlLocationRoles(db),
        locations=SqlLocationLookup(db),
        users=SqlUserLookup(db),
    )
