"""
Who may do what to bookings, locations and organizations.

Roles from most to least powerful:

    SystemAdmin > OrganizationOwner > OrganizationManager > LocationManager > BookingOwner

A booking decision walks ``BOOKING_RULES`` top-down and stops at the first
role the actor holds; the role's grant says which statuses it may set.
Organization staff and location managers of the same organization are
mutually exclusive, which ``RoleAssignments`` enforces when roles are handed
out so the read path never has to arbitrate between them.
"""
import enum
import logging
from dataclasses import dataclass
from functools import cached_property
from typing import Callable, FrozenSet, List, Optional, Tuple

from courtbook.core.domain import ALL_STATUSES, Actor, Booking, BookingStatus, LocationRef
from courtbook.core.errors import OrganizationNotFound, RoleConflict
from courtbook.core.lookups import require_location, require_user, resolve_resource_location
from courtbook.core.ports import (
    LocationLookup,
    LocationRoleLookup,
    OrganizationRoleLookup,
    ResourceLookup,
    UserLookup,
)

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    SYSTEM_ADMIN = "system_admin"
    ORGANIZATION_OWNER = "organization_owner"
    ORGANIZATION_MANAGER = "organization_manager"
    LOCATION_MANAGER = "location_manager"
    BOOKING_OWNER = "booking_owner"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    allowed_status_transitions: FrozenSet[BookingStatus] = frozenset()
    role: Optional[Role] = None

    @property
    def can_reschedule(self) -> bool:
        return self.allowed

    @property
    def can_delete(self) -> bool:
        return self.allowed

    def permits_status(self, status: BookingStatus) -> bool:
        return self.allowed and status in self.allowed_status_transitions


DENIED = Decision(allowed=False)

FULL_CONTROL = ALL_STATUSES
OWNER_TRANSITIONS = frozenset({BookingStatus.CANCELLED})

STATUS_GRANTS = {
    Role.SYSTEM_ADMIN: FULL_CONTROL,
    Role.ORGANIZATION_OWNER: FULL_CONTROL,
    Role.ORGANIZATION_MANAGER: FULL_CONTROL,
    Role.LOCATION_MANAGER: FULL_CONTROL,
    Role.BOOKING_OWNER: OWNER_TRANSITIONS,
}


class _BookingScope:
    """Booking plus its location, resolved only when a rule needs it."""

    def __init__(self, resolver: "AuthorizationResolver", booking: Booking):
        self._resolver = resolver
        self.booking = booking

    @cached_property
    def location(self) -> LocationRef:
        return resolve_resource_location(
            self._resolver.resources, self._resolver.locations, self.booking.resource_id
        )


Rule = Callable[["AuthorizationResolver", Actor, _BookingScope], bool]

BOOKING_RULES: Tuple[Tuple[Role, Rule], ...] = (
    (Role.SYSTEM_ADMIN, lambda resolver, actor, scope: actor.is_system_admin),
    (
        Role.ORGANIZATION_OWNER,
        lambda resolver, actor, scope: resolver.organization_roles.is_owner_or_above(
            scope.location.organization_id, actor.user_id
        ),
    ),
    (
        Role.ORGANIZATION_MANAGER,
        lambda resolver, actor, scope: resolver.organization_roles.is_manager_or_above(
            scope.location.organization_id, actor.user_id
        ),
    ),
    (
        Role.LOCATION_MANAGER,
        lambda resolver, actor, scope: resolver.location_roles.is_location_manager(
            scope.location.id, actor.user_id
        ),
    ),
    (Role.BOOKING_OWNER, lambda resolver, actor, scope: scope.booking.user_id == actor.user_id),
)


class AuthorizationResolver:
    def __init__(
        self,
        resources: ResourceLookup,
        locations: LocationLookup,
        organization_roles: OrganizationRoleLookup,
        location_roles: LocationRoleLookup,
    ):
        self.resources = resources
        self.locations = locations
        self.organization_roles = organization_roles
        self.location_roles = location_roles

    def is_system_admin(self, actor: Actor) -> bool:
        return actor.is_system_admin

    def is_organization_owner(self, actor: Actor, org_id: str) -> bool:
        """Admin or the designated owner; managers do not count."""
        if self.is_system_admin(actor):
            return True
        self._require_organization(org_id)
        return self.organization_roles.is_owner_or_above(org_id, actor.user_id)

    def is_organization_owner_or_above(self, actor: Actor, org_id: str) -> bool:
        """Admin, the designated owner, or an organization manager."""
        if self.is_system_admin(actor):
            return True
        self._require_organization(org_id)
        return self._is_organization_staff(org_id, actor.user_id)

    def is_location_manager_or_above(self, actor: Actor, location_id: str) -> bool:
        if self.is_system_admin(actor):
            return True
        location = require_location(self.locations, location_id)
        if self._is_organization_staff(location.organization_id, actor.user_id):
            return True
        return self.location_roles.is_location_manager(location_id, actor.user_id)

    def can_manage_location_staff(self, actor: Actor, location_id: str) -> bool:
        """Location managers are appointed by the staff of the owning organization."""
        if self.is_system_admin(actor):
            return True
        location = require_location(self.locations, location_id)
        return self._is_organization_staff(location.organization_id, actor.user_id)

    def resolve_booking_role(self, actor: Actor, booking: Booking) -> Optional[Role]:
        """The most powerful role ``actor`` holds over ``booking``, if any."""
        scope = _BookingScope(self, booking)
        for role, rule in BOOKING_RULES:
            if rule(self, actor, scope):
                return role
        return None

    def can_mutate_booking(self, actor: Actor, booking: Booking) -> Decision:
        role = self.resolve_booking_role(actor, booking)
        if role is None:
            logger.debug(f"User {actor.user_id} holds no role over booking {booking.id}")
            return DENIED
        return Decision(allowed=True, allowed_status_transitions=STATUS_GRANTS[role], role=role)

    def can_view_booking(self, actor: Actor, booking: Booking) -> bool:
        return self.resolve_booking_role(actor, booking) is not None

    def _is_organization_staff(self, org_id: str, user_id: str) -> bool:
        return self.organization_roles.is_owner_or_above(
            org_id, user_id
        ) or self.organization_roles.is_manager_or_above(org_id, user_id)

    def _require_organization(self, org_id: str) -> None:
        if not self.organization_roles.exists(org_id):
            raise OrganizationNotFound(f"organization {org_id} not found")


class RoleAssignments:
    """Hands out organization and location roles without breaking mutual exclusion."""

    def __init__(
        self,
        organization_roles: OrganizationRoleLookup,
        location_roles: LocationRoleLookup,
        locations: LocationLookup,
        users: UserLookup,
    ):
        self.organization_roles = organization_roles
        self.location_roles = location_roles
        self.locations = locations
        self.users = users

    def assign_organization_manager(self, org_id: str, user_id: str) -> None:
        self._require_organization(org_id)
        if self.organization_roles.get_owner_id(org_id) == user_id:
            raise RoleConflict("user is already the owner of this organization")
        require_user(self.users, user_id)
        if self.location_roles.is_location_manager_in_organization(org_id, user_id):
            logger.warning(f"Refused organization manager {user_id} on {org_id}: already a location manager there")
            raise RoleConflict(
                "user is already a location manager in this organization; remove location manager privileges first"
            )
        self.organization_roles.add_manager(org_id, user_id)
        logger.info(f"Assigned organization manager {user_id} on {org_id}")

    def remove_organization_manager(self, org_id: str, user_id: str) -> None:
        self._require_organization(org_id)
        self.organization_roles.remove_manager(org_id, user_id)
        logger.info(f"Removed organization manager {user_id} from {org_id}")

    def assign_location_manager(self, location_id: str, user_id: str) -> None:
        location = require_location(self.locations, location_id)
        require_user(self.users, user_id)
        if self.organization_roles.is_manager_or_above(location.organization_id, user_id):
            logger.warning(
                f"Refused location manager {user_id} on {location_id}: "
                f"already staff of organization {location.organization_id}"
            )
            raise RoleConflict(
                "user is already an owner or manager of this organization; remove organization privileges first"
            )
        self.location_roles.add_manager(location_id, user_id)
        logger.info(f"Assigned location manager {user_id} on {location_id}")

    def remove_location_manager(self, location_id: str, user_id: str) -> None:
        require_location(self.locations, location_id)
        self.location_roles.remove_manager(location_id, user_id)
        logger.info(f"Removed location manager {user_id} from {location_id}")

    def list_organization_managers(self, org_id: str) -> List[str]:
        self._require_organization(org_id)
        return self.organization_roles.list_managers(org_id)

    def list_location_managers(self, location_id: str) -> List[str]:
        require_location(self.locations, location_id)
        return self.location_roles.list_managers(location_id)

    def transfer_organization_ownership(self, org_id: str, user_id: str) -> None:
        self._require_organization(org_id)
        require_user(self.users, user_id)
        if self.location_roles.is_location_manager_in_organization(org_id, user_id):
            raise RoleConflict(
                "user is already a location manager in this organization; remove location manager privileges first"
            )
        # the owner role already covers everything a manager may do
        self.organization_roles.remove_manager(org_id, user_id)
        self.organization_roles.set_owner(org_id, user_id)
        logger.info(f"Transferred ownership of organization {org_id} to {user_id}")

    def _require_organization(self, org_id: str) -> None:
        if not self.organization_roles.exists(org_id):
            raise OrganizationNotFound(f"organization {org_id} not found")
