"""Collaborators the booking core depends on.

Lookups return ``None`` for unknown ids; the core turns that into the
matching NotFound error. Storage and role bookkeeping live behind these
interfaces and are never reimplemented by the core.
"""
from contextlib import AbstractContextManager
from typing import List, Optional, Protocol

from courtbook.core.domain import Booking, BookingFilter, LocationRef, ResourceRef, UserRef
from courtbook.core.intervals import TimeInterval


class ResourceLookup(Protocol):
    def get_by_id(self, resource_id: str) -> Optional[ResourceRef]: ...


class LocationLookup(Protocol):
    def get_by_id(self, location_id: str) -> Optional[LocationRef]: ...


class UserLookup(Protocol):
    def get_by_id(self, user_id: str) -> Optional[UserRef]: ...


class OrganizationRoleLookup(Protocol):
    def exists(self, org_id: str) -> bool: ...

    def get_owner_id(self, org_id: str) -> Optional[str]: ...

    def is_owner_or_above(self, org_id: str, user_id: str) -> bool:
        """True when ``user_id`` is the designated owner of ``org_id``."""

    def is_manager_or_above(self, org_id: str, user_id: str) -> bool:
        """True for the owner and for every assigned organization manager."""

    def add_manager(self, org_id: str, user_id: str) -> None: ...

    def remove_manager(self, org_id: str, user_id: str) -> None: ...

    def set_owner(self, org_id: str, user_id: str) -> None: ...

    def list_managers(self, org_id: str) -> List[str]:
        """Ids of the assigned organization managers, owner excluded."""


class LocationRoleLookup(Protocol):
    def is_location_manager(self, location_id: str, user_id: str) -> bool: ...

    def is_location_manager_in_organization(self, org_id: str, user_id: str) -> bool: ...

    def add_manager(self, location_id: str, user_id: str) -> None: ...

    def remove_manager(self, location_id: str, user_id: str) -> None: ...

    def list_managers(self, location_id: str) -> List[str]: ...


class BookingRepository(Protocol):
    def create(self, booking: Booking) -> Booking:
        """Store a new booking; raises OverlapRejected if storage refuses the overlap."""

    def get_by_id(self, booking_id: str) -> Optional[Booking]: ...

    def list(self, booking_filter: BookingFilter) -> List[Booking]: ...

    def update(self, booking: Booking) -> Booking:
        """Persist changes; raises OverlapRejected if storage refuses the overlap."""

    def delete(self, booking_id: str) -> None: ...

    def has_overlap(self, resource_id: str, interval: TimeInterval, exclude_id: Optional[str] = None) -> bool: ...

    def lock_resource(self, resource_id: str) -> AbstractContextManager:
        """Serialize writers of one resource; commit on clean exit, roll back on error."""
