from courtbook.core.domain import LocationRef, ResourceRef, UserRef
from courtbook.core.errors import LocationNotFound, ResourceNotFound, UserNotFound
from courtbook.core.ports import LocationLookup, ResourceLookup, UserLookup


def require_resource(resources: ResourceLookup, resource_id: str) -> ResourceRef:
    resource = resources.get_by_id(resource_id)
    if resource is None:
        raise ResourceNotFound(f"resource {resource_id} not found")
    return resource


def require_location(locations: LocationLookup, location_id: str) -> LocationRef:
    location = locations.get_by_id(location_id)
    if location is None:
        raise LocationNotFound(f"location {location_id} not found")
    return location


def require_user(users: UserLookup, user_id: str) -> UserRef:
    user = users.get_by_id(user_id)
    if user is None:
        raise UserNotFound(f"user {user_id} not found")
    return user


def resolve_resource_location(
    resources: ResourceLookup, locations: LocationLookup, resource_id: str
) -> LocationRef:
    """Follow resource -> location."""
    resource = require_resource(resources, resource_id)
    return require_location(locations, resource.location_id)
