import logging
from typing import List

from fastapi import APIRouter, Depends, status

from courtbook.core.authorization import AuthorizationResolver, RoleAssignments
from courtbook.core.domain import Actor
from courtbook.core.errors import PermissionDenied
from courtbook.dependencies import get_authorization, get_role_assignments
from courtbook.schemas.roles import ManagerAssignment, ManagerResponse
from courtbook.utils.auth import get_current_actor

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/locations",
    tags=["locations"],
)


@router.get(
    "/{location_id}/managers",
    response_model=List[ManagerResponse],
    summary="List location managers",
)
def list_location_managers(
    location_id: str,
    authorization: AuthorizationResolver = Depends(get_authorization),
    roles: RoleAssignments = Depends(get_role_assignments),
    actor: Actor = Depends(get_current_actor),
):
    """
    List the managers of a location.

    Location managers see their peers; organization staff and system admins
    see the managers of every location in the organization.
    """
    if not authorization.is_location_manager_or_above(actor, location_id):
        logger.warning(f"User {actor.user_id} may not list managers of location {location_id}")
        raise PermissionDenied("only location staff can list location managers")
    return [ManagerResponse(user_id=user_id) for user_id in roles.list_location_managers(location_id)]


@router.post(
    "/{location_id}/managers",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Add a location manager",
    description="Organization managers and above only. Fails with 409 if the user is staff of the organization.",
)
def add_location_manager(
    location_id: str,
    assignment: ManagerAssignment,
    authorization: AuthorizationResolver = Depends(get_authorization),
    roles: RoleAssignments = Depends(get_role_assignments),
    actor: Actor = Depends(get_current_actor),
):
    if not authorization.can_manage_location_staff(actor, location_id):
        logger.warning(f"User {actor.user_id} may not assign managers of location {location_id}")
        raise PermissionDenied("only organization staff can assign location managers")
    roles.assign_location_manager(location_id, assignment.user_id)
    return None


@router.delete(
    "/{location_id}/managers/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a location manager",
)
def remove_location_manager(
    location_id: str,
    user_id: str,
    authorization: AuthorizationResolver = Depends(get_authorization),
    roles: RoleAssignments = Depends(get_role_assignments),
    actor: Actor = Depends(get_current_actor),
):
    if not authorization.can_manage_location_staff(actor, location_id):
        logger.warning(f"User {actor.user_id} may not remove managers of location {location_id}")
        raise PermissionDenied("only organization staff can remove location managers")
    roles.remove_location_manager(location_id, user_id)
    return None
