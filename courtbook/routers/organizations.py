import logging
from typing import List

from fastapi import APIRouter, Depends, status

from courtbook.core.authorization import AuthorizationResolver, RoleAssignments
from courtbook.core.domain import Actor
from courtbook.core.errors import PermissionDenied
from courtbook.dependencies import get_authorization, get_role_assignments
from courtbook.schemas.roles import ManagerAssignment, ManagerResponse, OwnershipTransfer
from courtbook.utils.auth import get_current_actor

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/organizations",
    tags=["organizations"],
)


def _require_owner(authorization: AuthorizationResolver, actor: Actor, org_id: str):
    if not authorization.is_organization_owner(actor, org_id):
        logger.warning(f"User {actor.user_id} is not the owner of organization {org_id}")
        raise PermissionDenied("only the organization owner can manage organization staff")


@router.get(
    "/{org_id}/managers",
    response_model=List[ManagerResponse],
    summary="List organization managers",
    description="Visible to the owner, the organization managers and system admins.",
)
def list_organization_managers(
    org_id: str,
    authorization: AuthorizationResolver = Depends(get_authorization),
    roles: RoleAssignments = Depends(get_role_assignments),
    actor: Actor = Depends(get_current_actor),
):
    if not authorization.is_organization_owner_or_above(actor, org_id):
        logger.warning(f"User {actor.user_id} may not list managers of organization {org_id}")
        raise PermissionDenied("only organization staff can list organization managers")
    return [ManagerResponse(user_id=user_id) for user_id in roles.list_organization_managers(org_id)]


@router.post(
    "/{org_id}/managers",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Add an organization manager",
    description="Owner or system admin only. Fails with 409 if the user manages a location of this organization.",
)
def add_organization_manager(
    org_id: str,
    assignment: ManagerAssignment,
    authorization: AuthorizationResolver = Depends(get_authorization),
    roles: RoleAssignments = Depends(get_role_assignments),
    actor: Actor = Depends(get_current_actor),
):
    _require_owner(authorization, actor, org_id)
    roles.assign_organization_manager(org_id, assignment.user_id)
    return None


@router.delete(
    "/{org_id}/managers/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove an organization manager",
)
def remove_organization_manager(
    org_id: str,
    user_id: str,
    authorization: AuthorizationResolver = Depends(get_authorization),
    roles: RoleAssignments = Depends(get_role_assignments),
    actor: Actor = Depends(get_current_actor),
):
    _require_owner(authorization, actor, org_id)
    roles.remove_organization_manager(org_id, user_id)
    return None


@router.put(
    "/{org_id}/owner",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Transfer organization ownership",
    description="Fails with 409 if the new owner manages a location of this organization.",
)
def transfer_ownership(
    org_id: str,
    transfer: OwnershipTransfer,
    authorization: AuthorizationResolver = Depends(get_authorization),
    roles: RoleAssignments = Depends(get_role_assignments),
    actor: Actor = Depends(get_current_actor),
):
    _require_owner(authorization, actor, org_id)
    roles.transfer_organization_ownership(org_id, transfer.user_id)
    return None
