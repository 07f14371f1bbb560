import pytest

from courtbook.core.authorization import FULL_CONTROL, OWNER_TRANSITIONS, Role
from courtbook.core.domain import Actor, BookingStatus
from courtbook.core.errors import (
    LocationNotFound,
    OrganizationNotFound,
    ResourceNotFound,
    RoleConflict,
    UserNotFound,
)

from tests.fakes import InMemoryBookings, build_resolver, build_role_assignments, span, standard_directory


@pytest.fixture
def directory():
    return standard_directory()


@pytest.fixture
def resolver(directory):
    return build_resolver(directory)


@pytest.fixture
def assignments(directory):
    return build_role_assignments(directory)


@pytest.fixture
def alice_booking():
    return InMemoryBookings().add("court", "alice", span(10, 11))


@pytest.mark.parametrize(
    "user_id, is_admin, role",
    [
        ("root", True, Role.SYSTEM_ADMIN),
        ("owner", False, Role.ORGANIZATION_OWNER),
        ("manager", False, Role.ORGANIZATION_MANAGER),
        ("keeper", False, Role.LOCATION_MANAGER),
        ("alice", False, Role.BOOKING_OWNER),
    ],
)
def test_booking_role_by_precedence(resolver, alice_booking, user_id, is_admin, role):
    decision = resolver.can_mutate_booking(Actor(user_id, is_system_admin=is_admin), alice_booking)
    assert decision.allowed
    assert decision.role is role
    assert decision.can_reschedule
    assert decision.can_delete


@pytest.mark.parametrize("user_id", ["root", "owner", "manager", "keeper"])
def test_staff_may_set_any_status(resolver, alice_booking, user_id):
    actor = Actor(user_id, is_system_admin=user_id == "root")
    decision = resolver.can_mutate_booking(actor, alice_booking)
    assert decision.allowed_status_transitions == FULL_CONTROL
    assert all(decision.permits_status(status) for status in BookingStatus)


def test_booking_owner_may_only_cancel(resolver, alice_booking):
    decision = resolver.can_mutate_booking(Actor("alice"), alice_booking)
    assert decision.allowed_status_transitions == OWNER_TRANSITIONS
    assert decision.permits_status(BookingStatus.CANCELLED)
    assert not decision.permits_status(BookingStatus.CONFIRMED)
    assert not decision.permits_status(BookingStatus.PENDING)


def test_stranger_is_denied(resolver, alice_booking):
    decision = resolver.can_mutate_booking(Actor("bob"), alice_booking)
    assert not decision.allowed
    assert decision.role is None
    assert not decision.permits_status(BookingStatus.CANCELLED)
    assert not resolver.can_view_booking(Actor("bob"), alice_booking)


def test_manager_booking_own_court_keeps_full_control(directory, resolver):
    booking = InMemoryBookings().add("court", "manager", span(10, 11))
    decision = resolver.can_mutate_booking(Actor("manager"), booking)
    assert decision.role is Role.ORGANIZATION_MANAGER
    assert decision.permits_status(BookingStatus.CONFIRMED)


def test_location_manager_of_another_location_is_denied(directory, resolver):
    directory.add_location("annex", "org")
    directory.add_resource("annex-court", "annex")
    booking = InMemoryBookings().add("annex-court", "alice", span(10, 11))
    assert not resolver.can_mutate_booking(Actor("keeper"), booking).allowed


def test_admin_needs_no_lookups(directory, resolver, alice_booking):
    resolver.can_mutate_booking(Actor("root", is_system_admin=True), alice_booking)
    assert resolver.is_organization_owner_or_above(Actor("root", is_system_admin=True), "missing-org")
    assert directory.calls == []


def test_missing_resource_surfaces_as_not_found(resolver):
    booking = InMemoryBookings().add("ghost-court", "alice", span(10, 11))
    with pytest.raises(ResourceNotFound):
        resolver.can_mutate_booking(Actor("alice"), booking)


def test_organization_predicates(resolver):
    assert resolver.is_organization_owner(Actor("owner"), "org")
    assert not resolver.is_organization_owner(Actor("manager"), "org")
    assert resolver.is_organization_owner_or_above(Actor("manager"), "org")
    assert not resolver.is_organization_owner_or_above(Actor("keeper"), "org")
    with pytest.raises(OrganizationNotFound):
        resolver.is_organization_owner_or_above(Actor("alice"), "missing-org")


def test_location_predicates(resolver):
    assert resolver.is_location_manager_or_above(Actor("keeper"), "loc")
    assert resolver.is_location_manager_or_above(Actor("manager"), "loc")
    assert resolver.is_location_manager_or_above(Actor("owner"), "loc")
    assert not resolver.is_location_manager_or_above(Actor("alice"), "loc")
    assert resolver.can_manage_location_staff(Actor("manager"), "loc")
    assert not resolver.can_manage_location_staff(Actor("keeper"), "loc")
    with pytest.raises(LocationNotFound):
        resolver.is_location_manager_or_above(Actor("alice"), "missing-loc")


def test_assign_organization_manager(directory, assignments):
    assignments.assign_organization_manager("org", "alice")
    assert ("org", "alice") in directory.org_managers


def test_location_manager_cannot_become_organization_manager(assignments):
    with pytest.raises(RoleConflict):
        assignments.assign_organization_manager("org", "keeper")


def test_organization_manager_cannot_become_location_manager(assignments):
    with pytest.raises(RoleConflict):
        assignments.assign_location_manager("loc", "manager")


def test_owner_cannot_become_location_manager(assignments):
    with pytest.raises(RoleConflict):
        assignments.assign_location_manager("loc", "owner")


def test_owner_cannot_become_organization_manager(assignments):
    with pytest.raises(RoleConflict):
        assignments.assign_organization_manager("org", "owner")


def test_exclusion_holds_in_either_order(directory, assignments):
    assignments.assign_location_manager("loc", "alice")
    with pytest.raises(RoleConflict):
        assignments.assign_organization_manager("org", "alice")

    assignments.assign_organization_manager("org", "bob")
    with pytest.raises(RoleConflict):
        assignments.assign_location_manager("loc", "bob")

    assert ("org", "alice") not in directory.org_managers
    assert ("loc", "bob") not in directory.location_managers


def test_removed_location_manager_can_be_promoted(directory, assignments):
    assignments.remove_location_manager("loc", "keeper")
    assignments.assign_organization_manager("org", "keeper")
    assert ("org", "keeper") in directory.org_managers


def test_location_manager_in_other_organization_is_fine(directory, assignments):
    directory.add_organization("other-org", owner_id="bob")
    directory.add_location("other-loc", "other-org")
    assignments.assign_location_manager("other-loc", "manager")
    assert ("other-loc", "manager") in directory.location_managers


def test_transfer_ownership(directory, assignments):
    assignments.transfer_organization_ownership("org", "manager")
    assert directory.owners["org"] == "manager"
    assert ("org", "manager") not in directory.org_managers


def test_transfer_ownership_to_location_manager_conflicts(directory, assignments):
    with pytest.raises(RoleConflict):
        assignments.transfer_organization_ownership("org", "keeper")
    assert directory.owners["org"] == "owner"


@pytest.mark.parametrize(
    "call, args, error",
    [
        ("assign_organization_manager", ("missing-org", "alice"), OrganizationNotFound),
        ("assign_organization_manager", ("org", "nobody"), UserNotFound),
        ("assign_location_manager", ("missing-loc", "alice"), LocationNotFound),
        ("assign_location_manager", ("loc", "nobody"), UserNotFound),
        ("transfer_organization_ownership", ("missing-org", "alice"), OrganizationNotFound),
    ],
)
def test_assignments_check_targets_exist(assignments, call, args, error):
    with pytest.raises(error):
        getattr(assignments, call)(*args)


def test_list_staff(assignments):
    assert assignments.list_organization_managers("org") == ["manager"]
    assert assignments.list_location_managers("loc") == ["keeper"]
    with pytest.raises(OrganizationNotFound):
        assignments.list_organization_managers("missing-org")
    with pytest.raises(LocationNotFound):
        assignments.list_location_managers("missing-loc")
