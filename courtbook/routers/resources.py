import logging
from datetime import date

from fastapi import APIRouter, Depends

from courtbook.core.domain import Actor
from courtbook.core.lifecycle import BookingLifecycle
from courtbook.dependencies import get_lifecycle
from courtbook.schemas.booking import AvailabilityResponse, AvailabilitySlotResponse
from courtbook.utils.auth import get_current_actor

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/resources",
    tags=["resources"],
)


@router.get(
    "/{resource_id}/availability",
    response_model=AvailabilityResponse,
    summary="List free time slots",
    description="Free slots of a resource within its location's opening hours on one day.",
)
def get_availability(
    resource_id: str,
    date: date,  # pylint: disable=redefined-outer-name
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    actor: Actor = Depends(get_current_actor),
):
    """
    List available time slots for a resource.
    Requires authentication.

    - **resource_id**: ID of the resource to check availability for.
    - **date**: Date to check availability (e.g., 2025-05-04).

    Returns the gaps between live bookings, in ascending order.
    """
    logger.debug(f"User {actor.user_id} fetching available slots for resource_id: {resource_id}, date: {date}")
    slots = lifecycle.get_availability(resource_id, date)
    return AvailabilityResponse(
        resource_id=resource_id,
        day=date,
        slots=[AvailabilitySlotResponse(start_time=slot.start, end_time=slot.end) for slot in slots],
    )
