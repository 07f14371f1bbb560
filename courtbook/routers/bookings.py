import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from courtbook.config import get_settings
from courtbook.core.domain import Actor, BookingFilter, BookingStatus
from courtbook.core.lifecycle import BookingLifecycle
from courtbook.dependencies import get_lifecycle
from courtbook.schemas.booking import BookingCreate, BookingResponse, BookingUpdate
from courtbook.utils.auth import get_current_actor

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/bookings",
    tags=["bookings"],
)


@router.post(
    "/",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new booking",
    description="Book a resource for a time range. The booking starts out pending.",
)
def create_booking(
    booking: BookingCreate,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    actor: Actor = Depends(get_current_actor),
):
    """
    Create a new booking for a resource.
    Requires authentication.

    - **resource_id**: ID of the resource to book.
    - **start_time**: Start of the booking; must not be in the past.
    - **end_time**: End of the booking; must be after the start.

    Fails with 409 if the resource is already booked for any part of the range.
    """
    logger.debug(f"Creating booking for user: {actor.user_id}, resource_id: {booking.resource_id}")
    created = lifecycle.create_from_times(actor, booking.resource_id, booking.start_time, booking.end_time)
    return BookingResponse.from_booking(created)


@router.get(
    "/",
    response_model=List[BookingResponse],
    summary="List bookings",
    description="System admins see all bookings; everyone else sees their own.",
)
def get_bookings(
    skip: int = 0,
    limit: int = 100,
    resource_id: Optional[str] = None,
    user_id: Optional[str] = None,
    booking_status: Optional[str] = None,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    actor: Actor = Depends(get_current_actor),
):
    """
    Retrieve a list of bookings.

    - **skip**: Number of bookings to skip.
    - **limit**: Maximum number of bookings to return.
    - **resource_id**: Only bookings of this resource.
    - **user_id**: Only bookings of this user (admins only).
    - **booking_status**: Only bookings in this status.
    """
    booking_filter = BookingFilter(
        user_id=user_id,
        resource_id=resource_id,
        status=BookingStatus.parse(booking_status) if booking_status else None,
        offset=max(skip, 0),
        limit=min(max(limit, 1), get_settings().booking_list_limit),
    )
    bookings = lifecycle.list(actor, booking_filter)
    logger.debug(f"Retrieved {len(bookings)} bookings")
    return [BookingResponse.from_booking(booking) for booking in bookings]


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get a booking by ID",
    description="Visible to the booking owner and to managers of the resource's location or above.",
)
def get_booking(
    booking_id: str,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    actor: Actor = Depends(get_current_actor),
):
    """
    Retrieve a single booking.

    - **booking_id**: ID of the booking.

    Fails with 403 if the caller neither owns the booking nor manages its location.
    """
    return BookingResponse.from_booking(lifecycle.get(actor, booking_id))


@router.put(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Update a booking",
    description="Reschedule a booking and/or change its status.",
)
def update_booking(
    booking_id: str,
    booking_update: BookingUpdate,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    actor: Actor = Depends(get_current_actor),
):
    """
    Update a booking.

    - **start_time**: (Optional) New start time.
    - **end_time**: (Optional) New end time.
    - **status**: (Optional) New status. Booking owners may only cancel;
      location managers and above may set any status.

    Returns the updated booking.
    """
    updated = lifecycle.update(
        actor,
        booking_id,
        new_start=booking_update.start_time,
        new_end=booking_update.end_time,
        new_status=booking_update.status,
    )
    return BookingResponse.from_booking(updated)


@router.delete(
    "/{booking_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a booking",
    description="Delete a booking. Allowed for its owner and for managers of the location or above.",
)
def delete_booking(
    booking_id: str,
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    actor: Actor = Depends(get_current_actor),
):
    """
    Delete a booking for good. Cancelling through PUT keeps the record instead.
    """
    lifecycle.delete(actor, booking_id)
    return None
