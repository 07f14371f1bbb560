from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from courtbook.core.domain import BookingStatus
from courtbook.utils.validation_helpers import validate_timestamp


class BookingCreate(BaseModel):
    resource_id: str
    start_time: datetime
    end_time: datetime

    @field_validator("start_time", "end_time")
    @classmethod
    def check_timestamps(cls, value):
        return validate_timestamp(value)


class BookingUpdate(BaseModel):
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    # plain string so unknown values reach the domain check and come back as invalid_status
    status: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_timestamps(cls, value):
        return validate_timestamp(value)


class BookingResponse(BaseModel):
    id: str
    resource_id: str
    user_id: str
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_booking(cls, booking) -> "BookingResponse":
        return cls(
            id=booking.id,
            resource_id=booking.resource_id,
            user_id=booking.user_id,
            start_time=booking.start,
            end_time=booking.end,
            status=booking.status,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )


class AvailabilitySlotResponse(BaseModel):
    start_time: datetime
    end_time: datetime


class AvailabilityResponse(BaseModel):
    resource_id: str
    day: date
    slots: List[AvailabilitySlotResponse]
