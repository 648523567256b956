"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from facility_booking.models.booking import BookingStatus, CancellationStatus
from facility_booking.schemas.user import UserSummary


class BookingCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    purpose: Optional[str] = Field(None, max_length=1000)
    date: date
    start_time: datetime
    end_time: datetime
    color: Optional[str] = Field(None, max_length=32)

    @field_validator("start_time")
    @classmethod
    def start_on_booking_date(cls, start_time: datetime, info: ValidationInfo) -> datetime:
        day = info.data.get("date")
        if day is not None and start_time.date() != day:
            raise ValueError("start_time must fall on the booking date")
        return start_time

    @field_validator("end_time")
    @classmethod
    def end_after_start(cls, end_time: datetime, info: ValidationInfo) -> datetime:
        start_time = info.data.get("start_time")
        if start_time is None:
            return end_time
        # Aware and naive datetimes do not compare
        if (start_time.tzinfo is None) != (end_time.tzinfo is None):
            raise ValueError("end_time must use the same timezone form as start_time")
        if end_time <= start_time:
            raise ValueError("end_time must be after start_time")
        return end_time


class FacilityRef(BaseModel):
    name: str
    slug: str

    model_config = {"from_attributes": True}


class BookingResponse(BaseModel):
    id: int
    title: str
    purpose: Optional[str]
    date: date
    start_time: datetime
    end_time: datetime
    color: Optional[str]
    status: BookingStatus
    cancellation_status: CancellationStatus
    requested_by: UserSummary
    facility: FacilityRef
    created_at: datetime

    model_config = {"from_attributes": True}


class DashboardCount(BaseModel):
    approval_count: Optional[int] = None
    cancellation_count: Optional[int] = None
