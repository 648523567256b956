"""
Facility calendar and booking-request endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from facility_booking.api.deps import require
from facility_booking.db.session import get_db
from facility_booking.schemas.booking import BookingCreate, BookingResponse
from facility_booking.services.booking_service import get_calendar, request_booking
from facility_booking.services.identity_service import Identity

router = APIRouter(prefix="/facility", tags=["Facilities"])


@router.get("/{slug}", response_model=list[BookingResponse])
async def facility_calendar(
    slug: str,
    identity: Identity = Depends(require("facility.calendar")),
    db: AsyncSession = Depends(get_db),
):
    """
    Approved bookings on a facility, newest first.
    Cached in Redis per facility; invalidated on every booking write.
    """
    return await get_calendar(db, slug)


@router.post("/{slug}", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking_request(
    slug: str,
    booking_data: BookingCreate,
    identity: Identity = Depends(require("facility.request")),
    db: AsyncSession = Depends(get_db),
):
    """
    Request a time slot. The booking starts PENDING and needs Group Director
    then Facility Manager approval. Overlapping an active booking returns 409.
    """
    return await request_booking(db, identity, slug, booking_data)
