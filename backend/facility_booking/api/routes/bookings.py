"""
Booking listings per role scope, and cancellation requests.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from facility_booking.api.deps import require
from facility_booking.db.session import get_db
from facility_booking.schemas.booking import BookingResponse
from facility_booking.services.approval_service import request_cancellation
from facility_booking.services.booking_service import (
    get_my_bookings, get_group_bookings, get_facility_bookings,
)
from facility_booking.services.identity_service import Identity

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.get("/mine", response_model=list[BookingResponse])
async def list_my_bookings(
    identity: Identity = Depends(require("bookings.mine")),
    db: AsyncSession = Depends(get_db),
):
    """Every booking the caller has requested, in any state."""
    return await get_my_bookings(db, identity)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: int,
    identity: Identity = Depends(require("bookings.cancel")),
    db: AsyncSession = Depends(get_db),
):
    """
    Ask for an approved booking to be cancelled. The booking stays on the
    calendar until the Group Director and then the Facility Manager approve.
    """
    return await request_cancellation(db, identity, booking_id)


@router.get("/gd", response_model=list[BookingResponse])
async def list_group_bookings(
    identity: Identity = Depends(require("bookings.gd")),
    db: AsyncSession = Depends(get_db),
):
    return await get_group_bookings(db, identity)


@router.get("/fm", response_model=list[BookingResponse])
async def list_facility_bookings(
    identity: Identity = Depends(require("bookings.fm")),
    db: AsyncSession = Depends(get_db),
):
    return await get_facility_bookings(db, identity)
