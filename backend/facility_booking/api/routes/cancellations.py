"""
Cancellation queues and decisions. Same two-step order as approvals:
the Group Director first, then the Facility Manager.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from facility_booking.api.deps import require
from facility_booking.api.routes.approvals import Decision
from facility_booking.db.session import get_db
from facility_booking.schemas.booking import BookingResponse
from facility_booking.services.approval_service import decide_cancellation, review_queue
from facility_booking.services.booking_state import Event, Machine
from facility_booking.services.identity_service import Identity

router = APIRouter(prefix="/cancellations", tags=["Cancellations"])


@router.get("/gd", response_model=list[BookingResponse])
async def gd_queue(
    identity: Identity = Depends(require("cancellations.gd")),
    db: AsyncSession = Depends(get_db),
):
    return await review_queue(db, identity, Machine.CANCELLATION)


@router.post("/gd/{booking_id}/{decision}", response_model=BookingResponse)
async def gd_decide(
    booking_id: int,
    decision: Decision,
    identity: Identity = Depends(require("cancellations.gd")),
    db: AsyncSession = Depends(get_db),
):
    return await decide_cancellation(db, identity, booking_id, Event(decision))


@router.get("/fm", response_model=list[BookingResponse])
async def fm_queue(
    identity: Identity = Depends(require("cancellations.fm")),
    db: AsyncSession = Depends(get_db),
):
    return await review_queue(db, identity, Machine.CANCELLATION)


@router.post("/fm/{booking_id}/{decision}", response_model=BookingResponse)
async def fm_decide(
    booking_id: int,
    decision: Decision,
    identity: Identity = Depends(require("cancellations.fm")),
    db: AsyncSession = Depends(get_db),
):
    """Approving here removes the booking from the facility calendar."""
    return await decide_cancellation(db, identity, booking_id, Event(decision))
