"""
Approval queues and decisions for Group Directors and Facility Managers.

GD queue: PENDING bookings requested by members of the director's group.
FM queue: APPROVED_BY_GD bookings on the manager's facility.
"""

from typing import Literal

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from facility_booking.api.deps import require
from facility_booking.db.session import get_db
from facility_booking.schemas.booking import BookingResponse
from facility_booking.services.approval_service import decide_booking, review_queue
from facility_booking.services.booking_state import Event, Machine
from facility_booking.services.identity_service import Identity

router = APIRouter(prefix="/approvals", tags=["Approvals"])

Decision = Literal["approve", "reject"]


@router.get("/gd", response_model=list[BookingResponse])
async def gd_queue(
    identity: Identity = Depends(require("approvals.gd")),
    db: AsyncSession = Depends(get_db),
):
    return await review_queue(db, identity, Machine.APPROVAL)


@router.post("/gd/{booking_id}/{decision}", response_model=BookingResponse)
async def gd_decide(
    booking_id: int,
    decision: Decision,
    identity: Identity = Depends(require("approvals.gd")),
    db: AsyncSession = Depends(get_db),
):
    """Approve or reject a PENDING booking from the director's group."""
    return await decide_booking(db, identity, booking_id, Event(decision))


@router.get("/fm", response_model=list[BookingResponse])
async def fm_queue(
    identity: Identity = Depends(require("approvals.fm")),
    db: AsyncSession = Depends(get_db),
):
    return await review_queue(db, identity, Machine.APPROVAL)


@router.post("/fm/{booking_id}/{decision}", response_model=BookingResponse)
async def fm_decide(
    booking_id: int,
    decision: Decision,
    identity: Identity = Depends(require("approvals.fm")),
    db: AsyncSession = Depends(get_db),
):
    """Approve or reject a GD-approved booking on the manager's facility."""
    return await decide_booking(db, identity, booking_id, Event(decision))
