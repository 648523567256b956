"""
Admin endpoints: booking override, users, groups, facilities.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from facility_booking.api.deps import require
from facility_booking.db.session import get_db
from facility_booking.schemas.booking import BookingResponse
from facility_booking.schemas.facility import (
    FacilityCreate, FacilityUpdate, FacilityResponse, GroupCreate, GroupDirectorAssign, GroupResponse,
)
from facility_booking.schemas.user import UserResponse, UserUpdate
from facility_booking.services import admin_service
from facility_booking.services.approval_service import override_booking
from facility_booking.services.booking_service import get_all_bookings
from facility_booking.services.identity_service import Identity

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/bookings", response_model=list[BookingResponse])
async def list_bookings(
    identity: Identity = Depends(require("admin.bookings")),
    db: AsyncSession = Depends(get_db),
):
    return await get_all_bookings(db)


@router.post("/bookings/{booking_id}/override", response_model=BookingResponse)
async def override(
    booking_id: int,
    identity: Identity = Depends(require("admin.bookings")),
    db: AsyncSession = Depends(get_db),
):
    """Approve a PENDING or GD-approved booking directly (APPROVED_BY_ADMIN)."""
    return await override_booking(db, identity, booking_id)


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    identity: Identity = Depends(require("admin.users")),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.list_users(db)


@router.patch("/users/{employee_id}", response_model=UserResponse)
async def update_user(
    employee_id: int,
    data: UserUpdate,
    identity: Identity = Depends(require("admin.users")),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.update_user(db, employee_id, data)


@router.get("/groups", response_model=list[GroupResponse])
async def list_groups(
    identity: Identity = Depends(require("admin.groups")),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.list_groups(db)


@router.post("/groups", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    data: GroupCreate,
    identity: Identity = Depends(require("admin.groups")),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.create_group(db, data)


@router.put("/groups/{group_id}/director", response_model=UserResponse)
async def assign_director(
    group_id: int,
    data: GroupDirectorAssign,
    identity: Identity = Depends(require("admin.groups")),
    db: AsyncSession = Depends(get_db),
):
    """Make an employee the group's director; the previous director becomes an employee."""
    return await admin_service.assign_group_director(db, group_id, data.employee_id)


@router.get("/facilities", response_model=list[FacilityResponse])
async def list_facilities(
    identity: Identity = Depends(require("admin.facilities")),
    db: AsyncSession = Depends(get_db),
):
    """All facilities, including inactive ones."""
    return await admin_service.list_facilities(db)


@router.post("/facilities", response_model=FacilityResponse, status_code=status.HTTP_201_CREATED)
async def create_facility(
    data: FacilityCreate,
    identity: Identity = Depends(require("admin.facilities")),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.create_facility(db, data)


@router.patch("/facilities/{slug}", response_model=FacilityResponse)
async def update_facility(
    slug: str,
    data: FacilityUpdate,
    identity: Identity = Depends(require("admin.facilities")),
    db: AsyncSession = Depends(get_db),
):
    return await admin_service.update_facility(db, slug, data)
