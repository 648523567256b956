"""
Dashboard endpoints: profile with facility list, and pending-queue badges.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from facility_booking.api.deps import require
from facility_booking.core.exceptions import Forbidden
from facility_booking.db.session import get_db
from facility_booking.schemas.booking import DashboardCount
from facility_booking.schemas.facility import DashboardResponse
from facility_booking.services import repository
from facility_booking.services.dashboard_service import pending_counts
from facility_booking.services.identity_service import Identity

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardResponse)
async def dashboard(
    identity: Identity = Depends(require("dashboard.overview")),
    db: AsyncSession = Depends(get_db),
):
    """The caller's profile and every active facility with its manager."""
    facilities = await repository.list_active_facilities(db)
    return DashboardResponse.model_validate(
        {"user": identity.user, "facilities": facilities}, from_attributes=True
    )


@router.get("/count/{employee_id}", response_model=DashboardCount, response_model_exclude_none=True)
async def dashboard_count(
    employee_id: int,
    identity: Identity = Depends(require("dashboard.count")),
    db: AsyncSession = Depends(get_db),
):
    """
    Approval and cancellation queue sizes for the caller.
    The path id must be the caller's own; roles without a queue get {}.
    """
    if employee_id != identity.employee_id:
        raise Forbidden("You can only view your own dashboard counts")
    return await pending_counts(db, identity)
