"""
Dashboard aggregator: pending-queue badge counts per role.

Counts are derived from the state machines: for each machine, count the
bookings in the caller's scope sitting in the state that awaits the
caller's decision. Only Group Directors and Facility Managers have queues.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from facility_booking.models.booking import Booking
from facility_booking.models.user import UserRole
from facility_booking.services import repository
from facility_booking.services.booking_state import Actor, Machine, awaiting_state
from facility_booking.services.identity_service import Identity

QUEUE_ROLES = {
    UserRole.GROUP_DIRECTOR: Actor.GROUP_DIRECTOR,
    UserRole.FACILITY_MANAGER: Actor.FACILITY_MANAGER,
}


async def pending_counts(db: AsyncSession, identity: Identity) -> dict[str, Optional[int]]:
    actor = QUEUE_ROLES.get(identity.role)
    if actor is None:
        return {}

    if actor == Actor.GROUP_DIRECTOR:
        if identity.group_id is None:
            return {"approval_count": 0, "cancellation_count": 0}
        scope = repository.in_group(identity.group_id)
    else:
        if identity.facility_id is None:
            return {"approval_count": 0, "cancellation_count": 0}
        scope = Booking.facility_id == identity.facility_id

    approval_count = await repository.count_bookings(
        db, scope, Booking.status == awaiting_state(Machine.APPROVAL, actor)
    )
    cancellation_count = await repository.count_bookings(
        db, scope, Booking.cancellation_status == awaiting_state(Machine.CANCELLATION, actor)
    )
    return {"approval_count": approval_count, "cancellation_count": cancellation_count}
