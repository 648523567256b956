"""
Authorization resolver: session identity -> role and scope.

Role is always read from the current User row. A Group Director is scoped to
their own group membership; a Facility Manager to the facility they manage.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from facility_booking.core.exceptions import NotFound, Unauthenticated
from facility_booking.models.facility import Facility
from facility_booking.models.user import User, UserRole
from facility_booking.services import repository


@dataclass(frozen=True)
class Identity:
    user: User
    role: UserRole
    group_id: Optional[int] = None
    facility_id: Optional[int] = None

    @property
    def employee_id(self) -> int:
        return self.user.employee_id


async def resolve_identity(db: AsyncSession, employee_id: Optional[int]) -> Identity:
    if employee_id is None:
        raise Unauthenticated()

    user = await repository.find_user_by_employee_id(db, employee_id)
    if not user:
        raise NotFound("User does not exist.")

    group_id = None
    facility_id = None
    if user.role == UserRole.GROUP_DIRECTOR:
        group_id = user.group_id
    elif user.role == UserRole.FACILITY_MANAGER:
        result = await db.execute(select(Facility.id).where(Facility.manager_id == user.id))
        facility_id = result.scalar_one_or_none()

    return Identity(user=user, role=user.role, group_id=group_id, facility_id=facility_id)
