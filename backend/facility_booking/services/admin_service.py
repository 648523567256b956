"""
Admin service: users, groups and facilities.

Role assignment keeps the one-to-one rules intact:
  - a group has at most one GROUP_DIRECTOR member
  - a FACILITY_MANAGER manages exactly one facility, and a facility has one manager
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from facility_booking.core.exceptions import Conflict, NotFound, ValidationError
from facility_booking.core.logging import get_logger
from facility_booking.models.facility import Facility
from facility_booking.models.group import Group
from facility_booking.models.user import User, UserRole
from facility_booking.schemas.facility import FacilityCreate, FacilityUpdate, GroupCreate
from facility_booking.schemas.user import UserUpdate
from facility_booking.services import repository

logger = get_logger(__name__)


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.employee_id.asc()))
    return list(result.scalars().all())


async def _get_user(db: AsyncSession, employee_id: int) -> User:
    user = await repository.find_user_by_employee_id(db, employee_id)
    if not user:
        raise NotFound("User does not exist.")
    return user


async def _get_group(db: AsyncSession, group_id: int) -> Group:
    group = await db.get(Group, group_id)
    if not group:
        raise NotFound(f"Group {group_id} not found")
    return group


async def _current_director(db: AsyncSession, group_id: int) -> Optional[User]:
    result = await db.execute(
        select(User).where(User.group_id == group_id, User.role == UserRole.GROUP_DIRECTOR)
    )
    return result.scalar_one_or_none()


async def _release_facility(db: AsyncSession, user: User) -> None:
    result = await db.execute(select(Facility).where(Facility.manager_id == user.id))
    facility = result.unique().scalar_one_or_none()
    if facility:
        facility.manager_id = None
        logger.info("facility_manager_released", facility=facility.slug, employee_id=user.employee_id)


async def update_user(db: AsyncSession, employee_id: int, data: UserUpdate) -> User:
    user = await _get_user(db, employee_id)
    fields = data.model_dump(exclude_unset=True)

    if "group_id" in fields and fields["group_id"] is not None:
        await _get_group(db, fields["group_id"])

    new_role = fields.get("role") or user.role
    new_group_id = fields.get("group_id", user.group_id)

    if new_role == UserRole.GROUP_DIRECTOR:
        if new_group_id is None:
            raise ValidationError("group_id", "A Group Director must belong to a group")
        director = await _current_director(db, new_group_id)
        if director and director.id != user.id:
            raise Conflict("Group already has a director.", field="group_id")

    if user.role == UserRole.FACILITY_MANAGER and new_role != UserRole.FACILITY_MANAGER:
        await _release_facility(db, user)

    user.role = new_role
    user.group_id = new_group_id
    await db.flush()
    await db.refresh(user)

    logger.info("user_updated", employee_id=employee_id, role=user.role.value, group_id=user.group_id)
    return user


async def create_group(db: AsyncSession, data: GroupCreate) -> Group:
    existing = await db.execute(select(Group).where(Group.name == data.name))
    if existing.scalar_one_or_none():
        raise Conflict.unique("name")

    group = Group(name=data.name)
    db.add(group)
    await db.flush()
    await db.refresh(group)
    logger.info("group_created", group_id=group.id, name=group.name)
    return group


async def list_groups(db: AsyncSession) -> list[Group]:
    result = await db.execute(select(Group).order_by(Group.name.asc()))
    return list(result.scalars().all())


async def assign_group_director(db: AsyncSession, group_id: int, employee_id: int) -> User:
    """Make `employee_id` the director of the group, demoting any previous director."""
    await _get_group(db, group_id)
    user = await _get_user(db, employee_id)

    previous = await _current_director(db, group_id)
    if previous and previous.id != user.id:
        previous.role = UserRole.EMPLOYEE
        logger.info("group_director_demoted", group_id=group_id, employee_id=previous.employee_id)

    if user.role == UserRole.FACILITY_MANAGER:
        await _release_facility(db, user)

    user.role = UserRole.GROUP_DIRECTOR
    user.group_id = group_id
    await db.flush()
    await db.refresh(user)

    logger.info("group_director_assigned", group_id=group_id, employee_id=employee_id)
    return user


async def list_facilities(db: AsyncSession) -> list[Facility]:
    result = await db.execute(select(Facility).order_by(Facility.name.asc()))
    return list(result.unique().scalars().all())


async def _assign_manager(db: AsyncSession, facility: Facility, employee_id: int) -> None:
    user = await _get_user(db, employee_id)
    if user.role == UserRole.ADMIN:
        raise ValidationError("manager_employee_id", "An admin cannot manage a facility")

    result = await db.execute(
        select(Facility).where(Facility.manager_id == user.id, Facility.id != facility.id)
    )
    if result.unique().scalar_one_or_none():
        raise Conflict("User already manages another facility.", field="manager_employee_id")

    if facility.manager_id and facility.manager_id != user.id:
        previous = await db.get(User, facility.manager_id)
        if previous and previous.role == UserRole.FACILITY_MANAGER:
            previous.role = UserRole.EMPLOYEE

    user.role = UserRole.FACILITY_MANAGER
    facility.manager_id = user.id


async def create_facility(db: AsyncSession, data: FacilityCreate) -> Facility:
    if await repository.find_facility_by_slug(db, data.slug):
        raise Conflict.unique("slug")

    facility = Facility(name=data.name, slug=data.slug, icon=data.icon, is_active=data.is_active)
    db.add(facility)
    await db.flush()
    if data.manager_employee_id is not None:
        await _assign_manager(db, facility, data.manager_employee_id)
        await db.flush()
    await db.refresh(facility)

    logger.info("facility_created", facility=facility.slug, manager_id=facility.manager_id)
    return facility


async def update_facility(db: AsyncSession, slug: str, data: FacilityUpdate) -> Facility:
    facility = await repository.find_facility_by_slug(db, slug)
    if not facility:
        raise NotFound(f"Facility {slug} not found")

    fields = data.model_dump(exclude_unset=True)
    manager_employee_id = fields.pop("manager_employee_id", None)
    for key, value in fields.items():
        setattr(facility, key, value)
    if manager_employee_id is not None:
        await _assign_manager(db, facility, manager_employee_id)

    await db.flush()
    await db.refresh(facility)
    logger.info("facility_updated", facility=slug, changes=sorted(fields))
    return facility
