"""
Persistence queries used by the booking core.

All writes that move a booking through its state machines go through
`update_booking_status`, which is conditional on the state the caller
observed:

    UPDATE bookings SET status = :next
    WHERE id = :booking_id AND status = :expected

If rows_affected == 0, another request already moved the booking (a second
approver, a double click) and the caller must surface a Conflict instead of
re-applying the transition. Lost races are not retried.
"""

from datetime import datetime
from typing import Iterable, Optional, Union

from sqlalchemy import select, update, func, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from facility_booking.core.exceptions import Conflict
from facility_booking.core.logging import get_logger
from facility_booking.models.booking import Booking, BookingStatus, CancellationStatus
from facility_booking.models.facility import Facility
from facility_booking.models.user import User

logger = get_logger(__name__)

CALENDAR_STATUSES = (BookingStatus.APPROVED_BY_FM, BookingStatus.APPROVED_BY_ADMIN)

BookingState = Union[BookingStatus, CancellationStatus]


async def find_user_by_employee_id(db: AsyncSession, employee_id: int) -> Optional[User]:
    result = await db.execute(select(User).where(User.employee_id == employee_id))
    return result.scalar_one_or_none()


async def find_facility_by_slug(
    db: AsyncSession,
    slug: str,
    for_update: bool = False,
) -> Optional[Facility]:
    query = select(Facility).where(Facility.slug == slug)
    if for_update:
        # Serializes concurrent booking creation on the same facility (PostgreSQL)
        query = query.with_for_update(of=Facility)
    result = await db.execute(query)
    return result.unique().scalar_one_or_none()


async def list_active_facilities(db: AsyncSession) -> list[Facility]:
    result = await db.execute(
        select(Facility).where(Facility.is_active.is_(True)).order_by(Facility.name.asc())
    )
    return list(result.unique().scalars().all())


async def find_booking(db: AsyncSession, booking_id: int) -> Optional[Booking]:
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    return result.unique().scalar_one_or_none()


def active_booking_filter():
    """Bookings that still occupy their time slot."""
    return and_(
        Booking.status != BookingStatus.REJECTED,
        Booking.cancellation_status != CancellationStatus.APPROVED_BY_FM,
    )


def calendar_filter():
    """Bookings shown on a facility's public calendar."""
    return and_(
        Booking.status.in_(CALENDAR_STATUSES),
        Booking.cancellation_status != CancellationStatus.APPROVED_BY_FM,
    )


async def find_overlapping_booking(
    db: AsyncSession,
    facility_id: int,
    start_time: datetime,
    end_time: datetime,
) -> Optional[Booking]:
    result = await db.execute(
        select(Booking)
        .where(
            Booking.facility_id == facility_id,
            Booking.start_time < end_time,
            Booking.end_time > start_time,
            active_booking_filter(),
        )
        .limit(1)
    )
    return result.unique().scalar_one_or_none()


async def create_booking(db: AsyncSession, booking: Booking) -> Booking:
    """
    Insert a booking request, rejecting any overlap with an active booking
    on the same facility. The caller must hold the facility row lock
    (find_facility_by_slug(for_update=True)) so two overlapping inserts
    cannot both pass the check.
    """
    overlapping = await find_overlapping_booking(
        db, booking.facility_id, booking.start_time, booking.end_time
    )
    if overlapping:
        logger.warning(
            "booking_overlap_rejected",
            facility_id=booking.facility_id,
            conflicting_booking_id=overlapping.id,
        )
        raise Conflict(
            "The requested time overlaps an existing booking on this facility.",
            field="start_time, end_time",
        )

    db.add(booking)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        logger.warning("booking_unique_violation", facility_id=booking.facility_id)
        raise Conflict.unique("facility_id, start_time")
    await db.refresh(booking)
    return booking


async def find_bookings(db: AsyncSession, *criteria, newest_first: bool = True) -> list[Booking]:
    order = Booking.start_time.desc() if newest_first else Booking.start_time.asc()
    result = await db.execute(select(Booking).where(*criteria).order_by(order))
    return list(result.unique().scalars().all())


async def find_bookings_by_facility(
    db: AsyncSession,
    slug: str,
    statuses: Iterable[BookingStatus] = CALENDAR_STATUSES,
) -> list[Booking]:
    return await find_bookings(
        db,
        Booking.facility.has(Facility.slug == slug),
        Booking.status.in_(tuple(statuses)),
        Booking.cancellation_status != CancellationStatus.APPROVED_BY_FM,
    )


def in_group(group_id: int):
    """Scope clause: bookings whose requester belongs to the group."""
    return Booking.requested_by.has(User.group_id == group_id)


async def count_bookings(db: AsyncSession, *criteria) -> int:
    result = await db.execute(select(func.count(Booking.id)).where(*criteria))
    return result.scalar_one()


async def update_booking_status(
    db: AsyncSession,
    booking_id: int,
    expected: BookingState,
    next_state: BookingState,
) -> bool:
    """
    Conditionally move a booking from `expected` to `next_state`.

    The column is picked from the state type: BookingStatus drives the
    approval chain, CancellationStatus the cancellation chain. Returns
    False when the row was no longer in `expected`.
    """
    column = Booking.status if isinstance(expected, BookingStatus) else Booking.cancellation_status
    result = await db.execute(
        update(Booking)
        .where(Booking.id == booking_id, column == expected)
        .values({column.key: next_state})
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
