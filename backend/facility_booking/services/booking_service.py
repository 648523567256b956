"""
Booking service: creating requests and reading bookings per role scope.

Creation is the only write here. It runs inside the request transaction:

  1. Lock the facility row (SELECT ... FOR UPDATE on PostgreSQL)
  2. Look for an active booking overlapping [start_time, end_time)
  3. Insert the PENDING booking

The lock serializes concurrent requests for the same facility, so two
overlapping requests cannot both pass step 2. The partial unique index on
(facility_id, start_time) is the final safety net.

State transitions live in approval_service.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from facility_booking.core.exceptions import Conflict, Forbidden, NotFound
from facility_booking.core.logging import get_logger
from facility_booking.core.metrics import record_booking_request
from facility_booking.models.booking import Booking, BookingStatus, CancellationStatus
from facility_booking.models.user import UserRole
from facility_booking.schemas.booking import BookingCreate, BookingResponse
from facility_booking.services import repository
from facility_booking.services.cache_service import (
    get_cached_calendar, set_cached_calendar, mark_calendar_stale,
)
from facility_booking.services.identity_service import Identity

logger = get_logger(__name__)


async def request_booking(
    db: AsyncSession,
    identity: Identity,
    slug: str,
    booking_data: BookingCreate,
) -> Booking:
    """Create a PENDING booking request on an active facility."""
    if identity.role == UserRole.ADMIN:
        raise Forbidden("Admins cannot request bookings")

    facility = await repository.find_facility_by_slug(db, slug, for_update=True)
    if not facility or not facility.is_active:
        raise NotFound(f"Facility {slug} not found")

    booking = Booking(
        title=booking_data.title,
        purpose=booking_data.purpose,
        date=booking_data.date,
        start_time=booking_data.start_time,
        end_time=booking_data.end_time,
        color=booking_data.color,
        status=BookingStatus.PENDING,
        cancellation_status=CancellationStatus.NONE,
        requested_by_id=identity.user.id,
        facility_id=facility.id,
    )
    try:
        booking = await repository.create_booking(db, booking)
    except Conflict:
        record_booking_request("conflict")
        raise
    except Exception:
        record_booking_request("error")
        raise

    record_booking_request("created")
    logger.info(
        "booking_created",
        booking_id=booking.id,
        employee_id=identity.employee_id,
        facility=slug,
        start_time=str(booking.start_time),
        end_time=str(booking.end_time),
    )
    mark_calendar_stale(db, slug)
    return booking


async def get_calendar(db: AsyncSession, slug: str) -> list[dict]:
    """
    Calendar-visible bookings for a facility, newest start first.
    Served from Redis when cached.
    """
    cached = await get_cached_calendar(slug)
    if cached is not None:
        return cached

    facility = await repository.find_facility_by_slug(db, slug)
    if not facility:
        raise NotFound(f"Facility {slug} not found")

    bookings = await repository.find_bookings_by_facility(db, slug)
    payload = [BookingResponse.model_validate(b).model_dump(mode="json") for b in bookings]
    await set_cached_calendar(slug, payload)
    return payload


async def get_my_bookings(db: AsyncSession, identity: Identity) -> list[Booking]:
    return await repository.find_bookings(db, Booking.requested_by_id == identity.user.id)


async def get_group_bookings(db: AsyncSession, identity: Identity) -> list[Booking]:
    """Every booking requested by a member of the director's group."""
    if identity.group_id is None:
        return []
    return await repository.find_bookings(db, repository.in_group(identity.group_id))


async def get_facility_bookings(db: AsyncSession, identity: Identity) -> list[Booking]:
    """Every booking on the manager's facility."""
    if identity.facility_id is None:
        return []
    return await repository.find_bookings(db, Booking.facility_id == identity.facility_id)


async def get_all_bookings(db: AsyncSession) -> list[Booking]:
    return await repository.find_bookings(db)
