"""
Approval service: moves bookings through the approval and cancellation
state machines on behalf of an authenticated actor.

Every decision is one read-check-write:

  1. Read the booking (404 if absent)
  2. Scope guard: the actor must own the booking's scope
       GD        -> requester is in the director's group
       FM        -> booking is on the manager's facility
       requester -> booking was requested by the caller
     Failure -> 403, nothing written
  3. State guard: booking_state.plan_transition picks the transition
     for the state observed in step 1 (403 too early, 409 too late)
  4. Conditional write: UPDATE ... WHERE id = :id AND <column> = :observed
     0 rows -> 409. Someone else moved the booking between 1 and 4.

Step 4 is what makes duplicate clicks and GD/FM races safe: whichever
request commits first wins; the other observes a stale precondition.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from facility_booking.core.exceptions import Conflict, Forbidden, NotFound
from facility_booking.core.logging import get_logger
from facility_booking.core.metrics import record_transition
from facility_booking.models.booking import Booking
from facility_booking.services import repository
from facility_booking.services.booking_state import (
    APPROVED_STATUSES, Actor, Event, Machine, actor_for_role, awaiting_state, plan_transition,
)
from facility_booking.services.cache_service import mark_calendar_stale
from facility_booking.services.identity_service import Identity

logger = get_logger(__name__)


def _in_scope(booking: Booking, identity: Identity, actor: Actor) -> bool:
    if actor == Actor.ADMIN:
        return True
    if actor == Actor.REQUESTER:
        return booking.requested_by_id == identity.user.id
    if actor == Actor.GROUP_DIRECTOR:
        return identity.group_id is not None and booking.requested_by.group_id == identity.group_id
    if actor == Actor.FACILITY_MANAGER:
        return identity.facility_id is not None and booking.facility_id == identity.facility_id
    return False


def _current_state(booking: Booking, machine: Machine):
    return booking.status if machine == Machine.APPROVAL else booking.cancellation_status


async def apply_event(
    db: AsyncSession,
    identity: Identity,
    booking_id: int,
    machine: Machine,
    event: Event,
) -> Booking:
    """Apply `event` to one of the booking's machines as the calling identity."""
    actor = Actor.REQUESTER if event == Event.REQUEST else actor_for_role(identity.role)

    booking = await repository.find_booking(db, booking_id)
    if not booking:
        raise NotFound(f"Booking {booking_id} not found")

    log = logger.bind(
        booking_id=booking_id,
        machine=machine.value,
        booking_event=event.value,
        actor=actor.value,
        employee_id=identity.employee_id,
    )

    if not _in_scope(booking, identity, actor):
        record_transition(machine.value, event.value, "forbidden")
        log.warning("booking_transition_out_of_scope")
        raise Forbidden("This booking is outside your scope")

    if machine == Machine.CANCELLATION and event == Event.REQUEST and booking.status not in APPROVED_STATUSES:
        record_transition(machine.value, event.value, "conflict")
        raise Conflict("Only approved bookings can be cancelled")

    observed = _current_state(booking, machine)
    try:
        transition = plan_transition(machine, observed, event, actor)
    except Forbidden:
        record_transition(machine.value, event.value, "forbidden")
        log.warning("booking_transition_refused", state=observed.value)
        raise
    except Conflict:
        record_transition(machine.value, event.value, "conflict")
        log.info("booking_transition_stale", state=observed.value)
        raise

    applied = await repository.update_booking_status(db, booking.id, observed, transition.target)
    if not applied:
        record_transition(machine.value, event.value, "conflict")
        log.info("booking_transition_lost_race", expected=observed.value)
        raise Conflict(f"This {machine.value} was already updated by someone else")

    await db.refresh(booking)
    record_transition(machine.value, event.value, "applied")
    log.info(
        "booking_transition",
        from_state=observed.value,
        to_state=transition.target.value,
    )
    mark_calendar_stale(db, booking.facility.slug)
    return booking


async def decide_booking(db: AsyncSession, identity: Identity, booking_id: int, event: Event) -> Booking:
    return await apply_event(db, identity, booking_id, Machine.APPROVAL, event)


async def decide_cancellation(db: AsyncSession, identity: Identity, booking_id: int, event: Event) -> Booking:
    return await apply_event(db, identity, booking_id, Machine.CANCELLATION, event)


async def request_cancellation(db: AsyncSession, identity: Identity, booking_id: int) -> Booking:
    return await apply_event(db, identity, booking_id, Machine.CANCELLATION, Event.REQUEST)


async def override_booking(db: AsyncSession, identity: Identity, booking_id: int) -> Booking:
    return await apply_event(db, identity, booking_id, Machine.APPROVAL, Event.OVERRIDE)


def _scope_clause(identity: Identity, actor: Actor):
    if actor == Actor.GROUP_DIRECTOR:
        return repository.in_group(identity.group_id)
    return Booking.facility_id == identity.facility_id


def _has_scope(identity: Identity, actor: Actor) -> bool:
    if actor == Actor.GROUP_DIRECTOR:
        return identity.group_id is not None
    return identity.facility_id is not None


async def review_queue(db: AsyncSession, identity: Identity, machine: Machine) -> list[Booking]:
    """Bookings in the caller's scope waiting for the caller's decision, oldest first."""
    actor = actor_for_role(identity.role)
    if not _has_scope(identity, actor):
        return []
    column = Booking.status if machine == Machine.APPROVAL else Booking.cancellation_status
    return await repository.find_bookings(
        db,
        _scope_clause(identity, actor),
        column == awaiting_state(machine, actor),
        newest_first=False,
    )
