"""
Booking state machines.

Two independent machines run over a booking:

  approval      (Booking.status)
      PENDING --GD approve--> APPROVED_BY_GD --FM approve--> APPROVED_BY_FM
      PENDING --GD reject--> REJECTED
      APPROVED_BY_GD --FM reject--> REJECTED
      PENDING | APPROVED_BY_GD --Admin override--> APPROVED_BY_ADMIN

  cancellation  (Booking.cancellation_status)
      NONE | REJECTED --requester request--> PENDING
      PENDING --GD approve/reject--> APPROVED_BY_GD / REJECTED
      APPROVED_BY_GD --FM approve/reject--> APPROVED_BY_FM / REJECTED

`plan_transition` is pure: it only decides which transition an actor may
take from the state it observed. Scope checks and the conditional write
live in the approval service.
"""

import enum
from dataclasses import dataclass
from typing import Union

from facility_booking.core.exceptions import Conflict, Forbidden
from facility_booking.models.booking import BookingStatus, CancellationStatus
from facility_booking.models.user import UserRole


class Machine(str, enum.Enum):
    APPROVAL = "approval"
    CANCELLATION = "cancellation"


class Event(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"
    OVERRIDE = "override"
    REQUEST = "request"


class Actor(str, enum.Enum):
    REQUESTER = "requester"
    GROUP_DIRECTOR = "group_director"
    FACILITY_MANAGER = "facility_manager"
    ADMIN = "admin"


State = Union[BookingStatus, CancellationStatus]


@dataclass(frozen=True)
class Transition:
    source: State
    event: Event
    actor: Actor
    target: State


APPROVAL_TRANSITIONS = (
    Transition(BookingStatus.PENDING, Event.APPROVE, Actor.GROUP_DIRECTOR, BookingStatus.APPROVED_BY_GD),
    Transition(BookingStatus.PENDING, Event.REJECT, Actor.GROUP_DIRECTOR, BookingStatus.REJECTED),
    Transition(BookingStatus.APPROVED_BY_GD, Event.APPROVE, Actor.FACILITY_MANAGER, BookingStatus.APPROVED_BY_FM),
    Transition(BookingStatus.APPROVED_BY_GD, Event.REJECT, Actor.FACILITY_MANAGER, BookingStatus.REJECTED),
    Transition(BookingStatus.PENDING, Event.OVERRIDE, Actor.ADMIN, BookingStatus.APPROVED_BY_ADMIN),
    Transition(BookingStatus.APPROVED_BY_GD, Event.OVERRIDE, Actor.ADMIN, BookingStatus.APPROVED_BY_ADMIN),
)

CANCELLATION_TRANSITIONS = (
    Transition(CancellationStatus.NONE, Event.REQUEST, Actor.REQUESTER, CancellationStatus.PENDING),
    Transition(CancellationStatus.REJECTED, Event.REQUEST, Actor.REQUESTER, CancellationStatus.PENDING),
    Transition(CancellationStatus.PENDING, Event.APPROVE, Actor.GROUP_DIRECTOR, CancellationStatus.APPROVED_BY_GD),
    Transition(CancellationStatus.PENDING, Event.REJECT, Actor.GROUP_DIRECTOR, CancellationStatus.REJECTED),
    Transition(CancellationStatus.APPROVED_BY_GD, Event.APPROVE, Actor.FACILITY_MANAGER, CancellationStatus.APPROVED_BY_FM),
    Transition(CancellationStatus.APPROVED_BY_GD, Event.REJECT, Actor.FACILITY_MANAGER, CancellationStatus.REJECTED),
)

TRANSITIONS = {
    Machine.APPROVAL: APPROVAL_TRANSITIONS,
    Machine.CANCELLATION: CANCELLATION_TRANSITIONS,
}

# How far along each chain a state is. An actor acting on a state below its
# own step is early (Forbidden); at or beyond it is late (Conflict).
STAGE = {
    Machine.APPROVAL: {
        BookingStatus.PENDING: 0,
        BookingStatus.APPROVED_BY_GD: 1,
        BookingStatus.APPROVED_BY_FM: 2,
        BookingStatus.APPROVED_BY_ADMIN: 2,
        BookingStatus.REJECTED: 2,
    },
    Machine.CANCELLATION: {
        CancellationStatus.NONE: 0,
        CancellationStatus.PENDING: 1,
        CancellationStatus.APPROVED_BY_GD: 2,
        CancellationStatus.APPROVED_BY_FM: 3,
        CancellationStatus.REJECTED: 3,
    },
}

TERMINAL_STATUSES = frozenset({
    BookingStatus.APPROVED_BY_FM,
    BookingStatus.APPROVED_BY_ADMIN,
    BookingStatus.REJECTED,
})

APPROVED_STATUSES = frozenset({BookingStatus.APPROVED_BY_FM, BookingStatus.APPROVED_BY_ADMIN})

ROLE_ACTORS = {
    UserRole.GROUP_DIRECTOR: Actor.GROUP_DIRECTOR,
    UserRole.FACILITY_MANAGER: Actor.FACILITY_MANAGER,
    UserRole.ADMIN: Actor.ADMIN,
}


def actor_for_role(role: UserRole) -> Actor:
    try:
        return ROLE_ACTORS[role]
    except KeyError:
        raise Forbidden(f"Role {role.value} cannot review bookings")


def plan_transition(machine: Machine, current: State, event: Event, actor: Actor) -> Transition:
    """Return the transition `actor` may take on `event` from `current`."""
    candidates = [t for t in TRANSITIONS[machine] if t.event == event and t.actor == actor]
    if not candidates:
        raise Forbidden(f"{actor.value} cannot {event.value} a {machine.value}")

    for transition in candidates:
        if transition.source == current:
            return transition

    stages = STAGE[machine]
    actor_stage = min(stages[t.source] for t in candidates)
    if stages[current] < actor_stage:
        raise Forbidden(
            f"This {machine.value} is {current.value} and is not awaiting {actor.value} yet"
        )
    raise Conflict(f"This {machine.value} is already {current.value}")


def awaiting_state(machine: Machine, actor: Actor) -> State:
    """The state in which a booking sits in `actor`'s review queue."""
    for transition in TRANSITIONS[machine]:
        if transition.actor == actor and transition.event == Event.APPROVE:
            return transition.source
    raise ValueError(f"{actor.value} does not review {machine.value}s")
