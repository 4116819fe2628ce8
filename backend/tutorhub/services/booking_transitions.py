# backend/tutorhub/services/booking_transitions.py
"""
Booking state machine as data.

Every allowed status change is a row in ``BOOKING_TRANSITIONS`` keyed on
(current status, requested status, actor role). A row names the guards that
must hold and the side effects to run. ``decide_transition`` is pure: it
looks the request up and reports whether it may proceed, leaving guard
evaluation and side effects to the booking service.

    pending   -> confirmed  teacher  guard: no overlapping confirmed booking
    pending   -> cancelled  parent   effect: release payment
    confirmed -> cancelled  teacher  effect: release payment
    confirmed -> cancelled  parent   guard: cancellation notice; effect: release payment
    confirmed -> completed  teacher  guard: lesson has ended

Cancelled and completed are terminal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple

from ..core.enums import BookingActorRole
from ..models.booking import BookingStatus, PaymentStatus


class Guard(str, Enum):
    NO_CONFIRMED_OVERLAP = "no_confirmed_overlap"
    CANCELLATION_NOTICE = "cancellation_notice"
    LESSON_ENDED = "lesson_ended"


class SideEffect(str, Enum):
    RELEASE_PAYMENT = "release_payment"


class PaymentAction(str, Enum):
    """What releasing a booking's payment means for its current payment state."""

    NONE = "none"
    CANCEL_AUTHORIZATION = "cancel_authorization"
    REFUND = "refund"


class TransitionFailure(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    INVALID_TRANSITION = "invalid_transition"


@dataclass(frozen=True)
class TransitionRule:
    guards: Tuple[Guard, ...] = ()
    side_effects: Tuple[SideEffect, ...] = ()


TransitionKey = Tuple[BookingStatus, BookingStatus, BookingActorRole]

BOOKING_TRANSITIONS: Dict[TransitionKey, TransitionRule] = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingActorRole.TEACHER): TransitionRule(
        guards=(Guard.NO_CONFIRMED_OVERLAP,),
    ),
    (BookingStatus.PENDING, BookingStatus.CANCELLED, BookingActorRole.PARENT): TransitionRule(
        side_effects=(SideEffect.RELEASE_PAYMENT,),
    ),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingActorRole.TEACHER): TransitionRule(
        side_effects=(SideEffect.RELEASE_PAYMENT,),
    ),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingActorRole.PARENT): TransitionRule(
        guards=(Guard.CANCELLATION_NOTICE,),
        side_effects=(SideEffect.RELEASE_PAYMENT,),
    ),
    (BookingStatus.CONFIRMED, BookingStatus.COMPLETED, BookingActorRole.TEACHER): TransitionRule(
        guards=(Guard.LESSON_ENDED,),
    ),
}


@dataclass(frozen=True)
class TransitionDecision:
    allowed: bool
    rule: Optional[TransitionRule] = None
    failure: Optional[TransitionFailure] = None
    message: str = ""
    guards: Tuple[Guard, ...] = field(default=())
    side_effects: Tuple[SideEffect, ...] = field(default=())


def decide_transition(
    current: BookingStatus, requested: BookingStatus, actor_role: BookingActorRole
) -> TransitionDecision:
    """
    Look up a requested status change.

    Parents may only ever cancel, so any other target from a parent is a
    permission failure regardless of the current status.
    """
    if actor_role == BookingActorRole.PARENT and requested != BookingStatus.CANCELLED:
        return TransitionDecision(
            allowed=False,
            failure=TransitionFailure.PERMISSION_DENIED,
            message="Parents can only cancel bookings",
        )

    rule = BOOKING_TRANSITIONS.get((current, requested, actor_role))
    if rule is None:
        return TransitionDecision(
            allowed=False,
            failure=TransitionFailure.INVALID_TRANSITION,
            message=f"Invalid status transition: {current.value} -> {requested.value}",
        )

    return TransitionDecision(
        allowed=True,
        rule=rule,
        guards=rule.guards,
        side_effects=rule.side_effects,
    )


def hours_until(start: datetime, now: datetime) -> float:
    return (start - now).total_seconds() / 3600


def violates_cancellation_notice(
    payment_status: PaymentStatus, start: datetime, now: datetime, required_hours: int
) -> bool:
    """A paid booking cannot be cancelled by the parent inside the notice window."""
    return payment_status == PaymentStatus.PAID and hours_until(start, now) < required_hours


def lesson_has_ended(end: datetime, now: datetime) -> bool:
    return now >= end


def payment_action_for(
    payment_status: PaymentStatus, authorization_id: Optional[str]
) -> PaymentAction:
    if payment_status == PaymentStatus.PAID and authorization_id:
        return PaymentAction.REFUND
    if payment_status == PaymentStatus.PENDING and authorization_id:
        return PaymentAction.CANCEL_AUTHORIZATION
    return PaymentAction.NONE
