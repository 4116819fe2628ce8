"""Decision-table tests for the booking state machine."""

from datetime import datetime, timedelta, timezone
import itertools

import pytest

from tutorhub.core.enums import BookingActorRole
from tutorhub.models.booking import BookingStatus, PaymentStatus
from tutorhub.services.booking_transitions import (
    BOOKING_TRANSITIONS,
    Guard,
    PaymentAction,
    SideEffect,
    TransitionFailure,
    decide_transition,
    lesson_has_ended,
    payment_action_for,
    violates_cancellation_notice,
)

NOW = datetime(2030, 3, 4, 9, 0, tzinfo=timezone.utc)

ALLOWED = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingActorRole.TEACHER),
    (BookingStatus.PENDING, BookingStatus.CANCELLED, BookingActorRole.PARENT),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingActorRole.TEACHER),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingActorRole.PARENT),
    (BookingStatus.CONFIRMED, BookingStatus.COMPLETED, BookingActorRole.TEACHER),
}


def test_table_contains_exactly_the_allowed_transitions() -> None:
    assert set(BOOKING_TRANSITIONS) == ALLOWED


@pytest.mark.parametrize(
    "current,requested,role",
    list(itertools.product(BookingStatus, BookingStatus, BookingActorRole)),
)
def test_every_combination_is_decided(current, requested, role) -> None:
    decision = decide_transition(current, requested, role)

    if (current, requested, role) in ALLOWED:
        assert decision.allowed
        assert decision.failure is None
    else:
        assert not decision.allowed
        if role == BookingActorRole.PARENT and requested != BookingStatus.CANCELLED:
            assert decision.failure == TransitionFailure.PERMISSION_DENIED
        else:
            assert decision.failure == TransitionFailure.INVALID_TRANSITION


@pytest.mark.parametrize("terminal", [BookingStatus.CANCELLED, BookingStatus.COMPLETED])
def test_terminal_statuses_have_no_outgoing_transitions(terminal) -> None:
    for requested, role in itertools.product(BookingStatus, BookingActorRole):
        assert not decide_transition(terminal, requested, role).allowed


def test_parent_confirming_is_permission_failure_not_invalid() -> None:
    decision = decide_transition(
        BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingActorRole.PARENT
    )
    assert decision.failure == TransitionFailure.PERMISSION_DENIED


def test_teacher_cancelling_pending_is_invalid() -> None:
    decision = decide_transition(
        BookingStatus.PENDING, BookingStatus.CANCELLED, BookingActorRole.TEACHER
    )
    assert decision.failure == TransitionFailure.INVALID_TRANSITION
    assert "pending -> cancelled" in decision.message


def test_rules_carry_guards_and_side_effects() -> None:
    confirm = decide_transition(
        BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingActorRole.TEACHER
    )
    assert confirm.guards == (Guard.NO_CONFIRMED_OVERLAP,)
    assert confirm.side_effects == ()

    parent_cancel = decide_transition(
        BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingActorRole.PARENT
    )
    assert parent_cancel.guards == (Guard.CANCELLATION_NOTICE,)
    assert parent_cancel.side_effects == (SideEffect.RELEASE_PAYMENT,)

    teacher_cancel = decide_transition(
        BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingActorRole.TEACHER
    )
    assert teacher_cancel.guards == ()
    assert teacher_cancel.side_effects == (SideEffect.RELEASE_PAYMENT,)

    complete = decide_transition(
        BookingStatus.CONFIRMED, BookingStatus.COMPLETED, BookingActorRole.TEACHER
    )
    assert complete.guards == (Guard.LESSON_ENDED,)


class TestCancellationNotice:
    def test_paid_inside_window_violates(self) -> None:
        start = NOW + timedelta(hours=23, minutes=59)
        assert violates_cancellation_notice(PaymentStatus.PAID, start, NOW, 24)

    def test_paid_exactly_at_window_is_allowed(self) -> None:
        start = NOW + timedelta(hours=24)
        assert not violates_cancellation_notice(PaymentStatus.PAID, start, NOW, 24)

    def test_unpaid_never_violates(self) -> None:
        start = NOW + timedelta(hours=1)
        assert not violates_cancellation_notice(PaymentStatus.PENDING, start, NOW, 24)


def test_lesson_has_ended_at_end_time() -> None:
    end = NOW
    assert lesson_has_ended(end, NOW)
    assert not lesson_has_ended(end, NOW - timedelta(seconds=1))


@pytest.mark.parametrize(
    "payment_status,authorization_id,expected",
    [
        (PaymentStatus.PAID, "pi_1", PaymentAction.REFUND),
        (PaymentStatus.PENDING, "pi_1", PaymentAction.CANCEL_AUTHORIZATION),
        (PaymentStatus.PENDING, None, PaymentAction.NONE),
        (PaymentStatus.PAID, None, PaymentAction.NONE),
        (PaymentStatus.REFUNDED, "pi_1", PaymentAction.NONE),
    ],
)
def test_payment_action_for(payment_status, authorization_id, expected) -> None:
    assert payment_action_for(payment_status, authorization_id) == expected
