# backend/tutorhub/services/booking_service.py
"""
Booking Service for the TutorHub platform

Handles all booking-related business logic including:
- Creating booking requests and authorizing payment for them
- Moving bookings through their lifecycle (confirm, cancel, complete)
- Releasing payments (cancelled authorization or refund) on cancellation
- Reconciling payment status with the payment processor

Creation holds a row lock on the teacher profile while it checks for
conflicts and inserts, so two parents racing for the same slot are
serialised. The payment authorization runs after that transaction commits:
a processor failure leaves a committed pending booking without an
authorization id, which ``retry_payment_authorization`` can complete later.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import BookingActorRole
from ..core.exceptions import (
    BookingConflictException,
    ConflictException,
    ExternalServiceException,
    InvalidTransitionException,
    LateCancellationException,
    NotFoundException,
    PermissionDeniedException,
    PolicyException,
    ValidationException,
)
from ..models.booking import Booking, BookingStatus, PaymentStatus
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..principal import ActingUser
from ..repositories.factory import RepositoryFactory
from .base import BaseService, Clock
from .booking_transitions import (
    Guard,
    PaymentAction,
    SideEffect,
    TransitionFailure,
    decide_transition,
    hours_until,
    lesson_has_ended,
    payment_action_for,
    violates_cancellation_notice,
)
from .conflict_checker import ConflictChecker
from .payment_coordinator import PaymentCoordinator, StripePaymentCoordinator
from .pricing_service import EarningsBreakdown, calculate_booking_price, calculate_teacher_earnings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingCreated:
    """A newly created booking plus what the client needs to complete payment."""

    booking: Booking
    client_secret: Optional[str]


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and normalise aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class BookingService(BaseService):
    """
    Service layer for booking operations.
    """

    def __init__(
        self,
        db: Session,
        payment_coordinator: Optional[PaymentCoordinator] = None,
        conflict_checker: Optional[ConflictChecker] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize booking service.

        Args:
            db: Database session
            payment_coordinator: Payment processor facade (Stripe when omitted)
            conflict_checker: Optional conflict checker instance
            clock: Callable returning the current aware UTC datetime
        """
        super().__init__(db, clock=clock)
        self.payment_coordinator: PaymentCoordinator = (
            payment_coordinator or StripePaymentCoordinator()
        )
        self.conflict_checker = conflict_checker or ConflictChecker(db)
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.teacher_profile_repository = RepositoryFactory.create_teacher_profile_repository(db)
        self.subject_repository = RepositoryFactory.create_subject_repository(db)

    # ------------------------------------------------------------------ create

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self,
        actor: ActingUser,
        teacher_profile_id: str,
        start_time: datetime,
        end_time: datetime,
        subject_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> BookingCreated:
        """
        Create a pending booking and authorize its price.

        Args:
            actor: The parent requesting the booking
            teacher_profile_id: Profile of the teacher being booked
            start_time: Lesson start (must be in the future)
            end_time: Lesson end (must be after start)
            subject_id: Optional subject of the lesson
            notes: Optional notes for the teacher

        Returns:
            BookingCreated with the booking and the payment client secret

        Raises:
            ValidationException: Bad interval or start not in the future
            NotFoundException: Teacher profile (or subject) not found
            PolicyException: Teacher not accepting new students
            BookingConflictException: Overlaps a confirmed booking
            ExternalServiceException: Payment authorization failed; the booking
                stays pending and its id is in the exception details
        """
        start_time = as_utc(start_time)
        end_time = as_utc(end_time)

        self.log_operation(
            "create_booking",
            parent_id=actor.id,
            teacher_profile_id=teacher_profile_id,
            start_time=start_time.isoformat(),
        )

        if start_time >= end_time:
            raise ValidationException(
                "Start time must be before end time",
                details={"start_time": start_time.isoformat(), "end_time": end_time.isoformat()},
            )
        if start_time <= self.now():
            raise ValidationException("Booking time must be in the future")

        with self.transaction():
            profile = self.teacher_profile_repository.lock_for_booking(teacher_profile_id)
            if profile is None:
                raise NotFoundException("Teacher not found")
            if not profile.is_available_for_new_students:
                raise PolicyException(
                    "This teacher is not accepting new students",
                    code="NOT_ACCEPTING_STUDENTS",
                )
            if subject_id and self.subject_repository.get_by_id(subject_id) is None:
                raise NotFoundException("Subject not found")

            if self.conflict_checker.has_conflict(teacher_profile_id, start_time, end_time):
                conflicts = self.conflict_checker.get_conflicting_bookings(
                    teacher_profile_id, start_time, end_time
                )
                raise BookingConflictException(details={"conflicts": conflicts})

            booking = self.repository.create(
                teacher_profile_id=teacher_profile_id,
                parent_id=actor.id,
                subject_id=subject_id,
                start_time=start_time,
                end_time=end_time,
                notes=notes,
                status=BookingStatus.PENDING.value,
                payment_status=PaymentStatus.PENDING.value,
                price=calculate_booking_price(profile.hourly_rate, start_time, end_time),
            )
            teacher_name = profile.display_name

        client_secret = self._authorize_payment(booking, actor, teacher_name)
        return BookingCreated(booking=booking, client_secret=client_secret)

    def _authorize_payment(self, booking: Booking, actor: ActingUser, teacher_name: str) -> Optional[str]:
        """Authorize the booking price and store the authorization id on the booking."""
        try:
            authorization = self.payment_coordinator.authorize(
                amount=booking.price,
                booking_id=booking.id,
                payer_contact=actor.email,
                description=f"Lesson with {teacher_name}",
                metadata={
                    "teacher_profile_id": booking.teacher_profile_id,
                    "parent_id": booking.parent_id,
                },
            )
        except ExternalServiceException as exc:
            self.logger.warning(
                f"Payment authorization failed for booking {booking.id}; booking left pending",
                extra={"booking_id": booking.id},
            )
            raise ExternalServiceException(
                "Booking was created but payment could not be authorized. Please retry payment.",
                code="PAYMENT_AUTHORIZATION_FAILED",
                details={**exc.details, "booking_id": booking.id},
            ) from exc

        with self.transaction():
            booking.payment_intent_id = authorization.authorization_id
        return authorization.client_secret

    @BaseService.measure_operation("retry_payment_authorization")
    def retry_payment_authorization(self, booking_id: str, actor: ActingUser) -> BookingCreated:
        """Re-run payment authorization for a booking whose first attempt failed."""
        booking = self._get_booking_or_404(booking_id)
        if booking.parent_id != actor.id:
            raise PermissionDeniedException("Only the parent who made the booking can pay for it")
        if (
            booking.status not in (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)
            or booking.payment_status != PaymentStatus.PENDING.value
            or booking.payment_intent_id
        ):
            raise PolicyException(
                "Payment authorization cannot be retried for this booking",
                code="PAYMENT_RETRY_NOT_ALLOWED",
                details={"status": booking.status, "payment_status": booking.payment_status},
            )

        self.log_operation("retry_payment_authorization", booking_id=booking_id)
        client_secret = self._authorize_payment(
            booking, actor, booking.teacher_profile.display_name
        )
        return BookingCreated(booking=booking, client_secret=client_secret)

    # -------------------------------------------------------------- lifecycle

    def _resolve_actor_role(self, booking: Booking, actor: ActingUser) -> BookingActorRole:
        if actor.id == booking.teacher_profile.user_id:
            return BookingActorRole.TEACHER
        if actor.id == booking.parent_id:
            return BookingActorRole.PARENT
        raise PermissionDeniedException("You don't have permission to update this booking")

    @staticmethod
    def _parse_status(value: str) -> BookingStatus:
        try:
            return BookingStatus(value)
        except ValueError:
            raise ValidationException(
                f"Unknown booking status: {value}",
                details={"allowed": [s.value for s in BookingStatus]},
            )

    @BaseService.measure_operation("update_booking_status")
    def update_booking_status(
        self,
        booking_id: str,
        requested_status: str,
        actor: ActingUser,
        expected_version: Optional[int] = None,
    ) -> Booking:
        """
        Apply a status change requested by one of the booking's parties.

        Args:
            booking_id: Booking to update
            requested_status: Target status value
            actor: Acting user
            expected_version: Optional optimistic lock version the caller last saw

        Returns:
            The updated booking

        Raises:
            NotFoundException: Booking not found
            PermissionDeniedException: Actor is not a party, or a parent asked for
                anything other than cancellation
            InvalidTransitionException: Not an allowed transition
            ConflictException: Confirming would overlap a confirmed booking, or the
                booking was modified concurrently
            PolicyException: Late cancellation of a paid booking by the parent
            ValidationException: Completing before the lesson ended
            ExternalServiceException: Releasing the payment failed; status unchanged
        """
        target = self._parse_status(requested_status)
        self.log_operation(
            "update_booking_status",
            booking_id=booking_id,
            requested_status=target.value,
            actor_id=actor.id,
        )

        with self.transaction():
            booking = self.repository.get_for_update(booking_id)
            if booking is None:
                raise NotFoundException("Booking not found")
            if expected_version is not None and booking.version != expected_version:
                raise ConflictException(
                    "Booking was modified concurrently, please reload",
                    code="CONCURRENT_MODIFICATION",
                    details={"expected_version": expected_version, "version": booking.version},
                )

            current = BookingStatus(booking.status)
            role = self._resolve_actor_role(booking, actor)
            decision = decide_transition(current, target, role)
            if not decision.allowed:
                prometheus_metrics.record_booking_transition(current.value, target.value, "rejected")
                if decision.failure == TransitionFailure.PERMISSION_DENIED:
                    raise PermissionDeniedException(decision.message)
                raise InvalidTransitionException(
                    decision.message,
                    details={"from": current.value, "to": target.value, "role": role.value},
                )

            if target == BookingStatus.CONFIRMED:
                # Per-teacher lock shared with create_booking; serialises overlap re-checks.
                self.teacher_profile_repository.lock_for_booking(booking.teacher_profile_id)

            now = self.now()
            for guard in decision.guards:
                self._check_guard(guard, booking, now)
            for effect in decision.side_effects:
                self._apply_side_effect(effect, booking)

            if target == BookingStatus.CONFIRMED:
                booking.confirm(at=now)
            elif target == BookingStatus.CANCELLED:
                booking.cancel(actor.id, at=now)
            elif target == BookingStatus.COMPLETED:
                booking.complete(at=now)
            self.repository.flush()

        prometheus_metrics.record_booking_transition(current.value, target.value, "applied")
        return booking

    def _check_guard(self, guard: Guard, booking: Booking, now: datetime) -> None:
        if guard == Guard.NO_CONFIRMED_OVERLAP:
            conflicts = self.conflict_checker.get_conflicting_bookings(
                booking.teacher_profile_id,
                booking.start_time,
                booking.end_time,
                exclude_booking_id=booking.id,
            )
            if conflicts:
                raise BookingConflictException(
                    "This time overlaps another confirmed booking",
                    details={"conflicts": conflicts},
                )
        elif guard == Guard.CANCELLATION_NOTICE:
            required = settings.late_cancellation_hours
            if violates_cancellation_notice(
                PaymentStatus(booking.payment_status), booking.start_time, now, required
            ):
                raise LateCancellationException(required, hours_until(booking.start_time, now))
        elif guard == Guard.LESSON_ENDED:
            if not lesson_has_ended(booking.end_time, now):
                raise ValidationException(
                    "Cannot complete a booking before it has ended",
                    details={"end_time": booking.end_time.isoformat()},
                )

    def _apply_side_effect(self, effect: SideEffect, booking: Booking) -> None:
        if effect != SideEffect.RELEASE_PAYMENT:
            return

        action = payment_action_for(PaymentStatus(booking.payment_status), booking.payment_intent_id)
        if action == PaymentAction.CANCEL_AUTHORIZATION:
            self.payment_coordinator.cancel_authorization(booking.payment_intent_id)
            self.logger.info(f"Released payment authorization for booking {booking.id}")
        elif action == PaymentAction.REFUND:
            booking.refund_id = self.payment_coordinator.refund(booking.payment_intent_id)
            booking.payment_status = PaymentStatus.REFUNDED.value
            self.logger.info(f"Refunded booking {booking.id}")

    # ---------------------------------------------------------------- payment

    @BaseService.measure_operation("confirm_payment")
    def confirm_payment(self, booking_id: str, actor: ActingUser) -> Booking:
        """Mark the booking paid if the payment processor reports success."""
        booking = self._get_booking_or_404(booking_id)
        self._resolve_actor_role(booking, actor)

        if booking.payment_status == PaymentStatus.PAID.value:
            return booking
        if (
            booking.status not in (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)
            or booking.payment_status != PaymentStatus.PENDING.value
            or not booking.payment_intent_id
        ):
            raise PolicyException(
                "This booking has no payment awaiting confirmation",
                code="NO_PENDING_PAYMENT",
            )

        if self.payment_coordinator.confirm_payment(booking.payment_intent_id):
            with self.transaction():
                booking.payment_status = PaymentStatus.PAID.value
            self.log_operation("payment_confirmed", booking_id=booking_id)
        return booking

    # ------------------------------------------------------------------ reads

    def _get_booking_or_404(self, booking_id: str) -> Booking:
        booking = self.repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found")
        return booking

    @BaseService.measure_operation("get_booking_for_user")
    def get_booking_for_user(self, booking_id: str, actor: ActingUser) -> Booking:
        booking = self._get_booking_or_404(booking_id)
        self._resolve_actor_role(booking, actor)
        return booking

    @BaseService.measure_operation("list_bookings_for_user")
    def list_bookings_for_user(
        self, actor: ActingUser, status: Optional[str] = None
    ) -> List[Booking]:
        """Teachers see bookings against their profile; parents see bookings they made."""
        if status is not None:
            status = self._parse_status(status).value

        if actor.is_teacher:
            profile = self.teacher_profile_repository.get_by_user_id(actor.id)
            if profile is None:
                return []
            return self.repository.get_teacher_bookings(profile.id, status=status)
        return self.repository.get_parent_bookings(actor.id, status=status)

    @BaseService.measure_operation("get_booking_earnings")
    def get_booking_earnings(self, booking_id: str, actor: ActingUser) -> EarningsBreakdown:
        booking = self._get_booking_or_404(booking_id)
        if self._resolve_actor_role(booking, actor) != BookingActorRole.TEACHER:
            raise PermissionDeniedException("Only the teacher can view earnings for a booking")
        return calculate_teacher_earnings(booking.price)
