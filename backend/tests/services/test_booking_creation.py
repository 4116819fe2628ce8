"""
Tests for BookingService.create_booking and payment authorization retry.
"""

from datetime import timedelta

import pytest

from tutorhub.core.exceptions import (
    BookingConflictException,
    ConflictException,
    ExternalServiceException,
    NotFoundException,
    PermissionDeniedException,
    PolicyException,
    ValidationException,
)
from tutorhub.models import Booking
from tutorhub.models.booking import BookingStatus, PaymentStatus


def booking_count(db) -> int:
    return db.query(Booking).count()


class TestCreateBooking:
    def test_creates_pending_booking_and_authorizes_price(
        self, db, booking_service, payments, parent, teacher_profile, clock
    ) -> None:
        start = clock.current + timedelta(days=2)

        result = booking_service.create_booking(
            parent, teacher_profile.id, start, start + timedelta(minutes=90), notes="Algebra"
        )

        booking = result.booking
        assert booking.status == BookingStatus.PENDING.value
        assert booking.payment_status == PaymentStatus.PENDING.value
        assert booking.price == 7500
        assert booking.parent_id == parent.id
        assert booking.notes == "Algebra"
        assert booking.payment_intent_id == f"pi_test_{booking.id}"
        assert result.client_secret == f"pi_test_{booking.id}_secret"

        assert payments.authorizations == [
            {
                "amount": 7500,
                "booking_id": booking.id,
                "payer_contact": "parent@example.com",
                "description": "Lesson with Tess Teacher",
                "metadata": {
                    "teacher_profile_id": teacher_profile.id,
                    "parent_id": parent.id,
                },
            }
        ]

        db.expire_all()
        stored = db.query(Booking).filter(Booking.id == booking.id).one()
        assert stored.payment_intent_id == f"pi_test_{booking.id}"

    def test_naive_datetimes_are_treated_as_utc(
        self, booking_service, parent, teacher_profile, clock
    ) -> None:
        start = (clock.current + timedelta(days=1)).replace(tzinfo=None)

        result = booking_service.create_booking(
            parent, teacher_profile.id, start, start + timedelta(hours=1)
        )

        assert result.booking.start_time.utcoffset() == timedelta(0)
        assert result.booking.price == 5000

    @pytest.mark.parametrize("minutes", [0, -30])
    def test_start_not_before_end_is_rejected(
        self, db, booking_service, payments, parent, teacher_profile, clock, minutes
    ) -> None:
        start = clock.current + timedelta(days=1)

        with pytest.raises(ValidationException):
            booking_service.create_booking(
                parent, teacher_profile.id, start, start + timedelta(minutes=minutes)
            )

        assert booking_count(db) == 0
        assert payments.authorizations == []

    @pytest.mark.parametrize("offset", [timedelta(0), timedelta(hours=-1)])
    def test_start_must_be_in_the_future(
        self, db, booking_service, parent, teacher_profile, clock, offset
    ) -> None:
        start = clock.current + offset

        with pytest.raises(ValidationException):
            booking_service.create_booking(
                parent, teacher_profile.id, start, start + timedelta(hours=1)
            )
        assert booking_count(db) == 0

    def test_interval_is_checked_before_teacher_lookup(
        self, booking_service, parent, clock
    ) -> None:
        start = clock.current + timedelta(days=1)
        with pytest.raises(ValidationException):
            booking_service.create_booking(parent, "01HZZZZZZZZZZZZZZZZZZZZZZZ", start, start)

    def test_unknown_teacher_is_not_found(self, booking_service, parent, clock) -> None:
        start = clock.current + timedelta(days=1)
        with pytest.raises(NotFoundException):
            booking_service.create_booking(
                parent, "01HZZZZZZZZZZZZZZZZZZZZZZZ", start, start + timedelta(hours=1)
            )

    def test_teacher_not_accepting_students(
        self, db, booking_service, payments, parent, teacher_profile, clock
    ) -> None:
        teacher_profile.is_available_for_new_students = False
        db.commit()
        start = clock.current + timedelta(days=1)

        with pytest.raises(PolicyException) as exc_info:
            booking_service.create_booking(
                parent, teacher_profile.id, start, start + timedelta(hours=1)
            )

        assert exc_info.value.code == "NOT_ACCEPTING_STUDENTS"
        assert booking_count(db) == 0
        assert payments.authorizations == []

    def test_unknown_subject_is_not_found(
        self, booking_service, parent, teacher_profile, clock
    ) -> None:
        start = clock.current + timedelta(days=1)
        with pytest.raises(NotFoundException):
            booking_service.create_booking(
                parent,
                teacher_profile.id,
                start,
                start + timedelta(hours=1),
                subject_id="01HZZZZZZZZZZZZZZZZZZZZZZZ",
            )

    def test_subject_is_recorded(
        self, booking_service, parent, teacher_profile, subject, clock
    ) -> None:
        start = clock.current + timedelta(days=1)
        result = booking_service.create_booking(
            parent, teacher_profile.id, start, start + timedelta(hours=1), subject_id=subject.id
        )
        assert result.booking.subject_id == subject.id

    def test_overlap_with_confirmed_booking_is_a_conflict(
        self, db, booking_service, payments, parent, teacher_profile, make_booking, clock
    ) -> None:
        start = clock.current + timedelta(days=2)
        existing = make_booking(start=start, hours=1, status=BookingStatus.CONFIRMED)

        with pytest.raises(BookingConflictException) as exc_info:
            booking_service.create_booking(
                parent,
                teacher_profile.id,
                start + timedelta(minutes=30),
                start + timedelta(minutes=90),
            )

        assert isinstance(exc_info.value, ConflictException)
        assert exc_info.value.details["conflicts"][0]["booking_id"] == existing.id
        assert booking_count(db) == 1
        assert payments.authorizations == []

    def test_overlap_with_pending_booking_is_allowed(
        self, db, booking_service, parent, teacher_profile, make_booking, clock
    ) -> None:
        start = clock.current + timedelta(days=2)
        make_booking(start=start, hours=1, status=BookingStatus.PENDING)

        booking_service.create_booking(parent, teacher_profile.id, start, start + timedelta(hours=1))

        assert booking_count(db) == 2

    def test_back_to_back_with_confirmed_booking_is_allowed(
        self, db, booking_service, parent, teacher_profile, make_booking, clock
    ) -> None:
        start = clock.current + timedelta(days=2)
        make_booking(start=start, hours=1, status=BookingStatus.CONFIRMED)

        booking_service.create_booking(
            parent, teacher_profile.id, start + timedelta(hours=1), start + timedelta(hours=2)
        )

        assert booking_count(db) == 2

    def test_price_is_fixed_at_creation(
        self, db, booking_service, parent, teacher_profile, clock
    ) -> None:
        start = clock.current + timedelta(days=2)
        result = booking_service.create_booking(
            parent, teacher_profile.id, start, start + timedelta(hours=1)
        )

        teacher_profile.hourly_rate = 9000
        db.commit()
        db.expire_all()

        assert db.query(Booking).filter(Booking.id == result.booking.id).one().price == 5000


class TestAuthorizationFailure:
    def test_failed_authorization_leaves_committed_pending_booking(
        self, db, booking_service, payments, parent, teacher_profile, clock
    ) -> None:
        payments.fail_authorize = True
        start = clock.current + timedelta(days=2)

        with pytest.raises(ExternalServiceException) as exc_info:
            booking_service.create_booking(
                parent, teacher_profile.id, start, start + timedelta(hours=1)
            )

        assert exc_info.value.code == "PAYMENT_AUTHORIZATION_FAILED"
        booking_id = exc_info.value.details["booking_id"]

        db.expire_all()
        booking = db.query(Booking).filter(Booking.id == booking_id).one()
        assert booking.status == BookingStatus.PENDING.value
        assert booking.payment_status == PaymentStatus.PENDING.value
        assert booking.payment_intent_id is None

    def test_retry_authorizes_the_existing_booking(
        self, db, booking_service, payments, parent, teacher_profile, clock
    ) -> None:
        payments.fail_authorize = True
        start = clock.current + timedelta(days=2)
        with pytest.raises(ExternalServiceException) as exc_info:
            booking_service.create_booking(
                parent, teacher_profile.id, start, start + timedelta(hours=1)
            )
        booking_id = exc_info.value.details["booking_id"]

        payments.fail_authorize = False
        result = booking_service.retry_payment_authorization(booking_id, parent)

        assert result.booking.id == booking_id
        assert result.booking.payment_intent_id == f"pi_test_{booking_id}"
        assert result.client_secret is not None
        assert booking_count(db) == 1

    def test_retry_is_refused_once_authorized(
        self, booking_service, parent, make_booking
    ) -> None:
        booking = make_booking(payment_intent_id="pi_already")

        with pytest.raises(PolicyException):
            booking_service.retry_payment_authorization(booking.id, parent)

    def test_retry_only_by_the_booking_parent(
        self, booking_service, other_parent, make_booking
    ) -> None:
        booking = make_booking(payment_intent_id=None)

        with pytest.raises(PermissionDeniedException):
            booking_service.retry_payment_authorization(booking.id, other_parent)
