# backend/tests/conftest.py
"""
Pytest configuration for the TutorHub backend.

Every test gets a fresh in-memory SQLite database, a single session shared
by the code under test and the assertions, a controllable clock and an
in-memory payment coordinator that records what it was asked to do.
"""

import os

# Set testing mode BEFORE any tutorhub imports
os.environ["IS_TESTING"] = "true"
os.environ["ENVIRONMENT"] = "test"
os.environ.pop("STRIPE_SECRET_KEY", None)

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
import ulid

from tutorhub.core.enums import RoleName
from tutorhub.core.exceptions import ExternalServiceException
from tutorhub.database import Base, build_engine
from tutorhub.models import Booking, Subject, TeacherProfile, User
from tutorhub.models.booking import BookingStatus, PaymentStatus
from tutorhub.principal import ActingUser
from tutorhub.services.booking_service import BookingService
from tutorhub.services.payment_coordinator import PaymentAuthorization

# Monday 4 March 2030, 09:00 UTC
NOW = datetime(2030, 3, 4, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime):
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **delta: float) -> None:
        self.current = self.current + timedelta(**delta)


class FakePaymentCoordinator:
    """In-memory payment coordinator that records every call."""

    def __init__(self) -> None:
        self.authorizations: List[Dict[str, Any]] = []
        self.cancelled: List[str] = []
        self.refunds: List[str] = []
        self.fail_authorize = False
        self.fail_cancel = False
        self.fail_refund = False
        self.payment_succeeded = True

    def _error(self, operation: str) -> ExternalServiceException:
        return ExternalServiceException(
            f"Payment processor failed to {operation}",
            code="PAYMENT_PROCESSOR_ERROR",
            details={"operation": operation},
        )

    def authorize(
        self,
        amount: int,
        booking_id: str,
        payer_contact: str,
        description: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> PaymentAuthorization:
        if self.fail_authorize:
            raise self._error("authorize")
        self.authorizations.append(
            {
                "amount": amount,
                "booking_id": booking_id,
                "payer_contact": payer_contact,
                "description": description,
                "metadata": metadata or {},
            }
        )
        return PaymentAuthorization(
            authorization_id=f"pi_test_{booking_id}",
            client_secret=f"pi_test_{booking_id}_secret",
            status="requires_payment_method",
        )

    def cancel_authorization(self, authorization_id: str) -> None:
        if self.fail_cancel:
            raise self._error("cancel_authorization")
        self.cancelled.append(authorization_id)

    def refund(self, authorization_id: str, amount: Optional[int] = None) -> str:
        if self.fail_refund:
            raise self._error("refund")
        self.refunds.append(authorization_id)
        return f"re_test_{len(self.refunds)}"

    def confirm_payment(self, authorization_id: str) -> bool:
        return self.payment_succeeded


def actor_for(user: User) -> ActingUser:
    return ActingUser(id=user.id, email=user.email, name=user.name, role=RoleName(user.role))


# ============================================================================
# DATABASE
# ============================================================================


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    test_engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def db(engine: Engine) -> Generator[Session, None, None]:
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture
def payments() -> FakePaymentCoordinator:
    return FakePaymentCoordinator()


# ============================================================================
# USERS AND PROFILES
# ============================================================================


def _create_user(db: Session, email: str, name: str, role: RoleName) -> User:
    user = User(id=str(ulid.ULID()), email=email, name=name, role=role.value)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def parent_user(db: Session) -> User:
    return _create_user(db, "parent@example.com", "Pat Parent", RoleName.PARENT)


@pytest.fixture
def other_parent_user(db: Session) -> User:
    return _create_user(db, "other.parent@example.com", "Olive Other", RoleName.PARENT)


@pytest.fixture
def teacher_user(db: Session) -> User:
    return _create_user(db, "teacher@example.com", "Tess Teacher", RoleName.TEACHER)


@pytest.fixture
def other_teacher_user(db: Session) -> User:
    return _create_user(db, "other.teacher@example.com", "Theo Tutor", RoleName.TEACHER)


@pytest.fixture
def parent(parent_user: User) -> ActingUser:
    return actor_for(parent_user)


@pytest.fixture
def other_parent(other_parent_user: User) -> ActingUser:
    return actor_for(other_parent_user)


@pytest.fixture
def teacher(teacher_user: User) -> ActingUser:
    return actor_for(teacher_user)


@pytest.fixture
def other_teacher(other_teacher_user: User) -> ActingUser:
    return actor_for(other_teacher_user)


@pytest.fixture
def teacher_profile(db: Session, teacher_user: User) -> TeacherProfile:
    profile = TeacherProfile(
        user_id=teacher_user.id,
        bio="Maths teacher with a decade of classroom experience.",
        qualifications="BSc Mathematics, PGCE",
        years_of_experience=10,
        hourly_rate=5000,
        is_available_for_new_students=True,
    )
    db.add(profile)
    db.commit()
    return profile


@pytest.fixture
def subject(db: Session) -> Subject:
    maths = Subject(name="Mathematics", description="Arithmetic to calculus", age_group_start=5)
    db.add(maths)
    db.commit()
    return maths


# ============================================================================
# BOOKINGS
# ============================================================================


@pytest.fixture
def booking_service(db: Session, payments: FakePaymentCoordinator, clock: FakeClock) -> BookingService:
    return BookingService(db, payment_coordinator=payments, clock=clock)


@pytest.fixture
def make_booking(
    db: Session, teacher_profile: TeacherProfile, parent_user: User
) -> Callable[..., Booking]:
    """Insert a booking directly, bypassing creation rules."""

    def _make(
        start: datetime = NOW + timedelta(days=3),
        hours: float = 1.0,
        status: BookingStatus = BookingStatus.PENDING,
        payment_status: PaymentStatus = PaymentStatus.PENDING,
        payment_intent_id: Optional[str] = "pi_existing",
        parent_id: Optional[str] = None,
        profile: Optional[TeacherProfile] = None,
    ) -> Booking:
        booking = Booking(
            teacher_profile_id=(profile or teacher_profile).id,
            parent_id=parent_id or parent_user.id,
            start_time=start,
            end_time=start + timedelta(hours=hours),
            status=status.value,
            payment_status=payment_status.value,
            price=int(5000 * hours),
            payment_intent_id=payment_intent_id,
        )
        db.add(booking)
        db.commit()
        return booking

    return _make


# ============================================================================
# API CLIENT
# ============================================================================


@pytest.fixture
def client(
    db: Session, payments: FakePaymentCoordinator, clock: FakeClock
) -> Generator[TestClient, None, None]:
    from tutorhub.api.dependencies.database import get_db
    from tutorhub.api.dependencies.services import get_clock, get_payment_coordinator
    from tutorhub.main import app

    def override_get_db() -> Generator[Session, None, None]:
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_coordinator] = lambda: payments
    app.dependency_overrides[get_clock] = lambda: clock

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def headers_for() -> Callable[[ActingUser], Dict[str, str]]:
    """Identity-provider headers for an acting user."""

    def _headers(actor: ActingUser) -> Dict[str, str]:
        return {
            "X-User-Id": actor.id,
            "X-User-Email": actor.email,
            "X-User-Name": actor.name,
            "X-User-Role": actor.role.value,
        }

    return _headers
