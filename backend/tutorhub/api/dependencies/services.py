# backend/tutorhub/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected. The payment coordinator
and clock are separate dependencies so tests can override them.
"""

from functools import lru_cache
import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.availability_service import AvailabilityService
from ...services.base import Clock, utc_clock
from ...services.booking_service import BookingService
from ...services.conversation_service import ConversationService
from ...services.payment_coordinator import PaymentCoordinator, StripePaymentCoordinator
from ...services.review_service import ReviewService
from ...services.teacher_service import TeacherService
from .database import get_db

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _payment_coordinator_singleton() -> StripePaymentCoordinator:
    return StripePaymentCoordinator()


def get_payment_coordinator() -> PaymentCoordinator:
    """Get the process-wide payment coordinator."""
    return _payment_coordinator_singleton()


def get_clock() -> Clock:
    return utc_clock


def get_booking_service(
    db: Session = Depends(get_db),
    payment_coordinator: PaymentCoordinator = Depends(get_payment_coordinator),
    clock: Clock = Depends(get_clock),
) -> BookingService:
    """
    Get booking service instance.

    Args:
        db: Database session
        payment_coordinator: Payment processor facade
        clock: Source of the current time

    Returns:
        BookingService instance
    """
    return BookingService(db, payment_coordinator=payment_coordinator, clock=clock)


def get_review_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> ReviewService:
    return ReviewService(db, clock=clock)


def get_conversation_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> ConversationService:
    return ConversationService(db, clock=clock)


def get_teacher_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> TeacherService:
    return TeacherService(db, clock=clock)


def get_availability_service(
    db: Session = Depends(get_db), clock: Clock = Depends(get_clock)
) -> AvailabilityService:
    return AvailabilityService(db, clock=clock)
