# backend/tutorhub/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import get_acting_user, get_current_parent, get_current_teacher
from .database import get_db
from .services import (
    get_availability_service,
    get_booking_service,
    get_clock,
    get_conversation_service,
    get_payment_coordinator,
    get_review_service,
    get_teacher_service,
)

__all__ = [
    # Auth
    "get_acting_user",
    "get_current_parent",
    "get_current_teacher",
    # Database
    "get_db",
    # Services
    "get_availability_service",
    "get_booking_service",
    "get_clock",
    "get_conversation_service",
    "get_payment_coordinator",
    "get_review_service",
    "get_teacher_service",
]
