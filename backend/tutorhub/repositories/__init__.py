# backend/tutorhub/repositories/__init__.py
"""
Repository Pattern Implementation for the TutorHub platform

This package provides the repository layer for data access,
separating business logic from database queries. Repositories flush but
never commit; services own transactions.

Usage:
    from tutorhub.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_booking_repository(db)
    bookings = repository.get_parent_bookings(parent_id)
"""

from .availability_repository import AvailabilityRepository
from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .conflict_checker_repository import ConflictCheckerRepository
from .conversation_repository import ConversationRepository
from .factory import RepositoryFactory
from .message_repository import MessageRepository
from .review_repository import ReviewRepository
from .subject_repository import SubjectRepository
from .teacher_profile_repository import TeacherProfileRepository
from .user_repository import UserRepository

__all__ = [
    "AvailabilityRepository",
    "BaseRepository",
    "BookingRepository",
    "ConflictCheckerRepository",
    "ConversationRepository",
    "MessageRepository",
    "RepositoryFactory",
    "ReviewRepository",
    "SubjectRepository",
    "TeacherProfileRepository",
    "UserRepository",
]
