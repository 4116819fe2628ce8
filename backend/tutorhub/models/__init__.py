"""
Database models for the TutorHub platform.

This module exports all SQLAlchemy models used in the application.
The models are organized by functionality:
- Users mirrored from the identity provider
- Teacher profiles, subjects and weekly availability
- Bookings and reviews
- Conversations and messages
"""

from .availability import AvailabilitySlot
from .booking import Booking, BookingStatus, PaymentStatus
from .conversation import Conversation
from .message import Message
from .review import Review
from .teacher import Subject, TeacherProfile, TeacherSubject
from .user import User

__all__ = [
    "AvailabilitySlot",
    "Booking",
    "BookingStatus",
    "Conversation",
    "Message",
    "PaymentStatus",
    "Review",
    "Subject",
    "TeacherProfile",
    "TeacherSubject",
    "User",
]
