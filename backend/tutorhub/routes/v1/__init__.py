# backend/tutorhub/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import bookings, conversations, reviews, teachers

__all__ = [
    "bookings",
    "conversations",
    "reviews",
    "teachers",
]
