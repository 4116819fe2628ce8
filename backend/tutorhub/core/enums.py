# backend/tutorhub/core/enums.py
"""Shared enumerations."""

from enum import Enum


class RoleName(str, Enum):
    """Account role supplied by the identity provider."""

    PARENT = "parent"
    TEACHER = "teacher"


class BookingActorRole(str, Enum):
    """Role an acting user plays on one particular booking."""

    TEACHER = "teacher"
    PARENT = "parent"
