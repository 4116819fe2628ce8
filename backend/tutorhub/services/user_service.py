# backend/tutorhub/services/user_service.py
"""
Identity mirror for the TutorHub platform.

Accounts live in the external identity provider. Each request's identity is
written through to the local ``users`` table so that bookings, profiles,
reviews and conversations have a row to reference.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.exceptions import ConflictException, RepositoryException
from ..models.user import User
from ..principal import ActingUser
from ..repositories.factory import RepositoryFactory
from .base import BaseService, Clock

logger = logging.getLogger(__name__)


class UserService(BaseService):
    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock=clock)
        self.repository = RepositoryFactory.create_user_repository(db)

    @BaseService.measure_operation("sync_identity")
    def sync_identity(self, actor: ActingUser) -> User:
        """
        Insert or refresh the mirror row for the acting user.

        Raises:
            ConflictException: The email already belongs to another identity
        """
        with self.transaction():
            try:
                user = self.repository.upsert_identity(
                    actor.id, actor.email, actor.name, actor.role.value
                )
            except RepositoryException as exc:
                if not isinstance(exc.__cause__, IntegrityError):
                    raise
                raise ConflictException(
                    "Email is already registered to another account",
                    code="EMAIL_IN_USE",
                    details={"email": actor.email},
                ) from exc
        return user
