# backend/tutorhub/repositories/user_repository.py
"""
User Repository for the TutorHub platform

Keeps the local mirror of identity-provider accounts in sync.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for user data access."""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.find_one_by(email=email)

    def upsert_identity(self, user_id: str, email: str, name: str, role: str) -> User:
        """Insert or refresh the mirror row for an identity."""
        user = self.get_by_id(user_id, load_relationships=False)
        if user is None:
            return self.create(id=user_id, email=email, name=name, role=role)

        if (user.email, user.name, user.role) != (email, name, role):
            user.email = email
            user.name = name
            user.role = role
            try:
                self.db.flush()
            except IntegrityError as exc:
                self.logger.warning("Integrity error refreshing user %s: %s", user_id, exc)
                raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        return user
