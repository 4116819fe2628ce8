# backend/tutorhub/api/dependencies/auth.py
"""
Acting-user dependency.

Authentication happens upstream in the identity provider, which forwards the
verified identity as request headers. This dependency reads them, mirrors the
identity into the local users table and hands an ActingUser to the route.
"""

import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from ...core.enums import RoleName
from ...core.exceptions import PermissionDeniedException, UnauthorizedException
from ...principal import ActingUser
from ...services.user_service import UserService
from .database import get_db

logger = logging.getLogger(__name__)


def get_acting_user(
    x_user_id: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> ActingUser:
    """
    Build the acting user from identity-provider headers.

    Raises:
        UnauthorizedException: Any identity header is missing or the role is unknown
    """
    if not (x_user_id and x_user_email and x_user_role):
        raise UnauthorizedException("Not authenticated")
    try:
        role = RoleName(x_user_role.strip().lower())
    except ValueError:
        raise UnauthorizedException(f"Unknown role: {x_user_role}")

    actor = ActingUser(
        id=x_user_id.strip(),
        email=x_user_email.strip(),
        name=(x_user_name or x_user_email).strip(),
        role=role,
    )
    UserService(db).sync_identity(actor)
    return actor


def get_current_teacher(actor: ActingUser = Depends(get_acting_user)) -> ActingUser:
    if not actor.is_teacher:
        raise PermissionDeniedException("Teacher role required")
    return actor


def get_current_parent(actor: ActingUser = Depends(get_acting_user)) -> ActingUser:
    if not actor.is_parent:
        raise PermissionDeniedException("Parent role required")
    return actor
