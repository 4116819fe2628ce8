"""
Tests for mirroring identity-provider users into the local users table.
"""

import pytest

from tutorhub.core.enums import RoleName
from tutorhub.core.exceptions import ConflictException
from tutorhub.models import User
from tutorhub.principal import ActingUser
from tutorhub.services.user_service import UserService


@pytest.fixture
def user_service(db, clock):
    return UserService(db, clock=clock)


def test_sync_identity_inserts_new_user(db, user_service) -> None:
    actor = ActingUser(
        id="01HCCCCCCCCCCCCCCCCCCCCCCC", email="new@example.com", name="New Parent", role=RoleName.PARENT
    )

    user = user_service.sync_identity(actor)

    assert user.id == actor.id
    assert user.role == "parent"
    assert db.query(User).count() == 1


def test_sync_identity_refreshes_changed_fields(db, user_service, parent_user) -> None:
    actor = ActingUser(
        id=parent_user.id, email=parent_user.email, name="Pat Renamed", role=RoleName.PARENT
    )

    user = user_service.sync_identity(actor)

    assert user.name == "Pat Renamed"
    assert db.query(User).count() == 1


def test_sync_identity_rejects_email_owned_by_another_user(db, user_service, parent_user) -> None:
    actor = ActingUser(
        id="01HDDDDDDDDDDDDDDDDDDDDDDD", email=parent_user.email, name="Impostor", role=RoleName.PARENT
    )

    with pytest.raises(ConflictException) as exc_info:
        user_service.sync_identity(actor)

    assert exc_info.value.code == "EMAIL_IN_USE"
    assert db.query(User).count() == 1


def test_sync_identity_rejects_email_change_onto_taken_address(
    db, user_service, parent_user, other_parent_user
) -> None:
    actor = ActingUser(
        id=other_parent_user.id, email=parent_user.email, name="Olive Other", role=RoleName.PARENT
    )

    with pytest.raises(ConflictException) as exc_info:
        user_service.sync_identity(actor)

    assert exc_info.value.code == "EMAIL_IN_USE"
    db.expire_all()
    assert db.get(User, other_parent_user.id).email == "other.parent@example.com"
