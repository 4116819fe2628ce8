"""
Repository tests against SQLite: overlap queries, the per-pair conversation
race, unread counts and the user identity mirror.
"""

from datetime import timedelta

import pytest

from tutorhub.core.exceptions import RepositoryException
from tutorhub.models import Conversation, Message, User
from tutorhub.models.booking import BookingStatus
from tutorhub.repositories.factory import RepositoryFactory


class TestConflictCheckerRepository:
    @pytest.fixture
    def repository(self, db):
        return RepositoryFactory.create_conflict_checker_repository(db)

    def test_only_confirmed_overlaps_block(
        self, repository, make_booking, teacher_profile, clock
    ) -> None:
        start = clock.current + timedelta(days=1)
        make_booking(start=start, status=BookingStatus.PENDING)
        make_booking(start=start, status=BookingStatus.CANCELLED)
        make_booking(start=start, status=BookingStatus.COMPLETED)

        assert not repository.has_overlapping_booking(
            teacher_profile.id, start, start + timedelta(hours=1)
        )

        confirmed = make_booking(start=start, status=BookingStatus.CONFIRMED)

        assert repository.has_overlapping_booking(
            teacher_profile.id, start + timedelta(minutes=59), start + timedelta(hours=2)
        )
        assert not repository.has_overlapping_booking(
            teacher_profile.id, start + timedelta(hours=1), start + timedelta(hours=2)
        )
        assert not repository.has_overlapping_booking(
            teacher_profile.id, start, start + timedelta(hours=1), exclude_booking_id=confirmed.id
        )

    def test_overlapping_bookings_ordered_by_start(
        self, repository, make_booking, teacher_profile, clock
    ) -> None:
        start = clock.current + timedelta(days=1)
        later = make_booking(start=start + timedelta(hours=2), status=BookingStatus.CONFIRMED)
        earlier = make_booking(start=start, status=BookingStatus.CONFIRMED)

        found = repository.get_overlapping_bookings(
            teacher_profile.id, start, start + timedelta(hours=4)
        )

        assert [b.id for b in found] == [earlier.id, later.id]


class TestConversationRepository:
    def test_get_or_create_recovers_from_unique_violation(
        self, db, parent_user, teacher_user, monkeypatch
    ) -> None:
        repository = RepositoryFactory.create_conversation_repository(db)
        existing = Conversation(parent_id=parent_user.id, teacher_id=teacher_user.id)
        db.add(existing)
        db.commit()

        calls = []
        original = repository.find_by_pair

        def racing_find(parent_id, teacher_id):
            calls.append(1)
            # First lookup happens before the other request commits
            return None if len(calls) == 1 else original(parent_id, teacher_id)

        monkeypatch.setattr(repository, "find_by_pair", racing_find)

        conversation, created = repository.get_or_create(parent_user.id, teacher_user.id)
        db.commit()

        assert created is False
        assert conversation.id == existing.id
        assert db.query(Conversation).count() == 1

    def test_find_for_user_covers_both_sides(self, db, parent_user, teacher_user) -> None:
        repository = RepositoryFactory.create_conversation_repository(db)
        conversation, created = repository.get_or_create(parent_user.id, teacher_user.id)
        db.commit()

        assert created is True
        assert [c.id for c in repository.find_for_user(parent_user.id)] == [conversation.id]
        assert [c.id for c in repository.find_for_user(teacher_user.id)] == [conversation.id]


class TestMessageRepository:
    def test_unread_counts(self, db, parent_user, teacher_user, other_teacher_user, clock) -> None:
        first = Conversation(parent_id=parent_user.id, teacher_id=teacher_user.id)
        second = Conversation(parent_id=parent_user.id, teacher_id=other_teacher_user.id)
        db.add_all([first, second])
        db.flush()
        db.add_all(
            [
                Message(conversation_id=first.id, sender_id=teacher_user.id, content="a", created_at=clock.current),
                Message(conversation_id=first.id, sender_id=teacher_user.id, content="b", created_at=clock.current),
                Message(conversation_id=first.id, sender_id=parent_user.id, content="c", created_at=clock.current),
                Message(
                    conversation_id=second.id,
                    sender_id=other_teacher_user.id,
                    content="d",
                    created_at=clock.current,
                    is_read=True,
                ),
            ]
        )
        db.commit()
        repository = RepositoryFactory.create_message_repository(db)

        assert repository.get_unread_count_for_user(parent_user.id) == 2
        assert repository.get_unread_count_for_user(teacher_user.id) == 1
        assert repository.get_unread_counts_by_conversation([first.id, second.id], parent_user.id) == {
            first.id: 2
        }
        assert repository.get_unread_counts_by_conversation([], parent_user.id) == {}


class TestUserRepository:
    def test_upsert_identity_inserts_then_refreshes(self, db) -> None:
        repository = RepositoryFactory.create_user_repository(db)

        created = repository.upsert_identity("01HAAAAAAAAAAAAAAAAAAAAAAA", "a@example.com", "Ann", "parent")
        db.commit()
        refreshed = repository.upsert_identity("01HAAAAAAAAAAAAAAAAAAAAAAA", "a@example.com", "Ann B", "parent")
        db.commit()

        assert refreshed.id == created.id
        assert refreshed.name == "Ann B"
        assert db.query(User).count() == 1

    def test_duplicate_email_is_repository_error(self, db, parent_user) -> None:
        repository = RepositoryFactory.create_user_repository(db)

        with pytest.raises(RepositoryException):
            repository.upsert_identity(
                "01HBBBBBBBBBBBBBBBBBBBBBBB", parent_user.email, "Impostor", "parent"
            )
        db.rollback()
