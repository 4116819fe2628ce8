"""
Tests for per-pair messaging in ConversationService.
"""

from datetime import timedelta

import pytest

from tutorhub.core.exceptions import NotFoundException, PermissionDeniedException, ValidationException
from tutorhub.models import Conversation, Message
from tutorhub.services.conversation_service import ConversationService


@pytest.fixture
def conversation_service(db, clock):
    return ConversationService(db, clock=clock)


@pytest.fixture
def conversation(conversation_service, parent, teacher_profile):
    conversation, _ = conversation_service.open_conversation_with_teacher(
        parent, teacher_profile.user_id
    )
    return conversation


class TestOpenConversation:
    def test_get_or_create_is_idempotent_per_pair(
        self, db, conversation_service, parent, teacher, teacher_profile
    ) -> None:
        first, created = conversation_service.open_conversation_with_teacher(parent, teacher.id)
        again, created_again = conversation_service.open_conversation_with_teacher(parent, teacher.id)

        assert created is True
        assert created_again is False
        assert again.id == first.id
        assert first.parent_id == parent.id
        assert first.teacher_id == teacher.id
        assert db.query(Conversation).count() == 1

    def test_cannot_talk_to_yourself(self, conversation_service, parent) -> None:
        with pytest.raises(ValidationException):
            conversation_service.get_or_create_conversation(parent.id, parent.id)

    def test_only_parents_start_conversations(
        self, conversation_service, teacher, teacher_profile
    ) -> None:
        with pytest.raises(PermissionDeniedException):
            conversation_service.open_conversation_with_teacher(teacher, teacher.id)

    def test_target_must_be_a_teacher(self, conversation_service, parent, other_parent) -> None:
        with pytest.raises(NotFoundException):
            conversation_service.open_conversation_with_teacher(parent, other_parent.id)

    def test_start_by_profile_sends_first_message(
        self, db, conversation_service, parent, teacher_profile
    ) -> None:
        conversation, message = conversation_service.start_teacher_conversation(
            parent, teacher_profile.id, "Hello, are you free on Tuesdays?"
        )

        assert conversation.teacher_id == teacher_profile.user_id
        assert message.conversation_id == conversation.id
        assert message.sender_id == parent.id
        assert db.query(Message).count() == 1

    def test_start_with_empty_message_creates_nothing(
        self, db, conversation_service, parent, teacher_profile
    ) -> None:
        with pytest.raises(ValidationException):
            conversation_service.start_teacher_conversation(parent, teacher_profile.id, "   ")

        assert db.query(Conversation).count() == 0

    def test_start_with_unknown_profile(self, conversation_service, parent) -> None:
        with pytest.raises(NotFoundException):
            conversation_service.start_teacher_conversation(
                parent, "01HZZZZZZZZZZZZZZZZZZZZZZZ", "Hello"
            )


class TestMessages:
    def test_send_message_bumps_conversation_activity(
        self, conversation_service, conversation, teacher, clock
    ) -> None:
        clock.advance(minutes=5)

        message = conversation_service.send_message(conversation.id, teacher, "Happy to help")

        assert message.is_read is False
        assert message.created_at == clock.current
        assert conversation.updated_at == clock.current

    @pytest.mark.parametrize("content", ["", "   ", None, "x" * 2001])
    def test_invalid_content_is_rejected(
        self, db, conversation_service, conversation, parent, content
    ) -> None:
        with pytest.raises(ValidationException):
            conversation_service.send_message(conversation.id, parent, content)
        assert db.query(Message).count() == 0

    def test_message_at_length_limit_is_accepted(
        self, conversation_service, conversation, parent
    ) -> None:
        assert len(conversation_service.send_message(conversation.id, parent, "x" * 2000).content) == 2000

    def test_non_participant_cannot_send_or_read(
        self, conversation_service, conversation, other_parent
    ) -> None:
        with pytest.raises(PermissionDeniedException):
            conversation_service.send_message(conversation.id, other_parent, "Hi")
        with pytest.raises(PermissionDeniedException):
            conversation_service.get_messages(conversation.id, other_parent)

    def test_unknown_conversation(self, conversation_service, parent) -> None:
        with pytest.raises(NotFoundException):
            conversation_service.send_message("01HZZZZZZZZZZZZZZZZZZZZZZZ", parent, "Hi")

    def test_messages_are_paged_newest_first(
        self, conversation_service, conversation, parent, clock
    ) -> None:
        sent = []
        for i in range(5):
            clock.advance(minutes=1)
            sent.append(conversation_service.send_message(conversation.id, parent, f"Message {i}"))

        page = conversation_service.get_messages(conversation.id, parent, limit=2)
        assert [m.content for m in page] == ["Message 4", "Message 3"]

        older = conversation_service.get_messages(
            conversation.id, parent, before=page[-1].created_at, limit=10
        )
        assert [m.content for m in older] == ["Message 2", "Message 1", "Message 0"]

    @pytest.mark.parametrize("limit", [0, 101])
    def test_page_size_is_bounded(self, conversation_service, conversation, parent, limit) -> None:
        with pytest.raises(ValidationException):
            conversation_service.get_messages(conversation.id, parent, limit=limit)


class TestReadReceiptsAndInbox:
    def test_mark_as_read_only_flips_the_other_sides_messages(
        self, db, conversation_service, conversation, parent, teacher
    ) -> None:
        conversation_service.send_message(conversation.id, parent, "Question one")
        conversation_service.send_message(conversation.id, teacher, "Answer one")
        conversation_service.send_message(conversation.id, teacher, "Answer two")

        assert conversation_service.get_unread_count(parent) == 2
        assert conversation_service.get_unread_count(teacher) == 1

        assert conversation_service.mark_as_read(conversation.id, parent) == 2
        assert conversation_service.mark_as_read(conversation.id, parent) == 0

        assert conversation_service.get_unread_count(parent) == 0
        assert conversation_service.get_unread_count(teacher) == 1
        db.expire_all()
        own = db.query(Message).filter(Message.sender_id == parent.id).one()
        assert own.is_read is False

    def test_inbox_orders_by_latest_activity(
        self,
        conversation_service,
        parent,
        teacher,
        teacher_profile,
        other_teacher,
        db,
        clock,
    ) -> None:
        from tutorhub.models import TeacherProfile

        db.add(
            TeacherProfile(
                user_id=other_teacher.id,
                bio="Physics tutor for GCSE and A-level.",
                qualifications="MPhys",
                years_of_experience=4,
                hourly_rate=4000,
            )
        )
        db.commit()

        first, _ = conversation_service.open_conversation_with_teacher(parent, teacher.id)
        second, _ = conversation_service.open_conversation_with_teacher(parent, other_teacher.id)
        conversation_service.send_message(first.id, teacher, "Earlier reply")
        clock.advance(minutes=10)
        conversation_service.send_message(second.id, other_teacher, "Later reply")
        clock.advance(minutes=10)
        conversation_service.send_message(first.id, teacher, "Latest reply")

        inbox = conversation_service.list_conversations(parent)

        assert [s.conversation.id for s in inbox] == [first.id, second.id]
        assert inbox[0].last_message.content == "Latest reply"
        assert inbox[0].unread_count == 2
        assert inbox[1].unread_count == 1
        assert conversation_service.list_conversations(other_teacher)[0].unread_count == 0

    def test_inbox_empty_for_new_user(self, conversation_service, other_parent) -> None:
        assert conversation_service.list_conversations(other_parent) == []


class TestGetConversation:
    def test_both_parties_can_load_it(self, conversation_service, conversation, parent, teacher) -> None:
        assert conversation_service.get_conversation(conversation.id, parent).id == conversation.id
        assert conversation_service.get_conversation(conversation.id, teacher).id == conversation.id

    def test_outsider_is_refused(self, conversation_service, conversation, other_parent) -> None:
        with pytest.raises(PermissionDeniedException):
            conversation_service.get_conversation(conversation.id, other_parent)

    def test_unknown_conversation(self, conversation_service, parent) -> None:
        with pytest.raises(NotFoundException):
            conversation_service.get_conversation("01HZZZZZZZZZZZZZZZZZZZZZZZ", parent)
