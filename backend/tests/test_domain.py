"""Tests for domain value objects and entity helpers."""

from uuid import RFC_4122, UUID

import pytest

from intellitutor.domain.entities.conversation import Conversation
from intellitutor.domain.value_objects.conversation_id import ConversationId
from intellitutor.domain.value_objects.message_id import MessageId
from intellitutor.domain.value_objects.user_id import UserId


class TestMessageId:
    def test_ids_sort_in_creation_order(self):
        ids = [MessageId.generate().value for _ in range(5000)]

        assert sorted(ids) == ids
        assert len(set(ids)) == len(ids)

    def test_ids_are_version_7_uuids(self):
        parsed = UUID(MessageId.generate().value)

        assert parsed.version == 7
        assert parsed.variant == RFC_4122

    def test_rejects_non_uuid(self):
        with pytest.raises(ValueError):
            MessageId("42")


class TestConversationId:
    def test_empty_means_not_yet_created(self):
        assert not ConversationId("")
        assert ConversationId.generate()

    def test_rejects_non_uuid(self):
        with pytest.raises(ValueError):
            ConversationId("not-a-uuid")


class TestTitleFromMessage:
    def test_short_message_kept(self):
        assert Conversation.title_from_message("Hi", 50) == "Hi"

    def test_long_message_truncated(self):
        assert Conversation.title_from_message("abcdef", 3) == "abc..."


def test_user_id_cannot_be_blank():
    with pytest.raises(ValueError):
        UserId("  ")
