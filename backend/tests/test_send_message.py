"""
Tests for the chat message pipeline (SendMessageHandler).

Run with: pytest tests/test_send_message.py -v
"""

import asyncio

import pytest

from conftest import AlwaysFailingGateway, ScriptedGateway, run
from intellitutor.application.commands.chat import SendMessageCommand, SendMessageHandler
from intellitutor.application.commands.conversations import (
    UpdateTitleCommand,
    UpdateTitleHandler,
)
from intellitutor.config.settings import Config
from intellitutor.domain.entities.message import MessageRole
from intellitutor.domain.exceptions import (
    AccessDeniedError,
    DomainValidationError,
    EntityNotFoundError,
    ProviderUnavailableError,
    StorageError,
)
from intellitutor.domain.value_objects.conversation_id import ConversationId
from intellitutor.infrastructure.persistence import InMemoryConversationStore


def make_handler(store, gateway, lock, **overrides):
    options = {
        "system_prompt": "You are a tutor.",
        "model_timeout": 5,
        "retry_attempts": 0,
        "retry_backoff": 0,
    }
    options.update(overrides)
    return SendMessageHandler(
        conversation_store=store,
        model_gateway=gateway,
        conversation_lock=lock,
        **options,
    )


def send(handler, conversation_id, user_id, content):
    return handler.execute(
        SendMessageCommand(
            conversation_id=conversation_id, user_id=user_id, content=content
        )
    )


class AssistantAppendFailingStore(InMemoryConversationStore):
    async def append_message(self, conversation_id, role, content):
        if role == MessageRole.ASSISTANT:
            raise StorageError("append message failed")
        return await super().append_message(conversation_id, role, content)


# ==================== HAPPY PATH ====================


class TestExchange:
    def test_stores_user_then_assistant_turn(self, store, lock, alice):
        gateway = ScriptedGateway(replies=["Plants turn light into sugar."])
        handler = make_handler(store, gateway, lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            result = await send(handler, conv.id, alice, "What is photosynthesis?")
            history = await store.list_messages(conv.id, alice)
            return conv, result, history

        conv, result, history = run(scenario())

        assert result.conversation_id == conv.id
        assert result.user_message.content == "What is photosynthesis?"
        assert result.assistant_message.content == "Plants turn light into sugar."
        assert result.degraded is False
        assert [m.role for m in history] == ["user", "assistant"]
        assert [m.id for m in history] == [
            result.user_message.id,
            result.assistant_message.id,
        ]

    def test_model_sees_system_prompt_and_full_history(self, store, lock, alice):
        gateway = ScriptedGateway(replies=["first answer", "second answer"])
        handler = make_handler(store, gateway, lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            await send(handler, conv.id, alice, "first question")
            await send(handler, conv.id, alice, "second question")

        run(scenario())

        assert gateway.calls[1] == [
            {"role": "system", "content": "You are a tutor."},
            {"role": "user", "content": "first question"},
            {"role": "assistant", "content": "first answer"},
            {"role": "user", "content": "second question"},
        ]

    def test_history_alternates_over_several_exchanges(self, store, lock, alice):
        handler = make_handler(store, ScriptedGateway(), lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            for i in range(3):
                await send(handler, conv.id, alice, f"question {i}")
            return await store.list_messages(conv.id, alice)

        history = run(scenario())

        assert [m.role for m in history] == ["user", "assistant"] * 3
        assert history[4].content == "question 2"
        assert history[5].content == "echo: question 2"

    def test_content_is_stored_trimmed(self, store, lock, alice):
        handler = make_handler(store, ScriptedGateway(), lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            return await send(handler, conv.id, alice, "   hello tutor  \n")

        result = run(scenario())
        assert result.user_message.content == "hello tutor"

    def test_exchange_bumps_updated_at(self, store, lock, alice):
        handler = make_handler(store, ScriptedGateway(), lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            result = await send(handler, conv.id, alice, "hello")
            return conv, result, await store.get_conversation(conv.id, alice)

        created, result, after = run(scenario())
        assert after.updated_at >= result.assistant_message.created_at
        assert after.updated_at >= created.updated_at

    def test_empty_conversation_id_creates_conversation(self, store, lock, alice):
        handler = make_handler(store, ScriptedGateway(), lock)

        async def scenario():
            result = await send(handler, ConversationId(""), alice, "brand new topic")
            conversations = await store.list_conversations(alice, 10)
            return result, conversations

        result, conversations = run(scenario())

        assert len(conversations) == 1
        assert conversations[0].id == result.conversation_id
        assert conversations[0].title == "brand new topic"


# ==================== TITLE DERIVATION ====================


class TestTitleDerivation:
    def test_first_message_sets_title(self, store, lock, alice):
        handler = make_handler(store, ScriptedGateway(), lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            await send(handler, conv.id, alice, "Explain fractions")
            return await store.get_conversation(conv.id, alice)

        assert run(scenario()).title == "Explain fractions"

    def test_long_first_message_is_truncated_with_ellipsis(self, store, lock, alice):
        handler = make_handler(store, ScriptedGateway(), lock)
        content = "x" * 60

        async def scenario():
            conv = await store.create_conversation(alice)
            await send(handler, conv.id, alice, content)
            return await store.get_conversation(conv.id, alice)

        title = run(scenario()).title
        assert title == "x" * Config.TITLE_DERIVE_LENGTH + "..."

    def test_message_of_exactly_derive_length_is_kept_whole(self, store, lock, alice):
        handler = make_handler(store, ScriptedGateway(), lock)
        content = "y" * Config.TITLE_DERIVE_LENGTH

        async def scenario():
            conv = await store.create_conversation(alice)
            await send(handler, conv.id, alice, content)
            return await store.get_conversation(conv.id, alice)

        assert run(scenario()).title == content

    def test_later_messages_do_not_retitle(self, store, lock, alice):
        handler = make_handler(store, ScriptedGateway(), lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            await send(handler, conv.id, alice, "first topic")
            await send(handler, conv.id, alice, "second topic")
            return await store.get_conversation(conv.id, alice)

        assert run(scenario()).title == "first topic"

    def test_custom_title_is_kept(self, store, lock, alice):
        handler = make_handler(store, ScriptedGateway(), lock)

        async def scenario():
            conv = await store.create_conversation(alice, "Algebra homework")
            await send(handler, conv.id, alice, "solve x + 2 = 5")
            return await store.get_conversation(conv.id, alice)

        assert run(scenario()).title == "Algebra homework"

    def test_renamed_conversation_is_not_retitled(self, store, lock, alice):
        handler = make_handler(store, ScriptedGateway(), lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            await store.rename_conversation(conv.id, "My own title")
            await send(handler, conv.id, alice, "hello")
            return await store.get_conversation(conv.id, alice)

        assert run(scenario()).title == "My own title"

    def test_title_derived_even_when_model_falls_back(self, store, lock, alice):
        gateway = AlwaysFailingGateway(ProviderUnavailableError("down"))
        handler = make_handler(store, gateway, lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            await send(handler, conv.id, alice, "Why is the sky blue?")
            return await store.get_conversation(conv.id, alice)

        assert run(scenario()).title == "Why is the sky blue?"

    def test_concurrent_first_messages_derive_title_once(self, store, lock, alice):
        gateway = ScriptedGateway(delay=0.02)
        handler = make_handler(store, gateway, lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            await asyncio.gather(
                send(handler, conv.id, alice, "alpha"),
                send(handler, conv.id, alice, "beta"),
            )
            return (
                await store.get_conversation(conv.id, alice),
                await store.list_messages(conv.id, alice),
            )

        conv, history = run(scenario())

        assert [m.role for m in history] == ["user", "assistant", "user", "assistant"]
        # The exchange that ran first owns the title
        assert conv.title == history[0].content
        assert history[1].content == f"echo: {history[0].content}"
        assert history[3].content == f"echo: {history[2].content}"
        assert lock.active_keys == 0


# ==================== FALLBACK ====================


class TestModelFallback:
    def test_provider_failure_stores_fallback_reply(self, store, lock, alice):
        gateway = AlwaysFailingGateway(ProviderUnavailableError("connection refused"))
        handler = make_handler(store, gateway, lock, fallback_message="Try later.")

        async def scenario():
            conv = await store.create_conversation(alice)
            result = await send(handler, conv.id, alice, "hello")
            return result, await store.list_messages(conv.id, alice)

        result, history = run(scenario())

        assert result.degraded is True
        assert result.assistant_message.content == "Try later."
        assert result.assistant_message.role == MessageRole.ASSISTANT
        assert [m.content for m in history] == ["hello", "Try later."]

    def test_default_fallback_text(self, store, lock, alice):
        gateway = AlwaysFailingGateway(ProviderUnavailableError("down"))
        handler = SendMessageHandler(store, gateway, lock, retry_attempts=0)

        async def scenario():
            conv = await store.create_conversation(alice)
            return await send(handler, conv.id, alice, "hello")

        result = run(scenario())
        assert result.assistant_message.content == Config.FALLBACK_MESSAGE

    def test_timeout_stores_fallback_reply(self, store, lock, alice):
        gateway = ScriptedGateway(replies=["too late"], delay=1.0)
        handler = make_handler(
            store, gateway, lock, model_timeout=0.05, fallback_message="Timed out."
        )

        async def scenario():
            conv = await store.create_conversation(alice)
            return await send(handler, conv.id, alice, "hello")

        result = run(scenario())
        assert result.degraded is True
        assert result.assistant_message.content == "Timed out."

    def test_retry_recovers_from_one_failure(self, store, lock, alice):
        gateway = ScriptedGateway(
            replies=["recovered"], errors=[ProviderUnavailableError("blip"), None]
        )
        handler = make_handler(store, gateway, lock, retry_attempts=1)

        async def scenario():
            conv = await store.create_conversation(alice)
            return await send(handler, conv.id, alice, "hello")

        result = run(scenario())
        assert result.degraded is False
        assert result.assistant_message.content == "recovered"
        assert len(gateway.calls) == 2

    def test_retries_exhausted_fall_back(self, store, lock, alice):
        gateway = AlwaysFailingGateway(ProviderUnavailableError("down"))
        handler = make_handler(store, gateway, lock, retry_attempts=2)

        async def scenario():
            conv = await store.create_conversation(alice)
            return await send(handler, conv.id, alice, "hello")

        result = run(scenario())
        assert result.degraded is True
        assert gateway.calls == 3

    def test_no_retry_by_default(self, store, lock, alice):
        gateway = AlwaysFailingGateway(ProviderUnavailableError("down"))
        handler = make_handler(store, gateway, lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            await send(handler, conv.id, alice, "hello")

        run(scenario())
        assert gateway.calls == 1

    def test_unexpected_gateway_error_propagates(self, store, lock, alice):
        handler = make_handler(store, AlwaysFailingGateway(RuntimeError("bug")), lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            await send(handler, conv.id, alice, "hello")

        with pytest.raises(RuntimeError):
            run(scenario())


# ==================== VALIDATION AND OWNERSHIP ====================


class TestRejections:
    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    def test_blank_content_rejected(self, store, lock, alice, content):
        gateway = ScriptedGateway()
        handler = make_handler(store, gateway, lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            with pytest.raises(DomainValidationError):
                await send(handler, conv.id, alice, content)
            return await store.list_messages(conv.id, alice)

        assert run(scenario()) == []
        assert gateway.calls == []

    def test_content_over_limit_rejected(self, store, lock, alice):
        handler = make_handler(store, ScriptedGateway(), lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            with pytest.raises(DomainValidationError):
                await send(handler, conv.id, alice, "a" * (Config.MESSAGE_MAX_LENGTH + 1))
            return await store.list_messages(conv.id, alice)

        assert run(scenario()) == []

    def test_content_at_limit_accepted(self, store, lock, alice):
        handler = make_handler(store, ScriptedGateway(), lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            return await send(handler, conv.id, alice, "a" * Config.MESSAGE_MAX_LENGTH)

        result = run(scenario())
        assert len(result.user_message.content) == Config.MESSAGE_MAX_LENGTH

    def test_invalid_content_without_conversation_creates_nothing(
        self, store, lock, alice
    ):
        handler = make_handler(store, ScriptedGateway(), lock)

        async def scenario():
            with pytest.raises(DomainValidationError):
                await send(handler, ConversationId(""), alice, "  ")
            return await store.list_conversations(alice, 10)

        assert run(scenario()) == []

    def test_foreign_conversation_rejected(self, store, lock, alice, bob):
        gateway = ScriptedGateway()
        handler = make_handler(store, gateway, lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            with pytest.raises(AccessDeniedError):
                await send(handler, conv.id, bob, "let me in")
            return await store.list_messages(conv.id, alice)

        assert run(scenario()) == []
        assert gateway.calls == []

    def test_unknown_conversation_rejected(self, store, lock, alice):
        handler = make_handler(store, ScriptedGateway(), lock)

        with pytest.raises(EntityNotFoundError):
            run(send(handler, ConversationId.generate(), alice, "hello"))


# ==================== STORAGE FAILURES ====================


class TestStorageFailure:
    def test_storage_error_propagates_and_keeps_user_turn(self, lock, alice):
        store = AssistantAppendFailingStore()
        handler = make_handler(store, ScriptedGateway(), lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            with pytest.raises(StorageError):
                await send(handler, conv.id, alice, "hello")
            return await store.list_messages(conv.id, alice)

        history = run(scenario())
        assert [m.role for m in history] == ["user"]
        assert lock.active_keys == 0

    def test_delete_drops_messages(self, store, lock, alice):
        handler = make_handler(store, ScriptedGateway(), lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            await send(handler, conv.id, alice, "hello")
            await store.delete_conversation(conv.id, alice)
            with pytest.raises(EntityNotFoundError):
                await store.list_messages(conv.id, alice)
            with pytest.raises(EntityNotFoundError):
                await send(handler, conv.id, alice, "anyone there?")

        run(scenario())


# ==================== ORDERING AND RENAMES ====================


class TestMessageOrdering:
    def test_message_ids_sort_in_conversation_order(self, store, lock, alice):
        handler = make_handler(store, ScriptedGateway(), lock)

        async def scenario():
            conv = await store.create_conversation(alice)
            for i in range(5):
                await send(handler, conv.id, alice, f"question {i}")
            return await store.list_messages(conv.id, alice)

        ids = [message.id.value for message in run(scenario())]
        assert len(ids) == 10
        assert sorted(ids) == ids


class PausingTitleReadStore(InMemoryConversationStore):
    """Parks the first conversation read made after the reply is stored."""

    def __init__(self):
        super().__init__()
        self.title_read = None
        self.resume = None

    async def get_conversation(self, conversation_id, requester_id):
        conversation = await super().get_conversation(conversation_id, requester_id)
        replied = len(self._messages[conversation_id.value]) == 2
        if self.title_read and replied and not self.title_read.is_set():
            self.title_read.set()
            await self.resume.wait()
        return conversation


class TestRenameDuringFirstExchange:
    def test_rename_is_not_overwritten_by_title_derivation(self, lock, alice):
        store = PausingTitleReadStore()
        send_handler = make_handler(store, ScriptedGateway(), lock)
        rename_handler = UpdateTitleHandler(store, lock)

        async def scenario():
            store.title_read = asyncio.Event()
            store.resume = asyncio.Event()
            conv = await store.create_conversation(alice)
            sending = asyncio.create_task(
                send(send_handler, conv.id, alice, "What is an atom?")
            )
            # the send has read the default title and not yet written its own
            await store.title_read.wait()
            renaming = asyncio.create_task(
                rename_handler.execute(
                    UpdateTitleCommand(
                        conversation_id=conv.id, user_id=alice, new_title="Chemistry"
                    )
                )
            )
            await asyncio.sleep(0.01)
            store.resume.set()
            await sending
            renamed = await renaming
            return renamed, await store.get_conversation(conv.id, alice)

        renamed, final = run(scenario())
        assert renamed.title == "Chemistry"
        assert final.title == "Chemistry"
