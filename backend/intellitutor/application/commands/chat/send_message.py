"""
SendMessage Command - The chat message pipeline.

Command data:
- conversation_id: ConversationId (empty = create the conversation first)
- user_id: UserId (explicit identity, never ambient)
- content: str

Handler flow:
    Validating ──► UserMessageAppended ──► AwaitingModel ──► Completed
        │                                      │
        ▼                                      ▼
     Rejected                           FallbackAppended ──► Completed

1. Validate content (trimmed, non-empty, bounded) and resolve ownership.
   Nothing is written before this passes.
2. Under the conversation lock: append the user turn. It is committed before
   the model is called, so a crash later never loses the user's message.
3. Rebuild the model context from the persisted history (plus the system
   instruction). The model sees exactly what is stored.
4. Call the model (bounded by a timeout, optional retries). On provider
   failure the fixed fallback text becomes the assistant turn; the request
   still succeeds.
5. First exchange (history held exactly one message after the user append)
   and still-default title: derive the title from the user's message.
6. Return both persisted turns.

StorageError is never caught here: losing the store mid-exchange leaves the
conversation state unknown, so the request must fail.
"""

import asyncio
import logging
import time
from dataclasses import dataclass

from intellitutor.application.common.interfaces import Command, CommandHandler
from intellitutor.config.settings import Config
from intellitutor.domain.entities.conversation import Conversation
from intellitutor.domain.entities.message import Message, MessageRole
from intellitutor.domain.exceptions import DomainValidationError, ProviderUnavailableError
from intellitutor.domain.ports.conversation_lock import ConversationLock
from intellitutor.domain.ports.model_gateway import ChatTurn, ModelGateway
from intellitutor.domain.ports.repositories import ConversationStore
from intellitutor.domain.value_objects.conversation_id import ConversationId
from intellitutor.domain.value_objects.user_id import UserId
from intellitutor.observability.metrics import (
    MetricsErrorType,
    decrement_active_sends,
    increment_active_sends,
    increment_error,
    increment_fallback_reply,
    observe_model_latency,
)

logger = logging.getLogger(__name__)


@dataclass
class SendMessageResult:
    conversation_id: ConversationId
    user_message: Message
    assistant_message: Message
    degraded: bool = False  # assistant_message is the fallback text


@dataclass(frozen=True)
class SendMessageCommand(Command[SendMessageResult]):
    conversation_id: ConversationId
    user_id: UserId
    content: str


class SendMessageHandler(CommandHandler[SendMessageResult]):
    def __init__(
        self,
        conversation_store: ConversationStore,
        model_gateway: ModelGateway,
        conversation_lock: ConversationLock,
        system_prompt: str = Config.SYSTEM_PROMPT,
        fallback_message: str = Config.FALLBACK_MESSAGE,
        model_timeout: float = Config.LLM_TIMEOUT,
        retry_attempts: int = Config.LLM_RETRY_ATTEMPTS,
        retry_backoff: float = Config.LLM_RETRY_BACKOFF,
    ):
        self._store = conversation_store
        self._gateway = model_gateway
        self._lock = conversation_lock
        self._system_prompt = system_prompt
        self._fallback_message = fallback_message
        self._model_timeout = model_timeout
        self._retry_attempts = max(0, retry_attempts)
        self._retry_backoff = retry_backoff

    async def execute(self, command: SendMessageCommand) -> SendMessageResult:
        content = self._validate_content(command.content)

        if command.conversation_id:
            conversation = await self._store.get_conversation(
                command.conversation_id, command.user_id
            )
        else:
            conversation = await self._store.create_conversation(command.user_id)
            logger.info(
                f"Created conversation {conversation.id.value} for first message"
            )

        increment_active_sends()
        try:
            async with self._lock.hold(conversation.id):
                return await self._exchange(conversation, command.user_id, content)
        finally:
            decrement_active_sends()

    def _validate_content(self, content: str) -> str:
        text = (content or "").strip()
        if not text:
            raise DomainValidationError("Message content cannot be empty.")
        if len(text) > Config.MESSAGE_MAX_LENGTH:
            raise DomainValidationError(
                f"Message content cannot exceed {Config.MESSAGE_MAX_LENGTH} characters."
            )
        return text

    async def _exchange(
        self, conversation: Conversation, user_id: UserId, content: str
    ) -> SendMessageResult:
        conversation_id = conversation.id

        user_message = await self._store.append_message(
            conversation_id, MessageRole.USER, content
        )

        history = await self._store.list_messages(conversation_id, user_id)
        # evaluated after the user append, before the assistant append
        first_exchange = len(history) == 1

        reply, degraded = await self._ask_model(self._build_context(history))

        assistant_message = await self._store.append_message(
            conversation_id, MessageRole.ASSISTANT, reply
        )
        logger.info(
            f"Exchange stored in {conversation_id.value} "
            f"(history={len(history) + 1}, degraded={degraded})"
        )

        if first_exchange:
            await self._derive_title(conversation_id, user_id, content)

        return SendMessageResult(
            conversation_id=conversation_id,
            user_message=user_message,
            assistant_message=assistant_message,
            degraded=degraded,
        )

    def _build_context(self, history: list[Message]) -> list[ChatTurn]:
        context: list[ChatTurn] = []
        if self._system_prompt:
            context.append({"role": MessageRole.SYSTEM, "content": self._system_prompt})
        context.extend(message.as_chat_turn() for message in history)
        return context

    async def _ask_model(self, context: list[ChatTurn]) -> tuple[str, bool]:
        """Returns (reply, degraded). Never raises for provider trouble."""
        attempts = self._retry_attempts + 1
        reason = "provider_unavailable"
        for attempt in range(1, attempts + 1):
            started = time.monotonic()
            try:
                reply = await asyncio.wait_for(
                    self._gateway.complete(context), timeout=self._model_timeout
                )
                observe_model_latency("success", time.monotonic() - started)
                return reply, False
            except asyncio.TimeoutError:
                reason = "timeout"
                increment_error(MetricsErrorType.TIMEOUT)
                logger.warning(
                    f"Model call timed out after {self._model_timeout}s "
                    f"(attempt {attempt}/{attempts})"
                )
            except ProviderUnavailableError as e:
                reason = "provider_unavailable"
                logger.warning(
                    f"Model provider unavailable: {e} (attempt {attempt}/{attempts})"
                )
            observe_model_latency(reason, time.monotonic() - started)
            if attempt < attempts:
                await asyncio.sleep(self._retry_backoff * attempt)

        increment_fallback_reply(reason)
        return self._fallback_message, True

    async def _derive_title(
        self, conversation_id: ConversationId, user_id: UserId, content: str
    ) -> None:
        current = await self._store.get_conversation(conversation_id, user_id)
        if current.title != Config.DEFAULT_CONVERSATION_TITLE:
            return
        title = Conversation.title_from_message(content, Config.TITLE_DERIVE_LENGTH)
        await self._store.rename_conversation(conversation_id, title)
        logger.debug(f"Derived title for {conversation_id.value}: {title!r}")
