"""
Dishka DI Container Setup.

- Registers all dependencies (store, model gateway, lock, handlers)
- Maps abstract ports to concrete implementations
- Manages lifecycle (APP = singleton, REQUEST = per-request)

Two providers:
- InfrastructureProvider: ports → adapters, chosen by Config
  (STORE_BACKEND, LOCK_BACKEND). Tests swap this one out.
- ApplicationProvider: command/query handlers, auto-wired from the ports.

Flow:
  Container → provides → PrismaConversationStore → to → SendMessageHandler
                                    ↓
                            uses ConversationStore interface
"""

import logging
from collections.abc import AsyncIterable

from dishka import AsyncContainer, Provider, Scope, make_async_container, provide

from intellitutor.application.commands.chat import SendMessageHandler
from intellitutor.application.commands.conversations import (
    CreateConversationHandler,
    DeleteConversationHandler,
    UpdateTitleHandler,
)
from intellitutor.application.queries.chat import GetChatHistoryHandler
from intellitutor.application.queries.conversations import ListConversationsHandler
from intellitutor.config.settings import Config
from intellitutor.domain.ports.conversation_lock import ConversationLock
from intellitutor.domain.ports.model_gateway import ModelGateway
from intellitutor.domain.ports.repositories import ConversationStore
from intellitutor.infrastructure.cache import close_redis_client, create_redis_client
from intellitutor.infrastructure.llm import AsyncCircuitBreaker, OpenAIModelGateway
from intellitutor.infrastructure.locks import (
    InProcessConversationLock,
    RedisConversationLock,
)
from intellitutor.infrastructure.persistence import InMemoryConversationStore

logger = logging.getLogger(__name__)


class InfrastructureProvider(Provider):
    """Port implementations, all app-scoped (one per process)."""

    # ==================== STORAGE ====================

    @provide(scope=Scope.APP)
    async def get_conversation_store(self) -> AsyncIterable[ConversationStore]:
        """
        Provide the ConversationStore.

        - "memory": dict-backed store, data lives as long as the process
        - "prisma": connected Prisma client, disconnected on container close
        """
        if Config.STORE_BACKEND == "memory":
            logger.warning("Using in-memory conversation store; data is not persisted")
            yield InMemoryConversationStore()
            return

        # Generated client: only importable after `prisma generate`
        from prisma import Prisma
        from intellitutor.infrastructure.persistence.prisma_conversation_store import (
            PrismaConversationStore,
        )

        if Config.DATABASE_URL:
            prisma = Prisma(datasource={"url": Config.DATABASE_URL})
        else:
            prisma = Prisma()  # schema env("DATABASE_URL")
        await prisma.connect()
        try:
            yield PrismaConversationStore(prisma)
        finally:
            await prisma.disconnect()

    # ==================== MODEL PROVIDER ====================

    @provide(scope=Scope.APP)
    def get_circuit_breaker(self) -> AsyncCircuitBreaker:
        return AsyncCircuitBreaker(
            Config.LLM_CB_FAILURE_THRESHOLD, Config.LLM_CB_RECOVERY_TIMEOUT
        )

    @provide(scope=Scope.APP)
    def get_model_gateway(self, breaker: AsyncCircuitBreaker) -> ModelGateway:
        return OpenAIModelGateway.from_config(breaker=breaker)

    # ==================== LOCKING ====================

    @provide(scope=Scope.APP)
    async def get_conversation_lock(self) -> AsyncIterable[ConversationLock]:
        if Config.LOCK_BACKEND != "redis":
            yield InProcessConversationLock()
            return

        redis = await create_redis_client()
        try:
            yield RedisConversationLock(redis)
        finally:
            await close_redis_client(redis)


class ApplicationProvider(Provider):
    """Command and query handlers, one set per HTTP request."""

    @provide(scope=Scope.REQUEST)
    def get_create_conversation_handler(
        self, conversation_store: ConversationStore
    ) -> CreateConversationHandler:
        """
        - Parameter asks for ConversationStore (abstract)
        - Dishka resolves it through InfrastructureProvider
        """
        return CreateConversationHandler(conversation_store)

    @provide(scope=Scope.REQUEST)
    def get_delete_conversation_handler(
        self, conversation_store: ConversationStore
    ) -> DeleteConversationHandler:
        return DeleteConversationHandler(conversation_store)

    @provide(scope=Scope.REQUEST)
    def get_update_title_handler(
        self,
        conversation_store: ConversationStore,
        conversation_lock: ConversationLock,
    ) -> UpdateTitleHandler:
        return UpdateTitleHandler(conversation_store, conversation_lock)

    @provide(scope=Scope.REQUEST)
    def get_list_conversations_handler(
        self, conversation_store: ConversationStore
    ) -> ListConversationsHandler:
        return ListConversationsHandler(conversation_store)

    @provide(scope=Scope.REQUEST)
    def get_chat_history_handler(
        self, conversation_store: ConversationStore
    ) -> GetChatHistoryHandler:
        return GetChatHistoryHandler(conversation_store)

    @provide(scope=Scope.REQUEST)
    def get_send_message_handler(
        self,
        conversation_store: ConversationStore,
        model_gateway: ModelGateway,
        conversation_lock: ConversationLock,
    ) -> SendMessageHandler:
        return SendMessageHandler(
            conversation_store=conversation_store,
            model_gateway=model_gateway,
            conversation_lock=conversation_lock,
        )


def create_container(*infrastructure: Provider) -> AsyncContainer:
    """
    Create and configure the DI container.

    Args:
        infrastructure: providers for the ports; defaults to
            InfrastructureProvider() (Config-driven adapters)
    """
    return make_async_container(
        *(infrastructure or (InfrastructureProvider(),)),
        ApplicationProvider(),
    )
