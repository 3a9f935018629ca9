import asyncio
import os

# Settings are read at import time; pin them before intellitutor is imported
os.environ.setdefault("SERVICE_AUTH_SECRET", "test-secret")
os.environ["STORE_BACKEND"] = "memory"
os.environ["LOCK_BACKEND"] = "memory"
os.environ["OPENAI_API_KEY"] = ""
os.environ["LANGSMITH_TRACING"] = "false"

import pytest
from dishka import Provider, Scope, provide
from fastapi.testclient import TestClient

from intellitutor.domain.ports.conversation_lock import ConversationLock
from intellitutor.domain.ports.model_gateway import ChatTurn, ModelGateway
from intellitutor.domain.ports.repositories import ConversationStore
from intellitutor.domain.value_objects.user_id import UserId
from intellitutor.fastapi_app import create_fastapi_app
from intellitutor.infrastructure.locks import InProcessConversationLock
from intellitutor.infrastructure.persistence import InMemoryConversationStore
from intellitutor.setup.ioc import create_container
from jwt_generation import generate_jwt_token


class ScriptedGateway(ModelGateway):
    """
    ModelGateway double.

    - replies: returned in order; once exhausted, echoes the last user turn
    - errors: raised in order before any reply (None entries succeed)
    - delay: seconds to await before answering
    """

    def __init__(self, replies=None, errors=None, delay: float = 0.0):
        self.replies = list(replies or [])
        self.errors = list(errors or [])
        self.delay = delay
        self.calls: list[list[ChatTurn]] = []

    async def complete(self, history: list[ChatTurn]) -> str:
        self.calls.append([dict(turn) for turn in history])
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.errors:
            error = self.errors.pop(0)
            if error is not None:
                raise error
        if self.replies:
            return self.replies.pop(0)
        return f"echo: {history[-1]['content']}"


class AlwaysFailingGateway(ModelGateway):
    def __init__(self, error: Exception):
        self.error = error
        self.calls = 0

    async def complete(self, history: list[ChatTurn]) -> str:
        self.calls += 1
        raise self.error


class StubInfrastructureProvider(Provider):
    """Hands pre-built port implementations to the container."""

    def __init__(
        self,
        store: ConversationStore,
        gateway: ModelGateway,
        lock: ConversationLock,
    ):
        super().__init__()
        self._store = store
        self._gateway = gateway
        self._lock = lock

    @provide(scope=Scope.APP)
    def get_conversation_store(self) -> ConversationStore:
        return self._store

    @provide(scope=Scope.APP)
    def get_model_gateway(self) -> ModelGateway:
        return self._gateway

    @provide(scope=Scope.APP)
    def get_conversation_lock(self) -> ConversationLock:
        return self._lock


def run(coro):
    return asyncio.run(coro)


@pytest.fixture()
def alice():
    return UserId("alice")


@pytest.fixture()
def bob():
    return UserId("bob")


@pytest.fixture()
def store():
    return InMemoryConversationStore()


@pytest.fixture()
def lock():
    return InProcessConversationLock()


@pytest.fixture()
def gateway():
    return ScriptedGateway()


@pytest.fixture()
def app(store, gateway, lock):
    """FastAPI app wired to the in-memory store and the scripted gateway."""
    container = create_container(StubInfrastructureProvider(store, gateway, lock))
    return create_fastapi_app(container)


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def auth_headers():
    """Authentication headers for user "alice"."""
    return {"Authorization": f"Bearer {generate_jwt_token('alice')}"}


@pytest.fixture()
def other_auth_headers():
    """Authentication headers for user "bob"."""
    return {"Authorization": f"Bearer {generate_jwt_token('bob')}"}
