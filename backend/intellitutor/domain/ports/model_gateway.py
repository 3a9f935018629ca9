"""
Model Gateway Port - Interface for the external language-model provider.
Implementation: intellitutor/infrastructure/llm/openai_gateway.py

complete() receives the ordered history (system instruction first when the
caller adds one, the just-appended user turn last) and returns plain text.
It raises ProviderUnavailableError on any failure and never retries;
retry policy belongs to the caller.
"""

from abc import ABC, abstractmethod
from typing import TypedDict


class ChatTurn(TypedDict):
    role: str
    content: str


class ModelGateway(ABC):
    @abstractmethod
    async def complete(self, history: list[ChatTurn]) -> str: ...
