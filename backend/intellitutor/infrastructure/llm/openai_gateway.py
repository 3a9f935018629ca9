"""
OpenAI Model Gateway - ModelGateway over any OpenAI-compatible chat API.

- One request/response call, no streaming
- No retries here (max_retries=0); the message pipeline owns retry policy
- Every failure becomes ProviderUnavailableError:
  missing API key, connection error, timeout, non-success status,
  empty/malformed response, open circuit

Usage:
    gateway = OpenAIModelGateway.from_config()
    reply = await gateway.complete(
        [{"role": "system", "content": "..."}, {"role": "user", "content": "Hi"}]
    )
"""

import logging
from typing import Optional

from httpx import Timeout
from langsmith import traceable
from openai import AsyncOpenAI, OpenAIError

from intellitutor.config.settings import Config
from intellitutor.domain.exceptions import ProviderUnavailableError
from intellitutor.domain.ports.model_gateway import ChatTurn, ModelGateway
from intellitutor.infrastructure.llm.circuit_breaker import (
    AsyncCircuitBreaker,
    CircuitOpenError,
)
from intellitutor.observability.metrics import (
    MetricsErrorType,
    increment_error,
    observe_llm_tokens,
)

logger = logging.getLogger(__name__)


class OpenAIModelGateway(ModelGateway):
    def __init__(
        self,
        client: Optional[AsyncOpenAI],
        model: str,
        temperature: float,
        max_tokens: int,
        breaker: Optional[AsyncCircuitBreaker] = None,
    ):
        """
        Args:
            client: AsyncOpenAI client, or None when no API key is configured
            model: Model name (e.g., "gpt-4o")
            temperature: Sampling temperature
            max_tokens: Max tokens to generate
            breaker: Shared circuit breaker (one per process)
        """
        self._client = client
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._breaker = breaker or AsyncCircuitBreaker()

    @classmethod
    def from_config(
        cls, breaker: Optional[AsyncCircuitBreaker] = None
    ) -> "OpenAIModelGateway":
        client = None
        if Config.OPENAI_KEY:
            client = AsyncOpenAI(
                api_key=Config.OPENAI_KEY,
                base_url=Config.LLM_BASE_URL,
                max_retries=0,
                timeout=Timeout(Config.LLM_TIMEOUT, connect=Config.LLM_CONNECT_TIMEOUT),
            )
        else:
            logger.warning("[LLM] OPENAI_API_KEY not set; every reply will fall back")
        return cls(
            client=client,
            model=Config.OPENAI_MODEL,
            temperature=Config.OPENAI_TEMPERATURE,
            max_tokens=Config.CHAT_MAX_TOKENS,
            breaker=breaker,
        )

    @traceable(run_type="llm", name="model_gateway_complete")
    async def complete(self, history: list[ChatTurn]) -> str:
        if self._client is None:
            raise ProviderUnavailableError("OpenAI API key not configured")

        try:
            await self._breaker.check()
        except CircuitOpenError:
            increment_error(MetricsErrorType.CIRCUIT_OPEN)
            raise

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=history,
                temperature=self._temperature,
                max_completion_tokens=self._max_tokens,
            )
        except OpenAIError as e:
            await self._breaker.record_failure(e)
            increment_error(MetricsErrorType.LLM_FAILED)
            logger.warning(f"[LLM] {type(e).__name__} calling {self._model}: {e}")
            raise ProviderUnavailableError(f"Model call failed: {type(e).__name__}") from e

        content = self._extract_content(response)
        if content is None:
            error = ProviderUnavailableError("Model returned an empty or malformed response")
            await self._breaker.record_failure(error)
            increment_error(MetricsErrorType.LLM_FAILED)
            raise error

        await self._breaker.record_success()
        usage = getattr(response, "usage", None)
        if usage:
            observe_llm_tokens("input", self._model, usage.prompt_tokens)
            observe_llm_tokens("output", self._model, usage.completion_tokens)
        return content

    @staticmethod
    def _extract_content(response) -> Optional[str]:
        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError):
            return None
        if not isinstance(content, str) or not content.strip():
            return None
        return content
