"""LLM Layer - ModelGateway implementation and provider circuit breaker."""

from intellitutor.infrastructure.llm.circuit_breaker import (
    AsyncCircuitBreaker,
    CircuitOpenError,
)
from intellitutor.infrastructure.llm.openai_gateway import OpenAIModelGateway

__all__ = [
    "AsyncCircuitBreaker",
    "CircuitOpenError",
    "OpenAIModelGateway",
]
