"""Observability package for the tutor chat backend."""

from intellitutor.observability.metrics import (
    increment_active_sends,
    decrement_active_sends,
    observe_request_latency,
    observe_model_latency,
    observe_llm_tokens,
    increment_fallback_reply,
    increment_error,
    get_metrics_content,
    MetricsErrorType,
)

__all__ = [
    "increment_active_sends",
    "decrement_active_sends",
    "observe_request_latency",
    "observe_model_latency",
    "observe_llm_tokens",
    "increment_fallback_reply",
    "increment_error",
    "get_metrics_content",
    "MetricsErrorType",
]
