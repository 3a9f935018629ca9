"""
Prometheus Metrics for the tutor chat backend.

DATA FLOW:
    This file                  presentation/api/metrics.py         Observability Stack
    ─────────                  ────────────────────────────         ───────────────────
    Define metrics ──────────► /metrics endpoint ──────────────►   Prometheus ──► Grafana

METRIC TYPES:
    - Gauge: Value goes up/down (current count, e.g., sends in flight)
    - Counter: Value only goes up (total count, e.g., fallback replies)
    - Histogram: Distribution (for percentiles like P95, e.g., latency)
"""

from prometheus_client import (
    Gauge,
    Histogram,
    Counter,
    generate_latest,
    CONTENT_TYPE_LATEST,
)


# =============================================================================
# METRICS DEFINITIONS
# =============================================================================
ACTIVE_SENDS = Gauge(
    "tutor_active_sends", "Number of send-message requests currently in flight"
)

REQUEST_LATENCY = Histogram(
    "http_server_request_duration_seconds",
    "Http request latency in seconds",
    ["method", "route", "http_status_code"],
    buckets=[0.1, 0.5, 1, 2, 5, 10, 30, 60, 120],
)

MODEL_LATENCY = Histogram(
    "tutor_model_latency_seconds",
    "Latency of model provider calls in seconds",
    ["outcome"],
    buckets=[0.5, 1, 2, 5, 10, 20, 40, 60],
)

LLM_TOKENS_TOTAL = Histogram(
    "tutor_llm_tokens_total",
    "Total number of LLM tokens used",
    ["type", "model"],
    buckets=[100, 500, 1000, 2000, 5000, 10000, 20000, 50000],
)

FALLBACK_REPLIES_TOTAL = Counter(
    "tutor_fallback_replies_total",
    "Assistant turns replaced by the fallback message",
    ["reason"],
)

ERRORS_TOTAL = Counter(
    "tutor_errors_total",
    "Total number of errors by type",
    ["error_type"],
)


# =============================================================================
# LABEL CONSTANTS (avoid hardcoding strings throughout codebase)
# =============================================================================
class MetricsErrorType:
    """Error type labels for tutor_errors_total metric."""

    LLM_FAILED = "llm_failed"
    TIMEOUT = "timeout"
    CIRCUIT_OPEN = "circuit_open"
    STORAGE_FAILED = "storage_failed"


# =============================================================================
# RECORDING FUNCTIONS
# =============================================================================
def increment_active_sends():
    """Call when a send STARTS. Integration point: SendMessageHandler.execute()"""
    ACTIVE_SENDS.inc()


def decrement_active_sends():
    """Call when a send ENDS (in finally block)."""
    ACTIVE_SENDS.dec()


def observe_request_latency(method: str, route: str, status_code: int, duration: float):
    """Integration point: fastapi_app.py MetricsMiddleware"""
    REQUEST_LATENCY.labels(
        method=method, route=route, http_status_code=str(status_code)
    ).observe(duration)


def observe_model_latency(outcome: str, duration: float):
    MODEL_LATENCY.labels(outcome=outcome).observe(duration)


def observe_llm_tokens(type: str, model: str, token_count: int):
    """Integration point: infrastructure/llm/openai_gateway.py after a completion"""
    LLM_TOKENS_TOTAL.labels(type=type, model=model).observe(token_count)


def increment_fallback_reply(reason: str):
    FALLBACK_REPLIES_TOTAL.labels(reason=reason).inc()


def increment_error(error_type: str):
    """
    Call to record an error occurrence.

    Integration points:
        - infrastructure/llm/openai_gateway.py: llm_failed, circuit_open
        - application/commands/chat/send_message.py: timeout
        - fastapi_app.py: storage_failed
    """
    ERRORS_TOTAL.labels(error_type=error_type).inc()


# =============================================================================
# HELPER FOR /metrics ENDPOINT
# =============================================================================
def get_metrics_content():
    """
    Generate Prometheus metrics output.

    Returns:
        Tuple of (content_bytes, content_type_string)
    """
    return generate_latest(), CONTENT_TYPE_LATEST


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
