"""
API Routers - FastAPI endpoint definitions.
"""

from intellitutor.presentation.api.conversations import router as conversations_router
from intellitutor.presentation.api.chat import router as chat_router
from intellitutor.presentation.api.metrics import router as metrics_router

__all__ = [
    "conversations_router",
    "chat_router",
    "metrics_router",
]
