"""
PORTS - Interfaces that infrastructure implements

A "port" is an abstract interface that defines WHAT the domain needs,
without specifying HOW it's done.

- repositories/conversation_store.py → conversation + message persistence
- model_gateway.py                   → language-model completion call
- conversation_lock.py               → per-conversation single-writer primitive
"""

from intellitutor.domain.ports.model_gateway import ChatTurn, ModelGateway
from intellitutor.domain.ports.conversation_lock import ConversationLock

__all__ = [
    "ChatTurn",
    "ModelGateway",
    "ConversationLock",
]
