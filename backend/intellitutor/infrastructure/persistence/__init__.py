"""
Persistence Layer - ConversationStore implementations.

- InMemoryConversationStore: dict-backed, development and tests
- PrismaConversationStore: PostgreSQL via Prisma
  (imported lazily by the DI container: the Prisma client only exists
  after `prisma generate`)
"""

from intellitutor.infrastructure.persistence.in_memory_conversation_store import (
    InMemoryConversationStore,
)

__all__ = [
    "InMemoryConversationStore",
]
