"""
Infrastructure Layer - Technical implementations of domain ports.

This layer contains:
- persistence/: ConversationStore implementations (Prisma, in-memory)
- llm/: ModelGateway implementation (OpenAI-compatible API) and circuit breaker
- locks/: ConversationLock implementations (in-process, Redis)
- cache/: async Redis client factory
"""
