"""Application configuration settings"""

import os
from dotenv import load_dotenv

load_dotenv()


DEFAULT_SYSTEM_PROMPT = (
    "You are an educational AI assistant. Provide clear, helpful explanations "
    "suitable for students and teachers. Focus on learning and understanding."
)

DEFAULT_FALLBACK_MESSAGE = (
    "I apologize, but I'm having trouble connecting to the AI service right now. "
    "Please try again later."
)


class Config:
    # Server settings
    APP_ENV = os.getenv("APP_ENV", "development")
    DEBUG = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes", "on"}
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "5001"))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_PATH = os.getenv("LOG_PATH", "")
    LOG_FORMAT = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s",
    )

    # Chat settings
    CHAT_MAX_TOKENS = int(os.getenv("CHAT_MAX_TOKENS", "1000"))
    MESSAGE_MAX_LENGTH = int(os.getenv("MESSAGE_MAX_LENGTH", "2000"))
    TITLE_DERIVE_LENGTH = int(os.getenv("TITLE_DERIVE_LENGTH", "50"))
    TITLE_MAX_LENGTH = int(os.getenv("TITLE_MAX_LENGTH", "100"))
    DEFAULT_CONVERSATION_TITLE = os.getenv("DEFAULT_CONVERSATION_TITLE", "New Chat")
    SYSTEM_PROMPT = os.getenv("SYSTEM_PROMPT", DEFAULT_SYSTEM_PROMPT)
    FALLBACK_MESSAGE = os.getenv("FALLBACK_MESSAGE", DEFAULT_FALLBACK_MESSAGE)

    # OpenAI
    LLM_BASE_URL = os.getenv("LLM_BASE_URL", "https://api.openai.com/v1")
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")
    OPENAI_TEMPERATURE = float(os.getenv("OPENAI_TEMPERATURE", "0.7"))
    OPENAI_KEY = os.getenv("OPENAI_API_KEY", "")

    # LLM call policy
    LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "40"))  # seconds
    LLM_CONNECT_TIMEOUT = float(os.getenv("LLM_CONNECT_TIMEOUT", "10"))
    LLM_RETRY_ATTEMPTS = int(os.getenv("LLM_RETRY_ATTEMPTS", "0"))
    LLM_RETRY_BACKOFF = float(os.getenv("LLM_RETRY_BACKOFF", "1.0"))
    LLM_CB_FAILURE_THRESHOLD = int(os.getenv("LLM_CB_FAILURE_THRESHOLD", "5"))
    LLM_CB_RECOVERY_TIMEOUT = int(os.getenv("LLM_CB_RECOVERY_TIMEOUT", "30"))

    # Auth
    SERVICE_AUTH_SECRET = os.getenv("SERVICE_AUTH_SECRET", "")
    SERVICE_AUTH_ISSUER = os.getenv("SERVICE_AUTH_ISSUER", "intellitutor-auth")
    SERVICE_AUTH_AUDIENCE = os.getenv("SERVICE_AUTH_AUDIENCE", "intellitutor-api")

    # Storage: "prisma" (PostgreSQL) or "memory"
    STORE_BACKEND = os.getenv("STORE_BACKEND", "prisma").lower()
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")

    # Per-conversation locking: "memory" (single process) or "redis"
    LOCK_BACKEND = os.getenv("LOCK_BACKEND", "memory").lower()
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    LOCK_TIMEOUT: float = float(os.getenv("LOCK_TIMEOUT", "120"))
    LOCK_BLOCKING_TIMEOUT: float = float(os.getenv("LOCK_BLOCKING_TIMEOUT", "60"))
