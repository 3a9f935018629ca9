"""Data Transfer Objects for API request/response bodies."""

from intellitutor.application.dto.chat import MessageDTO, SendMessageResponseDTO
from intellitutor.application.dto.conversation import ConversationDTO

__all__ = [
    "MessageDTO",
    "SendMessageResponseDTO",
    "ConversationDTO",
]
