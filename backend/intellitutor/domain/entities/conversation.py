"""
Conversation Entity - A titled chat thread between one user and the tutor.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from intellitutor.domain.value_objects.conversation_id import ConversationId
from intellitutor.domain.value_objects.user_id import UserId

TITLE_ELLIPSIS = "..."


@dataclass
class Conversation:
    id: ConversationId
    user_id: UserId
    title: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(
        cls,
        user_id: UserId,
        title: str,
        now: Optional[datetime] = None,
    ) -> Conversation:
        """Factory method for a fresh, empty conversation."""
        now = now or datetime.now(timezone.utc)
        return cls(
            id=ConversationId.generate(),
            user_id=user_id,
            title=title,
            created_at=now,
            updated_at=now,
        )

    def is_owned_by(self, user_id: UserId) -> bool:
        return self.user_id.value == user_id.value

    def rename(self, new_title: str, now: Optional[datetime] = None) -> None:
        self.title = new_title
        self.updated_at = now or datetime.now(timezone.utc)

    def touch(self, now: datetime) -> None:
        self.updated_at = now

    @staticmethod
    def title_from_message(content: str, max_length: int) -> str:
        """Title derived from the first user message: truncated with an ellipsis."""
        if len(content) > max_length:
            return content[:max_length] + TITLE_ELLIPSIS
        return content
