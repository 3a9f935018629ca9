"""
UserId Value Object - opaque identity issued by the auth service.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserId:
    value: str  # token "sub" claim

    def __post_init__(self):
        if not self.value or not self.value.strip():
            raise ValueError("UserId cannot be empty")

    def __str__(self) -> str:
        return self.value
