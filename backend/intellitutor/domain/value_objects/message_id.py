"""
MessageId Value Object - time-ordered UUID (version 7 layout).

Layout (RFC 9562): 48-bit unix milliseconds, version nibble, 12-bit counter,
variant bits, 62 random bits. The counter restarts each millisecond, so ids
generated by one process sort (as strings) in creation order.
"""

import secrets
import threading
import time
from dataclasses import dataclass
from uuid import UUID

_COUNTER_MAX = 0xFFF
_state_lock = threading.Lock()
_last_ms = 0
_counter = 0


def _next_uuid7() -> UUID:
    global _last_ms, _counter
    with _state_lock:
        now_ms = time.time_ns() // 1_000_000
        if now_ms > _last_ms:
            _last_ms, _counter = now_ms, 0
        else:
            # same millisecond or clock stepped back: stay monotonic
            _counter += 1
            if _counter > _COUNTER_MAX:
                _last_ms, _counter = _last_ms + 1, 0
        ms, counter = _last_ms, _counter

    value = (ms & 0xFFFF_FFFF_FFFF) << 80
    value |= 0x7 << 76
    value |= counter << 64
    value |= 0b10 << 62
    value |= secrets.randbits(62)
    return UUID(int=value)


@dataclass(frozen=True)
class MessageId:
    value: str  # message_id, presented as UUID string

    def __post_init__(self):
        if not self.value:
            raise ValueError("Message ID cannot be empty")
        UUID(self.value)  # raises ValueError if invalid UUID

    @classmethod
    def generate(cls) -> "MessageId":
        return cls(str(_next_uuid7()))

    def __str__(self) -> str:
        return self.value
