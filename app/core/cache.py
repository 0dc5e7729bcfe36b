"""
cache.py

Process-wide ephemeral key/value store with optional expiry.

Used for one-time QR login tokens. Expiry is lazy: an expired entry stays in
memory until the next `get` or `delete` touches it. There is no capacity
bound and no background sweep.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable


@dataclass
class CacheEntry:
    value: Any
    expires_at: float | None = None


class TokenCache:
    def __init__(self, clock: Callable[[], float] = time.time):
        self._entries: dict[str, CacheEntry] = {}
        self._clock = clock

    def _expired(self, entry: CacheEntry) -> bool:
        return entry.expires_at is not None and entry.expires_at < self._clock()

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._expired(entry):
            self._entries.pop(key, None)
            return None

        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> bool:
        expires_at = self._clock() + ttl_seconds if ttl_seconds else None
        self._entries[key] = CacheEntry(value=value, expires_at=expires_at)
        return True

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def __len__(self) -> int:
        return len(self._entries)


# shared by every request in this process
token_cache = TokenCache()
