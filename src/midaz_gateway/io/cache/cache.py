"""In-process token cache with TTL expiry.

Holds encrypted bearer tokens only; plaintext never enters the cache. Entries
live in process memory and are gone on restart.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from midaz_gateway.auth.cipher import EncryptedPayload

DEFAULT_TTL: float = 300.0  # 5 minutes
TOKEN_KEY = "auth_token"


@dataclass(frozen=True, slots=True)
class CachedToken:
    """Encrypted token envelope plus the clock reading at insertion."""

    ciphertext: str
    iv: str
    auth_tag: str
    inserted_at: float


class TokenCache:
    """Thread-safe in-memory store of encrypted tokens.

    An entry is live while `clock() - inserted_at < ttl`; expired entries are
    dropped on read.

    Args:
        ttl: Lifetime of an entry in seconds
        clock: Monotonic time source (injectable for tests)

    Example:
        >>> cache = TokenCache(ttl=60)
        >>> cache.set(TOKEN_KEY, payload)
        >>> cache.get(TOKEN_KEY).iv == payload.iv
        True
    """

    __slots__ = ("_entries", "_ttl", "_clock", "_lock", "_closed")

    def __init__(self, ttl: float = DEFAULT_TTL, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: dict[str, CachedToken] = {}
        self._ttl = ttl
        self._clock = clock
        self._lock = threading.RLock()
        self._closed = False

    @property
    def ttl(self) -> float:
        return self._ttl

    def _expired(self, entry: CachedToken) -> bool:
        return self._clock() - entry.inserted_at >= self._ttl

    def get(self, key: str = TOKEN_KEY) -> CachedToken | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry):
                del self._entries[key]
                return None
            return entry

    def set(self, key: str, payload: EncryptedPayload) -> CachedToken:
        entry = CachedToken(
            ciphertext=payload.ciphertext, iv=payload.iv, auth_tag=payload.auth_tag, inserted_at=self._clock(),
        )
        with self._lock:
            if self._closed:
                raise RuntimeError("TokenCache is closed")
            self._entries[key] = entry
        return entry

    def delete(self, key: str = TOKEN_KEY) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def close(self) -> None:
        """Drop all entries and refuse further writes."""
        with self._lock:
            self._entries.clear()
            self._closed = True

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> dict[str, object]:
        with self._lock:
            expired = sum(1 for e in self._entries.values() if self._expired(e))
            return {"total_entries": len(self._entries), "expired_entries": expired, "ttl": self._ttl}

