"""Tests for the token cache."""

from __future__ import annotations

import pytest

from midaz_gateway.auth import EncryptedPayload
from midaz_gateway.io.cache import TOKEN_KEY, TokenCache

from conftest import ManualClock

PAYLOAD = EncryptedPayload(ciphertext="aa", iv="bb", auth_tag="cc")


def test_set_and_get() -> None:
    cache = TokenCache()
    entry = cache.set(TOKEN_KEY, PAYLOAD)
    assert cache.get(TOKEN_KEY) == entry
    assert (entry.ciphertext, entry.iv, entry.auth_tag) == ("aa", "bb", "cc")


def test_entry_expires_at_ttl() -> None:
    clock = ManualClock()
    cache = TokenCache(ttl=300, clock=clock)
    cache.set(TOKEN_KEY, PAYLOAD)

    clock.advance(299)
    assert cache.get(TOKEN_KEY) is not None

    clock.advance(1)
    assert cache.get(TOKEN_KEY) is None
    assert cache.size == 0


def test_delete_and_clear() -> None:
    cache = TokenCache()
    cache.set(TOKEN_KEY, PAYLOAD)
    cache.set("other", PAYLOAD)

    assert cache.delete(TOKEN_KEY) is True
    assert cache.delete(TOKEN_KEY) is False
    assert cache.size == 1

    cache.clear()
    assert cache.size == 0


def test_closed_cache_refuses_writes() -> None:
    cache = TokenCache()
    cache.set(TOKEN_KEY, PAYLOAD)
    cache.close()
    assert cache.get(TOKEN_KEY) is None
    with pytest.raises(RuntimeError):
        cache.set(TOKEN_KEY, PAYLOAD)


def test_stats_count_expired() -> None:
    clock = ManualClock()
    cache = TokenCache(ttl=10, clock=clock)
    cache.set("a", PAYLOAD)
    clock.advance(11)
    cache.set("b", PAYLOAD)
    assert cache.stats() == {"total_entries": 2, "expired_entries": 1, "ttl": 10}
