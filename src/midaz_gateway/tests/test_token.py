"""Tests for token acquisition, caching and eviction."""

from __future__ import annotations

import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from midaz_gateway.auth import NOT_CONFIGURED, EncryptedPayload, TokenCipher, TokenManager
from midaz_gateway.foundation.config import GatewaySettings
from midaz_gateway.foundation.errors import ErrorCode
from midaz_gateway.io.cache import TOKEN_KEY, TokenCache

from conftest import ONBOARDING, FakeBackend, ManualClock, make_settings


def manager(
    settings: GatewaySettings, client: httpx.AsyncClient, cipher: TokenCipher, clock: ManualClock | None = None,
) -> TokenManager:
    cache = TokenCache(ttl=settings.cache.token_ttl, clock=clock or ManualClock())
    return TokenManager(settings.auth, settings.backend.token_url, client, cache, cipher)


@pytest.mark.asyncio
async def test_client_credentials_exchange(backend: FakeBackend, client: httpx.AsyncClient, cipher: TokenCipher) -> None:
    tokens = manager(make_settings(), client, cipher)

    result = await tokens.get_token()

    assert result.unwrap() == "tok-1"
    [request] = backend.token_requests
    assert str(request.url) == f"{ONBOARDING}/oauth/token"
    assert request.method == "POST"
    form = parse_qs(request.content.decode())
    assert form == {"grant_type": ["client_credentials"], "client_id": ["svc"], "client_secret": ["s3cret"]}


@pytest.mark.asyncio
async def test_cached_token_reused(backend: FakeBackend, client: httpx.AsyncClient, cipher: TokenCipher) -> None:
    tokens = manager(make_settings(), client, cipher)
    await tokens.get_token()
    assert (await tokens.get_token()).unwrap() == "tok-1"
    assert len(backend.token_requests) == 1


@pytest.mark.asyncio
async def test_cache_holds_ciphertext_only(client: httpx.AsyncClient, cipher: TokenCipher) -> None:
    tokens = manager(make_settings(), client, cipher)
    await tokens.get_token()
    entry = tokens.cache.get(TOKEN_KEY)
    assert entry is not None
    assert "tok-1" not in (entry.ciphertext, entry.iv, entry.auth_tag)


@pytest.mark.asyncio
async def test_expired_token_reacquired(backend: FakeBackend, client: httpx.AsyncClient, cipher: TokenCipher) -> None:
    clock = ManualClock()
    tokens = manager(make_settings(), client, cipher, clock)
    await tokens.get_token()

    clock.advance(300)
    backend.token = "tok-2"
    assert (await tokens.get_token()).unwrap() == "tok-2"
    assert len(backend.token_requests) == 2


@pytest.mark.asyncio
async def test_corrupted_entry_evicted_and_reauthenticated(
    backend: FakeBackend, client: httpx.AsyncClient, cipher: TokenCipher,
) -> None:
    tokens = manager(make_settings(), client, cipher)
    good = cipher.encrypt("stale")
    tokens.cache.set(TOKEN_KEY, EncryptedPayload(good.ciphertext, good.iv, good.auth_tag[:10]))

    result = await tokens.get_token()

    assert result.unwrap() == "tok-1"
    assert len(backend.token_requests) == 1
    entry = tokens.cache.get(TOKEN_KEY)
    assert entry is not None
    assert cipher.decrypt(EncryptedPayload(entry.ciphertext, entry.iv, entry.auth_tag)) == "tok-1"


@pytest.mark.asyncio
async def test_static_api_key_fallback(backend: FakeBackend, client: httpx.AsyncClient, cipher: TokenCipher) -> None:
    tokens = manager(make_settings(client_id=None, client_secret=None, api_key="key-123"), client, cipher)
    assert (await tokens.get_token()).unwrap() == "key-123"
    assert backend.token_requests == []
    assert tokens.cache.size == 0


@pytest.mark.asyncio
async def test_client_credentials_take_precedence_over_api_key(client: httpx.AsyncClient, cipher: TokenCipher) -> None:
    tokens = manager(make_settings(api_key="key-123"), client, cipher)
    assert (await tokens.get_token()).unwrap() == "tok-1"


@pytest.mark.asyncio
async def test_nothing_configured(client: httpx.AsyncClient, cipher: TokenCipher) -> None:
    tokens = manager(make_settings(client_id=None, client_secret=None), client, cipher)
    result = await tokens.get_token()
    assert result.is_err()
    failure = result.unwrap_err()
    assert failure.message == NOT_CONFIGURED
    assert failure.error_code == ErrorCode.AUTH_ERROR
    assert failure.recoverable is False


@pytest.mark.asyncio
async def test_rejected_exchange(backend: FakeBackend, client: httpx.AsyncClient, cipher: TokenCipher) -> None:
    backend.token_status = 401
    tokens = manager(make_settings(), client, cipher)
    failure = (await tokens.get_token()).unwrap_err()
    assert failure.message == "Authentication failed: 401"
    assert failure.error_code == ErrorCode.AUTH_ERROR
    assert tokens.cache.size == 0


@pytest.mark.asyncio
async def test_response_without_access_token(backend: FakeBackend, client: httpx.AsyncClient, cipher: TokenCipher) -> None:
    backend.token_body = {"token_type": "bearer"}
    tokens = manager(make_settings(), client, cipher)
    failure = (await tokens.get_token()).unwrap_err()
    assert "access_token" in failure.message


@pytest.mark.asyncio
async def test_transport_failure_is_auth_error(cipher: TokenCipher) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(refuse))
    failure = (await manager(make_settings(), client, cipher).get_token()).unwrap_err()
    assert failure.error_code == ErrorCode.AUTH_ERROR
    assert "connection refused" in failure.message


@pytest.mark.asyncio
async def test_concurrent_cold_cache_requests_both_succeed(
    backend: FakeBackend, client: httpx.AsyncClient, cipher: TokenCipher,
) -> None:
    tokens = manager(make_settings(), client, cipher)
    first, second = await asyncio.gather(tokens.get_token(), tokens.get_token())
    assert first.unwrap() == second.unwrap() == "tok-1"
    assert 1 <= len(backend.token_requests) <= 2


@pytest.mark.asyncio
async def test_invalidate_forces_new_exchange(backend: FakeBackend, client: httpx.AsyncClient, cipher: TokenCipher) -> None:
    tokens = manager(make_settings(), client, cipher)
    await tokens.get_token()
    assert tokens.invalidate() is True
    await tokens.get_token()
    assert len(backend.token_requests) == 2
