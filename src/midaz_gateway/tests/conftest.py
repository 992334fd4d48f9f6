"""Shared fixtures: explicit settings, a fake backend behind httpx.MockTransport, instant sleeps."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest

from midaz_gateway.auth import TokenCipher
from midaz_gateway.foundation.config import (
    AuthSettings,
    BackendSettings,
    CacheSettings,
    GatewaySettings,
    LoggingSettings,
    RetrySettings,
    clear_settings_cache,
)
from midaz_gateway.gateway import ResourceGateway
from midaz_gateway.io.cache import TokenCache
from midaz_gateway.runtime.observability import NoOpRenderer, configure_logging

ONBOARDING = "http://onboarding.test"
TRANSACTION = "http://transaction.test"
TEST_KEY = bytes(range(32))

Responder = httpx.Response | Exception | Callable[[httpx.Request], httpx.Response]


class FakeBackend:
    """MockTransport handler serving the token endpoint and queued API responses."""

    def __init__(self, *, token: str = "tok-1") -> None:
        self.token = token
        self.token_status = 200
        self.token_body: dict[str, Any] | None = None
        self.token_requests: list[httpx.Request] = []
        self.requests: list[httpx.Request] = []
        self._queue: list[Responder] = []

    def queue(self, *items: Responder) -> None:
        self._queue.extend(items)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/oauth/token":
            self.token_requests.append(request)
            body = self.token_body if self.token_body is not None else {"access_token": self.token}
            return httpx.Response(self.token_status, json=body)

        self.requests.append(request)
        if not self._queue:
            return httpx.Response(200, json={"items": []})
        item = self._queue.pop(0)
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(request)
        return item


class SleepRecorder:
    """Awaitable stand-in for asyncio.sleep that returns at once."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class ManualClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_settings(
    *,
    client_id: str | None = "svc",
    client_secret: str | None = "s3cret",
    api_key: str | None = None,
    max_retries: int = 3,
    token_ttl: float = 300.0,
) -> GatewaySettings:
    """Settings built without reading the environment."""
    return GatewaySettings.model_validate({
        "backend": BackendSettings.model_validate({"onboarding_url": ONBOARDING, "transaction_url": TRANSACTION}),
        "auth": AuthSettings.model_validate({"client_id": client_id, "client_secret": client_secret, "api_key": api_key}),
        "cache": CacheSettings.model_validate({"token_ttl": token_ttl}),
        "retry": RetrySettings.model_validate({"max_retries": max_retries, "jitter_max": 0.0}),
        "logging": LoggingSettings.model_validate({"format": "none"}),
    })


@pytest.fixture(autouse=True)
def quiet_logs() -> Iterator[None]:
    configure_logging(renderer=NoOpRenderer())
    yield


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep host MIDAZ_* variables out of settings tests."""
    import os

    for name in list(os.environ):
        if name.startswith("MIDAZ_") or name == "CACHE_ENCRYPTION_KEY":
            monkeypatch.delenv(name)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def client(backend: FakeBackend) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(backend))


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def cipher() -> TokenCipher:
    return TokenCipher(TEST_KEY)


@pytest.fixture
def settings() -> GatewaySettings:
    return make_settings()


@pytest.fixture
def gateway(
    settings: GatewaySettings, client: httpx.AsyncClient, cipher: TokenCipher,
    sleeper: SleepRecorder, clock: ManualClock,
) -> ResourceGateway:
    return ResourceGateway(
        settings, client=client, cipher=cipher, cache=TokenCache(ttl=300, clock=clock), sleep=sleeper, clock=clock,
    )
