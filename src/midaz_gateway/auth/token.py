"""Bearer token acquisition for backend calls.

Order of resolution:
1. live entry in the token cache (decrypted on read; corrupt entries are evicted)
2. static API key, when no client id/secret pair is configured
3. OAuth client-credentials exchange, result encrypted into the cache

Failures come back as Err(ErrorTrace) with code AUTH_ERROR; nothing here is retried.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import orjson

from midaz_gateway.foundation.errors import (
    CacheCorruptionError,
    Err,
    ErrorCode,
    ErrorTrace,
    Ok,
    Result,
    trace,
)
from midaz_gateway.io.cache import TOKEN_KEY, TokenCache
from midaz_gateway.runtime.observability import get_logger

from .cipher import EncryptedPayload, TokenCipher

if TYPE_CHECKING:
    from midaz_gateway.foundation.config import AuthSettings

NOT_CONFIGURED = "No authentication configured. Set MIDAZ_CLIENT_ID/MIDAZ_CLIENT_SECRET or MIDAZ_API_KEY"

log = get_logger("token_manager")


def _auth_err(message: str, *, details: str | None = None, recoverable: bool = True) -> Result[str, ErrorTrace]:
    return Err(trace(message, code=ErrorCode.AUTH_ERROR, recoverable=recoverable, details=details)
               .with_operation("auth:get_token"))


class TokenManager:
    """Resolves the bearer token for the next backend call.

    Args:
        auth: Credentials (client id/secret pair, or static API key)
        token_url: Client-credentials endpoint, e.g. http://host/oauth/token
        client: HTTP client used for the exchange
        cache: Token cache shared across requests
        cipher: Cipher protecting cached tokens

    Example:
        >>> manager = TokenManager(settings.auth, settings.backend.token_url, client, cache, cipher)
        >>> (await manager.get_token()).unwrap()
        'eyJhbGciOi...'
    """

    __slots__ = ("_auth", "_token_url", "_client", "_cache", "_cipher")

    def __init__(
        self,
        auth: AuthSettings,
        token_url: str,
        client: httpx.AsyncClient,
        cache: TokenCache,
        cipher: TokenCipher,
    ) -> None:
        self._auth = auth
        self._token_url = token_url
        self._client = client
        self._cache = cache
        self._cipher = cipher

    @property
    def cache(self) -> TokenCache:
        return self._cache

    def _cached(self) -> str | None:
        entry = self._cache.get(TOKEN_KEY)
        if entry is None:
            return None
        try:
            token = self._cipher.decrypt(EncryptedPayload(entry.ciphertext, entry.iv, entry.auth_tag))
        except CacheCorruptionError as e:
            log.warning("evicting unreadable cached token", reason=e.error.message)
            self._cache.delete(TOKEN_KEY)
            return None
        log.debug("token cache hit")
        return token

    async def get_token(self) -> Result[str, ErrorTrace]:
        if (token := self._cached()) is not None:
            return Ok(token)

        if not self._auth.has_client_credentials:
            if self._auth.api_key is not None and self._auth.api_key.get_secret_value():
                return Ok(self._auth.api_key.get_secret_value())
            return _auth_err(NOT_CONFIGURED, recoverable=False)

        return await self._exchange()

    async def _exchange(self) -> Result[str, ErrorTrace]:
        secret = self._auth.client_secret
        form = {
            "grant_type": "client_credentials",
            "client_id": self._auth.client_id or "",
            "client_secret": secret.get_secret_value() if secret is not None else "",
        }
        try:
            response = await self._client.post(self._token_url, data=form)
        except httpx.HTTPError as e:
            log.error("token request failed", error=type(e).__name__, url=self._token_url)
            return _auth_err(f"Authentication failed: {e}")

        if not response.is_success:
            log.error("token request rejected", status=response.status_code)
            return _auth_err(f"Authentication failed: {response.status_code}", details=response.text or None)

        try:
            body = orjson.loads(response.content)
        except orjson.JSONDecodeError:
            return _auth_err("Authentication failed: token response is not JSON")
        token = body.get("access_token") if isinstance(body, dict) else None
        if not token or not isinstance(token, str):
            return _auth_err("Authentication failed: token response has no access_token")

        self._cache.set(TOKEN_KEY, self._cipher.encrypt(token))
        log.info("token acquired", ttl=self._cache.ttl)
        return Ok(token)

    def invalidate(self) -> bool:
        """Drop the cached token so the next call re-authenticates."""
        return self._cache.delete(TOKEN_KEY)
