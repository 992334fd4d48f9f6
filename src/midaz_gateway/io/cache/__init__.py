"""Token cache: TTL-bound, in-process storage of encrypted bearer tokens."""

from .cache import DEFAULT_TTL, TOKEN_KEY, CachedToken, TokenCache

__all__ = ["DEFAULT_TTL", "TOKEN_KEY", "CachedToken", "TokenCache"]
