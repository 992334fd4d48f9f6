"""Authentication: token acquisition and at-rest encryption of cached tokens."""

from .cipher import ASSOCIATED_DATA, EncryptedPayload, TokenCipher, resolve_key
from .token import NOT_CONFIGURED, TokenManager

__all__ = ["ASSOCIATED_DATA", "EncryptedPayload", "TokenCipher", "resolve_key", "NOT_CONFIGURED", "TokenManager"]
