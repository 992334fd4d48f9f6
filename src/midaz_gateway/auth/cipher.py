"""AES-256-GCM encryption of cached bearer tokens.

Each encryption draws a fresh 96-bit nonce; the 128-bit tag is stored apart
from the ciphertext and checked for length before decryption. A fixed
associated-data label binds ciphertexts to this cache.
"""

from __future__ import annotations

import binascii
import hashlib
import os
import string
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from midaz_gateway.foundation.errors import CacheCorruptionError
from midaz_gateway.runtime.observability import get_logger

KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16
ASSOCIATED_DATA = b"midaz-token-cache"

log = get_logger("token_cipher")


@dataclass(frozen=True, slots=True)
class EncryptedPayload:
    """Hex-encoded ciphertext, nonce and authentication tag."""

    ciphertext: str
    iv: str
    auth_tag: str


def resolve_key(key: str | bytes | None) -> bytes:
    """Turn configured key material into a 32-byte AES key.

    - None / empty: random key for this process (cached tokens die with it)
    - 64 hex characters: decoded as the raw key
    - exactly 32 bytes: used as is
    - anything else: SHA-256 digest of the material
    """
    if not key:
        log.warning("no cache encryption key configured, using a random per-process key; "
                    "cached tokens will not survive a restart")
        return os.urandom(KEY_SIZE)
    if isinstance(key, str):
        if len(key) == KEY_SIZE * 2 and all(c in string.hexdigits for c in key):
            return bytes.fromhex(key)
        key = key.encode()
    return key if len(key) == KEY_SIZE else hashlib.sha256(key).digest()


class TokenCipher:
    """Encrypts and decrypts token strings with a fixed key.

    Example:
        >>> cipher = TokenCipher(resolve_key("correct horse battery staple"))
        >>> cipher.decrypt(cipher.encrypt("tok_123"))
        'tok_123'
    """

    __slots__ = ("_aead",)

    def __init__(self, key: bytes) -> None:
        if len(key) != KEY_SIZE:
            raise ValueError(f"AES-256 key must be {KEY_SIZE} bytes, got {len(key)}")
        self._aead = AESGCM(key)

    @classmethod
    def from_material(cls, material: str | bytes | None) -> TokenCipher:
        return cls(resolve_key(material))

    def encrypt(self, plaintext: str) -> EncryptedPayload:
        nonce = os.urandom(NONCE_SIZE)
        sealed = self._aead.encrypt(nonce, plaintext.encode(), ASSOCIATED_DATA)
        body, tag = sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]
        return EncryptedPayload(ciphertext=body.hex(), iv=nonce.hex(), auth_tag=tag.hex())

    def decrypt(self, payload: EncryptedPayload) -> str:
        """Raises CacheCorruptionError on malformed hex, bad tag length or failed authentication."""
        try:
            body, nonce, tag = (bytes.fromhex(payload.ciphertext), bytes.fromhex(payload.iv),
                                bytes.fromhex(payload.auth_tag))
        except (ValueError, TypeError, binascii.Error) as e:
            raise CacheCorruptionError(f"Malformed cached token envelope: {e}") from e
        if len(tag) != TAG_SIZE:
            raise CacheCorruptionError(f"Invalid authentication tag length: {len(tag)} bytes")
        if len(nonce) != NONCE_SIZE:
            raise CacheCorruptionError(f"Invalid nonce length: {len(nonce)} bytes")
        try:
            plaintext = self._aead.decrypt(nonce, body + tag, ASSOCIATED_DATA)
        except InvalidTag as e:
            raise CacheCorruptionError("Cached token failed authentication") from e
        try:
            return plaintext.decode()
        except UnicodeDecodeError as e:
            raise CacheCorruptionError("Cached token is not valid UTF-8") from e
