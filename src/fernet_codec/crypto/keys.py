"""Fernet key parsing.

A key is 32 raw bytes: the first 16 sign tokens (HMAC-SHA256) and the last
16 encrypt them (AES-128-CBC). The text form is base64url.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .base64url import Base64DecodeError, decode_b64url, encode_b64url
from .exceptions import InvalidKeyFormatError, InvalidKeyLengthError

KEY_LENGTH = 32
SIGNING_KEY_LENGTH = 16
ENCRYPTION_KEY_LENGTH = 16


@dataclass(frozen=True, slots=True)
class FernetKey:
    """Signing and encryption halves of a Fernet key."""

    signing_key: bytes = field(repr=False)
    encryption_key: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if len(self.signing_key) != SIGNING_KEY_LENGTH or len(self.encryption_key) != ENCRYPTION_KEY_LENGTH:
            msg = f"Signing and encryption keys must be {SIGNING_KEY_LENGTH} bytes each"
            raise InvalidKeyLengthError(
                msg,
                {"signing_key_length": len(self.signing_key), "encryption_key_length": len(self.encryption_key)},
            )

    @classmethod
    def from_bytes(cls, raw: bytes) -> FernetKey:
        """Split 32 raw bytes into a key.

        Raises:
            InvalidKeyLengthError: If ``raw`` is not exactly 32 bytes

        """
        raw = bytes(raw)
        if len(raw) != KEY_LENGTH:
            msg = f"Fernet key must be {KEY_LENGTH} bytes, got {len(raw)}"
            raise InvalidKeyLengthError(msg, {"length": len(raw)})
        return cls(signing_key=raw[:SIGNING_KEY_LENGTH], encryption_key=raw[SIGNING_KEY_LENGTH:])

    @classmethod
    def from_encoded(cls, encoded: str | bytes) -> FernetKey:
        """Decode a base64url key (padded or not) and split it.

        Raises:
            InvalidKeyFormatError: If ``encoded`` is not valid base64url
            InvalidKeyLengthError: If it does not decode to 32 bytes

        """
        try:
            raw = decode_b64url(encoded)
        except Base64DecodeError as e:
            msg = "Fernet key is not valid base64url"
            raise InvalidKeyFormatError(msg, {"original_error": str(e)}) from e
        return cls.from_bytes(raw)

    @classmethod
    def generate(cls) -> FernetKey:
        """Create a key from 32 bytes of OS randomness."""
        return cls.from_bytes(os.urandom(KEY_LENGTH))

    @property
    def raw(self) -> bytes:
        """Return the 32-byte key material."""
        return self.signing_key + self.encryption_key

    @property
    def encoded(self) -> str:
        """Return the unpadded base64url text form."""
        return encode_b64url(self.raw)


def parse_key(value: FernetKey | bytes | str) -> FernetKey:
    """Build a key from any accepted representation.

    ``str`` is taken as the base64url form, ``bytes`` as raw key material.
    """
    if isinstance(value, FernetKey):
        return value
    if isinstance(value, str):
        return FernetKey.from_encoded(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return FernetKey.from_bytes(bytes(value))
    msg = f"Fernet key must be str, bytes or FernetKey, not {type(value).__name__}"
    raise TypeError(msg)
