"""Binary layout of a Fernet token.

    version ‖ timestamp ‖ IV ‖ ciphertext ‖ HMAC

All offsets are fixed except the ciphertext, which takes whatever lies
between the IV and the trailing 32-byte HMAC.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from .exceptions import InvalidTokenFormatError

VERSION = 0x80

BLOCK_SIZE = 16

VERSION_OFFSET = 0
VERSION_SIZE = 1
TIMESTAMP_OFFSET = VERSION_OFFSET + VERSION_SIZE  # 1
TIMESTAMP_SIZE = 8
TIMESTAMP_MIN = -(2**63)
TIMESTAMP_MAX = 2**63 - 1
IV_OFFSET = TIMESTAMP_OFFSET + TIMESTAMP_SIZE  # 9
IV_SIZE = 16
CIPHERTEXT_OFFSET = IV_OFFSET + IV_SIZE  # 25
HMAC_SIZE = 32

FIXED_FIELDS_SIZE = VERSION_SIZE + TIMESTAMP_SIZE + IV_SIZE + HMAC_SIZE  # 57
MIN_TOKEN_LENGTH = FIXED_FIELDS_SIZE + BLOCK_SIZE  # 73

# Signed, matching the platform integer the format was first written with.
_TIMESTAMP_STRUCT = struct.Struct(">q")


@dataclass(frozen=True, slots=True)
class TokenParts:
    """The five fields of a binary token."""

    version: int
    timestamp: int
    iv: bytes
    ciphertext: bytes
    hmac: bytes

    @property
    def signed_bytes(self) -> bytes:
        """Return ``version ‖ timestamp ‖ IV ‖ ciphertext``, the HMAC input."""
        return signed_prefix(self.version, self.timestamp, self.iv, self.ciphertext)


def pack_timestamp(timestamp: int) -> bytes:
    """Encode Unix seconds as 8 big-endian bytes."""
    return _TIMESTAMP_STRUCT.pack(timestamp)


def unpack_timestamp(data: bytes) -> int:
    """Decode 8 big-endian bytes as Unix seconds."""
    return _TIMESTAMP_STRUCT.unpack(data)[0]


def signed_prefix(version: int, timestamp: int, iv: bytes, ciphertext: bytes) -> bytes:
    """Join the four authenticated fields."""
    return bytes((version,)) + pack_timestamp(timestamp) + iv + ciphertext


def is_valid_length(length: int) -> bool:
    """Check the size invariant: room for one cipher block, block aligned."""
    return length >= MIN_TOKEN_LENGTH and (length - FIXED_FIELDS_SIZE) % BLOCK_SIZE == 0


def split_token(token: bytes) -> TokenParts:
    """Slice a binary token into its fields.

    The version byte is returned as found; checking it is up to the caller.

    Raises:
        InvalidTokenFormatError: If the length breaks the size invariant

    """
    length = len(token)
    if not is_valid_length(length):
        msg = (
            f"Token must be at least {MIN_TOKEN_LENGTH} bytes with a ciphertext "
            f"aligned to {BLOCK_SIZE} bytes, got {length} bytes"
        )
        raise InvalidTokenFormatError(msg, {"length": length})

    hmac_offset = length - HMAC_SIZE
    return TokenParts(
        version=token[VERSION_OFFSET],
        timestamp=unpack_timestamp(token[TIMESTAMP_OFFSET:IV_OFFSET]),
        iv=token[IV_OFFSET:CIPHERTEXT_OFFSET],
        ciphertext=token[CIPHERTEXT_OFFSET:hmac_offset],
        hmac=token[hmac_offset:],
    )


def assemble_token(parts: TokenParts) -> bytes:
    """Join the five fields into a binary token."""
    return parts.signed_bytes + parts.hmac
