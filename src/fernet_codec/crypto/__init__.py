"""Fernet token codec.

Symmetric, timestamped, HMAC-authenticated tokens built on AES-128-CBC and
HMAC-SHA256 from the ``cryptography`` package.
"""

from .base64url import Base64DecodeError, decode_b64url, encode_b64url
from .codec import DecodeOutput, Fernet, decode, encode, rebuild_token
from .compare import constant_time_equals
from .exceptions import (
    AuthenticationFailedError,
    AuthError,
    CipherError,
    FernetError,
    InvalidIVError,
    InvalidKeyError,
    InvalidKeyFormatError,
    InvalidKeyLengthError,
    InvalidTimestampError,
    InvalidTokenFormatError,
    TokenDecodingError,
    UnknownVersionError,
)
from .keys import FernetKey, parse_key
from .layout import TokenParts, split_token
from .sources import Clock, FixedClock, FixedRandomSource, RandomSource, SystemClock, SystemRandomSource

__all__ = [
    "AuthError",
    "AuthenticationFailedError",
    "Base64DecodeError",
    "CipherError",
    "Clock",
    "DecodeOutput",
    "Fernet",
    "FernetError",
    "FernetKey",
    "FixedClock",
    "FixedRandomSource",
    "InvalidIVError",
    "InvalidKeyError",
    "InvalidKeyFormatError",
    "InvalidKeyLengthError",
    "InvalidTimestampError",
    "InvalidTokenFormatError",
    "RandomSource",
    "SystemClock",
    "SystemRandomSource",
    "TokenDecodingError",
    "TokenParts",
    "UnknownVersionError",
    "constant_time_equals",
    "decode",
    "decode_b64url",
    "encode",
    "encode_b64url",
    "parse_key",
    "rebuild_token",
    "split_token",
]
