"""Fernet token encoder and decoder.

A token is ``version ‖ timestamp ‖ IV ‖ ciphertext ‖ HMAC`` in base64url:
AES-128-CBC with PKCS#7 padding under the encryption key, HMAC-SHA256 under
the signing key. See ``layout`` for the byte offsets.

``Fernet.decode`` decrypts before it authenticates and reports the HMAC result
as ``DecodeOutput.hmac_success`` instead of raising. Callers that ignore the
flag accept unauthenticated plaintext, and a padding failure is observable
before the tag is checked. ``Fernet.decode_authenticated`` checks the tag
first and raises on mismatch; prefer it unless the flag is actually needed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.hmac import HMAC

from .base64url import Base64DecodeError, decode_b64url, encode_b64url
from .compare import constant_time_equals
from .exceptions import (
    AuthenticationFailedError,
    AuthError,
    CipherError,
    InvalidIVError,
    InvalidTimestampError,
    TokenDecodingError,
    UnknownVersionError,
)
from .keys import FernetKey, parse_key
from .layout import (
    IV_SIZE,
    TIMESTAMP_MAX,
    TIMESTAMP_MIN,
    VERSION,
    TokenParts,
    assemble_token,
    signed_prefix,
    split_token,
)
from .sources import Clock, RandomSource, SystemClock, SystemRandomSource

# Failures the cryptography primitives report for bad input or backends.
_PRIMITIVE_ERRORS = (ValueError, TypeError, UnsupportedAlgorithm)


@dataclass(frozen=True, slots=True)
class DecodeOutput:
    """Result of ``Fernet.decode``.

    Attributes:
        data: Decrypted plaintext
        hmac_success: Whether the token's HMAC matched. False means the
            plaintext is NOT authentic.
        timestamp: Creation time recorded in the token, Unix seconds

    """

    data: bytes
    hmac_success: bool
    timestamp: int


class Fernet:
    """Encode and decode Fernet tokens under one key.

    Instances hold only immutable state and can be shared between threads.
    """

    def __init__(
        self,
        key: FernetKey | bytes | str,
        clock: Clock | None = None,
        random_source: RandomSource | None = None,
    ) -> None:
        """Initialize the codec.

        Args:
            key: ``FernetKey``, 32 raw bytes, or base64url text
            clock: Time source for new tokens (system clock if None)
            random_source: IV source for new tokens (``os.urandom`` if None)

        Raises:
            InvalidKeyFormatError: If a text key is not valid base64url
            InvalidKeyLengthError: If the key is not 32 bytes

        """
        self._key = parse_key(key)
        self._clock = clock or SystemClock()
        self._random_source = random_source or SystemRandomSource()

    @property
    def key(self) -> FernetKey:
        return self._key

    def encode(self, data: bytes) -> str:
        """Encrypt and sign ``data`` into a base64url token.

        Raises:
            TypeError: If ``data`` is not bytes
            InvalidTimestampError: If the clock value is not finite or outside int64
            InvalidIVError: If the random source returns other than 16 bytes
            CipherError: If AES encryption fails
            AuthError: If the HMAC cannot be computed

        """
        if not isinstance(data, (bytes, bytearray, memoryview)):
            msg = f"data must be bytes, not {type(data).__name__}"
            raise TypeError(msg)

        timestamp = _current_timestamp(self._clock)
        iv = self._random_source.random_bytes(IV_SIZE)
        if len(iv) != IV_SIZE:
            msg = f"IV must be {IV_SIZE} bytes, got {len(iv)}"
            raise InvalidIVError(msg, {"length": len(iv)})

        ciphertext = _encrypt(bytes(data), self._key.encryption_key, iv)
        signed = signed_prefix(VERSION, timestamp, iv, ciphertext)
        mac = _compute_hmac(signed, self._key.signing_key)
        return encode_b64url(signed + mac)

    def decode(self, token: str | bytes) -> DecodeOutput:
        """Decrypt ``token`` and report whether its HMAC matched.

        The HMAC is checked after decryption and a mismatch is NOT an error.

        Raises:
            TokenDecodingError: If ``token`` is not valid base64url
            InvalidTokenFormatError: If the binary length is invalid
            UnknownVersionError: If the version byte is not 0x80
            CipherError: If decryption or unpadding fails
            AuthError: If the HMAC cannot be computed

        """
        parts = self.parse(token)
        plaintext = _decrypt(parts.ciphertext, self._key.encryption_key, parts.iv)
        matches = self.verify_hmac(parts)
        return DecodeOutput(data=plaintext, hmac_success=matches, timestamp=parts.timestamp)

    def decode_authenticated(self, token: str | bytes) -> bytes:
        """Verify the HMAC of ``token``, then decrypt it.

        Raises:
            AuthenticationFailedError: If the HMAC does not match
            TokenDecodingError: If ``token`` is not valid base64url
            InvalidTokenFormatError: If the binary length is invalid
            UnknownVersionError: If the version byte is not 0x80
            CipherError: If decryption or unpadding fails
            AuthError: If the HMAC cannot be computed

        """
        parts = self.parse(token)
        self._require_authentic(parts)
        return _decrypt(parts.ciphertext, self._key.encryption_key, parts.iv)

    def extract_timestamp(self, token: str | bytes) -> int:
        """Return the creation time of an authentic token without decrypting it.

        Raises:
            AuthenticationFailedError: If the HMAC does not match
            TokenDecodingError: If ``token`` is not valid base64url
            InvalidTokenFormatError: If the binary length is invalid
            UnknownVersionError: If the version byte is not 0x80

        """
        parts = self.parse(token)
        self._require_authentic(parts)
        return parts.timestamp

    def parse(self, token: str | bytes) -> TokenParts:
        """Run the transport, length and version checks and split ``token``.

        No cryptographic operation runs here.

        Raises:
            TokenDecodingError: If ``token`` is not valid base64url
            InvalidTokenFormatError: If the binary length is invalid
            UnknownVersionError: If the version byte is not 0x80

        """
        try:
            raw = decode_b64url(token)
        except Base64DecodeError as e:
            msg = "Token is not valid base64url"
            raise TokenDecodingError(msg, {"original_error": str(e)}) from e

        parts = split_token(raw)
        if parts.version != VERSION:
            msg = f"Unknown token version 0x{parts.version:02x}"
            raise UnknownVersionError(msg, {"version": parts.version})
        return parts

    def verify_hmac(self, parts: TokenParts) -> bool:
        """Recompute the tag over ``parts`` and compare it in constant time."""
        expected = _compute_hmac(parts.signed_bytes, self._key.signing_key)
        return constant_time_equals(expected, parts.hmac)

    def _require_authentic(self, parts: TokenParts) -> None:
        if not self.verify_hmac(parts):
            msg = "Token HMAC does not match"
            raise AuthenticationFailedError(msg, {"timestamp": parts.timestamp})


def encode(
    key: FernetKey | bytes | str,
    data: bytes,
    clock: Clock | None = None,
    random_source: RandomSource | None = None,
) -> str:
    """Encode ``data`` under ``key`` with the given (or system) sources."""
    return Fernet(key, clock=clock, random_source=random_source).encode(data)


def decode(key: FernetKey | bytes | str, token: str | bytes) -> DecodeOutput:
    """Decode ``token`` under ``key``; see ``Fernet.decode``."""
    return Fernet(key).decode(token)


def rebuild_token(parts: TokenParts) -> str:
    """Encode already-split token fields back to transport form."""
    return encode_b64url(assemble_token(parts))


def _current_timestamp(clock: Clock) -> int:
    now = clock.now()
    if isinstance(now, float) and not math.isfinite(now):
        msg = f"Clock returned a non-finite time: {now!r}"
        raise InvalidTimestampError(msg, {"timestamp": now})
    timestamp = math.floor(now)
    if not TIMESTAMP_MIN <= timestamp <= TIMESTAMP_MAX:
        msg = f"Timestamp {timestamp} does not fit in a signed 64-bit field"
        raise InvalidTimestampError(msg, {"timestamp": timestamp})
    return timestamp


def _encrypt(data: bytes, key: bytes, iv: bytes) -> bytes:
    try:
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(data) + padder.finalize()
        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        return encryptor.update(padded) + encryptor.finalize()
    except _PRIMITIVE_ERRORS as e:
        msg = f"AES encryption failed: {e!s}"
        raise CipherError(msg, e) from e


def _decrypt(ciphertext: bytes, key: bytes, iv: bytes) -> bytes:
    try:
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
    except _PRIMITIVE_ERRORS as e:
        msg = f"AES decryption failed: {e!s}"
        raise CipherError(msg, e) from e


def _compute_hmac(data: bytes, key: bytes) -> bytes:
    try:
        mac = HMAC(key, hashes.SHA256())
        mac.update(data)
        return mac.finalize()
    except _PRIMITIVE_ERRORS as e:
        msg = f"HMAC computation failed: {e!s}"
        raise AuthError(msg, e) from e
