"""Fernet-specific exceptions.

Every failure stage of the codec has its own class so callers can tell a
malformed key or token apart from a failing cryptographic primitive.
"""

from __future__ import annotations

from typing import Any


class FernetError(Exception):
    """Base exception for Fernet key and token operations."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize FernetError.

        Args:
            message: Error description
            details: Additional error context

        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidKeyError(FernetError):
    """Exception raised when a key cannot be used."""


class InvalidKeyFormatError(InvalidKeyError):
    """Exception raised when an encoded key is not valid base64url."""


class InvalidKeyLengthError(InvalidKeyError):
    """Exception raised when raw key material is not exactly 32 bytes."""


class InvalidIVError(FernetError):
    """Exception raised when the random source returns an IV of the wrong size."""


class InvalidTimestampError(FernetError):
    """Exception raised when the clock value does not fit the signed 64-bit timestamp field."""


class _WrappedPrimitiveError(FernetError):
    """Failure raised by a cryptographic collaborator, kept as ``cause``."""

    def __init__(self, message: str, cause: BaseException, details: dict[str, Any] | None = None) -> None:
        merged = {"original_error": str(cause), **(details or {})}
        super().__init__(message, merged)
        self.cause = cause


class CipherError(_WrappedPrimitiveError):
    """Exception raised when AES-CBC encryption, decryption or unpadding fails."""


class AuthError(_WrappedPrimitiveError):
    """Exception raised when the HMAC itself cannot be computed.

    A tag that is computed but does not match is not an ``AuthError``.
    """


class TokenDecodingError(FernetError):
    """Exception raised when a token is not valid base64url."""


class InvalidTokenFormatError(FernetError):
    """Exception raised when the binary token length or alignment is wrong."""


class UnknownVersionError(FernetError):
    """Exception raised when the token version byte is not 0x80."""


class AuthenticationFailedError(FernetError):
    """Exception raised by the strict helpers when the HMAC does not match."""
