"""Logging facade over the Fernet codec for text and byte payloads.

This is the layer that applies a decode policy and reports failures; the
codec underneath neither logs nor decides what to do with an HMAC mismatch.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, NoReturn, TYPE_CHECKING

from fernet_codec.core.logger import LogFormat
from fernet_codec.crypto import (
    AuthenticationFailedError,
    Base64DecodeError,
    FernetError,
    decode_b64url,
)
from fernet_codec.crypto.layout import VERSION, is_valid_length

if TYPE_CHECKING:
    import logging

    from fernet_codec.crypto import Fernet


class TokenServiceError(Exception):
    """Exception raised when a token operation fails in TokenService."""


class TokenService:
    """Encrypts and decrypts payloads with one ``Fernet`` codec.

    With ``require_authentication`` (the default) a token whose HMAC does
    not match is rejected before decryption. Without it the token is
    decrypted anyway, a warning is logged, and the plaintext is returned.
    """

    def __init__(self, logger: logging.Logger, fernet: Fernet, require_authentication: bool = True) -> None:
        """Initialize TokenService.

        Args:
            logger: Logger instance for error reporting and debugging
            fernet: Codec holding the key
            require_authentication: Reject tokens whose HMAC does not match

        """
        self.logger = logger
        self.fernet = fernet
        self.require_authentication = require_authentication

    def encrypt_bytes(self, data: bytes) -> str:
        """Encrypt *data* into a token.

        Raises:
            TokenServiceError: If encryption fails

        """
        try:
            token = self.fernet.encode(data)
        except FernetError as e:
            self._handle_crypto_error("Token encryption failed: ", e)
        self.logger.debug("Encrypted %s bytes", LogFormat.number(len(data)))
        return token

    def encrypt_text(self, text: str) -> str:
        """Encrypt UTF-8 *text* into a token."""
        return self.encrypt_bytes(text.encode("utf-8"))

    def decrypt_bytes(self, token: str) -> bytes:
        """Decrypt *token* under the configured authentication policy.

        Raises:
            TokenServiceError: If the token is malformed, fails to decrypt,
                or (when authentication is required) its HMAC does not match

        """
        try:
            if self.require_authentication:
                data = self.fernet.decode_authenticated(token)
            else:
                output = self.fernet.decode(token)
                if not output.hmac_success:
                    self.logger.warning("Token HMAC does not match; returning unauthenticated plaintext")
                data = output.data
        except AuthenticationFailedError as e:
            self._handle_crypto_error("Token authentication failed: ", e)
        except FernetError as e:
            self._handle_crypto_error("Token decryption failed: ", e)
        self.logger.debug("Decrypted token into %s bytes", LogFormat.number(len(data)))
        return data

    def decrypt_text(self, token: str) -> str:
        """Decrypt *token* and decode the plaintext as UTF-8.

        Raises:
            TokenServiceError: If decryption fails or the plaintext is not UTF-8

        """
        data = self.decrypt_bytes(token)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            result = f"Decrypted payload is not UTF-8 text: {e!s}"
            self.logger.exception(result)
            raise TokenServiceError(result) from e

    def inspect(self, token: str) -> dict[str, Any]:
        """Describe the fields of *token* without decrypting it.

        Returns:
            Dictionary with keys:
            - version: Version byte
            - timestamp: Creation time, Unix seconds
            - created_at: Creation time, ISO-8601 UTC
            - iv: IV as hex
            - ciphertext_length: Ciphertext size in bytes
            - hmac_success: Whether the HMAC matches under this key

        Raises:
            TokenServiceError: If the token is malformed

        """
        try:
            parts = self.fernet.parse(token)
            hmac_success = self.fernet.verify_hmac(parts)
        except FernetError as e:
            self._handle_crypto_error("Token inspection failed: ", e)

        try:
            created_at = datetime.fromtimestamp(parts.timestamp, UTC).isoformat()
        except (OverflowError, OSError, ValueError):
            created_at = None
        return {
            "version": parts.version,
            "timestamp": parts.timestamp,
            "created_at": created_at,
            "iv": parts.iv.hex(),
            "ciphertext_length": len(parts.ciphertext),
            "hmac_success": hmac_success,
        }

    @staticmethod
    def is_token(text: str) -> bool:
        """Check whether *text* has the shape of a Fernet token.

        Only the encoding, length and version byte are checked; no key is
        needed and nothing is authenticated.
        """
        if not text:
            return False
        try:
            raw = decode_b64url(text)
        except Base64DecodeError:
            return False
        return is_valid_length(len(raw)) and raw[0] == VERSION

    def _handle_crypto_error(self, message_prefix: str, error: FernetError) -> NoReturn:
        """Log *error* and re-raise it as TokenServiceError."""
        result = f"{message_prefix}{error.message}"
        self.logger.exception(result)
        raise TokenServiceError(result) from error
