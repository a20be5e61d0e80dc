"""Locating and persisting Fernet keys."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from fernet_codec.core.logger import LogFormat
from fernet_codec.crypto import FernetKey, InvalidKeyError

if TYPE_CHECKING:
    import logging

DEFAULT_KEY_ENV_VAR = "FERNET_KEY"
KEY_FILE_MODE = 0o600


class KeyNotFoundError(LookupError):
    """Raised when no key is available from any configured source."""


class KeyStore:
    """Loads a ``FernetKey`` from explicit text, the environment, or a key file."""

    def __init__(
        self,
        logger: logging.Logger,
        key_file_path: str | None = None,
        env_var: str = DEFAULT_KEY_ENV_VAR,
    ) -> None:
        """Initialize KeyStore.

        Args:
            logger: Logger instance for status and error reporting
            key_file_path: Optional path to a file holding the base64url key
            env_var: Environment variable holding the base64url key

        """
        self.logger = logger
        self.key_file_path = Path(key_file_path).expanduser() if key_file_path else None
        self.env_var = env_var

    def load_key(self, explicit_key: str | None = None) -> FernetKey:
        """Return the first key found: *explicit_key*, then the environment, then the key file.

        Raises:
            InvalidKeyError: If the key found is malformed
            KeyNotFoundError: If no source holds a key

        """
        if explicit_key:
            return self._parse(explicit_key, "command line")

        if env_value := os.getenv(self.env_var):
            return self._parse(env_value, f"${self.env_var}")

        if self.key_file_path is not None and self.key_file_path.exists():
            key_data = self.key_file_path.read_text(encoding="ascii").strip()
            key = self._parse(key_data, str(self.key_file_path))
            self.logger.info("Loaded encryption key from %s", LogFormat.file(str(self.key_file_path)))
            return key

        sources = [f"${self.env_var}"]
        if self.key_file_path is not None:
            sources.append(str(self.key_file_path))
        msg = f"No Fernet key found (checked {', '.join(sources)})"
        raise KeyNotFoundError(msg)

    def write_key(self, key: FernetKey, overwrite: bool = False) -> Path:
        """Save *key* to the key file, readable by the owner only.

        Raises:
            ValueError: If no key file path is configured
            FileExistsError: If the file exists and *overwrite* is False

        """
        if self.key_file_path is None:
            msg = "No key file path configured"
            raise ValueError(msg)
        if self.key_file_path.exists() and not overwrite:
            msg = f"Key file already exists: {self.key_file_path}"
            raise FileExistsError(msg)

        self.key_file_path.parent.mkdir(parents=True, exist_ok=True)
        self.key_file_path.write_text(key.encoded + "\n", encoding="ascii")
        self.key_file_path.chmod(KEY_FILE_MODE)
        self.logger.info("Wrote encryption key to %s", LogFormat.file(str(self.key_file_path)))
        return self.key_file_path

    def _parse(self, encoded: str, source: str) -> FernetKey:
        try:
            return FernetKey.from_encoded(encoded)
        except InvalidKeyError as e:
            self.logger.exception("Invalid encryption key from %s: %s", source, e.message)
            raise
