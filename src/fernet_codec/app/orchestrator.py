"""Command dispatch for the fernet-codec CLI."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from fernet_codec.core.logger import LogFormat
from fernet_codec.crypto import Fernet, FernetKey

from .key_store import KeyStore
from .token_service import TokenService

if TYPE_CHECKING:
    import argparse
    import logging

    from fernet_codec.core.models import AppConfig


class Orchestrator:
    """Runs one CLI command against the configured key."""

    def __init__(
        self,
        config: AppConfig,
        console_logger: logging.Logger,
        error_logger: logging.Logger,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Validated application configuration
            console_logger: Logger for progress messages
            error_logger: Logger for failures
            stdin: Stream to read messages/tokens from (sys.stdin if None)
            stdout: Stream for command results (sys.stdout if None)

        """
        self.config = config
        self.console_logger = console_logger
        self.error_logger = error_logger
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout

    def run_command(self, args: argparse.Namespace) -> None:
        """Execute the command named in *args*.

        Raises:
            KeyNotFoundError: If the command needs a key and none is configured
            InvalidKeyError: If the configured key is malformed
            TokenServiceError: If encryption, decryption or inspection fails
            OSError: If an input or output file cannot be used

        """
        match args.command:
            case "generate-key" | "genkey":
                self._run_generate_key(args)
            case "encrypt" | "enc":
                self._run_encrypt(args)
            case "decrypt" | "dec":
                self._run_decrypt(args)
            case "inspect":
                self._run_inspect(args)
            case _:
                msg = f"Unknown command: {args.command}"
                raise ValueError(msg)

    def _key_store(self, args: argparse.Namespace) -> KeyStore:
        key_file = getattr(args, "key_file", None) or self.config.key.file
        return KeyStore(self.error_logger, key_file, env_var=self.config.key.env_var)

    def _token_service(self, args: argparse.Namespace, require_authentication: bool | None = None) -> TokenService:
        key = self._key_store(args).load_key(getattr(args, "key", None))
        if require_authentication is None:
            require_authentication = self.config.decode.require_authentication
        return TokenService(self.error_logger, Fernet(key), require_authentication=require_authentication)

    def _run_generate_key(self, args: argparse.Namespace) -> None:
        key = FernetKey.generate()
        if args.output:
            path = KeyStore(self.error_logger, args.output).write_key(key, overwrite=args.force)
            self.console_logger.info("New key written to %s", LogFormat.file(str(path)))
            return
        self._write_line(key.encoded)

    def _run_encrypt(self, args: argparse.Namespace) -> None:
        if args.input:
            data = Path(args.input).expanduser().read_bytes()
        elif args.text is not None:
            data = args.text.encode("utf-8")
        else:
            data = self.stdin.read().encode("utf-8")

        token = self._token_service(args).encrypt_bytes(data)
        self.console_logger.debug("Encrypted %s bytes", LogFormat.number(len(data)))
        self._write_line(token)

    def _run_decrypt(self, args: argparse.Namespace) -> None:
        token = self._read_token(args)
        require_authentication = False if args.allow_unauthenticated else None
        data = self._token_service(args, require_authentication).decrypt_bytes(token)

        if args.output:
            Path(args.output).expanduser().write_bytes(data)
            self.console_logger.info("Plaintext written to %s", LogFormat.file(args.output))
            return
        try:
            self._write_line(data.decode("utf-8"))
        except UnicodeDecodeError:
            buffer = getattr(self.stdout, "buffer", None)
            if buffer is None:
                raise
            buffer.write(data)
            buffer.flush()

    def _run_inspect(self, args: argparse.Namespace) -> None:
        token = self._read_token(args)
        details = self._token_service(args).inspect(token)
        self._write_line(json.dumps(details, indent=2))

    def _read_token(self, args: argparse.Namespace) -> str:
        token = args.token if args.token is not None else self.stdin.read()
        return token.strip()

    def _write_line(self, text: str) -> None:
        # Command results go to stdout; logs go to the stderr console
        print(text, file=self.stdout)
