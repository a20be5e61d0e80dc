"""Command-line interface for fernet-codec."""

import argparse
from typing import Any


def _add_generate_key_command(subparsers: Any) -> None:
    """Add the generate-key command."""
    parser = subparsers.add_parser(
        "generate-key",
        aliases=["genkey"],
        help="Generate a new random Fernet key",
        description="Print a new base64url key, or write it to a key file readable only by the owner",
    )
    parser.add_argument(
        "--output",
        "-o",
        help="Write the key to this file instead of printing it",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite the output file if it exists",
    )


def _add_encrypt_command(subparsers: Any) -> None:
    """Add the encrypt command."""
    parser = subparsers.add_parser(
        "encrypt",
        aliases=["enc"],
        help="Encrypt a message into a Fernet token",
        description="Encrypt TEXT, the contents of --input, or standard input",
    )
    parser.add_argument(
        "text",
        nargs="?",
        help="Message to encrypt (UTF-8)",
    )
    parser.add_argument(
        "--input",
        "-i",
        help="Read the message bytes from this file",
    )


def _add_decrypt_command(subparsers: Any) -> None:
    """Add the decrypt command."""
    parser = subparsers.add_parser(
        "decrypt",
        aliases=["dec"],
        help="Decrypt a Fernet token",
        description="Decrypt TOKEN (or a token read from standard input)",
    )
    parser.add_argument(
        "token",
        nargs="?",
        help="Token to decrypt",
    )
    parser.add_argument(
        "--output",
        "-o",
        help="Write the plaintext bytes to this file",
    )
    parser.add_argument(
        "--allow-unauthenticated",
        action="store_true",
        help="Return the plaintext even when the HMAC does not match (logged as a warning)",
    )


def _add_inspect_command(subparsers: Any) -> None:
    """Add the inspect command."""
    parser = subparsers.add_parser(
        "inspect",
        help="Show the fields of a token without decrypting it",
        description="Print version, timestamp, IV, ciphertext length and HMAC status as JSON",
    )
    parser.add_argument(
        "token",
        nargs="?",
        help="Token to inspect",
    )


class CLI:
    """Command-line interface handler."""

    def __init__(self) -> None:
        """Initialize CLI parser."""
        self.parser = self._create_parser()

    @staticmethod
    def _create_parser() -> argparse.ArgumentParser:
        """Create the argument parser.

        Returns:
            Configured ArgumentParser

        """
        parser = argparse.ArgumentParser(
            prog="fernet-codec",
            description="Fernet tokens: AES-128-CBC + HMAC-SHA256, timestamped, base64url",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
    # Create a key file
    %(prog)s generate-key --output ~/.config/fernet.key

    # Encrypt a message with the key from $FERNET_KEY
    %(prog)s encrypt "my deep dark secret"

    # Decrypt with an explicit key file
    %(prog)s --key-file ~/.config/fernet.key decrypt gAAAAAB...

    # Show token fields
    %(prog)s inspect gAAAAAB...
            """,
        )

        parser.add_argument(
            "--config",
            help="Path to a YAML configuration file (default: $FERNET_CONFIG)",
        )
        parser.add_argument(
            "--key",
            help="Base64url key (overrides the environment and key file)",
        )
        parser.add_argument(
            "--key-file",
            help="File holding the base64url key",
        )
        parser.add_argument(
            "--log-level",
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            help="Console log level",
        )

        subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
        subparsers.required = True
        _add_generate_key_command(subparsers)
        _add_encrypt_command(subparsers)
        _add_decrypt_command(subparsers)
        _add_inspect_command(subparsers)

        return parser

    def parse_args(self, args: list[str] | None = None) -> argparse.Namespace:
        """Parse command line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace

        """
        return self.parser.parse_args(args)
