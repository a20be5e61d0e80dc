"""fernet-codec - main entry point."""

from __future__ import annotations

import logging
import sys

from fernet_codec.app.cli import CLI
from fernet_codec.app.key_store import KeyNotFoundError
from fernet_codec.app.orchestrator import Orchestrator
from fernet_codec.app.token_service import TokenServiceError
from fernet_codec.core.config import load_config
from fernet_codec.core.exceptions import ConfigurationError
from fernet_codec.core.logger import get_loggers
from fernet_codec.crypto import FernetError, InvalidKeyError

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def _handle_error(error: Exception, logger_error: logging.Logger) -> int:
    """Log an expected failure and return the error exit code."""
    logger_error.error("%s", error)
    return EXIT_ERROR


def main(argv: list[str] | None = None) -> int:
    """Execute the main entry point.

    Returns:
        Process exit code

    """
    args = CLI().parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_ERROR

    if args.log_level:
        config.logging.console_level = args.log_level

    logger_console, logger_error, listener = get_loggers(config)
    try:
        Orchestrator(config, logger_console, logger_error).run_command(args)
    except KeyboardInterrupt:
        logger_console.info("Interrupted by user.")
        return EXIT_INTERRUPTED
    except (TokenServiceError, InvalidKeyError):
        # Already logged by TokenService / KeyStore
        return EXIT_ERROR
    except (FernetError, KeyNotFoundError, OSError, ValueError) as e:
        return _handle_error(e, logger_error)
    finally:
        if listener:
            listener.stop()

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
