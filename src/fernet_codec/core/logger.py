"""Logging setup: RichHandler on the console, optional non-blocking file log.

1.  **Rich Console Output:** ``rich.logging.RichHandler`` on one shared stderr
    ``Console``, so log lines never mix with tokens written to stdout.
2.  **Non-Blocking File Logging:** ``QueueHandler`` + ``SafeQueueListener``
    keep file I/O off the calling thread.
3.  **Compact Formatting:** ``CompactFormatter`` abbreviates levels and
    shortens paths in file logs.
4.  **Configuration Driven:** levels and the log file come from ``AppConfig``.

The crypto core never logs; only the application layer does, and it never
logs key material or plaintext.
"""

from __future__ import annotations

import logging
import os
import queue
import sys
import traceback
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from .models import AppConfig

__all__ = [
    "CONSOLE_LOGGER_NAME",
    "ERROR_LOGGER_NAME",
    "LEVEL_ABBREV",
    "CompactFormatter",
    "LogFormat",
    "SafeQueueListener",
    "create_console_logger",
    "create_fallback_loggers",
    "get_level",
    "get_loggers",
    "get_shared_console",
    "setup_file_logging",
    "shorten_path",
]

CONSOLE_LOGGER_NAME = "fernet_codec.console"
ERROR_LOGGER_NAME = "fernet_codec.error"

# Module-level shared console container (avoids global statement)
_console_holder: dict[str, Console] = {}

LEVEL_ABBREV = {
    "DEBUG": "D",
    "INFO": "I",
    "WARNING": "W",
    "ERROR": "E",
    "CRITICAL": "C",
}

_LOG_LEVELS: dict[str, int] = {
    "CRITICAL": logging.CRITICAL,
    "FATAL": logging.FATAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}


def get_shared_console() -> Console:
    """Get or create the shared Rich console (writes to stderr)."""
    if "console" not in _console_holder:
        _console_holder["console"] = Console(stderr=True)
    return _console_holder["console"]


class SafeQueueListener(QueueListener):
    """A QueueListener wrapper that safely handles stop() calls."""

    def stop(self) -> None:
        """Stop the listener thread safely, handling cases where _thread is None."""
        try:
            if getattr(self, "_thread", None) is not None:
                super().stop()
        except (AttributeError, RuntimeError, TypeError) as e:
            print(f"Warning: Error stopping QueueListener: {e}", file=sys.stderr)


class LogFormat:
    """Rich markup helpers for consistent log formatting.

    Example:
        from fernet_codec.core.logger import LogFormat as LF
        logger.info("Loaded key from %s", LF.file("fernet.key"))
    """

    @staticmethod
    def file(name: str) -> str:
        """Format a filename or path (cyan)."""
        return f"[cyan]{name}[/cyan]"

    @staticmethod
    def number(value: float) -> str:
        """Format a number (bright white)."""
        return f"[bright_white]{value}[/bright_white]"


def shorten_path(path: str) -> str:
    """Return *path* with the home directory replaced by ``~``.

    Never raises; returns the input unchanged when it cannot be shortened.
    """
    if not path:
        return path or ""
    norm_path = os.path.normpath(path)
    try:
        home_dir = str(Path.home())
    except (OSError, KeyError, RuntimeError):
        return norm_path
    if norm_path == home_dir:
        return "~"
    if norm_path.startswith(home_dir + os.sep):
        return "~" + norm_path[len(home_dir) :]
    return norm_path


class CompactFormatter(logging.Formatter):
    """Compact file-log formatter: abbreviated levels and short paths."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str = "%Y-%m-%d %H:%M:%S",
        style: Literal["%", "{", "$"] = "%",
    ) -> None:
        default_fmt = "%(asctime)s %(levelname)s [%(name)s] %(short_pathname)s:%(lineno)d - %(message)s"
        super().__init__(fmt if fmt is not None else default_fmt, datefmt, style)

    def format(self, record: logging.LogRecord) -> str:
        """Format the record, restoring its level name afterwards."""
        original_levelname = record.levelname
        record.short_pathname = shorten_path(getattr(record, "pathname", "N/A"))
        record.levelname = LEVEL_ABBREV.get(original_levelname, original_levelname[:1])
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


def get_level(level_name: str | int | None, default_level: int = logging.INFO) -> int:
    """Get a logging level constant from a name or number, with fallback."""
    if not level_name:
        return default_level
    if isinstance(level_name, int):
        return level_name if level_name in _LOG_LEVELS.values() else default_level
    return _LOG_LEVELS.get(str(getattr(level_name, "value", level_name)).upper(), default_level)


def create_console_logger(level: int) -> logging.Logger:
    """Create and configure the console logger with RichHandler.

    Only adds the handler if none is present; the level is always updated.
    """
    console_logger = logging.getLogger(CONSOLE_LOGGER_NAME)
    if not console_logger.handlers:
        handler = RichHandler(
            console=get_shared_console(),
            show_path=False,
            enable_link_path=False,
            log_time_format="%H:%M:%S",
            markup=True,
        )
        console_logger.addHandler(handler)
        console_logger.propagate = False
    for handler in console_logger.handlers:
        if isinstance(handler, RichHandler):
            handler.setLevel(level)
    console_logger.setLevel(level)
    return console_logger


def setup_file_logging(log_file: str, level: int, loggers: list[logging.Logger]) -> SafeQueueListener:
    """Route *loggers* to *log_file* through a queue so writes never block callers.

    Returns:
        The started listener; stop it on shutdown to flush the file.

    """
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(path, encoding="utf-8")
    file_handler.setFormatter(CompactFormatter())
    file_handler.setLevel(level)

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
    listener = SafeQueueListener(log_queue, file_handler, respect_handler_level=True)
    listener.start()

    queue_handler = QueueHandler(log_queue)
    for target in loggers:
        target.addHandler(queue_handler)
        target.setLevel(min(target.level or level, level))
    return listener


def get_loggers(config: AppConfig) -> tuple[logging.Logger, logging.Logger, SafeQueueListener | None]:
    """Create the console and error loggers described by *config*.

    Note:
        Never raises. On setup failure it returns basic StreamHandler
        loggers and no listener.

    Returns:
        Tuple of (console_logger, error_logger, listener). Listener is None
        when no log file is configured or setup failed.

    """
    try:
        console_level = get_level(config.logging.console_level)
        console_logger = create_console_logger(console_level)

        error_logger = logging.getLogger(ERROR_LOGGER_NAME)
        if not error_logger.handlers:
            error_handler = RichHandler(
                console=get_shared_console(), show_path=False, log_time_format="%H:%M:%S", markup=True
            )
            error_handler.setLevel(logging.WARNING)
            error_logger.addHandler(error_handler)
            error_logger.propagate = False
        error_logger.setLevel(logging.WARNING)

        listener = None
        if config.logging.log_file:
            listener = setup_file_logging(
                config.logging.log_file,
                get_level(config.logging.file_level, logging.DEBUG),
                [console_logger, error_logger, logging.getLogger("config")],
            )
    except (ImportError, OSError, ValueError, AttributeError, TypeError) as e:
        return create_fallback_loggers(e)

    console_logger.debug("Logging setup with RichHandler complete.")
    return console_logger, error_logger, listener


def create_fallback_loggers(e: Exception) -> tuple[logging.Logger, logging.Logger, None]:
    """Create plain StreamHandler loggers when the Rich/queue setup fails."""
    print(f"ERROR: Failed to configure logging: {e}", file=sys.stderr)
    traceback.print_exc(file=sys.stderr)

    console_fallback = logging.getLogger("fernet_codec.console_fallback")
    error_fallback = logging.getLogger("fernet_codec.error_fallback")
    for fallback in (console_fallback, error_fallback):
        if not fallback.handlers:
            fallback.addHandler(logging.StreamHandler(sys.stderr))
        fallback.setLevel(logging.INFO)
    return console_fallback, error_fallback, None
