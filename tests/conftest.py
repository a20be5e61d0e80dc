"""Pytest configuration and shared fixtures for fernet-codec.

Puts the project root (for ``tests.*`` helpers) and ``src`` on sys.path so
the suite runs from a plain checkout as well as against an installed package.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
for path in (PROJECT_ROOT, PROJECT_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from fernet_codec.core.logger import CONSOLE_LOGGER_NAME, ERROR_LOGGER_NAME  # noqa: E402
from fernet_codec.crypto import Fernet, FernetKey, FixedClock, FixedRandomSource  # noqa: E402

from tests.vectors import GENERATE_IV, GENERATE_KEY, GENERATE_TIMESTAMP, VECTOR_KEY  # noqa: E402


@pytest.fixture
def vector_key() -> FernetKey:
    """Key of the known-answer decode vector."""
    return FernetKey.from_encoded(VECTOR_KEY)


@pytest.fixture
def random_key() -> FernetKey:
    """Freshly generated key."""
    return FernetKey.generate()


@pytest.fixture
def fernet(random_key: FernetKey) -> Fernet:
    """Codec with a random key and system sources."""
    return Fernet(random_key)


@pytest.fixture
def fixed_fernet() -> Fernet:
    """Codec with the known-answer encode vector's key, clock and IV."""
    return Fernet(
        GENERATE_KEY,
        clock=FixedClock(GENERATE_TIMESTAMP),
        random_source=FixedRandomSource(GENERATE_IV),
    )


@pytest.fixture
def mock_console_logger() -> MagicMock:
    """Mock console logger for testing."""
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def mock_error_logger() -> MagicMock:
    """Mock error logger for testing."""
    return MagicMock(spec=logging.Logger)


def _remove_app_handlers() -> None:
    for name in (CONSOLE_LOGGER_NAME, ERROR_LOGGER_NAME, "config"):
        target = logging.getLogger(name)
        target.propagate = True
        for handler in list(target.handlers):
            if not isinstance(handler, logging.NullHandler):
                target.removeHandler(handler)
                handler.close()


@pytest.fixture
def clean_app_loggers() -> Iterator[None]:
    """Strip handlers from the application loggers before and after a test.

    ``get_loggers`` only installs its RichHandler on a logger without
    handlers, so leftovers from an earlier test would change what it builds.
    """
    _remove_app_handlers()
    yield
    _remove_app_handlers()
