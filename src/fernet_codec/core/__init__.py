"""Core module - configuration, models, and logging."""

from .config import load_config
from .exceptions import ConfigurationError
from .logger import get_loggers
from .models import AppConfig

__all__ = [
    "AppConfig",
    "ConfigurationError",
    "get_loggers",
    "load_config",
]
