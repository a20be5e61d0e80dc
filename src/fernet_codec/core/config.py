"""Configuration loading for fernet-codec.

Settings come from an optional YAML file. ``${VAR}`` values are resolved from
the environment after ``.env`` has been loaded, and the result is validated
against ``AppConfig``.
"""

from __future__ import annotations

import logging
import os
import pathlib
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from .exceptions import ConfigurationError
from .models import AppConfig

ConfigValue = dict[str, Any] | list[Any] | str | int | float | bool | None

logger = logging.getLogger("config")
# Handlers are attached by get_loggers(); stay quiet until then
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

CONFIG_PATH_ENV_VAR = "FERNET_CONFIG"
MAX_CONFIG_SIZE = 1024 * 1024  # 1MB


def resolve_env_vars(config: ConfigValue) -> ConfigValue:
    """Recursively resolve ``${VAR}`` placeholders in config values.

    Unset variables resolve to an empty string.
    """
    if isinstance(config, dict):
        return {str(k): resolve_env_vars(v) for k, v in config.items()}
    if isinstance(config, list):
        return [resolve_env_vars(item) for item in config]
    if isinstance(config, str) and config.startswith("${") and config.endswith("}"):
        var_name = config[2:-1]
        return os.getenv(var_name, "")
    return config


def _validate_config_path(path: str) -> pathlib.Path:
    """Resolve and validate the configuration file path.

    Raises:
        FileNotFoundError: If the path does not exist or is not a file
        PermissionError: If the file is not readable
        ValueError: If the extension is not .yaml/.yml

    """
    try:
        resolved_path = pathlib.Path(path).expanduser().resolve(strict=True)
    except FileNotFoundError as e:
        msg = f"Config file not found at the specified path: {path}"
        raise FileNotFoundError(msg) from e

    if not resolved_path.is_file():
        msg = f"Config path does not point to a file: {resolved_path}"
        raise FileNotFoundError(msg)

    if not os.access(resolved_path, os.R_OK):
        msg = f"No read permission for config file: {resolved_path}"
        raise PermissionError(msg)

    if resolved_path.suffix.lower() not in (".yaml", ".yml"):
        msg = "Configuration file must have a .yaml or .yml extension"
        raise ValueError(msg)

    return resolved_path


def _read_and_parse_config(path: pathlib.Path) -> ConfigValue:
    """Read and parse the YAML config file with size validation."""
    if path.stat().st_size > MAX_CONFIG_SIZE:
        msg = f"Config file {path} is too large (max {MAX_CONFIG_SIZE} bytes)"
        raise ValueError(msg)

    logger.info("Loading config from: %s", path)
    content = path.read_text(encoding="utf-8")
    parsed_yaml: ConfigValue = yaml.safe_load(content)
    return parsed_yaml


def format_pydantic_errors(error: ValidationError) -> str:
    """Format Pydantic validation errors into a readable string."""
    error_messages: list[str] = []

    for err in error.errors():
        loc_path = ".".join(str(loc) for loc in err["loc"])
        msg = err["msg"]
        error_type = err["type"]

        if error_type == "missing":
            error_messages.append(f"{loc_path}: Missing required field")
        elif error_type in ("type_error", "value_error", "assertion_error"):
            error_messages.append(f"{loc_path}: {msg}")
        else:
            error_messages.append(f"{loc_path}: {msg} (type: {error_type})")

    return "\n".join(error_messages)


def load_config(config_path: str | None = None) -> AppConfig:
    """Load and validate the application configuration.

    Args:
        config_path: YAML file to read. Falls back to ``$FERNET_CONFIG``;
            with neither, built-in defaults are used.

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If the file cannot be read, parsed or validated

    """
    env_loaded = load_dotenv()
    logger.debug(".env file %s", "found and loaded" if env_loaded else "not found, using system environment variables")

    config_path = config_path or os.getenv(CONFIG_PATH_ENV_VAR)
    if not config_path:
        logger.debug("No configuration file given, using defaults")
        return AppConfig()

    try:
        validated_path = _validate_config_path(config_path)
        config_data = _read_and_parse_config(validated_path)
    except (FileNotFoundError, PermissionError, ValueError, yaml.YAMLError) as e:
        logger.critical("Configuration loading failed: %s", e)
        raise ConfigurationError(str(e), config_path) from e

    if config_data is None:
        config_data = {}
    config_data = resolve_env_vars(config_data)
    if not isinstance(config_data, dict):
        msg = "Configuration data is not a dictionary after parsing."
        raise ConfigurationError(msg, config_path)

    try:
        config = AppConfig.model_validate(config_data)
    except ValidationError as e:
        msg = f"Configuration validation failed:\n{format_pydantic_errors(e)}"
        logger.critical(msg)
        raise ConfigurationError(msg, config_path) from e

    logger.info("Configuration successfully loaded and validated.")
    return config
