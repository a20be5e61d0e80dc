"""Pydantic models for configuration validation."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class LogLevel(str, Enum):
    """Log level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
    NOTSET = "NOTSET"


class KeyConfig(BaseModel):
    """Where the Fernet key is looked up."""

    model_config = ConfigDict(extra="forbid")

    env_var: str = Field(default="FERNET_KEY", min_length=1)
    file: str | None = None


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="forbid")

    console_level: LogLevel = LogLevel.INFO
    file_level: LogLevel = LogLevel.DEBUG
    log_file: str | None = None


class DecodeConfig(BaseModel):
    """Token decoding policy."""

    model_config = ConfigDict(extra="forbid")

    require_authentication: bool = True


class AppConfig(BaseModel):
    """Complete application configuration."""

    model_config = ConfigDict(extra="forbid")

    key: KeyConfig = Field(default_factory=KeyConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    decode: DecodeConfig = Field(default_factory=DecodeConfig)
