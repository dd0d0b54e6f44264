"""Configuration for the privacy logging pipeline.

This module provides:
- ``LogConfig``: settings read from ``PRIVLOG_*`` environment variables
- ``configure_logging``: output setup for the library's own diagnostics

Diagnostics are operational messages about the pipeline itself (policy
detected, store unreadable). Application records go through the
dispatcher and its sinks, never through this channel.
"""

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Any

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .diagnostics import DIAGNOSTICS_LOGGER, create_processor_chain
from .environment import Classification
from .levels import Severity


class LogFormat(str, Enum):
    """Diagnostic output formats."""

    JSON = "json"
    CONSOLE = "console"


class StorageBackend(str, Enum):
    """Key-value scopes available to the ring-buffer sink."""

    FILE = "file"
    MEMORY = "memory"
    REDIS = "redis"


class LogConfig(BaseSettings):
    """Configuration for the logging pipeline.

    This class reads configuration from environment variables with the prefix
    PRIVLOG_. For example:
    - PRIVLOG_HOST=app.example.com
    - PRIVLOG_MIN_LEVEL=warn
    - PRIVLOG_STORAGE_BACKEND=memory

    Unset overrides (``None``) leave the detected policy untouched.
    """

    model_config = SettingsConfigDict(
        env_prefix="PRIVLOG_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment detection
    host: str | None = Field(
        default=None, description="Host identifier used for classification"
    )
    environment: Classification | None = Field(
        default=None, description="Force a classification instead of inspecting the host"
    )

    # Policy overrides
    min_level: Severity | None = Field(
        default=None, description="Override the minimum emitted severity"
    )
    console_enabled: bool | None = Field(
        default=None, description="Override the console sink switch"
    )
    remote_enabled: bool | None = Field(
        default=None, description="Override the remote (ring-buffer) sink switch"
    )
    sanitize_enabled: bool | None = Field(
        default=None, description="Override PII redaction (keep enabled!)"
    )

    # Ring-buffer storage
    storage_backend: StorageBackend = Field(
        default=StorageBackend.FILE, description="Key-value scope for persisted records"
    )
    storage_path: Path = Field(
        default=Path.home() / ".privlog", description="Directory of the file-backed scope"
    )
    storage_key: str = Field(
        default="privlog_logs", description="Namespace key of the persisted buffer"
    )
    ring_buffer_capacity: int = Field(
        default=100, ge=1, description="Maximum number of persisted records"
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0", description="Redis URL for the redis backend"
    )

    # Internal diagnostics
    diagnostics_level: str = Field(
        default="WARNING", description="Level of the library's own diagnostics"
    )
    diagnostics_format: LogFormat = Field(
        default=LogFormat.CONSOLE, description="Renderer for diagnostics"
    )

    @field_validator("min_level", mode="before")
    @classmethod
    def validate_min_level(cls, v: Any) -> Any:
        """Accept level names case-insensitively, including aliases."""
        if v is None or v == "":
            return None
        return Severity.parse(v)

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: Any) -> Any:
        """Normalise the forced classification."""
        if v is None or v == "":
            return None
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("diagnostics_level", mode="before")
    @classmethod
    def validate_diagnostics_level(cls, v: Any) -> str:
        """Validate and convert diagnostics level to uppercase."""
        level = str(v).upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown diagnostics level: {v!r}")
        return level


def _create_renderer(format_type: LogFormat) -> Any:
    """Create the final renderer for the configured format."""
    if format_type == LogFormat.JSON:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(config: LogConfig | None = None) -> None:
    """Attach a stderr handler to the pipeline's diagnostics logger tree.

    Only the ``privlog`` stdlib logger is touched; the host application's
    structlog configuration is left alone. Calling this again replaces the
    previously installed handler. If no config is provided, it will read
    from environment variables.

    Args:
    ----
        config: Logging configuration. If None, reads from environment.

    """
    if config is None:
        config = LogConfig()

    diagnostics_logger = logging.getLogger(DIAGNOSTICS_LOGGER)
    for handler in diagnostics_logger.handlers[:]:
        diagnostics_logger.removeHandler(handler)
    diagnostics_logger.setLevel(config.diagnostics_level)
    diagnostics_logger.propagate = False

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(config.diagnostics_level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_create_renderer(config.diagnostics_format),
            foreign_pre_chain=create_processor_chain(),
        )
    )
    diagnostics_logger.addHandler(handler)

