"""Configuration exceptions: root paths and settings."""

from pathlib import Path
from typing import Any

from .base import DevkitGraphError


class ConfigurationError(DevkitGraphError):
    """Base class for configuration-related errors.

    These are usage errors: the CLI exits with status 2.
    """

    exit_code = 2


class InvalidPathError(ConfigurationError):
    """Raised when a provided path is invalid."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Invalid path: {path}", details={"path": str(path), "reason": reason})
        self.path = path
        self.reason = reason


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason
