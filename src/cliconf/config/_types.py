"""Foundation types for the config module.

Provides the value aliases shared by every layer and the exception classes.
"""

from __future__ import annotations

from typing import Dict, Optional, Union

ConfigValue = Optional[Union[str, bool, int, float]]
ConfigContents = Dict[str, ConfigValue]


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Base exception for config-related errors.

    ``name`` identifies the kind of failure so callers can branch on it
    without importing every subclass.
    """

    name: str = "ConfigError"

    def __init__(self, message: str, name: str | None = None) -> None:
        if name is not None:
            self.name = name
        self.message = message
        super().__init__(message)


class InvalidTypeError(ConfigError):
    """Raised when ``is_global`` is not a boolean."""

    name = "InvalidTypeForIsGlobal"


class InvalidParameterError(ConfigError):
    """Raised when the config options carry no usable filename."""

    name = "InvalidParameter"


class UnexpectedFormatError(ConfigError):
    """Raised when a config file exists but cannot be read as a JSON object."""

    name = "UnexpectedJsonFileFormat"

    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        super().__init__(f"Unexpected file format for {path}: {reason}")


class UnknownConfigKeyError(ConfigError):
    """Raised when a key is not part of the config schema."""

    name = "UnknownConfigKey"

    def __init__(self, key: str, message: str | None = None) -> None:
        self.key = key
        super().__init__(message or f"Unknown config name '{key}'.")


class InvalidConfigValueError(ConfigError):
    """Raised when a value fails its property's validator."""

    name = "InvalidConfigValue"

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(message)


class TargetFileNotFoundError(ConfigError):
    """Raised when deleting a config file that does not exist."""

    name = "TargetFileNotFound"

    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(f"Target file doesn't exist. path: {path}")


class SchemaNotInitializedError(ConfigError):
    """Raised when the default schema is requested before any ``Config.create``."""

    name = "SchemaNotInitialized"

    def __init__(self) -> None:
        super().__init__("Config meta information has not been initialized. Use Config.create()")


class InvalidProjectWorkspaceError(ConfigError):
    """Raised when no project root can be found above the working directory."""

    name = "InvalidProjectWorkspace"

    def __init__(self, start: object, marker: str) -> None:
        self.start = start
        self.marker = marker
        super().__init__(f"{start} does not contain {marker} and no parent directory does either.")


class CryptoError(ConfigError):
    """Raised when a value cannot be encrypted or decrypted."""

    name = "CryptoError"
