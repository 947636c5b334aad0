"""Allowed config properties and their validation metadata.

A ``ConfigSchema`` is an immutable, ordered set of ``ConfigPropertyMeta``.
``Config`` receives one at construction; when none is given it uses the
default schema, built on first use and cached for the process.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Any, Callable, Mapping
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ._messages import Messages
from ._types import SchemaNotInitializedError, UnknownConfigKeyError

# ---------------------------------------------------------------------------
# Property keys
# ---------------------------------------------------------------------------

INSTANCE_URL = "instanceUrl"
API_VERSION = "apiVersion"
DEFAULT_DEV_HUB_USERNAME = "defaultdevhubusername"
DEFAULT_USERNAME = "defaultusername"
ISV_DEBUGGER_SID = "isvDebuggerSid"
ISV_DEBUGGER_URL = "isvDebuggerUrl"
REST_DEPLOY = "restDeploy"
USE_BACKUP_POLLING_ORG_CREATE = "useBackupPolling.org:create"


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class ConfigPropertyInput(BaseModel):
    """Input validation for one property."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    validator: Callable[[Any], bool]
    failed_message: str


class ConfigPropertyMeta(BaseModel):
    """Schema entry for one allowed config key."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: str = Field(min_length=1)
    input: ConfigPropertyInput | None = None
    hidden: bool = False
    encrypted: bool = False

    def is_valid(self, value: Any) -> bool:
        """Properties without a validator accept any value."""
        if self.input is None:
            return True
        return bool(self.input.validator(value))


class ConfigSchema(BaseModel):
    """Ordered, immutable collection of allowed properties."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    properties: tuple[ConfigPropertyMeta, ...] = ()

    @model_validator(mode="after")
    def _unique_keys(self) -> "ConfigSchema":
        seen: set[str] = set()
        for prop in self.properties:
            if prop.key in seen:
                raise ValueError(f"Duplicate config property {prop.key!r}")
            seen.add(prop.key)
        return self

    @property
    def by_key(self) -> Mapping[str, ConfigPropertyMeta]:
        return MappingProxyType({prop.key: prop for prop in self.properties})

    def keys(self) -> list[str]:
        return [prop.key for prop in self.properties]

    def find(self, key: str) -> ConfigPropertyMeta | None:
        return self.by_key.get(key)

    def get(self, key: str) -> ConfigPropertyMeta:
        prop = self.find(key)
        if prop is None:
            raise UnknownConfigKeyError(key, _config_messages().get_message("UnknownConfigKey", [key]))
        return prop

    def is_encrypted(self, key: str) -> bool:
        """Keys outside the schema are never encrypted."""
        prop = self.find(key)
        return prop is not None and prop.encrypted

    def encrypted_keys(self) -> list[str]:
        return [prop.key for prop in self.properties if prop.encrypted]

    def __contains__(self, key: object) -> bool:
        return key in self.by_key


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------

INSTANCE_DOMAINS = (
    ".salesforce.com",
    ".force.com",
    ".cloudforce.com",
    ".database.com",
    ".salesforce.mil",
    ".salesforce-sites.com",
)

_API_VERSION_RE = re.compile(r"^[1-9]\d*\.0$")


def is_instance_url(value: Any) -> bool:
    """Return ``True`` for an http(s) URL on a known instance domain.

    ``localhost`` and internal hosts are accepted for local development.
    """
    if not isinstance(value, str):
        return False
    parsed = urlparse(value if "://" in value else f"https://{value}")
    if parsed.scheme not in ("http", "https"):
        return False
    host = (parsed.hostname or "").lower()
    if not host:
        return False
    if host == "localhost" or host.endswith(".internal"):
        return True
    return any(host.endswith(domain) for domain in INSTANCE_DOMAINS)


def is_api_version(value: Any) -> bool:
    return isinstance(value, str) and bool(_API_VERSION_RE.match(value))


def is_boolean_value(value: Any) -> bool:
    if isinstance(value, bool):
        return True
    return value is not None and str(value) in ("true", "false")


def is_boolean_string_or_unset(value: Any) -> bool:
    return value is None or value in ("true", "false")


# ---------------------------------------------------------------------------
# Default schema
# ---------------------------------------------------------------------------


def build_default_schema(messages: Messages | None = None) -> ConfigSchema:
    """Construct the built-in property list with localized failure messages."""
    messages = messages or _config_messages()
    return ConfigSchema(
        properties=(
            ConfigPropertyMeta(
                key=INSTANCE_URL,
                input=ConfigPropertyInput(
                    # An unset value is always allowed.
                    validator=lambda value: value is None or is_instance_url(value),
                    failed_message=messages.get_message("InvalidInstanceUrl"),
                ),
            ),
            ConfigPropertyMeta(
                key=API_VERSION,
                hidden=True,
                input=ConfigPropertyInput(
                    validator=lambda value: value is None or is_api_version(value),
                    failed_message=messages.get_message("InvalidApiVersion"),
                ),
            ),
            ConfigPropertyMeta(key=DEFAULT_DEV_HUB_USERNAME),
            ConfigPropertyMeta(key=DEFAULT_USERNAME),
            ConfigPropertyMeta(key=ISV_DEBUGGER_SID, encrypted=True),
            ConfigPropertyMeta(key=ISV_DEBUGGER_URL),
            ConfigPropertyMeta(
                key=REST_DEPLOY,
                hidden=True,
                input=ConfigPropertyInput(
                    validator=is_boolean_value,
                    failed_message=messages.get_message("InvalidBooleanConfigValue"),
                ),
            ),
            ConfigPropertyMeta(
                key=USE_BACKUP_POLLING_ORG_CREATE,
                input=ConfigPropertyInput(
                    validator=is_boolean_string_or_unset,
                    failed_message=messages.get_message(
                        "InvalidBackupPollingValue", [USE_BACKUP_POLLING_ORG_CREATE]
                    ),
                ),
            ),
        )
    )


_default_schema: ConfigSchema | None = None


def load_default_schema() -> ConfigSchema:
    """Return the default schema, building it on the first call only."""
    global _default_schema
    if _default_schema is None:
        _default_schema = build_default_schema()
    return _default_schema


def get_default_schema() -> ConfigSchema:
    """Return the default schema; fails before any ``load_default_schema``."""
    if _default_schema is None:
        raise SchemaNotInitializedError()
    return _default_schema


def reset_default_schema() -> None:
    """Forget the cached default schema. Intended for tests."""
    global _default_schema
    _default_schema = None


def _config_messages() -> Messages:
    return Messages.load("cliconf", "config")
