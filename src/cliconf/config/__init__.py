"""JSON-file config persistence with schema validation and encrypted fields.

``ConfigFile`` reads and writes one JSON file in the global (home) or local
(project) state folder. ``Config`` adds an allow-list of keys, per-key
validation, and transparent encryption of sensitive values.
"""

from ._config import (
    CONFIG_FILE_NAME,
    Config,
    OrgDefault,
    apply_decryption,
    apply_encryption,
)
from ._config_file import ConfigFile, ConfigOptions
from ._crypto import CryptoProvider, FernetCrypto
from ._messages import Messages, MissingMessageError
from ._schema import (
    ConfigPropertyInput,
    ConfigPropertyMeta,
    ConfigSchema,
    build_default_schema,
)
from ._settings import Settings
from ._store import ConfigStore
from ._testing import FakeCrypto, isolated_environment
from ._types import (
    ConfigContents,
    ConfigError,
    ConfigValue,
    CryptoError,
    InvalidConfigValueError,
    InvalidParameterError,
    InvalidProjectWorkspaceError,
    InvalidTypeError,
    SchemaNotInitializedError,
    TargetFileNotFoundError,
    UnexpectedFormatError,
    UnknownConfigKeyError,
)

__all__ = [
    # Core
    "Config",
    "ConfigFile",
    "ConfigOptions",
    "ConfigStore",
    "CONFIG_FILE_NAME",
    "OrgDefault",
    "Settings",
    "ConfigContents",
    "ConfigValue",
    # Schema
    "ConfigSchema",
    "ConfigPropertyMeta",
    "ConfigPropertyInput",
    "build_default_schema",
    # Encryption
    "CryptoProvider",
    "FernetCrypto",
    "apply_encryption",
    "apply_decryption",
    # Messages
    "Messages",
    "MissingMessageError",
    # Errors
    "ConfigError",
    "CryptoError",
    "InvalidConfigValueError",
    "InvalidParameterError",
    "InvalidProjectWorkspaceError",
    "InvalidTypeError",
    "SchemaNotInitializedError",
    "TargetFileNotFoundError",
    "UnexpectedFormatError",
    "UnknownConfigKeyError",
    # Testing
    "FakeCrypto",
    "isolated_environment",
]
