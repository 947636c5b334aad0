"""Schema-aware config files with transparent encryption.

``Config`` composes a ``ConfigFile`` with a ``ConfigSchema``: only schema keys
may be set, values pass their property's validator, and properties flagged
``encrypted`` are stored as ciphertext on disk while staying plaintext in
memory::

    local = Config.retrieve()
    local.set("defaultusername", "me@example.com")
    local.write()

Crypto handles are created only when an encrypted property is present and
are closed at the end of every ``read`` / ``write``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, ClassVar, Iterator, Mapping

from ._config_file import ConfigFile, ConfigOptions
from ._crypto import CryptoFactory, CryptoProvider, FernetCrypto
from ._messages import Messages
from ._schema import (
    DEFAULT_DEV_HUB_USERNAME,
    DEFAULT_USERNAME,
    ConfigPropertyMeta,
    ConfigSchema,
    get_default_schema,
    load_default_schema,
)
from ._settings import Settings
from ._types import ConfigContents, ConfigValue, InvalidConfigValueError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "cliconf-config.json"


# ---------------------------------------------------------------------------
# Pure transforms
# ---------------------------------------------------------------------------


def _apply(
    contents: Mapping[str, ConfigValue],
    schema: ConfigSchema,
    transform: Callable[[str], str],
) -> ConfigContents:
    result: ConfigContents = {}
    for key, value in contents.items():
        if value is not None and schema.is_encrypted(key):
            result[key] = transform(str(value))
        else:
            result[key] = value
    return result


def apply_encryption(
    contents: Mapping[str, ConfigValue],
    schema: ConfigSchema,
    crypto: CryptoProvider,
) -> ConfigContents:
    """Return a copy of *contents* with every encrypted property encrypted."""
    return _apply(contents, schema, crypto.encrypt)


def apply_decryption(
    contents: Mapping[str, ConfigValue],
    schema: ConfigSchema,
    crypto: CryptoProvider,
) -> ConfigContents:
    """Return a copy of *contents* with every encrypted property decrypted."""
    return _apply(contents, schema, crypto.decrypt)


def has_encrypted_entries(contents: Mapping[str, ConfigValue], schema: ConfigSchema) -> bool:
    return any(value is not None and schema.is_encrypted(key) for key, value in contents.items())


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


class Config:
    """The global and project-local config files of the CLI.

    Use ``Config.create`` or ``Config.retrieve``; the constructor expects an
    already resolved ``ConfigFile``.
    """

    file_class: ClassVar[type[ConfigFile]] = ConfigFile

    def __init__(
        self,
        file: ConfigFile,
        schema: ConfigSchema,
        crypto_factory: CryptoFactory,
        messages: Messages,
    ) -> None:
        self._file = file
        self.schema = schema
        self._crypto_factory = crypto_factory
        self._crypto: CryptoProvider | None = None
        self._messages = messages

    # -- Construction -------------------------------------------------------

    @classmethod
    def get_file_name(cls) -> str:
        return CONFIG_FILE_NAME

    @classmethod
    def get_default_options(cls, is_global: bool = False, filename: str | None = None) -> ConfigOptions:
        return cls.file_class.get_default_options(is_global, filename or cls.get_file_name())

    @classmethod
    def create(
        cls,
        options: ConfigOptions | None = None,
        *,
        schema: ConfigSchema | None = None,
        crypto_factory: CryptoFactory | None = None,
        settings: Settings | None = None,
    ) -> "Config":
        """Resolve the file path without reading or writing the file.

        The default schema is built on the first call and reused afterwards.
        """
        settings = settings or Settings.load()
        default_schema = load_default_schema()
        file = cls.file_class.create(options or cls.get_default_options(), settings)
        return cls(
            file,
            schema or default_schema,
            crypto_factory or FernetCrypto.factory(settings),
            Messages.load("cliconf", "config"),
        )

    @classmethod
    def retrieve(cls, options: ConfigOptions | None = None, **kwargs) -> "Config":
        config = cls.create(options, **kwargs)
        config.read()
        return config

    @classmethod
    def get_allowed_properties(cls) -> tuple[ConfigPropertyMeta, ...]:
        """Return the default schema's properties.

        Raises ``SchemaNotInitializedError`` before the first ``create``.
        """
        return get_default_schema().properties

    # -- Class-level helpers ------------------------------------------------

    @classmethod
    def update(
        cls,
        is_global: bool,
        key: str,
        value: ConfigValue = None,
        **kwargs,
    ) -> ConfigContents:
        """Set *key* (or delete it when *value* is ``None``) and persist."""
        config = cls.create(cls.get_default_options(is_global), **kwargs)
        config.read()

        if value is None:
            config.get_property_config(key)
            config.unset(key)
        else:
            config.set(key, value)

        return config.write()

    @classmethod
    def clear_all(cls, **kwargs) -> None:
        """Clear and persist both the global and the local config files."""
        for is_global in (True, False):
            config = cls.create(cls.get_default_options(is_global), **kwargs)
            config.clear()
            config.write()

    # -- Properties ---------------------------------------------------------

    @property
    def file(self) -> ConfigFile:
        return self._file

    @property
    def path(self) -> Path:
        return self._file.path

    def is_global(self) -> bool:
        return self._file.is_global()

    def exists(self) -> bool:
        return self._file.exists()

    def unlink(self) -> None:
        self._file.unlink()

    # -- Contents -----------------------------------------------------------

    def get(self, key: str) -> ConfigValue:
        self.get_property_config(key)
        return self._file.get(key)

    def set(self, key: str, value: ConfigValue) -> ConfigContents:
        """Validate and store *value*; return the full contents."""
        prop = self.get_property_config(key)

        if not prop.is_valid(value):
            failed_message = prop.input.failed_message if prop.input else ""
            raise InvalidConfigValueError(
                key, self._messages.get_message("InvalidConfigValue", [failed_message])
            )

        if prop.encrypted and value is not None and not isinstance(value, str):
            raise InvalidConfigValueError(
                key, self._messages.get_message("EncryptedValueMustBeString", [key])
            )

        return self._file.set(prop.key, value)

    def unset(self, key: str) -> bool:
        return self._file.unset(key)

    def clear(self) -> None:
        self._file.clear()

    def get_contents(self) -> ConfigContents:
        return self._file.get_contents()

    def get_property_config(self, key: str) -> ConfigPropertyMeta:
        return self.schema.get(key)

    # -- Persistence --------------------------------------------------------

    def read(self) -> ConfigContents:
        """Read the file and decrypt encrypted properties in memory."""
        with self._crypto_scope():
            self._file.read()
            self.crypt_properties(encrypt=False)
        return self.get_contents()

    def write(self, new_contents: Mapping[str, ConfigValue] | None = None) -> ConfigContents:
        """Encrypt, persist, then restore the plaintext view in memory."""
        if new_contents is not None:
            self._file.set_contents(new_contents)

        with self._crypto_scope():
            self.crypt_properties(encrypt=True)
            try:
                self._file.write()
            finally:
                self.crypt_properties(encrypt=False)

        return self.get_contents()

    def crypt_properties(self, encrypt: bool) -> None:
        """Encrypt or decrypt every flagged entry in place.

        No crypto handle is created when nothing is flagged.
        """
        contents = self._file.get_contents()
        if not has_encrypted_entries(contents, self.schema):
            return

        crypto = self._init_crypto()
        transform = apply_encryption if encrypt else apply_decryption
        self._file.set_contents(transform(contents, self.schema, crypto))

    # -- Crypto lifecycle ---------------------------------------------------

    def _init_crypto(self) -> CryptoProvider:
        if self._crypto is None:
            logger.debug("Opening crypto handle for %s", self._file.path)
            self._crypto = self._crypto_factory()
        return self._crypto

    def _clear_crypto(self) -> None:
        if self._crypto is not None:
            crypto, self._crypto = self._crypto, None
            crypto.close()
            logger.debug("Closed crypto handle for %s", self._file.path)

    @contextmanager
    def _crypto_scope(self) -> Iterator[None]:
        try:
            yield
        finally:
            self._clear_crypto()

    def __repr__(self) -> str:
        return f"Config(path={str(self._file.path)!r})"


class OrgDefault:
    """Config keys holding default org usernames."""

    DEVHUB = DEFAULT_DEV_HUB_USERNAME
    USERNAME = DEFAULT_USERNAME

    @classmethod
    def list(cls) -> list[str]:
        return [cls.DEVHUB, cls.USERNAME]
