"""JSON-file persistence for a single config file.

Global files live in the home directory's hidden state folder; local files
live in the project root, either in the state folder or under ``file_path``::

    class MyConfig(ConfigFile):
        @classmethod
        def get_file_name(cls) -> str:
            return "my-config.json"

    cfg = MyConfig.create()
    cfg.set("mykey", "myvalue")
    cfg.write()
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, TypeVar

from ._messages import Messages
from ._paths import resolve_project_path
from ._settings import Settings
from ._store import ConfigStore
from ._types import (
    ConfigContents,
    ConfigError,
    ConfigValue,
    InvalidParameterError,
    InvalidTypeError,
    TargetFileNotFoundError,
    UnexpectedFormatError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="ConfigFile")


@dataclass(frozen=True)
class ConfigOptions:
    """Where a config file lives.

    Attributes:
        root_folder: Explicit root; replaces the home/project lookup.
        filename: File name, required.
        is_global: Store under the home directory instead of the project.
        is_state: Store inside the hidden state folder.
        file_path: Sub-directory below the (state) root.
    """

    root_folder: str | Path | None = None
    filename: str | None = None
    is_global: bool = False
    is_state: bool = False
    file_path: str | Path | None = None


class ConfigFile:
    """A JSON config file backed by an in-memory ``ConfigStore``."""

    def __init__(self, path: Path, options: ConfigOptions, settings: Settings) -> None:
        self._path = path
        self._options = options
        self.settings = settings
        self.store = ConfigStore()

    # -- Construction -------------------------------------------------------

    @classmethod
    def get_file_name(cls) -> str:
        raise ConfigError(_core_messages().get_message("UnknownFileName"))

    @classmethod
    def get_default_options(cls, is_global: bool = False, filename: str | None = None) -> ConfigOptions:
        return ConfigOptions(
            is_global=is_global,
            is_state=True,
            filename=filename or cls.get_file_name(),
        )

    @staticmethod
    def resolve_root_folder(is_global: bool, settings: Settings | None = None) -> Path:
        """Return the home directory for global files, else the project root."""
        if not isinstance(is_global, bool):
            raise InvalidTypeError(
                _core_messages().get_message("InvalidTypeForIsGlobal", [type(is_global).__name__])
            )
        settings = settings or Settings.load()
        return settings.home_dir if is_global else resolve_project_path(settings)

    @classmethod
    def resolve_path(cls, options: ConfigOptions, settings: Settings) -> Path:
        if not options.filename or not str(options.filename).strip():
            raise InvalidParameterError(_core_messages().get_message("InvalidFileName"))

        is_global = options.is_global is True
        is_state = options.is_state is True

        if options.root_folder:
            root = Path(options.root_folder)
        else:
            root = cls.resolve_root_folder(is_global, settings)

        # Global files never sit loose in the home directory.
        if is_global or is_state:
            root = root / settings.state_folder

        if options.file_path:
            root = root / options.file_path

        return root / options.filename

    @classmethod
    def create(cls: type[T], options: ConfigOptions | None = None, settings: Settings | None = None) -> T:
        """Create an instance without reading or writing the file."""
        settings = settings or Settings.load()
        options = options or cls.get_default_options()
        path = cls.resolve_path(options, settings)
        logger.debug("Resolved %s path to %s", cls.__name__, path)
        return cls(path, options, settings)

    @classmethod
    def retrieve(cls: type[T], options: ConfigOptions | None = None, settings: Settings | None = None) -> T:
        """Create an instance and read the existing file, if there is one."""
        config = cls.create(options, settings)
        config.read()
        return config

    # -- Filesystem ---------------------------------------------------------

    @property
    def path(self) -> Path:
        return self._path

    @property
    def options(self) -> ConfigOptions:
        return self._options

    def is_global(self) -> bool:
        return self._options.is_global is True

    def access(self, mode: int) -> bool:
        """Return ``True`` if the file grants *mode* (``os.R_OK`` etc.)."""
        try:
            return os.access(self._path, mode)
        except (OSError, ValueError):
            return False

    def exists(self) -> bool:
        return self.access(os.R_OK)

    def stat(self) -> os.stat_result:
        return self._path.stat()

    def unlink(self) -> None:
        if not self.exists():
            raise TargetFileNotFoundError(self._path)
        self._path.unlink()
        logger.debug("Deleted config file %s", self._path)

    def read(self, throw_on_not_found: bool = False) -> ConfigContents:
        """Load the file into the store and return its contents.

        A missing file yields empty contents unless *throw_on_not_found* is
        set, in which case ``FileNotFoundError`` propagates.
        """
        try:
            obj = _read_json_object(self._path)
        except FileNotFoundError:
            if throw_on_not_found:
                raise
            logger.debug("Config file %s not found, using empty contents", self._path)
            self.store.set_contents()
            return self.store.get_contents()

        self.store.set_contents_from_object(obj)
        return self.store.get_contents()

    def write(self, new_contents: Mapping[str, ConfigValue] | None = None) -> ConfigContents:
        """Persist the store, optionally replacing it with *new_contents* first."""
        if new_contents is not None:
            self.store.set_contents(new_contents)

        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self.store.to_object(), indent=4), encoding="utf-8")
        logger.debug("Wrote %d keys to %s", len(self.store), self._path)

        return self.store.get_contents()

    # -- Store pass-through -------------------------------------------------

    def get(self, key: str) -> ConfigValue:
        return self.store.get(key)

    def set(self, key: str, value: ConfigValue) -> ConfigContents:
        self.store.set(key, value)
        return self.store.get_contents()

    def unset(self, key: str) -> bool:
        return self.store.unset(key)

    def has(self, key: str) -> bool:
        return self.store.has(key)

    def clear(self) -> None:
        self.store.clear()

    def get_contents(self) -> ConfigContents:
        return self.store.get_contents()

    def set_contents(self, contents: Mapping[str, ConfigValue] | None = None) -> None:
        self.store.set_contents(contents)

    def to_object(self) -> dict[str, Any]:
        return self.store.to_object()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={str(self._path)!r})"


def _read_json_object(path: Path) -> dict[str, Any]:
    """Parse *path* as a JSON object.

    ``FileNotFoundError`` propagates untouched; every other failure becomes
    ``UnexpectedFormatError``.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except (OSError, UnicodeDecodeError) as err:
        raise UnexpectedFormatError(path, str(err)) from err

    try:
        obj = json.loads(text)
    except json.JSONDecodeError as err:
        raise UnexpectedFormatError(path, str(err)) from err

    if not isinstance(obj, dict):
        raise UnexpectedFormatError(path, f"expected a JSON object, found {type(obj).__name__}")
    return obj


def _core_messages() -> Messages:
    return Messages.load("cliconf", "core")
