"""Ordered in-memory key/value store backing every config file."""

from __future__ import annotations

from typing import Any, Callable, Iterator, Mapping

from ._types import ConfigContents, ConfigValue


class ConfigStore:
    """Insertion-ordered mapping of config keys to values.

    >>> store = ConfigStore({"a": "1"})
    >>> store.set("b", True)
    >>> store.to_object()
    {'a': '1', 'b': True}
    """

    def __init__(self, contents: Mapping[str, ConfigValue] | None = None) -> None:
        self._contents: ConfigContents = dict(contents or {})

    # -- Single entries -----------------------------------------------------

    def get(self, key: str, default: ConfigValue = None) -> ConfigValue:
        return self._contents.get(key, default)

    def set(self, key: str, value: ConfigValue) -> None:
        self._contents[key] = value

    def unset(self, key: str) -> bool:
        """Remove *key*; return ``True`` if it was present."""
        return self._contents.pop(key, _MISSING) is not _MISSING

    def has(self, key: str) -> bool:
        return key in self._contents

    # -- Iteration ----------------------------------------------------------

    def keys(self) -> list[str]:
        return list(self._contents)

    def values(self) -> list[ConfigValue]:
        return list(self._contents.values())

    def entries(self) -> list[tuple[str, ConfigValue]]:
        return list(self._contents.items())

    def for_each(self, fn: Callable[[str, ConfigValue], Any]) -> None:
        for key, value in self.entries():
            fn(key, value)

    # -- Whole contents -----------------------------------------------------

    def clear(self) -> None:
        self._contents.clear()

    def get_contents(self) -> ConfigContents:
        """Return a snapshot of the current contents."""
        return dict(self._contents)

    def set_contents(self, contents: Mapping[str, ConfigValue] | None = None) -> None:
        self._contents = dict(contents or {})

    def set_contents_from_object(self, obj: Mapping[str, Any]) -> None:
        self._contents = {str(key): value for key, value in obj.items()}

    def to_object(self) -> dict[str, Any]:
        return dict(self._contents)

    # -- Python protocol ----------------------------------------------------

    def __contains__(self, key: object) -> bool:
        return key in self._contents

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._contents))

    def __len__(self) -> int:
        return len(self._contents)

    def __repr__(self) -> str:
        return f"ConfigStore(keys={self.keys()!r})"


_MISSING = object()
