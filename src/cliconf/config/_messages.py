"""Message bundles for user-facing error text.

Bundles are JSON objects shipped as package data under ``messages/``. Values
use positional ``{0}`` placeholders::

    messages = Messages.load("cliconf", "config")
    messages.get_message("UnknownConfigKey", ["bogusKey"])
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any, Mapping, Sequence


class MissingMessageError(LookupError):
    """Raised when a bundle has no entry for the requested key."""

    def __init__(self, bundle: str, key: str) -> None:
        self.bundle = bundle
        self.key = key
        super().__init__(f"Missing message {bundle}:{key}")


class Messages:
    """Key lookup and token substitution over one loaded bundle."""

    def __init__(self, bundle: str, messages: Mapping[str, str]) -> None:
        self.bundle = bundle
        self._messages = dict(messages)

    @classmethod
    def load(cls, package: str, bundle: str) -> "Messages":
        return cls(bundle, _read_bundle(package, bundle))

    def has(self, key: str) -> bool:
        return key in self._messages

    def get_message(self, key: str, tokens: Sequence[Any] = ()) -> str:
        try:
            template = self._messages[key]
        except KeyError:
            raise MissingMessageError(self.bundle, key) from None
        return template.format(*tokens)


@lru_cache(maxsize=None)
def _read_bundle(package: str, bundle: str) -> Mapping[str, str]:
    resource = resources.files(package).joinpath("messages").joinpath(f"{bundle}.json")
    return json.loads(resource.read_text(encoding="utf-8"))
