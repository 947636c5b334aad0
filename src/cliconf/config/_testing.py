"""Test utilities for the config module."""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ._schema import reset_default_schema
from ._settings import DEFAULT_PROJECT_MARKER, Settings
from ._types import CryptoError


class FakeCrypto:
    """Reversible, key-free stand-in for ``FernetCrypto``.

    Counts every call so tests can assert the crypto provider was (or was
    not) touched::

        crypto = FakeCrypto()
        config = Config.create(options, crypto_factory=crypto.factory)
        config.write()
        assert crypto.created == 0
    """

    PREFIX = "fake-enc:"

    def __init__(self) -> None:
        self.created = 0
        self.closed = 0
        self.encrypt_calls = 0
        self.decrypt_calls = 0
        self._open = False

    def factory(self) -> "FakeCrypto":
        self.created += 1
        self._open = True
        return self

    @property
    def is_open(self) -> bool:
        return self._open

    def encrypt(self, plaintext: str) -> str:
        self._require_open()
        self.encrypt_calls += 1
        return f"{self.PREFIX}{plaintext[::-1]}"

    def decrypt(self, ciphertext: str) -> str:
        self._require_open()
        self.decrypt_calls += 1
        if not ciphertext.startswith(self.PREFIX):
            raise CryptoError(f"Not a fake ciphertext: {ciphertext!r}")
        return ciphertext[len(self.PREFIX):][::-1]

    def close(self) -> None:
        self.closed += 1
        self._open = False

    def _require_open(self) -> None:
        if not self._open:
            raise CryptoError("FakeCrypto used after close()")


@contextmanager
def isolated_environment(root: Path, *, with_project: bool = True) -> Iterator[Settings]:
    """Point home and project lookups at directories under *root*.

    Creates ``root/home`` and, when *with_project* is set, ``root/project``
    holding the project marker. The working directory moves into the project
    (or *root*) and the default schema cache is reset on both ends.
    """
    home = root / "home"
    project = root / "project"
    home.mkdir(parents=True, exist_ok=True)
    workdir = root
    if with_project:
        project.mkdir(parents=True, exist_ok=True)
        (project / DEFAULT_PROJECT_MARKER).write_text("{}", encoding="utf-8")
        workdir = project

    previous_cwd = Path.cwd()
    reset_default_schema()
    os.chdir(workdir)
    try:
        yield Settings(home=home)
    finally:
        os.chdir(previous_cwd)
        reset_default_schema()
