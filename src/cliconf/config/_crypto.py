"""Encryption provider used for encrypted config properties."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Protocol, runtime_checkable

from cryptography.fernet import Fernet, InvalidToken

from ._messages import Messages
from ._settings import Settings
from ._types import CryptoError

logger = logging.getLogger(__name__)

KEY_FILE_NAME = "key"


@runtime_checkable
class CryptoProvider(Protocol):
    """Opaque string encryption with an explicit lifetime.

    A provider is created right before an encrypt/decrypt pass and closed
    right after it.
    """

    def encrypt(self, plaintext: str) -> str:
        ...

    def decrypt(self, ciphertext: str) -> str:
        ...

    def close(self) -> None:
        ...


CryptoFactory = Callable[[], CryptoProvider]


class FernetCrypto:
    """``CryptoProvider`` backed by a Fernet key stored in the state folder.

    The key file is created on first use with owner-only permissions.
    """

    def __init__(self, key: bytes) -> None:
        try:
            self._fernet: Fernet | None = Fernet(key)
        except (ValueError, TypeError) as err:
            raise CryptoError(_core_messages().get_message("InvalidEncryptionKey")) from err

    @classmethod
    def create(cls, key_path: Path) -> "FernetCrypto":
        return cls(load_or_create_key(key_path))

    @classmethod
    def factory(cls, settings: Settings) -> CryptoFactory:
        """Return a zero-argument factory bound to *settings*' key file."""
        key_path = settings.global_state_dir / KEY_FILE_NAME
        return lambda: cls.create(key_path)

    @property
    def closed(self) -> bool:
        return self._fernet is None

    def encrypt(self, plaintext: str) -> str:
        return self._require_fernet().encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        try:
            return self._require_fernet().decrypt(ciphertext.encode("utf-8")).decode("utf-8")
        except InvalidToken as err:
            raise CryptoError(_core_messages().get_message("DecryptionFailed")) from err

    def close(self) -> None:
        self._fernet = None

    def _require_fernet(self) -> Fernet:
        if self._fernet is None:
            raise CryptoError(_core_messages().get_message("MissingEncryptionKey"))
        return self._fernet


def load_or_create_key(key_path: Path) -> bytes:
    """Read the Fernet key at *key_path*, generating it when absent."""
    try:
        return key_path.read_bytes().strip()
    except FileNotFoundError:
        pass
    except OSError as err:
        raise CryptoError(_core_messages().get_message("UnreadableKeyFile", [key_path])) from err

    key_path.parent.mkdir(parents=True, exist_ok=True)
    key = Fernet.generate_key()
    fd = os.open(key_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "wb") as handle:
        handle.write(key)
    logger.info("Generated new config encryption key at %s", key_path)
    return key


def _core_messages() -> Messages:
    return Messages.load("cliconf", "core")
