"""Decrypt-on-read access to the flat key/value configuration.

Every provider credential is read through ConfigAccessor.get(), which
returns plaintext for both plain and ``enc:v1:`` encrypted values. Callers
never branch on whether a value was encrypted.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from polyvoice.logging_config import get_logger
from polyvoice.security.crypto import (
    ENV_FALLBACK_KEY,
    ConfigDecryptError,
    decrypt_value,
    is_encrypted,
)

logger: Any = get_logger(__name__)

# Raw key holding the passphrase. Never itself encrypted.
ENV_CRYPTO_KEY = "ENV_CRYPTO_KEY"


class ConfigAccessor:
    """Read-only view over a raw configuration source with transparent decryption."""

    def __init__(
        self,
        source: Mapping[str, str | None],
        *,
        encryption_key: str | None = None,
    ) -> None:
        self._source = source
        self._encryption_key = encryption_key
        self._warned_fallback_key = False

    @classmethod
    def from_env(
        cls,
        env_file: str | Path | None = ".env",
        environ: Mapping[str, str] | None = None,
    ) -> ConfigAccessor:
        """Build an accessor from a .env file overlaid with the process environment.

        Process environment values win over the file.
        """
        merged: dict[str, str | None] = {}
        if env_file is not None and Path(env_file).is_file():
            merged.update(dotenv_values(env_file))
        merged.update(os.environ if environ is None else environ)
        return cls(merged)

    @property
    def encryption_key(self) -> str:
        """Process-wide passphrase: explicit, then ENV_CRYPTO_KEY, then the weak default."""
        if self._encryption_key:
            return self._encryption_key

        configured = self._source.get(ENV_CRYPTO_KEY) or ""
        if configured:
            return configured

        if not self._warned_fallback_key:
            logger.warning(
                f"{ENV_CRYPTO_KEY} is not set - decrypting with the built-in default key. "
                "Rotate to a private key before shipping encrypted values."
            )
            self._warned_fallback_key = True
        return ENV_FALLBACK_KEY

    def get(self, key: str, default: str = "") -> str:
        """Return the plaintext value for a key.

        Raises:
            ConfigDecryptError: If the value is encrypted and cannot be decrypted
        """
        raw = self._source.get(key)
        if raw is None:
            return default
        if not isinstance(raw, str):
            raw = str(raw)
        if not is_encrypted(raw):
            return raw

        try:
            return decrypt_value(raw, self.encryption_key)
        except ConfigDecryptError as e:
            logger.error(f"Failed to decrypt config value {key}: {e}")
            raise ConfigDecryptError(f"Unable to decrypt config value {key}: {e}", key=key) from e

    def __contains__(self, key: object) -> bool:
        return key in self._source
