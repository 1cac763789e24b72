"""Secret handling for configuration values."""

from polyvoice.security.crypto import (
    ENV_CIPHER_PREFIX,
    ENV_FALLBACK_KEY,
    ENV_VALUE_MARKER,
    ConfigDecryptError,
    decrypt_value,
    encrypt_value,
    generate_passphrase,
    is_encrypted,
)

__all__ = [
    "ENV_CIPHER_PREFIX",
    "ENV_FALLBACK_KEY",
    "ENV_VALUE_MARKER",
    "ConfigDecryptError",
    "decrypt_value",
    "encrypt_value",
    "generate_passphrase",
    "is_encrypted",
]
