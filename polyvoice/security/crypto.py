"""Encryption helpers for secret configuration values.

Encrypted values look like ``enc:v1:<payload>`` where the payload is the
OpenSSL/CryptoJS passphrase format:

    base64("Salted__" + salt[8] + AES-256-CBC(PKCS7(plaintext)))

with key and IV derived from the passphrase and salt by EVP_BytesToKey
(MD5, one round). Values produced by ``CryptoJS.AES.encrypt(text, key)``
and ``openssl enc -aes-256-cbc -md md5 -a`` decrypt here unchanged.

The plaintext must start with ``__ENV__::``. The marker is the integrity
check: CBC without a MAC will happily "decrypt" with the wrong key, so a
plaintext lacking the marker is treated as corrupt.

CRITICAL: Never log a decrypted value. Use mask_secret() for logging.
"""

import base64
import hashlib
import os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

ENV_CIPHER_PREFIX = "enc:v1:"
ENV_VALUE_MARKER = "__ENV__::"

# Weak on purpose: only used when ENV_CRYPTO_KEY is not configured.
ENV_FALLBACK_KEY = "msc_aes256_env_key_2026_q1_rotate_in_prod"

_SALT_HEADER = b"Salted__"
_SALT_SIZE = 8
_KEY_SIZE = 32
_IV_SIZE = 16


class ConfigDecryptError(ValueError):
    """Raised when an encrypted configuration value cannot be decrypted."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


def is_encrypted(value: object) -> bool:
    """Check whether a raw configuration value carries the cipher prefix."""
    return isinstance(value, str) and value.startswith(ENV_CIPHER_PREFIX)


def derive_key_and_iv(passphrase: bytes, salt: bytes) -> tuple[bytes, bytes]:
    """OpenSSL EVP_BytesToKey with MD5 and a single iteration.

    Returns:
        Tuple of (32-byte AES key, 16-byte IV)
    """
    derived = b""
    block = b""
    while len(derived) < _KEY_SIZE + _IV_SIZE:
        block = hashlib.md5(block + passphrase + salt).digest()  # noqa: S324
        derived += block
    return derived[:_KEY_SIZE], derived[_KEY_SIZE : _KEY_SIZE + _IV_SIZE]


def encrypt_value(plaintext: str, passphrase: str) -> str:
    """Encrypt a configuration value so ConfigAccessor can read it back.

    Use this to produce values for the .env file:
        polyvoice encrypt "sk-..." --key "$ENV_CRYPTO_KEY"

    Returns:
        ``enc:v1:`` prefixed payload
    """
    salt = os.urandom(_SALT_SIZE)
    key, iv = derive_key_and_iv(passphrase.encode(), salt)

    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update((ENV_VALUE_MARKER + plaintext).encode()) + padder.finalize()

    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()

    payload = base64.b64encode(_SALT_HEADER + salt + ciphertext).decode()
    return f"{ENV_CIPHER_PREFIX}{payload}"


def decrypt_value(value: str, passphrase: str) -> str:
    """Decrypt an ``enc:v1:`` value; other values pass through unchanged.

    Args:
        value: Raw configuration value
        passphrase: Process-wide encryption passphrase

    Returns:
        Plaintext with the integrity marker removed. An empty payload
        (``enc:v1:`` alone) decrypts to an empty string.

    Raises:
        ConfigDecryptError: Wrong key, corrupted payload, or missing marker
    """
    if not is_encrypted(value):
        return value

    payload = value[len(ENV_CIPHER_PREFIX) :]
    if not payload:
        return ""

    try:
        raw = base64.b64decode(payload, validate=True)
    except ValueError as e:
        raise ConfigDecryptError("Encrypted value is not valid base64.") from e

    if not raw.startswith(_SALT_HEADER) or len(raw) <= len(_SALT_HEADER) + _SALT_SIZE:
        raise ConfigDecryptError("Encrypted value is missing its salt header.")

    salt = raw[len(_SALT_HEADER) : len(_SALT_HEADER) + _SALT_SIZE]
    ciphertext = raw[len(_SALT_HEADER) + _SALT_SIZE :]
    key, iv = derive_key_and_iv(passphrase.encode(), salt)

    try:
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        decrypted = (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")
    except ValueError as e:
        # Bad block length, bad padding and malformed UTF-8 all land here
        raise ConfigDecryptError("Unable to decrypt encrypted env value.") from e

    if not decrypted.startswith(ENV_VALUE_MARKER):
        raise ConfigDecryptError("Unable to decrypt encrypted env value.")

    return decrypted[len(ENV_VALUE_MARKER) :]


def generate_passphrase() -> str:
    """Generate a new random passphrase for ENV_CRYPTO_KEY.

    Use this to generate a value for the .env file:
        polyvoice encrypt --generate-key
    """
    return os.urandom(32).hex()
