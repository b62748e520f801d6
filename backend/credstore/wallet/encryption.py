"""AES-256-GCM encryption for stored values."""

import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives import hashes

SALT_BYTES = 16
NONCE_BYTES = 12
KDF_ITERATIONS = 100_000


def _derive_key(passphrase: str, salt: bytes) -> bytes:
    """Derive 256-bit key from passphrase using PBKDF2."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=KDF_ITERATIONS,
    )
    return kdf.derive(passphrase.encode())


def encrypt_value(plaintext: str, passphrase: str) -> tuple[str, str]:
    """
    Encrypt a value with a passphrase.

    Returns:
        Tuple of (encrypted_b64, salt_b64). The nonce is prepended to the
        ciphertext before encoding.
    """
    salt = os.urandom(SALT_BYTES)
    key = _derive_key(passphrase, salt)

    aesgcm = AESGCM(key)
    nonce = os.urandom(NONCE_BYTES)

    ciphertext = aesgcm.encrypt(nonce, plaintext.encode(), None)
    encrypted = nonce + ciphertext

    return base64.b64encode(encrypted).decode(), base64.b64encode(salt).decode()


def decrypt_value(encrypted_b64: str, salt_b64: str, passphrase: str) -> str:
    """
    Decrypt a value with a passphrase.

    Raises:
        ValueError: If the passphrase is wrong or the data is damaged
    """
    try:
        encrypted = base64.b64decode(encrypted_b64, validate=True)
        salt = base64.b64decode(salt_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("Encrypted value is not valid base64") from e

    if len(encrypted) <= NONCE_BYTES:
        raise ValueError("Encrypted value is truncated")

    key = _derive_key(passphrase, salt)
    nonce = encrypted[:NONCE_BYTES]
    ciphertext = encrypted[NONCE_BYTES:]

    aesgcm = AESGCM(key)
    try:
        plaintext = aesgcm.decrypt(nonce, ciphertext, None)
    except InvalidTag:
        raise ValueError("Invalid passphrase")
    return plaintext.decode()
