"""
Opt-in encryption-at-rest wrapper for any key-value store.

CredentialStore writes plaintext JSON and relies on the backend for
protection. Wrapping the backend in EncryptedKeyValueStore encrypts each
value with AES-256-GCM under a passphrase-derived key before it reaches
the backend. Keys are left as-is.

Envelope format (JSON string):
    {"v": 1, "alg": "AESGCM", "kdf": "pbkdf2-sha256", "salt": ..., "data": ...}
"""

import json

from credstore.errors import SerializationError
from credstore.kv.base import KeyValueStore
from credstore.wallet.encryption import decrypt_value, encrypt_value

ENVELOPE_VERSION = 1
ENVELOPE_ALG = "AESGCM"
ENVELOPE_KDF = "pbkdf2-sha256"


class EncryptedKeyValueStore:
    """Encrypts values on set() and decrypts them on get()."""

    def __init__(self, inner: KeyValueStore, passphrase: str):
        if not passphrase:
            raise ValueError("A non-empty passphrase is required")
        self.inner = inner
        self._passphrase = passphrase

    def _seal(self, value: str) -> str:
        data, salt = encrypt_value(value, self._passphrase)
        return json.dumps(
            {
                "v": ENVELOPE_VERSION,
                "alg": ENVELOPE_ALG,
                "kdf": ENVELOPE_KDF,
                "salt": salt,
                "data": data,
            }
        )

    def _open(self, sealed: str) -> str:
        try:
            envelope = json.loads(sealed)
        except ValueError as e:
            raise SerializationError(f"Encrypted envelope is not valid JSON: {e}") from e

        if not isinstance(envelope, dict):
            raise SerializationError("Encrypted envelope is not a JSON object")
        if envelope.get("alg") != ENVELOPE_ALG or envelope.get("kdf") != ENVELOPE_KDF:
            raise SerializationError("Unsupported encryption format")

        try:
            return decrypt_value(envelope["data"], envelope["salt"], self._passphrase)
        except (KeyError, TypeError, ValueError) as e:
            raise SerializationError(f"Could not decrypt stored value: {e}") from e

    async def get(self, key: str) -> str | None:
        sealed = await self.inner.get(key)
        if sealed is None:
            return None
        return self._open(sealed)

    async def set(self, key: str, value: str) -> None:
        await self.inner.set(key, self._seal(value))

    async def remove(self, key: str) -> None:
        await self.inner.remove(key)
