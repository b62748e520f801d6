"""
On-device storage for the current wallet's address and private key.

Usage:
    from credstore import CredentialStore, WalletCredential
    from credstore.kv import SQLiteKeyValueStore

    store = CredentialStore(SQLiteKeyValueStore(path))
    await store.save(WalletCredential(address="...", private_key="..."))
"""

from credstore.errors import (
    ConfigError,
    CredentialStoreError,
    SerializationError,
    UnderlyingStoreError,
)
from credstore.wallet import CredentialStore, SlotState, WalletCredential

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "CredentialStoreError",
    "SerializationError",
    "UnderlyingStoreError",
    "CredentialStore",
    "SlotState",
    "WalletCredential",
]
