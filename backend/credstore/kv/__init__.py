"""Key-value backends for the credential store."""

from credstore.kv.base import KeyValueStore
from credstore.kv.encrypted import EncryptedKeyValueStore
from credstore.kv.files import FileKeyValueStore
from credstore.kv.memory import MemoryKeyValueStore
from credstore.kv.sqlite import SQLiteKeyValueStore

__all__ = [
    "KeyValueStore",
    "EncryptedKeyValueStore",
    "FileKeyValueStore",
    "MemoryKeyValueStore",
    "SQLiteKeyValueStore",
]
