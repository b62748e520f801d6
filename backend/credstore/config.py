"""
Environment-driven settings and store wiring.

Usage:
    from credstore.config import Settings, create_credential_store
    store = create_credential_store(Settings.from_env())
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from credstore.errors import ConfigError
from credstore.kv.base import KeyValueStore
from credstore.kv.encrypted import EncryptedKeyValueStore
from credstore.kv.files import FileKeyValueStore
from credstore.kv.memory import MemoryKeyValueStore
from credstore.kv.sqlite import SQLiteKeyValueStore
from credstore.paths import (
    DATA_DIR,
    FILES_DIRNAME,
    SQLITE_FILENAME,
    VERIFY_ATTEMPTS,
    VERIFY_DELAY_SECONDS,
    WALLET_SLOT_KEY,
)
from credstore.wallet.storage import CredentialStore, StructuredLogger

# =============================================================================
# CONFIGURATION
# =============================================================================

BACKENDS = ("memory", "sqlite", "file")
DEFAULT_BACKEND = "sqlite"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Settings:
    """Credential store settings."""

    backend: str = DEFAULT_BACKEND
    data_dir: Path = DATA_DIR
    slot_key: str = WALLET_SLOT_KEY
    verify_attempts: int = VERIFY_ATTEMPTS
    verify_delay: float = VERIFY_DELAY_SECONDS
    passphrase: str | None = field(default=None, repr=False)
    log_level: str = "INFO"

    @property
    def encrypted(self) -> bool:
        return bool(self.passphrase)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """
        Build settings from CREDSTORE_* environment variables.

        Raises:
            ConfigError: If a variable has an invalid value
        """
        env = os.environ if environ is None else environ

        backend = env.get("CREDSTORE_BACKEND", DEFAULT_BACKEND).strip().lower()
        if backend not in BACKENDS:
            raise ConfigError(
                f"CREDSTORE_BACKEND must be one of {', '.join(BACKENDS)}, got {backend!r}"
            )

        slot_key = env.get("CREDSTORE_SLOT_KEY", WALLET_SLOT_KEY).strip()
        if not slot_key:
            raise ConfigError("CREDSTORE_SLOT_KEY must not be empty")

        try:
            verify_attempts = int(env.get("CREDSTORE_VERIFY_ATTEMPTS", VERIFY_ATTEMPTS))
            verify_delay = float(env.get("CREDSTORE_VERIFY_DELAY", VERIFY_DELAY_SECONDS))
        except ValueError as e:
            raise ConfigError(f"Invalid read-back setting: {e}") from e
        if verify_attempts < 1:
            raise ConfigError("CREDSTORE_VERIFY_ATTEMPTS must be at least 1")
        if verify_delay < 0:
            raise ConfigError("CREDSTORE_VERIFY_DELAY must not be negative")

        log_level = env.get("CREDSTORE_LOG_LEVEL", "INFO").strip().upper()
        if log_level not in LOG_LEVELS:
            raise ConfigError(f"CREDSTORE_LOG_LEVEL {log_level!r} is not a valid level")

        data_dir_raw = env.get("CREDSTORE_DATA_DIR")
        data_dir = Path(data_dir_raw).expanduser() if data_dir_raw else DATA_DIR

        return cls(
            backend=backend,
            data_dir=data_dir,
            slot_key=slot_key,
            verify_attempts=verify_attempts,
            verify_delay=verify_delay,
            passphrase=env.get("CREDSTORE_PASSPHRASE") or None,
            log_level=log_level,
        )


# =============================================================================
# FACTORIES
# =============================================================================


def create_kv_store(settings: Settings) -> KeyValueStore:
    """Build the configured backend, wrapped for encryption if a passphrase is set."""
    if settings.backend == "memory":
        store: KeyValueStore = MemoryKeyValueStore()
    elif settings.backend == "sqlite":
        store = SQLiteKeyValueStore(settings.data_dir / SQLITE_FILENAME)
    elif settings.backend == "file":
        store = FileKeyValueStore(settings.data_dir / FILES_DIRNAME)
    else:
        raise ConfigError(f"Unknown backend: {settings.backend!r}")

    if settings.encrypted:
        logger.debug("Encryption at rest enabled for credential store")
        store = EncryptedKeyValueStore(store, settings.passphrase)
    return store


def create_credential_store(
    settings: Settings | None = None,
    log: StructuredLogger | None = None,
) -> CredentialStore:
    """Build a CredentialStore for the given (or environment) settings."""
    settings = settings or Settings.from_env()
    return CredentialStore(
        create_kv_store(settings),
        log=log,
        slot_key=settings.slot_key,
        verify_attempts=settings.verify_attempts,
        verify_delay=settings.verify_delay,
    )
