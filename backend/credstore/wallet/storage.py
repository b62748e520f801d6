"""
Credential store for the current wallet.

Persists one WalletCredential under a fixed slot of a key-value store.
Operations never raise: failures are logged with the triggering error and
the operation name, and surface as False (save/delete) or None (load).

The private key is stored as plaintext JSON. Protection at rest is the
backend's job; wrap the backend in EncryptedKeyValueStore to encrypt it.
"""

import asyncio
from enum import Enum
from typing import Any, Protocol

from loguru import logger

from credstore.errors import SerializationError
from credstore.kv.base import KeyValueStore
from credstore.paths import VERIFY_ATTEMPTS, VERIFY_DELAY_SECONDS, WALLET_SLOT_KEY
from credstore.wallet.models import (
    WalletCredential,
    parse_credential,
    serialize_credential,
)


class StructuredLogger(Protocol):
    """Logging calls used by the store. loguru's logger satisfies this."""

    def info(self, message: str, *args: Any, **kwargs: Any) -> None: ...

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None: ...

    def error(self, message: str, *args: Any, **kwargs: Any) -> None: ...

    def exception(self, message: str, *args: Any, **kwargs: Any) -> None: ...


class SlotState(str, Enum):
    """Observed state of the wallet slot."""

    EMPTY = "empty"
    PRESENT = "present"
    UNREADABLE = "unreadable"


# =============================================================================
# CREDENTIAL STORE
# =============================================================================


class CredentialStore:
    """
    Save, load and delete the current wallet credential.

    Concurrent saves are last-writer-wins at the backend's discretion; no
    locking is added here.
    """

    def __init__(
        self,
        kv_store: KeyValueStore,
        log: StructuredLogger | None = None,
        slot_key: str = WALLET_SLOT_KEY,
        verify_attempts: int = VERIFY_ATTEMPTS,
        verify_delay: float = VERIFY_DELAY_SECONDS,
    ):
        """
        Args:
            kv_store: Underlying persistent key-value store.
            log: Logger for outcomes. Defaults to loguru bound to this component.
            slot_key: Key name of the fixed wallet slot.
            verify_attempts: Read-back attempts after save/delete (>= 1).
            verify_delay: Seconds to wait between read-back attempts.
        """
        if not slot_key:
            raise ValueError("slot_key must not be empty")
        if verify_attempts < 1:
            raise ValueError("verify_attempts must be at least 1")
        if verify_delay < 0:
            raise ValueError("verify_delay must not be negative")

        self._kv = kv_store
        self._log = log if log is not None else logger.bind(component="credential_store")
        self.slot_key = slot_key
        self.verify_attempts = verify_attempts
        self.verify_delay = verify_delay

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    async def save(self, credential: WalletCredential) -> bool:
        """
        Write the credential to the slot, replacing any previous one.

        Returns:
            True if the write succeeded, False otherwise
        """
        try:
            if not credential.address:
                raise ValueError("Wallet address must not be empty")
            payload = serialize_credential(credential)
            self._log.info(
                f"Saving wallet credential: address={credential.address}, "
                f"private_key_length={credential.private_key_length}"
            )
            await self._kv.set(self.slot_key, payload)
        except Exception as e:
            self._log_failure("save", e)
            return False

        read_ok, stored = await self._read_back(expect_present=True)
        if not read_ok:
            return True
        if stored is None:
            self._log.warning(f"Save read-back for slot '{self.slot_key}': no data found")
        elif stored != payload:
            self._log.warning(
                f"Save read-back for slot '{self.slot_key}': "
                "stored record differs from the one written"
            )
        else:
            self._log.info(f"Save read-back for slot '{self.slot_key}': data found")
        return True

    async def load(self) -> WalletCredential | None:
        """
        Read the credential from the slot.

        Returns:
            The stored credential, or None if there is none or it cannot be read
        """
        try:
            raw = await self._kv.get(self.slot_key)
            if raw is None:
                self._log.info(f"No wallet credential found in slot '{self.slot_key}'")
                return None
            self._log.info(f"Wallet credential record found in slot '{self.slot_key}'")
            credential = parse_credential(raw)
        except Exception as e:
            self._log_failure("load", e)
            return None

        self._log.info(
            f"Loaded wallet credential: address={credential.address}, "
            f"private_key_length={credential.private_key_length}"
        )
        return credential

    async def delete(self) -> bool:
        """
        Remove the credential from the slot. Deleting an empty slot succeeds.

        Returns:
            True if the removal call completed, False otherwise
        """
        self._log.info(f"Deleting wallet credential from slot '{self.slot_key}'")
        try:
            await self._kv.remove(self.slot_key)
        except Exception as e:
            self._log_failure("delete", e)
            return False

        read_ok, stored = await self._read_back(expect_present=False)
        if read_ok and stored is None:
            self._log.info(f"Delete verified: slot '{self.slot_key}' is empty")
        elif read_ok:
            self._log.warning(f"Delete read-back: slot '{self.slot_key}' still holds data")
        return True

    async def slot_state(self) -> SlotState:
        """Report whether the slot is empty, holds a record, or is unreadable."""
        try:
            raw = await self._kv.get(self.slot_key)
        except Exception as e:
            self._log.warning(f"Could not read slot '{self.slot_key}': {e}")
            return SlotState.UNREADABLE

        if raw is None:
            return SlotState.EMPTY
        try:
            parse_credential(raw)
        except SerializationError as e:
            self._log.warning(f"Slot '{self.slot_key}' holds an unreadable record: {e}")
            return SlotState.UNREADABLE
        return SlotState.PRESENT

    async def exists(self) -> bool:
        """True if the slot holds anything, readable or not."""
        return await self.slot_state() != SlotState.EMPTY

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _read_back(self, expect_present: bool) -> tuple[bool, str | None]:
        """
        Read the slot after a write or delete, for diagnostics only.

        Retries while the slot does not yet match the expected state.

        Returns:
            Tuple of (read_ok, stored_value). read_ok is False if the read
            itself failed.
        """
        stored = None
        for attempt in range(1, self.verify_attempts + 1):
            try:
                stored = await self._kv.get(self.slot_key)
            except Exception as e:
                self._log.warning(f"Read-back of slot '{self.slot_key}' failed: {e}")
                return False, None

            if (stored is not None) == expect_present:
                return True, stored
            if attempt < self.verify_attempts:
                self._log.warning(
                    f"Read-back attempt {attempt}/{self.verify_attempts} "
                    f"for slot '{self.slot_key}' did not match, retrying"
                )
                await asyncio.sleep(self.verify_delay)
        return True, stored

    def _log_failure(self, function_name: str, error: Exception) -> None:
        self._log.exception(
            "Credential store operation failed in {function_name}: {error!r}",
            function_name=function_name,
            error=error,
        )
