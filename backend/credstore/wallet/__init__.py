"""Wallet credential persistence."""

from credstore.wallet.encryption import encrypt_value, decrypt_value
from credstore.wallet.models import WalletCredential, parse_credential, serialize_credential
from credstore.wallet.storage import CredentialStore, SlotState, StructuredLogger

__all__ = [
    "encrypt_value",
    "decrypt_value",
    "WalletCredential",
    "parse_credential",
    "serialize_credential",
    "CredentialStore",
    "SlotState",
    "StructuredLogger",
]
