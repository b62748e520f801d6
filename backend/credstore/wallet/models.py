"""Wallet credential record and its stored JSON form."""

import json
from dataclasses import dataclass, field
from typing import TypedDict

from credstore.errors import SerializationError


class StoredCredential(TypedDict):
    address: str
    privateKey: str | None


@dataclass(frozen=True)
class WalletCredential:
    """
    Address and private key of the current wallet.

    The private key is excluded from repr() so a credential can be passed
    around (and accidentally printed) without leaking it.
    """

    address: str
    private_key: str | None = field(default=None, repr=False)

    @property
    def private_key_length(self) -> int:
        """Length of the private key, safe to log."""
        return len(self.private_key) if self.private_key else 0


def serialize_credential(credential: WalletCredential) -> str:
    """
    Serialize a credential to the stored JSON string.

    Raises:
        SerializationError: If the credential fields are not strings
    """
    if not isinstance(credential.address, str):
        raise SerializationError(
            f"address must be a string, got {type(credential.address).__name__}"
        )
    if credential.private_key is not None and not isinstance(credential.private_key, str):
        raise SerializationError(
            f"private key must be a string, got {type(credential.private_key).__name__}"
        )

    data: StoredCredential = {
        "address": credential.address,
        "privateKey": credential.private_key,
    }
    return json.dumps(data)


def parse_credential(raw: str) -> WalletCredential:
    """
    Parse a stored JSON string back into a credential.

    Raises:
        SerializationError: If the payload is not a valid stored credential
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Stored credential is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise SerializationError("Stored credential is not a JSON object")

    address = data.get("address")
    private_key = data.get("privateKey")
    if not isinstance(address, str) or not address:
        raise SerializationError("Stored credential has no address")
    if private_key is not None and not isinstance(private_key, str):
        raise SerializationError("Stored credential has a non-string private key")

    return WalletCredential(address=address, private_key=private_key)
