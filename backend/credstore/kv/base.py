"""Protocol for the persistent key-value store behind the credential store."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """
    Asynchronous string key-value store.

    Implementations:
    - return None from get() for a missing key
    - treat remove() of a missing key as a no-op
    - wrap native I/O failures in UnderlyingStoreError
    """

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...
