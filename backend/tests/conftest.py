from typing import Any

import pytest

from credstore.errors import UnderlyingStoreError
from credstore.kv.memory import MemoryKeyValueStore
from credstore.wallet.storage import CredentialStore


class CapturingLogger:
    """Records log calls instead of emitting them."""

    def __init__(self):
        self.records: list[tuple[str, str, dict[str, Any]]] = []

    def _record(self, level: str, message: str, kwargs: dict[str, Any]) -> None:
        self.records.append((level, message, kwargs))

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._record("info", message, kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._record("warning", message, kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._record("error", message, kwargs)

    def exception(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._record("exception", message, kwargs)

    def levels(self) -> list[str]:
        return [level for level, _, _ in self.records]

    def exceptions(self) -> list[dict[str, Any]]:
        return [kwargs for level, _, kwargs in self.records if level == "exception"]

    def text(self) -> str:
        return "\n".join(
            f"{message} {kwargs}" for _, message, kwargs in self.records
        )


class FlakyKeyValueStore(MemoryKeyValueStore):
    """Memory store whose operations can be made to fail on demand."""

    def __init__(self):
        super().__init__()
        self.fail_get = False
        self.fail_set = False
        self.fail_remove = False
        self.get_calls = 0

    async def get(self, key: str) -> str | None:
        self.get_calls += 1
        if self.fail_get:
            raise UnderlyingStoreError("get rejected")
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_set:
            raise UnderlyingStoreError("set rejected")
        await super().set(key, value)

    async def remove(self, key: str) -> None:
        if self.fail_remove:
            raise UnderlyingStoreError("remove rejected")
        await super().remove(key)


@pytest.fixture
def capture_log() -> CapturingLogger:
    return CapturingLogger()


@pytest.fixture
def kv() -> FlakyKeyValueStore:
    return FlakyKeyValueStore()


@pytest.fixture
def store(kv, capture_log) -> CredentialStore:
    return CredentialStore(kv, log=capture_log, verify_delay=0)
