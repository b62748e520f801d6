import asyncio
import json

import pytest
from loguru import logger

from credstore.kv.memory import MemoryKeyValueStore
from credstore.paths import WALLET_SLOT_KEY
from credstore.wallet.models import WalletCredential
from credstore.wallet.storage import CredentialStore, SlotState

PRIVATE_KEY = "4vJ9JU1bJJE96FWSJKvHsmmFADCg4gpZQff4P3bkLKi"


# =============================================================================
# LIFECYCLE
# =============================================================================


@pytest.mark.asyncio
async def test_save_load_delete_scenario(store):
    assert await store.save(WalletCredential(address="Addr1", private_key="Key1")) is True
    assert await store.load() == WalletCredential(address="Addr1", private_key="Key1")
    assert await store.delete() is True
    assert await store.load() is None


@pytest.mark.asyncio
async def test_load_on_fresh_store_returns_none(store, capture_log):
    assert await store.load() is None
    assert capture_log.exceptions() == []


@pytest.mark.asyncio
async def test_round_trip(store):
    cred = WalletCredential(address="7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU", private_key=PRIVATE_KEY)
    assert await store.save(cred)
    loaded = await store.load()
    assert loaded == cred
    assert loaded is not cred


@pytest.mark.asyncio
async def test_save_overwrites_previous_record(store):
    await store.save(WalletCredential(address="first", private_key="k1"))
    await store.save(WalletCredential(address="second", private_key="k2"))
    assert await store.load() == WalletCredential(address="second", private_key="k2")


@pytest.mark.asyncio
async def test_delete_on_empty_store_is_idempotent(store, kv):
    assert await store.delete() is True
    assert await store.delete() is True
    assert len(kv) == 0
    assert await store.slot_state() == SlotState.EMPTY


@pytest.mark.asyncio
async def test_single_record_under_fixed_slot(store, kv):
    await store.save(WalletCredential(address="a", private_key="k"))
    await store.save(WalletCredential(address="b", private_key="k"))
    assert len(kv) == 1
    assert await kv.get(WALLET_SLOT_KEY) is not None


@pytest.mark.asyncio
async def test_stored_record_has_exactly_two_fields(store, kv):
    await store.save(WalletCredential(address="Addr1", private_key="Key1"))
    stored = json.loads(await kv.get(WALLET_SLOT_KEY))
    assert stored == {"address": "Addr1", "privateKey": "Key1"}


@pytest.mark.asyncio
async def test_custom_slot_key_keeps_stores_apart():
    kv = MemoryKeyValueStore()
    main = CredentialStore(kv, slot_key="wallet", verify_delay=0)
    backup = CredentialStore(kv, slot_key="wallet_backup", verify_delay=0)

    await main.save(WalletCredential(address="main", private_key="k"))
    assert await backup.load() is None
    await backup.delete()
    assert (await main.load()).address == "main"


@pytest.mark.asyncio
async def test_save_without_private_key_is_a_degraded_record(store):
    assert await store.save(WalletCredential(address="watch-only"))
    loaded = await store.load()
    assert loaded.address == "watch-only"
    assert loaded.private_key is None


# =============================================================================
# FAILURE CONTAINMENT
# =============================================================================


@pytest.mark.asyncio
async def test_save_returns_false_when_set_fails(store, kv, capture_log):
    kv.fail_set = True
    assert await store.save(WalletCredential(address="a", private_key="k")) is False
    assert capture_log.exceptions()[0]["function_name"] == "save"
    assert len(kv) == 0


@pytest.mark.asyncio
async def test_save_rejects_empty_address(store, kv, capture_log):
    assert await store.save(WalletCredential(address="", private_key="k")) is False
    assert len(kv) == 0
    assert isinstance(capture_log.exceptions()[0]["error"], ValueError)


@pytest.mark.asyncio
async def test_save_returns_false_for_unserializable_credential(store, kv):
    assert await store.save(WalletCredential(address="a", private_key=12345)) is False
    assert len(kv) == 0


@pytest.mark.asyncio
async def test_save_returns_false_for_non_credential(store):
    assert await store.save(None) is False


@pytest.mark.asyncio
async def test_load_returns_none_when_get_fails(store, kv, capture_log):
    await store.save(WalletCredential(address="a", private_key="k"))
    kv.fail_get = True
    assert await store.load() is None
    assert capture_log.exceptions()[-1]["function_name"] == "load"


@pytest.mark.asyncio
async def test_load_returns_none_for_corrupt_record(store, kv, capture_log):
    await kv.set(WALLET_SLOT_KEY, "{not json")
    assert await store.load() is None
    assert capture_log.exceptions()[0]["function_name"] == "load"


@pytest.mark.asyncio
async def test_delete_returns_false_when_remove_fails(store, kv, capture_log):
    await store.save(WalletCredential(address="a", private_key="k"))
    kv.fail_remove = True
    assert await store.delete() is False
    assert capture_log.exceptions()[-1]["function_name"] == "delete"
    assert await store.load() is not None


@pytest.mark.asyncio
async def test_save_succeeds_when_read_back_fails(capture_log):
    class WriteOnly(MemoryKeyValueStore):
        async def get(self, key):
            raise OSError("read denied")

    store = CredentialStore(WriteOnly(), log=capture_log, verify_delay=0)
    assert await store.save(WalletCredential(address="a", private_key="k")) is True
    assert "warning" in capture_log.levels()
    assert capture_log.exceptions() == []


# =============================================================================
# READ-BACK VERIFICATION
# =============================================================================


@pytest.mark.asyncio
async def test_save_read_back_reads_once_when_visible(store, kv):
    await store.save(WalletCredential(address="a", private_key="k"))
    assert kv.get_calls == 1


@pytest.mark.asyncio
async def test_save_read_back_retries_until_attempts_exhausted(capture_log):
    class Lagging(MemoryKeyValueStore):
        def __init__(self):
            super().__init__()
            self.reads = 0

        async def get(self, key):
            self.reads += 1
            return None

    kv = Lagging()
    store = CredentialStore(kv, log=capture_log, verify_attempts=3, verify_delay=0)
    assert await store.save(WalletCredential(address="a", private_key="k")) is True
    assert kv.reads == 3
    assert any(
        level == "warning" and "no data found" in message
        for level, message, _ in capture_log.records
    )


@pytest.mark.asyncio
async def test_save_read_back_warns_when_stored_record_differs(capture_log):
    class Rewriting(MemoryKeyValueStore):
        async def get(self, key):
            return '{"address": "other", "privateKey": "other-key"}'

    store = CredentialStore(Rewriting(), log=capture_log, verify_delay=0)
    assert await store.save(WalletCredential(address="Addr1", private_key=PRIVATE_KEY)) is True

    warnings = [message for level, message, _ in capture_log.records if level == "warning"]
    assert any("differs from the one written" in message for message in warnings)
    assert PRIVATE_KEY not in capture_log.text()
    assert "other-key" not in capture_log.text()


@pytest.mark.asyncio
async def test_save_read_back_logs_info_when_record_matches(store, capture_log):
    await store.save(WalletCredential(address="a", private_key="k"))
    assert "warning" not in capture_log.levels()
    assert any("data found" in message for _, message, _ in capture_log.records)


@pytest.mark.asyncio
async def test_delete_logs_verified_empty_slot(store, capture_log):
    await store.save(WalletCredential(address="a", private_key="k"))
    await store.delete()
    assert any("is empty" in message for _, message, _ in capture_log.records)


# =============================================================================
# SLOT STATE
# =============================================================================


@pytest.mark.asyncio
async def test_slot_state_distinguishes_empty_present_unreadable(store, kv):
    assert await store.slot_state() == SlotState.EMPTY
    assert await store.exists() is False

    await store.save(WalletCredential(address="a", private_key="k"))
    assert await store.slot_state() == SlotState.PRESENT

    await kv.set(WALLET_SLOT_KEY, '{"privateKey": "k"}')
    assert await store.slot_state() == SlotState.UNREADABLE
    assert await store.exists() is True
    assert await store.load() is None

    kv.fail_get = True
    assert await store.slot_state() == SlotState.UNREADABLE


# =============================================================================
# LOGGING
# =============================================================================


@pytest.mark.asyncio
async def test_private_key_never_logged(store, kv, capture_log):
    cred = WalletCredential(address="Addr1", private_key=PRIVATE_KEY)
    await store.save(cred)
    await store.load()
    await store.delete()
    kv.fail_set = True
    await store.save(cred)

    text = capture_log.text()
    assert PRIVATE_KEY not in text
    assert "Addr1" in text
    assert f"private_key_length={len(PRIVATE_KEY)}" in text


@pytest.mark.asyncio
async def test_default_logger_is_loguru():
    lines: list[str] = []
    handler_id = logger.add(lambda message: lines.append(str(message)), level="DEBUG")
    try:
        store = CredentialStore(MemoryKeyValueStore(), verify_delay=0)
        await store.save(WalletCredential(address="Addr1", private_key=PRIVATE_KEY))
        await store.load()
    finally:
        logger.remove(handler_id)

    output = "".join(lines)
    assert "Addr1" in output
    assert PRIVATE_KEY not in output


# =============================================================================
# CONCURRENCY
# =============================================================================


@pytest.mark.asyncio
async def test_concurrent_saves_leave_one_complete_record(store):
    creds = [WalletCredential(address=f"addr{i}", private_key=f"key{i}") for i in range(10)]
    results = await asyncio.gather(*(store.save(c) for c in creds))
    assert all(results)
    assert await store.load() in creds


def test_constructor_validates_arguments():
    kv = MemoryKeyValueStore()
    with pytest.raises(ValueError):
        CredentialStore(kv, slot_key="")
    with pytest.raises(ValueError):
        CredentialStore(kv, verify_attempts=0)
    with pytest.raises(ValueError):
        CredentialStore(kv, verify_delay=-1)
