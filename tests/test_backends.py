import pytest

from stylusvm.hostio import ZERO_WORD, Host, use_host
from stylusvm.storage.backends import (
    EagerStorage,
    StorageCache,
    StorageWord,
    current_storage,
    load_bytes32,
    set_storage,
    store_bytes32,
)


def slot_key(n):
    return n.to_bytes(32, "big")


def word(fill):
    return bytes([fill]) * 32


@pytest.fixture
def host():
    h = Host()
    with use_host(h):
        yield h


def test_load_unset_slot_is_zero(host):
    assert load_bytes32(7) == ZERO_WORD


def test_store_then_load_round_trip(host):
    store_bytes32(3, word(0x11))
    assert host.storage[slot_key(3)] == word(0x11)
    assert load_bytes32(3) == word(0x11)


def test_key_out_of_range_raises(host):
    with pytest.raises(ValueError):
        load_bytes32(-1)
    with pytest.raises(ValueError):
        store_bytes32(2**256, word(1))


def test_eager_writes_through(host):
    storage = EagerStorage()
    storage.set_word(5, word(0x22))
    assert host.storage[slot_key(5)] == word(0x22)
    host.storage[slot_key(5)] = word(0x33)
    assert storage.get_word(5) == word(0x33)


def test_storage_word_dirty():
    assert not StorageWord(word(1), word(1)).dirty()
    assert StorageWord(word(1)).dirty()
    assert StorageWord(word(2), word(1)).dirty()


def test_cache_serves_cached_value(host):
    host.storage[slot_key(1)] = word(0x44)
    cache = StorageCache()
    assert cache.get_word(1) == word(0x44)
    host.storage[slot_key(1)] = word(0x55)
    assert cache.get_word(1) == word(0x44)


def test_cache_defers_writes_until_flush(host):
    cache = StorageCache()
    cache.set_word(2, word(0x66))
    assert slot_key(2) not in host.storage
    assert cache.get_word(2) == word(0x66)
    cache.flush()
    assert host.storage[slot_key(2)] == word(0x66)
    assert len(cache) == 1


def test_flush_skips_clean_words(host):
    host.storage[slot_key(4)] = word(0x01)
    cache = StorageCache()
    cache.get_word(4)
    host.storage[slot_key(4)] = word(0x02)
    cache.flush()
    assert host.storage[slot_key(4)] == word(0x02)


def test_clear_flushes_and_empties(host):
    cache = StorageCache()
    cache.set_word(9, word(0x77))
    cache.clear()
    assert len(cache) == 0
    assert host.storage[slot_key(9)] == word(0x77)
    host.storage[slot_key(9)] = word(0x78)
    assert cache.get_word(9) == word(0x78)


def test_cache_rejects_bad_word(host):
    with pytest.raises(ValueError):
        StorageCache().set_word(0, b"\x00" * 31)


def test_set_storage_returns_previous():
    default = current_storage()
    assert isinstance(default, StorageCache)
    eager = EagerStorage()
    previous = set_storage(eager)
    try:
        assert previous is default
        assert current_storage() is eager
    finally:
        assert set_storage(previous) is eager
    assert current_storage() is default