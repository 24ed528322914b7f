import pytest

from stylusvm.hostio import Host, use_host
from stylusvm.storage.backends import EagerStorage, set_storage
from stylusvm.storage.map import (
    AddressKey,
    FixedBytesKey,
    SignedKey,
    StorageMap,
    key_slot,
)
from stylusvm.storage.primitives import StorageBool, StorageUint
from stylusvm.storage.vec import StorageVec

ZERO_KEY_ZERO_ROOT = 0xAD3228B676F7D3CD4284A5443F17F1962B36E491B30A40B2405849E597BA5FB5


def word_key(slot):
    return slot.to_bytes(32, "big")


@pytest.fixture
def host():
    h = Host()
    previous = set_storage(EagerStorage())
    with use_host(h):
        yield h
    set_storage(previous)


def test_uint_key_slot_matches_solidity():
    assert key_slot(0, 0) == ZERO_KEY_ZERO_ROOT
    assert key_slot(0, bytes(32)) == ZERO_KEY_ZERO_ROOT


def test_insert_lands_in_solidity_slot(host):
    m = StorageMap.of(StorageUint)(0)
    m.insert(0, 5)
    assert host.storage[word_key(ZERO_KEY_ZERO_ROOT)] == (5).to_bytes(32, "big")
    assert m.get(0) == 5


def test_missing_key_reads_zero(host):
    m = StorageMap.of(StorageUint)(1)
    assert m.get("absent") == 0


def test_bool_key_equals_int_key():
    assert key_slot(True, 3) == key_slot(1, 3)
    assert key_slot(False, 3) == key_slot(0, 3)


def test_signed_key_wraps_around():
    assert key_slot(SignedKey(-1, 8), 2) == key_slot(255, 2)
    assert key_slot(SignedKey(-1), 2) == key_slot(2**256 - 1, 2)
    assert key_slot(SignedKey(5, 32), 2) == key_slot(5, 2)


def test_str_key_equals_bytes_key():
    assert key_slot("abc", 4) == key_slot(b"abc", 4)


def test_full_word_fixed_bytes_equals_uint():
    data = (12345).to_bytes(32, "big")
    assert key_slot(FixedBytesKey(data), 1) == key_slot(12345, 1)


def test_address_key_is_an_integer_fixed_bytes_are_padded_right():
    address = bytes(range(1, 21))
    assert key_slot(AddressKey(address), 0) == key_slot(int.from_bytes(address, "big"), 0)
    assert key_slot(FixedBytesKey(address), 0) == key_slot(address.ljust(32, b"\0"), 0)


def test_to_slot_methods_agree_with_key_slot():
    key = SignedKey(-7, 16)
    assert key.to_slot(9) == key_slot(key, 9)


def test_distinct_keys_distinct_slots():
    slots = {key_slot(k, 0) for k in (1, 2, b"\x01", "1", SignedKey(-1, 8))}
    assert len(slots) == 5


def test_roots_separate_maps(host):
    a = StorageMap.of(StorageUint)(1)
    b = StorageMap.of(StorageUint)(2)
    a.insert(b"k", 10)
    assert b.get(b"k") == 0
    assert a.get(b"k") == 10


def test_replace_returns_previous(host):
    m = StorageMap.of(StorageUint)(0)
    assert m.replace(3, 10) == 0
    assert m.replace(3, 20) == 10
    assert m.get(3) == 20


def test_take_returns_and_clears(host):
    m = StorageMap.of(StorageUint)(0)
    m.insert(3, 10)
    assert m.take(3) == 10
    assert m.get(3) == 0
    assert host.storage == {}


def test_delete(host):
    m = StorageMap.of(StorageUint)(0)
    m.insert("x", 1)
    m.delete("x")
    assert m.get("x") == 0
    assert host.storage == {}


def test_bool_values_sit_in_low_byte(host):
    m = StorageMap.of(StorageBool)(6)
    m.insert("flag", True)
    assert m.get("flag") is True
    assert host.storage[word_key(key_slot("flag", 6))][31] == 1


def test_getter_and_setter(host):
    m = StorageMap.of(StorageUint)(0)
    m.setter(AddressKey(bytes(20))).set(42)
    assert m.getter(AddressKey(bytes(20))).get() == 42


def test_map_of_vectors(host):
    m = StorageMap.of(StorageVec.of(StorageUint))(0)
    m.setter(b"k").push(4)
    assert m.get(b"k").get(0) == 4
    assert len(m.get(b"k")) == 1


def test_insert_collection_value_rejected(host):
    m = StorageMap.of(StorageVec.of(StorageUint))(0)
    with pytest.raises(TypeError):
        m.insert(b"k", 1)


def test_delete_unerasable_value_rejected(host):
    m = StorageMap.of(StorageMap.of(StorageUint))(0)
    with pytest.raises(TypeError):
        m.delete(1)


def test_negative_plain_key_rejected():
    with pytest.raises(ValueError):
        key_slot(-1, 0)


def test_unsupported_key_type_rejected():
    with pytest.raises(TypeError):
        key_slot(1.5, 0)


def test_bad_keys_rejected():
    with pytest.raises(ValueError):
        SignedKey(128, 8)
    with pytest.raises(ValueError):
        AddressKey(bytes(19))
    with pytest.raises(ValueError):
        FixedBytesKey(bytes(33))


def test_bad_root_rejected():
    with pytest.raises(ValueError):
        key_slot(1, bytes(31))


def test_untyped_map_rejected():
    with pytest.raises(TypeError):
        StorageMap(0)