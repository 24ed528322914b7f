import pytest

from stylusvm.storage.traits import GlobalStorage, SimpleStorageType, StorageType


class MemoryStorage(GlobalStorage):
    def __init__(self):
        self.words = {}

    def get_word(self, key):
        return self.words.get(key, bytes(32))

    def set_word(self, key, value):
        assert len(value) == 32
        self.words[key] = bytes(value)


class Cell(SimpleStorageType):
    def __init__(self, backend, slot, offset=0):
        super().__init__(slot, offset)
        self.backend = backend

    def get(self):
        return GlobalStorage.get_uint(self.backend, self.slot, self.offset, 64)

    def set(self, value):
        GlobalStorage.set_uint(self.backend, self.slot, self.offset, 64, value)


def test_storage_type_keeps_slot_and_offset():
    accessor = StorageType(5, 12)
    assert (accessor.slot, accessor.offset) == (5, 12)
    assert accessor.load() is accessor
    assert accessor.load_mut() is accessor


@pytest.mark.parametrize("slot,offset", [(-1, 0), (2**256, 0), (0, 33), (0, -1)])
def test_storage_type_rejects_bad_location(slot, offset):
    with pytest.raises(ValueError):
        StorageType(slot, offset)


def test_simple_type_round_trip_and_erase():
    backend = MemoryStorage()
    cell = Cell(backend, 3, 24)
    SimpleStorageType.set_by_wrapped(cell, 42)
    assert cell.load() == 42
    SimpleStorageType.erase(cell)
    assert GlobalStorage.get_uint(backend, 3, 24, 64) == 0
    assert backend.get_word(3) == bytes(32)


def test_uint_is_packed_big_endian_at_offset():
    backend = MemoryStorage()
    GlobalStorage.set_uint(backend, 1, 30, 16, 0x1234)
    assert backend.get_word(1)[30:] == b"\x12\x34"
    assert backend.get_word(1)[:30] == bytes(30)
    assert GlobalStorage.get_uint(backend, 1, 30, 16) == 0x1234


def test_packed_values_do_not_disturb_neighbours():
    backend = MemoryStorage()
    GlobalStorage.set_uint(backend, 0, 24, 64, 2**64 - 1)
    GlobalStorage.set_uint(backend, 0, 16, 64, 7)
    assert GlobalStorage.get_uint(backend, 0, 24, 64) == 2**64 - 1
    assert GlobalStorage.get_uint(backend, 0, 16, 64) == 7


def test_full_word_uint():
    backend = MemoryStorage()
    GlobalStorage.set_uint(backend, 9, 0, 256, 2**256 - 1)
    assert backend.get_word(9) == b"\xff" * 32
    assert GlobalStorage.get_uint(backend, 9, 0, 256) == 2**256 - 1


@pytest.mark.parametrize("bits,value", [(8, -1), (8, -128), (8, 127), (128, -(2**127)), (256, -5)])
def test_signed_round_trip(bits, value):
    backend = MemoryStorage()
    GlobalStorage.set_signed(backend, 2, 0, bits, value)
    assert GlobalStorage.get_signed(backend, 2, 0, bits) == value


def test_negative_signed_is_twos_complement():
    backend = MemoryStorage()
    GlobalStorage.set_signed(backend, 2, 31, 8, -1)
    assert GlobalStorage.get_byte(backend, 2, 31) == 0xFF


def test_out_of_range_integers_rejected():
    backend = MemoryStorage()
    with pytest.raises(ValueError):
        GlobalStorage.set_uint(backend, 0, 31, 8, 256)
    with pytest.raises(ValueError):
        GlobalStorage.set_signed(backend, 0, 31, 8, 128)
    with pytest.raises(ValueError):
        GlobalStorage.set_byte(backend, 0, 0, -1)


def test_write_crossing_word_boundary_rejected():
    backend = MemoryStorage()
    with pytest.raises(ValueError):
        GlobalStorage.set(backend, 0, 30, b"\x01\x02\x03")
    with pytest.raises(ValueError):
        GlobalStorage.get(backend, 0, 31, 2)


def test_set_full_word_bytes():
    backend = MemoryStorage()
    word = bytes(range(32))
    GlobalStorage.set(backend, 4, 0, word)
    assert backend.get_word(4) == word
    assert GlobalStorage.get(backend, 4, 10, 3) == word[10:13]


def test_byte_round_trip_and_clear():
    backend = MemoryStorage()
    GlobalStorage.set_byte(backend, 6, 5, 0xAB)
    assert GlobalStorage.get_byte(backend, 6, 5) == 0xAB
    GlobalStorage.clear_word(backend, 6)
    assert backend.get_word(6) == bytes(32)