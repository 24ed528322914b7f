"""Persistent-storage backends: direct host access and a write-back word cache."""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass

from ..hostio import WORD_BYTES, current_host
from .traits import MAX_KEY, GlobalStorage


def _key_bytes(key: int) -> bytes:
    if not 0 <= key < MAX_KEY:
        raise ValueError(f"storage key out of range: {key}")
    return key.to_bytes(WORD_BYTES, "big")


def load_bytes32(key: int) -> bytes:
    """Read the 32-byte word at ``key`` straight from the host, bypassing caches."""
    return current_host().storage_load_bytes32(_key_bytes(key))


def store_bytes32(key: int, data: bytes) -> None:
    """Write the 32-byte word ``data`` at ``key`` straight to the host, bypassing caches."""
    current_host().storage_store_bytes32(_key_bytes(key), data)


class EagerStorage(GlobalStorage):
    """Storage access that reads and writes the host on every operation."""

    def get_word(self, key: int) -> bytes:
        return load_bytes32(key)

    def set_word(self, key: int, value: bytes) -> None:
        store_bytes32(key, value)


@dataclass
class StorageWord:
    """A cached word: its current value and, if known, the value held by the host."""

    value: bytes
    known: bytes | None = None

    def dirty(self) -> bool:
        """Whether the word must be written back to the host."""
        return self.value != self.known


class StorageCache(GlobalStorage):
    """Word cache that loads from the host on first read and writes back on flush."""

    def __init__(self) -> None:
        self._words: dict[int, StorageWord] = {}

    def __len__(self) -> int:
        return len(self._words)

    def get_word(self, key: int) -> bytes:
        entry = self._words.get(key)
        if entry is None:
            known = load_bytes32(key)
            entry = self._words[key] = StorageWord(known, known)
        return entry.value

    def set_word(self, key: int, value: bytes) -> None:
        value = bytes(value)
        if len(value) != WORD_BYTES:
            raise ValueError(f"value must be {WORD_BYTES} bytes, got {len(value)}")
        _key_bytes(key)
        self._words[key] = StorageWord(value)

    def flush(self) -> None:
        """Write every dirty word to the host, keeping the cached entries."""
        for key, entry in self._words.items():
            if entry.dirty():
                store_bytes32(key, entry.value)

    def clear(self) -> None:
        """Flush and then drop every cached entry."""
        self.flush()
        self._words.clear()


_current: ContextVar[GlobalStorage] = ContextVar("stylusvm_storage", default=StorageCache())


def current_storage() -> GlobalStorage:
    """Return the storage backend accessors currently use."""
    return _current.get()


def set_storage(storage: GlobalStorage) -> GlobalStorage:
    """Install ``storage`` as the current backend and return the previous one."""
    previous = _current.get()
    _current.set(storage)
    return previous