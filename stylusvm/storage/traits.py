"""Base classes for storage accessors and for persistent-storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from ..hostio import WORD_BYTES, ZERO_WORD

MAX_KEY = 2**256


def _check_key(key: int) -> int:
    if not 0 <= key < MAX_KEY:
        raise ValueError(f"storage key out of range: {key}")
    return key


def _check_span(offset: int, size: int) -> None:
    if offset < 0 or size < 0 or offset + size > WORD_BYTES:
        raise ValueError(f"{size} bytes at offset {offset} do not fit in one word")


class StorageType:
    """An accessor for a value living at a slot and byte offset in storage."""

    SLOT_BYTES: ClassVar[int] = 32
    REQUIRED_SLOTS: ClassVar[int] = 0

    def __init__(self, slot: int, offset: int = 0) -> None:
        _check_key(slot)
        if not 0 <= offset <= WORD_BYTES:
            raise ValueError(f"offset out of range: {offset}")
        self.slot = slot
        self.offset = offset

    def load(self) -> Any:
        """Return the wrapped value; collections return themselves."""
        return self

    def load_mut(self) -> Any:
        """Return a mutable view of the wrapped value."""
        return self

    def __repr__(self) -> str:
        return f"{type(self).__name__}(slot={self.slot:#x}, offset={self.offset})"


class SimpleStorageType(StorageType, ABC):
    """An accessor storing nothing beyond its inline value."""

    ZERO: ClassVar[Any] = 0

    @abstractmethod
    def get(self) -> Any:
        """Read the value from storage."""

    @abstractmethod
    def set(self, value: Any) -> None:
        """Write the value to storage."""

    def load(self) -> Any:
        return self.get()

    def set_by_wrapped(self, value: Any) -> None:
        """Write ``value`` to persistent storage."""
        self.set(value)

    def erase(self) -> None:
        """Overwrite the value with its zero value."""
        self.set(self.ZERO)


class GlobalStorage(ABC):
    """Access to persistent storage in 32-byte words keyed by 256-bit integers."""

    @abstractmethod
    def get_word(self, key: int) -> bytes:
        """Read the 32-byte word at ``key``."""

    @abstractmethod
    def set_word(self, key: int, value: bytes) -> None:
        """Write the 32-byte word ``value`` at ``key``."""

    def get(self, key: int, offset: int, size: int) -> bytes:
        """Read ``size`` bytes of the word at ``key``, starting ``offset`` from the left."""
        _check_span(offset, size)
        return bytes(self.get_word(key)[offset:offset + size])

    def get_uint(self, key: int, offset: int, bits: int) -> int:
        """Read an unsigned ``bits``-wide integer at ``offset`` in the word at ``key``."""
        return int.from_bytes(self.get(key, offset, bits // 8), "big")

    def get_signed(self, key: int, offset: int, bits: int) -> int:
        """Read a two's-complement ``bits``-wide integer at ``offset``."""
        raw = self.get_uint(key, offset, bits)
        if bits > 0 and raw >= 1 << (bits - 1):
            raw -= 1 << bits
        return raw

    def get_byte(self, key: int, offset: int) -> int:
        """Read the byte at ``offset`` in the word at ``key``."""
        return self.get(key, offset, 1)[0]

    def set(self, key: int, offset: int, value: bytes) -> None:
        """Write ``value`` into the word at ``key``, starting ``offset`` from the left."""
        value = bytes(value)
        _check_span(offset, len(value))
        if len(value) == WORD_BYTES:
            self.set_word(key, value)
            return
        word = bytearray(self.get_word(key))
        word[offset:offset + len(value)] = value
        self.set_word(key, bytes(word))

    def set_uint(self, key: int, offset: int, bits: int, value: int) -> None:
        """Write an unsigned ``bits``-wide integer at ``offset`` in the word at ``key``."""
        if not 0 <= value < 1 << bits:
            raise ValueError(f"{value} does not fit in {bits} unsigned bits")
        size = bits // 8
        if bits == 256:
            self.set_word(key, value.to_bytes(WORD_BYTES, "big"))
            return
        data = value.to_bytes((bits + 7) // 8, "big")[-size:] if size else b""
        self.set(key, offset, data)

    def set_signed(self, key: int, offset: int, bits: int, value: int) -> None:
        """Write a two's-complement ``bits``-wide integer at ``offset``."""
        bound = 1 << (bits - 1) if bits > 0 else 0
        if not -bound <= value < max(bound, 1):
            raise ValueError(f"{value} does not fit in {bits} signed bits")
        self.set_uint(key, offset, bits, value % (1 << bits))

    def set_byte(self, key: int, offset: int, value: int) -> None:
        """Write a single byte at ``offset`` in the word at ``key``."""
        if not 0 <= value <= 0xFF:
            raise ValueError(f"not a byte: {value}")
        self.set(key, offset, bytes([value]))

    def clear_word(self, key: int) -> None:
        """Zero the word at ``key``."""
        self.set_word(key, ZERO_WORD)