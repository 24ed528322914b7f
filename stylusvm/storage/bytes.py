"""Byte strings and text laid out in storage the way Solidity lays them out.

Short values (under 32 bytes) live in the root word together with ``2 * len``
in its last byte. Long values store ``2 * len + 1`` in the root word and their
contents in consecutive words starting at keccak(root).
"""

from __future__ import annotations

from typing import Any, Iterable

from ..hostio import WORD_BYTES, keccak
from ..util import evm_words
from .array import _to_index
from .backends import current_storage
from .primitives import StorageFixedBytes, fixed_bytes_type
from .traits import MAX_KEY, StorageType

_LAST = WORD_BYTES - 1


class StorageBytes(StorageType):
    """Accessor for a storage-backed, growable byte string."""

    def __init__(self, slot: int, offset: int = 0) -> None:
        if offset != 0:
            raise ValueError(f"bytes must start at offset 0, got {offset}")
        super().__init__(slot, offset)
        self._base: int | None = None

    @property
    def _base_slot(self) -> int:
        if self._base is None:
            root = self.slot.to_bytes(WORD_BYTES, "big")
            self._base = int.from_bytes(keccak(root), "big")
        return self._base

    def _word_slot(self, index: int) -> int:
        return (self._base_slot + index // WORD_BYTES) % MAX_KEY

    def _index_slot(self, index: int, length: int) -> tuple[int, int]:
        slot = self._word_slot(index) if length >= WORD_BYTES else self.slot
        return slot, index % WORD_BYTES

    def is_empty(self) -> bool:
        """Whether no bytes are stored."""
        return len(self) == 0

    def __len__(self) -> int:
        word = current_storage().get_word(self.slot)
        if word[_LAST] & 1 == 0:
            return word[_LAST] // 2
        return int.from_bytes(word, "big") // 2

    def _write_len(self, length: int) -> None:
        storage = current_storage()
        if length < WORD_BYTES:
            storage.set_uint(self.slot, _LAST, 8, length * 2)
        else:
            storage.set_word(self.slot, (length * 2 + 1).to_bytes(WORD_BYTES, "big"))

    def set_len(self, length: int) -> None:
        """Overwrite the length, moving the data between representations as needed.

        Bytes exposed by growing may hold whatever earlier operations left behind.
        """
        if length < 0 or length * 2 + 1 >= MAX_KEY:
            raise ValueError(f"length out of range: {length}")
        old = len(self)
        if (old < WORD_BYTES) == (length < WORD_BYTES):
            self._write_len(length)
            return
        storage = current_storage()
        if length < WORD_BYTES:
            storage.set_word(self.slot, storage.get_word(self._base_slot))
        else:
            word = bytearray(storage.get_word(self.slot))
            word[_LAST] = 0
            storage.set_word(self._base_slot, bytes(word))
        self._write_len(length)

    def push(self, b: int) -> None:
        """Append the byte ``b``."""
        if not 0 <= b <= 0xFF:
            raise ValueError(f"not a byte: {b}")
        storage = current_storage()
        index = len(self)
        if index < _LAST:
            storage.set_byte(self.slot, index, b)
        else:
            if index == _LAST:
                storage.set_word(self._base_slot, storage.get_word(self.slot))
            storage.set_byte(self._word_slot(index), index % WORD_BYTES, b)
        self._write_len(index + 1)

    def pop(self) -> int | None:
        """Remove and return the last byte, or None when empty.

        In the long representation a word is cleared once all its bytes are gone.
        """
        length = len(self)
        if length == 0:
            return None
        index = length - 1
        storage = current_storage()
        slot, offset = self._index_slot(index, length)
        byte = storage.get_byte(slot, offset)

        if length == WORD_BYTES:
            storage.set_word(self.slot, storage.get_word(self._base_slot))
            storage.clear_word(self._base_slot)
        elif length > WORD_BYTES and index % WORD_BYTES == 0:
            storage.clear_word(self._word_slot(index))

        if length < WORD_BYTES:
            storage.set_byte(self.slot, index, 0)

        self._write_len(index)
        return byte

    def get(self, index: Any) -> int | None:
        """The byte at ``index``, or None when out of bounds."""
        position = _to_index(index)
        length = len(self)
        if position is None or position >= length:
            return None
        slot, offset = self._index_slot(position, length)
        return current_storage().get_byte(slot, offset)

    def get_mut(self, index: Any) -> StorageFixedBytes | None:
        """A one-byte accessor for the byte at ``index``, or None when out of bounds."""
        position = _to_index(index)
        length = len(self)
        if position is None or position >= length:
            return None
        slot, offset = self._index_slot(position, length)
        return fixed_bytes_type(1)(slot, offset)

    def get_bytes(self) -> bytes:
        """The full contents."""
        length = len(self)
        storage = current_storage()
        if length < WORD_BYTES:
            return bytes(storage.get_word(self.slot)[:length])
        words = (
            storage.get_word((self._base_slot + word) % MAX_KEY)
            for word in range(evm_words(length))
        )
        return b"".join(words)[:length]

    def set_bytes(self, data: bytes) -> None:
        """Replace the contents with ``data``, erasing what was stored."""
        data = bytes(data)
        self.erase()
        self.extend(data)

    def erase(self) -> None:
        """Clear every word the contents occupy, leaving an empty string."""
        length = len(self)
        storage = current_storage()
        if length >= WORD_BYTES:
            for word in range(evm_words(length)):
                storage.clear_word((self._base_slot + word) % MAX_KEY)
        storage.clear_word(self.slot)

    def extend(self, data: Iterable[int]) -> None:
        """Append every byte in ``data``."""
        for b in data:
            self.push(b)


class StorageString(StorageType):
    """Accessor for storage-backed UTF-8 text."""

    def __init__(self, slot: int, offset: int = 0) -> None:
        self.raw = StorageBytes(slot, offset)
        super().__init__(slot, offset)

    def is_empty(self) -> bool:
        """Whether no text is stored."""
        return self.raw.is_empty()

    def __len__(self) -> int:
        """Length of the stored text in bytes."""
        return len(self.raw)

    def push(self, c: str) -> None:
        """Append the single character ``c``."""
        if not isinstance(c, str) or len(c) != 1:
            raise ValueError(f"expected a single character, got {c!r}")
        self.raw.extend(c.encode("utf-8"))

    def get_string(self) -> str:
        """The stored text, with invalid UTF-8 replaced by U+FFFD."""
        return self.raw.get_bytes().decode("utf-8", errors="replace")

    def set_str(self, text: str) -> None:
        """Replace the stored text with ``text``."""
        if not isinstance(text, str):
            raise TypeError(f"expected str, got {type(text).__name__}")
        self.erase()
        self.extend(text)

    def erase(self) -> None:
        """Erase the stored text."""
        self.raw.erase()

    def extend(self, chars: Iterable[str]) -> None:
        """Append every character in ``chars``."""
        for c in chars:
            self.push(c)