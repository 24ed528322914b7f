"""Dynamic arrays laid out in storage the way Solidity lays them out."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, ClassVar, Iterable

from ..hostio import WORD_BYTES, keccak
from .array import (
    _check_element,
    _element_position,
    _require_erasable,
    _require_simple,
    _to_index,
)
from .backends import current_storage
from .traits import MAX_KEY, StorageType


class StorageVec(StorageType):
    """Accessor for a storage-backed vector of ``ELEMENT`` values.

    The length lives at the vector's slot; elements start at keccak(slot).
    """

    ELEMENT: ClassVar[type[StorageType] | None] = None

    def __init__(self, slot: int, offset: int = 0) -> None:
        if self.ELEMENT is None:
            raise TypeError("make a vector type with StorageVec.of(element)")
        if offset != 0:
            raise ValueError(f"a vector must start at offset 0, got {offset}")
        super().__init__(slot, offset)
        self._base: int | None = None

    @staticmethod
    def of(element: type[StorageType]) -> type[StorageVec]:
        """Return the vector type holding elements of ``element``."""
        return _vec_type(element)

    @property
    def _element(self) -> type[StorageType]:
        assert self.ELEMENT is not None
        return self.ELEMENT

    @property
    def _base_slot(self) -> int:
        if self._base is None:
            self._base = int.from_bytes(keccak(self.slot.to_bytes(WORD_BYTES, "big")), "big")
        return self._base

    @property
    def _density(self) -> int:
        return WORD_BYTES // self._element.SLOT_BYTES

    def is_empty(self) -> bool:
        """Whether the vector holds no elements."""
        return len(self) == 0

    def __len__(self) -> int:
        return int.from_bytes(current_storage().get_word(self.slot), "big")

    def set_len(self, length: int) -> None:
        """Overwrite the stored length; storage beyond the old length is not touched."""
        if not 0 <= length < MAX_KEY:
            raise ValueError(f"length out of range: {length}")
        current_storage().set_word(self.slot, length.to_bytes(WORD_BYTES, "big"))

    def _accessor_unchecked(self, index: int) -> StorageType:
        slot, offset = _element_position(self._element, self._base_slot, index)
        return self._element(slot, offset)

    def _accessor(self, index: Any) -> StorageType | None:
        position = _to_index(index)
        if position is None or position >= len(self):
            return None
        return self._accessor_unchecked(position)

    def getter(self, index: Any) -> StorageType | None:
        """Accessor for the element at ``index``, or None when out of bounds."""
        return self._accessor(index)

    def setter(self, index: Any) -> StorageType | None:
        """Mutable accessor for the element at ``index``, or None when out of bounds."""
        return self._accessor(index)

    def get(self, index: Any) -> Any:
        """The element at ``index``, or None when out of bounds."""
        store = self._accessor(index)
        return None if store is None else store.load()

    def get_mut(self, index: Any) -> Any:
        """A mutable view of the element at ``index``, or None when out of bounds."""
        store = self._accessor(index)
        return None if store is None else store.load_mut()

    def grow(self) -> StorageType:
        """Extend the vector by one element and return an accessor to it."""
        index = len(self)
        self.set_len(index + 1)
        return self._accessor_unchecked(index)

    def shrink(self) -> StorageType | None:
        """Drop the last element and return an accessor to it, or None when empty."""
        length = len(self)
        if length == 0:
            return None
        index = length - 1
        self.set_len(index)
        return self._accessor_unchecked(index)

    def truncate(self, length: int) -> None:
        """Keep the first ``length`` elements; underlying storage is not erased."""
        if length < len(self):
            self.set_len(length)

    def push(self, value: Any) -> None:
        """Append ``value``."""
        _require_simple(self._element)
        self.grow().set_by_wrapped(value)  # type: ignore[attr-defined]

    def pop(self) -> Any:
        """Remove and return the last value, or None when empty.

        A storage word is cleared once every element packed into it is gone.
        """
        _require_simple(self._element)
        store = self.shrink()
        if store is None:
            return None
        value = store.load()
        index = len(self)
        if index % self._density == 0:
            slot, _ = _element_position(self._element, self._base_slot, index)
            storage = current_storage()
            for word in range(max(self._element.REQUIRED_SLOTS, 1)):
                storage.clear_word((slot + word) % MAX_KEY)
        return value

    def erase_last(self) -> None:
        """Erase and remove the last element, if any."""
        _require_erasable(self._element)
        if self.is_empty():
            return
        index = len(self) - 1
        self._accessor_unchecked(index).erase()  # type: ignore[attr-defined]
        self.set_len(index)

    def erase(self) -> None:
        """Erase every element and set the length to zero."""
        _require_erasable(self._element)
        for position in range(len(self)):
            self._accessor_unchecked(position).erase()  # type: ignore[attr-defined]
        self.truncate(0)

    def extend(self, values: Iterable[Any]) -> None:
        """Append every value in ``values``."""
        for value in values:
            self.push(value)


@lru_cache(maxsize=None)
def _vec_type(element: type[StorageType]) -> type[StorageVec]:
    _check_element(element)
    name = f"StorageVec[{element.__name__}]"
    return type(name, (StorageVec,), {
        "ELEMENT": element,
        "__module__": __name__,
        "__qualname__": name,
    })