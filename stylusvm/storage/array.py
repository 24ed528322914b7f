"""Fixed-length arrays laid out in storage the way Solidity lays them out."""

from __future__ import annotations

import operator
from functools import lru_cache
from typing import Any, ClassVar

from ..hostio import WORD_BYTES
from .traits import MAX_KEY, StorageType


def _to_index(index: Any) -> int | None:
    """Convert ``index`` to a non-negative int, or None when it cannot be one."""
    try:
        position = operator.index(index)
    except TypeError:
        return None
    return position if position >= 0 else None


def _check_element(element: Any) -> None:
    if not (isinstance(element, type) and issubclass(element, StorageType)):
        raise TypeError(f"element must be a storage type, got {element!r}")
    if not 1 <= element.SLOT_BYTES <= WORD_BYTES:
        raise ValueError(f"element width must be 1 to 32 bytes, got {element.SLOT_BYTES}")


def _require_erasable(element: type[StorageType]) -> None:
    if not callable(getattr(element, "erase", None)):
        raise TypeError(f"{element.__name__} cannot be erased")


def _require_simple(element: type[StorageType]) -> None:
    if not callable(getattr(element, "set_by_wrapped", None)):
        raise TypeError(f"{element.__name__} cannot be set from a plain value")


def _element_position(element: type[StorageType], base: int, index: int) -> tuple[int, int]:
    """Slot and byte offset of the element at ``index`` in a run starting at ``base``."""
    width = element.SLOT_BYTES
    words = max(element.REQUIRED_SLOTS, 1)
    density = WORD_BYTES // width
    slot = (base + words * index // density) % MAX_KEY
    offset = WORD_BYTES - width * (1 + index % density)
    return slot, offset


class StorageArray(StorageType):
    """Accessor for a storage-backed array of ``LENGTH`` elements of type ``ELEMENT``."""

    ELEMENT: ClassVar[type[StorageType] | None] = None
    LENGTH: ClassVar[int] = 0

    def __init__(self, slot: int, offset: int = 0) -> None:
        if self.ELEMENT is None:
            raise TypeError("make an array type with StorageArray.of(element, length)")
        if offset != 0:
            raise ValueError(f"an array must start at offset 0, got {offset}")
        super().__init__(slot, offset)

    @staticmethod
    def of(element: type[StorageType], length: int) -> type[StorageArray]:
        """Return the array type holding ``length`` elements of ``element``."""
        return _array_type(element, operator.index(length))

    def __len__(self) -> int:
        return self.LENGTH

    def _accessor_unchecked(self, index: int) -> StorageType:
        assert self.ELEMENT is not None
        slot, offset = _element_position(self.ELEMENT, self.slot, index)
        return self.ELEMENT(slot, offset)

    def _accessor(self, index: Any) -> StorageType | None:
        position = _to_index(index)
        if position is None or position >= self.LENGTH:
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

    def erase(self) -> None:
        """Erase every element."""
        assert self.ELEMENT is not None
        _require_erasable(self.ELEMENT)
        for position in range(self.LENGTH):
            self._accessor_unchecked(position).erase()  # type: ignore[attr-defined]


@lru_cache(maxsize=None)
def _array_type(element: type[StorageType], length: int) -> type[StorageArray]:
    _check_element(element)
    if length < 0:
        raise ValueError(f"array length must be non-negative, got {length}")
    density = WORD_BYTES // element.SLOT_BYTES
    reserved = length * element.REQUIRED_SLOTS
    packed = -(-length // density)
    name = f"StorageArray[{element.__name__}, {length}]"
    return type(name, (StorageArray,), {
        "ELEMENT": element,
        "LENGTH": length,
        "REQUIRED_SLOTS": max(reserved, packed),
        "__module__": __name__,
        "__qualname__": name,
    })