"""Mappings laid out in storage the way Solidity lays them out."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, ClassVar

from ..hostio import ADDRESS_BYTES, WORD_BYTES, keccak
from .array import _check_element, _require_erasable, _require_simple
from .traits import MAX_KEY, StorageType


def _root_bytes(root: Any) -> bytes:
    if isinstance(root, int):
        if not 0 <= root < MAX_KEY:
            raise ValueError(f"root slot out of range: {root}")
        return root.to_bytes(WORD_BYTES, "big")
    data = bytes(root)
    if len(data) != WORD_BYTES:
        raise ValueError(f"root must be {WORD_BYTES} bytes, got {len(data)}")
    return data


def _hash_slot(data: bytes, root: Any) -> int:
    return int.from_bytes(keccak(data + _root_bytes(root)), "big")


def _uint_slot(value: int, root: Any) -> int:
    return _hash_slot(value.to_bytes(WORD_BYTES, "big"), root)


class StorageKey(ABC):
    """A value that can key a StorageMap; slot assignment must be injective."""

    @abstractmethod
    def to_slot(self, root: Any) -> int:
        """The slot for this key in a map rooted at ``root``."""


@dataclass(frozen=True)
class SignedKey(StorageKey):
    """A two's-complement integer key of ``bits`` bits."""

    value: int
    bits: int = 256

    def __post_init__(self) -> None:
        if not 1 <= self.bits <= 256:
            raise ValueError(f"bit width must be 1 to 256, got {self.bits}")
        bound = 1 << (self.bits - 1)
        if not -bound <= self.value < bound:
            raise ValueError(f"{self.value} does not fit in {self.bits} signed bits")

    def to_slot(self, root: Any) -> int:
        return _uint_slot(self.value % (1 << self.bits), root)


@dataclass(frozen=True)
class FixedBytesKey(StorageKey):
    """A fixed-size byte string key, padded on the right to a word."""

    data: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", bytes(self.data))
        if len(self.data) > WORD_BYTES:
            raise ValueError(f"fixed bytes hold at most {WORD_BYTES} bytes, got {len(self.data)}")

    def to_slot(self, root: Any) -> int:
        return _hash_slot(self.data.ljust(WORD_BYTES, b"\0"), root)


@dataclass(frozen=True)
class AddressKey(StorageKey):
    """A 20-byte address key, hashed as an unsigned integer."""

    address: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", bytes(self.address))
        if len(self.address) != ADDRESS_BYTES:
            raise ValueError(f"an address is {ADDRESS_BYTES} bytes, got {len(self.address)}")

    def to_slot(self, root: Any) -> int:
        return _uint_slot(int.from_bytes(self.address, "big"), root)


def key_slot(key: Any, root: Any) -> int:
    """The slot for ``key`` in a map rooted at ``root`` (an int or 32 bytes).

    Non-negative ints are unsigned keys; bytes and str are hashed unpadded.
    """
    if isinstance(key, StorageKey):
        return key.to_slot(root)
    if isinstance(key, bool):
        return _uint_slot(int(key), root)
    if isinstance(key, int):
        if not 0 <= key < MAX_KEY:
            raise ValueError(f"unsigned key out of range: {key}; use SignedKey for signed keys")
        return _uint_slot(key, root)
    if isinstance(key, (bytes, bytearray, memoryview)):
        return _hash_slot(bytes(key), root)
    if isinstance(key, str):
        return _hash_slot(key.encode("utf-8"), root)
    raise TypeError(f"unsupported map key type: {type(key).__name__}")


class StorageMap(StorageType):
    """Accessor for a storage-backed map whose values are of type ``VALUE``."""

    VALUE: ClassVar[type[StorageType] | None] = None

    def __init__(self, slot: int, offset: int = 0) -> None:
        if self.VALUE is None:
            raise TypeError("make a map type with StorageMap.of(value)")
        if offset != 0:
            raise ValueError(f"a map must start at offset 0, got {offset}")
        super().__init__(slot, offset)

    @staticmethod
    def of(value: type[StorageType]) -> type[StorageMap]:
        """Return the map type holding values of ``value``."""
        return _map_type(value)

    @property
    def _value(self) -> type[StorageType]:
        assert self.VALUE is not None
        return self.VALUE

    def _child(self, key: Any) -> StorageType:
        slot = key_slot(key, self.slot)
        return self._value(slot, WORD_BYTES - self._value.SLOT_BYTES)

    def getter(self, key: Any) -> StorageType:
        """Accessor for the value at ``key``."""
        return self._child(key)

    def setter(self, key: Any) -> StorageType:
        """Mutable accessor for the value at ``key``."""
        return self._child(key)

    def get(self, key: Any) -> Any:
        """The value at ``key``, or the zero value when none is there."""
        return self._child(key).load()

    def insert(self, key: Any, value: Any) -> None:
        """Set the value at ``key``."""
        _require_simple(self._value)
        self._child(key).set_by_wrapped(value)  # type: ignore[attr-defined]

    def replace(self, key: Any, value: Any) -> Any:
        """Set the value at ``key`` and return the previous one."""
        _require_simple(self._value)
        prior = self._child(key).load()
        self._child(key).set_by_wrapped(value)  # type: ignore[attr-defined]
        return prior

    def take(self, key: Any) -> Any:
        """Erase the value at ``key`` and return what was there."""
        _require_simple(self._value)
        value = self._child(key).load()
        self._child(key).erase()  # type: ignore[attr-defined]
        return value

    def delete(self, key: Any) -> None:
        """Erase the value at ``key``."""
        _require_erasable(self._value)
        self._child(key).erase()  # type: ignore[attr-defined]


@lru_cache(maxsize=None)
def _map_type(value: type[StorageType]) -> type[StorageMap]:
    _check_element(value)
    name = f"StorageMap[{value.__name__}]"
    return type(name, (StorageMap,), {
        "VALUE": value,
        "__module__": __name__,
        "__qualname__": name,
    })