"""Accessors for single values stored inline in a storage word."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Callable, ClassVar

from ..hostio import ADDRESS_BYTES, WORD_BYTES, ZERO_ADDRESS, ZERO_WORD
from .backends import current_storage
from .traits import SimpleStorageType

_UNSET = object()
U64_MAX = 2**64 - 1


class _Primitive(SimpleStorageType):
    """Inline value accessor that caches the value it reads or writes."""

    def __init__(self, slot: int, offset: int = 0) -> None:
        super().__init__(slot, offset)
        if offset + self.SLOT_BYTES > WORD_BYTES:
            raise ValueError(
                f"{self.SLOT_BYTES} bytes at offset {offset} do not fit in one word"
            )
        self._cached: Any = _UNSET

    def _cache(self, read: Callable[[], Any]) -> Any:
        if self._cached is _UNSET:
            self._cached = read()
        return self._cached


class StorageUint(_Primitive):
    """Accessor for an unsigned integer of ``BITS`` bits."""

    BITS: ClassVar[int] = 256
    SLOT_BYTES: ClassVar[int] = 32
    ZERO: ClassVar[Any] = 0

    def get(self) -> int:
        """Read the integer from storage."""
        return self._cache(
            lambda: current_storage().get_uint(self.slot, self.offset, self.BITS)
        )

    def set(self, value: int) -> None:
        """Write the integer to storage."""
        current_storage().set_uint(self.slot, self.offset, self.BITS, value)
        self._cached = value

    def erase(self) -> None:
        self.set(0)

    def load(self) -> int:
        return self.get()


class StorageSigned(_Primitive):
    """Accessor for a two's-complement integer of ``BITS`` bits."""

    BITS: ClassVar[int] = 256
    SLOT_BYTES: ClassVar[int] = 32
    ZERO: ClassVar[Any] = 0

    def get(self) -> int:
        """Read the integer from storage."""
        return self._cache(
            lambda: current_storage().get_signed(self.slot, self.offset, self.BITS)
        )

    def set(self, value: int) -> None:
        """Write the integer to storage."""
        current_storage().set_signed(self.slot, self.offset, self.BITS, value)
        self._cached = value

    def erase(self) -> None:
        self.set(0)

    def load(self) -> int:
        return self.get()


class StorageFixedBytes(_Primitive):
    """Accessor for a fixed-size byte string of ``SIZE`` bytes."""

    SIZE: ClassVar[int] = 32
    SLOT_BYTES: ClassVar[int] = 32
    ZERO: ClassVar[Any] = ZERO_WORD

    def get(self) -> bytes:
        """Read the bytes from storage."""
        return self._cache(
            lambda: current_storage().get(self.slot, self.offset, self.SIZE)
        )

    def set(self, value: bytes) -> None:
        """Write the bytes to storage."""
        value = bytes(value)
        if len(value) != self.SIZE:
            raise ValueError(f"expected {self.SIZE} bytes, got {len(value)}")
        current_storage().set(self.slot, self.offset, value)
        self._cached = value

    def erase(self) -> None:
        self.set(bytes(self.SIZE))

    def load(self) -> bytes:
        return self.get()


class StorageBool(_Primitive):
    """Accessor for a boolean stored in one byte."""

    SLOT_BYTES: ClassVar[int] = 1
    ZERO: ClassVar[Any] = False

    def get(self) -> bool:
        """Read the flag from storage."""
        return self._cache(
            lambda: current_storage().get_byte(self.slot, self.offset) != 0
        )

    def set(self, value: bool) -> None:
        """Write the flag to storage."""
        value = bool(value)
        current_storage().set_byte(self.slot, self.offset, int(value))
        self._cached = value

    def erase(self) -> None:
        self.set(False)

    def load(self) -> bool:
        return self.get()


class StorageAddress(_Primitive):
    """Accessor for a 20-byte address."""

    SLOT_BYTES: ClassVar[int] = ADDRESS_BYTES
    ZERO: ClassVar[Any] = ZERO_ADDRESS

    def get(self) -> bytes:
        """Read the address from storage."""
        return self._cache(
            lambda: current_storage().get(self.slot, self.offset, ADDRESS_BYTES)
        )

    def set(self, value: bytes) -> None:
        """Write the address to storage."""
        value = bytes(value)
        if len(value) != ADDRESS_BYTES:
            raise ValueError(f"an address is {ADDRESS_BYTES} bytes, got {len(value)}")
        current_storage().set(self.slot, self.offset, value)
        self._cached = value

    def erase(self) -> None:
        self.set(ZERO_ADDRESS)

    def load(self) -> bytes:
        return self.get()


class StorageBlockNumber(_Primitive):
    """Accessor for a 64-bit block number."""

    SLOT_BYTES: ClassVar[int] = 8
    ZERO: ClassVar[Any] = 0

    def get(self) -> int:
        """Read the block number from storage."""
        return self._cache(
            lambda: int.from_bytes(current_storage().get(self.slot, self.offset, 8), "big")
        )

    def set(self, value: int) -> None:
        """Write the block number to storage."""
        if not 0 <= value <= U64_MAX:
            raise ValueError(f"block number out of range: {value}")
        current_storage().set(self.slot, self.offset, value.to_bytes(8, "big"))
        self._cached = value

    def erase(self) -> None:
        self.set(0)

    def load(self) -> int:
        return self.get()


class StorageBlockHash(_Primitive):
    """Accessor for a 32-byte block hash occupying a whole word."""

    ZERO: ClassVar[Any] = ZERO_WORD

    def __init__(self, slot: int, offset: int = 0) -> None:
        super().__init__(slot, 0)

    def get(self) -> bytes:
        """Read the hash from storage."""
        return self._cache(lambda: current_storage().get_word(self.slot))

    def set(self, value: bytes) -> None:
        """Write the hash to storage."""
        value = bytes(value)
        if len(value) != WORD_BYTES:
            raise ValueError(f"a block hash is {WORD_BYTES} bytes, got {len(value)}")
        current_storage().set_word(self.slot, value)
        self._cached = value

    def erase(self) -> None:
        self.set(ZERO_WORD)

    def load(self) -> bytes:
        return self.get()


def _check_bits(bits: int) -> None:
    if not (8 <= bits <= 256 and bits % 8 == 0):
        raise ValueError(f"integer width must be a multiple of 8 from 8 to 256, got {bits}")


@lru_cache(maxsize=None)
def uint_type(bits: int) -> type[StorageUint]:
    """Return the unsigned-integer accessor class for ``bits`` bits."""
    _check_bits(bits)
    if bits == 256:
        return StorageUint
    name = f"StorageU{bits}"
    return type(name, (StorageUint,), {
        "BITS": bits, "SLOT_BYTES": bits // 8, "__module__": __name__, "__qualname__": name,
    })


@lru_cache(maxsize=None)
def signed_type(bits: int) -> type[StorageSigned]:
    """Return the signed-integer accessor class for ``bits`` bits."""
    _check_bits(bits)
    if bits == 256:
        return StorageSigned
    name = f"StorageI{bits}"
    return type(name, (StorageSigned,), {
        "BITS": bits, "SLOT_BYTES": bits // 8, "__module__": __name__, "__qualname__": name,
    })


@lru_cache(maxsize=None)
def fixed_bytes_type(size: int) -> type[StorageFixedBytes]:
    """Return the fixed-bytes accessor class for ``size`` bytes (1 to 32)."""
    if not 1 <= size <= WORD_BYTES:
        raise ValueError(f"fixed bytes size must be 1 to 32, got {size}")
    if size == WORD_BYTES:
        return StorageFixedBytes
    name = f"StorageB{size * 8}"
    return type(name, (StorageFixedBytes,), {
        "SIZE": size, "SLOT_BYTES": size, "ZERO": bytes(size),
        "__module__": __name__, "__qualname__": name,
    })