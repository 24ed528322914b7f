"""Affordances for inspecting the current transaction."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from .hostio import CachedOption, Host, current_host

T = TypeVar("T")

U64_MAX = 2**64 - 1


class _HostCached(Generic[T]):
    """Caches a value read from the host, reloading when the current host changes."""

    def __init__(self, read: Callable[[Host], T]) -> None:
        self._read = read
        self._host: Host | None = None
        self._cache: CachedOption[T] = CachedOption(lambda: self._read(current_host()))

    def get(self) -> T:
        host = current_host()
        if host is not self._host:
            self._cache.reset()
            self._host = host
        return self._cache.get()


_INK_PRICE = _HostCached(lambda host: int(host.tx_ink_price))
_GAS_PRICE = _HostCached(lambda host: int(host.tx_gas_price))
_ORIGIN = _HostCached(lambda host: bytes(host.tx_origin))


def ink_price() -> int:
    """The price of ink in EVM gas basis points."""
    return _INK_PRICE.get()


def gas_to_ink(gas: int) -> int:
    """Convert EVM gas to ink, saturating at the largest 64-bit value."""
    if gas < 0:
        raise ValueError("gas must be non-negative")
    return min(gas * ink_price(), U64_MAX)


def ink_to_gas(ink: int) -> int:
    """Convert ink to EVM gas, rounding down."""
    if ink < 0:
        raise ValueError("ink must be non-negative")
    return ink // ink_price()


def gas_price() -> int:
    """The gas price in wei per gas."""
    return _GAS_PRICE.get()


def origin() -> bytes:
    """The 20-byte address of the transaction's top-level sender."""
    return _ORIGIN.get()