"""Affordances for inspecting the current call."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from .hostio import CachedOption, Host, current_host

T = TypeVar("T")


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


_REENTRANT = _HostCached(lambda host: bool(host.msg_reentrant))
_SENDER = _HostCached(lambda host: bytes(host.msg_sender))
_VALUE = _HostCached(lambda host: int(host.msg_value))


def reentrant() -> bool:
    """Whether the current call is reentrant."""
    return _REENTRANT.get()


def sender() -> bytes:
    """The 20-byte address of the account that called the program."""
    return _SENDER.get()


def value() -> int:
    """The wei value sent with the current call."""
    return _VALUE.get()