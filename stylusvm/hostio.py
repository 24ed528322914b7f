"""Host environment: the VM's state and the raw operations a program may invoke."""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Callable, Generic, Iterator, TypeVar

from Crypto.Hash import keccak as _keccak

ADDRESS_BYTES = 20
WORD_BYTES = 32
MAX_TOPICS = 4

ZERO_ADDRESS = bytes(ADDRESS_BYTES)
ZERO_WORD = bytes(WORD_BYTES)

T = TypeVar("T")


def keccak(data: bytes) -> bytes:
    """Return the 32-byte keccak256 digest of ``data``."""
    digest = _keccak.new(digest_bits=256)
    digest.update(bytes(data))
    return digest.digest()


def _checked(name: str, data: bytes, size: int) -> bytes:
    data = bytes(data)
    if len(data) != size:
        raise ValueError(f"{name} must be {size} bytes, got {len(data)}")
    return data


@dataclass(frozen=True)
class Log:
    """An emitted EVM log: up to four 32-byte topics and opaque data."""

    topics: tuple[bytes, ...]
    data: bytes


@dataclass
class Host:
    """In-memory model of the VM hooks available to a running program."""

    balances: dict[bytes, int] = field(default_factory=dict)
    codehashes: dict[bytes, bytes] = field(default_factory=dict)
    storage: dict[bytes, bytes] = field(default_factory=dict)
    msg_sender: bytes = ZERO_ADDRESS
    msg_value: int = 0
    msg_reentrant: bool = False
    tx_origin: bytes = ZERO_ADDRESS
    tx_gas_price: int = 0
    tx_ink_price: int = 10_000
    calldata: bytes = b""
    return_data: bytes = b""
    result: bytes = b""
    logs: list[Log] = field(default_factory=list)

    def account_balance(self, address: bytes) -> bytes:
        """Return the wei balance of ``address`` as a big-endian 32-byte word."""
        address = _checked("address", address, ADDRESS_BYTES)
        return self.balances.get(address, 0).to_bytes(WORD_BYTES, "big")

    def account_codehash(self, address: bytes) -> bytes:
        """Return the code hash of ``address``, all zeros when it has none."""
        address = _checked("address", address, ADDRESS_BYTES)
        return self.codehashes.get(address, ZERO_WORD)

    def storage_load_bytes32(self, key: bytes) -> bytes:
        """Read the word stored at ``key``; unset slots read as zero."""
        key = _checked("key", key, WORD_BYTES)
        return self.storage.get(key, ZERO_WORD)

    def storage_store_bytes32(self, key: bytes, value: bytes) -> None:
        """Write ``value`` to the slot at ``key``."""
        key = _checked("key", key, WORD_BYTES)
        value = _checked("value", value, WORD_BYTES)
        if value == ZERO_WORD:
            self.storage.pop(key, None)
        else:
            self.storage[key] = value

    def native_keccak256(self, data: bytes) -> bytes:
        """Hash ``data`` with keccak256."""
        return keccak(data)

    def emit_log(self, data: bytes, topics: int) -> Log:
        """Emit a log whose first ``topics`` words of ``data`` are its topics."""
        data = bytes(data)
        if not 0 <= topics <= MAX_TOPICS:
            raise ValueError(f"a log takes at most {MAX_TOPICS} topics, got {topics}")
        split = topics * WORD_BYTES
        if len(data) < split:
            raise ValueError(f"{topics} topics need {split} bytes, got {len(data)}")
        log = Log(
            topics=tuple(data[i:i + WORD_BYTES] for i in range(0, split, WORD_BYTES)),
            data=data[split:],
        )
        self.logs.append(log)
        return log

    def read_return_data(self, offset: int, size: int) -> bytes:
        """Copy the part of the last return data that overlaps ``[offset, offset+size)``."""
        if offset < 0 or size < 0:
            raise ValueError("offset and size must be non-negative")
        return self.return_data[offset:offset + size]

    def return_data_size(self) -> int:
        """Length of the last call or deployment's return data."""
        return len(self.return_data)

    def write_result(self, data: bytes) -> None:
        """Set the program's final return data."""
        self.result = bytes(data)


_DEFAULT_HOST = Host()
_current: ContextVar[Host] = ContextVar("stylusvm_host", default=_DEFAULT_HOST)


def current_host() -> Host:
    """Return the host that operations are currently directed at."""
    return _current.get()


def set_host(host: Host) -> Host:
    """Install ``host`` as the current host and return the previous one."""
    previous = _current.get()
    _current.set(host)
    return previous


@contextmanager
def use_host(host: Host) -> Iterator[Host]:
    """Make ``host`` current for the duration of the block."""
    token = _current.set(host)
    try:
        yield host
    finally:
        _current.reset(token)


class CachedOption(Generic[T]):
    """A value loaded lazily once and then served from cache."""

    def __init__(self, loader: Callable[[], T]) -> None:
        self._loader = loader
        self._value: T | None = None
        self._loaded = False

    def set(self, value: T) -> None:
        """Overwrite the cached value."""
        self._value = value
        self._loaded = True

    def get(self) -> T:
        """Return the cached value, loading it first if needed."""
        if not self._loaded:
            self.set(self._loader())
        return self._value  # type: ignore[return-value]

    def reset(self) -> None:
        """Forget the cached value so the next ``get`` loads afresh."""
        self._value = None
        self._loaded = False