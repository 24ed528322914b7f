"""Inspect the balance and code hash of accounts."""

from __future__ import annotations

from .hostio import ZERO_WORD, current_host


def balance(address: bytes) -> int:
    """The balance in wei of the account at ``address``."""
    return int.from_bytes(current_host().account_balance(address), "big")


def codehash(address: bytes) -> bytes | None:
    """The code hash of the account at ``address``, or None when it has no code."""
    data = current_host().account_codehash(address)
    return None if data == ZERO_WORD else data