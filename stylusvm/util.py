"""Helpers for sizing data in 32-byte EVM words."""

WORD_BYTES = 32


def evm_words(nbytes: int) -> int:
    """Minimum number of EVM words needed to hold ``nbytes`` bytes."""
    if nbytes < 0:
        raise ValueError("byte count must be non-negative")
    return (nbytes + WORD_BYTES - 1) // WORD_BYTES


def evm_padded_length(nbytes: int) -> int:
    """Round ``nbytes`` up to the next multiple of 32."""
    return evm_words(nbytes) * WORD_BYTES