"""Solidity-compatible storage accessors and call context over an in-memory EVM-style host."""

__version__ = "0.1.0"