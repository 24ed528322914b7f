"""Solidity-compatible storage accessors, collections and persistent-storage backends."""