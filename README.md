# stylusvm

Solidity-compatible persistent storage accessors and call/transaction
context for programs that run against an EVM-style state trie.

Storage accessors lay values out the way Solidity does. Small values are
packed into 32-byte words. Dynamic arrays and long byte strings start at
`keccak(slot)`. Mapping entries live at `keccak(key ‖ slot)`.

## Installation

```
pip install stylusvm
```

The one runtime dependency is `pycryptodome`, which supplies keccak256.

## The host

Every VM operation goes through a `Host` from `stylusvm.hostio`. A `Host` is
a dataclass that holds its state in memory:

- `balances` and `codehashes`, keyed by 20-byte addresses
- `storage`, a map from 32-byte keys to 32-byte words; zero words are removed
- the call context: `msg_sender`, `msg_value` and `msg_reentrant`
- the transaction context: `tx_origin`, `tx_gas_price` and `tx_ink_price`,
  which defaults to 10000
- `calldata`, `return_data`, `result` and `logs`

Its methods are `account_balance`, `account_codehash`,
`storage_load_bytes32`, `storage_store_bytes32`, `native_keccak256`,
`emit_log`, `read_return_data`, `return_data_size` and `write_result`.
`emit_log(data, topics)` takes at most four topics. The first `topics`
32-byte words of `data` become the topics of the recorded `Log`.

A default host is current when nothing else is set. `current_host()`
returns the current host. `set_host(host)` installs a host and returns the
previous one. The `use_host` context manager makes a host current for the
duration of a block:

```python
from stylusvm.hostio import Host, keccak, use_host

host = Host(msg_sender=b"\x11" * 20, msg_value=5)
with use_host(host):
    digest = keccak(b"")
```

`CachedOption` wraps a loader function, calls it on the first `get()`, and
then serves the cached value. `set()` overwrites the cached value and
`reset()` discards it.

## Call, transaction and account context

```python
from stylusvm import accounts, msg, tx

caller = msg.sender()          # 20-byte address
paid = msg.value()             # wei
again = msg.reentrant()

who = tx.origin()
price = tx.gas_price()
ink = tx.gas_to_ink(21_000)    # saturates at 2**64 - 1
gas = tx.ink_to_gas(ink)       # rounds down

wei = accounts.balance(caller)
code = accounts.codehash(caller)  # None for an account without code
```

Values from `msg` and `tx` are cached. They are read again when the current
host changes.

`stylusvm.util` provides `evm_words(nbytes)` and `evm_padded_length(nbytes)`,
which size data in 32-byte words.

## Storage

Accessors read and write through a backend from `stylusvm.storage.backends`:

- `StorageCache`, the default, loads each word from the current host on its
  first read and keeps writes in memory. `flush()` writes the dirty words to
  the host and keeps the cache. `clear()` flushes and then empties the cache.
- `EagerStorage` reads from and writes to the host on every operation.

`current_storage()` returns the backend in use. `set_storage(storage)`
installs a backend and returns the previous one. `load_bytes32` and
`store_bytes32` go to the host directly and bypass any cache. Both backends
subclass `GlobalStorage` from `stylusvm.storage.traits`. `GlobalStorage`
provides byte-, integer- and slice-level reads and writes within a word:
`get`, `get_uint`, `get_signed`, `get_byte`, `set`, `set_uint`,
`set_signed`, `set_byte` and `clear_word`.

```python
from stylusvm.storage.backends import current_storage
from stylusvm.storage.bytes import StorageString
from stylusvm.storage.map import StorageMap
from stylusvm.storage.primitives import uint_type
from stylusvm.storage.vec import StorageVec

U256 = uint_type(256)

counter = U256(0, 0)
counter.set(counter.get() + 1)

numbers = StorageVec.of(U256)(1, 0)
numbers.push(7)
numbers.extend([8, 9])
assert numbers.pop() == 9

balances = StorageMap.of(U256)(2, 0)
balances.insert(b"alice", 100)
assert balances.get(b"alice") == 100

name = StorageString(3, 0)
name.set_str("stylus")
assert name.get_string() == "stylus"

current_storage().flush()
```

### Accessors

You construct every accessor as `Type(slot, offset)`.

Primitive accessors are in `stylusvm.storage.primitives`: `StorageUint`,
`StorageSigned`, `StorageFixedBytes`, `StorageBool`, `StorageAddress`,
`StorageBlockNumber` and `StorageBlockHash`. Each has `get`, `set`, `erase`
and `load`. Narrower widths come from these functions:

- `uint_type(bits)` and `signed_type(bits)` take multiples of 8, from 8 to 256.
- `fixed_bytes_type(size)` takes a size from 1 to 32 bytes.

Collections:

- `StorageArray.of(element, length)` in `stylusvm.storage.array`: a
  fixed-length array with packed elements.
- `StorageVec.of(element)` in `stylusvm.storage.vec`: a dynamic array. Its
  methods are `push`, `pop`, `grow`, `shrink`, `truncate`, `set_len`,
  `erase_last`, `erase` and `extend`.
- `StorageMap.of(value)` in `stylusvm.storage.map`: a mapping. Its methods
  are `get`, `insert`, `replace`, `take` and `delete`. Keys are hashed by
  `key_slot` as follows:
  - non-negative ints and bools are unsigned integers
  - `bytes` and `str` are hashed unpadded
  - `SignedKey`, `FixedBytesKey` and `AddressKey` cover the other key kinds
- `StorageBytes` and `StorageString` in `stylusvm.storage.bytes`: growable
  byte strings and UTF-8 text. They use the short and long layouts that
  Solidity uses.

Index lookups that fall out of bounds return `None`. They do not raise.

## What this package does not do

The host models state, not execution. The package does not run contract
code, make calls to other contracts, deploy contracts, or report block
information such as number, timestamp or basefee. It offers no way to read
calldata beyond the `Host.calldata` field itself.

## Running the tests

```
pip install -e ".[test]"
pytest
```