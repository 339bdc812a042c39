# explicithash

A low-level hash table in which you pass the hash and the equality test to
every operation. It does not use the elements' own `__hash__` and `__eq__`.

This helps when elements cannot compute their own hash or be compared on
their own. Examples are an index-map that stores integer positions into a
list, lookups where the hash is already known, and elements whose key part
is changed in a way that leaves the hash unchanged.

The table does not stop you from storing several elements with equal keys.
It keeps working, and lookups then return any one of the matches, but each
lookup has to look at more elements.

Hashes are treated as unsigned 64-bit values. Any integer you pass is masked
to its low 64 bits.

## Installation

```
pip install explicithash
```

## Usage

```python
from explicithash.table import HashTable

def hasher(value):
    return hash(value[0]) & 0xFFFF_FFFF_FFFF_FFFF

table = HashTable()
table.insert_unique(hasher(("a", 1)), ("a", 1), hasher)
table.insert_unique(hasher(("b", 2)), ("b", 2), hasher)

print(table.find(hasher(("a",)), lambda v: v[0] == "a"))   # ('a', 1)
print(table.find(hasher(("z",)), lambda v: v[0] == "z"))   # None
print(len(table), table.is_empty())                        # 2 False
```

`find` returns `None` when nothing matches. Iterating over a table yields its
elements in no particular order.

### Entries

These entry classes live in `explicithash.entry`.

`HashTable.entry(hash, eq, hasher)` returns an `OccupiedEntry` or a
`VacantEntry`. Before it returns, it makes room for one more element, so a
vacant entry can always be filled. With the entry you can update, insert or
remove without a second lookup:

```python
entry = table.entry(hasher(("a",)), lambda v: v[0] == "a", hasher)
entry.and_modify(lambda v: (v[0], v[1] + 1)).or_insert(("a", 0))
```

- `insert(value)` sets the value, replacing any existing one. It returns an
  `OccupiedEntry`.
- `or_insert(default)` and `or_insert_with(factory)` fill a vacant entry and
  return the occupied entry. `factory` is called only when it is needed.
- `and_modify(f)` replaces an occupied entry's value with `f(value)`. A vacant
  entry is returned unchanged.
- `OccupiedEntry.get()` returns the element.
- `OccupiedEntry.replace(value)` stores a new element and returns the old one.
  The new element must have the same hash.
- `OccupiedEntry.remove()` returns the removed element together with a
  `VacantEntry` for the same hash. Using the removed entry again raises
  `RuntimeError`.
- `into_table()` returns the table the entry belongs to.

`HashTable.find_entry(hash, eq)` never grows the table. It returns an
`OccupiedEntry`, or an `AbsentEntry` when nothing matches.
`AbsentEntry.into_table()` returns the table.

`HashTable.insert_unique(hash, value, hasher)` inserts without checking for
an equal element and returns an `OccupiedEntry` for the new element.

### Bulk operations

- `retain(f)` keeps only the elements for which `f` returns true.
- `drain()` empties the table at once. It returns a `Drain` iterator over the
  former elements, and `len()` of the iterator gives how many remain to be
  taken.
- `extract_if(f)` returns an `ExtractIf` iterator. It removes and yields the
  elements for which `f` is true, testing them as it advances. If you stop
  iterating early, the rest stay in the table.
- `update(f)` replaces every element with `f(element)`.
  `update_hash(hash, f)` does the same for the elements that `iter_hash`
  would yield. In both cases the hashes must not change.
- `iter_hash(hash)` yields the candidates for a hash. Check each one, because
  it can also yield elements whose hash is different.
- `get_many(hashes, eq)` looks up several keys at once and returns a list.
  `eq(i, value)` tests key `i`, and a missing key gives `None`. The call
  raises `ValueError` if two keys resolve to the same element.
- `copy()` returns a shallow copy of the table.

`Drain` and `ExtractIf` are in `explicithash.iterators`.

### Capacity

These calls control and report storage: `HashTable(capacity)`,
`HashTable.with_capacity(n)`, `reserve(additional, hasher)`,
`try_reserve(additional, hasher)`, `shrink_to(min_capacity, hasher)`,
`shrink_to_fit(hasher)`, `capacity()` and `allocation_size()`.

A new table with capacity 0 has `capacity()` and `allocation_size()` both 0.
Removing elements never lowers the capacity.

A `hasher` is needed whenever elements may be moved to new storage. It must
return the same hash each element was inserted with.

Both `reserve` and `try_reserve` raise `explicithash.raw.TryReserveError` when
the requested capacity would overflow. Both raise `ValueError` for a negative
amount.

### Lower-level storage

`explicithash.raw.RawTable` is the storage behind `HashTable`. It works with
bucket indices: `find`, `insert`, `insert_in_slot`, `remove`, `get`, `set`,
`iter_indices` and `iter_hash_indices`.

`capacity_to_buckets` and `bucket_mask_to_capacity` give the sizing policy.

## What this package does not provide

There is only the low-level table. There is no map or set type that computes
hashes and compares keys for you. To get one, wrap `HashTable` in a type that
supplies those functions.

## Running the tests

```
pip install -e ".[test]"
pytest
```