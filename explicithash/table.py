"""A hash table whose callers supply the hash and equality of every lookup."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any

from explicithash.entry import AbsentEntry, OccupiedEntry, VacantEntry
from explicithash.iterators import Drain, ExtractIf
from explicithash.raw import RawTable

Hasher = Callable[[Any], int]
Eq = Callable[[Any], bool]


class HashTable:
    """Low-level hash table with explicit hashing.

    Methods that search for an element take a hash value and an equality
    function; the function is called on elements whose stored hash may match
    until it accepts one. Methods that may move elements take a ``hasher``
    that must return the hash each element was inserted with.

    Nothing stops several equal elements from being stored; lookups then
    return any one of them.
    """

    __slots__ = ("_raw",)

    def __init__(self, capacity: int = 0) -> None:
        self._raw = RawTable(capacity)

    @classmethod
    def with_capacity(cls, capacity: int) -> HashTable:
        """Create an empty table able to hold ``capacity`` elements without growing."""
        return cls(capacity)

    # -- lookup ------------------------------------------------------------

    def find(self, hash: int, eq: Eq) -> Any:
        """Return the element with ``hash`` accepted by ``eq``, or ``None``."""
        index = self._raw.find(hash, eq)
        return None if index is None else self._raw.get(index)

    def find_entry(self, hash: int, eq: Eq) -> OccupiedEntry | AbsentEntry:
        """Return an occupied entry for the matching element, or an absent entry.

        Unlike :meth:`entry`, this never grows the table.
        """
        index = self._raw.find(hash, eq)
        if index is None:
            return AbsentEntry(self)
        return OccupiedEntry(self, self._raw, hash, index)

    def entry(self, hash: int, eq: Eq, hasher: Hasher) -> OccupiedEntry | VacantEntry:
        """Return an occupied entry for the matching element, or a vacant one.

        The table may grow so that a vacant entry can be filled.
        """
        found, index = self._raw.find_or_find_insert_slot(hash, eq, hasher)
        if found:
            return OccupiedEntry(self, self._raw, hash, index)
        return VacantEntry(self, self._raw, hash, index)

    def iter_hash(self, hash: int) -> Iterator[Any]:
        """Yield elements that may have ``hash``; others can appear as well."""
        for index in self._raw.iter_hash_indices(hash):
            yield self._raw.get(index)

    def get_many(self, hashes: Iterable[int], eq: Callable[[int, Any], bool]) -> list[Any]:
        """Look up several elements at once.

        ``eq(i, value)`` must accept the element wanted by the ``i``-th hash.
        Missing elements come back as ``None``. Raises :class:`ValueError`
        if two lookups find the same element.
        """
        indices = [
            self._raw.find(hash, lambda value, i=i: eq(i, value))
            for i, hash in enumerate(hashes)
        ]
        found = [index for index in indices if index is not None]
        if len(found) != len(set(found)):
            raise ValueError("duplicate keys found")
        return [None if index is None else self._raw.get(index) for index in indices]

    # -- mutation ----------------------------------------------------------

    def insert_unique(self, hash: int, value: Any, hasher: Hasher) -> OccupiedEntry:
        """Insert ``value`` without checking for an equal element."""
        index = self._raw.insert(hash, value, hasher)
        return OccupiedEntry(self, self._raw, hash, index)

    def clear(self) -> None:
        """Remove every element, keeping the capacity."""
        self._raw.clear()

    def update(self, f: Callable[[Any], Any]) -> None:
        """Replace every element with ``f(element)``; hashes must not change."""
        for index in self._raw.iter_indices():
            self._raw.set(index, f(self._raw.get(index)))

    def update_hash(self, hash: int, f: Callable[[Any], Any]) -> None:
        """Replace each element :meth:`iter_hash` would yield with ``f(element)``."""
        for index in self._raw.iter_hash_indices(hash):
            self._raw.set(index, f(self._raw.get(index)))

    def retain(self, f: Callable[[Any], bool]) -> None:
        """Keep only the elements for which ``f`` returns true."""
        for index in list(self._raw.iter_indices()):
            if not f(self._raw.get(index)):
                self._raw.remove(index)

    def drain(self) -> Drain:
        """Empty the table, returning an iterator over its former elements."""
        return Drain(self._raw)

    def extract_if(self, f: Callable[[Any], bool]) -> ExtractIf:
        """Lazily remove and yield the elements for which ``f`` returns true."""
        return ExtractIf(self._raw, f)

    # -- capacity ----------------------------------------------------------

    def shrink_to_fit(self, hasher: Hasher) -> None:
        """Shrink the capacity as far as the resize policy allows."""
        self._raw.shrink_to(len(self._raw), hasher)

    def shrink_to(self, min_capacity: int, hasher: Hasher) -> None:
        """Shrink the capacity, keeping room for at least ``min_capacity`` elements."""
        self._raw.shrink_to(min_capacity, hasher)

    def reserve(self, additional: int, hasher: Hasher) -> None:
        """Make room for at least ``additional`` more elements."""
        self._raw.reserve(additional, hasher)

    def try_reserve(self, additional: int, hasher: Hasher) -> None:
        """Like :meth:`reserve`, raising :class:`TryReserveError` on overflow."""
        self._raw.try_reserve(additional, hasher)

    def capacity(self) -> int:
        """Number of elements the table can hold without growing."""
        return self._raw.capacity()

    def allocation_size(self) -> int:
        """Estimated bytes held by the table's storage."""
        return self._raw.allocation_size()

    # -- information -------------------------------------------------------

    def is_empty(self) -> bool:
        """Return true if the table holds no elements."""
        return len(self._raw) == 0

    def __len__(self) -> int:
        return len(self._raw)

    def __iter__(self) -> Iterator[Any]:
        for index in self._raw.iter_indices():
            yield self._raw.get(index)

    def copy(self) -> HashTable:
        """Return a shallow copy of the table."""
        clone = HashTable.__new__(HashTable)
        clone._raw = self._raw.copy()
        return clone

    def __repr__(self) -> str:
        return "HashTable({" + ", ".join(repr(value) for value in self) + "})"