"""Views into one position of a hash table, found by an explicit hash."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from explicithash.raw import RawTable


class Entry:
    """A position in a table that is either occupied or vacant.

    Obtained from a table lookup that may insert. The concrete kinds are
    :class:`OccupiedEntry` and :class:`VacantEntry`.
    """

    __slots__ = ("_table", "_raw", "_hash")

    def __init__(self, table: Any, raw: RawTable, hash: int) -> None:
        self._table = table
        self._raw = raw
        self._hash = hash

    def insert(self, value: Any) -> OccupiedEntry:
        """Set the entry's value, replacing any existing one."""
        match self:
            case OccupiedEntry():
                self.replace(value)
                return self
            case VacantEntry():
                return self._fill(value)
        raise TypeError(f"{type(self).__name__} is neither occupied nor vacant")

    def or_insert(self, default: Any) -> OccupiedEntry:
        """Insert ``default`` if the entry is vacant; return the occupied entry."""
        return self.or_insert_with(lambda: default)

    def or_insert_with(self, default: Callable[[], Any]) -> OccupiedEntry:
        """Insert the result of ``default()`` if the entry is vacant.

        ``default`` is only called when a value is actually needed.
        """
        match self:
            case OccupiedEntry():
                return self
            case VacantEntry():
                return self._fill(default())
        raise TypeError(f"{type(self).__name__} is neither occupied nor vacant")

    def and_modify(self, f: Callable[[Any], Any]) -> Entry:
        """Replace an occupied entry's value with ``f(value)``; return the entry."""
        match self:
            case OccupiedEntry():
                self.replace(f(self.get()))
                return self
            case VacantEntry():
                return self
        raise TypeError(f"{type(self).__name__} is neither occupied nor vacant")

    def into_table(self) -> Any:
        """Return the table this entry belongs to."""
        return self._table


class OccupiedEntry(Entry):
    """An entry that holds an element of the table."""

    __slots__ = ("_index",)

    def __init__(self, table: Any, raw: RawTable, hash: int, index: int) -> None:
        super().__init__(table, raw, hash)
        self._index: int | None = index

    def _live_index(self) -> int:
        if self._index is None:
            raise RuntimeError("entry has already been removed")
        return self._index

    def get(self) -> Any:
        """Return the element in this entry."""
        return self._raw.get(self._live_index())

    def replace(self, value: Any) -> Any:
        """Store ``value`` in this entry and return the previous element.

        The new value must hash to the same value as the old one.
        """
        index = self._live_index()
        old = self._raw.get(index)
        self._raw.set(index, value)
        return old

    def remove(self) -> tuple[Any, VacantEntry]:
        """Take the element out of the table.

        Returns the element and a vacant entry that can receive another value
        with the same hash. This entry is unusable afterwards.
        """
        value, slot = self._raw.remove(self._live_index())
        self._index = None
        return value, VacantEntry(self._table, self._raw, self._hash, slot)

    def __repr__(self) -> str:
        return f"OccupiedEntry(value={self.get()!r})"


class VacantEntry(Entry):
    """An entry with room for a new element with a known hash."""

    __slots__ = ("_slot",)

    def __init__(self, table: Any, raw: RawTable, hash: int, slot: int) -> None:
        super().__init__(table, raw, hash)
        self._slot = slot

    def _fill(self, value: Any) -> OccupiedEntry:
        index = self._raw.insert_in_slot(self._hash, self._slot, value)
        return OccupiedEntry(self._table, self._raw, self._hash, index)

    def __repr__(self) -> str:
        return "VacantEntry"


class AbsentEntry:
    """The result of a lookup that found nothing and reserved no room."""

    __slots__ = ("_table",)

    def __init__(self, table: Any) -> None:
        self._table = table

    def into_table(self) -> Any:
        """Return the table the lookup was made in."""
        return self._table

    def __repr__(self) -> str:
        return "AbsentEntry"