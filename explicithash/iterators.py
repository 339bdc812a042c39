"""Iterators that take elements out of a :class:`~explicithash.raw.RawTable`."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterator
from typing import Any

from explicithash.raw import RawTable


class Drain:
    """Yields every element that was in a table, leaving the table empty.

    The table is emptied as soon as the drain is created; elements that are
    never taken from the iterator are simply discarded with it.
    """

    __slots__ = ("_items",)

    def __init__(self, raw: RawTable) -> None:
        self._items: deque[Any] = deque(raw.get(index) for index in raw.iter_indices())
        raw.clear()

    def __iter__(self) -> Drain:
        return self

    def __next__(self) -> Any:
        if not self._items:
            raise StopIteration
        return self._items.popleft()

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Drain({list(self._items)!r})"


class ExtractIf:
    """Removes and yields the elements for which ``f`` returns true.

    Elements are tested lazily as the iterator advances. If it is abandoned
    before it is exhausted, the elements not yet reached stay in the table.
    """

    __slots__ = ("_raw", "_f", "_indices")

    def __init__(self, raw: RawTable, f: Callable[[Any], bool]) -> None:
        self._raw = raw
        self._f = f
        self._indices: Iterator[int] = raw.iter_indices()

    def __iter__(self) -> ExtractIf:
        return self

    def __next__(self) -> Any:
        for index in self._indices:
            if self._f(self._raw.get(index)):
                value, _ = self._raw.remove(index)
                return value
        raise StopIteration