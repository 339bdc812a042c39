"""Open-addressing storage with control bytes, probed by caller-supplied hashes.

Buckets are grouped into probe windows. Every bucket has a control byte that
is either ``EMPTY``, ``DELETED`` or the top seven bits of the stored element's
hash. Lookups only call the equality function on buckets whose control byte
matches, and stop at the first window that holds an ``EMPTY`` bucket.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from itertools import takewhile
from typing import Any

USIZE_MAX = 2**64 - 1
ISIZE_MAX = 2**63 - 1
GROUP_WIDTH = 16
EMPTY = 0xFF
DELETED = 0x80

_HASH_MASK = USIZE_MAX
_SPECIAL_BIT = 0x80
# Every stored element is a reference; this is its size in the allocation estimate.
_SLOT_SIZE = 8

Hasher = Callable[[Any], int]
Eq = Callable[[Any], bool]


class TryReserveError(Exception):
    """Raised when a requested capacity overflows or cannot be allocated."""

    def __init__(self, message: str = "capacity overflow") -> None:
        super().__init__(message)


def capacity_to_buckets(capacity: int) -> int:
    """Return the number of buckets needed to hold ``capacity`` elements."""
    if capacity < 1:
        raise ValueError("capacity must be positive")
    if capacity < 8:
        return 4 if capacity < 4 else 8
    if capacity > USIZE_MAX // 8:
        raise TryReserveError()
    adjusted = capacity * 8 // 7
    buckets = 1 << (adjusted - 1).bit_length()
    if buckets > USIZE_MAX:
        raise TryReserveError()
    return buckets


def bucket_mask_to_capacity(bucket_mask: int) -> int:
    """Return how many elements a table with this bucket mask may hold."""
    if bucket_mask < 8:
        return bucket_mask
    return (bucket_mask + 1) // 8 * 7


def _tag(hash_value: int) -> int:
    return (hash_value >> 57) & 0x7F


def _fresh_storage(buckets: int) -> tuple[list[int], list[Any]]:
    if buckets * (_SLOT_SIZE + 1) + GROUP_WIDTH > ISIZE_MAX:
        raise TryReserveError()
    try:
        return [EMPTY] * buckets, [None] * buckets
    except MemoryError as exc:
        raise TryReserveError("memory allocation failed") from exc


class RawTable:
    """Hash table storage addressed by bucket index, with explicit hashing."""

    __slots__ = ("_ctrl", "_slots", "_bucket_mask", "_growth_left", "_items")

    def __init__(self, capacity: int = 0) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._items = 0
        if capacity == 0:
            self._set_unallocated()
        else:
            buckets = capacity_to_buckets(capacity)
            self._ctrl, self._slots = _fresh_storage(buckets)
            self._bucket_mask = buckets - 1
            self._growth_left = bucket_mask_to_capacity(self._bucket_mask)

    def _set_unallocated(self) -> None:
        self._bucket_mask = 0
        self._ctrl = [EMPTY]
        self._slots = [None]
        self._growth_left = 0
        self._items = 0

    # -- probing -----------------------------------------------------------

    def _probe_groups(self, hash_value: int) -> Iterator[list[int]]:
        mask = self._bucket_mask
        buckets = mask + 1
        width = min(GROUP_WIDTH, buckets)
        pos = hash_value & mask
        stride = 0
        for _ in range(buckets // width):
            yield [(pos + offset) & mask for offset in range(width)]
            stride += width
            pos = (pos + stride) & mask

    def _group_has_empty(self, group: list[int]) -> bool:
        return any(self._ctrl[index] == EMPTY for index in group)

    def _find_insert_slot(self, hash_value: int) -> int:
        for group in self._probe_groups(hash_value):
            for index in group:
                if self._ctrl[index] & _SPECIAL_BIT:
                    return index
        raise RuntimeError("no free bucket in table")

    def _check_full(self, index: int) -> None:
        if not 0 <= index <= self._bucket_mask or self._ctrl[index] & _SPECIAL_BIT:
            raise IndexError(f"bucket {index} is not occupied")

    # -- lookup ------------------------------------------------------------

    def find(self, hash: int, eq: Eq) -> int | None:
        """Return the index of the first element with ``hash`` accepted by ``eq``."""
        hash &= _HASH_MASK
        tag = _tag(hash)
        for group in self._probe_groups(hash):
            for index in group:
                if self._ctrl[index] == tag and eq(self._slots[index]):
                    return index
            if self._group_has_empty(group):
                return None
        return None

    def find_or_find_insert_slot(self, hash: int, eq: Eq, hasher: Hasher) -> tuple[bool, int]:
        """Return ``(True, index)`` of a match, or ``(False, slot)`` to insert into.

        Room for one more element is reserved first, so the slot can be filled
        without growing the table.
        """
        hash &= _HASH_MASK
        self.reserve(1, hasher)
        index = self.find(hash, eq)
        if index is not None:
            return True, index
        return False, self._find_insert_slot(hash)

    def iter_hash_indices(self, hash: int) -> Iterator[int]:
        """Yield indices of elements whose stored tag matches ``hash``."""
        hash &= _HASH_MASK
        tag = _tag(hash)
        for group in self._probe_groups(hash):
            yield from (index for index in group if self._ctrl[index] == tag)
            if self._group_has_empty(group):
                return

    def iter_indices(self) -> Iterator[int]:
        """Yield the indices of all occupied buckets."""
        for index in range(self._bucket_mask + 1):
            if not self._ctrl[index] & _SPECIAL_BIT:
                yield index

    # -- element access ----------------------------------------------------

    def get(self, index: int) -> Any:
        """Return the element stored in bucket ``index``."""
        self._check_full(index)
        return self._slots[index]

    def set(self, index: int, value: Any) -> None:
        """Replace the element stored in bucket ``index``."""
        self._check_full(index)
        self._slots[index] = value

    # -- mutation ----------------------------------------------------------

    def insert(self, hash: int, value: Any, hasher: Hasher) -> int:
        """Insert ``value`` without looking for an equal element; return its index."""
        hash &= _HASH_MASK
        slot = self._find_insert_slot(hash)
        if self._growth_left == 0 and self._ctrl[slot] == EMPTY:
            self.reserve(1, hasher)
            slot = self._find_insert_slot(hash)
        return self.insert_in_slot(hash, slot, value)

    def insert_in_slot(self, hash: int, slot: int, value: Any) -> int:
        """Store ``value`` in a free bucket found for ``hash``; return its index."""
        hash &= _HASH_MASK
        if not 0 <= slot <= self._bucket_mask or not self._ctrl[slot] & _SPECIAL_BIT:
            raise IndexError(f"bucket {slot} is not free")
        if self._ctrl[slot] == EMPTY:
            if self._growth_left == 0:
                raise RuntimeError("table has no room left; reserve first")
            self._growth_left -= 1
        self._ctrl[slot] = _tag(hash)
        self._slots[slot] = value
        self._items += 1
        return slot

    def remove(self, index: int) -> tuple[Any, int]:
        """Take the element out of bucket ``index``; return it and the freed slot."""
        self._check_full(index)
        value = self._slots[index]
        self._erase(index)
        return value, index

    def _run_length(self, positions: Iterator[int]) -> int:
        return sum(1 for _ in takewhile(lambda i: self._ctrl[i] != EMPTY, positions))

    def _erase(self, index: int) -> None:
        mask = self._bucket_mask
        if mask + 1 <= GROUP_WIDTH:
            mark_empty = True
        else:
            before = self._run_length((index - k) & mask for k in range(1, GROUP_WIDTH + 1))
            after = self._run_length((index + k) & mask for k in range(GROUP_WIDTH))
            mark_empty = before + after < GROUP_WIDTH
        if mark_empty:
            self._ctrl[index] = EMPTY
            self._growth_left += 1
        else:
            self._ctrl[index] = DELETED
        self._slots[index] = None
        self._items -= 1

    def clear(self) -> None:
        """Remove every element, keeping the allocated buckets."""
        if self._items == 0:
            return
        buckets = self._bucket_mask + 1
        self._ctrl = [EMPTY] * buckets
        self._slots = [None] * buckets
        self._items = 0
        self._growth_left = bucket_mask_to_capacity(self._bucket_mask)

    # -- capacity management -----------------------------------------------

    def reserve(self, additional: int, hasher: Hasher) -> None:
        """Make room for ``additional`` more elements, rehashing with ``hasher``."""
        if additional < 0:
            raise ValueError("additional must not be negative")
        if additional > self._growth_left:
            self._reserve_rehash(additional, hasher)

    def try_reserve(self, additional: int, hasher: Hasher) -> None:
        """Like :meth:`reserve`; on failure the table is left unchanged."""
        self.reserve(additional, hasher)

    def _reserve_rehash(self, additional: int, hasher: Hasher) -> None:
        new_items = self._items + additional
        if new_items > USIZE_MAX:
            raise TryReserveError()
        full_capacity = bucket_mask_to_capacity(self._bucket_mask)
        if new_items <= full_capacity // 2:
            self._rebuild(self._bucket_mask + 1, hasher)
        else:
            self._rebuild(capacity_to_buckets(max(new_items, full_capacity + 1)), hasher)

    def _rebuild(self, buckets: int, hasher: Hasher) -> None:
        values = [self._slots[index] for index in self.iter_indices()]
        hashes = [hasher(value) & _HASH_MASK for value in values]
        ctrl, slots = _fresh_storage(buckets)
        self._ctrl, self._slots = ctrl, slots
        self._bucket_mask = buckets - 1
        for hash_value, value in zip(hashes, values):
            slot = self._find_insert_slot(hash_value)
            ctrl[slot] = _tag(hash_value)
            slots[slot] = value
        self._items = len(values)
        self._growth_left = bucket_mask_to_capacity(self._bucket_mask) - self._items

    def shrink_to(self, min_capacity: int, hasher: Hasher) -> None:
        """Shrink storage while keeping room for at least ``min_capacity`` elements."""
        min_size = max(self._items, min_capacity)
        if min_size == 0:
            self._set_unallocated()
            return
        try:
            min_buckets = capacity_to_buckets(min_size)
        except TryReserveError:
            return
        if min_buckets < self._bucket_mask + 1:
            self._rebuild(min_buckets, hasher)

    # -- information -------------------------------------------------------

    def capacity(self) -> int:
        """Number of elements the table can hold without reallocating."""
        return self._items + self._growth_left

    def __len__(self) -> int:
        return self._items

    def allocation_size(self) -> int:
        """Estimated bytes held by the table's storage."""
        if self._bucket_mask == 0:
            return 0
        buckets = self._bucket_mask + 1
        return buckets * _SLOT_SIZE + buckets + GROUP_WIDTH

    def copy(self) -> RawTable:
        """Return a shallow copy sharing the stored elements."""
        clone = RawTable.__new__(RawTable)
        clone._ctrl = list(self._ctrl)
        clone._slots = list(self._slots)
        clone._bucket_mask = self._bucket_mask
        clone._growth_left = self._growth_left
        clone._items = self._items
        return clone

    def __repr__(self) -> str:
        return f"RawTable(len={self._items}, capacity={self.capacity()})"