import pytest
from hypothesis import given
from hypothesis import strategies as st

from explicithash.entry import AbsentEntry, OccupiedEntry, VacantEntry
from explicithash.raw import TryReserveError
from explicithash.table import HashTable


def h(value):
    return hash(value)


def key_hasher(pair):
    return h(pair[0])


def filled(values):
    table = HashTable()
    for value in values:
        table.insert_unique(h(value), value, h)
    return table


def test_allocation_info():
    assert HashTable().allocation_size() == 0
    assert HashTable(0).allocation_size() == 0
    assert HashTable.with_capacity(1).allocation_size() > 4


def test_new_is_empty_without_capacity():
    table = HashTable()
    assert len(table) == 0
    assert table.capacity() == 0
    assert table.is_empty()


def test_with_capacity():
    table = HashTable.with_capacity(10)
    assert len(table) == 0
    assert table.capacity() >= 10


def test_with_capacity_holds_without_growing():
    table = HashTable.with_capacity(5)
    before = table.capacity()
    assert before >= 5
    for word in ["One", "Two", "Three", "Four", "Five"]:
        table.insert_unique(h(word), word, h)
    assert len(table) == 5
    assert table.capacity() == before


def test_find():
    table = filled([1, 2, 3])
    assert table.find(h(2), lambda v: v == 2) == 2
    assert table.find(h(4), lambda v: v == 4) is None


def test_find_entry_replace():
    table = HashTable()
    table.insert_unique(h(1), (1, "a"), key_hasher)
    entry = table.find_entry(h(1), lambda v: v[0] == 1)
    assert isinstance(entry, OccupiedEntry)
    assert entry.replace((1, "b")) == (1, "a")
    assert table.find(h(1), lambda v: v[0] == 1) == (1, "b")
    assert table.find(h(2), lambda v: v[0] == 2) is None


def test_find_entry_remove():
    table = HashTable()
    table.insert_unique(h(1), (1, "a"), key_hasher)
    entry = table.find_entry(h(1), lambda v: v[0] == 1)
    value, vacant = entry.remove()
    assert value == (1, "a")
    assert isinstance(vacant, VacantEntry)
    assert table.find(h(1), lambda v: v[0] == 1) is None


def test_find_entry_absent():
    table = HashTable()
    absent = table.find_entry(h("a"), lambda x: x == "a")
    assert isinstance(absent, AbsentEntry)
    absent.into_table().insert_unique(h("a"), "a", h)
    assert table.find(h("a"), lambda x: x == "a") == "a"
    assert len(table) == 1


def test_entry_occupied_and_vacant():
    table = HashTable()
    table.insert_unique(h(1), (1, "a"), key_hasher)
    occupied = table.entry(h(1), lambda v: v[0] == 1, key_hasher)
    assert isinstance(occupied, OccupiedEntry)
    occupied.remove()
    vacant = table.entry(h(2), lambda v: v[0] == 2, key_hasher)
    assert isinstance(vacant, VacantEntry)
    vacant.insert((2, "b"))
    assert table.find(h(1), lambda v: v[0] == 1) is None
    assert table.find(h(2), lambda v: v[0] == 2) == (2, "b")


def test_entry_insert_and_or_insert():
    table = filled(["a", "b", "c"])
    assert len(table) == 3
    table.entry(h("a"), lambda x: x == "a", h).insert("a")
    assert len(table) == 3
    table.entry(h("d"), lambda x: x == "d", h).insert("d")
    table.entry(h("b"), lambda x: x == "b", h).or_insert("b")
    table.entry(h("e"), lambda x: x == "e", h).or_insert("e")
    assert sorted(table) == ["a", "b", "c", "d", "e"]


def test_entry_insert_returns_occupied():
    table = HashTable()
    entry = table.entry(h("horseyland"), lambda x: x == "horseyland", h).insert("horseyland")
    assert entry.get() == "horseyland"


def test_or_insert_existing_keeps_one():
    table = HashTable()
    for _ in range(2):
        table.entry(h("poneyland"), lambda x: x == "poneyland", h).or_insert("poneyland")
        assert table.find(h("poneyland"), lambda x: x == "poneyland") == "poneyland"
    assert len(table) == 1


def test_or_insert_with_calls_default_only_when_vacant():
    table = HashTable()
    calls = []

    def make():
        calls.append(1)
        return "poneyland"

    table.entry(h("poneyland"), lambda x: x == "poneyland", h).or_insert_with(make)
    table.entry(h("poneyland"), lambda x: x == "poneyland", h).or_insert_with(make)
    assert calls == [1]
    assert table.find(h("poneyland"), lambda x: x == "poneyland") == "poneyland"


def test_and_modify():
    table = HashTable()

    def bump():
        table.entry(h("poneyland"), lambda kv: kv[0] == "poneyland", key_hasher).and_modify(
            lambda kv: (kv[0], kv[1] + 1)
        ).or_insert(("poneyland", 42))

    bump()
    assert table.find(h("poneyland"), lambda kv: kv[0] == "poneyland") == ("poneyland", 42)
    bump()
    assert table.find(h("poneyland"), lambda kv: kv[0] == "poneyland") == ("poneyland", 43)


def test_occupied_remove_keeps_capacity():
    table = HashTable()
    assert table.is_empty() and table.capacity() == 0
    table.insert_unique(h("poneyland"), "poneyland", h)
    capacity = table.capacity()
    entry = table.entry(h("poneyland"), lambda x: x == "poneyland", h)
    assert entry.remove()[0] == "poneyland"
    assert table.find(h("poneyland"), lambda x: x == "poneyland") is None
    assert len(table) == 0
    assert table.capacity() == capacity


def test_insert_unique_returns_entry():
    table = HashTable()
    entry = table.insert_unique(h(1), 1, h)
    assert entry.get() == 1
    assert entry.into_table() is table
    assert len(table) == 1


def test_clear():
    table = filled([1])
    table.clear()
    assert table.is_empty()
    assert list(table) == []


def test_shrink_to_fit():
    table = HashTable.with_capacity(100)
    table.insert_unique(h(1), 1, h)
    table.insert_unique(h(2), 2, h)
    assert table.capacity() >= 100
    table.shrink_to_fit(h)
    assert 2 <= table.capacity() < 100
    assert sorted(table) == [1, 2]


def test_shrink_to():
    table = HashTable.with_capacity(100)
    table.insert_unique(h(1), 1, h)
    table.insert_unique(h(2), 2, h)
    assert table.capacity() >= 100
    table.shrink_to(10, h)
    assert table.capacity() >= 10
    table.shrink_to(0, h)
    assert table.capacity() >= 2
    assert table.find(h(2), lambda v: v == 2) == 2


def test_reserve():
    table = HashTable()
    table.reserve(10, h)
    assert table.capacity() >= 10


def test_try_reserve():
    table = HashTable()
    table.try_reserve(10, h)
    assert table.capacity() >= 10


def test_try_reserve_overflow():
    table = HashTable()
    with pytest.raises(TryReserveError):
        table.try_reserve(2**64, h)
    assert len(table) == 0
    assert table.capacity() == 0


def test_len_counts_inserts():
    table = HashTable()
    assert len(table) == 0
    table.insert_unique(h(1), 1, h)
    assert len(table) == 1
    assert not table.is_empty()


def test_update_doubles_all():
    table = filled([1, 2, 3])
    table.update(lambda v: v * 2)
    assert len(table) == 3
    assert sorted(table) == [2, 4, 6]


def test_update_hash():
    table = HashTable.with_capacity(10)
    table.insert_unique(h(1), 2, h)
    table.insert_unique(h(1), 3, h)
    table.insert_unique(h(2), 5, h)
    table.update_hash(h(1), lambda v: v * 2)
    values = list(table)
    assert len(table) == 3
    assert 4 in values
    assert 6 in values


def test_iter_hash():
    table = HashTable.with_capacity(10)
    table.insert_unique(h("a"), "a", h)
    table.insert_unique(h("a"), "b", h)
    table.insert_unique(h("b"), "c", h)
    found = list(table.iter_hash(h("a")))
    assert "a" in found
    assert "b" in found


def test_retain():
    table = filled(range(1, 7))
    table.retain(lambda x: x % 2 == 0)
    assert len(table) == 3
    assert sorted(table) == [2, 4, 6]


def test_drain():
    table = filled([1, 2, 3])
    assert not table.is_empty()
    drained = table.drain()
    assert len(drained) == 3
    assert sorted(drained) == [1, 2, 3]
    assert table.is_empty()


def test_extract_if():
    table = filled(range(8))
    evens = sorted(table.extract_if(lambda v: v % 2 == 0))
    assert evens == [0, 2, 4, 6]
    assert sorted(table) == [1, 3, 5, 7]


def test_extract_if_abandoned_keeps_rest():
    table = filled(range(8))
    extractor = table.extract_if(lambda v: True)
    first = next(extractor)
    assert first in range(8)
    assert len(table) == 7
    assert first not in list(table)


LIBRARIES = [
    ("Bodleian Library", 1602),
    ("Athenæum", 1807),
    ("Herzogin-Anna-Amalia-Bibliothek", 1691),
    ("Library of Congress", 1800),
]


def libraries_table():
    table = HashTable()
    for pair in LIBRARIES:
        table.insert_unique(h(pair[0]), pair, key_hasher)
    return table


def test_get_many():
    table = libraries_table()
    keys = ["Athenæum", "Library of Congress"]
    got = table.get_many([h(k) for k in keys], lambda i, val: keys[i] == val[0])
    assert got == [("Athenæum", 1807), ("Library of Congress", 1800)]


def test_get_many_missing():
    table = libraries_table()
    keys = ["Athenæum", "New York Public Library"]
    got = table.get_many([h(k) for k in keys], lambda i, val: keys[i] == val[0])
    assert got == [("Athenæum", 1807), None]


def test_get_many_duplicate_raises():
    table = libraries_table()
    keys = ["Athenæum", "Athenæum"]
    with pytest.raises(ValueError):
        table.get_many([h(k) for k in keys], lambda i, val: keys[i] == val[0])


def test_copy_is_independent():
    table = filled([1, 2])
    clone = table.copy()
    clone.insert_unique(h(3), 3, h)
    assert sorted(table) == [1, 2]
    assert sorted(clone) == [1, 2, 3]


def test_repr():
    assert repr(HashTable()) == "HashTable({})"
    assert repr(filled(["x"])) == "HashTable({'x'})"


@pytest.mark.parametrize("constant", [0, 2**64 - 1])
def test_constant_hasher(constant):
    def fixed(_value):
        return constant

    table = HashTable()
    for i in range(1000):
        table.insert_unique(fixed(i), i, fixed)
    assert table.find(constant, lambda v: v == -1) is None
    assert table.find(constant, lambda v: v == 1000) is None
    for i in range(0, 1000, 37):
        assert table.find(constant, lambda v, i=i: v == i) == i
    assert len(table) == 1000


def test_builtin_hasher_range():
    table = filled(range(1000))
    assert table.find(h(-1), lambda v: v == -1) is None
    assert table.find(h(1000), lambda v: v == 1000) is None
    assert all(table.find(h(i), lambda v, i=i: v == i) == i for i in range(1000))


def test_insert_remove_rounds():
    words = [f"word-{i:05d}-padding" for i in range(600)]
    table = HashTable()
    for _ in range(4):
        for word in words:
            assert table.find(h(word), lambda v, w=word: v == w) is None
            table.insert_unique(h(word), word, h)
        for word in words:
            entry = table.find_entry(h(word), lambda v, w=word: v == w)
            assert isinstance(entry, OccupiedEntry)
            assert entry.remove()[0] == word
        assert len(table) == 0


@given(st.lists(st.integers(min_value=-(2**70), max_value=2**70)))
def test_entry_builds_a_set(values):
    table = HashTable()
    for value in values:
        table.entry(h(value), lambda v, x=value: v == x, h).or_insert(value)
    assert sorted(table) == sorted(set(values))
    assert len(table) <= table.capacity()