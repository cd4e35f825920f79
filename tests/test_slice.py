import struct

import pytest

from tdpkit.arena import Arena, suggest_size
from tdpkit.slice import Slice


def test_make_is_zeroed_with_room():
    arena = Arena()
    s = Slice.make(arena, "<i", 5)
    assert len(s) == 5
    assert s.cap() >= 5
    assert s.raw() == [0, 0, 0, 0, 0]


def test_make_capacity_fills_suggested_size():
    arena = Arena()
    s = Slice.make(arena, "<q", 3)
    assert s.cap() == suggest_size(3 * 8) // 8


def test_of_round_trip():
    arena = Arena()
    s = Slice.of(arena, "<q", 1, -2, 3, 2**40)
    assert s.raw() == [1, -2, 3, 2**40]
    assert list(s) == [1, -2, 3, 2**40]


def test_of_doubles():
    arena = Arena()
    s = Slice.of(arena, "<d", 1.5, -0.25)
    assert s.raw() == [1.5, -0.25]


def test_store_and_load():
    arena = Arena()
    s = Slice.make(arena, "<I", 3)
    s.store(1, 42)
    assert s.load(1) == 42
    assert s.load(0) == 0


def test_load_out_of_range():
    arena = Arena()
    s = Slice.of(arena, "<i", 1, 2)
    with pytest.raises(IndexError):
        s.load(2)
    with pytest.raises(IndexError):
        s.store(-1, 0)


def test_set_len():
    arena = Arena()
    s = Slice.of(arena, "<i", 1, 2, 3)
    shorter = s.set_len(1)
    assert shorter.raw() == [1]
    assert s.raw() == [1, 2, 3]
    with pytest.raises(ValueError):
        s.set_len(s.cap() + 1)


def test_rest_spans_spare_capacity():
    arena = Arena()
    s = Slice.of(arena, "<h", 7, 8)
    assert len(s.rest()) == s.cap() - len(s)
    assert all(v == 0 for v in s.rest())


def test_append_many_reallocates_and_preserves():
    arena = Arena()
    s = Slice.of(arena, "<i", 0)
    expected = [0]
    for i in range(1, 100):
        s = s.append(arena, i, -i)
        expected += [i, -i]
    assert s.raw() == expected
    assert s.cap() >= len(s)


def test_append_one():
    arena = Arena()
    s = Slice("<q")
    for i in range(50):
        s = s.append_one(arena, i * 3)
    assert s.raw() == [i * 3 for i in range(50)]


def test_append_nothing_keeps_slice():
    arena = Arena()
    s = Slice.of(arena, "<i", 4, 5)
    t = s.append(arena)
    assert t.raw() == [4, 5]
    assert t.ptr == s.ptr


def test_grow_empty_slice():
    arena = Arena()
    s = Slice("<i").grow(arena, 3)
    assert len(s) == 0
    assert s.cap() >= 3
    assert s.ptr is not None and s.ptr.offset >= 0


def test_grow_in_place_when_last_allocation():
    arena = Arena()
    arena.reserve(4096)
    s = Slice.of(arena, "<q", 1, 2)
    g = s.grow(arena, 20)
    assert g.ptr == s.ptr
    assert g.cap() >= s.cap() + 20
    assert g.raw() == [1, 2]


def test_grow_moves_when_not_last_allocation():
    arena = Arena()
    arena.reserve(4096)
    s = Slice.of(arena, "<q", 5, 6)
    Slice.make(arena, "<q", 1)
    g = s.grow(arena, 20)
    assert g.ptr != s.ptr
    assert g.raw() == [5, 6]
    assert g.cap() >= 22


def test_zero_size_format_rejected():
    with pytest.raises(ValueError):
        Slice("")


def test_bad_format_rejected():
    with pytest.raises(struct.error):
        Slice.make(Arena(), "<z", 2)


def test_freed_arena_invalidates_slice():
    arena = Arena()
    s = Slice.of(arena, "<i", 1)
    Slice.make(arena, "<q", 200)
    arena.free()
    with pytest.raises(ValueError):
        s.raw()