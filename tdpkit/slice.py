"""Growable arrays of fixed-size values stored in an :class:`~tdpkit.arena.Arena`.

Elements are described by a :mod:`struct` format. A :class:`Slice` is an
immutable view: operations that change its length or capacity return a new
slice, while :meth:`Slice.store` writes through to arena memory.
"""

from __future__ import annotations

import functools
import struct
from dataclasses import dataclass, field, replace
from typing import Any, Iterator, List, Optional

from tdpkit import debug
from tdpkit.arena import Arena, Pointer, suggest_size


@functools.lru_cache(maxsize=None)
def _codec(fmt: str) -> struct.Struct:
    codec = struct.Struct(fmt)
    if codec.size == 0:
        raise ValueError(f"element format {fmt!r} has zero size")
    return codec


def _layout(fmt: str, n: int) -> int:
    return suggest_size(_codec(fmt).size * n)


def _decode(values: tuple) -> Any:
    return values[0] if len(values) == 1 else values


def _encode(codec: struct.Struct, value: Any) -> bytes:
    if isinstance(value, tuple):
        return codec.pack(*value)
    return codec.pack(value)


@dataclass(frozen=True)
class Slice:
    """A slice of ``fmt``-encoded values living in an arena."""

    fmt: str
    arena: Optional[Arena] = field(default=None, repr=False, compare=False)
    ptr: Optional[Pointer] = None
    length: int = 0
    capacity: int = 0

    def __post_init__(self) -> None:
        _codec(self.fmt)

    @property
    def _size(self) -> int:
        return _codec(self.fmt).size

    @staticmethod
    def make(arena: Arena, fmt: str, n: int) -> Slice:
        """Allocate a zeroed slice of length ``n``."""
        if n < 0:
            raise ValueError(f"length must not be negative, got {n}")
        nbytes = _layout(fmt, n)
        ptr = arena.alloc(nbytes)
        return Slice(fmt, arena, ptr, n, nbytes // _codec(fmt).size)

    @staticmethod
    def of(arena: Arena, fmt: str, *args: Any) -> Slice:
        """Allocate a slice holding ``args``."""
        s = Slice.make(arena, fmt, len(args))
        s._write_at(0, args)
        return s

    def __len__(self) -> int:
        return self.length

    def __iter__(self) -> Iterator[Any]:
        return iter(self.raw())

    def __str__(self) -> str:
        return str(self.raw())

    def cap(self) -> int:
        """Return the number of elements that fit without reallocating."""
        return self.capacity

    def set_len(self, n: int) -> Slice:
        """Return this slice with its length set to ``n``."""
        if n < 0 or n > self.capacity:
            raise ValueError(f"set_len({n}) with cap() = {self.capacity}")
        debug.log(None, "set len", "%s->%d", self.ptr, n)
        return replace(self, length=n)

    def _check(self, i: int) -> None:
        if not 0 <= i < self.length:
            raise IndexError(f"index {i} out of range for slice of length {self.length}")

    def _read(self, start: int, count: int) -> List[Any]:
        if count <= 0 or self.ptr is None or self.arena is None:
            return []
        codec = _codec(self.fmt)
        data = self.arena.read(self.ptr + start * codec.size, count * codec.size)
        return [_decode(values) for values in codec.iter_unpack(data)]

    def _write_at(self, start: int, values: Any) -> None:
        values = tuple(values)
        if not values:
            return
        if self.ptr is None or self.arena is None:
            raise IndexError("write into a slice with no storage")
        codec = _codec(self.fmt)
        data = b"".join(_encode(codec, v) for v in values)
        self.arena.write(self.ptr + start * codec.size, data)

    def load(self, i: int) -> Any:
        """Return the element at index ``i``."""
        self._check(i)
        return self._read(i, 1)[0]

    def store(self, i: int, value: Any) -> None:
        """Overwrite the element at index ``i``."""
        self._check(i)
        self._write_at(i, (value,))

    def raw(self) -> List[Any]:
        """Return a copy of the elements up to the length."""
        return self._read(0, self.length)

    def rest(self) -> List[Any]:
        """Return a copy of the elements between the length and the capacity."""
        return self._read(self.length, self.capacity - self.length)

    def append(self, arena: Arena, *args: Any) -> Slice:
        """Return a slice with ``args`` appended, reallocating on ``arena`` if needed."""
        s = self
        if s.capacity - s.length < len(args):
            s = s.grow(arena, len(args))
        s._write_at(s.length, args)
        return replace(s, length=s.length + len(args))

    def append_one(self, arena: Arena, elem: Any) -> Slice:
        """Return a slice with ``elem`` appended."""
        s = self
        if s.length == s.capacity:
            s = s.grow(arena, 1)
        s._write_at(s.length, (elem,))
        return replace(s, length=s.length + 1)

    def grow(self, arena: Arena, n: int) -> Slice:
        """Return a slice whose capacity is extended by at least ``n`` elements."""
        size = self._size
        debug.log(None, "grow", "%s[%d:%d], %d x %s", self.ptr, self.length, self.capacity, n, self.fmt)

        if self.ptr is None:
            nbytes = _layout(self.fmt, n)
            ptr = arena.alloc(nbytes)
            return replace(self, arena=arena, ptr=ptr, capacity=nbytes // size)

        old_size = _layout(self.fmt, self.capacity)
        new_size = _layout(self.fmt, self.capacity + n)
        ptr = self.ptr
        if not arena._extend_last(ptr, old_size, new_size) and new_size > old_size:
            moved = arena.alloc(new_size)
            if old_size > 0 and self.arena is not None:
                arena.write(moved, self.arena.read(ptr, old_size))
            debug.log(None, "realloc", "%s->%s, %d->%d", ptr, moved, old_size, new_size)
            ptr = moved

        return replace(self, arena=arena, ptr=ptr, capacity=new_size // size)