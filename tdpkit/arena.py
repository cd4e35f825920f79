"""A bump allocator over blocks of zeroed memory.

An :class:`Arena` hands out :class:`Pointer` values into blocks whose sizes
are powers of two. Allocation is a pointer bump; when the current block is
exhausted a new block at least twice as large is obtained. :meth:`Arena.free`
keeps only the largest block, so a re-used arena eventually settles on a
single block big enough for its typical workload.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from tdpkit import debug

ALIGN = 8
"""Alignment, in bytes, of every allocation."""

_MIN_LOG = 6


def _size_log(nbytes: int) -> int:
    return max(_MIN_LOG, (nbytes - 1).bit_length())


def suggest_size(nbytes: int) -> int:
    """Round ``nbytes`` up to a power of two, at least 64.

    Zero bytes need no memory at all, so ``suggest_size(0)`` is 0.
    """
    if nbytes < 0:
        raise ValueError(f"size must not be negative, got {nbytes}")
    if nbytes == 0:
        return 0
    return 1 << _size_log(nbytes)


@dataclass(frozen=True, order=True)
class Pointer:
    """An address inside one of an arena's blocks."""

    block: int
    offset: int

    def __add__(self, n: int) -> Pointer:
        return Pointer(self.block, self.offset + n)

    def __str__(self) -> str:
        return f"{self.block}:{self.offset:#x}"


class Arena:
    """A bump allocator. A new arena is empty and ready to use."""

    def __init__(self) -> None:
        self._blocks: List[Optional[int]] = []  # block ids, indexed by size log 2
        self._memory: Dict[int, bytearray] = {}
        self._ids = itertools.count(1)
        self._current: Optional[int] = None
        self._next = 0
        self._end = 0
        self._cap = 0
        self._keep: List[Any] = []

    @property
    def cap(self) -> int:
        """Size of the block currently being allocated from; always a power of two."""
        return self._cap

    def _new_block(self, n: int) -> int:
        block = next(self._ids)
        self._memory[block] = bytearray(n)
        return block

    def _alloc_chunk(self, size: int) -> Tuple[int, int]:
        log = _size_log(max(size, 1))
        n = 1 << log
        if log < len(self._blocks):
            block = self._blocks[log]
            if block is None:
                block = self._new_block(n)
                self._blocks[log] = block
            return block, n

        block = self._new_block(n)
        self._blocks.extend([None] * (log + 1 - len(self._blocks)))
        debug.log(None, "saving block", "blocks[%d] = %s", log, block)
        self._blocks[log] = block
        return block, n

    def keep_alive(self, value: Any) -> None:
        """Hold a reference to ``value`` until the next :meth:`free`."""
        self._keep.append(value)

    def alloc(self, size: int) -> Pointer:
        """Allocate ``size`` bytes of zeroed memory, rounded up to :data:`ALIGN`."""
        if size < 0:
            raise ValueError(f"size must not be negative, got {size}")
        size = (size + ALIGN - 1) & ~(ALIGN - 1)
        if self._current is None or self._next + size > self._end:
            self.grow(size)
        assert self._current is not None
        p = Pointer(self._current, self._next)
        self._next += size
        debug.log(None, "alloc", "%s, %d:%d", p, size, ALIGN)
        return p

    def reserve(self, size: int) -> None:
        """Make sure ``size`` bytes can be allocated without growing."""
        if size < 0:
            raise ValueError(f"size must not be negative, got {size}")
        if self._current is None or self._next + size > self._end:
            self.grow(size)

    def free(self) -> None:
        """Discard everything allocated so far.

        All blocks except the largest are released; the largest is zeroed and
        becomes the current block. Pointers into released blocks become invalid.
        """
        self._keep = []
        if not self._blocks:
            return

        end = len(self._blocks) - 1
        for block in self._blocks[:end]:
            if block is not None:
                del self._memory[block]
        self._blocks[:end] = [None] * end

        largest = self._blocks[end]
        assert largest is not None
        memory = self._memory[largest]
        memory[:] = bytes(len(memory))

        self._current = largest
        self._next = 0
        self._end = 1 << end
        self._cap = 1 << end

    def grow(self, size: int) -> None:
        """Switch to a fresh block of at least ``size`` bytes and twice the current one."""
        block, n = self._alloc_chunk(max(size, self._cap * 2))
        self._current = block
        self._next = 0
        self._end = n
        self._cap = n
        debug.log(None, "grow", "%s:%d:%d", block, n, self._cap)

    def _extend_last(self, ptr: Pointer, old_size: int, new_size: int) -> bool:
        """Resize the most recent allocation in place, if ``ptr`` is that allocation."""
        if self._current is None or ptr.block != self._current:
            return False
        start = self._next - old_size
        if ptr.offset != start or start + new_size > self._end:
            return False
        self._next = start + new_size
        debug.log(None, "fast realloc", "%s, %d->%d", ptr, old_size, new_size)
        return True

    def _region(self, ptr: Pointer, size: int) -> bytearray:
        memory = self._memory.get(ptr.block)
        if memory is None:
            raise ValueError(f"dangling pointer {ptr}")
        if size < 0 or ptr.offset < 0 or ptr.offset + size > len(memory):
            raise ValueError(f"access of {size} bytes at {ptr} is out of bounds")
        return memory

    def read(self, ptr: Pointer, size: int) -> bytes:
        """Return ``size`` bytes starting at ``ptr``."""
        memory = self._region(ptr, size)
        return bytes(memory[ptr.offset : ptr.offset + size])

    def write(self, ptr: Pointer, data: bytes) -> None:
        """Store ``data`` starting at ``ptr``."""
        memory = self._region(ptr, len(data))
        memory[ptr.offset : ptr.offset + len(data)] = data