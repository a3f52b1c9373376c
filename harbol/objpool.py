"""Fixed-size object pool with an intrusive free list stored inside the free blocks."""

from __future__ import annotations

import struct

_ALIGN = 8
_INDEX = struct.Struct("=Q")


def _align_size(size: int, align: int = _ALIGN) -> int:
    return (size + align - 1) & ~(align - 1)


def _writable_view(buf) -> memoryview:
    view = memoryview(buf)
    if view.readonly:
        raise TypeError("buffer must be writable")
    return view.cast("B")


class ObjPoolError(Exception):
    """Raised when a pool cannot be created, is exhausted, or gets a bad block."""


class ObjPool:
    """Pool of equally sized blocks; each free block holds the index of the next free one.

    Blocks are identified by their byte offset into the pool's memory.
    """

    def __init__(self, objsize: int, length: int) -> None:
        if objsize <= 0 or length <= 0:
            raise ObjPoolError("object size and pool length must be positive")
        aligned = _align_size(objsize)
        self._setup(memoryview(bytearray(aligned * length)), aligned, length)

    def _setup(self, mem: memoryview, objsize: int, length: int) -> None:
        self._mem: memoryview | None = mem
        self.objsize = objsize
        self.size = length
        self.free_blocks = length
        for i in range(length):
            _INDEX.pack_into(mem, i * objsize, i + 1)
        self.next_free: int | None = 0

    @classmethod
    def from_buffer(cls, buf, objsize: int, length: int) -> ObjPool:
        """Build a pool over caller-owned writable memory."""
        if length < 0:
            raise ObjPoolError("pool length must not be negative")
        aligned = _align_size(objsize)
        if objsize < _INDEX.size or objsize * length < aligned * length:
            raise ObjPoolError(f"object size must be a multiple of {_ALIGN} and at least {_INDEX.size}")
        mem = _writable_view(buf)
        if len(mem) < aligned * length:
            raise ObjPoolError("buffer too small for the requested pool")
        pool = cls.__new__(cls)
        pool._setup(mem, aligned, length)
        return pool

    def alloc(self) -> int:
        """Take a zeroed block from the pool and return its offset."""
        if self._mem is None or self.free_blocks == 0 or self.next_free is None:
            raise ObjPoolError("object pool exhausted")
        offset = self.next_free
        (index,) = _INDEX.unpack_from(self._mem, offset)
        self.free_blocks -= 1
        self.next_free = index * self.objsize if self.free_blocks else None
        self._mem[offset:offset + self.objsize] = bytes(self.objsize)
        return offset

    def _check_block(self, offset: int) -> memoryview:
        if self._mem is None:
            raise ObjPoolError("object pool has been cleared")
        if offset < 0 or offset >= self.size * self.objsize or offset % self.objsize:
            raise ObjPoolError(f"offset {offset} is not a block of this pool")
        return self._mem

    def free(self, offset: int) -> None:
        """Return a block to the pool; it becomes the next one handed out."""
        mem = self._check_block(offset)
        next_index = self.size if self.next_free is None else self.next_free // self.objsize
        _INDEX.pack_into(mem, offset, next_index)
        self.next_free = offset
        self.free_blocks += 1

    def view(self, offset: int) -> memoryview:
        """A writable view of the block at ``offset``."""
        mem = self._check_block(offset)
        return mem[offset:offset + self.objsize]

    def clear(self) -> None:
        """Release the pool's memory."""
        self._mem = None
        self.size = 0
        self.objsize = 0
        self.free_blocks = 0
        self.next_free = None