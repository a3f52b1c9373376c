"""Linear region allocator that hands out blocks from the top of a byte buffer downwards."""

from __future__ import annotations

_ALIGN = 8


def _align_size(size: int, align: int = _ALIGN) -> int:
    return (size + align - 1) & ~(align - 1)


def _writable_view(buf) -> memoryview:
    view = memoryview(buf)
    if view.readonly:
        raise TypeError("buffer must be writable")
    return view.cast("B")


class RegionError(Exception):
    """Raised when a region cannot be created or cannot satisfy an allocation."""


class Region:
    """A bump allocator: every allocation moves the offset down, nothing is freed singly.

    Allocations are word aligned and zeroed. Blocks are identified by their
    byte offset into the region's memory.
    """

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise RegionError("region size must be positive")
        self._mem: memoryview | None = memoryview(bytearray(size))
        self.size = size
        self.offset = size

    @classmethod
    def from_buffer(cls, buf) -> Region:
        """Build a region over caller-owned writable memory."""
        mem = _writable_view(buf)
        if len(mem) == 0:
            raise RegionError("region buffer must not be empty")
        region = cls.__new__(cls)
        region._mem = mem
        region.size = len(mem)
        region.offset = len(mem)
        return region

    def alloc(self, size: int) -> int:
        """Reserve ``size`` bytes (rounded up to the word size) and return their offset."""
        if self._mem is None:
            raise RegionError("region has been cleared")
        if size <= 0 or size > self.size:
            raise RegionError(f"invalid allocation size {size}")
        alloc_size = _align_size(size)
        if self.offset - alloc_size < 0:
            raise RegionError("region exhausted")
        self.offset -= alloc_size
        self._mem[self.offset:self.offset + alloc_size] = bytes(alloc_size)
        return self.offset

    def remaining(self) -> int:
        """Bytes still available for allocation."""
        return self.offset

    def view(self, offset: int, size: int) -> memoryview:
        """A writable view of ``size`` bytes starting at ``offset``."""
        if self._mem is None:
            raise RegionError("region has been cleared")
        if offset < 0 or size < 0 or offset + size > self.size:
            raise IndexError("view out of region bounds")
        return self._mem[offset:offset + size]

    def clear(self) -> None:
        """Release the region's memory; further allocations fail."""
        self._mem = None
        self.size = 0
        self.offset = 0