"""General purpose memory pool: size-segregated free lists on top of a region stack."""

from __future__ import annotations

import bisect
import struct

from harbol.region import Region, RegionError

_ALIGN = 8
_SIZE = struct.Struct("=Q")

HEADER_SIZE = 24
BUCKET_SIZE = 8
BUCKET_BITS = 3
SPLIT_THRESHOLD = 32


def _align_size(size: int, align: int = _ALIGN) -> int:
    return (size + align - 1) & ~(align - 1)


class MemPoolError(Exception):
    """Raised when the pool cannot be created, is exhausted, or is given a bad pointer."""


class MemPool:
    """Variable-size allocator.

    Every block starts with a header holding the block's total size; the
    pointer handed out is the offset of the data just after that header.
    Fresh blocks come from a region that grows downwards; freed blocks go to
    address-sorted free lists (small buckets and one large list), where
    neighbours are coalesced and blocks touching the region top are given back
    to it.
    """

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise MemPoolError("memory pool size must be positive")
        self._stack = Region(size)
        self._reset_lists()

    @classmethod
    def from_buffer(cls, buf) -> MemPool:
        """Build a pool over caller-owned writable memory."""
        nbytes = memoryview(buf).nbytes
        if nbytes <= HEADER_SIZE:
            raise MemPoolError("buffer too small for a memory pool")
        pool = cls.__new__(cls)
        pool._stack = Region.from_buffer(buf)
        pool._reset_lists()
        return pool

    def _reset_lists(self) -> None:
        self._large: list[int] = []
        self._buckets: list[list[int]] = [[] for _ in range(BUCKET_SIZE)]

    @property
    def size(self) -> int:
        """Total bytes managed by the pool."""
        return self._stack.size

    def _all_lists(self) -> list[list[int]]:
        return [self._large, *self._buckets]

    def _read_size(self, node: int) -> int:
        (size,) = _SIZE.unpack_from(self._stack.view(node, _SIZE.size))
        return size

    def _write_size(self, node: int, size: int) -> None:
        _SIZE.pack_into(self._stack.view(node, _SIZE.size), 0, size)

    def _list_for(self, size: int) -> tuple[list[int], bool]:
        slot = (size >> BUCKET_BITS) - 1
        if 0 <= slot < BUCKET_SIZE:
            return self._buckets[slot], True
        return self._large, False

    def _find(self, free_list: list[int], nbytes: int) -> int | None:
        for pos, node in enumerate(free_list):
            size = self._read_size(node)
            if size < nbytes:
                continue
            if size <= nbytes + SPLIT_THRESHOLD:
                # Close enough in size: hand out the whole node to limit fragmentation.
                del free_list[pos]
                return node
            self._write_size(node, size - nbytes)
            split = node + size - nbytes
            self._write_size(split, nbytes)
            return split
        return None

    def _is_free(self, node: int) -> bool:
        for free_list in self._all_lists():
            for start in free_list:
                if start <= node < start + self._read_size(start):
                    return True
        return False

    def _insert(self, free_list: list[int], node: int, is_bucket: bool) -> None:
        if self._is_free(node):
            return
        pos = bisect.bisect_left(free_list, node)
        coalesced = False
        if pos > 0 and free_list[pos - 1] + self._read_size(free_list[pos - 1]) == node:
            merged = free_list[pos - 1]
            self._write_size(merged, self._read_size(merged) + self._read_size(node))
            idx = pos - 1
            coalesced = True
        else:
            free_list.insert(pos, node)
            merged = node
            idx = pos
        if idx + 1 < len(free_list):
            following = free_list[idx + 1]
            if merged + self._read_size(merged) == following:
                self._write_size(merged, self._read_size(merged) + self._read_size(following))
                del free_list[idx + 1]
                coalesced = True
        if coalesced and is_bucket:
            del free_list[idx]
            target, target_is_bucket = self._list_for(self._read_size(merged))
            self._insert(target, merged, target_is_bucket)

    def _absorb(self) -> None:
        """Give free nodes that touch the top of the region stack back to it."""
        absorbed = True
        while absorbed:
            absorbed = False
            top = self._stack.offset
            for free_list in self._all_lists():
                if free_list and free_list[0] == top:
                    free_list.pop(0)
                    self._stack.offset += self._read_size(top)
                    absorbed = True
                    break

    def _node_of(self, ptr: int | None) -> tuple[int, int]:
        if ptr is None:
            raise MemPoolError("null pointer")
        node = ptr - HEADER_SIZE
        if node < 0:
            raise MemPoolError(f"pointer {ptr} lies before the pool")
        stack = self._stack
        if node < stack.offset or node + HEADER_SIZE > stack.size:
            raise MemPoolError(f"pointer {ptr} is not an allocated block")
        size = self._read_size(node)
        if size < HEADER_SIZE or size > stack.size or node + size > stack.size:
            raise MemPoolError(f"pointer {ptr} has a corrupt block header")
        return node, size

    def alloc(self, size: int) -> int:
        """Allocate ``size`` zeroed bytes and return the pointer (offset) to them."""
        if size <= 0 or size > self._stack.size:
            raise MemPoolError(f"invalid allocation size {size}")
        alloc_bytes = _align_size(size + HEADER_SIZE)
        free_list, _ = self._list_for(alloc_bytes)
        node = self._find(free_list, alloc_bytes)
        if node is None:
            try:
                node = self._stack.alloc(alloc_bytes)
            except RegionError as exc:
                raise MemPoolError("memory pool exhausted") from exc
            self._write_size(node, alloc_bytes)
        else:
            data_size = self._read_size(node) - HEADER_SIZE
            self._stack.view(node + HEADER_SIZE, data_size)[:] = bytes(data_size)
        return node + HEADER_SIZE

    def realloc(self, ptr: int | None, size: int) -> int:
        """Move a block into a new one of ``size`` bytes, keeping as much data as fits.

        A ``None`` pointer behaves like :meth:`alloc`.
        """
        if size > self._stack.size:
            raise MemPoolError(f"invalid allocation size {size}")
        if ptr is None:
            return self.alloc(size)
        _, old_size = self._node_of(ptr)
        new_ptr = self.alloc(size)
        _, new_size = self._node_of(new_ptr)
        keep = min(old_size, new_size) - HEADER_SIZE
        self._stack.view(new_ptr, keep)[:] = self._stack.view(ptr, keep)
        self.free(ptr)
        return new_ptr

    def free(self, ptr: int | None) -> None:
        """Return a block to the pool."""
        node, size = self._node_of(ptr)
        if node == self._stack.offset:
            self._stack.offset += size
        else:
            free_list, is_bucket = self._list_for(size)
            self._insert(free_list, node, is_bucket)
        self._absorb()

    def block_size(self, ptr: int) -> int:
        """Total size of the block behind ``ptr``, header included."""
        return self._node_of(ptr)[1]

    def view(self, ptr: int) -> memoryview:
        """A writable view of the data area of the block behind ``ptr``."""
        _, size = self._node_of(ptr)
        return self._stack.view(ptr, size - HEADER_SIZE)

    def remaining(self) -> int:
        """Bytes available: the unused region plus every free node."""
        total = self._stack.remaining()
        for free_list in self._all_lists():
            total += sum(self._read_size(node) for node in free_list)
        return total

    def free_nodes(self) -> list[tuple[int, int]]:
        """Every free node as ``(offset, size)``, in address order."""
        return sorted(
            (node, self._read_size(node))
            for free_list in self._all_lists()
            for node in free_list
        )

    def clear(self) -> None:
        """Release the pool's memory; further allocations fail."""
        self._stack.clear()
        self._reset_lists()