"""Double-ended stack allocator: one arena grows up from the front, another down from the back."""

from __future__ import annotations

_ALIGN = 8


def _align_size(size: int, align: int = _ALIGN) -> int:
    return (size + align - 1) & ~(align - 1)


def _writable_view(buf) -> memoryview:
    view = memoryview(buf)
    if view.readonly:
        raise TypeError("buffer must be writable")
    return view.cast("B")


class BiStackError(Exception):
    """Raised when a bistack cannot be created or an allocation does not fit."""


class BiStack:
    """Two stacks sharing one byte buffer, allocations identified by offset."""

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise BiStackError("bistack size must be positive")
        self._mem: memoryview | None = memoryview(bytearray(size))
        self.size = size
        self.front = 0
        self.back = size

    @classmethod
    def from_buffer(cls, buf) -> BiStack:
        """Build a bistack over caller-owned writable memory."""
        mem = _writable_view(buf)
        stack = cls.__new__(cls)
        stack._mem = mem
        stack.size = len(mem)
        stack.front = 0
        stack.back = len(mem)
        return stack

    def _require_memory(self) -> memoryview:
        if self._mem is None:
            raise BiStackError("bistack has been cleared")
        return self._mem

    def alloc_front(self, size: int) -> int:
        """Reserve ``size`` bytes from the front arena and return their offset."""
        self._require_memory()
        if size < 0:
            raise ValueError("size must not be negative")
        aligned = _align_size(size)
        if self.front + aligned >= self.back:
            raise BiStackError("front arena would meet the back arena")
        offset = self.front
        self.front += aligned
        return offset

    def alloc_back(self, size: int) -> int:
        """Reserve ``size`` bytes from the back arena and return their offset."""
        self._require_memory()
        if size < 0:
            raise ValueError("size must not be negative")
        aligned = _align_size(size)
        if self.back - aligned <= self.front:
            raise BiStackError("back arena would meet the front arena")
        self.back -= aligned
        return self.back

    def reset_front(self) -> None:
        if self._mem is not None:
            self.front = 0

    def reset_back(self) -> None:
        if self._mem is not None:
            self.back = self.size

    def reset_all(self) -> None:
        if self._mem is not None:
            self.front = 0
            self.back = self.size

    def margins(self) -> int:
        """Free space left between the two arenas."""
        return self.back - self.front

    def resize(self, new_size: int) -> None:
        """Replace the buffer with a new one of ``new_size`` bytes, keeping its prefix.

        Both arenas are reset.
        """
        if new_size <= 0:
            raise BiStackError("bistack size must be positive")
        new_mem = bytearray(new_size)
        if self._mem is not None:
            keep = min(self.size, new_size)
            new_mem[:keep] = self._mem[:keep]
        self._mem = memoryview(new_mem)
        self.size = new_size
        self.front = 0
        self.back = new_size

    def view(self, offset: int, size: int) -> memoryview:
        """A writable view of ``size`` bytes starting at ``offset``."""
        mem = self._require_memory()
        if offset < 0 or size < 0 or offset + size > self.size:
            raise IndexError("view out of bistack bounds")
        return mem[offset:offset + size]

    def clear(self) -> None:
        """Release the memory; further allocations fail."""
        self._mem = None
        self.size = 0
        self.front = 0
        self.back = 0