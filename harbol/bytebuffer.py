"""Growable byte buffer for packing integers, floats, strings and raw data."""

from __future__ import annotations

import struct
from typing import BinaryIO

from harbol.array import shift_up

_BYTE = struct.Struct("=B")
_INT16 = struct.Struct("=H")
_INT32 = struct.Struct("=I")
_INT64 = struct.Struct("=Q")
_PTR = struct.Struct("@P")
_FLOAT32 = struct.Struct("=f")
_FLOAT64 = struct.Struct("=d")


class ByteBuffer:
    """A byte buffer that grows to fit what is inserted into it.

    Values are written in the machine's native byte order. Capacity grows
    only as far as each insertion needs.
    """

    def __init__(self) -> None:
        self._table: bytearray | None = None
        self._cap = 0
        self._len = 0

    def __len__(self) -> int:
        return self._len

    def __bytes__(self) -> bytes:
        if self._table is None:
            return b""
        return bytes(self._table[: self._len])

    def __repr__(self) -> str:
        return f"ByteBuffer({bytes(self)!r}, cap={self._cap})"

    def cap(self) -> int:
        """Current capacity in bytes."""
        return self._cap

    def _resize(self, new_size: int) -> None:
        table = bytearray(new_size)
        if self._table is not None:
            keep = min(self._cap, new_size)
            table[:keep] = self._table[:keep]
        self._table = table
        self._cap = new_size
        self._len = min(self._len, new_size)

    def _reserve(self, extra: int) -> bytearray:
        if self._table is None or self._len + extra >= self._cap:
            self._resize(self._len + extra)
        assert self._table is not None
        return self._table

    def _put(self, data: bytes) -> None:
        table = self._reserve(len(data))
        table[self._len : self._len + len(data)] = data
        self._len += len(data)

    def _put_int(self, packer: struct.Struct, value: int) -> None:
        mask = (1 << (packer.size * 8)) - 1
        self._put(packer.pack(int(value) & mask))

    def insert_byte(self, value: int) -> None:
        self._put_int(_BYTE, value)

    def insert_int16(self, value: int) -> None:
        self._put_int(_INT16, value)

    def insert_int32(self, value: int) -> None:
        self._put_int(_INT32, value)

    def insert_int64(self, value: int) -> None:
        self._put_int(_INT64, value)

    def insert_ptr(self, value: int) -> None:
        """Insert an integer the width of a native pointer."""
        self._put_int(_PTR, value)

    def insert_float32(self, value: float) -> None:
        self._put(_FLOAT32.pack(value))

    def insert_float64(self, value: float) -> None:
        self._put(_FLOAT64.pack(value))

    def insert_floatmax(self, value: float) -> None:
        """Insert the widest float available, a 64-bit double."""
        self._put(_FLOAT64.pack(value))

    def insert_cstr(self, text: str | bytes) -> None:
        """Insert a string (UTF-8 encoded) followed by a NUL terminator.

        Anything after an embedded NUL is ignored.
        """
        data = text.encode("utf-8") if isinstance(text, str) else bytes(text)
        data = data.split(b"\0", 1)[0]
        self._put(data + b"\0")

    def insert_obj(self, data) -> None:
        """Insert the raw bytes of any bytes-like object."""
        self._put(bytes(memoryview(data).cast("B")))

    def insert_zeros(self, amount: int) -> None:
        if amount < 0:
            raise ValueError("amount must not be negative")
        self._put(bytes(amount))

    def delete(self, index: int, count: int) -> None:
        """Remove ``count`` bytes at ``index`` (zero counts as one), closing the gap."""
        if self._table is None:
            raise IndexError(f"index {index} out of range for length 0")
        self._len = shift_up(self._table, self._len, index, count)

    def to_file(self, file: BinaryIO) -> int:
        """Write the buffer's contents to a binary file; returns bytes written."""
        if self._table is None:
            raise ValueError("buffer holds no data")
        data = bytes(self._table[: self._len])
        written = file.write(data)
        if written is not None and written != len(data):
            raise OSError(f"short write: {written} of {len(data)} bytes")
        return len(data)

    def insert_from_file(self, file: BinaryIO) -> None:
        """Append the whole contents of an open binary file."""
        file.seek(0, 2)
        file_size = file.tell()
        if file_size <= 0:
            raise ValueError("file is empty")
        file.seek(0)
        data = file.read(file_size)
        self._reserve(file_size)
        self._put(data)
        if len(data) != file_size:
            raise OSError(f"short read: {len(data)} of {file_size} bytes")

    def insert_from_filename(self, filename) -> None:
        """Append the whole contents of the named file."""
        with open(filename, "rb") as file:
            self.insert_from_file(file)

    def append(self, other: ByteBuffer) -> None:
        """Append another buffer's contents."""
        if other._table is None:
            raise ValueError("other buffer holds no data")
        self._put(bytes(other._table[: other._len]))

    def copy_from(self, other: ByteBuffer) -> None:
        """Replace the contents with another buffer's."""
        if other._table is None:
            raise ValueError("other buffer holds no data")
        if other._len != self._len or self._table is None:
            self._resize(other._len)
        assert self._table is not None
        self._table[: other._len] = other._table[: other._len]
        self._len = other._len

    def clear(self) -> None:
        """Release the contents and capacity."""
        self._table = None
        self._cap = 0
        self._len = 0