"""Fixed-capacity array with explicit growth, shrinking and shift-style deletion."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, MutableSequence
from typing import Any

DEFAULT_SIZE = 4


def _next_pow2(x: int) -> int:
    """Smallest power of two strictly greater than ``x``."""
    return 1 << x.bit_length()


def _zeros(buf: Any, count: int) -> Any:
    if isinstance(buf, (bytearray, memoryview)):
        return bytes(count)
    return [None] * count


def shift_up(buf: MutableSequence, length: int, index: int, amount: int = 1) -> int:
    """Remove ``amount`` items at ``index`` from the first ``length`` items of ``buf``.

    Later items move down to close the gap and the vacated tail slots are
    zeroed (``None`` for lists, zero bytes for byte buffers). An ``amount`` of
    zero removes one item. If the range runs past the end, everything from
    ``index`` on is zeroed. Returns the new length.
    """
    if not 0 <= index < length:
        raise IndexError(f"index {index} out of range for length {length}")
    if amount < 0:
        raise ValueError("amount must not be negative")
    amount = amount or 1
    end = index + amount
    if end < length:
        new_length = length - amount
        buf[index:new_length] = buf[end:length]
        buf[new_length:length] = _zeros(buf, amount)
        return new_length
    buf[index:length] = _zeros(buf, length - index)
    return index


class ArrayFullError(Exception):
    """Raised when an item does not fit in the array's capacity."""


class Array:
    """A sequence whose capacity only changes when asked to.

    Insertion never grows the array on its own; it raises
    :class:`ArrayFullError` once the capacity is reached.
    """

    def __init__(self, init_size: int = DEFAULT_SIZE) -> None:
        self._cap = max(init_size, DEFAULT_SIZE)
        self._items: list[Any] = []

    @classmethod
    def from_list(cls, items: Iterable[Any], cap: int | None = None) -> Array:
        """Wrap existing items; ``cap`` defaults to their count."""
        values = list(items)
        if cap is None:
            cap = len(values)
        if cap < len(values):
            raise ValueError("capacity is smaller than the number of items")
        array = cls.__new__(cls)
        array._cap = cap
        array._items = values
        return array

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._items))

    def _check_index(self, index: int) -> int:
        length = len(self._items)
        if index < 0:
            index += length
        if not 0 <= index < length:
            raise IndexError(f"index {index} out of range")
        return index

    def __getitem__(self, index: int) -> Any:
        return self._items[self._check_index(index)]

    def __setitem__(self, index: int, value: Any) -> None:
        self._items[self._check_index(index)] = value

    def __repr__(self) -> str:
        return f"Array({self._items!r}, cap={self._cap})"

    def cap(self) -> int:
        """Current capacity."""
        return self._cap

    def empty(self) -> bool:
        return self._cap == 0 or not self._items

    def full(self) -> bool:
        return len(self._items) >= self._cap

    def _set_cap(self, new_cap: int) -> None:
        self._cap = new_cap
        del self._items[new_cap:]

    def grow(self) -> bool:
        """Enlarge the capacity; returns whether it grew."""
        old = self._cap
        self._set_cap(DEFAULT_SIZE if old == 0 else _next_pow2(old << 1))
        return self._cap > old

    def resize(self, new_cap: int) -> bool:
        """Set the capacity to the power of two above ``new_cap``; returns whether it changed.

        A cleared array, or a ``new_cap`` of zero, gets the default capacity.
        Items beyond the new capacity are dropped.
        """
        old = self._cap
        self._set_cap(DEFAULT_SIZE if old == 0 or new_cap == 0 else _next_pow2(new_cap))
        return self._cap != old

    def shrink(self, exact_fit: bool = False) -> bool:
        """Reduce the capacity towards the length; returns whether it shrank."""
        length = len(self._items)
        if self._cap <= DEFAULT_SIZE or length == 0:
            return False
        old = self._cap
        self._set_cap(length if exact_fit else _next_pow2(length))
        return old > self._cap

    def wipe(self) -> None:
        """Remove every item, keeping the capacity."""
        self._items.clear()

    def clear(self) -> None:
        """Remove every item and drop the capacity to zero."""
        self._items.clear()
        self._cap = 0

    def add(self, other: Array) -> None:
        """Append all of ``other``'s items; there must be room to spare."""
        if len(self._items) + len(other._items) >= self._cap:
            raise ArrayFullError("not enough capacity to add the other array")
        self._items.extend(other._items)

    def copy_from(self, other: Array) -> None:
        """Replace the items with ``other``'s, truncated to this capacity."""
        if other is self:
            return
        self._items = list(other._items[: self._cap])

    def len_diff(self, other: Array) -> int:
        return abs(len(self._items) - len(other._items))

    def cap_diff(self, other: Array) -> int:
        return abs(self._cap - other._cap)

    def insert(self, value: Any) -> None:
        """Add ``value`` at the end."""
        self.append(value)

    def append(self, value: Any) -> int:
        """Add ``value`` at the end and return its index."""
        if len(self._items) >= self._cap:
            raise ArrayFullError("array is full")
        self._items.append(value)
        return len(self._items) - 1

    def fill(self, value: Any) -> None:
        """Set every slot up to the capacity to ``value``."""
        self._items = [value] * self._cap

    def pop(self) -> Any:
        if not self._items:
            raise IndexError("pop from empty array")
        return self._items.pop()

    def peek(self) -> Any:
        if not self._items:
            raise IndexError("peek at empty array")
        return self._items[-1]

    def reverse(self) -> None:
        self._items.reverse()

    def shift_up(self, index: int, amount: int = 1) -> None:
        """Remove ``amount`` items starting at ``index`` (zero counts as one)."""
        new_length = shift_up(self._items, len(self._items), index, amount)
        del self._items[new_length:]

    def count(self, value: Any) -> int:
        return sum(1 for item in self._items if item == value)

    def index_of(self, value: Any, start: int = 0) -> int:
        """Index of the first item equal to ``value`` at or after ``start``."""
        for index in range(max(start, 0), len(self._items)):
            if self._items[index] == value:
                return index
        raise ValueError(f"{value!r} is not in the array")

    def del_by_index(self, index: int) -> None:
        if self._items and index == len(self._items) - 1:
            self._items.pop()
            return
        self.shift_up(index, 1)

    def del_by_range(self, index: int, count: int) -> None:
        length = len(self._items)
        if index == 0 and count >= length:
            self.wipe()
        elif length and index == length - 1:
            self._items.pop()
        else:
            self.shift_up(index, count)

    def del_by_val(self, value: Any) -> None:
        self.del_by_index(self.index_of(value))