"""
Growable storage primitives for the termcap database.

Neither buffer ever resizes in place: every resize builds new storage, copies
the old contents across and then publishes the new storage together with its
capacity as one :class:`_Snapshot`.  A reader that took a snapshot before a
resize keeps a pair that is fully valid for the bounds it observed; it can
never combine a new capacity with old storage, or the other way around.

When growing, the larger storage is built completely before it is published.
When shrinking, the write extent is clamped to the smaller capacity before the
truncated snapshot is published.

These buffers assume a single writer.
"""
from __future__ import annotations

from typing import Any, Iterator, NamedTuple


class _Snapshot(NamedTuple):
    """Storage and its capacity, published together."""
    data: Any
    capacity: int


def next_pow2(value: int) -> int:
    """
    Return the least power of two greater than or equal to ``value``.

    :param value: Requested extent.
    :returns: ``1`` for any value of 1 or less, else the next power of two.
    """
    if value <= 1:
        return 1
    return 1 << (value - 1).bit_length()


class ArrayBuffer:
    """
    Dense buffer of fixed-stride record slots.

    Slots hold one record each; unallocated slots hold ``None``.
    """

    def __init__(self, capacity: int = 8) -> None:
        capacity = max(capacity, 1)
        self._snapshot = _Snapshot([None] * capacity, capacity)
        self._count = 0

    @property
    def count(self) -> int:
        """Number of allocated slots."""
        return self._count

    @property
    def capacity(self) -> int:
        """Number of slots available before the next resize."""
        return self._snapshot.capacity

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[Any]:
        snapshot, count = self._snapshot, self._count
        for idx in range(count):
            yield snapshot.data[idx]

    def resize(self, count: int) -> None:
        """
        Resize capacity to the next power of two of ``count``.

        :param count: Number of slots that must fit.
        """
        old = self._snapshot
        new_capacity = next_pow2(count)
        if new_capacity >= old.capacity:
            data = old.data + [None] * (new_capacity - old.capacity)
            self._snapshot = _Snapshot(data, new_capacity)
        else:
            self._count = min(self._count, new_capacity)
            self._snapshot = _Snapshot(old.data[:new_capacity], new_capacity)

    def alloc(self, count: int) -> int:
        """
        Reserve ``count`` contiguous slots.

        :param count: Number of slots to reserve.
        :returns: Index of the first reserved slot.
        """
        if self._count + count > self.capacity:
            self.resize(self._count + count)
        idx = self._count
        self._count += count
        return idx

    def add(self, record: Any) -> int:
        """
        Append one record.

        :param record: Any object.
        :returns: Index of the new record.
        """
        idx = self.alloc(1)
        self._snapshot.data[idx] = record
        return idx

    def get(self, idx: int) -> Any:
        """Return record at ``idx``, raising :exc:`IndexError` when unallocated."""
        if not 0 <= idx < self._count:
            raise IndexError(f'record index out of range: {idx}')
        return self._snapshot.data[idx]

    def set(self, idx: int, record: Any) -> None:
        """Replace record at ``idx``."""
        if not 0 <= idx < self._count:
            raise IndexError(f'record index out of range: {idx}')
        self._snapshot.data[idx] = record


class StorageBuffer:
    """
    Byte arena with an aligned bump allocator.

    ``size`` is the current write offset; :meth:`reset` rewinds it without
    releasing storage, so the same buffer can be reused as scratch space.
    """

    def __init__(self, capacity: int = 32) -> None:
        capacity = max(capacity, 1)
        self._snapshot = _Snapshot(bytearray(capacity), capacity)
        self._offset = 0

    @property
    def size(self) -> int:
        """Number of bytes written (the write offset)."""
        return self._offset

    @property
    def capacity(self) -> int:
        """Number of bytes available before the next resize."""
        return self._snapshot.capacity

    def __len__(self) -> int:
        return self._offset

    def reset(self) -> None:
        """Rewind the write offset to zero."""
        self._offset = 0

    def resize(self, extent: int) -> None:
        """
        Resize capacity to the next power of two of ``extent``.

        :param extent: Number of bytes that must fit.
        """
        old = self._snapshot
        new_capacity = next_pow2(extent)
        if new_capacity >= old.capacity:
            data = old.data + bytearray(new_capacity - old.capacity)
            self._snapshot = _Snapshot(data, new_capacity)
        else:
            self._offset = min(self._offset, new_capacity)
            self._snapshot = _Snapshot(old.data[:new_capacity], new_capacity)

    def alloc(self, size: int, align: int = 1) -> int:
        """
        Reserve ``size`` bytes.

        The current offset and the size are both rounded up to a multiple of
        ``min(align, 8)``.

        :param size: Number of bytes.
        :param align: Power of two alignment.
        :returns: Offset of the reserved region.
        """
        if align < 1 or align & (align - 1):
            raise ValueError(f'align must be a power of two, got {align}')
        max_align = min(align, 8)
        offset = (self._offset + max_align - 1) & ~(max_align - 1)
        size = (size + max_align - 1) & ~(max_align - 1)
        if offset + size > self.capacity:
            self.resize(offset + size)
        self._offset = offset + size
        return offset

    def append(self, data: bytes) -> int:
        """
        Copy ``data`` into the arena.

        :param data: Bytes to store.
        :returns: Offset of the stored bytes.
        """
        offset = self.alloc(len(data), 1)
        self._snapshot.data[offset:offset + len(data)] = data
        return offset

    def get(self, offset: int, length: int) -> bytes:
        """Return a copy of ``length`` bytes at ``offset``."""
        if offset < 0 or length < 0 or offset + length > self._offset:
            raise IndexError(f'range out of bounds: offset={offset}, length={length}')
        return bytes(self._snapshot.data[offset:offset + length])

    def view(self) -> bytes:
        """Return a copy of all bytes written so far."""
        return bytes(self._snapshot.data[:self._offset])
