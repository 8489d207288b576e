"""
Insertion-ordered map with externally supplied hash and equality functions.

Keys of the termcap database are :class:`termcap.symbols.Symbol` handles whose
identity is their content in the arena, so this map calls back into the
owner (``userdata``) to hash and compare them, rather than relying on
``__hash__`` and ``__eq__`` of the keys.
"""
from __future__ import annotations

# std imports
from typing import Any, Callable, Iterator, List, Optional, Tuple

# local
from .buffers import next_pow2


class LinkedHashMap:
    """
    Map of key/value pairs in insertion order.

    :param hash_fn: ``hash_fn(userdata, key) -> int``.
    :param eq_fn: ``eq_fn(userdata, key1, key2) -> bool``.
    :param userdata: Opaque object passed to both functions.
    :param capacity: Initial capacity hint.
    """

    def __init__(self, hash_fn: Callable[[Any, Any], int],
                 eq_fn: Callable[[Any, Any, Any], bool],
                 userdata: Any = None, capacity: int = 8) -> None:
        self.hash_fn = hash_fn
        self.eq_fn = eq_fn
        self.userdata = userdata
        self._min_capacity = next_pow2(capacity)
        self._entries: List[List[Any]] = []
        self._buckets: dict[int, List[int]] = {}

    @property
    def capacity(self) -> int:
        """Power of two capacity that holds the current count."""
        return max(self._min_capacity, next_pow2(len(self._entries)))

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Any]:
        for key, _ in self._entries:
            yield key

    def __contains__(self, key: Any) -> bool:
        return self._find(key) is not None

    def items(self) -> Iterator[Tuple[Any, Any]]:
        for key, value in self._entries:
            yield key, value

    def values(self) -> Iterator[Any]:
        for _, value in self._entries:
            yield value

    def _find(self, key: Any) -> Optional[int]:
        for idx in self._buckets.get(self.hash_fn(self.userdata, key), ()):
            if self.eq_fn(self.userdata, self._entries[idx][0], key):
                return idx
        return None

    def _reindex(self) -> None:
        self._buckets = {}
        for idx, (key, _) in enumerate(self._entries):
            self._buckets.setdefault(self.hash_fn(self.userdata, key), []).append(idx)

    def get(self, key: Any, default: Any = None) -> Any:
        """Return value for ``key``, or ``default``."""
        idx = self._find(key)
        return default if idx is None else self._entries[idx][1]

    def insert(self, key: Any, value: Any, position: Optional[int] = None) -> None:
        """
        Store ``value`` for ``key``.

        An existing key keeps its position and takes the new value.  A new
        key is inserted before iteration position ``position``; ``None``
        appends it at the end.
        """
        idx = self._find(key)
        if idx is not None:
            self._entries[idx][1] = value
            return
        if position is None or position >= len(self._entries):
            self._buckets.setdefault(self.hash_fn(self.userdata, key), []).append(
                len(self._entries))
            self._entries.append([key, value])
        else:
            self._entries.insert(max(position, 0), [key, value])
            self._reindex()

    def setdefault(self, key: Any, value: Any) -> Any:
        """Store ``value`` only when ``key`` is absent; return the stored value."""
        idx = self._find(key)
        if idx is not None:
            return self._entries[idx][1]
        self.insert(key, value)
        return value
