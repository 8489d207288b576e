"""
Interned byte strings for the termcap database.

A :class:`Symbol` is an ``(offset, length)`` handle into the byte arena of a
:class:`SymbolTable`.  The arena may be replaced by larger storage as it
grows, so a symbol never holds the bytes themselves: it is dereferenced only
through the table that created it.
"""
from __future__ import annotations

# std imports
from typing import NamedTuple, Union

# local
from .buffers import StorageBuffer

_FNV_OFFSET = 0xcbf29ce484222325
_FNV_PRIME = 0x100000001b3
_MASK64 = (1 << 64) - 1

# Display escapes shared by char_str() and SymbolTable.render().
_CHAR_NAMES = {
    0x1b: '\\E',
    0x0a: '\\n',
    0x0d: '\\r',
    0x09: '\\t',
    0x08: '\\b',
    0x0c: '\\f',
    0x7f: '^?',
}

_RENDER_ESCAPES = {
    **_CHAR_NAMES,
    ord('\\'): '\\\\',
    ord('^'): '\\^',
    ord(':'): '\\:',
    ord('.'): '\\.',
}


class Symbol(NamedTuple):
    """Handle to interned bytes: offset and length within the arena."""
    offset: int
    length: int


#: The empty symbol, used for keys and values not yet assigned.
EMPTY = Symbol(0, 0)

Key = Union[Symbol, bytes]


def char_str(char: int) -> str:
    """
    Render one byte for a diagnostic message.

    :param char: Byte value.
    :returns: Printable form followed by its hex code, such as ``'a' (#x61)``
        or ``^A (#x01)``.
    """
    if char in _CHAR_NAMES:
        text = _CHAR_NAMES[char]
    elif char < 0x20:
        text = f'^{chr(0x40 + char)}'
    elif char < 0x7f:
        text = f"'{chr(char)}'"
    else:
        text = f'\\x{char:02x}'
    return f'{text} (#x{char:02x})'


def render_bytes(data: bytes) -> str:
    r"""
    Return display form of ``data``, escaping termcap metacharacters.

    Control characters are shown as ``^X``, escape as ``\E``, and ``\``,
    ``^``, ``:`` and ``.`` are backslash-escaped.
    """
    out = []
    for char in data:
        if char in _RENDER_ESCAPES:
            out.append(_RENDER_ESCAPES[char])
        elif char < 0x20:
            out.append(f'^{chr(0x40 + char)}')
        elif char > 0x7f:
            out.append(f'\\x{char:02x}')
        else:
            out.append(chr(char))
    return ''.join(out)


def fnv1a(data: bytes) -> int:
    """64-bit FNV-1a hash of ``data``."""
    value = _FNV_OFFSET
    for char in data:
        value ^= char
        value = (value * _FNV_PRIME) & _MASK64
    return value


class SymbolTable:
    """Intern arena of byte strings."""

    def __init__(self, capacity: int = 32) -> None:
        self.storage = StorageBuffer(capacity)

    def __len__(self) -> int:
        return self.storage.size

    def intern(self, data: bytes | str) -> Symbol:
        """
        Append ``data`` to the arena.

        :param data: Bytes, or a string encoded as latin-1.
        :returns: Handle to the stored copy.
        """
        if isinstance(data, str):
            data = data.encode('latin1')
        return Symbol(self.storage.append(data), len(data))

    def materialize(self, key: Key) -> bytes:
        """Return an owned copy of the bytes referenced by ``key``."""
        if isinstance(key, (bytes, bytearray)):
            return bytes(key)
        return self.storage.get(key.offset, key.length)

    def render(self, key: Key) -> str:
        """Return display form of the bytes referenced by ``key``."""
        return render_bytes(self.materialize(key))

    def decode(self, key: Key) -> str:
        """Return the bytes referenced by ``key`` as a latin-1 string."""
        return self.materialize(key).decode('latin1')

    def hash(self, key: Key) -> int:
        """Hash the content referenced by ``key``, not its position."""
        return fnv1a(self.materialize(key))

    def equal(self, key1: Key, key2: Key) -> bool:
        """Compare the content referenced by two keys."""
        if (isinstance(key1, Symbol) and isinstance(key2, Symbol)
                and key1.length != key2.length):
            return False
        return self.materialize(key1) == self.materialize(key2)


def symbol_hash_fn(table: SymbolTable, key: Key) -> int:
    """Hash function for :class:`termcap.hashmap.LinkedHashMap` keyed by symbols."""
    return table.hash(key)


def symbol_compare_fn(table: SymbolTable, key1: Key, key2: Key) -> bool:
    """Equality function for :class:`termcap.hashmap.LinkedHashMap` keyed by symbols."""
    return table.equal(key1, key2)
