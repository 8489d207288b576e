"""Tests for the symbol table and display helpers."""
# 3rd party
import pytest

# local
from termcap.symbols import EMPTY, Symbol, SymbolTable, char_str, fnv1a, render_bytes

ROUND_TRIP_VALUES = [
    b'',
    b'co',
    b'\x1b[%i%d;%dH',
    b'\x00\xff\x7f',
    bytes(range(256)),
    b'x' * 5000,
]


@pytest.mark.parametrize('data', ROUND_TRIP_VALUES)
def test_intern_materialize(data):
    """materialize(intern(s)) returns the same bytes."""
    table = SymbolTable(capacity=4)
    sym = table.intern(data)
    assert sym.length == len(data)
    assert table.materialize(sym) == data


def test_intern_str_is_latin1():
    """A str is stored as its latin-1 encoding."""
    table = SymbolTable()
    sym = table.intern('caf\xe9')
    assert table.materialize(sym) == b'caf\xe9'
    assert table.decode(sym) == 'caf\xe9'


def test_symbols_survive_arena_growth():
    """Symbols interned before growth still resolve after growth."""
    # given,
    table = SymbolTable(capacity=4)
    names = [f'cap{n}'.encode('ascii') for n in range(200)]

    # exercise,
    symbols = [table.intern(name) for name in names]

    # verify.
    assert table.storage.capacity >= len(table)
    assert table.storage.capacity & (table.storage.capacity - 1) == 0
    assert [table.materialize(sym) for sym in symbols] == names


def test_equal_compares_content():
    """Two copies of the same bytes are equal keys with equal hashes."""
    table = SymbolTable()
    first, second = table.intern(b'co'), table.intern(b'co')

    assert first != second
    assert table.equal(first, second)
    assert table.hash(first) == table.hash(second)
    assert table.equal(first, b'co')
    assert table.hash(b'co') == table.hash(first)


@pytest.mark.parametrize('other', [b'c', b'li', b'cob'])
def test_not_equal(other):
    """Keys of different content compare unequal."""
    table = SymbolTable()
    assert not table.equal(table.intern(b'co'), table.intern(other))


def test_empty_symbol():
    """EMPTY resolves to no bytes in any table."""
    assert SymbolTable().materialize(EMPTY) == b''
    assert EMPTY == Symbol(0, 0)


@pytest.mark.parametrize('data,expected', [
    (b'', 0xcbf29ce484222325),
    (b'a', 0xaf63dc4c8601ec8c),
])
def test_fnv1a(data, expected):
    """Known FNV-1a 64-bit values."""
    assert fnv1a(data) == expected


@pytest.mark.parametrize('char,expected', [
    (ord('a'), "'a' (#x61)"),
    (0x01, '^A (#x01)'),
    (0x0a, '\\n (#x0a)'),
    (0x0d, '\\r (#x0d)'),
    (0x1b, '\\E (#x1b)'),
    (0x7f, '^? (#x7f)'),
    (0xe9, '\\xe9 (#xe9)'),
])
def test_char_str(char, expected):
    """Diagnostic form of one byte."""
    assert char_str(char) == expected


@pytest.mark.parametrize('data,expected', [
    (b'\x1b[1m', '\\E[1m'),
    (b'a:b', 'a\\:b'),
    (b'\\', '\\\\'),
    (b'^', '\\^'),
    (b'.', '\\.'),
    (b'\x01', '^A'),
    (b'\x7f', '^?'),
    (b'\r\n', '\\r\\n'),
    (b'\xe9', '\\xe9'),
])
def test_render_bytes(data, expected):
    """Display form escapes termcap metacharacters."""
    assert render_bytes(data) == expected
