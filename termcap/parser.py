"""
Termcap database parser.

The parser is a byte-driven state machine.  Each byte is dispatched to the
handler of the current :class:`State`; a handler may switch state and ask for
the same byte to be dispatched again under the new state.  ``ESCAPE`` and
``OCTAL`` are digressions that return to :attr:`TermcapParser.restore_state`.

Parsed entries are stored as one :class:`~termcap.hashmap.LinkedHashMap` of
:class:`Capability` objects per entry, in a dense :class:`~termcap.buffers.ArrayBuffer`.
Every terminal name and alias maps to the index of its entry in
:attr:`TermcapParser.term_map`.

Example::

    vt100|vt100-am|dec vt100:\\
        :co#80:li#24:am:cr=^M:\\
        :cl=50\\E[H\\E[J:
"""
from __future__ import annotations

# std imports
import enum
import logging
from typing import Iterator, List, NamedTuple, Optional

# local
from .buffers import ArrayBuffer, StorageBuffer
from .errors import TermcapSyntaxError
from .hashmap import LinkedHashMap
from .symbols import (
    EMPTY,
    Key,
    Symbol,
    SymbolTable,
    char_str,
    symbol_hash_fn,
    symbol_compare_fn)

_LOGGER = logging.getLogger(__name__)

TABLE_INIT_SIZE = 8
BUFFER_INIT_SIZE = 32
READ_CHUNK_SIZE = 4096

CR = 0x0d
LF = 0x0a

_SPACE = frozenset(b' \t\n\v\f\r')
_DIGITS = frozenset(b'0123456789')
_OCTAL_DIGITS = frozenset(b'01234567')

# Single-character escapes after a backslash.
_ESCAPES = {
    ord('\\'): ord('\\'),
    ord('^'): ord('^'),
    ord(':'): ord(':'),
    ord('.'): ord('.'),
    ord('E'): 0x1b,
    ord('e'): 0x1b,
    ord('n'): LF,
    ord('l'): LF,
    ord('r'): CR,
    ord('t'): 0x09,
    ord('b'): 0x08,
    ord('f'): 0x0c,
    ord('a'): 0x07,
    ord('s'): 0x20,
}

# Returned by a state handler to dispatch the same byte again.
_REDO = object()


def _isprint(char: int) -> bool:
    return 0x20 <= char < 0x7f


def _isspace(char: int) -> bool:
    return char in _SPACE


class State(enum.Enum):
    """States of the termcap parser."""
    WHITESPACE = 'whitespace'
    COMMENT = 'comment'
    TERM = 'term'
    VAL_KEY = 'val_key'
    VAL_SKIP = 'val_skip'
    VAL_NUM = 'val_num'
    VAL_STRING = 'val_string'
    VAL_DELAY = 'val_delay'
    VAL_CTRL = 'val_ctrl'
    ESCAPE = 'escape'
    OCTAL = 'octal'


class CapKind(enum.IntEnum):
    """Kind of a capability value."""
    BOOLEAN = 0
    NUMBER = 1
    STRING = 2


class Capability(NamedTuple):
    """
    One parsed capability (immutable).

    :param key: Symbol of the capability name.
    :param kind: Which of the value fields is meaningful.
    :param number: Value of a :attr:`CapKind.NUMBER` capability.
    :param value: Symbol of a :attr:`CapKind.STRING` capability.
    :param pad_delay: Leading padding count of a string capability.
    :param pad_prop: Whether padding is proportional to lines affected (``*``).
    """
    key: Symbol = EMPTY
    kind: CapKind = CapKind.BOOLEAN
    number: int = 0
    value: Symbol = EMPTY
    pad_delay: int = 0
    pad_prop: bool = False


class TermcapParser:
    """
    Parse termcap text into a capability database.

    :param bool debug: Emit a debug log record for every name and capability.
    """

    def __init__(self, debug: bool = False) -> None:
        self.debug = debug
        self.symbols = SymbolTable(BUFFER_INIT_SIZE)
        self.term_map = LinkedHashMap(symbol_hash_fn, symbol_compare_fn,
                                      self.symbols, TABLE_INIT_SIZE)
        self.cap_list = ArrayBuffer(TABLE_INIT_SIZE)
        self.state = State.WHITESPACE
        self.restore_state = State.TERM
        self.cur_str = StorageBuffer(BUFFER_INIT_SIZE)
        self.cur_cap = 0
        self.cur_obj = Capability()
        self.cur_oct = 0
        self.crlf = False
        self.line = 1
        self.column = 0
        self._handlers = {
            State.WHITESPACE: self._whitespace,
            State.COMMENT: self._comment,
            State.TERM: self._term,
            State.VAL_KEY: self._val_key,
            State.VAL_SKIP: self._val_skip,
            State.VAL_NUM: self._val_num,
            State.VAL_STRING: self._val_string,
            State.VAL_DELAY: self._val_delay,
            State.VAL_CTRL: self._val_ctrl,
            State.ESCAPE: self._escape,
            State.OCTAL: self._octal,
        }
        self._alloc_map()

    # input

    def feed(self, char: int) -> None:
        """
        Consume one byte.

        :raises TermcapSyntaxError: The byte is not valid in the current state.
        """
        line, column = self.line, self.column
        if char == CR:
            self.crlf = True
            return
        while self._handlers[self.state](char, line, column) is _REDO:
            pass
        if char != LF:
            self.column += 1

    def parse(self, data: bytes | str) -> TermcapParser:
        """Consume all of ``data`` and finish the stream; returns self."""
        if isinstance(data, str):
            data = data.encode('latin1')
        for char in data:
            self.feed(char)
        self.close()
        return self

    def read(self, filename: str) -> TermcapParser:
        """Consume the termcap file ``filename`` and finish the stream; returns self."""
        self.line, self.column = 1, 0
        with open(filename, 'rb') as fin:
            for chunk in iter(lambda: fin.read(READ_CHUNK_SIZE), b''):
                for char in chunk:
                    self.feed(char)
        self.close()
        return self

    def close(self) -> None:
        """
        Finish the stream, storing a capability left pending without newline.

        :raises TermcapSyntaxError: The input ends inside a line ending or a
            terminal name.
        """
        if self.crlf:
            raise self._error('invalid crlf', CR, self.line, self.column)
        # an escape needs one linefeed to return, and one more to end the entry.
        for _ in range(2):
            if self.state in (State.WHITESPACE, State.COMMENT):
                return
            if self.state is State.TERM and not self.cur_str.size:
                return
            self.feed(LF)

    # database access

    def lookup(self, name: Key | str) -> Optional[int]:
        """Return entry index of terminal ``name``, or None."""
        if isinstance(name, str):
            name = name.encode('latin1')
        return self.term_map.get(name)

    def entry(self, idx: int) -> LinkedHashMap:
        """Return capability map of entry ``idx``."""
        return self.cap_list.get(idx)

    def names(self, idx: int) -> List[str]:
        """Return every name declared for entry ``idx``, in file order."""
        return [self.symbols.decode(key)
                for key, value in self.term_map.items() if value == idx]

    def entries(self) -> Iterator[int]:
        """Yield the index of every entry that declares at least one name."""
        seen = set()
        for idx in self.term_map.values():
            if idx not in seen:
                seen.add(idx)
                yield idx

    def describe(self, cap: Capability) -> str:
        """Return termcap source form of ``cap``, such as ``co#80`` or ``cl=50\\E[H``."""
        key = self.symbols.render(cap.key)
        if cap.kind is CapKind.NUMBER:
            return f'{key}#{cap.number}'
        if cap.kind is CapKind.STRING:
            padding = ''
            if cap.pad_delay:
                padding = f'{cap.pad_delay}{"*" if cap.pad_prop else ""}'
            return f'{key}={padding}{self.symbols.render(cap.value)}'
        return key

    def stats(self) -> dict:
        """Return counts of names, entries, capabilities and interned bytes."""
        return {
            'aliases': len(self.term_map),
            'entries': len(self.cap_list),
            'capabilities': sum(len(caps) for caps in self.cap_list),
            'term_map': self.term_map.capacity,
            'cap_list': self.cap_list.capacity,
            'cap_map': sum(caps.capacity for caps in self.cap_list),
            'str_tab': self.symbols.storage.size,
        }

    def format_stats(self) -> str:
        """Return :meth:`stats` as a small table."""
        stats = self.stats()
        return '\n'.join([
            '# data',
            f"| aliases      | {stats['aliases']:7d} |",
            f"| entries      | {stats['entries']:7d} |",
            f"| capabilities | {stats['capabilities']:7d} |",
            '# memory',
            f"| cap_list     | {stats['cap_list']:7d} |",
            f"| cap_map      | {stats['cap_map']:7d} |",
            f"| term_map     | {stats['term_map']:7d} |",
            f"| str_tab      | {stats['str_tab']:7d} |",
        ])

    # helpers

    def _error(self, reason: str, char: int, line: int, column: int) -> TermcapSyntaxError:
        exc = TermcapSyntaxError(self.state.value, char_str(char), line, column, reason)
        _LOGGER.error('%s', exc)
        return exc

    def _trace(self, reason: str, char: int, line: int, column: int) -> None:
        if self.debug:
            _LOGGER.debug('termcap: %s: %s %s line:%d col:%d',
                          self.state.value, reason, char_str(char), line, column)

    def _line_end(self, char: int) -> bool:
        if char == LF:
            self.crlf = False
            self.column = 0
            self.line += 1
            return True
        return False

    def _crlf_error(self) -> bool:
        crlf, self.crlf = self.crlf, False
        return crlf

    def _copy_symbol(self) -> Symbol:
        sym = self.symbols.intern(self.cur_str.view())
        self.cur_str.reset()
        return sym

    def _append(self, char: int) -> None:
        self.cur_str.append(bytes((char,)))

    def _alloc_map(self) -> None:
        caps = LinkedHashMap(symbol_hash_fn, symbol_compare_fn,
                             self.symbols, TABLE_INIT_SIZE)
        self.cur_cap = self.cap_list.add(caps)

    def _store_object(self) -> None:
        cap, self.cur_obj = self.cur_obj, Capability()
        if not cap.key.length:
            return
        self.cap_list.get(self.cur_cap).insert(cap.key, cap)
        if self.debug:
            _LOGGER.debug('termcap: cap: %s, line:%d, col:%d',
                          self.describe(cap), self.line, self.column)

    def _end_entry(self) -> None:
        self._alloc_map()
        self.restore_state = State.TERM
        self.state = State.WHITESPACE

    # state handlers

    def _whitespace(self, char, line, column):
        if self._line_end(char):
            return None
        if self._crlf_error():
            raise self._error('invalid crlf', char, line, column)
        if _isspace(char):
            return None
        if char == ord('#'):
            self.state = State.COMMENT
        elif _isprint(char):
            self.state = self.restore_state
            return _REDO
        else:
            raise self._error('unexpected character', char, line, column)
        return None

    def _comment(self, char, line, column):
        if self._line_end(char):
            self.state = State.WHITESPACE
        elif self._crlf_error():
            raise self._error('invalid crlf', char, line, column)
        elif not (_isprint(char) or _isspace(char)):
            raise self._error('unexpected character', char, line, column)

    def _term(self, char, line, column):
        if self._line_end(char):
            raise self._error('unexpected linefeed', char, line, column)
        if self._crlf_error():
            raise self._error('invalid crlf', char, line, column)
        if char == ord('\\'):
            self.restore_state = State.TERM
            self.state = State.ESCAPE
        elif char in (ord('|'), ord(':')):
            name = self._copy_symbol()
            if name.length:
                owner = self.term_map.setdefault(name, self.cur_cap)
                if owner != self.cur_cap:
                    _LOGGER.warning('termcap: duplicate name %s line:%d, first defined by entry %d',
                                    self.symbols.render(name), line, owner)
                elif self.debug:
                    _LOGGER.debug('termcap: term: %s -> idx:%d, line:%d, col:%d',
                                  self.symbols.render(name), self.cur_cap, line, column)
            if char == ord(':'):
                self.cur_obj = Capability()
                self.state = State.VAL_KEY
        elif _isprint(char) or _isspace(char):
            # skip leading whitespace
            if self.cur_str.size or not _isspace(char):
                self._append(char)
        else:
            raise self._error('unexpected character', char, line, column)

    def _val_key(self, char, line, column):
        if self._line_end(char):
            if self.cur_str.size:
                self.cur_obj = self.cur_obj._replace(key=self._copy_symbol())
                self._store_object()
            self._end_entry()
            return
        if self._crlf_error():
            raise self._error('invalid crlf', char, line, column)
        if char == ord('\\'):
            self.restore_state = State.VAL_KEY
            self.state = State.ESCAPE
        elif char == ord('.'):
            self.cur_str.reset()
            self.state = State.VAL_SKIP
        elif char == ord(':'):
            self.cur_obj = self.cur_obj._replace(key=self._copy_symbol())
            self._store_object()
        elif char == ord('#') and self.cur_str.size:
            self.cur_obj = self.cur_obj._replace(
                key=self._copy_symbol(), kind=CapKind.NUMBER)
            self.state = State.VAL_NUM
        elif char == ord('='):
            self.cur_obj = self.cur_obj._replace(
                key=self._copy_symbol(), kind=CapKind.STRING)
            self.state = State.VAL_STRING
        elif _isprint(char) or _isspace(char):
            # skip leading whitespace
            if self.cur_str.size or not _isspace(char):
                self._append(char)
        else:
            raise self._error('unexpected character', char, line, column)

    def _val_skip(self, char, line, column):
        if self._line_end(char):
            self._trace('unexpected linefeed', char, line, column)
            self.cur_obj = Capability()
            self._end_entry()
        elif self._crlf_error():
            raise self._error('invalid crlf', char, line, column)
        elif char == ord(':'):
            self.cur_obj = Capability()
            self.state = State.VAL_KEY
        elif not (_isprint(char) or _isspace(char)):
            raise self._error('unexpected character', char, line, column)

    def _val_num(self, char, line, column):
        if self._line_end(char):
            self._trace('unexpected linefeed', char, line, column)
            self._store_object()
            self._end_entry()
        elif self._crlf_error():
            raise self._error('invalid crlf', char, line, column)
        elif char in _DIGITS:
            self.cur_obj = self.cur_obj._replace(
                number=self.cur_obj.number * 10 + (char - ord('0')))
        elif char == ord(':'):
            self._store_object()
            self.state = State.VAL_KEY
        else:
            raise self._error('unexpected character', char, line, column)

    def _val_string(self, char, line, column):
        if self._line_end(char):
            self._trace('unexpected linefeed', char, line, column)
            self.cur_obj = self.cur_obj._replace(value=self._copy_symbol())
            self._store_object()
            self._end_entry()
            return None
        if self._crlf_error():
            raise self._error('invalid crlf', char, line, column)
        if char == ord('^'):
            self.state = State.VAL_CTRL
        elif char == ord('\\'):
            self.restore_state = State.VAL_STRING
            self.state = State.ESCAPE
        elif char == ord(':'):
            self.cur_obj = self.cur_obj._replace(value=self._copy_symbol())
            self._store_object()
            self.state = State.VAL_KEY
        elif (char in _DIGITS and not self.cur_str.size
                and not self.cur_obj.pad_delay and not self.cur_obj.pad_prop):
            self.state = State.VAL_DELAY
            return _REDO
        elif _isprint(char) or _isspace(char):
            self._append(char)
        else:
            raise self._error('unexpected character', char, line, column)
        return None

    def _val_delay(self, char, line, column):
        if self._line_end(char):
            self._trace('unexpected linefeed', char, line, column)
            self.cur_obj = self.cur_obj._replace(value=self._copy_symbol())
            self._store_object()
            self._end_entry()
            return None
        if self._crlf_error():
            raise self._error('invalid crlf', char, line, column)
        if char in _DIGITS:
            self.cur_obj = self.cur_obj._replace(
                pad_delay=self.cur_obj.pad_delay * 10 + (char - ord('0')))
        elif char == ord('*'):
            self.cur_obj = self.cur_obj._replace(pad_prop=True)
            self.state = State.VAL_STRING
        elif _isprint(char) or _isspace(char):
            self.state = State.VAL_STRING
            return _REDO
        else:
            raise self._error('unexpected character', char, line, column)
        return None

    def _val_ctrl(self, char, line, column):
        if self._line_end(char):
            self._trace('unexpected linefeed', char, line, column)
            self.cur_obj = self.cur_obj._replace(value=self._copy_symbol())
            self._store_object()
            self._end_entry()
        elif self._crlf_error():
            raise self._error('invalid crlf', char, line, column)
        elif _isprint(char):
            self._append(0x7f if char == ord('?') else char & 0x1f)
            self.state = State.VAL_STRING
        else:
            raise self._error('unexpected character', char, line, column)

    def _escape(self, char, line, column):
        if self._line_end(char):
            # line continuation
            self.state = self.restore_state
            return
        if self._crlf_error():
            raise self._error('invalid crlf', char, line, column)
        if char in _OCTAL_DIGITS:
            self.cur_oct = char - ord('0')
            self.state = State.OCTAL
        elif char in _ESCAPES:
            self._append(_ESCAPES[char])
            self.state = self.restore_state
        else:
            self._trace('illegal character', char, line, column)
            self.state = self.restore_state

    def _octal(self, char, line, column):
        if char != LF:
            if self._crlf_error():
                raise self._error('invalid crlf', char, line, column)
            if char in _OCTAL_DIGITS:
                self.cur_oct = self.cur_oct * 8 + (char - ord('0'))
                return None
            if not (_isprint(char) or _isspace(char)):
                raise self._error('unexpected character', char, line, column)
        self._append(self.cur_oct & 0x7f)
        self.state = self.restore_state
        return _REDO
