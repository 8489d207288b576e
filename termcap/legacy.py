"""
The historical termcap query functions.

These functions keep one process-wide :class:`~termcap.database.TermcapDatabase`,
loaded on first use, and the capabilities of the terminal most recently
found by :func:`tgetent`.  A later :func:`tgetent` replaces them, so callers
must finish their queries before looking up another terminal.  Use
:class:`~termcap.database.TermcapDatabase` directly for anything else.

The database file is, in order of preference: the path given to
:func:`set_termcap_file`, the ``TERMCAP`` environment variable when it holds
an absolute path, or the termcap file bundled with this package.  Setting
``TERMCAP_DEBUG=1`` logs every parsed name and capability at debug level.
"""
from __future__ import annotations

# std imports
import os
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

# local
from .database import Capabilities, TermcapDatabase
from .errors import TermcapError
from .transcode import strip_padding
from .tparm import tparm

_LOGGER = logging.getLogger(__name__)

DEFAULT_TERMCAP_FILE = os.path.join(os.path.dirname(__file__), 'data', 'termcap')

_termcap_file: Optional[str] = None
_database: Optional[TermcapDatabase] = None
_current: Optional[Capabilities] = None


@dataclass
class StringArea:
    """
    Caller-supplied region that :func:`tgetstr` copies values into.

    :param buffer: Growing storage; each value is written NUL-terminated.
    :param cursor: Offset of the next write, or None when unset.
    """
    buffer: bytearray = field(default_factory=bytearray)
    cursor: Optional[int] = 0


def termcap_file() -> str:
    """Return path of the database file to load."""
    if _termcap_file:
        return _termcap_file
    env = os.environ.get('TERMCAP', '')
    if os.path.isabs(env):
        return env
    return DEFAULT_TERMCAP_FILE


def set_termcap_file(filename: Optional[str]) -> None:
    """Use database ``filename``, discarding any database already loaded."""
    global _termcap_file, _database, _current
    _termcap_file = filename
    _database = None
    _current = None


def tinfo_init() -> bool:
    """
    Load the database, once.

    :returns: True when the database is loaded.  A failed load is logged and
        attempted again by the next call.
    """
    global _database
    if _database is not None:
        return True
    filename = termcap_file()
    debug = os.environ.get('TERMCAP_DEBUG', '') not in ('', '0')
    try:
        _database = TermcapDatabase.load(filename, debug=debug)
    except OSError as err:
        _LOGGER.error('error opening %s: %s', filename, err.strerror or err)
        return False
    except TermcapError as err:
        _LOGGER.error('error loading %s: %s', filename, err)
        return False
    return True


def tgetent(bp: object, name: str) -> int:
    """
    Look up terminal ``name``; the ``bp`` buffer is unused.

    :returns: 1 when found, 0 when not found, -1 when the database could not
        be loaded or the entry could not be resolved.
    """
    global _current
    if not tinfo_init():
        return -1
    try:
        caps = _database.resolve(name)
    except TermcapError as err:
        _LOGGER.error('tgetent: %s: %s', name, err)
        return -1
    if caps is None:
        return 0
    _current = caps
    return 1


def tgetflag(cap_id: str) -> int:
    """Return 1 when boolean capability ``cap_id`` is present, else 0."""
    return int(_current is not None and _current.flag(cap_id))


def tgetnum(cap_id: str) -> int:
    """Return numeric capability ``cap_id``, or -1 when absent."""
    value = None if _current is None else _current.number(cap_id)
    return -1 if value is None else value


def tgetstr(cap_id: str, area: Optional[StringArea]) -> Optional[bytes]:
    """
    Copy string capability ``cap_id`` into ``area``.

    The value is written NUL-terminated at ``area.cursor``, and the cursor
    advances by the length of the value plus one.

    :returns: The value, or None when absent or when ``area`` or its cursor
        is unset.
    """
    if area is None or area.cursor is None:
        return None
    value = None if _current is None else _current.string(cap_id)
    if value is None:
        return None
    start = area.cursor
    if len(area.buffer) < start:
        area.buffer.extend(bytes(start - len(area.buffer)))
    area.buffer[start:start + len(value) + 1] = value + b'\0'
    area.cursor = start + len(value) + 1
    return value


def tgoto(cap: bytes | str, col: int, row: int) -> bytes:
    """Return cursor motion string ``cap`` for column ``col`` and row ``row``."""
    return tparm(cap, row, col)


def tputs(data: bytes | str, affcnt: int, putc: Callable[[int], object]) -> int:
    """
    Write ``data`` to ``putc`` one byte at a time.

    Padding directives are dropped without any delay; ``affcnt`` is unused.
    """
    if isinstance(data, str):
        data = data.encode('latin1')
    for char in strip_padding(data):
        putc(char)
    return 0


__all__ = ('StringArea', 'set_termcap_file', 'termcap_file', 'tinfo_init',
           'tgetent', 'tgetflag', 'tgetnum', 'tgetstr', 'tgoto', 'tparm', 'tputs')
