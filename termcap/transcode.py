"""
Conversion of termcap string capabilities into terminfo syntax.

Termcap parameter codes work on two implicit registers, alternately consumed
by each code.  Terminfo uses an explicit parameter stack instead, so each
termcap code becomes a push of the matching parameter (``%p1`` or ``%p2``)
followed by the terminfo operation.

Sourced from NetBSD libterminfo, ``termcap.c:strval``.

Example::

    >>> to_terminfo(b'\\x1b[%i%d;%dH')
    b'\\x1b[%i%p1%d;%p2%dH'
    >>> to_terminfo(b'5*\\x1b[K')
    b'\\x1b[K$<5*/>'
"""
from __future__ import annotations

# std imports
import re
from typing import Optional, Tuple

# local
from .errors import TranscodeOverflow

#: Size of the conversion buffer, including the terminator.  No single
#: termcap string should come close.
CAPACITY = 1024

# Templates of multi-step conversions; every '%p0' is patched with the
# register in use.
_FMT_B = b'%p0%{10}%/%{16}%*%p0%{10}%m%+'
_FMT_D = b'%p0%p0%{2}%*%-'
_FMT_IF = b'%p0%p0%?'
_FMT_THEN = b'%>%t'
_FMT_ELSE = b'%+%;'

_LEADING_PADDING = re.compile(rb'\d[\d.]*\*?')
_TRAILING_PADDING = re.compile(rb'\$<([\d.]+)(\*?)/>\Z')
_PADDING = re.compile(rb'\$<[\d.]+[*/]*>')

# Operands that must not be quoted as %'c' in terminfo.
_UNQUOTABLE = frozenset(b",'\\:")


def _isgraph(char: int) -> bool:
    return 0x21 <= char < 0x7f


class _Converter:
    """Single conversion: output buffer, current register, push suppression."""

    def __init__(self, value: bytes, capacity: int, padding: Optional[bytes]) -> None:
        self.value = value
        self.padding = padding
        self.capacity = capacity
        self.out = bytearray()
        self.reg = 1
        self.nop = False

    def at(self, pos: int) -> int:
        return self.value[pos] if pos < len(self.value) else 0

    def write(self, data: bytes) -> None:
        # one byte is kept for the terminator.
        if len(self.out) + len(data) + 1 > self.capacity:
            raise TranscodeOverflow(
                f'out of memory: converted string exceeds {self.capacity} bytes')
        self.out += data

    def template(self, fmt: bytes) -> None:
        self.write(fmt.replace(b'%p0', b'%%p%d' % self.reg))

    def push(self) -> None:
        """Push the current register, unless the last code left a result."""
        if self.nop:
            self.nop = False
            return
        self.write(b'%%p%d' % self.reg)

    def operand(self, pos: int) -> int:
        """
        Write the character operand following ``pos``.

        :returns: Position of the last byte consumed.
        """
        pos += 1
        char = self.at(pos)
        if char == ord('\\'):
            pos += 1
            char = self.at(pos)
            if char in b'0123':
                char = 0
                while pos < len(self.value) and self.value[pos] in b'0123456789':
                    char = 8 * char + (self.value[pos] - ord('0'))
                    pos += 1
                pos -= 1
            elif not char:
                char = ord('\\')
        elif char == ord('^'):
            pos += 1
            char = self.at(pos) & 0x1f
        char &= 0xff
        if _isgraph(char) and char not in _UNQUOTABLE:
            self.write(b"%'" + bytes((char,)) + b"'")
        else:
            self.write(b'%%{%d}' % char)
        return pos

    def convert(self) -> bytes:
        value = self.value
        padding, pos = self.padding, 0
        if padding is None:
            match = _LEADING_PADDING.match(value)
            padding = match.group() if match else b''
            pos = match.end() if match else 0

        while pos < len(value):
            char = value[pos]
            if char != ord('%'):
                if char == ord(','):
                    self.write(b'\\')
                self.write(bytes((char,)))
                pos += 1
                continue

            pos += 1
            if pos >= len(value):
                self.write(b'%')
                break
            code = value[pos]
            if code == ord('B'):
                self.template(_FMT_B)
                self.nop = True
                pos += 1
                continue
            if code == ord('D'):
                self.template(_FMT_D)
                self.nop = True
                pos += 1
                continue
            if code == ord('>'):
                self.template(_FMT_IF)
                pos = self.operand(pos)
                self.write(_FMT_THEN)
                pos = self.operand(pos)
                self.write(_FMT_ELSE)
                self.nop = True
                pos += 1
                continue
            if code == ord('r'):
                # registers are swapped below
                pass
            elif code in b'23d':
                self.push()
                self.write(b'%d' if code == ord('d') else b'%' + bytes((code,)) + b'd')
            elif code == ord('+'):
                self.push()
                pos = self.operand(pos)
                self.write(b'%+%c')
            elif code == ord('.'):
                self.push()
                self.write(b'%c')
            else:
                # hope it matches a terminfo command.
                self.write(b'%' + bytes((code,)))
                if code == ord('i'):
                    pos += 1
                    continue
            self.reg = 3 - self.reg
            pos += 1

        # \E\ is valid termcap, terminfo needs the final backslash escaped.
        out = self.out
        if out.endswith(b'\\') and (len(out) < 2 or out[-2] not in b'\\^'):
            self.write(b'\\')

        if padding:
            self.write(b'$<' + padding + b'/>')
        return bytes(self.out)


def to_terminfo(value: bytes | str, capacity: int = CAPACITY,
                padding: Optional[bytes] = None) -> bytes:
    """
    Convert one termcap string capability value to terminfo syntax.

    :param value: Capability value with escapes already decoded, optionally
        starting with a padding count such as ``20`` or ``3*``.
    :param capacity: Size of the conversion buffer.
    :param padding: Padding already split from the value, such as ``b'5*'``,
        or ``b''`` for none.  When None, a leading padding count is taken
        from ``value`` itself.
    :returns: Terminfo string, with padding moved to a trailing ``$<n/>``.
    :raises TranscodeOverflow: The converted string does not fit ``capacity``.
    """
    if isinstance(value, str):
        value = value.encode('latin1')
    return _Converter(value, capacity, padding).convert()


def padding_of(tinfo: bytes) -> Optional[Tuple[str, bool]]:
    """
    Return padding of a converted string.

    :param tinfo: Result of :func:`to_terminfo`.
    :returns: Tuple of ``(count, proportional)``, such as ``('5', True)``
        for ``$<5*/>``, or None when the string carries no padding.
    """
    match = _TRAILING_PADDING.search(tinfo)
    if not match:
        return None
    return match.group(1).decode('ascii'), bool(match.group(2))


def strip_padding(tinfo: bytes) -> bytes:
    """Remove every ``$<..>`` padding directive from ``tinfo``."""
    return _PADDING.sub(b'', tinfo)
