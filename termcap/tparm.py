"""
Evaluation of terminfo parameterized strings.

This is the formatter for strings produced by :func:`termcap.transcode.to_terminfo`,
which use the terminfo parameter stack language (``%p1%d``, ``%?..%t..%e..%;``).
"""
from __future__ import annotations

# std imports
import re
from typing import List, Union

Param = Union[int, bytes]

#: Number of parameters a format may refer to, ``%p1`` through ``%p9``.
MAX_PARAMS = 9

# printf-style output: %[[:]flags][width[.precision]][doxXs]
_PRINTF = re.compile(rb'(?::([-+# ]+)|([# ]*))(\d*)(?:\.(\d+))?([doxXs])')

_NUMBER = re.compile(rb'\{(-?\d+)\}')

# Static variables %PA..%PZ keep their value across calls.
_STATIC_VARS: dict = {}


def _cdiv(num: int, den: int) -> int:
    if not den:
        return 0
    quot = abs(num) // abs(den)
    return quot if (num < 0) == (den < 0) else -quot


def _cmod(num: int, den: int) -> int:
    if not den:
        return 0
    return num - den * _cdiv(num, den)


_BINARY = {
    ord('+'): lambda a, b: a + b,
    ord('-'): lambda a, b: a - b,
    ord('*'): lambda a, b: a * b,
    ord('/'): _cdiv,
    ord('m'): _cmod,
    ord('&'): lambda a, b: a & b,
    ord('|'): lambda a, b: a | b,
    ord('^'): lambda a, b: a ^ b,
    ord('='): lambda a, b: int(a == b),
    ord('>'): lambda a, b: int(a > b),
    ord('<'): lambda a, b: int(a < b),
    ord('A'): lambda a, b: int(bool(a and b)),
    ord('O'): lambda a, b: int(bool(a or b)),
}


def _as_int(value: Param) -> int:
    if isinstance(value, (bytes, bytearray)):
        try:
            return int(value)
        except ValueError:
            return 0
    return int(value)


def _skip(fmt: bytes, pos: int, to_else: bool) -> int:
    """
    Skip a conditional branch.

    :param pos: Position just after ``%t`` or ``%e``.
    :param to_else: Stop after a ``%e`` of the same level as well as ``%;``.
    :returns: Position just after the ``%e`` or ``%;`` found.
    """
    level = 0
    while pos < len(fmt):
        if fmt[pos] != ord('%'):
            pos += 1
            continue
        code = fmt[pos + 1:pos + 2]
        if code == b"'":
            pos += 4
            continue
        pos += 2
        if code == b'?':
            level += 1
        elif code == b';':
            if not level:
                return pos
            level -= 1
        elif code == b'e' and to_else and not level:
            return pos
    return pos


def tparm(fmt: bytes | str, *params: Param) -> bytes:
    """
    Substitute ``params`` into terminfo parameterized string ``fmt``.

    :param fmt: Terminfo string, such as ``b'\\x1b[%i%p1%d;%p2%dH'``.
    :param params: Up to nine integer (or bytes, for ``%s``) parameters;
        missing parameters are 0.
    :returns: The resulting byte sequence.

    Popping an empty stack gives 0, and division by zero gives 0.
    """
    if isinstance(fmt, str):
        fmt = fmt.encode('latin1')
    args: List[Param] = list(params[:MAX_PARAMS])
    args += [0] * (MAX_PARAMS - len(args))
    stack: List[Param] = []
    dynamic_vars: dict = {}
    out = bytearray()

    def pop() -> Param:
        return stack.pop() if stack else 0

    pos = 0
    while pos < len(fmt):
        char = fmt[pos]
        if char != ord('%'):
            out.append(char)
            pos += 1
            continue
        pos += 1
        if pos >= len(fmt):
            out.append(char)
            break
        code = fmt[pos]
        pos += 1

        if code == ord('%'):
            out.append(code)
        elif code == ord('c'):
            out.append(_as_int(pop()) & 0xff)
        elif code == ord('p') and pos < len(fmt):
            idx = fmt[pos] - ord('1')
            pos += 1
            stack.append(args[idx] if 0 <= idx < MAX_PARAMS else 0)
        elif code == ord('P') and pos < len(fmt):
            name = fmt[pos]
            pos += 1
            (_STATIC_VARS if chr(name).isupper() else dynamic_vars)[name] = pop()
        elif code == ord('g') and pos < len(fmt):
            name = fmt[pos]
            pos += 1
            stack.append((_STATIC_VARS if chr(name).isupper() else dynamic_vars).get(name, 0))
        elif code == ord("'"):
            stack.append(fmt[pos] if pos < len(fmt) else 0)
            pos += 2
        elif code == ord('{'):
            match = _NUMBER.match(fmt, pos - 1)
            if match:
                stack.append(int(match.group(1)))
                pos = match.end()
        elif code == ord('l'):
            value = pop()
            stack.append(len(value) if isinstance(value, (bytes, bytearray)) else 0)
        elif code in _BINARY:
            right, left = _as_int(pop()), _as_int(pop())
            stack.append(_BINARY[code](left, right))
        elif code == ord('!'):
            stack.append(int(not _as_int(pop())))
        elif code == ord('~'):
            stack.append(~_as_int(pop()))
        elif code == ord('i'):
            args[0] = _as_int(args[0]) + 1
            args[1] = _as_int(args[1]) + 1
        elif code == ord('?'):
            pass
        elif code == ord('t'):
            if not _as_int(pop()):
                pos = _skip(fmt, pos, to_else=True)
        elif code == ord('e'):
            pos = _skip(fmt, pos, to_else=False)
        elif code == ord(';'):
            pass
        else:
            match = _PRINTF.match(fmt, pos - 1)
            if not match:
                out += b'%' + bytes((code,))
                continue
            flags = (match.group(1) or match.group(2) or b'').decode('ascii')
            width, precision, conv = match.group(3), match.group(4), match.group(5)
            spec = '%' + flags + width.decode('ascii')
            if precision is not None:
                spec += '.' + precision.decode('ascii')
            spec += conv.decode('ascii')
            value = pop()
            if conv == b's':
                if isinstance(value, (bytes, bytearray)):
                    value = bytes(value).decode('latin1')
                out += (spec % value).encode('latin1')
            else:
                out += (spec % _as_int(value)).encode('latin1')
            pos = match.end()
    return bytes(out)
