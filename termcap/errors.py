"""Exceptions raised while loading and resolving a termcap database."""


class TermcapError(Exception):
    """Base class of all termcap errors."""


class TermcapSyntaxError(TermcapError, ValueError):
    """
    Malformed termcap text, fatal to the whole load.

    :param str state: Name of the parser state that rejected the byte.
    :param str char: Rendered offending byte, see :func:`termcap.symbols.char_str`.
    :param int line: Line number of the offending byte, starting at 1.
    :param int column: Column of the offending byte, starting at 0.
    :param str reason: Short description, such as ``'invalid crlf'``.
    """

    def __init__(self, state, char, line, column, reason):
        self.state = state
        self.char = char
        self.line = line
        self.column = column
        self.reason = reason
        super().__init__(f'termcap: {state}: {reason} {char} line:{line} col:{column}')


class TranscodeOverflow(TermcapError, MemoryError):
    """A string capability would not fit the fixed conversion buffer."""


class TerminalChainError(TermcapError, ValueError):
    """A ``tc=`` inheritance chain refers back to an entry already visited."""
