"""
termcap module.

Compiles termcap terminal-capability databases and resolves terminal entries,
with string capabilities converted to terminfo syntax.
"""
# re-export the public API, and some private names, from the top-level module
# path, so that 'from termcap.database import TermcapDatabase' may be written
# as 'from termcap import TermcapDatabase'.

# local
from .buffers import ArrayBuffer, StorageBuffer, next_pow2
from .database import TC, Capabilities, TermcapDatabase
from .errors import (
    TermcapError,
    TermcapSyntaxError,
    TerminalChainError,
    TranscodeOverflow)
from .hashmap import LinkedHashMap
from .legacy import (
    StringArea,
    set_termcap_file,
    tinfo_init,
    tgetent,
    tgetflag,
    tgetnum,
    tgetstr,
    tgoto,
    tputs)
from .parser import Capability, CapKind, State, TermcapParser
from .symbols import Symbol, SymbolTable, char_str, render_bytes
from .transcode import padding_of, strip_padding, to_terminfo
from .tparm import tparm

# The __all__ attribute defines the items exported from statement,
# 'from termcap import *', and says what part of the API is public.
__all__ = ('TermcapDatabase', 'Capabilities', 'TermcapParser', 'Capability',
           'CapKind', 'SymbolTable', 'Symbol', 'to_terminfo', 'tparm',
           'TermcapError', 'TermcapSyntaxError', 'TerminalChainError',
           'TranscodeOverflow', 'StringArea', 'set_termcap_file', 'tinfo_init',
           'tgetent', 'tgetflag', 'tgetnum', 'tgetstr', 'tgoto', 'tputs')
__version__ = '0.1.0'
