"""
Resolution of terminal names against a parsed termcap database.

Resolving a name walks its ``tc=`` chain and flattens every entry of the chain
into one :class:`Capabilities` value.  The entry nearest to the requested name
wins for any capability defined more than once, and string values are
converted to terminfo syntax as they are copied.
"""
from __future__ import annotations

# std imports
import logging
from typing import Dict, Iterator, List, Optional

# local
from .errors import TerminalChainError
from .hashmap import LinkedHashMap
from .parser import TABLE_INIT_SIZE, Capability, CapKind, TermcapParser
from .symbols import Key, symbol_hash_fn, symbol_compare_fn
from .transcode import to_terminfo

_LOGGER = logging.getLogger(__name__)

#: Name of the capability naming the parent entry.
TC = b'tc'


def _as_key(name: Key | str) -> Key:
    return name.encode('latin1') if isinstance(name, str) else name


class Capabilities:
    """
    Flattened capabilities of one resolved terminal.

    Queries are kind-checked: asking for a number of a string capability
    answers as though the capability were absent.
    """

    def __init__(self, database: TermcapDatabase, name: str,
                 caps: LinkedHashMap, chain: List[str]) -> None:
        self.database = database
        self.name = name
        self.chain = chain
        self._caps = caps

    def __repr__(self) -> str:
        return f'<Capabilities {self.name!r} chain={self.chain!r} count={len(self)}>'

    def __len__(self) -> int:
        return len(self._caps)

    def __iter__(self) -> Iterator[str]:
        for key in self._caps:
            yield self.database.symbols.decode(key)

    def __contains__(self, cap_id: Key | str) -> bool:
        return _as_key(cap_id) in self._caps

    def raw(self, cap_id: Key | str) -> Optional[Capability]:
        """Return the :class:`~termcap.parser.Capability` of ``cap_id``, or None."""
        return self._caps.get(_as_key(cap_id))

    def flag(self, cap_id: Key | str) -> bool:
        """Return whether boolean capability ``cap_id`` is present."""
        cap = self.raw(cap_id)
        return cap is not None and cap.kind is CapKind.BOOLEAN

    def number(self, cap_id: Key | str) -> Optional[int]:
        """Return value of numeric capability ``cap_id``, or None."""
        cap = self.raw(cap_id)
        if cap is None or cap.kind is not CapKind.NUMBER:
            return None
        return cap.number

    def string(self, cap_id: Key | str) -> Optional[bytes]:
        """Return terminfo value of string capability ``cap_id``, or None."""
        cap = self.raw(cap_id)
        if cap is None or cap.kind is not CapKind.STRING:
            return None
        return self.database.symbols.materialize(cap.value)

    def as_dict(self) -> Dict[str, object]:
        """Return a plain dictionary of ``True``, ``int`` and ``bytes`` values."""
        result: Dict[str, object] = {}
        for key, cap in self._caps.items():
            name = self.database.symbols.decode(key)
            if cap.kind is CapKind.NUMBER:
                result[name] = cap.number
            elif cap.kind is CapKind.STRING:
                result[name] = self.database.symbols.materialize(cap.value)
            else:
                result[name] = True
        return result

    def describe(self) -> List[str]:
        """Return source form of every capability, see :meth:`TermcapParser.describe`."""
        return [self.database.parser.describe(cap) for cap in self._caps.values()]


class TermcapDatabase:
    """
    A loaded termcap database.

    :param parser: Parser that has consumed the whole database.
    """

    def __init__(self, parser: TermcapParser) -> None:
        self.parser = parser
        self.symbols = parser.symbols
        self._converted: Dict[Capability, Capability] = {}

    @classmethod
    def load(cls, filename: str, debug: bool = False) -> TermcapDatabase:
        """
        Parse termcap file ``filename``.

        :raises OSError: The file cannot be read.
        :raises TermcapSyntaxError: The file is malformed.
        """
        return cls(TermcapParser(debug=debug).read(filename))

    @classmethod
    def from_bytes(cls, data: bytes | str, debug: bool = False) -> TermcapDatabase:
        """Parse termcap text ``data``."""
        return cls(TermcapParser(debug=debug).parse(data))

    def __contains__(self, name: Key | str) -> bool:
        return self.parser.lookup(_as_key(name)) is not None

    def terminals(self) -> Iterator[List[str]]:
        """Yield the names of every entry, primary name first."""
        for idx in self.parser.entries():
            yield self.parser.names(idx)

    def aliases(self, name: Key | str) -> Optional[List[str]]:
        """Return every name of the entry declaring ``name``, or None."""
        idx = self.parser.lookup(_as_key(name))
        return None if idx is None else self.parser.names(idx)

    def resolve(self, name: Key | str) -> Optional[Capabilities]:
        """
        Resolve terminal ``name`` through its ``tc=`` chain.

        :returns: The flattened capabilities, or None when ``name`` is unknown.
        :raises TerminalChainError: The chain refers back to a visited entry.
        :raises TranscodeOverflow: A string capability is too large to convert.
        """
        key = _as_key(name)
        idx = self.parser.lookup(key)
        if idx is None:
            return None

        caps = LinkedHashMap(symbol_hash_fn, symbol_compare_fn,
                             self.symbols, TABLE_INIT_SIZE)
        visited: List[int] = []
        while idx is not None:
            if idx in visited:
                raise TerminalChainError(
                    f'tc chain of {self.symbols.render(key)} loops back to '
                    f'{self.parser.names(idx)[0]}')
            visited.append(idx)
            entry = self.parser.entry(idx)
            for cap_key, cap in entry.items():
                if self.symbols.equal(cap_key, TC) or cap_key in caps:
                    continue
                if cap.kind is CapKind.STRING:
                    cap = self._convert(cap)
                caps.insert(cap_key, cap)

            parent = entry.get(TC)
            if parent is None or parent.kind is not CapKind.STRING:
                break
            idx = self.parser.lookup(parent.value)
            if idx is None:
                _LOGGER.warning('termcap: %s: tc=%s not found',
                                self.symbols.render(key), self.symbols.render(parent.value))

        return Capabilities(self, self.symbols.decode(key), caps,
                            [self.parser.names(idx)[0] for idx in visited])

    def _convert(self, cap: Capability) -> Capability:
        """Return string capability ``cap`` with its value in terminfo syntax."""
        converted = self._converted.get(cap)
        if converted is None:
            padding = b''
            if cap.pad_delay or cap.pad_prop:
                padding = f'{cap.pad_delay}{"*" if cap.pad_prop else ""}'.encode('ascii')
            tinfo = to_terminfo(self.symbols.materialize(cap.value), padding=padding)
            converted = Capability(key=cap.key, kind=CapKind.STRING,
                                   value=self.symbols.intern(tinfo))
            self._converted[cap] = converted
        return converted
