"""Tests for resolving terminals through their tc= chain."""
# std imports
import logging

# 3rd party
import pytest

# local
from termcap.database import TermcapDatabase
from termcap.errors import TermcapSyntaxError, TerminalChainError, TranscodeOverflow
from termcap.legacy import DEFAULT_TERMCAP_FILE
from termcap.transcode import padding_of


def test_vt100(vt100):
    """Numbers, flags and strings of a single entry."""
    # given,
    database = TermcapDatabase.from_bytes(vt100)

    # exercise,
    caps = database.resolve('vt100')

    # verify.
    assert caps.number('co') == 80
    assert caps.number('li') == 24
    assert caps.flag('am')
    assert caps.string('cr') == b'\r'
    assert caps.chain == ['vt100']
    assert len(caps) == 4


def test_alias_resolves_same_entry(vt100):
    """Every alias of an entry resolves to the same capabilities."""
    database = TermcapDatabase.from_bytes(vt100)
    assert database.resolve('vt100-am').as_dict() == database.resolve('vt100').as_dict()


def test_tc_chain(xterm):
    """The requesting entry wins; the rest is inherited from its tc= parent."""
    # given,
    database = TermcapDatabase.from_bytes(xterm)

    # exercise,
    caps = database.resolve('xterm')

    # verify.
    assert caps.chain == ['xterm', 'vt100']
    assert caps.string('bold') == b'\x1b[1m'
    assert caps.number('co') == 132
    assert caps.number('li') == 24
    assert caps.flag('am')
    assert caps.flag('bs')
    assert 'tc' not in caps
    assert caps.string('tc') is None
    assert list(caps) == ['bold', 'co', 'am', 'bs', 'li', 'cl', 'cm', 'cr']


def test_strings_are_converted(xterm):
    """String values are in terminfo syntax, with padding at the end."""
    caps = TermcapDatabase.from_bytes(xterm).resolve('xterm')

    assert caps.string('cm') == b'\x1b[%i%p1%d;%p2%dH$<5/>'
    assert caps.string('cl') == b'\x1b[H\x1b[J$<50/>'
    assert padding_of(caps.string('cl')) == ('50', False)


@pytest.mark.parametrize('text,expected', [
    (b'\\061x', b'1x'),
    (b'5\\061x', b'1x$<5/>'),
    (b'2*\\061x', b'1x$<2*/>'),
    (b'\\0619', b'19'),
])
def test_leading_digit_value(text, expected):
    """A value starting with an escaped digit keeps it, apart from any padding."""
    # given,
    database = TermcapDatabase.from_bytes(b'a:k=' + text + b':\n')

    # exercise,
    value = database.resolve('a').string('k')

    # verify.
    assert value == expected


def test_proportional_padding():
    caps = TermcapDatabase.from_bytes(b'term:sf=2*\\ED:\n').resolve('term')
    assert caps.string('sf') == b'\x1bD$<2*/>'
    assert padding_of(caps.string('sf')) == ('2', True)


def test_resolve_idempotent(xterm):
    """Resolving twice gives equal results, without interning again."""
    # given,
    database = TermcapDatabase.from_bytes(xterm)
    first = database.resolve('xterm').as_dict()
    size = len(database.symbols)

    # exercise,
    second = database.resolve('xterm').as_dict()

    # verify.
    assert first == second
    assert len(database.symbols) == size


@pytest.mark.parametrize('method,cap_id', [
    ('number', 'cr'),
    ('number', 'am'),
    ('string', 'co'),
    ('string', 'am'),
    ('number', 'zz'),
    ('string', 'zz'),
])
def test_kind_mismatch_is_absent(vt100, method, cap_id):
    caps = TermcapDatabase.from_bytes(vt100).resolve('vt100')
    assert getattr(caps, method)(cap_id) is None


@pytest.mark.parametrize('cap_id', ['co', 'cr', 'zz'])
def test_flag_of_other_kind(vt100, cap_id):
    assert not TermcapDatabase.from_bytes(vt100).resolve('vt100').flag(cap_id)


def test_unknown_terminal(vt100):
    assert TermcapDatabase.from_bytes(vt100).resolve('xterm') is None


def test_missing_parent(caplog):
    """A tc= naming an unknown terminal ends the chain with a warning."""
    database = TermcapDatabase.from_bytes(b'a:tc=missing:co#1:\n')

    with caplog.at_level(logging.WARNING, logger='termcap.database'):
        caps = database.resolve('a')

    assert caps.number('co') == 1
    assert caps.chain == ['a']
    assert 'tc=missing not found' in caplog.text


def test_cyclic_chain():
    database = TermcapDatabase.from_bytes(b'a:co#1:tc=b:\nb:li#2:tc=a:\n')
    with pytest.raises(TerminalChainError):
        database.resolve('a')


def test_self_reference():
    database = TermcapDatabase.from_bytes(b'a|b:co#1:tc=b:\n')
    with pytest.raises(TerminalChainError):
        database.resolve('a')


def test_transcode_overflow_propagates():
    database = TermcapDatabase.from_bytes(b'a:k=' + b',' * 600 + b':\n')
    with pytest.raises(TranscodeOverflow):
        database.resolve('a')


def test_malformed_input():
    with pytest.raises(TermcapSyntaxError):
        TermcapDatabase.from_bytes(b'vt100:co#80:\rli#24:\n')


def test_load(xterm_file):
    database = TermcapDatabase.load(xterm_file)
    assert 'xterm-color' in database
    assert 'vt52' not in database


def test_load_missing_file(tmp_path):
    with pytest.raises(OSError):
        TermcapDatabase.load(str(tmp_path / 'missing'))


def test_names(xterm):
    database = TermcapDatabase.from_bytes(xterm)
    assert list(database.terminals()) == [
        ['vt100', 'vt100-am', 'dec vt100'], ['xterm', 'xterm-color']]
    assert database.aliases('xterm-color') == ['xterm', 'xterm-color']
    assert database.aliases('vt52') is None


def test_describe(vt100):
    caps = TermcapDatabase.from_bytes(vt100).resolve('vt100')
    assert caps.describe() == ['co#80', 'li#24', 'am', 'cr=\\r']
    assert repr(caps) == "<Capabilities 'vt100' chain=['vt100'] count=4>"


def test_bundled_database():
    """The bundled database resolves a three-deep chain."""
    # given,
    database = TermcapDatabase.load(DEFAULT_TERMCAP_FILE)

    # exercise,
    caps = database.resolve('xterm-256color')

    # verify.
    assert caps.chain == ['xterm-256color', 'xterm', 'vt220', 'vt100']
    assert caps.number('Co') == 256
    assert caps.number('pa') == 32767
    assert caps.number('co') == 80
    assert caps.flag('km')
    assert caps.string('cm') == b'\x1b[%i%p1%d;%p2%dH$<5/>'
    assert caps.string('AB') == b'\x1b[4%p1%dm'
    assert 'tc' not in caps


@pytest.mark.parametrize('name', ['dumb', 'ansi-mini', 'vt100', 'vt220', 'xterm', 'linux'])
def test_bundled_entries_resolve(name):
    caps = TermcapDatabase.load(DEFAULT_TERMCAP_FILE).resolve(name)
    assert caps.number('co') == 80
    assert caps.string('cr') is None or caps.string('cr') == b'\r'
