"""Core tests for termcap module."""
# std imports
import importlib.metadata as importmeta

# local
import termcap


def test_package_version():
    """termcap.__version__ is expected value."""
    # given,
    expected = importmeta.version('termcap')

    # exercise,
    result = termcap.__version__

    # verify.
    assert result == expected


def test_public_api():
    """Every name of __all__ is importable from the top-level module."""
    for name in termcap.__all__:
        assert getattr(termcap, name) is not None


def test_resolve_xterm(xterm):
    """Resolve a terminal from termcap text using only top-level names."""
    # given,
    database = termcap.TermcapDatabase.from_bytes(xterm)

    # exercise,
    caps = database.resolve('xterm-color')

    # verify.
    assert caps.number('co') == 132
    assert termcap.tparm(caps.string('cm'), 0, 0) == b'\x1b[1;1H$<5/>'
