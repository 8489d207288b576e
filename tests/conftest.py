"""Pytest configuration and fixtures."""
import pytest

# local
import termcap.legacy

VT100 = b'vt100|vt100-am:co#80:li#24:am:cr=^M:\n'

XTERM = (
    b'# two entries chained by tc=\n'
    b'vt100|vt100-am|dec vt100:\\\n'
    b'\t:am:bs:co#80:li#24:\\\n'
    b'\t:bold=\\E[0m:cl=50\\E[H\\E[J:cm=5\\E[%i%d;%dH:cr=^M:\n'
    b'xterm|xterm-color:tc=vt100:bold=\\E[1m:co#132:\n'
)


try:
    from pytest_codspeed import BenchmarkFixture  # noqa: F401
except ImportError:
    # Provide a no-op benchmark fixture when pytest-codspeed is not installed
    @pytest.fixture
    def benchmark():
        """No-op benchmark fixture for environments without pytest-codspeed."""
        def _passthrough(func, *args, **kwargs):
            return func(*args, **kwargs)
        return _passthrough


@pytest.fixture
def xterm_file(tmp_path):
    """Path of a termcap file holding the vt100 and xterm entries."""
    path = tmp_path / 'termcap'
    path.write_bytes(XTERM)
    return str(path)


@pytest.fixture
def legacy(xterm_file):
    """The legacy query module, configured with :func:`xterm_file`."""
    termcap.legacy.set_termcap_file(xterm_file)
    yield termcap.legacy
    termcap.legacy.set_termcap_file(None)


@pytest.fixture
def vt100():
    """Termcap text of one vt100 entry."""
    return VT100


@pytest.fixture
def xterm():
    """Termcap text of vt100, and xterm inheriting from it."""
    return XTERM
