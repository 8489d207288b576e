"""Tests for the bin/termcap-compile.py developer script."""
# std imports
import os
import sys
import importlib.util

# 3rd party
import pytest

SCRIPT = os.path.join(os.path.dirname(__file__), os.path.pardir, 'bin', 'termcap-compile.py')


@pytest.fixture(scope='module')
def compile_script():
    spec = importlib.util.spec_from_file_location('termcap_compile', SCRIPT)
    module = importlib.util.module_from_spec(spec)
    # dataclasses resolves string annotations through sys.modules.
    sys.modules[spec.name] = module
    spec.loader.exec_module(module)
    return module


@pytest.mark.parametrize('data,expected', [
    (b'\x1b[%i%p1%d;%p2%dH$<5/>', '\\E[%i%p1%d;%p2%dH$<5/>'),
    (b'\r', '^M'),
    (b'\x7f', '^?'),
    (b'^', '\\^'),
    (b'a\\,b', 'a\\,b'),
    (b'\xe9', '\\351'),
])
def test_terminfo_escape(compile_script, data, expected):
    assert compile_script.terminfo_escape(data) == expected


def test_compile_listing(compile_script, xterm_file, tmp_path, capsys):
    """Resolved entries are rendered as a terminfo source listing."""
    # given,
    output = str(tmp_path / 'terminfo.src')

    # exercise,
    result = compile_script.main(filename=xterm_file, names=['xterm'],
                                 stats=False, debug=False, output=output)

    # verify.
    assert result == 0
    with open(output, encoding='utf-8') as fin:
        listing = fin.read()
    assert 'xterm|xterm-color,\n' in listing
    assert '\tam, bs,\n' in listing
    assert '\tco#132, li#24,\n' in listing
    assert '\tbold=\\E[1m,\n' in listing
    assert '\tcm=\\E[%i%p1%d;%p2%dH$<5/>,\n' in listing
    assert 'tc=' not in listing
    assert capsys.readouterr().out.endswith('ok\n')


def test_compile_stats(compile_script, xterm_file, capsys):
    result = compile_script.main(filename=xterm_file, names=[], stats=True,
                                 debug=False, output=None)
    assert result == 0
    assert '| aliases      |       5 |' in capsys.readouterr().out


def test_compile_unknown_terminal(compile_script, xterm_file, capsys):
    result = compile_script.main(filename=xterm_file, names=['vt52'], stats=False,
                                 debug=False, output=None)
    assert result == 1
    assert 'vt52: terminal not found' in capsys.readouterr().err
