#!/usr/bin/env python
"""
Compile termcap entries into a terminfo-syntax source listing.

This is code generation using jinja2: each requested terminal is resolved
through its ``tc=`` chain, and the flattened capabilities are rendered by the
template 'code_templates/terminfo.src.j2'.

With ``--stats``, print the size of the parsed database instead.
"""
from __future__ import annotations

import argparse
import datetime
import logging
import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Iterator, List

import jinja2

import termcap
from termcap.legacy import termcap_file
from termcap.parser import CapKind

PATH_UP = os.path.relpath(os.path.join(os.path.dirname(__file__), os.path.pardir))
THIS_FILEPATH = ('termcap/' + Path(__file__).resolve().relative_to(Path(PATH_UP).resolve()).as_posix())

JINJA_ENV = jinja2.Environment(
    loader=jinja2.FileSystemLoader(os.path.join(PATH_UP, 'code_templates')),
    keep_trailing_newline=True)
UTC_NOW = datetime.datetime.now(datetime.timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def terminfo_escape(data: bytes) -> str:
    r"""
    Return terminfo source form of a converted string value.

    Escape is written ``\E``, other control characters ``^X``, and bytes
    outside of ASCII as octal.  Commas were already escaped by conversion.
    """
    out = []
    for char in data:
        if char == 0x1b:
            out.append('\\E')
        elif char == ord('^'):
            out.append('\\^')
        elif char == 0x7f:
            out.append('^?')
        elif char < 0x20:
            out.append(f'^{chr(0x40 + char)}')
        elif char > 0x7f:
            out.append(f'\\{char:03o}')
        else:
            out.append(chr(char))
    return ''.join(out)


@dataclass(frozen=True)
class RenderContext:
    """Base render context."""

    def to_dict(self) -> dict[str, Any]:
        return {fld.name: getattr(self, fld.name) for fld in fields(self)}


@dataclass(frozen=True)
class TerminalEntry:
    """Resolved capabilities of one terminal, grouped by kind."""
    names: List[str]
    booleans: List[str] = field(default_factory=list)
    numbers: List[str] = field(default_factory=list)
    strings: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class TerminfoRenderCtx(RenderContext):
    """Render context for a terminfo source listing."""
    source: str
    entries: List[TerminalEntry]


@dataclass
class RenderDefinition:
    """Defines how to render a template to an output file."""
    jinja_filename: str
    output_filename: str
    render_context: RenderContext

    _template: jinja2.Template = field(init=False, repr=False)
    _render_context: dict[str, Any] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._template = JINJA_ENV.get_template(self.jinja_filename)
        self._render_context = {
            'utc_now': UTC_NOW,
            'this_filepath': THIS_FILEPATH,
            **self.render_context.to_dict(),
        }

    def render(self) -> str:
        return self._template.render(self._render_context)

    def generate(self) -> Iterator[str]:
        return self._template.generate(self._render_context)


def resolve_entry(database: termcap.TermcapDatabase, name: str) -> TerminalEntry:
    """Resolve terminal ``name`` into a :class:`TerminalEntry`."""
    caps = database.resolve(name)
    if caps is None:
        raise KeyError(f'{name}: terminal not found')
    entry = TerminalEntry(names=database.aliases(name))
    for cap_id in caps:
        cap = caps.raw(cap_id)
        if cap.kind is CapKind.NUMBER:
            entry.numbers.append(f'{cap_id}#{cap.number}')
        elif cap.kind is CapKind.STRING:
            entry.strings.append(f'{cap_id}={terminfo_escape(caps.string(cap_id))}')
        else:
            entry.booleans.append(cap_id)
    return entry


def main(filename, names, stats, debug, output):
    """Program entry point."""
    logging.basicConfig(level=logging.DEBUG if debug else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')
    filename = filename or termcap_file()
    try:
        database = termcap.TermcapDatabase.load(filename, debug=debug)
    except (OSError, termcap.TermcapError) as err:
        print(f'{filename}: {err}', file=sys.stderr)
        return 1

    if stats:
        print(database.parser.format_stats())
        return 0

    if not names:
        names = [aliases[0] for aliases in database.terminals()]
    try:
        entries = [resolve_entry(database, name) for name in names]
    except (KeyError, termcap.TermcapError) as err:
        print(f'{filename}: {err}', file=sys.stderr)
        return 1

    render_def = RenderDefinition(
        jinja_filename='terminfo.src.j2',
        output_filename=output or '-',
        render_context=TerminfoRenderCtx(source=filename, entries=entries),
    )
    if render_def.output_filename == '-':
        sys.stdout.write(render_def.render())
        return 0

    new_filename = render_def.output_filename + '.new'
    with open(new_filename, 'w', encoding='utf-8', newline='\n') as fout:
        print(f'write {render_def.output_filename}: ', flush=True, end='')
        for data in render_def.generate():
            fout.write(data)

    os.replace(new_filename, render_def.output_filename)
    print('ok')
    return 0


def parse_args():
    """Parse command line arguments."""
    args = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    args.add_argument('names', nargs='*',
                      help='Terminal names to compile, default is every entry.')
    args.add_argument('--file', dest='filename', default=None,
                      help='Termcap database file.')
    args.add_argument('--stats', action='store_true',
                      help='Print database statistics.')
    args.add_argument('--debug', action='store_true',
                      help='Log every parsed name and capability.')
    args.add_argument('--output', default=None,
                      help='Output file, default is standard output.')
    return vars(args.parse_args())


if __name__ == '__main__':
    sys.exit(main(**parse_args()))
