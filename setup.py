#!/usr/bin/env python
"""
Setup.py distribution file for termcap.

Termcap database compiler and resolver.
"""
# std imports
import os
import codecs

# 3rd party
import setuptools


def _get_here(fname):
    return os.path.join(os.path.dirname(__file__), fname)


def _get_version(fname, key='package'):
    import json
    with open(fname, 'r') as fin:
        return json.load(fin)[key]


def main():
    """Setup.py entry point."""
    setuptools.setup(
        name='termcap',
        version=_get_version(
            _get_here(os.path.join('termcap', 'version.json'))),
        description=(
            "Compiles termcap databases and resolves terminal capabilities "
            "into terminfo syntax"),
        long_description=codecs.open(
            _get_here('README.rst'), 'rb', 'utf8').read(),
        long_description_content_type='text/x-rst',
        license='MIT',
        packages=['termcap'],
        python_requires='>=3.8',
        extras_require={
            'tools': ['jinja2'],
            'test': ['pytest', 'jinja2'],
        },
        package_data={
            'termcap': ['*.json', 'data/termcap'],
            '': ['*.rst'],
        },
        zip_safe=False,
        classifiers=[
            'Intended Audience :: Developers',
            'Natural Language :: English',
            'Development Status :: 4 - Beta',
            'Environment :: Console',
            'License :: OSI Approved :: MIT License',
            'Operating System :: POSIX',
            'Programming Language :: Python :: 3',
            'Topic :: Software Development :: Libraries',
            'Topic :: Terminals'
        ],
        keywords=[
            'console',
            'curses',
            'termcap',
            'terminal',
            'terminfo',
            'tgetent',
            'tparm',
            'vt100',
            'xterm',
        ],
    )


if __name__ == '__main__':
    main()
