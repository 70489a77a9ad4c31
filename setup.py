#!/usr/bin/env python3

# Setup script for listenfds

from setuptools import setup
from listenfds import __version__

LONG_DESC = """\
listenfds lets a Python server use listening sockets passed to it by a
process supervisor (systemd socket activation).  It reads LISTEN_PID,
LISTEN_FDS and LISTEN_FDNAMES exactly once, checks them, and hands out
the inherited descriptors as files or listening sockets grouped by name.
A single address setting can select either an inherited socket ("&http")
or a new one ("localhost:8080").
"""

kw = {
    'name': "listenfds",
    'version': __version__,
    'description': "Inherit listening sockets from systemd socket activation",
    'long_description': LONG_DESC,
    'author': "The listenfds developers",
    'license': "MIT",
    'package_dir': {'listenfds': 'listenfds'},
    'packages': [
        'listenfds',
    ],
    'python_requires': '>=3.7',
    'extras_require': {'test': ['pytest']},
}

kw['classifiers'] = [
    'Development Status :: 5 - Production/Stable',
    'Environment :: No Input/Output (Daemon)',
    'Intended Audience :: Developers',
    'License :: OSI Approved :: MIT License',
    'Operating System :: POSIX',
    'Topic :: System :: Networking',
    'Programming Language :: Python :: 3 :: Only',
]
kw['platforms'] = 'POSIX'

setup(**kw)
