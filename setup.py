#! /usr/bin/env python

import os.path
import sys

from setuptools import setup

version = "1.0.0"

if (not os.path.exists(os.path.join("pyxmppchat","version.py"))
                                    or "make_version" in sys.argv):
    with open("pyxmppchat/version.py", "w") as version_py:
        version_py.write("# pylint: disable=C0111,C0103\n")
        version_py.write("version = {0!r}\n".format(version))
    if "make_version" in sys.argv:
        sys.exit(0)
else:
    exec(open(os.path.join("pyxmppchat", "version.py")).read())

setup(
    name =      'pyxmppchat',
    version =   version,
    description =   'XMPP chat and roster client library for Python',
    author =    'Jacek Konieczny',
    author_email =  'jajcus@jajcus.net',
    classifiers = [
            "Development Status :: 3 - Alpha",
            "Intended Audience :: Developers",
            "License :: OSI Approved :: GNU Library or Lesser General Public License (LGPL)",
            "Operating System :: POSIX",
            "Programming Language :: Python",
            "Programming Language :: Python :: 3",
            "Topic :: Communications",
            "Topic :: Communications :: Chat",
            "Topic :: Internet",
            "Topic :: Software Development :: Libraries :: Python Modules",
        ],
    license =   'LGPL',
    python_requires = '>=3.6',
    install_requires = ['dnspython >=2.0.0'],
    extras_require = {
        'test': ['pytest'],
    },
    packages = [
        'pyxmppchat',
        'pyxmppchat.test',
    ],
    test_suite = "pyxmppchat.test.discover",
)
