
"""Startup script for the whole pyxmppchat test suite."""

import unittest
import pyxmppchat.test

def load_tests(loader, standard_tests, pattern):
    """Load all tests discovered in pyxmppchat.test."""
    # pylint: disable=W0613
    return pyxmppchat.test.discover()

unittest.main()
