#!/usr/bin/python
# -*- coding: UTF-8 -*-
# pylint: disable=C0111

import unittest

from pyxmppchat.settings import XMPPSettings

# register the connection settings
import pyxmppchat.connection # pylint: disable=W0611

class TestSettings(unittest.TestCase):
    def test_defaults(self):
        settings = XMPPSettings()
        self.assertEqual(len(settings), 0)
        self.assertEqual(settings["language"], u"en")
        self.assertEqual(settings["id_prefix"], u"sammy")
        self.assertEqual(settings["c2s_port"], 5222)
        self.assertIsNone(settings["password"])
        self.assertEqual(settings.get("password", u"x"), u"x")
        self.assertFalse("language" in settings)

    def test_unknown(self):
        settings = XMPPSettings()
        with self.assertRaises(KeyError):
            dummy = settings["no_such_setting"]
        self.assertIsNone(settings.get("no_such_setting"))

    def test_set(self):
        settings = XMPPSettings({u"password": u"secret"})
        self.assertEqual(settings["password"], u"secret")
        settings["language"] = u"pl"
        self.assertEqual(settings["language"], u"pl")
        self.assertEqual(sorted(settings.keys()), [u"language", u"password"])
        del settings["language"]
        self.assertEqual(settings["language"], u"en")
        copy = XMPPSettings(settings)
        self.assertEqual(copy.items(), [(u"password", u"secret")])

    def test_validation(self):
        settings = XMPPSettings()
        settings["close_timeout"] = "2.5"
        self.assertEqual(settings["close_timeout"], 2.5)
        with self.assertRaises(ValueError):
            settings["close_timeout"] = 0
        settings["use_srv"] = "off"
        self.assertIs(settings["use_srv"], False)
        with self.assertRaises(ValueError):
            settings["use_srv"] = "maybe"
        with self.assertRaises(ValueError):
            settings["initial_status"] = u"sleeping"
        settings["initial_status"] = None
        self.assertIsNone(settings["initial_status"])

    def test_validators(self):
        self.assertEqual(XMPPSettings.validate_string_list(u"a, b,c"),
                                                        [u"a", u"b", u"c"])
        self.assertEqual(XMPPSettings.validate_positive_int("3"), 3)
        validator = XMPPSettings.get_int_range_validator(1, 10)
        self.assertEqual(validator(9), 9)
        with self.assertRaises(ValueError):
            validator(10)

    def test_duplicate_definition(self):
        XMPPSettings.add_setting(u"language", default = u"en")
        with self.assertRaises(ValueError):
            XMPPSettings.add_setting(u"language", default = u"de")

# pylint: disable=W0611
from pyxmppchat.test._support import load_tests, setup_logging

def setUpModule():
    setup_logging()

if __name__ == "__main__":
    unittest.main()
