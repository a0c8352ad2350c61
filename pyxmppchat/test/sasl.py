#!/usr/bin/python
# -*- coding: UTF-8 -*-
# pylint: disable=C0111

import unittest
import binascii

from pyxmppchat import sasl
from pyxmppchat.sasl import Response, Reply

class TestReply(unittest.TestCase):
    def test_encode(self):
        self.assertEqual(Reply().encode(), "")
        self.assertEqual(Reply(b"").encode(), "=")
        self.assertEqual(Reply(b"\000user\000secret").encode(),
                                                        "AHVzZXIAc2VjcmV0")

class TestPlain(unittest.TestCase):
    def test_registered(self):
        self.assertTrue("PLAIN" in sasl.CLIENT_MECHANISMS)
        authenticator = sasl.client_authenticator_factory("PLAIN")
        self.assertIsInstance(authenticator, sasl.PlainClientAuthenticator)
        with self.assertRaises(KeyError):
            sasl.client_authenticator_factory("X-UNKNOWN")

    def test_properties(self):
        klass = sasl.PlainClientAuthenticator
        self.assertTrue(klass.are_properties_sufficient(
                                {"username": u"user", "password": u"pass"}))
        self.assertFalse(klass.are_properties_sufficient(
                                                    {"username": u"user"}))

    def test_start(self):
        authenticator = sasl.client_authenticator_factory("PLAIN")
        response = authenticator.start({"username": u"user",
                                                    "password": u"secret"})
        self.assertIsInstance(response, Response)
        self.assertEqual(response.data, b"\000user\000secret")
        data = binascii.a2b_base64(response.encode().encode("utf-8"))
        self.assertEqual(data, b"\000user\000secret")

    def test_authzid_utf8(self):
        authenticator = sasl.client_authenticator_factory("PLAIN")
        response = authenticator.start({"username": u"żółw",
                        "password": u"hasło", "authzid": u"admin"})
        self.assertEqual(response.data, u"admin\000żółw"
                                    u"\000hasło".encode("utf-8"))

    def test_restart(self):
        authenticator = sasl.client_authenticator_factory("PLAIN")
        authenticator.start({"username": u"user", "password": u"secret"})
        response = authenticator.start({"username": u"other",
                                                    "password": u"pass"})
        self.assertEqual(response.data, b"\000other\000pass")

class TestRegistry(unittest.TestCase):
    def test_not_authenticator(self):
        with self.assertRaises(TypeError):
            @sasl.sasl_mechanism("X-BAD")
            class Bad(object): # pylint: disable=W0612,R0903
                pass
        self.assertFalse("X-BAD" in sasl.CLIENT_MECHANISMS_D)

    def test_abstract(self):
        with self.assertRaises(TypeError):
            sasl.ClientAuthenticator() # pylint: disable=E0110

# pylint: disable=W0611
from pyxmppchat.test._support import load_tests, setup_logging

def setUpModule():
    setup_logging()

if __name__ == "__main__":
    unittest.main()
