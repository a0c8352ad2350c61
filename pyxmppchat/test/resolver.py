#!/usr/bin/python
# -*- coding: UTF-8 -*-
# pylint: disable=C0111

import unittest

from unittest import mock

import dns.name
import dns.resolver
import dns.exception

from pyxmppchat import resolver
from pyxmppchat.resolver import reorder_srv, resolve_srv
from pyxmppchat.resolver import get_server_addresses
from pyxmppchat.exceptions import DNSError
from pyxmppchat.settings import XMPPSettings

class FakeSRV(object):
    # pylint: disable=R0903
    def __init__(self, target, port, priority = 0, weight = 0):
        self.target = dns.name.from_text(target)
        self.port = port
        self.priority = priority
        self.weight = weight
    def __repr__(self):
        return "<FakeSRV {0} {1} {2}:{3}>".format(self.priority, self.weight,
                                                        self.target, self.port)

class TestReorderSRV(unittest.TestCase):
    def test_priorities(self):
        records = [FakeSRV("c.example.com.", 3, priority = 30),
                    FakeSRV("a.example.com.", 1, priority = 10),
                    FakeSRV("b.example.com.", 2, priority = 20)]
        result = reorder_srv(records)
        self.assertEqual([r.port for r in result], [1, 2, 3])

    def test_same_priority(self):
        records = [FakeSRV("a.example.com.", 1, priority = 10, weight = 5),
                    FakeSRV("b.example.com.", 2, priority = 10, weight = 5),
                    FakeSRV("c.example.com.", 3, priority = 5)]
        for dummy in range(20):
            result = reorder_srv(records)
            self.assertEqual(result[0].port, 3)
            self.assertEqual(sorted(r.port for r in result[1:]), [1, 2])

    def test_empty(self):
        self.assertEqual(reorder_srv([]), [])

class TestResolveSRV(unittest.TestCase):
    def test_records(self):
        records = [FakeSRV("xmpp2.example.com.", 5223, priority = 20),
                    FakeSRV("xmpp1.example.com.", 5222, priority = 10)]
        with mock.patch("dns.resolver.resolve",
                                    return_value = records) as resolve:
            result = resolve_srv(u"example.com", u"xmpp-client")
        resolve.assert_called_once_with(u"_xmpp-client._tcp.example.com",
                                                                    "SRV")
        self.assertEqual(result, [(u"xmpp1.example.com", 5222),
                                    (u"xmpp2.example.com", 5223)])

    def test_not_available(self):
        records = [FakeSRV(".", 0)]
        with mock.patch("dns.resolver.resolve", return_value = records):
            with self.assertRaises(DNSError):
                resolve_srv(u"example.com", u"xmpp-client")

    def test_lookup_failure(self):
        with mock.patch("dns.resolver.resolve",
                                side_effect = dns.resolver.NXDOMAIN()):
            self.assertIsNone(resolve_srv(u"example.com", u"xmpp-client"))
        with mock.patch("dns.resolver.resolve",
                                side_effect = dns.exception.Timeout()):
            self.assertIsNone(resolve_srv(u"example.com", u"xmpp-client"))

class TestGetServerAddresses(unittest.TestCase):
    def test_server_setting(self):
        settings = XMPPSettings({u"server": u"localhost",
                                                        u"c2s_port": 15222})
        with mock.patch.object(resolver, "resolve_srv") as resolve:
            result = get_server_addresses(u"example.com", settings)
        self.assertFalse(resolve.called)
        self.assertEqual(result, [(u"localhost", 15222)])

    def test_srv(self):
        with mock.patch.object(resolver, "resolve_srv",
                        return_value = [(u"xmpp.example.com", 5269)]
                                                                ) as resolve:
            result = get_server_addresses(u"example.com")
        resolve.assert_called_once_with(u"example.com", u"xmpp-client")
        self.assertEqual(result, [(u"xmpp.example.com", 5269)])

    def test_srv_fallback(self):
        with mock.patch.object(resolver, "resolve_srv", return_value = None):
            result = get_server_addresses(u"example.com")
        self.assertEqual(result, [(u"example.com", 5222)])

    def test_no_srv(self):
        settings = XMPPSettings({u"use_srv": u"no"})
        with mock.patch.object(resolver, "resolve_srv") as resolve:
            result = get_server_addresses(u"example.com", settings)
        self.assertFalse(resolve.called)
        self.assertEqual(result, [(u"example.com", 5222)])

    def test_ip_domain(self):
        with mock.patch.object(resolver, "resolve_srv") as resolve:
            self.assertEqual(get_server_addresses(u"127.0.0.1"),
                                                    [(u"127.0.0.1", 5222)])
            self.assertEqual(get_server_addresses(u"[::1]"),
                                                    [(u"[::1]", 5222)])
        self.assertFalse(resolve.called)

    def test_bad_port(self):
        with self.assertRaises(ValueError):
            XMPPSettings({u"c2s_port": 70000})

# pylint: disable=W0611
from pyxmppchat.test._support import load_tests, setup_logging

def setUpModule():
    setup_logging()

if __name__ == "__main__":
    unittest.main()
