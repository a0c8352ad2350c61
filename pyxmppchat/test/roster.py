#!/usr/bin/python
# -*- coding: UTF-8 -*-
# pylint: disable=C0111

import unittest

from pyxmppchat.etree import ElementTree

from pyxmppchat.jid import JID

from pyxmppchat.roster import RosterItem, RosterPayload

class TestRosterItem(unittest.TestCase):
    def test_parse_empty(self):
        element = ElementTree.XML('<item xmlns="jabber:iq:roster"/>')
        with self.assertRaises(ValueError):
            RosterItem.from_xml(element)

    def test_parse_bad_jid(self):
        element = ElementTree.XML('<item xmlns="jabber:iq:roster"'
                                                        ' jid="&lt;&gt;@b.c"/>')
        with self.assertRaises(ValueError):
            RosterItem.from_xml(element)

    def test_parse_only_jid(self):
        element = ElementTree.XML('<item xmlns="jabber:iq:roster"'
                                                            ' jid="a@b.c"/>')
        item = RosterItem.from_xml(element)
        self.assertEqual(item.jid, JID("a@b.c"))
        self.assertIsNone(item.name)
        self.assertEqual(item.groups, set())
        self.assertIsNone(item.subscription)
        self.assertIsNone(item.ask)
        self.assertFalse(item.pending_ask)
        item.verify_roster_push()
        item.verify_roster_push(True)
        self.assertIsNone(item.subscription)

    def test_parse_full(self):
        element = ElementTree.XML('<item xmlns="jabber:iq:roster"'
                        ' jid="a@b.c" name="NAME" subscription="to"'
                        ' ask="subscribe">'
                        '<group>GROUP1</group><group>GROUP2</group>'
                        '</item>')
        item = RosterItem.from_xml(element)
        self.assertEqual(item.jid, JID("a@b.c"))
        self.assertEqual(item.name, u"NAME")
        self.assertEqual(item.groups, set(["GROUP1", "GROUP2"]))
        self.assertEqual(item.subscription, "to")
        self.assertEqual(item.ask, "subscribe")
        self.assertTrue(item.pending_ask)
        item.verify_roster_push()
        self.assertEqual(item.subscription, "to")

    def test_subscription_none(self):
        element = ElementTree.XML('<item xmlns="jabber:iq:roster"'
                        ' jid="a@b.c" subscription="none"/>')
        item = RosterItem.from_xml(element)
        self.assertIsNone(item.subscription)

    def test_bad_subscription(self):
        element = ElementTree.XML('<item xmlns="jabber:iq:roster"'
                        ' jid="a@b.c" name="NAME" subscription="bad"'
                        ' ask="subscribe"/>')
        item = RosterItem.from_xml(element)
        self.assertEqual(item.subscription, "bad")
        with self.assertRaises(ValueError):
            item.verify_roster_push()
        item.verify_roster_push(True)
        self.assertIsNone(item.subscription)
        self.assertEqual(item.ask, "subscribe")

    def test_bad_ask(self):
        element = ElementTree.XML('<item xmlns="jabber:iq:roster"'
                        ' jid="a@b.c" subscription="both" ask="please"/>')
        item = RosterItem.from_xml(element)
        with self.assertRaises(ValueError):
            item.verify_roster_push()
        item.verify_roster_push(True)
        self.assertIsNone(item.ask)
        self.assertEqual(item.subscription, "both")

    def test_push_with_remove(self):
        element = ElementTree.XML('<item xmlns="jabber:iq:roster"'
                        ' jid="a@b.c" subscription="remove"/>')
        item = RosterItem.from_xml(element)
        self.assertEqual(item.subscription, "remove")
        item.verify_roster_push()
        item.verify_roster_push(True)
        self.assertEqual(item.subscription, "remove")

    def test_build(self):
        item = RosterItem(JID("a@b.c"), u"NAME", [u"G2", u"G1"])
        element = item.as_xml()
        self.assertEqual(element.tag, "{jabber:iq:roster}item")
        self.assertEqual(element.get("jid"), "a@b.c")
        self.assertEqual(element.get("name"), "NAME")
        self.assertIsNone(element.get("subscription"))
        self.assertIsNone(element.get("ask"))
        self.assertEqual([e.text for e in element], [u"G1", u"G2"])

    def test_build_remove(self):
        item = RosterItem(JID("a@b.c"), subscription = u"remove")
        parent = ElementTree.Element("{jabber:iq:roster}query")
        element = item.as_xml(parent)
        self.assertIs(parent[0], element)
        self.assertEqual(element.get("subscription"), "remove")
        self.assertIsNone(element.get("name"))

class TestRosterPayload(unittest.TestCase):
    def test_parse(self):
        element = ElementTree.XML('<query xmlns="jabber:iq:roster" ver="v1">'
                        '<item jid="a@b.c" subscription="both"/>'
                        '<item jid="d@e.f" name="DEF" ask="subscribe"/>'
                        '<other xmlns="urn:x"/>'
                        '</query>')
        payload = RosterPayload.from_xml(element)
        self.assertEqual(payload.version, "v1")
        self.assertEqual(len(payload), 2)
        self.assertTrue(JID("a@b.c") in payload)
        self.assertEqual(payload[JID("d@e.f")].name, u"DEF")
        self.assertEqual(set(payload.keys()), set([JID("a@b.c"),
                                                            JID("d@e.f")]))

    def test_parse_skips_invalid_and_duplicate(self):
        element = ElementTree.XML('<query xmlns="jabber:iq:roster">'
                        '<item jid="a@b.c" subscription="both"/>'
                        '<item/>'
                        '<item jid="A@b.c" subscription="to"/>'
                        '<item jid="&lt;&gt;@b.c"/>'
                        '</query>')
        payload = RosterPayload.from_xml(element)
        self.assertEqual(len(payload), 1)
        self.assertEqual(payload[JID("a@b.c")].subscription, "both")

    def test_parse_not_query(self):
        element = ElementTree.XML('<item xmlns="jabber:iq:roster"'
                                                            ' jid="a@b.c"/>')
        with self.assertRaises(ValueError):
            RosterPayload.from_xml(element)

    def test_build(self):
        payload = RosterPayload([RosterItem(JID("a@b.c"), u"ABC")])
        element = payload.as_xml()
        self.assertEqual(element.tag, "{jabber:iq:roster}query")
        self.assertIsNone(element.get("ver"))
        self.assertEqual(len(element), 1)
        self.assertEqual(element[0].get("jid"), "a@b.c")

    def test_build_empty(self):
        element = RosterPayload().as_xml()
        self.assertEqual(element.tag, "{jabber:iq:roster}query")
        self.assertEqual(len(element), 0)

# pylint: disable=W0611
from pyxmppchat.test._support import load_tests, setup_logging

def setUpModule():
    setup_logging()

if __name__ == "__main__":
    unittest.main()
