#!/usr/bin/python -u
# -*- coding: UTF-8 -*-
# pylint: disable=C0111

import unittest

from pyxmppchat.etree import ElementTree
from pyxmppchat.xmppserializer import XMPPSerializer, serialize
from pyxmppchat.xmppserializer import remove_evil_characters

class TestXMPPSerializer(unittest.TestCase):
    def test_emit_head(self):
        serializer = XMPPSerializer("jabber:client")
        output = serializer.emit_head("fromX", "toY", language = "en")
        self.assertTrue(output.startswith("<stream:stream "))
        self.assertTrue("xmlns='jabber:client'" in output
                            or 'xmlns="jabber:client"' in output)
        self.assertFalse("xmlns:xml" in output)
        xml = ElementTree.XML(output + "</stream:stream>")
        self.assertEqual(xml.tag,
                                "{http://etherx.jabber.org/streams}stream")
        self.assertEqual(xml.get('from'), 'fromX')
        self.assertEqual(xml.get('to'), 'toY')
        self.assertEqual(xml.get('version'), '1.0')
        self.assertEqual(xml.get('{http://www.w3.org/XML/1998/namespace}lang'),
                                                                        'en')
        self.assertEqual(len(xml), 0)

    def test_emit_head_no_from_to(self):
        serializer = XMPPSerializer("jabber:client")
        output = serializer.emit_head(None, None)
        xml = ElementTree.XML(output + "</stream:stream>")
        self.assertEqual(xml.get('from'), None)
        self.assertEqual(xml.get('to'), None)

    def test_emit_tail(self):
        serializer = XMPPSerializer("jabber:client")
        output = serializer.emit_head("fromX", "toY")
        output += serializer.emit_tail()
        xml = ElementTree.XML(output)
        self.assertEqual(len(xml), 0)

    def test_emit_stanza_before_head(self):
        serializer = XMPPSerializer("jabber:client")
        stanza = ElementTree.XML("<presence xmlns='jabber:client'/>")
        with self.assertRaises(RuntimeError):
            serializer.emit_stanza(stanza)

    def test_emit_stanza(self):
        serializer = XMPPSerializer("jabber:client")
        output = serializer.emit_head("from", "to")

        stanza = ElementTree.XML("<message xmlns='jabber:client'>"
                                    "<body>Body</body>"
                                    "<sub xmlns='http://example.org/ns'>"
                                        "<sub1 />"
                                    "<sub2 xmlns='http://example.org/ns2' />"
                                "</sub>"
                            "</message>")
        output += serializer.emit_stanza(stanza)
        output += serializer.emit_tail()
        xml = ElementTree.XML(output)
        self.assertEqual(len(xml), 1)
        self.assertEqual(len(xml[0]), 2)
        self.assertEqual(xml[0].tag, "{jabber:client}message")
        self.assertEqual(xml[0][0].text, "Body")
        self.assertEqual(xml[0][1][1].tag, "{http://example.org/ns2}sub2")

        # no prefix for stanza elements
        self.assertTrue("<message><body>" in output)

        # no prefix for stanza child
        self.assertTrue("<sub " in output)

        # ...and its same-namespace child
        self.assertTrue("<sub1/" in output or "<sub1 " in output)

        # prefix for other namespace child
        self.assertTrue("<sub2" in output)

    def test_attribute_namespace(self):
        serializer = XMPPSerializer("jabber:client")
        serializer.emit_head(None, None)
        stanza = ElementTree.Element("{jabber:client}message", {
                        "{http://www.w3.org/XML/1998/namespace}lang": "pl",
                        "{http://example.org/ns}attr": "value"})
        output = serializer.emit_stanza(stanza)
        self.assertTrue('xml:lang="pl"' in output)
        self.assertFalse("xmlns:xml" in output)
        self.assertTrue('xmlns:ns1="http://example.org/ns"' in output)

    def test_escaping(self):
        stanza = ElementTree.Element("{jabber:client}message",
                                                    {"to": "a&b@example.com"})
        body = ElementTree.SubElement(stanza, "{jabber:client}body")
        body.text = u"<3 & \x07"
        output = serialize(stanza)
        self.assertEqual(output, u'<message to="a&amp;b@example.com">'
                                    u'<body>&lt;3 &amp; \ufffd</body></message>')

    def test_remove_evil_characters(self):
        self.assertEqual(remove_evil_characters(u"a\x00b\tc\n"),
                                                    u"a\ufffdb\tc\n")

# pylint: disable=W0611
from pyxmppchat.test._support import load_tests, setup_logging

def setUpModule():
    setup_logging()

if __name__ == "__main__":
    unittest.main()
