#!/usr/bin/python
# -*- coding: UTF-8 -*-
# pylint: disable=C0111

import unittest
import binascii

from pyxmppchat.etree import ElementTree
from pyxmppchat.jid import JID
from pyxmppchat.settings import XMPPSettings
from pyxmppchat.exceptions import HandshakeError, AuthError, BindError
from pyxmppchat.handshake import ClientHandshake
from pyxmppchat.handshake import AUTH_TAG, BIND_TAG, RESOURCE_TAG
from pyxmppchat.transport import TCPTransport

from pyxmppchat.test._util import FakeTransport, NetworkTestCase
from pyxmppchat.test._util import BackgroundCall, login_script
from pyxmppchat.test._util import STREAM_HEAD, AUTH_FEATURES
from pyxmppchat.test._util import NO_PLAIN_FEATURES, BIND_FEATURES
from pyxmppchat.test._util import SUCCESS, BIND_RESULT

FAILURE = (u"<failure xmlns='urn:ietf:params:xml:ns:xmpp-sasl'>"
                                            u"<not-authorized/></failure>")

BIND_CONFLICT = (u"<iq type='error' id='sammy0'><error type='cancel'>"
            u"<conflict xmlns='urn:ietf:params:xml:ns:xmpp-stanzas'/>"
            u"</error></iq>")

STREAM_ERROR = (u"<stream:error><host-unknown"
                u" xmlns='urn:ietf:params:xml:ns:xmpp-streams'/>"
                u"</stream:error>")

class TestClientHandshake(unittest.TestCase):
    def make_handshake(self, elements, jid = u"juliet@example.com",
                                                            settings = None):
        if settings is None:
            settings = XMPPSettings({u"password": u"r0m30"})
        self.states = []
        self.transport = FakeTransport(elements)
        return ClientHandshake(self.transport, JID(jid), settings,
                                    state_callback = self.states.append)

    def test_success(self):
        handshake = self.make_handshake(login_script())
        result = handshake.run()
        self.assertEqual(result, JID(u"juliet@example.com/generated123"))
        self.assertEqual(self.states, ["stream-negotiating", "authenticating",
                                                                "binding"])
        self.assertEqual(self.transport.heads, [
                (u"juliet@example.com", u"example.com", u"1.0", u"en"),
                (u"juliet@example.com", u"example.com", u"1.0", u"en")])
        self.assertEqual(handshake.mechanisms, [u"DIGEST-MD5", u"PLAIN"])
        self.assertEqual(len(self.transport.sent), 2)
        auth = self.transport.sent[0]
        self.assertEqual(auth.tag, AUTH_TAG)
        self.assertEqual(auth.get("mechanism"), u"PLAIN")
        data = binascii.a2b_base64(auth.text.encode("utf-8"))
        self.assertEqual(data, b"\000juliet\000r0m30")
        bind_iq = self.transport.sent[1]
        self.assertEqual(bind_iq.get("type"), u"set")
        self.assertEqual(bind_iq.get("id"), u"sammy0")
        bind = bind_iq.find(BIND_TAG)
        self.assertIsNotNone(bind)
        self.assertIsNone(bind.find(RESOURCE_TAG))
        self.assertFalse(self.transport.closed)

    def test_resource(self):
        handshake = self.make_handshake(login_script(
                                        jid = u"juliet@example.com/balcony"),
                                        jid = u"juliet@example.com/balcony")
        result = handshake.run()
        self.assertEqual(result.resource, u"balcony")
        bind = self.transport.sent[1].find(BIND_TAG)
        self.assertEqual(bind.find(RESOURCE_TAG).text, u"balcony")

    def test_resource_setting(self):
        settings = XMPPSettings({u"password": u"r0m30",
                                                    u"resource": u"garden"})
        handshake = self.make_handshake(login_script(), settings = settings)
        handshake.run()
        bind = self.transport.sent[1].find(BIND_TAG)
        self.assertEqual(bind.find(RESOURCE_TAG).text, u"garden")

    def test_username_setting(self):
        settings = XMPPSettings({u"password": u"r0m30",
                                                    u"username": u"jules"})
        handshake = self.make_handshake(login_script(), settings = settings)
        handshake.run()
        data = binascii.a2b_base64(self.transport.sent[0].text.encode("utf-8"))
        self.assertEqual(data, b"\000jules\000r0m30")

    def test_unrelated_stanzas_while_binding(self):
        elements = [AUTH_FEATURES, SUCCESS, BIND_FEATURES,
                u"<presence from='romeo@example.com/orchard'/>",
                u"<iq type='result' id='other'/>",
                BIND_RESULT.format(u"sammy0", u"juliet@example.com/x")]
        handshake = self.make_handshake(elements)
        self.assertEqual(handshake.run(), JID(u"juliet@example.com/x"))

    def test_no_plain(self):
        handshake = self.make_handshake([NO_PLAIN_FEATURES])
        with self.assertRaises(AuthError) as context:
            handshake.run()
        self.assertEqual(context.exception.condition,
                                            AuthError.UNSUPPORTED_MECHANISM)
        self.assertEqual(self.transport.sent, [])
        self.assertTrue(self.transport.closed)

    def test_rejected(self):
        handshake = self.make_handshake([AUTH_FEATURES, FAILURE])
        with self.assertRaises(AuthError) as context:
            handshake.run()
        self.assertEqual(context.exception.condition, AuthError.REJECTED)
        self.assertEqual(context.exception.reason, u"not-authorized")
        self.assertEqual(self.states, ["stream-negotiating",
                                                        "authenticating"])
        self.assertTrue(self.transport.closed)

    def test_challenge(self):
        handshake = self.make_handshake([AUTH_FEATURES,
                u"<challenge xmlns='urn:ietf:params:xml:ns:xmpp-sasl'>"
                                                u"bW9yZQ==</challenge>"])
        with self.assertRaises(HandshakeError) as context:
            handshake.run()
        self.assertEqual(context.exception.condition, u"unexpected-element")
        self.assertEqual(len([e for e in self.transport.sent
                                                if e.tag == AUTH_TAG]), 1)
        self.assertTrue(self.transport.closed)

    def test_bind_error(self):
        handshake = self.make_handshake([AUTH_FEATURES, SUCCESS,
                                                BIND_FEATURES, BIND_CONFLICT])
        with self.assertRaises(BindError) as context:
            handshake.run()
        self.assertEqual(context.exception.condition, u"conflict")
        self.assertTrue(self.transport.closed)

    def test_bind_bad_response(self):
        handshake = self.make_handshake([AUTH_FEATURES, SUCCESS,
                        BIND_FEATURES, u"<iq type='result' id='sammy0'/>"])
        with self.assertRaises(BindError) as context:
            handshake.run()
        self.assertEqual(context.exception.condition, u"bad-response")

    def test_no_features(self):
        handshake = self.make_handshake([SUCCESS])
        with self.assertRaises(HandshakeError) as context:
            handshake.run()
        self.assertEqual(context.exception.condition, u"no-features")
        self.assertTrue(self.transport.closed)

    def test_stream_closed(self):
        handshake = self.make_handshake([])
        self.transport.feed_end()
        with self.assertRaises(HandshakeError) as context:
            handshake.run()
        self.assertEqual(context.exception.condition, u"no-features")

    def test_stream_error(self):
        handshake = self.make_handshake([STREAM_ERROR])
        with self.assertRaises(HandshakeError) as context:
            handshake.run()
        self.assertEqual(context.exception.condition, u"stream-error")
        self.assertTrue(u"host-unknown" in str(context.exception))

    def test_write_failure(self):
        handshake = self.make_handshake([AUTH_FEATURES])
        self.transport.fail_writes = True
        with self.assertRaises(HandshakeError) as context:
            handshake.run()
        self.assertEqual(context.exception.condition, u"connection-lost")
        self.assertTrue(self.transport.closed)

class TestClientHandshakeLoopback(NetworkTestCase):
    def test_login(self):
        addr, port = self.start_server()
        transport = TCPTransport.open(addr, port)
        settings = XMPPSettings({u"password": u"r0m30"})
        handshake = ClientHandshake(transport, JID(u"juliet@example.com"),
                                                                    settings)
        call = BackgroundCall(handshake.run)
        head = self.server.expect(br"(<stream:stream[^>]*>)")
        self.assertIsNotNone(head)
        self.assertTrue(b'to="example.com"' in head)
        self.server.write(STREAM_HEAD + AUTH_FEATURES)
        xml = self.server.expect(br"(<auth[^>]*>[^<]*</auth>)")
        self.assertIsNotNone(xml)
        element = ElementTree.XML(xml)
        self.assertEqual(element.tag, AUTH_TAG)
        self.assertEqual(element.get("mechanism"), "PLAIN")
        data = binascii.a2b_base64(element.text.encode("utf-8"))
        self.assertEqual(data, b"\000juliet\000r0m30")
        self.server.write(SUCCESS)
        self.assertIsNotNone(self.server.expect(br"(<stream:stream[^>]*>)"))
        self.server.write(STREAM_HEAD + BIND_FEATURES)
        bind_id = self.server.expect(br'<iq[^>]* id="([^"]+)"')
        self.assertEqual(bind_id, b"sammy0")
        self.server.write(BIND_RESULT.format(u"sammy0",
                                        u"juliet@example.com/generated123"))
        self.assertTrue(call.join())
        self.assertIsNone(call.exception)
        self.assertEqual(call.result,
                                    JID(u"juliet@example.com/generated123"))
        transport.close()
        self.assertTrue(self.server.wait_eof())

    def test_rejected(self):
        addr, port = self.start_server()
        transport = TCPTransport.open(addr, port)
        settings = XMPPSettings({u"password": u"bad"})
        handshake = ClientHandshake(transport, JID(u"juliet@example.com"),
                                                                    settings)
        call = BackgroundCall(handshake.run)
        self.assertIsNotNone(self.server.expect(br"(<stream:stream[^>]*>)"))
        self.server.write(STREAM_HEAD + AUTH_FEATURES)
        self.assertIsNotNone(self.server.expect(br"(<auth[^>]*>[^<]*</auth>)"))
        self.server.write(FAILURE)
        self.assertTrue(call.join())
        self.assertIsInstance(call.exception, AuthError)
        self.assertEqual(call.exception.reason, u"not-authorized")
        self.assertTrue(self.server.wait_eof())

# pylint: disable=W0611
from pyxmppchat.test._support import load_tests, setup_logging

def setUpModule():
    setup_logging()

if __name__ == "__main__":
    unittest.main()
