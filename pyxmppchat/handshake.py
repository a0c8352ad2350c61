#
# (C) Copyright 2011 Jacek Konieczny <jajcus@jajcus.net>
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU Lesser General Public License Version
# 2.1 as published by the Free Software Foundation.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public
# License along with this program; if not, write to the Free Software
# Foundation, Inc., 675 Mass Ave, Cambridge, MA 02139, USA.
#

"""Client-side stream negotiation.

`ClientHandshake` takes a transport connected at the TCP level and turns it
into an authenticated XMPP stream with a bound resource: it opens the stream,
authenticates with SASL PLAIN, restarts the stream and binds a resource.

The whole procedure is synchronous and blocking. On any failure the transport
is closed before the exception is propagated.

Normative reference:
  - `RFC 6120 <http://xmpp.org/rfcs/rfc6120.html>`__
"""

__docformat__ = "restructuredtext en"

import logging

from .etree import ElementTree, element_to_unicode, local_name
from .constants import STREAM_QNP, SASL_QNP, BIND_QNP, STREAM_ERROR_QNP
from .exceptions import HandshakeError, AuthError, BindError
from .exceptions import PyXMPPIOError, ReadError
from .settings import XMPPSettings
from .stanza import StanzaIdGenerator
from .iq import Iq
from .jid import JID
from . import sasl

logger = logging.getLogger("pyxmppchat.handshake")

FEATURES_TAG = STREAM_QNP + u"features"
STREAM_ERROR_TAG = STREAM_QNP + u"error"
MECHANISMS_TAG = SASL_QNP + u"mechanisms"
MECHANISM_TAG = SASL_QNP + u"mechanism"
AUTH_TAG = SASL_QNP + u"auth"
SUCCESS_TAG = SASL_QNP + u"success"
FAILURE_TAG = SASL_QNP + u"failure"
BIND_TAG = BIND_QNP + u"bind"
RESOURCE_TAG = BIND_QNP + u"resource"
JID_TAG = BIND_QNP + u"jid"

MECHANISM = u"PLAIN"

def stream_error_condition(element):
    """Return the condition name of a <stream:error/> element."""
    for child in element:
        if child.tag.startswith(STREAM_ERROR_QNP) and (
                                            local_name(child) != u"text"):
            return local_name(child)
    return u"undefined-condition"

class ClientHandshake(object):
    """Negotiates the client stream.

    :Ivariables:
        - `transport`: the transport used
        - `jid`: the JID requested (the resource, if any, is the one to bind)
        - `settings`: the settings used
        - `id_generator`: stanza id source
        - `mechanisms`: the SASL mechanisms offered by the server
    :Types:
        - `transport`: `pyxmppchat.transport.XMPPTransport`
        - `jid`: `JID`
        - `settings`: `XMPPSettings`
        - `id_generator`: `StanzaIdGenerator`
        - `mechanisms`: `list` of `str`
    """
    # pylint: disable-msg=R0913
    def __init__(self, transport, jid, settings = None, id_generator = None,
                                                    state_callback = None):
        """Initialize the handshake object.

        :Parameters:
            - `transport`: transport connected to the server
            - `jid`: the user JID
            - `settings`: the settings, including the password
            - `id_generator`: stanza id source
            - `state_callback`: function called with the name of each new
              negotiation state
        """
        self.transport = transport
        self.jid = JID(jid)
        if settings is None:
            settings = XMPPSettings()
        self.settings = settings
        if id_generator is None:
            id_generator = StanzaIdGenerator(settings["id_prefix"])
        self.id_generator = id_generator
        self._state_callback = state_callback
        self.mechanisms = []

    def _set_state(self, state):
        """Report a state change."""
        logger.debug("Handshake state: {0}".format(state))
        if self._state_callback:
            self._state_callback(state)

    def run(self):
        """Perform the handshake.

        :Return: the full JID bound by the server
        :Returntype: `JID`

        :Raise HandshakeError: when the stream negotiation fails
        :Raise AuthError: when the authentication fails
        :Raise BindError: when the resource cannot be bound
        """
        try:
            self._set_state("stream-negotiating")
            features = self._open_stream()
            self._set_state("authenticating")
            self._authenticate(features)
            self._open_stream()
            self._set_state("binding")
            return self._bind()
        except Exception:
            logger.debug("Handshake failed, closing the transport")
            self.transport.close()
            raise

    def _send(self, element):
        """Send an element, converting I/O errors to `HandshakeError`."""
        try:
            self.transport.send_element(element)
        except PyXMPPIOError as err:
            raise HandshakeError(u"connection-lost", u"Write failed: {0}"
                                                                .format(err))

    def _read(self, condition):
        """Read the next element of the stream.

        :Parameters:
            - `condition`: condition of the `HandshakeError` raised when no
              element can be read

        :Returntype: :etree:`ElementTree.Element`
        """
        try:
            element = self.transport.read_element()
        except ReadError as err:
            raise HandshakeError(condition, u"Read failed: {0}".format(err))
        if element is None:
            raise HandshakeError(condition, u"Stream closed by the server")
        logger.debug("Handshake input: {0}".format(
                                                element_to_unicode(element)))
        if element.tag == STREAM_ERROR_TAG:
            raise HandshakeError(u"stream-error", u"Stream error: {0}"
                                    .format(stream_error_condition(element)))
        return element

    def _open_stream(self):
        """Send the stream head and return the stream features."""
        try:
            self.transport.send_stream_head(str(self.jid.bare()),
                                            self.jid.domain, u"1.0",
                                            self.settings["language"])
        except PyXMPPIOError as err:
            raise HandshakeError(u"connection-lost", u"Write failed: {0}"
                                                                .format(err))
        features = self._read(u"no-features")
        if features.tag != FEATURES_TAG:
            raise HandshakeError(u"no-features",
                        u"Stream features expected, got {0!r}".format(
                                                                features.tag))
        return features

    def _authenticate(self, features):
        """Authenticate with SASL PLAIN."""
        self.mechanisms = []
        element = features.find(MECHANISMS_TAG)
        if element is not None:
            for sub in element:
                if sub.tag == MECHANISM_TAG and sub.text:
                    self.mechanisms.append(sub.text.strip())
        logger.debug("Server SASL mechanisms: {0!r}".format(self.mechanisms))
        if MECHANISM not in self.mechanisms:
            raise AuthError(AuthError.UNSUPPORTED_MECHANISM)
        authenticator = sasl.client_authenticator_factory(MECHANISM)
        username = self.settings.get("username") or self.jid.local
        properties = {
                "username": username,
                "password": self.settings["password"] or u"",
                "authzid": self.settings.get("authzid"),
                }
        response = authenticator.start(properties)
        auth = ElementTree.Element(AUTH_TAG, {"mechanism": MECHANISM})
        auth.text = response.encode()
        logger.debug("Authenticating as {0!r}".format(username))
        self._send(auth)
        element = self._read(u"connection-lost")
        if element.tag == FAILURE_TAG:
            reason = None
            for child in element:
                reason = local_name(child)
                break
            logger.debug("SASL authentication failed: {0!r}".format(reason))
            raise AuthError(AuthError.REJECTED, reason)
        elif element.tag != SUCCESS_TAG:
            raise HandshakeError(u"unexpected-element",
                        u"Unexpected SASL response: {0!r}".format(element.tag))
        logger.debug("SASL authentication succeeded")

    def _bind(self):
        """Bind a resource and return the full JID."""
        bind = ElementTree.Element(BIND_TAG)
        resource = self.jid.resource or self.settings["resource"]
        if resource:
            ElementTree.SubElement(bind, RESOURCE_TAG).text = resource
        stanza_id = self.id_generator.next_id()
        request = Iq(stanza_type = u"set", stanza_id = stanza_id,
                                                            payload = bind)
        self._send(request.as_xml())
        while True:
            element = self._read(u"connection-lost")
            if local_name(element) != u"iq":
                logger.debug("Ignoring {0!r} while binding".format(
                                                                element.tag))
                continue
            try:
                response = Iq(element)
            except ValueError as err:
                raise BindError(u"bad-response: {0}".format(err))
            if response.stanza_id == stanza_id:
                break
            logger.debug("Ignoring unexpected iq: {0!r}".format(response))
        if response.stanza_type == u"error":
            raise BindError(response.error_condition)
        if response.stanza_type != u"result":
            raise BindError(u"bad-response")
        payload = response.payload
        jid_element = None
        if payload is not None and payload.tag == BIND_TAG:
            jid_element = payload.find(JID_TAG)
        if jid_element is None or not jid_element.text:
            raise BindError(u"bad-response")
        try:
            jid = JID(jid_element.text.strip())
        except ValueError:
            raise BindError(u"bad-response")
        logger.info("Resource bound: {0}".format(jid))
        return jid

XMPPSettings.add_setting(u"password", type = str, basic = True,
    doc = u"""Password for the SASL PLAIN authentication."""
    )
XMPPSettings.add_setting(u"username", type = str,
    doc = u"""Username to authenticate with. The JID local part by
default."""
    )
XMPPSettings.add_setting(u"authzid", type = str,
    doc = u"""Authorization id to send with the SASL PLAIN credentials."""
    )
XMPPSettings.add_setting(u"resource", type = str, basic = True,
    doc = u"""Resource to bind. By default the resource of the JID is used,
when there is none the server generates one."""
    )
XMPPSettings.add_setting(u"id_prefix", type = str, default = u"sammy",
    doc = u"""Prefix of the generated stanza ids."""
    )

# vi: sts=4 et sw=4
