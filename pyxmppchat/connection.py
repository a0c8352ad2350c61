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

"""Client connection.

The `Connection` object is the application interface of the library. It
establishes the session with `Connection.connect`, sends the outgoing
stanzas on behalf of the application and runs a background thread reading
and dispatching the incoming ones.

Typical use::

    connection = Connection(JID("juliet@example.com"), u"r0m30")
    connection.add_listener(my_listener)
    connection.connect()
    ...
    connection.close()

Normative reference:
  - `RFC 6120 <http://xmpp.org/rfcs/rfc6120.html>`__
  - `RFC 6121 <http://xmpp.org/rfcs/rfc6121.html>`__
"""

__docformat__ = "restructuredtext en"

import threading
import logging

from .settings import XMPPSettings
from .exceptions import PyXMPPError, PyXMPPIOError, ConnectError, ReadError
from .exceptions import SendError, ConnectionClosedError
from .jid import JID
from .stanza import StanzaIdGenerator
from .iq import Iq
from .presence import Presence, ContactStatus, make_status_presence
from .message import Message
from .roster import RosterItem, RosterPayload
from .model import ContactDirectory
from .interfaces import ListenerList, ContactListener
from .interfaces import SubscriptionRequestListener, MessageListener
from .interfaces import SessionListener
from .dispatcher import StanzaDispatcher
from .handshake import ClientHandshake, STREAM_ERROR_TAG
from .handshake import stream_error_condition
from .resolver import get_server_addresses
from .transport import TCPTransport

logger = logging.getLogger("pyxmppchat.connection")

STATES = ("disconnected", "stream-negotiating", "authenticating", "binding",
                                        "established", "closing", "closed")

class Connection(object):
    """Client connection to an XMPP server.

    Outgoing stanzas are built and written under a single lock, so they may
    be sent from any thread. The incoming stanzas are processed in the
    receive thread, which also calls the listeners.

    :Ivariables:
        - `jid`: the JID requested
        - `bound_jid`: the full JID bound by the server
        - `settings`: the connection settings
        - `directory`: contacts and conversations of the session
        - `transport`: the transport in use
        - `id_generator`: stanza id source
    :Types:
        - `jid`: `JID`
        - `bound_jid`: `JID`
        - `settings`: `XMPPSettings`
        - `directory`: `ContactDirectory`
        - `transport`: `pyxmppchat.transport.XMPPTransport`
        - `id_generator`: `StanzaIdGenerator`
    """
    # pylint: disable-msg=R0902
    def __init__(self, jid, password = None, directory = None,
                                                            settings = None):
        """Initialize the connection object.

        :Parameters:
            - `jid`: the user JID, optionally with the resource to bind
            - `password`: the password, overrides the 'password' setting
            - `directory`: contact directory to update, a new one is
              created by default
            - `settings`: the settings
        :Types:
            - `jid`: `JID` or `str`
            - `password`: `str`
            - `directory`: `ContactDirectory`
            - `settings`: `XMPPSettings`
        """
        self.jid = JID(jid)
        if settings is None:
            settings = XMPPSettings()
        self.settings = settings
        if password is not None:
            self.settings["password"] = password
        if directory is None:
            directory = ContactDirectory()
        self.directory = directory
        self.bound_jid = None
        self.transport = None
        self.id_generator = StanzaIdGenerator(self.settings["id_prefix"])
        self.contact_listeners = ListenerList()
        self.subscription_listeners = ListenerList()
        self.message_listeners = ListenerList()
        self.session_listeners = ListenerList()
        self.dispatcher = StanzaDispatcher(self.directory,
                                self.contact_listeners,
                                self.subscription_listeners,
                                self.message_listeners)
        self.lock = threading.RLock()
        self._write_lock = threading.RLock()
        self._state = "disconnected"
        self._thread = None

    def __repr__(self):
        return "<Connection {0} state={1!r}>".format(self.jid, self._state)

    @property
    def state(self):
        """Current state of the connection, one of `STATES`."""
        with self.lock:
            return self._state

    def _set_state(self, state):
        """Move the connection to a new state.

        States never go back, stale changes are ignored."""
        with self.lock:
            if STATES.index(state) < STATES.index(self._state):
                logger.debug("Ignoring state change {0!r} -> {1!r}"
                                                .format(self._state, state))
                return
            logger.debug("State: {0!r} -> {1!r}".format(self._state, state))
            self._state = state

    def _listener_lists(self):
        """Return (listener class, `ListenerList`) pairs."""
        return ((ContactListener, self.contact_listeners),
                (SubscriptionRequestListener, self.subscription_listeners),
                (MessageListener, self.message_listeners),
                (SessionListener, self.session_listeners))

    def add_listener(self, listener):
        """Register `listener` for all the events it can handle.

        :Parameters:
            - `listener`: instance of one or more of the
              `pyxmppchat.interfaces` listener classes
        """
        registered = False
        for klass, listeners in self._listener_lists():
            if isinstance(listener, klass):
                listeners.add(listener)
                registered = True
        if not registered:
            raise TypeError(u"{0!r} is not a listener".format(listener))

    def remove_listener(self, listener):
        """Unregister `listener` from all the events."""
        for klass, listeners in self._listener_lists():
            if isinstance(listener, klass):
                listeners.remove(listener)

    def connect(self, transport = None):
        """Establish the session.

        Find the server, connect to it and negotiate the stream. Then, as
        configured, request the roster and send the initial presence and
        finally start the receive thread.

        :Parameters:
            - `transport`: already connected transport to use instead of
              connecting to the server found for the JID domain
        :Types:
            - `transport`: `pyxmppchat.transport.XMPPTransport`

        :Return: the bound full JID
        :Returntype: `JID`

        :Raise ConnectError: when the server cannot be reached
        :Raise ConnectionClosedError: when `close` is called before the
            session is established
        :Raise HandshakeError: when the stream negotiation, authentication
            or resource binding fails
        """
        with self.lock:
            if self._state != "disconnected":
                raise PyXMPPError(u"Connection already used")
            self._set_state("stream-negotiating")
        try:
            if transport is None:
                transport = self._open_transport()
            with self.lock:
                self.transport = transport
            handshake = ClientHandshake(transport, self.jid, self.settings,
                                        self.id_generator, self._set_state)
            self.bound_jid = handshake.run()
            self._set_state("established")
            with self.lock:
                if self._state != "established":
                    raise ConnectionClosedError(
                                u"Connection closed during the handshake")
            if self.settings["request_roster"]:
                self.request_roster()
            initial_status = self.settings["initial_status"]
            if initial_status:
                self.send_current_status(initial_status)
        except Exception:
            with self.lock:
                self._state = "closed"
            if transport is not None:
                transport.close()
            raise
        logger.info("Connected as {0}".format(self.bound_jid))
        self._thread = threading.Thread(name = u"pyxmppchat receiver {0}"
                                                    .format(self.bound_jid),
                                        target = self._run)
        self._thread.daemon = True
        self._thread.start()
        return self.bound_jid

    def _open_transport(self):
        """Connect to the first server address available."""
        exception = None
        for host, port in get_server_addresses(self.jid.domain,
                                                            self.settings):
            try:
                return TCPTransport.open(host, port, self.settings)
            except ConnectError as err:
                logger.debug("Could not connect to {0}:{1}: {2}".format(
                                                            host, port, err))
                exception = err
        if exception is None:
            exception = ConnectError(u"No server address for {0!r}"
                                                    .format(self.jid.domain))
        raise exception

    def _run(self):
        """The receive loop."""
        logger.debug("Receive thread started")
        try:
            while True:
                try:
                    element = self.transport.read_element()
                except ReadError as err:
                    with self.lock:
                        closing = self._state in ("closing", "closed")
                    if not closing:
                        logger.warning("Connection error: {0}".format(err))
                        self.session_listeners.notify("session_error", err)
                    break
                if element is None:
                    logger.debug("End of the input stream")
                    break
                if element.tag == STREAM_ERROR_TAG:
                    logger.warning("Stream error received: {0}".format(
                                            stream_error_condition(element)))
                    continue
                self.dispatcher.dispatch_element(element)
        finally:
            self.close()
            logger.debug("Receive thread finished")

    def _send(self, stanza):
        """Write a stanza.

        Must be called with `_write_lock` acquired, right after building the
        stanza."""
        with self.lock:
            if self._state != "established":
                raise ConnectionClosedError(u"Connection is {0}"
                                                        .format(self._state))
            transport = self.transport
        logger.debug("Sending {0!r}".format(stanza))
        try:
            transport.send_element(stanza.as_xml())
        except PyXMPPIOError as err:
            raise SendError(u"Could not send {0}: {1}".format(
                                            stanza.element_name, err))

    def request_roster(self):
        """Request the roster from the server.

        The contacts are added to the directory when the response arrives.
        """
        with self._write_lock:
            stanza = Iq(from_jid = self.bound_jid, stanza_type = u"get",
                            stanza_id = self.id_generator.next_id(),
                            payload = RosterPayload())
            self._send(stanza)

    def send_current_status(self, status, text = None):
        """Broadcast own presence.

        :Parameters:
            - `status`: one of the `ContactStatus` values
            - `text`: optional status description
        """
        with self._write_lock:
            stanza = make_status_presence(status, text,
                                    stanza_id = self.id_generator.next_id())
            self._send(stanza)

    set_status = send_current_status

    def send_message(self, message):
        """Send a chat message.

        The message goes to the bare JID of the recipient when there was no
        conversation with the contact yet, and to the resource the contact
        was last active on otherwise. It is then added to the conversation.

        :Parameters:
            - `message`: the message, with `to_contact` set
        :Types:
            - `message`: `pyxmppchat.model.ChatMessage`
        """
        contact = message.to_contact
        if contact is None:
            raise ValueError(u"Message recipient not set")
        with self._write_lock:
            conversation = self.directory.get_conversation(contact)
            if len(conversation):
                to_jid = contact.full_jid
            else:
                to_jid = contact.jid
            stanza = Message(from_jid = message.from_jid or self.bound_jid,
                            to_jid = to_jid, stanza_type = u"chat",
                            stanza_id = self.id_generator.next_id(),
                            language = self.settings["language"],
                            body = message.body)
            self._send(stanza)
            conversation.add_outgoing_message(message)

    def send_new_contact_request(self, contact):
        """Add a contact to the roster and ask for the presence subscription.

        The contact is added to the directory when the server pushes the
        roster change.

        :Parameters:
            - `contact`: the contact to add
        :Types:
            - `contact`: `pyxmppchat.model.Contact`
        """
        with self._write_lock:
            item = RosterItem(contact.jid, contact.alias)
            stanza = Iq(from_jid = self.bound_jid, stanza_type = u"set",
                            stanza_id = self.id_generator.next_id(),
                            payload = RosterPayload([item]))
            self._send(stanza)
            stanza = Presence(to_jid = contact.jid, stanza_type = u"subscribe",
                            stanza_id = self.id_generator.next_id())
            self._send(stanza)

    def respond_contact_request(self, jid, accepted):
        """Answer a presence subscription request.

        :Parameters:
            - `jid`: the requester
            - `accepted`: `True` to allow the subscription
        """
        if accepted:
            stanza_type = u"subscribed"
        else:
            stanza_type = u"unsubscribed"
        with self._write_lock:
            stanza = Presence(to_jid = JID(jid).bare(),
                            stanza_type = stanza_type,
                            stanza_id = self.id_generator.next_id())
            self._send(stanza)

    def remove_contact(self, contact):
        """Remove a contact from the roster.

        The contact is removed from the directory when the server pushes the
        roster change."""
        with self._write_lock:
            item = RosterItem(contact.jid, subscription = u"remove")
            stanza = Iq(from_jid = self.bound_jid, stanza_type = u"set",
                            stanza_id = self.id_generator.next_id(),
                            payload = RosterPayload([item]))
            self._send(stanza)

    def close(self):
        """Close the connection.

        Only the first call does anything: unless the server has already
        closed its stream, the 'unavailable' presence and the stream closing
        tag are sent and the server's closing tag is awaited (up to the
        'close_timeout' setting). Then the transport is closed and the
        session listeners are notified.

        When called on the receive thread (e.g. from a listener) the wait for
        the server's closing tag is skipped.
        """
        with self.lock:
            if self._state in ("closing", "closed"):
                return
            if self._state == "disconnected":
                self._state = "closed"
                return
            self._state = "closing"
            transport = self.transport
        logger.debug("Closing the connection")
        try:
            if transport is not None and not transport.is_stream_complete():
                self._send_farewell(transport)
                if threading.current_thread() is not self._thread:
                    timeout = self.settings["close_timeout"]
                    if not transport.wait_for_stream_end(timeout):
                        logger.debug("Stream end not received in {0}s"
                                                            .format(timeout))
        finally:
            if transport is not None:
                transport.close()
            self._set_state("closed")
            logger.info("Connection closed")
            self.session_listeners.notify("session_closed")

    def _send_farewell(self, transport):
        """Send the 'unavailable' presence and the stream tail."""
        with self._write_lock:
            stanza = make_status_presence(ContactStatus.OFFLINE,
                                    self.settings["leave_status"],
                                    stanza_id = self.id_generator.next_id())
            try:
                transport.send_element(stanza.as_xml())
                transport.send_stream_tail()
            except PyXMPPIOError as err:
                logger.debug("Could not close the stream: {0}".format(err))

def _validate_status(value):
    """Validate the 'initial_status' setting."""
    if value is not None and value not in ContactStatus.ALL:
        raise ValueError(u"Invalid status: {0!r}".format(value))
    return value

XMPPSettings.add_setting(u"close_timeout", type = float, default = 5.0,
    validator = XMPPSettings.validate_positive_float,
    doc = u"""Time in seconds to wait for the server closing its stream when
the connection is closed."""
    )
XMPPSettings.add_setting(u"leave_status", type = str, default = u"leaving",
    doc = u"""Status text of the 'unavailable' presence sent on close."""
    )
XMPPSettings.add_setting(u"initial_status", type = str,
    default = ContactStatus.AVAILABLE, validator = _validate_status,
    doc = u"""Presence status sent when the session is established.
Set to `None` to send no presence."""
    )
XMPPSettings.add_setting(u"request_roster", type = bool, default = True,
    validator = XMPPSettings.validate_bool,
    doc = u"""Request the roster when the session is established."""
    )

# vi: sts=4 et sw=4
