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

"""XMPP transport.

This module provides the abstract base class for XMPP transports (mechanisms
used to send and receive XMPP content, not to be confused with protocol
gateways sometimes also called 'transports') and the standard TCP transport.

The transport works on whole top-level elements of the stream: the stream
head and tail are written with dedicated methods, stanzas are written one at a
time with `XMPPTransport.send_element` and received one at a time with the
blocking `XMPPTransport.read_element`.
"""

__docformat__ = "restructuredtext en"

import socket
import threading
import logging

from abc import ABCMeta, abstractmethod
from collections import deque

from .settings import XMPPSettings
from .exceptions import ConnectError, PyXMPPIOError, ReadError
from .constants import STANZA_CLIENT_NS
from .etree import element_to_unicode
from .xmppserializer import XMPPSerializer
from .xmppparser import StreamReader, XMLStreamHandler

logger = logging.getLogger("pyxmppchat.transport")

class XMPPTransport(metaclass = ABCMeta):
    """Abstract base class for XMPP transport implementations."""
    # pylint: disable-msg=R0922,W0232
    @abstractmethod
    def send_stream_head(self, stream_from, stream_to, version = u'1.0',
                                                            language = None):
        """
        Send stream head via the transport. Calling it again restarts the
        stream: both the serializer and the parser state are discarded.

        :Parameters:
            - `stream_from`: the 'from' attribute of the stream. May be `None`.
            - `stream_to`: the 'to' attribute of the stream. May be `None`.
            - `version`: the 'version' of the stream.
            - `language`: the 'xml:lang' of the stream
        :Types:
            - `stream_from`: `str`
            - `stream_to`: `str`
            - `version`: `str`
            - `language`: `str`
        """
        raise NotImplementedError

    @abstractmethod
    def send_stream_tail(self):
        """
        Send stream tail via the transport.
        """
        raise NotImplementedError

    @abstractmethod
    def send_element(self, element):
        """
        Send an element via the transport.

        :Raise PyXMPPIOError: when the element cannot be written.
        """
        raise NotImplementedError

    @abstractmethod
    def read_element(self):
        """Read the next top-level element of the stream.

        Blocks until a complete element is available.

        :Return: the element or `None` when the stream is over (the peer
            sent the closing tag or closed the connection).
        :Returntype: :etree:`ElementTree.Element`

        :Raise ReadError: on socket error or not well-formed input.
        """
        raise NotImplementedError

    @abstractmethod
    def is_stream_complete(self):
        """
        :Return: `True` when no more elements will be received.
        """
        raise NotImplementedError

    @abstractmethod
    def wait_for_stream_end(self, timeout):
        """Wait until the stream is complete.

        :Return: `True` if the stream is complete, `False` on timeout.
        """
        raise NotImplementedError

    @abstractmethod
    def close(self):
        """Close the transport immediately. Unblocks any pending
        `read_element` call."""
        raise NotImplementedError

class TCPTransport(XMPPTransport, XMLStreamHandler):
    """XMPP over TCP.

    Writing is protected by `lock`, so a whole element is always written
    at once. Reading is done by a single thread at a time, without holding
    `lock`, so writes are never blocked by a pending read.

    :Ivariables:
        - `settings`: the settings used
        - `lock`: the lock protecting the output and the object state
        - `peer_stream_head`: the stream root element received from the peer
    """
    # pylint: disable-msg=R0902
    def __init__(self, settings = None, sock = None):
        """Initialize the `TCPTransport object.

        :Parameters:
            - `settings`: XMPP settings to use
            - `sock`: existing, connected socket
        """
        if settings:
            self.settings = settings
        else:
            self.settings = XMPPSettings()
        self.lock = threading.RLock()
        self._read_lock = threading.Lock()
        self._complete_cond = threading.Condition(self.lock)
        self._elements = deque()
        self._serializer = None
        self._reader = None
        self._stream_complete = False
        self._dst_addr = None
        self.peer_stream_head = None
        self._socket = sock
        if sock is None:
            self._state = None
        else:
            self._dst_addr = sock.getpeername()
            self._state = "connected"

    @classmethod
    def open(cls, host, port, settings = None):
        """Create a transport connected to `host`:`port`.

        :Return: the connected transport
        :Returntype: `TCPTransport`

        :Raise ConnectError: when the connection cannot be established.
        """
        transport = cls(settings)
        transport.connect(host, port)
        return transport

    def connect(self, addr, port):
        """Establish TCP connection with given address.

        All the addresses `addr` resolves to are tried in turn.

        :Parameters:
            - `addr`: peer name or IP address
            - `port`: port number to connect to
        """
        with self.lock:
            self._connect(addr, port)

    def _connect(self, addr, port):
        """Same as `connect`, but assumes `self.lock` acquired.
        """
        timeout = self.settings["connect_timeout"]
        self._state = "resolving-hostname"
        try:
            addrs = socket.getaddrinfo(addr, port, socket.AF_UNSPEC,
                                                        socket.SOCK_STREAM)
        except socket.gaierror as err:
            self._state = "aborted"
            raise ConnectError(u"Could not resolve address of {0!r}: {1}"
                                                            .format(addr, err))
        exception = None
        for family, socktype, proto, _unused, sockaddr in addrs:
            sock = socket.socket(family, socktype, proto)
            sock.settimeout(timeout)
            self._state = "connecting"
            logger.debug("Connecting to {0!r}".format(sockaddr))
            try:
                sock.connect(sockaddr)
            except socket.error as err:
                logger.debug("Connect to {0!r} failed: {1}".format(sockaddr,
                                                                        err))
                exception = err
                sock.close()
                continue
            sock.settimeout(None)
            self._socket = sock
            self._dst_addr = sockaddr
            self._state = "connected"
            logger.info("Connected to {0!r}".format(sockaddr))
            return
        self._state = "aborted"
        raise ConnectError(u"Could not connect to {0!r}:{1}: {2}"
                                                .format(addr, port, exception))

    def _write(self, data):
        """Write raw data to the socket.

        :Parameters:
            - `data`: data to send
        :Types:
            - `data`: `bytes`
        """
        logging.getLogger("pyxmppchat.tcp.out").debug("OUT: %r", data)
        if self._socket is None:
            raise PyXMPPIOError(u"Connection closed.")
        try:
            self._socket.sendall(data)
        except (IOError, OSError) as err:
            raise PyXMPPIOError(u"IO Error: {0}".format(err))

    def send_stream_head(self, stream_from, stream_to, version = u'1.0',
                                                            language = None):
        with self.lock:
            self._serializer = XMPPSerializer(STANZA_CLIENT_NS)
            self._reader = StreamReader(self)
            self._elements.clear()
            self.peer_stream_head = None
            head = self._serializer.emit_head(stream_from, stream_to,
                                        version = version, language = language)
            self._write(head.encode("utf-8"))
            self._state = "established"

    def send_stream_tail(self):
        with self.lock:
            if self._socket is None or self._serializer is None:
                logger.debug(u"Cannot send stream closing tag: already closed")
                return
            data = self._serializer.emit_tail()
            self._serializer = None
            self._state = "closing"
            self._write(data.encode("utf-8"))

    def send_element(self, element):
        with self.lock:
            if self._socket is None or self._serializer is None:
                raise PyXMPPIOError(u"Cannot send {0}: stream closed"
                                        .format(element_to_unicode(element)))
            data = self._serializer.emit_stanza(element)
            self._write(data.encode("utf-8"))

    def read_element(self):
        with self._read_lock:
            while not self._elements:
                with self.lock:
                    if self._stream_complete:
                        return None
                    sock = self._socket
                    reader = self._reader
                if sock is None:
                    return None
                try:
                    data = sock.recv(4096)
                except (IOError, OSError) as err:
                    self._set_complete()
                    if self._socket is None:
                        logger.debug("Socket closed while reading")
                        return None
                    raise ReadError(u"IO Error: {0}".format(err))
                logging.getLogger("pyxmppchat.tcp.in").debug("IN: %r", data)
                if not data:
                    logger.debug("EOF received")
                    self._set_complete()
                    break
                try:
                    reader.feed(data)
                except ReadError:
                    self._set_complete()
                    raise
            if self._elements:
                return self._elements.popleft()
            return None

    def _set_complete(self):
        """Mark the input stream as complete and wake up the threads
        waiting for that."""
        with self.lock:
            self._stream_complete = True
            self._complete_cond.notify_all()

    def stream_start(self, element):
        logger.debug("Peer stream head: {0!r}".format(element.attrib))
        self.peer_stream_head = element

    def stream_element(self, element):
        self._elements.append(element)

    def stream_end(self):
        logger.debug("Peer stream closing tag received")
        self._set_complete()

    def is_stream_complete(self):
        with self.lock:
            return self._stream_complete

    def wait_for_stream_end(self, timeout):
        with self.lock:
            if not self._stream_complete:
                self._complete_cond.wait(timeout)
            return self._stream_complete

    def is_connected(self):
        """
        Check if the transport is connected.

        :Return: `True` if is connected.
        """
        with self.lock:
            return self._socket is not None and not self._stream_complete

    def close(self):
        """Close the stream immediately, so it won't expect more events."""
        with self.lock:
            if self._socket is None:
                return
            logger.debug("Closing the socket")
            try:
                self._socket.shutdown(socket.SHUT_RDWR)
            except (IOError, OSError):
                pass
            self._socket.close()
            self._socket = None
            self._serializer = None
            self._state = "closed"
            self._stream_complete = True
            self._complete_cond.notify_all()

XMPPSettings.add_setting(u"connect_timeout", type = float, default = 30.0,
        validator = XMPPSettings.validate_positive_float,
        doc = u"""Time in seconds to wait for the TCP connection to be
established."""
    )

# vi: sts=4 et sw=4
