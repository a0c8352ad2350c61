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

"""Exception classes used by pyxmppchat.

Errors raised while a connection is being established (`ConnectError`,
`HandshakeError` and its subclasses) are returned synchronously to the caller
of `Connection.connect`. `SendError` is raised by the outbound operations of
an established connection. `ReadError` is raised only inside the receive
loop and is reported to the session listeners.
"""

__docformat__ = "restructuredtext en"

class PyXMPPError(Exception):
    """Base class for all pyxmppchat exceptions."""
    pass

class JIDError(PyXMPPError, ValueError):
    """Exception raised when invalid JID is used"""
    pass

class PyXMPPIOError(PyXMPPError):
    """Exception raised on I/O error."""
    pass

class ConnectError(PyXMPPIOError):
    """Raised when the TCP connection to the server cannot be established."""
    pass

class DNSError(ConnectError):
    """Raised when the server address cannot be resolved."""
    pass

class ReadError(PyXMPPIOError):
    """Raised when the stream cannot be read (socket error or XML not
    well-formed)."""
    pass

class HandshakeError(PyXMPPError):
    """Stream negotiation failure.

    :Ivariables:
        - `condition`: short name of the failure reason
    :Types:
        - `condition`: `str`
    """
    def __init__(self, condition, message = None):
        if message is None:
            message = u"Stream negotiation failed: {0}".format(condition)
        PyXMPPError.__init__(self, message)
        self.condition = condition

class AuthError(HandshakeError):
    """SASL authentication failure.

    :Ivariables:
        - `reason`: the failure condition reported by the server
          (for the "rejected" condition)
    :Types:
        - `reason`: `str`
    """
    UNSUPPORTED_MECHANISM = "unsupported-mechanism"
    REJECTED = "rejected"
    def __init__(self, condition, reason = None):
        if condition == self.UNSUPPORTED_MECHANISM:
            message = u"Server does not offer the PLAIN SASL mechanism"
        elif reason:
            message = u"Authentication rejected: {0}".format(reason)
        else:
            message = u"Authentication rejected"
        HandshakeError.__init__(self, condition, message)
        self.reason = reason

class BindError(HandshakeError):
    """Resource binding failure."""
    def __init__(self, condition = None):
        if condition:
            message = u"Could not bind resource: {0}".format(condition)
        else:
            message = u"Could not bind resource"
        HandshakeError.__init__(self, condition, message)

class SendError(PyXMPPError):
    """Raised when a stanza cannot be written to an established stream."""
    pass

class ConnectionClosedError(SendError):
    """Raised on any attempt to send data over a closed connection."""
    pass

# vi: sts=4 et sw=4
