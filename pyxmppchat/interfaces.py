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

"""Listener interfaces of the XMPP connection.

An application object implements one or more of the listener classes below
and is registered with `pyxmppchat.connection.Connection.add_listener`. It
will be added to the notification list of each interface it implements.

Listeners are called from the thread which caused the event: usually the
connection receive thread.
"""

__docformat__ = "restructuredtext en"

import threading
import logging

from abc import ABCMeta

logger = logging.getLogger("pyxmppchat.interfaces")

class ContactListener(metaclass = ABCMeta):
    """Receives roster changes."""
    # pylint: disable-msg=W0232,R0921
    def contact_added(self, item):
        """Called when a contact is added to the roster.

        :Parameters:
            - `item`: the roster item received from the server
        :Types:
            - `item`: `pyxmppchat.roster.RosterItem`
        """
        pass

    def contact_removed(self, item):
        """Called when a contact is removed from the roster.

        :Parameters:
            - `item`: the roster item of the removed contact
        :Types:
            - `item`: `pyxmppchat.roster.RosterItem`
        """
        pass

class SubscriptionRequestListener(metaclass = ABCMeta):
    """Receives presence subscription requests."""
    # pylint: disable-msg=W0232,R0921,R0903
    def subscription_requested(self, jid):
        """Called when `jid` asks for our presence subscription.

        The request should be answered with
        `pyxmppchat.connection.Connection.respond_contact_request`.

        :Parameters:
            - `jid`: the bare JID of the requester
        :Types:
            - `jid`: `pyxmppchat.jid.JID`
        """
        pass

class MessageListener(metaclass = ABCMeta):
    """Receives chat messages."""
    # pylint: disable-msg=W0232,R0921,R0903
    def message_received(self, contact, resource, body):
        """Called when a chat message is received from a roster contact.

        :Parameters:
            - `contact`: the sender
            - `resource`: the resource the message was received from
            - `body`: the message text
        :Types:
            - `contact`: `pyxmppchat.model.Contact`
            - `resource`: `str`
            - `body`: `str`
        """
        pass

class SessionListener(metaclass = ABCMeta):
    """Receives the session-level events."""
    # pylint: disable-msg=W0232,R0921
    def session_error(self, error):
        """Called when the connection fails while receiving data. The
        connection will be closed right after that.

        :Parameters:
            - `error`: the exception
        :Types:
            - `error`: `Exception`
        """
        pass

    def session_closed(self):
        """Called exactly once when the connection is closed."""
        pass

class ListenerList(object):
    """Ordered list of listeners.

    Notifications are sent in the order the listeners were added, to a copy
    of the list, so listeners may be added or removed from within a
    callback. An exception raised by a listener is logged and does not
    prevent the notification of the others.
    """
    def __init__(self):
        self._lock = threading.Lock()
        self._listeners = []

    def __len__(self):
        with self._lock:
            return len(self._listeners)

    def __iter__(self):
        with self._lock:
            return iter(list(self._listeners))

    def add(self, listener):
        """Add a listener, if not already on the list."""
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove(self, listener):
        """Remove a listener, if it is on the list."""
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def notify(self, method_name, *args):
        """Call `method_name` of every listener with `args`."""
        for listener in self:
            try:
                getattr(listener, method_name)(*args)
            except Exception: # pylint: disable-msg=W0703
                logger.exception("Listener {0!r} failed in {1}()"
                                            .format(listener, method_name))

# vi: sts=4 et sw=4
