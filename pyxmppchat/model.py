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

"""In-memory contact list and conversations.

`ContactDirectory` is the default storage for the roster received from the
server, the presence of the contacts and the messages exchanged during the
session. Contacts and conversations are keyed by bare JIDs.
"""

__docformat__ = "restructuredtext en"

import time
import threading
import logging

from .jid import JID
from .presence import ContactStatus

logger = logging.getLogger("pyxmppchat.model")

class Contact(object):
    """A roster entry with its current presence.

    :Ivariables:
        - `jid`: bare JID of the contact
        - `alias`: the name of the contact from the roster
        - `subscription`: subscription state from the roster
        - `pending_ask`: `True` if our subscription request is pending
        - `last_resource`: the resource the contact was last active on
        - `_statuses`: resource -> status mapping of the available resources
    :Types:
        - `jid`: `JID`
        - `alias`: `str`
        - `subscription`: `str`
        - `pending_ask`: `bool`
        - `last_resource`: `str`
        - `_statuses`: `dict`
    """
    def __init__(self, jid, alias = None, subscription = None,
                                                        pending_ask = False):
        self.jid = JID(jid).bare()
        self.alias = alias
        self.subscription = subscription
        self.pending_ask = pending_ask
        self.last_resource = None
        self._statuses = {}
        self._lock = threading.RLock()

    @classmethod
    def from_roster_item(cls, item):
        """Make a contact for a `roster.RosterItem`."""
        return cls(item.jid, item.name, item.subscription, item.pending_ask)

    def __repr__(self):
        return "<Contact {0!r} status={1!r}>".format(str(self.jid),
                                                                self.status)

    @property
    def full_jid(self):
        """The JID of the resource the contact was last active on, the bare
        JID if no resource is known."""
        with self._lock:
            if self.last_resource is None:
                return self.jid
            return JID(self.jid.local, self.jid.domain, self.last_resource)

    @property
    def status(self):
        """Status of the last active resource, `ContactStatus.OFFLINE` when
        no resource is available."""
        with self._lock:
            if self.last_resource in self._statuses:
                return self._statuses[self.last_resource]
            if self._statuses:
                return list(self._statuses.values())[-1]
            return ContactStatus.OFFLINE

    @property
    def status_name(self):
        """User-friendly name of the current status."""
        return ContactStatus.friendly_name(self.status)

    def get_resource_status(self, resource):
        """Return the status of a single resource."""
        with self._lock:
            return self._statuses.get(resource, ContactStatus.OFFLINE)

    def set_status(self, resource, status):
        """Record `status` of `resource`.

        An offline resource is forgotten. Any other status makes `resource`
        the last active one.
        """
        with self._lock:
            if status == ContactStatus.OFFLINE:
                self._statuses.pop(resource, None)
                if self.last_resource == resource:
                    if self._statuses:
                        self.last_resource = list(self._statuses)[-1]
                    else:
                        self.last_resource = None
            else:
                self._statuses.pop(resource, None)
                self._statuses[resource] = status
                if resource is not None:
                    self.last_resource = resource

class ChatMessage(object):
    """A chat message sent or received during the session.

    :Ivariables:
        - `from_contact`: the sender, `None` for own messages
        - `to_contact`: the recipient, `None` for received messages
        - `body`: the message text
        - `from_jid`: own full JID to send the message from, if different
          from the session JID
        - `resource`: resource of the sender of a received message
        - `timestamp`: when the message was created
    :Types:
        - `from_contact`: `Contact`
        - `to_contact`: `Contact`
        - `body`: `str`
        - `from_jid`: `JID`
        - `resource`: `str`
        - `timestamp`: `float`
    """
    # pylint: disable-msg=R0903,R0913
    def __init__(self, from_contact = None, to_contact = None, body = u"",
                                            from_jid = None, timestamp = None):
        self.from_contact = from_contact
        self.to_contact = to_contact
        self.body = body
        self.from_jid = JID(from_jid) if from_jid else None
        self.resource = None
        if timestamp is None:
            timestamp = time.time()
        self.timestamp = timestamp

    def __repr__(self):
        return "<ChatMessage from={0!r} to={1!r} body={2!r}>".format(
                                self.from_contact, self.to_contact, self.body)

class Conversation(object):
    """Messages exchanged with a single contact.

    :Ivariables:
        - `contact`: the other party
        - `messages`: the messages, in order
    :Types:
        - `contact`: `Contact`
        - `messages`: `list` of `ChatMessage`
    """
    def __init__(self, contact):
        self.contact = contact
        self.messages = []
        self._lock = threading.RLock()

    def __len__(self):
        with self._lock:
            return len(self.messages)

    def add_incoming_message(self, message, resource = None):
        """Append a received message, tagged with the sender's `resource`.
        """
        with self._lock:
            message.resource = resource
            self.messages.append(message)
            if resource is not None:
                self.contact.last_resource = resource

    def add_outgoing_message(self, message):
        """Append a message sent to the contact."""
        with self._lock:
            self.messages.append(message)

class ContactDirectory(object):
    """Contacts and conversations of a session, keyed by bare JID.

    All methods are thread-safe.
    """
    def __init__(self):
        self._lock = threading.RLock()
        self._contacts = {}
        self._conversations = {}

    def __len__(self):
        with self._lock:
            return len(self._contacts)

    def __contains__(self, jid):
        return self.get_contact(jid) is not None

    def contacts(self):
        """Return a snapshot of the contact list.

        :Returntype: `list` of `Contact`"""
        with self._lock:
            return list(self._contacts.values())

    def get_contact(self, jid):
        """Return the contact with the given JID (the resource is ignored)
        or `None`."""
        with self._lock:
            return self._contacts.get(JID(jid).bare())

    def add_contact(self, contact):
        """Add a new contact.

        :Raise ValueError: if a contact with the same JID already exists."""
        with self._lock:
            if contact.jid in self._contacts:
                raise ValueError(u"Contact {0} already exists"
                                                        .format(contact.jid))
            self._contacts[contact.jid] = contact
        logger.debug("Contact added: {0!r}".format(contact))

    def remove_contact(self, jid):
        """Remove the contact with the given JID.

        :Return: the removed contact or `None` if there was no such contact.
        """
        jid = JID(jid).bare()
        with self._lock:
            contact = self._contacts.pop(jid, None)
            self._conversations.pop(jid, None)
        if contact is not None:
            logger.debug("Contact removed: {0!r}".format(contact))
        return contact

    def get_conversation(self, contact):
        """Return the conversation with `contact`, creating a new one if
        needed."""
        with self._lock:
            conversation = self._conversations.get(contact.jid)
            if conversation is None:
                conversation = Conversation(contact)
                self._conversations[contact.jid] = conversation
            return conversation

    def set_status(self, jid, resource, status):
        """Set the status of a contact resource.

        :Return: the contact updated or `None` if the contact is not known.
        """
        contact = self.get_contact(jid)
        if contact is not None:
            contact.set_status(resource, status)
        return contact

# vi: sts=4 et sw=4
