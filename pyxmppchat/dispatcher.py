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

"""Handling of the stanzas received over an established stream.

Received elements are converted to `Iq`, `Presence` or `Message` objects by
`stanza_factory` and routed by `StanzaDispatcher` to the contact directory
and the listeners. Protocol anomalies found in the stanzas are logged and
otherwise ignored.
"""

__docformat__ = "restructuredtext en"

import logging

from .etree import local_name
from .constants import STANZA_NAMESPACES
from .iq import Iq
from .presence import Presence, ContactStatus
from .message import Message
from .roster import RosterItem, RosterPayload, QUERY_TAG
from .model import Contact, ChatMessage

logger = logging.getLogger("pyxmppchat.dispatcher")

STANZA_CLASSES = {
        u"iq": Iq,
        u"presence": Presence,
        u"message": Message,
        }

def stanza_factory(element):
    """Create a stanza object from an XML element.

    :Parameters:
        - `element`: a top-level element of the stream
    :Types:
        - `element`: :etree:`ElementTree.Element`

    :Return: the stanza object or `None` when the element is not a valid
        stanza.
    :Returntype: `Iq`, `Presence` or `Message`
    """
    tag = element.tag
    if tag.startswith(u"{"):
        namespace = tag[1:].split(u"}", 1)[0]
        if namespace not in STANZA_NAMESPACES:
            logger.debug("Not a stanza: {0!r}".format(tag))
            return None
    klass = STANZA_CLASSES.get(local_name(element))
    if klass is None:
        logger.debug("Not a stanza: {0!r}".format(tag))
        return None
    try:
        return klass(element)
    except ValueError as err:
        logger.warning("Invalid {0} stanza: {1}".format(local_name(element),
                                                                        err))
        return None

class StanzaDispatcher(object):
    """Routes received stanzas.

    :Ivariables:
        - `directory`: the contact directory updated
        - `contact_listeners`: receive roster changes
        - `subscription_listeners`: receive subscription requests
        - `message_listeners`: receive chat messages
    :Types:
        - `directory`: `pyxmppchat.model.ContactDirectory`
        - `contact_listeners`: `pyxmppchat.interfaces.ListenerList`
        - `subscription_listeners`: `pyxmppchat.interfaces.ListenerList`
        - `message_listeners`: `pyxmppchat.interfaces.ListenerList`
    """
    def __init__(self, directory, contact_listeners, subscription_listeners,
                                                        message_listeners):
        self.directory = directory
        self.contact_listeners = contact_listeners
        self.subscription_listeners = subscription_listeners
        self.message_listeners = message_listeners
        self._handlers = {
                Iq: self.process_iq,
                Presence: self.process_presence,
                Message: self.process_message,
                }

    def dispatch_element(self, element):
        """Convert `element` to a stanza and dispatch it.

        :Return: `True` if the element was a valid stanza.
        """
        stanza = stanza_factory(element)
        if stanza is None:
            return False
        self.dispatch(stanza)
        return True

    def dispatch(self, stanza):
        """Route a stanza to its handler."""
        logger.debug("Dispatching {0!r}".format(stanza))
        handler = self._handlers.get(type(stanza))
        if handler is None:
            logger.debug("No handler for {0!r}".format(stanza))
            return
        handler(stanza)

    def process_iq(self, stanza):
        """Handle roster results and pushes."""
        stanza_type = stanza.stanza_type
        if stanza_type == u"error":
            logger.warning("Roster query error: {0} (id={1!r})".format(
                                stanza.error_condition, stanza.stanza_id))
            return
        if stanza_type == u"get":
            logger.debug("Ignoring iq get: {0!r}".format(stanza))
            return
        payload = stanza.payload
        if payload is None:
            if stanza_type == u"result":
                logger.debug("Request {0!r} acknowledged".format(
                                                            stanza.stanza_id))
            return
        if payload.tag != QUERY_TAG:
            logger.debug("Ignoring iq with {0!r} payload".format(payload.tag))
            return
        self.process_roster(RosterPayload.from_xml(payload))

    def process_roster(self, roster):
        """Apply roster items from a roster result or push."""
        for item in roster.values():
            try:
                item.verify_roster_push(fix = True)
            except ValueError as err:
                logger.warning("Invalid roster item: {0}".format(err))
                continue
            if item.subscription == u"remove":
                contact = self.directory.remove_contact(item.jid)
                if contact is None:
                    logger.debug("Removed contact not in roster: {0}"
                                                        .format(item.jid))
                    continue
                self.contact_listeners.notify("contact_removed", item)
            elif item.subscription in (u"both", u"to") or item.pending_ask:
                if item.jid.bare() in self.directory:
                    logger.debug("Contact already present: {0}"
                                                        .format(item.jid))
                    continue
                try:
                    self.directory.add_contact(Contact.from_roster_item(item))
                except ValueError:
                    continue
                self.contact_listeners.notify("contact_added", item)
            else:
                logger.debug("Ignoring roster item {0!r}".format(item))

    def process_presence(self, stanza):
        """Handle subscription requests and contact status changes."""
        from_jid = stanza.from_jid
        if from_jid is None:
            logger.debug("Ignoring presence without 'from'")
            return
        bare = from_jid.bare()
        resource = from_jid.resource
        stanza_type = stanza.stanza_type
        if stanza_type == u"subscribe":
            self.subscription_listeners.notify("subscription_requested", bare)
            return
        contact = self.directory.get_contact(bare)
        if contact is None:
            logger.info("Presence from unknown contact: {0}".format(from_jid))
            return
        if stanza_type == u"unavailable":
            contact.set_status(resource, ContactStatus.OFFLINE)
        elif stanza_type == u"unsubscribe":
            contact = self.directory.remove_contact(bare)
            if contact is not None:
                item = self._make_roster_item(contact)
                self.contact_listeners.notify("contact_removed", item)
        elif stanza_type is None:
            if stanza.bad_show is not None:
                logger.warning("Status of {0} left unchanged".format(from_jid))
                return
            contact.set_status(resource, ContactStatus.from_show(stanza.show))
        else:
            logger.debug("Ignoring {0!r} presence from {1}".format(
                                                        stanza_type, from_jid))

    @staticmethod
    def _make_roster_item(contact):
        """Build the roster item describing a removed contact."""
        return RosterItem(contact.jid, contact.alias, subscription = u"remove")

    def process_message(self, stanza):
        """Handle chat messages from known contacts.

        The message is tagged with the resource of the sender's `from`
        address. The `to` resource is always our own, so passing it on would
        make the addressing policy of `Connection.send_message` reply to the
        wrong resource.
        """
        if stanza.stanza_type != u"chat" or not stanza.body:
            logger.debug("Ignoring message {0!r}".format(stanza))
            return
        from_jid = stanza.from_jid
        if from_jid is None:
            return
        contact = self.directory.get_contact(from_jid)
        if contact is None:
            logger.debug("Dropping message from unknown sender {0}"
                                                        .format(from_jid))
            return
        resource = from_jid.resource
        message = ChatMessage(from_contact = contact, body = stanza.body)
        self.directory.get_conversation(contact).add_incoming_message(message,
                                                                    resource)
        self.message_listeners.notify("message_received", contact, resource,
                                                                stanza.body)

# vi: sts=4 et sw=4
