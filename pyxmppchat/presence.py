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

"""Presence XMPP stanza handling

Normative reference:
  - `RFC 6121 <http://xmpp.org/rfcs/rfc6121.html>`__
"""

__docformat__ = "restructuredtext en"

import logging

from .etree import ElementTree
from .stanza import Stanza

logger = logging.getLogger("pyxmppchat.presence")

PRESENCE_TYPES = ("subscribe", "subscribed", "unsubscribe", "unsubscribed",
                                            "unavailable", "probe", "error")

SHOW_VALUES = ("away", "chat", "dnd", "xa")

# presence types that must not carry <show/>
NO_SHOW_TYPES = ("unavailable", "subscribe", "unsubscribe")

class ContactStatus(object):
    """Availability of a contact (or of the local user) as presented to the
    application.

    :CVariables:
        - `SHOW_MAP`: 'show' value to status mapping
        - `STATUS_SHOW`: status to 'show' value mapping
        - `FRIENDLY_NAMES`: user-friendly status names
    """
    # pylint: disable-msg=R0903
    OFFLINE = "offline"
    AVAILABLE = "available"
    AWAY = "away"
    CHAT = "chat"
    DND = "dnd"
    XA = "xa"
    ALL = (OFFLINE, AVAILABLE, AWAY, CHAT, DND, XA)
    SHOW_MAP = {
            "away": AWAY,
            "chat": CHAT,
            "dnd": DND,
            "xa": XA,
            }
    STATUS_SHOW = {
            AVAILABLE: None,
            AWAY: "away",
            CHAT: "chat",
            DND: "dnd",
            XA: "xa",
            }
    FRIENDLY_NAMES = {
            OFFLINE: u"Offline",
            AVAILABLE: u"Available",
            AWAY: u"Away",
            CHAT: u"Free for chat",
            DND: u"Do not disturb",
            XA: u"Extended away",
            }

    @classmethod
    def from_show(cls, show):
        """Return the status for a 'show' value, `AVAILABLE` for `None`.

        :Raise ValueError: for an unknown 'show' value."""
        if show is None:
            return cls.AVAILABLE
        try:
            return cls.SHOW_MAP[show]
        except KeyError:
            raise ValueError(u"Invalid show value: {0!r}".format(show))

    @classmethod
    def friendly_name(cls, status):
        """Return the user-friendly name of `status`."""
        return cls.FRIENDLY_NAMES[status]

class Presence(Stanza):
    """<presence /> stanza.

    :Properties:
        - `show`: the validated 'show' value, `None` if absent or invalid
        - `bad_show`: the raw 'show' text when it was not valid
        - `status`: the free-text status description
        - `priority`: presence priority
    :Types:
        - `show`: `str`
        - `bad_show`: `str`
        - `status`: `str`
        - `priority`: `int`
    """
    # pylint: disable-msg=R0902
    element_name = "presence"
    stanza_types = PRESENCE_TYPES
    def __init__(self, element = None, from_jid = None, to_jid = None,
                            stanza_type = None, stanza_id = None,
                            show = None, status = None, priority = 0):
        """Initialize a `Presence` object.

        :Parameters:
            - `element`: XML element of this stanza.
            - `from_jid`: sender JID.
            - `to_jid`: recipient JID.
            - `stanza_type`: staza type: one of: None, "available",
              "unavailable", "subscribe", "subscribed", "unsubscribe",
              "unsubscribed", "probe" or "error". "available" is automaticaly
              changed to None.
            - `stanza_id`: stanza id -- value of stanza's "id" attribute
            - `show`: "show" field of presence stanza. One of: None, "away",
              "xa", "dnd", "chat".
            - `status`: descriptive text for the presence stanza.
            - `priority`: presence priority.
        :Types:
            - `element`: :etree:`ElementTree.Element`
            - `from_jid`: `JID`
            - `to_jid`: `JID`
            - `stanza_type`: `str`
            - `stanza_id`: `str`
            - `show`: `str`
            - `status`: `str`
            - `priority`: `int`

        :Raise ValueError: when the arguments would make an invalid stanza.
        """
        # pylint: disable-msg=R0913
        if stanza_type == "available":
            stanza_type = None
        Stanza.__init__(self, element, from_jid = from_jid, to_jid = to_jid,
                        stanza_type = stanza_type, stanza_id = stanza_id)
        self._bad_show = None
        if element is not None:
            self._decode_children()
        else:
            if show is not None:
                if show not in SHOW_VALUES:
                    raise ValueError(u"Invalid show value: {0!r}".format(show))
                if stanza_type in NO_SHOW_TYPES:
                    raise ValueError(u"Show not allowed in {0!r} presence"
                                                        .format(stanza_type))
            priority = int(priority)
            if priority < -128 or priority > 127:
                raise ValueError("Bad priority value")
            self._show = show
            self._status = status
            self._priority = priority

    def _decode_children(self):
        """Decode <show/>, <status/> and <priority/> of a parsed stanza.

        Invalid values are logged and ignored."""
        show = self._child_text("show")
        if show is not None:
            show = show.strip()
            if self._stanza_type in NO_SHOW_TYPES:
                logger.warning("Ignoring <show/> in {0!r} presence from {1}"
                                    .format(self._stanza_type, self._from_jid))
                show = None
            elif show not in SHOW_VALUES:
                logger.warning("Invalid <show/> value {0!r} in presence"
                                " from {1}".format(show, self._from_jid))
                self._bad_show = show
                show = None
        self._show = show
        self._status = self._child_text("status")
        priority = self._child_text("priority")
        self._priority = 0
        if priority:
            try:
                self._priority = int(priority)
            except ValueError:
                logger.warning("Invalid presence priority: {0!r}"
                                                            .format(priority))

    def _add_children(self, element):
        if self._show:
            child = ElementTree.SubElement(element, self._ns_prefix + "show")
            child.text = self._show
        if self._status:
            child = ElementTree.SubElement(element, self._ns_prefix + "status")
            child.text = self._status
        if self._priority:
            child = ElementTree.SubElement(element,
                                                self._ns_prefix + "priority")
            child.text = str(self._priority)

    @property
    def show(self):
        # pylint: disable-msg=C0111
        return self._show

    @property
    def bad_show(self):
        # pylint: disable-msg=C0111
        return self._bad_show

    @property
    def status(self):
        # pylint: disable-msg=C0111
        return self._status

    @property
    def priority(self):
        # pylint: disable-msg=C0111
        return self._priority


def make_status_presence(status, text = None, from_jid = None,
                                                        stanza_id = None):
    """Build the presence broadcasting own availability `status`.

    :Parameters:
        - `status`: one of the `ContactStatus` values
        - `text`: optional free-text status description
        - `from_jid`: sender JID
        - `stanza_id`: stanza id
    :Returntype: `Presence`
    """
    if status == ContactStatus.OFFLINE:
        return Presence(stanza_type = "unavailable", status = text,
                                from_jid = from_jid, stanza_id = stanza_id)
    if status not in ContactStatus.STATUS_SHOW:
        raise ValueError(u"Invalid status: {0!r}".format(status))
    return Presence(show = ContactStatus.STATUS_SHOW[status], status = text,
                                from_jid = from_jid, stanza_id = stanza_id)

# vi: sts=4 et sw=4
