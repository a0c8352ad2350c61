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

"""XMPP-IM roster items.

Normative reference:
  - `RFC 6121 <http://xmpp.org/rfcs/rfc6121.html>`__
"""

__docformat__ = "restructuredtext en"

import logging

from collections.abc import Mapping

from .etree import ElementTree
from .constants import ROSTER_QNP
from .jid import JID

logger = logging.getLogger("pyxmppchat.roster")

QUERY_TAG = ROSTER_QNP + u"query"
ITEM_TAG = ROSTER_QNP + u"item"
GROUP_TAG = ROSTER_QNP + u"group"

class RosterItem(object):
    """
    Roster item.

    Represents part of a roster, or roster update request.

    :Ivariables:
        - `jid`: the JID
        - `name`: visible name
        - `groups`: roster groups the item belongs to
        - `subscription`: subscription type (None, "to", "from", "both",
                                                                or "remove")
        - `ask`: "subscribe" if there was unreplied subsription request sent
    :Types:
        - `jid`: `JID`
        - `name`: `str`
        - `groups`: `set` of `str`
        - `subscription`: `str`
        - `ask`: `str`
    """
    def __init__(self, jid, name = None, groups = None,
                                            subscription = None, ask = None):
        """
        Initialize a roster item element.

        :Parameters:
            - `jid`: entry jid
            - `name`: item visible name
            - `groups`: iterable of groups the item is member of
            - `subscription`: subscription type (None, "to", "from", "both"
                                                                    or "remove")
            - `ask`: "subscribe" if there was unreplied subscription request
              sent
        """
        # pylint: disable=R0913
        self.jid = JID(jid)
        if name is not None:
            self.name = str(name)
        else:
            self.name = None
        if groups is not None:
            self.groups = set(groups)
        else:
            self.groups = set()
        if subscription == u"none":
            subscription = None
        self.subscription = subscription
        self.ask = ask

    @property
    def pending_ask(self):
        """`True` when a subscription request to the contact is still
        waiting for the answer."""
        return self.ask == u"subscribe"

    @classmethod
    def from_xml(cls, element):
        """Make a RosterItem from an XML element.

        :Parameters:
            - `element`: the XML element
        :Types:
            - `element`: :etree:`ElementTree.Element`

        :return: a freshly created roster item
        :returntype: `cls`

        :Raise ValueError: when the element is not a valid roster item.
        """
        if element.tag != ITEM_TAG:
            raise ValueError("{0!r} is not a roster item".format(element))
        jid = element.get("jid")
        if not jid:
            raise ValueError(u"Roster item without a JID")
        jid = JID(jid)
        groups = set()
        for child in element:
            if child.tag != GROUP_TAG:
                continue
            groups.add(child.text or u"")
        return cls(jid, element.get("name"), groups,
                                element.get("subscription"), element.get("ask"))

    def as_xml(self, parent = None):
        """Make an XML element from self.

        :Parameters:
            - `parent`: Parent element
        :Types:
            - `parent`: :etree:`ElementTree.Element`
        """
        if parent is not None:
            element = ElementTree.SubElement(parent, ITEM_TAG)
        else:
            element = ElementTree.Element(ITEM_TAG)
        element.set("jid", str(self.jid))
        if self.name is not None:
            element.set("name", self.name)
        if self.subscription is not None:
            element.set("subscription", self.subscription)
        if self.ask:
            element.set("ask", self.ask)
        for group in sorted(self.groups):
            ElementTree.SubElement(element, GROUP_TAG).text = group
        return element

    def _verify(self, valid_subscriptions, fix):
        """Check if `self` is valid roster item.

        Valid item must have proper `subscription` and valid value for 'ask'.

        :Parameters:
            - `valid_subscriptions`: sequence of valid subscription values
            - `fix`: if `True` than replace invalid 'subscription' and 'ask'
              values with the defaults
        :Types:
            - `fix`: `bool`

        :Raise: `ValueError` if the item is invalid.
        """
        if self.subscription not in valid_subscriptions:
            if fix:
                logger.debug("RosterItem: got unknown 'subscription':"
                        " {0!r}, changing to None".format(self.subscription))
                self.subscription = None
            else:
                raise ValueError("Bad 'subscription'")
        if self.ask not in (None, u"subscribe"):
            if fix:
                logger.debug("RosterItem: got unknown 'ask':"
                                " {0!r}, changing to None".format(self.ask))
                self.ask = None
            else:
                raise ValueError("Bad 'ask'")

    def verify_roster_push(self, fix = False):
        """Check if `self` is valid roster push item.

        Valid item must have proper `subscription` value other and valid value
        for 'ask'.

        :Parameters:
            - `fix`: if `True` than replace invalid 'subscription' and 'ask'
              values with the defaults
        :Types:
            - `fix`: `bool`

        :Raise: `ValueError` if the item is invalid.
        """
        self._verify((None, u"from", u"to", u"both", u"remove"), fix)

    def __repr__(self):
        return "<RosterItem {0!r} subscription={1!r} ask={2!r}>".format(
                                str(self.jid), self.subscription, self.ask)

class RosterPayload(Mapping):
    """<query/> element carried via a roster Iq stanza.

    Can contain a single item or whole roster with optional version
    information.

    Works like a mapping from JIDs to roster items.

    :Ivariables:
        - `version`: the version attribute
        - `_items`: jid -> roster item dictionary
    :Types:
        - `_items`: `dict` of `JID` -> `RosterItem`
    """
    def __init__(self, items = None, version = None):
        """
        :Parameters:
            - `items`: sequence of roster items
            - `version`: optional roster version string
        :Types:
            - `items`: iterable
            - `version`: `str`
        """
        if items is not None:
            self._items = dict((item.jid, item) for item in items)
        else:
            self._items = {}
        self.version = version

    @classmethod
    def from_xml(cls, element):
        """
        Create a `RosterPayload` object from an XML element.

        Invalid and duplicate items are logged and skipped.

        :Parameters:
            - `element`: the XML element
        :Types:
            - `element`: :etree:`ElementTree.Element`

        :return: a freshly created roster payload
        :returntype: `cls`
        """
        items = []
        jids = set()
        if element.tag != QUERY_TAG:
            raise ValueError("{0!r} is not a roster query".format(element))
        version = element.get("ver")
        for child in element:
            if child.tag != ITEM_TAG:
                logger.debug("Unknown element in roster: {0!r}".format(child))
                continue
            try:
                item = RosterItem.from_xml(child)
            except ValueError as err:
                logger.warning("Invalid roster item: {0}".format(err))
                continue
            if item.jid in jids:
                logger.warning("Duplicate jid in roster: {0!r}".format(
                                                                    item.jid))
                continue
            jids.add(item.jid)
            items.append(item)
        return cls(items, version)

    def as_xml(self):
        """Return the XML representation of roster payload.

        Makes a <query/> element with <item/> children.
        """
        element = ElementTree.Element(QUERY_TAG)
        if self.version is not None:
            element.set("ver", self.version)
        for item in self._items.values():
            item.as_xml(element)
        return element

    def __iter__(self):
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def __contains__(self, jid):
        return jid in self._items

    def __getitem__(self, jid):
        return self._items[jid]

    def keys(self):
        """Return the JIDs in the roster.

        :Returntype: iterable of `JID`
        """
        return self._items.keys()

    def values(self):
        """Return the roster items.

        :Returntype: iterable of `RosterItem`
        """
        return self._items.values()

# vi: sts=4 et sw=4
