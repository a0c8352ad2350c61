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

"""General XMPP Stanza handling.

Normative reference:
  - `RFC 6120 <http://xmpp.org/rfcs/rfc6120.html>`__
"""

__docformat__ = "restructuredtext en"

import itertools
import threading

from .etree import ElementTree
from .constants import STANZA_CLIENT_NS, XML_LANG_QNAME
from .jid import JID
from .xmppserializer import serialize

class StanzaIdGenerator(object):
    """Source of stanza ids unique for a connection.

    Ids are the fixed `prefix` followed by an integer, starting with 0.
    Safe to use from many threads.

    :Ivariables:
        - `prefix`: the id prefix
    :Types:
        - `prefix`: `str`
    """
    def __init__(self, prefix = u"sammy"):
        self.prefix = prefix
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def next_id(self):
        """Return the next id.

        :Returntype: `str`"""
        with self._lock:
            number = next(self._counter)
        return u"{0}{1}".format(self.prefix, number)

    __call__ = next_id

class Stanza(object):
    """Base class for all XMPP stanzas.

    Stanza objects are not modified after creation. A stanza is created
    either from a parsed XML element or from the values passed to the
    constructor.

    :Properties:
        - `from_jid`: source JID of the stanza
        - `to_jid`: destination JID of the stanza
        - `stanza_type`: stanza type
        - `stanza_id`: stanza id
        - `language`: the 'xml:lang' of the stanza
    :Ivariables:
        - `_element`: the XML element the stanza was built from or the
          cached XML representation
        - `_namespace`: namespace of this stanza element
    :Types:
        - `from_jid`: `JID`
        - `to_jid`: `JID`
        - `stanza_type`: `str`
        - `stanza_id`: `str`
        - `language`: `str`
        - `_element`: :etree:`ElementTree.Element`
        - `_namespace`: `str`
    """
    # pylint: disable-msg=R0902
    element_name = "Unknown"
    stanza_types = None
    def __init__(self, element = None, from_jid = None, to_jid = None,
                            stanza_type = None, stanza_id = None,
                            language = None):
        """Initialize a Stanza object.

        :Parameters:
            - `element`: XML element of this stanza. If not given a new stanza
              is created from the other arguments.
            - `from_jid`: sender JID.
            - `to_jid`: recipient JID.
            - `stanza_type`: staza type, one of `stanza_types`
            - `stanza_id`: stanza id -- value of stanza's "id" attribute.
            - `language`: the 'xml:lang' attribute value
        :Types:
            - `element`: :etree:`ElementTree.Element`
            - `from_jid`: `JID` or `str`
            - `to_jid`: `JID` or `str`
            - `stanza_type`: `str`
            - `stanza_id`: `str`
            - `language`: `str`

        :Raise ValueError: on invalid JID or stanza type.
        """
        # pylint: disable-msg=R0913
        if element is not None:
            self._element = element
            if element.tag.startswith("{"):
                self._namespace = element.tag[1:].split("}")[0]
            else:
                self._namespace = STANZA_CLIENT_NS
            self._decode_attributes()
        else:
            self._element = None
            self._namespace = STANZA_CLIENT_NS
            self._from_jid = JID(from_jid) if from_jid else None
            self._to_jid = JID(to_jid) if to_jid else None
            self._stanza_type = stanza_type
            self._stanza_id = stanza_id
            self._language = language
        self._ns_prefix = "{{{0}}}".format(self._namespace)
        self._element_qname = self._ns_prefix + self.element_name
        if (self.stanza_types is not None and self._stanza_type is not None
                            and self._stanza_type not in self.stanza_types):
            raise ValueError(u"Invalid {0} type: {1!r}".format(
                                        self.element_name, self._stanza_type))

    def _decode_attributes(self):
        """Decode the common stanza attributes from `self._element`."""
        from_jid = self._element.get('from')
        self._from_jid = JID(from_jid) if from_jid else None
        to_jid = self._element.get('to')
        self._to_jid = JID(to_jid) if to_jid else None
        self._stanza_type = self._element.get('type')
        self._stanza_id = self._element.get('id')
        self._language = self._element.get(XML_LANG_QNAME)

    def _child_text(self, name):
        """Return text of the first stanza-namespace child named `name`,
        `None` if there is no such child."""
        child = self._element.find(self._ns_prefix + name)
        if child is None:
            return None
        return child.text or u""

    def __repr__(self):
        return "<{0} from={1!r} to={2!r} type={3!r} id={4!r}>".format(
                        self.__class__.__name__, self._from_jid, self._to_jid,
                        self._stanza_type, self._stanza_id)

    def __str__(self):
        return self.serialize()

    def serialize(self):
        """Serialize the stanza into an XML string.

        :return: serialized stanza.
        :returntype: `str`"""
        return serialize(self.get_xml())

    def as_xml(self):
        """Return the XML stanza representation.

        Always return an independent copy of the stanza XML representation,
        which can be freely modified without affecting the stanza.

        :returntype: :etree:`ElementTree.Element`"""
        attrs = {}
        if self._from_jid:
            attrs['from'] = str(self._from_jid)
        if self._to_jid:
            attrs['to'] = str(self._to_jid)
        if self._stanza_type:
            attrs['type'] = self._stanza_type
        if self._stanza_id:
            attrs['id'] = self._stanza_id
        if self._language:
            attrs[XML_LANG_QNAME] = self._language
        element = ElementTree.Element(self._element_qname, attrs)
        self._add_children(element)
        return element

    def _add_children(self, element):
        """Append the stanza content to `element` built by `as_xml`.

        Parsed stanzas copy the children of the original element."""
        if self._element is not None:
            for child in self._element:
                element.append(child)

    def get_xml(self):
        """Return the XML stanza representation.

        This returns the original or cached XML representation, which
        may be much more efficient than `as_xml`.

        Result of this function should never be modified.

        :returntype: :etree:`ElementTree.Element`"""
        if self._element is None:
            self._element = self.as_xml()
        return self._element

    @property
    def from_jid(self):
        # pylint: disable-msg=C0111
        return self._from_jid

    @property
    def to_jid(self):
        # pylint: disable-msg=C0111
        return self._to_jid

    @property
    def stanza_type(self):
        # pylint: disable-msg=C0111
        return self._stanza_type

    @property
    def stanza_id(self):
        # pylint: disable-msg=C0111
        return self._stanza_id

    @property
    def language(self):
        # pylint: disable-msg=C0111
        return self._language

# vi: sts=4 et sw=4
