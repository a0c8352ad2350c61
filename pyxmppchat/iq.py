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

"""Iq XMPP stanza handling

Normative reference:
  - `RFC 6120 <http://xmpp.org/rfcs/rfc6120.html>`__
"""

__docformat__ = "restructuredtext en"

from .constants import STANZA_ERROR_QNP
from .etree import local_name
from .stanza import Stanza

IQ_TYPES = ("get", "set", "result", "error")

class Iq(Stanza):
    """<iq /> stanza class.

    :Properties:
        - `payload`: the first child element of the stanza (other than
          <error/>), `None` if there is none
        - `error_condition`: name of the error condition of an
          'error' stanza
    :Types:
        - `payload`: :etree:`ElementTree.Element`
        - `error_condition`: `str`
    """
    element_name = "iq"
    stanza_types = IQ_TYPES
    def __init__(self, element = None, from_jid = None, to_jid = None,
                            stanza_type = None, stanza_id = None,
                            payload = None):
        """Initialize an `Iq` object.

        :Parameters:
            - `element`: XML element of this stanza.
            - `from_jid`: sender JID.
            - `to_jid`: recipient JID.
            - `stanza_type`: staza type: one of: "get", "set", "result" or
              "error".
            - `stanza_id`: stanza id -- value of stanza's "id" attribute.
            - `payload`: the single child element, as an XML element or an
              object with the `as_xml` method
        :Types:
            - `element`: :etree:`ElementTree.Element`
            - `from_jid`: `JID`
            - `to_jid`: `JID`
            - `stanza_type`: `str`
            - `stanza_id`: `str`
        """
        # pylint: disable-msg=R0913
        Stanza.__init__(self, element, from_jid = from_jid, to_jid = to_jid,
                        stanza_type = stanza_type, stanza_id = stanza_id)
        if self._stanza_type is None:
            raise ValueError(u"Iq stanza without a type")
        self._error_condition = None
        if element is not None:
            self._payload = None
            error_qname = self._ns_prefix + "error"
            for child in element:
                if child.tag == error_qname:
                    self._decode_error(child)
                elif self._payload is None:
                    self._payload = child
        else:
            if payload is not None and hasattr(payload, "as_xml"):
                payload = payload.as_xml()
            self._payload = payload

    def _decode_error(self, error):
        """Get the error condition name from the <error/> element."""
        for child in error:
            if child.tag.startswith(STANZA_ERROR_QNP) and (
                                                local_name(child) != "text"):
                self._error_condition = local_name(child)
                return
        self._error_condition = u"undefined-condition"

    def _add_children(self, element):
        if self._payload is not None:
            element.append(self._payload)

    @property
    def payload(self):
        # pylint: disable-msg=C0111
        return self._payload

    @property
    def error_condition(self):
        # pylint: disable-msg=C0111
        return self._error_condition

# vi: sts=4 et sw=4
