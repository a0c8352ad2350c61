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

"""Message XMPP stanza handling

Normative reference:
  - `RFC 6121 <http://xmpp.org/rfcs/rfc6121.html>`__
"""

__docformat__ = "restructuredtext en"

from .etree import ElementTree
from .stanza import Stanza

MESSAGE_TYPES = ("chat", "error", "groupchat", "headline", "normal")

class Message(Stanza):
    """<message /> stanza class.

    A message without the 'type' attribute is a "normal" message.

    :Properties:
        - `body`: the message body
        - `subject`: the message subject
        - `thread`: the message thread id
    :Types:
        - `body`: `str`
        - `subject`: `str`
        - `thread`: `str`
    """
    element_name = "message"
    stanza_types = MESSAGE_TYPES
    def __init__(self, element = None, from_jid = None, to_jid = None,
                            stanza_type = None, stanza_id = None,
                            language = None, subject = None, body = None,
                            thread = None):
        """Initialize a `Message` object.

        :Parameters:
            - `element`: XML element of this stanza.
            - `from_jid`: sender JID.
            - `to_jid`: recipient JID.
            - `stanza_type`: staza type: one of: "normal", "chat", "headline",
              "error", "groupchat"
            - `stanza_id`: stanza id -- value of stanza's "id" attribute.
            - `language`: the 'xml:lang' of the message
            - `subject`: message subject,
            - `body`: message body.
            - `thread`: message thread id.
        :Types:
            - `element`: :etree:`ElementTree.Element`
            - `from_jid`: `JID`
            - `to_jid`: `JID`
            - `stanza_type`: `str`
            - `stanza_id`: `str`
            - `language`: `str`
            - `subject`: `str`
            - `body`: `str`
            - `thread`: `str`
        """
        # pylint: disable-msg=R0913
        Stanza.__init__(self, element, from_jid = from_jid, to_jid = to_jid,
                        stanza_type = stanza_type, stanza_id = stanza_id,
                        language = language)
        if self._stanza_type is None:
            self._stanza_type = u"normal"
        if element is not None:
            self._subject = self._child_text("subject")
            self._body = self._child_text("body")
            self._thread = self._child_text("thread")
        else:
            self._subject = subject
            self._body = body
            self._thread = thread

    def _add_children(self, element):
        for name in ("subject", "body", "thread"):
            value = getattr(self, "_" + name)
            if value is not None:
                child = ElementTree.SubElement(element, self._ns_prefix + name)
                child.text = value

    @property
    def body(self):
        # pylint: disable-msg=C0111
        return self._body

    @property
    def subject(self):
        # pylint: disable-msg=C0111
        return self._subject

    @property
    def thread(self):
        # pylint: disable-msg=C0111
        return self._thread

# vi: sts=4 et sw=4
