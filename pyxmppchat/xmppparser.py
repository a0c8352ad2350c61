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

"""XMPP stream parser.

The parser is fed with chunks of raw data read from the network and reports
the stream root start tag, every complete direct child of the root element
and the root end tag to an `XMLStreamHandler`."""

__docformat__ = "restructuredtext en"

import threading
import logging

from .etree import ElementTree
from .exceptions import ReadError

logger = logging.getLogger("pyxmppchat.xmppparser")

class XMLStreamHandler(object):
    """Base class for stream handler, used as a target for XMPP parser
    or other stream parsers."""
    def stream_start(self, element):
        """Called when the start tag of root element is encountered
        in the stream.

        :Parameters:
            - `element`: the root element
        :Types:
            - `element`: :etree:`ElementTree.Element`"""
        logger.error("Unhandled stream start: {0!r}".format(element))

    def stream_end(self):
        """Called when the end tag of root element is encountered
        in the stream.
        """
        logger.error("Unhandled stream end")

    def stream_element(self, element):
        """Called when the end tag of a direct child of the root
        element is encountered in the stream.

        :Parameters:
            - `element`: the (complete) element being processed
        :Types:
            - `element`: :etree:`ElementTree.Element`"""
        logger.error("Unhandled stanza: {0!r}".format(element))

class ParserTarget(object):
    """Element tree parser events handler for the XMPP stream parser."""
    def __init__(self, handler):
        """Initialize the SAX handler.

        :Parameters:
            - `handler`: Object to handle stream start, end and stanzas.
        :Types:
            - `handler`: `XMLStreamHandler`
        """
        self._handler = handler
        self._builder = None
        self._level = 0
        self._root = None

    def data(self, data):
        """Handle XML text data.

        Ignore the data outside the stanzas (whitespace keep-alives)."""
        if self._level > 1:
            self._builder.data(data)

    def start(self, tag, attrs):
        """Handle the start tag.

        Call the handler's 'stream_start' method for the root element
        and start building a new element tree for every stanza."""
        if self._level == 0:
            self._root = ElementTree.Element(tag, attrs)
            self._handler.stream_start(self._root)
        else:
            if self._level == 1:
                self._builder = ElementTree.TreeBuilder()
            self._builder.start(tag, attrs)
        self._level += 1

    def end(self, tag):
        """Handle the end tag.

        Call the handler's 'stream_end' method for an the root element (level
        0) or the 'stream_element' method for a complete stanza (level 1)."""
        self._level -= 1
        if self._level == 0:
            self._handler.stream_end()
            return
        element = self._builder.end(tag)
        if self._level == 1:
            self._builder = None
            self._handler.stream_element(element)

    def close(self):
        """Handle the stream end."""
        pass

class StreamReader(object):
    """XML stream reader.

    :Ivariables:
        - `handler`: object to receive the stream events
        - `parser`: the underlying ElementTree push parser
        - `lock`: lock protecting the object
        - `in_use`: re-entrance protection flag
    """
    def __init__(self, handler):
        """Initialize the reader.

        :Parameters:
            - `handler`: Object to handle stream start, end and stanzas.
        :Types:
            - `handler`: `XMLStreamHandler`
        """
        self.handler = handler
        self.parser = ElementTree.XMLParser(target = ParserTarget(handler))
        self.lock = threading.RLock()
        self.in_use = False
        self._closed = False

    def feed(self, data):
        """Feed the parser with a chunk of data.

        An empty chunk means end of input.

        :Parameters:
            - `data`: raw data read from the network
        :Types:
            - `data`: `bytes`

        :Raise ReadError: when the data is not well-formed XML.
        """
        with self.lock:
            if self.in_use:
                raise RuntimeError("StreamReader.feed() is not reentrant!")
            self.in_use = True
            try:
                if self._closed:
                    return
                if data:
                    self.parser.feed(data)
                else:
                    self._closed = True
                    self.parser.close()
            except ElementTree.ParseError as err:
                self._closed = True
                raise ReadError(u"Stream not well-formed: {0}".format(err))
            finally:
                self.in_use = False

# vi: sts=4 et sw=4
