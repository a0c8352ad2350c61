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

"""XMPP chat client library.

A small client implementation of the XMPP protocol, covering what a
one-to-one chat client with a roster needs: stream negotiation with SASL
PLAIN authentication and resource binding, presence, roster management,
chat messages and an orderly stream close.

The main entry point is `pyxmppchat.connection.Connection`. The application
receives the events by implementing the listener classes from
`pyxmppchat.interfaces`, the roster and the conversations are kept in
a `pyxmppchat.model.ContactDirectory`.

Normative reference:
  - `RFC 6120 <http://xmpp.org/rfcs/rfc6120.html>`__
  - `RFC 6121 <http://xmpp.org/rfcs/rfc6121.html>`__
"""

__docformat__ = "restructuredtext en"

from .version import version as __version__ # pylint: disable=F0401

# vi: sts=4 et sw=4
