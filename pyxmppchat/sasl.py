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

"""SASL authentication, client side.

Only the PLAIN mechanism is provided, other mechanisms may be added to the
registry with the `sasl_mechanism` decorator.

Normative reference:
  - `RFC 4422 <http://www.ietf.org/rfc/rfc4422.txt>`__
  - `RFC 4616 <http://www.ietf.org/rfc/rfc4616.txt>`__
"""

__docformat__ = "restructuredtext en"

import logging

from abc import ABCMeta, abstractmethod
from base64 import standard_b64encode

logger = logging.getLogger("pyxmppchat.sasl")

CLIENT_MECHANISMS_D = {}
CLIENT_MECHANISMS = []

class Reply(object):
    """Base class for SASL authentication reply objects.

    :Ivariables:
        - `data`: optional reply data.
    :Types:
        - `data`: `bytes`
    """
    # pylint: disable-msg=R0903
    def __init__(self, data = None):
        """Initialize the `Reply` object.

        :Parameters:
            - `data`: optional reply data.
        :Types:
            - `data`: `bytes`
        """
        self.data = data

    def encode(self):
        """Base64-encode the data contained in the reply when appropriate.

        :return: encoded data.
        :returntype: `str`
        """
        if self.data is None:
            return ""
        elif not self.data:
            return "="
        else:
            ret = standard_b64encode(self.data)
            return ret.decode("us-ascii")

class Response(Reply):
    """The response SASL message (clients's reply the server's
    challenge)."""
    # pylint: disable-msg=R0903
    def __repr__(self):
        return "<sasl.Response: {0!r}>".format(self.data)

class ClientAuthenticator(metaclass = ABCMeta):
    """Base class for client authenticators.

    A client authenticator class is a client-side implementation of a SASL
    mechanism. One `ClientAuthenticator` object may be used for one
    client authentication process.
    """
    @classmethod
    def are_properties_sufficient(cls, properties):
        """Check if the provided properties are sufficient for
        this authentication mechanism.

        :Parameters:
            - `properties`: the authentication properties
        :Types:
            - `properties`: mapping

        :Return: if the mechanism can be used with those properties
        """
        # pylint: disable=W0613
        return False

    @abstractmethod
    def start(self, properties):
        """Start the authentication process.

        :Parameters:
            - `properties`: the authentication properties
        :Types:
            - `properties`: mapping

        :return: the initial response to send to the server.
        :returntype: `Response`
        """
        raise NotImplementedError

def sasl_mechanism(name):
    """Class decorator generator for `ClientAuthenticator` subclasses. Adds
    the class to the mechanism registry.

    :Parameters:
        - `name`: SASL mechanism name
    :Types:
        - `name`: `str`
    """
    def decorator(klass):
        """The decorator."""
        if not issubclass(klass, ClientAuthenticator):
            raise TypeError("Not a ClientAuthenticator")
        CLIENT_MECHANISMS_D[name] = klass
        if name not in CLIENT_MECHANISMS:
            CLIENT_MECHANISMS.append(name)
        return klass
    return decorator

def client_authenticator_factory(mechanism):
    """Create a client authenticator object for given SASL mechanism.

    :Parameters:
        - `mechanism`: name of the SASL mechanism
    :Types:
        - `mechanism`: `str`

    :raises `KeyError`: if no client authenticator is available for this
              mechanism

    :return: new authenticator.
    :returntype: `ClientAuthenticator`"""
    authenticator = CLIENT_MECHANISMS_D[mechanism]
    return authenticator()

@sasl_mechanism("PLAIN")
class PlainClientAuthenticator(ClientAuthenticator):
    """Provides PLAIN SASL authentication for a client.

    Authentication properties used:

        - ``"username"`` - user name (required)
        - ``"password"`` - the password (required)
        - ``"authzid"`` - authorization id (optional)
    """
    def __init__(self):
        ClientAuthenticator.__init__(self)
        self.username = None
        self.password = None
        self.authzid = None
        self.properties = None

    @classmethod
    def are_properties_sufficient(cls, properties):
        return "username" in properties and "password" in properties

    def start(self, properties):
        self.properties = properties
        self.username = properties["username"]
        self.password = properties["password"]
        self.authzid = properties.get("authzid") or u""
        logger.debug(u"PLAIN credentials for {0!r}".format(self.username))
        return Response(b"\000".join((self.authzid.encode("utf-8"),
                            self.username.encode("utf-8"),
                            self.password.encode("utf-8"))))

# vi: sts=4 et sw=4
