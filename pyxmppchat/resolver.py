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

"""DNS resolver with SRV record support.

Normative reference:
  - `RFC 1035 <http://www.ietf.org/rfc/rfc1035.txt>`__
  - `RFC 2782 <http://www.ietf.org/rfc/rfc2782.txt>`__
  - `RFC 6120 <http://xmpp.org/rfcs/rfc6120.html>`__
"""

__docformat__ = "restructuredtext en"

import re
import random
import logging

import dns.resolver
import dns.exception

from .settings import XMPPSettings
from .exceptions import DNSError

logger = logging.getLogger("pyxmppchat.resolver")

# should match all valid IP addresses, but can pass some false-positives,
# which are not valid domain names
IPV4_RE = re.compile(r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}$")
IPV6_RE = re.compile(r"^\[?[0-9a-fA-F]{0,4}:[0-9a-fA-F:.]*\]?$")

def shuffle_srv(records):
    """Randomly reorder SRV records using their weights.

    :Parameters:
        - `records`: SRV records to shuffle.
    :Types:
        - `records`: sequence of :dns:`dns.rdtypes.IN.SRV`

    :return: reordered records.
    :returntype: `list` of :dns:`dns.rdtypes.IN.SRV`"""
    if not records:
        return []
    records = list(records)
    ret = []
    while len(records) > 1:
        weight_sum = 0
        for rrecord in records:
            weight_sum += rrecord.weight + 0.1
        thres = random.random() * weight_sum
        weight_sum = 0
        for rrecord in records:
            weight_sum += rrecord.weight + 0.1
            if thres < weight_sum:
                records.remove(rrecord)
                ret.append(rrecord)
                break
    ret.append(records[0])
    return ret

def reorder_srv(records):
    """Reorder SRV records using their priorities and weights.

    :Parameters:
        - `records`: SRV records to shuffle.
    :Types:
        - `records`: `list` of :dns:`dns.rdtypes.IN.SRV`

    :return: reordered records.
    :returntype: `list` of :dns:`dns.rdtypes.IN.SRV`"""
    records = sorted(records, key = lambda rrecord: rrecord.priority)
    ret = []
    tmp = []
    for rrecord in records:
        if not tmp or rrecord.priority == tmp[0].priority:
            tmp.append(rrecord)
            continue
        ret += shuffle_srv(tmp)
        tmp = [rrecord]
    if tmp:
        ret += shuffle_srv(tmp)
    return ret

def resolve_srv(domain, service, proto = "tcp"):
    """Resolve service domain to server name and port number using SRV
    records.

    :Parameters:
        - `domain`: domain name.
        - `service`: service name.
        - `proto`: protocol name.
    :Types:
        - `domain`: `str`
        - `service`: `str`
        - `proto`: `str`

    :return: host names and port numbers for the service or None.
    :returntype: `list` of (`str`, `int`)

    :raise DNSError: when the domain explicitly declares the service as
        not available (a single "." target).
    """
    name = u"_{0}._{1}.{2}".format(service, proto, domain)
    name = name.encode("idna").decode("ascii")
    logger.debug("Looking up {0!r} SRV records".format(name))
    try:
        answer = dns.resolver.resolve(name, "SRV")
    except dns.exception.DNSException as err:
        logger.debug("SRV lookup failed: {0}".format(err))
        return None
    if not answer:
        return None
    records = list(answer)
    if len(records) == 1 and records[0].target.to_text() == ".":
        raise DNSError("Service {0!r} not available for domain {1!r}"
                                                    .format(service, domain))
    result = []
    for rrecord in reorder_srv(records):
        host = rrecord.target.to_text(omit_final_dot = True)
        result.append((host, rrecord.port))
    logger.debug("SRV result: {0!r}".format(result))
    return result

def get_server_addresses(domain, settings = None):
    """Return the list of (host, port) pairs to try when connecting to
    the server serving `domain`.

    The 'server' setting takes precedence. Otherwise, when 'use_srv' is set
    and `domain` is not an IP address, the 'c2s_service' SRV records are
    looked up. When that gives nothing the domain itself is used with the
    'c2s_port' port.

    :Parameters:
        - `domain`: the JID domain part
        - `settings`: connection settings
    :Types:
        - `domain`: `str`
        - `settings`: `XMPPSettings`

    :returntype: `list` of (`str`, `int`)
    """
    if settings is None:
        settings = XMPPSettings()
    port = settings["c2s_port"]
    server = settings["server"]
    if server:
        return [(server, port)]
    if (settings["use_srv"] and not IPV4_RE.match(domain)
                                            and not IPV6_RE.match(domain)):
        addrs = resolve_srv(domain, settings["c2s_service"])
        if addrs:
            return addrs
    return [(domain, port)]

XMPPSettings.add_setting(u"c2s_port", default = 5222, basic = True,
    type = int, validator = XMPPSettings.get_int_range_validator(1, 65536),
    doc = u"""Port number for client to server connections."""
    )
XMPPSettings.add_setting(u"c2s_service", default = u"xmpp-client",
    type = str,
    doc = u"""SRV service name for client to server connections."""
    )
XMPPSettings.add_setting(u"server", type = str, basic = True,
    doc = u"""Server address to connect to. By default a DNS SRV record look-up
is done for the requested JID domain part and if that fails the domain itself
is used. This setting may be used to force using a specific server or when SRV
look-ups are not available."""
    )
XMPPSettings.add_setting(u"use_srv", type = bool, default = True,
    validator = XMPPSettings.validate_bool,
    doc = u"""Use DNS SRV records to find the server when 'server' is not
set."""
    )

# vi: sts=4 et sw=4
