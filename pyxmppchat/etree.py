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

"""ElementTree API selection.

The rest of the package imports the ElementTree API from this module.

By default the standard Python ElementTree implementation is used
(`xml.etree.ElementTree`). A different, API-compatible module may be selected
with the 'PYXMPPCHAT_ETREE' environment variable, e.g.:

    $ PYXMPPCHAT_ETREE="lxml.etree"
"""

__docformat__ = "restructuredtext en"

import os

if "PYXMPPCHAT_ETREE" in os.environ:
    ElementTree = __import__(os.environ["PYXMPPCHAT_ETREE"], fromlist=[""])
else:
    from xml.etree import ElementTree

def element_to_unicode(element):
    """Serialize an XML element into a unicode string.

    Used for logging and debugging only, the stream content is serialized
    by the `xmppserializer.XMPPSerializer`.

    :Parameters:
        - `element`: the element to serialize
    :Types:
        - `element`: :etree:`ElementTree.Element`

    :Returntype: `str`
    """
    return ElementTree.tostring(element, encoding = "unicode")

def local_name(element):
    """Return the tag name of `element` without the namespace part."""
    tag = element.tag
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag

# vi: sts=4 et sw=4
