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
# pylint: disable-msg=W0201

"""General settings container.

The behaviour of the client may be controlled by a number of parameters,
like server address, resource name, timeouts, etc. Passing all of them
directly via function parameters would only mess up the API.

Instead an `XMPPSettings` object is used to pass all the optional
parameters. It also provides the documented defaults. Modules register
the settings they use with `XMPPSettings.add_setting` at import time.
"""

__docformat__ = "restructuredtext en"

from collections.abc import MutableMapping

class _SettingDefinition(object):
    """Definition of a single setting: its type, default and documentation."""
    # pylint: disable-msg=R0902,R0903
    def __init__(self, name, type = str, default = None, factory = None,
                        cache = False, default_d = None, doc = None,
                        validator = None, basic = False):
        # pylint: disable-msg=W0622,R0913
        self.name = name
        self.type = type
        self.default = default
        self.factory = factory
        self.cache = cache
        self.default_d = default_d
        self.doc = doc
        self.basic = basic
        self.validator = validator

class XMPPSettings(MutableMapping):
    """Container for various parameters used all over the package.

    It can be used like a regular dictionary, but will provide reasonable
    defaults for parameters which are not explicitely set.

    Values set are validated with the validator registered for the setting
    (if any), so bad values are rejected early with `ValueError`.

    :CVariables:
        - `_defs`: definitions of the known settings.
    :Ivariables:
        - `_settings`: current values of the parameters explicitely set.
    """
    _defs = {}
    def __init__(self, data = None):
        """Create settings, optionally initialized with `data`.

        :Parameters:
            - `data`: initial data
        :Types:
            - `data`: any mapping, including `XMPPSettings`
        """
        self._settings = {}
        if data is not None:
            for key, value in dict(data).items():
                self[key] = value

    def __len__(self):
        """Number of parameters set."""
        return len(self._settings)

    def __iter__(self):
        """Iterate over the parameter names."""
        return iter(list(self._settings))

    def __contains__(self, key):
        """Check if a parameter is set.

        :Parameters:
            - `key`: the parameter name
        :Types:
            - `key`: `str`
        """
        return key in self._settings

    def __getitem__(self, key):
        """Get a parameter value. Return the default if no value is set
        and the default is provided by the package.

        :Parameters:
            - `key`: the parameter name
        :Types:
            - `key`: `str`
        """
        return self.get(key, required = True)

    def __setitem__(self, key, value):
        """Set a parameter value.

        :Parameters:
            - `key`: the parameter name
            - `value`: the new value
        :Types:
            - `key`: `str`

        :Raise ValueError: when the value is rejected by the setting's
            validator.
        """
        key = str(key)
        setting_def = self._defs.get(key)
        if (setting_def is not None and setting_def.validator is not None
                                                        and value is not None):
            value = setting_def.validator(value)
        self._settings[key] = value

    def __delitem__(self, key):
        """Unset a parameter value.

        :Parameters:
            - `key`: the parameter name
        :Types:
            - `key`: `str`
        """
        del self._settings[key]

    def get(self, key, local_default = None, required = False):
        """Get a parameter value.

        If parameter is not set, return `local_default` if it is not `None`
        or the global default otherwise.

        :Raise `KeyError`: if parameter has no value and no global default

        :Return: parameter value
        """
        # pylint: disable-msg=W0221
        if key in self._settings:
            return self._settings[key]
        if local_default is not None:
            return local_default
        if key in self._defs:
            setting_def = self._defs[key]
            if setting_def.default is not None:
                return setting_def.default
            factory = setting_def.factory
            if factory is None:
                return None
            value = factory(self)
            if setting_def.cache is True:
                setting_def.default = value
            return value
        if required:
            raise KeyError(key)
        return local_default

    def keys(self):
        """Return names of parameters set.

        :Returntype: - `list` of `str`
        """
        return list(self._settings.keys())

    def items(self):
        """Return names and values of parameters set.

        :Returntype: - `list` of tuples
        """
        return list(self._settings.items())

    @classmethod
    def add_setting(cls, name, **kwargs):
        """Register a new setting.

        Registering the same setting twice is allowed only with the same
        type and default.
        """
        setting_def = _SettingDefinition(name, **kwargs)
        if name not in cls._defs:
            cls._defs[name] = setting_def
            return
        duplicate = cls._defs[name]
        if duplicate.type != setting_def.type:
            raise ValueError("Setting duplicate, with a different type")
        if duplicate.default != setting_def.default:
            raise ValueError("Setting duplicate, with a different default")
        if duplicate.factory != setting_def.factory:
            raise ValueError("Setting duplicate, with a different factory")

    @staticmethod
    def validate_string_list(value):
        """Accept a list of strings or a comma-separated string."""
        if isinstance(value, (list, tuple)):
            return [str(x).strip() for x in value]
        try:
            return [x.strip() for x in value.split(u",")]
        except (AttributeError, TypeError):
            raise ValueError("Bad string list")

    @staticmethod
    def validate_positive_int(value):
        value = int(value)
        if value <= 0:
            raise ValueError("Positive number required")
        return value

    @staticmethod
    def validate_positive_float(value):
        value = float(value)
        if value <= 0:
            raise ValueError("Positive number required")
        return value

    @staticmethod
    def validate_bool(value):
        if isinstance(value, str):
            lvalue = value.lower()
            if lvalue in ("1", "yes", "true", "on"):
                return True
            if lvalue in ("0", "no", "false", "off"):
                return False
            raise ValueError("Boolean value required")
        return bool(value)

    @staticmethod
    def get_int_range_validator(start, stop):
        """Return a validator accepting integers in the <start, stop)
        range."""
        def validate_int_range(value):
            value = int(value)
            if value >= start and value < stop:
                return value
            raise ValueError("Not in <{0},{1}) range".format(start, stop))
        return validate_int_range

XMPPSettings.add_setting(u"language", default = u"en",
        doc = u"""The language ('xml:lang') of the stream."""
    )

# vi: sts=4 et sw=4
