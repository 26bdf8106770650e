#
# azshortcuts/_scfg.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
"scfg" is short for "shortcuts configuration".
This manages the settings in the defaults section of the config file.

Example ~/.azshortcuts.yaml:
    defaults:
      location_default: westus2
      call_max_attempts: 3
      list_errors_empty: false
'''
import threading

import azshortcuts._paths
from azshortcuts.base_defaults import EXC_VALUE_DEFAULT
from azshortcuts.btypes import ReadOnlyDict
import azshortcuts.clouds
from azshortcuts.exceptions import SchemaError
import azshortcuts.util

class _Scfg():
    '''
    Manage scfg values
    '''
    def __init__(self):
        self._vlock = threading.RLock()
        self._vfilename = None
        self._vdata = None

        # Hook for unit testing. Do not use this in production.
        self.test_values = dict()

    def reset(self):
        '''
        Discard cached data. Useful for unit testing.
        '''
        with self._vlock:
            self._vfilename = None
            self._vdata = None
            self.test_values = dict()

    def _load_iff_necessary(self, exc_value=SchemaError):
        '''
        Load data iff not already loaded
        '''
        with self._vlock:
            if self._vdata is None:
                p = azshortcuts._paths.paths # pylint: disable=protected-access
                filename = p.config_filename
                data = p.config_dict_from_data(filename, p.config_data, 'defaults', exc_value=exc_value)
                required = set(self._REQUIRED)
                vdata = self._data_validate(data, required=required, exc_value=exc_value)
                if required:
                    raise exc_value("%s missing value(s): %s" % (filename, ','.join(sorted(required))))
                self._vdata = vdata
                self._vfilename = filename

    # Nothing is mandatory; the library runs with an empty config.
    _REQUIRED = set()

    def _data_validate(self, data, hnamestack='_dh', unamestack='defaults', required=None, exc_value=EXC_VALUE_DEFAULT):
        '''
        data is a dict as loaded from the config
        validate the contents and return them.
        Validation is allowed to update the contents.

        We iterate through the dict recursively. For each value we look
        for a custom handler named from hnamestack (_dh__key__subkey).
        If there is one, it validates the value. Otherwise bool, int, float,
        and str are accepted as-is and dict/list recurse.
        unamestack is the user-facing name (defaults[key][subkey]).
        '''
        if required:
            required.discard(unamestack)
        handler = getattr(self, hnamestack, None)
        if handler:
            return handler(data, hnamestack, unamestack, required, exc_value)
        if isinstance(data, (bool, int, float, str)):
            return data
        if isinstance(data, dict):
            return ReadOnlyDict({kk : self._data_validate(vv, unamestack=f'{unamestack}[{kk}]', hnamestack=f'{hnamestack}__{kk}', required=required, exc_value=exc_value) for kk, vv in data.items()})
        if isinstance(data, list):
            return tuple(self._data_validate(vv, unamestack=f'{unamestack}[{idx}]', hnamestack=f'{hnamestack}__contents', required=required, exc_value=exc_value) for idx, vv in enumerate(data))
        raise exc_value("%s has unexpected type %s" % (unamestack, type(data)))

    @staticmethod
    def _dh__tenant_id_default(value, hnamestack, unamestack, required, exc_value): # pylint: disable=unused-argument
        '''
        Validate tenant_id_default as a UUID
        '''
        return azshortcuts.util.uuid_normalize(value, key=unamestack, exc_value=exc_value)

    @staticmethod
    def _positive_int(value, unamestack, exc_value):
        if isinstance(value, bool) or (not isinstance(value, int)):
            raise exc_value(f"{unamestack} must be an integer, not {type(value)}")
        if value < 1:
            raise exc_value(f"{unamestack} must be positive")
        return value

    @classmethod
    def _dh__call_max_attempts(cls, value, hnamestack, unamestack, required, exc_value): # pylint: disable=unused-argument
        return cls._positive_int(value, unamestack, exc_value)

    @classmethod
    def _dh__call_max_attempts_throttle(cls, value, hnamestack, unamestack, required, exc_value): # pylint: disable=unused-argument
        return cls._positive_int(value, unamestack, exc_value)

    @staticmethod
    def _dh__list_errors_empty(value, hnamestack, unamestack, required, exc_value): # pylint: disable=unused-argument
        '''
        Accept yaml bools and the usual strings
        '''
        try:
            return azshortcuts.util.truthy(value)
        except (TypeError, ValueError) as exc:
            raise exc_value(f"{unamestack}: {exc}") from exc

    @staticmethod
    def _seconds(value, unamestack, exc_value):
        if isinstance(value, bool) or (not isinstance(value, (int, float))):
            raise exc_value(f"{unamestack} must be a number of seconds, not {type(value)}")
        if value <= 0:
            raise exc_value(f"{unamestack} must be positive")
        return value

    @classmethod
    def _dh__lro_poll_interval(cls, value, hnamestack, unamestack, required, exc_value): # pylint: disable=unused-argument
        return cls._seconds(value, unamestack, exc_value)

    @classmethod
    def _dh__lro_timeout(cls, value, hnamestack, unamestack, required, exc_value): # pylint: disable=unused-argument
        return cls._seconds(value, unamestack, exc_value)

    @staticmethod
    def _dh__cloud(value, hnamestack, unamestack, required, exc_value): # pylint: disable=unused-argument
        '''
        Must name a known cloud. Keep the name; clouds.cloud_get() maps it.
        '''
        azshortcuts.clouds.cloud_get(value, exc_value=exc_value)
        return value

    @staticmethod
    def _key_valid(name):
        '''
        Return whether the given name is valid as a config key
        '''
        if not isinstance(name, str):
            return False
        if not name:
            return False
        if name.startswith('_'):
            return False
        return True

    def __getattr__(self, name):
        if not self._key_valid(name):
            raise AttributeError("%r object has no attribute %r; check configuration file %s" % (type(self).__name__, name, self._vfilename))
        with self._vlock:
            if name in self.test_values:
                return self.test_values[name]
            self._load_iff_necessary()
            if name in self._vdata:
                return self._vdata[name]
            raise AttributeError("%r object has no attribute %r; check configuration file %s" % (type(self).__name__, name, self._vfilename))

    def to_dict(self) -> dict:
        '''
        Return scfg contents in dict form
        '''
        with self._vlock:
            self._load_iff_necessary()
            ret = dict(self._vdata)
            ret.update(self.test_values)
            return ret

    def get(self, name, defaultvalue):
        '''
        If name is set in the config, return the corresponding value.
        If name is not set in the config, return defaultvalue.
        If name is not valid, just returns defaultvalue.
        '''
        if not self._key_valid(name):
            return defaultvalue
        with self._vlock:
            try:
                return self.test_values[name]
            except KeyError:
                pass
            self._load_iff_necessary()
            return self._vdata.get(name, defaultvalue)

    def tget(self, key, dtype, exc_value=EXC_VALUE_DEFAULT):
        '''
        key is a key in scfg (dict)
        dtype is a type
        If key is not in the config, returns dtype().
        If key is in the config and the value is an instance of dtype, returns the value.
        Otherwise raises an error about value not matching dtype.
        '''
        if not self._key_valid(key):
            return dtype()
        with self._vlock:
            try:
                return self.test_values[key]
            except KeyError:
                pass
            self._load_iff_necessary()
            try:
                ret = self._vdata[key]
            except KeyError:
                return dtype()
            if not isinstance(ret, dtype):
                raise exc_value(f"{self._vfilename!r}[{key!r}] has unexpected type {type(ret)}")
            return ret

scfg = _Scfg()
