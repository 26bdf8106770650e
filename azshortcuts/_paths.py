#
# azshortcuts/_paths.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Support for locating and loading the configuration file

Environment variables:
  AZSHORTCUTS_CONFIG - location of the YAML configuration file (default ~/.azshortcuts.yaml)
'''
import copy
import os
import threading

import yaml

from azshortcuts.base_defaults import (CONFIG_FILENAME_DEFAULT,
                                       CONFIG_FILENAME_ENV,
                                       EXC_VALUE_DEFAULT,
                                      )
from azshortcuts.exceptions import ApplicationExit

class Paths():
    '''
    Manage finding/caching the config file.
    This is expected to be a singleton in non-unit-testing environments.
    '''
    def __init__(self):
        self._config_lock = threading.RLock()
        self._config_path = None
        self._config_data = None

    def reset(self, config_filename='', config_data=None):
        '''
        Discard cached content. Useful for unit testing.
        '''
        with self._config_lock:
            self._config_path = None
            self._config_data = None
            if config_filename:
                self._config_path_set(config_filename)
            if config_data is not None:
                if not self._config_path:
                    self._config_path_set('<memory>')
                self._config_data_set(config_data)

    ######################################################################
    # config_filename

    @property
    def config_filename(self):
        '''
        Getter for config filename
        '''
        with self._config_lock:
            if self._config_path:
                return self._config_path
            self._config_path = self._config_find()
            return self._config_path

    @config_filename.setter
    def config_filename(self, path):
        '''
        Setter for config filename
        '''
        with self._config_lock:
            if self._config_path:
                raise ValueError("config_filename already set")
            self._config_path_set(path)

    @staticmethod
    def _config_find():
        '''
        Return the config path to use. Does not check that it exists.
        '''
        path = os.environ.get(CONFIG_FILENAME_ENV, '')
        if path:
            return path
        return os.path.expanduser(CONFIG_FILENAME_DEFAULT)

    def _config_path_set(self, path):
        '''
        Set the config filename
        '''
        with self._config_lock:
            if not isinstance(path, str):
                raise TypeError("path must be str, not %s" % type(path))
            if not path:
                raise ValueError("invalid (empty) path")
            self._config_path = path

    ######################################################################
    # config_data

    # _cd_cache: cache the parsed contents by filename
    _cd_cache = {} # key=path value=data

    @property
    def config_data(self):
        '''
        Read, parse, and cache the config file.
        A missing file is an empty config unless
        the filename was named explicitly in the environment.
        '''
        with self._config_lock:
            if self._config_data is not None:
                assert isinstance(self._config_data, dict)
                return self._config_data
            filename = self.config_filename
            data = self._cd_cache.get(filename, None)
            if not isinstance(data, dict):
                try:
                    with open(filename, 'r') as f:
                        contents = f.read()
                except FileNotFoundError as exc:
                    if os.environ.get(CONFIG_FILENAME_ENV, ''):
                        raise ApplicationExit("config file %r not found" % filename) from exc
                    contents = ''
                try:
                    data = yaml.safe_load(contents)
                except yaml.error.MarkedYAMLError as exc:
                    raise ApplicationExit(f"cannot parse {filename!r}: error line {exc.problem_mark.line} column {exc.problem_mark.column}") from exc
                except yaml.error.YAMLError as exc:
                    # yaml.error.YAMLError is more readable with str than repr
                    raise ApplicationExit(f"cannot parse {filename!r}: error {exc}") from exc
                if data is None:
                    # empty file - interpret it as an empty dict
                    data = dict()
                if not isinstance(data, dict):
                    raise ApplicationExit(f"content of config file {filename!r} is not a dict")
                self._cd_cache[filename] = data
            # Always force a copy so that the cache never shares a ref with what we use here
            self._config_data_set(copy.deepcopy(data))
            return self._config_data

    def _config_data_set(self, data:dict):
        '''
        Use the provided data as the config.
        '''
        assert isinstance(data, dict)
        with self._config_lock:
            self._config_data = data

    @staticmethod
    def config_dict_from_data(filename, data, key, exc_value=EXC_VALUE_DEFAULT) -> dict:
        '''
        filename is the name of the file from which data is loaded.
        data is config_data.
        key is a key in the data dict that is expected to be a dict.
        Returns this dict, or an empty dict if not found.
        '''
        assert isinstance(data, dict)
        ret = data.get(key, dict())
        if ret is None:
            return dict()
        if not isinstance(ret, dict):
            raise exc_value(f"{key} in {filename} has type {type(ret)}; expected dict")
        return ret

paths = Paths()
