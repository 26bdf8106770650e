#
# tests/test_config.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Unit tests for configuration loading (azshortcuts._paths, azshortcuts._scfg)
'''
import pytest

import azshortcuts
from azshortcuts import (paths,
                         scfg,
                        )
from azshortcuts.exceptions import (ApplicationExit,
                                    SchemaError,
                                   )

class TestConfig():
    '''
    Test the defaults section of the configuration file
    '''
    def test_empty(self):
        assert scfg.get('location_default', 'westus') == 'westus'
        assert scfg.to_dict() == dict()

    def test_file(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text("defaults:\n  location_default: westeurope\n  call_max_attempts: 3\n  list_errors_empty: 'yes'\n")
        azshortcuts.reset_caches(config_filename=str(path))
        assert paths.config_filename == str(path)
        assert scfg.get('location_default', 'westus') == 'westeurope'
        assert scfg.call_max_attempts == 3
        assert scfg.list_errors_empty is True
        assert scfg.tget('call_max_attempts', int) == 3
        assert scfg.tget('missing', str) == ''
        with pytest.raises(AttributeError):
            scfg.missing # pylint: disable=pointless-statement

    def test_missing_file(self, tmp_path):
        azshortcuts.reset_caches(config_filename=str(tmp_path / 'nope.yaml'))
        assert scfg.get('cloud', None) is None

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text("defaults: [unterminated\n")
        azshortcuts.reset_caches(config_filename=str(path))
        with pytest.raises(ApplicationExit):
            scfg.get('cloud', None)

    def test_not_a_dict(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text("- a\n- b\n")
        azshortcuts.reset_caches(config_filename=str(path))
        with pytest.raises(ApplicationExit):
            scfg.get('cloud', None)

    @pytest.mark.parametrize('defaults', [{'call_max_attempts' : 0},
                                          {'call_max_attempts' : 'many'},
                                          {'lro_timeout' : -1},
                                          {'list_errors_empty' : 'perhaps'},
                                          {'cloud' : 'NoSuchCloud'},
                                          {'tenant_id_default' : 'not-a-uuid'},
                                         ])
    def test_invalid_values(self, defaults):
        azshortcuts.reset_caches(config_data={'defaults' : defaults})
        with pytest.raises(SchemaError):
            scfg.to_dict()

    def test_test_values(self):
        scfg.test_values['location_default'] = 'japaneast'
        assert scfg.get('location_default', 'westus') == 'japaneast'
        azshortcuts.reset_caches(config_data={})
        assert scfg.get('location_default', 'westus') == 'westus'
