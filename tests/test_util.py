#
# tests/test_util.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Unit tests for azshortcuts.util and azshortcuts.btypes
'''
import logging
import uuid

import pytest

from azshortcuts.btypes import (ReadOnlyDict,
                                Region,
                                SecurityRuleProtocol,
                                StorageAccountType,
                               )
from azshortcuts.exceptions import ApplicationExit
from azshortcuts.util import (ArgumentParser,
                              indent_exc,
                              indent_simple,
                              log_level_normalize,
                              name_with_prefix,
                              name_with_suffix,
                              truthy,
                              uuid_normalize,
                             )

class TestUtil():
    '''
    Test azshortcuts.util
    '''
    def test_uuid_normalize(self):
        val = 'ABCDEF01-2345-6789-ABCD-EF0123456789'
        assert uuid_normalize(val) == val.lower()
        assert uuid_normalize(' %s ' % val) == val.lower()
        u = uuid.uuid4()
        assert uuid_normalize(u) == str(u)
        with pytest.raises(ValueError):
            uuid_normalize('not-a-uuid')
        with pytest.raises(ApplicationExit):
            uuid_normalize('not-a-uuid', exc_value=ApplicationExit)
        assert uuid_normalize('not-a-uuid', exc_value=None) == ''
        assert uuid_normalize(7, exc_value=None) == ''

    def test_truthy(self):
        for val in (True, 1, 'true', 'YES', 'on', '1'):
            assert truthy(val) is True
        for val in (False, 0, 'false', 'No', 'off', '0'):
            assert truthy(val) is False
        with pytest.raises(ValueError):
            truthy('maybe')
        with pytest.raises(TypeError):
            truthy(None)

    def test_log_level_normalize(self):
        assert log_level_normalize('info') == logging.INFO
        assert log_level_normalize(' DEBUG ') == logging.DEBUG
        assert log_level_normalize(logging.WARNING) == logging.WARNING
        with pytest.raises(ValueError):
            log_level_normalize('chatty')
        with pytest.raises(TypeError):
            log_level_normalize(True)

    def test_names(self):
        assert name_with_suffix('vm1', 'group') == 'vm1group'
        assert name_with_prefix('store', 'vm1') == 'storevm1'

    def test_argument_group(self):
        ap = ArgumentParser()
        g1 = ap.get_argument_group('stuff')
        g2 = ap.get_argument_group('stuff')
        assert g1 is g2
        g1.add_argument('--thing', type=int, default=3)
        assert ap.parse_args(['--thing', '4']).thing == 4

    def test_indent_simple(self):
        assert indent_simple(['a', 2]) == '  a\n  2'
        assert indent_simple('line1\nline2', prefix='> ') == '> line1\n> line2'
        assert indent_simple(('x',), prefix='') == 'x'

    def test_indent_exc(self):
        try:
            raise KeyError('marker')
        except KeyError:
            txt = indent_exc(prefix='| ')
        lines = txt.splitlines()
        assert lines[0] == '| Traceback (most recent call last):'
        assert all(x.startswith('| ') for x in lines)
        assert "KeyError: 'marker'" in lines[-1]

class TestBtypes():
    '''
    Test azshortcuts.btypes
    '''
    def test_region(self):
        assert Region.normalize(Region.WEST_US) == 'westus'
        assert Region.normalize('West US') == 'westus'
        assert Region.normalize('eastus2') == 'eastus2'
        assert Region.normalize('Some Future Region') == 'somefutureregion'
        assert Region.normalize(None) is None
        assert Region.from_label('East US 2') is Region.EAST_US2
        assert Region.NORTH_EUROPE.label() == 'North Europe'
        with pytest.raises(ValueError):
            Region.from_label('Atlantis')

    def test_value_of(self):
        assert StorageAccountType.value_of(StorageAccountType.STANDARD_GRS) == 'Standard_GRS'
        assert StorageAccountType.value_of('Premium_LRS') == 'Premium_LRS'
        with pytest.raises(ValueError):
            StorageAccountType.value_of('Bogus_LRS')
        assert SecurityRuleProtocol.value_of(SecurityRuleProtocol.ANY) == '*'

    def test_enum_ordering(self):
        assert StorageAccountType.STANDARD_LRS < StorageAccountType.PREMIUM_LRS
        assert StorageAccountType.values(sort=False)[0] == 'Standard_LRS'

    def test_readonly_dict(self):
        d = ReadOnlyDict({'a' : 1})
        assert d['a'] == 1
        with pytest.raises(TypeError):
            d['b'] = 2
        with pytest.raises(TypeError):
            d.update({'b' : 2})
        with pytest.raises(KeyError):
            d['b'] # pylint: disable=pointless-statement
