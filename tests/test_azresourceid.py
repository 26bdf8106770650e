#
# tests/test_azresourceid.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Unit tests for azshortcuts.azresourceid
'''
import pytest

from azshortcuts.azresourceid import (AzRGResourceId,
                                      AzResourceId,
                                      AzSubResourceId,
                                      AzSubscriptionProviderId,
                                      AzSubscriptionResourceId,
                                      azresourceid_from_text,
                                      azresourceid_or_none_from_text,
                                      azrid_is,
                                      azrid_normalize,
                                      azrid_normalize_or_none,
                                      location_from_id,
                                      provider_from_id,
                                      resource_group_from_id,
                                      resource_name_from_id,
                                      resource_type_from_id,
                                      subscription_from_id,
                                     )

SUB = '11111111-2222-3333-4444-555555555555'
RG = f'/subscriptions/{SUB}/resourceGroups/rg1'
VNET = f'{RG}/providers/Microsoft.Network/virtualNetworks/vnet1'
SUBNET = f'{VNET}/subnets/default'

class TestAzResourceId():
    '''
    Test parsing and formatting of resource ids
    '''
    def test_classes(self):
        assert isinstance(azresourceid_from_text(f'/subscriptions/{SUB}'), AzSubscriptionResourceId)
        assert isinstance(azresourceid_from_text(f'/subscriptions/{SUB}/providers/Microsoft.Compute'), AzSubscriptionProviderId)
        assert type(azresourceid_from_text(RG)) is AzRGResourceId # pylint: disable=unidiomatic-typecheck
        assert type(azresourceid_from_text(VNET)) is AzResourceId # pylint: disable=unidiomatic-typecheck
        azrid = azresourceid_from_text(SUBNET)
        assert isinstance(azrid, AzSubResourceId)
        assert azrid.subresource_name == 'default'
        assert str(azrid.parent_id) == VNET

    def test_fields(self):
        azrid = azresourceid_from_text(VNET.upper().replace('/SUBSCRIPTIONS/', '/subscriptions/'))
        assert azrid.subscription_id == SUB
        azrid = azresourceid_from_text(VNET)
        assert azrid.resource_group_name == 'rg1'
        assert azrid.provider_name == 'Microsoft.Network'
        assert azrid.resource_type == 'virtualNetworks'
        assert azrid.resource_name == 'vnet1'
        assert azrid.full_type == 'Microsoft.Network/virtualNetworks'
        assert str(azrid) == VNET

    def test_equality(self):
        a = azresourceid_from_text(VNET)
        b = azresourceid_from_text(VNET.replace('rg1', 'RG1'))
        assert a == b
        assert hash(a) == hash(b)
        assert a.matches(VNET.lower())

    def test_invalid(self):
        with pytest.raises(ValueError):
            azresourceid_from_text('/not/an/id')
        with pytest.raises(ValueError):
            azresourceid_from_text('/subscriptions/not-a-uuid/resourceGroups/rg1')
        assert azresourceid_or_none_from_text('/not/an/id') is None
        assert azresourceid_or_none_from_text(None) is None

    def test_restrictions(self):
        assert azresourceid_from_text(VNET, resource_type='virtualnetworks').resource_type == 'virtualnetworks'
        assert azresourceid_or_none_from_text(VNET, resource_type='networkInterfaces') is None
        with pytest.raises(ValueError):
            azrid_normalize(VNET, AzResourceId, provider_name='Microsoft.Compute')
        azrid = azrid_normalize(VNET, AzResourceId, provider_name='Microsoft.Network', resource_type='virtualNetworks')
        assert azrid.resource_name == 'vnet1'
        assert azrid_normalize(azrid, AzResourceId) is azrid
        assert azrid_is(VNET, AzResourceId)
        assert not azrid_is(RG, AzResourceId)
        assert azrid_normalize_or_none(VNET, AzResourceId, resource_type='virtualNetworks') == azrid
        assert azrid_normalize_or_none(VNET, AzResourceId, provider_name='Microsoft.Compute') is None
        assert azrid_normalize_or_none(RG, AzResourceId) is None
        assert azrid_normalize_or_none(None, AzResourceId) is None

    def test_accessors(self):
        assert subscription_from_id(VNET) == SUB
        assert subscription_from_id(VNET.upper()) == SUB.upper()
        assert resource_group_from_id(VNET) == 'rg1'
        assert provider_from_id(VNET) == 'Microsoft.Network'
        assert resource_type_from_id(VNET) == 'virtualNetworks'
        assert resource_type_from_id(SUBNET) == 'virtualNetworks/subnets'
        assert resource_name_from_id(SUBNET) == 'default'
        assert resource_name_from_id(RG) is None
        assert resource_name_from_id(f'/subscriptions/{SUB}') is None
        pub = f'/subscriptions/{SUB}/providers/Microsoft.Compute/locations/westus/publishers/Canonical'
        assert location_from_id(pub) == 'westus'
        for bad in (None, '', 'relative/path', 17):
            assert subscription_from_id(bad) is None
            assert resource_group_from_id(bad) is None
            assert resource_name_from_id(bad) is None

    def test_accessors_positional(self):
        plain = '/subscriptions/S/resourceGroups/G/providers/P/T/N'
        assert subscription_from_id(plain) == 'S'
        assert resource_group_from_id(plain) == 'G'
        assert provider_from_id(plain) == 'P'
        assert resource_type_from_id(plain) == 'T'
        assert resource_name_from_id(plain) == 'N'
        short = '/subscriptions/S/resourceGroups/G'
        assert subscription_from_id(short) == 'S'
        assert resource_group_from_id(short) == 'G'
        assert provider_from_id(short) is None
        assert resource_type_from_id(short) is None
        assert resource_name_from_id(short) is None
