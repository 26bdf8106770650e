#
# azshortcuts/public_ip_addresses.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Public IP addresses
'''
from azure.mgmt.network.models import (PublicIPAddress,
                                       PublicIPAddressDnsSettings,
                                      )

from azshortcuts.btypes import IpAllocationMethod
from azshortcuts.entities import (GroupableCollection,
                                  GroupableResourceBase,
                                 )

class PublicIpAddress(GroupableResourceBase):
    '''
    Wraps azure.mgmt.network.models.PublicIPAddress
    '''
    RESOURCE_TYPE_DESC = 'public IP address'

    @property
    def ip_address(self):
        '''
        Getter: the address itself; None until allocated
        '''
        return self._inner.ip_address

    @property
    def leaf_domain_label(self):
        dns_settings = self._inner.dns_settings
        return dns_settings.domain_name_label if dns_settings else None

    @property
    def fqdn(self):
        dns_settings = self._inner.dns_settings
        return dns_settings.fqdn if dns_settings else None

    @property
    def allocation_method(self):
        return self._inner.public_ip_allocation_method

    def with_static_ip(self):
        self._inner.public_ip_allocation_method = IpAllocationMethod.STATIC.value
        return self

    def with_dynamic_ip(self):
        self._inner.public_ip_allocation_method = IpAllocationMethod.DYNAMIC.value
        return self

    def with_leaf_domain_label(self, label):
        '''
        Set the leaf domain label (the first part of the FQDN).
        None removes it.
        '''
        if label is None:
            self._inner.dns_settings = None
            return self
        if self._inner.dns_settings is None:
            self._inner.dns_settings = PublicIPAddressDnsSettings()
        self._inner.dns_settings.domain_name_label = label.lower()
        return self

    def without_leaf_domain_label(self):
        return self.with_leaf_domain_label(None)

    def _create_do(self, group_name):
        if not self.allocation_method:
            self.with_dynamic_ip()
        az_network = self.subscription._az_network_client
        return self.subscription.lro('network.public_ip_addresses.create_or_update', az_network.public_ip_addresses.begin_create_or_update, group_name, self.name, self._inner)

class PublicIpAddresses(GroupableCollection):
    '''
    Public IP addresses within a subscription
    '''
    WRAPPER_CLASS = PublicIpAddress
    AZRID_VALUES = {'provider_name' : 'Microsoft.Network',
                    'resource_type' : 'publicIPAddresses',
                   }

    def inner_list(self, group_name=None):
        az_network = self._subscription._az_network_client
        if group_name:
            return self._subscription._cw_list(az_network.public_ip_addresses.list, group_name)
        return self._subscription._cw_list(az_network.public_ip_addresses.list_all)

    def inner_get(self, group_name, name):
        az_network = self._subscription._az_network_client
        return self._subscription._cw_get(az_network.public_ip_addresses.get, group_name, name)

    def _inner_new(self, name):
        return PublicIPAddress(location=None,
                               tags=dict(),
                               public_ip_allocation_method=IpAllocationMethod.DYNAMIC.value)

    def inner_delete(self, group_name, name):
        az_network = self._subscription._az_network_client
        self._subscription.lro('network.public_ip_addresses.delete', az_network.public_ip_addresses.begin_delete, group_name, name)
