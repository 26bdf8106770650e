#
# azshortcuts/load_balancers.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Load balancers fronted by a public IP address
'''
from azure.mgmt.network.models import (FrontendIPConfiguration,
                                       LoadBalancer as LoadBalancerModel,
                                       PublicIPAddress as PublicIPAddressModel,
                                      )

from azshortcuts.entities import (GroupableCollection,
                                  GroupableResourceBase,
                                  PublicIpAttachable,
                                 )

class LoadBalancer(PublicIpAttachable, GroupableResourceBase):
    '''
    Wraps azure.mgmt.network.models.LoadBalancer
    '''
    RESOURCE_TYPE_DESC = 'load balancer'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._public_ip_init()

    @property
    def frontend_ip_configurations(self):
        return list(self._inner.frontend_ip_configurations or list())

    @property
    def public_ip_address_ids(self):
        return [x.public_ip_address.id for x in self.frontend_ip_configurations if x.public_ip_address]

    def _definition_missing(self):
        if self._public_ip_create or self._public_ip_id:
            return list()
        return ['public IP address']

    def _create_do(self, group_name):
        pip_id = self.ensure_public_ip_address(group_name)
        frontend = FrontendIPConfiguration(name=self.name, public_ip_address=PublicIPAddressModel(id=pip_id))
        if self._inner.frontend_ip_configurations is None:
            self._inner.frontend_ip_configurations = list()
        self._inner.frontend_ip_configurations = [x for x in self._inner.frontend_ip_configurations if x.name != self.name]
        self._inner.frontend_ip_configurations.append(frontend)
        az_network = self.subscription._az_network_client
        return self.subscription.lro('network.load_balancers.create_or_update', az_network.load_balancers.begin_create_or_update, group_name, self.name, self._inner)

    def _apply_do(self):
        az_network = self.subscription._az_network_client
        return self.subscription.lro('network.load_balancers.create_or_update', az_network.load_balancers.begin_create_or_update, self.resource_group, self.name, self._inner)

class LoadBalancers(GroupableCollection):
    '''
    Load balancers within a subscription
    '''
    WRAPPER_CLASS = LoadBalancer
    AZRID_VALUES = {'provider_name' : 'Microsoft.Network',
                    'resource_type' : 'loadBalancers',
                   }

    def inner_list(self, group_name=None):
        az_network = self._subscription._az_network_client
        if group_name:
            return self._subscription._cw_list(az_network.load_balancers.list, group_name)
        return self._subscription._cw_list(az_network.load_balancers.list_all)

    def inner_get(self, group_name, name):
        az_network = self._subscription._az_network_client
        return self._subscription._cw_get(az_network.load_balancers.get, group_name, name)

    def _inner_new(self, name):
        return LoadBalancerModel(location=None, tags=dict(), frontend_ip_configurations=list())

    def inner_delete(self, group_name, name):
        az_network = self._subscription._az_network_client
        self._subscription.lro('network.load_balancers.delete', az_network.load_balancers.begin_delete, group_name, name)
