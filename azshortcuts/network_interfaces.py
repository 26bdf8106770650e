#
# azshortcuts/network_interfaces.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Network interfaces. A NIC definition resolves its network, subnet,
public IP and network security group at create() time, creating
whichever of those it was not given.
'''
from azure.mgmt.network.models import (NetworkInterface as NetworkInterfaceModel,
                                       NetworkInterfaceIPConfiguration,
                                       NetworkSecurityGroup as NetworkSecurityGroupModel,
                                       PublicIPAddress as PublicIPAddressModel,
                                       Subnet as SubnetModel,
                                      )

from azshortcuts.base_defaults import NAME_SUFFIX_NSG
from azshortcuts.btypes import IpAllocationMethod
from azshortcuts.entities import (GroupableCollection,
                                  GroupableResourceBase,
                                  NetworkAttachable,
                                  id_of,
                                 )
from azshortcuts.exceptions import ResourceNotFound
from azshortcuts.util import name_with_suffix

class NetworkInterface(NetworkAttachable, GroupableResourceBase):
    '''
    Wraps azure.mgmt.network.models.NetworkInterface
    '''
    RESOURCE_TYPE_DESC = 'network interface'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._network_init()
        self._nsg_create = True
        self._nsg_ref = None

    @property
    def ip_configurations(self):
        '''
        Getter: list of SDK NetworkInterfaceIPConfiguration
        '''
        return list(self._inner.ip_configurations or list())

    def _primary_ip_configuration(self):
        configs = self.ip_configurations
        for config in configs:
            if config.primary:
                return config
        return configs[0] if configs else None

    @property
    def primary_private_ip(self):
        config = self._primary_ip_configuration()
        return config.private_ip_address if config else None

    @property
    def public_ip_address_ids(self):
        return [x.public_ip_address.id for x in self.ip_configurations if x.public_ip_address]

    @property
    def network_security_group_id(self):
        nsg = self._inner.network_security_group
        return nsg.id if nsg else None

    @property
    def virtual_machine_id(self):
        vm = getattr(self._inner, 'virtual_machine', None)
        return vm.id if vm else None

    def with_existing_network_security_group(self, nsg):
        '''
        nsg is an id, a NetworkSecurityGroup, or an SDK model
        '''
        self._nsg_create = False
        self._nsg_ref = id_of(nsg)
        return self

    def with_new_network_security_group(self, name=None):
        '''
        The group is named <nic name>set unless name is given
        '''
        self._nsg_create = True
        self._nsg_ref = name
        return self

    def without_network_security_group(self):
        return self.with_existing_network_security_group(None)

    def ensure_network_security_group(self, group_name):
        '''
        Return the id of the NSG to attach, creating one if necessary, or None
        '''
        if self._nsg_create:
            nsg = self.subscription.network_security_groups.define(self._nsg_ref or name_with_suffix(self.name, NAME_SUFFIX_NSG)) \
                    .with_region(self.region) \
                    .with_existing_resource_group(group_name) \
                    .create()
            self._nsg_create = False
            self._nsg_ref = nsg.id
        elif self._nsg_ref:
            nsg = self.subscription.network_security_groups.get(self._nsg_ref)
            if nsg is None:
                raise ResourceNotFound("network security group %r not found" % self._nsg_ref)
        return self._nsg_ref

    def _create_do(self, group_name):
        network = self.ensure_network(group_name)
        subnet = self.ensure_subnet(network)

        if not self._inner.ip_configurations:
            self._inner.ip_configurations = [NetworkInterfaceIPConfiguration(primary=True)]
        config = self._primary_ip_configuration()
        config.name = subnet.name
        config.subnet = SubnetModel(id=subnet.id)
        config.private_ip_address = self._private_ip
        if self._private_ip:
            config.private_ip_allocation_method = IpAllocationMethod.STATIC.value
        else:
            config.private_ip_allocation_method = IpAllocationMethod.DYNAMIC.value

        pip_id = self.ensure_public_ip_address(group_name)
        config.public_ip_address = PublicIPAddressModel(id=pip_id) if pip_id else None

        nsg_id = self.ensure_network_security_group(group_name)
        self._inner.network_security_group = NetworkSecurityGroupModel(id=nsg_id) if nsg_id else None

        az_network = self.subscription._az_network_client
        return self.subscription.lro('network.network_interfaces.create_or_update', az_network.network_interfaces.begin_create_or_update, group_name, self.name, self._inner)

    def _apply_do(self):
        az_network = self.subscription._az_network_client
        return self.subscription.lro('network.network_interfaces.create_or_update', az_network.network_interfaces.begin_create_or_update, self.resource_group, self.name, self._inner)

class NetworkInterfaces(GroupableCollection):
    '''
    Network interfaces within a subscription
    '''
    WRAPPER_CLASS = NetworkInterface
    AZRID_VALUES = {'provider_name' : 'Microsoft.Network',
                    'resource_type' : 'networkInterfaces',
                   }

    def inner_list(self, group_name=None):
        az_network = self._subscription._az_network_client
        if group_name:
            return self._subscription._cw_list(az_network.network_interfaces.list, group_name)
        return self._subscription._cw_list(az_network.network_interfaces.list_all)

    def inner_get(self, group_name, name):
        az_network = self._subscription._az_network_client
        return self._subscription._cw_get(az_network.network_interfaces.get, group_name, name)

    def _inner_new(self, name):
        return NetworkInterfaceModel(location=None, tags=dict(), ip_configurations=list())

    def inner_delete(self, group_name, name):
        az_network = self._subscription._az_network_client
        self._subscription.lro('network.network_interfaces.delete', az_network.network_interfaces.begin_delete, group_name, name)
