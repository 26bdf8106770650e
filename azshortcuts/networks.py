#
# azshortcuts/networks.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Virtual networks and their subnets
'''
from azure.mgmt.network.models import (AddressSpace,
                                       DhcpOptions,
                                       NetworkSecurityGroup as NetworkSecurityGroupModel,
                                       Subnet as SubnetModel,
                                       VirtualNetwork,
                                      )

from azshortcuts.base_defaults import (NETWORK_ADDRESS_SPACE_DEFAULT,
                                       NETWORK_SUBNET_NAME_DEFAULT,
                                      )
from azshortcuts.entities import (GroupableCollection,
                                  GroupableResourceBase,
                                  id_of,
                                 )

class Subnet():
    '''
    Read-only view of one subnet of a Network
    '''
    def __init__(self, inner):
        self._inner = inner

    def __repr__(self):
        return "%s(%r, %r)" % (type(self).__name__, self.name, self.address_prefix)

    @property
    def inner(self):
        return self._inner

    @property
    def name(self):
        return self._inner.name

    @property
    def id(self):
        return self._inner.id

    @property
    def address_prefix(self):
        return self._inner.address_prefix

    @property
    def network_security_group_id(self):
        nsg = self._inner.network_security_group
        return nsg.id if nsg else None

class Network(GroupableResourceBase):
    '''
    Wraps azure.mgmt.network.models.VirtualNetwork
    '''
    RESOURCE_TYPE_DESC = 'network'

    @property
    def address_spaces(self):
        address_space = self._inner.address_space
        return list(address_space.address_prefixes or list()) if address_space else list()

    @property
    def dns_server_ips(self):
        dhcp_options = self._inner.dhcp_options
        return list(dhcp_options.dns_servers or list()) if dhcp_options else list()

    @property
    def subnets(self):
        '''
        Getter: {name: Subnet} in the order Azure reports them
        '''
        return {x.name : Subnet(x) for x in self._inner.subnets or list()}

    def with_address_space(self, cidr):
        if self._inner.address_space is None:
            self._inner.address_space = AddressSpace(address_prefixes=list())
        if self._inner.address_space.address_prefixes is None:
            self._inner.address_space.address_prefixes = list()
        self._inner.address_space.address_prefixes.append(cidr)
        return self

    def with_dns_server(self, ip_address):
        if self._inner.dhcp_options is None:
            self._inner.dhcp_options = DhcpOptions(dns_servers=list())
        if self._inner.dhcp_options.dns_servers is None:
            self._inner.dhcp_options.dns_servers = list()
        self._inner.dhcp_options.dns_servers.append(ip_address)
        return self

    def with_subnet(self, name, cidr, network_security_group=None):
        '''
        Add a subnet. network_security_group is optional; it is
        an id, a NetworkSecurityGroup, or an SDK model.
        '''
        subnet = SubnetModel(name=name, address_prefix=cidr)
        nsg_id = id_of(network_security_group)
        if nsg_id:
            subnet.network_security_group = NetworkSecurityGroupModel(id=nsg_id)
        if self._inner.subnets is None:
            self._inner.subnets = list()
        self._inner.subnets.append(subnet)
        return self

    def with_subnets(self, name_cidr_pairs):
        '''
        Replace the subnets with those in the {name: cidr} mapping
        '''
        self._inner.subnets = list()
        for name, cidr in name_cidr_pairs.items():
            self.with_subnet(name, cidr)
        return self

    def _create_do(self, group_name):
        if not self.address_spaces:
            self.with_address_space(NETWORK_ADDRESS_SPACE_DEFAULT)
        if not self._inner.subnets:
            # One subnet covering all of the first address space
            self.with_subnet(NETWORK_SUBNET_NAME_DEFAULT, self.address_spaces[0])
        az_network = self.subscription._az_network_client
        return self.subscription.lro('network.virtual_networks.create_or_update', az_network.virtual_networks.begin_create_or_update, group_name, self.name, self._inner)

class Networks(GroupableCollection):
    '''
    Virtual networks within a subscription
    '''
    WRAPPER_CLASS = Network
    AZRID_VALUES = {'provider_name' : 'Microsoft.Network',
                    'resource_type' : 'virtualNetworks',
                   }

    def inner_list(self, group_name=None):
        az_network = self._subscription._az_network_client
        if group_name:
            return self._subscription._cw_list(az_network.virtual_networks.list, group_name)
        return self._subscription._cw_list(az_network.virtual_networks.list_all)

    def inner_get(self, group_name, name):
        az_network = self._subscription._az_network_client
        return self._subscription._cw_get(az_network.virtual_networks.get, group_name, name)

    def _inner_new(self, name):
        return VirtualNetwork(location=None,
                              tags=dict(),
                              address_space=AddressSpace(address_prefixes=list()),
                              dhcp_options=DhcpOptions(dns_servers=list()),
                              subnets=list())

    def inner_delete(self, group_name, name):
        az_network = self._subscription._az_network_client
        self._subscription.lro('network.virtual_networks.delete', az_network.virtual_networks.begin_delete, group_name, name)
