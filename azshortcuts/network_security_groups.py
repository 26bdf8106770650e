#
# azshortcuts/network_security_groups.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Network security groups and their rules.

Rules are defined through the group:

    nsg = sub.network_security_groups.define('mynsg') \
            .with_region('westus') \
            .define_rule('ssh') \
                .allow_inbound() \
                .with_protocol(SecurityRuleProtocol.TCP) \
                .from_any_address() \
                .from_any_port() \
                .to_any_address() \
                .to_port(22) \
                .attach() \
            .create()
'''
from azure.mgmt.network.models import (NetworkSecurityGroup as NetworkSecurityGroupModel,
                                       SecurityRule,
                                      )

from azshortcuts.base_defaults import SECURITY_RULE_PRIORITY_DEFAULT
from azshortcuts.btypes import (SecurityRuleAccess,
                                SecurityRuleDirection,
                                SecurityRuleProtocol,
                               )
from azshortcuts.entities import (GroupableCollection,
                                  GroupableResourceBase,
                                 )

ANY = '*'

def _port_range(from_port, to_port):
    return "%d-%d" % (int(from_port), int(to_port))

class NetworkSecurityRule():
    '''
    Wraps azure.mgmt.network.models.SecurityRule. As returned by
    NetworkSecurityGroup.define_rule(), it is also the builder for
    a new rule; attach() adds it to the group and returns the group.
    '''
    def __init__(self, inner, nsg):
        self._inner = inner
        self._nsg = nsg

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.name)

    @property
    def inner(self):
        return self._inner

    @property
    def name(self):
        return self._inner.name

    @property
    def direction(self):
        return self._inner.direction

    @property
    def access(self):
        return self._inner.access

    @property
    def protocol(self):
        return self._inner.protocol

    @property
    def priority(self):
        return self._inner.priority

    @property
    def source_address_prefix(self):
        return self._inner.source_address_prefix

    @property
    def source_port_range(self):
        return self._inner.source_port_range

    @property
    def destination_address_prefix(self):
        return self._inner.destination_address_prefix

    @property
    def destination_port_range(self):
        return self._inner.destination_port_range

    # Direction and access

    def _with_direction(self, direction):
        self._inner.direction = direction.value
        return self

    def _with_access(self, access):
        self._inner.access = access.value
        return self

    def allow_inbound(self):
        return self.with_inbound_direction().with_allow_permission()

    def allow_outbound(self):
        return self.with_outbound_direction().with_allow_permission()

    def deny_inbound(self):
        return self.with_inbound_direction().with_deny_permission()

    def deny_outbound(self):
        return self.with_outbound_direction().with_deny_permission()

    def with_inbound_direction(self):
        return self._with_direction(SecurityRuleDirection.INBOUND)

    def with_outbound_direction(self):
        return self._with_direction(SecurityRuleDirection.OUTBOUND)

    def with_allow_permission(self):
        return self._with_access(SecurityRuleAccess.ALLOW)

    def with_deny_permission(self):
        return self._with_access(SecurityRuleAccess.DENY)

    # Protocol

    def with_protocol(self, protocol):
        '''
        protocol is a SecurityRuleProtocol or its value (Tcp, Udp, *)
        '''
        self._inner.protocol = SecurityRuleProtocol.value_of(protocol)
        return self

    def with_any_protocol(self):
        return self.with_protocol(SecurityRuleProtocol.ANY)

    # Source

    def from_address(self, cidr):
        self._inner.source_address_prefix = cidr
        return self

    def from_any_address(self):
        return self.from_address(ANY)

    def from_port(self, port):
        self._inner.source_port_range = str(int(port))
        return self

    def from_any_port(self):
        self._inner.source_port_range = ANY
        return self

    def from_port_range(self, from_port, to_port):
        self._inner.source_port_range = _port_range(from_port, to_port)
        return self

    # Destination

    def to_address(self, cidr):
        self._inner.destination_address_prefix = cidr
        return self

    def to_any_address(self):
        return self.to_address(ANY)

    def to_port(self, port):
        self._inner.destination_port_range = str(int(port))
        return self

    def to_any_port(self):
        self._inner.destination_port_range = ANY
        return self

    def to_port_range(self, from_port, to_port):
        self._inner.destination_port_range = _port_range(from_port, to_port)
        return self

    def with_priority(self, priority):
        self._inner.priority = int(priority)
        return self

    def attach(self):
        '''
        Add this rule to the group being defined and return the group
        '''
        self._nsg.inner.security_rules.append(self._inner)
        return self._nsg

    def missing(self):
        '''
        Return a list of required values that are not set
        '''
        return [x for x in ('direction', 'access', 'protocol') if not getattr(self._inner, x)]

class NetworkSecurityGroup(GroupableResourceBase):
    '''
    Wraps azure.mgmt.network.models.NetworkSecurityGroup
    '''
    RESOURCE_TYPE_DESC = 'network security group'

    @property
    def rules(self):
        '''
        Getter: {name: NetworkSecurityRule}
        '''
        return {x.name : NetworkSecurityRule(x, self) for x in self._inner.security_rules or list()}

    @property
    def default_rules(self):
        '''
        Getter: {name: NetworkSecurityRule} for the rules Azure adds to every group
        '''
        return {x.name : NetworkSecurityRule(x, self) for x in getattr(self._inner, 'default_security_rules', None) or list()}

    @property
    def network_interface_ids(self):
        return [x.id for x in self._inner.network_interfaces or list()]

    @property
    def subnet_ids(self):
        return [x.id for x in self._inner.subnets or list()]

    def define_rule(self, name):
        '''
        Begin defining a rule. Finish with attach().
        '''
        if self._inner.security_rules is None:
            self._inner.security_rules = list()
        return NetworkSecurityRule(SecurityRule(name=name, priority=SECURITY_RULE_PRIORITY_DEFAULT), self)

    def without_rule(self, name):
        if self._inner.security_rules:
            self._inner.security_rules = [x for x in self._inner.security_rules if x.name != name]
        return self

    def _definition_missing(self):
        ret = list()
        for rule in self._inner.security_rules or list():
            ret.extend("rule %s %s" % (rule.name, x) for x in NetworkSecurityRule(rule, self).missing())
        return ret

    def _create_do(self, group_name):
        az_network = self.subscription._az_network_client
        return self.subscription.lro('network.network_security_groups.create_or_update', az_network.network_security_groups.begin_create_or_update, group_name, self.name, self._inner)

class NetworkSecurityGroups(GroupableCollection):
    '''
    Network security groups within a subscription
    '''
    WRAPPER_CLASS = NetworkSecurityGroup
    AZRID_VALUES = {'provider_name' : 'Microsoft.Network',
                    'resource_type' : 'networkSecurityGroups',
                   }

    def inner_list(self, group_name=None):
        az_network = self._subscription._az_network_client
        if group_name:
            return self._subscription._cw_list(az_network.network_security_groups.list, group_name)
        return self._subscription._cw_list(az_network.network_security_groups.list_all)

    def inner_get(self, group_name, name):
        az_network = self._subscription._az_network_client
        return self._subscription._cw_get(az_network.network_security_groups.get, group_name, name)

    def _inner_new(self, name):
        return NetworkSecurityGroupModel(location=None, tags=dict(), security_rules=list())

    def inner_delete(self, group_name, name):
        az_network = self._subscription._az_network_client
        self._subscription.lro('network.network_security_groups.delete', az_network.network_security_groups.begin_delete, group_name, name)
