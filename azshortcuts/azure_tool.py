#!/usr/bin/env python3
#
# azshortcuts/azure_tool.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Command-line access to read-only Subscription operations.

Example:
    python -m azshortcuts.azure_tool networks_list --auth_file my.azureauth
    python -m azshortcuts.azure_tool sizes_list --location westus
'''
import sys

from azshortcuts.classic_network_config import ClassicNetworkConfig
from azshortcuts.command import Command
from azshortcuts.exceptions import (ApplicationExit,
                                    ApplicationExitWithNote,
                                   )
from azshortcuts.subscription import Subscription

command = Command()

class AzureTool(Subscription):
    '''
    Subscription as a command-line application. The positional
    action names a method decorated with @command below.
    '''
    def __init__(self, resource_group='', location='', classic_config_file='', **kwargs):
        super().__init__(**kwargs)
        self.resource_group = resource_group
        self.location = location or self.location_default
        self.classic_config_file = classic_config_file

    def _resource_group_required(self):
        if not self.resource_group:
            raise ApplicationExitWithNote(1, "--resource_group is required for this action")
        return self.resource_group

    @command.printable
    def resource_groups_list(self):
        '''
        Names of all resource groups
        '''
        return self.resource_groups.names()

    @command.printable
    def resource_group_get(self):
        '''
        Describe --resource_group
        '''
        group = self.resource_groups.get(self._resource_group_required())
        if group is None:
            self.logger.error("resource group %r not found", self.resource_group)
            raise ApplicationExit(1)
        return {'name' : group.name,
                'region' : group.region,
                'provisioning_state' : group.provisioning_state,
                'tags' : group.tags,
               }

    @command.printable
    def resources_list(self):
        '''
        Ids of all resources, restricted to --resource_group if given
        '''
        return self.resources.names(self.resource_group or None)

    @command.printable
    def providers_list(self):
        '''
        Provider namespaces with their registration state
        '''
        return ["%s %s" % (x.namespace, x.registration_state) for x in sorted(self.providers.list(), key=lambda p: p.namespace.lower())]

    @command.printable
    def sizes_list(self):
        '''
        VM sizes in --location
        '''
        return self.sizes.names(self.location)

    @command.printable
    def publishers_list(self):
        '''
        VM image publishers in --location
        '''
        return self.publishers.names(self.location)

    @command.printable
    def networks_list(self):
        '''
        Virtual networks, restricted to --resource_group if given
        '''
        return [{'name' : x.name,
                 'resource_group' : x.resource_group,
                 'region' : x.region,
                 'address_spaces' : x.address_spaces,
                 'subnets' : {name : subnet.address_prefix for name, subnet in x.subnets.items()},
                } for x in self.networks.list(self.resource_group or None)]

    @command.printable
    def storage_accounts_list(self):
        '''
        Storage accounts, restricted to --resource_group if given
        '''
        return [{'name' : x.name,
                 'resource_group' : x.resource_group,
                 'account_type' : x.account_type,
                 'primary_blob_endpoint' : x.primary_blob_endpoint,
                } for x in self.storage_accounts.list(self.resource_group or None)]

    @command.printable
    def virtual_machines_list(self):
        '''
        Virtual machines, restricted to --resource_group if given
        '''
        return [{'name' : x.name,
                 'resource_group' : x.resource_group,
                 'region' : x.region,
                 'size' : x.size,
                } for x in self.virtual_machines.list(self.resource_group or None)]

    @command.printable
    def classic_network_sites(self):
        '''
        Sites in the classic network configuration file --classic_config_file
        '''
        if not self.classic_config_file:
            raise ApplicationExitWithNote(1, "--classic_config_file is required for this action")
        with open(self.classic_config_file, 'r') as f:
            config = ClassicNetworkConfig.from_text(f.read())
        return [{'name' : x.name,
                 'location' : x.location,
                 'address_prefixes' : x.address_prefixes,
                 'subnets' : x.subnets,
                } for x in config.sites()]

    ######################################################################
    # main stuff below here

    @classmethod
    def main_add_parser_args(cls, ap_parser):
        '''
        See Application.main_add_parser_args()
        '''
        super().main_add_parser_args(ap_parser)

        ap_parser.add_argument('action', type=str,
                               help='what to do (one of: %s)' % ', '.join(command.actions))

        at_group = ap_parser.get_argument_group('azure_tool')
        at_group.add_argument('--auth_file', type=str, default='',
                              help='auth file (XML or properties) naming the subscription and service principal')
        at_group.add_argument('--classic_config_file', type=str, default='',
                              help='classic NetworkConfiguration XML file')
        at_group.add_argument('--location', type=str, default='',
                              help='Azure location (default from configuration)')
        at_group.add_argument('--resource_group', type=str, default='',
                              help='resource group name')

    ARGS_SAVE = ('action',
                )

    @classmethod
    def from_args_dict(cls, args_dict):
        '''
        With --auth_file, the subscription and credential come from the file.
        An explicit --subscription_id selects among subscriptions in an XML file.
        '''
        auth_file = args_dict.pop('auth_file', '')
        if not auth_file:
            return super().from_args_dict(args_dict)
        subscription_id = args_dict.pop('subscription_id', '')
        if 'subscription_id' not in args_dict.get('args_explicit', set()):
            subscription_id = ''
        args_dict.pop('tenant_id', None)
        return cls.authenticate_from_file(auth_file, subscription_id=subscription_id or None, **args_dict)

    def main_execute(self):
        '''
        See Application.main_execute()
        '''
        action = self._args_saved['action']
        if self.command.handle(action, ('printable', 'simple'), self):
            raise ApplicationExit(0)
        self.logger.error("Unknown action '%s'", action)
        raise ApplicationExit(1)

    command = None

AzureTool.command = command

def main():
    '''
    Console entry point
    '''
    AzureTool.main_with_args(sys.argv[1:])

AzureTool.main(__name__)
