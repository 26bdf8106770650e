#
# azshortcuts/availability_sets.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Availability sets
'''
from azure.mgmt.compute.models import AvailabilitySet as AvailabilitySetModel

from azshortcuts.entities import (GroupableCollection,
                                  GroupableResourceBase,
                                 )
from azshortcuts.msapicall import msapicall

class AvailabilitySet(GroupableResourceBase):
    '''
    Wraps azure.mgmt.compute.models.AvailabilitySet
    '''
    RESOURCE_TYPE_DESC = 'availability set'

    @property
    def virtual_machine_ids(self):
        return [x.id for x in self._inner.virtual_machines or list()]

    @property
    def fault_domain_count(self):
        return self._inner.platform_fault_domain_count

    @property
    def update_domain_count(self):
        return self._inner.platform_update_domain_count

    def with_fault_domain_count(self, count):
        self._inner.platform_fault_domain_count = int(count)
        return self

    def with_update_domain_count(self, count):
        self._inner.platform_update_domain_count = int(count)
        return self

    def _create_do(self, group_name):
        az_compute = self.subscription._az_compute_client
        return msapicall(self.logger, az_compute.availability_sets.create_or_update, group_name, self.name, self._inner)

class AvailabilitySets(GroupableCollection):
    '''
    Availability sets within a subscription
    '''
    WRAPPER_CLASS = AvailabilitySet
    AZRID_VALUES = {'provider_name' : 'Microsoft.Compute',
                    'resource_type' : 'availabilitySets',
                   }

    def inner_list(self, group_name=None):
        az_compute = self._subscription._az_compute_client
        if group_name:
            return self._subscription._cw_list(az_compute.availability_sets.list, group_name)
        return self._subscription._cw_list(az_compute.availability_sets.list_by_subscription)

    def inner_get(self, group_name, name):
        az_compute = self._subscription._az_compute_client
        return self._subscription._cw_get(az_compute.availability_sets.get, group_name, name)

    def _inner_new(self, name):
        return AvailabilitySetModel(location=None, tags=dict())

    def inner_delete(self, group_name, name):
        az_compute = self._subscription._az_compute_client
        msapicall(self.logger, az_compute.availability_sets.delete, group_name, name)
