#
# azshortcuts/resource_groups.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Resource groups
'''
from azure.mgmt.resource.resources.models import ResourceGroup as ResourceGroupModel

from azshortcuts.entities import (Collection,
                                  ResourceBase,
                                 )
from azshortcuts.exceptions import ResourceNotFound
from azshortcuts.msapicall import msapicall
from azshortcuts.util import expand_item_pformat

class ResourceGroup(ResourceBase):
    '''
    Wraps azure.mgmt.resource.resources.models.ResourceGroup
    '''
    RESOURCE_TYPE_DESC = 'resource group'

    @property
    def provisioning_state(self):
        properties = getattr(self._inner, 'properties', None)
        return getattr(properties, 'provisioning_state', None)

    def _fetch(self):
        return self._collection.inner_get(self.name)

    def _write(self):
        parameters = {'location' : self.region,
                      'tags' : self.tags,
                     }
        self.logger.info("create resource_group %s with parameters:\n%s", self.name, expand_item_pformat(parameters))
        az_resource = self.subscription._az_resource_client
        return msapicall(self.logger, az_resource.resource_groups.create_or_update, self.name, parameters)

    def create(self):
        '''
        Create or update the group. Returns self.
        '''
        if not self.region:
            self.with_region(self.subscription.location_default)
        result = self._write()
        self._inner = self._fetch() or result or self._inner
        return self

    provision = create

    def apply(self):
        '''
        Push tag (and region) changes. When no region is set,
        the existing group's region is kept.
        '''
        if not self.region:
            existing = self._fetch()
            if existing is None:
                raise ResourceNotFound("Resource group not found")
            self._inner.location = existing.location
        return self.create()

    def delete(self):
        self._collection.delete(self.name)

class ResourceGroups(Collection):
    '''
    Resource groups within a subscription
    '''
    WRAPPER_CLASS = ResourceGroup

    def inner_list(self, group_name=None):
        az_resource = self._subscription._az_resource_client
        return self._subscription._cw_list(az_resource.resource_groups.list)

    def inner_get(self, name):
        az_resource = self._subscription._az_resource_client
        return self._subscription._cw_get(az_resource.resource_groups.get, name)

    def get(self, name):
        '''
        Return ResourceGroup or None if it does not exist
        '''
        inner = self.inner_get(name)
        if inner is None:
            return None
        return self._wrap(inner)

    def define(self, name):
        return ResourceGroup(self, ResourceGroupModel(location=None, tags=dict()), name=name)

    def update(self, name):
        '''
        Return a ResourceGroup to modify and apply(). The group is
        not read until apply().
        '''
        return ResourceGroup(self, ResourceGroupModel(location=None, tags=dict()), name=name)

    def delete(self, name):
        '''
        Delete the resource group and everything in it. Waits for completion.
        '''
        self.logger.info("delete resource group %s", name)
        az_resource = self._subscription._az_resource_client
        self._subscription.lro('resource.resource_groups.delete', az_resource.resource_groups.begin_delete, name)

    def exists(self, name):
        az_resource = self._subscription._az_resource_client
        return bool(self._subscription._cw_get(az_resource.resource_groups.check_existence, name))
