#
# azshortcuts/generic_resources.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Generic access to any ARM resource by id. Reads and deletes use
the latest API version the provider advertises for the type.
'''
from azshortcuts.azresourceid import (provider_from_id,
                                      resource_group_from_id,
                                      resource_name_from_id,
                                      resource_type_from_id,
                                     )
from azshortcuts.entities import (Collection,
                                  Wrapper,
                                 )
from azshortcuts.exceptions import ResourceNotFound

class Resource(Wrapper):
    '''
    Wraps azure.mgmt.resource.resources.models.GenericResource
    '''
    RESOURCE_TYPE_DESC = 'resource'

    @property
    def resource_group(self):
        return resource_group_from_id(self.id)

    @property
    def region(self):
        return self._inner.location

    @property
    def short_name(self):
        return resource_name_from_id(self.id)

    @property
    def provider(self):
        return provider_from_id(self.id)

    @property
    def type(self):
        '''
        Getter: the type below the provider (eg virtualNetworks)
        '''
        return resource_type_from_id(self.id)

    @property
    def tags(self):
        return dict(self._inner.tags or dict())

    @property
    def properties(self):
        return self._inner.properties

    @property
    def provisioning_state(self):
        ret = getattr(self._inner, 'provisioning_state', None)
        if ret is None and isinstance(self._inner.properties, dict):
            ret = self._inner.properties.get('provisioningState', None)
        return ret

    def _fetch(self):
        return self._collection.inner_get(self.id)

    def delete(self):
        self._collection.delete(self.id)

class Resources(Collection):
    '''
    All resources in the subscription, regardless of type
    '''
    WRAPPER_CLASS = Resource

    def inner_list(self, group_name=None):
        az_resource = self._subscription._az_resource_client
        if group_name:
            return self._subscription._cw_list(az_resource.resources.list_by_resource_group, group_name)
        return self._subscription._cw_list(az_resource.resources.list)

    def names(self, group_name=None):
        '''
        Return the ids of the resources (in group_name if given)
        '''
        return [x.id for x in self.inner_list(group_name)]

    def _api_version(self, provider, resource_type):
        api_version = self._subscription.providers.latest_api_version(provider, resource_type)
        if not api_version:
            raise ResourceNotFound("no API version found for %s/%s" % (provider, resource_type))
        return api_version

    def _api_version_for_id(self, resource_id):
        provider = provider_from_id(resource_id)
        resource_type = resource_type_from_id(resource_id)
        if not (provider and resource_type):
            raise ValueError("cannot parse %r as a resource id" % resource_id)
        return self._api_version(provider, resource_type)

    def inner_get(self, resource_id):
        api_version = self._api_version_for_id(resource_id)
        az_resource = self._subscription._az_resource_client
        return self._subscription._cw_get(az_resource.resources.get_by_id, resource_id, api_version)

    def get(self, resource_id):
        '''
        Return Resource or None if it does not exist
        '''
        inner = self.inner_get(resource_id)
        if inner is None:
            return None
        return self._wrap(inner)

    def get_by_parts(self, name, resource_type, provider, group_name):
        '''
        Return Resource or None. resource_type is below the provider (eg virtualNetworks).
        '''
        api_version = self._api_version(provider, resource_type)
        az_resource = self._subscription._az_resource_client
        inner = self._subscription._cw_get(az_resource.resources.get, group_name, provider, '', resource_type, name, api_version)
        if inner is None:
            return None
        return self._wrap(inner)

    def delete(self, resource_id):
        '''
        Delete the resource with the given id. Waits for completion.
        '''
        api_version = self._api_version_for_id(resource_id)
        self.logger.info("delete resource %s", resource_id)
        az_resource = self._subscription._az_resource_client
        self._subscription.lro('resource.resources.delete_by_id', az_resource.resources.begin_delete_by_id, resource_id, api_version)

    def delete_by_parts(self, name, resource_type, provider, group_name):
        api_version = self._api_version(provider, resource_type)
        self.logger.info("delete resource %s/%s %s in resource group %s", provider, resource_type, name, group_name)
        az_resource = self._subscription._az_resource_client
        self._subscription.lro('resource.resources.delete', az_resource.resources.begin_delete, group_name, provider, '', resource_type, name, api_version)
