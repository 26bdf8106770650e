#
# azshortcuts/providers.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Resource providers (Microsoft.Compute, Microsoft.Network, ...)
'''
from azshortcuts.entities import (Collection,
                                  Wrapper,
                                 )
from azshortcuts.msapicall import msapicall

class ProviderResourceType():
    '''
    One resource type offered by a provider
    '''
    def __init__(self, name, api_versions=None, locations=None):
        self.name = name
        self.api_versions = sorted(api_versions or list())
        self.locations = list(locations or list())

    def __repr__(self):
        return "%s(%r, latest_api_version=%r)" % (type(self).__name__, self.name, self.latest_api_version)

    @property
    def latest_api_version(self):
        '''
        Getter: the last of the sorted API versions, or None
        '''
        return self.api_versions[-1] if self.api_versions else None

class Provider(Wrapper):
    '''
    Wraps azure.mgmt.resource.resources.models.Provider
    '''
    RESOURCE_TYPE_DESC = 'provider'

    @property
    def name(self):
        return self.namespace

    @property
    def namespace(self):
        return self._inner.namespace

    @property
    def registration_state(self):
        return self._inner.registration_state

    def resource_types(self):
        '''
        Return {type_name: ProviderResourceType}
        '''
        ret = dict()
        for rt in self._inner.resource_types or list():
            ret[rt.resource_type] = ProviderResourceType(rt.resource_type, api_versions=rt.api_versions, locations=rt.locations)
        return ret

    def _fetch(self):
        return self._collection.inner_get(self.namespace)

    def register(self):
        '''
        Register this provider with the subscription. Returns self, refreshed.
        '''
        self._collection.register(self.namespace)
        return self.refresh()

    def unregister(self):
        '''
        Unregister this provider. Returns self, refreshed.
        '''
        self._collection.unregister(self.namespace)
        return self.refresh()

class Providers(Collection):
    '''
    Resource providers visible to the subscription
    '''
    WRAPPER_CLASS = Provider

    def inner_list(self, group_name=None):
        az_resource = self._subscription._az_resource_client
        return self._subscription._cw_list(az_resource.providers.list)

    def inner_get(self, namespace):
        az_resource = self._subscription._az_resource_client
        return self._subscription._cw_get(az_resource.providers.get, namespace)

    def get(self, namespace):
        '''
        Return Provider or None
        '''
        inner = self.inner_get(namespace)
        if inner is None:
            return None
        return self._wrap(inner)

    def register(self, namespace):
        self.logger.info("register provider %s", namespace)
        az_resource = self._subscription._az_resource_client
        return msapicall(self.logger, az_resource.providers.register, namespace)

    def unregister(self, namespace):
        self.logger.info("unregister provider %s", namespace)
        az_resource = self._subscription._az_resource_client
        return msapicall(self.logger, az_resource.providers.unregister, namespace)

    def latest_api_version(self, namespace, resource_type):
        '''
        Return the latest API version of namespace/resource_type, or None.
        Matching ignores case.
        '''
        provider = self.get(namespace)
        if not provider:
            return None
        resource_type = resource_type.lower()
        for name, rt in provider.resource_types().items():
            if name.lower() == resource_type:
                return rt.latest_api_version
        return None
