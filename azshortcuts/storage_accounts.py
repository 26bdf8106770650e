#
# azshortcuts/storage_accounts.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Storage accounts (management plane only)
'''
from azure.mgmt.storage.models import (Sku,
                                       StorageAccount as StorageAccountModel,
                                       StorageAccountCreateParameters,
                                       StorageAccountUpdateParameters,
                                      )

from azshortcuts.base_defaults import STORAGE_ACCOUNT_KIND_DEFAULT
from azshortcuts.btypes import (STORAGE_ACCOUNT_TYPE_DEFAULT,
                                StorageAccountType,
                               )
from azshortcuts.entities import (GroupableCollection,
                                  GroupableResourceBase,
                                 )
from azshortcuts.msapicall import msapicall
from azshortcuts.util import expand_item_pformat

class StorageAccount(GroupableResourceBase):
    '''
    Wraps azure.mgmt.storage.models.StorageAccount
    '''
    RESOURCE_TYPE_DESC = 'storage account'

    @property
    def primary_blob_endpoint(self):
        '''
        Getter: blob endpoint URL (eg https://name.blob.core.windows.net/) or None
        '''
        endpoints = getattr(self._inner, 'primary_endpoints', None)
        return getattr(endpoints, 'blob', None)

    @property
    def account_type(self):
        '''
        Getter: SKU name (eg Standard_LRS) or None
        '''
        sku = getattr(self._inner, 'sku', None)
        return getattr(sku, 'name', None)

    @property
    def kind(self):
        return getattr(self._inner, 'kind', None)

    def with_account_type(self, account_type):
        '''
        account_type is a StorageAccountType or its value (eg 'Standard_GRS')
        '''
        self._inner.sku = Sku(name=StorageAccountType.value_of(account_type))
        return self

    def _create_do(self, group_name):
        if not self.account_type:
            self.with_account_type(STORAGE_ACCOUNT_TYPE_DEFAULT)
        parameters = StorageAccountCreateParameters(sku=Sku(name=self.account_type),
                                                    kind=self.kind or STORAGE_ACCOUNT_KIND_DEFAULT,
                                                    location=self.region,
                                                    tags=self.tags)
        self.logger.debug("create storage account %s parameters:\n%s", self.name, expand_item_pformat(parameters.as_dict()))
        az_storage = self.subscription._az_storage_client
        return self.subscription.lro('storage.storage_accounts.create', az_storage.storage_accounts.begin_create, group_name, self.name, parameters)

    def _apply_do(self):
        parameters = StorageAccountUpdateParameters(tags=self.tags)
        if self.account_type:
            parameters.sku = Sku(name=self.account_type)
        az_storage = self.subscription._az_storage_client
        return msapicall(self.logger, az_storage.storage_accounts.update, self.resource_group, self.name, parameters)

class StorageAccounts(GroupableCollection):
    '''
    Storage accounts within a subscription
    '''
    WRAPPER_CLASS = StorageAccount
    AZRID_VALUES = {'provider_name' : 'Microsoft.Storage',
                    'resource_type' : 'storageAccounts',
                   }

    def inner_list(self, group_name=None):
        az_storage = self._subscription._az_storage_client
        if group_name:
            return self._subscription._cw_list(az_storage.storage_accounts.list_by_resource_group, group_name)
        return self._subscription._cw_list(az_storage.storage_accounts.list)

    def inner_get(self, group_name, name):
        az_storage = self._subscription._az_storage_client
        return self._subscription._cw_get(az_storage.storage_accounts.get_properties, group_name, name)

    def _inner_new(self, name):
        return StorageAccountModel(location=None, tags=dict())

    def inner_delete(self, group_name, name):
        az_storage = self._subscription._az_storage_client
        msapicall(self.logger, az_storage.storage_accounts.delete, group_name, name)
