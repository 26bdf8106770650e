#
# azshortcuts/subscription.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Subscription is the entry point: it owns the credential and the
SDK clients, and hands out resource collections.

Example:
    sub = Subscription.authenticate_from_file('my.azureauth')
    net = sub.networks.define('mynet') \
            .with_region('westus') \
            .with_address_space('10.1.0.0/16') \
            .with_subnet('front', '10.1.1.0/24') \
            .create()
'''
import functools
import inspect
import threading

from azure.mgmt.compute import ComputeManagementClient
from azure.mgmt.network import NetworkManagementClient
from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.storage import StorageManagementClient

from azshortcuts._scfg import scfg
import azshortcuts.auth
from azshortcuts.base_defaults import LOCATION_DEFAULT_FALLBACK
from azshortcuts.clouds import (CLOUD_DEFAULT,
                                cloud_for_endpoint,
                                cloud_get,
                               )
from azshortcuts.common import ApplicationWithSubscription
from azshortcuts.exceptions import (ApplicationException,
                                    AuthFileError,
                                   )
from azshortcuts.msapicall import (Caught,
                                   armpolling_obj_for_operations,
                                   lro_wait,
                                   msapicall,
                                  )
from azshortcuts.util import (getframe,
                              indent_exc,
                             )

class CWSkipTransform(ApplicationException):
    '''
    Raised by the transform passed to _cw_list() to indicate that
    the item must be entirely elided from the result list.
    '''
    # No specialization

class Subscription(ApplicationWithSubscription):
    '''
    One Azure subscription, reached with one credential.
    '''
    def __init__(self, subscription_id, credential=None, cloud=None, **kwargs):
        super().__init__(subscription_id=subscription_id, **kwargs)
        self._credential = credential
        self.cloud = cloud_get(cloud or scfg.get('cloud', CLOUD_DEFAULT.name), exc_value=self.exc_value)
        self._az_client_gen_lock = threading.RLock()
        self._credential_lock = threading.Lock()

    @classmethod
    def authenticate(cls, subscription_id, tenant_id, client_id, client_key, auth_url=None, **kwargs):
        '''
        Return a Subscription that authenticates as the given service principal.
        '''
        settings = azshortcuts.auth.AuthSettings(subscription_id=subscription_id,
                                                 tenant_id=tenant_id,
                                                 client_id=client_id,
                                                 client_key=client_key,
                                                 auth_url=auth_url)
        credential = azshortcuts.auth.credential_generate(settings)
        return cls(subscription_id=subscription_id, credential=credential, tenant_id=tenant_id, **kwargs)

    @classmethod
    def authenticate_from_file(cls, path, subscription_id=None, **kwargs):
        '''
        Return a Subscription described by the auth file at path.
        Without subscription_id, an XML file yields its first subscription.
        '''
        settings = azshortcuts.auth.auth_settings_from_file(path, subscription_id=subscription_id)
        cloud = kwargs.pop('cloud', None) or cloud_for_endpoint(settings.base_url, exc_value=lambda txt: AuthFileError(txt, filename=path))
        credential = azshortcuts.auth.credential_generate(settings)
        return cls(subscription_id=settings.subscription_id, credential=credential, tenant_id=settings.tenant_id, cloud=cloud, **kwargs)

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.subscription_id)

    @property
    def credential(self):
        '''
        Getter. Generated on first use when not provided at construction.
        '''
        with self._credential_lock:
            if self._credential is None:
                self._credential = azshortcuts.auth.credential_generate(logger=self.logger)
            return self._credential

    @property
    def location_default(self):
        '''
        Region used when a definition does not name one
        '''
        return scfg.get('location_default', LOCATION_DEFAULT_FALLBACK)

    ######################################################################
    # Resource collections. Each access returns a new collection
    # bound to this subscription; they carry no state of their own.

    @property
    def resource_groups(self):
        '''
        Getter: ResourceGroups
        '''
        from azshortcuts.resource_groups import ResourceGroups # pylint: disable=import-outside-toplevel
        return ResourceGroups(self)

    @property
    def resources(self):
        '''
        Getter: generic Resources
        '''
        from azshortcuts.generic_resources import Resources # pylint: disable=import-outside-toplevel
        return Resources(self)

    @property
    def providers(self):
        '''
        Getter: Providers
        '''
        from azshortcuts.providers import Providers # pylint: disable=import-outside-toplevel
        return Providers(self)

    @property
    def sizes(self):
        '''
        Getter: VM Sizes
        '''
        from azshortcuts.compute_catalog import Sizes # pylint: disable=import-outside-toplevel
        return Sizes(self)

    @property
    def publishers(self):
        '''
        Getter: VM image Publishers
        '''
        from azshortcuts.compute_catalog import Publishers # pylint: disable=import-outside-toplevel
        return Publishers(self)

    @property
    def storage_accounts(self):
        '''
        Getter: StorageAccounts
        '''
        from azshortcuts.storage_accounts import StorageAccounts # pylint: disable=import-outside-toplevel
        return StorageAccounts(self)

    @property
    def networks(self):
        '''
        Getter: Networks
        '''
        from azshortcuts.networks import Networks # pylint: disable=import-outside-toplevel
        return Networks(self)

    @property
    def public_ip_addresses(self):
        '''
        Getter: PublicIpAddresses
        '''
        from azshortcuts.public_ip_addresses import PublicIpAddresses # pylint: disable=import-outside-toplevel
        return PublicIpAddresses(self)

    @property
    def network_interfaces(self):
        '''
        Getter: NetworkInterfaces
        '''
        from azshortcuts.network_interfaces import NetworkInterfaces # pylint: disable=import-outside-toplevel
        return NetworkInterfaces(self)

    @property
    def network_security_groups(self):
        '''
        Getter: NetworkSecurityGroups
        '''
        from azshortcuts.network_security_groups import NetworkSecurityGroups # pylint: disable=import-outside-toplevel
        return NetworkSecurityGroups(self)

    @property
    def load_balancers(self):
        '''
        Getter: LoadBalancers
        '''
        from azshortcuts.load_balancers import LoadBalancers # pylint: disable=import-outside-toplevel
        return LoadBalancers(self)

    @property
    def availability_sets(self):
        '''
        Getter: AvailabilitySets
        '''
        from azshortcuts.availability_sets import AvailabilitySets # pylint: disable=import-outside-toplevel
        return AvailabilitySets(self)

    @property
    def virtual_machines(self):
        '''
        Getter: VirtualMachines
        '''
        from azshortcuts.virtual_machines import VirtualMachines # pylint: disable=import-outside-toplevel
        return VirtualMachines(self)

    ######################################################################
    # msapicall() retries a single call and returns the result or
    # (re)raises. These wrappers add the conventions of this package:
    # get-like operations return None for missing resources and
    # list-like operations return a list, empty for a missing container.

    def _cw_get(self, call, *args, **kwargs):
        '''
        Rewrap a generic operation that raises on missing-like errors
        and instead returns None.
        '''
        try:
            return msapicall(self.logger, call, *args, **kwargs)
        except Exception as exc:
            caught = Caught(exc)
            if caught.is_missing():
                return None
            raise

    def _cw_list(self, call, *args, transform=None, **kwargs):
        '''
        Rewrap a generic operation that lists something.
        The underlying SDK op returns a pager. Both generating the pager
        and expanding it to a list happen within one msapicall().

        When the container does not exist, return an empty list.
        Other errors propagate unless list_errors_empty is configured,
        in which case they are logged and the result is empty.

        transform is an optional callable applied to each item.
        It may raise CWSkipTransform to drop the item.
        '''
        def _doit(transform, call, *args, **kwargs):
            pager = call(*args, **kwargs)
            if not pager:
                return list()
            if not transform:
                return list(pager)
            res = list()
            for item in pager:
                try:
                    res.append(transform(item))
                except CWSkipTransform:
                    continue
            return res

        try:
            return msapicall(self.logger, functools.partial(_doit, transform, call, *args, **kwargs))
        except Exception as exc:
            caught = Caught(exc)
            if caught.is_missing():
                return list()
            if isinstance(exc, ApplicationException) or (not scfg.get('list_errors_empty', False)):
                raise
            self.logger.warning("%s list %r failed [%s] returning empty list: %r\n%s", getframe(0), call, caught.reason(), exc, indent_exc())
            return list()

    ######################################################################
    # LRO support

    def arm_poller(self, operations):
        '''
        Return an ARM polling method usable for the given operations object
        as the polling= arg to a begin_* operation.
        operations is something like self._az_network_client.virtual_networks
        '''
        return armpolling_obj_for_operations(operations, logger=self.logger)

    def lro(self, opname, call, *args, **kwargs):
        '''
        Issue call(*args, **kwargs) as a long-running operation,
        wait for it, and return its result. call is a bound begin_*
        method of an SDK operations object; the poller is derived
        from that object. opname is a short description for logging.
        '''
        poller = self.arm_poller(getattr(call, '__self__', None))
        op = msapicall(self.logger, call, *args, polling=poller, **kwargs)
        lro_wait(op, opname, self.logger)
        return op.result()

    ######################################################################
    # SDK client object generation

    @property
    def _az_compute_client(self) -> ComputeManagementClient:
        '''
        Getter: self._az_compute_client, generated on the first call and then cached
        '''
        return self._az_client_gen_property('_az_compute_cachedclient', ComputeManagementClient)

    @property
    def _az_network_client(self) -> NetworkManagementClient:
        '''
        Getter: self._az_network_client, generated on the first call and then cached
        '''
        return self._az_client_gen_property('_az_network_cachedclient', NetworkManagementClient)

    @property
    def _az_resource_client(self) -> ResourceManagementClient:
        '''
        Getter: self._az_resource_client, generated on the first call and then cached
        ResourceManagementClient is for resource groups, generic resources, and providers
        '''
        return self._az_client_gen_property('_az_resource_cachedclient', ResourceManagementClient)

    @property
    def _az_storage_client(self) -> StorageManagementClient:
        '''
        Getter: self._az_storage_client, generated on the first call and then cached
        '''
        return self._az_client_gen_property('_az_storage_cachedclient', StorageManagementClient)

    @staticmethod
    def _instantiate_client(target_class, **kwargs):
        '''
        Instantiate target_class. Extract positional arguments
        from kwargs and get them in the right order. Matches
        strictly by name. When target_class takes **kwargs,
        everything else is passed through; otherwise anything
        in kwargs that does not match is discarded.
        '''
        signature = inspect.signature(target_class)
        params = signature.parameters
        cli_args_positional = [name for name, param in params.items() if param.default is inspect.Parameter.empty and param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)]
        use_args = list()
        for key in cli_args_positional:
            if key not in kwargs:
                raise ValueError("missing argument %r" % key)
            use_args.append(kwargs.pop(key))
        if any(param.kind == inspect.Parameter.VAR_KEYWORD for param in params.values()):
            use_kwargs = kwargs
        else:
            use_kwargs = {k : v for k, v in kwargs.items() if k in params}
        return target_class(*use_args, **use_kwargs)

    def _az_client_gen_do(self, name, client_class):
        '''
        Factory for Azure SDK client of type client_class.
        '''
        base_url = self.cloud.endpoints.resource_manager
        parameters = {'credential' : self.credential,
                      'subscription_id' : self.subscription_id,
                      'base_url' : base_url,
                      'credential_scopes' : [base_url.rstrip('/') + '/.default'],
                     }
        self.logger.debug("%s generate %s for %s as %s", getframe(0), client_class.__name__, self.subscription_id, name)
        return self._instantiate_client(client_class, **parameters)

    def _az_client_gen_property(self, name, client_class):
        '''
        Generate self.<name> as self._az_client_gen_do(...) and cache it.
        Tests replace clients by assigning the cached attribute directly.
        '''
        with self._az_client_gen_lock:
            ret = getattr(self, name, None)
            if ret is None:
                ret = self._az_client_gen_do(name, client_class)
                setattr(self, name, ret)
            return ret
