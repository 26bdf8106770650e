#
# azshortcuts/entities.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Base classes shared by the resource modules.

A wrapper owns exactly one inner object: the SDK model from
azure.mgmt.*.models. Getters read from it and with_*() setters
mutate it in place and return self. Setters do no I/O. The
terminal calls create() (alias provision()) and apply() issue the
SDK operations and then re-read the resource so that inner reflects
what Azure reports.

A collection is the per-type entry point reached from Subscription
(sub.networks, sub.virtual_machines, ...). It offers list(), get(),
define(), update() and delete().
'''
from azshortcuts.azresourceid import (AzResourceId,
                                      azrid_normalize,
                                      resource_group_from_id,
                                      resource_name_from_id,
                                     )
from azshortcuts.base_defaults import (NAME_SUFFIX_GROUP,
                                       NAME_SUFFIX_NETWORK,
                                      )
from azshortcuts.btypes import Region
from azshortcuts.exceptions import (DefinitionIncomplete,
                                    ResourceNotFound,
                                   )
from azshortcuts.util import (getframe,
                              name_with_suffix,
                             )

def id_of(item):
    '''
    Given a resource id or anything with an id attribute
    (wrapper or SDK model), return the id. None stays None.
    '''
    if item is None:
        return None
    if isinstance(item, str):
        return item
    return item.id

def name_of(item):
    '''
    Given a name or anything with a name attribute, return the name.
    '''
    if item is None:
        return None
    if isinstance(item, str):
        return item
    return item.name

class Wrapper():
    '''
    Owns one inner object and the collection it came from.
    '''
    RESOURCE_TYPE_DESC = 'resource'

    def __init__(self, collection, inner, name=None):
        self._collection = collection
        self._inner = inner
        self._name = name if name is not None else getattr(inner, 'name', None)

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.id or self.name)

    @property
    def collection(self):
        return self._collection

    @property
    def subscription(self):
        return self._collection.subscription

    @property
    def logger(self):
        return self._collection.logger

    @property
    def inner(self):
        '''
        Getter: the SDK model object. Mutating it mutates this wrapper.
        '''
        return self._inner

    @property
    def name(self):
        return getattr(self._inner, 'name', None) or self._name

    @property
    def id(self):
        return getattr(self._inner, 'id', None)

    def _fetch(self):
        '''
        Return a fresh inner object for this resource, or None if it does not exist
        '''
        raise NotImplementedError("%s does not implement %s" % (type(self).__name__, getframe(0)))

    def refresh(self):
        '''
        Re-read this resource from Azure. Returns self.
        '''
        inner = self._fetch()
        if inner is None:
            raise ResourceNotFound("%s %r not found" % (self.RESOURCE_TYPE_DESC, self.name))
        self._inner = inner
        return self

class ResourceBase(Wrapper):
    '''
    Wrapper for a tracked ARM resource: something with a region and tags.
    '''
    @property
    def region(self):
        return getattr(self._inner, 'location', None)

    @property
    def tags(self):
        '''
        Getter: a copy of the tags
        '''
        return dict(getattr(self._inner, 'tags', None) or dict())

    @property
    def provisioning_state(self):
        return getattr(self._inner, 'provisioning_state', None)

    @property
    def type(self):
        return getattr(self._inner, 'type', None)

    def with_region(self, region):
        '''
        region is a Region, an ARM location name, or a display name
        '''
        self._inner.location = Region.normalize(region)
        return self

    def with_tags(self, tags):
        '''
        Replace all tags with a copy of tags
        '''
        self._inner.tags = dict(tags)
        return self

    def with_tag(self, key, value):
        if self._inner.tags is None:
            self._inner.tags = dict()
        self._inner.tags[key] = value
        return self

    def without_tag(self, key):
        if self._inner.tags:
            self._inner.tags.pop(key, None)
        return self

class GroupableResourceBase(ResourceBase):
    '''
    A resource that lives in a resource group.

    The group is resolved by ensure_group() during create().
    Unless told otherwise, a definition gets a new group named
    <name>group in the same region.
    '''
    def __init__(self, collection, inner, name=None, group_name=None):
        super().__init__(collection, inner, name=name)
        self._group_name = group_name or resource_group_from_id(self.id)
        # A wrapper for an existing resource has a known group.
        # A definition creates one unless told otherwise.
        self._group_create = not self._group_name
        self._group_definition = None

    @property
    def resource_group(self):
        return resource_group_from_id(self.id) or self._group_name

    def with_existing_resource_group(self, group):
        '''
        group is a name or a ResourceGroup
        '''
        self._group_name = name_of(group)
        self._group_create = False
        self._group_definition = None
        return self

    def with_new_resource_group(self, group=None):
        '''
        group is optional. It may be a name or a ResourceGroup definition.
        The group is created by create(), not here.
        '''
        if group is None or isinstance(group, str):
            self._group_name = group
            self._group_definition = None
        else:
            self._group_name = group.name
            self._group_definition = group
        self._group_create = True
        return self

    def ensure_group(self):
        '''
        Make sure the resource group exists; return its name.
        '''
        if self._group_create:
            definition = self._group_definition
            if definition is None:
                definition = self.subscription.resource_groups.define(self._group_name or name_with_suffix(self.name, NAME_SUFFIX_GROUP))
            if not definition.region:
                definition.with_region(self.region)
            definition.create()
            self._group_name = definition.name
            self._group_create = False
            self._group_definition = None
            return self._group_name
        group = self.subscription.resource_groups.get(self._group_name)
        if group is None:
            raise ResourceNotFound("Resource group not found: %s" % self._group_name)
        return group.name

    ######################################################################
    # Terminal operations

    def _definition_missing(self):
        '''
        Return a list of the names of required values that are not set
        '''
        return list()

    def _create_do(self, group_name):
        '''
        Issue the SDK create and return the resulting inner object
        '''
        raise NotImplementedError("%s does not implement %s" % (type(self).__name__, getframe(0)))

    def _apply_do(self):
        '''
        Issue the SDK update and return the resulting inner object
        '''
        return self._create_do(self.resource_group)

    def _fetch(self):
        return self._collection.inner_get(self.resource_group, self.name)

    def _fetch_after_write(self, result):
        '''
        After create or apply, re-read the resource.
        Fall back to what the write returned.
        '''
        inner = self._fetch()
        self._inner = inner if inner is not None else (result if result is not None else self._inner)

    def create(self):
        '''
        Create this resource and everything it depends on.
        Returns self, refreshed.
        '''
        missing = self._definition_missing()
        if missing:
            raise DefinitionIncomplete(self.RESOURCE_TYPE_DESC, self.name, missing)
        if not self.region:
            self.with_region(self.subscription.location_default)
        group_name = self.ensure_group()
        self.logger.info("create %s %s in resource group %s", self.RESOURCE_TYPE_DESC, self.name, group_name)
        result = self._create_do(group_name)
        self._fetch_after_write(result)
        return self

    provision = create

    def apply(self):
        '''
        Push modifications of an existing resource. Returns self, refreshed.
        '''
        self.logger.info("update %s %s in resource group %s", self.RESOURCE_TYPE_DESC, self.name, self.resource_group)
        result = self._apply_do()
        self._fetch_after_write(result)
        return self

    def delete(self):
        '''
        Delete this resource
        '''
        self._collection.delete(self.resource_group, self.name)

class PublicIpAttachable():
    '''
    Mixin for resources that may be fronted by a public IP address.
    Unless told otherwise, create() defines a new public IP whose
    name and leaf domain label are the lower-cased resource name.
    '''
    def _public_ip_init(self):
        self._public_ip_create = True
        self._public_ip_leaf = None
        self._public_ip_id = None

    def with_new_public_ip_address(self, leaf_domain_label=None):
        self._public_ip_create = True
        self._public_ip_leaf = leaf_domain_label.lower() if leaf_domain_label else None
        self._public_ip_id = None
        return self

    def with_existing_public_ip_address(self, public_ip):
        '''
        public_ip is a resource id, a PublicIpAddress, or an SDK model
        '''
        self._public_ip_create = False
        self._public_ip_leaf = None
        self._public_ip_id = id_of(public_ip)
        return self

    def without_public_ip_address(self):
        return self.with_existing_public_ip_address(None)

    def ensure_public_ip_address(self, group_name):
        '''
        Return the id of the public IP to attach, creating one if
        necessary, or None for no public IP.
        '''
        if self._public_ip_create:
            leaf = self._public_ip_leaf or self.name.lower()
            pip = self.subscription.public_ip_addresses.define(leaf) \
                    .with_region(self.region) \
                    .with_existing_resource_group(group_name) \
                    .with_leaf_domain_label(leaf) \
                    .create()
            self._public_ip_create = False
            self._public_ip_id = pip.id
        return self._public_ip_id

class NetworkAttachable(PublicIpAttachable):
    '''
    Mixin for resources that sit on a subnet of a virtual network.
    Unless told otherwise, create() defines a new network named
    <name>net and uses its first subnet.
    '''
    def _network_init(self):
        self._public_ip_init()
        self._network_create = True
        self._network_ref = None
        self._network_cidr = None
        self._subnet_name = None
        self._private_ip = None

    def with_existing_network(self, network):
        '''
        network is a resource id, a Network, or an SDK model
        '''
        self._network_create = False
        self._network_ref = id_of(network)
        self._network_cidr = None
        return self

    def with_new_network(self, name_or_cidr, cidr=None):
        '''
        with_new_network(cidr) or with_new_network(name, cidr)
        '''
        if cidr is None:
            name, cidr = None, name_or_cidr
        else:
            name = name_or_cidr
        self._network_create = True
        self._network_ref = name
        self._network_cidr = cidr
        return self

    def with_subnet(self, subnet_name):
        self._subnet_name = subnet_name
        return self

    def with_private_ip_address_dynamic(self):
        return self.with_private_ip_address_static(None)

    def with_private_ip_address_static(self, ip_address):
        self._private_ip = ip_address
        return self

    def network_settings_copy_to(self, other):
        '''
        Give other (another NetworkAttachable definition) the network,
        subnet, private IP and public IP settings of self. Names that
        default from self.name are resolved here so other does not
        derive them from its own name.
        '''
        other._network_create = self._network_create
        other._network_ref = self._network_ref
        if self._network_create and not self._network_ref:
            other._network_ref = name_with_suffix(self.name, NAME_SUFFIX_NETWORK)
        other._network_cidr = self._network_cidr
        other._subnet_name = self._subnet_name
        other._private_ip = self._private_ip
        other._public_ip_create = self._public_ip_create
        other._public_ip_id = self._public_ip_id
        other._public_ip_leaf = self._public_ip_leaf
        if self._public_ip_create and not self._public_ip_leaf:
            other._public_ip_leaf = self.name.lower()
        return other

    def ensure_network(self, group_name):
        '''
        Return the Network to attach to, creating one if necessary
        '''
        if self._network_create:
            definition = self.subscription.networks.define(self._network_ref or name_with_suffix(self.name, NAME_SUFFIX_NETWORK)) \
                    .with_region(self.region) \
                    .with_existing_resource_group(group_name)
            if self._network_cidr:
                definition.with_address_space(self._network_cidr)
            network = definition.create()
            self._network_create = False
            self._network_ref = network.id
            return network
        network = self.subscription.networks.get(self._network_ref)
        if network is None:
            raise ResourceNotFound("network %r not found" % self._network_ref)
        return network

    def ensure_subnet(self, network):
        '''
        Return the Subnet of network to use
        '''
        subnets = network.subnets
        if self._subnet_name:
            try:
                return subnets[self._subnet_name]
            except KeyError as exc:
                raise ResourceNotFound("subnet %r not found in network %r" % (self._subnet_name, network.name)) from exc
        if not subnets:
            raise ResourceNotFound("network %r has no subnets" % network.name)
        return next(iter(subnets.values()))

class Collection():
    '''
    Entry point for one resource type within a subscription.
    '''
    WRAPPER_CLASS = None

    def __init__(self, subscription):
        self._subscription = subscription

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self._subscription)

    @property
    def subscription(self):
        return self._subscription

    @property
    def logger(self):
        return self._subscription.logger

    def _wrap(self, inner):
        return self.WRAPPER_CLASS(self, inner) # pylint: disable=not-callable

    def inner_list(self, group_name=None):
        '''
        Return a list of SDK model objects
        '''
        raise NotImplementedError("%s does not implement %s" % (type(self).__name__, getframe(0)))

    def list(self, group_name=None):
        '''
        Return a list of wrappers, empty if there are none.
        With group_name, only that resource group.
        '''
        return [self._wrap(x) for x in self.inner_list(group_name)]

    def as_map(self, group_name=None):
        '''
        Return {name: wrapper}
        '''
        return {x.name : x for x in self.list(group_name)}

    def names(self, group_name=None):
        return sorted(x.name for x in self.list(group_name))

class GroupableCollection(Collection):
    '''
    Collection for resources that live in a resource group.
    get(), update() and delete() accept either a resource id
    or a (group_name, name) pair.
    '''
    # kwargs to azrid_normalize() identifying resource ids for this type
    AZRID_VALUES = dict()

    def _wrap(self, inner):
        return self.WRAPPER_CLASS(self, inner, group_name=resource_group_from_id(getattr(inner, 'id', None))) # pylint: disable=not-callable

    def group_and_name(self, resource_id_or_group, name=None):
        '''
        Return (group_name, name)
        '''
        if name is not None:
            return (resource_id_or_group, name)
        if self.AZRID_VALUES:
            azrid = azrid_normalize(resource_id_or_group, AzResourceId, exc_desc=self.WRAPPER_CLASS.RESOURCE_TYPE_DESC + ' id', **self.AZRID_VALUES)
            return (azrid.resource_group_name, azrid.resource_name)
        group_name = resource_group_from_id(resource_id_or_group)
        name = resource_name_from_id(resource_id_or_group)
        if not (group_name and name):
            raise ValueError("cannot parse %r as a %s id" % (resource_id_or_group, self.WRAPPER_CLASS.RESOURCE_TYPE_DESC))
        return (group_name, name)

    def inner_get(self, group_name, name):
        '''
        Return the SDK model object or None if it does not exist
        '''
        raise NotImplementedError("%s does not implement %s" % (type(self).__name__, getframe(0)))

    def get(self, resource_id_or_group, name=None):
        '''
        Return a wrapper for the existing resource, or None if it does not exist.
        '''
        group_name, name = self.group_and_name(resource_id_or_group, name=name)
        inner = self.inner_get(group_name, name)
        if inner is None:
            return None
        return self.WRAPPER_CLASS(self, inner, group_name=group_name) # pylint: disable=not-callable

    def _inner_new(self, name):
        '''
        Return a fresh SDK model object for a definition
        '''
        raise NotImplementedError("%s does not implement %s" % (type(self).__name__, getframe(0)))

    def define(self, name):
        '''
        Begin the definition of a new resource. Nothing happens
        in Azure until create() is called on the result.
        '''
        return self.WRAPPER_CLASS(self, self._inner_new(name), name=name) # pylint: disable=not-callable

    def update(self, resource_id_or_group, name=None):
        '''
        Return a wrapper for the existing resource to modify and apply().
        '''
        ret = self.get(resource_id_or_group, name=name)
        if ret is None:
            raise ResourceNotFound("%s %r not found" % (self.WRAPPER_CLASS.RESOURCE_TYPE_DESC, name or resource_id_or_group))
        return ret

    def inner_delete(self, group_name, name):
        raise NotImplementedError("%s does not implement %s" % (type(self).__name__, getframe(0)))

    def delete(self, resource_id_or_group, name=None):
        '''
        Delete the resource.
        '''
        group_name, name = self.group_and_name(resource_id_or_group, name=name)
        self.logger.info("delete %s %s in resource group %s", self.WRAPPER_CLASS.RESOURCE_TYPE_DESC, name, group_name)
        self.inner_delete(group_name, name)
