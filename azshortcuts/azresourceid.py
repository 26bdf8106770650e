#
# azshortcuts/azresourceid.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Support for manipulating Azure Resource IDs.

An ARM resource ID looks like:
  /subscriptions/{sub}/resourceGroups/{rg}/providers/{namespace}/{type}/{name}[/{childtype}/{childname}...]

The AzAnyResourceId family parses the common shapes exactly.
The *_from_id() helpers at the bottom accept anything and
return None for values they cannot find.
'''
import functools
import re
import uuid

from azshortcuts.base_defaults import EXC_VALUE_DEFAULT
from azshortcuts.util import (re_abs,
                              uuid_normalize,
                             )

# regexp conventions:
# X_TXT: The regexp in text form, to be found anywhere within the string.
# X_RE: compiled(X_TXT)
# X_ABS: compiled(re_abs(X_TXT))

# The docs claim a max length of 90, but the SDK enforces 79. Here, we enforce 78.
RE_RESOURCE_GROUP_TXT = r'([a-zA-Z0-9][a-zA-Z0-9\-\._\(\)]{0,78}[a-zA-Z0-9\-_\(\)]{0,1})'
RE_RESOURCE_GROUP_RE = re.compile(RE_RESOURCE_GROUP_TXT)
RE_RESOURCE_GROUP_ABS = re.compile(re_abs(RE_RESOURCE_GROUP_TXT))

RE_STORAGE_ACCOUNT_TXT = r'([a-z0-9]{3,24})'
RE_STORAGE_ACCOUNT_ABS = re.compile(re_abs(RE_STORAGE_ACCOUNT_TXT))

EXC_DESC_DEFAULT = 'resource_id'

def check_slots(text, toks, expect_slots, exc_desc=EXC_DESC_DEFAULT, exc_value=EXC_VALUE_DEFAULT):
    '''
    toks is a list of strings
    expect_slots is tuples of (index, value)
    expect each corresponding toks[index].lower() == value.lower()
    '''
    for idx, expect_val in expect_slots:
        try:
            tok = toks[idx]
        except IndexError as exc:
            raise exc_value("invalid %s %r (missing token[%d])" % (exc_desc, text, idx)) from exc
        if tok.lower() != expect_val.lower():
            raise exc_value("invalid %s %r (invalid token[%d] (%r))" % (exc_desc, text, idx, tok))

def _str_attr(name, check=None):
    '''
    Generate a property for a non-empty str attribute stored as _name.
    check, if given, is a compiled regexp the value must match.
    '''
    attr = '_' + name

    def getter(self):
        return getattr(self, attr)

    def setter(self, value):
        if not isinstance(value, str):
            raise TypeError("%s must be str, not %s" % (name, type(value).__name__))
        if not value:
            raise self._exc_value("invalid %s (empty string)" % name) # pylint: disable=protected-access
        if check and (not check.search(value)):
            raise self._exc_value("invalid %s %r" % (name, value)) # pylint: disable=protected-access
        setattr(self, attr, value)

    return property(getter, setter, doc=f"{name} (non-empty str)")

@functools.total_ordering
class AzAnyResourceId():
    '''
    Base class for resource ID representation.
    Subclasses describe their shape with:
      ATTRS: constructor args in order
      STR_FMT: str.format() template for the text form
      EXPECT_SLOTS: (index, literal) pairs that must match when parsing (case-insensitive)
      ARG_INDICES: token indices that supply ATTRS when parsing
    '''
    ATTRS = tuple()
    STR_FMT = '/'
    EXPECT_SLOTS = ((0, ''), (1, ''))
    ARG_INDICES = tuple()

    def __init__(self, exc_value=EXC_VALUE_DEFAULT):
        # Validation errors during construction raise exc_value.
        # After construction, setters raise ValueError.
        assert issubclass(exc_value, Exception)
        self._exc_value = ValueError

    @property
    def subscription_id(self):
        '''
        There is no subscription_id at this level. Evaluating to None
        saves callers from getattr(azrid, 'subscription_id', None).
        '''
        return None

    def fmt_vars(self):
        '''
        Return a dict of vars suitable for str.format
        '''
        return {attr : getattr(self, attr) for attr in self.ATTRS}

    def __repr__(self):
        args = ', '.join("%s=%r" % (k, v) for k, v in self.fmt_vars().items())
        return "%s(%s)" % (type(self).__name__, args)

    def __str__(self):
        return self.STR_FMT.format(**self.fmt_vars())

    def __lt__(self, other):
        # AzAnyResourceId rather than type(self) so subclasses compare with each other
        if not isinstance(other, AzAnyResourceId):
            return NotImplemented
        return str(self).lower() < str(other).lower()

    def __eq__(self, other):
        if not isinstance(other, AzAnyResourceId):
            return NotImplemented
        return str(self).lower() == str(other).lower()

    def __hash__(self):
        return hash(str(self).lower())

    @classmethod
    def _tokens_expected(cls):
        return len(cls.STR_FMT.split('/'))

    @classmethod
    def _from_text_toks(cls, text, exc_desc=EXC_DESC_DEFAULT, exc_value=EXC_VALUE_DEFAULT):
        '''
        Helper for from_text(). Tokenizes string text and returns the tokens.
        '''
        if not isinstance(text, str):
            raise TypeError("%s.from_text(): text must be str, not %s" % (cls.__name__, type(text).__name__))
        toks = text.split('/')
        if len(toks) != cls._tokens_expected():
            raise exc_value("invalid %s %r" % (exc_desc, text))
        return toks

    @classmethod
    def _args_from_text(cls, text, toks, exc_desc=EXC_DESC_DEFAULT, exc_value=EXC_VALUE_DEFAULT):
        '''
        Given toks as an array of strings of the expected length,
        parse it and return args for constructing an item of this type.
        '''
        check_slots(text, toks, cls.EXPECT_SLOTS, exc_desc=exc_desc, exc_value=exc_value)
        return [toks[idx] for idx in cls.ARG_INDICES]

    def values_check(self, text, exc_value=EXC_VALUE_DEFAULT, **kwargs):
        '''
        Check that each value in kwargs matches the corresponding
        attribute of self (case-insensitive). Keys that are not
        attributes of this type are ignored so callers may pass
        restrictions that do not apply to all types.
        '''
        for k, v in kwargs.items():
            if (not v) or (k not in self.ATTRS):
                continue
            if getattr(self, k).lower() != v.lower():
                raise exc_value("unexpected %s=%r in %r (expected %r)" % (k, getattr(self, k), text, v))

    def values_normalize(self, **kwargs):
        '''
        Invoked during from_text() so that the result case-matches caller-provided values
        '''
        for k, v in kwargs.items():
            if v and (k in self.ATTRS) and (k != 'subscription_id'):
                setattr(self, k, v)

    @classmethod
    def from_text(cls,
                  text,
                  exc_desc=EXC_DESC_DEFAULT,
                  exc_value=EXC_VALUE_DEFAULT,
                  **kwargs):
        '''
        Given an Azure resource ID as a string in text, construct an item
        of this type and return it. If exc_value is None, return None
        rather than raising for text that does not parse.
        '''
        class LocalValueError(ValueError):
            '''
            Used for exc_value in outcalls to intercept errors.
            Defined within this method specifically so that this
            does not match LocalValueError from any other method.
            '''
            # No specialization here.

        if exc_value is None:
            exc_value = LocalValueError

        try:
            toks = cls._from_text_toks(text, exc_desc=exc_desc, exc_value=exc_value)
            kls_args = cls._args_from_text(text, toks, exc_desc=exc_desc, exc_value=exc_value)
            ret = cls(*kls_args, exc_value=exc_value)
            ret.values_check(text, exc_value=exc_value, **kwargs)
            ret.values_normalize(**kwargs)
            return ret
        except LocalValueError:
            return None

    def matches(self, other_id):
        '''
        Return whether other_id matches self
        '''
        if not isinstance(other_id, str):
            raise TypeError("other_id is %s; expected str" % type(other_id))
        return str(self).lower() == other_id.lower()

class AzSubscriptionResourceId(AzAnyResourceId):
    '''
    Resource ID of an Azure subscription
    Example:
      /subscriptions/11111111-1111-1111-1111-111111111111
    '''
    ATTRS = ('subscription_id',)
    STR_FMT = '/subscriptions/{subscription_id}'
    EXPECT_SLOTS = ((0, ''), (1, 'subscriptions'))
    ARG_INDICES = (2,)

    def __init__(self, subscription_id, exc_value=EXC_VALUE_DEFAULT, **kwargs):
        super().__init__(exc_value=exc_value, **kwargs)
        self._exc_value = exc_value
        self.subscription_id = subscription_id
        self._exc_value = ValueError

    @property
    def subscription_id(self):
        '''
        Getter
        '''
        return self._subscription_id

    @subscription_id.setter
    def subscription_id(self, subscription_id):
        '''
        Setter. Canonizes subscription_id as a lower-case UUID.
        Other values are case-preserving.
        '''
        if not isinstance(subscription_id, str):
            raise TypeError("subscription_id must be str, not %s" % type(subscription_id).__name__)
        try:
            effective = str(uuid.UUID(subscription_id))
        except ValueError as exc:
            raise self._exc_value("subscription_id is not a UUID") from exc
        self._subscription_id = effective.lower()

    def values_check(self, text, exc_value=EXC_VALUE_DEFAULT, subscription_id=None, **kwargs): # pylint: disable=arguments-differ
        super().values_check(text, exc_value=exc_value, **kwargs)
        if subscription_id:
            if uuid_normalize(subscription_id, key='subscription_id', exc_value=None) != self.subscription_id:
                raise exc_value("subscription_id mismatch %r vs %r" % (subscription_id, text))

class AzSubscriptionProviderId(AzSubscriptionResourceId):
    '''
    Example:
      /subscriptions/11111111-1111-1111-1111-111111111111/providers/Microsoft.Compute
    '''
    ATTRS = AzSubscriptionResourceId.ATTRS + ('provider_name',)
    STR_FMT = AzSubscriptionResourceId.STR_FMT + '/providers/{provider_name}'
    EXPECT_SLOTS = AzSubscriptionResourceId.EXPECT_SLOTS + ((3, 'providers'),)
    ARG_INDICES = AzSubscriptionResourceId.ARG_INDICES + (4,)

    provider_name = _str_attr('provider_name')

    def __init__(self, subscription_id, provider_name, exc_value=EXC_VALUE_DEFAULT, **kwargs):
        super().__init__(subscription_id, exc_value=exc_value, **kwargs)
        self._exc_value = exc_value
        self.provider_name = provider_name
        self._exc_value = ValueError

class AzRGResourceId(AzSubscriptionResourceId):
    '''
    Resource group ID in Azure
    Example:
      /subscriptions/11111111-1111-1111-1111-111111111111/resourceGroups/some-rg
    '''
    ATTRS = AzSubscriptionResourceId.ATTRS + ('resource_group_name',)
    STR_FMT = AzSubscriptionResourceId.STR_FMT + '/resourceGroups/{resource_group_name}'
    EXPECT_SLOTS = AzSubscriptionResourceId.EXPECT_SLOTS + ((3, 'resourcegroups'),)
    ARG_INDICES = AzSubscriptionResourceId.ARG_INDICES + (4,)

    resource_group_name = _str_attr('resource_group_name', check=RE_RESOURCE_GROUP_ABS)

    def __init__(self, subscription_id, resource_group_name, exc_value=EXC_VALUE_DEFAULT, **kwargs):
        super().__init__(subscription_id, exc_value=exc_value, **kwargs)
        self._exc_value = exc_value
        self.resource_group_name = resource_group_name
        self._exc_value = ValueError

class AzResourceId(AzRGResourceId):
    '''
    Resource ID in Azure
    Example:
      /subscriptions/11111111-1111-1111-1111-111111111111/resourceGroups/some-rg/providers/Microsoft.Network/virtualNetworks/some-vnet
    '''
    ATTRS = AzRGResourceId.ATTRS + ('provider_name', 'resource_type', 'resource_name')
    STR_FMT = AzRGResourceId.STR_FMT + '/providers/{provider_name}/{resource_type}/{resource_name}'
    EXPECT_SLOTS = AzRGResourceId.EXPECT_SLOTS + ((5, 'providers'),)
    ARG_INDICES = AzRGResourceId.ARG_INDICES + (6, 7, 8)

    provider_name = _str_attr('provider_name')
    resource_type = _str_attr('resource_type')
    resource_name = _str_attr('resource_name')

    def __init__(self,
                 subscription_id,
                 resource_group_name,
                 provider_name,
                 resource_type,
                 resource_name,
                 exc_value=EXC_VALUE_DEFAULT,
                 **kwargs):
        super().__init__(subscription_id, resource_group_name, exc_value=exc_value, **kwargs)
        self._exc_value = exc_value
        self.provider_name = provider_name
        self.resource_type = resource_type
        self.resource_name = resource_name
        self._exc_value = ValueError

    @property
    def full_type(self):
        '''
        Type as ARM reports it in resource.type (eg Microsoft.Network/virtualNetworks)
        '''
        return f"{self.provider_name}/{self.resource_type}"

class AzSubResourceId(AzResourceId):
    '''
    SubResource in Azure
    Example:
      /subscriptions/11111111-1111-1111-1111-111111111111/resourceGroups/some-rg/providers/Microsoft.Network/virtualNetworks/some-vnet/subnets/some-subnet
    '''
    ATTRS = AzResourceId.ATTRS + ('subresource_type', 'subresource_name')
    STR_FMT = AzResourceId.STR_FMT + '/{subresource_type}/{subresource_name}'
    ARG_INDICES = AzResourceId.ARG_INDICES + (9, 10)

    subresource_type = _str_attr('subresource_type')
    subresource_name = _str_attr('subresource_name')

    def __init__(self,
                 subscription_id,
                 resource_group_name,
                 provider_name,
                 resource_type,
                 resource_name,
                 subresource_type,
                 subresource_name,
                 exc_value=EXC_VALUE_DEFAULT,
                 **kwargs):
        super().__init__(subscription_id, resource_group_name, provider_name, resource_type, resource_name, exc_value=exc_value, **kwargs)
        self._exc_value = exc_value
        self.subresource_type = subresource_type
        self.subresource_name = subresource_name
        self._exc_value = ValueError

    @property
    def parent_id(self):
        '''
        Return the AzResourceId of the containing resource
        '''
        return AzResourceId(self.subscription_id, self.resource_group_name, self.provider_name, self.resource_type, self.resource_name)

# Most specific last; azresourceid_from_text() returns the first that parses.
RESOURCE_ID_CLASSES = (AzSubscriptionResourceId,
                       AzSubscriptionProviderId,
                       AzRGResourceId,
                       AzResourceId,
                       AzSubResourceId,
                      )

def azresourceid_from_text(resource_id, exc_desc=EXC_DESC_DEFAULT, exc_value=EXC_VALUE_DEFAULT, **kwargs):
    '''
    Given a resource ID, convert it to an appropriate ResourceId object.
    If exc_value is None, returns None if there is no valid conversion.
    Otherwise, raises exc_value.
    kwargs (eg resource_type='virtualNetworks') restrict what is accepted.
    '''
    class InvalidConversion(Exception):
        '''
        Error class used locally for invalid conversions to
        distinguish versus other errors.
        '''
        # No specialization needed

    azrid = None
    for rid_class in RESOURCE_ID_CLASSES:
        try:
            # Do not pass kwargs through here so we can distinguish between
            # a malformed/non-matching format versus non-matching values.
            azrid = rid_class.from_text(resource_id, exc_desc=exc_desc, exc_value=InvalidConversion)
            break
        except InvalidConversion:
            continue

    if not azrid:
        if exc_value:
            raise exc_value("cannot parse %r as an Azure resource ID" % resource_id)
        return None

    try:
        azrid.values_check(resource_id, exc_value=exc_value or InvalidConversion, **kwargs)
    except InvalidConversion:
        return None
    azrid.values_normalize(**kwargs)
    return azrid

def azresourceid_or_none_from_text(resource_id, **kwargs):
    '''
    Like azresourceid_from_text(), except that on any parsing error, return None rather than raising.
    '''
    if not isinstance(resource_id, str):
        return None
    return azresourceid_from_text(resource_id, exc_value=None, **kwargs)

def azrid_normalize(resource_id, azrid_class, exc_desc=EXC_DESC_DEFAULT, exc_value=EXC_VALUE_DEFAULT, **kwargs):
    '''
    Given resource_id as a string or AzAnyResourceId, return it as azrid_class.
    '''
    if isinstance(resource_id, azrid_class):
        azrid = resource_id
        azrid.values_check(str(azrid), exc_value=exc_value, **kwargs)
        return azrid
    if isinstance(resource_id, AzAnyResourceId):
        resource_id = str(resource_id)
    if not isinstance(resource_id, str):
        raise TypeError("%s must be str or %s, not %s" % (exc_desc, azrid_class.__name__, type(resource_id).__name__))
    return azrid_class.from_text(resource_id, exc_desc=exc_desc, exc_value=exc_value, **kwargs)

def azrid_normalize_or_none(resource_id, azrid_class, **kwargs):
    '''
    Like azrid_normalize(), but return None for anything that does
    not parse as azrid_class with the given values.
    '''
    if isinstance(resource_id, AzAnyResourceId):
        resource_id = str(resource_id)
    if not isinstance(resource_id, str):
        return None
    return azrid_class.from_text(resource_id, exc_value=None, **kwargs)

def azrid_is(resource_id, azrid_class, **kwargs):
    '''
    Return whether resource_id parses as exactly azrid_class with the given values
    '''
    azrid = azresourceid_or_none_from_text(str(resource_id) if isinstance(resource_id, AzAnyResourceId) else resource_id, **kwargs)
    return type(azrid) is azrid_class # pylint: disable=unidiomatic-typecheck

######################################################################
# Forgiving accessors. These take anything and return None
# rather than raising when the value is not present.

def _id_tokens(resource_id):
    '''
    Split resource_id into path tokens without the leading empty token.
    Return None if resource_id is not an absolute path.
    '''
    if isinstance(resource_id, AzAnyResourceId):
        resource_id = str(resource_id)
    if not isinstance(resource_id, str):
        return None
    resource_id = resource_id.strip()
    if not resource_id.startswith('/'):
        return None
    toks = resource_id.rstrip('/').split('/')[1:]
    if (not toks) or (not all(toks)):
        return None
    return toks

def segment_value_from_id(resource_id, segment):
    '''
    Return the token that follows the first segment named segment
    (case-insensitive), or None.
    Example: segment_value_from_id(rid, 'locations')
    '''
    toks = _id_tokens(resource_id)
    if not toks:
        return None
    segment = segment.lower()
    for idx, tok in enumerate(toks[:-1]):
        if tok.lower() == segment:
            return toks[idx+1]
    return None

def subscription_from_id(resource_id):
    '''
    Return the subscription segment of resource_id as written, or None.
    Use AzSubscriptionResourceId and friends to validate it.
    '''
    return segment_value_from_id(resource_id, 'subscriptions')

def resource_group_from_id(resource_id):
    '''
    Return the resource group name from resource_id, or None
    '''
    return segment_value_from_id(resource_id, 'resourceGroups')

def provider_from_id(resource_id):
    '''
    Return the provider namespace (eg Microsoft.Network) from resource_id, or None
    '''
    return segment_value_from_id(resource_id, 'providers')

def _type_name_pairs(resource_id):
    '''
    Return [(type, name), ...] for the tokens after the provider namespace,
    or None if they do not pair up.
    '''
    toks = _id_tokens(resource_id)
    if not toks:
        return None
    lowered = [x.lower() for x in toks]
    try:
        idx = lowered.index('providers')
    except ValueError:
        return None
    rest = toks[idx+2:]
    if (not rest) or (len(rest) % 2):
        return None
    return list(zip(rest[0::2], rest[1::2]))

def resource_type_from_id(resource_id):
    '''
    Return the resource type path from resource_id, or None.
    This is the type below the provider namespace, with nested
    types joined by '/' (eg virtualNetworks or virtualNetworks/subnets).
    '''
    pairs = _type_name_pairs(resource_id)
    if not pairs:
        return None
    return '/'.join(x[0] for x in pairs)

def resource_name_from_id(resource_id):
    '''
    Return the name of the resource identified by resource_id, or None.
    For a nested resource, this is the innermost name. Subscription
    and resource group ids have no resource name.
    '''
    pairs = _type_name_pairs(resource_id)
    if not pairs:
        return None
    return pairs[-1][1]

def location_from_id(resource_id):
    '''
    Return the location segment value from resource_id (eg image publisher IDs), or None
    '''
    return segment_value_from_id(resource_id, 'locations')
