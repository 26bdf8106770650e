#
# azshortcuts/btypes.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Basic types. No dependencies within the repo but outside this file other than azshortcuts.base_defaults.
'''
import enum

from azshortcuts.base_defaults import EXC_VALUE_DEFAULT

class EnumMixin():
    '''
    Mixin for enums that extends them with additional operations.
    Use this rather than subclassing the enum classes to avoid
    confusing pylint.
    '''
    @classmethod
    def values(cls, sort=True):
        '''
        Return a list of valid values for this enum.
        Default sort to true for UI elements.
        '''
        ret = [x.value for x in cls]
        if sort:
            ret.sort()
        return ret

    @classmethod
    def _ordering(cls):
        '''
        Return the ordering of the values of this enum based on declaration order.
        '''
        return [x.value for x in cls]

    def _indices(self, other):
        other = type(self)(other)
        ordering = self._ordering()
        return (ordering.index(self.value), ordering.index(other.value))

    def __lt__(self, other):
        a, b = self._indices(other)
        return a < b

    def __le__(self, other):
        a, b = self._indices(other)
        return a <= b

    def __ge__(self, other):
        a, b = self._indices(other)
        return a >= b

    def __gt__(self, other):
        a, b = self._indices(other)
        return a > b

    @classmethod
    def coerce(cls, value, exc_value=EXC_VALUE_DEFAULT, prefix=''):
        '''
        Return value coerced to this type.
        Raises exc_value with a human-friendly error on failure.
        '''
        try:
            return cls(value)
        except ValueError as exc:
            if prefix:
                raise exc_value(f"{prefix}: {exc}") from exc
            raise exc_value(str(exc)) from exc

    @classmethod
    def value_of(cls, value, exc_value=EXC_VALUE_DEFAULT, prefix=''):
        '''
        Accept either a member of this enum or its string value.
        Return the string value.
        '''
        if isinstance(value, cls):
            return value.value
        return cls.coerce(value, exc_value=exc_value, prefix=prefix).value

class ReadOnlyDict(dict):
    '''
    dict that does not allow updates
    Set attribute default_value on an instance to give it a default a la DefaultDict
    '''
    ro_error_class = TypeError
    ro_error_str = 'attempt to modify read-only dict'

    def _error_readonly(self, *args, **kwargs):
        '''
        This is used to replace methods of this object
        that would otherwise modify it.
        '''
        raise self.ro_error_class(self.ro_error_str)

    __delitem__ = _error_readonly
    __setitem__ = _error_readonly
    clear = _error_readonly
    pop = _error_readonly
    popitem = _error_readonly
    setdefault = _error_readonly
    update = _error_readonly

    def __missing__(self, key):
        try:
            return self.default_value
        except AttributeError as exc:
            raise KeyError(key) from exc

    def __contains__(self, item):
        if super().__contains__(item):
            return True
        return hasattr(self, 'default_value')

class LogTo(EnumMixin, enum.Enum):
    '''
    Logging destinations for Application
    '''
    STDERR = 'stderr'
    STDOUT = 'stdout'

class Region(EnumMixin, enum.Enum):
    '''
    Azure regions. Values are the ARM location names.
    Use label() for the display name.
    '''
    WEST_US = 'westus'
    CENTRAL_US = 'centralus'
    EAST_US = 'eastus'
    EAST_US2 = 'eastus2'
    NORTH_CENTRAL_US = 'northcentralus'
    SOUTH_CENTRAL_US = 'southcentralus'
    NORTH_EUROPE = 'northeurope'
    WEST_EUROPE = 'westeurope'
    EAST_ASIA = 'eastasia'
    SOUTHEAST_ASIA = 'southeastasia'
    JAPAN_EAST = 'japaneast'
    JAPAN_WEST = 'japanwest'
    BRAZIL_SOUTH = 'brazilsouth'
    AUSTRALIA_EAST = 'australiaeast'
    AUSTRALIA_SOUTHEAST = 'australiasoutheast'
    CENTRAL_INDIA = 'centralindia'
    SOUTH_INDIA = 'southindia'
    WEST_INDIA = 'westindia'

    def label(self):
        '''
        Return the human-facing name of this region (eg 'West US')
        '''
        return REGION_LABELS[self]

    @classmethod
    def from_label(cls, label, exc_value=EXC_VALUE_DEFAULT):
        '''
        Map a display name such as 'West US' to a Region.
        Matching ignores case and whitespace.
        '''
        key = ''.join(str(label).split()).lower()
        for region in cls:
            if region.value == key:
                return region
        raise exc_value(f"unknown region label {label!r}")

    @classmethod
    def normalize(cls, value):
        '''
        Given a Region, a location name, or a display name,
        return the ARM location name. Unknown strings are
        returned with whitespace removed and lower-cased so that
        regions not enumerated here still work. None stays None.
        '''
        if value is None:
            return None
        if isinstance(value, cls):
            return value.value
        return ''.join(str(value).split()).lower()

REGION_LABELS = {Region.WEST_US : 'West US',
                 Region.CENTRAL_US : 'Central US',
                 Region.EAST_US : 'East US',
                 Region.EAST_US2 : 'East US 2',
                 Region.NORTH_CENTRAL_US : 'North Central US',
                 Region.SOUTH_CENTRAL_US : 'South Central US',
                 Region.NORTH_EUROPE : 'North Europe',
                 Region.WEST_EUROPE : 'West Europe',
                 Region.EAST_ASIA : 'East Asia',
                 Region.SOUTHEAST_ASIA : 'Southeast Asia',
                 Region.JAPAN_EAST : 'Japan East',
                 Region.JAPAN_WEST : 'Japan West',
                 Region.BRAZIL_SOUTH : 'Brazil South',
                 Region.AUSTRALIA_EAST : 'Australia East',
                 Region.AUSTRALIA_SOUTHEAST : 'Australia Southeast',
                 Region.CENTRAL_INDIA : 'Central India',
                 Region.SOUTH_INDIA : 'South India',
                 Region.WEST_INDIA : 'West India',
                }

class StorageAccountType(EnumMixin, enum.Enum):
    '''
    Azure storage account types. Values here are the Azure-facing strings.
    '''
    STANDARD_LRS = 'Standard_LRS'
    STANDARD_ZRS = 'Standard_ZRS'
    STANDARD_GRS = 'Standard_GRS'
    STANDARD_RAGRS = 'Standard_RAGRS'
    PREMIUM_LRS = 'Premium_LRS'
STORAGE_ACCOUNT_TYPE_DEFAULT = StorageAccountType.STANDARD_LRS

class IpAllocationMethod(EnumMixin, enum.Enum):
    '''
    Allocation methods for public and private IP addresses
    '''
    STATIC = 'Static'
    DYNAMIC = 'Dynamic'

class SecurityRuleDirection(EnumMixin, enum.Enum):
    '''
    Traffic direction of an NSG rule
    '''
    INBOUND = 'Inbound'
    OUTBOUND = 'Outbound'

class SecurityRuleAccess(EnumMixin, enum.Enum):
    '''
    Whether an NSG rule permits or denies matching traffic
    '''
    ALLOW = 'Allow'
    DENY = 'Deny'

class SecurityRuleProtocol(EnumMixin, enum.Enum):
    '''
    Protocols an NSG rule may match. ANY is the wildcard.
    '''
    TCP = 'Tcp'
    UDP = 'Udp'
    ANY = '*'
