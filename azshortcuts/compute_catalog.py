#
# azshortcuts/compute_catalog.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Read-only compute catalog: VM sizes and the image hierarchy
publisher -> offer -> sku -> version, all per region.
'''
from azshortcuts.azresourceid import (location_from_id,
                                      segment_value_from_id,
                                     )
from azshortcuts.btypes import Region
from azshortcuts.entities import (Collection,
                                  Wrapper,
                                 )
from azshortcuts.exceptions import ResourceNotFound

class Size(Wrapper):
    '''
    Wraps azure.mgmt.compute.models.VirtualMachineSize
    '''
    RESOURCE_TYPE_DESC = 'VM size'

    @property
    def max_data_disk_count(self):
        return self._inner.max_data_disk_count

    @property
    def memory_in_mb(self):
        return self._inner.memory_in_mb

    @property
    def number_of_cores(self):
        return self._inner.number_of_cores

    @property
    def os_disk_size_in_mb(self):
        return self._inner.os_disk_size_in_mb

    @property
    def resource_disk_size_in_mb(self):
        return self._inner.resource_disk_size_in_mb

class Sizes(Collection):
    '''
    VM sizes available in a region
    '''
    WRAPPER_CLASS = Size

    def inner_list(self, region): # pylint: disable=arguments-renamed
        az_compute = self._subscription._az_compute_client
        return self._subscription._cw_list(az_compute.virtual_machine_sizes.list, Region.normalize(region))

    def list(self, region): # pylint: disable=arguments-renamed
        return [self._wrap(x) for x in self.inner_list(region)]

    def as_map(self, region): # pylint: disable=arguments-renamed
        return {x.name : x for x in self.list(region)}

    def names(self, region): # pylint: disable=arguments-renamed
        return sorted(x.name for x in self.list(region))

class ImageVersion(Wrapper):
    '''
    One version of an image SKU
    '''
    RESOURCE_TYPE_DESC = 'image version'

    def __init__(self, collection, inner, sku):
        super().__init__(collection, inner)
        self.sku = sku

class Sku(Wrapper):
    '''
    One SKU of an image offer
    '''
    RESOURCE_TYPE_DESC = 'image SKU'

    def __init__(self, collection, inner, offer):
        super().__init__(collection, inner)
        self.offer = offer

    def versions(self):
        '''
        Return a list of ImageVersion, oldest first as Azure reports them
        '''
        offer = self.offer
        publisher = offer.publisher
        az_compute = self.subscription._az_compute_client
        items = self.subscription._cw_list(az_compute.virtual_machine_images.list, publisher.region, publisher.name, offer.name, self.name)
        return [ImageVersion(self._collection, x, self) for x in items]

class Offer(Wrapper):
    '''
    One offer of an image publisher
    '''
    RESOURCE_TYPE_DESC = 'image offer'

    def __init__(self, collection, inner, publisher):
        super().__init__(collection, inner)
        self.publisher = publisher

    def skus(self):
        '''
        Return a list of Sku
        '''
        publisher = self.publisher
        az_compute = self.subscription._az_compute_client
        items = self.subscription._cw_list(az_compute.virtual_machine_images.list_skus, publisher.region, publisher.name, self.name)
        return [Sku(self._collection, x, self) for x in items]

class Publisher(Wrapper):
    '''
    Wraps azure.mgmt.compute.models.VirtualMachineImageResource for a publisher
    '''
    RESOURCE_TYPE_DESC = 'image publisher'

    @property
    def region(self):
        return self._inner.location or location_from_id(self.id)

    def offers(self):
        '''
        Return a list of Offer
        '''
        az_compute = self.subscription._az_compute_client
        items = self.subscription._cw_list(az_compute.virtual_machine_images.list_offers, self.region, self.name)
        return [Offer(self._collection, x, self) for x in items]

class Publishers(Collection):
    '''
    VM image publishers
    '''
    WRAPPER_CLASS = Publisher

    def inner_list(self, region): # pylint: disable=arguments-renamed
        az_compute = self._subscription._az_compute_client
        return self._subscription._cw_list(az_compute.virtual_machine_images.list_publishers, Region.normalize(region))

    def list(self, region): # pylint: disable=arguments-renamed
        return [self._wrap(x) for x in self.inner_list(region)]

    def as_map(self, region): # pylint: disable=arguments-renamed
        return {x.name : x for x in self.list(region)}

    def names(self, region): # pylint: disable=arguments-renamed
        return sorted(x.name for x in self.list(region))

    def get(self, publisher_id):
        '''
        Return the Publisher given its id, which includes the region
        '''
        region = location_from_id(publisher_id)
        if not region:
            raise ValueError("cannot determine region from publisher id %r" % publisher_id)
        return self.get_in(region, publisher_id)

    def get_in(self, region, name):
        '''
        Return the Publisher in region whose id or name matches name
        ignoring case. Raises ResourceNotFound if there is none.
        '''
        want = name.lower()
        want_name = (segment_value_from_id(name, 'publishers') or name).lower()
        for inner in self.inner_list(region):
            if (inner.id or '').lower() == want:
                return self._wrap(inner)
            if (inner.name or '').lower() in (want, want_name):
                return self._wrap(inner)
        raise ResourceNotFound("Publisher not found: %s" % name)
