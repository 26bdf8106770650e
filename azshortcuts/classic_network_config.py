#
# azshortcuts/classic_network_config.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Classic (Service Management) virtual networks are described by one
NetworkConfiguration XML document per subscription. Adding or removing
a network means fetching that document, editing it, and submitting the
whole thing back. This module does the editing only; it does not talk
to Azure. There is no concurrency check: a concurrent writer between
fetch and submit is silently overwritten.

    config = ClassicNetworkConfig.from_text(fetched_xml)
    config.add_site('mynet', 'West US', '10.1.0.0/16')
    new_xml = config.to_text()
'''
import xml.etree.ElementTree as ET

import defusedxml.ElementTree

from azshortcuts.base_defaults import CLASSIC_SUBNET_NAME_DEFAULT
from azshortcuts.exceptions import SchemaError

NETWORK_CONFIGURATION_NS = 'http://schemas.microsoft.com/ServiceHosting/2011/07/NetworkConfiguration'

# Element path from the document root to the parent of the sites
SITES_PATH = ('VirtualNetworkConfiguration', 'VirtualNetworkSites')

def _local_name(tag):
    '''
    '{ns}Name' -> 'Name'
    '''
    return tag.rsplit('}', 1)[-1]

def _namespace(tag):
    '''
    '{ns}Name' -> 'ns'; 'Name' -> ''
    '''
    if tag.startswith('{'):
        return tag[1:tag.index('}')]
    return ''

def _children(elem, local_name):
    return [x for x in elem if _local_name(x.tag) == local_name]

def _child(elem, local_name):
    found = _children(elem, local_name)
    return found[0] if found else None

class ClassicNetworkSite():
    '''
    Read-only view of one VirtualNetworkSite element
    '''
    def __init__(self, elem):
        self._elem = elem

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.name)

    @property
    def name(self):
        return self._elem.get('name')

    @property
    def location(self):
        return self._elem.get('Location')

    @property
    def affinity_group(self):
        return self._elem.get('AffinityGroup')

    @property
    def address_prefixes(self):
        address_space = _child(self._elem, 'AddressSpace')
        if address_space is None:
            return list()
        return [(x.text or '').strip() for x in _children(address_space, 'AddressPrefix')]

    @property
    def cidr(self):
        '''
        Getter: the first address prefix, or None
        '''
        prefixes = self.address_prefixes
        return prefixes[0] if prefixes else None

    @property
    def subnets(self):
        '''
        Getter: {subnet name: address prefix}
        '''
        ret = dict()
        subnets = _child(self._elem, 'Subnets')
        if subnets is None:
            return ret
        for subnet in _children(subnets, 'Subnet'):
            prefix = _child(subnet, 'AddressPrefix')
            ret[subnet.get('name')] = (prefix.text or '').strip() if prefix is not None else None
        return ret

class ClassicNetworkConfig():
    '''
    A parsed NetworkConfiguration document
    '''
    def __init__(self, root):
        if _local_name(root.tag) != 'NetworkConfiguration':
            raise SchemaError("expected NetworkConfiguration document, not %r" % _local_name(root.tag))
        self._root = root
        self._ns = _namespace(root.tag)

    @classmethod
    def empty(cls):
        '''
        Return a config with no sites
        '''
        return cls(ET.Element('{%s}NetworkConfiguration' % NETWORK_CONFIGURATION_NS))

    @classmethod
    def from_text(cls, text):
        '''
        Parse text. Anything before the first '<' is discarded;
        Azure has been known to return a prefix there.
        '''
        if isinstance(text, bytes):
            text = text.decode('utf-8')
        idx = text.find('<')
        if idx < 0:
            raise SchemaError("network configuration contains no XML")
        try:
            root = defusedxml.ElementTree.fromstring(text[idx:])
        except ET.ParseError as exc:
            raise SchemaError("cannot parse network configuration: %s" % exc) from exc
        return cls(root)

    def to_text(self):
        '''
        Return the document as a str
        '''
        if self._ns:
            ET.register_namespace('', self._ns)
        return ET.tostring(self._root, encoding='unicode')

    def _tag(self, local_name):
        if self._ns:
            return '{%s}%s' % (self._ns, local_name)
        return local_name

    def _sites_parent(self, create=False):
        '''
        Return the VirtualNetworkSites element. With create, make
        missing intermediate elements; otherwise return None if absent.
        '''
        elem = self._root
        for local_name in SITES_PATH:
            child = _child(elem, local_name)
            if child is None:
                if not create:
                    return None
                child = ET.SubElement(elem, self._tag(local_name))
            elem = child
        return elem

    def _site_elems(self):
        parent = self._sites_parent()
        if parent is None:
            return list()
        return _children(parent, 'VirtualNetworkSite')

    def site_names(self):
        return [x.get('name') for x in self._site_elems()]

    def sites(self):
        return [ClassicNetworkSite(x) for x in self._site_elems()]

    def site(self, name):
        '''
        Return ClassicNetworkSite or None
        '''
        for elem in self._site_elems():
            if elem.get('name') == name:
                return ClassicNetworkSite(elem)
        return None

    def add_site(self, name, location, cidr, subnets=None):
        '''
        Append a VirtualNetworkSite. subnets is an optional {name: cidr};
        without it, one subnet named Subnet-1 covers all of cidr.
        Other sites are left as they are. Returns the new site.
        '''
        if name in self.site_names():
            raise ValueError("network site %r already exists" % name)
        subnets = dict(subnets) if subnets else {CLASSIC_SUBNET_NAME_DEFAULT : cidr}
        parent = self._sites_parent(create=True)
        site = ET.SubElement(parent, self._tag('VirtualNetworkSite'), attrib={'name' : name, 'Location' : location})
        address_space = ET.SubElement(site, self._tag('AddressSpace'))
        ET.SubElement(address_space, self._tag('AddressPrefix')).text = cidr
        subnets_elem = ET.SubElement(site, self._tag('Subnets'))
        for subnet_name, subnet_cidr in subnets.items():
            subnet = ET.SubElement(subnets_elem, self._tag('Subnet'), attrib={'name' : subnet_name})
            ET.SubElement(subnet, self._tag('AddressPrefix')).text = subnet_cidr
        return ClassicNetworkSite(site)

    def delete_site(self, name):
        '''
        Remove the one site named name. Raises KeyError if there is
        no such site and ValueError if the name is ambiguous.
        '''
        parent = self._sites_parent()
        matches = [x for x in self._site_elems() if x.get('name') == name]
        if not matches:
            raise KeyError("network site %r not found" % name)
        if len(matches) > 1:
            raise ValueError("network site name %r is not unique" % name)
        parent.remove(matches[0])
