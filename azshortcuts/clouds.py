#
# azshortcuts/clouds.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Wrappers to manage fetching msrestazure.azure_cloud.Cloud objects
'''
import inspect
import urllib.parse

import msrestazure.azure_cloud

import azshortcuts.base_defaults

_CLOUDS = {tup[1].name : tup[1] for tup in inspect.getmembers(msrestazure.azure_cloud) if isinstance(tup[1], msrestazure.azure_cloud.Cloud)}

# Auth files and metadata use AzurePublicCloud
_CLOUDS['AzurePublicCloud'] = msrestazure.azure_cloud.AZURE_PUBLIC_CLOUD

_CLOUDS_LOWER = {k.lower() : v for k, v in _CLOUDS.items()}

CLOUD_DEFAULT = msrestazure.azure_cloud.AZURE_PUBLIC_CLOUD

def cloud_get(name, exc_value=azshortcuts.base_defaults.EXC_VALUE_DEFAULT):
    '''
    Return the named cloud object
    '''
    if isinstance(name, msrestazure.azure_cloud.Cloud):
        return name
    try:
        return _CLOUDS_LOWER[name.lower()]
    except (AttributeError, KeyError) as exc:
        raise exc_value("unknown cloud %r" % name) from exc

def _host(url):
    '''
    Return the lower-case host part of url, or '' if there is none
    '''
    try:
        return (urllib.parse.urlparse(url).hostname or '').lower()
    except (AttributeError, TypeError, ValueError):
        return ''

def cloud_for_endpoint(url, exc_value=azshortcuts.base_defaults.EXC_VALUE_DEFAULT):
    '''
    Given an ARM or classic management endpoint such as the
    baseURL or managementURI of an auth file, return the cloud
    that owns it.
    '''
    host = _host(url)
    if host:
        for cloud in _CLOUDS.values():
            endpoints = cloud.endpoints
            for candidate in (endpoints.resource_manager, endpoints.management):
                if _host(candidate) == host:
                    return cloud
    raise exc_value("no known cloud for endpoint %r" % url)
