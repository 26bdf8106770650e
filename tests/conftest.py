#
# tests/conftest.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Shared fixtures. Every test starts from an empty configuration.
SDK clients are MagicMock objects assigned to the cached client
attributes of a Subscription, so nothing here reaches Azure.
'''
import logging
from unittest.mock import MagicMock

import pytest

import azshortcuts
from azshortcuts.subscription import Subscription

SUBSCRIPTION_ID = '11111111-2222-3333-4444-555555555555'

@pytest.fixture(autouse=True)
def empty_config():
    azshortcuts.reset_caches(config_data={})
    yield
    azshortcuts.reset_caches(config_data={})

@pytest.fixture
def subscription():
    '''
    Subscription with mocked compute, network, resource, and storage clients
    '''
    sub = Subscription(SUBSCRIPTION_ID,
                       credential=MagicMock(),
                       logger=logging.getLogger('azshortcuts.test'))
    sub._az_compute_cachedclient = MagicMock()
    sub._az_network_cachedclient = MagicMock()
    sub._az_resource_cachedclient = MagicMock()
    sub._az_storage_cachedclient = MagicMock()
    return sub

@pytest.fixture
def sdk_model():
    '''
    Return a factory for SDK model objects. Attributes are assigned
    after construction so that read-only fields (id, name, ...) can be set.
    '''
    def _make(model_class, location=None, **attrs):
        obj = model_class(location=location) if location else model_class()
        for k, v in attrs.items():
            setattr(obj, k, v)
        return obj
    return _make
