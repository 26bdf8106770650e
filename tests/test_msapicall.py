#
# tests/test_msapicall.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Unit tests for azshortcuts.msapicall
'''
import logging
import time
from unittest.mock import MagicMock

from azure.core.exceptions import (HttpResponseError,
                                   ResourceExistsError,
                                   ResourceNotFoundError,
                                  )
import pytest

import azshortcuts.msapicall
from azshortcuts import scfg
from azshortcuts.base_defaults import LRO_POLL_INTERVAL_DEFAULT
from azshortcuts.exceptions import LROTimeout
from azshortcuts.msapicall import (AzsARMPolling,
                                   CallPolicy,
                                   Caught,
                                   _delay_time_for_polling,
                                   _operation_id_from_url,
                                   armpolling_obj_for_operations,
                                   lro_wait,
                                   msapicall,
                                   msapiwrapcall,
                                  )

def http_error(status_code):
    exc = HttpResponseError(message="status %d" % status_code)
    exc.status_code = status_code
    return exc

class FlakyOp():
    '''
    Callable that raises each exception in excs in turn, then returns result
    '''
    def __init__(self, excs, result='done'):
        self.excs = list(excs)
        self.result = result
        self.calls = 0

    def __call__(self, *args, **kwargs):
        self.calls += 1
        if self.excs:
            raise self.excs.pop(0)
        return (self.result, args, kwargs)

class TestMsapicall():
    '''
    Test msapicall() retry behavior and Caught classification
    '''
    def setup_method(self):
        self.logger = logging.getLogger('azshortcuts.test')

    @pytest.fixture(autouse=True)
    def no_sleep(self, monkeypatch):
        self.sleeps = list()
        monkeypatch.setattr(azshortcuts.msapicall.time, 'sleep', self.sleeps.append)

    def test_success(self):
        op = FlakyOp([])
        assert msapicall(self.logger, op, 1, b=2) == ('done', (1,), {'b' : 2})
        assert op.calls == 1

    def test_retry_then_success(self):
        op = FlakyOp([http_error(500), http_error(503)])
        res = msapicall(self.logger, op, azs_callpolicy=CallPolicy(max_attempts_other=3))
        assert res[0] == 'done'
        assert op.calls == 3
        assert len(self.sleeps) == 2
        assert all(1 <= x <= 3 for x in self.sleeps)

    def test_retry_exhausted(self):
        op = FlakyOp([http_error(500), http_error(500), http_error(500)])
        with pytest.raises(HttpResponseError):
            msapicall(self.logger, op, azs_callpolicy=CallPolicy(max_attempts_other=2))
        assert op.calls == 2

    def test_default_policy_does_not_retry(self):
        op = FlakyOp([http_error(500)])
        with pytest.raises(HttpResponseError):
            msapicall(self.logger, op)
        assert op.calls == 1

    def test_configured_policy(self):
        azshortcuts.reset_caches(config_data={'defaults' : {'call_max_attempts' : 2}})
        op = FlakyOp([http_error(500)])
        assert msapicall(self.logger, op)[0] == 'done'
        assert op.calls == 2

    def test_missing_not_retried(self):
        op = FlakyOp([ResourceNotFoundError('gone')])
        with pytest.raises(ResourceNotFoundError):
            msapicall(self.logger, op, azs_callpolicy=CallPolicy(max_attempts_other=5))
        assert op.calls == 1

    def test_throttle_uses_throttle_limit(self):
        op = FlakyOp([http_error(429), http_error(429), http_error(429)])
        res = msapicall(self.logger, op, azs_callpolicy=CallPolicy(max_attempts_other=1, max_attempts_throttle=4))
        assert res[0] == 'done'
        assert all(28 <= x <= 32 for x in self.sleeps)

    def test_non_sdk_exception_propagates(self):
        op = FlakyOp([KeyError('k')])
        with pytest.raises(KeyError):
            msapicall(self.logger, op, azs_callpolicy=CallPolicy(max_attempts_other=5))
        assert op.calls == 1

    def test_msapiwrapcall(self):
        op = FlakyOp([])
        wrapped = msapiwrapcall(op, self.logger)
        assert wrapped() == ('done', tuple(), dict())
        assert msapiwrapcall(wrapped, self.logger) is wrapped
        assert msapiwrapcall('notcallable', self.logger) == 'notcallable'

class TestCaught():
    '''
    Test classification of exceptions
    '''
    def test_missing(self):
        assert Caught(ResourceNotFoundError('x')).is_missing()
        assert Caught(http_error(404)).is_missing()
        assert not Caught(http_error(500)).is_missing()
        assert Caught(http_error(404)).reason() == 'is_missing'

    def test_conflict(self):
        assert Caught(http_error(409)).is_conflict()
        assert Caught(ResourceExistsError('x')).is_conflict()

    def test_xml_error_code(self):
        exc = Exception('failed <?xml version="1.0"?>\n<Error><Code>ResourceNotFound</Code><Message>no</Message></Error>')
        caught = Caught(exc)
        assert caught.error_code == 'ResourceNotFound'
        assert caught.is_missing()

    def test_retry_time(self):
        assert Caught(ResourceNotFoundError('x')).retry_time() is None
        assert Caught(TypeError('x')).retry_time() is None
        assert 1 <= Caught(http_error(500)).retry_time() <= 3

class TestPolling():
    '''
    Test LRO polling support
    '''
    def setup_method(self):
        self.logger = logging.getLogger('azshortcuts.test')

    def test_operation_id_from_url(self):
        url = 'https://management.azure.com/subscriptions/x/providers/Microsoft.Network/locations/westus/operations/abc-123?api-version=2020-01-01'
        assert _operation_id_from_url(url) == 'abc-123'
        assert _operation_id_from_url('https://management.azure.com/subscriptions/x') is None

    def test_operation_id_get(self):
        polling = AzsARMPolling(timeout=1)
        polling._operation = MagicMock()
        polling._operation.get_polling_url.return_value = 'https://management.azure.com/subscriptions/x/operationStatuses/op-7?api-version=1'
        assert polling.operation_id_get() == 'op-7'
        op = MagicMock()
        op.polling_method.return_value = polling
        assert azshortcuts.msapicall._lro_operation_id(op) == 'op-7'
        assert azshortcuts.msapicall._lro_operation_id(MagicMock()) is None
        polling._operation.get_polling_url.side_effect = ValueError('no polling url')
        assert polling.operation_id_get() is None

    def test_delay_time(self):
        now = time.time()
        assert _delay_time_for_polling(now + 10, 30) == 0.1
        assert _delay_time_for_polling(now - 100, 30) == 15
        assert _delay_time_for_polling(now - 100, 7) == 7
        assert _delay_time_for_polling(now - 1000, 7) == 90

    def test_armpolling_obj(self):
        operations = MagicMock()
        operations._config.polling_interval = 7
        poller = armpolling_obj_for_operations(operations, logger=self.logger)
        assert isinstance(poller, AzsARMPolling)
        assert armpolling_obj_for_operations(None, logger=self.logger) is True

    def test_armpolling_obj_interval(self):
        operations = MagicMock()
        operations._config.polling_interval = 30
        assert armpolling_obj_for_operations(operations, logger=self.logger)._timeout == 30
        scfg.test_values['lro_poll_interval'] = 4
        assert armpolling_obj_for_operations(operations, logger=self.logger)._timeout == 4
        operations._config.polling_interval = None
        assert armpolling_obj_for_operations(operations, logger=self.logger)._timeout == 4
        del scfg.test_values['lro_poll_interval']
        assert armpolling_obj_for_operations(operations, logger=self.logger)._timeout == LRO_POLL_INTERVAL_DEFAULT

    def test_lro_wait(self):
        op = MagicMock()
        op.done.side_effect = [False, False, True]
        op.status.return_value = 'InProgress'
        lro_wait(op, 'test.op', self.logger, timeout=60)
        assert op.wait.call_count == 2

    def test_lro_wait_timeout(self):
        op = MagicMock()
        op.done.return_value = False
        with pytest.raises(LROTimeout):
            lro_wait(op, 'test.op', self.logger, timeout=0)
