#
# azshortcuts/msapicall.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Provide wrappers for calling Azure SDK operations.

Calls go through msapicall(), which classifies failures with Caught
and retries according to a CallPolicy. The policy built from the
configuration defaults to a single attempt, so callers see SDK
errors exactly as the SDK raised them unless retries are configured.

Long-running operations:
    op = azure.core.polling.LROPoller
    op._polling_method = AzsARMPolling (azure.mgmt.core.polling.arm_polling.ARMPolling subclass)
  Use armpolling_obj_for_operations() to generate the polling
  object and lro_wait() to wait for completion.
'''
import functools
import http.client
import logging
import random
import time
import urllib.parse

import azure.common
import azure.core.exceptions
import azure.mgmt.core.polling.arm_polling
from defusedxml import ElementTree
import msrest.exceptions
import msrestazure.azure_exceptions
import urllib3.exceptions

from azshortcuts._scfg import scfg
from azshortcuts.base_defaults import LRO_POLL_INTERVAL_DEFAULT
from azshortcuts.exceptions import (ApplicationException,
                                    LROTimeout,
                                   )
from azshortcuts.util import (elapsed,
                              getframe,
                              indent_pformat,
                             )

LOGGER_NAME_DEFAULT = 'azshortcuts'

URLLIB3_SDK_EXCEPTIONS = (urllib3.exceptions.HTTPError,
                          urllib3.exceptions.HTTPWarning,
                         )

AZURE_SDK_EXCEPTIONS = (azure.core.exceptions.HttpResponseError,
                        msrestazure.azure_exceptions.CloudError,
                       ) + URLLIB3_SDK_EXCEPTIONS

class CallPolicy():
    '''
    Call retry policy. max_attempts_* count the first attempt,
    so 1 means no retry.
    '''
    def __init__(self,
                 max_attempts_other=5,
                 max_attempts_throttle=100,
                 no_retry_classes=None):
        self.max_attempts_other = max_attempts_other
        self.max_attempts_throttle = max_attempts_throttle
        self.no_retry_classes = tuple(no_retry_classes or tuple())

    def __repr__(self):
        return "%s(max_attempts_other=%r, max_attempts_throttle=%r)" % (type(self).__name__, self.max_attempts_other, self.max_attempts_throttle)

    @classmethod
    def from_config(cls):
        '''
        Generate the policy described by the configuration.
        '''
        max_attempts_other = scfg.get('call_max_attempts', 1)
        return cls(max_attempts_other=max_attempts_other,
                   max_attempts_throttle=scfg.get('call_max_attempts_throttle', max_attempts_other))

class Caught():
    '''
    Capture an exception. Called from the exception context.
    '''
    def __init__(self, exc, callpolicy=None):
        self.callpolicy = callpolicy or CallPolicy()
        assert isinstance(self.callpolicy, CallPolicy)
        self.exc = exc
        self.status_code = getattr(self.exc, 'status_code', None)
        try:
            self.status_code_int = int(self.status_code)
        except (TypeError, ValueError):
            self.status_code_int = -1
        self.error_code = None
        self.error_target = None
        self.exc_data_error = None

        if isinstance(self.exc, URLLIB3_SDK_EXCEPTIONS):
            return

        if getattr(exc, 'error_code', None):
            self.error_code = str(exc.error_code)
        elif hasattr(exc, 'error') and getattr(exc.error, 'code', None):
            self.error_code = str(exc.error.code)
        else:
            idx = str(exc).find('<?xml')
            if idx >= 0:
                # Classic endpoints describe errors in XML
                try:
                    xmltxt = ''.join(str(exc)[idx:].strip().splitlines())
                    et_root = ElementTree.fromstring(xmltxt)
                    et_code_list = et_root.findall('Code')
                    self.error_code = str(et_code_list[0].text)
                except (ElementTree.ParseError, IndexError):
                    pass

        try:
            self.error_target = exc.error.target
        except AttributeError:
            pass

        try:
            self.exc_data_error = str(exc.error.error)
        except AttributeError:
            pass

    def is_conflict(self):
        '''
        Return whether this is a "conflict" error.
        '''
        return (self.status_code_int == http.client.CONFLICT) \
          or isinstance(self.exc, (azure.common.AzureConflictHttpError, azure.core.exceptions.ResourceExistsError))

    def is_missing(self):
        '''
        Return whether this exception is caused by a missing resource
        '''
        if self.status_code_int == http.client.NOT_FOUND:
            return True
        if isinstance(self.exc, (azure.common.AzureMissingResourceHttpError,
                                 azure.core.exceptions.ResourceNotFoundError,
                                )):
            return True
        if isinstance(self.exc, msrest.exceptions.HttpOperationError) \
          and (getattr(self.exc.response, 'status_code', None) == http.client.NOT_FOUND):
            return True
        return self.any_code_matches('ResourceNotFound', 'ResourceGroupNotFound', 'NotFound')

    def is_urllib3(self):
        '''
        Return whether this exception originates with urllib3
        '''
        return isinstance(self.exc, URLLIB3_SDK_EXCEPTIONS)

    _no_retry_classes = (azure.common.AzureMissingResourceHttpError,
                         azure.core.exceptions.ResourceExistsError,
                         azure.core.exceptions.ResourceNotFoundError,
                         azure.core.exceptions.ClientAuthenticationError,
                         msrest.exceptions.SerializationError,
                         msrest.exceptions.ValidationError,
                        )

    # Do not include 'AuthorizationFailed' here. AAD sometimes
    # claims no authorization briefly and it goes away on retry.
    _no_retry_codes = ('ExpiredAuthenticationToken',
                       'InvalidParameter',
                       'InvalidResourceReference',
                       'LinkedInvalidPropertyId',
                       'MaxStorageAccountsCountPerSubscriptionExceeded',
                       'OSProvisioningTimedOut',
                       'PropertyChangeNotAllowed',
                       'ResourceGroupNotFound',
                       'StorageAccountAlreadyTaken',
                      )

    def any_code_matches(self, *args):
        '''
        Return whether any code in args (strings)
        matches either self.exc_data_error or self.error_code.
        '''
        for code in args:
            if self.exc_data_error and (self.exc_data_error.lower() == code.lower()):
                return True
            if self.error_code and (self.error_code.lower() == code.lower()):
                return True
        return False

    def is_server_rejected_auth(self):
        '''
        Return whether this error is server rejected authentication
        '''
        return self.any_code_matches('AuthenticationFailed', 'ExpiredAuthenticationToken')

    def is_throttle(self):
        '''
        Endpoint wants us to throttle
        '''
        return self.status_code_int == http.client.TOO_MANY_REQUESTS

    def retry_time(self):
        '''
        Return None if the operation should not retry
        Return 0.0 if the operations should retry immediately
        Return > 0.0 for an amount of time the operation should sleep before retrying
        '''
        if isinstance(self.exc, self._no_retry_classes + self.callpolicy.no_retry_classes) \
          or self.any_code_matches(*self._no_retry_codes):
            return None
        if isinstance(self.exc, (ApplicationException, KeyboardInterrupt, SystemExit, TypeError)) \
          or self.is_server_rejected_auth() \
          or self.is_missing() \
          :
            return None
        if self.is_urllib3():
            # typically an Azure network problem of some sort - give it a little extra time to sort out
            return random.uniform(5, 10)
        if self.is_throttle() or self.is_conflict():
            # Jitter the sleep to break up convoys.
            return random.uniform(28, 32)
        return random.uniform(1, 3)

    def reason(self):
        '''
        Bucket failure reasons into a human-readable string.
        '''
        # The ordering here matches the bucketing in retry_time()
        for checker in ('is_server_rejected_auth',
                        'is_missing',
                        'is_urllib3',
                        'is_throttle',
                        'is_conflict',
                       ):
            proc = getattr(self, checker)
            if proc():
                return checker
        return None

def msapicall(logger, op, *args, azs_callpolicy=None, **kwargs):
    '''
    execute op(*args, **kwargs) and return the result.
    Retry on errors as allowed by azs_callpolicy.
    '''
    callpolicy = azs_callpolicy or CallPolicy.from_config()
    last_reason = None
    attempt_all = 0
    attempt_this_reason = 0
    while True:
        try:
            return op(*args, **kwargs)
        except AZURE_SDK_EXCEPTIONS as exc:
            caught = Caught(exc, callpolicy=callpolicy)
            sleep_secs = caught.retry_time()
            if sleep_secs is None:
                raise
            reason = caught.reason()
            attempt_all += 1
            if reason == last_reason:
                attempt_this_reason += 1
            else:
                attempt_this_reason = 1
            last_reason = reason
            if caught.is_throttle():
                max_attempts = callpolicy.max_attempts_throttle
            else:
                max_attempts = callpolicy.max_attempts_other
            if attempt_this_reason >= max_attempts:
                raise
            reason_str = reason or 'other'
            if (not reason) and (logger.level <= logging.DEBUG):
                logger.warning("%s op=%r count=%s,%s/%s will retry after %s [%s] %r [WILL RETRY]\n%s", getframe(0), op, attempt_all, attempt_this_reason, max_attempts, sleep_secs, reason_str, exc, indent_pformat(vars(exc)))
            else:
                logger.warning("%s op=%r count=%s,%s/%s will retry after %s [%s] %r [WILL RETRY]", getframe(0), op, attempt_all, attempt_this_reason, max_attempts, sleep_secs, reason_str, exc)
            time.sleep(sleep_secs)

def msapiwrapcall(call, logger):
    '''
    Given callable call, wrap it with msapicall unless it is already wrapped.
    '''
    if not callable(call):
        return call
    if isinstance(call, functools.partial) and (call.func == msapicall): # pylint: disable=comparison-with-callable
        # already wrapped
        return call
    return functools.partial(msapicall, logger, call)

def _operation_id_from_url(url, logger=None):
    '''
    Given a URL, such as used by a polling object to query LRO status,
    extract and return the operation ID. Return None if it cannot
    be determined.
    '''
    try:
        parsed = urllib.parse.urlparse(url)
    except (AttributeError, TypeError, ValueError) as exc:
        logger = logger or logging.getLogger(LOGGER_NAME_DEFAULT)
        logger.warning("%s cannot parse url=%r: %r", getframe(0), url, exc)
        return None
    pathtoks = parsed.path.split('/')
    if (len(pathtoks) >= 2) and (pathtoks[-2].lower() in ('operations', 'operationstatuses')):
        return pathtoks[-1]
    # Possibly the operation completed synchronously
    return None

def _delay_time_for_polling(time0, default):
    '''
    time0 is the beginning of the operation as sampled from time.time().
    default is the delay time the poller would use without our tampering.

    Early on, poll more aggressively to avoid sleeping
    unnecessarily long. Later, back off to reduce the number
    of polling ops in the subscription to avoid throttling.
    '''
    el = elapsed(time0)
    if el <= 0.2:
        return 0.1
    if el < 3:
        return 1
    if el < 10:
        return min(default, 5)
    if el < 60:
        return min(default, 10)
    if el < 180:
        return min(default, 15)
    # From here on, ignore default.
    if el < 360:
        return 30
    if el < 900:
        return 60
    return 90

class AzsARMPolling(azure.mgmt.core.polling.arm_polling.ARMPolling):
    '''
    azure.mgmt.core.polling.arm_polling.ARMPolling with
    front-loaded polling and an accessor for the operation ID.
    '''
    def _poll(self):
        '''
        Force an update_status() before entering the polling loop
        to avoid sleeping to wait for an already-completed operation.
        '''
        if not self.finished():
            self.update_status()
        return super()._poll()

    def _extract_delay(self):
        try:
            time0 = self._azs_time0
        except AttributeError:
            time0 = time.time()
            self._azs_time0 = time0 # pylint: disable=attribute-defined-outside-init
        default = super()._extract_delay()
        return _delay_time_for_polling(time0, default)

    def operation_id_get(self):
        '''
        Extract the operation_id from the _operation object.
        '''
        try:
            url = self._operation.get_polling_url()
        except (AttributeError, NotImplementedError, ValueError):
            # StatusCheckPolling raises ValueError
            return None
        return _operation_id_from_url(url)

def armpolling_obj_for_operations(operations, logger=None):
    '''
    Given an SDK operations object, return the polling object to pass as polling=
    to a begin_* operation. A configured lro_poll_interval wins over
    the polling_interval of the client configuration.
    '''
    config = getattr(operations, '_config', None)
    if config is not None:
        timeout = scfg.get('lro_poll_interval', None)
        if not isinstance(timeout, (int, float)):
            timeout = getattr(config, 'polling_interval', None)
        if not isinstance(timeout, (int, float)):
            timeout = LRO_POLL_INTERVAL_DEFAULT
        return AzsARMPolling(timeout=timeout)
    logger = logger or logging.getLogger(LOGGER_NAME_DEFAULT)
    logger.warning("%s: cannot determine polling for operations %r", getframe(0), operations)
    return True

def _lro_operation_id(op):
    '''
    Return the operation ID of LROPoller op, or None when its
    polling method is not AzsARMPolling
    '''
    polling_method = getattr(op, 'polling_method', None)
    polling = polling_method() if callable(polling_method) else None
    if isinstance(polling, AzsARMPolling):
        return polling.operation_id_get()
    return None

def lro_wait(op, opname, logger, timeout=None):
    '''
    Wait for the long-running operation op (LROPoller) to complete.
    timeout is in seconds; None means the configured lro_timeout,
    and no configured value means wait forever.
    Raises LROTimeout if op is still running when time runs out.
    Errors from the operation are raised by op.result(), not here.
    '''
    if timeout is None:
        timeout = scfg.get('lro_timeout', None)
    interval = scfg.get('lro_poll_interval', LRO_POLL_INTERVAL_DEFAULT)
    t0 = time.time()
    logger.debug("%s %s operation_id=%s", getframe(0), opname, _lro_operation_id(op))
    while not op.done():
        if timeout is not None:
            remaining = timeout - elapsed(t0)
            if remaining <= 0:
                raise LROTimeout(opname, timeout)
            op.wait(timeout=min(interval, remaining))
        else:
            op.wait(timeout=interval)
        logger.debug("%s %s waiting elapsed=%.1f status=%s", getframe(0), opname, elapsed(t0), op.status())
    logger.debug("%s %s complete after %.1f", getframe(0), opname, elapsed(t0))
