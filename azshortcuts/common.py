#
# azshortcuts/common.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Application base classes: logging setup, command-line parsing, and main().
'''
import inspect
import logging
import os
import pprint
import sys
import traceback

import azshortcuts._paths
from azshortcuts._scfg import scfg
from azshortcuts.base_defaults import EXC_VALUE_DEFAULT
from azshortcuts.btypes import LogTo
from azshortcuts.exceptions import ApplicationExit
from azshortcuts.util import (ArgExplicit,
                              ArgumentParser,
                              expand_item_pformat,
                              log_level_normalize,
                              uuid_normalize,
                             )

class Application():
    """
    The base class for an application.
    This might be something bound directly to the command-line,
    or it might be a library object such as Subscription.

    Child classes typically do this:
    def __init__(self, attr1=None, **kwargs):
        super().__init__(**kwargs)
        self.attr1 = attr1

    @classmethod
    def main_add_parser_args(cls, ap_parser):
        super().main_add_parser_args(ap_parser)
        ap_parser.add_argument(...)

    def main_execute(self):
        self.stuff()
        raise ApplicationExit(0)
    """
    def __init__(self,
                 args_explicit=None,
                 debug=0,
                 exc_value=EXC_VALUE_DEFAULT,
                 log_level=None,
                 log_to=None,
                 logger_stream=None,
                 log_file=None,
                 log_fmt=None,
                 logger=None,
                 **kwargs):
        '''
        debug: Debug level verbosity. In the common case, just using self.logger.debug()
               is sufficient. Checks like "self.debug > 0" enable extra output.
        exc_value: Raise this exception for invalid values passed to construction.
        log_level: Used to create logger if none is passed in; otherwise, ignored.
        '''
        self.kwargs_check(kwargs)
        self.args_explicit = args_explicit or set()
        self._args_saved = None # See args_process
        self.debug = debug
        self.exc_value = exc_value
        self._log_to = LogTo(log_to if log_to is not None else self.LOG_TO_DEFAULT)
        self._logger_stream = logger_stream if logger_stream is not None else self._stream_for(self._log_to)
        self._log_level, self._logger = self._logger_create(log_level, logger, stream=self._logger_stream,
                                                            log_file=log_file, log_fmt=log_fmt)

    # Child name for the logger of this class. This may be overloaded.
    # This is combined with parent names in logger_name_get().
    LOGGER_NAME = 'azshortcuts'

    # Some standard log formats. Do not overload these in subclasses.
    # Instead, overload LOG_FORMAT.
    LOG_FORMAT_SIMPLE = "%(message)s"
    LOG_FORMAT_LOC = "%(asctime)s %(levelname).3s %(name)s:%(module)s:%(funcName)s:%(lineno)s: %(message)s"
    LOG_FORMAT_TS_LEVEL = "%(asctime)s %(levelname).3s %(message)s"
    LOG_FORMAT_LNAME_LEVEL = "%(name)s %(levelname).3s %(message)s"

    # Default log format for this class (overload in subclasses as necessary)
    LOG_FORMAT = LOG_FORMAT_SIMPLE

    LOG_LEVEL_DEFAULT = 'info'

    LOG_LEVEL_CHOICES = ('debug', 'info', 'warning', 'error', 'critical')

    LOG_TO_DEFAULT = LogTo.STDOUT.value

    EXIT_VERBOSE_ALWAYS = False

    @property
    def logger(self):
        '''
        Getter
        '''
        return self._logger

    @logger.setter
    def logger(self, logger):
        '''
        Setter
        '''
        self._logger = logger

    @property
    def log_level(self):
        '''
        Getter
        '''
        return self._log_level

    @classmethod
    def logger_name_get(cls):
        '''
        Compute the logger name to use for this class.
        '''
        nc = list()
        prev = None
        for k in reversed(inspect.getmro(cls)):
            logger_name = getattr(k, 'LOGGER_NAME', '')
            if logger_name and (logger_name is not prev):
                nc.append(logger_name)
                prev = logger_name
        return '.'.join(nc)

    @staticmethod
    def _stream_for(logto):
        '''
        Return the stream for logto
        '''
        logto = LogTo(logto)
        if logto == LogTo.STDERR:
            return sys.stderr
        return sys.stdout

    @classmethod
    def _logger_create(cls, log_level, logger, stream=None, log_to=None, log_file=None, log_fmt=None):
        '''
        Return (log_level, logger) to use in the caller context.
        '''
        log_to = log_to if log_to is not None else cls.LOG_TO_DEFAULT
        log_fmt = log_fmt if log_fmt is not None else cls.LOG_FORMAT
        stream = stream if stream is not None else cls._stream_for(log_to)
        if log_file:
            pathname = os.path.dirname(log_file) or '.'
            if not os.path.isdir(pathname):
                raise ValueError("Path %s must exist and be writeable in order to log to it." % pathname)
            if not os.access(pathname, os.W_OK):
                raise PermissionError("Path %s must be writeable in order to log to it." % pathname)
            logging.basicConfig(format=log_fmt, filename=log_file)
        else:
            logging.basicConfig(format=log_fmt, stream=stream)
        log_level = log_level_normalize(log_level if log_level is not None else cls.LOG_LEVEL_DEFAULT)
        if logger is not None:
            return log_level, logger
        logger = logging.getLogger(name=cls.LOGGER_NAME)
        cls._logging_adjust_other_loggers() # Do this after getting our logger so we've created at least one non-root logger before this one
        logger.setLevel(log_level)
        return log_level, logger

    @classmethod
    def _logging_adjust_other_loggers(cls):
        '''
        Adjust log levels in known-noisy loggers.
        '''
        sup = (('azure.identity._internal.decorators', logging.ERROR),
               ('azure.core.pipeline.policies.http_logging_policy', logging.WARNING),
              )
        for logger_name, log_level in sup:
            logger = logging.getLogger(name=logger_name)
            logger.setLevel(log_level)

    @classmethod
    def kwargs_check(cls, kwargs):
        '''
        Raise an appropriate exception if kwargs is not empty.
        '''
        if kwargs:
            badkeys = sorted(kwargs.keys())
            fr = "%s.%s" % (cls.__module__, cls.__name__)
            if len(badkeys) == 1:
                raise TypeError("%s() got an unexpected keyword argument '%s'" % (fr, badkeys[0]))
            raise TypeError("%s() got unexpected keyword arguments %s" % (fr, ','.join(badkeys)))

    def args_save(self, args_saved):
        '''
        Save the given arguments (passed in dict form).
        '''
        assert self._args_saved is None
        assert isinstance(args_saved, dict)
        self._args_saved = args_saved

    @classmethod
    def from_args_dict(cls, args_dict):
        '''
        Return an application instance given args_dict
        '''
        return cls(**args_dict)

    @classmethod
    def main_add_parser_args(cls, ap_parser):
        '''
        Add command-line arguments.
        Overload this to add your own arguments, and also invoke super().main_add_parser_args(ap_parser)
        '''
        group = ap_parser.get_argument_group('common')
        group.add_argument('--debug', type=int, default=cls.debug_default(),
                           action=ArgExplicit,
                           help='debug level')
        if not cls.EXIT_VERBOSE_ALWAYS:
            group.add_argument('--exit_verbose', action="store_true",
                               help='print/log exit status')
        group.add_argument('--log_level', type=str, default=cls.LOG_LEVEL_DEFAULT, choices=cls.LOG_LEVEL_CHOICES,
                           action=ArgExplicit,
                           help='log level')
        group.add_argument('--log_to', type=str, default=cls.LOG_TO_DEFAULT, choices=LogTo.values(),
                           action=ArgExplicit,
                           help='default log destination')
        group.add_argument('--log_file', type=str, default=None,
                           action=ArgExplicit,
                           help='log to the named file instead of stdout or stderr (overrides log_to)')
        group.add_argument('--config', type=str, default=None,
                           action=ArgExplicit,
                           help='YAML configuration file')

    @staticmethod
    def debug_default():
        '''
        Return default debug level from AZSHORTCUTS_DEBUG.
        '''
        env = os.environ.get('AZSHORTCUTS_DEBUG', '')
        if env:
            try:
                return int(env)
            except ValueError as exc:
                print("invalid value '%s' for AZSHORTCUTS_DEBUG" % env)
                raise ApplicationExit(1) from exc
        return 0

    @classmethod
    def main_handle_parser_args(cls, ap_args):
        '''
        ap_args is argparse.Namespace, the result of ArgumentParser.parse_args().
        Perform any transformations necessary.
        '''
        if not hasattr(ap_args, 'args_explicit'):
            setattr(ap_args, 'args_explicit', set())
        if hasattr(ap_args, 'config'):
            if ap_args.config:
                azshortcuts._paths.paths.reset(config_filename=ap_args.config) # pylint: disable=protected-access
                scfg.reset()
            delattr(ap_args, 'config')

    ARGS_SAVE = ()

    @classmethod
    def args_process(cls, args_dict):
        '''
        Return a tuple of (args_dict, args_saved). Both are dicts.
        Moves values named in ARGS_SAVE (union through the class hierarchy)
        from args_dict to args_saved. args_saved becomes _args_saved
        on the new object.
        '''
        args_to_save = set()
        for kls in inspect.getmro(cls):
            try:
                args_to_save.update(getattr(kls, 'ARGS_SAVE'))
            except AttributeError:
                # Past our base class
                break
        args_saved = dict()
        for k in args_to_save:
            try:
                args_saved[k] = args_dict.pop(k)
            except KeyError:
                pass
        return (args_dict, args_saved)

    @classmethod
    def main_app_setup(cls, cmd_args):
        '''
        Construct application object using the given command-line arguments (iterable of strings).
        Split out from main() to support unit testing. The caller is responsible
        for exception handling, logging, etc.
        Returns (app, debug, exit_verbose, logger)
        '''
        ap_parser = ArgumentParser(allow_abbrev=False)
        cls.main_add_parser_args(ap_parser)
        ap_args = ap_parser.parse_args(args=cmd_args)
        cls.main_handle_parser_args(ap_args)

        args_dict = vars(ap_args)
        exit_verbose = args_dict.pop('exit_verbose', cls.EXIT_VERBOSE_ALWAYS)

        args_dict, args_saved = cls.args_process(args_dict)
        args_dict['exc_value'] = ApplicationExit

        app = cls.from_args_dict(args_dict)
        app.args_save(args_saved)
        return (app, app.debug, exit_verbose, app.logger)

    def main_execute(self):
        '''
        Overload this to do the work of a command-line application
        '''
        raise NotImplementedError("%s does not implement main_execute" % type(self).__name__)

    @classmethod
    def main(cls, name):
        '''
        Entrypoint as from the command-line.
        '''
        if name == '__main__':
            cls.main_with_args(sys.argv[1:])
            raise SystemExit(1)

    @classmethod
    def main_with_args(cls, cmd_args):
        '''
        Entrypoint as from the command-line. cmd_args is typically sys.argv[1:].
        Always raises SystemExit.
        '''
        debug = 1
        exit_verbose = cls.EXIT_VERBOSE_ALWAYS or ('--exit_verbose' in cmd_args)
        logger = None

        try:
            c, debug, exit_verbose, logger = cls.main_app_setup(cmd_args)
            c.main_execute()
            c.logger.error("%s.main_execute returned unexpectedly", type(c).__name__)
            raise ApplicationExit(1)
        except (ApplicationExit, SystemExit) as exc:
            note = getattr(exc, 'note', '')
            if note:
                if logger is not None:
                    logger.error("%s", note)
                else:
                    print(note, file=sys.stderr)
            if exit_verbose:
                if logger is not None:
                    if debug > 0:
                        logger.info("exit stack:\n%s", traceback.format_exc())
                    logger.info("exit code %r", exc.code)
                else:
                    print("exit code %r" % exc.code)
            elif not isinstance(exc.code, (bool, int, type(None))):
                if logger is not None:
                    logger.error("%s", exc.code)
                else:
                    log_to_stream = sys.stderr if cls.LOG_TO_DEFAULT == LogTo.STDERR.value else sys.stdout
                    print(str(exc.code), file=log_to_stream)
            if isinstance(exc, SystemExit):
                raise
            raise SystemExit(int(bool(exc.code))) from exc
        except Exception as exc:
            ve = expand_item_pformat(exc)
            if len(ve.splitlines()) > 500:
                ve = pprint.pformat(vars(exc))
            if logger is not None:
                logger.error("%r\n%s\n%s", exc, ve, traceback.format_exc())
            else:
                print("%r\n%s\n%s" % (exc, ve, traceback.format_exc()), flush=True)
        if exit_verbose:
            if logger is not None:
                logger.info("exit code %r", 1)
            else:
                print("exit code %r" % 1, flush=True)
        raise SystemExit(1)

class ApplicationWithSubscription(Application):
    '''
    Application that operates on a subscription
    '''
    def __init__(self, subscription_id=None, tenant_id=None, **kwargs):
        super().__init__(**kwargs)
        self.tenant_id = tenant_id or scfg.get('tenant_id_default', None)
        self.subscription_id = subscription_id

    SUBSCRIPTION_ID_REQUIRED = True

    @property
    def subscription_id(self):
        '''
        Getter
        '''
        return self._subscription_id or None

    @subscription_id.setter
    def subscription_id(self, value):
        '''
        Setter. Normalizes to a lower-case UUID.
        '''
        if not value:
            if self.SUBSCRIPTION_ID_REQUIRED:
                raise self.exc_value("%s: subscription_id is required" % type(self).__name__)
            self._subscription_id = ''
            return
        self._subscription_id = uuid_normalize(value, key='subscription_id', exc_value=self.exc_value).lower()

    @classmethod
    def main_add_parser_args(cls, ap_parser):
        '''
        See Application.main_add_parser_args()
        '''
        super().main_add_parser_args(ap_parser)
        group = ap_parser.get_argument_group('subscription')
        group.add_argument('--subscription_id', type=str, default=os.environ.get('AZURE_SUBSCRIPTION_ID', ''),
                           action=ArgExplicit,
                           help='subscription ID on which to operate (default $AZURE_SUBSCRIPTION_ID)')
        group.add_argument('--tenant_id', type=str, default='',
                           action=ArgExplicit,
                           help='Azure tenant_id')

