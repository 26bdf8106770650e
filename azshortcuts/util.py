#
# azshortcuts/util.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Various utility functions and classes.
'''
import argparse
import collections
import datetime
import enum
import inspect
import ipaddress
import logging
import pprint
import sys
import time
import traceback
import uuid

from azshortcuts.base_defaults import (EXC_VALUE_DEFAULT,
                                       PF,
                                      )

def re_abs(txt):
    '''
    Given regexp text, return a string that is that
    same regexp with begin and end applied.
    '''
    return '^' + txt + '$'

class ArgExplicit(argparse.Action):
    '''
    This may be passed to an argparse argument using action=.
    It stores the values in namespace.args_explicit (set).
    '''
    def __call__(self, parser, namespace, value, option_string=None):
        setattr(namespace, self.dest, value)
        if hasattr(namespace, 'args_explicit'):
            namespace.args_explicit.add(self.dest)
        else:
            setattr(namespace, 'args_explicit', {self.dest})

def getframe(idx):
    '''
    Return a string of the form caller_name:linenumber.
    idx is the number of frames up the stack, so 1 = immediate caller.
    '''
    f = sys._getframe(idx+1) # pylint: disable=protected-access
    return "%s:%s" % (f.f_code.co_name, f.f_lineno)

def expand_item(item, expand_enum=False, include_callable=True):
    '''
    For printing, dictify an arbitrary item.
    SDK model objects become nested dicts of their attributes.
    '''
    return _expand_item(item, 0, set(), expand_enum, include_callable)

def _expand_item(item, depth, sawids, expand_enum, include_callable):
    '''
    Recursive portion of expand_item().
    depth: Recursion depth for this logical call.
    sawids: Set of object identities observed here or above in the stack.
            Used to avoid circularity.
    '''
    sawids = set(sawids)
    if id(item) in sawids:
        return "SEEN %r" % item
    sawids.add(id(item))
    depth += 1
    if depth >= 500:
        return item
    if item is None:
        return item
    if isinstance(item, logging.Logger):
        return repr(item)
    if isinstance(item, (ipaddress.IPv4Address, ipaddress.IPv6Address, ipaddress.IPv4Network, ipaddress.IPv6Network)):
        return str(item)
    if isinstance(item, enum.Enum):
        if expand_enum:
            return item.value
        return item
    if isinstance(item, (bool, bytearray, bytes, complex, datetime.datetime, float, int, memoryview, range, str)):
        return item
    if any([inspect.isclass(item), inspect.isgenerator(item), inspect.ismodule(item), inspect.isroutine(item)]):
        return repr(item)
    r_args = (depth, sawids, expand_enum, include_callable)
    if isinstance(item, (frozenset, list, set, tuple)):
        if include_callable:
            tmp = [_expand_item(x, *r_args) for x in item]
        else:
            tmp = [_expand_item(x, *r_args) for x in item if not callable(x)]
        if isinstance(item, tuple):
            return tuple(tmp)
        # Expansion may produce unhashables (dicts), so sets come back as lists.
        return tmp
    if isinstance(item, (collections.OrderedDict, collections.defaultdict)):
        ret = collections.OrderedDict()
    elif isinstance(item, dict):
        ret = dict()
    else:
        ret = dict()
        try:
            item = vars(item)
        except TypeError:
            return repr(item)
    for k, v in item.items():
        if (not include_callable) and callable(v):
            continue
        if isinstance(k, str) and k.startswith('_') and (k != '_'):
            # msrest models carry private bookkeeping (additional_properties et al)
            continue
        ek = _expand_item(k, *r_args)
        ev = _expand_item(v, *r_args)
        try:
            ret[ek] = ev
        except TypeError:
            ret[repr(k)] = ev
    return ret

def indent_pformat(item, prefix=PF):
    '''
    Like pprint.pformat(item), but prepends prefix to each line.
    '''
    sep = '\n' + prefix
    tmp1 = item if isinstance(item, str) else pprint.pformat(item)
    tmp2 = sep.join(tmp1.splitlines())
    return prefix + tmp2

def indent_simple(item, prefix=PF):
    '''
    Returns each thing in item indented. A string is
    indented line by line.
    '''
    sep = '\n' + prefix
    if isinstance(item, str):
        return prefix + sep.join(item.splitlines())
    return prefix + sep.join([str(x) for x in item])

def expand_item_pformat(item, prefix=PF, expand_enum=False):
    '''
    Like pprint.pformat(expand_item(item)), but prepends prefix to each line.
    '''
    return indent_pformat(expand_item(item, expand_enum=expand_enum), prefix=prefix)

def indent_exc(prefix=PF):
    '''
    Indented human-readable exception stack.
    '''
    return indent_simple([x.rstrip() for x in traceback.format_exc().splitlines()], prefix=prefix)

def elapsed(ts0, ts1=None):
    '''
    Return the amount of time elapsed since ts0.
    If ts1 is provided, this is the time elapsed from ts0 to ts1.
    If ts1 is not provided, this is the time elapsed from ts0 to now.
    '''
    if ts1 is None:
        ts1 = time.time()
    return max(ts1 - ts0, 0.0)

class ArgumentParser(argparse.ArgumentParser):
    '''
    argparse.ArgumentParser with extended operations
    '''
    def get_argument_group(self, group_name, *args, **kwargs):
        '''
        Return the named argument group, creating it if necessary
        '''
        for ag in self._action_groups:
            if isinstance(ag, argparse._ArgumentGroup) and (ag.title == group_name): # pylint: disable=protected-access
                return ag
        return self.add_argument_group(group_name, *args, **kwargs)

def truthy(value):
    '''
    Return whether value should be considered True
    '''
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    if isinstance(value, str):
        if value.lower() in ('true', 'yes', 'on', '1'):
            return True
        if value.lower() in ('false', 'no', 'off', '0'):
            return False
        raise ValueError("cannot determine truthiness of %r" % value)
    raise TypeError("cannot determine truthiness of %s" % type(value))

def log_level_normalize(log_level):
    '''
    Given a log level as an int or a name ('info', 'DEBUG'),
    return the int value.
    '''
    if isinstance(log_level, bool):
        raise TypeError("invalid log_level %r" % log_level)
    if isinstance(log_level, int):
        return log_level
    if isinstance(log_level, str):
        ret = logging.getLevelName(log_level.strip().upper())
        if isinstance(ret, int):
            return ret
        raise ValueError("invalid log_level %r" % log_level)
    raise TypeError("invalid log_level type %s" % type(log_level))

def uuid_normalize(val, key='uuid', exc_value=EXC_VALUE_DEFAULT) -> str:
    '''
    Return a normalized representation of a uuid.
    Normalized is a string as generated by uuid.UUID.__str__
    '''
    err = f'invalid {key}'
    if isinstance(val, str):
        try:
            return str(uuid.UUID(val.strip()))
        except ValueError as exc:
            if exc_value:
                raise exc_value(f"{err}: {exc!r}") from exc
            return ''
    if isinstance(val, uuid.UUID):
        return str(val)
    if exc_value:
        raise exc_value("%s: unexpected type %s" % (err, type(val)))
    return ''

def name_with_suffix(name, suffix) -> str:
    '''
    Generate the name of a resource created on behalf of another named resource.
    '''
    return f"{name}{suffix}"

def name_with_prefix(prefix, name) -> str:
    '''
    Generate the name of a resource created on behalf of another named resource.
    '''
    return f"{prefix}{name}"
