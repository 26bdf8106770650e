#
# azshortcuts/command.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Implement the Command class which handles @command decorators.

Example:
    command = Command()

    class MyTool(Application):
        @command.printable
        def things_list(self):
            return [...]

        def main_execute(self):
            if not command.handle(self.action, ('printable', 'simple'), self):
                raise ApplicationExit(f"unknown action {self.action!r}")
'''
import functools

from azshortcuts.util import expand_item_pformat

class Command():
    '''
    Manage decorators for an application.
    These decorators expose actions through the command line
    by decorating the handler without touching argument parsing.
    A decorator whose name begins with 'printable' prints the result.
    '''
    def __init__(self):
        self._commands = dict() # key=name value=_Item

    RESERVED_NAMES = ('actions',
                      'can_handle',
                      'commands',
                      'handle',
                      'print',
                     )

    @property
    def actions(self):
        '''
        Getter that returns a lexically-sorted list of handler names.
        '''
        return sorted(self._commands.keys())

    @classmethod
    def _name_valid(cls, name):
        '''
        Return whether name is usable as a decoration.
        Leading underscores and RESERVED_NAMES are not.
        '''
        if not isinstance(name, str):
            return False
        if not name:
            return False
        if name.startswith('_'):
            return False
        if name in cls.RESERVED_NAMES:
            return False
        return True

    def __getattr__(self, name):
        '''
        If name is not internal to this class, treat it as a decorator.
        '''
        if not self._name_valid(name):
            raise AttributeError("'%s' object has no attribute '%s'" % (type(self).__name__, name))
        return functools.partial(self._decorate, name)

    def _decorate(self, decorator, func):
        '''
        Register func under decorator (eg 'printable').
        '''
        ci = _Item(decorator, func, printable=decorator.startswith('printable'))
        if not self._name_valid(ci.name):
            raise ValueError("may not decorate using reserved name %r" % ci.name)
        if ci.name in self._commands:
            raise ValueError("duplicate command %r" % ci.name)
        self._commands[ci.name] = ci
        return ci.func

    def _handle(self, doit, name, decorators, *args, **kwargs):
        '''
        Try provided decorators until one is found or there is nothing left to try.
        '''
        if isinstance(decorators, str):
            decorators = (decorators,)
        for decorator in decorators:
            if self._handle_one(doit, name, decorator, *args, **kwargs):
                return True
        return False

    def _handle_one(self, doit, name, decorator, *args, **kwargs):
        ci = self._commands.get(name, None)
        if not (ci and ci.decorator == decorator):
            return False
        if args:
            kls = ci.getclass()
            # Exactly the defining class; a subclass overload would not run here.
            if kls and (type(args[0]) is not kls): # pylint: disable=unidiomatic-typecheck
                return False
        if doit:
            ret = ci.func(*args, **kwargs)
            if ci.printable:
                self.print(ret)
        return True

    @staticmethod
    def print(item):
        '''
        print() the given item
        '''
        if not isinstance(item, (list, set, tuple)):
            item = [item]
        for x in item:
            if isinstance(x, str):
                print(x)
            else:
                print(expand_item_pformat(x, prefix=''))

    def handle(self, name, decorators, *args, **kwargs):
        '''
        Invoke the registered handler for name.
        decorators may be a single string or something iterable,
        tried in order. Return whether a handler ran.
        '''
        return self._handle(True, name, decorators, *args, **kwargs)

    def can_handle(self, name, decorators, *args, **kwargs):
        '''
        Like handle, but only returns whether the action would be handled.
        '''
        return self._handle(False, name, decorators, *args, **kwargs)

    def commands(self, decorators=None):
        '''
        Return a dict of name:func pairs, restricted to
        the given decorator (str) or decorators (iterable) if provided.
        '''
        if isinstance(decorators, str):
            decorators = (decorators,)
        return {name : ci.func for name, ci in self._commands.items() if (decorators is None) or (ci.decorator in decorators)}

class _Item():
    '''
    A single decorated call managed by Command
    '''
    def __init__(self, decorator, func, printable=False):
        self.decorator = decorator
        self.func = func
        self.printable = printable
        self.name = self.func.__name__

    def __repr__(self):
        return "%s(%r, %r, printable=%r)" % (type(self).__name__, self.decorator, self.func, self.printable)

    def getclass(self):
        '''
        Return the class of the decorated func. Returns None if
        this is a top-level function.
        '''
        qns = self.func.__qualname__.split('.')
        if len(qns) < 2:
            return None
        kls = self.func.__globals__.get(qns[0], None)
        for qn in qns[1:-1]:
            kls = getattr(kls, qn, None)
        if not isinstance(kls, type):
            raise RuntimeError("attempt to perform decorated handle on item not in the global namespace")
        return kls
