#
# azshortcuts/exceptions.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Exception classes shared across azshortcuts modules
'''

class ApplicationException(Exception):
    '''
    Base class for application exceptions
    '''

class ApplicationExit(ApplicationException):
    '''
    This is interpreted as SystemExit, but it inherits from ApplicationException
    and not SystemExit. That makes it part of the Exception hierarchy
    and not BaseException.
    '''
    def __init__(self, code):
        self.code = code
        super().__init__(str(self.code))

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.code)

    def __str__(self):
        return str(self.code)

class ApplicationExitWithNote(ApplicationExit):
    '''
    ApplicationExit carrying a note for the user.
    main_with_args() reports the note before exiting.
    '''
    def __init__(self, code, note):
        super().__init__(code)
        self.note = note or ''

    def __repr__(self):
        if self.note:
            return "%s(%r, note=%r)" % (type(self).__name__, self.code, self.note)
        return "%s(%r)" % (type(self).__name__, self.code)

    def __str__(self):
        if self.note:
            return "%s [%s]" % (self.code, self.note)
        return str(self.code)

class SchemaError(ApplicationException):
    '''
    The datastructure provided does not match the schema definition.
    This error is raised when validating configuration data.
    '''
    # no specialization here

class AuthFileError(ApplicationException):
    '''
    An auth file cannot be parsed, or it does not
    describe the requested subscription.
    '''
    def __init__(self, txt, filename=None):
        super().__init__(txt)
        self.filename = filename

    def __str__(self):
        if self.filename:
            return "%s: %s" % (self.filename, self.args[0])
        return str(self.args[0])

class DefinitionIncomplete(ApplicationException):
    '''
    A resource definition is missing a value that create() requires.
    '''
    def __init__(self, resource_type, name, missing):
        self.resource_type = resource_type
        self.name = name
        self.missing = list(missing)
        super().__init__("%s %r definition is missing %s" % (resource_type, name, ', '.join(self.missing)))

class ResourceNotFound(ApplicationException):
    '''
    A resource that must exist for the operation does not.
    '''
    # no specialization here

class LROTimeout(ApplicationException):
    '''
    A long-running operation did not complete in the time allowed.
    '''
    def __init__(self, opname, timeout):
        self.opname = opname
        self.timeout = timeout
        super().__init__("%s did not complete within %s seconds" % (opname, timeout))
