
class UserError(RuntimeError):
    '''
    An error that should be reported to the user.

    Errors of this kind are caught at the dispatch boundary and shown as
    status text. They are never fatal to the editor.
    '''

class ExistenceError(UserError):
    '''
    Something exists that prevents an operation from occuring, or something
    does not exist that is required for an operation.
    '''

class UnknownCommandError(ExistenceError):
    '''
    No command or alias with the given name is registered.
    '''

    def __init__(self, name):
        super().__init__("no such command: '{}'".format(name))
        self.name = name


class ArgumentError(UserError):
    '''
    The command line could not be parsed into arguments for the command.
    '''

class UnknownFlagError(ArgumentError):
    def __init__(self, flag):
        super().__init__("unknown flag '{}'".format(flag))
        self.flag = flag

class FlagValueError(ArgumentError):
    def __init__(self, flag, accepts):
        super().__init__("flag '--{}' expects a value {}".format(flag, accepts))
        self.flag = flag

class ArityError(ArgumentError):
    '''
    The number of positional arguments is outside of the range the
    command accepts.
    '''

class ValueParseError(UserError, ValueError):
    '''
    An argument could not be converted to the type the command expected.
    '''


class HandlerError(UserError):
    '''
    A command failed for a reason specific to that command.
    '''

class NoSuchFileError(HandlerError, ExistenceError, FileNotFoundError):
    '''
    A file was not found and this error should be reported to the user.
    '''

class BufferModifiedError(HandlerError):
    '''
    Buffers were closed without being saved. To close modified buffers use
    the ``!`` variant of the command.
    '''

    def __init__(self, names):
        names = list(names)
        super().__init__('{} unsaved buffer{} remaining: {}'.format(
            len(names),
            '' if len(names) == 1 else 's',
            '[' + ', '.join('"{}"'.format(n) for n in names) + ']'
        ))
        self.names = names

class NoBufferActiveError(HandlerError, ExistenceError): pass

class UnknownOptionError(HandlerError, ExistenceError):
    def __init__(self, key):
        super().__init__('Unknown key `{}`'.format(key))
        self.key = key

class HistoryExistenceError(ExistenceError):
    '''
    The requested information about the history does not exist.
    '''

class OldestHistoryItemError(HistoryExistenceError): pass
class NewestHistoryItemError(HistoryExistenceError): pass


class RegistryError(Exception):
    '''
    Two commands claim the same name or alias. This is a programming error
    detected while the registry is built, not a user error.
    '''

class PromptStateError(RuntimeError):
    '''
    An event was delivered to a prompt session that has already been
    validated or aborted.
    '''
