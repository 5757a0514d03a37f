
import collections.abc
import types

from ..core import errors


class Registry(collections.abc.Mapping):
    '''
    Immutable lookup from every command name and alias to its
    :class:`~excmd.control.command.CommandDescriptor`.

    The registry is built once; a name or alias claimed twice is a
    programming error and raises :class:`~excmd.core.errors.RegistryError`.
    '''

    def __init__(self, commands):
        self._commands = tuple(commands)
        table = {}

        def insert(key, command):
            if key in table:
                raise errors.RegistryError(
                    '{!r} is claimed by both :{} and :{}'.format(
                        key, table[key].name, command.name))
            table[key] = command

        for command in self._commands:
            insert(command.name, command)
        for command in self._commands:
            for alias in command.aliases:
                insert(alias, command)

        self._table = types.MappingProxyType(table)

    def __getitem__(self, key):
        return self._table[key]

    def __iter__(self):
        return iter(self._table)

    def __len__(self):
        return len(self._table)

    @property
    def commands(self):
        '''
        The descriptors, in declaration order.
        '''
        return self._commands

    def names(self):
        '''
        The canonical command names, in declaration order. Aliases are
        not included.
        '''
        return [command.name for command in self._commands]

    def find(self, name):
        '''
        :raise UnknownCommandError: if `name` is neither a name nor an alias.
        '''
        try:
            return self._table[name]
        except KeyError:
            raise errors.UnknownCommandError(name) from None
