'''
Editor configuration.

The configuration is a tree of mappings loaded from a YAML file and laid
over built-in defaults. Options are addressed by dotted keys such as
``search.smart-case``.

A :class:`Config` is never modified in place. Commands build a changed
copy and post it as a :class:`ConfigEvent` to the editor, which applies
it with :meth:`~excmd.abstract.editor.Editor.handle_config_events`.
'''

import collections
import copy
import enum
import json
import logging
import os
import pathlib
import warnings

import yaml

from . import errors


DEFAULTS = {
    'scrolloff': 5,
    'shell': ['sh', '-c'],
    'auto-format': True,
    'insert-final-newline': True,
    'line-number': 'absolute',
    'text-width': 80,
    'cursorline': False,
    'rulers': [],
    'gutters': ['diagnostics', 'spacer', 'line-numbers'],
    'theme': 'default',
    'true-color': False,
    'formatter': None,
    'search': {
        'smart-case': True,
        'wrap-around': True,
    },
}


class ConfigError(errors.UserError):
    '''
    The configuration file could not be read.
    '''


def config_path():
    '''
    Return the path of the user configuration file: ``$EXCMD_CONFIG`` if
    set, otherwise ``~/.config/excmd/config.yaml``.
    '''
    path = os.environ.get('EXCMD_CONFIG')
    if path:
        return pathlib.Path(path).expanduser()
    return pathlib.Path('~/.config/excmd/config.yaml').expanduser()


def _merge(base, overrides):
    for k, v in overrides.items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _merge(base[k], v)
        else:
            base[k] = v
    return base


def _normalize_key(key):
    return key.lower().split('.')


class Config(object):
    '''
    An immutable tree of configuration values.

    :param values: Values laid over :data:`DEFAULTS`.
    '''

    def __init__(self, values=None):
        self._values = _merge(copy.deepcopy(DEFAULTS), copy.deepcopy(values or {}))

    @classmethod
    def from_yaml(cls, source):
        '''
        Load configuration from a YAML string or stream.

        :raise ConfigError: if the source is not valid YAML.
        '''
        try:
            items = yaml.safe_load(source)
        except yaml.YAMLError as exc:
            raise ConfigError('Could not parse configuration: {}'.format(exc)) from exc

        if items is None:
            items = {}
        if not isinstance(items, dict):
            warnings.warn(UserWarning('Top level of YAML configuration file must be dictionary. Got {!r}.'
                                      .format(type(items).__name__)))
            items = {}
        return cls(items)

    def get(self, key):
        '''
        :raise UnknownOptionError: if there is no option `key`.
        '''
        node = self._values
        for part in _normalize_key(key):
            if not isinstance(node, dict) or part not in node:
                raise errors.UnknownOptionError(key.lower())
            node = node[part]
        return copy.deepcopy(node)

    def __getitem__(self, key):
        return self.get(key)

    def __contains__(self, key):
        try:
            self.get(key)
        except errors.UnknownOptionError:
            return False
        return True

    def with_value(self, key, value):
        '''
        Return a copy of this configuration with option `key` replaced.
        '''
        parts = _normalize_key(key)
        self.get(key)

        values = copy.deepcopy(self._values)
        node = values
        for part in parts[:-1]:
            node = node[part]
        node[parts[-1]] = copy.deepcopy(value)

        result = Config.__new__(Config)
        result._values = values
        return result

    def keys(self):
        '''
        Yield the dotted keys of every option, including the keys of
        nested sections.
        '''
        def rec(prefix, node):
            for k, v in node.items():
                name = prefix + k
                yield name
                if isinstance(v, dict):
                    yield from rec(name + '.', v)
        return list(rec('', self._values))

    def __eq__(self, other):
        if not isinstance(other, Config):
            return NotImplemented
        return self._values == other._values

    __hash__ = None


def load_config(path=None):
    '''
    Load the user configuration, or the defaults if there is no
    configuration file or ``EXCMD_NO_RC`` is set.
    '''
    if os.environ.get('EXCMD_NO_RC'):
        return Config()
    if path is None:
        path = config_path()
    path = pathlib.Path(path)
    try:
        with path.open('rb') as f:
            result = Config.from_yaml(f)
    except FileNotFoundError:
        logging.debug('no configuration file at %s', path)
        return Config()
    logging.debug('loaded configuration from %s', path)
    return result


class ConfigEventKind(enum.Enum):
    update = 1
    refresh = 2


class ConfigEvent(collections.namedtuple('ConfigEvent', 'kind config')):
    '''
    A request to change the editor configuration.

    ``ConfigEvent.update(config)`` replaces the configuration;
    ``ConfigEvent.refresh()`` reloads it from the configuration file.
    '''
    __slots__ = ()

    @classmethod
    def update(cls, config):
        return cls(ConfigEventKind.update, config)

    @classmethod
    def refresh(cls):
        return cls(ConfigEventKind.refresh, None)


class ValueKind(enum.Enum):
    boolean = 1
    string = 2
    number = 3
    array = 4
    other = 5

    @classmethod
    def of(cls, value):
        if isinstance(value, bool):
            return cls.boolean
        elif isinstance(value, str):
            return cls.string
        elif isinstance(value, (int, float)):
            return cls.number
        elif isinstance(value, list):
            return cls.array
        else:
            return cls.other


def format_value(value):
    '''
    Format an option value for the status line.
    '''
    return json.dumps(value)


def _load_scalar(text):
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise errors.ValueParseError('Could not parse field `{}`: {}'.format(text, exc)) from exc


def parse_value(current, field):
    '''
    Convert the text `field` to a value of the same kind as `current`.

    Strings are taken verbatim; everything else is read as YAML.

    :raise ValueParseError: if `field` is not a value of the right kind.
    '''
    kind = ValueKind.of(current)
    if kind is ValueKind.string:
        return field

    value = _load_scalar(field)
    if current is None:
        return value
    if ValueKind.of(value) is not kind:
        raise errors.ValueParseError('Could not parse field `{}`: expected {}'.format(field, kind.name))
    if kind is ValueKind.number and isinstance(current, int) and isinstance(value, float):
        raise errors.ValueParseError('Could not parse field `{}`: expected an integer'.format(field))
    return value


def _split_lists(text):
    '''
    Split `text` into its top-level bracketed lists, e.g.
    ``"[1, 2] ['a b']"`` becomes ``["[1, 2]", "['a b']"]``.
    '''
    result = []
    depth = 0
    start = None
    quote = None
    for i, c in enumerate(text):
        if quote is not None:
            if c == quote:
                quote = None
        elif c in '\'"':
            quote = c
        elif c == '[':
            if depth == 0:
                start = i
            depth += 1
        elif c == ']' and depth > 0:
            depth -= 1
            if depth == 0:
                result.append(text[start:i + 1])
    return result


def _next_candidate(current, candidates):
    '''
    Return the candidate after the one equal to `current`, wrapping to the
    first candidate when `current` is last or absent.
    '''
    for i, candidate in enumerate(candidates):
        if candidate == current and i + 1 < len(candidates):
            return candidates[i + 1]
    return candidates[0]


def _toggle_boolean(key, current, args, rest):
    if args:
        raise errors.HandlerError('Bad arguments. For boolean configurations use: `:toggle key`')
    return not current


def _toggle_string(key, current, args, rest):
    if len(args) < 2:
        raise errors.HandlerError('Bad arguments. For string configurations use: `:toggle key val1 val2 ...`')
    return _next_candidate(current, list(args))


def _toggle_number(key, current, args, rest):
    if len(args) < 2:
        raise errors.HandlerError('Bad arguments. For number configurations use: `:toggle key val1 val2 ...`')
    candidates = [parse_value(current, arg) for arg in args]
    return _next_candidate(current, candidates)


def _toggle_array(key, current, args, rest):
    lists = _split_lists(rest)
    if len(lists) < 2:
        raise errors.HandlerError('Bad arguments. For list configurations use: `:toggle key [...] [...]`')
    first, second = (_load_scalar(text) for text in lists[:2])
    if not (isinstance(first, list) and isinstance(second, list)):
        raise errors.HandlerError('values must be lists')
    if current == first:
        return second
    else:
        return first


def _toggle_other(key, current, args, rest):
    raise errors.HandlerError('Configuration {} does not support toggle yet'.format(key))


_TOGGLE_RULES = {
    ValueKind.boolean: _toggle_boolean,
    ValueKind.string: _toggle_string,
    ValueKind.number: _toggle_number,
    ValueKind.array: _toggle_array,
    ValueKind.other: _toggle_other,
}


def toggle_value(key, current, args, rest):
    '''
    Return the value option `key` takes when toggled.

    :param current: The option's current value.
    :param args: The candidate values typed after the key.
    :param rest: The verbatim text typed after the key (used for lists,
                 which may contain spaces).
    '''
    return _TOGGLE_RULES[ValueKind.of(current)](key, current, args, rest)
