
import logging
import pathlib

import yaml

from . import errors


class Theme(object):
    def __init__(self, name, styles=None, true_color=False):
        self.name = name
        self.styles = dict(styles or {})
        self.true_color = true_color

    def __repr__(self):
        return 'Theme({!r})'.format(self.name)


DEFAULT_THEME = 'default'


class ThemeLoader(object):
    '''
    Finds themes by name in a list of directories. A theme ``name`` is the
    YAML file ``name.yaml`` in the first directory that has one; the file
    maps style scopes to attributes. The ``default`` theme is built in.

    :param dirs: The directories to search, most specific first.
    '''

    def __init__(self, dirs=()):
        self.dirs = [pathlib.Path(d).expanduser() for d in dirs]

    def names(self):
        result = [DEFAULT_THEME]
        for d in self.dirs:
            try:
                entries = sorted(d.glob('*.yaml'))
            except OSError:
                continue
            for path in entries:
                if path.stem not in result:
                    result.append(path.stem)
        return result

    def default(self):
        return Theme(DEFAULT_THEME)

    def load(self, name):
        '''
        :raise NoSuchFileError: if no theme of that name exists.
        :raise HandlerError: if the theme file is malformed.
        '''
        if name == DEFAULT_THEME:
            return self.default()

        for d in self.dirs:
            path = d / (name + '.yaml')
            try:
                with path.open('rb') as f:
                    data = yaml.safe_load(f)
            except FileNotFoundError:
                continue
            except yaml.YAMLError as exc:
                raise errors.HandlerError('Could not load theme: {}'.format(exc)) from exc

            if data is None:
                data = {}
            if not isinstance(data, dict):
                raise errors.HandlerError('Could not load theme: {} is not a mapping'.format(path))

            logging.debug('loaded theme %r from %s', name, path)
            return Theme(name,
                         styles=data.get('styles', {}),
                         true_color=bool(data.get('true-color', False)))

        raise errors.NoSuchFileError('Could not load theme: no theme named {!r}'.format(name))
