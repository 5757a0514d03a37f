'''
Commands that read and change the configuration and the theme.
'''

import logging

from ..core import errors
from ..core.config import ConfigEvent, config_path, format_value, parse_value, toggle_value
from .prompt import PromptEvent


def _post(editor, config):
    editor.config_events.put(ConfigEvent.update(config))


def get_option(editor, args, event):
    if event is not PromptEvent.validate:
        return

    key = args[0].lower()
    value = editor.config.get(key)
    editor.set_status(format_value(value))


def set_option(editor, args, event):
    '''
    ``:set-option key value``: the value is the rest of the line, so it may
    contain spaces.
    '''
    if event is not PromptEvent.validate:
        return

    parser = args.raw_parser()
    key = parser.next('').lower()
    field = parser.rest()

    current = editor.config.get(key)
    value = parse_value(current, field)
    logging.debug('set %s = %r', key, value)

    _post(editor, editor.config.with_value(key, value))
    editor.set_status("'{}' is now set to {}".format(key, field))


def toggle_option(editor, args, event):
    if event is not PromptEvent.validate:
        return

    key = args[0].lower()
    parser = args.raw_parser()
    parser.next()
    rest = parser.rest()

    current = editor.config.get(key)
    value = toggle_value(key, current, args[1:], rest)

    _post(editor, editor.config.with_value(key, value))
    editor.set_status("'{}' is now set to {}".format(key, format_value(value)))


def config_reload(editor, args, event):
    if event is not PromptEvent.validate:
        return
    editor.config_events.put(ConfigEvent.refresh())


def config_open(editor, args, event):
    if event is not PromptEvent.validate:
        return
    path = editor.config_file if editor.config_file is not None else config_path()
    editor.open(path)


def _load_theme(editor, name):
    theme = editor.theme_loader.load(name)
    if theme.true_color and not editor.config['true-color']:
        raise errors.HandlerError('Unsupported theme: theme requires true color support')
    return theme


def theme(editor, args, event):
    '''
    Previews the named theme while it is typed; with no argument,
    reports the current theme.
    '''
    name = args.first()

    if event is PromptEvent.abort:
        editor.unset_theme_preview()
    elif event is PromptEvent.update:
        if name is None:
            # Ensures that a preview theme gets cleaned up if the user
            # backspaces until the prompt is empty.
            editor.unset_theme_preview()
        else:
            try:
                editor.set_theme_preview(_load_theme(editor, name))
            except errors.UserError as exc:
                # half-typed names are expected while previewing
                logging.debug('no preview for theme %r: %s', name, exc)
    elif event is PromptEvent.validate:
        if name is None:
            editor.set_status(editor.theme.name)
        else:
            editor.set_theme(_load_theme(editor, name))
    else:
        raise AssertionError('unhandled prompt event {!r}'.format(event))
