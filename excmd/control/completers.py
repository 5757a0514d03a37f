'''
Completion providers for command arguments.

A provider is called as ``provider(editor, word)`` with the partial word
under the cursor (quotes and escapes already removed) and returns a list
of ``(start, text)`` pairs: `text` replaces ``word[start:]``. Providers
never see the rest of the command line; the interpreter maps the pairs
back onto it.
'''

import logging
import os.path
import pathlib

from ..core.fuzzy import fuzzy_match
from ..util import time_limited


def fuzzy_candidates(word, items):
    return [(0, item) for item, _ in fuzzy_match(word, items)]


def none(editor, word):
    return []


def _expand_user(p):
    return pathlib.Path(os.path.expanduser(str(p)))


def _get_directory_contents(path):
    try:
        for item in sorted(path.iterdir()):
            yield item
    except PermissionError:
        pass


def _complete_path(editor, word, dirs_only):
    typed_dir, typed_name = os.path.split(word)
    if typed_dir:
        rootpath = editor.cwd / _expand_user(typed_dir)
    else:
        rootpath = editor.cwd

    if not rootpath.is_dir():
        logging.debug('no directory %s to complete in', rootpath)
        return []

    names = {}
    for p in time_limited(_get_directory_contents(rootpath), ms=250):
        if p.name.startswith('.') and not typed_name.startswith('.'):
            continue
        is_dir = p.is_dir()
        if dirs_only and not is_dir:
            continue
        names[p.name] = is_dir

    result = []
    for name, _ in fuzzy_match(typed_name, list(names)):
        text = os.path.join(typed_dir, name)
        if names[name]:
            text += os.path.sep
        result.append((0, text))
    return result


def filename(editor, word):
    return _complete_path(editor, word, dirs_only=False)


def directory(editor, word):
    return _complete_path(editor, word, dirs_only=True)


def buffer(editor, word):
    return fuzzy_candidates(word, [doc.display_name(editor.cwd)
                                   for doc in editor.documents.values()])


def setting(editor, word):
    return fuzzy_candidates(word, editor.config.keys())


def theme(editor, word):
    return fuzzy_candidates(word, editor.theme_loader.names())


def register(editor, word):
    return fuzzy_candidates(word, sorted(editor.registers))
