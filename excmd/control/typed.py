'''
The table of typable commands.

:data:`TYPABLE_COMMAND_LIST` declares every command; build the registry an
interpreter dispatches against with :func:`default_registry`.
'''

import logging

from ..core import errors
from ..core.fuzzy import fuzzy_match
from . import buffer_commands as buf
from . import completers
from . import option_commands as opt
from . import shell_commands as sh
from .command import CommandCompleter, CommandDescriptor, Signature
from .prompt import PromptEvent
from .registry import Registry
from .shellwords import Flag, ParseMode


def echo(editor, args, event):
    if event is not PromptEvent.validate:
        return
    editor.set_status(' '.join(args))


def change_current_directory(editor, args, event):
    if event is not PromptEvent.validate:
        return

    target = args.first('~')
    if target == '-':
        if editor.last_cwd is None:
            raise errors.HandlerError('No previous working directory')
        target = str(editor.last_cwd)

    editor.set_cwd(target)
    logging.debug('cwd is now %s', editor.cwd)
    editor.set_status('Current working directory is now {}'.format(editor.cwd))


def show_current_directory(editor, args, event):
    if event is not PromptEvent.validate:
        return
    editor.set_status('Current working directory is {}'.format(editor.cwd))


def clear_register(editor, args, event):
    if event is not PromptEvent.validate:
        return

    name = args.first()
    if args.has_flag('all') or name is None:
        editor.registers.clear()
        editor.set_status('All registers cleared')
        return

    if len(name) != 1:
        raise errors.ValueParseError('invalid register {}'.format(name))
    if editor.registers.pop(name, None) is None:
        raise errors.HandlerError('Register {} not found'.format(name))
    editor.set_status('Register {} cleared'.format(name))


def show_help(editor, args, event):
    '''
    With a command name, show its help text; otherwise list the commands.
    '''
    if event is not PromptEvent.validate:
        return

    name = args.first()
    if name is None:
        editor.set_status(' '.join(editor.registry.names()))
    else:
        editor.set_status(editor.registry.find(name).doc_text())


def command_name(editor, word):
    return [(0, name) for name, _ in fuzzy_match(word, editor.registry.names())]


_NO_FORMAT = Flag('no-format', desc="skip formatting the document before saving")

_ONE_FILE = Signature(positionals=(0, 1),
                      flags=(_NO_FORMAT,),
                      accepts='<path>',
                      completer=CommandCompleter.positional(completers.filename))

_EXIT_CODE = Signature(positionals=(0, 1), accepts='<code>')

_BUFFERS = Signature(positionals=(0, None),
                     accepts='<buffer>...',
                     completer=CommandCompleter.all(completers.buffer))

_FILES = Signature(positionals=(0, None),
                   accepts='<path>...',
                   completer=CommandCompleter.all(completers.filename))

_STEPS = Signature(positionals=(1, 1), accepts='<steps>')

_SHELL = Signature(positionals=(1, 1),
                   parse_mode=ParseMode.literal,
                   accepts='<command>',
                   completer=CommandCompleter.all(completers.filename))


TYPABLE_COMMAND_LIST = (
    CommandDescriptor('quit', buf.quit_view, aliases=('q',),
                      doc='Close the current view.'),
    CommandDescriptor('quit!', buf.force_quit_view, aliases=('q!',),
                      doc='Force close the current view, ignoring unsaved changes.'),
    CommandDescriptor('open', buf.open_files, aliases=('o', 'edit', 'e'),
                      doc='Open a file from disk into the current view.',
                      signature=Signature(positionals=(1, None),
                                          accepts='<path>...',
                                          completer=CommandCompleter.all(completers.filename))),
    CommandDescriptor('buffer-close', buf.buffer_close, aliases=('bc', 'bclose'),
                      doc='Close the current buffer.',
                      signature=_BUFFERS),
    CommandDescriptor('buffer-close!', buf.force_buffer_close, aliases=('bc!', 'bclose!'),
                      doc='Close the current buffer forcefully, ignoring unsaved changes.',
                      signature=_BUFFERS),
    CommandDescriptor('buffer-close-others', buf.buffer_close_others, aliases=('bco', 'bcloseother'),
                      doc='Close all buffers but the currently focused one.'),
    CommandDescriptor('buffer-close-others!', buf.force_buffer_close_others, aliases=('bco!', 'bcloseother!'),
                      doc='Force close all buffers but the currently focused one.'),
    CommandDescriptor('buffer-close-all', buf.buffer_close_all, aliases=('bca', 'bcloseall'),
                      doc='Close all buffers without quitting.'),
    CommandDescriptor('buffer-close-all!', buf.force_buffer_close_all, aliases=('bca!', 'bcloseall!'),
                      doc='Force close all buffers ignoring unsaved changes without quitting.'),
    CommandDescriptor('buffer-next', buf.buffer_next, aliases=('bn', 'bnext'),
                      doc='Goto next buffer.'),
    CommandDescriptor('buffer-previous', buf.buffer_previous, aliases=('bp', 'bprev'),
                      doc='Goto previous buffer.'),
    CommandDescriptor('write', buf.write, aliases=('w',),
                      doc='Write changes to disk. Accepts an optional path (:write some/path.txt)',
                      signature=_ONE_FILE),
    CommandDescriptor('write!', buf.force_write, aliases=('w!',),
                      doc='Force write changes to disk creating necessary subdirectories. '
                          'Accepts an optional path (:write! some/path.txt)',
                      signature=_ONE_FILE),
    CommandDescriptor('new', buf.new_file, aliases=('n',),
                      doc='Create a new scratch buffer.'),
    CommandDescriptor('format', buf.format_buffer, aliases=('fmt',),
                      doc='Format the file using the configured formatter.'),
    CommandDescriptor('write-quit', buf.write_quit, aliases=('wq', 'x'),
                      doc='Write changes to disk and close the current view. '
                          'Accepts an optional path (:wq some/path.txt)',
                      signature=_ONE_FILE),
    CommandDescriptor('write-quit!', buf.force_write_quit, aliases=('wq!', 'x!'),
                      doc='Write changes to disk and close the current view forcefully. '
                          'Accepts an optional path (:wq! some/path.txt)',
                      signature=_ONE_FILE),
    CommandDescriptor('write-buffer-close', buf.write_buffer_close, aliases=('wbc',),
                      doc='Write changes to disk and closes the buffer. '
                          'Accepts an optional path (:write-buffer-close some/path.txt)',
                      signature=_ONE_FILE),
    CommandDescriptor('write-buffer-close!', buf.force_write_buffer_close, aliases=('wbc!',),
                      doc='Force write changes to disk creating necessary subdirectories and closes the buffer. '
                          'Accepts an optional path (:write-buffer-close! some/path.txt)',
                      signature=_ONE_FILE),
    CommandDescriptor('write-all', buf.write_all, aliases=('wa',),
                      doc='Write changes from all buffers to disk.'),
    CommandDescriptor('write-all!', buf.force_write_all, aliases=('wa!',),
                      doc='Forcefully write changes from all buffers to disk creating necessary subdirectories.'),
    CommandDescriptor('write-quit-all', buf.write_all_quit, aliases=('wqa', 'xa'),
                      doc='Write changes from all buffers to disk and close all views.'),
    CommandDescriptor('write-quit-all!', buf.force_write_all_quit, aliases=('wqa!', 'xa!'),
                      doc='Write changes from all buffers to disk and close all views forcefully '
                          '(ignoring unsaved changes).'),
    CommandDescriptor('quit-all', buf.quit_all, aliases=('qa',),
                      doc='Close all views.'),
    CommandDescriptor('quit-all!', buf.force_quit_all, aliases=('qa!',),
                      doc='Force close all views ignoring unsaved changes.'),
    CommandDescriptor('cquit', buf.cquit, aliases=('cq',),
                      doc='Quit with exit code (default 1). Accepts an optional integer exit code (:cq 2).',
                      signature=_EXIT_CODE),
    CommandDescriptor('cquit!', buf.force_cquit, aliases=('cq!',),
                      doc='Force quit with exit code (default 1) ignoring unsaved changes. '
                          'Accepts an optional integer exit code (:cq! 2).',
                      signature=_EXIT_CODE),
    CommandDescriptor('theme', opt.theme,
                      doc='Change the editor theme (show current theme if no name specified).',
                      signature=Signature(positionals=(0, 1),
                                          accepts='<name>',
                                          completer=CommandCompleter.positional(completers.theme))),
    CommandDescriptor('earlier', buf.earlier, aliases=('ear',),
                      doc='Jump back to an earlier point in edit history. Accepts a number of steps.',
                      signature=_STEPS),
    CommandDescriptor('later', buf.later, aliases=('lat',),
                      doc='Jump to a later point in edit history. Accepts a number of steps.',
                      signature=_STEPS),
    CommandDescriptor('echo', echo,
                      doc='Prints the given arguments to the statusline.',
                      signature=Signature(positionals=(0, None), accepts='<text>...')),
    CommandDescriptor('sort', buf.sort_selections,
                      doc='Sort ranges in selection.',
                      signature=Signature(flags=(Flag('reverse', 'r', desc='sort ranges in reverse order'),))),
    CommandDescriptor('yank-join', buf.yank_join,
                      doc='Yank joined selections. A separator can be provided as first argument. '
                          'Default value is newline.',
                      signature=Signature(positionals=(0, 1), accepts='<separator>')),
    CommandDescriptor('change-current-directory', change_current_directory, aliases=('cd',),
                      doc='Change the current working directory.',
                      signature=Signature(positionals=(0, 1),
                                          accepts='<dir>',
                                          completer=CommandCompleter.positional(completers.directory))),
    CommandDescriptor('show-directory', show_current_directory, aliases=('pwd',),
                      doc='Show the current working directory.'),
    CommandDescriptor('vsplit', buf.vsplit, aliases=('vs',),
                      doc='Open the file in a vertical split.',
                      signature=_FILES),
    CommandDescriptor('vsplit-new', buf.vsplit_new, aliases=('vnew',),
                      doc='Open a scratch buffer in a vertical split.'),
    CommandDescriptor('hsplit', buf.hsplit, aliases=('hs', 'sp'),
                      doc='Open the file in a horizontal split.',
                      signature=_FILES),
    CommandDescriptor('hsplit-new', buf.hsplit_new, aliases=('hnew',),
                      doc='Open a scratch buffer in a horizontal split.'),
    CommandDescriptor('goto', buf.goto_line_number, aliases=('g',),
                      doc='Goto line number.',
                      signature=Signature(positionals=(1, 1), accepts='<line>')),
    CommandDescriptor('set-option', opt.set_option, aliases=('set',),
                      doc='Set a config option at runtime.\n'
                          'For example to disable smart case search, use `:set search.smart-case false`.',
                      signature=Signature(positionals=(2, 2),
                                          parse_mode=ParseMode.literal,
                                          literal_leading=1,
                                          accepts='<key> <value>',
                                          completer=CommandCompleter.positional(completers.setting,
                                                                                completers.none))),
    CommandDescriptor('toggle-option', opt.toggle_option, aliases=('toggle',),
                      doc='Toggle a config option at runtime.\n'
                          'For example to toggle smart case search, use `:toggle search.smart-case`.',
                      signature=Signature(positionals=(1, None),
                                          accepts='<key> [<values>...]',
                                          completer=CommandCompleter.positional(completers.setting,
                                                                                completers.none))),
    CommandDescriptor('get-option', opt.get_option, aliases=('get',),
                      doc='Get the current value of a config option.',
                      signature=Signature(positionals=(1, 1),
                                          accepts='<key>',
                                          completer=CommandCompleter.positional(completers.setting))),
    CommandDescriptor('read', buf.read_file, aliases=('r',),
                      doc='Load a file into buffer',
                      signature=Signature(positionals=(1, 1),
                                          accepts='<path>',
                                          completer=CommandCompleter.positional(completers.filename))),
    CommandDescriptor('move', buf.move_buffer, aliases=('mv',),
                      doc='Move the current buffer and its corresponding file to a different path',
                      signature=Signature(positionals=(1, 1),
                                          accepts='<path>',
                                          completer=CommandCompleter.positional(completers.filename))),
    CommandDescriptor('reload', buf.reload, aliases=('rl',),
                      doc='Discard changes and reload from the source file.'),
    CommandDescriptor('reload-all', buf.reload_all, aliases=('rla',),
                      doc='Discard changes and reload all documents from the source files.'),
    CommandDescriptor('update', buf.update, aliases=('u',),
                      doc='Write changes only if the file has been modified.',
                      signature=_ONE_FILE),
    CommandDescriptor('clear-register', clear_register,
                      doc='Clear given register. If no argument is provided, clear all registers.',
                      signature=Signature(positionals=(0, 1),
                                          flags=(Flag('all', 'a', desc='clear all registers'),),
                                          accepts='<register>',
                                          completer=CommandCompleter.positional(completers.register))),
    CommandDescriptor('config-reload', opt.config_reload,
                      doc='Refresh user config.'),
    CommandDescriptor('config-open', opt.config_open,
                      doc='Open the user config.yaml file.'),
    CommandDescriptor('run-shell-command', sh.run_shell_command, aliases=('sh', '!'),
                      doc='Run a shell command',
                      signature=_SHELL),
    CommandDescriptor('insert-output', sh.insert_output,
                      doc='Run shell command, inserting output before each selection.',
                      signature=_SHELL),
    CommandDescriptor('append-output', sh.append_output,
                      doc='Run shell command, appending output after each selection.',
                      signature=_SHELL),
    CommandDescriptor('pipe', sh.pipe, aliases=('|',),
                      doc='Pipe each selection to the shell command.',
                      signature=_SHELL),
    CommandDescriptor('pipe-to', sh.pipe_to,
                      doc='Pipe each selection to the shell command, ignoring output.',
                      signature=_SHELL),
    CommandDescriptor('help', show_help, aliases=('h',),
                      doc='Show help for the given command.',
                      signature=Signature(positionals=(0, 1),
                                          accepts='<command>',
                                          completer=CommandCompleter.positional(command_name))),
)


def default_registry():
    return Registry(TYPABLE_COMMAND_LIST)
