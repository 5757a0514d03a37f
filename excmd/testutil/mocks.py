
from ..abstract.editor import Editor
from ..control.command import CommandDescriptor
from ..core.config import Config
from ..core.executors import Jobs, SynchronousExecutor
from ..core.theme import ThemeLoader


def make_editor(tmpdir=None, config=None, theme_dirs=(), files=()):
    '''
    Create an editor whose jobs run synchronously, with one view open.

    :param tmpdir: The working directory (and config file location).
    :param files: Paths to open, relative to `tmpdir`; with none given a
                  scratch buffer is shown.
    '''
    editor = Editor(config=config if config is not None else Config(),
                    config_file=None if tmpdir is None else str(tmpdir) + '/config.yaml',
                    jobs=Jobs(SynchronousExecutor),
                    theme_loader=ThemeLoader(theme_dirs),
                    cwd=None if tmpdir is None else str(tmpdir))
    for f in files:
        editor.open(f)
    if not editor.views:
        editor.new_file()
    return editor


class RecordingCommand(object):
    '''
    A command function that records each ``(args, event)`` it is called
    with.
    '''

    def __init__(self):
        self.calls = []

    def __call__(self, editor, args, event):
        self.calls.append((args, event))

    @property
    def events(self):
        return [event for (_, event) in self.calls]

    @property
    def last_args(self):
        return self.calls[-1][0]


def recording_command(name, aliases=(), signature=None, doc=''):
    '''
    Return ``(descriptor, recorder)`` for a command that only records
    its calls.
    '''
    recorder = RecordingCommand()
    return CommandDescriptor(name, recorder, doc=doc, aliases=aliases, signature=signature), recorder
