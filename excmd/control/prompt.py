'''
The prompt protocol: while a command line is being edited its command is
sent :attr:`PromptEvent.update` on every change, so that it can preview
its effect. Confirming sends :attr:`PromptEvent.validate` exactly once;
cancelling sends :attr:`PromptEvent.abort`, after which the command must
have undone any preview.
'''

import enum
import logging

from ..core import Signal, errors
from ..util import ImmutableListView


class PromptEvent(enum.Enum):
    #: The line changed; show a preview, commit nothing.
    update = 1
    #: The line was confirmed; perform the command.
    validate = 2
    #: The prompt was cancelled; undo any preview.
    abort = 3


class SessionState(enum.Enum):
    idle = 0
    previewing = 1
    committed = 2
    cancelled = 3

    @property
    def is_terminal(self):
        return self in (SessionState.committed, SessionState.cancelled)


class PromptSession(object):
    '''
    One opening of the command prompt, from the first keystroke until the
    line is confirmed or cancelled.

    :param interpreter: The :class:`~excmd.control.command_line_interpreter.CommandLineInterpreter`.
    :param editor: The editor the commands act on.
    '''

    def __init__(self, interpreter, editor, line=''):
        self.interpreter = interpreter
        self.editor = editor
        self.__line = line
        self.__state = SessionState.idle
        self.__previewed = []

    @property
    def line(self):
        return self.__line

    @property
    def state(self):
        return self.__state

    def __check_open(self):
        if self.__state.is_terminal:
            raise errors.PromptStateError(
                'prompt session already {}'.format(self.__state.name))

    def __abort_stale_previews(self):
        # Commands that previewed an earlier line get their abort even
        # if the line no longer names them.
        current = self.interpreter.resolve(self.__line)
        for descriptor in reversed(self.__previewed):
            if descriptor is not current:
                self.interpreter.abort_preview(self.editor, descriptor)
        self.__previewed = []

    def update(self, line):
        '''
        Replace the text of the line and let its command preview the result.
        '''
        self.__check_open()
        self.__line = line
        self.__state = SessionState.previewing
        descriptor = self.interpreter.resolve(line)
        if descriptor is not None and descriptor not in self.__previewed:
            self.__previewed.append(descriptor)
        self.interpreter.execute(self.editor, line, PromptEvent.update)

    def validate(self):
        self.__check_open()
        self.__state = SessionState.committed
        logging.debug('validate %r', self.__line)
        self.__abort_stale_previews()
        self.interpreter.execute(self.editor, self.__line, PromptEvent.validate)
        self.accepted(self.__line)

    def abort(self):
        self.__check_open()
        self.__state = SessionState.cancelled
        self.__abort_stale_previews()
        self.interpreter.execute(self.editor, self.__line, PromptEvent.abort)
        self.cancelled()

    def completions(self):
        return self.interpreter.complete(self.editor, self.__line)

    def doc(self):
        return self.interpreter.doc_for(self.__line)

    @Signal
    def accepted(self, line):
        pass

    @Signal
    def cancelled(self):
        pass


class CommandLine(object):
    '''
    The command prompt of an editor: opens :class:`PromptSession` objects
    and keeps the history of confirmed lines.
    '''

    def __init__(self, interpreter, editor):
        self.interpreter = interpreter
        self.editor = editor
        self.__command_history = []
        self.__history_pos = 0
        self.__draft = ''
        self.__session = None

    @property
    def session(self):
        return self.__session

    def open(self, line=''):
        session = PromptSession(self.interpreter, self.editor)
        session.accepted.connect(self.__on_accepted)
        self.__session = session
        self.__history_pos = 0
        if line:
            session.update(line)
        return session

    def __on_accepted(self, line):
        if line.strip():
            self.push_history_item(line)

    def push_history_item(self, text):
        self.__command_history.append(text)
        self.__history_pos = 0

    def __set_line(self, text):
        if self.__session is not None and not self.__session.state.is_terminal:
            self.__session.update(text)

    def prev_history_item(self):
        try:
            item = self.__command_history[self.__history_pos - 1]
        except IndexError:
            raise errors.OldestHistoryItemError('Oldest history item') from None

        if self.__history_pos == 0 and self.__session is not None:
            self.__draft = self.__session.line
        self.__history_pos -= 1
        self.__set_line(item)
        return item

    def next_history_item(self):
        if self.__history_pos + 1 > 0:
            raise errors.NewestHistoryItemError('Newest history item')

        self.__history_pos += 1
        if self.__history_pos == 0:
            item = self.__draft
        else:
            item = self.__command_history[self.__history_pos]
        self.__set_line(item)
        return item

    @property
    def command_history(self):
        return ImmutableListView(self.__command_history)
