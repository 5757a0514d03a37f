
import unittest

import pytest

from excmd.control.command import Signature
from excmd.control.command_line_interpreter import CommandLineInterpreter
from excmd.control.prompt import CommandLine, PromptEvent, PromptSession, SessionState
from excmd.control.registry import Registry
from excmd.control.shellwords import Args, Flag, ParseMode
from excmd.control.typed import default_registry
from excmd.core import errors
from excmd.testutil import make_editor, recording_command


class TestDispatch(unittest.TestCase):

    def setUp(self):
        self.echo, self.echo_calls = recording_command(
            'echo', signature=Signature(positionals=(0, None)))
        self.write, self.write_calls = recording_command(
            'write', aliases=('w',),
            signature=Signature(positionals=(0, 1), flags=[Flag('no-format')]))
        self.sh, self.sh_calls = recording_command(
            'sh', signature=Signature(positionals=(1, 1), parse_mode=ParseMode.literal))
        self.goto, self.goto_calls = recording_command(
            'goto', signature=Signature(positionals=(1, 1)))
        self.interp = CommandLineInterpreter(
            Registry([self.echo, self.write, self.sh, self.goto]))
        self.editor = make_editor()

    def test_dispatches_by_alias(self):
        self.interp.run(self.editor, 'w --no-format out.txt', PromptEvent.validate)
        args, event = self.write_calls.calls[-1]
        assert event is PromptEvent.validate
        assert args == Args(['out.txt'], {'no-format': None})

    def test_empty_line_does_nothing(self):
        self.interp.run(self.editor, '   ', PromptEvent.validate)
        assert not self.echo_calls.calls

    def test_unknown_command_only_fails_on_validate(self):
        self.interp.run(self.editor, 'nosuchcommand', PromptEvent.update)
        self.interp.run(self.editor, 'nosuchcommand', PromptEvent.abort)
        with pytest.raises(errors.UnknownCommandError):
            self.interp.run(self.editor, 'nosuchcommand', PromptEvent.validate)

    def test_execute_reports_errors_in_status(self):
        self.interp.execute(self.editor, 'nosuchcommand', PromptEvent.validate)
        assert self.editor.status == ("no such command: 'nosuchcommand'", 'error')

    def test_line_number_goes_to_goto(self):
        self.interp.run(self.editor, '12', PromptEvent.update)
        assert self.goto_calls.calls == [(Args(['12']), PromptEvent.update)]

    def test_update_skips_unparseable_lines(self):
        self.interp.run(self.editor, 'write --bogus', PromptEvent.update)
        assert not self.write_calls.calls

        with pytest.raises(errors.UnknownFlagError):
            self.interp.run(self.editor, 'write --bogus', PromptEvent.validate)
        assert not self.write_calls.calls

    def test_abort_with_unparseable_line_gets_empty_args(self):
        self.interp.run(self.editor, 'write --bogus', PromptEvent.abort)
        assert self.write_calls.calls == [(Args.empty(), PromptEvent.abort)]

    def test_arity_checked_on_validate_only(self):
        self.interp.run(self.editor, 'write a b', PromptEvent.update)
        assert self.write_calls.last_args == Args(['a', 'b'])

        with pytest.raises(errors.ArityError) as exc_info:
            self.interp.run(self.editor, 'write a b', PromptEvent.validate)
        assert str(exc_info.value) == '`:write` needs between `0` and `1` arguments, got 2'
        assert self.write_calls.events == [PromptEvent.update]

    def test_literal_preserves_dash(self):
        self.interp.run(self.editor, 'sh -', PromptEvent.validate)
        assert self.sh_calls.last_args == Args(['-'])

        self.interp.run(self.editor, "sh grep -v 'a b'", PromptEvent.validate)
        assert self.sh_calls.last_args == Args(["grep -v 'a b'"])

    def test_handler_exceptions_are_reported(self):
        def broken(editor, args, event):
            raise KeyError('boom')

        from excmd.control.command import CommandDescriptor
        interp = CommandLineInterpreter(Registry([CommandDescriptor('broken', broken)]))
        interp.execute(self.editor, 'broken', PromptEvent.validate)
        message, severity = self.editor.status
        assert severity == 'error'
        assert message.endswith('[KeyError]')


class Recorder(object):
    def __init__(self):
        self.lines = []
        self.cancelled = 0

    def on_accepted(self, line):
        self.lines.append(line)

    def on_cancelled(self):
        self.cancelled += 1


class TestPromptSession(unittest.TestCase):

    def setUp(self):
        self.echo, self.calls = recording_command('echo', signature=Signature(positionals=(0, None)))
        self.interp = CommandLineInterpreter(Registry([self.echo]))
        self.editor = make_editor()
        self.session = PromptSession(self.interp, self.editor)
        self.recorder = Recorder()
        self.session.accepted.connect(self.recorder.on_accepted)
        self.session.cancelled.connect(self.recorder.on_cancelled)

    def test_states(self):
        assert self.session.state is SessionState.idle
        self.session.update('echo a')
        self.session.update('echo ab')
        assert self.session.state is SessionState.previewing
        self.session.validate()
        assert self.session.state is SessionState.committed
        assert self.calls.events == [PromptEvent.update, PromptEvent.update, PromptEvent.validate]
        assert self.recorder.lines == ['echo ab']

    def test_abort(self):
        self.session.update('echo a')
        self.session.abort()
        assert self.session.state is SessionState.cancelled
        assert self.calls.events == [PromptEvent.update, PromptEvent.abort]
        assert self.recorder.cancelled == 1
        assert self.recorder.lines == []

    def test_abort_reaches_commands_no_longer_on_the_line(self):
        other, other_calls = recording_command('other')
        interp = CommandLineInterpreter(Registry([self.echo, other]))
        session = PromptSession(interp, self.editor)
        session.update('echo a')
        session.update('other')
        session.abort()

        assert self.calls.calls[-1] == (Args.empty(), PromptEvent.abort)
        assert other_calls.events == [PromptEvent.update, PromptEvent.abort]

    def test_no_events_after_commit(self):
        self.session.update('echo a')
        self.session.validate()
        with pytest.raises(errors.PromptStateError):
            self.session.update('echo b')
        with pytest.raises(errors.PromptStateError):
            self.session.validate()
        with pytest.raises(errors.PromptStateError):
            self.session.abort()
        assert self.calls.events == [PromptEvent.update, PromptEvent.validate]

    def test_validate_without_update(self):
        session = PromptSession(self.interp, self.editor, 'echo hi')
        session.validate()
        assert self.calls.calls == [(Args(['hi']), PromptEvent.validate)]


class TestHistory(unittest.TestCase):

    def setUp(self):
        self.editor = make_editor()
        self.command_line = CommandLine(CommandLineInterpreter(default_registry()), self.editor)

    def submit(self, line):
        session = self.command_line.open()
        session.update(line)
        session.validate()

    def test_history(self):
        self.submit('echo a')
        self.submit('echo b')
        self.submit('   ')
        assert list(self.command_line.command_history) == ['echo a', 'echo b']

        session = self.command_line.open('ech')
        assert self.command_line.prev_history_item() == 'echo b'
        assert session.line == 'echo b'
        assert self.command_line.prev_history_item() == 'echo a'
        with pytest.raises(errors.OldestHistoryItemError):
            self.command_line.prev_history_item()

        assert self.command_line.next_history_item() == 'echo b'
        assert self.command_line.next_history_item() == 'ech'
        assert session.line == 'ech'
        with pytest.raises(errors.NewestHistoryItemError):
            self.command_line.next_history_item()

    def test_empty_history(self):
        self.command_line.open()
        with pytest.raises(errors.OldestHistoryItemError):
            self.command_line.prev_history_item()


class TestGotoPreview(unittest.TestCase):

    def setUp(self):
        self.editor = make_editor()
        self.doc = self.editor.doc
        self.doc.apply('one\ntwo\nthree\nfour\n', [(1, 1)])
        self.interp = CommandLineInterpreter(default_registry())

    def session(self):
        return PromptSession(self.interp, self.editor)

    def test_abort_restores_selection(self):
        session = self.session()
        session.update('3')
        assert self.doc.cursor == 8
        session.update('4')
        assert self.doc.cursor == 14

        session.abort()
        assert self.doc.selections == [(1, 1)]
        assert self.editor.last_selection is None
        assert self.editor.view.jumps == []

    def test_validate_pushes_jump(self):
        session = self.session()
        session.update('goto 2')
        session.validate()
        assert self.doc.cursor == 4
        assert self.editor.last_selection is None
        assert self.editor.view.jumps == [(self.doc.id, [(1, 1)])]

    def test_validate_without_preview(self):
        self.interp.run(self.editor, 'g 3', PromptEvent.validate)
        assert self.doc.cursor == 8
        assert self.editor.view.jumps == [(self.doc.id, [(1, 1)])]

    def test_line_number_is_clamped(self):
        self.interp.run(self.editor, '100', PromptEvent.validate)
        assert self.doc.cursor_line == self.doc.line_count - 1

    def test_backspacing_to_no_argument_restores(self):
        session = self.session()
        session.update('goto 3')
        session.update('goto ')
        assert self.doc.selections == [(1, 1)]
        assert self.editor.last_selection is None

    def test_abort_after_clearing_the_line_restores(self):
        session = self.session()
        session.update('3')
        session.update('')
        assert self.doc.cursor == 8

        session.abort()
        assert self.doc.selections == [(1, 1)]
        assert self.editor.last_selection is None

    def test_switching_commands_restores_before_validate(self):
        session = self.session()
        session.update('2')
        session.update('echo hi')
        session.validate()
        assert self.doc.selections == [(1, 1)]
        assert self.editor.view.jumps == []
        assert self.editor.status == ('hi', 'info')

    def test_bad_line_number(self):
        self.interp.execute(self.editor, 'goto x', PromptEvent.validate)
        assert self.editor.status == ("invalid line number 'x'", 'error')
