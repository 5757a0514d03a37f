
import collections
import logging
import re

from ..core import errors
from ..core.fuzzy import fuzzy_match
from ..util import nonreentrant
from .command import Signature, no_completions
from .prompt import PromptEvent
from .shellwords import Args, ParseMode, tokenize, escape, is_flag_shaped


Completion = collections.namedtuple('Completion', 'start end text')
Completion.__doc__ = '''
Replace ``line[start:end]`` with `text` to apply the completion.
'''

_LINE_NUMBER = re.compile(r'[0-9]+$')

#: A line consisting of only a number runs this command.
GOTO_COMMAND = 'goto'


def argument_slot(shellwords, signature=None):
    '''
    Locate the word being typed within a command's argument grammar.

    Returns ``(n, flag)``. When the word is the value of a flag that takes
    one, `flag` is that :class:`~excmd.control.shellwords.Flag`; otherwise
    `flag` is None and `n` is the index of the positional argument being
    typed. Only the positional words before it count towards `n`: flags,
    and the values they take, do not.

    A trailing space means a new, empty argument has begun; otherwise the
    last word is still being typed.
    '''
    if signature is None:
        signature = Signature()

    words = shellwords.args
    if words and not shellwords.ends_with_whitespace:
        words = words[:-1]

    if signature.parse_mode is ParseMode.literal:
        verbatim_after = signature.literal_leading
    else:
        verbatim_after = None

    n = 0
    flags_done = False
    value_of = None
    for word in words:
        if verbatim_after is not None and n >= verbatim_after:
            # the rest of the line is a single argument
            return n, None

        if value_of is not None:
            value_of = None
        elif flags_done:
            n += 1
        elif word.text == '--':
            flags_done = True
        elif is_flag_shaped(word.text):
            flag = next((f for f in signature.flags if f.matches(word.text)), None)
            if flag is not None and flag.accepts is not None:
                value_of = flag
        else:
            n += 1

    return n, value_of


def argument_number_of(shellwords, signature=None):
    '''
    Return the index of the positional argument being typed.
    '''
    n, _ = argument_slot(shellwords, signature)
    return n
class CommandLineInterpreter(object):
    '''
    Resolves command lines against a :class:`~excmd.control.registry.Registry`,
    parses their arguments, and dispatches them to the command functions.

    While a command runs or completes, ``editor.registry`` is the registry
    it was resolved against.

    :param registry: The registry of typable commands.
    '''

    def __init__(self, registry):
        self.registry = registry

    def _resolve(self, command):
        if _LINE_NUMBER.match(command):
            return self.registry.find(GOTO_COMMAND), True
        else:
            return self.registry.find(command), False

    def resolve(self, cmdline):
        '''
        Return the descriptor of the command `cmdline` would run, or None.
        '''
        command = tokenize(cmdline).command
        if not command:
            return None
        try:
            descriptor, _ = self._resolve(command)
        except errors.UnknownCommandError:
            return None
        return descriptor

    @nonreentrant
    def run(self, editor, cmdline, event):
        '''
        Run one command line with the given prompt event.

        On :attr:`PromptEvent.validate`, unknown commands, malformed
        arguments and arity errors are raised. For the other events a line
        that cannot be parsed yet is ignored.

        :raise UserError: on failure.
        '''
        shellwords = tokenize(cmdline)
        command = shellwords.command
        if not command:
            return

        try:
            descriptor, is_line_number = self._resolve(command)
        except errors.UnknownCommandError:
            if event is PromptEvent.validate:
                raise
            return

        if is_line_number:
            # entering a number goes to a line of the file
            args = Args([command])
        else:
            try:
                args = Args.from_signature(shellwords.args,
                                           shellwords.line,
                                           descriptor.signature.parse_mode,
                                           descriptor.signature.flags,
                                           descriptor.signature.literal_leading)
            except errors.ArgumentError as exc:
                if event is PromptEvent.validate:
                    raise
                elif event is PromptEvent.update:
                    logging.debug('not yet parseable %r: %s', cmdline, exc)
                    return
                args = Args.empty()

            if event is PromptEvent.validate:
                descriptor.ensure_signature(len(args))

        self._dispatch(editor, descriptor, args, event)

    def _dispatch(self, editor, descriptor, args, event):
        logging.debug('dispatch :%s %r (%s)', descriptor.name, args, event.name)
        editor.registry = self.registry
        descriptor.fun(editor, args, event)

    def _report_errors(self, editor, what, fun, *args):
        try:
            fun(*args)
        except errors.UserError as exc:
            editor.set_error(str(exc))
        except Exception as exc:
            logging.exception('error running %r', what)
            editor.set_error('{} [{}]'.format(str(exc), type(exc).__name__))

    def execute(self, editor, cmdline, event):
        '''
        Run the command line, reporting any error in the editor's status
        line instead of raising it.
        '''
        self._report_errors(editor, cmdline, self.run, editor, cmdline, event)

    def abort_preview(self, editor, descriptor):
        '''
        Send :attr:`PromptEvent.abort` to a command that previewed an
        earlier version of the line, reporting errors like :meth:`execute`.
        '''
        self._report_errors(editor, descriptor.name, self._dispatch,
                            editor, descriptor, Args.empty(), PromptEvent.abort)

    def complete(self, editor, cmdline):
        '''
        Return the :class:`Completion` candidates for the end of `cmdline`.
        '''
        shellwords = tokenize(cmdline)
        command = shellwords.command
        args = shellwords.args

        if not command or (not args and not shellwords.ends_with_whitespace):
            # complete the command name
            return [Completion(0, len(cmdline), name)
                    for name, _ in fuzzy_match(command, self.registry.names())]

        try:
            descriptor = self.registry.find(command)
        except errors.UnknownCommandError:
            return []

        if shellwords.ends_with_whitespace or not args:
            word_text, word_start = '', len(cmdline)
        else:
            word_text, word_start = args[-1].text, args[-1].start

        n, flag = argument_slot(shellwords, descriptor.signature)
        if flag is not None:
            provider = flag.completer or no_completions
        else:
            provider = descriptor.completer_for_argument_number(n)

        editor.registry = self.registry
        result = []
        for start, text in provider(editor, word_text):
            # Replacements are relative to the unescaped word; keep the
            # part of the word before `start` and re-escape the whole word.
            result.append(Completion(word_start,
                                     len(cmdline),
                                     escape(word_text[:start] + text)))
        return result

    def doc_for(self, cmdline):
        '''
        Return the help text for the command being typed, or None.
        '''
        command = tokenize(cmdline).command
        try:
            return self.registry.find(command).doc_text()
        except errors.UnknownCommandError:
            return None
