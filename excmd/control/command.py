'''
Declarations of typable commands: what arguments they take, how their
arguments complete, and which function carries them out.
'''

import collections

from ..core import errors
from ..util import plural
from .shellwords import ParseMode


def no_completions(editor, word):
    return []


class CommandCompleter(collections.namedtuple('CommandCompleter', 'positional_args var_args')):
    '''
    Completion providers for the positional arguments of a command.

    :ivar positional_args:
        Providers for the first, second, ... positional argument.
    :ivar var_args:
        The provider for every argument past the end of `positional_args`.

    A provider is a function ``provider(editor, word)`` returning a list of
    ``(start, text)`` pairs, where `start` is the offset in `word` from which
    `text` replaces the rest of the word.
    '''
    __slots__ = ()

    @classmethod
    def none(cls):
        return cls((), no_completions)

    @classmethod
    def positional(cls, *completers):
        return cls(tuple(completers), no_completions)

    @classmethod
    def all(cls, completer):
        return cls((), completer)

    def for_argument(self, n):
        if n < len(self.positional_args):
            return self.positional_args[n]
        else:
            return self.var_args


class Signature(collections.namedtuple('Signature',
                                       'flags positionals parse_mode literal_leading accepts completer')):
    '''
    The argument grammar of a command.

    :ivar flags: The :class:`~excmd.control.shellwords.Flag` objects accepted.
    :ivar positionals:
        ``(min, max)`` bounds on the number of positional arguments;
        `max` is None for no upper bound.
    :ivar parse_mode: A :class:`~excmd.control.shellwords.ParseMode`.
    :ivar literal_leading:
        In literal mode, how many words are parsed before the rest of the
        line is taken verbatim.
    :ivar accepts: A hint such as ``'<path>'`` shown in help text.
    :ivar completer: A :class:`CommandCompleter`.
    '''
    __slots__ = ()

    def __new__(cls, positionals=(0, 0), flags=(), parse_mode=ParseMode.structured,
                literal_leading=0, accepts=None, completer=None):
        lo, hi = positionals
        if lo < 0 or (hi is not None and hi < lo):
            raise ValueError('invalid positional bounds {!r}'.format(positionals))
        if completer is None:
            completer = CommandCompleter.none()
        return super().__new__(cls, tuple(flags), (lo, hi), parse_mode,
                               literal_leading, accepts, completer)


class CommandDescriptor(collections.namedtuple('CommandDescriptor', 'name aliases doc signature fun')):
    '''
    The registration record for one typable command.

    `fun` is called as ``fun(editor, args, event)`` where `args` is an
    :class:`~excmd.control.shellwords.Args` and `event` a
    :class:`~excmd.control.prompt.PromptEvent`.
    '''
    __slots__ = ()

    def __new__(cls, name, fun, doc='', aliases=(), signature=None):
        if signature is None:
            signature = Signature()
        return super().__new__(cls, name, tuple(aliases), doc, signature, fun)

    def completer_for_argument_number(self, n):
        return self.signature.completer.for_argument(n)

    def ensure_signature(self, count):
        '''
        Check that `count` positional arguments are acceptable.

        :raise ArityError: if they are not.
        '''
        lo, hi = self.signature.positionals
        if hi == 0:
            if count != 0:
                raise errors.ArityError(
                    "`:{}` doesn't take any arguments".format(self.name))
        elif lo == hi:
            if count != lo:
                raise errors.ArityError(
                    '`:{}` needs `{}` argument{}, got {}'.format(
                        self.name, lo, plural(lo), count))
        elif hi is not None:
            if not lo <= count <= hi:
                raise errors.ArityError(
                    '`:{}` needs between `{}` and `{}` arguments, got {}'.format(
                        self.name, lo, hi, count))
        elif count < lo:
            raise errors.ArityError(
                '`:{}` needs at least `{}` argument{}'.format(
                    self.name, lo, plural(lo)))

    def doc_text(self):
        '''
        Render the help text shown while the command is being typed::

            write [<flags>] <path>: Write the current buffer to its file.
            aliases:
                w
            flags:
                --no-format    skip formatting when saving
        '''
        sig = self.signature
        head = self.name
        if sig.flags:
            head += ' [<flags>]'
        if sig.accepts:
            head += ' ' + sig.accepts

        lines = ['{}: {}'.format(head, self.doc)]

        if self.aliases:
            lines.append('aliases:')
            lines.extend('    ' + alias for alias in self.aliases)

        if sig.flags:
            lines.append('flags:')
            forms = []
            for flag in sig.flags:
                form = '--' + flag.long
                if flag.short is not None:
                    form += ', -' + flag.short
                if flag.accepts is not None:
                    form += ' ' + flag.accepts
                forms.append(form)
            width = max(map(len, forms)) + 4
            for form, flag in zip(forms, sig.flags):
                lines.append('    {:<{width}}{}'.format(form, flag.desc, width=width))

        return '\n'.join(lines)
