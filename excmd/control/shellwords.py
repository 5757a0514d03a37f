r'''
Splitting of command lines into words, and parsing of those words into
arguments.

Quoting follows the POSIX shell conventions most users expect from an
``:``-prompt::

    open 'My Documents/notes.txt'      # single quotes are literal
    echo "say \"hi\""                  # \" and \\ are escapes inside "..."
    open My\ Documents/notes.txt       # backslash escapes outside quotes

Unterminated quotes are accepted, since the line is usually still being
typed; the open word simply runs to the end of the line.
'''

import collections
import collections.abc
import enum
import re
import types

from ..core import errors


class Word(collections.namedtuple('Word', 'text start end')):
    '''
    A word of a command line.

    :ivar text: The word with quotes and escapes removed.
    :ivar start: The offset of the first character of the word in the line.
    :ivar end: The offset one past the last character of the word in the line.
    '''
    __slots__ = ()


_QUOTES = '\'"'


def _scan_word(line, i):
    '''
    Scan the word beginning at or after offset `i`. Returns ``(word, j)``
    where `j` is the offset just past the word, or ``(None, len(line))``
    if only whitespace remains.
    '''
    n = len(line)
    while i < n and line[i].isspace():
        i += 1
    if i >= n:
        return None, n

    start = i
    buf = []
    quote = None
    while i < n:
        c = line[i]
        if quote is None:
            if c.isspace():
                break
            elif c == '\\':
                if i + 1 < n:
                    buf.append(line[i + 1])
                    i += 2
                else:
                    buf.append(c)
                    i += 1
            elif c in _QUOTES:
                quote = c
                i += 1
            else:
                buf.append(c)
                i += 1
        elif quote == "'":
            if c == "'":
                quote = None
            else:
                buf.append(c)
            i += 1
        else:
            if c == '"':
                quote = None
                i += 1
            elif c == '\\' and i + 1 < n and line[i + 1] in '"\\':
                buf.append(line[i + 1])
                i += 2
            else:
                buf.append(c)
                i += 1

    return Word(''.join(buf), start, i), i


def split(line):
    '''
    Return the list of :class:`Word` objects in `line`.
    '''
    words = []
    i = 0
    while True:
        word, i = _scan_word(line, i)
        if word is None:
            return words
        words.append(word)


def escape(text):
    '''
    Escape `text` so that splitting the result yields exactly one word
    equal to `text`.
    '''
    if not text:
        return "''"
    return ''.join('\\' + c if c.isspace() or c in '\\\'"' else c
                   for c in text)


class Shellwords(object):
    '''
    A tokenized command line: the command token, the argument words, and
    whether the line ends in unescaped whitespace.

    The trailing whitespace flag distinguishes ``"set-option foo"`` (the
    user is still typing ``foo``) from ``"set-option foo "`` (a new, empty
    argument has begun).
    '''

    def __init__(self, line):
        self.line = line
        self.words = tuple(split(line))

        # A trailing whitespace character that belongs to the last word was
        # either escaped or quoted.
        self.ends_with_whitespace = bool(
            line
            and line[-1].isspace()
            and (not self.words or self.words[-1].end < len(line))
        )

    @property
    def command(self):
        if self.words:
            return self.words[0].text
        else:
            return ''

    @property
    def args(self):
        '''
        The argument words (everything after the command token).
        '''
        return self.words[1:]

    def __repr__(self):
        return 'Shellwords({!r})'.format(self.line)


def tokenize(line):
    return Shellwords(line)


class ParseMode(enum.Enum):
    '''
    How the words following the command are turned into arguments.
    '''

    #: Flags are recognized and every other word is a positional argument.
    structured = 1

    #: After the command's leading words, the rest of the line is taken
    #: verbatim as one positional argument and flags are not recognized.
    literal = 2


class Flag(collections.namedtuple('Flag', 'long short accepts desc completer')):
    '''
    A named, order-independent argument.

    :ivar long: The long name, written ``--long`` on the command line.
    :ivar short: The optional short alias, written ``-s``.
    :ivar accepts:
        A placeholder such as ``'<path>'`` if the flag takes a value,
        or None for boolean switches.
    :ivar desc: A one-line description for help text.
    :ivar completer: An optional completion provider for the flag's value.
    '''
    __slots__ = ()

    def __new__(cls, long, short=None, accepts=None, desc='', completer=None):
        return super().__new__(cls, long, short, accepts, desc, completer)

    def matches(self, token):
        if token.startswith('--'):
            return token[2:] == self.long
        else:
            return self.short is not None and token[1:] == self.short


_NEGATIVE_NUMBER = re.compile(r'-\d+(\.\d*)?$|-\.\d+$')


def is_flag_shaped(token):
    return (token.startswith('-')
            and token not in ('-', '--')
            and not _NEGATIVE_NUMBER.match(token))


class RawParser(object):
    '''
    Pull words one at a time from the verbatim argument text, then claim
    everything that remains with :meth:`rest`.

    Used by commands whose grammar is ``<key> <rest-of-line>``.
    '''

    def __init__(self, text):
        self._text = text
        self._pos = 0

    def __iter__(self):
        return self

    def __next__(self):
        word, self._pos = _scan_word(self._text, self._pos)
        if word is None:
            raise StopIteration
        return word.text

    def next(self, default=None):
        return next(self, default)

    def rest(self):
        return self._text[self._pos:].strip()


class Args(collections.abc.Sequence):
    '''
    The parsed arguments of one command invocation: the positional
    arguments in input order, plus the matched flags.

    :param positionals: The positional arguments.
    :param flags: A mapping of flag long names to values (None for switches).
    :param raw: The verbatim text following the command token.
    '''

    def __init__(self, positionals=(), flags=None, raw=None):
        self._positionals = tuple(positionals)
        self._flags = types.MappingProxyType(dict(flags or {}))
        if raw is None:
            raw = ' '.join(escape(p) for p in self._positionals)
        self.raw = raw

    @classmethod
    def empty(cls):
        return cls()

    @classmethod
    def from_signature(cls, words, line, mode, flags, literal_leading=0):
        '''
        Parse argument words according to a command signature.

        :param words: The argument :class:`Word` objects of `line`.
        :param line: The complete command line the words were taken from.
        :param mode: The :class:`ParseMode`.
        :param flags: The flags the command declares.
        :param literal_leading:
            In literal mode, the number of positional words parsed normally
            before the rest of the line is taken verbatim.
        :raise UnknownFlagError: if a flag-shaped word matches no declared flag.
        :raise FlagValueError: if a flag that takes a value is the last word.
        '''
        words = list(words)
        positionals = []
        matched = {}
        flags_done = False
        raw = line[words[0].start:] if words else ''

        if mode is ParseMode.structured:
            verbatim_after = None
        elif mode is ParseMode.literal:
            verbatim_after = literal_leading
        else:
            raise AssertionError('unhandled parse mode {!r}'.format(mode))

        i = 0
        while i < len(words):
            word = words[i]
            if verbatim_after is not None and len(positionals) >= verbatim_after:
                positionals.append(line[word.start:])
                break

            if not flags_done and word.text == '--':
                flags_done = True
                i += 1
                continue

            if not flags_done and is_flag_shaped(word.text):
                flag = next((f for f in flags if f.matches(word.text)), None)
                if flag is None:
                    raise errors.UnknownFlagError(word.text)
                if flag.accepts is not None:
                    if i + 1 >= len(words):
                        raise errors.FlagValueError(flag.long, flag.accepts)
                    matched[flag.long] = words[i + 1].text
                    i += 2
                else:
                    matched[flag.long] = None
                    i += 1
                continue

            positionals.append(word.text)
            i += 1

        return cls(positionals, matched, raw)

    def __len__(self):
        return len(self._positionals)

    def __getitem__(self, i):
        return self._positionals[i]

    def __eq__(self, other):
        if not isinstance(other, Args):
            return NotImplemented
        return (self._positionals == other._positionals
                and dict(self._flags) == dict(other._flags))

    __hash__ = None

    def first(self, default=None):
        if self._positionals:
            return self._positionals[0]
        else:
            return default

    def get(self, i, default=None):
        try:
            return self._positionals[i]
        except IndexError:
            return default

    @property
    def flags(self):
        return self._flags

    def has_flag(self, name):
        return name in self._flags

    def get_flag(self, name, default=None):
        return self._flags.get(name, default)

    def raw_parser(self):
        return RawParser(self.raw)

    def __repr__(self):
        return 'Args({!r}, {!r})'.format(list(self._positionals), dict(self._flags))
