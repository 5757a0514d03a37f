'''
The editor state that commands act on: documents, the views showing them,
registers, the working directory, the configuration and the theme.

Text is held as a plain string and history as whole-text snapshots.
'''

import bisect
import collections
import itertools
import logging
import os
import pathlib
import queue

from ..core import Signal, errors
from ..core.config import Config, ConfigEventKind, load_config
from ..core.executors import Jobs
from ..core.theme import ThemeLoader


SCRATCH_BUFFER_NAME = '[scratch]'


class Document(object):
    '''
    A text buffer, optionally backed by a file.

    Selections are ``(start, end)`` character ranges; the first is the
    primary selection and its start is the cursor.
    '''

    _ids = itertools.count(1)

    def __init__(self, text='', path=None):
        self.id = next(Document._ids)
        self.path = pathlib.Path(path) if path is not None else None
        self.__text = text
        self.__saved_text = text
        self.__history = [(text, [(0, 0)])]
        self.__history_pos = 0
        self.selections = [(0, 0)]

    @classmethod
    def load(cls, path):
        '''
        Open the file at `path`. A path that does not exist yet gives an
        empty document that will be created on save.
        '''
        path = pathlib.Path(path)
        try:
            text = path.read_text()
        except FileNotFoundError:
            text = ''
        except IsADirectoryError:
            raise errors.HandlerError('{} is a directory'.format(path)) from None
        return cls(text, path)

    @property
    def text(self):
        return self.__text

    @property
    def is_modified(self):
        return self.__text != self.__saved_text

    def display_name(self, cwd=None):
        if self.path is None:
            return SCRATCH_BUFFER_NAME
        if cwd is not None:
            try:
                return str(self.path.relative_to(cwd))
            except ValueError:
                pass
        return str(self.path)

    def apply(self, text, selections=None):
        '''
        Replace the text and record the change in the history.
        '''
        self.__text = text
        if selections is not None:
            self.selections = list(selections)
        self.selections = [self._clamp_range(r) for r in self.selections]

        del self.__history[self.__history_pos + 1:]
        self.__history.append((text, list(self.selections)))
        self.__history_pos += 1

    def replace(self, ranges, replacements):
        '''
        Replace each ``(start, end)`` range with the corresponding string as
        one change. The selections become the ranges the replacements
        occupy.
        '''
        text = self.__text
        order = sorted(range(len(ranges)), key=lambda i: ranges[i][0])
        pieces = []
        selections = [None] * len(ranges)
        pos = 0
        length = 0
        for i in order:
            start, end = ranges[i]
            pieces.append(text[pos:start])
            length += start - pos
            pieces.append(replacements[i])
            selections[i] = (length, length + len(replacements[i]))
            length += len(replacements[i])
            pos = end
        pieces.append(text[pos:])
        self.apply(''.join(pieces), selections)

    def _clamp_range(self, r):
        n = len(self.__text)
        start, end = r
        return (min(start, n), min(end, n))

    def earlier(self, steps=1):
        '''
        Undo `steps` changes. Returns False if already at the oldest change.
        '''
        if self.__history_pos == 0:
            return False
        self.__history_pos = max(self.__history_pos - steps, 0)
        self.__restore()
        return True

    def later(self, steps=1):
        '''
        Redo `steps` changes. Returns False if already at the newest change.
        '''
        if self.__history_pos == len(self.__history) - 1:
            return False
        self.__history_pos = min(self.__history_pos + steps, len(self.__history) - 1)
        self.__restore()
        return True

    def __restore(self):
        text, selections = self.__history[self.__history_pos]
        self.__text = text
        self.selections = list(selections)

    def mark_saved(self):
        self.__saved_text = self.__text

    def reload(self):
        '''
        Discard unsaved changes by reading the file again. The reload is
        recorded as a change, so it can be undone.
        '''
        if self.path is None:
            raise errors.HandlerError("can't find file to reload from")
        try:
            text = self.path.read_text()
        except FileNotFoundError:
            raise errors.NoSuchFileError('{} no longer exists'.format(self.path)) from None
        if text != self.__text:
            self.apply(text)
        self.mark_saved()

    def save(self, path=None, force=False):
        if path is not None:
            self.path = pathlib.Path(path)
        if self.path is None:
            raise errors.HandlerError('cannot write a buffer without a filename')

        parent = self.path.parent
        if not parent.exists():
            if not force:
                raise errors.NoSuchFileError(
                    "can't save file, parent directory does not exist (use :w! to create it)")
            parent.mkdir(parents=True)

        self.path.write_text(self.__text)
        self.mark_saved()
        logging.debug('wrote %s', self.path)

    def _line_starts(self):
        starts = [0]
        for i, c in enumerate(self.__text):
            if c == '\n':
                starts.append(i + 1)
        return starts

    @property
    def line_count(self):
        return len(self._line_starts())

    def line_to_char(self, line):
        starts = self._line_starts()
        return starts[max(0, min(line, len(starts) - 1))]

    def char_to_line(self, pos):
        return bisect.bisect_right(self._line_starts(), pos) - 1

    @property
    def cursor(self):
        return self.selections[0][0]

    @property
    def cursor_line(self):
        return self.char_to_line(self.cursor)

    def set_selection(self, selections):
        self.selections = [self._clamp_range(r) for r in selections]

    def fragments(self):
        return [self.__text[start:end] for (start, end) in self.selections]

    def __repr__(self):
        return 'Document({!r}, id={})'.format(self.display_name(), self.id)


class View(object):
    _ids = itertools.count(1)

    def __init__(self, doc_id):
        self.id = next(View._ids)
        self.doc_id = doc_id
        self.jumps = []

    def __repr__(self):
        return 'View(id={}, doc_id={})'.format(self.id, self.doc_id)


class Editor(object):
    '''
    :param config: The initial :class:`~excmd.core.config.Config`.
    :param config_file: The file :class:`~excmd.core.config.ConfigEvent` refreshes read.
    :param jobs: The :class:`~excmd.core.executors.Jobs` facility.
    :param theme_loader: The :class:`~excmd.core.theme.ThemeLoader`.
    '''

    def __init__(self, config=None, config_file=None, jobs=None, theme_loader=None, cwd=None):
        self.config = config if config is not None else Config()
        self.config_file = config_file
        self.config_events = queue.Queue()
        self.jobs = jobs if jobs is not None else Jobs()
        self.theme_loader = theme_loader if theme_loader is not None else ThemeLoader()
        self.theme = self.theme_loader.default()
        self.theme_preview = None

        self.documents = collections.OrderedDict()
        self.views = []
        self.__focus = None

        self.registers = {}
        self.last_selection = None
        self.status = None
        self.exit_code = 0

        #: The registry of the interpreter running the current command.
        self.registry = None

        self.cwd = pathlib.Path(cwd if cwd is not None else os.getcwd()).resolve()
        self.last_cwd = None

    @Signal
    def status_changed(self, message, severity):
        pass

    @Signal
    def view_closed(self, view_id):
        pass

    # status line

    def set_status(self, message):
        self.status = (message, 'info')
        self.status_changed(message, 'info')

    def set_error(self, message):
        logging.debug('error status: %s', message)
        self.status = (message, 'error')
        self.status_changed(message, 'error')

    # views and documents

    @property
    def view(self):
        for view in self.views:
            if view.id == self.__focus:
                return view
        raise errors.NoBufferActiveError('No view is open')

    @property
    def doc(self):
        return self.documents[self.view.doc_id]

    @property
    def should_exit(self):
        return not self.views

    def focus(self, view_id):
        self.__focus = view_id

    def resolve_path(self, path):
        return (self.cwd / pathlib.Path(path).expanduser()).resolve()

    def _show(self, doc, split):
        if split or not self.views:
            view = View(doc.id)
            self.views.append(view)
            self.__focus = view.id
        else:
            self.view.doc_id = doc.id
        return doc

    def new_file(self, split=False):
        doc = Document()
        self.documents[doc.id] = doc
        return self._show(doc, split)

    def find_document(self, path):
        path = self.resolve_path(path)
        for doc in self.documents.values():
            if doc.path is not None and doc.path == path:
                return doc
        return None

    def open(self, path, split=False):
        doc = self.find_document(path)
        if doc is None:
            doc = Document.load(self.resolve_path(path))
            self.documents[doc.id] = doc
        return self._show(doc, split)

    def switch(self, doc_id, split=False):
        return self._show(self.documents[doc_id], split)

    def split(self):
        return self._show(self.doc, split=True)

    def close(self, view_id):
        '''
        Close one view. Closing the last view asks the editor to exit.
        '''
        self.views = [v for v in self.views if v.id != view_id]
        if self.__focus == view_id:
            self.__focus = self.views[-1].id if self.views else None
        self.view_closed(view_id)

    def close_document(self, doc_id, force=False):
        '''
        Close a document, switching every view of it to another
        document. Returns the name of the document instead of closing it
        if it is modified and `force` is false.
        '''
        doc = self.documents[doc_id]
        if doc.is_modified and not force:
            return doc.display_name(self.cwd)

        del self.documents[doc_id]
        replacement = next(reversed(self.documents.values()), None)
        for view in self.views:
            if view.doc_id == doc_id:
                if replacement is None:
                    replacement = Document()
                    self.documents[replacement.id] = replacement
                view.doc_id = replacement.id
        return None

    def modified_documents(self):
        return [doc for doc in self.documents.values() if doc.is_modified]

    def goto_buffer(self, step):
        ids = list(self.documents)
        i = ids.index(self.view.doc_id)
        self.view.doc_id = ids[(i + step) % len(ids)]

    def save(self, doc_id, path=None, force=False):
        if path is not None:
            path = self.resolve_path(path)
        self.documents[doc_id].save(path, force)

    def move_path(self, old_path, new_path):
        new_path = self.resolve_path(new_path)
        try:
            os.replace(str(old_path), str(new_path))
        except OSError as exc:
            raise errors.HandlerError('Could not move file: {}'.format(exc)) from exc
        for doc in self.documents.values():
            if doc.path == old_path:
                doc.path = new_path

    def set_cwd(self, path):
        path = self.resolve_path(path)
        if not path.is_dir():
            raise errors.NoSuchFileError('{} is not a directory'.format(path))
        self.last_cwd = self.cwd
        self.cwd = path

    # themes

    def set_theme_preview(self, theme):
        self.theme_preview = theme

    def unset_theme_preview(self):
        self.theme_preview = None

    def set_theme(self, theme):
        self.theme_preview = None
        self.theme = theme

    @property
    def active_theme(self):
        return self.theme_preview if self.theme_preview is not None else self.theme

    # configuration and jobs

    def handle_config_events(self):
        while True:
            try:
                event = self.config_events.get_nowait()
            except queue.Empty:
                return

            if event.kind is ConfigEventKind.update:
                self.config = event.config
            elif event.kind is ConfigEventKind.refresh:
                try:
                    self.config = load_config(self.config_file)
                except errors.UserError as exc:
                    self.set_error(str(exc))
                else:
                    self.set_status('Config refreshed')
            else:
                raise AssertionError('unhandled config event {!r}'.format(event))

    def pump(self):
        '''
        Apply pending configuration changes and finished job callbacks.
        '''
        self.handle_config_events()
        self.jobs.process(self)
