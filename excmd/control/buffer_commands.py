'''
Commands that open, close, save and edit buffers.

Every command here receives ``(editor, args, event)`` and does nothing
unless `event` is :attr:`PromptEvent.validate`, except for :func:`goto_line_number`,
which previews the jump while the line is typed.
'''

import logging
import re

from ..core import errors
from ..util import clamp, plural
from .prompt import PromptEvent
from .shell_commands import shell_impl
from .shellwords import Args


#: The register yanks go to when none is named.
DEFAULT_REGISTER = '"'


def flush_writes(editor):
    '''
    Wait for pending jobs, such as formatting before a save, and apply
    their results.
    '''
    editor.jobs.wait()
    editor.pump()


def buffers_remaining(editor):
    '''
    Raise BufferModifiedError if any document has unsaved changes. If the
    current document is unmodified, focus the first modified one.
    '''
    modified = editor.modified_documents()
    if modified:
        if editor.doc not in modified:
            editor.switch(modified[0].id)
        raise errors.BufferModifiedError(doc.display_name(editor.cwd) for doc in modified)


def quit_view(editor, args, event):
    logging.debug('quitting...')

    if event is not PromptEvent.validate:
        return

    flush_writes(editor)

    # last view and we have unsaved changes
    if len(editor.views) == 1:
        buffers_remaining(editor)

    editor.close(editor.view.id)


def force_quit_view(editor, args, event):
    if event is not PromptEvent.validate:
        return

    flush_writes(editor)
    editor.close(editor.view.id)


def quit_all_impl(editor, force):
    flush_writes(editor)
    if not force:
        buffers_remaining(editor)

    for view in list(editor.views):
        editor.close(view.id)


def quit_all(editor, args, event):
    if event is not PromptEvent.validate:
        return
    quit_all_impl(editor, force=False)


def force_quit_all(editor, args, event):
    if event is not PromptEvent.validate:
        return
    quit_all_impl(editor, force=True)


def _exit_code(args):
    code = args.first()
    if code is None:
        return 1
    try:
        return int(code)
    except ValueError:
        raise errors.ValueParseError('invalid exit code {!r}'.format(code)) from None


def cquit(editor, args, event):
    if event is not PromptEvent.validate:
        return
    editor.exit_code = _exit_code(args)
    quit_all_impl(editor, force=False)


def force_cquit(editor, args, event):
    if event is not PromptEvent.validate:
        return
    editor.exit_code = _exit_code(args)
    quit_all_impl(editor, force=True)


_POSITION_SUFFIX = re.compile(r'^(.*?):(\d+)(?::(\d+))?$')


def parse_file(editor, text):
    '''
    Split ``path:line:col`` into the path and a zero-based ``(line, col)``.
    A path that exists as written is never split.
    '''
    if not editor.resolve_path(text).exists():
        m = _POSITION_SUFFIX.match(text)
        if m and m.group(1):
            line = max(int(m.group(2)) - 1, 0)
            col = max(int(m.group(3)) - 1, 0) if m.group(3) else 0
            return m.group(1), (line, col)
    return text, (0, 0)


def open_files(editor, args, event):
    if event is not PromptEvent.validate:
        return

    for arg in args:
        path, (line, col) = parse_file(editor, arg)
        if editor.resolve_path(path).is_dir():
            raise errors.HandlerError('{} is a directory'.format(path))
        doc = editor.open(path)
        line_start = doc.line_to_char(line)
        line_end = doc.line_to_char(line + 1) if line + 1 < doc.line_count else len(doc.text)
        pos = min(line_start + col, line_end)
        doc.set_selection([(pos, pos)])


def new_file(editor, args, event):
    if event is not PromptEvent.validate:
        return
    editor.new_file()


def buffer_close_by_ids(editor, doc_ids, force):
    flush_writes(editor)

    modified_ids = []
    modified_names = []
    for doc_id in doc_ids:
        name = editor.close_document(doc_id, force)
        if name is not None:
            modified_ids.append(doc_id)
            modified_names.append(name)

    if modified_ids:
        # If the current document is unmodified, and there are modified
        # documents, switch focus to the first modified doc.
        if editor.view.doc_id not in modified_ids:
            editor.switch(modified_ids[0])
        raise errors.BufferModifiedError(modified_names)


def buffer_gather_paths(editor, args):
    # No arguments implies current document
    if not args:
        return [editor.view.doc_id]

    nonexistent = []
    doc_ids = []
    for arg in args:
        doc = editor.find_document(arg)
        if doc is None:
            nonexistent.append("'{}'".format(arg))
        else:
            doc_ids.append(doc.id)

    if nonexistent:
        editor.set_error('cannot close non-existent buffers: {}'.format(', '.join(nonexistent)))

    return doc_ids


def buffer_close(editor, args, event):
    if event is not PromptEvent.validate:
        return
    buffer_close_by_ids(editor, buffer_gather_paths(editor, args), force=False)


def force_buffer_close(editor, args, event):
    if event is not PromptEvent.validate:
        return
    buffer_close_by_ids(editor, buffer_gather_paths(editor, args), force=True)


def _other_doc_ids(editor):
    current = editor.view.doc_id
    return [doc_id for doc_id in editor.documents if doc_id != current]


def buffer_close_others(editor, args, event):
    if event is not PromptEvent.validate:
        return
    buffer_close_by_ids(editor, _other_doc_ids(editor), force=False)


def force_buffer_close_others(editor, args, event):
    if event is not PromptEvent.validate:
        return
    buffer_close_by_ids(editor, _other_doc_ids(editor), force=True)


def buffer_close_all(editor, args, event):
    if event is not PromptEvent.validate:
        return
    buffer_close_by_ids(editor, list(editor.documents), force=False)


def force_buffer_close_all(editor, args, event):
    if event is not PromptEvent.validate:
        return
    buffer_close_by_ids(editor, list(editor.documents), force=True)


def buffer_next(editor, args, event):
    if event is not PromptEvent.validate:
        return
    editor.goto_buffer(1)


def buffer_previous(editor, args, event):
    if event is not PromptEvent.validate:
        return
    editor.goto_buffer(-1)


def insert_final_newline(doc):
    if doc.text and not doc.text.endswith('\n'):
        doc.apply(doc.text + '\n')


def format_impl(editor, formatter, then=None):
    '''
    Pipe the current document through `formatter` on the job facility and
    apply the output, then call ``then(editor, doc_id)``. `formatter` is an
    argv list, or a string run through the ``shell`` option.
    '''
    if isinstance(formatter, str):
        argv, cmd = editor.config['shell'], formatter
    else:
        argv, cmd = formatter, None
    doc_id = editor.doc.id
    original = editor.doc.text
    cwd = editor.cwd

    def job():
        formatted = shell_impl(argv, cmd, input=original, cwd=cwd)

        def apply(editor):
            try:
                doc = editor.documents[doc_id]
            except KeyError:
                return
            if doc.text != original:
                raise errors.HandlerError('document changed while formatting{}'.format(
                    '' if then is None else '; not saved'))
            if formatted != original:
                doc.apply(formatted)
            if then is not None:
                then(editor, doc_id)
        return apply

    editor.jobs.callback(job)


def write_impl(editor, path, force, format):
    '''
    Save the current document, to `path` if given. When a formatter is
    configured the document is formatted first, on the job facility, and
    saved once the formatted text is applied.
    '''
    doc = editor.doc
    config = editor.config

    if config['insert-final-newline']:
        insert_final_newline(doc)

    formatter = config['formatter']
    if format and config['auto-format'] and formatter:
        def save(editor, doc_id):
            editor.save(doc_id, path, force)
        format_impl(editor, formatter, then=save)
    else:
        editor.save(doc.id, path, force)


def write(editor, args, event):
    if event is not PromptEvent.validate:
        return
    write_impl(editor, args.first(), force=False, format=not args.has_flag('no-format'))


def force_write(editor, args, event):
    if event is not PromptEvent.validate:
        return
    write_impl(editor, args.first(), force=True, format=not args.has_flag('no-format'))


def write_quit(editor, args, event):
    if event is not PromptEvent.validate:
        return
    write_impl(editor, args.first(), force=False, format=not args.has_flag('no-format'))
    flush_writes(editor)
    quit_view(editor, Args.empty(), event)


def force_write_quit(editor, args, event):
    if event is not PromptEvent.validate:
        return
    write_impl(editor, args.first(), force=True, format=not args.has_flag('no-format'))
    flush_writes(editor)
    force_quit_view(editor, Args.empty(), event)


def write_buffer_close(editor, args, event):
    if event is not PromptEvent.validate:
        return
    write_impl(editor, args.first(), force=False, format=not args.has_flag('no-format'))
    flush_writes(editor)
    buffer_close_by_ids(editor, buffer_gather_paths(editor, args), force=False)


def force_write_buffer_close(editor, args, event):
    if event is not PromptEvent.validate:
        return
    write_impl(editor, args.first(), force=True, format=not args.has_flag('no-format'))
    flush_writes(editor)
    buffer_close_by_ids(editor, buffer_gather_paths(editor, args), force=False)


def update(editor, args, event):
    '''
    Writes the current document only if it has unsaved changes.
    '''
    if event is not PromptEvent.validate:
        return
    if editor.doc.is_modified:
        write(editor, args, event)


def format_buffer(editor, args, event):
    if event is not PromptEvent.validate:
        return
    formatter = editor.config['formatter']
    if not formatter:
        raise errors.HandlerError("A formatter isn't available; set the 'formatter' option")
    format_impl(editor, formatter)


def write_all_impl(editor, force, write_scratch):
    problems = []
    for doc in list(editor.documents.values()):
        if not doc.is_modified:
            continue
        if doc.path is None:
            if write_scratch:
                problems.append('cannot write a buffer without a filename')
            continue
        if editor.config['insert-final-newline']:
            insert_final_newline(doc)
        editor.save(doc.id, None, force)

    if problems and not force:
        raise errors.HandlerError('; '.join(problems))


def write_all(editor, args, event):
    if event is not PromptEvent.validate:
        return
    write_all_impl(editor, force=False, write_scratch=True)


def force_write_all(editor, args, event):
    if event is not PromptEvent.validate:
        return
    write_all_impl(editor, force=True, write_scratch=True)


def write_all_quit(editor, args, event):
    if event is not PromptEvent.validate:
        return
    write_all_impl(editor, force=False, write_scratch=True)
    quit_all_impl(editor, force=False)


def force_write_all_quit(editor, args, event):
    if event is not PromptEvent.validate:
        return
    write_all_impl(editor, force=True, write_scratch=True)
    quit_all_impl(editor, force=True)


def _steps(args):
    try:
        steps = int(args[0])
    except ValueError:
        raise errors.ValueParseError('invalid number of steps {!r}'.format(args[0])) from None
    if steps < 1:
        raise errors.ValueParseError('number of steps must be positive')
    return steps


def earlier(editor, args, event):
    if event is not PromptEvent.validate:
        return
    if not editor.doc.earlier(_steps(args)):
        editor.set_status('Already at oldest change')


def later(editor, args, event):
    if event is not PromptEvent.validate:
        return
    if not editor.doc.later(_steps(args)):
        editor.set_status('Already at newest change')


def reload(editor, args, event):
    if event is not PromptEvent.validate:
        return
    flush_writes(editor)
    editor.doc.reload()


def reload_all(editor, args, event):
    '''
    Reloads every document that has a file. A document that fails to
    reload is reported and the rest are still reloaded.
    '''
    if event is not PromptEvent.validate:
        return

    flush_writes(editor)
    for doc in list(editor.documents.values()):
        if doc.path is None:
            continue
        try:
            doc.reload()
        except errors.UserError as exc:
            editor.set_error(str(exc))


def goto_line(doc, line):
    '''
    Put the cursor at the start of one-based `line`, clamped to the
    document.
    '''
    line = clamp(1, doc.line_count + 1, line)
    pos = doc.line_to_char(line - 1)
    doc.set_selection([(pos, pos)])


def _abort_goto_line_number_preview(editor):
    if editor.last_selection is not None:
        doc_id, selections = editor.last_selection
        editor.last_selection = None
        doc = editor.documents.get(doc_id)
        if doc is not None:
            doc.set_selection(selections)


def _update_goto_line_number_preview(editor, args):
    try:
        line = int(args[0])
    except ValueError:
        raise errors.ValueParseError('invalid line number {!r}'.format(args[0])) from None

    doc = editor.doc
    if editor.last_selection is None:
        editor.last_selection = (doc.id, list(doc.selections))
    goto_line(doc, line)


def goto_line_number(editor, args, event):
    if event is PromptEvent.abort:
        _abort_goto_line_number_preview(editor)
    elif event is PromptEvent.validate:
        if not args:
            raise errors.HandlerError('Line number required')

        # When invoked directly from a key binding no update preceded this,
        # so move the cursor here as well.
        _update_goto_line_number_preview(editor, args)

        doc_id, selections = editor.last_selection
        editor.last_selection = None
        editor.view.jumps.append((doc_id, selections))
    elif not args:
        # Backspacing over every digit returns to the original position; a
        # new preview starts when digits are typed again.
        _abort_goto_line_number_preview(editor)
    else:
        _update_goto_line_number_preview(editor, args)


def sort_selections(editor, args, event):
    if event is not PromptEvent.validate:
        return

    doc = editor.doc
    fragments = sorted(doc.fragments(), reverse=args.has_flag('reverse'))
    doc.replace(doc.selections, fragments)


def yank_join(editor, args, event):
    '''
    Yanks the selections, joined by the separator (a newline by default),
    into the default register.
    '''
    if event is not PromptEvent.validate:
        return

    separator = args.first('\n')
    fragments = editor.doc.fragments()
    editor.registers[DEFAULT_REGISTER] = separator.join(fragments)
    editor.set_status('joined and yanked {} selection{} to register {}'.format(
        len(fragments), plural(len(fragments)), DEFAULT_REGISTER))


def read_file(editor, args, event):
    if event is not PromptEvent.validate:
        return

    path = editor.resolve_path(args[0])
    if not path.is_file():
        raise errors.NoSuchFileError('path is not a file: {}'.format(path))

    try:
        contents = path.read_text()
    except OSError as exc:
        raise errors.HandlerError('error reading file: {}'.format(exc)) from exc

    doc = editor.doc
    points = [(start, start) for (start, _) in doc.selections]
    doc.replace(points, [contents] * len(points))


def move_buffer(editor, args, event):
    if event is not PromptEvent.validate:
        return

    old_path = editor.doc.path
    if old_path is None:
        raise errors.HandlerError('Scratch buffer cannot be moved. Use :write instead')
    editor.move_path(old_path, args[0])


def _split(editor, args):
    if not args:
        editor.split()
    else:
        for arg in args:
            editor.open(arg, split=True)


def vsplit(editor, args, event):
    if event is not PromptEvent.validate:
        return
    _split(editor, args)


def hsplit(editor, args, event):
    if event is not PromptEvent.validate:
        return
    _split(editor, args)


def vsplit_new(editor, args, event):
    if event is not PromptEvent.validate:
        return
    editor.new_file(split=True)


def hsplit_new(editor, args, event):
    if event is not PromptEvent.validate:
        return
    editor.new_file(split=True)

