'''
Commands that run shell commands.

The shell is the ``shell`` option, a list such as ``['sh', '-c']`` to
which the command text is appended. Commands run on the editor's job
facility; their results are applied when the editor next processes
finished jobs.
'''

import logging
import subprocess

from ..core import errors
from .prompt import PromptEvent


def shell_impl(argv, cmd=None, input=None, cwd=None):
    '''
    Run ``argv + [cmd]`` and return its standard output.

    :param input: Text written to the command's standard input.
    :raise HandlerError: if the command cannot be started or exits with a
                         nonzero status.
    '''
    argv = list(argv)
    if cmd is not None:
        argv.append(cmd)

    logging.debug('running %r in %s', argv, cwd)
    try:
        proc = subprocess.run(argv,
                              input=input,
                              stdout=subprocess.PIPE,
                              stderr=subprocess.PIPE,
                              stdin=None if input is not None else subprocess.DEVNULL,
                              universal_newlines=True,
                              cwd=None if cwd is None else str(cwd))
    except OSError as exc:
        raise errors.HandlerError('Failed to start shell: {}'.format(exc)) from exc

    if proc.returncode != 0:
        stderr = proc.stderr.strip()
        if stderr:
            raise errors.HandlerError('Shell command failed: {}'.format(stderr))
        raise errors.HandlerError('Shell command failed: status {}'.format(proc.returncode))

    if proc.stderr:
        logging.debug('shell stderr: %s', proc.stderr.rstrip())

    return proc.stdout


def _check_unchanged(editor, doc_id, text):
    doc = editor.documents.get(doc_id)
    if doc is None:
        raise errors.HandlerError('buffer closed before shell command finished')
    if doc.text != text:
        raise errors.HandlerError('buffer changed before shell command finished')
    return doc


def run_shell_command(editor, args, event):
    if event is not PromptEvent.validate:
        return

    shell = editor.config['shell']
    cmd = args[0]
    cwd = editor.cwd

    def job():
        output = shell_impl(shell, cmd, cwd=cwd)

        def show(editor):
            output_text = output.rstrip('\n')
            if output_text:
                editor.registers['|'] = output_text
                editor.set_status(output_text)
            else:
                editor.set_status('Command run')
        return show

    editor.jobs.callback(job)


def _output_into_selections(editor, cmd, append):
    doc = editor.doc
    shell = editor.config['shell']
    doc_id = doc.id
    text = doc.text
    if append:
        points = [(end, end) for (_, end) in doc.selections]
    else:
        points = [(start, start) for (start, _) in doc.selections]
    cwd = editor.cwd

    def job():
        output = shell_impl(shell, cmd, cwd=cwd)

        def insert(editor):
            doc = _check_unchanged(editor, doc_id, text)
            doc.replace(points, [output] * len(points))
        return insert

    editor.jobs.callback(job)


def insert_output(editor, args, event):
    if event is not PromptEvent.validate:
        return
    _output_into_selections(editor, args[0], append=False)


def append_output(editor, args, event):
    if event is not PromptEvent.validate:
        return
    _output_into_selections(editor, args[0], append=True)


def _pipe_impl(editor, cmd, replace):
    doc = editor.doc
    shell = editor.config['shell']
    doc_id = doc.id
    text = doc.text
    selections = list(doc.selections)
    fragments = doc.fragments()
    cwd = editor.cwd

    def job():
        outputs = [shell_impl(shell, cmd, input=fragment, cwd=cwd)
                   for fragment in fragments]
        if not replace:
            return None

        def apply(editor):
            doc = _check_unchanged(editor, doc_id, text)
            doc.replace(selections, outputs)
        return apply

    editor.jobs.callback(job)


def pipe(editor, args, event):
    if event is not PromptEvent.validate:
        return
    _pipe_impl(editor, args[0], replace=True)


def pipe_to(editor, args, event):
    if event is not PromptEvent.validate:
        return
    _pipe_impl(editor, args[0], replace=False)
