
import pytest

from excmd.control.command_line_interpreter import CommandLineInterpreter
from excmd.control.prompt import PromptEvent, PromptSession
from excmd.control.registry import Registry
from excmd.control.typed import TYPABLE_COMMAND_LIST, default_registry
from excmd.core.config import Config
from excmd.testutil import make_editor, recording_command


@pytest.fixture
def interp():
    return CommandLineInterpreter(default_registry())


@pytest.fixture
def editor(tmpdir):
    return make_editor(tmpdir)


@pytest.fixture
def run(interp):
    def run(editor, line):
        interp.execute(editor, line, PromptEvent.validate)
        editor.pump()
        return editor.status
    return run


def error(message):
    return (message, 'error')


def info(message):
    return (message, 'info')


# quitting

def test_quit_last_view_with_unsaved_changes(editor, run):
    editor.doc.apply('changed')
    assert run(editor, 'quit') == error('1 unsaved buffer remaining: ["[scratch]"]')
    assert len(editor.views) == 1
    assert not editor.should_exit

    run(editor, 'q!')
    assert editor.should_exit


def test_quit_names_file_buffers(tmpdir, run):
    tmpdir.join('a.txt').write('text\n')
    editor = make_editor(tmpdir, files=['a.txt'])
    editor.doc.apply('other\n')
    assert run(editor, 'q') == error('1 unsaved buffer remaining: ["a.txt"]')


def test_quit_with_other_views_open(editor, run):
    editor.doc.apply('changed')
    run(editor, 'vsplit')
    assert len(editor.views) == 2
    run(editor, 'quit')
    assert len(editor.views) == 1


def test_quit_all(editor, run):
    run(editor, 'vsplit')
    run(editor, 'qa')
    assert editor.should_exit
    assert editor.exit_code == 0


def test_cquit(editor, run):
    run(editor, 'cquit 3')
    assert editor.should_exit
    assert editor.exit_code == 3


def test_cquit_default_code(editor, run):
    run(editor, 'cq')
    assert editor.exit_code == 1


def test_cquit_bad_code(editor, run):
    assert run(editor, 'cquit x') == error("invalid exit code 'x'")
    assert not editor.should_exit
    assert editor.exit_code == 0


def test_unknown_command(editor, run):
    assert run(editor, 'nosuchcommand') == error("no such command: 'nosuchcommand'")


def test_arity_error(editor, run):
    assert run(editor, 'quit now') == error("`:quit` doesn't take any arguments")


# buffers and files

def test_open_with_position(tmpdir, editor, run):
    tmpdir.join('f.txt').write('a\nbc\nd\n')
    run(editor, 'open f.txt:2:2')
    assert editor.doc.path == editor.cwd / 'f.txt'
    assert editor.doc.cursor == 3


def test_open_directory_fails(tmpdir, editor, run):
    tmpdir.mkdir('sub')
    assert run(editor, 'open sub') == error('sub is a directory')


def test_write(tmpdir, editor, run):
    editor.doc.apply('hello')
    run(editor, 'write out.txt')
    assert tmpdir.join('out.txt').read() == 'hello\n'
    assert not editor.doc.is_modified


def test_write_without_filename(editor, run):
    editor.doc.apply('hello')
    assert run(editor, 'w') == error('cannot write a buffer without a filename')


def test_write_missing_directory(tmpdir, editor, run):
    editor.doc.apply('x')
    assert run(editor, 'w sub/out.txt')[1] == 'error'
    run(editor, 'w! sub/out.txt')
    assert tmpdir.join('sub', 'out.txt').read() == 'x\n'


def test_write_runs_formatter(tmpdir, run):
    tmpdir.join('a.txt').write('abc\n')
    editor = make_editor(tmpdir, config=Config({'formatter': 'tr a-z A-Z'}), files=['a.txt'])
    editor.doc.apply('abc\ndef')

    run(editor, 'write')
    assert tmpdir.join('a.txt').read() == 'ABC\nDEF\n'
    assert editor.doc.text == 'ABC\nDEF\n'


def test_write_no_format(tmpdir, run):
    tmpdir.join('a.txt').write('abc\n')
    editor = make_editor(tmpdir, config=Config({'formatter': 'tr a-z A-Z'}), files=['a.txt'])
    editor.doc.apply('abc\ndef')

    run(editor, 'write --no-format')
    assert tmpdir.join('a.txt').read() == 'abc\ndef\n'


def test_write_quit(tmpdir, run):
    tmpdir.join('a.txt').write('abc\n')
    editor = make_editor(tmpdir, config=Config({'formatter': ['tr', 'a-z', 'A-Z']}), files=['a.txt'])
    editor.doc.apply('xyz\n')

    run(editor, 'wq')
    assert tmpdir.join('a.txt').read() == 'XYZ\n'
    assert editor.should_exit


def test_write_all(tmpdir, run):
    tmpdir.join('a.txt').write('a\n')
    tmpdir.join('b.txt').write('b\n')
    editor = make_editor(tmpdir, files=['a.txt', 'b.txt'])
    for doc in editor.documents.values():
        doc.apply(doc.text + 'more\n')

    run(editor, 'write-all')
    assert tmpdir.join('a.txt').read() == 'a\nmore\n'
    assert tmpdir.join('b.txt').read() == 'b\nmore\n'


def test_buffer_close(tmpdir, run):
    tmpdir.join('a.txt').write('a\n')
    tmpdir.join('b.txt').write('b\n')
    editor = make_editor(tmpdir, files=['a.txt', 'b.txt'])
    assert len(editor.documents) == 2

    run(editor, 'bc')
    assert len(editor.documents) == 1
    assert editor.doc.display_name(editor.cwd) == 'a.txt'


def test_buffer_close_modified(tmpdir, run):
    tmpdir.join('a.txt').write('a\n')
    editor = make_editor(tmpdir, files=['a.txt'])
    editor.doc.apply('changed')

    assert run(editor, 'buffer-close') == error('1 unsaved buffer remaining: ["a.txt"]')
    assert len(editor.documents) == 1

    run(editor, 'buffer-close!')
    assert editor.doc.path is None
    assert editor.views


def test_buffer_close_unknown_name(editor, run):
    assert run(editor, 'bc nothere.txt') == error("cannot close non-existent buffers: 'nothere.txt'")


def test_buffer_next_previous(tmpdir, run):
    tmpdir.join('a.txt').write('a\n')
    tmpdir.join('b.txt').write('b\n')
    editor = make_editor(tmpdir, files=['a.txt', 'b.txt'])
    first = editor.doc

    run(editor, 'bn')
    assert editor.doc is not first
    run(editor, 'bn')
    assert editor.doc is first
    run(editor, 'bp')
    assert editor.doc is not first


def test_earlier_later(editor, run):
    editor.doc.apply('one')
    editor.doc.apply('two')

    run(editor, 'earlier 1')
    assert editor.doc.text == 'one'
    run(editor, 'later 1')
    assert editor.doc.text == 'two'
    assert run(editor, 'later 1') == info('Already at newest change')
    assert run(editor, 'ear x') == error("invalid number of steps 'x'")


def test_sort(editor, run):
    editor.doc.apply('c\nb\na', [(0, 1), (2, 3), (4, 5)])
    run(editor, 'sort')
    assert editor.doc.text == 'a\nb\nc'

    run(editor, 'sort -r')
    assert editor.doc.text == 'c\nb\na'


def test_read(tmpdir, editor, run):
    tmpdir.join('ins.txt').write('XYZ')
    editor.doc.apply('ab', [(1, 1)])
    run(editor, 'read ins.txt')
    assert editor.doc.text == 'aXYZb'


def test_read_missing_file(editor, run):
    assert run(editor, 'r missing.txt')[1] == 'error'


def test_move(tmpdir, run):
    tmpdir.join('a.txt').write('a\n')
    editor = make_editor(tmpdir, files=['a.txt'])
    run(editor, 'mv b.txt')
    assert editor.doc.path == editor.cwd / 'b.txt'
    assert tmpdir.join('b.txt').check()
    assert not tmpdir.join('a.txt').check()


def test_move_scratch(editor, run):
    assert run(editor, 'move x.txt') == error('Scratch buffer cannot be moved. Use :write instead')


def test_write_buffer_close(tmpdir, run):
    tmpdir.join('a.txt').write('a\n')
    tmpdir.join('b.txt').write('b\n')
    editor = make_editor(tmpdir, files=['a.txt', 'b.txt'])
    editor.doc.apply('changed\n')

    run(editor, 'wbc')
    assert tmpdir.join('b.txt').read() == 'changed\n'
    assert len(editor.documents) == 1
    assert editor.doc.display_name(editor.cwd) == 'a.txt'


def test_write_buffer_close_to_path(tmpdir, run):
    editor = make_editor(tmpdir, config=Config({'formatter': ['tr', 'a-z', 'A-Z']}))
    editor.doc.apply('text\n')

    run(editor, 'write-buffer-close new.txt')
    assert tmpdir.join('new.txt').read() == 'TEXT\n'
    assert editor.find_document('new.txt') is None


def test_update_writes_only_modified(tmpdir, run):
    tmpdir.join('a.txt').write('a\n')
    editor = make_editor(tmpdir, files=['a.txt'])

    tmpdir.join('a.txt').write('changed on disk\n')
    run(editor, 'update')
    assert tmpdir.join('a.txt').read() == 'changed on disk\n'

    editor.doc.apply('edited\n')
    run(editor, 'u')
    assert tmpdir.join('a.txt').read() == 'edited\n'


def test_format(tmpdir, run):
    tmpdir.join('a.txt').write('abc\n')
    editor = make_editor(tmpdir, config=Config({'formatter': 'tr a-z A-Z'}), files=['a.txt'])

    run(editor, 'fmt')
    editor.jobs.wait()
    editor.pump()
    assert editor.doc.text == 'ABC\n'
    assert editor.doc.is_modified
    assert tmpdir.join('a.txt').read() == 'abc\n'


def test_format_without_formatter(editor, run):
    assert run(editor, 'format') == error("A formatter isn't available; set the 'formatter' option")


def test_reload(tmpdir, run):
    tmpdir.join('a.txt').write('a\n')
    editor = make_editor(tmpdir, files=['a.txt'])
    editor.doc.apply('edited\n')
    tmpdir.join('a.txt').write('from disk\n')

    run(editor, 'reload')
    assert editor.doc.text == 'from disk\n'
    assert not editor.doc.is_modified

    # the reload can be undone
    run(editor, 'earlier 1')
    assert editor.doc.text == 'edited\n'


def test_reload_scratch(editor, run):
    assert run(editor, 'rl') == error("can't find file to reload from")


def test_reload_all(tmpdir, run):
    tmpdir.join('a.txt').write('a\n')
    tmpdir.join('b.txt').write('b\n')
    editor = make_editor(tmpdir, files=['a.txt', 'b.txt'])
    for doc in editor.documents.values():
        doc.apply('edited\n')
    tmpdir.join('b.txt').remove()

    assert run(editor, 'reload-all')[1] == 'error'
    a = editor.find_document('a.txt')
    assert a.text == 'a\n'
    assert not a.is_modified
    assert editor.find_document('b.txt').text == 'edited\n'


def test_yank_join(editor, run):
    editor.doc.apply('one two three', [(0, 3), (8, 13)])

    assert run(editor, 'yank-join') == info('joined and yanked 2 selections to register "')
    assert editor.registers['"'] == 'one\nthree'

    run(editor, "yank-join ', '")
    assert editor.registers['"'] == 'one, three'


# options

def test_set_option(editor, run):
    assert run(editor, 'set-option scrolloff 10') == info("'scrolloff' is now set to 10")
    assert editor.config['scrolloff'] == 10


def test_set_option_case_insensitive_key(editor, run):
    run(editor, 'set SEARCH.SMART-CASE false')
    assert editor.config['search.smart-case'] is False


def test_set_option_value_with_spaces(editor, run):
    run(editor, 'set rulers [80, 120]')
    assert editor.config['rulers'] == [80, 120]

    run(editor, 'set line-number relative')
    assert editor.config['line-number'] == 'relative'


def test_set_option_errors(editor, run):
    assert run(editor, 'set scrolloff ten') == error('Could not parse field `ten`: expected number')
    assert run(editor, 'set nosuchkey 1') == error('Unknown key `nosuchkey`')
    assert run(editor, 'set scrolloff') == error('`:set-option` needs `2` arguments, got 1')
    assert editor.config['scrolloff'] == 5


def test_get_option(editor, run):
    assert run(editor, 'get scrolloff') == info('5')
    assert run(editor, 'get-option search.wrap-around') == info('true')
    assert run(editor, 'get shell') == info('["sh", "-c"]')


def test_toggle_boolean(editor, run):
    assert run(editor, 'toggle cursorline') == info("'cursorline' is now set to true")
    assert editor.config['cursorline'] is True
    run(editor, 'toggle cursorline')
    assert editor.config['cursorline'] is False

    assert run(editor, 'toggle cursorline yes') == error(
        'Bad arguments. For boolean configurations use: `:toggle key`')


def test_toggle_string(editor, run):
    run(editor, 'toggle line-number absolute relative')
    assert editor.config['line-number'] == 'relative'
    run(editor, 'toggle line-number absolute relative')
    assert editor.config['line-number'] == 'absolute'

    assert run(editor, 'toggle line-number relative') == error(
        'Bad arguments. For string configurations use: `:toggle key val1 val2 ...`')


def test_toggle_number(editor, run):
    run(editor, 'toggle text-width 80 100')
    assert editor.config['text-width'] == 100
    run(editor, 'toggle text-width 80 100')
    assert editor.config['text-width'] == 80


def test_toggle_list(editor, run):
    run(editor, 'toggle rulers [80] [100, 120]')
    assert editor.config['rulers'] == [80]
    run(editor, 'toggle rulers [80] [100, 120]')
    assert editor.config['rulers'] == [100, 120]


def test_toggle_unsupported(editor, run):
    assert run(editor, 'toggle search') == error('Configuration search does not support toggle yet')


def test_config_reload(tmpdir, editor, run, monkeypatch):
    monkeypatch.delenv('EXCMD_NO_RC', raising=False)
    tmpdir.join('config.yaml').write('scrolloff: 9\n')
    assert run(editor, 'config-reload') == info('Config refreshed')
    assert editor.config['scrolloff'] == 9


def test_config_open(tmpdir, editor, run):
    run(editor, 'config-open')
    assert editor.doc.path == editor.cwd / 'config.yaml'


# themes

@pytest.fixture
def themed(tmpdir):
    themes = tmpdir.mkdir('themes')
    themes.join('dark.yaml').write('styles:\n  keyword: {fg: blue}\n')
    themes.join('vivid.yaml').write('true-color: true\n')
    return make_editor(tmpdir, theme_dirs=[str(themes)])


def test_theme_preview_and_abort(themed, interp):
    session = PromptSession(interp, themed)
    session.update('theme dark')
    assert themed.active_theme.name == 'dark'
    session.abort()
    assert themed.active_theme.name == 'default'
    assert themed.theme_preview is None


def test_theme_commit(themed, run):
    run(themed, 'theme dark')
    assert themed.theme.name == 'dark'
    assert themed.theme.styles == {'keyword': {'fg': 'blue'}}
    assert run(themed, 'theme') == info('dark')


def test_theme_errors(themed, run):
    assert run(themed, 'theme nope') == error("Could not load theme: no theme named 'nope'")
    assert run(themed, 'theme vivid') == error('Unsupported theme: theme requires true color support')
    assert themed.theme.name == 'default'


# shell

def test_run_shell_command(editor, run):
    assert run(editor, 'sh echo hello') == info('hello')
    assert run(editor, 'sh true') == info('Command run')
    assert run(editor, 'sh exit 3') == error('Shell command failed: status 3')


def test_insert_and_append_output(editor, run):
    editor.doc.apply('ab', [(1, 2)])
    run(editor, 'insert-output printf X')
    assert editor.doc.text == 'aXb'

    editor.doc.set_selection([(0, 1)])
    run(editor, 'append-output printf Y')
    assert editor.doc.text == 'aYXb'


def test_pipe(editor, run):
    editor.doc.apply('hello world', [(0, 5)])
    run(editor, 'pipe tr a-z A-Z')
    assert editor.doc.text == 'HELLO world'

    run(editor, 'pipe-to tr a-z A-Z')
    assert editor.doc.text == 'HELLO world'


# misc

def test_echo(editor, run):
    assert run(editor, 'echo hello   world') == info('hello world')


def test_change_directory(tmpdir, editor, run):
    tmpdir.mkdir('sub')
    start = editor.cwd
    run(editor, 'cd sub')
    assert editor.cwd == start / 'sub'
    assert run(editor, 'pwd') == info('Current working directory is {}'.format(start / 'sub'))
    run(editor, 'cd -')
    assert editor.cwd == start


def test_change_directory_missing(editor, run):
    assert run(editor, 'cd nowhere')[1] == 'error'


def test_clear_register(editor, run):
    editor.registers.update({'a': 'x', 'b': 'y', 'c': 'z'})
    run(editor, 'clear-register a')
    assert sorted(editor.registers) == ['b', 'c']
    assert run(editor, 'clear-register a') == error('Register a not found')
    run(editor, 'clear-register --all')
    assert editor.registers == {}


def test_help(editor, run):
    assert run(editor, 'help w') == info(default_registry().find('write').doc_text())
    assert run(editor, 'help nosuchcommand') == error("no such command: 'nosuchcommand'")


def test_help_uses_the_interpreter_registry(editor):
    custom, _ = recording_command('custom', doc='A command added by a plugin.')
    interp = CommandLineInterpreter(Registry(TYPABLE_COMMAND_LIST + (custom,)))

    interp.execute(editor, 'help custom', PromptEvent.validate)
    assert editor.status == info(custom.doc_text())

    interp.execute(editor, 'help', PromptEvent.validate)
    assert 'custom' in editor.status[0].split()

    completions = interp.complete(editor, 'help cust')
    assert completions[0].text == 'custom'


def test_new_and_splits(editor, run):
    run(editor, 'new')
    assert len(editor.documents) == 2
    run(editor, 'hsplit-new')
    assert len(editor.views) == 2
    assert len(editor.documents) == 3
