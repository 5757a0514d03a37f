
def _setup_logging():
    import logging
    import os
    logfmt = '[%(asctime)s|%(module)s:%(lineno)d|%(levelname)s]\n  %(message)s'

    level = logging.DEBUG if os.environ.get('EXCMD_DEBUG') else logging.WARNING
    logging.basicConfig(level=level,
                        format=logfmt)


def _print_status(editor, last):
    if editor.status is not None and editor.status is not last:
        message, severity = editor.status
        prefix = 'error: ' if severity == 'error' else ''
        print(prefix + message)
    return editor.status


def main():
    _setup_logging() # needs to be done before using the logger

    import sys
    from .abstract.editor import Editor
    from .control.command_line_interpreter import CommandLineInterpreter
    from .control.prompt import CommandLine
    from .control.typed import default_registry
    from .core.config import config_path, load_config
    from .core.errors import UserError
    from .core.theme import ThemeLoader

    argv = sys.argv[1:]

    # Allow for sending a commandline command at startup.
    startup = None
    if '-c' in argv:
        i = argv.index('-c')
        if i + 1 >= len(argv):
            print('-c requires a command', file=sys.stderr)
            sys.exit(2)
        startup = argv[i + 1]
        del argv[i:i + 2]

    try:
        config = load_config()
    except UserError as exc:
        print('error: {}'.format(exc), file=sys.stderr)
        sys.exit(1)

    path = config_path()
    editor = Editor(config=config,
                    config_file=path,
                    theme_loader=ThemeLoader([path.parent / 'themes']))

    try:
        for name in argv:
            editor.open(name)
    except UserError as exc:
        print('error: {}'.format(exc), file=sys.stderr)
    if not editor.views:
        editor.new_file()

    interp = CommandLineInterpreter(default_registry())
    command_line = CommandLine(interp, editor)

    lines = [startup] if startup is not None else []
    last = None

    def submit(line):
        if line.endswith('?'):
            # completions for the text before the '?'
            for completion in interp.complete(editor, line[:-1]):
                print(line[:completion.start] + completion.text)
            return
        session = command_line.open()
        session.update(line)
        session.validate()

    for line in lines:
        submit(line)
        editor.pump()
        last = _print_status(editor, last)

    while not editor.should_exit:
        try:
            line = input(':')
        except EOFError:
            break
        submit(line.rstrip('\n'))
        editor.jobs.wait()
        editor.pump()
        last = _print_status(editor, last)

    editor.jobs.shutdown()
    sys.exit(editor.exit_code)

if __name__ == '__main__':
    main()
