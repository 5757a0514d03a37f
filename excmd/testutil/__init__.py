from .mocks import make_editor, recording_command, RecordingCommand
