import threading
from concurrent import futures

import pytest

from excmd.core import Signal
from excmd.core.executors import Jobs, SynchronousExecutor
from excmd.core import errors
from excmd.testutil import make_editor


class Sender(object):
    @Signal
    def changed(self, value):
        pass


class Observer(object):
    def __init__(self):
        self.values = []

    def on_changed(self, value):
        self.values.append(value)

    def on_changed_badly(self, value):
        raise ValueError(value)


def test_connect_and_disconnect():
    sender = Sender()
    observer = Observer()
    sender.changed.connect(observer.on_changed)

    sender.changed(1)
    sender.changed.disconnect(observer.on_changed)
    sender.changed(2)

    assert observer.values == [1]


def test_signals_are_per_instance():
    a, b = Sender(), Sender()
    observer = Observer()
    a.changed.connect(observer.on_changed)
    b.changed(1)
    assert observer.values == []


def test_observers_are_weak():
    sender = Sender()
    observer = Observer()
    sender.changed.connect(observer.on_changed)
    del observer
    sender.changed(1)


def test_observer_errors_are_collected():
    sender = Sender()
    observer = Observer()
    sender.changed.connect(observer.on_changed_badly)
    sender.changed.connect(observer.on_changed)

    sender.changed(3, preserve_errors=True)
    assert observer.values == [3]
    assert [type(e) for e in sender.changed.errors] == [ValueError]


def test_errors_need_preserve_errors():
    sender = Sender()
    sender.changed(1)
    with pytest.raises(RuntimeError):
        sender.changed.errors


def test_editor_status_signal():
    editor = make_editor()

    class Collector(object):
        def __init__(self):
            self.seen = []

        def __call__(self, message, severity):
            self.seen.append((message, severity))

    collector = Collector()
    editor.status_changed.connect(collector)
    editor.set_error('bad')
    assert collector.seen == [('bad', 'error')]


def test_jobs_apply_callbacks_on_process():
    editor = make_editor()
    jobs = Jobs(SynchronousExecutor)

    def job(text):
        def apply(editor):
            editor.set_status(text)
        return apply

    jobs.callback(job, 'done')
    assert editor.status is None
    jobs.process(editor)
    assert editor.status == ('done', 'info')
    assert jobs.pending == 0


def test_job_errors_become_status():
    editor = make_editor()
    jobs = Jobs(SynchronousExecutor)

    def failing():
        raise errors.HandlerError('job went wrong')

    jobs.callback(failing)
    jobs.process(editor)
    assert editor.status == ('job went wrong', 'error')


def test_thread_pool_jobs():
    editor = make_editor()
    jobs = Jobs()

    jobs.callback(lambda: None)
    jobs.wait()
    jobs.process(editor)
    assert jobs.pending == 0
    jobs.shutdown()


def test_process_applies_finished_jobs_in_start_order():
    editor = make_editor()
    jobs = Jobs(futures.ThreadPoolExecutor(max_workers=2))
    release = threading.Event()
    applied = []

    def job(name, block=False):
        if block:
            release.wait()
        return lambda editor: applied.append(name)

    slow = jobs.callback(job, 'slow', block=True)
    first = jobs.callback(job, 'first')
    second = jobs.callback(job, 'second')
    futures.wait([first, second])

    jobs.process(editor)
    assert applied == ['first', 'second']
    assert jobs.pending == 1

    release.set()
    futures.wait([slow])
    jobs.process(editor)
    assert applied == ['first', 'second', 'slow']
    assert jobs.pending == 0
    jobs.shutdown()
