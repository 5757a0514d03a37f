
import logging
from concurrent import futures

from ..util.core import singleton
from . import errors


def set_future_result(future, func, *args, **kw):
    if not future.set_running_or_notify_cancel():
        return
    try:
        result = func(*args, **kw)
    except Exception as exc:
        logging.debug('job raised %r', exc)
        future.set_exception(exc)
    else:
        future.set_result(result)


@singleton
class SynchronousExecutor(futures.Executor):
    '''
    `Executor` that executes a function in the same thread and
    returns a future to its result after the function has completed.

    Use the `SynchronousExecutor` to wrap the result of a function that
    does not need to execute asynchronously, but whose contract
    requires it to return a `Future`.
    '''
    def submit(self, fn, *args, **kw):
        future = futures.Future()
        set_future_result(future, fn, *args, **kw)
        return future


class Jobs(object):
    '''
    Runs long operations off the command dispatch path.

    A job is a function that does the slow part of a command (running a
    shell, reading a file) and returns a callback. Once the job is done
    the callback is applied to the editor on the control thread by
    :meth:`process`, in the order the jobs were started. Ordering between
    callbacks and later keystrokes is not guaranteed.

    :param executor: The executor to run jobs on. Defaults to a thread pool.
    '''

    def __init__(self, executor=None):
        if executor is None:
            executor = futures.ThreadPoolExecutor(max_workers=4)
        self._executor = executor
        self._pending = []

    def callback(self, job, *args, **kw):
        '''
        Run ``job(*args, **kw)`` on the executor. The job must return a
        callable taking the editor, or None.
        '''
        future = self._executor.submit(job, *args, **kw)
        self._pending.append(future)
        return future

    @property
    def pending(self):
        return len(self._pending)

    def wait(self, timeout=None):
        futures.wait(list(self._pending), timeout=timeout)

    def shutdown(self, wait=True):
        self._executor.shutdown(wait=wait)

    def process(self, editor):
        '''
        Apply the callbacks of every finished job to `editor`. Errors raised
        by a job or its callback are reported as editor errors.
        '''
        finished = [f for f in self._pending if f.done()]
        self._pending = [f for f in self._pending if f not in finished]
        for future in finished:
            try:
                call = future.result()
                if call is not None:
                    call(editor)
            except errors.UserError as exc:
                editor.set_error(str(exc))
            except Exception as exc:
                logging.exception('job failed')
                editor.set_error(str(exc))
