
import functools
import threading


def nonreentrant(func):
    '''
    Raise AssertionError when `func` is called while a call to it is already
    in progress on the same thread.
    '''
    in_call = threading.local()

    @functools.wraps(func)
    def replacement(*args, **kw):
        if getattr(in_call, 'value', False):
            raise AssertionError('Function {name} called reentrantly.'.format(name=func.__qualname__), func)

        in_call.value = True
        try:
            return func(*args, **kw)
        finally:
            in_call.value = False

    return replacement
