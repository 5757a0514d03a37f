
import collections.abc
import time


class ImmutableListView(collections.abc.Sequence):
    def __init__(self, list_):
        self._list = list_

    def __len__(self):
        return len(self._list)

    def __getitem__(self, i):
        return self._list[i]

    def __repr__(self):
        return 'ImmutableListView({!r})'.format(self._list)


def singleton(cls):
    return cls()


def clamp(lo, hi, val):
    if val < lo:
        return lo
    elif val >= hi:
        return hi - 1
    else:
        return val


def time_limited(iterable, *, s=0, ms=0):
    '''
    Return an iterator over the given iterable that stops
    after the given time limit.
    '''
    end = time.time() + s + ms/1000.0
    for element in iterable:
        yield element
        if time.time() >= end:
            break


def plural(n, suffix='s'):
    return '' if n == 1 else suffix
