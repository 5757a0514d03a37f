
import pytest

from excmd.util import clamp, plural, time_limited, ImmutableListView
from excmd.util.debug import nonreentrant


@nonreentrant
def _reentrant(limit=5):
    if limit <= 0:
        return

    _reentrant(limit-1)


@nonreentrant
def _nonreentrant1():
    _nonreentrant2()
@nonreentrant
def _nonreentrant2():
    pass

def test_reentrant_fails():
    with pytest.raises(AssertionError):
        _reentrant()

def test_nonreentrant_ok():
    _nonreentrant1()

def test_reentry_allowed_after_failure():
    with pytest.raises(AssertionError):
        _reentrant()
    _reentrant(0)


def test_small_helpers():
    assert clamp(0, 3, 5) == 2
    assert clamp(0, 3, -1) == 0
    assert plural(1) == ''
    assert plural(2) == 's'


def test_time_limited_yields_at_least_one():
    assert list(time_limited(iter([1, 2, 3]), ms=0)) == [1]
    assert list(time_limited(iter([1, 2, 3]), s=60)) == [1, 2, 3]


def test_immutable_list_view():
    backing = [1, 2]
    view = ImmutableListView(backing)
    backing.append(3)
    assert list(view) == [1, 2, 3]
    with pytest.raises(TypeError):
        view[0] = 5
