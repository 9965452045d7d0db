from datetime import timedelta

import pytest

from procparse.errors import InternalError
from procparse.uptime import Uptime


def test_uptime():
    uptime = Uptime.from_text(b"2578790.61 1999230.98\n")
    assert uptime.uptime_duration() == timedelta(seconds=2578790, milliseconds=610)
    assert uptime.idle_duration() == timedelta(seconds=1999230, milliseconds=980)


def test_from_str_text():
    uptime = Uptime.from_text("2578790.61 1999230.98\n")
    assert uptime.uptime == 2578790.61
    assert uptime.idle == 1999230.98


def test_whole_seconds():
    uptime = Uptime.from_text("10 20")
    assert uptime.uptime_duration() == timedelta(seconds=10)
    assert uptime.idle_duration() == timedelta(seconds=20)


def test_missing_idle_raises():
    with pytest.raises(InternalError):
        Uptime.from_text("2578790.61\n")


def test_garbage_raises():
    with pytest.raises(InternalError):
        Uptime.from_text("abc 1.0")


def test_empty_raises():
    with pytest.raises(InternalError):
        Uptime.from_text("")