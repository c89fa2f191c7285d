"""Tests for debounce.py — only the last trigger in a burst runs."""
import threading
import time

import pytest

from csv_filter_viewer.debounce import Debouncer


def test_burst_collapses_to_last_call():
    calls = []
    done = threading.Event()

    def record(value):
        calls.append(value)
        done.set()

    debouncer = Debouncer(record, delay=0.05)
    for value in ("f", "fo", "foo"):
        debouncer.trigger(value)
    assert debouncer.pending
    assert done.wait(2)
    assert calls == ["foo"]
    deadline = time.monotonic() + 2
    while debouncer.pending and time.monotonic() < deadline:
        time.sleep(0.01)
    assert not debouncer.pending


def test_pending_until_callback_returns():
    """Callers polling ``pending`` never see a half-finished run as done."""
    entered = threading.Event()
    release = threading.Event()

    def block():
        entered.set()
        release.wait(2)

    debouncer = Debouncer(block, delay=0)
    debouncer.trigger()
    assert entered.wait(2)
    assert debouncer.pending
    release.set()


def test_cancel_drops_pending_run():
    calls = []
    debouncer = Debouncer(calls.append, delay=0.05)
    debouncer.trigger("x")
    debouncer.cancel()
    assert not debouncer.pending
    threading.Event().wait(0.15)
    assert calls == []


def test_flush_runs_immediately():
    calls = []
    debouncer = Debouncer(lambda v: calls.append(v) or len(calls), delay=10)
    debouncer.trigger("now")
    assert debouncer.flush() == 1
    assert calls == ["now"]
    assert not debouncer.pending


def test_flush_without_pending():
    debouncer = Debouncer(lambda: pytest.fail("should not run"), delay=0.01)
    assert debouncer.flush() is None


def test_negative_delay_rejected():
    with pytest.raises(ValueError):
        Debouncer(lambda: None, delay=-1)
