"""
tests/unit/test_convenience.py — one-shot helpers

Covers write(), wait(), do_write() and do_wait(): each builds a fresh Delayed
with default properties (stdout, no delays) or runs a single wait.
"""

from __future__ import annotations

import sys
import threading
import time
from datetime import timedelta

import pytest

from typewriter.delayed import Delayed, WaitOperation, WriteOperation, do_wait, do_write, wait, write


class TestBuilders:

    def test_write_returns_delayed_with_one_write(self):
        d = write("x = %d", 42)
        assert isinstance(d, Delayed)
        assert d.pending() == (WriteOperation("x = 42", None),)

    def test_write_uses_stdout(self, capsys):
        d = write("to stdout")
        assert d.writer is sys.stdout
        d.do().result(timeout=5)
        assert capsys.readouterr().out == "to stdout"

    def test_write_with_trailing_duration_spreads_graphemes(self):
        d = write("ab", timedelta(milliseconds=10))
        assert len(d.pending()) == 3

    def test_wait_returns_delayed_with_one_wait(self):
        d = wait(timedelta(milliseconds=5))
        assert d.pending() == (WaitOperation(timedelta(milliseconds=5)),)

    def test_wait_zero_enqueues_nothing(self):
        assert wait(timedelta(0)).pending() == ()


class TestRunners:

    def test_do_write(self, capsys):
        assert do_write("%s-%s", "a", "b").result(timeout=5) is None
        assert capsys.readouterr().out == "a-b"

    def test_do_wait_elapses(self):
        start = time.monotonic()
        assert do_wait(timedelta(milliseconds=30)).result(timeout=5) is None
        assert time.monotonic() - start >= 0.025

    def test_do_wait_cancel_resolves_cleanly(self):
        cancel = threading.Event()
        cancel.set()
        start = time.monotonic()
        assert do_wait(timedelta(seconds=5), cancel).result(timeout=2) is None
        assert time.monotonic() - start < 1.0

    def test_do_wait_rejects_negative_duration(self):
        with pytest.raises(ValueError):
            do_wait(timedelta(seconds=-1))
