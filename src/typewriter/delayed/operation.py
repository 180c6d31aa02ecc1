"""
delayed/operation.py — queued units of work

Every entry in a Delayed queue is an Operation with the same contract:

    op.run(cancel)   # returns None on success, raises on failure

WriteOperation  emits its text through the captured writer (one write call).
WaitOperation   blocks the worker thread for its duration, or raises
                OperationCanceledError as soon as the cancel event is set.

Operations are frozen dataclasses: once enqueued they never change.
"""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional, Protocol, runtime_checkable

from typewriter.exceptions import OperationCanceledError


@runtime_checkable
class Writer(Protocol):
    """Anything that accepts string writes (sys.stdout, io.StringIO, files)."""

    def write(self, text: str, /) -> object: ...


class Operation(ABC):
    """A unit of work executed by Delayed.do()."""

    @abstractmethod
    def run(self, cancel: Optional[threading.Event] = None) -> None:
        """Execute the operation. Raise to stop the batch."""


@dataclass(frozen=True)
class WriteOperation(Operation):
    text: str
    writer: Writer = field(repr=False, compare=False)

    def run(self, cancel: Optional[threading.Event] = None) -> None:
        # A write is atomic with respect to cancellation.
        self.writer.write(self.text)
        flush = getattr(self.writer, "flush", None)
        if callable(flush):
            flush()


@dataclass(frozen=True)
class WaitOperation(Operation):
    duration: timedelta

    def run(self, cancel: Optional[threading.Event] = None) -> None:
        seconds = max(self.duration.total_seconds(), 0.0)
        if cancel is None:
            if seconds:
                time.sleep(seconds)
            return
        if cancel.wait(seconds):
            raise OperationCanceledError()
