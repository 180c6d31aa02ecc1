"""
delayed/delayed.py — Delayed (typewriter scheduler)

Prints text with a 'typewriter' effect: graphemes are written one after the
other with a pause between them. Output is built up as a queue of Write and
Wait operations through a fluent API, then drained as one batch on a worker
thread so the caller is not blocked.

Design
------
* One threading.Lock guards both the Properties and the operation queue.
  A running drain holds it for the whole batch, so configuration calls made
  while output is in progress block until the batch finishes.
* do() returns a concurrent.futures.Future immediately. It resolves exactly
  once: None on a full drain or a cancel, the sink's own exception on a
  failed write.
* Cancellation is cooperative: setting the cancel event interrupts the
  pending Wait. A Write that has started always completes.
* After a full drain the queue is empty and the instance can be reused.
  After a failure or cancel only the operations that never ran stay queued.

Usage::

    d = Delayed(Properties(print_duration=timedelta(seconds=1)))
    d.write("hello ").wait(timedelta(milliseconds=500)).write("world!\\n").do().result()

Overlapping do() calls on one instance are serialised by the lock but their
visible output may interleave; wait for each future before issuing the next
call if ordering matters.
"""

from __future__ import annotations

import asyncio
import atexit
import sys
import threading
from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Any, Optional

from typewriter.delayed.graphemes import Graphemes
from typewriter.delayed.operation import Operation, WaitOperation, Writer, WriteOperation
from typewriter.exceptions import InvalidDurationError, OperationCanceledError
from typewriter.observability.logger import get_logger

log = get_logger(__name__)

_ZERO = timedelta(0)

# One task per do() or do_wait() call. Drains spend their time asleep in
# Wait operations, so the cap is set by how many runs may overlap, not by
# CPU count. Beyond _MAX_CONCURRENT_RUNS a new run waits for a free worker.
# Drains of the same instance still queue up on its lock.
_MAX_CONCURRENT_RUNS = 32
_executor = ThreadPoolExecutor(max_workers=_MAX_CONCURRENT_RUNS, thread_name_prefix="delayed")
atexit.register(_executor.shutdown, wait=False)


def _check_duration(name: str, value: Any) -> timedelta:
    if not isinstance(value, timedelta):
        raise TypeError(f"{name} must be a timedelta, got {type(value).__name__}")
    if value < _ZERO:
        raise InvalidDurationError(name, value)
    return value


# ─────────────────────────────────────────────────────────────────────────────
# Properties
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Properties:
    """
    Behaviour of a Delayed instance.

    writer          Target of Write operations. None = sys.stdout at the time
                    the Delayed instance is created.
    wait_duration   Default pause used by wait() with no argument.
    print_duration  Total time one write() takes to type its text.
    ignore_delays   If True, waits are dropped and writes are instant.
    """
    writer: Optional[Writer] = None
    wait_duration: timedelta = _ZERO
    print_duration: timedelta = _ZERO
    ignore_delays: bool = False

    def __post_init__(self) -> None:
        _check_duration("wait_duration", self.wait_duration)
        _check_duration("print_duration", self.print_duration)


DEFAULT_PROPERTIES = Properties()


# ─────────────────────────────────────────────────────────────────────────────
# Delayed
# ─────────────────────────────────────────────────────────────────────────────

class Delayed:
    """
    Fluent builder and executor for typewriter output.

    Enqueue::

        d.write("Ego: %s\\n", name, timedelta(seconds=1))   # trailing timedelta = print duration
        d.wait()                                           # default wait duration
        d.wait(timedelta(milliseconds=250))                # new default, then wait

    Execute::

        future = d.do(cancel_event)   # non-blocking
        future.result()               # None, or re-raises the sink error
    """

    def __init__(self, properties: Optional[Properties] = None) -> None:
        props = properties if properties is not None else DEFAULT_PROPERTIES
        if props.writer is None:
            props = replace(props, writer=sys.stdout)

        self._properties = props
        self._operations: list[Operation] = []
        self._lock = threading.Lock()

    # ── Factory ───────────────────────────────────────────────────────────────

    @classmethod
    def from_settings(cls, settings, writer: Optional[Writer] = None) -> "Delayed":
        return cls(settings.to_properties(writer=writer))

    # ── Queue helpers (caller holds the lock) ─────────────────────────────────

    def _push_wait(self, duration: timedelta) -> None:
        if not self._properties.ignore_delays and duration != _ZERO:
            self._operations.append(WaitOperation(duration=duration))

    def _push_write(self, text: str) -> None:
        self._operations.append(WriteOperation(text=text, writer=self._properties.writer))

    # ── Enqueue API ───────────────────────────────────────────────────────────

    def wait(self, duration: Optional[timedelta] = None) -> "Delayed":
        """
        Append a wait operation.

        An explicit duration becomes the new default wait duration. Nothing is
        queued when the resulting duration is zero or delays are ignored.
        """
        if duration is not None:
            _check_duration("wait_duration", duration)

        with self._lock:
            if duration is not None:
                self._properties = replace(self._properties, wait_duration=duration)
            self._push_wait(self._properties.wait_duration)

        return self

    def write(self, format: str, *args: Any) -> "Delayed":
        """
        Append a print operation.

        The text is written grapheme by grapheme; print_duration is the time
        the whole write takes and each gap is print_duration // grapheme_count
        (the remainder is dropped). There is no gap before the first grapheme.

        `format` is %-formatted with the remaining arguments (a single mapping
        argument is used for named placeholders). If the last argument is a
        timedelta it is taken as the new print duration instead.
        """
        print_duration: Optional[timedelta] = None
        if args and isinstance(args[-1], timedelta):
            print_duration = _check_duration("print_duration", args[-1])
            args = args[:-1]

        if not args:
            text = format
        elif len(args) == 1 and isinstance(args[0], Mapping):
            text = format % args[0]
        else:
            text = format % args

        with self._lock:
            if print_duration is not None:
                self._properties = replace(self._properties, print_duration=print_duration)
            duration = self._properties.print_duration

            if duration == _ZERO or self._properties.ignore_delays:
                self._push_write(text)
                return self

            graphemes = Graphemes(text)
            count = len(graphemes)
            if count == 0:
                self._push_write(text)
                return self

            gap = duration // count
            first = True
            for grapheme in graphemes:
                if first:
                    first = False
                else:
                    self._push_wait(gap)
                self._push_write(grapheme)

        return self

    def clear(self) -> "Delayed":
        """Drop every queued operation without running it."""
        with self._lock:
            self._operations.clear()
        return self

    def pending(self) -> tuple[Operation, ...]:
        """Snapshot of the queued operations, in execution order."""
        with self._lock:
            return tuple(self._operations)

    # ── Execution ─────────────────────────────────────────────────────────────

    def do(self, cancel: Optional[threading.Event] = None) -> Future[None]:
        """
        Execute all queued operations on a worker thread.

        Returns a Future that resolves once: None when every operation ran or
        the run was canceled, otherwise it carries the exception raised by the
        writer. Set `cancel` to stop at the next wait.
        """
        return _executor.submit(self._drain, cancel)

    async def do_async(self, cancel: Optional[threading.Event] = None) -> None:
        """Await do() from asyncio code."""
        await asyncio.wrap_future(self.do(cancel))

    def _drain(self, cancel: Optional[threading.Event]) -> None:
        with self._lock:
            total = len(self._operations)
            log.debug("delayed.run.start", operations=total)

            for index, op in enumerate(self._operations):
                try:
                    op.run(cancel)
                except OperationCanceledError:
                    del self._operations[: index + 1]
                    log.debug(
                        "delayed.run.canceled",
                        completed=index,
                        remaining=len(self._operations),
                    )
                    return
                except Exception as exc:
                    del self._operations[: index + 1]
                    log.warning(
                        "delayed.run.failed",
                        completed=index,
                        remaining=len(self._operations),
                        error=str(exc),
                        error_type=type(exc).__name__,
                    )
                    raise

            self._operations.clear()
            log.debug("delayed.run.complete", operations=total)

    # ── Accessors ─────────────────────────────────────────────────────────────

    @property
    def ignore_delays(self) -> bool:
        with self._lock:
            return self._properties.ignore_delays

    def set_ignore_delays(self, value: bool) -> bool:
        """Set Properties.ignore_delays and return the previous value."""
        with self._lock:
            previous = self._properties.ignore_delays
            self._properties = replace(self._properties, ignore_delays=bool(value))
            return previous

    @property
    def writer(self) -> Writer:
        with self._lock:
            return self._properties.writer

    def set_writer(self, writer: Optional[Writer]) -> Writer:
        """Set Properties.writer and return the previous one. None is ignored."""
        with self._lock:
            previous = self._properties.writer
            if writer is not None:
                self._properties = replace(self._properties, writer=writer)
            return previous

    @property
    def wait_duration(self) -> timedelta:
        with self._lock:
            return self._properties.wait_duration

    def set_wait_duration(self, duration: timedelta) -> timedelta:
        """Set Properties.wait_duration and return the previous value."""
        _check_duration("wait_duration", duration)
        with self._lock:
            previous = self._properties.wait_duration
            self._properties = replace(self._properties, wait_duration=duration)
            return previous

    @property
    def print_duration(self) -> timedelta:
        with self._lock:
            return self._properties.print_duration

    def set_print_duration(self, duration: timedelta) -> timedelta:
        """Set Properties.print_duration and return the previous value."""
        _check_duration("print_duration", duration)
        with self._lock:
            previous = self._properties.print_duration
            self._properties = replace(self._properties, print_duration=duration)
            return previous
