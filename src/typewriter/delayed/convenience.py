"""One-shot helpers that build a Delayed with a single operation queued."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from datetime import timedelta
from typing import Any, Optional

from typewriter.delayed.delayed import Delayed, _check_duration, _executor
from typewriter.delayed.operation import WaitOperation
from typewriter.exceptions import OperationCanceledError


def write(format: str, *args: Any) -> Delayed:
    """Create a Delayed with a write operation queued. See Delayed.write."""
    return Delayed().write(format, *args)


def wait(duration: timedelta) -> Delayed:
    """Create a Delayed with a wait operation queued. See Delayed.wait."""
    return Delayed().wait(duration)


def do_write(format: str, *args: Any) -> Future[None]:
    """Write through a fresh Delayed and start executing it."""
    return write(format, *args).do()


def do_wait(duration: timedelta, cancel: Optional[threading.Event] = None) -> Future[None]:
    """
    Run a single wait without building a queue.

    The future resolves with None when the duration elapses or `cancel` is set.
    """
    op = WaitOperation(duration=_check_duration("duration", duration))
    return _executor.submit(_run_wait, op, cancel)


def _run_wait(op: WaitOperation, cancel: Optional[threading.Event]) -> None:
    try:
        op.run(cancel)
    except OperationCanceledError:
        return
