"""
interfaces/cli.py — typewriter REPL

Line-based REPL that drives a Delayed instance on every turn: the intro and
prompt are typed out with the configured cadence, each input line is typed
back with its grapheme count, and the loop waits for every batch to finish
before reading the next line.

Features:
  - Prompt and echo are written through the scheduler (stdout by default)
  - Status messages go to a rich Console on stderr
  - exit / quit / Ctrl+D closes the program
  - Ctrl+C during output sets the cancel event: the current batch stops at
    its next wait and the program exits

Usage:
    python -m typewriter
    python -m typewriter --instant
"""

from __future__ import annotations

import asyncio
import sys
import threading
from concurrent.futures import wait as wait_futures
from datetime import timedelta
from typing import Optional, TextIO

from rich.console import Console
from rich.panel import Panel

from typewriter.config.settings import Settings
from typewriter.delayed import Delayed, Writer, count_graphemes
from typewriter.observability.logger import get_logger

log = get_logger(__name__)

_INTRO = 'Type a line and it will be typed back to you, or type "exit" to close the program.\n'
_PROMPT = "-> "
_EXIT_WORDS = ("exit", "quit")


class TypewriterREPL:
    """
    Interactive loop around one reusable Delayed instance.

        repl = TypewriterREPL(settings)
        await repl.start()
    """

    def __init__(
        self,
        settings: Settings,
        *,
        stdin: Optional[TextIO] = None,
        writer: Optional[Writer] = None,
        console: Optional[Console] = None,
    ) -> None:
        self.settings = settings
        self.console = console or Console(stderr=True)
        self._stdin = stdin or sys.stdin
        self._delayed = Delayed.from_settings(settings, writer=writer)
        self._print_duration = settings.delayed.print_duration
        self.turns = 0

    # ── Startup ───────────────────────────────────────────────────────────────

    async def start(self) -> int:
        """Run the REPL until exit/EOF. Returns a process exit code."""
        self._print_banner()
        try:
            await self._repl_loop()
        except (KeyboardInterrupt, asyncio.CancelledError):
            self.console.print("\n[dim]Interrupted.[/]")
        except OSError as e:
            log.error("cli.output_failed", error=str(e), error_type=type(e).__name__)
            self.console.print(f"[red]❌ Output error: {e}[/]")
            return 1
        log.info("cli.stopped", turns=self.turns)
        return 0

    def _print_banner(self) -> None:
        mode = "instant" if self.settings.delayed.ignore_delays else (
            f"{self._print_duration.total_seconds():g}s per line"
        )
        self.console.print(
            Panel(
                f"[bold]typewriter[/]  ·  Output: [cyan]{mode}[/]\n"
                f"[bold]exit[/] or Ctrl+D to quit, Ctrl+C to interrupt output.",
                border_style="cyan",
                padding=(0, 2),
            )
        )

    # ── REPL Loop ─────────────────────────────────────────────────────────────

    async def _repl_loop(self) -> None:
        loop = asyncio.get_running_loop()

        while True:
            await self._play(
                self._delayed.write(_INTRO, self._print_duration).write(_PROMPT, timedelta(0))
            )

            line = await loop.run_in_executor(None, self._stdin.readline)
            if not line:
                self.console.print("\n[dim]Goodbye.[/]")
                return

            line = line.strip()
            if not line:
                continue
            if line.lower() in _EXIT_WORDS:
                self.console.print("[dim]Goodbye.[/]")
                return

            self.turns += 1
            log.info("cli.turn", turn=self.turns, graphemes=count_graphemes(line))
            await self._play(self._echo(line))

    def _echo(self, line: str) -> Delayed:
        return (
            self._delayed.write("Typed: %s\n", line, self._print_duration)
            .wait()
            .write("Graphemes: %d\n\n", count_graphemes(line))
            .wait()
        )

    async def _play(self, delayed: Delayed) -> None:
        """Execute the queued batch and wait for it; Ctrl+C cancels it."""
        cancel = threading.Event()
        future = delayed.do(cancel)
        try:
            await asyncio.wrap_future(future)
        except (KeyboardInterrupt, asyncio.CancelledError):
            cancel.set()
            # The worker stops at its next wait boundary.
            wait_futures([future])
            raise
