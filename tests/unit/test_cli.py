"""
tests/unit/test_cli.py — REPL + entry point Unit Tests

Covers:
  - TypewriterREPL: intro/prompt typed every turn, input echoed with its
    grapheme count, blank lines skipped, exit/quit/EOF stop the loop,
    sink failure returns exit code 1, task cancellation stops output at the
    next wait boundary
  - main(): one-shot text mode, --instant / --print-seconds overrides,
    config validation failures exit with code 1

Run with:
    pytest tests/unit/test_cli.py -v
"""

from __future__ import annotations

import asyncio
import io
from datetime import timedelta
from unittest.mock import patch

import pytest
from rich.console import Console

from typewriter.config.settings import Settings
from typewriter.interfaces.cli import TypewriterREPL, _INTRO, _PROMPT


# ── Helpers ───────────────────────────────────────────────────────────────────

def make_settings(**delayed) -> Settings:
    delayed.setdefault("ignore_delays", True)
    return Settings(delayed=delayed)


def make_repl(lines: str, settings: Settings | None = None, writer=None):
    out = writer if writer is not None else io.StringIO()
    console_file = io.StringIO()
    repl = TypewriterREPL(
        settings or make_settings(),
        stdin=io.StringIO(lines),
        writer=out,
        console=Console(file=console_file, force_terminal=False),
    )
    return repl, out, console_file


class _FailingWriter:
    def write(self, text):
        raise OSError("terminal went away")


# ─────────────────────────────────────────────────────────────────────────────
# TypewriterREPL
# ─────────────────────────────────────────────────────────────────────────────

class TestTypewriterREPL:

    @pytest.mark.asyncio
    async def test_echoes_input_then_exits(self):
        repl, out, console = make_repl("hello\nexit\n")
        assert await repl.start() == 0
        turn = _INTRO + _PROMPT
        assert out.getvalue() == (
            turn + "Typed: hello\n" + "Graphemes: 5\n\n" + turn
        )
        assert repl.turns == 1
        assert "Goodbye" in console.getvalue()

    @pytest.mark.asyncio
    async def test_grapheme_count_in_echo(self):
        repl, out, _ = make_repl("née\nquit\n")
        await repl.start()
        assert "Graphemes: 3\n" in out.getvalue()

    @pytest.mark.asyncio
    async def test_eof_ends_cleanly(self):
        repl, out, console = make_repl("")
        assert await repl.start() == 0
        assert out.getvalue() == _INTRO + _PROMPT
        assert repl.turns == 0
        assert "Goodbye" in console.getvalue()

    @pytest.mark.asyncio
    async def test_blank_lines_are_skipped(self):
        repl, out, _ = make_repl("\n   \nEXIT\n")
        await repl.start()
        assert repl.turns == 0
        assert out.getvalue().count(_PROMPT) == 3

    @pytest.mark.asyncio
    async def test_sink_failure_returns_error_code(self, captured_logs):
        repl, _, console = make_repl("hello\n", writer=_FailingWriter())
        assert await repl.start() == 1
        assert "terminal went away" in console.getvalue()
        assert any(e["event"] == "cli.output_failed" for e in captured_logs)

    @pytest.mark.asyncio
    async def test_typed_output_with_delays(self):
        settings = make_settings(
            ignore_delays=False,
            print_duration=timedelta(milliseconds=20),
            wait_duration=timedelta(milliseconds=5),
        )
        repl, out, _ = make_repl("ok\nexit\n", settings=settings)
        assert await repl.start() == 0
        assert "Typed: ok\nGraphemes: 2\n\n" in out.getvalue()

    @pytest.mark.asyncio
    async def test_cancelled_play_stops_at_next_wait(self):
        repl, out, _ = make_repl("", settings=make_settings(ignore_delays=False))
        batch = repl._delayed.write("a").wait(timedelta(seconds=5)).write("b")

        task = asyncio.create_task(repl._play(batch))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert out.getvalue() == "a"
        assert [op.text for op in repl._delayed.pending()] == ["b"]

    def test_banner_shows_mode(self):
        repl, _, console = make_repl("")
        repl._print_banner()
        assert "instant" in console.getvalue()


# ─────────────────────────────────────────────────────────────────────────────
# main()
# ─────────────────────────────────────────────────────────────────────────────

class TestMain:

    @pytest.mark.asyncio
    async def test_oneshot_text(self, tmp_path, capsys):
        from typewriter.main import main

        with patch("typewriter.observability.logger.setup_logging") as setup:
            code = await main(["--instant", "--config", str(tmp_path / "none.yaml"), "hello", "world"])

        assert code == 0
        assert capsys.readouterr().out == "hello world\n"
        setup.assert_called_once()

    @pytest.mark.asyncio
    async def test_log_level_flag_overrides_config(self, tmp_path, capsys):
        from typewriter.main import main

        with patch("typewriter.observability.logger.setup_logging") as setup:
            await main(["--log-level", "DEBUG", "--config", str(tmp_path / "none.yaml"), "x"])

        assert setup.call_args.kwargs["level"] == "DEBUG"

    def test_bootstrap_applies_overrides(self, tmp_path):
        from typewriter.main import bootstrap, parse_args

        args = parse_args([
            "--instant", "--print-seconds", "2", "--wait-seconds", "0.5",
            "--config", str(tmp_path / "none.yaml"),
        ])
        with patch("typewriter.observability.logger.setup_logging"):
            settings, _ = bootstrap(args)

        assert settings.delayed.ignore_delays is True
        assert settings.delayed.print_duration == timedelta(seconds=2)
        assert settings.delayed.wait_duration == timedelta(milliseconds=500)

    def test_invalid_config_exits_1(self, tmp_path, capsys):
        from typewriter.main import bootstrap, parse_args

        bad = tmp_path / "bad.yaml"
        bad.write_text("delayed:\n  print_duration: -1\n", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            bootstrap(parse_args(["--config", str(bad)]))

        assert exc_info.value.code == 1
        assert "Config validation failed" in capsys.readouterr().err

    def test_malformed_yaml_exits_1(self, tmp_path, capsys):
        from typewriter.main import bootstrap, parse_args

        bad = tmp_path / "bad.yaml"
        bad.write_text("delayed: [unclosed\n", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            bootstrap(parse_args(["--config", str(bad)]))

        assert exc_info.value.code == 1
        assert "Failed to load config" in capsys.readouterr().err

    def test_cross_field_problem_exits_1(self, tmp_path, capsys):
        from typewriter.main import bootstrap, parse_args

        args = parse_args(["--print-seconds", "600", "--config", str(tmp_path / "none.yaml")])
        with pytest.raises(SystemExit) as exc_info:
            bootstrap(args)

        assert exc_info.value.code == 1
        assert "configuration problem(s)" in capsys.readouterr().err

    def test_negative_seconds_rejected_by_parser(self):
        from typewriter.main import parse_args

        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--wait-seconds", "-1"])
        assert exc_info.value.code == 2
