"""
main.py — typewriter Entry Point

Usage:
    python -m typewriter                              # REPL, default settings
    python -m typewriter "hello, world"               # type one line and exit
    python -m typewriter --instant                    # no typewriter effect
    python -m typewriter --print-seconds 2 --wait-seconds 0.5
    python -m typewriter --log-level DEBUG
    python -m typewriter --config path/to/config.yaml
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import timedelta
from typing import Optional, Sequence


def _seconds(value: str) -> timedelta:
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number of seconds: {value!r}") from None
    if seconds < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {value}")
    return timedelta(seconds=seconds)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="typewriter",
        description="typewriter: print text with a typewriter-like effect",
    )
    parser.add_argument(
        "text",
        nargs="*",
        help="Text to type out once. Omit to start the interactive REPL.",
    )
    parser.add_argument(
        "--instant",
        action="store_true",
        default=False,
        help="Show output instantly, without a typewriter-like effect",
    )
    parser.add_argument(
        "--print-seconds",
        type=_seconds,
        default=None,
        help="Time it takes to type one line (overrides delayed.print_duration)",
    )
    parser.add_argument(
        "--wait-seconds",
        type=_seconds,
        default=None,
        help="Pause between lines (overrides delayed.wait_duration)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: $TYPEWRITER_CONFIG or config/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override log level from config",
    )
    return parser.parse_args(argv)


def bootstrap(args: argparse.Namespace):
    """
    Load config, apply CLI overrides, validate it fully, and set up logging.
    Returns (settings, log) ready for use.

    Exits with code 1 (after printing a clear message) if:
      - config.yaml has invalid values (Pydantic ValidationError)
      - cross-field problems are found (ConfigError from validate_all())
    """
    import yaml
    from pydantic import ValidationError

    from typewriter.config.settings import load_settings
    from typewriter.exceptions import ConfigError
    from typewriter.observability.logger import get_logger, setup_logging

    # -- Load and parse -------------------------------------------------------
    try:
        settings = load_settings(args.config)
    except ValidationError as exc:
        problems = "\n".join(
            f"  • {'.'.join(str(p) for p in e['loc']) or '?'}: {e['msg']}"
            for e in exc.errors()
        )
        print(
            f"\n❌  Config validation failed:\n\n{problems}\n\n"
            f"    Fix config/config.yaml or your environment and restart.\n",
            file=sys.stderr,
        )
        sys.exit(1)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(
            f"\n❌  Failed to load config: {type(exc).__name__}: {exc}\n",
            file=sys.stderr,
        )
        sys.exit(1)

    # -- CLI overrides --------------------------------------------------------
    overrides: dict = {}
    if args.instant:
        overrides["ignore_delays"] = True
    if args.print_seconds is not None:
        overrides["print_duration"] = args.print_seconds
    if args.wait_seconds is not None:
        overrides["wait_duration"] = args.wait_seconds
    if overrides:
        settings = settings.model_copy(
            update={"delayed": settings.delayed.model_copy(update=overrides)}
        )

    # -- Cross-field validation -----------------------------------------------
    try:
        settings.validate_all()
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(1)

    # -- Logging --------------------------------------------------------------
    log_level = args.log_level or settings.log_level

    setup_logging(
        level=log_level,
        log_dir=settings.log_dir,
        json_format=settings.log_json_format,
        console_output=settings.log_console_output,
        max_bytes=settings.logging.max_file_size_mb * 1024 * 1024,
        backup_count=settings.logging.backup_count,
    )

    log = get_logger("typewriter.main")
    return settings, log


async def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    settings, log = bootstrap(args)

    log.info(
        "typewriter.starting",
        mode="oneshot" if args.text else "repl",
        ignore_delays=settings.delayed.ignore_delays,
        print_seconds=settings.delayed.print_duration.total_seconds(),
        wait_seconds=settings.delayed.wait_duration.total_seconds(),
    )

    if args.text:
        from typewriter.delayed import Delayed

        delayed = Delayed.from_settings(settings).write("%s\n", " ".join(args.text))
        try:
            await delayed.do_async()
        except OSError as e:
            log.error("typewriter.output_failed", error=str(e), error_type=type(e).__name__)
            print(f"\n❌  Output error: {e}\n", file=sys.stderr)
            return 1
        return 0

    from typewriter.interfaces.cli import TypewriterREPL

    return await TypewriterREPL(settings).start()


def run() -> None:
    """Console-script entry point."""
    sys.exit(asyncio.run(main()))
