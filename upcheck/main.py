"""Entry point for upcheck — `upcheck` console script."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import NoReturn

from rich.console import Console
from rich.table import Table

from upcheck.config import settings
from upcheck.health.engine import HTTPChecker
from upcheck.health.history import HistoryLoadError, HistoryStore
from upcheck.health.runner import RunReport, StatusWriteError, UptimeRunner
from upcheck.targets.registry import ConfigError, MonitorConfig, load_config

EXIT_USAGE = 1
EXIT_FATAL = 2

console = Console()
err_console = Console(stderr=True)


def _fail(message: str) -> NoReturn:
    err_console.print(message, style="bold red", markup=False, soft_wrap=True)
    sys.exit(EXIT_FATAL)


def _load_config_or_exit(path: str) -> MonitorConfig:
    try:
        return load_config(path)
    except ConfigError as e:
        _fail(f"failed to load {path}: {e}")


def run_once(args: argparse.Namespace) -> None:
    """Check every due target, then write status and history."""
    config = _load_config_or_exit(args.config)

    store = HistoryStore(args.history, args.fallback_history)
    checker = HTTPChecker(
        default_timeout=settings.default_timeout_seconds,
        retry_delay=settings.retry_delay_seconds,
    )
    runner = UptimeRunner(config, store, status_path=args.status, checker=checker)

    try:
        report = runner.run()
    except HistoryLoadError as e:
        _fail(f"failed to load history: {e}")
    except StatusWriteError as e:
        _fail(str(e))

    if report.history_path is None:
        err_console.print(
            f"warning: history could not be saved to {args.history} or {args.fallback_history}",
            style="yellow",
            markup=False,
            soft_wrap=True,
        )

    if not args.quiet:
        _print_report(report)


def _print_report(report: RunReport) -> None:
    table = Table(title=f"Status @ {report.snapshot.generated_at}")
    table.add_column("Target", style="bold")
    table.add_column("State")
    table.add_column("HTTP", justify="right")
    table.add_column("Latency", justify="right")
    table.add_column("Note", style="dim")

    for r in report.snapshot.results:
        state = "[green]up[/green]" if r.up else "[red]down[/red]"
        fresh = r.name in report.checked
        table.add_row(
            r.name,
            state,
            str(r.status) if r.status else "-",
            f"{r.latency_ms}ms" if fresh else "-",
            (r.error or "") if fresh else "not due",
        )

    console.print(table)
    if report.history_path is not None:
        console.print(f"[dim]History: {report.history_path}[/dim]")


def validate(args: argparse.Namespace) -> None:
    """Load the monitors file and show each target's effective policy."""
    config = _load_config_or_exit(args.config)

    table = Table(title=f"{args.config}: {len(config.targets)} targets")
    table.add_column("Target", style="bold")
    table.add_column("Method")
    table.add_column("URL")
    table.add_column("Expect", justify="right")
    table.add_column("Interval", justify="right")
    table.add_column("Timeout", justify="right")
    table.add_column("Attempts", justify="right")

    checker = HTTPChecker(default_timeout=settings.default_timeout_seconds)
    for t in config.targets:
        table.add_row(
            t.name,
            t.method,
            t.url,
            str(t.expect_status) if t.expect_status else "any",
            f"{config.interval_for(t)}s",
            f"{checker.timeout_for(t):g}s",
            str(checker.attempts_for(t)),
        )
    console.print(table)


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    parser = argparse.ArgumentParser(description="Scheduled HTTP uptime checker")
    sub = parser.add_subparsers(dest="command")

    run_parser = sub.add_parser("run", help="Check due targets and write status + history")
    run_parser.add_argument("--config", default=settings.monitors_file, help="Monitors YAML file")
    run_parser.add_argument("--history", default=str(settings.history_file), help="History JSON file")
    run_parser.add_argument(
        "--fallback-history",
        default=settings.fallback_history_file,
        help="Where to write history if --history is not writable",
    )
    run_parser.add_argument("--status", default=settings.status_file, help="Status JSON file")
    run_parser.add_argument("-q", "--quiet", action="store_true", help="Do not print the summary table")

    validate_parser = sub.add_parser("validate", help="Validate the monitors file")
    validate_parser.add_argument("--config", default=settings.monitors_file, help="Monitors YAML file")

    args = parser.parse_args(argv)

    if args.command == "run":
        run_once(args)
    elif args.command == "validate":
        validate(args)
    else:
        parser.print_help()
        sys.exit(EXIT_USAGE)


if __name__ == "__main__":
    main()
