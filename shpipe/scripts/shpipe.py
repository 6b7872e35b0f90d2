#!/usr/bin/env python3
"""
shpipe: command line front end

Commands:
  shpipe run "echo 1:2:3" "rev" "cut -d : -f 1"   # pipe stages, print stdout
  shpipe which ls                                  # resolve a command name
  shpipe bench ls -n 200                           # compare resolution strategies

Each stage is split into words with shlex; there is no shell grammar
(no globbing, redirection or variable expansion).
"""
from __future__ import annotations

import argparse
import logging
import shlex
import sys
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

import numpy as np

from shpipe.core.command import ShCmd
from shpipe.core.configuration import ConfigurationLoader, set_config
from shpipe.core.errors import CommandNotFound, ShellError
from shpipe.core.models import RunResult
from shpipe.core.pair import pipe
from shpipe.core.resolver import PathResolver, default_resolver
from shpipe.core.runnable import Runnable
from shpipe.utils.logging_config import setup_logging

log = logging.getLogger("shpipe")

# shell convention for "command not found"
EXIT_NOT_FOUND = 127


def _ensure_rich() -> None:
    """Assert that 'rich' is importable; do not attempt auto-install."""
    try:
        import rich  # noqa: F401
    except Exception as e:
        raise RuntimeError("'rich' is required for table output. Please install it in your environment.") from e


def _exit_status(rc: int) -> int:
    # subprocess reports signal deaths as -N; shells report 128+N
    return 128 - rc if rc < 0 else rc


def build_pipeline(stages: List[str], use_path_cache: bool = True) -> Runnable:
    """Turn stage strings into ShCmds joined left to right."""
    cmds: List[Runnable] = []
    for stage in stages:
        words = shlex.split(stage)
        if not words:
            raise ValueError("empty pipeline stage")
        cmds.append(ShCmd(words[0], words[1:], use_path_cache=use_path_cache))
    if len(cmds) == 1:
        return cmds[0]
    return pipe(*cmds)


def render_result(result: RunResult) -> str:
    """Render a run result as a rich table (plain text)."""
    _ensure_rich()
    from rich.console import Console
    from rich.table import Table
    from rich.text import Text

    table = Table(show_lines=True)
    table.add_column("field", style="bold")
    table.add_column("value")
    rc_style = "bold green" if result.exit_code == 0 else "bold red"
    table.add_row("exit_code", Text(str(result.exit_code), style=rc_style))
    table.add_row("stdout", Text(result.stdout) if result.stdout is not None else Text("(none)", style="dim"))
    table.add_row("stderr", Text(result.stderr) if result.stderr is not None else Text("(none)", style="dim"))
    console = Console(record=True, width=100)
    with console.capture() as capture:
        console.print(table)
    return capture.get()


def cmd_run(args: argparse.Namespace) -> int:
    pipeline = build_pipeline(args.stages, use_path_cache=not args.no_cache)
    result = pipeline.run()
    if args.table:
        print(render_result(result), end="")
        return _exit_status(result.exit_code)
    if result.stdout is not None:
        sys.stdout.write(result.stdout)
    if result.stderr is not None:
        sys.stderr.write(result.stderr)
    return _exit_status(result.exit_code)


def cmd_which(args: argparse.Namespace) -> int:
    print(default_resolver().resolve(args.command))
    return 0


def time_strategies(command: str, runs: int) -> Dict[str, np.ndarray]:
    """Time ``runs`` executions of ``command`` per resolution strategy (seconds)."""
    shared = PathResolver()
    strategies: Dict[str, Callable[[], ShCmd]] = {
        "which, every run": lambda: ShCmd(command, resolver=PathResolver()),
        "env dispatch": lambda: ShCmd(command, use_path_cache=False),
        "which, cached": lambda: ShCmd(command, resolver=shared),
    }
    timings: Dict[str, np.ndarray] = {}
    for label, make in strategies.items():
        samples = np.empty(runs, dtype=float)
        for i in range(runs):
            t0 = time.perf_counter()
            make().run()
            samples[i] = time.perf_counter() - t0
        timings[label] = samples
        log.info(f"bench {label}: {runs} runs in {samples.sum():.3f}s")
    return timings


def summarize(timings: Dict[str, np.ndarray]) -> List[Dict[str, float]]:
    rows = []
    for label, samples in timings.items():
        rows.append({
            "strategy": label,
            "total_s": float(samples.sum()),
            "mean_ms": float(np.mean(samples) * 1e3),
            "median_ms": float(np.median(samples) * 1e3),
            "p95_ms": float(np.percentile(samples, 95) * 1e3),
        })
    return rows


def cmd_bench(args: argparse.Namespace) -> int:
    if args.runs < 1:
        raise ValueError("--runs must be positive")
    rows = summarize(time_strategies(args.command, args.runs))
    _ensure_rich()
    from rich.console import Console
    from rich.table import Table

    table = Table(title=f"{args.runs} x {args.command}")
    table.add_column("strategy", style="bold")
    for col in ("total_s", "mean_ms", "median_ms", "p95_ms"):
        table.add_column(col, justify="right")
    for r in rows:
        table.add_row(r["strategy"], f"{r['total_s']:.3f}", f"{r['mean_ms']:.2f}", f"{r['median_ms']:.2f}", f"{r['p95_ms']:.2f}")
    Console().print(table)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="shpipe", description="Shell-style pipelines without a shell")
    parser.add_argument("--config", help="YAML file with tool locations (default: $SHPIPE_CONFIG)")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="WARNING")
    parser.add_argument("--log-file", help="Also log to this file")
    sub = parser.add_subparsers(dest="cmd")

    p_run = sub.add_parser("run", help="Run stages as a pipeline and print the last stage's output")
    p_run.add_argument("stages", nargs="+", help='One quoted string per stage, e.g. "cut -d : -f 1"')
    p_run.add_argument("--no-cache", action="store_true", help="Dispatch through env instead of cached which lookups")
    p_run.add_argument("--table", action="store_true", help="Render stdout/stderr/exit code as a table")
    p_run.set_defaults(func=cmd_run)

    p_which = sub.add_parser("which", help="Print the resolved path of a command")
    p_which.add_argument("command")
    p_which.set_defaults(func=cmd_which)

    p_bench = sub.add_parser("bench", help="Compare path resolution strategies")
    p_bench.add_argument("command")
    p_bench.add_argument("-n", "--runs", type=int, default=100, help="Executions per strategy (default: 100)")
    p_bench.set_defaults(func=cmd_bench)

    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    setup_logging(
        level=args.log_level,
        log_file=Path(args.log_file) if args.log_file else None,
        console_level=args.log_level,
    )
    try:
        if args.config:
            set_config(ConfigurationLoader(args.config).load())
        return int(args.func(args))
    except CommandNotFound as e:
        log.error(f"{e}")
        print(f"shpipe: {e}", file=sys.stderr)
        return EXIT_NOT_FOUND
    except (ShellError, OSError, ValueError) as e:
        log.error(f"{args.cmd} failed: {e}")
        print(f"shpipe: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
