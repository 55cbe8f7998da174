"""Command-line interface for metaprog."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from metaprog.core.building import FunctionBuilder
from metaprog.core.building.cases import call_maybe_async
from metaprog.core.caching import FSCacheHandlerSync
from metaprog.core.config import AppConfig, configure_logging, load_app_config
from metaprog.core.errors import MetaprogError, NotFoundError
from metaprog.core.io import RealFileSystem

console = Console()
logger = logging.getLogger(__name__)


def json_arg(value: str) -> Any:
    """argparse type: parse a JSON literal."""
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"not valid JSON: {e}") from e


def _as_args(value: Any) -> list[Any]:
    return value if isinstance(value, list) else [value]


def _cache(config: AppConfig) -> FSCacheHandlerSync:
    return FSCacheHandlerSync(
        RealFileSystem(),
        index_path=config.cache.resolved_index_path(),
        generated_dir=config.cache.resolved_generated_dir(),
    )


def _load_config(args: argparse.Namespace) -> AppConfig:
    config = load_app_config(args.config)
    configure_logging(config)
    return config


async def build_async(args: argparse.Namespace, config: AppConfig) -> int:
    """Build (and optionally call) a function.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    builder = FunctionBuilder(args.description, config=config)
    if args.input:
        builder.input(*args.input)
    if args.output is not None:
        builder.output(args.output)
    if args.retries is not None:
        builder.retries(args.retries)
    for call_args, expected in args.test or []:
        builder.test(*_as_args(call_args), expected=expected)

    func = await builder.build()

    report = builder.last_report
    if report is not None:
        source = "cache" if report.cache_hit else f"{report.generations} generation(s)"
        label = escape(repr(args.description))
        console.print(f"[green]Built[/green] {label} -> {report.artifact_id} ({source})")
        if report.total_repair_attempts:
            console.print(f"   Repair attempts: {report.total_repair_attempts}")

    if args.call is not None:
        result = await call_maybe_async(func, *_as_args(args.call))
        console.print(repr(result), markup=False)

    return 0


def cmd_build(args: argparse.Namespace) -> int:
    config = _load_config(args)
    return asyncio.run(build_async(args, config))


def cmd_show(args: argparse.Namespace) -> int:
    cache = _cache(_load_config(args))
    try:
        source = cache.fetch_source(args.description)
    except NotFoundError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return 1
    console.print(Syntax(source, "python"))
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    cache = _cache(_load_config(args))
    entries = cache.entries()
    if not entries:
        console.print("Cache is empty")
        return 0

    table = Table(title=f"Cached functions ({cache.index_path})")
    table.add_column("id")
    table.add_column("description")
    for entry in entries:
        table.add_row(entry.id, escape(entry.description))
    console.print(table)
    return 0


def cmd_reset(args: argparse.Namespace) -> int:
    cache = _cache(_load_config(args))
    cache.reset()
    console.print(f"[green]Cache cleared[/green] ({cache.index_path})")
    return 0


def cmd_prune(args: argparse.Namespace) -> int:
    cache = _cache(_load_config(args))
    removed = cache.prune_orphans()
    console.print(f"Removed {len(removed)} orphaned artifact(s)")
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for CLI."""
    p = argparse.ArgumentParser(
        prog="metaprog",
        description="metaprog - build cached Python functions from descriptions",
    )
    p.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to app config (.yaml/.yml/.json, default: metaprog.yaml)",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    build = sub.add_parser("build", help="Build a function from a description")
    build.add_argument("description", help="What the function should do")
    build.add_argument(
        "--input",
        action="append",
        type=json_arg,
        metavar="JSON_SCHEMA",
        help="JSON schema of a positional argument (repeat per argument)",
    )
    build.add_argument(
        "--output", type=json_arg, metavar="JSON_SCHEMA", help="JSON schema of the return value"
    )
    build.add_argument(
        "--test",
        nargs=2,
        type=json_arg,
        action="append",
        metavar=("ARGS_JSON", "EXPECTED_JSON"),
        help="Test case: JSON argument list and expected JSON result",
    )
    build.add_argument("--retries", type=int, default=None, help="Repair attempts per failing test")
    build.add_argument(
        "--call", type=json_arg, metavar="ARGS_JSON", help="Call the function with these arguments"
    )
    build.set_defaults(func=cmd_build)

    show = sub.add_parser("show", help="Print the cached source for a description")
    show.add_argument("description")
    show.set_defaults(func=cmd_show)

    sub.add_parser("list", help="List cached functions").set_defaults(func=cmd_list)
    sub.add_parser("reset", help="Delete the cache").set_defaults(func=cmd_reset)
    sub.add_parser("prune", help="Delete unreferenced generated files").set_defaults(func=cmd_prune)

    return p


def main(argv: list[str] | None = None) -> None:
    """Main entry point for CLI."""
    p = build_arg_parser()
    args = p.parse_args(argv)

    try:
        exit_code = args.func(args)
    except MetaprogError as e:
        console.print(f"[red]ERROR: {escape(str(e))}[/red]")
        exit_code = 1
    sys.exit(exit_code)
