"""datapond CLI entry points.
This module exposes ingest, resolve, and view maintenance commands.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
import sys
from typing import Any, Sequence

from core.config import PondConfig
from core.errors import PondError, PondInvalidViewError
from store.pond_sdk import PondClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="datapond", description="Data pond CLI")
    parser.add_argument("--project-root", help="Override POND_PROJECT_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_ingest_command(subparsers)
    _add_resolve_command(subparsers)
    _add_views_command(subparsers)
    _add_rebuild_views_command(subparsers)
    _add_parquet_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the datapond CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = _build_client(args.project_root)
        return _dispatch(parser, client, args)
    except PondError as error:
        print(f"pond_error={error}", file=sys.stderr)
        return 1


def _dispatch(parser: argparse.ArgumentParser, client: PondClient, args: argparse.Namespace) -> int:
    if args.command == "ingest":
        return _run_ingest_command(client, args)
    if args.command == "resolve":
        return _run_resolve_command(client, args)
    if args.command == "views":
        return _run_views_command(client)
    if args.command == "rebuild-views":
        return _run_rebuild_views_command(client)
    if args.command == "parquet":
        return _run_parquet_command(client, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(project_root: str | None) -> PondClient:
    """Build SDK client with optional project-root override.

    Args:
        project_root: Optional override path.

    Returns:
        Configured SDK client.
    """
    config = PondConfig.from_env()
    if project_root:
        config = replace(config, project_root=Path(project_root).expanduser().resolve())
    return PondClient(config)


def _run_ingest_command(client: PondClient, args: argparse.Namespace) -> int:
    """Handle ingest command.

    Prints one ``ingested`` line per raw file and one ``skipped`` line per
    inbox entry left in place.
    """
    if args.path:
        ingested = client.ingest_file(args.path)
        skipped = ()
    else:
        report = client.ingest()
        ingested, skipped = list(report.ingested), report.skipped
    for item in ingested:
        print(f"ingested\t{item.raw_filename}\t{item.semantic_name}")
    for skip in skipped:
        print(f"skipped\t{Path(skip.path).name}\t{skip.reason}")
    return 0


def _run_resolve_command(client: PondClient, args: argparse.Namespace) -> int:
    print(client.resolve(args.semantic_name))
    return 0


def _run_views_command(client: PondClient) -> int:
    for name in client.list_views():
        try:
            view = client.view(name)
        except PondInvalidViewError:
            print(f"{name}\tinvalid\t-\t-")
            continue
        print(f"{view.semantic_name}\t{view.preferred}\t{view.raw}\t{view.parquet or '-'}")
    return 0


def _run_rebuild_views_command(client: PondClient) -> int:
    count = client.rebuild_views()
    print(f"rebuilt={count}")
    return 0


def _run_parquet_command(client: PondClient, args: argparse.Namespace) -> int:
    converted = client.convert_large_csvs(min_size_mb=args.min_size_mb)
    for candidate in converted:
        print(f"converted\t{candidate.raw_filename}\t{candidate.parquet_filename}")
    return 0


def _add_ingest_command(subparsers: Any) -> None:
    """Register ingest subcommand."""
    parser = subparsers.add_parser("ingest", help="Ingest the inbox or a single file")
    parser.add_argument("path", nargs="?", help="Optional single file or archive to ingest")


def _add_resolve_command(subparsers: Any) -> None:
    """Register resolve subcommand."""
    parser = subparsers.add_parser("resolve", help="Print the file backing a semantic name")
    parser.add_argument("semantic_name", help="Semantic dataset name, e.g. census.csv")


def _add_views_command(subparsers: Any) -> None:
    """Register views subcommand."""
    subparsers.add_parser("views", help="List views and their current pointers")


def _add_rebuild_views_command(subparsers: Any) -> None:
    """Register rebuild-views subcommand."""
    subparsers.add_parser("rebuild-views", help="Regenerate all views from metadata")


def _add_parquet_command(subparsers: Any) -> None:
    """Register parquet subcommand."""
    parser = subparsers.add_parser("parquet", help="Convert large raw CSVs to Parquet")
    parser.add_argument(
        "--min-size-mb",
        type=float,
        help="Minimum CSV size in MB (defaults to POND_PARQUET_MIN_SIZE_MB)",
    )
