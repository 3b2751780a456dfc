"""CLI entry point for repostate."""

import argparse
import asyncio
import sys
from pathlib import Path

from repostate.app import build_service
from repostate.core.config import load_config
from repostate.exceptions import ConfigError, RepoStateError
from repostate.status.formatter import format_snapshot


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="repostate",
        description="Print a status snapshot of a git working copy.",
    )
    parser.add_argument("path", nargs="?", default=".", type=Path)
    parser.add_argument(
        "--json", action="store_true", help="print the snapshot as JSON"
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    try:
        config = load_config()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    service = build_service(config)
    try:
        snapshot = await service.refresh(args.path)
    except RepoStateError as e:
        print(f"repostate: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(snapshot.model_dump_json(indent=2))
    else:
        print(format_snapshot(snapshot))
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))
