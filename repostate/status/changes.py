"""Turns live change lists into diffed, hunk-parsed changes."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from repostate.exceptions import GitCommandError
from repostate.git.models import Change
from repostate.git.parsers import diff_to_hunks, split_lines, unquote_path

if TYPE_CHECKING:
    from repostate.status.context import StatusContext

logger = structlog.get_logger()


def relative_path(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def to_change(change: Change, root: Path, diff: str | None) -> Change:
    """Copy ``change`` with its relative path, diff and parsed hunks filled in."""
    diff = diff or None
    return change.model_copy(
        update={
            "relative_path": relative_path(change.path, root),
            "diff": diff,
            "hunks": diff_to_hunks(diff, change.path) if diff else None,
        }
    )


async def _diff(ctx: StatusContext, change: Change, *, staged: bool) -> str | None:
    args = ["diff"]
    if staged:
        args.append("--cached")
    args.extend(["--", str(change.path)])
    try:
        out = await ctx.git(*args)
    except GitCommandError as e:
        logger.warning(
            "change_diff_failed", path=str(change.path), staged=staged, error=str(e)
        )
        return None
    return out.stdout


async def materialize_changes(
    ctx: StatusContext, changes: list[Change], *, staged: bool = False
) -> list[Change]:
    """Diff every tracked change concurrently; untracked entries are skipped.

    ``staged`` compares the index with HEAD, otherwise the working copy is
    compared with the index.
    """

    async def one(change: Change) -> Change:
        return to_change(change, ctx.root, await _diff(ctx, change, staged=staged))

    tracked = [c for c in changes if c.status != "untracked"]
    return list(await asyncio.gather(*(one(c) for c in tracked)))


async def list_untracked(ctx: StatusContext) -> list[Change]:
    """List untracked paths, collapsing wholly untracked directories."""
    try:
        out = await ctx.git(
            "ls-files",
            "--others",
            "--exclude-standard",
            "--directory",
            "--no-empty-directory",
            log_level="none",
        )
    except GitCommandError as e:
        logger.warning("untracked_list_failed", error=str(e))
        return []
    untracked: list[Change] = []
    for line in split_lines(out.stdout):
        entry = unquote_path(line)
        path = ctx.root / entry
        untracked.append(
            Change(
                original_path=path,
                path=path,
                status="untracked",
                relative_path=entry,
            )
        )
    return untracked
