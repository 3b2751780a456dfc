"""Commit ranges between two refs, capped to bound history walks."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from repostate.exceptions import GitCommandError
from repostate.git.models import CommitRange
from repostate.git.parsers import split_lines

if TYPE_CHECKING:
    from repostate.status.context import StatusContext

logger = structlog.get_logger()


async def get_commit_range(
    ctx: StatusContext, from_ref: str, to_ref: str, max_results: int
) -> CommitRange:
    """Return commits in ``from_ref..to_ref``, newest first.

    Asks git for one entry more than ``max_results`` so truncation is known
    without a separate count. Never raises; a failed query is an empty range.
    """
    limit = int(max_results)
    try:
        out = await ctx.git(
            "log", "--format=format:%H", f"{from_ref}..{to_ref}", "-n", str(limit + 1)
        )
        hashes = split_lines(out.stdout.strip())
        commits = await asyncio.gather(
            *(ctx.get_commit(h) for h in hashes[:limit])
        )
    except GitCommandError as e:
        logger.debug(
            "commit_range_failed", from_ref=from_ref, to_ref=to_ref, error=str(e)
        )
        return CommitRange()
    return CommitRange(commits=list(commits), truncated=len(hashes) > limit)
