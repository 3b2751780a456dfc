"""Stash listing."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog

from repostate.exceptions import GitCommandError
from repostate.git.models import Stash
from repostate.git.parsers import split_lines

if TYPE_CHECKING:
    from repostate.status.context import StatusContext

logger = structlog.get_logger()

_STASH_LABEL_RE = re.compile(r"stash@\{\d+\}: ")


async def get_stashes(ctx: StatusContext) -> list[Stash]:
    """List stashes most recent first; indices are positions, not identifiers."""
    try:
        out = await ctx.git("stash", "list", log_level="none")
    except GitCommandError as e:
        logger.debug("stash_list_failed", error=str(e))
        return []
    return parse_stash_list(out.stdout)


def parse_stash_list(text: str) -> list[Stash]:
    return [
        Stash(index=index, description=_STASH_LABEL_RE.sub("", line))
        for index, line in enumerate(split_lines(text))
    ]
