"""Ref listing and the branch, tag and remote views derived from it."""

from __future__ import annotations

from typing import TYPE_CHECKING

from repostate.git.parsers import REF_FORMAT, parse_refs

if TYPE_CHECKING:
    from repostate.git.models import Ref, Remote
    from repostate.status.context import StatusContext


async def get_refs(ctx: StatusContext) -> list[Ref]:
    out = await ctx.git(
        "for-each-ref",
        f"--format={REF_FORMAT}",
        "refs/heads",
        "refs/tags",
        "refs/remotes",
    )
    return parse_refs(out.stdout)


def branches(refs: list[Ref]) -> list[Ref]:
    return [r for r in refs if r.type == "head"]


def tags(refs: list[Ref]) -> list[Ref]:
    return [r for r in refs if r.type == "tag"]


def group_remotes(remotes: list[Remote], refs: list[Ref]) -> list[Remote]:
    """Attach each remote's tracking branches, leaving out ``<remote>/HEAD``."""
    remote_heads = [r for r in refs if r.type == "remote_head"]
    return [
        remote.model_copy(
            update={
                "branches": [
                    r
                    for r in remote_heads
                    if r.remote == remote.name and r.name != f"{remote.name}/HEAD"
                ]
            }
        )
        for remote in remotes
    ]
