"""Upstream and push-remote divergence for the current branch."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from repostate.exceptions import RepoStateError
from repostate.git.models import UpstreamRef
from repostate.status.ranges import get_commit_range

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from repostate.git.models import Commit, CommitRange, Ref
    from repostate.status.context import StatusContext

logger = structlog.get_logger()


def remote_commit(refs: list[Ref], remote: str, name: str) -> str | None:
    """Commit id of the remote-tracking ref ``<remote>/<name>``, if fetched."""
    full_name = f"{remote}/{name}"
    return next(
        (r.commit for r in refs if r.remote == remote and r.name == full_name),
        None,
    )


async def _commit_or_none(ctx: StatusContext, commit_id: str | None) -> Commit | None:
    if commit_id is None:
        return None
    return await ctx.get_commit(commit_id)


def upstream_ranges(
    ctx: StatusContext, max_results: int
) -> tuple[asyncio.Task[CommitRange] | None, asyncio.Task[CommitRange] | None]:
    """Start ahead/behind range queries against ``<branch>@{u}``.

    A range is only walked when the live state already counts commits in
    that direction; a detached HEAD never has either.
    """
    head = ctx.live.head
    if head.name is None:
        return None, None
    upstream = f"{head.name}@{{u}}"
    ahead = (
        asyncio.create_task(get_commit_range(ctx, upstream, head.name, max_results))
        if head.ahead
        else None
    )
    behind = (
        asyncio.create_task(get_commit_range(ctx, head.name, upstream, max_results))
        if head.behind
        else None
    )
    return ahead, behind


async def upstream_status(
    ctx: StatusContext,
    refs: list[Ref],
    ahead: Awaitable[CommitRange] | None,
    behind: Awaitable[CommitRange] | None,
) -> UpstreamRef | None:
    """Upstream counterpart of the current branch; ``None`` when unavailable."""
    head = ctx.live.head
    if head.name is None or not head.upstream_remote or head.upstream_name is None:
        return None

    remote, name = head.upstream_remote, head.upstream_name
    try:
        commit, rebase = await asyncio.gather(
            _commit_or_none(ctx, remote_commit(refs, remote, name)),
            ctx.get_config(f"branch.{name}.rebase"),
        )
        return UpstreamRef(
            remote=remote,
            name=name,
            commit=commit,
            ahead=await ahead if ahead else None,
            behind=await behind if behind else None,
            rebase=rebase == "true",
        )
    except RepoStateError as e:
        logger.warning("upstream_status_failed", remote=remote, error=str(e))
        return None


async def push_remote_status(
    ctx: StatusContext, refs: list[Ref], max_results: int
) -> UpstreamRef | None:
    """Push-remote counterpart from ``branch.<name>.pushRemote``.

    Unlike the upstream, ranges are always walked when a push remote is set.
    """
    head = ctx.live.head
    if head.name is None:
        return None

    try:
        push_remote = await ctx.get_config(f"branch.{head.name}.pushRemote")
        if not push_remote:
            return None

        remote_ref = f"{push_remote}/{head.name}"
        ahead, behind, commit = await asyncio.gather(
            get_commit_range(ctx, remote_ref, head.name, max_results),
            get_commit_range(ctx, head.name, remote_ref, max_results),
            _commit_or_none(ctx, remote_commit(refs, push_remote, head.name)),
        )
        return UpstreamRef(
            remote=push_remote,
            name=head.name,
            commit=commit,
            ahead=ahead,
            behind=behind,
        )
    except RepoStateError as e:
        logger.warning("push_remote_status_failed", error=str(e))
        return None
