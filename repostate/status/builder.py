"""Builds one immutable RepositorySnapshot from concurrent git queries.

Dependency graph of a refresh (everything else starts immediately):

    live state ──┬─> stashes, log, untracked, change diffs, refs,
                 │   merge / cherry-pick / revert detectors,
                 │   upstream ahead/behind ranges
    log, refs ───┴─> rebase detector
    refs ──────────> HEAD tag, upstream commit, push-remote status
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from repostate.exceptions import GitCommandError
from repostate.git.models import Branch, RepositorySnapshot
from repostate.git.parsers import COMMIT_FORMAT, parse_commit_records
from repostate.status import refs as ref_views
from repostate.status.changes import list_untracked, materialize_changes
from repostate.status.context import StatusContext
from repostate.status.divergence import (
    push_remote_status,
    upstream_ranges,
    upstream_status,
)
from repostate.status.operations import (
    cherry_picking_status,
    merging_status,
    rebasing_status,
    reverting_status,
)
from repostate.status.stashes import get_stashes

if TYPE_CHECKING:
    from pathlib import Path

    from repostate.core.config import RepoStateConfig
    from repostate.git.commits import CommitCache
    from repostate.git.live import LiveStateReader
    from repostate.git.models import Commit, OperationState, Ref
    from repostate.git.runner import GitRunner

logger = structlog.get_logger()


class StatusSnapshotBuilder:
    """Fans out every status query for a repository and joins the results.

    Not reentrant for one repository: callers serialize refreshes (see
    ``StatusService``).
    """

    def __init__(
        self,
        runner: GitRunner,
        commits: CommitCache,
        live_reader: LiveStateReader,
        config: RepoStateConfig,
    ) -> None:
        self._runner = runner
        self._commits = commits
        self._live_reader = live_reader
        self._config = config

    async def locate(self, path: Path) -> Path:
        """Working-copy root containing ``path``."""
        root, _ = await self._live_reader.locate(path)
        return root

    async def build(self, path: Path) -> RepositorySnapshot:
        live = await self._live_reader.read(path)
        ctx = StatusContext(
            self._runner,
            self._commits,
            live,
            short_hash_length=self._config.short_hash_length,
        )
        max_range = self._config.max_commits_ahead_behind

        stash_task = asyncio.create_task(get_stashes(ctx))
        log_task = asyncio.create_task(self._log(ctx))
        refs_task = asyncio.create_task(self._refs(ctx))
        ahead_task, behind_task = upstream_ranges(ctx, max_range)

        has_untracked = any(
            c.status == "untracked" for c in live.working_tree_changes
        )
        untracked_task = asyncio.create_task(
            list_untracked(ctx) if has_untracked else _empty()
        )
        working_task = asyncio.create_task(
            materialize_changes(ctx, live.working_tree_changes)
        )
        index_task = asyncio.create_task(
            materialize_changes(ctx, live.index_changes, staged=True)
        )
        merge_task = asyncio.create_task(materialize_changes(ctx, live.merge_changes))

        merging_task = asyncio.create_task(merging_status(ctx))
        rebasing_task = asyncio.create_task(rebasing_status(ctx, log_task, refs_task))
        cherry_task = asyncio.create_task(cherry_picking_status(ctx))
        reverting_task = asyncio.create_task(reverting_status(ctx))

        refs = await refs_task
        head = await self._head(ctx, refs, ahead_task, behind_task, max_range)
        # _head may return before consuming the ranges.
        await asyncio.gather(*(t for t in (ahead_task, behind_task) if t is not None))

        operation = _single_operation(
            await rebasing_task,
            await merging_task,
            await cherry_task,
            await reverting_task,
        )

        snapshot = RepositorySnapshot(
            root=live.root,
            head=head,
            log=await log_task,
            stashes=await stash_task,
            working_tree_changes=await working_task,
            index_changes=await index_task,
            merge_changes=await merge_task,
            untracked_files=await untracked_task,
            operation=operation,
            refs=refs,
            branches=ref_views.branches(refs),
            tags=ref_views.tags(refs),
            remotes=ref_views.group_remotes(live.remotes, refs),
            submodules=live.submodules,
        )
        logger.info(
            "snapshot_built",
            root=str(live.root),
            branch=head.name,
            operation=operation.kind if operation else None,
            changes=len(snapshot.working_tree_changes)
            + len(snapshot.index_changes)
            + len(snapshot.merge_changes),
        )
        return snapshot

    async def _log(self, ctx: StatusContext) -> list[Commit]:
        if ctx.live.head.commit is None:
            return []
        try:
            out = await ctx.git(
                "log",
                "-z",
                f"--format={COMMIT_FORMAT}",
                "-n",
                str(self._config.log_max_entries),
            )
        except GitCommandError as e:
            logger.warning("log_failed", error=str(e))
            return []
        commits = parse_commit_records(out.stdout)
        self._commits.prime(ctx.root, commits)
        return commits

    async def _refs(self, ctx: StatusContext) -> list[Ref]:
        try:
            return await ref_views.get_refs(ctx)
        except GitCommandError as e:
            logger.warning("refs_failed", error=str(e))
            return []

    async def _head(
        self,
        ctx: StatusContext,
        refs: list[Ref],
        ahead_task: asyncio.Task | None,
        behind_task: asyncio.Task | None,
        max_range: int,
    ) -> Branch:
        head = ctx.live.head
        if head.commit is None:
            return Branch(name=head.name)

        try:
            commit_details: Commit | None = await ctx.get_commit(head.commit)
        except GitCommandError as e:
            logger.warning("head_commit_unreadable", error=str(e))
            commit_details = None

        upstream, push_remote = await asyncio.gather(
            upstream_status(ctx, refs, ahead_task, behind_task),
            push_remote_status(ctx, refs, max_range),
        )
        tag = next(
            (r for r in refs if r.type == "tag" and r.commit == head.commit), None
        )
        return Branch(
            name=head.name,
            commit=head.commit,
            commit_details=commit_details,
            tag=tag,
            upstream=upstream,
            push_remote=push_remote,
        )


async def _empty() -> list:
    return []


def _single_operation(*states: OperationState | None) -> OperationState | None:
    """Pick the first active operation; git allows only one at a time."""
    active = [s for s in states if s is not None]
    if len(active) > 1:
        logger.warning("multiple_operations_detected", kinds=[s.kind for s in active])
    return active[0] if active else None
