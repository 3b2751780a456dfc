"""Detectors for merges, rebases, cherry-picks and reverts in progress.

Each detector reads the operation's marker files under the control
directory. A missing marker means the operation is not running and is the
common, cheap case. A marker that is present but unreadable or malformed
degrades that one detector to ``None``; detectors never raise.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from repostate.exceptions import ControlFileError, RepoStateError
from repostate.git.models import (
    CherryPickingState,
    MergingState,
    RebaseOnto,
    RebasingState,
    RevertingState,
)
from repostate.git.parsers import (
    commit_detail_text_to_commit,
    parse_merge_status,
    parse_sequencer_todo,
    short_hash,
    split_lines,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from repostate.git.models import Commit, Ref
    from repostate.status.context import StatusContext

logger = structlog.get_logger()

# Failures that degrade a detector instead of failing the refresh.
# pydantic's ValidationError is a ValueError.
_DEGRADES = (RepoStateError, OSError, ValueError)

_INTERACTIVE_DIR = "rebase-merge"
_APPLY_DIR = "rebase-apply"


async def _read_required(ctx: StatusContext, *parts: str) -> str:
    text = await ctx.control.read_text(*parts)
    if text is None:
        raise ControlFileError(f"missing control file: {'/'.join(parts)}")
    return text


async def _read_int(ctx: StatusContext, *parts: str) -> int:
    return int((await _read_required(ctx, *parts)).strip())


async def merging_status(ctx: StatusContext) -> MergingState | None:
    try:
        merge_head, merge_msg = await asyncio.gather(
            ctx.control.read_text("MERGE_HEAD"),
            ctx.control.read_text("MERGE_MSG"),
        )
        if not merge_head or not merge_msg:
            return None

        parsed = parse_merge_status(merge_head, merge_msg)
        if parsed is None:
            logger.warning("merge_msg_unrecognized")
            return None
        merge_head_commit, merging_branches = parsed

        out = await ctx.git("rev-list", f"HEAD..{merge_head_commit}", log_level="none")
        commits = await asyncio.gather(
            *(ctx.get_commit(h) for h in split_lines(out.stdout))
        )
        return MergingState(merging_branches=merging_branches, commits=list(commits))
    except _DEGRADES as e:
        logger.warning("merge_state_unreadable", error=str(e))
        return None


def _branch_from_head_name(head_name: str) -> str:
    """``refs/heads/feature/x`` -> ``feature/x``; other values pass through."""
    parts = head_name.strip().split("/")
    return "/".join(parts[2:]) if len(parts) > 2 else head_name.strip()


async def rebasing_status(
    ctx: StatusContext,
    log: Awaitable[list[Commit]],
    refs: Awaitable[list[Ref]],
) -> RebasingState | None:
    """Describe an in-progress rebase.

    Only consulted while the live state reports a rebase commit. The
    ``rebase-merge`` directory (interactive and merge backend) wins over
    ``rebase-apply`` (mailbox backend) when both are populated.
    """
    current_commit = ctx.live.rebase_commit
    if current_commit is None:
        return None

    try:
        if await ctx.control.entry_count(_INTERACTIVE_DIR):
            interactive, directory = True, _INTERACTIVE_DIR
        elif await ctx.control.entry_count(_APPLY_DIR):
            interactive, directory = False, _APPLY_DIR
        else:
            logger.warning("rebase_dir_missing")
            return None

        head_name, onto_hash = await asyncio.gather(
            _read_required(ctx, directory, "head-name"),
            _read_required(ctx, directory, "onto"),
        )

        if interactive:
            next_index = await _read_int(ctx, directory, "msgnum")
            todo = await ctx.control.read_text(directory, "git-rebase-todo")
            upcoming = parse_sequencer_todo(todo)[::-1]
        else:
            last_index, next_index = await asyncio.gather(
                _read_int(ctx, directory, "last"),
                _read_int(ctx, directory, "next"),
            )
            patches = await asyncio.gather(
                *(
                    _read_required(ctx, directory, f"{index:04d}")
                    for index in range(last_index, next_index, -1)
                )
            )
            upcoming = [commit_detail_text_to_commit(p) for p in patches]

        onto_commit = await ctx.get_commit(onto_hash.strip())
        onto_ref = next(
            (
                r
                for r in await refs
                if r.commit == onto_commit.hash and r.type != "remote_head"
            ),
            None,
        )
        onto = RebaseOnto(
            name=onto_ref.name
            if onto_ref
            else short_hash(onto_commit.hash, ctx.short_hash_length),
            commit_details=onto_commit,
        )

        done = (await log)[: max(next_index - 1, 0)]

        return RebasingState(
            interactive=interactive,
            current_commit=current_commit,
            orig_branch_name=_branch_from_head_name(head_name),
            onto=onto,
            done_commits=done,
            upcoming_commits=upcoming,
        )
    except _DEGRADES as e:
        logger.warning("rebase_state_unreadable", error=str(e))
        return None


async def _sequencer_status(
    ctx: StatusContext, marker: str
) -> tuple[Commit, Commit, list[Commit]] | None:
    """Shared reader for cherry-pick and revert.

    Returns (original head, current commit, upcoming commits newest first).
    """
    head_hash = await ctx.control.read_text(marker)
    if not head_hash:
        return None

    todo, sequencer_head = await asyncio.gather(
        ctx.control.read_text("sequencer", "todo"),
        ctx.control.read_text("sequencer", "head"),
    )
    original = sequencer_head or ctx.live.head.commit
    if not original:
        raise ControlFileError("no original HEAD for sequencer operation")

    # The first todo entry is the commit being applied right now.
    upcoming = parse_sequencer_todo(todo)[1:][::-1]
    original_head, current_commit = await asyncio.gather(
        ctx.get_commit(original.strip()),
        ctx.get_commit(head_hash.strip()),
    )
    return original_head, current_commit, upcoming


async def cherry_picking_status(ctx: StatusContext) -> CherryPickingState | None:
    try:
        state = await _sequencer_status(ctx, "CHERRY_PICK_HEAD")
    except _DEGRADES as e:
        logger.warning("cherry_pick_state_unreadable", error=str(e))
        return None
    if state is None:
        return None
    original_head, current_commit, upcoming = state
    return CherryPickingState(
        original_head=original_head,
        current_commit=current_commit,
        upcoming_commits=upcoming,
    )


async def reverting_status(ctx: StatusContext) -> RevertingState | None:
    try:
        state = await _sequencer_status(ctx, "REVERT_HEAD")
    except _DEGRADES as e:
        logger.warning("revert_state_unreadable", error=str(e))
        return None
    if state is None:
        return None
    original_head, current_commit, upcoming = state
    return RevertingState(
        original_head=original_head,
        current_commit=current_commit,
        upcoming_commits=upcoming,
    )
