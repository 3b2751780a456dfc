"""Memoized commit-detail lookups."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from repostate.exceptions import GitCommandError
from repostate.git.parsers import COMMIT_FORMAT, parse_commit_records

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from repostate.git.models import Commit
    from repostate.git.runner import GitRunner

logger = structlog.get_logger()


class CommitCache:
    """Caches commit details per (repository, commit id).

    Concurrent lookups of one id share a single ``git show``; a failed lookup
    is evicted so the next caller retries.
    """

    def __init__(self, runner: GitRunner) -> None:
        self._runner = runner
        self._entries: dict[tuple[Path, str], asyncio.Future[Commit]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def get_commit(self, cwd: Path, commit_id: str) -> Commit:
        key = (cwd, commit_id)
        entry = self._entries.get(key)
        if entry is None:
            entry = asyncio.ensure_future(self._load(cwd, commit_id))
            self._entries[key] = entry
        try:
            return await asyncio.shield(entry)
        except Exception:
            if self._entries.get(key) is entry:
                del self._entries[key]
            raise

    def prime(self, cwd: Path, commits: Iterable[Commit]) -> None:
        """Seed the cache with commits already fetched by a log listing."""
        loop = asyncio.get_running_loop()
        for commit in commits:
            key = (cwd, commit.hash)
            if key in self._entries:
                continue
            future: asyncio.Future[Commit] = loop.create_future()
            future.set_result(commit)
            self._entries[key] = future

    async def _load(self, cwd: Path, commit_id: str) -> Commit:
        out = await self._runner.run(
            cwd, "show", "-s", "-z", f"--format={COMMIT_FORMAT}", commit_id, "--"
        )
        commits = parse_commit_records(out.stdout)
        if not commits:
            raise GitCommandError(("show", commit_id), 0, "no commit in output")
        logger.debug("commit_loaded", commit=commit_id)
        return commits[0]
