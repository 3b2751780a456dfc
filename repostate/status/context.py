"""Per-refresh handles shared by the status resolvers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from repostate.git.control import ControlDir

if TYPE_CHECKING:
    from pathlib import Path

    from repostate.git.commits import CommitCache
    from repostate.git.models import Commit, LiveState
    from repostate.git.runner import GitOutput, GitRunner, LogLevel


class StatusContext:
    """Runner, commit cache and live state for one repository refresh."""

    __slots__ = ("commits", "control", "live", "runner", "short_hash_length")

    def __init__(
        self,
        runner: GitRunner,
        commits: CommitCache,
        live: LiveState,
        *,
        short_hash_length: int = 7,
    ) -> None:
        self.runner = runner
        self.commits = commits
        self.live = live
        self.control = ControlDir(live.git_dir)
        self.short_hash_length = short_hash_length

    @property
    def root(self) -> Path:
        return self.live.root

    async def git(self, *args: str, log_level: LogLevel = "error") -> GitOutput:
        return await self.runner.run(self.root, *args, log_level=log_level)

    async def get_commit(self, commit_id: str) -> Commit:
        return await self.commits.get_commit(self.root, commit_id)

    async def get_config(self, key: str) -> str | None:
        return await self.runner.get_config(self.root, key)
