"""Reads of operation marker files under the git control directory."""

import asyncio
from pathlib import Path

from repostate.git.parsers import strip_final_newline


class ControlDir:
    """Read-only view of a repository's control directory (``.git``).

    A missing file is the common case for operation markers and reads as
    ``None``; any other ``OSError`` propagates.
    """

    def __init__(self, git_dir: Path) -> None:
        self.path = git_dir

    async def read_text(self, *parts: str) -> str | None:
        return await asyncio.to_thread(self._read_text, self.path.joinpath(*parts))

    async def entry_count(self, *parts: str) -> int:
        return await asyncio.to_thread(self._entry_count, self.path.joinpath(*parts))

    @staticmethod
    def _read_text(path: Path) -> str | None:
        try:
            data = path.read_bytes()
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError):
            return None
        return strip_final_newline(data.decode("utf-8", errors="replace"))

    @staticmethod
    def _entry_count(path: Path) -> int:
        try:
            return sum(1 for _ in path.iterdir())
        except (FileNotFoundError, NotADirectoryError):
            return 0
