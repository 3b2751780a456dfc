"""In-memory snapshot store keyed by working-copy root."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from repostate.git.models import RepositorySnapshot


class MemorySnapshotStore:
    def __init__(self) -> None:
        self._data: dict[Path, RepositorySnapshot] = {}

    async def save(self, snapshot: RepositorySnapshot) -> None:
        self._data[snapshot.root] = snapshot

    async def load(self, root: Path) -> RepositorySnapshot | None:
        return self._data.get(root)

    async def delete(self, root: Path) -> None:
        self._data.pop(root, None)
