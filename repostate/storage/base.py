"""Abstract snapshot store protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    from repostate.git.models import RepositorySnapshot


@runtime_checkable
class SnapshotStore(Protocol):
    async def save(self, snapshot: RepositorySnapshot) -> None: ...

    async def load(self, root: Path) -> RepositorySnapshot | None: ...

    async def delete(self, root: Path) -> None: ...
