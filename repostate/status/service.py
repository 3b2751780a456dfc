"""Refresh coordination: one snapshot per repository, replaced whole."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

    from repostate.git.models import RepositorySnapshot
    from repostate.status.builder import StatusSnapshotBuilder
    from repostate.storage.base import SnapshotStore

logger = structlog.get_logger()


class StatusService:
    """Serializes refreshes per repository and keeps the latest snapshot.

    Refreshes are keyed on the working-copy root, so paths inside one
    repository share a lock. A failed refresh leaves the previously stored
    snapshot untouched.
    """

    def __init__(self, builder: StatusSnapshotBuilder, store: SnapshotStore) -> None:
        self._builder = builder
        self._store = store
        self._locks: dict[Path, asyncio.Lock] = {}

    async def refresh(self, path: Path) -> RepositorySnapshot:
        try:
            root = await self._builder.locate(path.resolve())
            lock = self._locks.setdefault(root, asyncio.Lock())
            async with lock:
                snapshot = await self._builder.build(root)
                await self._store.save(snapshot)
        except Exception:
            logger.exception("snapshot_refresh_failed", path=str(path))
            raise
        return snapshot

    async def current(self, root: Path) -> RepositorySnapshot | None:
        return await self._store.load(root)
