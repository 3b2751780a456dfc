"""Tests for snapshot storage."""

from pathlib import Path

from repostate.git.models import Branch, RepositorySnapshot
from repostate.storage.base import SnapshotStore
from repostate.storage.memory import MemorySnapshotStore


def _snapshot(root: str, branch: str = "main") -> RepositorySnapshot:
    return RepositorySnapshot(root=Path(root), head=Branch(name=branch))


def test_memory_store_satisfies_protocol():
    assert isinstance(MemorySnapshotStore(), SnapshotStore)


class TestMemorySnapshotStore:
    async def test_save_and_load(self):
        store = MemorySnapshotStore()
        snapshot = _snapshot("/r")
        await store.save(snapshot)
        assert await store.load(Path("/r")) is snapshot

    async def test_save_replaces_whole_snapshot(self):
        store = MemorySnapshotStore()
        await store.save(_snapshot("/r", "main"))
        await store.save(_snapshot("/r", "dev"))
        loaded = await store.load(Path("/r"))
        assert loaded.head.name == "dev"

    async def test_repositories_are_independent(self):
        store = MemorySnapshotStore()
        await store.save(_snapshot("/a"))
        assert await store.load(Path("/b")) is None

    async def test_delete(self):
        store = MemorySnapshotStore()
        await store.save(_snapshot("/r"))
        await store.delete(Path("/r"))
        assert await store.load(Path("/r")) is None
        await store.delete(Path("/r"))
