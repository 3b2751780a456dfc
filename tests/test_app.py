"""Tests for the bootstrap functions."""

import logging
from unittest.mock import patch

from repostate.app import build_service, configure_logging
from repostate.core.config import RepoStateConfig
from repostate.status.builder import StatusSnapshotBuilder
from repostate.status.service import StatusService
from repostate.storage.memory import MemorySnapshotStore
from tests.conftest import FakeRunner


class TestBuildService:
    def test_returns_service_with_memory_store(self):
        with patch("repostate.app.configure_logging") as configure:
            service = build_service(RepoStateConfig())
        assert isinstance(service, StatusService)
        assert isinstance(service._store, MemorySnapshotStore)
        assert isinstance(service._builder, StatusSnapshotBuilder)
        configure.assert_called_once()

    def test_custom_store_and_runner(self):
        store = MemorySnapshotStore()
        runner = FakeRunner()
        service = build_service(store=store, runner=runner, setup_logging=False)
        assert service._store is store
        assert service._builder._runner is runner

    def test_runner_uses_config(self):
        config = RepoStateConfig(git_binary="/opt/git", git_timeout_seconds=5)
        service = build_service(config, setup_logging=False)
        runner = service._builder._runner
        assert runner._binary == "/opt/git"
        assert runner._timeout == 5


class TestConfigureLogging:
    def teardown_method(self):
        logging.getLogger().handlers.clear()

    def test_console_only(self):
        configure_logging(RepoStateConfig(log_level="warning"))
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1

    def test_file_handler(self, tmp_path):
        log_dir = tmp_path / "logs"
        configure_logging(RepoStateConfig(), log_dir=log_dir)
        handlers = logging.getLogger().handlers
        assert len(handlers) == 2
        assert log_dir.is_dir()
        assert handlers[1].baseFilename == str(log_dir / "repostate.log")
