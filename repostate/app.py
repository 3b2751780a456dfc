"""Bootstrap: wires all components together."""

from __future__ import annotations

import logging
import logging.handlers
from typing import TYPE_CHECKING

import structlog

from repostate.core.config import RepoStateConfig
from repostate.git.commits import CommitCache
from repostate.git.live import LiveStateReader
from repostate.git.runner import GitRunner
from repostate.status.builder import StatusSnapshotBuilder
from repostate.status.service import StatusService
from repostate.storage.memory import MemorySnapshotStore

if TYPE_CHECKING:
    from pathlib import Path

    from repostate.storage.base import SnapshotStore

logger = structlog.get_logger()


def configure_logging(config: RepoStateConfig, *, log_dir: Path | None = None) -> None:
    """Set up structlog with console output and optional rotating JSON file handler."""
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    root_logger = logging.getLogger()
    root_logger.setLevel(config.log_level)
    root_logger.handlers.clear()

    # Console handler on stderr so stdout stays clean for snapshot output
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(),
        )
    )
    root_logger.addHandler(console_handler)

    # File handler writes JSON lines
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / "repostate.log",
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
        )
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
            )
        )
        root_logger.addHandler(file_handler)

    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_builder(
    config: RepoStateConfig, runner: GitRunner | None = None
) -> StatusSnapshotBuilder:
    runner = runner or GitRunner(config.git_binary, config.git_timeout_seconds)
    commits = CommitCache(runner)
    return StatusSnapshotBuilder(
        runner=runner,
        commits=commits,
        live_reader=LiveStateReader(runner, commits),
        config=config,
    )


def build_service(
    config: RepoStateConfig | None = None,
    store: SnapshotStore | None = None,
    *,
    runner: GitRunner | None = None,
    setup_logging: bool = True,
) -> StatusService:
    if config is None:
        config = RepoStateConfig()

    if setup_logging:
        configure_logging(config, log_dir=config.log_dir)

    logger.info(
        "service_building",
        git_binary=config.git_binary,
        max_commits_ahead_behind=config.max_commits_ahead_behind,
        log_level=config.log_level,
    )
    return StatusService(build_builder(config, runner), store or MemorySnapshotStore())
