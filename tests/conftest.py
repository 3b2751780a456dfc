"""Shared fixtures: a scripted git runner and on-disk control directories."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from repostate.core.config import RepoStateConfig
from repostate.exceptions import GitCommandError
from repostate.git.commits import CommitCache
from repostate.git.models import Head, LiveState
from repostate.git.parsers import COMMIT_FORMAT, REF_FORMAT
from repostate.git.runner import GitOutput, GitRunner
from repostate.status.context import StatusContext


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Prevent .env file and shell env from leaking into tests."""
    monkeypatch.setitem(RepoStateConfig.model_config, "env_file", None)
    for key in list(os.environ):
        if key.startswith("REPOSTATE_"):
            monkeypatch.delenv(key, raising=False)


def sha(n: int) -> str:
    """A deterministic 40-char commit id."""
    return f"{n:040x}"


def commit_record(commit_id: str, subject: str, parents: str = "") -> str:
    return (
        f"{commit_id}\nAda\nada@example.com\n1700000000\n1700000100\n"
        f"{parents}\n{subject}\n"
    )


class FakeRunner(GitRunner):
    """GitRunner that answers from a table keyed on the exact argv.

    Unknown commands fail with exit code 1, which reads as an unset key for
    ``get_config`` and as a failure everywhere else.
    """

    def __init__(self) -> None:
        super().__init__()
        self.responses: dict[tuple[str, ...], str | GitCommandError] = {}
        self.calls: list[tuple[str, ...]] = []

    def add(self, *args: str, stdout: str = "") -> None:
        self.responses[args] = stdout

    def fail(self, *args: str, returncode: int = 128, stderr: str = "fatal") -> None:
        self.responses[args] = GitCommandError(args, returncode, stderr)

    def add_commit(self, commit_id: str, subject: str, parents: str = "") -> None:
        self.add(
            "show",
            "-s",
            "-z",
            f"--format={COMMIT_FORMAT}",
            commit_id,
            "--",
            stdout=commit_record(commit_id, subject, parents),
        )

    def add_refs(self, *lines: tuple[str, str, str]) -> None:
        self.add(
            "for-each-ref",
            f"--format={REF_FORMAT}",
            "refs/heads",
            "refs/tags",
            "refs/remotes",
            stdout="".join(f"{r}\x00{o}\x00{p}\n" for r, o, p in lines),
        )

    def add_config(self, key: str, value: str) -> None:
        self.add("config", "--get", key, stdout=f"{value}\n")

    def called(self, *prefix: str) -> list[tuple[str, ...]]:
        return [c for c in self.calls if c[: len(prefix)] == prefix]

    async def run(self, cwd, *args, log_level="error"):
        self.calls.append(args)
        response = self.responses.get(args)
        if response is None:
            raise GitCommandError(args, 1, f"unexpected command: {args}")
        if isinstance(response, GitCommandError):
            raise response
        return GitOutput(response, "")


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def repo_root(tmp_path):
    root = tmp_path / "repo"
    (root / ".git").mkdir(parents=True)
    return root


@pytest.fixture
def git_dir(repo_root):
    return repo_root / ".git"


def write_control(git_dir: Path, relative: str, text: str) -> None:
    path = git_dir / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


@pytest.fixture
def make_ctx(runner, repo_root, git_dir):
    def _make(**live_fields) -> StatusContext:
        live_fields.setdefault("head", Head(name="main", commit=sha(1)))
        live = LiveState(root=repo_root, git_dir=git_dir, **live_fields)
        return StatusContext(runner, CommitCache(runner), live)

    return _make


@pytest.fixture
def ctx(make_ctx):
    return make_ctx()
