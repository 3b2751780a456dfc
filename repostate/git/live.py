"""Live repository state: the cheap ``git status`` view a refresh starts from."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from repostate.exceptions import GitCommandError, NotARepositoryError
from repostate.git.control import ControlDir
from repostate.git.models import Change, Head, LiveState, Remote, Submodule
from repostate.git.parsers import split_lines, unquote_path

if TYPE_CHECKING:
    from repostate.git.commits import CommitCache
    from repostate.git.models import ChangeStatus, Commit
    from repostate.git.runner import GitRunner

logger = structlog.get_logger()

_INDEX_STATUS: dict[str, ChangeStatus] = {
    "M": "modified",
    "A": "added",
    "D": "deleted",
    "R": "renamed",
    "C": "copied",
    "T": "type_changed",
}

_WORKTREE_STATUS: dict[str, ChangeStatus] = {
    "M": "modified",
    "D": "deleted",
    "R": "renamed",
    "C": "copied",
    "T": "type_changed",
    "A": "intent_to_add",
}

_UNMERGED_STATUS: dict[str, ChangeStatus] = {
    "DD": "both_deleted",
    "AU": "added_by_us",
    "UD": "deleted_by_them",
    "UA": "added_by_them",
    "DU": "deleted_by_us",
    "AA": "both_added",
    "UU": "both_modified",
}


class LiveStateReader:
    """Reads HEAD, change lists, remotes and submodules for one working copy."""

    def __init__(self, runner: GitRunner, commits: CommitCache) -> None:
        self._runner = runner
        self._commits = commits

    async def read(self, cwd: Path) -> LiveState:
        root, git_dir = await self.locate(cwd)

        status_task = asyncio.create_task(
            self._runner.run(
                root,
                "-c",
                "core.quotePath=false",
                "status",
                "--porcelain=v2",
                "--branch",
                "--untracked-files=all",
            )
        )
        remotes_task = asyncio.create_task(self._remotes(root))
        submodules_task = asyncio.create_task(self._submodules(root))
        rebase_task = asyncio.create_task(self._rebase_commit(root, git_dir))

        status_out = await status_task
        remotes = await remotes_task
        head, working, index, merge = parse_porcelain_status(
            status_out.stdout, root, [r.name for r in remotes]
        )

        return LiveState(
            root=root,
            git_dir=git_dir,
            head=head,
            working_tree_changes=working,
            index_changes=index,
            merge_changes=merge,
            remotes=remotes,
            submodules=await submodules_task,
            rebase_commit=await rebase_task,
        )

    async def locate(self, cwd: Path) -> tuple[Path, Path]:
        """Return the working-copy root and absolute control directory."""
        try:
            out = await self._runner.run(
                cwd,
                "rev-parse",
                "--show-toplevel",
                "--absolute-git-dir",
                log_level="none",
            )
        except GitCommandError as e:
            raise NotARepositoryError(f"Not a git repository: {cwd}") from e
        lines = split_lines(out.stdout)
        if len(lines) < 2:
            raise NotARepositoryError(f"Not a git working copy: {cwd}")
        return Path(lines[0]), Path(lines[1])

    async def _remotes(self, root: Path) -> list[Remote]:
        out = await self._runner.run(root, "remote", "-v")
        urls: dict[str, dict[str, str]] = {}
        for line in split_lines(out.stdout):
            name, _, rest = line.partition("\t")
            url, _, kind = rest.rpartition(" ")
            entry = urls.setdefault(name, {})
            if kind == "(fetch)":
                entry["fetch"] = url
            elif kind == "(push)":
                entry["push"] = url
        return [
            Remote(name=name, fetch_url=entry.get("fetch"), push_url=entry.get("push"))
            for name, entry in urls.items()
        ]

    async def _submodules(self, root: Path) -> list[Submodule]:
        if not (root / ".gitmodules").is_file():
            return []
        try:
            out = await self._runner.run(
                root,
                "config",
                "--file",
                ".gitmodules",
                "--get-regexp",
                r"^submodule\..*\.(path|url)$",
                log_level="none",
            )
        except GitCommandError:
            return []

        fields: dict[str, dict[str, str]] = {}
        for line in split_lines(out.stdout):
            key, _, value = line.partition(" ")
            name, _, attr = key[len("submodule.") :].rpartition(".")
            fields.setdefault(name, {})[attr] = value
        return [
            Submodule(name=name, path=f.get("path", name), url=f.get("url", ""))
            for name, f in fields.items()
        ]

    async def _rebase_commit(self, root: Path, git_dir: Path) -> Commit | None:
        control = ControlDir(git_dir)
        rebase_head = await control.read_text("REBASE_HEAD")
        if not rebase_head:
            return None
        in_progress = (git_dir / "rebase-merge").is_dir() or (
            git_dir / "rebase-apply"
        ).is_dir()
        if not in_progress:
            return None
        try:
            return await self._commits.get_commit(root, rebase_head.strip())
        except GitCommandError as e:
            logger.warning("rebase_head_unreadable", error=str(e))
            return None


def _split_upstream(upstream: str, remotes: list[str]) -> tuple[str, str]:
    """Split ``origin/feature/x`` into remote and branch using known remotes."""
    for remote in sorted(remotes, key=len, reverse=True):
        if upstream.startswith(remote + "/"):
            return remote, upstream[len(remote) + 1 :]
    remote, _, name = upstream.partition("/")
    return remote, name


def parse_porcelain_status(
    text: str, root: Path, remotes: list[str]
) -> tuple[Head, list[Change], list[Change], list[Change]]:
    """Parse ``git status --porcelain=v2 --branch`` into HEAD and change lists."""
    name: str | None = None
    commit: str | None = None
    upstream: tuple[str, str] | None = None
    ahead = 0
    behind = 0
    working: list[Change] = []
    index: list[Change] = []
    merge: list[Change] = []

    for line in split_lines(text):
        if line.startswith("# branch.oid "):
            oid = line.split(" ", 2)[2]
            commit = None if oid == "(initial)" else oid
        elif line.startswith("# branch.head "):
            head_name = line.split(" ", 2)[2]
            name = None if head_name == "(detached)" else head_name
        elif line.startswith("# branch.upstream "):
            upstream = _split_upstream(line.split(" ", 2)[2], remotes)
        elif line.startswith("# branch.ab "):
            for part in line.split(" ")[2:]:
                if part.startswith("+"):
                    ahead = int(part[1:])
                elif part.startswith("-"):
                    behind = int(part[1:])
        elif line.startswith("1 ") or line.startswith("2 "):
            # Type 1: "1 XY sub mH mI mW hH hI path"
            # Type 2: "2 XY sub mH mI mW hH hI Xscore path\torigPath"
            is_rename = line.startswith("2 ")
            max_split = 9 if is_rename else 8
            parts = line.split(" ", max_split)
            if len(parts) < max_split + 1:
                continue
            xy = parts[1]
            path_part, _, orig_part = parts[max_split].partition("\t")
            path = root / unquote_path(path_part)
            original = root / unquote_path(orig_part) if orig_part else path

            if xy[0] != ".":
                index.append(_change(path, original, _INDEX_STATUS.get(xy[0])))
            if xy[1] != ".":
                working.append(_change(path, original, _WORKTREE_STATUS.get(xy[1])))
        elif line.startswith("u "):
            parts = line.split(" ", 10)
            if len(parts) >= 11:
                path = root / unquote_path(parts[10])
                status = _UNMERGED_STATUS.get(parts[1], "both_modified")
                merge.append(_change(path, path, status))
        elif line.startswith("? "):
            path = root / unquote_path(line[2:])
            working.append(_change(path, path, "untracked"))

    head = Head(
        name=name,
        commit=commit,
        ahead=ahead,
        behind=behind,
        upstream_remote=upstream[0] if upstream else None,
        upstream_name=upstream[1] if upstream else None,
    )
    return head, working, index, merge


def _change(path: Path, original: Path, status: ChangeStatus | None) -> Change:
    status = status or "modified"
    return Change(
        original_path=original,
        rename_path=path if status in ("renamed", "copied") else None,
        path=path,
        status=status,
    )
