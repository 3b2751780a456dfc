"""Data models for repository state."""

from datetime import datetime
from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

ChangeStatus = Literal[
    "modified",
    "added",
    "deleted",
    "renamed",
    "copied",
    "type_changed",
    "untracked",
    "intent_to_add",
    "added_by_us",
    "added_by_them",
    "deleted_by_us",
    "deleted_by_them",
    "both_added",
    "both_deleted",
    "both_modified",
]

RefType = Literal["head", "tag", "remote_head"]


class Commit(BaseModel):
    model_config = ConfigDict(frozen=True)

    hash: str
    message: str = ""
    parents: list[str] = []
    author_name: str | None = None
    author_email: str | None = None
    author_date: datetime | None = None
    commit_date: datetime | None = None

    @property
    def subject(self) -> str:
        return self.message.split("\n", 1)[0]


class CommitRange(BaseModel):
    """Commits in ``from..to``, newest first, capped at the requested size."""

    model_config = ConfigDict(frozen=True)

    commits: list[Commit] = []
    truncated: bool = False


class Hunk(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: Path
    diff_header: str
    header: str
    text: str
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int


class Change(BaseModel):
    """One changed path.

    ``original_path`` and ``rename_path`` differ only for renames and copies;
    ``path`` is always the current location.
    """

    model_config = ConfigDict(frozen=True)

    original_path: Path
    rename_path: Path | None = None
    path: Path
    status: ChangeStatus
    relative_path: str = ""
    diff: str | None = None
    hunks: list[Hunk] | None = None


class Ref(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    commit: str | None = None
    type: RefType
    remote: str | None = None


class Remote(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    fetch_url: str | None = None
    push_url: str | None = None
    branches: list[Ref] = []


class Submodule(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    url: str


class Stash(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    description: str


class UpstreamRef(BaseModel):
    """An upstream or push-remote counterpart of the current branch."""

    model_config = ConfigDict(frozen=True)

    remote: str
    name: str
    commit: Commit | None = None
    ahead: CommitRange | None = None
    behind: CommitRange | None = None
    rebase: bool = False


class Head(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str | None = None
    commit: str | None = None
    ahead: int = 0
    behind: int = 0
    upstream_remote: str | None = None
    upstream_name: str | None = None

    @property
    def detached(self) -> bool:
        return self.name is None


class Branch(BaseModel):
    """The checked-out branch with everything the status view shows about it."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    commit: str | None = None
    commit_details: Commit | None = None
    tag: Ref | None = None
    upstream: UpstreamRef | None = None
    push_remote: UpstreamRef | None = None


class LiveState(BaseModel):
    """Copy of the cheap ``git status`` view taken at the start of a refresh."""

    model_config = ConfigDict(frozen=True)

    root: Path
    git_dir: Path
    head: Head
    working_tree_changes: list[Change] = []
    index_changes: list[Change] = []
    merge_changes: list[Change] = []
    remotes: list[Remote] = []
    submodules: list[Submodule] = []
    rebase_commit: Commit | None = None


class MergingState(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["merging"] = "merging"
    merging_branches: list[str]
    commits: list[Commit] = []


class RebaseOnto(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    commit_details: Commit


class RebasingState(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["rebasing"] = "rebasing"
    interactive: bool
    current_commit: Commit
    orig_branch_name: str
    onto: RebaseOnto
    done_commits: list[Commit] = []
    upcoming_commits: list[Commit] = []


class CherryPickingState(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["cherry_picking"] = "cherry_picking"
    original_head: Commit
    current_commit: Commit
    upcoming_commits: list[Commit] = []


class RevertingState(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["reverting"] = "reverting"
    original_head: Commit
    current_commit: Commit
    upcoming_commits: list[Commit] = []


OperationState = Annotated[
    MergingState | RebasingState | CherryPickingState | RevertingState,
    Field(discriminator="kind"),
]


class RepositorySnapshot(BaseModel):
    """Everything a status view needs, built fresh on every refresh."""

    model_config = ConfigDict(frozen=True)

    root: Path
    head: Branch
    log: list[Commit] = []
    stashes: list[Stash] = []
    working_tree_changes: list[Change] = []
    index_changes: list[Change] = []
    merge_changes: list[Change] = []
    untracked_files: list[Change] = []
    operation: OperationState | None = None
    refs: list[Ref] = []
    branches: list[Ref] = []
    tags: list[Ref] = []
    remotes: list[Remote] = []
    submodules: list[Submodule] = []
