"""Tests for plain-text snapshot formatting."""

from pathlib import Path

from repostate.git.models import (
    Branch,
    Change,
    CherryPickingState,
    Commit,
    CommitRange,
    MergingState,
    RebaseOnto,
    RebasingState,
    Ref,
    RepositorySnapshot,
    Stash,
    UpstreamRef,
)
from repostate.status.formatter import format_snapshot
from tests.conftest import sha

ROOT = Path("/r")
TIP = Commit(hash="abcdef0123456789", message="Tip commit\n\nBody")


def _commit(n: int, subject: str) -> Commit:
    return Commit(hash=sha(n), message=subject)


def _change(name: str, status: str) -> Change:
    return Change(
        original_path=ROOT / name, path=ROOT / name, status=status, relative_path=name
    )


def _snapshot(**kwargs) -> RepositorySnapshot:
    kwargs.setdefault("head", Branch(name="main", commit=TIP.hash, commit_details=TIP))
    return RepositorySnapshot(root=ROOT, **kwargs)


def test_head_line():
    assert format_snapshot(_snapshot()) == "Head: main  Tip commit"


def test_unborn_and_detached_heads():
    assert format_snapshot(_snapshot(head=Branch(name="main"))) == (
        "Head: main  (no commits yet)"
    )
    detached = Branch(name=None, commit=TIP.hash, commit_details=TIP)
    assert format_snapshot(_snapshot(head=detached)).startswith("Head: (detached)")


def test_upstream_push_and_tag():
    head = Branch(
        name="main",
        commit=TIP.hash,
        commit_details=TIP,
        tag=Ref(name="v1", commit=TIP.hash, type="tag"),
        upstream=UpstreamRef(
            remote="origin",
            name="main",
            commit=_commit(2, "Upstream"),
            ahead=CommitRange(commits=[_commit(3, "Mine")], truncated=True),
            rebase=True,
        ),
        push_remote=UpstreamRef(remote="fork", name="main"),
    )
    text = format_snapshot(_snapshot(head=head))
    assert "Merge: origin/main  Upstream  (rebase)" in text
    assert "Push: fork/main" in text
    assert "Tag: v1" in text
    assert "Unmerged into upstream (1+):\n  0000000 Mine" in text
    assert "Unpulled from upstream" not in text


def test_change_sections():
    text = format_snapshot(
        _snapshot(
            untracked_files=[_change("notes.txt", "untracked")],
            working_tree_changes=[_change("app.py", "modified")],
            merge_changes=[_change("both.py", "both_modified")],
            index_changes=[_change("new.py", "added")],
        )
    )
    assert "Untracked files (1):\n  ?  notes.txt" in text
    assert "Unstaged changes (1):\n  M  app.py" in text
    assert "Unmerged changes (1):\n  UU both.py" in text
    assert "Staged changes (1):\n  A  new.py" in text
    assert text.index("Untracked files") < text.index("Staged changes")


def test_stashes():
    text = format_snapshot(_snapshot(stashes=[Stash(index=0, description="WIP")]))
    assert "Stashes (1):\n  stash@{0} WIP" in text


def test_rebase_section():
    rebase = RebasingState(
        interactive=True,
        current_commit=_commit(5, "Current"),
        orig_branch_name="topic",
        onto=RebaseOnto(name="main", commit_details=_commit(1, "Base")),
        done_commits=[_commit(4, "Done")],
        upcoming_commits=[_commit(6, "Next")],
    )
    text = format_snapshot(_snapshot(operation=rebase))
    assert (
        "Rebasing topic onto main:\n"
        "  pick 0000000 Next\n"
        "  join 0000000 Current\n"
        "  done 0000000 Done"
    ) in text


def test_merge_and_sequencer_sections():
    merging = MergingState(merging_branches=["a", "b"], commits=[_commit(2, "A")])
    assert "Merging a, b:\n  0000000 A" in format_snapshot(_snapshot(operation=merging))

    picking = CherryPickingState(
        original_head=_commit(1, "Orig"), current_commit=_commit(2, "Picked")
    )
    text = format_snapshot(_snapshot(operation=picking))
    assert "Cherry Picking:\n  join 0000000 Picked\n  onto 0000000 Orig" in text


def test_recent_commits_capped():
    log = [_commit(n, f"c{n}") for n in range(1, 15)]
    text = format_snapshot(_snapshot(log=log))
    assert "Recent commits:" in text
    assert "c10" in text
    assert "c11" not in text
