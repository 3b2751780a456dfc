"""Pure functions to format a snapshot as plain text."""

from repostate.git.models import (
    Change,
    Commit,
    CommitRange,
    RebasingState,
    RepositorySnapshot,
    UpstreamRef,
)
from repostate.git.parsers import short_hash

_STATUS_CODE = {
    "modified": "M",
    "added": "A",
    "deleted": "D",
    "renamed": "R",
    "copied": "C",
    "type_changed": "T",
    "untracked": "?",
    "intent_to_add": "N",
    "added_by_us": "AU",
    "added_by_them": "UA",
    "deleted_by_us": "DU",
    "deleted_by_them": "UD",
    "both_added": "AA",
    "both_deleted": "DD",
    "both_modified": "UU",
}


def _commit_line(commit: Commit) -> str:
    return f"{short_hash(commit.hash)} {commit.subject}"


def _ref_line(label: str, ref: UpstreamRef) -> str:
    line = f"{label}: {ref.remote}/{ref.name}"
    if ref.commit:
        line += f"  {ref.commit.subject}"
    if ref.rebase:
        line += "  (rebase)"
    return line


def _range_section(title: str, commits: CommitRange | None) -> list[str]:
    if not commits or not commits.commits:
        return []
    count = str(len(commits.commits))
    if commits.truncated:
        count += "+"
    lines = ["", f"{title} ({count}):"]
    lines.extend(f"  {_commit_line(c)}" for c in commits.commits)
    return lines


def _change_section(title: str, changes: list[Change]) -> list[str]:
    if not changes:
        return []
    lines = ["", f"{title} ({len(changes)}):"]
    for change in changes:
        code = _STATUS_CODE.get(change.status, "?")
        lines.append(f"  {code:<2} {change.relative_path}")
    return lines


def _operation_section(snapshot: RepositorySnapshot) -> list[str]:
    op = snapshot.operation
    if op is None:
        return []
    lines = [""]
    if isinstance(op, RebasingState):
        lines.append(f"Rebasing {op.orig_branch_name} onto {op.onto.name}:")
        lines.extend(f"  pick {_commit_line(c)}" for c in op.upcoming_commits)
        lines.append(f"  join {_commit_line(op.current_commit)}")
        lines.extend(f"  done {_commit_line(c)}" for c in op.done_commits)
    elif op.kind == "merging":
        lines.append(f"Merging {', '.join(op.merging_branches)}:")
        lines.extend(f"  {_commit_line(c)}" for c in op.commits)
    else:
        verb = "Cherry Picking" if op.kind == "cherry_picking" else "Reverting"
        lines.append(f"{verb}:")
        lines.extend(f"  pick {_commit_line(c)}" for c in op.upcoming_commits)
        lines.append(f"  join {_commit_line(op.current_commit)}")
        lines.append(f"  onto {_commit_line(op.original_head)}")
    return lines


def format_snapshot(snapshot: RepositorySnapshot) -> str:
    """Format a RepositorySnapshot the way a status buffer lays it out."""
    head = snapshot.head
    lines: list[str] = []

    head_line = f"Head: {head.name or '(detached)'}"
    if head.commit_details:
        head_line += f"  {head.commit_details.subject}"
    elif head.commit is None:
        head_line += "  (no commits yet)"
    lines.append(head_line)
    if head.upstream:
        lines.append(_ref_line("Merge", head.upstream))
    if head.push_remote:
        lines.append(_ref_line("Push", head.push_remote))
    if head.tag:
        lines.append(f"Tag: {head.tag.name}")

    lines.extend(_operation_section(snapshot))
    lines.extend(_change_section("Untracked files", snapshot.untracked_files))
    lines.extend(_change_section("Unstaged changes", snapshot.working_tree_changes))
    lines.extend(_change_section("Unmerged changes", snapshot.merge_changes))
    lines.extend(_change_section("Staged changes", snapshot.index_changes))

    if snapshot.stashes:
        lines.append("")
        lines.append(f"Stashes ({len(snapshot.stashes)}):")
        for stash in snapshot.stashes:
            lines.append(f"  stash@{{{stash.index}}} {stash.description}")

    if head.upstream:
        lines.extend(_range_section("Unmerged into upstream", head.upstream.ahead))
        lines.extend(_range_section("Unpulled from upstream", head.upstream.behind))
    if head.push_remote:
        push = head.push_remote
        lines.extend(_range_section("Unpushed to push remote", push.ahead))
        lines.extend(_range_section("Unpulled from push remote", push.behind))

    if snapshot.log:
        lines.append("")
        lines.append("Recent commits:")
        lines.extend(f"  {_commit_line(c)}" for c in snapshot.log[:10])

    return "\n".join(lines)
