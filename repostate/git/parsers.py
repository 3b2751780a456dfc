"""Pure functions that turn git text output and control files into models."""

import re
from datetime import UTC, datetime
from email.utils import parseaddr, parsedate_to_datetime
from pathlib import Path

from repostate.exceptions import ControlFileError
from repostate.git.models import Commit, Hunk, Ref

COMMIT_FORMAT = "%H%n%aN%n%aE%n%at%n%ct%n%P%n%B"
REF_FORMAT = "%(refname)%00%(objectname)%00%(*objectname)"

_HUNK_HEADER_RE = re.compile(r"^(@{2,}) ((?:[-+]\d+(?:,\d+)? )+)\1")
_HEX_RE = re.compile(r"^[0-9a-fA-F]{4,64}$")
_MERGE_MSG_RE = re.compile(
    r"^Merge (?:remote-tracking )?(?:branch|branches|commit|commits|tag|tags) "
    r"(.+?)(?: of \S+)?(?: into \S+)?$"
)
_MERGE_NAMES_SPLIT_RE = re.compile(r", | and ")
_PATCH_PREFIX_RE = re.compile(r"^\[PATCH[^\]]*\]\s*")
_MBOX_FROM_RE = re.compile(r"^From ([0-9a-fA-F]{4,64}) ")
_OCTAL_ESCAPE_RE = re.compile(r"[0-7]{3}")
_C_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "t": "\t",
    "n": "\n",
    "v": "\v",
    "f": "\f",
    "r": "\r",
    '"': '"',
    "\\": "\\",
}

# Todo actions that name a commit; the rest (exec, label, ...) carry none.
_COMMIT_ACTIONS = frozenset(
    "p pick r reword e edit s squash f fixup d drop revert".split()
)
_NON_COMMIT_ACTIONS = frozenset(
    "x exec b break l label t reset m merge u update-ref noop".split()
)


def strip_final_newline(text: str) -> str:
    """Normalize CRLF line endings and drop a single trailing line break."""
    text = text.replace("\r\n", "\n")
    return text[:-1] if text.endswith("\n") else text


def split_lines(text: str) -> list[str]:
    text = strip_final_newline(text)
    return text.split("\n") if text else []


def short_hash(commit_id: str, length: int = 7) -> str:
    return commit_id[:length]


def unquote_path(text: str) -> str:
    """Undo git's C-style quoting of a path; unquoted paths pass through.

    Even with ``core.quotePath=false`` git quotes paths containing control
    characters, double quotes or backslashes.
    """
    if len(text) < 2 or text[0] != '"' or text[-1] != '"':
        return text
    body = text[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch != "\\":
            out += ch.encode("utf-8")
            i += 1
        elif _OCTAL_ESCAPE_RE.match(body, i + 1):
            out.append(int(body[i + 1 : i + 4], 8))
            i += 4
        elif body[i + 1 : i + 2] in _C_ESCAPES:
            out += _C_ESCAPES[body[i + 1]].encode("utf-8")
            i += 2
        else:
            out += b"\\"
            i += 1
    return out.decode("utf-8", errors="replace")


def _timestamp(value: str) -> datetime | None:
    try:
        return datetime.fromtimestamp(int(value), UTC)
    except ValueError:
        return None


def parse_commit_records(text: str) -> list[Commit]:
    """Parse NUL-separated records produced with ``--format=COMMIT_FORMAT -z``."""
    commits: list[Commit] = []
    for record in text.split("\x00"):
        record = record.lstrip("\n")
        if not record.strip():
            continue
        parts = record.split("\n", 6)
        if len(parts) < 6:
            continue
        hash_, name, email, author_ts, commit_ts, parents = parts[:6]
        message = parts[6] if len(parts) == 7 else ""
        commits.append(
            Commit(
                hash=hash_,
                message=message.rstrip("\n"),
                parents=parents.split(),
                author_name=name or None,
                author_email=email or None,
                author_date=_timestamp(author_ts),
                commit_date=_timestamp(commit_ts),
            )
        )
    return commits


def parse_refs(text: str) -> list[Ref]:
    """Parse ``git for-each-ref --format=REF_FORMAT`` output."""
    refs: list[Ref] = []
    for line in split_lines(text):
        parts = line.split("\x00")
        if len(parts) < 2:
            continue
        refname, objectname = parts[0], parts[1]
        peeled = parts[2] if len(parts) > 2 else ""
        if refname.startswith("refs/heads/"):
            refs.append(
                Ref(name=refname[len("refs/heads/") :], commit=objectname, type="head")
            )
        elif refname.startswith("refs/tags/"):
            refs.append(
                Ref(
                    name=refname[len("refs/tags/") :],
                    commit=peeled or objectname,
                    type="tag",
                )
            )
        elif refname.startswith("refs/remotes/"):
            rest = refname[len("refs/remotes/") :]
            remote, sep, _ = rest.partition("/")
            if not sep:
                continue
            refs.append(
                Ref(name=rest, commit=objectname, type="remote_head", remote=remote)
            )
    return refs


def diff_to_hunks(diff: str, path: Path) -> list[Hunk]:
    """Split a unified diff into hunks, each remembering the file header."""
    lines = split_lines(diff)
    header_lines: list[str] = []
    hunk_lines: list[list[str]] = []

    for line in lines:
        if _HUNK_HEADER_RE.match(line):
            hunk_lines.append([line])
        elif hunk_lines:
            hunk_lines[-1].append(line)
        else:
            header_lines.append(line)

    diff_header = "\n".join(header_lines)
    hunks: list[Hunk] = []
    for block in hunk_lines:
        old_start, old_lines, new_start, new_lines = _hunk_ranges(block[0])
        hunks.append(
            Hunk(
                path=path,
                diff_header=diff_header,
                header=block[0],
                text="\n".join(block),
                old_start=old_start,
                old_lines=old_lines,
                new_start=new_start,
                new_lines=new_lines,
            )
        )
    return hunks


def _hunk_ranges(header: str) -> tuple[int, int, int, int]:
    match = _HUNK_HEADER_RE.match(header)
    if match is None:
        raise ValueError(f"not a hunk header: {header!r}")
    old: tuple[int, int] | None = None
    new = (0, 0)
    for token in match.group(2).split():
        start, _, count = token[1:].partition(",")
        parsed = (int(start), int(count) if count else 1)
        if token[0] == "-" and old is None:
            old = parsed
        elif token[0] == "+":
            new = parsed
    old = old or (0, 0)
    return old[0], old[1], new[0], new[1]


def parse_merge_status(
    merge_head_text: str, merge_msg_text: str
) -> tuple[str, list[str]] | None:
    """Return the merged commit id and the branch names named in MERGE_MSG."""
    heads = split_lines(merge_head_text)
    msg_lines = split_lines(merge_msg_text)
    if not heads or not msg_lines:
        return None
    merge_head = heads[0].strip()
    if not _HEX_RE.match(merge_head):
        return None

    match = _MERGE_MSG_RE.match(msg_lines[0].strip())
    if match is None:
        return None
    names = [
        name.strip().strip("'\"")
        for name in _MERGE_NAMES_SPLIT_RE.split(match.group(1))
    ]
    return merge_head, [n for n in names if n]


def parse_sequencer_todo(todo_text: str | None) -> list[Commit]:
    """Parse a sequencer or rebase todo list, oldest step first.

    Raises ControlFileError for lines that are neither comments, known
    commit-less steps, nor ``<action> <hash> <subject>``.
    """
    if not todo_text:
        return []

    commits: list[Commit] = []
    for line in split_lines(todo_text):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        action, *rest = line.split()
        if action in _NON_COMMIT_ACTIONS:
            continue
        if action not in _COMMIT_ACTIONS:
            raise ControlFileError(f"unknown todo action: {action!r}")
        # fixup -C <hash> / fixup -c <hash>
        while rest and rest[0].startswith("-"):
            rest = rest[1:]
        if not rest or not _HEX_RE.match(rest[0]):
            raise ControlFileError(f"todo line has no commit: {line!r}")
        commits.append(Commit(hash=rest[0], message=" ".join(rest[1:])))
    return commits


def commit_detail_text_to_commit(text: str) -> Commit:
    """Parse the mailbox header of a ``rebase-apply/NNNN`` patch file."""
    lines = split_lines(text)
    if not lines:
        raise ControlFileError("empty patch file")

    match = _MBOX_FROM_RE.match(lines[0])
    if match is None:
        raise ControlFileError(f"patch file has no commit id: {lines[0]!r}")

    headers: dict[str, str] = {}
    current: str | None = None
    for line in lines[1:]:
        if not line:
            break
        if line[0] in " \t" and current is not None:
            headers[current] += " " + line.strip()
            continue
        key, sep, value = line.partition(":")
        if not sep:
            break
        current = key.strip().lower()
        headers[current] = value.strip()

    name, email = parseaddr(headers.get("from", ""))
    date: datetime | None = None
    if "date" in headers:
        try:
            date = parsedate_to_datetime(headers["date"])
        except (TypeError, ValueError):
            date = None

    return Commit(
        hash=match.group(1),
        message=_PATCH_PREFIX_RE.sub("", headers.get("subject", "")),
        author_name=name or None,
        author_email=email or None,
        author_date=date,
    )
