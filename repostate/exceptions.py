"""Shared exception types for repostate."""


class RepoStateError(Exception):
    """Base exception for all repostate errors."""


class ConfigError(RepoStateError):
    """Configuration is invalid or missing."""


class GitCommandError(RepoStateError):
    """A git invocation failed or exited non-zero."""

    def __init__(
        self, args: tuple[str, ...], returncode: int, stderr: str = ""
    ) -> None:
        self.args_ = args
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or f"exit code {returncode}"
        super().__init__(f"git {' '.join(args)}: {detail}")


class NotARepositoryError(RepoStateError):
    """The path is not inside a git working copy."""


class ControlFileError(RepoStateError):
    """A control-directory file exists but could not be parsed."""
