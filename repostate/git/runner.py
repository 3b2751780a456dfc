"""Async wrapper for raw git CLI invocations."""

import asyncio
import contextlib
from pathlib import Path
from typing import Literal, NamedTuple

import structlog

from repostate.exceptions import GitCommandError

logger = structlog.get_logger()

LogLevel = Literal["none", "error", "debug"]

_DEFAULT_TIMEOUT = 30


class GitOutput(NamedTuple):
    stdout: str
    stderr: str


class GitRunner:
    """Runs git and returns raw text; non-zero exit raises GitCommandError."""

    def __init__(self, binary: str = "git", timeout: int = _DEFAULT_TIMEOUT) -> None:
        self._binary = binary
        self._timeout = timeout

    async def run(
        self, cwd: Path, *args: str, log_level: LogLevel = "error"
    ) -> GitOutput:
        """Execute a git command via asyncio.create_subprocess_exec."""
        if not cwd.is_dir():
            raise GitCommandError(args, 1, f"Directory does not exist: {cwd}")

        cmd = (self._binary, *args)
        logger.debug("git_exec", command=cmd, cwd=str(cwd))

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            raise GitCommandError(
                args, 1, f"{self._binary} is not installed or not in PATH"
            ) from None
        except OSError as e:
            logger.error("git_exec_error", command=cmd, error=str(e))
            raise GitCommandError(args, 1, str(e)) from e

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                proc.communicate(), timeout=self._timeout
            )
        except TimeoutError:
            logger.warning("git_exec_timeout", command=cmd, timeout=self._timeout)
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            raise GitCommandError(
                args, 1, f"Command timed out after {self._timeout}s"
            ) from None

        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")
        returncode = proc.returncode or 0
        if returncode != 0:
            if log_level == "error":
                logger.error(
                    "git_exec_failed",
                    command=cmd,
                    returncode=returncode,
                    stderr=stderr.strip(),
                )
            elif log_level == "debug":
                logger.debug("git_exec_failed", command=cmd, returncode=returncode)
            raise GitCommandError(args, returncode, stderr)
        return GitOutput(stdout, stderr)

    async def get_config(self, cwd: Path, key: str) -> str | None:
        """Return a config value, or None when the key is unset."""
        try:
            out = await self.run(cwd, "config", "--get", key, log_level="none")
        except GitCommandError as e:
            if e.returncode == 1:
                return None
            raise
        return out.stdout.strip() or None
