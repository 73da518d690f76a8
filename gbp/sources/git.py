"""Minimal git checkout used to mirror the tile metadata repository.

Usage:
    checkout = Checkout(Path(".gbp-cache/tiles"), "https://github.com/acme/tiles")
    match checkout.sync("main"):
        case Ok(sha):
            print(f"at {sha}")
        case Err(e):
            print(f"sync failed: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from gbp.core.result import Err, Ok, Result
from gbp.platform.process import ProcessError
from gbp.platform.process import run as run_process

__all__ = ["Checkout", "GitError"]

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
# Fail instead of waiting for credentials on a terminal nobody watches.
_GIT_ENV = {"GIT_TERMINAL_PROMPT": "0"}


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class Checkout:
    """Shallow clone of ``remote`` kept at ``path``."""

    def __init__(self, path: Path, remote: str) -> None:
        self.path = path
        self.remote = remote

    def exists(self) -> bool:
        return (self.path / ".git").exists()

    def sync(self, ref: str) -> Result[str, GitError]:
        """Clone on first use, otherwise fetch ``ref`` and check it out.

        Returns:
            Ok(commit sha) on success, Err(GitError) on failure
        """
        if not self.exists():
            cloned = self._clone(ref)
            if isinstance(cloned, Err):
                return cloned
        else:
            fetched = self._git("fetch", ["fetch", "--depth", "1", "origin", ref])
            if isinstance(fetched, Err):
                return fetched
            checked_out = self._git("checkout", ["checkout", "--force", "FETCH_HEAD"])
            if isinstance(checked_out, Err):
                return checked_out

        return self.head()

    def head(self) -> Result[str, GitError]:
        result = self._git("rev-parse", ["rev-parse", "HEAD"])
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip())

    def _clone(self, ref: str) -> Result[str, GitError]:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        result = run_process(
            ["git", "clone", "--depth", "1", "--branch", ref, self.remote, str(self.path)],
            cwd=self.path.parent,
            env=_GIT_ENV,
            timeout=_GIT_NETWORK_TIMEOUT_SECONDS,
        )
        return self._map(result, "clone")

    def _git(self, command: str, args: list[str]) -> Result[str, GitError]:
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "clone"}
            else _GIT_TIMEOUT_SECONDS
        )
        result = run_process(
            ["git", "-C", str(self.path), *args], cwd=self.path, env=_GIT_ENV, timeout=timeout
        )
        return self._map(result, command)

    @staticmethod
    def _map(result: Result[str, ProcessError], command: str) -> Result[str, GitError]:
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command=command,
                        message=e.stderr.strip() or e.stdout.strip() or f"{command} failed",
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                return Ok(stdout)
