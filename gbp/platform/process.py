"""Subprocess execution returning Result values.

Usage:
    match run(["git", "--version"], cwd=Path(".")):
        case Ok(stdout):
            print(stdout)
        case Err(error):
            print(f"Failed: {error}")
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from gbp.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that exited non-zero, timed out or could not start.

    Attributes:
        command: The command that was executed.
        returncode: Exit code, -1 when the process never completed.
        stdout: Standard output (may be empty).
        stderr: Standard error or the failure reason.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        shown = " ".join(self.command[:3]) + (" ..." if len(self.command) > 3 else "")
        summary = f"{shown} failed (exit {self.returncode})"
        detail = self.stderr.strip()
        return f"{summary}: {detail}" if detail else summary


def _failed(
    cmd: Sequence[str], returncode: int, stderr: str, stdout: str = ""
) -> Err[ProcessError]:
    return Err(ProcessError(tuple(cmd), returncode, stdout, stderr))


def run(
    cmd: Sequence[str],
    cwd: Path,
    *,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run ``cmd`` in ``cwd`` and return its stdout.

    ``env`` entries are layered over the current environment.
    """
    merged = {**os.environ, **env} if env else None
    try:
        proc = subprocess.run(
            list(cmd),
            cwd=str(cwd),
            env=merged,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return _failed(cmd, -1, f"Command timed out after {timeout}s")
    except OSError as e:
        return _failed(cmd, -1, str(e))

    if proc.returncode != 0:
        return _failed(cmd, proc.returncode, proc.stderr, proc.stdout)
    return Ok(proc.stdout)
