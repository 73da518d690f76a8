"""Error values and CLI exit codes.

FetchError and ParseError are produced during a report pass and never
escape it: the pass logs them and degrades the affected fields. ConfigError
lives in ``gbp.core.config`` and is fatal at startup.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

__all__ = ["ErrorCode", "FetchError", "ParseError"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success (degraded report rows are still a success)
    - 1: User error (bad config, bad arguments)
    - 4: Network error (server could not bind, etc.)
    - 5: I/O error (config file unreadable)
    """

    OK = 0
    USER_ERROR = 1
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")


@dataclass(frozen=True, slots=True)
class FetchError:
    """Failure talking to an external system.

    Attributes:
        source: Which system failed ("github", "git", "tiles")
        message: Human-readable cause
        target: URL, ref or path that was being fetched
    """

    source: str
    message: str
    target: str = ""

    def __str__(self) -> str:
        if self.target:
            return f"{self.source}: {self.message} ({self.target})"
        return f"{self.source}: {self.message}"


@dataclass(frozen=True, slots=True)
class ParseError:
    """A version string that could not be parsed."""

    value: str
    message: str

    def __str__(self) -> str:
        return f"{self.message}: {self.value!r}"
