"""Error payloads and CLI exit codes.

Every failure in the publish pipeline is one of three frozen dataclasses:

- ConfigError: bad or missing package.json fields, missing token,
  invalid ``.pregyp.toml``
- FileSystemError: stage directory missing, empty, or unreadable
- RemoteError: GitHub API failures (transport, auth, validation)

They are carried inside ``Err`` and only turned into an exit code at the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

__all__ = [
    "ConfigError",
    "ErrorCode",
    "FileSystemError",
    "PublishError",
    "RemoteError",
    "exit_code_for",
]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (bad package.json, missing token, bad arguments)
    - 4: Network error (GitHub API unreachable or rejected the request)
    - 5: I/O error (stage directory missing or empty, unreadable file)
    """

    OK = 0
    USER_ERROR = 1
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Configuration could not be loaded or failed validation."""

    message: str
    path: Path | None = None
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


@dataclass(frozen=True, slots=True)
class FileSystemError:
    """Staged files could not be listed or read."""

    message: str
    path: Path | None = None
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


@dataclass(frozen=True, slots=True)
class RemoteError:
    """A GitHub API call failed.

    Attributes:
        message: What was being attempted
        status: HTTP status code (0 for network errors)
        hint: Server-provided detail, when any
    """

    message: str
    status: int = 0
    hint: str | None = None

    def pretty(self) -> str:
        text = f"{self.message} (HTTP {self.status})" if self.status else self.message
        if self.hint:
            return f"{text} (hint: {self.hint})"
        return text


type PublishError = ConfigError | FileSystemError | RemoteError


def exit_code_for(error: PublishError) -> ErrorCode:
    """Map a publish error to its process exit code."""
    match error:
        case ConfigError():
            return ErrorCode.USER_ERROR
        case FileSystemError():
            return ErrorCode.IO_ERROR
        case RemoteError():
            return ErrorCode.NETWORK_ERROR
