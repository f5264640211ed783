"""Error hierarchy for dirtail.

Startup errors are fatal: the CLI maps each one to its ``exit_code`` and the
process exits without entering the polling loop. ``TailReadError`` is the only
recoverable error; it never escapes a tail cycle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .tailing.models import FileRecord

EXIT_OK = 0


class TailerError(Exception):
    """Base exception for dirtail failures."""

    exit_code = 1


class InvalidDirectoryError(TailerError):
    """Target path does not exist or is not a directory."""

    exit_code = 1


class InvalidPatternError(TailerError):
    """Filename or alert pattern does not compile, or lacks a capture group."""

    exit_code = 2


class ShutdownHookError(TailerError):
    """Signal handlers for a clean shutdown could not be installed."""

    exit_code = 3


class WatchSetupError(TailerError):
    """The directory-change watch could not be established."""

    exit_code = 4


class WatchFailedError(TailerError):
    """The directory-change watch died while waiting for activity."""

    exit_code = 5


class DirectoryScanError(TailerError):
    """The watched directory could not be listed."""

    exit_code = 1


class TooManyFilesError(TailerError):
    """The initial scan matched more prefixes than the configured maximum."""

    exit_code = 6

    def __init__(self, max_files: int, scanned: dict[str, FileRecord]):
        super().__init__(
            f"Too many files match the given pattern "
            f"(maximum number of files is {max_files}, found {len(scanned)})"
        )
        self.max_files = max_files
        self.scanned = scanned


class ConfigError(TailerError):
    """Configuration file or value is invalid."""

    exit_code = 7


class TailReadError(TailerError):
    """A tracked file could not be opened, stat'ed, or read this cycle."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
