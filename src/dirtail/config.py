"""Configuration for dirtail.

This module defines the configuration dataclass that controls the tailer,
including the watched directory, the filename and alert patterns, capacity
and polling intervals, plus loading overrides from a YAML file.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, get_args, get_type_hints

import yaml

from .errors import ConfigError, InvalidDirectoryError, InvalidPatternError

logger = logging.getLogger(__name__)

DEFAULT_FILENAME_PATTERN = r"(tfe.*)_\d+\.log"

# something.somethingError:  or  something.somethingException:
DEFAULT_ALERT_PATTERN = r".*[a-zA-Z]+\.[a-zA-Z]+(Exception|Error):"


@dataclass
class TailerConfig:
    """Configuration for the directory tailer.

    Attributes:
        directory: Directory to search for log files.
        filename_pattern: Regex for matching file names. The first capturing
            group is the prefix that identifies each logical log stream.
        alert_pattern: Regex that raises an alert when an output line matches.
        alert_enabled: Whether lines are tested against alert_pattern at all.
        max_files: Maximum number of prefixes tracked at once (default: 10).
        poll_interval_seconds: Sleep between tail cycles (default: 0.75).
        rescan_every_cycles: Rescan the directory after this many cycles
            without a change signal; 0 disables the fallback (default: 0).
        max_line_bytes: Longest line emitted as one record (default: 4096).
        rewind_max_bytes: Files smaller than this are candidates for being
            tailed from the start when first watched (default: 1000).
        rewind_max_age_seconds: ...if created less than this long ago (default: 6).
        shutdown_grace_seconds: How long to wait for the polling worker to
            finish after a stop request (default: 2.0).
        final_tail_on_stop: Run one last tail cycle while draining (default: False).
        log_level: Diagnostic logging level for the console (default: WARNING).
        log_file: Optional rotating JSON diagnostic log file.
    """

    directory: str = ""
    filename_pattern: str = DEFAULT_FILENAME_PATTERN
    alert_pattern: str = DEFAULT_ALERT_PATTERN
    alert_enabled: bool = True
    max_files: int = 10
    poll_interval_seconds: float = 0.75
    rescan_every_cycles: int = 0
    max_line_bytes: int = 4096
    rewind_max_bytes: int = 1000
    rewind_max_age_seconds: float = 6.0
    shutdown_grace_seconds: float = 2.0
    final_tail_on_stop: bool = False
    log_level: str = "WARNING"
    log_file: str | None = None

    @property
    def directory_path(self) -> Path:
        return Path(self.directory)

    @property
    def filename_regex(self) -> re.Pattern[str]:
        return _compile(self.filename_pattern, "file name")

    @property
    def alert_regex(self) -> re.Pattern[str] | None:
        """Compiled alert pattern, or None when alerting is disabled."""
        if not self.alert_enabled:
            return None
        return _compile(self.alert_pattern, "alert")

    def validate(self) -> None:
        """Check the configuration before the tailer starts.

        Raises:
            InvalidDirectoryError: If directory is missing or not a directory
            InvalidPatternError: If a pattern does not compile, or the filename
                pattern has no capturing group
            ConfigError: If a numeric setting is out of range
        """
        if not self.directory:
            raise InvalidDirectoryError("No directory given")
        path = self.directory_path
        if not path.is_dir():
            raise InvalidDirectoryError(f"Not a directory: {path}")

        if self.filename_regex.groups < 1:
            raise InvalidPatternError(
                f"File name pattern needs a capturing group for the prefix: {self.filename_pattern}"
            )
        # compile even when disabled so a typo is reported up front
        _compile(self.alert_pattern, "alert")

        if self.max_files < 1:
            raise ConfigError(f"max_files must be at least 1, got {self.max_files}")
        if self.poll_interval_seconds <= 0:
            raise ConfigError(
                f"poll_interval_seconds must be positive, got {self.poll_interval_seconds}"
            )
        if self.rescan_every_cycles < 0:
            raise ConfigError(
                f"rescan_every_cycles must not be negative, got {self.rescan_every_cycles}"
            )
        if self.max_line_bytes < 2:
            raise ConfigError(f"max_line_bytes must be at least 2, got {self.max_line_bytes}")

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> TailerConfig:
        """Build a config from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        hints = get_type_hints(cls)
        for name, value in data.items():
            _check_type(name, hints[name], value)
        return cls(**data)

    def merged(self, overrides: dict[str, Any]) -> TailerConfig:
        """Return a copy with every non-None override applied."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data.update({k: v for k, v in overrides.items() if v is not None})
        return TailerConfig.from_mapping(data)


def _check_type(name: str, hint: Any, value: Any) -> None:
    allowed = get_args(hint) or (hint,)
    if value is None and type(None) in allowed:
        return
    if isinstance(value, bool):
        ok = bool in allowed
    elif isinstance(value, int):
        ok = int in allowed or float in allowed
    else:
        ok = any(t is not type(None) and isinstance(value, t) for t in allowed)
    if not ok:
        expected = " or ".join("null" if t is type(None) else t.__name__ for t in allowed)
        raise ConfigError(f"{name} must be {expected}, got {value!r}")


def _compile(pattern: str, what: str) -> re.Pattern[str]:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise InvalidPatternError(f"Invalid {what} pattern {pattern!r}: {e}") from e


def load_config_file(config_path: str | Path) -> TailerConfig:
    """Load a configuration from a YAML file.

    Args:
        config_path: Path to a YAML mapping of TailerConfig field names

    Returns:
        TailerConfig with the file's values over the defaults

    Raises:
        ConfigError: If the file is missing, unparsable, or has unknown keys
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse configuration YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file must contain a mapping: {path}")

    logger.debug(f"Loaded configuration from {path}")
    return TailerConfig.from_mapping(data)
