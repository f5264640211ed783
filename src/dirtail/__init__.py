"""dirtail - follow the newest log file of every prefix in a directory.

Example:
    >>> from dirtail import Coordinator, TailerConfig
    >>> from dirtail.sinks import ConsoleSink
    >>> config = TailerConfig(directory="/var/log/app", filename_pattern=r"(worker.*)_\\d+\\.log")
    >>> config.validate()
    >>> Coordinator(config, ConsoleSink()).run()
"""

from __future__ import annotations

from .config import TailerConfig, load_config_file
from .coordinator import Coordinator, CoordinatorState
from .errors import TailerError
from .signals import SignalState
from .sinks import ConsoleSink, LineSink, RecordingSink
from .watcher import DirectoryWatcher

__all__ = [
    "TailerConfig",
    "load_config_file",
    "Coordinator",
    "CoordinatorState",
    "TailerError",
    "SignalState",
    "LineSink",
    "ConsoleSink",
    "RecordingSink",
    "DirectoryWatcher",
]

__version__ = "0.1.0"
