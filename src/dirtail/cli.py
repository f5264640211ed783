"""Command-line entry point for dirtail."""

from __future__ import annotations

import argparse
import logging
import signal
from collections.abc import Sequence
from typing import Any

from .config import TailerConfig, load_config_file
from .coordinator import Coordinator
from .errors import EXIT_OK, ShutdownHookError, TailerError, TooManyFilesError
from .events.models import LINE_ALERT
from .logging_manager import LoggingManager
from .sinks import ConsoleSink

logger = logging.getLogger(__name__)

DESCRIPTION = (
    "Monitor a directory for the newest files that match a pattern and print any lines "
    "added to those files on the console. Optionally emit a beep when a line contains "
    "a matching 'beep pattern'."
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dirtail", description=DESCRIPTION)
    parser.add_argument(
        "directory",
        nargs="?",
        help="The directory to search for log files. Files whose name matches the "
        "'pattern' regular expression will be monitored.",
    )
    parser.add_argument(
        "-p",
        "--pattern",
        dest="filename_pattern",
        help="Regex for matching file names. The identifier that uniquely identifies each "
        "file type must be enclosed in parenthesis as the first capturing group.",
    )
    parser.add_argument(
        "-b", "--beep", dest="alert_pattern", help="Regex that triggers a beep when an output line matches."
    )
    parser.add_argument(
        "-n",
        "--nobeep",
        action="store_true",
        help="Disable checking for the 'beep' regular expression.",
    )
    parser.add_argument("-m", "--max", dest="max_files", type=int, help="Maximum number of files to match")
    parser.add_argument(
        "-i", "--interval", dest="poll_interval_seconds", type=float, help="Polling interval in seconds"
    )
    parser.add_argument(
        "-r",
        "--rescan-every",
        dest="rescan_every_cycles",
        type=int,
        help="Rescan the directory after this many polls without a change notification (0 disables)",
    )
    parser.add_argument("-c", "--config", help="YAML configuration file")
    parser.add_argument("--log-file", help="Write JSON diagnostic logs to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug diagnostics on stderr")
    return parser


def build_config(args: argparse.Namespace) -> TailerConfig:
    """Merge defaults, the optional config file, and command-line values."""
    base = load_config_file(args.config) if args.config else TailerConfig()
    overrides: dict[str, Any] = {
        "directory": args.directory,
        "filename_pattern": args.filename_pattern,
        "alert_pattern": args.alert_pattern,
        "max_files": args.max_files,
        "poll_interval_seconds": args.poll_interval_seconds,
        "rescan_every_cycles": args.rescan_every_cycles,
        "log_file": args.log_file,
    }
    if args.nobeep:
        overrides["alert_enabled"] = False
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    return base.merged(overrides)


def install_shutdown_hooks(coordinator: Coordinator) -> None:
    """Route SIGINT/SIGTERM (and SIGBREAK on Windows) to ``request_stop``.

    Raises:
        ShutdownHookError: If a handler cannot be installed
    """

    def _handle(signum: int, frame: Any) -> None:
        coordinator.request_stop()

    signals = [signal.SIGINT, signal.SIGTERM]
    if hasattr(signal, "SIGBREAK"):
        signals.append(signal.SIGBREAK)

    try:
        for sig in signals:
            signal.signal(sig, _handle)
    except (ValueError, OSError) as e:
        raise ShutdownHookError(f"Unable to add shutdown hook: {e}") from e


def print_banner(sink: ConsoleSink, config: TailerConfig) -> None:
    sink.write_raw(f"Scanning directory:   {config.directory_path}")
    sink.write_raw(f"File name regex:      {config.filename_pattern}")
    if config.alert_enabled:
        sink.write_raw(f"Beep if line matches: {config.alert_pattern}")


def print_too_many_files(sink: ConsoleSink, error: TooManyFilesError) -> None:
    sink.write_raw(
        f"Too many files match the given pattern (maximum number of files is "
        f"{error.max_files}, use the -m option to increase the limit)."
    )
    sink.write_raw(f"{'Unique Prefix':<25} : File Name")
    sink.write_raw(f"{'=' * 18:<25} : {'=' * 49}")
    for prefix in sorted(error.scanned):
        sink.write_raw(f"{prefix:<25} : {error.scanned[prefix].filename}")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the tailer; returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    sink = ConsoleSink()

    if not args.directory and not args.config:
        parser.print_help()
        return EXIT_OK

    try:
        config = build_config(args)
        config.validate()
    except TailerError as e:
        sink.write_raw(str(e))
        return e.exit_code

    log_manager = LoggingManager(config.log_level, config.log_file)
    try:
        print_banner(sink, config)
        coordinator = Coordinator(config, sink)
        if config.alert_enabled:
            coordinator.bus.subscribe(LINE_ALERT, sink.ring_bell)

        install_shutdown_hooks(coordinator)
        sink.write_raw("Press CTRL-C to exit.")
        coordinator.run()
        if coordinator.stop_requested:
            sink.notice("Shutdown")
    except TooManyFilesError as e:
        print_too_many_files(sink, e)
        return e.exit_code
    except TailerError as e:
        logger.error(f"dirtail stopped: {e}")
        sink.write_raw(str(e))
        return e.exit_code
    finally:
        log_manager.shutdown()

    return EXIT_OK
