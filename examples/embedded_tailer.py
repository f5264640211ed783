"""Example: Embedding dirtail in another program

This script tails a directory in-process and reacts to alert and lifecycle
events on the event bus instead of ringing the terminal bell.

Usage:
    python examples/embedded_tailer.py /var/log/myapp
"""

import logging
import signal
import sys

from dirtail import ConsoleSink, Coordinator, TailerConfig
from dirtail.events import FILE_STOPPED, FILE_WATCHING, LINE_ALERT, Event

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def on_alert(event: Event) -> None:
    logger.warning(f"[{event.data['prefix']}] alert: {event.data['line']}")


def on_lifecycle(event: Event) -> None:
    logger.info(f"{event.event_type}: {event.data['path']}")


def main() -> int:
    if len(sys.argv) != 2:
        print(__doc__)
        return 1

    config = TailerConfig(
        directory=sys.argv[1],
        filename_pattern=r"(\w+)-\d{8}\.log",  # e.g. api-20240101.log
        alert_pattern=r"\b(ERROR|FATAL)\b",
        max_files=20,
        rescan_every_cycles=40,  # ~30s safety net if change notifications are missed
        final_tail_on_stop=True,
    )
    config.validate()

    coordinator = Coordinator(config, ConsoleSink())
    coordinator.bus.subscribe(LINE_ALERT, on_alert)
    coordinator.bus.subscribe(FILE_WATCHING, on_lifecycle)
    coordinator.bus.subscribe(FILE_STOPPED, on_lifecycle)

    signal.signal(signal.SIGINT, lambda signum, frame: coordinator.request_stop())

    logger.info(f"Tailing {config.directory_path}, press CTRL-C to stop")
    coordinator.run()
    logger.info("Stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
