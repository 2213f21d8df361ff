"""Logging setup that mirrors relay log lines onto the dashboard."""

from __future__ import annotations

import logging
import sys
from datetime import datetime

from src.relay.state import RelayState

RELAY_LOGGER = "src"


class DashboardLogHandler(logging.Handler):
    """Append every record to the state's log ring as ``HH:MM:SS message``.

    The ring append publishes a ``log`` event to dashboard observers.
    """

    def __init__(self, state: RelayState, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.state = state

    def emit(self, record: logging.LogRecord) -> None:
        try:
            timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
            self.state.append_log(f"{timestamp} {record.getMessage()}")
        except Exception:
            self.handleError(record)


def configure_logging(state: RelayState, level: int | str = logging.INFO) -> DashboardLogHandler:
    """Send relay logs to stderr and to the dashboard ring.

    Calling this again replaces the dashboard handler instead of stacking
    a second one.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    if not any(getattr(h, "_relay_stream", False) for h in root.handlers):
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        stream._relay_stream = True  # type: ignore[attr-defined]
        root.addHandler(stream)
    root.setLevel(level)

    relay_logger = logging.getLogger(RELAY_LOGGER)
    for handler in list(relay_logger.handlers):
        if isinstance(handler, DashboardLogHandler):
            relay_logger.removeHandler(handler)
    handler = DashboardLogHandler(state)
    relay_logger.addHandler(handler)
    relay_logger.setLevel(level)
    return handler
