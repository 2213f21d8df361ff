"""Process-wide relay state: counters, recent log lines, connection status.

A single ``RelayState`` is created at startup and handed to every component
that needs it. Each mutation publishes the updated view to the broadcaster
and returns it.
"""

from __future__ import annotations

from collections import deque

from src.models import ConnectionState, DashboardEventType, StatsSnapshot
from src.relay.broadcaster import Broadcaster

MAX_LOGS = 100


class LogRing:
    """Bounded FIFO of log lines; the oldest entry is evicted first."""

    def __init__(self, capacity: int = MAX_LOGS) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._lines: deque[str] = deque(maxlen=capacity)

    def append(self, line: str) -> None:
        self._lines.append(line)

    def snapshot(self) -> list[str]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)


class RelayState:
    """Owns the mutable stats, log ring and connection state."""

    def __init__(
        self,
        broadcaster: Broadcaster | None = None,
        log_capacity: int = MAX_LOGS,
    ) -> None:
        self.broadcaster = broadcaster or Broadcaster()
        self.logs = LogRing(log_capacity)
        self._stats = StatsSnapshot()
        self._connection = ConnectionState()
        self._pending_qr: str | None = None
        self._accepting = False

    # --- Read side ---

    @property
    def stats(self) -> StatsSnapshot:
        return self._stats

    @property
    def connection(self) -> ConnectionState:
        return self._connection.model_copy()

    @property
    def ready(self) -> bool:
        """Whether inbound messages are relayed.

        Latches on the first ready status. Later lifecycle events change only
        the status shown on the dashboard.
        """
        return self._accepting

    @property
    def pending_qr(self) -> str | None:
        return self._pending_qr

    def snapshot(self) -> dict[str, object]:
        """JSON view served by the stats endpoint."""
        return {**self._stats.to_wire(), "logs": self.logs.snapshot()}

    # --- Counters ---

    def record_received(self) -> StatsSnapshot:
        return self._bump(messages_received=self._stats.messages_received + 1)

    def record_reply_sent(self) -> StatsSnapshot:
        return self._bump(replies_sent=self._stats.replies_sent + 1)

    def record_error(self) -> StatsSnapshot:
        return self._bump(errors=self._stats.errors + 1)

    def _bump(self, **changes: int) -> StatsSnapshot:
        self._stats = self._stats.model_copy(update=changes)
        self.broadcaster.publish(DashboardEventType.STATS, self._stats.to_wire())
        return self._stats

    # --- Logs ---

    def append_log(self, line: str) -> str:
        self.logs.append(line)
        self.broadcaster.publish(DashboardEventType.LOG, line)
        return line

    # --- Connection lifecycle ---

    def set_connection(self, *, ready: bool, authenticated: bool) -> ConnectionState:
        self._connection = ConnectionState(ready=ready, authenticated=authenticated)
        if ready:
            self._accepting = True
        if authenticated:
            self._pending_qr = None
        self.broadcaster.publish(DashboardEventType.STATUS, self._connection.model_dump())
        return self.connection

    def set_qr(self, code: str) -> str:
        self._pending_qr = code
        self.broadcaster.publish(DashboardEventType.QR, code)
        return code
