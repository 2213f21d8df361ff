"""Runtime configuration read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class RelayConfig:
    webhook_url: str
    port: int = 3000
    host: str = "0.0.0.0"
    webhook_timeout: float | None = None
    transport_url: str = "http://localhost:8080"
    scratch_dir: str = "temp"
    reply_delay_min_ms: int = 2000
    reply_delay_max_ms: int = 4000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> RelayConfig:
        """Build the config from the environment. WEBHOOK_URL is required."""
        timeout = os.environ.get("WEBHOOK_TIMEOUT")
        return cls(
            webhook_url=os.environ["WEBHOOK_URL"],
            port=int(os.environ.get("PORT", "3000")),
            host=os.environ.get("HOST", "0.0.0.0"),
            webhook_timeout=float(timeout) if timeout else None,
            transport_url=os.environ.get("TRANSPORT_URL", "http://localhost:8080"),
            # Relative paths resolve against the process working directory
            scratch_dir=os.environ.get("SCRATCH_DIR", "temp"),
            reply_delay_min_ms=int(os.environ.get("REPLY_DELAY_MIN_MS", "2000")),
            reply_delay_max_ms=int(os.environ.get("REPLY_DELAY_MAX_MS", "4000")),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
        )
