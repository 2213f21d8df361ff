"""Shared Pydantic data models for the chat relay."""

from __future__ import annotations

import time
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

GROUP_SUFFIX = "@g.us"

# --- Enums ---


class MessageKind(str, Enum):
    TEXT = "text"
    VOICE = "voice"
    OTHER = "other"

    @classmethod
    def from_raw_type(cls, raw_type: str) -> MessageKind:
        """Map a transport message type (chat, ptt, audio, ...) to a kind."""
        if raw_type == "chat":
            return cls.TEXT
        if raw_type in ("ptt", "audio"):
            return cls.VOICE
        return cls.OTHER


class DashboardEventType(str, Enum):
    LOG = "log"
    STATS = "stats"
    STATUS = "status"
    QR = "qr"


# --- Transport Models ---


class InboundEvent(BaseModel):
    """A chat message as delivered by the transport. Immutable once received."""

    model_config = ConfigDict(frozen=True)

    sender_id: str
    raw_type: str
    kind: MessageKind = MessageKind.OTHER
    body: str | None = None
    media_ref: str | None = None
    is_self_originated: bool = False
    is_group_originated: bool = False
    is_status_broadcast: bool = False

    @model_validator(mode="before")
    @classmethod
    def _derive_flags(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "kind" not in data and "raw_type" in data:
            data["kind"] = MessageKind.from_raw_type(data["raw_type"])
        sender = data.get("sender_id")
        # Non-string senders are left for field validation to reject
        if isinstance(sender, str) and sender.endswith(GROUP_SUFFIX):
            data["is_group_originated"] = True
        return data


class ConnectionState(BaseModel):
    ready: bool = False
    authenticated: bool = False


# --- Dashboard Models ---


def _now_ms() -> int:
    return int(time.time() * 1000)


class StatsSnapshot(BaseModel):
    """Point-in-time copy of the relay counters.

    Serialized with camelCase keys because that is what the dashboard
    client reads.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    messages_received: int = Field(default=0, ge=0, alias="messagesReceived")
    replies_sent: int = Field(default=0, ge=0, alias="repliesSent")
    errors: int = Field(default=0, ge=0)
    start_time: int = Field(default_factory=_now_ms, alias="startTime")

    def to_wire(self) -> dict[str, int]:
        return self.model_dump(by_alias=True)

    def uptime_seconds(self, now_ms: int | None = None) -> int:
        now_ms = _now_ms() if now_ms is None else now_ms
        return max(0, (now_ms - self.start_time) // 1000)


class DashboardEvent(BaseModel):
    """Envelope pushed to every dashboard observer."""

    model_config = ConfigDict(frozen=True)

    event: DashboardEventType
    data: Any = None

    def to_wire(self) -> dict[str, Any]:
        return {"event": self.event.value, "data": self.data}
