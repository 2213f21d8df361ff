"""Chat transport contract consumed by the relay."""

from __future__ import annotations

import base64
from abc import ABC, abstractmethod
from dataclasses import dataclass

from src.models import InboundEvent


class TransportSendFailure(Exception):
    """Raised when the transport could not deliver an outbound message."""

    def __init__(self, recipient_id: str, reason: str) -> None:
        self.recipient_id = recipient_id
        self.reason = reason
        super().__init__(f"Failed to send message to {recipient_id}: {reason}")


@dataclass
class MediaPayload:
    """Media downloaded from the transport; ``data`` is base64 encoded."""

    mimetype: str
    data: str

    def decode(self) -> bytes:
        return base64.b64decode(self.data)


class ChatTransport(ABC):
    """The chat session the relay listens to and replies through."""

    @abstractmethod
    async def start(self) -> None:
        """Begin the session (pairing, restore)."""

    @abstractmethod
    async def send_message(self, recipient_id: str, text: str) -> None:
        """Send ``text``; raise TransportSendFailure on failure."""

    @abstractmethod
    async def download_media(self, event: InboundEvent) -> MediaPayload | None:
        """Fetch the media attached to ``event`` or None if there is none."""
