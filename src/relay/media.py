"""Voice media capture: download, stage on disk, package for upload."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from src.models import InboundEvent
from src.transport.base import ChatTransport, MediaPayload

logger = logging.getLogger(__name__)

VOICE_FIELD = "voice"


class MediaFetchError(Exception):
    """Raised when the transport returns no media for a voice event."""

    def __init__(self, sender_id: str) -> None:
        self.sender_id = sender_id
        super().__init__(f"No media returned for voice message from {sender_id}")


@dataclass
class VoiceUpload:
    """Multipart body for a voice message: form fields plus one file part."""

    sender_id: str
    message_type: str
    filename: str
    mimetype: str
    content: bytes

    def form_fields(self) -> dict[str, str]:
        return {"from": self.sender_id, "messageType": self.message_type}

    def files(self) -> dict[str, tuple[str, bytes, str]]:
        return {VOICE_FIELD: (self.filename, self.content, self.mimetype)}


def extension_for(mimetype: str) -> str:
    """``audio/ogg; codecs=opus`` -> ``ogg``."""
    subtype = mimetype.split("/", 1)[-1]
    return subtype.split(";", 1)[0].strip() or "bin"


def voice_filename(mimetype: str, now_ms: int | None = None) -> str:
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    return f"voice_{now_ms}.{extension_for(mimetype)}"


@contextmanager
def scratch_file(directory: Path, filename: str, data: bytes) -> Iterator[Path]:
    """Write ``data`` to ``directory/filename`` and remove it on exit."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_bytes(data)
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)


class MediaCapture:
    """Turns a voice event into a ``VoiceUpload``."""

    def __init__(self, transport: ChatTransport, scratch_dir: str | Path) -> None:
        self._transport = transport
        self.scratch_dir = Path(scratch_dir)

    async def fetch(self, event: InboundEvent) -> MediaPayload:
        media = await self._transport.download_media(event)
        if media is None:
            raise MediaFetchError(event.sender_id)
        return media

    async def capture(self, event: InboundEvent) -> VoiceUpload:
        logger.info("🎤 Voice message received")
        media = await self.fetch(event)
        filename = voice_filename(media.mimetype)
        with scratch_file(self.scratch_dir, filename, media.decode()) as path:
            return VoiceUpload(
                sender_id=event.sender_id,
                message_type=event.raw_type,
                filename=filename,
                mimetype=media.mimetype,
                content=path.read_bytes(),
            )
