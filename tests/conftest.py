"""Shared test fixtures for the chat relay."""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.models import InboundEvent
from src.relay.dispatcher import WebhookDispatcher, WebhookResponse
from src.relay.log_handler import RELAY_LOGGER, DashboardLogHandler
from src.relay.media import MediaCapture
from src.relay.pipeline import RelayPipeline
from src.relay.reply import ReplyOrchestrator
from src.relay.state import RelayState
from src.transport.base import ChatTransport, MediaPayload

VOICE_BYTES = b"OggS\x00fake-voice-bytes"


@pytest.fixture
def state() -> RelayState:
    return RelayState()


@pytest.fixture
def transport() -> MagicMock:
    mock = MagicMock(spec=ChatTransport)
    mock.start = AsyncMock()
    mock.send_message = AsyncMock()
    mock.download_media = AsyncMock(return_value=make_media_payload())
    return mock


@pytest.fixture
def dispatcher() -> MagicMock:
    mock = MagicMock(spec=WebhookDispatcher)
    mock.send_text = AsyncMock(return_value=WebhookResponse(200, {"reply": "hi"}))
    mock.send_voice = AsyncMock(return_value=WebhookResponse(200, {"reply": "heard you"}))
    return mock


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    return tmp_path / "temp"


@pytest.fixture
def pipeline(
    state: RelayState,
    transport: MagicMock,
    dispatcher: MagicMock,
    scratch_dir: Path,
) -> RelayPipeline:
    return RelayPipeline(
        state=state,
        transport=transport,
        dispatcher=dispatcher,
        media=MediaCapture(transport, scratch_dir),
        replies=ReplyOrchestrator(transport, state, delay_min_ms=0, delay_max_ms=0),
        print_qr=False,
    )


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo logging changes a test made through configure_logging."""
    root = logging.getLogger()
    relay_logger = logging.getLogger(RELAY_LOGGER)
    root_handlers, root_level = list(root.handlers), root.level
    relay_level = relay_logger.level
    yield
    for handler in list(root.handlers):
        if handler not in root_handlers:
            root.removeHandler(handler)
    root.setLevel(root_level)
    for handler in list(relay_logger.handlers):
        if isinstance(handler, DashboardLogHandler):
            relay_logger.removeHandler(handler)
    relay_logger.setLevel(relay_level)


# --- Factory functions for test data ---


def make_inbound_event(**kwargs: Any) -> InboundEvent:
    """Factory for InboundEvent with sensible defaults (a plain text message)."""
    defaults: dict[str, Any] = {
        "sender_id": "15551234567@c.us",
        "raw_type": "chat",
        "body": "hello there",
        "media_ref": "msg-1",
    }
    defaults.update(kwargs)
    return InboundEvent(**defaults)


def make_voice_event(**kwargs: Any) -> InboundEvent:
    defaults: dict[str, Any] = {"raw_type": "ptt", "body": None}
    defaults.update(kwargs)
    return make_inbound_event(**defaults)


def make_media_payload(
    mimetype: str = "audio/ogg; codecs=opus",
    content: bytes = VOICE_BYTES,
) -> MediaPayload:
    return MediaPayload(mimetype=mimetype, data=base64.b64encode(content).decode())
