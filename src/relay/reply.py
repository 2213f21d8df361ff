"""Reply extraction and humanized delivery."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any

from src.relay.dispatcher import WebhookResponse
from src.relay.state import RelayState
from src.transport.base import ChatTransport

logger = logging.getLogger(__name__)

DEFAULT_DELAY_MIN_MS = 2000
DEFAULT_DELAY_MAX_MS = 4000


@dataclass(frozen=True)
class ReplyFound:
    text: str


@dataclass(frozen=True)
class ReplyNotFound:
    reason: str  # "ambiguous" (unrecognized shape) or "blank"


ReplyExtractionResult = ReplyFound | ReplyNotFound


def extract_reply(body: Any) -> ReplyExtractionResult:
    """Pull a reply string out of a webhook body.

    Accepted shapes, in order: an object with a string ``reply`` field, or
    a bare string. Anything else is not an error, just no reply.
    """
    if isinstance(body, dict):
        candidate = body.get("reply")
        if not isinstance(candidate, str):
            return ReplyNotFound("ambiguous")
    elif isinstance(body, str):
        candidate = body
    else:
        return ReplyNotFound("ambiguous")

    if not candidate.strip():
        return ReplyNotFound("blank")
    return ReplyFound(candidate)


class ReplyOrchestrator:
    """Sends the webhook's reply back to the sender after a random pause."""

    def __init__(
        self,
        transport: ChatTransport,
        state: RelayState,
        delay_min_ms: int = DEFAULT_DELAY_MIN_MS,
        delay_max_ms: int = DEFAULT_DELAY_MAX_MS,
    ) -> None:
        if delay_min_ms < 0 or delay_max_ms < delay_min_ms:
            raise ValueError("invalid reply delay bounds")
        self._transport = transport
        self._state = state
        self._delay_min_ms = delay_min_ms
        self._delay_max_ms = delay_max_ms

    def pick_delay_ms(self) -> int:
        return random.randint(self._delay_min_ms, self._delay_max_ms)

    async def deliver(self, sender_id: str, response: WebhookResponse) -> bool:
        """Return True if a reply was sent."""
        result = extract_reply(response.body)
        if isinstance(result, ReplyNotFound):
            logger.debug("No reply for %s (%s)", sender_id, result.reason)
            return False

        await asyncio.sleep(self.pick_delay_ms() / 1000)
        await self._transport.send_message(sender_id, result.text)
        self._state.record_reply_sent()
        logger.info("📬 Reply sent")
        return True
