"""Relay pipeline: transport events in, webhook round trip, replies out.

Stages for one chat message:
1. Classify (ignore / voice / text / drop)
2. Count as received
3. Capture voice media (voice only)
4. Dispatch to the webhook
5. Extract reply, wait, send

Every message runs as its own task. A failure is contained to its message:
it is counted as an error and logged.
"""

from __future__ import annotations

import asyncio
import logging

from src.models import InboundEvent
from src.relay.classifier import Route, classify
from src.relay.dispatcher import WebhookDispatcher, WebhookResponse
from src.relay.media import MediaCapture
from src.relay.reply import ReplyOrchestrator
from src.relay.state import RelayState
from src.transport.base import ChatTransport
from src.transport.qr import render_qr_ascii

logger = logging.getLogger(__name__)

TEXT_PREVIEW_CHARS = 50


class RelayPipeline:
    """Handles transport lifecycle and message events."""

    def __init__(
        self,
        state: RelayState,
        transport: ChatTransport,
        dispatcher: WebhookDispatcher,
        media: MediaCapture,
        replies: ReplyOrchestrator,
        print_qr: bool = True,
    ) -> None:
        self.state = state
        self.transport = transport
        self._dispatcher = dispatcher
        self._media = media
        self._replies = replies
        self._print_qr = print_qr
        self._in_flight: set[asyncio.Task[None]] = set()

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    # --- Lifecycle ---

    async def start(self) -> None:
        try:
            await self.transport.start()
        except Exception as exc:
            logger.error("❌ Error: %s", exc)
            return
        logger.info("⚡ Client started!")

    def on_qr(self, code: str) -> None:
        logger.info("🔒 QR Code generated")
        if self._print_qr:
            print(render_qr_ascii(code), flush=True)
        self.state.set_qr(code)

    def on_ready(self) -> None:
        logger.info("✅ Bot is ready!")
        self.state.set_connection(ready=True, authenticated=True)

    def on_authenticated(self) -> None:
        logger.info("✅ Authenticated")
        self.state.set_connection(ready=False, authenticated=True)

    def on_auth_failure(self) -> None:
        logger.error("❌ Auth failed")
        self.state.set_connection(ready=False, authenticated=False)

    # --- Messages ---

    def on_message(self, event: InboundEvent) -> asyncio.Task[None]:
        """Start handling ``event`` without waiting for it to finish."""
        task = asyncio.get_running_loop().create_task(self.handle_message(event))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def handle_message(self, event: InboundEvent) -> None:
        try:
            route = classify(event, self.state.ready)
            if route in (Route.IGNORE, Route.DROP):
                return

            self.state.record_received()
            response = await self._dispatch(route, event)
            await self._replies.deliver(event.sender_id, response)
        except Exception as exc:
            self.state.record_error()
            logger.error("❌ Error: %s", exc)

    async def _dispatch(self, route: Route, event: InboundEvent) -> WebhookResponse:
        if route == Route.VOICE:
            upload = await self._media.capture(event)
            return await self._dispatcher.send_voice(upload)

        body = event.body or ""
        logger.info("💬 Text: %s", body[:TEXT_PREVIEW_CHARS])
        return await self._dispatcher.send_text(event.sender_id, event.raw_type, body)

    async def drain(self) -> None:
        """Wait until no message is in flight.

        Shutdown does not call this; in-flight messages are abandoned. Tests
        use it to wait for the handlers that ``on_message`` spawned.
        """
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)
