"""HTTP client for a sidecar chat gateway.

The gateway owns the chat session (pairing, persistence, message I/O) and
pushes lifecycle and message events to ``POST /transport/events``. This
class covers the opposite direction: starting the session, sending text and
fetching media.
"""

from __future__ import annotations

import logging

import httpx

from src.models import InboundEvent
from src.transport.base import ChatTransport, MediaPayload, TransportSendFailure

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 30.0


class BridgeTransport(ChatTransport):
    """ChatTransport backed by a gateway's REST API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = _DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    async def _request(self, method: str, path: str, **kwargs: object) -> httpx.Response:
        if self._client is not None:
            return await self._client.request(
                method, self._url(path), timeout=self._timeout, **kwargs,
            )
        async with httpx.AsyncClient() as client:
            return await client.request(
                method, self._url(path), timeout=self._timeout, **kwargs,
            )

    async def start(self) -> None:
        resp = await self._request("POST", "/session/start")
        resp.raise_for_status()
        logger.debug("Chat gateway session started at %s", self._base_url)

    async def send_message(self, recipient_id: str, text: str) -> None:
        try:
            resp = await self._request(
                "POST", "/messages", json={"to": recipient_id, "text": text},
            )
        except httpx.HTTPError as exc:
            raise TransportSendFailure(recipient_id, str(exc)) from exc
        if not resp.is_success:
            raise TransportSendFailure(recipient_id, f"gateway returned {resp.status_code}")

    async def download_media(self, event: InboundEvent) -> MediaPayload | None:
        if not event.media_ref:
            return None
        resp = await self._request("GET", f"/messages/{event.media_ref}/media")
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        data = resp.json()
        if not data or not data.get("data"):
            return None
        return MediaPayload(
            mimetype=data.get("mimetype", "application/octet-stream"),
            data=data["data"],
        )
