"""Forwarding of classified messages to the processing webhook."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from src.relay.media import VoiceUpload

logger = logging.getLogger(__name__)


class DispatchError(Exception):
    """Raised when the webhook is unreachable or answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


@dataclass
class WebhookResponse:
    """Raw webhook answer; ``body`` is parsed JSON when possible, else text."""

    status_code: int
    body: Any


class WebhookDispatcher:
    """POSTs text (JSON) and voice (multipart) payloads to one fixed URL.

    No retries. ``timeout=None`` waits for the webhook indefinitely.
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.webhook_url = webhook_url
        self._timeout = timeout
        self._client = client

    async def send_text(self, sender_id: str, message_type: str, body: str) -> WebhookResponse:
        payload = {"from": sender_id, "messageType": message_type, "body": body}
        return await self._post(
            json=payload, headers={"Content-Type": "application/json"},
        )

    async def send_voice(self, upload: VoiceUpload) -> WebhookResponse:
        # httpx sets the multipart Content-Type with its boundary
        return await self._post(data=upload.form_fields(), files=upload.files())

    async def _post(self, **kwargs: Any) -> WebhookResponse:
        try:
            if self._client is not None:
                resp = await self._client.post(self.webhook_url, timeout=self._timeout, **kwargs)
            else:
                async with httpx.AsyncClient() as client:
                    resp = await client.post(self.webhook_url, timeout=self._timeout, **kwargs)
        except httpx.HTTPError as exc:
            raise DispatchError(f"Webhook request failed: {exc}") from exc

        if not resp.is_success:
            raise DispatchError(
                f"Webhook returned status {resp.status_code}",
                status_code=resp.status_code,
            )
        logger.debug("Webhook answered %s", resp.status_code)
        return WebhookResponse(status_code=resp.status_code, body=_parse_body(resp))


def _parse_body(resp: httpx.Response) -> Any:
    if not resp.content:
        return ""
    try:
        return resp.json()
    except ValueError:
        return resp.text
