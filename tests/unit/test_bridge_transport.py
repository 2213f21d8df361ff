"""Tests for the HTTP chat gateway transport."""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from src.transport.base import TransportSendFailure
from src.transport.bridge import BridgeTransport
from tests.conftest import make_voice_event

GATEWAY = "http://gateway.test/"


def _transport(handler) -> BridgeTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return BridgeTransport(GATEWAY, client=client)


class TestStart:
    @pytest.mark.asyncio
    async def test_start_posts_session_start(self) -> None:
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(f"{request.method} {request.url.path}")
            return httpx.Response(200, json={"status": "starting"})

        await _transport(handler).start()
        assert paths == ["POST /session/start"]

    @pytest.mark.asyncio
    async def test_start_failure_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        with pytest.raises(httpx.HTTPStatusError):
            await _transport(handler).start()


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_send_posts_recipient_and_text(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(201, json={"id": "out-1"})

        await _transport(handler).send_message("1555@c.us", "hi there")

        assert captured[0].url.path == "/messages"
        assert json.loads(captured[0].content) == {"to": "1555@c.us", "text": "hi there"}

    @pytest.mark.asyncio
    async def test_gateway_error_raises_send_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        with pytest.raises(TransportSendFailure) as exc_info:
            await _transport(handler).send_message("1555@c.us", "hi")
        assert exc_info.value.recipient_id == "1555@c.us"
        assert "500" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_network_error_raises_send_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(TransportSendFailure, match="refused"):
            await _transport(handler).send_message("1555@c.us", "hi")


class TestDownloadMedia:
    @pytest.mark.asyncio
    async def test_returns_media_payload(self) -> None:
        encoded = base64.b64encode(b"voice").decode()

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/messages/msg-42/media"
            return httpx.Response(200, json={"mimetype": "audio/ogg", "data": encoded})

        media = await _transport(handler).download_media(make_voice_event(media_ref="msg-42"))

        assert media is not None
        assert media.mimetype == "audio/ogg"
        assert media.decode() == b"voice"

    @pytest.mark.asyncio
    async def test_not_found_returns_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        assert await _transport(handler).download_media(make_voice_event()) is None

    @pytest.mark.asyncio
    async def test_empty_data_returns_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"mimetype": "audio/ogg", "data": ""})

        assert await _transport(handler).download_media(make_voice_event()) is None

    @pytest.mark.asyncio
    async def test_no_media_ref_skips_request(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        assert await _transport(handler).download_media(make_voice_event(media_ref=None)) is None
