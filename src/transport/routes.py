"""Ingress for events pushed by the chat gateway.

Body: ``{"event": <name>, "data": <payload>}`` where name is one of
``qr``, ``ready``, ``authenticated``, ``auth_failure``, ``message``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.models import InboundEvent

if TYPE_CHECKING:
    from src.relay.pipeline import RelayPipeline

logger = logging.getLogger(__name__)


def parse_message(data: dict[str, Any]) -> InboundEvent:
    """Translate the gateway's message shape into an InboundEvent."""
    raw_type = data.get("type", "")
    return InboundEvent(
        sender_id=data.get("from", ""),
        raw_type=raw_type,
        body=data.get("body") if isinstance(data.get("body"), str) else None,
        media_ref=data.get("id"),
        is_self_originated=bool(data.get("fromMe", False)),
        is_status_broadcast=bool(data.get("isStatus", False)),
    )


def create_transport_router(pipeline: RelayPipeline) -> APIRouter:
    """Create the router the gateway posts its events to."""
    router = APIRouter(prefix="/transport")

    @router.post("/events")
    async def receive_event(request: Request) -> JSONResponse:
        try:
            envelope = await request.json()
        except ValueError:
            return JSONResponse({"error": "Invalid JSON"}, status_code=400)
        if not isinstance(envelope, dict):
            return JSONResponse({"error": "Invalid event envelope"}, status_code=400)

        name = envelope.get("event")
        data = envelope.get("data")

        if name == "qr":
            if not isinstance(data, str) or not data:
                return JSONResponse({"error": "QR event requires a code"}, status_code=400)
            pipeline.on_qr(data)
        elif name == "ready":
            pipeline.on_ready()
        elif name == "authenticated":
            pipeline.on_authenticated()
        elif name == "auth_failure":
            pipeline.on_auth_failure()
        elif name == "message":
            if not isinstance(data, dict):
                return JSONResponse({"error": "Message event requires an object"}, status_code=400)
            try:
                event = parse_message(data)
            except ValidationError as exc:
                return JSONResponse({"error": str(exc)}, status_code=400)
            pipeline.on_message(event)
            return JSONResponse({"status": "accepted"}, status_code=202)
        else:
            logger.warning("Unknown transport event: %s", name)
            return JSONResponse({"error": f"Unknown event: {name}"}, status_code=400)

        return JSONResponse({"status": "ok"})

    return router
