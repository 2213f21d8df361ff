"""FastAPI dashboard application: page, JSON snapshot, live push channel."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse, JSONResponse

from src.config import RelayConfig
from src.dashboard.page import render_dashboard
from src.models import DashboardEvent, DashboardEventType
from src.relay.dispatcher import WebhookDispatcher
from src.relay.log_handler import configure_logging
from src.relay.media import MediaCapture
from src.relay.pipeline import RelayPipeline
from src.relay.reply import ReplyOrchestrator
from src.relay.state import RelayState
from src.transport.base import ChatTransport
from src.transport.bridge import BridgeTransport
from src.transport.routes import create_transport_router

logger = logging.getLogger(__name__)


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    config = RelayConfig.from_env()
    state = RelayState()
    configure_logging(state, config.log_level)
    transport = BridgeTransport(config.transport_url)
    pipeline = build_pipeline(config, state, transport)
    logger.info("🌐 Dashboard: http://localhost:%d", config.port)
    return create_app(state, pipeline)


def build_pipeline(
    config: RelayConfig,
    state: RelayState,
    transport: ChatTransport,
    print_qr: bool = True,
) -> RelayPipeline:
    """Wire the relay components from ``config``."""
    return RelayPipeline(
        state=state,
        transport=transport,
        dispatcher=WebhookDispatcher(config.webhook_url, timeout=config.webhook_timeout),
        media=MediaCapture(transport, config.scratch_dir),
        replies=ReplyOrchestrator(
            transport,
            state,
            delay_min_ms=config.reply_delay_min_ms,
            delay_max_ms=config.reply_delay_max_ms,
        ),
        print_qr=print_qr,
    )


def create_app(
    state: RelayState,
    pipeline: RelayPipeline | None = None,
    start_transport: bool = True,
) -> FastAPI:
    """Create the dashboard app; with a pipeline, also accept transport events."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        starter: asyncio.Task[None] | None = None
        if pipeline is not None and start_transport:
            # Session start may take a while; the dashboard serves meanwhile
            starter = asyncio.create_task(pipeline.start())
        yield
        if starter is not None:
            starter.cancel()
        if pipeline is not None and pipeline.in_flight:
            logger.info("Shutting down with %d message(s) in flight", pipeline.in_flight)

    app = FastAPI(docs_url=None, redoc_url=None, lifespan=lifespan)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    async def dashboard() -> HTMLResponse:
        return HTMLResponse(render_dashboard(state))

    @app.get("/api/stats")
    async def stats() -> JSONResponse:
        return JSONResponse(state.snapshot())

    @app.websocket("/ws")
    async def events(websocket: WebSocket) -> None:
        await websocket.accept()
        subscription = state.broadcaster.subscribe()

        await websocket.send_json(
            DashboardEvent(
                event=DashboardEventType.STATUS, data=state.connection.model_dump(),
            ).to_wire()
        )
        if state.pending_qr:
            await websocket.send_json(
                DashboardEvent(event=DashboardEventType.QR, data=state.pending_qr).to_wire()
            )

        pump = asyncio.create_task(subscription.pump(websocket.send_json))
        # An observer whose send fails stops receiving events
        pump.add_done_callback(lambda _: state.broadcaster.unsubscribe(subscription))
        try:
            while True:
                data = await websocket.receive_text()
                if data == "ping":
                    await websocket.send_json({"type": "pong"})
        except WebSocketDisconnect:
            pass
        finally:
            state.broadcaster.unsubscribe(subscription)
            pump.cancel()
            try:
                await pump
            except asyncio.CancelledError:
                pass
            except Exception as exc:
                logger.debug("Dashboard observer dropped: %s", exc)

    if pipeline is not None:
        app.include_router(create_transport_router(pipeline))

    return app
