from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from probridge.core.config import settings
from probridge.core.logging import setup_logging

from probridge.services.backend import create_backend

from probridge.ws.manager import WebSocketManager
from probridge.ws.broadcaster import BackendToWebSocketBroadcaster

from probridge.api.routes_ws import router as ws_router
from probridge.api.routes_status import router as status_router

log = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level)
    log.info("app_starting", extra={"api_type": settings.api_type})

    # WEBSOCKET
    app.state.ws_manager = WebSocketManager()
    app.state.broadcaster = BackendToWebSocketBroadcaster(app.state.ws_manager)
    await app.state.broadcaster.start()
    log.info("ws_broadcaster_started")

    # BACKEND
    backend = create_backend(settings)
    backend.set_callbacks(app.state.broadcaster.callbacks())
    app.state.backend = backend
    await backend.connect()
    log.info("backend_started", extra={"openapi": backend.is_using_openapi()})

    try:
        yield
    finally:
        try:
            await backend.close()
        except Exception:
            log.exception("error_closing_backend")

        try:
            await app.state.broadcaster.stop()
        except Exception:
            log.exception("error_stopping_broadcaster")


app = FastAPI(
    title="ProPresenter Remote Bridge",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ws_router)
app.include_router(status_router)


@app.get("/health")
def health():
    return {
        "ok": True,
        "app": "ProPresenter Remote Bridge",
        "env": settings.app_env,
        "api_type": settings.api_type,
    }
