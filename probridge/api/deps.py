from __future__ import annotations

from fastapi import Request, WebSocket

from probridge.services.backend import RemoteBackend
from probridge.ws.broadcaster import BackendToWebSocketBroadcaster
from probridge.ws.manager import WebSocketManager


# =========================
# BACKEND
# =========================

def get_backend(request: Request) -> RemoteBackend:
    return request.app.state.backend


def get_backend_ws(websocket: WebSocket) -> RemoteBackend:
    return websocket.app.state.backend


def get_broadcaster(request: Request) -> BackendToWebSocketBroadcaster:
    return request.app.state.broadcaster


# =========================
# WS MANAGER
# =========================

def get_ws_manager(request: Request) -> WebSocketManager:
    return request.app.state.ws_manager


def get_ws_manager_ws(websocket: WebSocket) -> WebSocketManager:
    return websocket.app.state.ws_manager
