from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from probridge.api.deps import get_backend, get_broadcaster, get_ws_manager
from probridge.models.status import BridgeStatus
from probridge.services.backend import RemoteBackend
from probridge.ws.broadcaster import BackendToWebSocketBroadcaster
from probridge.ws.manager import WebSocketManager

router = APIRouter(prefix="/status", tags=["status"])


@router.get("", response_model=BridgeStatus)
async def get_status(backend: RemoteBackend = Depends(get_backend)):
    return backend.status()


@router.get("/remotes")
async def get_remotes(
    ws_manager: WebSocketManager = Depends(get_ws_manager),
    broadcaster: BackendToWebSocketBroadcaster = Depends(get_broadcaster),
) -> Dict[str, Any]:
    return {
        "remotes": ws_manager.count,
        "backendOpen": broadcaster.backend_open,
        "lastError": broadcaster.last_error,
    }
