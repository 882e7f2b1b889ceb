from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Depends
import logging

from probridge.api.deps import get_backend_ws, get_ws_manager_ws

log = logging.getLogger("ws")

router = APIRouter()


@router.websocket("/remote")
async def remote_endpoint(
    websocket: WebSocket,
    backend = Depends(get_backend_ws),
    ws_manager = Depends(get_ws_manager_ws),
):
    await ws_manager.connect(websocket)

    try:
        while True:
            raw = await websocket.receive_text()
            # the backend parses, maps and answers through the broadcaster
            backend.send(raw)

    except WebSocketDisconnect:
        pass
    except Exception as e:
        log.warning("remote_connection_closed", extra={"error": str(e)})
    finally:
        await ws_manager.disconnect(websocket)
