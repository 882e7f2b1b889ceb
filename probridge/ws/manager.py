from typing import Set
from fastapi import WebSocket
import asyncio
import logging

log = logging.getLogger("ws")


class WebSocketManager:
    """Connected remotes; every synthesized message goes to all of them."""

    def __init__(self) -> None:
        self._connections: Set[WebSocket] = set()
        self._lock = asyncio.Lock()

    @property
    def count(self) -> int:
        return len(self._connections)

    async def connect(self, ws: WebSocket) -> None:
        await ws.accept()
        async with self._lock:
            self._connections.add(ws)
        log.info("remote_connected", extra={"remotes": len(self._connections)})

    async def disconnect(self, ws: WebSocket) -> None:
        async with self._lock:
            self._connections.discard(ws)
        log.info("remote_disconnected", extra={"remotes": len(self._connections)})

    async def broadcast_text(self, text: str) -> None:
        async with self._lock:
            dead = []
            for ws in self._connections:
                try:
                    await ws.send_text(text)
                except Exception:
                    dead.append(ws)

            for ws in dead:
                self._connections.discard(ws)

        if dead:
            log.warning("remotes_pruned", extra={"removed": len(dead)})
