from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from probridge.services.synthesizer import BridgeCallbacks
from probridge.ws.manager import WebSocketManager

log = logging.getLogger("ws.broadcaster")


class BackendToWebSocketBroadcaster:
    """
    Bridges the backend callbacks (called synchronously, from the event loop)
    to the async websocket fan-out. One queue and one pump keep messages in
    the order they were synthesized.
    """

    def __init__(self, manager: WebSocketManager) -> None:
        self.manager = manager
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None
        self._running = False
        self.backend_open = False
        self.last_error: Optional[str] = None

    def callbacks(self) -> BridgeCallbacks:
        return BridgeCallbacks(
            on_open=self._on_open,
            on_close=self._on_close,
            on_message=self._on_message,
            on_error=self._on_error,
        )

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        log.info("broadcaster_started")

    async def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        log.info("broadcaster_stopped")

    # =========================
    # CALLBACKS
    # =========================

    def _on_open(self) -> None:
        self.backend_open = True
        self.last_error = None
        log.info("backend_open")

    def _on_close(self) -> None:
        self.backend_open = False
        log.info("backend_closed")

    def _on_message(self, event: Dict[str, str]) -> None:
        data = event.get("data")
        if isinstance(data, str):
            self._queue.put_nowait(data)

    def _on_error(self, error: Dict[str, Any]) -> None:
        self.last_error = str(error.get("message", ""))
        log.warning("backend_error", extra={"error": self.last_error})

    # =========================
    # PUMP
    # =========================

    async def _loop(self) -> None:
        while self._running:
            data = await self._queue.get()
            try:
                await self.manager.broadcast_text(data)
            except Exception:
                log.exception("broadcast_failed")
