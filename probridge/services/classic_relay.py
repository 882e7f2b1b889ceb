from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional, Set

import websockets
from websockets.exceptions import WebSocketException

from probridge.core.config import Settings, resolve_classic_url
from probridge.models.status import BridgeStatus
from probridge.services.backend import RemoteBackend
from probridge.services.connection_manager import ConnState
from probridge.services.synthesizer import BridgeCallbacks, MessageSynthesizer

log = logging.getLogger("bridge.classic")

RELAY_ERRORS = (OSError, WebSocketException, asyncio.TimeoutError)


class ClassicRelay(RemoteBackend):
    """
    Passthrough to a Classic ProPresenter `/remote` socket. Frames go both
    ways untouched; the socket is reopened with a fixed delay when it drops.
    """

    def __init__(
        self,
        uri: str,
        *,
        retry_delay_s: float = 1.0,
        connector: Callable[..., Any] = websockets.connect,
    ) -> None:
        self.uri = uri
        self.retry_delay_s = retry_delay_s
        self._connector = connector

        self.synth = MessageSynthesizer()
        self.state = ConnState.IDLE
        self.connects = 0

        self._ws: Any = None
        self._stop = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._sends: Set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, s: Settings) -> "ClassicRelay":
        return cls(resolve_classic_url(s), retry_delay_s=s.connect_retry_delay_s)

    # =========================
    # CAPABILITIES
    # =========================

    def set_callbacks(self, callbacks: BridgeCallbacks) -> None:
        self.synth.callbacks = callbacks

    def is_using_openapi(self) -> bool:
        return False

    async def connect(self) -> None:
        if self._task and not self._task.done():
            return
        self._stop.clear()
        self._task = asyncio.create_task(self._run(), name="bridge.classic")
        log.info("classic_relay_connecting", extra={"uri": self.uri})

    def send(self, raw: str) -> None:
        ws = self._ws
        if ws is None:
            log.warning("classic_send_dropped", extra={"reason": "not_connected"})
            return

        task = asyncio.create_task(self._send(ws, raw))
        self._sends.add(task)
        task.add_done_callback(self._sends.discard)

    async def close(self) -> None:
        self._stop.set()

        ws = self._ws
        if ws is not None:
            try:
                await ws.close()
            except RELAY_ERRORS as exc:
                log.warning("classic_close_failed", extra={"error": str(exc)})

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        for task in list(self._sends):
            task.cancel()
        self.state = ConnState.CLOSED
        log.info("classic_relay_closed")

    def status(self) -> BridgeStatus:
        return BridgeStatus(backend="classic", connection=self.state.value)

    # =========================
    # LOOP
    # =========================

    async def _send(self, ws: Any, raw: str) -> None:
        try:
            await ws.send(raw)
        except RELAY_ERRORS as exc:
            log.warning("classic_send_failed", extra={"error": str(exc)})

    async def _run(self) -> None:
        while not self._stop.is_set():
            self.state = ConnState.CONNECTING
            opened = False
            try:
                async with self._connector(self.uri) as ws:
                    self._ws = ws
                    opened = True
                    self.connects += 1
                    self.state = ConnState.STREAMING
                    log.info("classic_connected", extra={"uri": self.uri})
                    self.synth.opened()

                    async for frame in ws:
                        if isinstance(frame, (bytes, bytearray)):
                            frame = frame.decode("utf-8", errors="replace")
                        self.synth.relay(frame)
            except RELAY_ERRORS as exc:
                log.warning("classic_connection_failed", extra={"error": str(exc)})
                self.synth.error(str(exc) or exc.__class__.__name__)
            finally:
                self._ws = None
                if opened:
                    self.synth.closed()

            if self._stop.is_set():
                break
            self.state = ConnState.BACKOFF
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.retry_delay_s)
            except asyncio.TimeoutError:
                continue
