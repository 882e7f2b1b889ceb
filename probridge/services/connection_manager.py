from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Optional

from probridge.models.events import AuthenticateMessage
from probridge.services.context import BridgeContext
from probridge.services.http_client import FETCH_ERRORS
from probridge.services.paths import id_of, name_of
from probridge.services.stream_reader import StreamReader

log = logging.getLogger("bridge.connection")

CLEAR_ALL_GROUP = "clear all"


class ConnState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    BACKOFF = "backoff"
    CLOSED = "closed"


class ConnectionManager:
    """
    IDLE -> CONNECTING (probe /version) -> STREAMING <-> BACKOFF, until stop().

    Both the probe and the stream retry forever with a fixed delay. stop()
    sets the cancellation event, which also cuts any back-off wait short.
    """

    def __init__(
        self,
        ctx: BridgeContext,
        reader: StreamReader,
        *,
        connect_retry_delay_s: float = 1.0,
        stream_retry_delay_s: float = 2.0,
        authenticate_delay_s: float = 0.1,
    ) -> None:
        self.ctx = ctx
        self.reader = reader
        self.connect_retry_delay_s = connect_retry_delay_s
        self.stream_retry_delay_s = stream_retry_delay_s
        self.authenticate_delay_s = authenticate_delay_s

        self.state = ConnState.IDLE
        self.connects = 0
        self._stop = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    # =========================
    # LIFECYCLE
    # =========================

    def start(self) -> None:
        if self._task and not self._task.done():
            return
        self._stop.clear()
        self._task = asyncio.create_task(self._run(), name="bridge.connection")

    async def stop(self) -> None:
        self._stop.set()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._set(ConnState.CLOSED)

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    def _set(self, state: ConnState) -> None:
        if state != self.state:
            log.debug("connection_state", extra={"from": self.state.value, "to": state.value})
            self.state = state

    async def _wait(self, delay_s: float) -> bool:
        """Sleep for the back-off delay; True when stop() was called meanwhile."""
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=delay_s)
            return True
        except asyncio.TimeoutError:
            return False

    # =========================
    # LOOP
    # =========================

    async def _run(self) -> None:
        if not await self._bootstrap():
            return

        while not self.stopping:
            self._set(ConnState.STREAMING)
            try:
                await self.reader.run_once()
            except FETCH_ERRORS as exc:
                log.warning("stream_failed", extra={"error": str(exc)})
            except Exception:
                log.exception("stream_crashed")

            if self.stopping:
                break
            self._set(ConnState.BACKOFF)
            if await self._wait(self.stream_retry_delay_s):
                break

    async def _bootstrap(self) -> bool:
        while not self.stopping:
            self._set(ConnState.CONNECTING)
            try:
                reachable = await self.ctx.http.probe()
                reason = "" if reachable else "Connection failed"
            except FETCH_ERRORS as exc:
                reachable, reason = False, str(exc)

            if reachable:
                self.connects += 1
                log.info("backend_reachable", extra={"base_url": self.ctx.http.base_url})
                self.ctx.synth.opened()
                if self.ctx.state.clear_all_uuid is None:
                    self.ctx.spawn(self.resolve_clear_groups(), name="clear_groups")
                self.ctx.spawn(self._announce_authenticated(), name="authenticate")
                return True

            log.warning("backend_unreachable", extra={"error": reason})
            self.ctx.synth.error(reason)
            self._set(ConnState.BACKOFF)
            if await self._wait(self.connect_retry_delay_s):
                return False
        return False

    # =========================
    # BOOTSTRAP STEPS
    # =========================

    async def resolve_clear_groups(self) -> None:
        try:
            groups = await self.ctx.http.get_json("/v1/clear/groups")
        except FETCH_ERRORS as exc:
            log.warning("clear_groups_fetch_failed", extra={"error": str(exc)})
            return

        for group in groups if isinstance(groups, list) else []:
            if name_of(group).lower() == CLEAR_ALL_GROUP:
                self.ctx.state.resolve_clear_all(id_of(group))
                return
        log.warning("clear_all_group_missing")

    async def _announce_authenticated(self) -> None:
        # no auth on OpenAPI; the remote still waits for the Classic handshake
        await asyncio.sleep(self.authenticate_delay_s)
        self.ctx.synth.emit(AuthenticateMessage())
