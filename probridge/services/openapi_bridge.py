from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import httpx

from probridge.core.config import Settings, resolve_base_url
from probridge.models.events import AuthenticateMessage
from probridge.models.status import BridgeStatus
from probridge.services.backend import RemoteBackend
from probridge.services.connection_manager import ConnectionManager
from probridge.services.context import BridgeContext
from probridge.services.endpoint_mapper import map_command
from probridge.services.http_client import BackendClient
from probridge.services.pollers import Poller, poll_slide_index
from probridge.services.request_executor import execute
from probridge.services.stream_reader import StreamReader
from probridge.services.synthesizer import BridgeCallbacks, MessageSynthesizer
from probridge.services.update_router import UpdateRouter
from probridge.state.bridge_state import BridgeState

log = logging.getLogger("bridge.openapi")

CLOCK_TICK_START = "clockStartSendingCurrentTime"
CLOCK_TICK_STOP = "clockStopSendingCurrentTime"


class OpenAPIBridge(RemoteBackend):
    """
    Speaks Classic to the remote and OpenAPI to ProPresenter.

    Commands go through the endpoint table and the executor; pushed status
    updates go through the stream reader and the update router. Both paths
    end in the same synthesizer.
    """

    def __init__(
        self,
        base_url: str,
        *,
        thumbnail_base_url: Optional[str] = None,
        timeout_s: float = 10.0,
        slide_quality: str = "200",
        stream_slide_quality: str = "300",
        connect_retry_delay_s: float = 1.0,
        stream_retry_delay_s: float = 2.0,
        authenticate_delay_s: float = 0.1,
        clock_poll_interval_s: float = 1.0,
        slide_index_poll_enabled: bool = False,
        slide_index_poll_interval_s: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.http = BackendClient(base_url, timeout_s=timeout_s, transport=transport)
        self.state = BridgeState()
        self.synth = MessageSynthesizer()
        self.ctx = BridgeContext(
            http=self.http,
            state=self.state,
            synth=self.synth,
            thumbnail_base_url=(thumbnail_base_url or "").rstrip("/"),
            slide_quality=slide_quality,
            stream_slide_quality=stream_slide_quality,
        )

        self.router = UpdateRouter(self.ctx)
        self.reader = StreamReader(self.http, self.router.route)
        self.connection = ConnectionManager(
            self.ctx,
            self.reader,
            connect_retry_delay_s=connect_retry_delay_s,
            stream_retry_delay_s=stream_retry_delay_s,
            authenticate_delay_s=authenticate_delay_s,
        )

        self.clock_ticker = Poller("clock_ticker", clock_poll_interval_s, self._tick_clocks)
        self.slide_poller: Optional[Poller] = None
        if slide_index_poll_enabled:
            self.slide_poller = Poller(
                "slide_index_poll",
                slide_index_poll_interval_s,
                lambda: poll_slide_index(self.ctx),
            )

        self._closed = False

    @classmethod
    def from_settings(
        cls,
        s: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "OpenAPIBridge":
        return cls(
            resolve_base_url(s),
            thumbnail_base_url=s.public_thumbnail_base_url,
            timeout_s=s.request_timeout_s,
            slide_quality=s.slide_quality,
            stream_slide_quality=s.stream_slide_quality,
            connect_retry_delay_s=s.connect_retry_delay_s,
            stream_retry_delay_s=s.stream_retry_delay_s,
            authenticate_delay_s=s.authenticate_delay_s,
            clock_poll_interval_s=s.clock_poll_interval_s,
            slide_index_poll_enabled=s.slide_index_poll_enabled,
            slide_index_poll_interval_s=s.slide_index_poll_interval_s,
            transport=transport,
        )

    # =========================
    # CAPABILITIES
    # =========================

    def set_callbacks(self, callbacks: BridgeCallbacks) -> None:
        self.synth.callbacks = callbacks

    def is_using_openapi(self) -> bool:
        return True

    async def connect(self) -> None:
        log.info("openapi_bridge_connecting", extra={"base_url": self.http.base_url})
        self._closed = False
        self.connection.start()
        if self.slide_poller is not None:
            self.slide_poller.start()

    def send(self, raw: str) -> None:
        try:
            command = json.loads(raw)
        except ValueError as exc:
            log.warning("command_invalid_json", extra={"raw": str(raw)[:100], "error": str(exc)})
            return

        if not isinstance(command, dict):
            log.warning("command_not_object", extra={"raw": str(raw)[:100]})
            return

        self.ctx.spawn(self.dispatch(command), name=f"command:{command.get('action')}")

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        await self.connection.stop()
        await self.clock_ticker.stop()
        if self.slide_poller is not None:
            await self.slide_poller.stop()
        await self.ctx.cancel_all()

        try:
            await self.http.aclose()
        except Exception:
            log.exception("http_client_close_failed")

        self.synth.closed()
        log.info("openapi_bridge_closed")

    def status(self) -> BridgeStatus:
        return BridgeStatus(
            backend="open",
            connection=self.connection.state.value,
            pendingPresentationRequests=self.state.pending_presentation_requests,
            clearAllReady=self.state.clear_all_uuid is not None,
            layers=self.state.layers,
        )

    # =========================
    # COMMANDS
    # =========================

    async def dispatch(self, command: Dict[str, Any]) -> None:
        action = command.get("action")

        if action == "authenticate":
            self.synth.emit(AuthenticateMessage())
            return

        if action == CLOCK_TICK_START:
            self.clock_ticker.start()
            return

        if action == CLOCK_TICK_STOP:
            await self.clock_ticker.stop()
            return

        endpoint = map_command(command, self.state)
        if endpoint is None:
            return
        await execute(self.ctx, endpoint, command)

    async def _tick_clocks(self) -> None:
        command = {"action": CLOCK_TICK_START}
        await execute(self.ctx, map_command(command, self.state), command)

    async def drain(self) -> None:
        await self.ctx.drain()
