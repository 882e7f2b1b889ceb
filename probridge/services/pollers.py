from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from probridge.models.events import SlideIndexMessage
from probridge.services.context import BridgeContext
from probridge.services.http_client import FETCH_ERRORS
from probridge.services.paths import id_of

log = logging.getLogger("bridge.poller")


class Poller:
    """Runs `tick` every `interval_s` seconds until stopped. First tick is immediate."""

    def __init__(self, name: str, interval_s: float, tick: Callable[[], Awaitable[Any]]) -> None:
        self.name = name
        self.interval_s = interval_s
        self.tick = tick
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=self.name)
        log.info("poller_started", extra={"poller": self.name})

    async def stop(self) -> None:
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        log.info("poller_stopped", extra={"poller": self.name})

    async def _loop(self) -> None:
        while True:
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception:
                log.exception("poller_tick_failed", extra={"poller": self.name})
            await asyncio.sleep(self.interval_s)


async def poll_slide_index(ctx: BridgeContext) -> None:
    """
    Fallback for backends whose status stream is broken: emit the slide index
    only when the (presentation, index) pair moved.
    """
    try:
        data = await ctx.http.get_json("/v1/presentation/slide_index")
    except FETCH_ERRORS:
        return

    if not isinstance(data, dict) or "presentation_index" not in data:
        return

    pointer = data.get("presentation_index") or {}
    uuid = id_of({"id": pointer.get("presentation_id")}) or None
    index = pointer.get("index")

    if (uuid, index) == ctx.state.last_polled_slide:
        return
    ctx.state.last_polled_slide = (uuid, index)

    if uuid and index is not None:
        ctx.synth.emit(SlideIndexMessage(slideIndex=int(index), presentationPath=uuid))
