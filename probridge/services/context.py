from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Coroutine, Set

from probridge.services.http_client import BackendClient
from probridge.services.synthesizer import MessageSynthesizer
from probridge.state.bridge_state import BridgeState

log = logging.getLogger("bridge.context")


@dataclass
class BridgeContext:
    """
    What every mapper handler, transcoder and router branch receives:
    the HTTP client, the bridge state and the outbound synthesizer.
    """

    http: BackendClient
    state: BridgeState
    synth: MessageSynthesizer
    thumbnail_base_url: str = ""
    slide_quality: str = "200"
    stream_slide_quality: str = "300"

    _tasks: Set[asyncio.Task] = field(default_factory=set)

    def __post_init__(self) -> None:
        if not self.thumbnail_base_url:
            self.thumbnail_base_url = self.http.base_url

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str = "") -> asyncio.Task:
        """Run `coro` in the background and keep a reference until it ends."""
        task = asyncio.create_task(coro, name=name or None)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("background_task_failed", extra={"task": task.get_name(), "error": repr(exc)})

    async def drain(self) -> None:
        """Wait until no background work is left (new spawns included)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel_all(self) -> None:
        tasks = list(self._tasks)
        for t in tasks:
            t.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
