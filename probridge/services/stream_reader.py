from __future__ import annotations

import codecs
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List

from probridge.services.http_client import BackendClient

log = logging.getLogger("bridge.stream")

HEARTBEAT_TOPIC = "timer/system_time"

STATUS_TOPICS: List[str] = [
    "presentation/slide_index",
    "announcement/slide_index",
    "presentation/active",
    "presentation/focused",
    # there is no announcement/focused
    "announcement/active",
    "status/layers",
    "transport/audio/current",
    # liveness only, never forwarded
    HEARTBEAT_TOPIC,
]

RecordHandler = Callable[[Dict[str, Any]], Awaitable[None]]


class NdjsonFramer:
    """
    Re-frames a chunked byte stream into complete lines.

    Chunk boundaries fall anywhere, including inside a multi-byte character,
    so bytes go through an incremental decoder and the unterminated tail is
    kept for the next chunk.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    def feed(self, chunk: bytes) -> List[str]:
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        return [line for line in lines if line.strip()]

    @property
    def pending(self) -> str:
        return self._buffer


class StreamReader:
    """
    One pass over POST /v1/status/updates: reads until the server ends the
    response or the connection breaks. Reconnecting is the caller's job.
    """

    def __init__(
        self,
        http: BackendClient,
        on_record: RecordHandler,
        topics: List[str] | None = None,
    ) -> None:
        self.http = http
        self.on_record = on_record
        self.topics = list(topics or STATUS_TOPICS)
        self.records = 0
        self.bad_lines = 0

    async def run_once(self) -> None:
        framer = NdjsonFramer()
        async with self.http.stream_updates(self.topics) as response:
            log.info("stream_opened", extra={"topics": len(self.topics)})
            async for chunk in response.aiter_bytes():
                for line in framer.feed(chunk):
                    await self._dispatch_line(line)
        log.info("stream_ended", extra={"records": self.records})

    async def _dispatch_line(self, line: str) -> None:
        try:
            record = json.loads(line)
        except ValueError as exc:
            self.bad_lines += 1
            log.warning("stream_line_invalid", extra={"line": line[:100], "error": str(exc)})
            return

        if not isinstance(record, dict):
            self.bad_lines += 1
            log.warning("stream_line_not_object", extra={"line": line[:100]})
            return

        self.records += 1
        try:
            await self.on_record(record)
        except Exception:
            log.exception("stream_record_failed", extra={"topic": record.get("url")})
