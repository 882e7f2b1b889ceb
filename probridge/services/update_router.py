from __future__ import annotations

import logging
from typing import Any, Dict

from probridge.models.status import LayerFlags
from probridge.services.context import BridgeContext
from probridge.services.endpoint_mapper import EndpointDescriptor
from probridge.services.paths import id_of
from probridge.services.request_executor import PRESENTATION_REQUEST, execute
from probridge.services.stream_reader import HEARTBEAT_TOPIC
from probridge.services.transcoders.audio import emit_audio_current, emit_audio_playing
from probridge.services.transcoders.presentation import (
    slide_pointer_message,
    transcode_announcement,
    transcode_presentation,
)

log = logging.getLogger("bridge.router")


def _obj(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


class UpdateRouter:
    """
    Routes one streamed `{url, data}` record by topic.

    Inline branches finish before the next line is read, so their messages
    keep stream order. Branches that need a fetch run in the background and
    may finish after later lines.
    """

    def __init__(self, ctx: BridgeContext) -> None:
        self.ctx = ctx
        self._routes = {
            "presentation/slide_index": self._presentation_slide_index,
            "announcement/slide_index": self._announcement_slide_index,
            "presentation/active": self._presentation_active,
            "presentation/focused": self._presentation_focused,
            "announcement/active": self._announcement_active,
            "status/layers": self._layers,
            "transport/audio/current": self._audio_current,
        }

    async def route(self, update: Dict[str, Any]) -> None:
        topic = update.get("url")
        if not topic or "data" not in update:
            return
        if topic == HEARTBEAT_TOPIC:
            return

        handler = self._routes.get(topic)
        if handler is None:
            log.debug("topic_ignored", extra={"topic": topic})
            return

        handler(update.get("data"))

    # =========================
    # SLIDE INDEX
    # =========================

    def _presentation_slide_index(self, data: Any) -> None:
        self._emit_slide_pointer(_obj(data).get("presentation_index"))

    def _announcement_slide_index(self, data: Any) -> None:
        self._emit_slide_pointer(_obj(data).get("announcement_index"))

    def _emit_slide_pointer(self, pointer: Any) -> None:
        message = slide_pointer_message(pointer)
        if message is not None:
            self.ctx.synth.emit(message)

    # =========================
    # PRESENTATIONS
    # =========================

    def _presentation_active(self, data: Any) -> None:
        presentation = _obj(_obj(data).get("presentation"))
        uuid = id_of({"id": presentation.get("id")})
        if uuid:
            self.ctx.state.current_presentation_uuid = uuid
            self._fetch_presentation(uuid)

    def _presentation_focused(self, data: Any) -> None:
        uuid = id_of(_obj(data))
        if uuid:
            self._fetch_presentation(uuid)

    def _fetch_presentation(self, uuid: str) -> None:
        command = {
            "action": PRESENTATION_REQUEST,
            "presentationPath": uuid,
            "presentationSlideQuality": self.ctx.stream_slide_quality,
        }
        endpoint = EndpointDescriptor("GET", f"/v1/presentation/{uuid}", transcode_presentation)
        self.ctx.spawn(execute(self.ctx, endpoint, command), name=f"presentation:{uuid}")

    def _announcement_active(self, data: Any) -> None:
        announcement = _obj(_obj(data).get("announcement"))
        uuid = id_of({"id": announcement.get("id")})
        if not uuid:
            return
        self.ctx.state.current_announcement_uuid = uuid
        transcode_announcement(self.ctx, announcement)

    # =========================
    # LAYERS / AUDIO
    # =========================

    def _layers(self, data: Any) -> None:
        flags = LayerFlags.from_payload(_obj(data))
        self.ctx.state.set_layers(flags)
        log.debug("layers_updated", extra=flags.model_dump())

    def _audio_current(self, data: Any) -> None:
        emit_audio_current(self.ctx, data)
        emit_audio_playing(self.ctx, data)
