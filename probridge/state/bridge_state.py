from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from probridge.models.presentation import Presentation
from probridge.models.status import LayerFlags

log = logging.getLogger("bridge.state")

AudioStatus = Optional[str]  # "Playing" | "Pause" | None


@dataclass(frozen=True)
class AudioTrack:
    uuid: Optional[str]
    name: str
    artist: str

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "AudioTrack":
        return cls(
            uuid=data.get("uuid"),
            name=data.get("name") or "",
            artist=data.get("artist") or "",
        )


@dataclass
class BridgeState:
    """
    Everything the OpenAPI bridge remembers between calls.

    One instance per bridge. Mutated only from the event loop, so every
    write is last-write-wins and needs no locking.
    """

    # dedup
    audio_track: Optional[AudioTrack] = None
    audio_status: AudioStatus = None

    # clear groups (resolved once at startup)
    clear_all_uuid: Optional[str] = None

    # layer occupancy
    current_announcement_uuid: Optional[str] = None
    current_presentation_uuid: Optional[str] = None

    # presentations by uuid (always overwritten; the stream keeps it fresh)
    presentations: Dict[str, Presentation] = field(default_factory=dict)

    # in-flight presentationRequest fetches (loading indicator)
    pending_presentation_requests: int = 0

    layers: LayerFlags = field(default_factory=LayerFlags)

    # slide index polling fallback
    last_polled_slide: Optional[Tuple[Optional[str], Any]] = None

    # =========================
    # CLEAR GROUPS
    # =========================

    def resolve_clear_all(self, uuid: Optional[str]) -> bool:
        if self.clear_all_uuid is not None or not uuid:
            return False
        self.clear_all_uuid = uuid
        log.info("clear_all_resolved", extra={"uuid": uuid})
        return True

    # =========================
    # PENDING COUNTER
    # =========================

    def begin_presentation_request(self) -> int:
        self.pending_presentation_requests += 1
        return self.pending_presentation_requests

    def end_presentation_request(self) -> int:
        if self.pending_presentation_requests <= 0:
            log.warning("pending_counter_underflow")
            self.pending_presentation_requests = 0
        else:
            self.pending_presentation_requests -= 1
        return self.pending_presentation_requests

    # =========================
    # AUDIO DEDUP
    # =========================

    def swap_audio_track(self, track: Optional[AudioTrack]) -> bool:
        """Store `track`; True when it differs from the last emitted one."""
        if track == self.audio_track:
            return False
        self.audio_track = track
        return True

    def swap_audio_status(self, status: AudioStatus) -> bool:
        if status == self.audio_status:
            return False
        self.audio_status = status
        return True

    # =========================
    # PRESENTATIONS
    # =========================

    def cache_presentation(self, presentation: Presentation) -> None:
        self.presentations[presentation.presentationPath] = presentation

    def is_announcement(self, uuid: Optional[str]) -> bool:
        return bool(uuid) and uuid == self.current_announcement_uuid

    def set_layers(self, flags: LayerFlags) -> None:
        self.layers = flags
