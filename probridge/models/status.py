from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel

# backend layer names that light up each clear button
LAYER_ALIASES = {
    "slide": ("slide", "presentation", "presentation_media"),
    "audio": ("audio", "music", "audio_effects"),
    "messages": ("messages",),
    "announcements": ("announcements",),
    "props": ("props",),
    "media": ("media", "video_input"),
}


class LayerFlags(BaseModel):
    slide: bool = False
    audio: bool = False
    messages: bool = False
    announcements: bool = False
    props: bool = False
    media: bool = False
    any_active: bool = False

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]]) -> "LayerFlags":
        payload = payload or {}
        flags = {
            name: any(bool(payload.get(alias)) for alias in aliases)
            for name, aliases in LAYER_ALIASES.items()
        }
        return cls(**flags, any_active=any(flags.values()))


class BridgeStatus(BaseModel):
    backend: str
    connection: str
    pendingPresentationRequests: int = 0
    clearAllReady: bool = False
    layers: LayerFlags = LayerFlags()
