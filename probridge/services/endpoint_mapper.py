from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from probridge.services.context import BridgeContext
from probridge.services.paths import ACTIVE, presentation_identity
from probridge.services.transcoders.audio import (
    toggle_play_pause,
    transcode_audio_current,
    transcode_audio_playing,
    transcode_audio_playlists,
)
from probridge.services.transcoders.clock import transcode_clock_times, transcode_clocks
from probridge.services.transcoders.library import transcode_library
from probridge.services.transcoders.message import transcode_messages
from probridge.services.transcoders.playlist import transcode_playlists
from probridge.services.transcoders.presentation import (
    transcode_presentation,
    transcode_slide_index,
    transcode_trigger,
)
from probridge.services.transcoders.stage import transcode_stage_display
from probridge.state.bridge_state import BridgeState

log = logging.getLogger("bridge.mapper")

Command = Dict[str, Any]
Handler = Callable[[BridgeContext, Any, Command], Awaitable[None]]
PathBuilder = Callable[[Command, BridgeState], Optional[str]]
BodyBuilder = Callable[[Command], Any]


@dataclass(frozen=True)
class EndpointDescriptor:
    method: str
    # None = prerequisite not resolved yet (e.g. Clear All uuid)
    path: Optional[str]
    handler: Optional[Handler] = None
    body: Any = None


@dataclass(frozen=True)
class Route:
    method: str
    path: Union[str, PathBuilder]
    handler: Optional[Handler] = None
    body: Optional[BodyBuilder] = None


# =========================
# PATH BUILDERS
# =========================


def is_announcement_command(command: Command) -> bool:
    return str(command.get("presentationDestination")) == "1"


def trigger_path(command: Command, state: BridgeState) -> str:
    slide = command.get("slideIndex")

    if is_announcement_command(command):
        # the announcement layer only accepts "active", never a uuid
        if slide is not None:
            return f"/v1/announcement/active/{slide}/trigger"
        return "/v1/announcement/active/trigger"

    target = presentation_identity(command) or ACTIVE
    if slide is not None:
        return f"/v1/presentation/{target}/{slide}/trigger"
    return f"/v1/presentation/{target}/trigger"


def request_path(command: Command, state: BridgeState) -> str:
    return f"/v1/presentation/{presentation_identity(command) or ACTIVE}"


def clear_all_path(command: Command, state: BridgeState) -> Optional[str]:
    if not state.clear_all_uuid:
        return None
    return f"/v1/clear/group/{state.clear_all_uuid}/trigger"


def audio_cue_path(command: Command, state: BridgeState) -> Optional[str]:
    """audioChildPath is "<playlistUUID>:<itemUUID>" (see audio playlists)."""
    child = str(command.get("audioChildPath") or "")
    if ":" not in child:
        return None
    playlist_id, item_id = child.split(":", 1)
    return f"/v1/audio/playlist/{playlist_id}/{item_id}/trigger"


def stage_layout_path(command: Command, state: BridgeState) -> Optional[str]:
    screen = command.get("stageScreenUUID")
    layout = command.get("stageLayoutUUID")
    if not screen or not layout:
        return None
    return f"/v1/stage/screen/{screen}/layout/{layout}"


def _field_path(field: str, template: str) -> PathBuilder:
    def build(command: Command, state: BridgeState) -> Optional[str]:
        value = command.get(field)
        if value is None or value == "":
            return None
        return template.format(value)

    return build


# =========================
# BODY BUILDERS
# =========================


def clock_update_body(command: Command) -> Dict[str, Any]:
    body: Dict[str, Any] = {"name": command.get("clockName")}
    clock_type = str(command.get("clockType"))

    if clock_type == "0":
        body["type"] = "countdown"
        body["duration"] = command.get("clockTime")
        body["allows_overrun"] = str(command.get("clockOverrun")) == "1"
    elif clock_type == "1":
        body["type"] = "countdown_to_time"
        body["time_of_day"] = command.get("clockElapsedTime")
    elif clock_type == "2":
        body["type"] = "elapsed"

    return body


def message_body(command: Command) -> Dict[str, Any]:
    keys = command.get("messageKeys") or []
    values = command.get("messageValues") or []
    return dict(zip(keys, values))


def stage_message_body(command: Command) -> Dict[str, Any]:
    return {"message": command.get("stageDisplayMessage")}


# =========================
# TABLE
# =========================

# action -> route; None marks actions with no HTTP counterpart
ROUTES: Dict[str, Optional[Route]] = {
    "authenticate": None,
    # library / playlists
    "libraryRequest": Route("GET", "/v1/libraries", transcode_library),
    "playlistRequestAll": Route("GET", "/v1/playlists", transcode_playlists),
    # audio
    "audioRequest": Route("GET", "/v1/audio/playlists", transcode_audio_playlists),
    "audioCurrentSong": Route("GET", "/v1/transport/audio/current", transcode_audio_current),
    "audioIsPlaying": Route("GET", "/v1/transport/audio/current", transcode_audio_playing),
    "audioPlayPause": Route("GET", "/v1/transport/audio/current", toggle_play_pause),
    "audioStartCue": Route("GET", audio_cue_path),
    # presentation
    "presentationRequest": Route("GET", request_path, transcode_presentation),
    "presentationCurrent": Route("GET", "/v1/presentation/active", transcode_presentation),
    "presentationSlideIndex": Route("GET", "/v1/presentation/slide_index", transcode_slide_index),
    "presentationTriggerIndex": Route("GET", trigger_path, transcode_trigger),
    "presentationTriggerNext": Route("GET", "/v1/presentation/active/next/trigger"),
    "presentationTriggerPrevious": Route("GET", "/v1/presentation/active/previous/trigger"),
    # timeline
    "timelinePlayPause": Route("GET", "/v1/presentation/active/timeline/play"),
    # clear
    "clearAll": Route("GET", clear_all_path),
    "clearAudio": Route("GET", "/v1/clear/layer/audio"),
    "clearMessages": Route("GET", "/v1/clear/layer/messages"),
    "clearProps": Route("GET", "/v1/clear/layer/props"),
    "clearAnnouncements": Route("GET", "/v1/clear/layer/announcements"),
    "clearText": Route("GET", "/v1/clear/layer/messages"),
    "clearVideo": Route("GET", "/v1/clear/layer/media"),
    "clearSlide": Route("GET", "/v1/clear/layer/slide"),
    # clocks
    "clockRequest": Route("GET", "/v1/timers", transcode_clocks),
    "clockStart": Route("GET", _field_path("clockIndex", "/v1/timer/{}/start")),
    "clockStop": Route("GET", _field_path("clockIndex", "/v1/timer/{}/stop")),
    "clockReset": Route("GET", _field_path("clockIndex", "/v1/timer/{}/reset")),
    "clockStopAll": Route("GET", "/v1/timers/stop"),
    "clockResetAll": Route("GET", "/v1/timers/reset"),
    "clockStartAll": Route("GET", "/v1/timers/start"),
    "clockStartSendingCurrentTime": Route("GET", "/v1/timers/current", transcode_clock_times),
    "clockStopSendingCurrentTime": None,
    "clockUpdate": Route("PUT", _field_path("clockIndex", "/v1/timer/{}"), body=clock_update_body),
    # messages
    "messageRequest": Route("GET", "/v1/messages", transcode_messages),
    "messageSend": Route(
        "POST", _field_path("messageIndex", "/v1/message/{}/trigger"), body=message_body
    ),
    "messageHide": Route("GET", _field_path("messageIndex", "/v1/message/{}/clear")),
    # stage display
    "stageDisplaySets": Route("GET", "/v1/stage/screens", transcode_stage_display),
    "stageDisplaySendMessage": Route("PUT", "/v1/stage/message", body=stage_message_body),
    "stageDisplayHideMessage": Route("DELETE", "/v1/stage/message"),
    "stageDisplayChangeLayout": Route("GET", stage_layout_path),
}


def map_command(command: Command, state: BridgeState) -> Optional[EndpointDescriptor]:
    """Classic command -> OpenAPI endpoint. Pure; no I/O."""
    action = command.get("action")

    if action not in ROUTES:
        log.warning("command_unmapped", extra={"action": action})
        return None

    route = ROUTES[action]
    if route is None:
        log.debug("command_without_endpoint", extra={"action": action})
        return None

    path = route.path(command, state) if callable(route.path) else route.path
    body = route.body(command) if route.body else None
    return EndpointDescriptor(method=route.method, path=path, handler=route.handler, body=body)
