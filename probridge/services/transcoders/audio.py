from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from probridge.models.events import AudioCurrentSongMessage, AudioPlaylistMessage
from probridge.models.playlist import AudioPlaylist, AudioPlaylistItem
from probridge.services.context import BridgeContext
from probridge.services.http_client import FETCH_ERRORS
from probridge.services.paths import id_of, name_of
from probridge.state.bridge_state import AudioStatus, AudioTrack

log = logging.getLogger("bridge.audio")

PLAYING = "Playing"
PAUSED = "Pause"


# =========================
# PLAYLISTS
# =========================


async def _audio_playlist(ctx: BridgeContext, raw: Dict[str, Any]) -> Optional[AudioPlaylist]:
    playlist_id = id_of(raw)
    if not playlist_id:
        return None

    name = name_of(raw)
    try:
        details = await ctx.http.get_json(f"/v1/audio/playlist/{playlist_id}")
    except FETCH_ERRORS as exc:
        log.warning("audio_playlist_fetch_failed", extra={"playlist": name, "error": str(exc)})
        return None

    items = details.get("items") if isinstance(details, dict) else None
    ident = raw.get("id") if isinstance(raw.get("id"), dict) else {}
    return AudioPlaylist(
        playlistLocation=playlist_id,
        playlistName=name,
        playlistIndex=int(ident.get("index") or 0),
        playlist=[
            AudioPlaylistItem(
                playlistItemLocation=f"{playlist_id}:{id_of({'id': item.get('id')})}",
                playlistItemName=name_of({"id": item.get("id")}),
                playlistItemType=item.get("type") or "audio",
            )
            for item in items or []
            if isinstance(item, dict)
        ],
    )


async def transcode_audio_playlists(ctx: BridgeContext, data: Any, command: Dict[str, Any]) -> None:
    if not isinstance(data, list):
        ctx.synth.emit(AudioPlaylistMessage(audioPlaylist=[]))
        return

    results = await asyncio.gather(*(_audio_playlist(ctx, p) for p in data if isinstance(p, dict)))
    # completion order says nothing about the order ProPresenter shows
    playlists = sorted((p for p in results if p is not None), key=lambda p: p.playlistIndex)
    ctx.synth.emit(AudioPlaylistMessage(audioPlaylist=playlists))


# =========================
# TRANSPORT
# =========================


def audio_status(data: Any) -> AudioStatus:
    if isinstance(data, dict) and data.get("is_playing"):
        return PLAYING
    if isinstance(data, dict) and data.get("name"):
        return PAUSED
    return None


def emit_audio_current(ctx: BridgeContext, data: Any) -> None:
    """Send the current track only when uuid, name or artist moved."""
    if isinstance(data, dict) and data.get("name"):
        track = AudioTrack.from_payload(data)
        if ctx.state.swap_audio_track(track):
            ctx.synth.emit(
                AudioCurrentSongMessage(
                    audioName=track.name,
                    audioArtist=track.artist,
                    audioUuid=track.uuid or "",
                )
            )
        return

    if ctx.state.swap_audio_track(None):
        ctx.synth.emit(AudioCurrentSongMessage())


def emit_audio_playing(ctx: BridgeContext, data: Any) -> None:
    status = audio_status(data)
    if ctx.state.swap_audio_status(status):
        # a null status is meaningful to the remote, so no model dump here
        ctx.synth.emit({"action": "audioIsPlaying", "audioIsPlaying": status})


async def transcode_audio_current(ctx: BridgeContext, data: Any, command: Dict[str, Any]) -> None:
    emit_audio_current(ctx, data)


async def transcode_audio_playing(ctx: BridgeContext, data: Any, command: Dict[str, Any]) -> None:
    emit_audio_playing(ctx, data)


async def toggle_play_pause(ctx: BridgeContext, data: Any, command: Dict[str, Any]) -> None:
    """
    Send the opposite transport action, then read the transport back so the
    reported state is ProPresenter's, not a local guess.
    """
    action = "pause" if isinstance(data, dict) and data.get("is_playing") else "play"
    try:
        await ctx.http.get_json(f"/v1/transport/audio/{action}")
        updated = await ctx.http.get_json("/v1/transport/audio/current")
    except FETCH_ERRORS as exc:
        log.warning("audio_toggle_failed", extra={"action": action, "error": str(exc)})
        return
    emit_audio_playing(ctx, updated)
