from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from probridge.models.events import PlaylistAllMessage
from probridge.models.playlist import PlaylistItem, PlaylistNode, map_item_type
from probridge.services.context import BridgeContext
from probridge.services.http_client import FETCH_ERRORS
from probridge.services.paths import id_of, name_of

log = logging.getLogger("bridge.playlist")


def playlist_item(raw: Dict[str, Any]) -> PlaylistItem:
    info = raw.get("presentation_info") or {}
    return PlaylistItem(
        playlistItemType=map_item_type(raw.get("type")),
        playlistItemLocation=id_of({"id": raw.get("id")}),
        playlistItemName=name_of(raw),
        presentationUUID=info.get("presentation_uuid") or "",
    )


async def fetch_playlist_items(ctx: BridgeContext, playlist_id: str) -> List[PlaylistItem]:
    """Items of one playlist; a failed fetch degrades to no items."""
    try:
        data = await ctx.http.get_json(f"/v1/playlist/{playlist_id}")
    except FETCH_ERRORS as exc:
        log.warning("playlist_fetch_failed", extra={"playlist": playlist_id, "error": str(exc)})
        return []

    items = data.get("items") if isinstance(data, dict) else None
    return [playlist_item(i) for i in items or [] if isinstance(i, dict)]


def _node_type(raw: Dict[str, Any]) -> str:
    return raw.get("field_type") or raw.get("type") or "playlist"


async def resolve_node(ctx: BridgeContext, raw: Dict[str, Any]) -> Optional[PlaylistNode]:
    node_id = id_of(raw)
    kind = _node_type(raw)

    if kind == "group":
        children = await asyncio.gather(
            *(resolve_node(ctx, c) for c in raw.get("children") or [] if isinstance(c, dict))
        )
        return PlaylistNode(
            playlistLocation=node_id,
            playlistName=name_of(raw),
            playlistType="playlistTypeGroup",
            playlist=[c for c in children if c is not None],
        )

    if kind != "playlist" or not node_id:
        log.warning("playlist_node_skipped", extra={"type": kind, "playlist": name_of(raw)})
        return None

    return PlaylistNode(
        playlistLocation=node_id,
        playlistName=name_of(raw),
        playlist=await fetch_playlist_items(ctx, node_id),
    )


async def transcode_playlists(ctx: BridgeContext, data: Any, command: Dict[str, Any]) -> None:
    """
    Resolve the whole playlist tree (groups nest arbitrarily deep) and emit it
    in one message. Nothing is sent until every leaf has settled.
    """
    roots = [r for r in data if isinstance(r, dict)] if isinstance(data, list) else []
    resolved = await asyncio.gather(*(resolve_node(ctx, r) for r in roots))
    playlists = [p for p in resolved if p is not None]

    log.info("playlists_sent", extra={"playlists": len(playlists)})
    ctx.synth.emit(PlaylistAllMessage(playlistAll=playlists))
