from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List

from probridge.models.events import LibraryMessage
from probridge.services.context import BridgeContext
from probridge.services.http_client import FETCH_ERRORS
from probridge.services.paths import id_of, library_path, name_of

log = logging.getLogger("bridge.library")


async def _library_paths(ctx: BridgeContext, library_id: str, library_name: str) -> List[str]:
    try:
        contents = await ctx.http.get_json(f"/v1/library/{library_id}")
    except FETCH_ERRORS as exc:
        log.warning("library_fetch_failed", extra={"library": library_name, "error": str(exc)})
        return []

    items = contents.get("items") if isinstance(contents, dict) else None
    return [
        library_path(library_name, name_of(item, "Presentation"), id_of(item))
        for item in items or []
    ]


async def transcode_library(ctx: BridgeContext, data: Any, command: Dict[str, Any]) -> None:
    """
    /v1/libraries only lists libraries; every library is fetched for its
    presentations and one aggregate message goes out once all have settled.
    """
    if not isinstance(data, list):
        log.warning("library_list_invalid")
        ctx.synth.emit(LibraryMessage(library=[]))
        return

    fetches = []
    for library in data:
        library_id = id_of(library)
        if not library_id:
            continue
        fetches.append(_library_paths(ctx, library_id, name_of(library)))

    results = await asyncio.gather(*fetches)
    paths = [p for chunk in results for p in chunk]

    log.info("library_sent", extra={"libraries": len(fetches), "presentations": len(paths)})
    ctx.synth.emit(LibraryMessage(library=paths))
