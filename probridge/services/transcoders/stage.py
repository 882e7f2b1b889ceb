from __future__ import annotations

import logging
from typing import Any, Dict

from probridge.models.controls import StageLayout, StageScreen
from probridge.models.events import StageDisplaySetsMessage
from probridge.services.context import BridgeContext
from probridge.services.http_client import FETCH_ERRORS
from probridge.services.paths import id_of, name_of, ref_uuid

log = logging.getLogger("bridge.stage")


async def transcode_stage_display(ctx: BridgeContext, data: Any, command: Dict[str, Any]) -> None:
    """Screens come with the request; layouts need a second call."""
    screens = [
        StageScreen(
            stageScreenUUID=id_of(s),
            stageScreenName=name_of(s),
            stageLayoutSelectedLayoutUUID=ref_uuid(s.get("layout_id")),
        )
        for s in (data if isinstance(data, list) else [])
        if isinstance(s, dict)
    ]

    try:
        raw_layouts = await ctx.http.get_json("/v1/stage/layouts")
    except FETCH_ERRORS as exc:
        log.warning("stage_layouts_fetch_failed", extra={"error": str(exc)})
        raw_layouts = []

    layouts = [
        StageLayout(stageLayoutUUID=id_of(layout), stageLayoutName=name_of(layout))
        for layout in (raw_layouts if isinstance(raw_layouts, list) else [])
        if isinstance(layout, dict)
    ]

    ctx.synth.emit(StageDisplaySetsMessage(stageScreens=screens, stageLayouts=layouts))
