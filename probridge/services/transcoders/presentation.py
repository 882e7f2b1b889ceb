from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from probridge.models.events import (
    PresentationCurrentMessage,
    SlideIndexMessage,
    TriggerIndexMessage,
)
from probridge.models.presentation import (
    DESTINATION_ANNOUNCEMENT,
    Presentation,
    Slide,
    SlideGroup,
)
from probridge.services.context import BridgeContext
from probridge.services.paths import color_to_hex, id_of, name_of

log = logging.getLogger("bridge.presentation")


def thumbnail_url(ctx: BridgeContext, presentation_id: str, index: int, quality: str) -> str:
    return (
        f"{ctx.thumbnail_base_url}/v1/presentation/{presentation_id}"
        f"/thumbnail/{index}?quality={quality}"
    )


def build_slide_groups(
    ctx: BridgeContext,
    presentation_id: str,
    raw_groups: List[Dict[str, Any]],
    quality: str,
) -> List[SlideGroup]:
    # thumbnails are addressed by position in the whole presentation,
    # so the index keeps counting across groups
    index = 0
    groups: List[SlideGroup] = []
    for raw in raw_groups:
        slides: List[Slide] = []
        for s in raw.get("slides") or []:
            slides.append(
                Slide(
                    slideEnabled=s.get("enabled") is not False,
                    slideNotes=s.get("notes") or "",
                    slideText=s.get("text") or "",
                    slideLabel=s.get("label") or "",
                    slideImage=thumbnail_url(ctx, presentation_id, index, quality),
                    slideIndex=index,
                )
            )
            index += 1
        groups.append(
            SlideGroup(
                groupName=raw.get("name") or "",
                groupColor=color_to_hex(raw.get("color")),
                groupSlides=slides,
            )
        )
    return groups


def implicit_group(
    ctx: BridgeContext, presentation_id: str, slide_count: int, quality: str
) -> SlideGroup:
    return SlideGroup(
        groupSlides=[
            Slide(slideImage=thumbnail_url(ctx, presentation_id, i, quality), slideIndex=i)
            for i in range(slide_count)
        ]
    )


def build_presentation(
    ctx: BridgeContext,
    raw: Dict[str, Any],
    presentation_id: str,
    quality: str,
) -> Presentation:
    raw_groups = raw.get("groups") or []
    slide_count = int(raw.get("slide_count") or 0)

    if raw_groups:
        groups = build_slide_groups(ctx, presentation_id, raw_groups, quality)
    elif slide_count > 0:
        groups = [implicit_group(ctx, presentation_id, slide_count, quality)]
    else:
        groups = []

    return Presentation(
        presentationName=name_of(raw),
        presentationPath=presentation_id,
        presentationSlideGroups=groups,
    )


def usable_presentation(data: Any) -> bool:
    """True when `data` carries a presentation object with an id."""
    if not isinstance(data, dict):
        return False
    raw = data.get("presentation") if "presentation" in data else data
    return isinstance(raw, dict) and bool(id_of(raw))


def degraded_presentation(presentation_id: str) -> Dict[str, Any]:
    """Stand-in for a presentation that could not be fetched (deleted, renamed)."""
    return {
        "presentation": {
            "id": {"uuid": presentation_id, "name": "Error", "index": 0},
            "groups": [],
            "slide_count": 0,
            "has_timeline": False,
            "presentation_path": "Error loading presentation",
        }
    }


# =========================
# HANDLERS
# =========================


async def transcode_presentation(
    ctx: BridgeContext, data: Any, command: Dict[str, Any]
) -> None:
    if not isinstance(data, dict):
        log.info("presentation_empty", extra={"command": command.get("action")})
        return

    raw = data.get("presentation") or data
    presentation_id = id_of(raw) or str(command.get("presentationPath") or "")
    if not presentation_id:
        log.warning("presentation_without_id")
        return

    quality = str(command.get("presentationSlideQuality") or ctx.slide_quality)
    presentation = build_presentation(ctx, raw, presentation_id, quality)

    if ctx.state.is_announcement(presentation_id):
        presentation.presentationDestination = DESTINATION_ANNOUNCEMENT

    ctx.state.cache_presentation(presentation)

    ctx.synth.emit(
        PresentationCurrentMessage(
            presentationPath=command.get("presentationPath") or presentation_id,
            presentation=presentation,
            presentationUUID=command.get("presentationUUID") or None,
        )
    )
    log.debug(
        "presentation_sent",
        extra={
            "uuid": presentation_id,
            "groups": len(presentation.presentationSlideGroups),
            "slides": presentation.slide_count(),
        },
    )


def transcode_announcement(ctx: BridgeContext, announcement: Dict[str, Any]) -> None:
    """The announcement stream already carries every group and slide."""
    presentation_id = id_of(announcement)
    presentation = Presentation(
        presentationName=name_of(announcement),
        presentationPath=presentation_id,
        presentationSlideGroups=build_slide_groups(
            ctx, presentation_id, announcement.get("groups") or [], ctx.stream_slide_quality
        ),
        presentationDestination=DESTINATION_ANNOUNCEMENT,
    )
    ctx.synth.emit(
        PresentationCurrentMessage(presentationPath=presentation_id, presentation=presentation)
    )


def slide_pointer_message(pointer: Any) -> Optional[SlideIndexMessage]:
    """`{"index": 3, "presentation_id": {"uuid": ...}}` -> slide index event."""
    if not isinstance(pointer, dict):
        return None
    index = pointer.get("index")
    uuid = id_of({"id": pointer.get("presentation_id")})
    if index is None or not uuid:
        return None
    return SlideIndexMessage(slideIndex=int(index), presentationPath=uuid)


async def transcode_slide_index(
    ctx: BridgeContext, data: Any, command: Dict[str, Any]
) -> None:
    if not isinstance(data, dict) or "presentation_index" not in data:
        return
    pointer = data.get("presentation_index") or {}
    uuid = id_of({"id": pointer.get("presentation_id")}) or None
    ctx.synth.emit(SlideIndexMessage(slideIndex=int(pointer.get("index") or 0), presentationPath=uuid))


async def transcode_trigger(ctx: BridgeContext, data: Any, command: Dict[str, Any]) -> None:
    ctx.synth.emit(
        TriggerIndexMessage(
            slideIndex=command.get("slideIndex") if command.get("slideIndex") is not None else "0",
            presentationPath=command.get("presentationPath") or "",
            presentationDestination=command.get("presentationDestination") or 0,
        )
    )
