from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from probridge.services.context import BridgeContext
from probridge.services.endpoint_mapper import EndpointDescriptor
from probridge.services.http_client import FETCH_ERRORS
from probridge.services.paths import requested_presentation_id
from probridge.services.transcoders.presentation import degraded_presentation, usable_presentation

log = logging.getLogger("bridge.executor")

PRESENTATION_REQUEST = "presentationRequest"


async def execute(
    ctx: BridgeContext,
    endpoint: Optional[EndpointDescriptor],
    command: Dict[str, Any],
) -> None:
    """
    Run one mapped endpoint and feed its answer to the endpoint handler.

    Never raises. A failed presentationRequest still reaches the handler with
    a placeholder so the remote always gets a terminal presentation message.
    """
    if endpoint is None:
        return

    action = command.get("action")
    if not endpoint.path:
        log.warning("endpoint_not_ready", extra={"action": action})
        return

    is_presentation = action == PRESENTATION_REQUEST
    if is_presentation:
        ctx.state.begin_presentation_request()

    failure: Optional[str] = None
    try:
        data = await ctx.http.request(endpoint.method, endpoint.path, body=endpoint.body)
    except FETCH_ERRORS as exc:
        data = None
        failure = str(exc)
    finally:
        if is_presentation:
            ctx.state.end_presentation_request()

    # an empty or id-less presentation is as useless as a failed one
    if failure is None and is_presentation and not usable_presentation(data):
        failure = "empty presentation body"

    if failure is not None:
        log.warning(
            "request_failed",
            extra={"action": action, "path": endpoint.path, "error": failure},
        )
        if not (is_presentation and endpoint.handler):
            return
        data = degraded_presentation(requested_presentation_id(command))

    if endpoint.handler is None:
        return

    try:
        await endpoint.handler(ctx, data, command)
    except Exception:
        log.exception("handler_failed", extra={"action": action, "path": endpoint.path})
