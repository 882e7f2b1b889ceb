from __future__ import annotations

from typing import Any, Dict

from probridge.models.controls import Message
from probridge.models.events import MessageRequestMessage
from probridge.services.context import BridgeContext
from probridge.services.paths import id_of, name_of


async def transcode_messages(ctx: BridgeContext, data: Any, command: Dict[str, Any]) -> None:
    messages = [
        Message(
            messageIndex=id_of(msg, str(i)),
            messageName=name_of(msg),
            messageComponents=msg.get("tokens") or [],
        )
        for i, msg in enumerate(data if isinstance(data, list) else [])
        if isinstance(msg, dict)
    ]
    ctx.synth.emit(MessageRequestMessage(messages=messages))
