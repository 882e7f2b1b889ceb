from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from pydantic import BaseModel

log = logging.getLogger("bridge.synth")

MessageEvent = Dict[str, str]


@dataclass
class BridgeCallbacks:
    on_open: Optional[Callable[[], None]] = None
    on_close: Optional[Callable[[], None]] = None
    on_message: Optional[Callable[[MessageEvent], None]] = None
    on_error: Optional[Callable[[Dict[str, Any]], None]] = None


class MessageSynthesizer:
    """
    Wraps a Classic-shaped payload into a fake socket message event
    (`{"data": "<json>"}`) and hands it to the registered consumer.
    """

    def __init__(self, callbacks: Optional[BridgeCallbacks] = None) -> None:
        self.callbacks = callbacks or BridgeCallbacks()
        self.emitted = 0

    def emit(self, payload: Union[BaseModel, Dict[str, Any]]) -> None:
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(exclude_none=True)

        on_message = self.callbacks.on_message
        if on_message is None:
            return

        self.emitted += 1
        try:
            on_message({"data": json.dumps(payload)})
        except Exception:
            log.exception("consumer_on_message_failed", extra={"action": payload.get("action")})

    def relay(self, text: str) -> None:
        """Pass an already serialized Classic frame through untouched."""
        on_message = self.callbacks.on_message
        if on_message is None:
            return

        self.emitted += 1
        try:
            on_message({"data": text})
        except Exception:
            log.exception("consumer_on_message_failed", extra={"action": "relay"})

    # =========================
    # LIFECYCLE SIGNALS
    # =========================

    def opened(self) -> None:
        self._call(self.callbacks.on_open)

    def closed(self) -> None:
        self._call(self.callbacks.on_close)

    def error(self, message: str) -> None:
        self._call(self.callbacks.on_error, {"message": message})

    def _call(self, cb: Optional[Callable[..., None]], *args: Any) -> None:
        if cb is None:
            return
        try:
            cb(*args)
        except Exception:
            log.exception("consumer_callback_failed")
