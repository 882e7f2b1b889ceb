from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Tuple

import httpx
import pytest

from probridge.services.context import BridgeContext
from probridge.services.http_client import BackendClient
from probridge.services.synthesizer import BridgeCallbacks, MessageSynthesizer
from probridge.state.bridge_state import BridgeState

BASE_URL = "http://propresenter.test:50001"


class FakeProPresenter:
    """
    In-memory OpenAPI backend behind httpx.MockTransport.

    A route value is either JSON data (200), an int status with an empty
    body, or a callable taking the request.
    """

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.calls: List[Tuple[str, str]] = []
        self.bodies: Dict[Tuple[str, str], Any] = {}

    def on(self, method: str, path: str, reply: Any) -> "FakeProPresenter":
        self.routes[(method, path)] = reply
        return self

    def get(self, path: str, reply: Any) -> "FakeProPresenter":
        return self.on("GET", path, reply)

    def called(self, method: str, path: str) -> int:
        return self.calls.count((method, path))

    def handler(self, request: httpx.Request) -> httpx.Response:
        key = (request.method, request.url.path)
        self.calls.append(key)
        if request.content:
            self.bodies[key] = json.loads(request.content)

        reply = self.routes.get(key)
        if reply is None:
            return httpx.Response(404)
        if callable(reply):
            return reply(request)
        if isinstance(reply, int):
            return httpx.Response(reply)
        return httpx.Response(200, json=reply)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class Sink:
    """Collects what the bridge hands to its consumer."""

    def __init__(self) -> None:
        self.messages: List[Dict[str, Any]] = []
        self.opened = 0
        self.closed = 0
        self.errors: List[str] = []

    def callbacks(self) -> BridgeCallbacks:
        return BridgeCallbacks(
            on_open=self._open,
            on_close=self._close,
            on_message=lambda event: self.messages.append(json.loads(event["data"])),
            on_error=lambda error: self.errors.append(error["message"]),
        )

    def _open(self) -> None:
        self.opened += 1

    def _close(self) -> None:
        self.closed += 1

    def of(self, action: str) -> List[Dict[str, Any]]:
        return [m for m in self.messages if m.get("action") == action]

    @property
    def actions(self) -> List[str]:
        return [m.get("action") for m in self.messages]


@pytest.fixture
def fake_pp() -> FakeProPresenter:
    return FakeProPresenter()


@pytest.fixture
def sink() -> Sink:
    return Sink()


@pytest.fixture
def make_ctx(fake_pp: FakeProPresenter, sink: Sink) -> Callable[..., BridgeContext]:
    def factory(**kwargs: Any) -> BridgeContext:
        http = BackendClient(BASE_URL, transport=fake_pp.transport())
        return BridgeContext(
            http=http,
            state=kwargs.pop("state", None) or BridgeState(),
            synth=MessageSynthesizer(sink.callbacks()),
            **kwargs,
        )

    return factory
