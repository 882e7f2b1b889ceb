from __future__ import annotations

from abc import ABC, abstractmethod

from probridge.models.status import BridgeStatus
from probridge.services.synthesizer import BridgeCallbacks


class RemoteBackend(ABC):
    """
    What the remote talks to. Two closed variants exist, picked once at
    construction: the Classic websocket relay and the OpenAPI bridge.
    """

    @abstractmethod
    async def connect(self) -> None:
        ...

    @abstractmethod
    def send(self, raw: str) -> None:
        """Queue one serialized Classic command. Never raises."""

    @abstractmethod
    async def close(self) -> None:
        ...

    @abstractmethod
    def set_callbacks(self, callbacks: BridgeCallbacks) -> None:
        ...

    @abstractmethod
    def is_using_openapi(self) -> bool:
        ...

    @abstractmethod
    def status(self) -> BridgeStatus:
        ...


def create_backend(s) -> RemoteBackend:
    from probridge.services.classic_relay import ClassicRelay
    from probridge.services.openapi_bridge import OpenAPIBridge

    if s.api_type == "open":
        return OpenAPIBridge.from_settings(s)
    return ClassicRelay.from_settings(s)
