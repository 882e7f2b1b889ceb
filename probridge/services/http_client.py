from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import httpx

log = logging.getLogger("bridge.http")


class BackendRequestError(RuntimeError):
    """Non-2xx answer from ProPresenter."""

    def __init__(self, method: str, url: str, status_code: int) -> None:
        super().__init__(f"{method} {url} -> HTTP {status_code}")
        self.method = method
        self.url = url
        self.status_code = status_code


# what a single backend call can fail with
FETCH_ERRORS = (BackendRequestError, httpx.HTTPError)


class BackendClient:
    """
    Thin async wrapper over one shared httpx.AsyncClient bound to the
    ProPresenter base URL.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_s,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
    ) -> Any:
        """
        Issue one call and return the decoded JSON body.

        Empty or non-JSON bodies (several trigger endpoints answer with
        nothing) come back as None.
        """
        kwargs = {}
        if body is not None:
            kwargs["content"] = json.dumps(body)

        r = await self._client.request(method, path, **kwargs)
        if not r.is_success:
            raise BackendRequestError(method, str(r.url), r.status_code)

        if not r.content:
            return None
        try:
            return r.json()
        except ValueError:
            log.debug("response_not_json", extra={"path": path})
            return None

    async def get_json(self, path: str) -> Any:
        return await self.request("GET", path)

    async def probe(self) -> bool:
        r = await self._client.get("/version")
        return r.is_success

    @asynccontextmanager
    async def stream_updates(self, topics: list[str]) -> AsyncIterator[httpx.Response]:
        """Open the chunked status stream; the caller iterates the bytes."""
        async with self._client.stream(
            "POST",
            "/v1/status/updates",
            content=json.dumps(topics),
            timeout=httpx.Timeout(None, connect=10.0),
        ) as r:
            if not r.is_success:
                raise BackendRequestError("POST", str(r.url), r.status_code)
            yield r
