"""httpx-backed transport implementation."""

from collections.abc import Mapping
from typing import Any

import httpx

from cachefetch.core.interfaces.transport import TransportRequest


class HttpxResponse:
    """Adapts an ``httpx.Response`` to the transport response contract."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def status(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> Mapping[str, str]:
        return self._response.headers

    @property
    def raw(self) -> httpx.Response:
        """The wrapped httpx response."""
        return self._response

    async def json(self) -> Any:
        await self._response.aread()
        return self._response.json()

    async def text(self) -> str:
        await self._response.aread()
        return self._response.text

    def __repr__(self) -> str:
        return f"<HttpxResponse [{self.status}]>"


class HttpxTransport:
    """Transport that performs calls with an ``httpx.AsyncClient``.

    Dict and list bodies are sent as JSON; strings, bytes and streams
    are sent as raw content.
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        """Initialize the transport.

        Args:
            client: Client to use. When omitted, the transport creates and
                owns one, and :meth:`aclose` closes it.
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    async def __call__(self, url: str, request: TransportRequest) -> HttpxResponse:
        kwargs: dict[str, Any] = {"headers": dict(request.headers)}
        if isinstance(request.body, (dict, list)):
            kwargs["json"] = request.body
        elif request.body is not None:
            kwargs["content"] = request.body

        response = await self._client.request(request.method, url, **kwargs)
        return HttpxResponse(response)

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()
