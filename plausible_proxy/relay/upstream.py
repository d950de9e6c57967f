import logging
from dataclasses import dataclass
from typing import Iterable, Optional

import httpx
from starlette.background import BackgroundTask
from starlette.responses import StreamingResponse

from plausible_proxy.config import ProxyConfig
from plausible_proxy.errors import UpstreamTransportError
from plausible_proxy.utils.headers import Header, merge_headers, strip_hop_by_hop

logger = logging.getLogger("uvicorn.error")


@dataclass
class UpstreamResponse:
    """An open, not yet consumed response from Plausible."""

    response: httpx.Response
    client: httpx.AsyncClient

    @property
    def status_code(self) -> int:
        return self.response.status_code

    async def aclose(self) -> None:
        try:
            await self.response.aclose()
        finally:
            await self.client.aclose()


class PlausibleClient:
    """
    Issues the single outbound call each relay makes.

    A fresh ``httpx.AsyncClient`` is opened per call and stays open until the
    relayed body has been streamed to the visitor.
    """

    def __init__(
        self,
        config: ProxyConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.timeout),
            follow_redirects=False,
            transport=self.transport,
        )

    async def get(self, url: str, headers: Iterable[Header]) -> UpstreamResponse:
        return await self._send("GET", url, headers)

    async def post(
        self, url: str, headers: Iterable[Header], content: bytes
    ) -> UpstreamResponse:
        return await self._send("POST", url, headers, content=content)

    async def _send(
        self,
        method: str,
        url: str,
        headers: Iterable[Header],
        content: Optional[bytes] = None,
    ) -> UpstreamResponse:
        client = self._client()
        try:
            request = client.build_request(
                method, url, headers=list(headers), content=content
            )
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            raise UpstreamTransportError(url, f"{type(e).__name__}: {e}") from e
        logger.debug(f"[Upstream] {method} {url} -> {response.status_code}")
        return UpstreamResponse(response=response, client=client)


async def relay_upstream(upstream: UpstreamResponse) -> StreamingResponse:
    """
    Build the visitor-facing response from an upstream one: same status,
    upstream headers merged over ours, raw header and body bytes passed through.

    If the response cannot be built the upstream is closed and the failure
    raised as ``UpstreamTransportError`` so relays handle it like any other.
    """
    try:
        response = StreamingResponse(
            upstream.response.aiter_raw(),
            status_code=upstream.status_code,
            background=BackgroundTask(upstream.aclose),
        )
        response.raw_headers = merge_headers(
            response.raw_headers, strip_hop_by_hop(upstream.response.headers.raw)
        )
    except Exception as e:
        await upstream.aclose()
        url = str(upstream.response.request.url)
        raise UpstreamTransportError(
            url, f"response could not be relayed: {type(e).__name__}: {e}"
        ) from e
    return response
