from typing import Callable, List, Optional

import httpx
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from starlette.requests import Request

from plausible_proxy.config import ProxyConfig
from plausible_proxy.middleware import PlausibleProxyMiddleware

PASSTHROUGH_TEXT = "passthrough"


class RecordingTransport(httpx.MockTransport):
    """MockTransport standing in for plausible.io that remembers every request."""

    def __init__(
        self, respond: Optional[Callable[[httpx.Request], httpx.Response]] = None
    ):
        self.requests: List[httpx.Request] = []
        self._respond = respond or (lambda request: httpx.Response(202, text="ok"))
        super().__init__(self._record)

    def _record(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond(request)


def failing_transport(exc_type=httpx.ConnectError) -> RecordingTransport:
    def _raise(request: httpx.Request):
        raise exc_type("plausible.io unreachable", request=request)

    return RecordingTransport(_raise)


def make_app(
    config: Optional[ProxyConfig] = None, transport: Optional[httpx.MockTransport] = None
) -> FastAPI:
    """A host app whose catch-all route marks requests that passed through."""
    app = FastAPI()
    app.state.passthrough_paths = []

    @app.api_route("/{path:path}", methods=["GET", "POST", "PUT", "DELETE"])
    async def catch_all(request: Request, path: str):
        app.state.passthrough_paths.append(request.url.path)
        return PlainTextResponse(PASSTHROUGH_TEXT)

    app.add_middleware(
        PlausibleProxyMiddleware,
        config=config or ProxyConfig(),
        transport=transport,
    )
    return app


def make_request(
    path: str = "/",
    method: str = "GET",
    headers: Optional[dict] = None,
    client=("10.0.0.1", 51234),
    body: bytes = b"",
) -> Request:
    """Build a bare Starlette request without going through an app."""
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "scheme": "https",
        "server": ("example.com", 443),
        "path": path,
        "raw_path": path.encode(),
        "query_string": b"",
        "root_path": "",
        "headers": [
            (k.lower().encode("latin-1"), v.encode("latin-1"))
            for k, v in (headers or {}).items()
        ],
        "client": client,
    }

    async def receive():
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(scope, receive)
