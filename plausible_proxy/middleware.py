from __future__ import annotations

import logging
from typing import Optional

import httpx
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from plausible_proxy.config import EVENT_PATH, ProxyConfig
from plausible_proxy.relay.event import relay_event
from plausible_proxy.relay.script import relay_script
from plausible_proxy.relay.upstream import PlausibleClient

logger = logging.getLogger("uvicorn.error")


class PlausibleProxyMiddleware(BaseHTTPMiddleware):
    """
    Serve the Plausible script and events endpoints from the application's
    own origin. Every other request passes through untouched.

    Usage::

        app.add_middleware(PlausibleProxyMiddleware, config=ProxyConfig())
    """

    def __init__(
        self,
        app,
        *,
        config: Optional[ProxyConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(app)
        self.config = config if config is not None else ProxyConfig.from_env()
        self.client = PlausibleClient(self.config, transport=transport)

    def matches_event(self, request: Request) -> bool:
        if request.url.path != EVENT_PATH:
            return False
        return not self.config.require_event_post or request.method == "POST"

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        if path == self.config.local_path:
            logger.debug(f"[Plausible-Proxy] {request.method} {path} -> script relay")
            return await relay_script(request, self.config, self.client, call_next)

        if self.matches_event(request):
            logger.debug(f"[Plausible-Proxy] {request.method} {path} -> event relay")
            return await relay_event(request, self.config, self.client)

        return await call_next(request)
