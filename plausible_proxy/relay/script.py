import logging
from typing import Awaitable, Callable, Iterable

from opentelemetry import trace
from starlette.requests import Request
from starlette.responses import Response

from plausible_proxy.config import ProxyConfig
from plausible_proxy.errors import UpstreamTransportError
from plausible_proxy.relay.upstream import (
    PlausibleClient,
    UpstreamResponse,
    relay_upstream,
)
from plausible_proxy.utils.exception_logging import (
    format_exception_message,
    log_exception_with_details,
)
from plausible_proxy.utils.headers import (
    Header,
    build_request_headers,
    resolve_remote_ip,
)
from plausible_proxy.utils.traced_requests import traced_relay

tracer = trace.get_tracer(__name__)
logger = logging.getLogger("uvicorn.error")

CallNext = Callable[[Request], Awaitable[Response]]


async def fetch_script(
    config: ProxyConfig, client: PlausibleClient, headers: Iterable[Header]
) -> UpstreamResponse:
    return await client.get(config.script_url, headers)


async def relay_script(
    request: Request,
    config: ProxyConfig,
    client: PlausibleClient,
    call_next: CallNext,
) -> Response:
    """
    Serve the Plausible script from the local path.

    The page still renders without analytics, so a failed fetch hands the
    request on to the rest of the application instead of failing it.
    """
    remote_ip = resolve_remote_ip(request, config.remote_ip_headers)
    headers = build_request_headers(request.headers.get("user-agent"), remote_ip)

    with traced_relay(
        tracer,
        "plausible_script_relay",
        request.url.path,
        remote_ip,
        f"[Script-Relay] {request.url.path} -> {config.script_url}",
        extra_attrs={"proxy.target_url": config.script_url},
    ) as span:
        try:
            upstream = await fetch_script(config, client, headers)
            span.set_attribute("proxy.status_code", upstream.status_code)
            return await relay_upstream(upstream)
        except UpstreamTransportError as e:
            span.set_attribute("proxy.error", format_exception_message(e))
            log_exception_with_details(
                logger, "[Script-Relay] Failed to fetch Plausible script;", e
            )
            return await call_next(request)
