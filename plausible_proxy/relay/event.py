import inspect
import json
import logging
from collections.abc import Mapping
from typing import Any, Dict

from opentelemetry import trace
from pydantic import ValidationError
from starlette.requests import ClientDisconnect, Request
from starlette.responses import PlainTextResponse, Response

from plausible_proxy.config import ProxyConfig
from plausible_proxy.errors import (
    CallbackError,
    MalformedRequestBody,
    PlausibleProxyError,
)
from plausible_proxy.models import InboundEvent, OutboundEventBody, PayloadModifiers
from plausible_proxy.relay.upstream import PlausibleClient, relay_upstream
from plausible_proxy.utils.exception_logging import (
    format_exception_message,
    log_exception_with_details,
)
from plausible_proxy.utils.headers import build_request_headers, resolve_remote_ip
from plausible_proxy.utils.traced_requests import traced_relay

tracer = trace.get_tracer(__name__)
logger = logging.getLogger("uvicorn.error")

FAILURE_MESSAGE = "plausible_proxy failed to POST /api/event"


async def read_payload(request: Request) -> Dict[str, Any]:
    try:
        body = await request.body()
    except ClientDisconnect as e:
        raise MalformedRequestBody(
            "client disconnected before sending the body"
        ) from e
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedRequestBody(f"event body is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise MalformedRequestBody(
            f"event body must be a JSON object, got {type(payload).__name__}"
        )
    return payload


async def run_callback(
    config: ProxyConfig, request: Request, payload: Dict[str, Any], remote_ip: str
) -> PayloadModifiers:
    try:
        result = config.event_callback(request, payload, remote_ip)
        if inspect.isawaitable(result):
            result = await result
    except CallbackError:
        raise
    except Exception as e:
        raise CallbackError(f"event callback raised {type(e).__name__}: {e}") from e

    if isinstance(result, PayloadModifiers):
        return result
    if not isinstance(result, Mapping):
        raise CallbackError(
            "event callback must return PayloadModifiers or a mapping, "
            f"got {type(result).__name__}"
        )
    try:
        return PayloadModifiers.model_validate(dict(result))
    except ValidationError as e:
        raise CallbackError(f"event callback returned invalid modifiers: {e}") from e


def build_event_body(
    payload: Dict[str, Any], modifiers: PayloadModifiers
) -> Dict[str, Any]:
    """Map the tracker's short keys onto the Plausible Events API body."""
    event = InboundEvent.model_validate(payload)
    try:
        return OutboundEventBody.from_event(event, modifiers).to_payload()
    except ValueError as e:
        # props come from the callback and may hold values JSON cannot encode
        raise CallbackError(f"event props are not JSON serialisable: {e}") from e


async def relay_event(
    request: Request, config: ProxyConfig, client: PlausibleClient
) -> Response:
    """
    Forward a tracked event to Plausible.

    Once entered this always produces the final response: any failure along
    the way is logged and answered with a plain 500.
    """
    remote_ip = resolve_remote_ip(request, config.remote_ip_headers)

    with traced_relay(
        tracer,
        "plausible_event_relay",
        request.url.path,
        remote_ip,
        f"[Event-Relay] {request.method} {request.url.path} -> {config.event_url}",
        extra_attrs={"proxy.target_url": config.event_url},
    ) as span:
        try:
            payload = await read_payload(request)
            modifiers = await run_callback(config, request, payload, remote_ip)
            body = build_event_body(payload, modifiers)
            headers = build_request_headers(
                request.headers.get("user-agent"),
                remote_ip,
                [("Content-Type", "application/json")],
            )
            upstream = await client.post(
                config.event_url, headers, json.dumps(body).encode("utf-8")
            )
            span.set_attribute("proxy.status_code", upstream.status_code)
            return await relay_upstream(upstream)
        except PlausibleProxyError as e:
            span.set_attribute("proxy.error", format_exception_message(e))
            log_exception_with_details(
                logger, "[Event-Relay] Failed to relay event;", e
            )
            return PlainTextResponse(FAILURE_MESSAGE, status_code=500)
