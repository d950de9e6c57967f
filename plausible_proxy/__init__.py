"""Proxy Plausible Analytics through your own Starlette/FastAPI application."""

from plausible_proxy.config import ProxyConfig, default_event_callback
from plausible_proxy.errors import (
    CallbackError,
    ConfigurationError,
    MalformedRequestBody,
    PlausibleProxyError,
    UpstreamTransportError,
)
from plausible_proxy.middleware import PlausibleProxyMiddleware
from plausible_proxy.models import PayloadModifiers

__all__ = [
    "CallbackError",
    "ConfigurationError",
    "MalformedRequestBody",
    "PayloadModifiers",
    "PlausibleProxyError",
    "PlausibleProxyMiddleware",
    "ProxyConfig",
    "UpstreamTransportError",
    "default_event_callback",
]
