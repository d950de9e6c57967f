class PlausibleProxyError(Exception):
    """Base class for every error raised by the proxy."""


class ConfigurationError(PlausibleProxyError, ValueError):
    pass


class UpstreamTransportError(PlausibleProxyError):
    """Plausible could not be reached (DNS, TLS, connect, timeout...)."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{url}: {message}")
        self.url = url


class MalformedRequestBody(PlausibleProxyError):
    """The inbound event body was unreadable or not a JSON object."""


class CallbackError(PlausibleProxyError):
    """The event callback raised or returned something unusable."""
