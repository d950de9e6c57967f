from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Tuple, Union

from starlette.requests import Request

from plausible_proxy import vars as proxy_vars
from plausible_proxy.errors import ConfigurationError
from plausible_proxy.models import PayloadModifiers
from plausible_proxy.vars import (
    DEFAULT_BASE_URL,
    DEFAULT_LOCAL_PATH,
    DEFAULT_REMOTE_IP_HEADERS,
    DEFAULT_SCRIPT_EXTENSION,
)

EVENT_PATH = "/api/event"

CallbackResult = Union[PayloadModifiers, Dict[str, Any]]
EventCallback = Callable[
    [Request, Dict[str, Any], str],
    Union[CallbackResult, Awaitable[CallbackResult]],
]


def default_event_callback(
    request: Request, payload: Dict[str, Any], remote_ip: str
) -> PayloadModifiers:
    return PayloadModifiers()


@dataclass(frozen=True)
class ProxyConfig:
    """Immutable settings shared by every request the middleware handles."""

    local_path: str = DEFAULT_LOCAL_PATH
    script_extension: str = DEFAULT_SCRIPT_EXTENSION
    remote_ip_headers: Tuple[str, ...] = DEFAULT_REMOTE_IP_HEADERS
    event_callback: EventCallback = field(default=default_event_callback)
    # Path-only matching by default; set to also require POST on /api/event
    require_event_post: bool = False
    base_url: str = DEFAULT_BASE_URL
    timeout: Optional[float] = None

    def __post_init__(self):
        if not isinstance(self.local_path, str) or not self.local_path.startswith(
            "/"
        ):
            raise ConfigurationError(
                f"local_path must be an absolute path, got {self.local_path!r}"
            )
        if not self.script_extension:
            raise ConfigurationError("script_extension must not be empty")
        if not callable(self.event_callback):
            raise ConfigurationError("event_callback must be callable")
        if not self.base_url:
            raise ConfigurationError("base_url must not be empty")
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError(
                f"timeout must be positive, got {self.timeout!r}"
            )
        # frozen: bypass __setattr__ to normalise values
        object.__setattr__(
            self, "remote_ip_headers", _normalize_headers(self.remote_ip_headers)
        )
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @property
    def script_url(self) -> str:
        return f"{self.base_url}/js/{self.script_extension}"

    @property
    def event_url(self) -> str:
        return f"{self.base_url}{EVENT_PATH}"

    @classmethod
    def from_env(
        cls, event_callback: EventCallback = default_event_callback
    ) -> "ProxyConfig":
        """Build a config from the values read in ``plausible_proxy.vars``."""
        return cls(
            local_path=proxy_vars.PLAUSIBLE_LOCAL_PATH,
            script_extension=proxy_vars.PLAUSIBLE_SCRIPT_EXTENSION,
            remote_ip_headers=tuple(proxy_vars.PLAUSIBLE_REMOTE_IP_HEADERS),
            event_callback=event_callback,
            require_event_post=proxy_vars.PLAUSIBLE_REQUIRE_EVENT_POST,
            base_url=proxy_vars.PLAUSIBLE_BASE_URL,
            timeout=_parse_timeout(proxy_vars.PLAUSIBLE_PROXY_TIMEOUT),
        )


def _normalize_headers(headers: Iterable[str]) -> Tuple[str, ...]:
    if isinstance(headers, str):
        raise ConfigurationError(
            "remote_ip_headers must be a list of header names, not a string"
        )
    return tuple(h.lower() for h in headers)


def _parse_timeout(raw: str) -> Optional[float]:
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"PLAUSIBLE_PROXY_TIMEOUT must be a number of seconds, got {raw!r}"
        ) from e
