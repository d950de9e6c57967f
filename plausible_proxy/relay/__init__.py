from plausible_proxy.relay.event import FAILURE_MESSAGE, build_event_body, relay_event
from plausible_proxy.relay.script import fetch_script, relay_script
from plausible_proxy.relay.upstream import (
    PlausibleClient,
    UpstreamResponse,
    relay_upstream,
)

__all__ = [
    "FAILURE_MESSAGE",
    "PlausibleClient",
    "UpstreamResponse",
    "build_event_body",
    "fetch_script",
    "relay_event",
    "relay_script",
    "relay_upstream",
]
