from plausible_proxy.utils.headers import (
    HOP_BY_HOP_HEADERS,
    build_request_headers,
    merge_headers,
    resolve_remote_ip,
    strip_hop_by_hop,
)

__all__ = [
    "HOP_BY_HOP_HEADERS",
    "build_request_headers",
    "merge_headers",
    "resolve_remote_ip",
    "strip_hop_by_hop",
]
