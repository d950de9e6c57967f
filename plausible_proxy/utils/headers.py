from typing import AnyStr, Iterable, List, Optional, Sequence, Tuple

from starlette.requests import Request

Header = Tuple[str, str]
# str pairs, or raw ASGI bytes pairs relayed without re-encoding
AnyHeader = Tuple[AnyStr, AnyStr]

# Hop-by-hop headers that should NOT be relayed (RFC 2616)
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
}


def merge_headers(
    existing: Iterable[AnyHeader], new: Iterable[AnyHeader]
) -> List[AnyHeader]:
    """
    Merge ``new`` onto ``existing`` with case-insensitive keys.

    Works on ``str`` pairs or on raw ``bytes`` pairs (values untouched).
    All keys are lower-cased. Every key appears exactly once in the result,
    in order of first appearance; values from ``new`` overwrite existing ones
    and the last occurrence wins when a side repeats a key.
    """
    merged = {}
    for name, value in existing:
        merged[name.lower()] = value
    for name, value in new:
        merged[name.lower()] = value
    return list(merged.items())


def _header_name(name: AnyStr) -> str:
    if isinstance(name, bytes):
        name = name.decode("latin-1")
    return name.lower()


def strip_hop_by_hop(headers: Iterable[AnyHeader]) -> List[AnyHeader]:
    return [
        (name, value)
        for name, value in headers
        if _header_name(name) not in HOP_BY_HOP_HEADERS
    ]


def resolve_remote_ip(request: Request, header_names: Sequence[str]) -> str:
    """
    Return the client's address as reported by the first proxy header present,
    falling back to the peer address of the connection.
    """
    for name in header_names:
        value = request.headers.get(name)
        if value is not None:
            return value
    return request.client.host if request.client else "unknown"


def build_request_headers(
    user_agent: Optional[str], remote_ip: str, extra: Iterable[Header] = ()
) -> List[Header]:
    # An absent User-Agent is sent empty so httpx never reports its own
    return [
        ("X-Forwarded-For", remote_ip),
        ("User-Agent", user_agent or ""),
        *extra,
    ]
