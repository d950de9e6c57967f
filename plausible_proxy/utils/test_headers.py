from plausible_proxy.utils.headers import (
    build_request_headers,
    merge_headers,
    resolve_remote_ip,
    strip_hop_by_hop,
)
from plausible_proxy.utils_tests.upstream_mock import make_request

DEFAULT_IP_HEADERS = ("fly-client-ip", "x-real-ip")


class TestMergeHeaders:
    def test_upstream_value_wins_and_key_is_folded(self):
        assert merge_headers(
            [("Content-Type", "text/plain")], [("content-type", "text/javascript")]
        ) == [("content-type", "text/javascript")]

    def test_merged_headers_overwrite_existing(self):
        assert merge_headers(
            [("Content-type", "text/plain")], [("Content-Type", "text/javascript")]
        ) == [("content-type", "text/javascript")]

    def test_lowercases_keys_regardless_of_side(self):
        assert merge_headers(
            [("Content-Type", "text/plain")], [("content-type", "text/plain")]
        ) == [("content-type", "text/plain")]
        assert merge_headers(
            [("content-type", "text/plain")], [("Content-Type", "text/plain")]
        ) == [("content-type", "text/plain")]

    def test_keeps_unrelated_existing_headers_in_order(self):
        merged = merge_headers(
            [("X-Frame-Options", "DENY"), ("Content-Type", "text/plain")],
            [("CONTENT-TYPE", "text/javascript"), ("Cache-Control", "max-age=60")],
        )
        assert merged == [
            ("x-frame-options", "DENY"),
            ("content-type", "text/javascript"),
            ("cache-control", "max-age=60"),
        ]

    def test_repeated_key_in_new_keeps_single_entry(self):
        merged = merge_headers([], [("Vary", "Origin"), ("vary", "Accept-Encoding")])
        assert merged == [("vary", "Accept-Encoding")]

    def test_empty_inputs(self):
        assert merge_headers([], []) == []

    def test_raw_bytes_values_are_kept_verbatim(self):
        note = "€ ok".encode("utf-8")
        merged = merge_headers(
            [(b"content-type", b"text/plain")],
            [(b"Content-Type", b"text/javascript"), (b"X-Note", note)],
        )
        assert merged == [(b"content-type", b"text/javascript"), (b"x-note", note)]


def test_strip_hop_by_hop_is_case_insensitive():
    headers = [
        ("Connection", "keep-alive"),
        ("Transfer-Encoding", "chunked"),
        ("content-type", "text/javascript"),
    ]
    assert strip_hop_by_hop(headers) == [("content-type", "text/javascript")]


def test_strip_hop_by_hop_accepts_raw_bytes():
    headers = [(b"Keep-Alive", b"timeout=5"), (b"x-note", "€".encode("utf-8"))]
    assert strip_hop_by_hop(headers) == [(b"x-note", "€".encode("utf-8"))]


class TestResolveRemoteIp:
    def test_uses_first_configured_header(self):
        request = make_request(headers={"fly-client-ip": "1.2.3.4"})
        assert resolve_remote_ip(request, DEFAULT_IP_HEADERS) == "1.2.3.4"

    def test_respects_header_priority(self):
        request = make_request(
            headers={"x-real-ip": "5.6.7.8", "fly-client-ip": "1.2.3.4"}
        )
        assert resolve_remote_ip(request, DEFAULT_IP_HEADERS) == "1.2.3.4"
        assert resolve_remote_ip(request, ("x-real-ip", "fly-client-ip")) == "5.6.7.8"

    def test_header_lookup_ignores_case(self):
        request = make_request(headers={"X-Real-IP": "5.6.7.8"})
        assert resolve_remote_ip(request, DEFAULT_IP_HEADERS) == "5.6.7.8"

    def test_falls_back_to_peer_address(self):
        request = make_request(client=("192.168.1.100", 40000))
        assert resolve_remote_ip(request, DEFAULT_IP_HEADERS) == "192.168.1.100"

    def test_ipv6_peer_address(self):
        request = make_request(client=("::1", 40000))
        assert resolve_remote_ip(request, DEFAULT_IP_HEADERS) == "::1"

    def test_unknown_when_no_peer(self):
        request = make_request(client=None)
        assert resolve_remote_ip(request, DEFAULT_IP_HEADERS) == "unknown"

    def test_empty_header_list_uses_peer(self):
        request = make_request(headers={"fly-client-ip": "1.2.3.4"})
        assert resolve_remote_ip(request, ()) == "10.0.0.1"


class TestBuildRequestHeaders:
    def test_order_and_extras(self):
        assert build_request_headers(
            "Mozilla/5.0", "1.2.3.4", [("Content-Type", "application/json")]
        ) == [
            ("X-Forwarded-For", "1.2.3.4"),
            ("User-Agent", "Mozilla/5.0"),
            ("Content-Type", "application/json"),
        ]

    def test_missing_user_agent_is_sent_empty(self):
        assert build_request_headers(None, "1.2.3.4") == [
            ("X-Forwarded-For", "1.2.3.4"),
            ("User-Agent", ""),
        ]
