# =============================================================================
# tests/test_rate_limit.py - Rate Limiting Tests
# =============================================================================
# Tests for lib/rate_limit.py and the RateLimitMiddleware:
# - Client IP resolution behind trusted proxies
# - IPv6 subnet grouping
# - Fixed-window counting
# - Draft-8 headers and the 429 response
# =============================================================================

import base64
import hashlib

import pytest
from fastapi.testclient import TestClient

from lib.rate_limit import (
    RATE_LIMIT_MESSAGE,
    FixedWindowLimiter,
    RateLimitResult,
    client_ip,
    client_key,
    draft8_headers,
    partition_key,
)


# =============================================================================
# client_ip Tests
# =============================================================================

class TestClientIp:
    """Trusted-proxy-aware client address extraction."""

    def test_no_forwarded_header_uses_socket_address(self):
        assert client_ip("198.51.100.4") == "198.51.100.4"

    def test_one_trusted_hop_uses_rightmost_forwarded(self):
        """The proxy we trust appended the real client last."""
        ip = client_ip("10.0.0.2", "203.0.113.7, 198.51.100.9", trusted_hops=1)

        assert ip == "198.51.100.9"

    def test_zero_trusted_hops_ignores_forwarded(self):
        ip = client_ip("10.0.0.2", "203.0.113.7", trusted_hops=0)

        assert ip == "10.0.0.2"

    def test_two_trusted_hops(self):
        ip = client_ip("10.0.0.2", "203.0.113.7, 10.0.0.1", trusted_hops=2)

        assert ip == "203.0.113.7"

    def test_more_trusted_hops_than_addresses_uses_leftmost(self):
        ip = client_ip("10.0.0.2", "203.0.113.7, 10.0.0.1", trusted_hops=5)

        assert ip == "203.0.113.7"

    def test_blank_entries_are_skipped(self):
        ip = client_ip("10.0.0.2", " , 203.0.113.7 ,", trusted_hops=1)

        assert ip == "203.0.113.7"


# =============================================================================
# client_key Tests
# =============================================================================

class TestClientKey:
    """Rate-limit keys per client address."""

    def test_ipv4_is_unchanged(self):
        assert client_key("203.0.113.7") == "203.0.113.7"

    def test_ipv6_collapses_to_56_subnet(self):
        assert client_key("2001:db8:abcd:12ff::1") == "2001:db8:abcd:1200::/56"

    def test_ipv6_same_subnet_shares_key(self):
        first = client_key("2001:db8:abcd:1201:aaaa::1")
        second = client_key("2001:db8:abcd:12ee:bbbb::2")

        assert first == second

    def test_ipv6_different_subnet_differs(self):
        assert client_key("2001:db8:abcd:1200::1") != client_key("2001:db8:abcd:1300::1")

    def test_custom_subnet(self):
        assert client_key("2001:db8:abcd:12ff::1", ipv6_subnet=48) == "2001:db8:abcd::/48"

    def test_unparseable_is_returned_as_is(self):
        assert client_key("testclient") == "testclient"


# =============================================================================
# FixedWindowLimiter Tests
# =============================================================================

class TestFixedWindowLimiter:
    """Counting requests in a fixed window."""

    def test_allows_up_to_limit(self):
        limiter = FixedWindowLimiter(max_requests=3, window_seconds=900)

        results = [limiter.hit("client") for _ in range(3)]

        assert all(result.allowed for result in results)
        assert [result.remaining for result in results] == [2, 1, 0]

    def test_rejects_after_limit(self):
        limiter = FixedWindowLimiter(max_requests=2, window_seconds=900)
        limiter.hit("client")
        limiter.hit("client")

        result = limiter.hit("client")

        assert not result.allowed
        assert result.remaining == 0
        assert 0 < result.reset_seconds <= 900

    def test_keys_are_independent(self):
        limiter = FixedWindowLimiter(max_requests=1, window_seconds=900)
        limiter.hit("a")

        assert limiter.hit("b").allowed
        assert not limiter.hit("a").allowed

    def test_reset_clears_counters(self):
        limiter = FixedWindowLimiter(max_requests=1, window_seconds=900)
        limiter.hit("client")

        limiter.reset()

        assert limiter.hit("client").allowed


# =============================================================================
# Header Tests
# =============================================================================

class TestDraft8Headers:
    """RateLimit / RateLimit-Policy header formatting."""

    def test_header_values(self):
        result = RateLimitResult(allowed=True, limit=100, remaining=99, reset_seconds=900)
        pk = partition_key("203.0.113.7")

        headers = draft8_headers(result, 900, "203.0.113.7")

        assert headers["RateLimit-Policy"] == f'"100-in-900sec"; q=100; w=900; pk=:{pk}:'
        assert headers["RateLimit"] == f'"100-in-900sec"; r=99; t=900; pk=:{pk}:'

    def test_partition_key_encodes_hex_prefix(self):
        """pk is the first 12 hex chars of the SHA-256 digest, base64-encoded."""
        key = "2001:db8:abcd:1200::/56"
        expected_prefix = hashlib.sha256(key.encode("utf-8")).hexdigest()[:12]

        decoded = base64.b64decode(partition_key(key)).decode("ascii")

        assert decoded == expected_prefix
        assert len(partition_key(key)) == 16

    def test_partition_key_is_stable_and_opaque(self):
        assert partition_key("203.0.113.7") == partition_key("203.0.113.7")
        assert partition_key("203.0.113.7") != partition_key("203.0.113.8")
        assert "203.0.113.7" not in partition_key("203.0.113.7")


# =============================================================================
# Middleware Tests
# =============================================================================

class TestRateLimitMiddleware:
    """End-to-end limiting through the app."""

    @pytest.fixture
    def limited_client(self, make_app):
        with TestClient(make_app(RATE_LIMIT_MAX=3)) as test_client:
            yield test_client

    def test_responses_carry_draft8_headers(self, limited_client):
        response = limited_client.get("/")

        assert response.headers["RateLimit-Policy"].startswith('"3-in-900sec"; q=3; w=900; pk=:')
        assert "r=2;" in response.headers["RateLimit"]
        assert "X-RateLimit-Limit" not in response.headers

    def test_rejects_after_threshold(self, limited_client):
        for _ in range(3):
            assert limited_client.get("/").status_code == 200

        response = limited_client.get("/")

        assert response.status_code == 429
        assert response.text == RATE_LIMIT_MESSAGE
        assert int(response.headers["Retry-After"]) > 0
        assert "r=0;" in response.headers["RateLimit"]

    def test_unknown_routes_count_too(self, limited_client):
        for _ in range(3):
            limited_client.get("/missing")

        assert limited_client.get("/").status_code == 429

    def test_forwarded_clients_are_limited_separately(self, limited_client):
        first = {"X-Forwarded-For": "203.0.113.7"}
        second = {"X-Forwarded-For": "203.0.113.8"}
        for _ in range(3):
            limited_client.get("/", headers=first)

        assert limited_client.get("/", headers=first).status_code == 429
        assert limited_client.get("/", headers=second).status_code == 200

    def test_ipv6_subnet_shares_budget(self, limited_client):
        addresses = [
            "2001:db8:abcd:1201::1",
            "2001:db8:abcd:1202::1",
            "2001:db8:abcd:12ff::1",
        ]
        for address in addresses:
            assert limited_client.get("/", headers={"X-Forwarded-For": address}).status_code == 200

        rejected = limited_client.get("/", headers={"X-Forwarded-For": "2001:db8:abcd:1234::9"})
        other_subnet = limited_client.get("/", headers={"X-Forwarded-For": "2001:db8:abcd:1300::1"})

        assert rejected.status_code == 429
        assert other_subnet.status_code == 200
