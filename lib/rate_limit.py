# =============================================================================
# lib/rate_limit.py - Fixed-Window Rate Limiting
# =============================================================================
# Per-client request limiting built on the `limits` library.
#
# - Clients are keyed by IP. IPv6 clients are grouped by subnet (/56 by
#   default) so one host can't dodge the limit by rotating addresses.
# - The client IP honours a fixed number of trusted reverse proxies in
#   X-Forwarded-For.
# - Responses carry the IETF draft-8 RateLimit / RateLimit-Policy headers.
#
# Usage:
#   limiter = FixedWindowLimiter(max_requests=100, window_seconds=900)
#   result = limiter.hit(client_key("2001:db8::1"))
#   if not result.allowed:
#       ...  # 429
# =============================================================================

from __future__ import annotations

import base64
import hashlib
import ipaddress
import math
import time
from dataclasses import dataclass

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter


RATE_LIMIT_MESSAGE = "Too many requests, please try again later."


# =============================================================================
# Client Identification
# =============================================================================

def client_ip(
    remote_addr: str | None,
    forwarded_for: str | None = None,
    trusted_hops: int = 1,
) -> str:
    """
    Resolve the client address behind `trusted_hops` reverse proxies.

    Addresses are walked from the socket peer leftwards through
    X-Forwarded-For. The first untrusted hop is the client. If every hop is
    trusted, the left-most forwarded address wins.

    Example:
        client_ip("10.0.0.2", "203.0.113.7, 10.0.0.1", trusted_hops=1)  # "10.0.0.1"
        client_ip("10.0.0.2", "203.0.113.7", trusted_hops=0)            # "10.0.0.2"
    """
    addresses = [remote_addr or ""]
    if forwarded_for:
        hops = [hop.strip() for hop in forwarded_for.split(",") if hop.strip()]
        addresses.extend(reversed(hops))

    for index in range(len(addresses) - 1):
        if index >= trusted_hops:
            return addresses[index]
    return addresses[-1]


def client_key(ip: str, ipv6_subnet: int = 56) -> str:
    """
    Build the rate-limit key for a client address.

    IPv4 addresses are used as-is. IPv6 addresses collapse to their subnet,
    e.g. "2001:db8:abcd:12ff::1" -> "2001:db8:abcd:1200::/56".
    Anything that doesn't parse as an IP is returned unchanged.
    """
    try:
        address = ipaddress.ip_address(ip)
    except ValueError:
        return ip

    if address.version == 6:
        return str(ipaddress.ip_network(f"{address}/{ipv6_subnet}", strict=False))
    return str(address)


# =============================================================================
# Limiter
# =============================================================================

@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of counting one request against a client's window."""
    allowed: bool
    limit: int
    remaining: int
    reset_seconds: int


class FixedWindowLimiter:
    """
    Fixed-window counter per client key.

    Counters live in process memory and reset at the end of each window.
    Rejected requests still count toward the window.
    """

    def __init__(self, max_requests: int = 100, window_seconds: int = 900):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._item = RateLimitItemPerSecond(max_requests, window_seconds)
        self._storage = MemoryStorage()
        self._strategy = FixedWindowRateLimiter(self._storage)

    def hit(self, key: str) -> RateLimitResult:
        """Count one request for `key` and report whether it may proceed."""
        allowed = self._strategy.hit(self._item, key)
        stats = self._strategy.get_window_stats(self._item, key)
        reset_seconds = max(0, math.ceil(stats.reset_time - time.time()))
        return RateLimitResult(
            allowed=allowed,
            limit=self.max_requests,
            remaining=max(0, stats.remaining),
            reset_seconds=reset_seconds,
        )

    def reset(self) -> None:
        """Drop all counters."""
        self._storage.reset()


# =============================================================================
# Headers
# =============================================================================

def partition_key(key: str) -> str:
    """Opaque client identifier for the `pk` header parameter."""
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:12]
    return base64.b64encode(digest.encode("ascii")).decode("ascii")


def draft8_headers(result: RateLimitResult, window_seconds: int, key: str) -> dict[str, str]:
    """
    Build the draft-8 RateLimit headers for a response.

    Example (100 requests per 15 minutes, 99 left, 900s to reset):
        RateLimit-Policy: "100-in-900sec"; q=100; w=900; pk=:...:
        RateLimit: "100-in-900sec"; r=99; t=900; pk=:...:
    """
    name = f"{result.limit}-in-{window_seconds}sec"
    pk = f"; pk=:{partition_key(key)}:"
    return {
        "RateLimit-Policy": f'"{name}"; q={result.limit}; w={window_seconds}{pk}',
        "RateLimit": f'"{name}"; r={result.remaining}; t={result.reset_seconds}{pk}',
    }
