# =============================================================================
# app/middleware.py - HTTP Middleware
# =============================================================================
# Middleware installed by app.main.create_app(), outermost first:
# - CORS (Starlette's CORSMiddleware, configured in main.py)
# - StaticFilesMiddleware: serve files from the public directory
# - RequestLoggingMiddleware: log every request that reaches the app
# - RateLimitMiddleware: fixed-window per-client limiting
# - ErrorHandlingMiddleware: turn uncaught errors into the generic 500 while
#   the outer layers can still add their headers
#
# Static files are answered before the logger and the limiter, so asset
# requests are neither logged nor counted.
# =============================================================================

import logging
from pathlib import Path

from fastapi import Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.staticfiles import StaticFiles
from starlette.types import ASGIApp, Receive, Scope, Send

from app.exceptions import unhandled_exception_handler
from lib.rate_limit import (
    RATE_LIMIT_MESSAGE,
    FixedWindowLimiter,
    client_ip,
    client_key,
    draft8_headers,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Static Files
# =============================================================================

class StaticFilesMiddleware:
    """
    Serve regular files under `directory`, otherwise pass the request on.

    Directory requests (including "/") are never answered with an index
    page, so routes mounted at those paths keep working.
    """

    def __init__(self, app: ASGIApp, directory: str | Path):
        self.app = app
        self.static = StaticFiles(directory=directory, check_dir=False)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] not in ("GET", "HEAD"):
            await self.app(scope, receive, send)
            return

        try:
            response = await self.static.get_response(self.static.get_path(scope), scope)
        except StarletteHTTPException as exc:
            if exc.status_code != 404:
                raise
            await self.app(scope, receive, send)
            return

        await response(scope, receive, send)


# =============================================================================
# Request Logging
# =============================================================================

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method and URL for every incoming request."""

    async def dispatch(self, request: Request, call_next):
        url = request.url.path
        if request.url.query:
            url = f"{url}?{request.url.query}"
        logger.info(f"{request.method} {url}")
        return await call_next(request)


# =============================================================================
# Rate Limiting
# =============================================================================

class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Reject clients that exceed `limiter`'s window with a 429.

    Every response, allowed or not, carries the draft-8 RateLimit headers.
    """

    def __init__(
        self,
        app: ASGIApp,
        limiter: FixedWindowLimiter,
        ipv6_subnet: int = 56,
        trusted_hops: int = 1,
    ):
        super().__init__(app)
        self.limiter = limiter
        self.ipv6_subnet = ipv6_subnet
        self.trusted_hops = trusted_hops

    def key_for(self, request: Request) -> str:
        remote_addr = request.client.host if request.client else None
        ip = client_ip(
            remote_addr,
            request.headers.get("x-forwarded-for"),
            trusted_hops=self.trusted_hops,
        )
        return client_key(ip, self.ipv6_subnet)

    async def dispatch(self, request: Request, call_next):
        key = self.key_for(request)
        result = self.limiter.hit(key)
        headers = draft8_headers(result, self.limiter.window_seconds, key)

        if not result.allowed:
            logger.warning(f"Rate limited: {key} (>{result.limit} requests)")
            headers["Retry-After"] = str(result.reset_seconds)
            return PlainTextResponse(RATE_LIMIT_MESSAGE, status_code=429, headers=headers)

        response = await call_next(request)
        response.headers.update(headers)
        return response


# =============================================================================
# Errors
# =============================================================================

class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Innermost catch-all for exceptions raised by routes.

    Responding here rather than in Starlette's outermost error layer keeps
    the CORS and RateLimit headers on the 500.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            return await unhandled_exception_handler(request, exc)
