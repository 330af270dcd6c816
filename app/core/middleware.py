"""Request middleware and Redis-backed rate limits."""

import logging
import time

import redis.asyncio as redis
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from app.config import settings
from app.core.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)

# Redis-backed limits are not enforced here
UNLIMITED_ENVIRONMENTS = ("development", "test")

WINDOW_SECONDS = 60
SLOW_REQUEST_SECONDS = 1.0

# Never throttled: probes, docs and provider webhooks (providers retry on 429)
_EXEMPT_PATHS = ("/", "/health", "/docs", "/openapi.json")
_EXEMPT_PREFIXES = (f"{settings.api_prefix}/webhooks",)


def client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For, then X-Real-IP, then the socket peer."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("X-Real-IP") or (
        request.client.host if request.client else "unknown"
    )


class SlidingWindow:
    """Per-key request counter over the last minute, stored in a Redis sorted set."""

    def __init__(self, limit: int, namespace: str) -> None:
        self.limit = limit
        self.namespace = namespace
        self._redis: redis.Redis | None = None

    @property
    def client(self) -> redis.Redis:
        if self._redis is None:
            self._redis = redis.from_url(settings.redis_url, decode_responses=True)
        return self._redis

    async def hit(self, identity: str) -> int | None:
        """Record a request and return how many preceded it in the window.

        Returns None when Redis is unreachable; callers let the request through.
        """
        key = f"rl:{self.namespace}:{identity}"
        now = time.time()
        try:
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.zremrangebyscore(key, 0, now - WINDOW_SECONDS)
                pipe.zcard(key)
                pipe.zadd(key, {str(time.time_ns()): now})
                pipe.expire(key, WINDOW_SECONDS)
                _, seen, _, _ = await pipe.execute()
        except redis.RedisError as e:
            logger.warning("Rate limit '%s' skipped, Redis unavailable: %s", self.namespace, e)
            return None
        return seen


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Global per-IP limit for every API route."""

    def __init__(self, app, requests_per_minute: int = 100) -> None:
        super().__init__(app)
        self.window = SlidingWindow(requests_per_minute, "global")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if path in _EXEMPT_PATHS or path.startswith(_EXEMPT_PREFIXES):
            return await call_next(request)

        ip = client_ip(request)
        seen = await self.window.hit(ip)
        if seen is None:
            return await call_next(request)

        limit = self.window.limit
        reset_at = str(int(time.time()) + WINDOW_SECONDS)
        if seen >= limit:
            logger.info("Rate limit hit by %s on %s", ip, path)
            return JSONResponse(
                status_code=429,
                content={"detail": RateLimitExceeded().detail},
                headers={
                    "Retry-After": str(WINDOW_SECONDS),
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": reset_at,
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(max(0, limit - seen - 1))
        response.headers["X-RateLimit-Reset"] = reset_at
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log its outcome and duration."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or str(time.time_ns())
        request.state.request_id = request_id

        response = await call_next(request)

        elapsed = time.perf_counter() - started
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{elapsed:.3f}s"

        log = logger.warning if elapsed > SLOW_REQUEST_SECONDS else logger.info
        log(
            "%s %s %s %.3fs%s [%s]",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
            " (slow)" if elapsed > SLOW_REQUEST_SECONDS else "",
            request_id,
        )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Standard hardening headers; HSTS outside debug."""

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Permissions-Policy": "geolocation=(), camera=()",
    }

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        response.headers.update(self.HEADERS)
        if not settings.debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


class RateLimiter:
    """Tighter per-route limit, used as a route dependency.

    Raises:
        RateLimitExceeded: when the caller's IP is over the limit.
    """

    def __init__(self, requests_per_minute: int, key_prefix: str) -> None:
        self.window = SlidingWindow(requests_per_minute, key_prefix)

    async def __call__(self, request: Request) -> None:
        if settings.environment in UNLIMITED_ENVIRONMENTS:
            return
        seen = await self.window.hit(client_ip(request))
        if seen is not None and seen >= self.window.limit:
            raise RateLimitExceeded()


booking_limiter = RateLimiter(requests_per_minute=10, key_prefix="booking")
message_limiter = RateLimiter(requests_per_minute=30, key_prefix="message")
support_limiter = RateLimiter(requests_per_minute=3, key_prefix="support")
