"""
HTTP middleware for the SiteProbe API

Request correlation ids, access logging, a JSON 500 fallback and a per-client
sliding-window rate limit. Every probe request fans out to third-party sites,
so the limiter protects them as much as this service.
"""
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.gzip import GZipMiddleware
import time
import uuid
import logging
from typing import Callable, Deque, Dict
from collections import deque
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Never throttled: liveness probes and the interactive docs
EXEMPT_PATHS = frozenset({"/", "/health", "/docs", "/redoc", "/openapi.json"})


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "-")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's X-Request-ID or mint one, and echo it back."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request.state.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """One log line per request with status and wall time."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {elapsed_ms:.1f}ms [{_request_id(request)}]"
        )
        response.headers["X-Response-Time-Ms"] = f"{elapsed_ms:.1f}"
        return response


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """
    Last line of defence: probes encode their own failures, so anything
    reaching here is a bug and is reported as a JSON 500.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            request_id = _request_id(request)
            logger.exception(f"Unhandled error on {request.method} {request.url.path} [{request_id}]: {exc}")
            return JSONResponse(
                status_code=500,
                content={
                    "detail": "Internal server error",
                    "request_id": request_id,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                },
            )


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding-window limiter keyed by client address.

    Args:
        app: ASGI application
        calls: Requests allowed per client inside one window
        period: Window length in seconds
    """

    def __init__(self, app, calls: int = 100, period: int = 60):
        super().__init__(app)
        self.calls = calls
        self.period = period
        self._hits: Dict[str, Deque[float]] = {}

    def _client_key(self, request: Request) -> str:
        return request.client.host if request.client else "anonymous"

    def _prune(self, now: float) -> None:
        """Drop hits older than the window and forget clients left with none."""
        for key in list(self._hits):
            hits = self._hits[key]
            while hits and now - hits[0] >= self.period:
                hits.popleft()
            if not hits:
                del self._hits[key]

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        key = self._client_key(request)
        now = time.monotonic()
        self._prune(now)
        hits = self._hits.get(key, ())

        if len(hits) >= self.calls:
            retry_after = max(1, int(self.period - (now - hits[0])))
            logger.warning(f"Rate limit hit for {key} on {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={
                    "detail": f"Too many requests: limit is {self.calls} per {self.period}s",
                    "retry_after": retry_after,
                },
                headers={"Retry-After": str(retry_after)},
            )

        hits = self._hits.setdefault(key, deque())
        hits.append(now)
        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.calls)
        response.headers["X-RateLimit-Remaining"] = str(max(0, self.calls - len(hits)))
        return response


def setup_middleware(app, rate_limit_calls: int = 100, rate_limit_period: int = 60) -> None:
    """
    Install the middleware stack.

    Starlette runs the most recently added middleware first, so the request
    id is assigned before anything logs and gzip wraps the final body.
    """
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RateLimitMiddleware, calls=rate_limit_calls, period=rate_limit_period)
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    logger.debug("Middleware installed")
