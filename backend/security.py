"""HTTP hardening for the API: per-IP rate limiting, response headers, body cap.

Only ``/api`` routes are rate limited. ``/health`` stays free so that
liveness checks never trip the limiter.
"""

import os
import time
from collections import deque
from typing import Deque, Dict, Iterable, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
RATE_LIMIT_REQUESTS = int(os.getenv("RATE_LIMIT_REQUESTS", "100"))
RATE_LIMIT_WINDOW = int(os.getenv("RATE_LIMIT_WINDOW", str(15 * 60)))
IP_WHITELIST = frozenset(filter(None, os.getenv("IP_WHITELIST", "").split(",")))

RATE_LIMITED_PREFIX = "/api"

# Relay bodies carry one prompt; anything near this size is not a real request
MAX_BODY_BYTES = 1024 * 1024

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}
NO_STORE_HEADERS = {
    "Cache-Control": "no-store",
    "Pragma": "no-cache",
}


class SlidingWindowLimiter:
    """Counts hits per key over a trailing window of ``window_seconds``.

    Keys whose hits have all aged out are swept at most once per window, so
    clients that stop calling are not tracked forever.
    """

    def __init__(self, max_hits: int, window_seconds: int, exempt: Iterable[str] = ()) -> None:
        self.max_hits = max_hits
        self.window_seconds = window_seconds
        self.exempt = frozenset(exempt)
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = 0.0

    @property
    def tracked_clients(self) -> int:
        return len(self._hits)

    def allow(self, key: str, now: Optional[float] = None) -> bool:
        """Record a hit for ``key`` and report whether it is within the limit.

        Rejected hits are not recorded, so a client that keeps retrying
        regains access once its oldest accepted hit leaves the window.
        """
        if key in self.exempt:
            return True
        now = time.time() if now is None else now
        if now - self._last_sweep >= self.window_seconds:
            self.prune(now)
        hits = self._hits.setdefault(key, deque())
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()
        if len(hits) >= self.max_hits:
            return False
        hits.append(now)
        return True

    def prune(self, now: Optional[float] = None) -> int:
        """Forget keys with no hit inside the window; returns how many were dropped."""
        now = time.time() if now is None else now
        cutoff = now - self.window_seconds
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self._hits[key]
        self._last_sweep = now
        return len(stale)

    def reset(self) -> None:
        self._hits.clear()
        self._last_sweep = 0.0


def client_ip(request: Request) -> str:
    """Originating client address, preferring proxy headers."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Answer 429 once a client exceeds its request budget on ``/api`` routes.

    Counters live in process memory, so each worker limits independently.
    """

    def __init__(
        self,
        app,
        requests_per_window: int = RATE_LIMIT_REQUESTS,
        window_seconds: int = RATE_LIMIT_WINDOW,
        whitelist: Optional[Iterable[str]] = None,
    ):
        super().__init__(app)
        self.limiter = SlidingWindowLimiter(
            requests_per_window,
            window_seconds,
            exempt=IP_WHITELIST if whitelist is None else whitelist,
        )

    def _too_many_requests(self) -> JSONResponse:
        window = self.limiter.window_seconds
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={
                "error": "Rate limit exceeded",
                "message": (
                    f"Too many requests from this IP, please try again after {max(1, window // 60)} minutes"
                ),
                "retry_after": window,
            },
            headers={"Retry-After": str(window)},
        )

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith(RATE_LIMITED_PREFIX) and not self.limiter.allow(client_ip(request)):
            return self._too_many_requests()
        return await call_next(request)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        # Simulation state changes every tick
        if request.url.path.startswith(RATE_LIMITED_PREFIX):
            response.headers.update(NO_STORE_HEADERS)
        return response


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Refuse bodies whose declared length exceeds ``MAX_BODY_BYTES``."""

    async def dispatch(self, request: Request, call_next):
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > MAX_BODY_BYTES:
            return JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={"error": "Request too large", "max_size": MAX_BODY_BYTES},
            )
        return await call_next(request)


def setup_security_middleware(
    app,
    enable_rate_limiting: bool = True,
    requests_per_window: int = RATE_LIMIT_REQUESTS,
    window_seconds: int = RATE_LIMIT_WINDOW,
) -> None:
    """Install the middleware stack; the rate limiter, added last, runs first."""
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(BodySizeLimitMiddleware)
    if enable_rate_limiting and RATE_LIMIT_ENABLED:
        app.add_middleware(
            RateLimitMiddleware,
            requests_per_window=requests_per_window,
            window_seconds=window_seconds,
        )
