from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from gradtrack.api.errors import unexpected_error_response
from gradtrack.config import Settings

logger = logging.getLogger("gradtrack.requests")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}


@dataclass(slots=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_after: int


class FixedWindowRateLimiter:
    """Per-key request counter that resets at the end of each fixed window."""

    def __init__(self, *, limit: int, window_sec: int, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window_sec = window_sec
        self._clock = clock
        self._windows: dict[str, tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> RateLimitDecision:
        now = self._clock()
        with self._lock:
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window_sec:
                started, count = now, 0
            count += 1
            self._windows[key] = (started, count)
            if len(self._windows) > 10_000:
                self._prune(now)

        reset_after = max(0, math.ceil(started + self.window_sec - now))
        return RateLimitDecision(
            allowed=count <= self.limit,
            limit=self.limit,
            remaining=max(0, self.limit - count),
            reset_after=reset_after,
        )

    def _prune(self, now: float) -> None:
        expired = [key for key, (started, _) in self._windows.items() if now - started >= self.window_sec]
        for key in expired:
            del self._windows[key]


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def install_middleware(app: FastAPI, settings: Settings) -> None:
    limiter = FixedWindowRateLimiter(
        limit=settings.rate_limit_max_requests,
        window_sec=settings.rate_limit_window_sec,
    )
    app.state.rate_limiter = limiter

    @app.middleware("http")
    async def catch_unexpected_errors(request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return unexpected_error_response(request, exc, settings)

    @app.middleware("http")
    async def rate_limit(request: Request, call_next) -> Response:
        if not request.url.path.startswith("/api/"):
            return await call_next(request)

        decision = limiter.hit(client_key(request))
        headers = {
            "RateLimit-Limit": str(decision.limit),
            "RateLimit-Remaining": str(decision.remaining),
            "RateLimit-Reset": str(decision.reset_after),
        }
        if not decision.allowed:
            logger.warning("Rate limit exceeded for %s", client_key(request))
            return JSONResponse(
                {"error": "Too many requests, please try again later."},
                status_code=429,
                headers=headers,
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response

    @app.middleware("http")
    async def security_headers(request: Request, call_next) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.middleware("http")
    async def log_requests(request: Request, call_next) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s %s %.0fms", request.method, request.url.path, response.status_code, duration_ms)
        return response
