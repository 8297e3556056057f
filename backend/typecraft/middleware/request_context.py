"""Request context middleware: request id, timing, logging, and login throttling.

One pass per request:
- take ``X-Request-ID`` from the client or mint one, and expose it to logs
- time the request and report it in ``X-Response-Time``
- log method, path, status and duration
- throttle ``POST /login`` and ``POST /register`` per client

Throttling is a token bucket per client address. ``CredentialThrottle`` keeps
the buckets; ``take_token`` is the pure refill/consume step so it can be
tested with an injected clock.
"""

import logging
import threading
import time
import uuid
from typing import Dict, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..core.config import settings
from ..core.logging_config import request_id_var

logger = logging.getLogger(__name__)

# (tokens left, time of last refill)
Bucket = Tuple[float, float]

THROTTLED_PATHS = frozenset({"/login", "/register"})


def take_token(bucket: Optional[Bucket], per_minute: int, now: float) -> Tuple[bool, float, Bucket]:
    """Refill *bucket* up to *now* and try to spend one token.

    Returns:
        ``(allowed, retry_after, new_bucket)``. *retry_after* is 0.0 when
        allowed, else the seconds until a token is available again.
    """
    rate = per_minute / 60.0
    if bucket is None:
        tokens = float(per_minute)
    else:
        tokens, last = bucket
        tokens = min(float(per_minute), tokens + (now - last) * rate)

    if tokens >= 1.0:
        return True, 0.0, (tokens - 1.0, now)
    return False, (1.0 - tokens) / rate, (tokens, now)


class CredentialThrottle:
    """Per-client token buckets for the credential endpoints. Thread-safe."""

    # Buckets untouched this long are full again and can be forgotten.
    IDLE_SECONDS = 120.0
    SWEEP_EVERY = 100

    def __init__(self, per_minute: int):
        self.per_minute = per_minute
        self._buckets: Dict[str, Bucket] = {}
        self._lock = threading.Lock()
        self._calls = 0

    def allow(self, client: str, now: Optional[float] = None) -> Tuple[bool, float]:
        if self.per_minute <= 0:
            return True, 0.0
        if now is None:
            now = time.monotonic()

        with self._lock:
            self._calls += 1
            if self._calls % self.SWEEP_EVERY == 0:
                self._sweep(now)
            allowed, retry_after, bucket = take_token(self._buckets.get(client), self.per_minute, now)
            self._buckets[client] = bucket
        return allowed, retry_after

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()

    def _sweep(self, now: float) -> None:
        cutoff = now - self.IDLE_SECONDS
        for key in [k for k, (_, last) in self._buckets.items() if last < cutoff]:
            del self._buckets[key]


throttle = CredentialThrottle(settings.rate_limit_per_minute)


def client_address(request: Request) -> str:
    """First ``X-Forwarded-For`` hop when behind a proxy, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RequestContextMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex[:16]
        request_id_var.set(rid)

        if request.method == "POST" and request.url.path in THROTTLED_PATHS:
            client = client_address(request)
            allowed, retry_after = throttle.allow(client)
            if not allowed:
                logger.warning(
                    "Credential attempts throttled",
                    extra={"client": client, "path": request.url.path, "retry_after": round(retry_after, 1)},
                )
                return JSONResponse(
                    status_code=429,
                    content={
                        "error": "RATE_LIMITED",
                        "message": "Too many attempts. Please wait a moment and try again.",
                        "details": {"retry_after": round(retry_after, 1)},
                    },
                    headers={"Retry-After": str(int(retry_after) + 1), "X-Request-ID": rid},
                )

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        response.headers["X-Request-ID"] = rid
        response.headers["X-Response-Time"] = f"{duration_ms}ms"

        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response
