"""
ANGAGU Backend — Rate Limiting Middleware
==========================================

What:  Per-IP sliding window limits, with a second, much smaller window on
       the endpoints that send or check an SMS code.
How:   Each bucket keeps the timestamps of a client's requests inside the
       window. A client at the limit gets 429 in the error envelope with
       `retry_after` next to the errCode and a matching Retry-After header.

    bucket   paths                     limit per window
    general  everything not excluded   rate_limit_requests
    sms      SMS_LIMITED_PATHS         sms_rate_limit_requests per path (checked first)

Single-process only: the counters live in this worker's memory.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from angagu.config import settings
from angagu.error_codes import ErrCode
from angagu.schemas.common import error_body

logger = logging.getLogger(__name__)

EXCLUDED_PATHS = frozenset({"/health", "/docs", "/openapi.json", "/redoc"})
SMS_LIMITED_PATHS = frozenset({"/customer/signup/sms/code", "/customer/signup/sms/verification"})

CLEANUP_EVERY = 1000


class SlidingWindow:
    """Request timestamps per client for one limit."""

    def __init__(self, name: str, limit: int, window: int):
        self.name = name
        self.limit = limit
        self.window = window
        self._hits: Dict[str, List[float]] = defaultdict(list)

    def hit(self, client: str, now: float) -> Optional[int]:
        """Record a request; at the limit, return seconds to wait instead."""
        window_start = now - self.window
        recent = [ts for ts in self._hits[client] if ts > window_start]
        self._hits[client] = recent

        if len(recent) >= self.limit:
            return int(recent[0] + self.window - now) + 1
        recent.append(now)
        return None

    def prune(self, now: float) -> int:
        window_start = now - self.window
        idle = [c for c, hits in self._hits.items() if not hits or hits[-1] <= window_start]
        for client in idle:
            del self._hits[client]
        return len(idle)


class RateLimitMiddleware(BaseHTTPMiddleware):

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._general = SlidingWindow("general", settings.rate_limit_requests, settings.rate_limit_window)
        self._sms = SlidingWindow("sms", settings.sms_rate_limit_requests, settings.rate_limit_window)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()

        if path in SMS_LIMITED_PATHS:
            buckets = [(self._sms, f"{client_ip} {path}"), (self._general, client_ip)]
        else:
            buckets = [(self._general, client_ip)]
        for bucket, key in buckets:
            retry_after = bucket.hit(key, now)
            if retry_after is not None:
                logger.warning(
                    "Rate limit (%s) exceeded for IP %s on %s: %d per %ds",
                    bucket.name, client_ip, path, bucket.limit, bucket.window,
                )
                return JSONResponse(
                    status_code=429,
                    content=error_body(ErrCode.UNKNOWN, {"retry_after": retry_after}),
                    headers={"Retry-After": str(retry_after)},
                )

        self._seen += 1
        if self._seen % CLEANUP_EVERY == 0:
            pruned = self._general.prune(now) + self._sms.prune(now)
            if pruned:
                logger.debug("Dropped %d idle rate-limit entries", pruned)

        return await call_next(request)
