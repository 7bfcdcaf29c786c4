"""
ANGAGU Backend — Access Log Middleware
=======================================

What:  One log line per request: method, path, status, duration, request id,
       tagged with the surface (customer / company / admin) it hit.
How:   Level follows the status. 202 counts as a failure: this API answers
       a malformed or unknown login, and a catalogue read failure, with 202
       and an error envelope.

Never logged: bodies (passwords, verification codes), the `Authorization`
and `verification` headers.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from angagu.middleware.request_id import request_id_var

logger = logging.getLogger("angagu.access")

QUIET_PATHS = frozenset({"/health"})
SURFACES = ("customer", "company", "admin")


def level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400 or status == 202:
        return logging.WARNING
    return logging.INFO


def surface_of(path: str) -> str:
    head = path.lstrip("/").split("/", 1)[0]
    return head if head in SURFACES else "-"


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        rid = request_id_var.get("")
        surface = surface_of(path)
        logger.log(
            level_for(response.status_code),
            "[%s] %s %s %s -> %d (%.1fms)",
            rid,
            surface,
            request.method,
            path,
            response.status_code,
            elapsed_ms,
            extra={
                "request_id": rid,
                "surface": surface,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response
