"""
Noteful Backend — Request Logging Middleware
==============================================

What:  One access-log line per HTTP request: method, path, status, duration,
       request id and client address.
How:   Wraps `call_next` and times it with `perf_counter`. The level follows
       the status class so alerting can key on it:

           5xx → ERROR     4xx → WARNING     otherwise → INFO

Privacy:
    Request bodies carry passwords and note contents, and the Authorization
    header carries bearer tokens; neither is ever logged here.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from noteful.middleware.request_id import request_id_var

logger = logging.getLogger("noteful.access")

# Probed every few seconds by orchestrators
QUIET_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            level = logging.ERROR
        elif status >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        logger.log(
            level,
            "%s %s %d %.1fms from %s",
            request.method,
            path,
            status,
            duration_ms,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
