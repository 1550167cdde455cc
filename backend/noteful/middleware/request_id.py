"""
Noteful Backend — Request ID Middleware
=========================================

What:  Assigns a short correlation id to every request and echoes it back in
       the `X-Request-ID` response header.
How:   Honors a client-supplied `X-Request-ID`; otherwise generates one. The
       id is stored in a ContextVar, so error handlers and log records
       produced anywhere in the request can include it without it being
       passed around, and in `request.state` for route handlers.
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDFilter(logging.Filter):
    """Stamps `record.request_id` so log formats can reference `%(request_id)s`."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get("") or "-"
        return True


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
