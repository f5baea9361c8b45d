"""
Marathon Event API — Request ID Middleware
============================================

What:  Assigns a correlation ID to each request and echoes it in the response.
How:   Reuses the client's X-Request-ID when it is a plain token (letters,
       digits, `.`, `_`, `-`, at most 64 chars), otherwise mints a short
       uuid4. The ID lives in a ContextVar for loggers and exception
       handlers, and on request.state for route handlers.
When:  Wraps every request, outside the access-log middleware.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

HEADER_NAME = "X-Request-ID"

# Coroutine-local: concurrent requests share one thread
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_CLIENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def resolve_request_id(header_value: str) -> str:
    """Client-supplied ID when it is safe to log verbatim, else a fresh one."""
    if header_value and _CLIENT_ID_PATTERN.match(header_value):
        return header_value
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(HEADER_NAME, ""))
        # Left set after the call: the outermost 500 handler still reads it
        request_id_var.set(rid)
        request.state.request_id = rid
        response = await call_next(request)
        response.headers[HEADER_NAME] = rid
        return response
