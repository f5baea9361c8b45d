"""
Marathon Event API — Access Log Middleware
============================================

What:  One access-log line per API call on the `marathon_api.access` logger.
How:   After the downstream call the router has recorded the matched route
       in the ASGI scope, so the line names the route-table entry
       (`create_registration`, `get_marathon`, ...) and the resource id from
       the path, not just the raw URL.
When:  Inside RequestIDMiddleware, so the request ID is already set.

Example line:
    PATCH /marathons/{id} update_marathon id=665f... → 200 4.1ms [3fa2b1c0]

Level by status:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

Not logged: request bodies and cookies (session tokens, participant emails).
The liveness and health routes are polled by the platform and are skipped.
"""

import logging
import time
from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from marathon_api.middleware.request_id import request_id_var

logger = logging.getLogger("marathon_api.access")

UNMATCHED_ROUTE = "-"


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def _route_context(request: Request) -> Dict[str, object]:
    """Route-table name, templated path and path parameters of the matched route."""
    route = request.scope.get("route")
    return {
        "route": getattr(route, "name", None) or UNMATCHED_ROUTE,
        "template": getattr(route, "path", request.url.path),
        "path_params": dict(request.scope.get("path_params") or {}),
    }


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    SKIPPED_ROUTES = {"root", "health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        context = _route_context(request)
        if context["route"] in self.SKIPPED_ROUTES:
            return response

        params = " ".join(f"{k}={v}" for k, v in context["path_params"].items())
        rid = request_id_var.get("")
        logger.log(
            _level_for(response.status_code),
            "%s %s %s%s → %d %.1fms [%s]",
            request.method,
            context["template"],
            context["route"],
            f" {params}" if params else "",
            response.status_code,
            elapsed_ms,
            rid,
            extra={
                "request_id": rid,
                "route": context["route"],
                "path_params": context["path_params"],
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response
