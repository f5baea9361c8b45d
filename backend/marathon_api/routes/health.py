"""
Marathon Event API — Liveness & Health Routes
===============================================

What:  GET / answers a fixed liveness text; GET /health probes the store.
Who:   Uptime monitors, container health checks, load balancers.

Status levels:
    healthy:   store ping succeeded (HTTP 200)
    unhealthy: store unreachable (HTTP 503)
"""

import time

from fastapi import Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from marathon_api import __version__
from marathon_api.database import StoreClient, get_store
from marathon_api.schemas.common import HealthResponse

LIVENESS_TEXT = "Marathon Event API is running..."

# Initialized once when the module loads
_start_time = time.time()


async def root() -> PlainTextResponse:
    return PlainTextResponse(LIVENESS_TEXT)


async def health_check(store: StoreClient = Depends(get_store)) -> JSONResponse:
    connected = await store.ping()
    body = HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(status_code=200 if connected else 503, content=body.model_dump())
