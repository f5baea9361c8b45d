"""
Marathon Event API — Marathon Route Handlers
==============================================

What:  Endpoints for the marathons collection and the upcoming sample.
How:   Thin handlers: parse query/path/body, call MarathonService, return
       its result. Paths and methods are bound in routes/__init__.py.

Endpoints:
    GET    /marathons?email=&limit=&sort=
    GET    /upcoming-marathons
    GET    /marathons/{id}
    POST   /marathons
    PATCH  /marathons/{id}
    DELETE /marathons/{id}
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import Depends, Query

from marathon_api.dependencies import get_marathon_service
from marathon_api.schemas.common import DeleteResult, InsertResult, UpdateResult
from marathon_api.schemas.marathon import MarathonCreate, MarathonUpdate
from marathon_api.services.marathon_service import MarathonService

logger = logging.getLogger(__name__)


async def list_marathons(
    email: Optional[str] = Query(default=None, description="Exact owner email"),
    limit: int = Query(default=0, ge=0, description="Maximum results; 0 = unbounded"),
    sort: str = Query(default="desc", description="Order by startRegistrationDate: asc or desc"),
    service: MarathonService = Depends(get_marathon_service),
) -> List[Dict[str, Any]]:
    """
    List marathons, newest registration opening first by default.

    Example:
        GET /marathons?email=owner@example.com&limit=6&sort=asc
    """
    return await service.list_marathons(email=email, limit=limit, sort=sort)


async def list_upcoming_marathons(
    service: MarathonService = Depends(get_marathon_service),
) -> List[Dict[str, Any]]:
    """Random sample of marathons starting today or later."""
    return await service.list_upcoming()


async def get_marathon(
    id: str,
    service: MarathonService = Depends(get_marathon_service),
) -> Dict[str, Any]:
    return await service.get_marathon(id)


async def create_marathon(
    payload: MarathonCreate,
    service: MarathonService = Depends(get_marathon_service),
) -> InsertResult:
    return await service.create_marathon(payload)


async def update_marathon(
    id: str,
    payload: MarathonUpdate,
    service: MarathonService = Depends(get_marathon_service),
) -> UpdateResult:
    return await service.update_marathon(id, payload)


async def delete_marathon(
    id: str,
    service: MarathonService = Depends(get_marathon_service),
) -> DeleteResult:
    return await service.delete_marathon(id)
