"""
Marathon Event API — Registration Route Handlers
==================================================

Endpoints:
    GET    /registrations?email=&title=
    GET    /registrations/{id}
    GET    /registrations/marathons/{marathon_id}
    POST   /registrations            (also increments the marathon counter)
    PATCH  /registrations/{id}
    DELETE /registrations/{id}
"""

from typing import Any, Dict, List, Optional

from fastapi import Depends, Query

from marathon_api.dependencies import get_registration_service
from marathon_api.schemas.common import DeleteResult, InsertResult, UpdateResult
from marathon_api.schemas.registration import RegistrationCreate, RegistrationUpdate
from marathon_api.services.registration_service import RegistrationService


async def list_registrations(
    email: Optional[str] = Query(default=None, description="Exact participant email"),
    title: Optional[str] = Query(default=None, description="Case-insensitive title search"),
    service: RegistrationService = Depends(get_registration_service),
) -> List[Dict[str, Any]]:
    return await service.list_registrations(email=email, title=title)


async def get_registration(
    id: str,
    service: RegistrationService = Depends(get_registration_service),
) -> Dict[str, Any]:
    return await service.get_registration(id)


async def list_marathon_registrations(
    marathon_id: str,
    service: RegistrationService = Depends(get_registration_service),
) -> List[Dict[str, Any]]:
    return await service.list_by_marathon(marathon_id)


async def create_registration(
    payload: RegistrationCreate,
    service: RegistrationService = Depends(get_registration_service),
) -> InsertResult:
    return await service.create_registration(payload)


async def update_registration(
    id: str,
    payload: RegistrationUpdate,
    service: RegistrationService = Depends(get_registration_service),
) -> UpdateResult:
    return await service.update_registration(id, payload)


async def delete_registration(
    id: str,
    service: RegistrationService = Depends(get_registration_service),
) -> DeleteResult:
    return await service.delete_registration(id)
