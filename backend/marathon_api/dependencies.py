"""
Marathon Event API — Route Dependencies
=========================================

What:  FastAPI dependency providers that build services per request.
How:   Everything comes from app.state, filled in by create_app() and the
       lifespan: `settings`, `store`, `token_service`.

Example:
    async def list_marathons(service: MarathonService = Depends(get_marathon_service)):
        return await service.list_marathons()
"""

from fastapi import Depends, Request

from marathon_api.config import Settings
from marathon_api.database import StoreClient, get_store
from marathon_api.services.auth_service import TokenService
from marathon_api.services.marathon_service import MarathonService
from marathon_api.services.registration_service import RegistrationService
from marathon_api.services.tip_service import TipService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_marathon_service(
    store: StoreClient = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> MarathonService:
    return MarathonService(store, upcoming_sample_size=settings.upcoming_sample_size)


def get_registration_service(
    store: StoreClient = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> RegistrationService:
    return RegistrationService(
        store,
        use_transactions=settings.use_transactions,
        decrement_on_delete=settings.decrement_on_registration_delete,
    )


def get_tip_service(store: StoreClient = Depends(get_store)) -> TipService:
    return TipService(store)
