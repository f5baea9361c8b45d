"""Marathon Event API — GET /marathonTips."""

from typing import Any, Dict, List

from fastapi import Depends

from marathon_api.dependencies import get_tip_service
from marathon_api.services.tip_service import TipService


async def list_tips(service: TipService = Depends(get_tip_service)) -> List[Dict[str, Any]]:
    return await service.list_tips()
