"""Marathon Event API — read-only access to the marathonTips collection."""

from typing import Any, Dict, List

from marathon_api.services.base import CollectionService


class TipService(CollectionService):

    resource = "marathon tip"

    @property
    def collection(self):
        return self.store.marathon_tips

    async def list_tips(self) -> List[Dict[str, Any]]:
        return await self._materialize(self.collection.find({}), "list_marathon_tips")
