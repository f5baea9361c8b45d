"""
Marathon Event API — Marathon Service
=======================================

What:  Business logic for the marathons collection: filtered/sorted/limited
       listing, the random upcoming sample, and by-id CRUD.
Who:   Called by the marathon route handlers.

Query plans:
    list:      find({email?}).sort(startRegistrationDate, ±1).limit(n?)
    upcoming:  aggregate([$match marathonStartDate >= today, $sample n])
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING

from marathon_api.database import translate_store_errors
from marathon_api.exceptions import ValidationError
from marathon_api.schemas.common import DeleteResult, InsertResult, UpdateResult
from marathon_api.schemas.marathon import MarathonCreate, MarathonUpdate
from marathon_api.services.base import CollectionService

logger = logging.getLogger(__name__)

SORT_DIRECTIONS = {"asc": ASCENDING, "desc": DESCENDING}


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class MarathonService(CollectionService):
    """
    Marathon operations over a StoreClient.

    Attributes:
        upcoming_sample_size: Default size of the random upcoming sample
    """

    resource = "marathon"

    def __init__(self, store, upcoming_sample_size: int = 6):
        super().__init__(store)
        self.upcoming_sample_size = upcoming_sample_size

    @property
    def collection(self):
        return self.store.marathons

    async def list_marathons(
        self,
        email: Optional[str] = None,
        limit: int = 0,
        sort: str = "desc",
    ) -> List[Dict[str, Any]]:
        """
        List marathons ordered by startRegistrationDate.

        Args:
            email: Exact-match filter on the owner email
            limit: Maximum number of results; 0 means unbounded
            sort:  "desc" (default, latest registration opening first) or "asc"

        Raises:
            ValidationError: unknown sort order or negative limit
        """
        direction = SORT_DIRECTIONS.get((sort or "desc").lower())
        if direction is None:
            raise ValidationError(
                message=f"Invalid sort '{sort}'. Must be one of: asc, desc",
                field="sort",
            )
        if limit < 0:
            raise ValidationError(message="limit must be zero or positive", field="limit")

        query: Dict[str, Any] = {}
        if email:
            query["email"] = email

        cursor = self.collection.find(query).sort("startRegistrationDate", direction)
        if limit:
            cursor = cursor.limit(limit)
        return await self._materialize(cursor, "list_marathons")

    async def list_upcoming(
        self,
        size: Optional[int] = None,
        today: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        """
        Random sample of marathons that have not started yet.

        What:  Matches marathonStartDate >= today (date-only, ISO string
               comparison) and draws up to `size` documents with $sample.
        The result differs between calls and holds fewer than `size`
        documents when fewer marathons qualify.
        """
        size = size or self.upcoming_sample_size
        today_iso = (today or utc_today()).isoformat()
        pipeline = [
            {"$match": {"marathonStartDate": {"$gte": today_iso}}},
            {"$sample": {"size": size}},
        ]
        return await self._materialize(self.collection.aggregate(pipeline), "list_upcoming_marathons")

    async def get_marathon(self, marathon_id: str) -> Dict[str, Any]:
        return await self._get(marathon_id)

    async def create_marathon(self, payload: MarathonCreate) -> InsertResult:
        doc = payload.to_document()
        with translate_store_errors("create_marathon"):
            result = await self.collection.insert_one(doc)
        logger.info("Marathon created: %s (%s)", result.inserted_id, doc.get("title"))
        return InsertResult(acknowledged=result.acknowledged, inserted_id=str(result.inserted_id))

    async def update_marathon(self, marathon_id: str, payload: MarathonUpdate) -> UpdateResult:
        return await self._update(marathon_id, payload.to_patch())

    async def delete_marathon(self, marathon_id: str) -> DeleteResult:
        return await self._delete(marathon_id)
