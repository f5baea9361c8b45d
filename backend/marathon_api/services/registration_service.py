"""
Marathon Event API — Registration Service
===========================================

What:  Business logic for the registrations collection, including the one
       multi-step write of the API: insert a registration, then increment
       the referenced marathon's totalRegistrationCount.
Who:   Called by the registration route handlers.

Create flow (default, non-transactional):
    ┌──────────────────┐    ┌───────────────────────────────┐
    │ insert_one(reg)  │───▶│ marathons.update_one(          │
    │                  │    │   {_id: marathon_id},          │
    └──────────────────┘    │   {$inc: {count: 1}})          │
                            └───────────────────────────────┘
    The insert is never rolled back. A malformed or dangling marathon_id,
    or a failed increment, is logged and the registration stays.

Create flow (use_transactions=True):
    Both steps run inside one multi-document transaction. A malformed or
    unmatched marathon_id aborts it with ValidationError (→ 400).

Deletes leave the counter alone unless decrement_on_registration_delete
is set, in which case the counter is decremented but never below zero.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import PyMongoError

from marathon_api.database import StoreClient, parse_object_id, translate_store_errors
from marathon_api.exceptions import ValidationError
from marathon_api.schemas.common import DeleteResult, InsertResult, UpdateResult
from marathon_api.schemas.registration import RegistrationCreate, RegistrationUpdate
from marathon_api.services.base import CollectionService

logger = logging.getLogger(__name__)

COUNTER_FIELD = "totalRegistrationCount"


class RegistrationService(CollectionService):
    """
    Registration operations over a StoreClient.

    Attributes:
        use_transactions:   Wrap insert + increment in one transaction
        decrement_on_delete: Decrement the marathon counter on delete
    """

    resource = "registration"

    def __init__(
        self,
        store: StoreClient,
        use_transactions: bool = False,
        decrement_on_delete: bool = False,
    ):
        super().__init__(store)
        self.use_transactions = use_transactions
        self.decrement_on_delete = decrement_on_delete

    @property
    def collection(self):
        return self.store.registrations

    # ── Reads ─────────────────────────────────────────────────────────────
    async def list_registrations(
        self,
        email: Optional[str] = None,
        title: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        List registrations.

        Args:
            email: Exact-match filter on the participant email
            title: Case-insensitive substring match on marathon_title.
                   The text is escaped, so regex metacharacters match literally.
        """
        query: Dict[str, Any] = {}
        if email:
            query["email"] = email
        if title:
            query["marathon_title"] = {"$regex": re.escape(title), "$options": "i"}
        return await self._materialize(self.collection.find(query), "list_registrations")

    async def list_by_marathon(self, marathon_id: str) -> List[Dict[str, Any]]:
        """Registrations whose stored marathon_id string equals `marathon_id`."""
        cursor = self.collection.find({"marathon_id": marathon_id})
        return await self._materialize(cursor, "list_marathon_registrations")

    async def get_registration(self, registration_id: str) -> Dict[str, Any]:
        return await self._get(registration_id)

    # ── Writes ────────────────────────────────────────────────────────────
    async def create_registration(self, payload: RegistrationCreate) -> InsertResult:
        """
        Insert a registration and bump the referenced marathon's counter.

        Returns:
            InsertResult with the new registration's identifier

        Raises:
            DatabaseError: the insert failed
            ValidationError: transactional mode only, bad marathon reference
        """
        doc = payload.to_document()
        if self.use_transactions:
            return await self._create_in_transaction(doc)

        with translate_store_errors("create_registration"):
            result = await self.collection.insert_one(doc)
        logger.info(
            "Registration created: %s for marathon %s", result.inserted_id, doc["marathon_id"]
        )
        await self._increment_best_effort(doc["marathon_id"])
        return InsertResult(acknowledged=result.acknowledged, inserted_id=str(result.inserted_id))

    async def _increment_best_effort(self, marathon_id: str) -> bool:
        """Counter increment whose failure is logged, never raised."""
        try:
            oid = ObjectId(marathon_id)
        except (InvalidId, TypeError):
            logger.warning(
                "Registration references malformed marathon_id '%s'; counter not incremented",
                marathon_id,
            )
            return False
        try:
            result = await self.store.marathons.update_one(
                {"_id": oid}, {"$inc": {COUNTER_FIELD: 1}}
            )
        except PyMongoError as e:
            logger.error(
                "Counter increment failed for marathon %s: %s", marathon_id, str(e)
            )
            return False
        if result.matched_count == 0:
            logger.warning(
                "Registration references unknown marathon %s; counter not incremented",
                marathon_id,
            )
            return False
        return True

    async def _create_in_transaction(self, doc: Dict[str, Any]) -> InsertResult:
        """Insert + increment as one multi-document transaction."""
        oid = parse_object_id(doc["marathon_id"], field="marathon_id")

        async def insert_and_increment(session):
            inserted = await self.collection.insert_one(doc, session=session)
            counted = await self.store.marathons.update_one(
                {"_id": oid}, {"$inc": {COUNTER_FIELD: 1}}, session=session
            )
            if counted.matched_count == 0:
                raise ValidationError(
                    message=f"marathon '{doc['marathon_id']}' does not exist",
                    field="marathon_id",
                )
            return inserted

        with translate_store_errors("create_registration", transactional=True):
            async with await self.store.client.start_session() as session:
                result = await session.with_transaction(insert_and_increment)
        logger.info(
            "Registration created in transaction: %s for marathon %s",
            result.inserted_id,
            doc["marathon_id"],
        )
        return InsertResult(acknowledged=result.acknowledged, inserted_id=str(result.inserted_id))

    async def update_registration(
        self, registration_id: str, payload: RegistrationUpdate
    ) -> UpdateResult:
        return await self._update(registration_id, payload.to_patch())

    async def delete_registration(self, registration_id: str) -> DeleteResult:
        """
        Delete a registration.

        The marathon counter is only touched when decrement_on_delete is set.
        """
        if not self.decrement_on_delete:
            return await self._delete(registration_id)

        oid = parse_object_id(registration_id)
        with translate_store_errors("delete_registration", id=registration_id):
            removed = await self.collection.find_one_and_delete({"_id": oid})
        if removed is None:
            return DeleteResult(acknowledged=True, deleted_count=0)
        await self._decrement_best_effort(removed.get("marathon_id"))
        logger.info("Deleted registration %s", registration_id)
        return DeleteResult(acknowledged=True, deleted_count=1)

    async def _decrement_best_effort(self, marathon_id: Optional[str]) -> None:
        # ObjectId(None) would mint a fresh id
        if not marathon_id:
            return
        try:
            oid = ObjectId(marathon_id)
        except (InvalidId, TypeError):
            return
        try:
            await self.store.marathons.update_one(
                {"_id": oid, COUNTER_FIELD: {"$gt": 0}},
                {"$inc": {COUNTER_FIELD: -1}},
            )
        except PyMongoError as e:
            logger.error("Counter decrement failed for marathon %s: %s", marathon_id, str(e))
