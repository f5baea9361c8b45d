"""
Marathon Event API — Collection Service Base
==============================================

What:  Shared by-id CRUD for services that own one collection.
How:   Subclasses name their collection and resource; get/update/delete by
       ObjectId are implemented once here. Listing and creation differ per
       resource and live in the subclasses.
"""

import logging
from typing import Any, Dict, List

from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorCursor

from marathon_api.database import (
    StoreClient,
    parse_object_id,
    serialize_document,
    translate_store_errors,
)
from marathon_api.exceptions import NotFoundError, ValidationError
from marathon_api.schemas.common import DeleteResult, UpdateResult

logger = logging.getLogger(__name__)


class CollectionService:
    """
    Base class for resource services.

    Subclasses set:
        resource:  Name used in error messages and logs ("marathon", ...)
        and implement `collection`.
    """

    resource = "document"

    def __init__(self, store: StoreClient):
        self.store = store

    @property
    def collection(self) -> AsyncIOMotorCollection:
        raise NotImplementedError

    async def _get(self, document_id: str) -> Dict[str, Any]:
        """
        Raises:
            ValidationError: malformed identifier (→ 400)
            NotFoundError: no document with that identifier (→ 404)
        """
        oid = parse_object_id(document_id)
        with translate_store_errors(f"get_{self.resource}", id=document_id):
            doc = await self.collection.find_one({"_id": oid})
        if doc is None:
            raise NotFoundError(resource=self.resource, resource_id=document_id)
        return serialize_document(doc)

    async def _update(self, document_id: str, patch: Dict[str, Any]) -> UpdateResult:
        """Merge-patch: `$set` of the supplied fields only."""
        oid = parse_object_id(document_id)
        if not patch:
            raise ValidationError(message="Update body must contain at least one field")
        with translate_store_errors(f"update_{self.resource}", id=document_id):
            result = await self.collection.update_one({"_id": oid}, {"$set": patch})
        logger.info(
            "Updated %s %s: matched=%d modified=%d",
            self.resource, document_id, result.matched_count, result.modified_count,
        )
        return UpdateResult(
            acknowledged=result.acknowledged,
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    async def _delete(self, document_id: str) -> DeleteResult:
        oid = parse_object_id(document_id)
        with translate_store_errors(f"delete_{self.resource}", id=document_id):
            result = await self.collection.delete_one({"_id": oid})
        logger.info("Deleted %s %s: deleted=%d", self.resource, document_id, result.deleted_count)
        return DeleteResult(acknowledged=result.acknowledged, deleted_count=result.deleted_count)

    async def _materialize(self, cursor: AsyncIOMotorCursor, operation: str) -> List[Dict[str, Any]]:
        """Drains a cursor into a list of JSON-ready documents."""
        with translate_store_errors(operation):
            docs = await cursor.to_list(length=None)
        return [serialize_document(doc) for doc in docs]
