"""
Marathon Event API — Document Store Client
============================================

What:  Async MongoDB client wrapper, identifier helpers and FastAPI dependency.
How:   StoreClient wraps a Motor AsyncIOMotorClient and exposes the three
       collections the API works with. It is built once in the lifespan,
       stored on app.state.store and injected into handlers via get_store().
Who:   Services receive the StoreClient; routes receive it through Depends().
When:  Connected at startup (fail fast), closed at shutdown.

Collections (database `marathonDB` by default):
    marathons       event records, sorted by startRegistrationDate
    registrations   participant entries, weakly referencing marathons
    marathonTips    read-only reference content
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi

from marathon_api.config import Settings
from marathon_api.exceptions import DatabaseError, ValidationError

logger = logging.getLogger(__name__)

MARATHONS = "marathons"
REGISTRATIONS = "registrations"
MARATHON_TIPS = "marathonTips"


class StoreClient:
    """
    Process-scoped handle on the document store.

    Attributes:
        client:         The Motor client (owns the connection pool)
        database_name:  Database holding all three collections

    Example:
        store = StoreClient.from_settings(settings)
        await store.connect()
        doc = await store.marathons.find_one({"_id": ObjectId(id)})
    """

    def __init__(self, client: AsyncIOMotorClient, database_name: str):
        self.client = client
        self.database_name = database_name
        self.db = client[database_name]

    @classmethod
    def from_settings(cls, settings: Settings) -> "StoreClient":
        """Builds the Motor client from connection settings."""
        kwargs: Dict[str, Any] = {
            "serverSelectionTimeoutMS": settings.mongodb_server_selection_timeout_ms,
        }
        if settings.mongodb_strict_api:
            kwargs["server_api"] = ServerApi("1", strict=True, deprecation_errors=True)
        client = AsyncIOMotorClient(settings.mongodb_connection_uri, **kwargs)
        return cls(client, settings.mongodb_database)

    # ── Collections ───────────────────────────────────────────────────────
    @property
    def marathons(self) -> AsyncIOMotorCollection:
        return self.db[MARATHONS]

    @property
    def registrations(self) -> AsyncIOMotorCollection:
        return self.db[REGISTRATIONS]

    @property
    def marathon_tips(self) -> AsyncIOMotorCollection:
        return self.db[MARATHON_TIPS]

    # ── Lifecycle ─────────────────────────────────────────────────────────
    async def connect(self) -> None:
        """
        What:  Confirms the deployment is reachable with an admin ping.
        Raises DatabaseError when the ping fails; the lifespan lets it
        propagate so the server never starts without a store.
        """
        try:
            await self.client.admin.command("ping")
        except PyMongoError as e:
            logger.error("Could not reach MongoDB: %s", str(e))
            raise DatabaseError(
                message="Could not connect to the document store",
                context={"original_error": type(e).__name__},
            ) from e
        logger.info("Pinged deployment; connected to database '%s'", self.database_name)

    async def ensure_indexes(self) -> None:
        """Creates the secondary indexes used by list queries (idempotent)."""
        with translate_store_errors("ensure_indexes"):
            await self.marathons.create_index([("startRegistrationDate", DESCENDING)])
            await self.marathons.create_index([("marathonStartDate", ASCENDING)])
            await self.marathons.create_index([("email", ASCENDING)])
            await self.registrations.create_index([("marathon_id", ASCENDING)])
            await self.registrations.create_index([("email", ASCENDING)])

    async def ping(self) -> bool:
        """Lightweight connectivity probe for the health endpoint."""
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning("Health check: database unreachable: %s", str(e))
            return False

    def close(self) -> None:
        self.client.close()


# ── Error Translation ─────────────────────────────────────────────────────
@contextmanager
def translate_store_errors(operation: str, **context: Any) -> Iterator[None]:
    """
    Converts driver exceptions raised inside the block into DatabaseError.

    Example:
        with translate_store_errors("insert_marathon"):
            result = await store.marathons.insert_one(doc)
    """
    try:
        yield
    except PyMongoError as e:
        logger.error(
            "Store operation '%s' failed: %s | Context: %s",
            operation,
            str(e),
            context,
            exc_info=True,
        )
        raise DatabaseError(
            context={"operation": operation, "original_error": type(e).__name__, **context},
        ) from e


# ── Identifier & Document Helpers ─────────────────────────────────────────
def parse_object_id(value: str, field: str = "id") -> ObjectId:
    """
    Converts a path parameter into an ObjectId.

    Raises:
        ValidationError: value is not a 24-character hex string
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValidationError(
            message=f"'{value}' is not a valid identifier",
            field=field,
        )


def serialize_document(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Returns a JSON-ready copy of a stored document (ObjectIds as hex strings)."""
    if doc is None:
        return None
    return {key: _serialize_value(value) for key, value in doc.items()}


def _serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize_value(v) for v in value]
    return value


# ── Store Dependency ──────────────────────────────────────────────────────
def get_store(request: Request) -> StoreClient:
    """
    FastAPI dependency returning the StoreClient built at startup.

    Example usage in a route:
        async def get_marathon(id: str, store: StoreClient = Depends(get_store)):
            ...
    """
    return request.app.state.store
