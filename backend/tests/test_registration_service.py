"""
Marathon Event API — Registration Service Unit Tests
======================================================

What:  Tests for registration listing, CRUD and the counter side effect.

What we test:
    ✅ Creating a registration increments the marathon counter by exactly 1
    ✅ A dangling or malformed marathon_id keeps the registration (no rollback)
    ✅ Deleting leaves the counter alone by default
    ✅ Optional decrement-on-delete never goes below zero
    ✅ Transactional mode aborts on an unknown marathon
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from marathon_api.exceptions import DatabaseError, NotFoundError, ValidationError
from marathon_api.schemas.registration import RegistrationCreate, RegistrationUpdate
from marathon_api.services.registration_service import RegistrationService


async def _count(store, marathon_id):
    doc = await store.marathons.find_one({"_id": ObjectId(marathon_id)})
    return doc["totalRegistrationCount"]


class TestRegistrationCreate:

    @pytest.mark.asyncio
    async def test_create_increments_counter(self, store, registration_service, make_marathon):
        marathon_id = await make_marathon(totalRegistrationCount=4)

        result = await registration_service.create_registration(
            RegistrationCreate(marathon_id=marathon_id, email="runner@example.com")
        )

        assert result.acknowledged is True
        assert ObjectId.is_valid(result.inserted_id)
        assert await _count(store, marathon_id) == 5

    @pytest.mark.asyncio
    async def test_marathon_id_stored_as_string(self, store, registration_service, make_marathon):
        marathon_id = await make_marathon()

        result = await registration_service.create_registration(
            RegistrationCreate(marathon_id=marathon_id)
        )
        stored = await store.registrations.find_one({"_id": ObjectId(result.inserted_id)})

        assert stored["marathon_id"] == marathon_id
        assert isinstance(stored["marathon_id"], str)

    @pytest.mark.asyncio
    async def test_unknown_marathon_keeps_registration(self, store, registration_service):
        result = await registration_service.create_registration(
            RegistrationCreate(marathon_id=str(ObjectId()))
        )

        assert await store.registrations.count_documents({}) == 1
        assert result.inserted_id

    @pytest.mark.asyncio
    async def test_malformed_marathon_id_keeps_registration(self, store, registration_service):
        await registration_service.create_registration(
            RegistrationCreate(marathon_id="not-an-object-id")
        )

        assert await store.registrations.count_documents({"marathon_id": "not-an-object-id"}) == 1

    @pytest.mark.asyncio
    async def test_increment_failure_is_not_rolled_back(self):
        store = MagicMock()
        store.registrations.insert_one = AsyncMock(
            return_value=MagicMock(inserted_id=ObjectId(), acknowledged=True)
        )
        store.marathons.update_one = AsyncMock(side_effect=OperationFailure("write failed"))
        service = RegistrationService(store)

        result = await service.create_registration(RegistrationCreate(marathon_id=str(ObjectId())))

        assert result.acknowledged is True
        store.registrations.insert_one.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_insert_failure_raises_database_error(self):
        store = MagicMock()
        store.registrations.insert_one = AsyncMock(
            side_effect=ServerSelectionTimeoutError("no servers")
        )
        store.marathons.update_one = AsyncMock()
        service = RegistrationService(store)

        with pytest.raises(DatabaseError):
            await service.create_registration(RegistrationCreate(marathon_id=str(ObjectId())))

        store.marathons.update_one.assert_not_awaited()


class TestRegistrationCreateTransactional:
    """use_transactions=True: both writes share one session."""

    def setup_method(self):
        self.store = MagicMock()
        self.session = MagicMock()
        self.session.__aenter__ = AsyncMock(return_value=self.session)
        self.session.__aexit__ = AsyncMock(return_value=False)

        async def with_transaction(callback):
            return await callback(self.session)

        self.session.with_transaction = with_transaction
        self.store.client.start_session = AsyncMock(return_value=self.session)
        self.store.registrations.insert_one = AsyncMock(
            return_value=MagicMock(inserted_id=ObjectId(), acknowledged=True)
        )
        self.service = RegistrationService(self.store, use_transactions=True)

    @pytest.mark.asyncio
    async def test_writes_use_the_session(self):
        self.store.marathons.update_one = AsyncMock(return_value=MagicMock(matched_count=1))
        marathon_id = str(ObjectId())

        await self.service.create_registration(RegistrationCreate(marathon_id=marathon_id))

        assert self.store.registrations.insert_one.await_args.kwargs["session"] is self.session
        args, kwargs = self.store.marathons.update_one.await_args
        assert args == ({"_id": ObjectId(marathon_id)}, {"$inc": {"totalRegistrationCount": 1}})
        assert kwargs["session"] is self.session

    @pytest.mark.asyncio
    async def test_unknown_marathon_aborts(self):
        self.store.marathons.update_one = AsyncMock(return_value=MagicMock(matched_count=0))

        with pytest.raises(ValidationError, match="does not exist"):
            await self.service.create_registration(
                RegistrationCreate(marathon_id=str(ObjectId()))
            )

    @pytest.mark.asyncio
    async def test_malformed_marathon_id_rejected_before_insert(self):
        with pytest.raises(ValidationError):
            await self.service.create_registration(RegistrationCreate(marathon_id="bogus"))

        self.store.registrations.insert_one.assert_not_awaited()


class TestRegistrationList:

    @pytest.mark.asyncio
    async def test_title_search_is_case_insensitive_substring(self, store, registration_service):
        await store.registrations.insert_many([
            {"marathon_id": "a", "marathon_title": "Boston Marathon 2025"},
            {"marathon_id": "b", "marathon_title": "Berlin Half"},
            {"marathon_id": "c", "marathon_title": "boston trail run"},
        ])

        result = await registration_service.list_registrations(title="BOSTON")

        assert {r["marathon_id"] for r in result} == {"a", "c"}

    @pytest.mark.asyncio
    async def test_title_search_matches_metacharacters_literally(self, store, registration_service):
        await store.registrations.insert_many([
            {"marathon_id": "a", "marathon_title": "5K (fun run)"},
            {"marathon_id": "b", "marathon_title": "5K fun run"},
        ])

        result = await registration_service.list_registrations(title="(fun")

        assert [r["marathon_id"] for r in result] == ["a"]

    @pytest.mark.asyncio
    async def test_email_and_title_combined(self, store, registration_service):
        await store.registrations.insert_many([
            {"email": "a@example.com", "marathon_title": "Boston"},
            {"email": "b@example.com", "marathon_title": "Boston"},
            {"email": "a@example.com", "marathon_title": "Berlin"},
        ])

        result = await registration_service.list_registrations(email="a@example.com", title="bos")

        assert len(result) == 1
        assert result[0]["marathon_title"] == "Boston"

    @pytest.mark.asyncio
    async def test_list_by_marathon_uses_string_equality(self, store, registration_service):
        marathon_oid = ObjectId()
        await store.registrations.insert_many([
            {"marathon_id": str(marathon_oid)},
            {"marathon_id": marathon_oid},
            {"marathon_id": "other"},
        ])

        result = await registration_service.list_by_marathon(str(marathon_oid))

        assert len(result) == 1
        assert result[0]["marathon_id"] == str(marathon_oid)


class TestRegistrationUpdateDelete:

    @pytest.mark.asyncio
    async def test_get_and_update(self, store, registration_service, make_marathon):
        marathon_id = await make_marathon()
        created = await registration_service.create_registration(
            RegistrationCreate(marathon_id=marathon_id, email="a@example.com", tshirt="M")
        )

        await registration_service.update_registration(
            created.inserted_id, RegistrationUpdate(tshirt="L")
        )
        fetched = await registration_service.get_registration(created.inserted_id)

        assert fetched["tshirt"] == "L"
        assert fetched["email"] == "a@example.com"

    @pytest.mark.asyncio
    async def test_get_missing(self, registration_service):
        with pytest.raises(NotFoundError):
            await registration_service.get_registration(str(ObjectId()))

    @pytest.mark.asyncio
    async def test_delete_does_not_decrement_by_default(
        self, store, registration_service, make_marathon
    ):
        marathon_id = await make_marathon()
        created = await registration_service.create_registration(
            RegistrationCreate(marathon_id=marathon_id)
        )

        result = await registration_service.delete_registration(created.inserted_id)

        assert result.deleted_count == 1
        assert await _count(store, marathon_id) == 1

    @pytest.mark.asyncio
    async def test_optional_decrement_on_delete(self, store, make_marathon):
        service = RegistrationService(store, decrement_on_delete=True)
        marathon_id = await make_marathon()
        created = await service.create_registration(RegistrationCreate(marathon_id=marathon_id))

        result = await service.delete_registration(created.inserted_id)
        again = await service.delete_registration(created.inserted_id)

        assert result.deleted_count == 1
        assert again.deleted_count == 0
        assert await _count(store, marathon_id) == 0

    @pytest.mark.asyncio
    async def test_decrement_never_below_zero(self, store, make_marathon):
        service = RegistrationService(store, decrement_on_delete=True)
        marathon_id = await make_marathon(totalRegistrationCount=0)
        inserted = await store.registrations.insert_one({"marathon_id": marathon_id})

        await service.delete_registration(str(inserted.inserted_id))

        assert await _count(store, marathon_id) == 0
