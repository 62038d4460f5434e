"""Tests for the VersionedCollection binding."""

from unittest.mock import MagicMock, patch

import pytest

from docversion.collection import VersionedCollection, versioned_collection
from docversion.core.exceptions import RegistryFrozenError, StaleVersionError
from docversion.migrations.registry import VersionRegistry
from docversion.storage.motor_store import MotorRecordStore

VERSION_FIELD = "__schemaVersion"


@pytest.fixture
def users(memory_store, split_name):
    """Collection with the name-splitting and ordering migrations."""
    collection = VersionedCollection(memory_store)
    collection.register(split_name)

    @collection.migration
    async def add_order(record):
        query = {"name.first": {"$lt": record["name"]["first"]}}
        record["order"] = await memory_store.count(query)

    return collection


class TestVersionedCollection:
    """Tests for VersionedCollection."""

    @pytest.mark.asyncio
    async def test_find_one_migrates_legacy_records(self, users, memory_store):
        memory_store.seed({"name": "Axl Rose"}, {"name": "Slash"})

        axl = await users.find_one({"name": "Axl Rose"})
        slash = await users.find_one({"name": "Slash"})

        assert axl["name"] == {"first": "Axl", "last": "Rose"}
        assert axl["order"] == 0
        assert axl[VERSION_FIELD] == 2
        assert slash["name"] == {"first": "Slash", "last": ""}
        assert slash["order"] == 1
        assert slash[VERSION_FIELD] == 2

        stored = sorted(memory_store.docs.values(), key=lambda doc: doc["name"]["first"])
        assert [doc["name"] for doc in stored] == [
            {"first": "Axl", "last": "Rose"},
            {"first": "Slash", "last": ""},
        ]
        assert [doc[VERSION_FIELD] for doc in stored] == [2, 2]

    @pytest.mark.asyncio
    async def test_find_one_miss_returns_none(self, users):
        assert await users.find_one({"name": "Izzy"}) is None

    def test_new_record_is_current(self, users):
        record = users.new_record(name={"first": "Duff", "last": "McKagan"})

        assert record[VERSION_FIELD] == 2

    @pytest.mark.asyncio
    async def test_inserted_records_are_stamped(self, users, memory_store, step_log):
        await users.insert_one({"name": {"first": "Duff", "last": "McKagan"}})
        await users.insert_many([{"name": {"first": "Izzy", "last": "Stradlin"}}])

        assert [doc[VERSION_FIELD] for doc in memory_store.docs.values()] == [2, 2]

        record = await users.find_one({"name.first": "Duff"})
        assert "order" not in record
        assert memory_store.persist_calls == 0

    @pytest.mark.asyncio
    async def test_migrate_all(self, memory_store, split_name):
        collection = VersionedCollection(memory_store, concurrency=2)
        collection.register(split_name)
        memory_store.seed({"name": "Axl Rose"}, {"name": "Slash"}, {"name": "Duff McKagan"})

        count = await collection.migrate_all()

        assert count == 3
        assert all(doc[VERSION_FIELD] == 1 for doc in memory_store.docs.values())
        assert all(isinstance(doc["name"], dict) for doc in memory_store.docs.values())

    @pytest.mark.asyncio
    async def test_migrate_all_without_configuration_is_noop(self, memory_store):
        collection = VersionedCollection(memory_store)
        memory_store.seed({"name": "Axl Rose"})

        assert await collection.migrate_all() == 0
        assert memory_store.persist_calls == 0

    @pytest.mark.asyncio
    async def test_unconfigured_collection_passes_records_through(self, memory_store):
        collection = VersionedCollection(memory_store)
        memory_store.seed({"_id": 1, "name": "Axl Rose"})

        record = await collection.find_one({"_id": 1})

        assert record == {"_id": 1, "name": "Axl Rose"}
        assert collection.new_record(name="Slash") == {"name": "Slash"}
        assert await collection.migrate_one(record) is record

    @pytest.mark.asyncio
    async def test_migrate_one(self, users, memory_store):
        record = {"_id": 9, "name": "Izzy Stradlin"}

        await users.migrate_one(record)

        assert record["name"] == {"first": "Izzy", "last": "Stradlin"}
        assert record[VERSION_FIELD] == 2
        assert memory_store.persist_calls == 0

    @pytest.mark.asyncio
    async def test_min_version_rejects_old_records(self, users, memory_store):
        users.set_min_version(1)
        memory_store.seed({"_id": 1, "name": "Axl Rose"})

        with pytest.raises(StaleVersionError):
            await users.find_one({"_id": 1})

        assert memory_store.docs[1] == {"_id": 1, "name": "Axl Rose"}

    @pytest.mark.asyncio
    async def test_register_after_migration_started(self, users, split_name):
        await users.migrate_one({"_id": 1, "name": "Axl Rose"})

        with pytest.raises(RegistryFrozenError):
            users.register(split_name)

    @pytest.mark.asyncio
    async def test_custom_read_hook_runs_after_migration(self, users, memory_store):
        seen = []
        users.add_read_hook(lambda record: seen.append(record[VERSION_FIELD]) or record)
        memory_store.seed({"_id": 1, "name": "Slash"})

        await users.find_one({"_id": 1})

        assert seen == [2]

    def test_shared_registry(self, memory_store, split_name):
        registry = VersionRegistry(name="users")
        registry.register(split_name)

        collection = VersionedCollection(memory_store, registry=registry, version_field="v")

        assert collection.registry is registry
        assert collection.new_record(name="Slash") == {"name": "Slash", "v": 1}

    def test_versioned_collection_factory(self):
        mock_collection = MagicMock()
        mock_collection.name = "users"

        with patch("docversion.core.mongo.get_collection", return_value=mock_collection) as get:
            collection = versioned_collection("users")

        get.assert_called_once_with("users")
        assert isinstance(collection.store, MotorRecordStore)
        assert collection.name == "users"
        assert collection.registry is None
