"""
MongoDB record store backed by a motor collection.
"""

from typing import Any, AsyncIterator, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from docversion.core.exceptions import StorageError
from docversion.log.logging import logger
from docversion.migrations.models import Record
from docversion.storage.base import RecordStore


class MotorRecordStore(RecordStore):
    """
    RecordStore over an ``AsyncIOMotorCollection``.

    Records are persisted with a full replace keyed on ``_id`` (upsert), so the
    stored document always matches the in-memory record after a migration.
    Driver errors are wrapped in ``StorageError``.
    """

    def __init__(self, collection: AsyncIOMotorCollection, batch_size: int = 100):
        self._collection = collection
        self._batch_size = batch_size
        self.name = collection.name

    async def stream_all(self) -> AsyncIterator[Record]:
        cursor = self._collection.find({}, batch_size=self._batch_size)
        try:
            async for doc in cursor:
                yield doc
        except PyMongoError as e:
            logger.error(
                "Error streaming records from {collection}: {error}",
                collection=self.name,
                error=str(e),
                event_type="storage_stream_error",
            )
            raise StorageError("stream_all", str(e)) from e

    async def persist(self, record: Record) -> None:
        if "_id" not in record:
            await self.insert_one(record)
            return

        try:
            await self._collection.replace_one({"_id": record["_id"]}, record, upsert=True)
        except PyMongoError as e:
            logger.error(
                "Error persisting record {record_id} in {collection}: {error}",
                record_id=str(record["_id"]),
                collection=self.name,
                error=str(e),
                event_type="storage_persist_error",
            )
            raise StorageError("persist", str(e)) from e

    async def find_one(self, query: dict[str, Any]) -> Optional[Record]:
        try:
            return await self._collection.find_one(query)
        except PyMongoError as e:
            raise StorageError("find_one", str(e)) from e

    async def insert_one(self, record: Record) -> Any:
        try:
            result = await self._collection.insert_one(record)
        except PyMongoError as e:
            raise StorageError("insert_one", str(e)) from e
        # pymongo sets _id on the passed document
        return result.inserted_id

    async def insert_many(self, records: list[Record]) -> list[Any]:
        if not records:
            return []
        try:
            result = await self._collection.insert_many(records)
        except PyMongoError as e:
            raise StorageError("insert_many", str(e)) from e
        return list(result.inserted_ids)

    async def count(self, query: dict[str, Any]) -> int:
        try:
            return await self._collection.count_documents(query)
        except PyMongoError as e:
            raise StorageError("count", str(e)) from e
