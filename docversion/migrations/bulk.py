"""
Bulk migration of a whole record set through a bounded worker pool.
"""

import asyncio
import time
from contextlib import aclosing
from typing import Optional

from docversion.core.config import settings
from docversion.core.metrics import record_bulk_run, set_records_in_flight
from docversion.log.logging import logger
from docversion.migrations.migrator import RecordMigrator
from docversion.migrations.models import BulkMigrationState

# Tells a worker that the stream has ended
_STOP = object()


class BulkMigrationDriver:
    """
    Streams every record of a store and migrates each one.

    A single producer feeds records from the store's stream into a bounded
    queue; ``concurrency`` workers pull from it, migrate, stamp and persist.
    A run succeeds only once the stream is exhausted, the queue is drained and
    every worker is idle. The first error from the stream or from any record
    fails the run; the producer and remaining workers are cancelled and records
    already persisted stay as they are.
    """

    def __init__(
        self,
        migrator: RecordMigrator,
        concurrency: Optional[int] = None,
        queue_size: Optional[int] = None,
    ):
        self.migrator = migrator
        self.concurrency = (
            concurrency if concurrency is not None else settings.migration_concurrency
        )
        self.queue_size = queue_size if queue_size is not None else settings.migration_queue_size
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {self.concurrency}")
        if self.queue_size < 1:
            raise ValueError(f"queue_size must be at least 1, got {self.queue_size}")

    @property
    def collection(self) -> str:
        return self.migrator.store.name

    async def _produce(self, queue: asyncio.Queue, state: BulkMigrationState) -> None:
        async with aclosing(self.migrator.store.stream_all()) as records:
            async for record in records:
                await queue.put(record)

        state.source_exhausted = True
        for _ in range(self.concurrency):
            await queue.put(_STOP)

    async def _work(self, queue: asyncio.Queue, state: BulkMigrationState) -> None:
        while True:
            record = await queue.get()
            if record is _STOP:
                return

            state.outstanding += 1
            set_records_in_flight(self.collection, state.outstanding)
            try:
                await self.migrator.migrate(record, mode="bulk", persist=True, skip_current=False)
            finally:
                state.outstanding -= 1
                set_records_in_flight(self.collection, state.outstanding)
            state.updated_count += 1

    async def run(self) -> int:
        """
        Migrate every record in the store.

        Returns:
            Number of records migrated and persisted.

        Raises:
            Exception: The first error raised by the stream or by a record's
                migration or persistence.
        """
        self.migrator.registry.freeze()
        state = BulkMigrationState()
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        start_time = time.time()

        logger.info(
            "Starting bulk migration of {collection} to version {version}",
            collection=self.collection,
            version=self.migrator.registry.length,
            concurrency=self.concurrency,
            event_type="bulk_migration_started",
        )

        producer = asyncio.create_task(self._produce(queue, state))
        workers = [
            asyncio.create_task(self._work(queue, state)) for _ in range(self.concurrency)
        ]
        tasks = [producer, *workers]

        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
            for task in tasks:
                if task in done and task.exception() is not None:
                    raise task.exception()
        except BaseException as e:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            set_records_in_flight(self.collection, 0)

            duration = time.time() - start_time
            record_bulk_run(self.collection, "failed", duration)
            logger.error(
                "Bulk migration of {collection} failed: {error}",
                collection=self.collection,
                error=str(e),
                error_type=type(e).__name__,
                updated_before_failure=state.updated_count,
                event_type="bulk_migration_failed",
            )
            raise

        assert state.complete and queue.empty()

        duration = time.time() - start_time
        record_bulk_run(self.collection, "success", duration)
        logger.info(
            "Bulk migration of {collection} completed: {count} records updated",
            collection=self.collection,
            count=state.updated_count,
            duration_seconds=round(duration, 3),
            event_type="bulk_migration_completed",
        )
        return state.updated_count
