"""
Single-record migration: on-read self-healing, explicit migration and new-record stamping.
"""

import time
from typing import TYPE_CHECKING, Optional

from docversion.core.metrics import record_migrated, record_migration_failure
from docversion.log.logging import logger
from docversion.migrations.composer import MigrationComposer, record_id, record_version
from docversion.migrations.models import Record

if TYPE_CHECKING:
    from docversion.storage.base import RecordStore


class RecordMigrator:
    """
    Applies owed migration steps to one record and keeps its version field in sync.

    Errors from the composer or the store propagate unchanged; there is no retry
    at this layer.
    """

    def __init__(self, composer: MigrationComposer, store: "RecordStore"):
        self.composer = composer
        self.store = store

    @property
    def registry(self):
        return self.composer.registry

    @property
    def version_field(self) -> str:
        return self.composer.version_field

    def stamp_new(self, record: Record) -> Record:
        """Mark a freshly constructed record as current; it never runs migrations."""
        record[self.version_field] = self.registry.length
        return record

    def needs_migration(self, record: Record) -> bool:
        return record_version(record, self.version_field) < self.registry.length

    async def migrate(
        self, record: Record, mode: str, persist: bool = True, skip_current: bool = True
    ) -> Record:
        """
        Apply owed steps, stamp the current version, then optionally persist.

        The version field is never lowered: a record ahead of the registry keeps
        its version.

        Args:
            record: Record to migrate in place.
            mode: Label for logs and metrics (read, one, bulk).
            persist: Whether to write the record back to the store.
            skip_current: Return records that owe no steps untouched, without
                persisting them.
        """
        self.registry.freeze()
        stale = self.needs_migration(record)
        if not stale and skip_current:
            return record

        start_time = time.time()
        from_version = record_version(record, self.version_field)
        try:
            steps = await self.composer.compose_and_apply(record)
            if stale:
                record[self.version_field] = self.registry.length
            if persist:
                await self.store.persist(record)
        except Exception as e:
            record_migration_failure(self.store.name, type(e).__name__)
            logger.error(
                "Failed to migrate record {record_id} in {collection}: {error}",
                record_id=str(record_id(record)),
                collection=self.store.name,
                mode=mode,
                from_version=from_version,
                error=str(e),
                event_type="record_migration_failed",
            )
            raise

        duration = time.time() - start_time
        record_migrated(self.store.name, mode, len(steps), duration)
        logger.debug(
            "Migrated record {record_id} from version {from_version} to {to_version}",
            record_id=str(record_id(record)),
            from_version=from_version,
            to_version=record_version(record, self.version_field),
            collection=self.store.name,
            mode=mode,
            steps_applied=len(steps),
            event_type="record_migrated",
        )
        return record

    async def migrate_on_read(self, record: Optional[Record]) -> Optional[Record]:
        """Read hook: bring a just-loaded record current and write it back."""
        if record is None:
            return None
        return await self.migrate(record, mode="read", persist=True)

    async def migrate_one(self, record: Record, persist: bool = False) -> Record:
        """Explicitly bring ``record`` current in memory, persisting only on request."""
        return await self.migrate(record, mode="one", persist=persist)
