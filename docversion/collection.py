"""
Versioned collection: binds a migration registry to a record store.

The binding installs on-read migration as a read hook and new-record stamping
as a construction hook, and exposes explicit single-record and bulk migration.
"""

import inspect
from typing import Any, Callable, Optional

from docversion.core.config import settings
from docversion.log.logging import logger
from docversion.migrations import (
    BulkMigrationDriver,
    MigrationComposer,
    RecordMigrator,
    VersionRegistry,
)
from docversion.migrations.models import MigrationStep, Record, StepFunction
from docversion.storage.base import RecordStore

ReadHook = Callable[[Optional[Record]], Any]
ConstructHook = Callable[[Record], Any]


class VersionedCollection:
    """
    A record collection whose documents carry a schema version.

    A collection without a registry has no migration configuration: reads pass
    through unchanged and ``migrate_all`` is a no-op. Registering the first step
    creates the registry.
    """

    def __init__(
        self,
        store: RecordStore,
        registry: Optional[VersionRegistry] = None,
        version_field: Optional[str] = None,
        concurrency: Optional[int] = None,
    ):
        self.store = store
        self.version_field = version_field or settings.migration_version_field
        self.concurrency = concurrency
        self.registry: Optional[VersionRegistry] = None
        self.migrator: Optional[RecordMigrator] = None
        self._read_hooks: list[ReadHook] = []
        self._construct_hooks: list[ConstructHook] = []

        if registry is not None:
            self._configure(registry)

    @property
    def name(self) -> str:
        return self.store.name

    def _configure(self, registry: VersionRegistry) -> None:
        self.registry = registry
        self.migrator = RecordMigrator(MigrationComposer(registry, self.version_field), self.store)
        self.add_read_hook(self.migrator.migrate_on_read)
        self.add_construct_hook(self.migrator.stamp_new)

    def _require_registry(self) -> VersionRegistry:
        if self.registry is None:
            self._configure(VersionRegistry(name=self.name))
        return self.registry

    # -------------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------------

    def register(
        self, fn: StepFunction, name: Optional[str] = None, description: str = ""
    ) -> MigrationStep:
        """Append a migration step to this collection's registry."""
        return self._require_registry().register(fn, name=name, description=description)

    def migration(self, fn: StepFunction) -> StepFunction:
        """Decorator registering ``fn`` as the next migration step."""
        self.register(fn)
        return fn

    def set_min_version(self, version: int) -> None:
        self._require_registry().set_min_version(version)

    def add_read_hook(self, hook: ReadHook) -> None:
        """Run ``hook`` on every record loaded by :meth:`find_one`."""
        self._read_hooks.append(hook)

    def add_construct_hook(self, hook: ConstructHook) -> None:
        """Run ``hook`` on every newly constructed record."""
        self._construct_hooks.append(hook)

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    def new_record(self, **fields: Any) -> Record:
        """Construct a new record; construction hooks stamp it current."""
        record: Record = dict(fields)
        for hook in self._construct_hooks:
            hook(record)
        return record

    async def find_one(self, query: dict[str, Any]) -> Optional[Record]:
        """Load one record and pass it through the read hooks."""
        record = await self.store.find_one(query)
        for hook in self._read_hooks:
            result = hook(record)
            if inspect.isawaitable(result):
                result = await result
            record = result
        return record

    async def insert_one(self, record: Record) -> Any:
        for hook in self._construct_hooks:
            hook(record)
        return await self.store.insert_one(record)

    async def insert_many(self, records: list[Record]) -> list[Any]:
        for record in records:
            for hook in self._construct_hooks:
                hook(record)
        return await self.store.insert_many(records)

    # -------------------------------------------------------------------------
    # Migration
    # -------------------------------------------------------------------------

    async def migrate_one(self, record: Record, persist: bool = False) -> Record:
        """
        Bring ``record`` to the current version in place.

        Args:
            record: The record to migrate.
            persist: Also write the migrated record to the store.

        Raises:
            StaleVersionError: If the record is below the minimum version.
            StepError: If a migration step fails.
            StorageError: If persisting fails.
        """
        if self.migrator is None:
            return record
        return await self.migrator.migrate_one(record, persist=persist)

    async def migrate_all(self) -> int:
        """
        Migrate and persist every record in the collection.

        Returns:
            Number of records updated; 0 when the collection has no migration
            configuration.
        """
        if self.migrator is None:
            logger.info(
                "No migrations configured for {collection}, nothing to do",
                collection=self.name,
                event_type="bulk_migration_skipped",
            )
            return 0

        driver = BulkMigrationDriver(self.migrator, concurrency=self.concurrency)
        return await driver.run()


def versioned_collection(
    name: str, registry: Optional[VersionRegistry] = None, **kwargs: Any
) -> VersionedCollection:
    """Build a VersionedCollection over a collection of the configured MongoDB database."""
    from docversion.core.mongo import get_collection
    from docversion.storage.motor_store import MotorRecordStore

    return VersionedCollection(MotorRecordStore(get_collection(name)), registry=registry, **kwargs)
