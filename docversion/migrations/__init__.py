"""
Record versioning and migration engine.

Records carry a schema version field; stale records are brought current by
applying the registered migration steps they are owed, either lazily when read
or proactively in bulk.
"""

from docversion.migrations.bulk import BulkMigrationDriver
from docversion.migrations.composer import MigrationComposer
from docversion.migrations.migrator import RecordMigrator
from docversion.migrations.models import BulkMigrationState, MigrationStep
from docversion.migrations.registry import VersionRegistry

__all__ = [
    "BulkMigrationDriver",
    "BulkMigrationState",
    "MigrationComposer",
    "MigrationStep",
    "RecordMigrator",
    "VersionRegistry",
]
