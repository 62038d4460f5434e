"""
docversion: schema versioning and migration for MongoDB documents.
"""

from docversion.collection import VersionedCollection, versioned_collection
from docversion.core.exceptions import (
    DocVersionError,
    RegistryConfigurationError,
    RegistryFrozenError,
    StaleVersionError,
    StepError,
    StorageError,
)
from docversion.migrations import BulkMigrationDriver, RecordMigrator, VersionRegistry

__version__ = "1.0.0"

__all__ = [
    "BulkMigrationDriver",
    "DocVersionError",
    "RecordMigrator",
    "RegistryConfigurationError",
    "RegistryFrozenError",
    "StaleVersionError",
    "StepError",
    "StorageError",
    "VersionRegistry",
    "VersionedCollection",
    "versioned_collection",
]
