from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Optional

from docversion.migrations.models import Record


class RecordStore(ABC):
    """Storage backend the migration engine reads records from and writes them to."""

    name: str = "records"

    @abstractmethod
    def stream_all(self) -> AsyncIterator[Record]:
        """Lazy, one-shot, forward-only stream over every record."""
        pass

    @abstractmethod
    async def persist(self, record: Record) -> None:
        """Durably write the record's current in-memory state."""
        pass

    @abstractmethod
    async def find_one(self, query: dict[str, Any]) -> Optional[Record]:
        """Load a single record, or None if nothing matches."""
        pass

    @abstractmethod
    async def insert_one(self, record: Record) -> Any:
        """Insert a new record and return its id."""
        pass

    @abstractmethod
    async def insert_many(self, records: list[Record]) -> list[Any]:
        """Insert new records and return their ids."""
        pass

    @abstractmethod
    async def count(self, query: dict[str, Any]) -> int:
        """Count records matching ``query``."""
        pass
