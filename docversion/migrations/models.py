"""
Migration step and bulk run data models.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, MutableMapping, Optional, Union

Record = MutableMapping[str, Any]

StepResult = Union[Optional[Record], Awaitable[Optional[Record]]]
StepFunction = Callable[[Record], StepResult]


@dataclass(frozen=True)
class MigrationStep:
    """
    One ordered transformation that advances a record by exactly one version.

    Attributes:
        index: Position in the registry. The step upgrades records at version
            ``index`` to version ``index + 1``.
        fn: Sync or async callable receiving the record. It may mutate the
            record in place and return None, or return a replacement mapping.
        name: Human-readable name used in logs and errors.
        description: Longer description of what the step does.
    """

    index: int
    fn: StepFunction
    name: str
    description: str = ""

    @property
    def target_version(self) -> int:
        """Version a record reaches once this step has been applied."""
        return self.index + 1


@dataclass
class BulkMigrationState:
    """
    Counters for a single bulk migration run.

    Attributes:
        outstanding: Records currently being migrated by a worker.
        source_exhausted: Whether the record stream has ended.
        updated_count: Records migrated and persisted so far.
    """

    outstanding: int = 0
    source_exhausted: bool = False
    updated_count: int = 0

    @property
    def complete(self) -> bool:
        """True once the stream has ended and no record is in flight."""
        return self.source_exhausted and self.outstanding == 0
