"""
Composition of owed migration steps into a single sequential operation.
"""

import inspect
from typing import Any, Awaitable, Callable, Mapping

from docversion.core.exceptions import StaleVersionError, StepError
from docversion.log.logging import logger
from docversion.migrations.models import MigrationStep, Record
from docversion.migrations.registry import VersionRegistry

ComposedOperation = Callable[[Record], Awaitable[Record]]


def record_version(record: Record, version_field: str) -> int:
    """Stored version of a record; a missing or null field counts as version 0."""
    return int(record.get(version_field) or 0)


def record_id(record: Record) -> Any:
    return record.get("_id")


class MigrationComposer:
    """
    Maps a record's stored version to the steps it is owed and applies them.

    Steps run strictly in ascending registry order, each awaited before the
    next one starts. The composer never stamps the version field; that is left
    to the caller.
    """

    def __init__(self, registry: VersionRegistry, version_field: str):
        self.registry = registry
        self.version_field = version_field

    def pending_steps(self, record: Record) -> list[MigrationStep]:
        """
        Steps owed by ``record``.

        Raises:
            StaleVersionError: If the record is below the registry's minimum version.
        """
        current_version = record_version(record, self.version_field)
        if current_version < self.registry.min_version:
            raise StaleVersionError(record_id(record), current_version, self.registry.min_version)
        return self.registry.steps_from(current_version)

    def compose(self, steps: list[MigrationStep]) -> ComposedOperation:
        """Build one async operation applying ``steps`` to a record in order."""

        async def apply(record: Record) -> Record:
            for step in steps:
                try:
                    result = step.fn(record)
                    if inspect.isawaitable(result):
                        result = await result
                    if result is not None and not isinstance(result, Mapping):
                        raise TypeError(
                            f"step returned {type(result).__name__}, expected a mapping or None"
                        )
                except Exception as e:
                    logger.error(
                        "Migration step {index} ({step_name}) failed for {record_id}: {error}",
                        index=step.index,
                        step_name=step.name,
                        record_id=str(record_id(record)),
                        error=str(e),
                        event_type="migration_step_failed",
                    )
                    raise StepError(record_id(record), step.index, step.name, e) from e

                if result is not None and result is not record:
                    # Replacement mapping: keep the caller's record object
                    replacement = dict(result)
                    record.clear()
                    record.update(replacement)

            return record

        return apply

    async def compose_and_apply(self, record: Record) -> list[MigrationStep]:
        """
        Apply every owed step to ``record`` in place.

        Returns:
            The steps that were applied (empty if the record was already current).

        Raises:
            StaleVersionError: If the record is below the minimum version.
            StepError: If a step raised; steps before it stay applied.
        """
        steps = self.pending_steps(record)
        if steps:
            await self.compose(steps)(record)
        return steps
