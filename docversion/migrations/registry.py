"""
Ordered registry of migration steps.
"""

from typing import Optional

from docversion.core.exceptions import RegistryConfigurationError, RegistryFrozenError
from docversion.log.logging import logger
from docversion.migrations.models import MigrationStep, StepFunction


class VersionRegistry:
    """
    Ordered list of migration steps plus the minimum accepted record version.

    The number of registered steps is the current schema version: a brand new
    record is stamped with it, and a record at version N is owed steps N onward.
    Register every step before serving traffic; the registry is frozen the first
    time a migration executes.
    """

    def __init__(self, name: str = "default"):
        self.name = name
        self._steps: list[MigrationStep] = []
        self._min_version = 0
        self._frozen = False

    def __len__(self) -> int:
        return len(self._steps)

    @property
    def length(self) -> int:
        """Current schema version (number of registered steps)."""
        return len(self._steps)

    current_version = length

    @property
    def min_version(self) -> int:
        return self._min_version

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def steps(self) -> tuple[MigrationStep, ...]:
        return tuple(self._steps)

    def register(
        self, fn: StepFunction, name: Optional[str] = None, description: str = ""
    ) -> MigrationStep:
        """
        Append a migration step.

        Args:
            fn: Sync or async callable applied to stale records.
            name: Optional name, defaults to the callable's ``__name__``.
            description: Optional description for logs.

        Returns:
            The registered step.

        Raises:
            RegistryFrozenError: If migrations already started executing.
        """
        if self._frozen:
            raise RegistryFrozenError("register migration step")
        if not callable(fn):
            raise RegistryConfigurationError(f"Migration step must be callable, got {fn!r}")

        step = MigrationStep(
            index=len(self._steps),
            fn=fn,
            name=name or getattr(fn, "__name__", f"step_{len(self._steps)}"),
            description=description,
        )
        self._steps.append(step)

        logger.debug(
            "Registered migration step {index} ({step_name}) on {registry}",
            index=step.index,
            step_name=step.name,
            registry=self.name,
            event_type="migration_step_registered",
        )
        return step

    def migration(self, fn: StepFunction) -> StepFunction:
        """Decorator form of :meth:`register`; returns the function unchanged."""
        self.register(fn)
        return fn

    def set_min_version(self, version: int) -> None:
        """
        Set the floor below which records are rejected rather than migrated.

        Raises:
            RegistryConfigurationError: If ``version`` is outside ``[0, length]``.
            RegistryFrozenError: If migrations already started executing.
        """
        if self._frozen:
            raise RegistryFrozenError("set minimum version")
        if version < 0 or version > len(self._steps):
            raise RegistryConfigurationError(
                f"Minimum version {version} must be between 0 and the current "
                f"version {len(self._steps)}"
            )
        self._min_version = version

    def steps_from(self, current_version: Optional[int]) -> list[MigrationStep]:
        """Steps still owed by a record at ``current_version`` (None means 0)."""
        return self._steps[max(int(current_version or 0), 0):]

    def freeze(self) -> None:
        """Reject further configuration changes."""
        if not self._frozen:
            self._frozen = True
            logger.info(
                "Migration registry {registry} frozen at version {version}",
                registry=self.name,
                version=len(self._steps),
                min_version=self._min_version,
                event_type="migration_registry_frozen",
            )
