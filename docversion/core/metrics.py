"""
Prometheus metrics for record migrations.

This module provides metrics collection for:
- Per-record migration counts, failures and latency
- Migration steps applied
- Bulk migration runs and in-flight records
"""

from prometheus_client import Counter, Gauge, Histogram

from docversion.core.config import settings

# =============================================================================
# Record Metrics
# =============================================================================

RECORDS_MIGRATED = Counter(
    "docversion_records_migrated_total",
    "Total number of records brought to the current version",
    ["collection", "mode"],  # read, one, bulk
)

MIGRATION_FAILURES = Counter(
    "docversion_migration_failures_total",
    "Total number of failed record migrations",
    ["collection", "error_type"],
)

STEPS_APPLIED = Counter(
    "docversion_steps_applied_total",
    "Total number of migration steps applied to records",
    ["collection"],
)

RECORD_MIGRATION_DURATION = Histogram(
    "docversion_record_migration_duration_seconds",
    "Time taken to migrate and persist a single record",
    ["collection"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)


# =============================================================================
# Bulk Metrics
# =============================================================================

RECORDS_IN_FLIGHT = Gauge(
    "docversion_records_in_flight",
    "Records currently being migrated by bulk runs",
    ["collection"],
)

BULK_RUN_DURATION = Histogram(
    "docversion_bulk_run_duration_seconds",
    "Time taken by a complete bulk migration run",
    ["collection", "status"],  # success, failed
    buckets=(0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0, 900.0, 3600.0),
)


# =============================================================================
# Helper Functions
# =============================================================================


def record_migrated(collection: str, mode: str, steps: int, duration_seconds: float):
    """Record a successful single-record migration."""
    if not settings.metrics_enabled:
        return
    RECORDS_MIGRATED.labels(collection=collection, mode=mode).inc()
    STEPS_APPLIED.labels(collection=collection).inc(steps)
    RECORD_MIGRATION_DURATION.labels(collection=collection).observe(duration_seconds)


def record_migration_failure(collection: str, error_type: str):
    """Record a failed record migration."""
    if not settings.metrics_enabled:
        return
    MIGRATION_FAILURES.labels(collection=collection, error_type=error_type).inc()


def set_records_in_flight(collection: str, count: int):
    """Set the number of records currently migrating in a bulk run."""
    if not settings.metrics_enabled:
        return
    RECORDS_IN_FLIGHT.labels(collection=collection).set(count)


def record_bulk_run(collection: str, status: str, duration_seconds: float):
    """Record a finished bulk migration run."""
    if not settings.metrics_enabled:
        return
    BULK_RUN_DURATION.labels(collection=collection, status=status).observe(duration_seconds)
