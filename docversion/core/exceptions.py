"""
Custom exception classes for the migration engine.

This module provides:
- Error codes for programmatic error handling
- Specific exception classes for each failure category
"""

from typing import Any


class ErrorCode:
    """Error codes for programmatic error handling."""

    # General errors (0xxx)
    INTERNAL_ERROR = "ERR_0001"

    # Migration errors (1xxx)
    STALE_VERSION = "ERR_1001"
    STEP_FAILED = "ERR_1002"

    # Storage errors (2xxx)
    STORAGE_ERROR = "ERR_2001"

    # Registry errors (3xxx)
    REGISTRY_INVALID = "ERR_3001"
    REGISTRY_FROZEN = "ERR_3002"


class DocVersionError(Exception):
    """Base exception for all migration engine errors."""

    error_code: str = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, error_code: str | None = None):
        self.error_code = error_code or self.__class__.error_code
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        """Structured form of the error for logs."""
        return {"error": self.__class__.__name__, "code": self.error_code, "message": self.message}


# =============================================================================
# Migration Errors
# =============================================================================


class StaleVersionError(DocVersionError):
    """Raised when a record's version is below the registry's minimum version."""

    error_code = ErrorCode.STALE_VERSION

    def __init__(self, record_id: Any, current_version: int, min_version: int):
        self.record_id = record_id
        self.current_version = current_version
        self.min_version = min_version
        super().__init__(
            f"Document '{record_id}' has schema version {current_version}, "
            f"which is less than the minimum schema version {min_version}"
        )


class StepError(DocVersionError):
    """Raised when a migration step fails. The original error is the ``__cause__``."""

    error_code = ErrorCode.STEP_FAILED

    def __init__(self, record_id: Any, step_index: int, step_name: str, original: BaseException):
        self.record_id = record_id
        self.step_index = step_index
        self.step_name = step_name
        self.original = original
        super().__init__(
            f"Migration step {step_index} ({step_name}) failed for document "
            f"'{record_id}': {original}"
        )


# =============================================================================
# Storage Errors
# =============================================================================


class StorageError(DocVersionError):
    """Raised when persisting or streaming records fails."""

    error_code = ErrorCode.STORAGE_ERROR

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        super().__init__(f"Storage operation '{operation}' failed: {detail}")


# =============================================================================
# Registry Errors
# =============================================================================


class RegistryConfigurationError(DocVersionError):
    """Raised when the registry is configured with invalid values."""

    error_code = ErrorCode.REGISTRY_INVALID


class RegistryFrozenError(RegistryConfigurationError):
    """Raised when the registry is changed after migrations started executing."""

    error_code = ErrorCode.REGISTRY_FROZEN

    def __init__(self, operation: str):
        super().__init__(
            f"Cannot {operation}: registry is frozen once migrations have started"
        )
