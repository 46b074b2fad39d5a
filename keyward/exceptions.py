"""Keyward exceptions.

All exceptions inherit from KeywardError for easy catching.
"""

from __future__ import annotations

from typing import Optional


class KeywardError(Exception):
    """Base exception for Keyward errors."""

    def __init__(self, message: str, code: str):
        self.message = message
        self.code = code
        super().__init__(message)


# ==================== Management API Errors ====================


class ManagementAPIError(KeywardError):
    """Raised when a Management API call fails.

    Covers transport failures, permission errors and any other non-success
    response. These are never retried by the reconciler.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        status_code: Optional[int] = None,
        code: str = "MANAGEMENT_API_ERROR",
    ):
        super().__init__(message=message, code=code)
        self.operation = operation
        self.status_code = status_code


class KeyNotFoundError(ManagementAPIError):
    """Raised when an encryption key does not exist (HTTP 404)."""

    def __init__(self, key_id: str, operation: str = "read"):
        super().__init__(
            message=f"Encryption key '{key_id}' not found",
            operation=operation,
            status_code=404,
            code="KEY_NOT_FOUND",
        )
        self.key_id = key_id


class RateLimitError(ManagementAPIError):
    """Raised when the Management API rate limit is exceeded (HTTP 429)."""

    def __init__(self, operation: str, message: str = "Too many requests. Please try again later."):
        super().__init__(
            message=message,
            operation=operation,
            status_code=429,
            code="TOO_MANY_REQUESTS",
        )


def is_status_not_found(error: BaseException) -> bool:
    """Return True if the error is a Management API 404."""
    return isinstance(error, ManagementAPIError) and error.status_code == 404


# ==================== Reconciliation Errors ====================


class WaitTimeoutError(KeywardError):
    """Raised when a wait exhausts its retry budget without reaching done."""

    def __init__(self, attempts: int, interval_ms: int):
        super().__init__(
            message=(
                f"Operation did not complete within the expected time "
                f"({attempts} attempts, {interval_ms}ms apart)"
            ),
            code="WAIT_TIMEOUT",
        )
        self.attempts = attempts
        self.interval_ms = interval_ms


class WrappedKeyNotReadyError(KeywardError):
    """Raised when a wrapped key is supplied before the wrapping key exists."""

    def __init__(self) -> None:
        super().__init__(
            message=(
                "The wrapped_key attribute should not be specified in the "
                "customer_provided_root_key block until after the "
                "public_wrapping_key has been generated"
            ),
            code="WRAPPED_KEY_NOT_READY",
        )


# ==================== Configuration Errors ====================


class ConfigurationError(KeywardError):
    """Raised when provider or resource configuration is invalid."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message=message, code="INVALID_CONFIGURATION")
        self.field = field
