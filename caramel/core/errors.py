"""Error Hierarchy — typed, categorized exceptions for every CARAMEL failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client errors (400-level) carry a descriptive message and no internal detail
    - Server errors (500-level) carry the driver/exception detail in `details`,
      which to_response() drops unless the caller allows exposure
    - Response envelope is always {"success": false, "error": ..., "code": ...}

Design Decisions:
    - Single hierarchy with CaramelError base: one FastAPI handler renders all of them
    - DatabaseError is raised by the pool layer and re-raised by routes as an
      OperationFailedError with the endpoint's own user-facing message
"""

from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    RATE_LIMIT = "rate_limit"
    INTERNAL = "internal"


class CaramelError(Exception):
    """Base exception for all CARAMEL errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        http_status: int = 500,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.http_status = http_status
        self.details = details

    def to_response(self, expose_details: bool = True) -> dict:
        """Convert to the standard REST error envelope."""
        body: dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": self.code,
        }
        if expose_details and self.details is not None:
            body["details"] = self.details
        return body


# ─── Client Errors (400-level) ──────────────────────────────────

class InvalidRequestError(CaramelError):
    """Request body is missing required data."""
    def __init__(self, message: str, details: Any = None):
        super().__init__(
            message, "INVALID_REQUEST", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, 400, details,
        )

    def to_response(self, expose_details: bool = True) -> dict:
        # Client errors describe the caller's input, never internals
        return super().to_response(expose_details=True)


class EndpointNotFoundError(CaramelError):
    """No route matches the requested method and path."""
    def __init__(self, path: str, available_endpoints: list[str]):
        super().__init__(
            "API endpoint not found", "ENDPOINT_NOT_FOUND",
            ErrorCategory.RESOURCE_NOT_FOUND, ErrorSeverity.INFO, 404,
        )
        self.path = path
        self.available_endpoints = available_endpoints

    def to_response(self, expose_details: bool = True) -> dict:
        body = super().to_response(expose_details)
        body["path"] = self.path
        body["available_endpoints"] = self.available_endpoints
        return body


class RateLimitExceededError(CaramelError):
    """Client used up its request quota for the current window."""
    def __init__(self, retry_after_seconds: int):
        super().__init__(
            "Too many requests from this IP", "RATE_LIMITED",
            ErrorCategory.RATE_LIMIT, ErrorSeverity.WARNING, 429,
        )
        self.retry_after_seconds = retry_after_seconds


class PayloadTooLargeError(CaramelError):
    """Declared request body exceeds the configured limit."""
    def __init__(self, limit_bytes: int):
        super().__init__(
            "Request body too large", "PAYLOAD_TOO_LARGE",
            ErrorCategory.VALIDATION, ErrorSeverity.WARNING, 413,
        )
        self.limit_bytes = limit_bytes


# ─── Server Errors (500-level) ──────────────────────────────────

class DatabaseError(CaramelError):
    """Database operation failed (connectivity, constraint, driver)."""
    def __init__(self, message: str, operation: str, details: Any = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, 500, details,
        )
        self.operation = operation


class OperationFailedError(CaramelError):
    """An endpoint's operation failed; message is user-facing, details are not."""
    def __init__(self, message: str, details: Any = None):
        super().__init__(
            message, "OPERATION_FAILED", ErrorCategory.INTERNAL,
            ErrorSeverity.ERROR, 500, details,
        )
