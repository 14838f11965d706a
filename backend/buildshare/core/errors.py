"""Error Hierarchy — typed, categorized exceptions for every build-share failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - ConflictError is the only retryable type; DataCorruptionError is never retried
    - to_response() produces the REST error envelope without internal details

Design Decisions:
    - Single hierarchy with BuildShareError base: the store converts all of them
      into failed OperationResults, the FastAPI global handler catches the rest
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone


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
    CONFLICT = "conflict"
    DATA_CORRUPTION = "data_corruption"
    DATABASE = "database"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    shortcode: str | None = None
    operation: str | None = None
    identifier: int | None = None
    attempt: int | None = None


class BuildShareError(Exception):
    """Base exception for all build-share errors."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "shortcode": self.context.shortcode,
                    "operation": self.context.operation,
                },
            }
        }


# ─── Client Errors (400-level) ──────────────────────────────────

class InputValidationError(BuildShareError):
    """A required field is missing or a query is malformed. No I/O was attempted."""
    def __init__(
        self, message: str, field: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field


class RecordNotFoundError(BuildShareError):
    """No live build record exists for the given shortcode."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "RECORD_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.INFO, context, 404,
        )


class ConflictError(BuildShareError):
    """Duplicate identifier or shortcode, or identifier allocation exhausted."""

    retryable = True

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class DataCorruptionError(BuildShareError):
    """A stored payload failed to decompress or deserialize."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "DATA_CORRUPTION", ErrorCategory.DATA_CORRUPTION,
            ErrorSeverity.ERROR, context, 422,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class InfrastructureError(BuildShareError):
    """Persistence unreachable, timed out, or failed."""
    def __init__(
        self, message: str, operation: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class TtlPolicyError(InfrastructureError):
    """The storage-engine expiry rule could not be guaranteed."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message, "ttl_policy", context)
        self.code = "TTL_POLICY_ERROR"


class QueryTimeoutError(InfrastructureError):
    """A storage query did not finish within its configured time budget."""
    def __init__(
        self, message: str, operation: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(message, operation, context)
        self.code = "QUERY_TIMEOUT"
        self.category = ErrorCategory.TIMEOUT
