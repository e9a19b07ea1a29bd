"""Error Hierarchy - typed, categorized exceptions for all registry failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) leave the registry unchanged; infrastructure errors are 500-level
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with LandRegistryError base: FastAPI global handler catches all
      (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
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
    AUTHORIZATION = "authorization"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    plot_id: int | None = None
    caller: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class LandRegistryError(Exception):
    """Base exception for all registry errors."""

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
                    "plot_id": self.context.plot_id,
                    "caller": self.context.caller,
                    "operation": self.context.operation,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class UnauthorizedError(LandRegistryError):
    """Caller is not an accredited registrar."""
    def __init__(self, caller: str, context: ErrorContext | None = None):
        super().__init__(
            f"Identity '{caller}' is not an accredited registrar",
            "UNAUTHORIZED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )
        self.caller = caller


class AlreadyExistsError(LandRegistryError):
    """Parcel is already registered."""
    def __init__(self, plot_id: int, context: ErrorContext | None = None):
        super().__init__(
            f"Parcel {plot_id} is already registered",
            "ALREADY_EXISTS", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.plot_id = plot_id


class NotFoundError(LandRegistryError):
    """Operation targets a parcel that was never registered."""
    def __init__(self, plot_id: int, context: ErrorContext | None = None):
        super().__init__(
            f"Parcel {plot_id} not found",
            "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )
        self.plot_id = plot_id


class NotOwnerError(LandRegistryError):
    """Transfer attempted by someone other than the current owner."""
    def __init__(self, plot_id: int, caller: str, context: ErrorContext | None = None):
        super().__init__(
            f"Identity '{caller}' is not the current owner of parcel {plot_id}",
            "NOT_OWNER", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )
        self.plot_id = plot_id
        self.caller = caller


class EncumberedError(LandRegistryError):
    """Transfer blocked by an active dispute or lien."""
    def __init__(self, plot_id: int, context: ErrorContext | None = None):
        super().__init__(
            f"Parcel {plot_id} is encumbered and cannot be transferred",
            "ENCUMBERED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 409,
        )
        self.plot_id = plot_id


class InvalidInputError(LandRegistryError):
    """Field value violates a data-model constraint (negative magnitude, empty identity)."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_INPUT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(LandRegistryError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
