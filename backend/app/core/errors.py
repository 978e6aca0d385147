"""Error Hierarchy — typed, categorized exceptions for all HackMate failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with HackMateError base: FastAPI global handler catches all (ADR: uniform error shape)
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
    BUSINESS_RULE = "business_rule"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    connection_id: str | None = None
    actor_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class HackMateError(Exception):
    """Base exception for all HackMate errors."""

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
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "connection_id": self.context.connection_id,
                    "actor_id": self.context.actor_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidIdentityError(HackMateError):
    """A user identity is missing, blank, malformed, or pairs with itself."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_IDENTITY", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class AuthenticationRequiredError(HackMateError):
    """No user identity was supplied by the authentication gateway."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Authentication required", "AUTHENTICATION_REQUIRED",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.WARNING, context, 401,
        )


class SelfConnectionError(HackMateError):
    """A user attempted to connect with themselves."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "You cannot connect with yourself",
            "SELF_CONNECTION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class DuplicateConnectionError(HackMateError):
    """A connection record already exists for the user pair, in any status."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "A connection already exists with this user",
            "DUPLICATE_CONNECTION", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class ResourceNotFoundError(HackMateError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class InvalidTransitionError(HackMateError):
    """Connection is no longer pending and cannot change status."""
    def __init__(self, current_status: str, context: ErrorContext | None = None):
        super().__init__(
            f"Connection has already been {current_status}",
            "INVALID_TRANSITION", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.current_status = current_status


class UnauthorizedActorError(HackMateError):
    """Actor is not allowed to perform the operation on this connection."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "UNAUTHORIZED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class InvalidChoiceError(HackMateError):
    """A status or decision value is outside its allowed set."""
    def __init__(
        self, field_name: str, value: object, allowed: list[str],
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Invalid {field_name} {value!r}; expected one of {', '.join(allowed)}",
            "INVALID_CHOICE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field_name = field_name
        self.allowed = allowed


class InvalidMessageError(HackMateError):
    """Message content is empty or too long."""
    def __init__(self, max_length: int, context: ErrorContext | None = None):
        super().__init__(
            f"Message content must be 1-{max_length} characters",
            "INVALID_MESSAGE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class MessagingNotAllowedError(HackMateError):
    """Conversation gate refused a message insert."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Messaging is only available on accepted connections you are part of",
            "MESSAGING_NOT_ALLOWED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StorageUnavailableError(HackMateError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "STORAGE_UNAVAILABLE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
