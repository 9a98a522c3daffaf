"""Error Hierarchy — typed, categorized exceptions for all DevStep failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope; to_entry_error() the per-entry batch envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with DevStepError base: FastAPI global handler catches all (ADR: uniform error shape)
    - Core validators RETURN these errors (DevStepError | None) instead of raising,
      so batch submission can collect them per entry; services raise the rest
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID


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
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    AUTHENTICATION = "authentication"
    PERMISSION = "permission"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: UUID | None = None
    team_id: UUID | None = None
    challenge_id: UUID | None = None
    entry_date: date | None = None
    debug_info: dict[str, Any] | None = None


class DevStepError(Exception):
    """Base exception for all DevStep errors."""

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
                    "user_id": _str_or_none(self.context.user_id),
                    "team_id": _str_or_none(self.context.team_id),
                    "challenge_id": _str_or_none(self.context.challenge_id),
                    "entry_date": _str_or_none(self.context.entry_date),
                },
            }
        }

    def to_entry_error(self) -> dict:
        """Convert to the per-entry error shape used by batch submissions."""
        return {
            "date": _str_or_none(self.context.entry_date),
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
        }


def _str_or_none(value: object) -> str | None:
    return None if value is None else str(value)


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationError(DevStepError):
    """Malformed or out-of-range input (date outside window, negative steps, ...)."""
    def __init__(
        self, message: str, code: str = "VALIDATION_ERROR",
        field: str | None = None, context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class NotFoundError(DevStepError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: object,
        code: str = "RESOURCE_NOT_FOUND", context: ErrorContext | None = None,
        message: str | None = None,
    ):
        super().__init__(
            message or f"{resource_type} '{resource_id}' not found",
            code, ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class NotAMemberError(NotFoundError):
    """User is not on the roster of the team it is being removed from."""
    def __init__(self, user_id: UUID, team_id: UUID, context: ErrorContext | None = None):
        super().__init__(
            "Team member", user_id, "NOT_A_MEMBER", context,
            message=f"User '{user_id}' is not a member of team '{team_id}'",
        )


class ConflictError(DevStepError):
    """Operation collides with existing state (roster full, duplicates, ...)."""
    def __init__(
        self, message: str, code: str = "CONFLICT",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class TeamFullError(ConflictError):
    """Roster already holds challenge.max_team_size members."""
    def __init__(self, max_team_size: int, context: ErrorContext | None = None):
        super().__init__(
            f"Team is already at maximum capacity ({max_team_size})",
            "TEAM_FULL", context,
        )
        self.max_team_size = max_team_size


class AlreadyInTeamError(ConflictError):
    """User already belongs to a team."""
    def __init__(self, user_id: UUID, context: ErrorContext | None = None):
        super().__init__(
            f"User '{user_id}' is already a member of a team",
            "ALREADY_IN_TEAM", context,
        )


class StateError(DevStepError):
    """Operation attempted in a state that does not allow it."""
    def __init__(
        self, message: str, code: str = "INVALID_STATE",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )


class AuthenticationError(DevStepError):
    """Acting user could not be resolved from the request."""
    def __init__(self, message: str = "Missing or invalid user identity"):
        super().__init__(
            message, "UNAUTHENTICATED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, None, 401,
        )


class PermissionDeniedError(DevStepError):
    """Acting user lacks the admin role."""
    def __init__(self, message: str = "Administrator role required"):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.PERMISSION,
            ErrorSeverity.WARNING, None, 403,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(DevStepError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
