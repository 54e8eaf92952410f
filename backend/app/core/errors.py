"""Error Hierarchy — typed, categorized exceptions for all Packstation failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Every error carries the HTTP status it is reported with
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope; GraphQL reuses code and message
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with PackstationError base: one FastAPI handler catches all
    - ErrorContext as dataclass: observability fields without coupling to logging
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
    RESOURCE_NOT_FOUND = "resource_not_found"
    PRECONDITION = "precondition"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for logs and responses."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    packstation_id: int | None = None
    nummer: str | None = None
    version: str | None = None
    debug_info: dict[str, Any] | None = None


class PackstationError(Exception):
    """Base exception for all Packstation errors."""

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
                    "packstation_id": self.context.packstation_id,
                    "nummer": self.context.nummer,
                    "version": self.context.version,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class PackstationNummerExistsError(PackstationError):
    """Another Packstation already uses this nummer."""
    def __init__(self, nummer: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.nummer = nummer
        super().__init__(
            f"Die Nummer {nummer} existiert bereits.",
            "PACKSTATION_NUMMER_EXISTS", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, ctx, 422,
        )
        self.nummer = nummer


class PackstationNotFoundError(PackstationError):
    """No Packstation with this id, or no Packstation matches a search."""
    def __init__(self, packstation_id: int | None = None, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.packstation_id = packstation_id
        message = (
            f"Die Packstation mit der ID {packstation_id} wurde nicht gefunden."
            if packstation_id is not None
            else "Es wurden keine Packstationen gefunden."
        )
        super().__init__(
            message, "PACKSTATION_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.packstation_id = packstation_id


class VersionInvalidError(PackstationError):
    """Version token is not of the form "<digits>"."""
    def __init__(self, version: str | None, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.version = version
        super().__init__(
            f"Die Versionsnummer {version} ist ungueltig.",
            "VERSION_INVALID", ErrorCategory.PRECONDITION,
            ErrorSeverity.ERROR, ctx, 412,
        )
        self.version = version


class VersionOutdatedError(PackstationError):
    """Version token does not match the persisted version."""
    def __init__(self, version: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.version = str(version)
        super().__init__(
            f"Die Versionsnummer {version} ist nicht aktuell.",
            "VERSION_OUTDATED", ErrorCategory.PRECONDITION,
            ErrorSeverity.ERROR, ctx, 412,
        )
        self.version = version


class VersionMissingError(PackstationError):
    """Update attempted without an If-Match header."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            'Header "If-Match" fehlt',
            "VERSION_MISSING", ErrorCategory.PRECONDITION,
            ErrorSeverity.WARNING, context, 428,
        )


class BadUserInputError(PackstationError):
    """Input rejected outside of request-body validation (GraphQL, credentials)."""
    def __init__(
        self, message: str, details: list[dict] | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "BAD_USER_INPUT", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.details = details or []


class UnauthorizedError(PackstationError):
    """No token, or a token that failed verification."""
    def __init__(self, message: str = "Kein gueltiger Token vorhanden", context: ErrorContext | None = None):
        super().__init__(
            message, "UNAUTHORIZED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ForbiddenError(PackstationError):
    """Valid token without any of the required roles."""
    def __init__(self, roles: tuple[str, ...], context: ErrorContext | None = None):
        super().__init__(
            "Kein Token mit ausreichender Berechtigung vorhanden",
            "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )
        self.roles = roles


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(PackstationError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class IdentityProviderError(PackstationError):
    """Keycloak could not be reached or answered unexpectedly."""
    def __init__(self, message: str, status_code: int | None = None, context: ErrorContext | None = None):
        super().__init__(
            f"Identity provider error: {message}",
            "IDENTITY_PROVIDER_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.status_code = status_code
