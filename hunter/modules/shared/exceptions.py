"""
Domain exceptions for the Hunter progression engine.

Purpose
-------
Define the domain-specific exception hierarchy raised by services for
business rule violations. Callers above the service layer translate these
into user-facing messages.

Error taxonomy
--------------
- `NotFoundError`: a referenced hunter, quest, objective, stat or rank row
  does not exist. Fatal to the enclosing transaction.
- `PermissionDeniedError`: an operation targets a resource the user does not
  own. Quest operations report this as an unsuccessful result instead of
  raising; the exception exists for callers that prefer to raise.
- `ConstraintViolationError`: the store rejected a write (uniqueness,
  foreign key). Fatal to the enclosing transaction.
- `ValidationError`: an argument is outside its supported range (for
  example a negative experience amount).
- `InvalidOperationError`: the request is well formed but not allowed in the
  current state (duplicate registration).

Design Notes
------------
- All domain exceptions inherit from `HunterDomainException`.
- Each exception carries `message`, `details`, `severity`, `is_retryable`
  and `error_code`, mirroring the infrastructure hierarchy.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from hunter.core.exceptions import ErrorSeverity


class HunterDomainException(Exception):
    """
    Base exception for all domain-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling

    Example:
        >>> raise HunterDomainException(
        ...     "Quest cannot be started",
        ...     {"reason": "rank too low"}
        ... )
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}"
            ")"
        )


class NotFoundError(HunterDomainException):
    """
    Raised when a referenced row cannot be found.

    Args:
        resource_type: Type of resource (e.g., "HunterStatus", "Quest")
        identifier: Optional identifier for the missing resource
    """

    DEFAULT_SEVERITY = ErrorSeverity.WARNING

    def __init__(self, resource_type: str, identifier: Optional[Any] = None) -> None:
        self.resource_type = resource_type
        self.identifier = identifier

        if identifier is not None:
            message = f"{resource_type} not found: {identifier}"
        else:
            message = f"{resource_type} not found"

        super().__init__(
            message,
            details={"resource_type": resource_type, "identifier": identifier},
            error_code=f"{resource_type.upper()}_NOT_FOUND",
        )


class PermissionDeniedError(HunterDomainException):
    """Raised when a user targets a resource they do not own."""

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, resource_type: str, identifier: Any, user_id: int) -> None:
        self.resource_type = resource_type
        self.identifier = identifier
        self.user_id = user_id
        super().__init__(
            f"User {user_id} may not access {resource_type} {identifier}",
            details={
                "resource_type": resource_type,
                "identifier": identifier,
                "user_id": user_id,
            },
            error_code="PERMISSION_DENIED",
        )


class ConstraintViolationError(HunterDomainException):
    """
    Raised when the store rejects a write.

    Args:
        operation: The write that was rejected
        reason: Driver message describing the violated constraint
    """

    DEFAULT_SEVERITY = ErrorSeverity.ERROR

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(
            f"Constraint violation during {operation}: {reason}",
            details={"operation": operation, "reason": reason},
            error_code="CONSTRAINT_VIOLATION",
        )


class ValidationError(HunterDomainException):
    """
    Raised when an argument fails domain validation.

    Args:
        field: Name of the field that failed validation
        message: Explanation of why validation failed
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.validation_message = message
        super().__init__(
            f"Validation error for {field}: {message}",
            details={"field": field, "validation_message": message},
            error_code=f"VALIDATION_{field.upper()}",
        )


class InvalidOperationError(HunterDomainException):
    """
    Raised when an action violates the current state of the account.

    Example:
        >>> raise InvalidOperationError(
        ...     "create_hunter",
        ...     "Hunter status already exists"
        ... )
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, action: str, reason: str) -> None:
        self.action = action
        self.reason = reason
        super().__init__(
            f"Invalid operation '{action}': {reason}",
            details={"action": action, "reason": reason},
            error_code=f"INVALID_{action.upper()}",
        )


def get_error_severity(exc: Exception) -> ErrorSeverity:
    """Severity of a domain exception; unknown exceptions count as ERROR."""
    if isinstance(exc, HunterDomainException):
        return exc.severity
    return ErrorSeverity.ERROR


def should_alert(exc: Exception) -> bool:
    return get_error_severity(exc) in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)
