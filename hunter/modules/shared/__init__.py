"""
Hunter Shared Module

Domain-level foundations for every module:
- Domain exceptions and error helpers
- Base service and repository patterns
- Validation helpers

Usage
-----
    from hunter.modules.shared import BaseService, NotFoundError
"""

from __future__ import annotations

from .base_repository import BaseRepository
from .base_service import BaseService
from .exceptions import (
    ConstraintViolationError,
    HunterDomainException,
    InvalidOperationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
    get_error_severity,
    should_alert,
)
from .validators import validate_identifier, validate_non_negative_amount

__all__ = [
    "BaseRepository",
    "BaseService",
    "ConstraintViolationError",
    "HunterDomainException",
    "InvalidOperationError",
    "NotFoundError",
    "PermissionDeniedError",
    "ValidationError",
    "get_error_severity",
    "should_alert",
    "validate_identifier",
    "validate_non_negative_amount",
]
