"""
Domain validation helpers shared by services and engine components.

Each helper returns the validated value or raises ``ValidationError``.
"""

from __future__ import annotations

from typing import Any

from .exceptions import ValidationError


def validate_non_negative_amount(value: Any, field: str) -> int:
    """
    Ensure ``value`` is an int >= 0.

    ``bool`` is rejected even though it subclasses ``int``.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(field, f"{field} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise ValidationError(field, f"{field} must be non-negative, got {value}")
    return value


def validate_identifier(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(field, f"{field} must be a positive integer id, got {value!r}")
    return value
