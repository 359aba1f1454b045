"""
Unit Tests for Exceptions and Validators
========================================
"""

import pytest

from hunter.core.exceptions import (
    ConfigurationError,
    DatabaseError,
    ErrorSeverity,
    is_transient_error,
)
from hunter.modules.shared.exceptions import (
    ConstraintViolationError,
    InvalidOperationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
    get_error_severity,
    should_alert,
)
from hunter.modules.shared.validators import (
    validate_identifier,
    validate_non_negative_amount,
)


@pytest.mark.unit
class TestDomainExceptions:
    def test_not_found_error_code_and_details(self):
        exc = NotFoundError("HunterStatus", 7)

        assert exc.error_code == "HUNTERSTATUS_NOT_FOUND"
        assert exc.details == {"resource_type": "HunterStatus", "identifier": 7}
        assert exc.severity is ErrorSeverity.WARNING
        assert "HunterStatus not found: 7" in str(exc)

    def test_not_found_without_identifier(self):
        assert NotFoundError("Quest").message == "Quest not found"

    def test_to_dict_is_serializable(self):
        payload = ValidationError("amount", "must be non-negative").to_dict()

        assert payload["error_type"] == "ValidationError"
        assert payload["error_code"] == "VALIDATION_AMOUNT"
        assert payload["severity"] == "info"
        assert payload["is_retryable"] is False

    def test_invalid_operation_error_code(self):
        exc = InvalidOperationError("create_hunter", "Hunter already registered")

        assert exc.error_code == "INVALID_CREATE_HUNTER"
        assert exc.reason == "Hunter already registered"

    def test_permission_denied_carries_user(self):
        exc = PermissionDeniedError("UserQuest", 12, user_id=7)

        assert exc.details["user_id"] == 7
        assert exc.error_code == "PERMISSION_DENIED"

    def test_alerting_follows_severity(self):
        assert should_alert(ConstraintViolationError("insert", "duplicate key"))
        assert not should_alert(ValidationError("delta", "negative"))
        assert get_error_severity(RuntimeError("boom")) is ErrorSeverity.ERROR


@pytest.mark.unit
class TestInfrastructureExceptions:
    def test_database_error_is_transient(self):
        exc = DatabaseError("flush", RuntimeError("connection reset"))

        assert is_transient_error(exc)
        assert exc.details["error_type"] == "RuntimeError"

    def test_configuration_error_is_critical_and_not_transient(self):
        exc = ConfigurationError("progression.threshold_base", "missing")

        assert exc.severity is ErrorSeverity.CRITICAL
        assert not is_transient_error(exc)
        assert not is_transient_error(ValueError("plain"))


@pytest.mark.unit
class TestValidators:
    @pytest.mark.parametrize("value", [0, 1, 250])
    def test_non_negative_amounts_accepted(self, value):
        assert validate_non_negative_amount(value, "amount") == value

    @pytest.mark.parametrize("value", [-1, 1.5, "10", True, None])
    def test_invalid_amounts_rejected(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_non_negative_amount(value, "amount")

        assert exc_info.value.field == "amount"

    @pytest.mark.parametrize("value", [0, -3, False, "7"])
    def test_invalid_identifiers_rejected(self, value):
        with pytest.raises(ValidationError):
            validate_identifier(value, "user_id")

    def test_identifier_accepted(self):
        assert validate_identifier(42, "user_id") == 42
