"""
Unit Tests for the logging subsystem
====================================

Test Coverage
-------------
- LogContext binding, nesting and restoration
- ContextFilter enrichment with explicit extra taking precedence
- JSONFormatter payload shape
"""

import json
import logging

import pytest

from hunter.core.logging.logger import (
    ContextFilter,
    JSONFormatter,
    LogContext,
    get_log_context,
)


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "hunter.modules.quest.service", logging.INFO, __file__, 10, "Quest completed", None, None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
class TestLogContext:
    def test_nested_contexts_restore_outer(self):
        with LogContext(user_id=7, operation="grant", correlation_id="outer"):
            with LogContext(operation="evaluate_rank_up"):
                inner = get_log_context()
            outer = get_log_context()

        assert inner["user_id"] == "7"
        assert inner["operation"] == "evaluate_rank_up"
        assert outer["operation"] == "grant"
        assert outer["correlation_id"] == "outer"
        assert get_log_context() == {}

    async def test_async_context_generates_correlation_id(self):
        async with LogContext(user_id=3):
            context = get_log_context()

        assert len(context["correlation_id"]) == 8


@pytest.mark.unit
class TestContextFilter:
    def test_record_stamped_from_context(self):
        record = make_record()

        with LogContext(user_id=7, operation="advance_objective", correlation_id="c0ffee"):
            ContextFilter().filter(record)

        assert record.user_id == "7"
        assert record.operation == "advance_objective"
        assert record.correlation_id == "c0ffee"

    def test_explicit_extra_wins(self):
        record = make_record(user_id=99)

        with LogContext(user_id=7):
            ContextFilter().filter(record)

        assert record.user_id == 99

    def test_unbound_fields_marked_not_available(self):
        record = make_record()

        ContextFilter().filter(record)

        assert record.operation == "N/A"


@pytest.mark.unit
class TestJSONFormatter:
    def test_payload_carries_context_and_extra(self):
        record = make_record(user_id="7", operation="N/A", correlation_id="abc", quest_id=12)

        payload = json.loads(JSONFormatter().format(record))

        assert payload["message"] == "Quest completed"
        assert payload["level"] == "INFO"
        assert payload["user_id"] == "7"
        assert payload["correlation_id"] == "abc"
        assert "operation" not in payload
        assert payload["extra"] == {"quest_id": 12}
