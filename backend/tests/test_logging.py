"""
Structured logging tests
"""

import json
import logging

import pytest

from app.core.logging import (
    JSONLogFormatter,
    StructuredLogger,
    TracingContext,
    get_logger,
)


@pytest.fixture(autouse=True)
def clear_context():
    TracingContext.clear()
    yield
    TracingContext.clear()


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def captured():
    handler = ListHandler()
    logger = logging.getLogger("pbu.test")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    yield StructuredLogger("Test", logger=logger), handler
    logger.removeHandler(handler)


class TestTracingContext:
    def test_new_trace(self):
        assert TracingContext.get_trace_id() == "no-trace"

        trace_id = TracingContext.new_trace()

        assert len(trace_id) == 8
        assert TracingContext.get_trace_id() == trace_id

    def test_account(self):
        assert TracingContext.get_account_id() is None
        TracingContext.set_account(42)
        assert TracingContext.get_account_id() == 42


class TestJSONFormatter:
    def test_fields(self, captured):
        logger, handler = captured
        TracingContext.set_trace_id("abcd1234")
        TracingContext.set_account(5)

        logger.info("draft_saved", entry_count=3)

        line = json.loads(JSONLogFormatter().format(handler.records[0]))
        assert line["level"] == "INFO"
        assert line["event"] == "draft_saved"
        assert line["component"] == "Test"
        assert line["trace_id"] == "abcd1234"
        assert line["account_id"] == 5
        assert line["entry_count"] == 3

    def test_exception_included(self, captured):
        logger, handler = captured
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            logger.error("storage_failure", exc_info=True)

        line = json.loads(JSONLogFormatter().format(handler.records[0]))
        assert "RuntimeError: boom" in line["exception"]


class TestTimedOperation:
    def test_complete(self, captured):
        logger, handler = captured

        with logger.timed_operation("save_draft"):
            pass

        events = [record.event for record in handler.records]
        assert events == ["save_draft_start", "save_draft_complete"]
        assert "elapsed_ms" in handler.records[-1].extra_fields

    def test_failure_is_logged_and_propagated(self, captured):
        logger, handler = captured

        with pytest.raises(ValueError):
            with logger.timed_operation("promote_draft"):
                raise ValueError("bad")

        last = handler.records[-1]
        assert last.event == "promote_draft_failed"
        assert last.extra_fields["error_type"] == "ValueError"


def test_get_logger_is_cached():
    assert get_logger("DraftManager") is get_logger("DraftManager")
