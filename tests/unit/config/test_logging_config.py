"""Tests for logging helpers."""

from structlog.contextvars import get_contextvars
from structlog.testing import capture_logs

from salepoint.config import configure_logging, get_logger, sale_context


class TestSaleContext:
    def test_binds_and_clears(self):
        with sale_context(request_id="req-1", session_key="till-1", sale_id=None):
            bound = get_contextvars()
            assert bound["request_id"] == "req-1"
            assert bound["session_key"] == "till-1"
            assert "sale_id" not in bound

        assert "request_id" not in get_contextvars()

    def test_nested_blocks_restore_outer_values(self):
        with sale_context(request_id="outer"):
            with sale_context(request_id="inner"):
                assert get_contextvars()["request_id"] == "inner"
            assert get_contextvars()["request_id"] == "outer"


class TestConfigureLogging:
    def test_events_are_captured_after_configuration(self):
        configure_logging(role="terminal")
        with capture_logs() as logs:
            get_logger("salepoint.test").info("draft_resumed", items=2)

        assert logs == [{"event": "draft_resumed", "items": 2, "log_level": "info"}]
