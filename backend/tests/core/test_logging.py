"""
Tests for structured logging configuration.
"""

import structlog
from structlog.contextvars import get_contextvars

from apps.core.logging import (
    _add_trace_id,
    _redact_secrets,
    _stringify_user_id,
    bind_contextvars,
    clear_contextvars,
    configure_logging,
    get_logger,
)


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_logging_json_format(self):
        """Test that JSON format configuration works."""
        configure_logging(json_format=True, log_level="INFO")

        config = structlog.get_config()
        assert _stringify_user_id in config["processors"]

    def test_configure_logging_console_format(self):
        """Test that console format configuration works."""
        configure_logging(json_format=False, log_level="DEBUG")

        config = structlog.get_config()
        assert _add_trace_id in config["processors"]

    def test_get_logger_returns_logger(self):
        assert get_logger("apps.payments.services") is not None
        assert get_logger(None) is not None


class TestProcessors:
    """Tests for the custom event processors."""

    def test_user_id_is_stringified(self):
        event = _stringify_user_id(None, "info", {"event": "x", "usr.id": 42})

        assert event["usr.id"] == "42"

    def test_missing_user_id_untouched(self):
        event = _stringify_user_id(None, "info", {"event": "x", "usr.id": None})

        assert event["usr.id"] is None

    def test_correlation_id_becomes_trace_id(self):
        event = _add_trace_id(None, "info", {"event": "x", "correlation_id": 123})

        assert event == {"event": "x", "trace_id": "123"}

    def test_signatures_redacted(self):
        event = _redact_secrets(None, "info", {"event": "x", "md5sig": "ABC", "order_id": "O1"})

        assert event == {"event": "x", "md5sig": "[redacted]", "order_id": "O1"}


class TestContextVars:
    """Tests for context variable binding."""

    def setup_method(self):
        clear_contextvars()

    def teardown_method(self):
        clear_contextvars()

    def test_bind_contextvars_adds_context(self):
        bind_contextvars(order_id="ORDER_1700000000000_42", **{"usr.id": "42"})

        ctx = get_contextvars()
        assert ctx["order_id"] == "ORDER_1700000000000_42"
        assert ctx["usr.id"] == "42"

    def test_clear_contextvars(self):
        bind_contextvars(order_id="ORDER_1")

        clear_contextvars()

        assert get_contextvars() == {}
