"""Unit tests for structured logging infrastructure.

- StructuredFormatter produces valid JSON with redacted secrets
- TextFormatter for local debugging
- configure_logging() sets up the quill logger hierarchy
"""

import json
import logging
import sys

from quill.logging_config import StructuredFormatter, TextFormatter, configure_logging


def _record(msg="fallback_failed", level=logging.WARNING, exc_info=None, **extra):
    record = logging.LogRecord(
        name="quill.classifier.orchestrator",
        level=level,
        pathname="orchestrator.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    """Tests for StructuredFormatter."""

    def test_formatter_produces_valid_json(self):
        output = StructuredFormatter().format(_record())
        assert isinstance(json.loads(output), dict)

    def test_formatter_includes_required_fields(self):
        log_data = json.loads(StructuredFormatter().format(_record()))

        assert log_data["level"] == "WARNING"
        assert log_data["logger"] == "quill.classifier.orchestrator"
        assert log_data["message"] == "fallback_failed"
        assert log_data["timestamp"].endswith("Z")

    def test_extras_become_context(self):
        record = _record(reason="TimeoutError", local_type="general")
        log_data = json.loads(StructuredFormatter().format(record))

        assert log_data["context"] == {"reason": "TimeoutError", "local_type": "general"}

    def test_no_context_without_extras(self):
        log_data = json.loads(StructuredFormatter().format(_record()))
        assert "context" not in log_data

    def test_sensitive_keys_redacted(self):
        record = _record(api_key="sk-ant-secret", provider="claude")
        output = StructuredFormatter().format(record)

        assert "sk-ant-secret" not in output
        assert json.loads(output)["context"]["api_key"] == "[REDACTED]"
        assert json.loads(output)["context"]["provider"] == "claude"

    def test_token_counts_not_redacted(self):
        record = _record(authorization="Bearer abc", input_tokens=120)
        context = json.loads(StructuredFormatter().format(record))["context"]

        assert context["authorization"] == "[REDACTED]"
        assert context["input_tokens"] == 120

    def test_non_json_extras_stringified(self):
        """Enums and other objects in extras do not break formatting."""
        record = _record(types={"todo", "email"}, clock=object())
        log_data = json.loads(StructuredFormatter().format(record))
        assert "clock" in log_data["context"]

    def test_exception_included(self):
        try:
            raise ValueError("bad reply")
        except ValueError:
            record = _record(level=logging.ERROR, exc_info=sys.exc_info())

        log_data = json.loads(StructuredFormatter().format(record))

        assert "ValueError: bad reply" in log_data["exception"]


class TestTextFormatter:
    def test_human_readable(self):
        output = TextFormatter().format(_record())
        assert "[WARNING] quill.classifier.orchestrator: fallback_failed" in output


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_quill_logger_configured(self):
        configure_logging()
        logger = logging.getLogger("quill")

        assert logger.handlers
        assert logger.propagate is False

    def test_level_override(self):
        configure_logging("DEBUG")
        assert logging.getLogger("quill").level == logging.DEBUG
        configure_logging("INFO")
        assert logging.getLogger("quill").level == logging.INFO

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("QUILL_LOG_LEVEL", "ERROR")
        configure_logging()
        assert logging.getLogger("quill").level == logging.ERROR
        configure_logging("INFO")

    def test_handler_added_once(self):
        configure_logging()
        count = len(logging.getLogger("quill").handlers)
        configure_logging()
        assert len(logging.getLogger("quill").handlers) == count

    def test_child_loggers_inherit(self):
        configure_logging("WARNING")
        child = logging.getLogger("quill.classifier.matchers")
        assert child.getEffectiveLevel() == logging.WARNING
        configure_logging("INFO")
