"""
Unit Tests for logging setup

Tests the JSON line formatter and the sinks installed by setup_logging().
"""

import json
import logging
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from loguru import logger

from utils.logger import setup_logging, structured_formatter


def unescape(line: str) -> str:
    return line.replace("{{", "{").replace("}}", "}")


def make_record(message: str = "Processed PR", **extra) -> dict:
    return {
        "time": datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
        "level": SimpleNamespace(name="INFO"),
        "message": message,
        "name": "services.dispatcher",
        "line": 42,
        "extra": extra,
        "exception": None,
    }


@pytest.fixture
def reset_loguru():
    yield
    logger.remove()


@pytest.mark.unit
class TestStructuredFormatter:
    """Test the JSON file sink format."""

    def test_webhook_context_fields(self):
        """GIVEN a record with bound webhook context WHEN formatting THEN the fields appear in the JSON line."""
        record = make_record(trace_id="delivery-1", pr="octocat/test-repo#42", latency_ms=12.7, status="success")

        line = structured_formatter(record)
        data = json.loads(unescape(line))

        assert line.endswith("\n")
        assert data["message"] == "Processed PR"
        assert data["level"] == "INFO"
        assert data["module"] == "services.dispatcher"
        assert data["trace_id"] == "delivery-1"
        assert data["pr"] == "octocat/test-repo#42"
        assert data["latency_ms"] == 12
        assert data["status"] == "success"

    def test_default_trace_id_is_omitted(self):
        """GIVEN a record outside a delivery WHEN formatting THEN no trace_id is written."""
        data = json.loads(unescape(structured_formatter(make_record(trace_id="-"))))

        assert "trace_id" not in data
        assert "pr" not in data

    def test_braces_are_escaped(self):
        """GIVEN JSON output WHEN handed to loguru THEN every brace is doubled."""
        line = structured_formatter(make_record(message="payload {x}"))

        assert "{{" in line and "}}" in line
        assert json.loads(unescape(line))["message"] == "payload {x}"


@pytest.mark.unit
class TestSetupLogging:
    """Test the sinks installed at startup."""

    def test_file_sink_writes_json_lines(self, tmp_path, reset_loguru):
        """GIVEN a log file WHEN logging inside a delivery THEN one JSON line with the trace id is written."""
        log_file = tmp_path / "app.log"
        setup_logging(str(log_file))

        with logger.contextualize(trace_id="delivery-7"):
            logger.bind(pr="octocat/test-repo#42").info("Processed PR")
        logger.remove()

        lines = log_file.read_text().splitlines()
        assert len(lines) == 1
        data = json.loads(lines[0])
        assert data["message"] == "Processed PR"
        assert data["trace_id"] == "delivery-7"
        assert data["pr"] == "octocat/test-repo#42"

    def test_no_file_sink_without_log_file(self, tmp_path, monkeypatch, reset_loguru):
        """GIVEN no log file WHEN setting up THEN nothing is written to disk."""
        monkeypatch.chdir(tmp_path)

        setup_logging(None)
        logger.info("console only")

        assert list(tmp_path.iterdir()) == []

    def test_level_filters_file_sink(self, tmp_path, reset_loguru):
        """GIVEN level WARNING WHEN logging info and warning THEN only the warning is written."""
        log_file = tmp_path / "app.log"
        setup_logging(str(log_file), level="WARNING")

        logger.info("skipped")
        logger.warning("kept")
        logger.remove()

        messages = [json.loads(line)["message"] for line in log_file.read_text().splitlines()]
        assert messages == ["kept"]

    def test_stdlib_logging_is_intercepted(self, tmp_path, reset_loguru):
        """GIVEN setup WHEN a stdlib logger emits THEN the record reaches the loguru file sink."""
        log_file = tmp_path / "app.log"
        setup_logging(str(log_file))

        logging.getLogger("uvicorn.error").warning("Started server process")
        logger.remove()

        data = json.loads(log_file.read_text().splitlines()[0])
        assert data["message"] == "Started server process"
        assert data["level"] == "WARNING"
