"""Tests for logging configuration utilities."""

import json
import logging

import pytest

from metaprog.core.utils.logging import StructuredJSONFormatter, configure_logging, get_logger

pytestmark = pytest.mark.usefixtures("restore_root_logger")


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="metaprog.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg="repair %s failed",
        args=("#1",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredJSONFormatter:
    """Tests for JSON log lines."""

    def test_format_produces_json_entry(self):
        entry = json.loads(StructuredJSONFormatter().format(make_record()))

        assert entry["level"] == "WARNING"
        assert entry["message"] == "repair #1 failed"
        assert entry["context"]["logger_name"] == "metaprog.test"
        assert entry["context"]["line"] == 10

    def test_extra_fields_land_in_context(self):
        entry = json.loads(StructuredJSONFormatter().format(make_record(artifact_id="abc")))

        assert entry["context"]["artifact_id"] == "abc"


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_sets_root_level_and_quiets_openai(self):
        configure_logging(level="debug")

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("openai").level == logging.ERROR

    def test_structured_file_output(self, tmp_path):
        log_file = tmp_path / "metaprog.jsonl"
        configure_logging(level="INFO", filename=str(log_file), structured=True)

        logging.getLogger("metaprog.test").info("hello")
        for handler in logging.getLogger().handlers:
            handler.flush()

        line = log_file.read_text().strip().splitlines()[-1]
        assert json.loads(line)["message"] == "hello"


def test_get_logger_with_context_returns_adapter():
    adapter = get_logger("metaprog.test", description="add two numbers")

    assert isinstance(adapter, logging.LoggerAdapter)
    assert adapter.extra == {"description": "add two numbers"}
    assert isinstance(get_logger("metaprog.test"), logging.Logger)
