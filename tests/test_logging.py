"""Tests for structured logging functionality."""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys
from datetime import date

import pytest

from habitkit import create_app_context
from habitkit.config import TestConfig
from habitkit.errors import StorageError
from habitkit.infra.backends import InMemoryBackend
from habitkit.infra.repositories import StorageEntryRepository
from habitkit.logging_config import ROOT_LOGGER_NAME, JSONFormatter, get_logger, setup_logging


@pytest.fixture(autouse=True)
def _detach_handlers():
    """Close any handlers setup_logging attached during a test."""
    yield
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(logging.NOTSET)


def _record(level=logging.INFO, msg="Test message", exc_info=None) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test.logger",
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    record.module = "test_module"
    record.funcName = "test_function"
    return record


def test_json_formatter():
    """JSONFormatter emits one object with the standard keys."""
    log_data = json.loads(JSONFormatter().format(_record()))

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test.logger"
    assert log_data["message"] == "Test message"
    assert log_data["module"] == "test_module"
    assert log_data["function"] == "test_function"
    assert log_data["line"] == 42
    assert "timestamp" in log_data
    assert "exception" not in log_data


def test_json_formatter_with_exception():
    """Exceptions are rendered as a type/message/traceback block."""
    try:
        raise ValueError("Test error")
    except ValueError:
        exc_info = sys.exc_info()

    log_data = json.loads(JSONFormatter().format(_record(logging.ERROR, "Error occurred", exc_info)))

    assert log_data["exception"]["type"] == "ValueError"
    assert "Test error" in log_data["exception"]["message"]
    assert log_data["exception"]["traceback"] is not None


def test_json_formatter_collects_extra_fields():
    record = _record()
    record.habit_id = "abc123"

    log_data = json.loads(JSONFormatter().format(record))

    assert log_data["extra"] == {"habit_id": "abc123"}


def test_setup_logging(tmp_path):
    """Logging setup writes JSON lines to a rotating file under DATA_DIR."""
    config = TestConfig(tmp_path)
    config.DEV_MODE = True

    logger = setup_logging(config)

    assert logger.name == "habitkit"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2  # Console + File

    log_file = tmp_path / "logs" / "habitkit.log"
    assert log_file.exists()

    logger.warning("Test warning message")
    for handler in logger.handlers:
        handler.flush()

    lines = [line for line in log_file.read_text(encoding="utf-8").splitlines() if line.strip()]
    assert len(lines) >= 2
    messages = [json.loads(line)["message"] for line in lines]
    assert messages[0] == "Logging initialized"
    assert "Test warning message" in messages


def test_setup_logging_is_idempotent(tmp_path):
    config = TestConfig(tmp_path)

    setup_logging(config)
    logger = setup_logging(config)

    assert len(logger.handlers) == 2


def test_get_logger():
    """get_logger namespaces loggers under habitkit exactly once."""
    assert get_logger("module1").name == "habitkit.module1"
    assert get_logger("habitkit.infra.database").name == "habitkit.infra.database"
    assert get_logger("habitkit").name == "habitkit"


@pytest.mark.parametrize("dev_mode", [True, False])
def test_logging_levels_by_mode(tmp_path, dev_mode):
    """Console logging level adjusts based on dev mode."""
    config = TestConfig(tmp_path)
    config.DEV_MODE = dev_mode

    logger = setup_logging(config)

    console_handler = next(
        handler
        for handler in logger.handlers
        if isinstance(handler, logging.StreamHandler)
        and not isinstance(handler, logging.handlers.RotatingFileHandler)
    )
    expected_level = logging.INFO if dev_mode else logging.WARNING
    assert console_handler.level == expected_level


def test_storage_write_failures_are_logged(caplog):
    repo = StorageEntryRepository(InMemoryBackend())

    with caplog.at_level(logging.WARNING, logger=ROOT_LOGGER_NAME):
        with pytest.raises(StorageError):
            repo.upsert("missing-habit", date(2024, 1, 1), "yes")

    assert any(record.getMessage() == "Write failed" for record in caplog.records)


def test_json_formatter_renders_dates_as_iso():
    record = _record()
    record.day = date(2024, 4, 10)

    log_data = json.loads(JSONFormatter().format(record))

    assert log_data["extra"]["day"] == "2024-04-10"


def test_app_context_logs_backend_selection(tmp_path):
    create_app_context(TestConfig(tmp_path, storage_backend="memory"), configure_logging=True)
    for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
        handler.flush()

    lines = (tmp_path / "logs" / "habitkit.log").read_text(encoding="utf-8").splitlines()
    selected = [json.loads(line) for line in lines if "Storage backend selected" in line]

    assert selected
    assert selected[0]["extra"]["backend"] == "memory"
    assert selected[0]["logger"] == "habitkit.infra.backends"
