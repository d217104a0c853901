"""Tests for logging formatters, context injection and queue-based setup."""

from __future__ import annotations

import json
import logging
import sys
from unittest.mock import MagicMock

import pytest

from node_hierarchy.core.settings import LoggingSettings
from node_hierarchy.infra.logging import (
    ContextInjectingFilter,
    JSONFormatter,
    clear_log_context,
    configure_logging,
    get_lazy_logger,
    get_log_context,
    lazy,
    set_log_context,
    setup_logging,
    shutdown,
)


def _record(msg: str = "Node added", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="node_hierarchy.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level = root.level
    filters = list(root.filters)
    yield
    shutdown()
    root.setLevel(level)
    root.filters = filters
    clear_log_context()


@pytest.mark.unit
class TestJSONFormatter:
    def test_single_line_json_with_extra_fields(self):
        formatter = JSONFormatter(static={"service": "node-hierarchy"})

        line = formatter.format(_record(node="B", parent="A"))

        data = json.loads(line)
        assert "\n" not in line
        assert data["message"] == "Node added"
        assert data["level"] == "INFO"
        assert data["node"] == "B"
        assert data["parent"] == "A"
        assert data["service"] == "node-hierarchy"
        assert data["timestamp"].endswith("Z")

    def test_exception_is_escaped(self):
        formatter = JSONFormatter()
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()

        data = json.loads(formatter.format(record))
        assert "ValueError: boom" in data["exception"]


@pytest.mark.unit
class TestContext:
    def test_filter_injects_context_without_overwriting(self):
        clear_log_context()
        set_log_context(operation="move_subtree", node="ctx")
        record = _record(node="explicit")

        assert ContextInjectingFilter().filter(record) is True

        assert record.operation == "move_subtree"
        assert record.node == "explicit"
        assert get_log_context() == {"operation": "move_subtree", "node": "ctx"}
        clear_log_context()
        assert get_log_context() == {}


@pytest.mark.unit
class TestLazyLogger:
    def test_callable_not_evaluated_when_level_disabled(self):
        logger = get_lazy_logger("node_hierarchy.test.lazy")
        logger.logger.setLevel(logging.INFO)
        expensive = MagicMock(return_value="dump")

        logger.debug(expensive)

        expensive.assert_not_called()

    def test_callable_evaluated_when_enabled(self, caplog):
        logger = get_lazy_logger("node_hierarchy.test.lazy_on")
        with caplog.at_level(logging.DEBUG, logger="node_hierarchy.test.lazy_on"):
            logger.debug(lambda: "rows=3")
            logger.info("chain %s", lazy(lambda: [1, 2]))

        assert "rows=3" in caplog.text
        assert "chain [1, 2]" in caplog.text


@pytest.mark.unit
class TestConfigureLogging:
    def test_file_handler_writes_json_lines(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "logs" / "hierarchy.jsonl"
        configure_logging(
            log_level="INFO",
            file_path=log_file,
            console_enabled=False,
            json_logs=True,
        )

        set_log_context(operation="add_child")
        logging.getLogger("node_hierarchy.test.file").info("Node added", extra={"node": "A"})
        shutdown()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        data = json.loads(lines[-1])
        assert data["message"] == "Node added"
        assert data["node"] == "A"
        assert data["operation"] == "add_child"
        assert data["service"] == "node-hierarchy"

    def test_reconfiguring_does_not_stack_handlers(self, tmp_path, restore_root_logger):
        from logging.handlers import QueueHandler

        for _ in range(3):
            configure_logging(file_path=tmp_path / "x.log", console_enabled=False)

        root = logging.getLogger()
        assert sum(isinstance(h, QueueHandler) for h in root.handlers) == 1

    def test_setup_logging_uses_settings(self, tmp_path, restore_root_logger):
        settings = LoggingSettings(
            level="WARNING",
            console_enabled=False,
            file_enabled=True,
            file_path=tmp_path / "from-settings.log",
        )

        setup_logging(settings, force=True)

        assert logging.getLogger().level == logging.WARNING
        assert (tmp_path / "from-settings.log").parent.exists()
