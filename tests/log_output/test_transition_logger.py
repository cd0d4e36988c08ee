"""Tests for traversal logging."""

import json
import logging

from wayto.logging import TransitionLogger, setup_logging


class RecordingLogger:
    def __init__(self):
        self.events = []

    def info(self, event, **kwargs):
        self.events.append(("info", event, kwargs))

    def error(self, event, **kwargs):
        self.events.append(("error", event, kwargs))


class TestTransitionLogger:
    def setup_method(self):
        self.base = RecordingLogger()
        self.logger = TransitionLogger(self.base)

    def test_start_and_success(self):
        context = self.logger.log_transition_start("28908", "28907", "direction")
        self.logger.log_transition_end(context, success=True)

        (level, event, data), (end_level, end_event, end_data) = self.base.events
        assert (level, event) == ("info", "transition_started")
        assert data == {"origin": "28908", "target": "28907", "kind": "direction"}
        assert (end_level, end_event) == ("info", "transition_completed")
        assert end_data["success"] is True
        assert end_data["duration"] >= 0
        assert "start_time" not in end_data

    def test_failure_carries_error(self):
        context = self.logger.log_transition_start(None, "30716", "script", depth=1)
        self.logger.log_transition_end(
            context, success=False, failed_action="SEND", error=ConnectionError("gone")
        )

        level, event, data = self.base.events[-1]
        assert (level, event) == ("error", "transition_failed")
        assert data["failed_action"] == "SEND"
        assert data["error"] == "gone"
        assert data["error_type"] == "ConnectionError"
        assert data["depth"] == 1


class TestSetupLogging:
    def teardown_method(self):
        logging.basicConfig(handlers=[logging.NullHandler()], force=True)

    def test_file_logging(self, tmp_path):
        log_file = tmp_path / "logs" / "wayto.log"
        setup_logging(level="DEBUG", log_file=log_file, structured=True)
        logging.getLogger("wayto.test").warning("edge skipped")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "edge skipped" in log_file.read_text()

    def test_console_disabled_by_environment(self):
        setup_logging(level="INFO")
        handlers = logging.getLogger().handlers
        assert [type(h) for h in handlers] == [logging.NullHandler]

    def test_stdlib_records_are_rendered_as_json(self, tmp_path):
        log_file = tmp_path / "wayto.log"
        setup_logging(level="INFO", log_file=log_file, structured=True, add_timestamp=False)
        logging.getLogger("wayto.test").warning("edge %s skipped", "28908")
        for handler in logging.getLogger().handlers:
            handler.flush()
        (line,) = log_file.read_text().splitlines()
        assert json.loads(line) == {
            "event": "edge 28908 skipped",
            "level": "warning",
            "logger": "wayto.test",
        }
