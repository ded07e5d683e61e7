"""Tests for structured logging setup."""
import json

import structlog

from app.core.logging import add_log_context, clear_log_context, configure_logging, get_logger


class TestLogging:
    def test_json_output_with_context(self, capsys):
        configure_logging(json_logs=True)
        add_log_context(user_id="u1")
        try:
            get_logger("tests").info("program_saved", program_id="p1")
        finally:
            clear_log_context()

        line = capsys.readouterr().out.strip().splitlines()[-1]
        entry = json.loads(line)
        assert entry["event"] == "program_saved"
        assert entry["program_id"] == "p1"
        assert entry["user_id"] == "u1"
        assert entry["level"] == "info"
        structlog.reset_defaults()

    def test_console_output(self, capsys):
        configure_logging(debug=True, json_logs=False)

        get_logger("tests").debug("drag_source_not_found", kind="day")

        out = capsys.readouterr().out
        assert "drag_source_not_found" in out
        assert "kind" in out
        structlog.reset_defaults()

    def test_clear_context(self):
        add_log_context(gym_id="g1")

        clear_log_context()

        assert structlog.contextvars.get_contextvars() == {}
