"""
Logging Configuration Tests - Per-context Handlers and Files

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- widgetfx.shared.logging_conf (setup_logging, log_file_for)
"""
import logging
from logging.handlers import RotatingFileHandler

import pytest

from widgetfx.shared.logging_conf import CONSOLE_ENV, log_file_for, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        handler.close()
    root.handlers = saved_handlers
    root.setLevel(saved_level)


class TestSetupLogging:
    def test_console_only(self, monkeypatch):
        monkeypatch.setenv(CONSOLE_ENV, "true")

        assert setup_logging(logging.WARNING, context="widget") is None

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert [type(h) for h in root.handlers] == [logging.StreamHandler]

    def test_file_per_context(self, monkeypatch, tmp_path):
        monkeypatch.setenv(CONSOLE_ENV, "false")

        path = setup_logging(logging.INFO, context="press", log_dir=tmp_path)
        logging.getLogger("widgetfx.test").info("key pressed")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert path == log_file_for(tmp_path, "press") == tmp_path / "widgetfx-press.log"
        assert isinstance(logging.getLogger().handlers[0], RotatingFileHandler)
        assert "[press] widgetfx.test :: key pressed" in path.read_text(encoding="utf-8")

    def test_no_handlers_is_silent(self, monkeypatch):
        monkeypatch.setenv(CONSOLE_ENV, "false")

        setup_logging(logging.INFO, context="refresh")

        assert [type(h) for h in logging.getLogger().handlers] == [logging.NullHandler]
