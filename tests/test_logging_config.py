"""
Tests for logging setup.
"""

import logging
from pathlib import Path

import pytest

from src.core.observability.logging_config import _parse_level, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    def test_console_level(self):
        setup_logging("INFO")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_file_handler_lowers_root_level(self, tmp_path: Path):
        log_file = tmp_path / "installer.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        logging.getLogger("src.test").debug("to the file only")
        for handler in root.handlers:
            handler.flush()
        assert "to the file only" in log_file.read_text()

    def test_file_lines_carry_host(self, tmp_path: Path):
        log_file = tmp_path / "installer.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="INFO", host_name="controller-1")
        log = logging.getLogger("src.test")
        log.info("cache restored", extra={"host": "agent-7"})
        log.info("catalog loaded")
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = log_file.read_text().splitlines()
        assert " agent-7 " in lines[0] and lines[0].endswith("cache restored")
        assert " controller-1 " in lines[1] and lines[1].endswith("catalog loaded")


class TestParseLevel:
    @pytest.mark.parametrize("name, expected", [
        ("debug", logging.DEBUG),
        ("ERROR", logging.ERROR),
        (None, logging.WARNING),
        ("", logging.WARNING),
        ("LOUD", logging.WARNING),
    ])
    def test_levels(self, name, expected):
        assert _parse_level(name) == expected
