"""
Tests for logging setup.
"""

import io
import logging

from karinstall.core.observability.logging_config import (
    PACKAGE_LOGGER,
    parse_level,
    setup_logging,
)


class TestParseLevel:
    def test_known_names(self):
        assert parse_level("debug") == logging.DEBUG
        assert parse_level("ERROR") == logging.ERROR

    def test_unknown_falls_back_to_warning(self):
        assert parse_level("chatty") == logging.WARNING
        assert parse_level(None) == logging.WARNING


class TestSetupLogging:
    def test_minimal_format(self):
        stream = io.StringIO()
        setup_logging("WARNING", stream=stream)
        logging.getLogger("karinstall.core.services.artifacts").warning("metadata failed")
        logging.getLogger("karinstall.core.services.artifacts").info("hidden")
        assert stream.getvalue() == "WARNING: metadata failed\n"

    def test_reconfigure_replaces_handlers(self):
        setup_logging("INFO", stream=io.StringIO())
        logger = setup_logging("INFO", stream=io.StringIO())
        assert len(logger.handlers) == 1
        assert logger.name == PACKAGE_LOGGER

    def test_file_level_lowers_effective_level(self, tmp_path):
        log_file = tmp_path / "install.log"
        logger = setup_logging(
            "ERROR", log_file=str(log_file), log_file_level="DEBUG", stream=io.StringIO()
        )
        logging.getLogger("karinstall.test").debug("written to file")
        for handler in logger.handlers:
            handler.flush()
        assert logger.level == logging.DEBUG
        assert "written to file" in log_file.read_text()
        setup_logging("WARNING", stream=io.StringIO())
