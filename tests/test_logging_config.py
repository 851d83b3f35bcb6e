"""Tests for package logging setup."""

import logging
import tempfile
from pathlib import Path

import pytest

from analysis_trend.logging_config import ROOT_LOGGER, get_logger, setup_logging


@pytest.fixture(autouse=True)
def _restore_logger():
    logger = logging.getLogger(ROOT_LOGGER)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate


class TestSetupLogging:
    @pytest.mark.parametrize(
        "verbosity,level",
        [("quiet", logging.ERROR), ("normal", logging.WARNING), ("verbose", logging.DEBUG)],
    )
    def test_levels(self, verbosity, level):
        assert setup_logging(verbosity).level == level

    def test_repeated_setup_does_not_stack_handlers(self):
        setup_logging("normal")
        count = len(logging.getLogger(ROOT_LOGGER).handlers)
        setup_logging("verbose")
        assert len(logging.getLogger(ROOT_LOGGER).handlers) == count

    def test_root_logger_untouched(self):
        root_handlers = list(logging.getLogger().handlers)
        setup_logging("verbose")
        assert logging.getLogger().handlers == root_handlers

    def test_log_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "trend.log"
            setup_logging("normal", log_file=str(path))
            get_logger("history").warning("Skipping unreadable build %d", 4)
            for handler in logging.getLogger(ROOT_LOGGER).handlers:
                handler.flush()
            text = path.read_text(encoding="utf-8")
            setup_logging("normal")
        assert "analysis_trend.history - WARNING - Skipping unreadable build 4" in text

    def test_unknown_verbosity(self):
        with pytest.raises(ValueError, match="loud"):
            setup_logging("loud")


class TestGetLogger:
    def test_nested_under_package(self):
        assert get_logger("cli").name == "analysis_trend.cli"

    def test_package_names_kept(self):
        assert get_logger("analysis_trend.api").name == "analysis_trend.api"
        assert get_logger(ROOT_LOGGER).name == ROOT_LOGGER

    def test_lookalike_prefix_nested(self):
        assert get_logger("analysis_trends").name == "analysis_trend.analysis_trends"
