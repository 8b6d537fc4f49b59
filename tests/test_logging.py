"""
Tests for logging configuration module.
"""

import logging
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

from easy_vibe.common import vlog
from easy_vibe.logging_config import (
    ColoredFormatter,
    get_logger,
    setup_logging,
)


class TestSetupLogging:
    """Test logging setup and configuration."""

    def test_setup_logging_default(self):
        """Test default logging setup."""
        logger = setup_logging()
        assert logger.name == "easy_vibe"
        assert logger.level == logging.INFO

    def test_setup_logging_verbose(self):
        """Test verbose logging enables DEBUG level."""
        logger = setup_logging(verbose=True)
        assert logger.level == logging.DEBUG

    def test_setup_logging_quiet(self):
        """Test quiet mode suppresses console output."""
        logger = setup_logging(quiet=True)
        assert logger.level == logging.WARNING
        console_handlers = [
            h for h in logger.handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        ]
        assert len(console_handlers) == 0

    def test_setup_logging_with_file(self):
        """Test the log file receives DEBUG records."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "logs" / "easy-vibe.log"
            logger = setup_logging(log_file=str(log_file))

            logger.debug("flag skipped")
            for handler in logger.handlers:
                handler.flush()

            assert log_file.exists()
            assert "flag skipped" in log_file.read_text()
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)

    def test_verbose_wins_over_quiet(self):
        """Test verbose keeps DEBUG while quiet still drops the console."""
        logger = setup_logging(verbose=True, quiet=True)
        assert logger.level == logging.DEBUG
        assert logger.handlers == []

    def test_setup_logging_replaces_handlers(self):
        """Test repeated setup does not stack handlers."""
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_get_logger_returns_configured(self):
        """Test get_logger returns the configured logger."""
        configured = setup_logging(level="WARNING")
        assert get_logger() is configured


class TestColoredFormatter:
    """Test the console formatter."""

    def _record(self, level=logging.WARNING):
        return logging.LogRecord("easy_vibe", level, __file__, 1, "registry slow", None, None)

    def test_with_colors(self):
        """Test coloured level names."""
        formatter = ColoredFormatter("%(level_tag)s %(message)s", use_colors=True)
        output = formatter.format(self._record())
        assert "\033[33m" in output
        assert "WARNING" in output
        assert output.endswith("registry slow")

    def test_without_colors(self):
        """Test plain level names."""
        formatter = ColoredFormatter("%(level_tag)s %(message)s", use_colors=False)
        assert formatter.format(self._record(logging.ERROR)) == "ERROR registry slow"


class TestVlog:
    """Test verbose logging helper."""

    def test_silent_by_default(self):
        """Test nothing is logged without verbose or debug env."""
        with patch.dict(os.environ, {"EASY_VIBE_DEBUG": "0"}):
            with patch("easy_vibe.logging_config.get_logger") as mock_get:
                vlog("hidden")
        mock_get.assert_not_called()

    def test_logs_when_verbose(self):
        """Test verbose messages reach the logger."""
        with patch("easy_vibe.logging_config.get_logger") as mock_get:
            vlog("shown", verbose=True)
        mock_get.return_value.info.assert_called_once_with("shown")

    def test_logs_with_debug_env(self):
        """Test EASY_VIBE_DEBUG=1 enables messages."""
        with patch.dict(os.environ, {"EASY_VIBE_DEBUG": "1"}):
            with patch("easy_vibe.logging_config.get_logger") as mock_get:
                vlog("shown")
        mock_get.return_value.info.assert_called_once_with("shown")
