"""
Tests for list rendering (easy_vibe/render.py) and reporters (easy_vibe/reporting.py).
"""

import io
import logging
from unittest.mock import MagicMock, patch

import pytest

from easy_vibe.render import (
    NOT_DETECTED,
    build_rows,
    colorize,
    print_summary,
    render_list,
    status_tag,
)
from easy_vibe.reporting import ConsoleReporter, LoggingReporter, RecordingReporter, ToastStyle
from easy_vibe.state import ToolState, VersionStatus
from easy_vibe.tools import all_tools


@pytest.fixture
def plain_output():
    with patch("easy_vibe.render.USE_COLOR", False), patch("easy_vibe.render.USE_EMOJI", False):
        yield


class TestStatusTag:
    """Tests for status tags."""

    def test_latest(self):
        """Test up-to-date tag."""
        assert status_tag(VersionStatus.UP_TO_DATE, "1.0.0")[0] == "Latest"

    def test_update(self):
        """Test outdated tag names the version."""
        assert status_tag(VersionStatus.OUTDATED, "1.1.0")[0] == "Update 1.1.0"

    def test_unknown(self):
        """Test unknown tag."""
        assert status_tag(VersionStatus.UNKNOWN, "")[0] == "Unknown"


class TestBuildRows:
    """Tests for row flattening."""

    def test_not_detected(self):
        """Test empty installed version displays as not detected."""
        rows = build_rows(all_tools(), {"claude": ToolState.of("", "1.0.5")})
        claude = rows[0]
        assert claude["installed"] == NOT_DETECTED
        assert claude["installed_version"] == ""
        assert claude["status"] == "unknown"

    def test_missing_state_defaults(self):
        """Test tools without state render as unknown."""
        rows = build_rows(all_tools(), {})
        assert [r["tag"] for r in rows] == ["Unknown"] * 3

    def test_rows_link_npm_page(self):
        """Test each row carries the package's npm page."""
        rows = build_rows(all_tools(), {})
        assert rows[1]["tool_url"] == "https://www.npmjs.com/package/@google/gemini-cli"


class TestRenderList:
    """Tests for list output."""

    def test_update_all_header(self, plain_output):
        """Test the bulk action appears when anything is outdated."""
        states = {
            "claude": ToolState.of("1.0.5", "1.0.5"),
            "gemini": ToolState.of("0.1.0", "0.2.0"),
            "qwen": ToolState.of("", "0.0.9"),
        }
        out = io.StringIO()
        render_list(all_tools(), states, stream=out)
        text = out.getvalue()

        assert "Update All (1 tool)" in text
        assert "Update 0.2.0" in text
        assert "Latest" in text
        assert NOT_DETECTED in text
        assert text.index("Updates Available") < text.index("All Tools")

    def test_no_header_when_current(self, plain_output):
        """Test no bulk action when nothing is outdated."""
        states = {t.id: ToolState.of("1.0.0", "1.0.0") for t in all_tools()}
        out = io.StringIO()
        render_list(all_tools(), states, stream=out)

        assert "Update All" not in out.getvalue()
        assert out.getvalue().startswith("AI CLI Tools")

    def test_summary(self):
        """Test the status tally."""
        out = io.StringIO()
        print_summary({"a": ToolState.of("1", "2"), "b": ToolState()}, stream=out)
        assert "2 tools, 0 up to date, 1 outdated, 1 unknown" in out.getvalue()

    def test_colorize_disabled(self, plain_output):
        """Test colour codes are omitted when disabled."""
        assert colorize("Latest", "\033[32m") == "Latest"


class TestReporters:
    """Tests for notification sinks."""

    def test_recording(self):
        """Test notifications are kept in order."""
        reporter = RecordingReporter()
        reporter.animated("Checking for updates...")
        reporter.failure("Update info unavailable")
        assert reporter.titles == ["Checking for updates...", "Update info unavailable"]
        assert len(reporter.by_style(ToastStyle.FAILURE)) == 1

    def test_console(self, plain_output):
        """Test console lines include title and message."""
        out = io.StringIO()
        ConsoleReporter(stream=out).success("Update completed", "Updated to 1.0.6")
        assert out.getvalue() == "✓ Update completed: Updated to 1.0.6\n"

    def test_logging_levels(self):
        """Test failures log at ERROR."""
        logger = MagicMock()
        reporter = LoggingReporter(logger)
        reporter.success("Installed: 1.0.0")
        reporter.failure("qwen not detected")
        assert logger.log.call_args_list[0].args == (logging.INFO, "Installed: 1.0.0")
        assert logger.log.call_args_list[1].args == (logging.ERROR, "qwen not detected")
