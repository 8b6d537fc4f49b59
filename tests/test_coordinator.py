"""
Tests for the VersionBoard coordinator (easy_vibe/coordinator.py).
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from easy_vibe.collectors import fetch_registry_latest
from easy_vibe.config import Preferences, Settings
from easy_vibe.coordinator import VersionBoard
from easy_vibe.reporting import RecordingReporter, ToastStyle
from easy_vibe.shell import ShellResult
from easy_vibe.state import VersionStatus
from easy_vibe.tools import get_tool
from easy_vibe.upgrade import UpdateResult


def _resolver(versions: dict[str, str]):
    async def resolve(tool):
        return versions.get(tool.id, "")
    return resolve


@pytest.fixture
def reporter():
    return RecordingReporter()


class TestRefresh:
    """Tests for resolving the whole board."""

    @pytest.mark.asyncio
    async def test_refresh_all(self, reporter):
        """Test both resolvers feed every tool's state."""
        board = VersionBoard(
            reporter=reporter,
            installed_resolver=_resolver({"claude": "1.0.5", "gemini": "0.1.0"}),
            latest_resolver=_resolver({"claude": "1.0.5", "gemini": "0.2.0", "qwen": "0.0.9"}),
        )

        states = await board.refresh_all()

        assert states["claude"].status == VersionStatus.UP_TO_DATE
        assert states["gemini"].status == VersionStatus.OUTDATED
        assert states["qwen"].status == VersionStatus.UNKNOWN
        assert states["qwen"].installed_version == ""
        assert reporter.notifications == []

    @pytest.mark.asyncio
    async def test_resolver_exception_is_empty(self, reporter):
        """Test a raising resolver leaves the tool unknown."""
        board = VersionBoard(
            tools=[get_tool("gemini")],
            reporter=reporter,
            installed_resolver=AsyncMock(side_effect=RuntimeError("boom")),
            latest_resolver=_resolver({"gemini": "0.2.0"}),
        )

        state = await board.resolve_both(get_tool("gemini"))

        assert state.status == VersionStatus.UNKNOWN
        assert state.latest_version == "0.2.0"

    @pytest.mark.asyncio
    async def test_results_ignored_after_close(self, reporter):
        """Test late results are dropped once the board is closed."""
        board = VersionBoard(tools=[get_tool("claude")], reporter=reporter)

        async def late(tool):
            board.close()
            return "1.0.5"

        board._installed_resolver = late
        state = await board.resolve_installed(get_tool("claude"))

        assert board.closed
        assert state.installed_version == ""

    def test_states_read_only(self, reporter):
        """Test the states view cannot be mutated."""
        board = VersionBoard(reporter=reporter)
        with pytest.raises(TypeError):
            board.states["claude"] = None


class TestActions:
    """Tests for per-tool actions and their messages."""

    @pytest.mark.asyncio
    async def test_refresh_installed_found(self, reporter):
        """Test the installed version is reported."""
        board = VersionBoard(reporter=reporter, installed_resolver=_resolver({"qwen": "0.0.9"}))
        state = await board.refresh_installed(get_tool("qwen"))

        assert state.installed_version == "0.0.9"
        assert reporter.titles == ["Detecting installed version...", "Installed: 0.0.9"]

    @pytest.mark.asyncio
    async def test_refresh_installed_missing(self, reporter):
        """Test a missing command is reported as not detected."""
        board = VersionBoard(reporter=reporter, installed_resolver=_resolver({}))
        await board.refresh_installed(get_tool("gemini"))

        assert reporter.titles[-1] == "gemini not detected"
        assert reporter.notifications[-1].style == ToastStyle.SUCCESS

    @pytest.mark.asyncio
    @pytest.mark.parametrize("installed,latest,title,style", [
        ("1.0.5", "1.0.5", "You're on the latest version", ToastStyle.SUCCESS),
        ("1.0.4", "1.0.5", "Update available: 1.0.5", ToastStyle.FAILURE),
        ("", "1.0.5", "Update available: 1.0.5", ToastStyle.FAILURE),
        ("1.0.4", "", "Update info unavailable", ToastStyle.FAILURE),
    ])
    async def test_check_for_updates(self, reporter, installed, latest, title, style):
        """Test the outcome message for each comparison."""
        board = VersionBoard(
            reporter=reporter,
            installed_resolver=_resolver({"claude": installed}),
            latest_resolver=_resolver({"claude": latest}),
        )
        await board.resolve_installed(get_tool("claude"))
        await board.check_for_updates(get_tool("claude"))

        assert reporter.titles == ["Checking for updates...", title]
        assert reporter.notifications[-1].style == style

    @pytest.mark.asyncio
    async def test_update_re_resolves(self, reporter):
        """Test an update is followed by fresh resolution."""
        installed = {"gemini": "0.1.0"}
        updater = AsyncMock(return_value=UpdateResult(tool_id="gemini", success=True))
        board = VersionBoard(
            reporter=reporter,
            settings=Settings(package_manager="pnpm"),
            preferences=Preferences(shells=("bash",), update_timeout_seconds=120),
            installed_resolver=_resolver(installed),
            latest_resolver=_resolver({"gemini": "0.2.0"}),
            updater=updater,
        )
        await board.resolve_both(get_tool("gemini"))
        assert board.state_of(get_tool("gemini")).status == VersionStatus.OUTDATED

        installed["gemini"] = "0.2.0"
        result = await board.update(get_tool("gemini"))

        assert result.success
        updater.assert_awaited_once_with(
            get_tool("gemini"), reporter, "pnpm", shell_name="bash", timeout=120
        )
        assert board.state_of(get_tool("gemini")).status == VersionStatus.UP_TO_DATE

    @pytest.mark.asyncio
    async def test_update_all_refreshes(self, reporter):
        """Test bulk update refreshes the board afterwards."""
        installed = {"claude": "1.0.0", "gemini": "0.2.0", "qwen": "0.0.1"}
        latest = {"claude": "1.0.1", "gemini": "0.2.0", "qwen": "0.0.2"}

        async def updater(tool, reporter, package_manager, **kwargs):
            installed[tool.id] = latest[tool.id]
            return UpdateResult(tool_id=tool.id, success=True)

        board = VersionBoard(
            reporter=reporter,
            installed_resolver=_resolver(installed),
            latest_resolver=_resolver(latest),
            updater=updater,
        )
        await board.refresh_all()
        result = await board.update_all()

        assert result.tools_attempted == ("claude", "qwen")
        assert all(s.status == VersionStatus.UP_TO_DATE for s in board.states.values())

    @pytest.mark.asyncio
    async def test_update_all_nothing_to_do(self, reporter):
        """Test an all-current board skips the refresh."""
        board = VersionBoard(reporter=reporter, updater=AsyncMock())
        with patch.object(board, "refresh_all", AsyncMock()) as refresh:
            result = await board.update_all()

        assert result.nothing_to_do
        refresh.assert_not_awaited()

    def test_update_title(self, reporter):
        """Test the action title names the command."""
        board = VersionBoard(reporter=reporter, settings=Settings(package_manager="yarn"))
        assert board.update_title(get_tool("qwen")) == "Update Now (yarn global add @qwen-code/qwen-code)"
        assert board.update_title(get_tool("claude")) == "Update Now (claude update)"


class TestDefaultResolvers:
    """Tests for the default resolver wiring."""

    @pytest.mark.asyncio
    async def test_installed_uses_preferences(self, reporter):
        """Test installed lookups use the first shell, strictness and timeout."""
        prefs = Preferences(shells=("bash", "zsh"), strict_versions=True, timeout_seconds=9)
        board = VersionBoard(reporter=reporter, preferences=prefs)
        with patch("easy_vibe.detection.resolve_installed", AsyncMock(return_value="1.0.0")) as resolve:
            await board.resolve_installed(get_tool("claude"))

        resolve.assert_awaited_once_with("claude", shell_name="bash", strict=True, timeout=9)

    @pytest.mark.asyncio
    async def test_latest_uses_package(self, reporter):
        """Test latest resolution is keyed by package name."""
        board = VersionBoard(reporter=reporter)
        with patch("easy_vibe.collectors.resolve_latest", AsyncMock(return_value="0.1.9")) as latest:
            state = await board.resolve_latest(get_tool("gemini"))

        assert latest.call_args.args[0] == "@google/gemini-cli"
        assert state.latest_version == "0.1.9"

    @pytest.mark.asyncio
    async def test_dotted_prerelease_matches_registry(self, reporter):
        """Test dotted pre-release version output equals the registry JSON version."""
        runner = AsyncMock(return_value=ShellResult(argv=(), stdout="0.0.1-alpha.8 (qwen)\n", stderr=""))
        body = json.dumps({"name": "@qwen-code/qwen-code", "version": "0.0.1-alpha.8"}).encode()
        board = VersionBoard(
            reporter=reporter,
            latest_resolver=lambda tool: fetch_registry_latest(tool.package),
        )
        with patch("easy_vibe.shell.run_in_login_shell", runner), \
                patch("easy_vibe.collectors.http_get", return_value=body):
            state = await board.resolve_both(get_tool("qwen"))

        assert (state.installed_version, state.latest_version) == ("0.0.1-alpha.8", "0.0.1-alpha.8")
        assert state.status == VersionStatus.UP_TO_DATE
