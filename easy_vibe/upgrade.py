"""
Update orchestration for single tools and for every outdated tool at once.

Outcomes are reported through an injected Reporter and returned as
UpdateResult values; command failures never escape as exceptions.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

from . import shell
from .common import combine_output, last_line, pluralize
from .package_managers import DEFAULT_PACKAGE_MANAGER, get_package_manager
from .reporting import Reporter
from .shell import ShellCommandError
from .state import ToolStates, VersionStatus
from .tools import UPDATE_NATIVE, ToolDescriptor

logger = logging.getLogger(__name__)

DEFAULT_UPDATE_TIMEOUT_SECONDS = 600


@dataclass(frozen=True)
class UpdateResult:
    """
    Result of updating a single tool.

    Attributes:
        tool_id: Identifier of the tool
        success: Whether the update command succeeded
        message: Last output line on success, error text on failure
        command: Argument vector that was run
        duration_seconds: Wall time spent in the command
    """
    tool_id: str
    success: bool
    message: str = ""
    command: tuple[str, ...] = ()
    duration_seconds: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "tool_id": self.tool_id,
            "success": self.success,
            "message": self.message,
            "command": list(self.command),
            "duration_seconds": self.duration_seconds,
        }


@dataclass(frozen=True)
class BulkUpdateResult:
    """
    Result of updating every outdated tool.

    Attributes:
        tools_attempted: Tools an update was issued for
        updates: Successful updates
        failures: Failed updates
        duration_seconds: Total execution time
    """
    tools_attempted: tuple[str, ...]
    updates: tuple[UpdateResult, ...]
    failures: tuple[UpdateResult, ...]
    duration_seconds: float = 0.0

    @property
    def nothing_to_do(self) -> bool:
        return not self.tools_attempted

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "tools_attempted": list(self.tools_attempted),
            "updates": [u.to_dict() for u in self.updates],
            "failures": [f.to_dict() for f in self.failures],
            "duration_seconds": self.duration_seconds,
        }

    def summary(self) -> str:
        """Human-readable summary."""
        if self.nothing_to_do:
            return "All tools are up to date"
        return (
            f"Updated: {len(self.updates)}, Failed: {len(self.failures)} "
            f"({self.duration_seconds:.1f}s)"
        )


Updater = Callable[..., Awaitable[UpdateResult]]


def update_command_for(tool: ToolDescriptor, package_manager: str = DEFAULT_PACKAGE_MANAGER) -> tuple[str, ...]:
    """
    Get the argument vector that updates a tool.

    Args:
        tool: Tool to update
        package_manager: Manager used for global installs

    Returns:
        Native update command, or the manager's global-install command
    """
    if tool.update_type == UPDATE_NATIVE and tool.update_command:
        return tuple(tool.update_command)
    return get_package_manager(package_manager).get_install_command(tool.package)


def _labels(tool: ToolDescriptor, command: Sequence[str]) -> tuple[str, str, str]:
    """Start, success and failure titles for a tool's update mechanism."""
    if tool.update_type == UPDATE_NATIVE:
        return f"Running {' '.join(command)}...", "Update completed", "Update failed"
    return (
        f"Installing {tool.package} globally...",
        "Global install completed",
        "Global install failed",
    )


async def update_tool(
    tool: ToolDescriptor,
    reporter: Reporter,
    package_manager: str = DEFAULT_PACKAGE_MANAGER,
    shell_name: str = shell.DEFAULT_SHELL,
    timeout: float | None = DEFAULT_UPDATE_TIMEOUT_SECONDS,
) -> UpdateResult:
    """
    Update one tool with its own update mechanism. Does not retry.

    Args:
        tool: Tool to update
        reporter: Receives start/success/failure notifications
        package_manager: Manager used for global installs
        shell_name: Login shell for the command
        timeout: Seconds before the update command is killed

    Returns:
        UpdateResult with the outcome
    """
    try:
        command = update_command_for(tool, package_manager)
    except ValueError as e:
        reporter.failure("Update failed", str(e))
        return UpdateResult(tool_id=tool.id, success=False, message=str(e))

    start_label, ok_label, fail_label = _labels(tool, command)
    reporter.animated(start_label)
    logger.debug(f"{tool.id}: running {' '.join(command)}")

    start_time = time.monotonic()
    try:
        result = await shell.run_in_login_shell(command, shell_name, timeout=timeout)
    except ShellCommandError as e:
        duration = time.monotonic() - start_time
        logger.debug(f"{tool.id}: update failed after {duration:.1f}s: {e}")
        reporter.failure(fail_label, str(e) or "Unknown error")
        return UpdateResult(
            tool_id=tool.id,
            success=False,
            message=str(e),
            command=command,
            duration_seconds=duration,
        )

    duration = time.monotonic() - start_time
    summary = last_line(combine_output(result.stdout, result.stderr))
    reporter.success(ok_label, summary or None)
    logger.debug(f"{tool.id}: updated in {duration:.1f}s")
    return UpdateResult(
        tool_id=tool.id,
        success=True,
        message=summary,
        command=command,
        duration_seconds=duration,
    )


def get_outdated_tools(tools: Sequence[ToolDescriptor], states: ToolStates) -> list[ToolDescriptor]:
    """Tools whose current state is outdated, in table order."""
    return [
        tool for tool in tools
        if (state := states.get(tool.id)) is not None and state.status == VersionStatus.OUTDATED
    ]


async def update_all(
    tools: Sequence[ToolDescriptor],
    states: ToolStates,
    reporter: Reporter,
    package_manager: str = DEFAULT_PACKAGE_MANAGER,
    updater: Updater | None = None,
    **update_kwargs,
) -> BulkUpdateResult:
    """
    Update every outdated tool concurrently.

    Each update runs as its own task; a failure (returned or raised) is
    counted and never cancels the others.

    Args:
        tools: Candidate tools
        states: Current states keyed by tool id
        reporter: Receives progress and summary notifications
        package_manager: Manager used for global installs
        updater: Single-tool update coroutine (update_tool if None)
        **update_kwargs: Extra keyword arguments for the updater

    Returns:
        BulkUpdateResult tallying successes and failures
    """
    updater = updater or update_tool
    start_time = time.monotonic()

    outdated = get_outdated_tools(tools, states)
    if not outdated:
        reporter.success("All tools are up to date")
        return BulkUpdateResult(tools_attempted=(), updates=(), failures=())

    reporter.animated(f"Updating {pluralize(len(outdated), 'tool')}...")

    outcomes = await asyncio.gather(
        *(updater(tool, reporter, package_manager, **update_kwargs) for tool in outdated),
        return_exceptions=True,
    )

    updates: list[UpdateResult] = []
    failures: list[UpdateResult] = []
    for tool, outcome in zip(outdated, outcomes):
        if isinstance(outcome, BaseException):
            logger.debug(f"{tool.id}: update raised {type(outcome).__name__}: {outcome}")
            failures.append(UpdateResult(tool_id=tool.id, success=False, message=str(outcome)))
        elif outcome.success:
            updates.append(outcome)
        else:
            failures.append(outcome)

    if updates:
        reporter.success(f"Updated {pluralize(len(updates), 'tool')}")
    if failures:
        reporter.failure(f"{pluralize(len(failures), 'update')} failed")

    return BulkUpdateResult(
        tools_attempted=tuple(t.id for t in outdated),
        updates=tuple(updates),
        failures=tuple(failures),
        duration_seconds=time.monotonic() - start_time,
    )
