"""
VersionBoard: the coordinator that owns per-tool state.

The board triggers resolver calls, folds their results into its state
through the pure transitions in ``state``, and drives the update
orchestrator. After ``close()`` late resolver results are dropped.
"""

from __future__ import annotations

import asyncio
import logging
from types import MappingProxyType
from typing import Awaitable, Callable, Mapping, Sequence

from . import collectors, detection, upgrade
from .config import DEFAULT_SETTINGS, Preferences, Settings
from .reporting import LoggingReporter, Reporter
from .state import (
    ToolState,
    VersionStatus,
    apply_installed,
    apply_latest,
    initial_states,
)
from .tools import ToolDescriptor, all_tools

logger = logging.getLogger(__name__)

Resolver = Callable[[ToolDescriptor], Awaitable[str]]


class VersionBoard:
    """
    Holds the state of every tracked tool and the actions that change it.

    Args:
        tools: Tools in display order (all tools if None)
        reporter: Notification sink (logging if None)
        preferences: Timeouts, shells and strictness (defaults if None)
        settings: User settings; the package manager drives global installs
        installed_resolver: Override for installed-version resolution
        latest_resolver: Override for latest-version resolution
        updater: Override for single-tool updates
    """

    def __init__(
        self,
        tools: Sequence[ToolDescriptor] | None = None,
        reporter: Reporter | None = None,
        preferences: Preferences | None = None,
        settings: Settings | None = None,
        installed_resolver: Resolver | None = None,
        latest_resolver: Resolver | None = None,
        updater: upgrade.Updater | None = None,
    ):
        self.tools = tuple(tools) if tools is not None else tuple(all_tools())
        self.reporter = reporter or LoggingReporter()
        self.preferences = preferences or Preferences()
        self.settings = settings or DEFAULT_SETTINGS
        self._installed_resolver = installed_resolver or self._default_installed
        self._latest_resolver = latest_resolver or self._default_latest
        self._updater = updater or upgrade.update_tool
        self._strategies = collectors.default_latest_strategies(self.preferences)
        self._states: dict[str, ToolState] = initial_states(self.tools)
        self.closed = False

    @property
    def states(self) -> Mapping[str, ToolState]:
        """Read-only view of the current states."""
        return MappingProxyType(self._states)

    def state_of(self, tool: ToolDescriptor) -> ToolState:
        return self._states.get(tool.id, ToolState())

    def close(self) -> None:
        """Stop accepting resolver results. Running processes are not aborted."""
        self.closed = True

    # Resolution

    async def _default_installed(self, tool: ToolDescriptor) -> str:
        return await detection.resolve_installed(
            tool.command,
            shell_name=self.preferences.shells[0],
            strict=self.preferences.strict_versions,
            timeout=self.preferences.timeout_seconds,
        )

    async def _default_latest(self, tool: ToolDescriptor) -> str:
        return await collectors.resolve_latest(tool.package, self._strategies)

    async def _resolve(self, resolver: Resolver, tool: ToolDescriptor) -> str:
        try:
            return await resolver(tool) or ""
        except Exception as e:
            logger.debug(f"{tool.id}: resolver {getattr(resolver, '__name__', resolver)} raised {e!r}")
            return ""

    def _store_installed(self, tool: ToolDescriptor, installed: str) -> None:
        if self.closed:
            logger.debug(f"{tool.id}: board closed, dropping installed version {installed!r}")
            return
        self._states = apply_installed(self._states, tool.id, installed)

    def _store_latest(self, tool: ToolDescriptor, latest: str) -> None:
        if self.closed:
            logger.debug(f"{tool.id}: board closed, dropping latest version {latest!r}")
            return
        self._states = apply_latest(self._states, tool.id, latest)

    async def resolve_installed(self, tool: ToolDescriptor) -> ToolState:
        self._store_installed(tool, await self._resolve(self._installed_resolver, tool))
        return self.state_of(tool)

    async def resolve_latest(self, tool: ToolDescriptor) -> ToolState:
        self._store_latest(tool, await self._resolve(self._latest_resolver, tool))
        return self.state_of(tool)

    async def resolve_both(self, tool: ToolDescriptor) -> ToolState:
        await asyncio.gather(self.resolve_installed(tool), self.resolve_latest(tool))
        return self.state_of(tool)

    async def refresh_all(self) -> Mapping[str, ToolState]:
        """Resolve installed and latest versions of every tool concurrently."""
        await asyncio.gather(*(self.resolve_both(tool) for tool in self.tools))
        return self.states

    # Actions

    async def refresh_installed(self, tool: ToolDescriptor) -> ToolState:
        """Re-detect the installed version and report the outcome."""
        self.reporter.animated("Detecting installed version...")
        state = await self.resolve_installed(tool)
        # A finished lookup is a success even when nothing was found
        if state.installed_version:
            self.reporter.success(f"Installed: {state.installed_version}")
        else:
            self.reporter.success(f"{tool.command} not detected")
        return state

    async def check_for_updates(self, tool: ToolDescriptor) -> ToolState:
        """Fetch the latest version and report how it compares."""
        self.reporter.animated("Checking for updates...")
        state = await self.resolve_latest(tool)
        # Anything short of up-to-date is reported as a failure
        if state.status == VersionStatus.UP_TO_DATE:
            self.reporter.success("You're on the latest version")
        elif state.latest_version:
            self.reporter.failure(f"Update available: {state.latest_version}")
        else:
            self.reporter.failure("Update info unavailable")
        return state

    def _update_kwargs(self) -> dict:
        return {
            "shell_name": self.preferences.shells[0],
            "timeout": self.preferences.update_timeout_seconds,
        }

    async def update(self, tool: ToolDescriptor) -> upgrade.UpdateResult:
        """Update one tool, then re-resolve both of its versions."""
        result = await self._updater(
            tool, self.reporter, self.settings.package_manager, **self._update_kwargs()
        )
        await self.resolve_both(tool)
        return result

    async def update_all(self) -> upgrade.BulkUpdateResult:
        """Update every outdated tool, then refresh the whole board."""
        result = await upgrade.update_all(
            self.tools,
            self._states,
            self.reporter,
            self.settings.package_manager,
            updater=self._updater,
            **self._update_kwargs(),
        )
        if not result.nothing_to_do:
            await self.refresh_all()
        return result

    def update_title(self, tool: ToolDescriptor) -> str:
        """Action title naming the command an update would run."""
        command = upgrade.update_command_for(tool, self.settings.package_manager)
        return f"Update Now ({' '.join(command)})"
