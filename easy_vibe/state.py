"""
Per-tool version state and its pure transitions.

Status is never stored on its own: every transition recomputes it from the
(installed, latest) pair, so a ToolState can't drift out of sync.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Mapping

from .tools import ToolDescriptor


class VersionStatus(str, Enum):
    """Three-valued comparison of installed and latest versions."""

    UP_TO_DATE = "up-to-date"
    OUTDATED = "outdated"
    UNKNOWN = "unknown"


def compare_versions(installed: str, latest: str) -> VersionStatus:
    """
    Derive the status of a tool from its two version strings.

    Args:
        installed: Installed version ("" when not detected)
        latest: Latest published version ("" when unavailable)

    Returns:
        UNKNOWN if either side is empty, UP_TO_DATE if both trim equal,
        OUTDATED otherwise
    """
    installed = (installed or "").strip()
    latest = (latest or "").strip()
    if not installed or not latest:
        return VersionStatus.UNKNOWN
    return VersionStatus.UP_TO_DATE if installed == latest else VersionStatus.OUTDATED


@dataclass(frozen=True)
class ToolState:
    """Resolved versions for one tool."""

    installed_version: str = ""
    latest_version: str = ""
    status: VersionStatus = VersionStatus.UNKNOWN

    @classmethod
    def of(cls, installed: str, latest: str) -> "ToolState":
        """Build a state whose status is derived from the two versions."""
        return cls(
            installed_version=installed,
            latest_version=latest,
            status=compare_versions(installed, latest),
        )

    def with_installed(self, installed: str) -> "ToolState":
        """Return a copy with a new installed version and recomputed status."""
        return replace(
            self,
            installed_version=installed,
            status=compare_versions(installed, self.latest_version),
        )

    def with_latest(self, latest: str) -> "ToolState":
        """Return a copy with a new latest version and recomputed status."""
        return replace(
            self,
            latest_version=latest,
            status=compare_versions(self.installed_version, latest),
        )

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON output."""
        return {
            "installed_version": self.installed_version,
            "latest_version": self.latest_version,
            "status": self.status.value,
        }


ToolStates = Mapping[str, ToolState]


def initial_states(tools: Iterable[ToolDescriptor]) -> dict[str, ToolState]:
    """Every tool starts unknown with nothing resolved."""
    return {tool.id: ToolState() for tool in tools}


def apply_installed(states: ToolStates, tool_id: str, installed: str) -> dict[str, ToolState]:
    """
    Record a freshly resolved installed version for one tool.

    Args:
        states: Current states keyed by tool id
        tool_id: Tool whose installed version was resolved
        installed: Resolved version ("" on failure)

    Returns:
        New mapping; other tools' states are carried over untouched
    """
    current = states.get(tool_id, ToolState())
    return {**states, tool_id: current.with_installed(installed)}


def apply_latest(states: ToolStates, tool_id: str, latest: str) -> dict[str, ToolState]:
    """Record a freshly resolved latest version for one tool."""
    current = states.get(tool_id, ToolState())
    return {**states, tool_id: current.with_latest(latest)}


def apply_resolved(states: ToolStates, tool_id: str, installed: str, latest: str) -> dict[str, ToolState]:
    """Record both versions for one tool at once."""
    return {**states, tool_id: ToolState.of(installed, latest)}


def outdated_ids(states: ToolStates) -> list[str]:
    """Identifiers of tools currently flagged outdated, in mapping order."""
    return [tool_id for tool_id, state in states.items() if state.status == VersionStatus.OUTDATED]


def count_by_status(states: ToolStates) -> dict[VersionStatus, int]:
    """Count tools per status (every status present, possibly zero)."""
    counts = {status: 0 for status in VersionStatus}
    for state in states.values():
        counts[state.status] += 1
    return counts
