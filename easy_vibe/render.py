"""
Output rendering and formatting for the tool list.
"""

from __future__ import annotations

import os
import sys
from typing import Any, Sequence, TextIO

from wcwidth import wcswidth

from .state import ToolState, ToolStates, VersionStatus, count_by_status
from .tools import ToolDescriptor, tool_homepage_url


USE_EMOJI = os.environ.get("EASY_VIBE_EMOJI", "1") == "1"
USE_COLOR = os.environ.get("EASY_VIBE_COLOR", "1") == "1"

# ANSI color codes
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
RED = "\033[31m"
DIM = "\033[2m"
RESET = "\033[0m"

NOT_DETECTED = "Not detected"


def colorize(text: str, color: str) -> str:
    """Apply color to text (plain text when colours are disabled)."""
    if not USE_COLOR or not text:
        return text
    return f"{color}{text}{RESET}"


def status_tag(status: VersionStatus, latest_version: str) -> tuple[str, str]:
    """Get the status tag text and colour for a row.

    Returns:
        ("Latest", green), ("Update X", yellow) or ("Unknown", dim)
    """
    if status == VersionStatus.UP_TO_DATE:
        return "Latest", GREEN
    if status == VersionStatus.OUTDATED:
        return (f"Update {latest_version}" if latest_version else "Update Available"), YELLOW
    return "Unknown", DIM


def status_icon(status: VersionStatus) -> str:
    """Get status icon for a row."""
    if not USE_EMOJI:
        return {VersionStatus.UP_TO_DATE: "✓", VersionStatus.OUTDATED: "↑"}.get(status, "?")
    if status == VersionStatus.UP_TO_DATE:
        return "✅"
    if status == VersionStatus.OUTDATED:
        return "⬆"  # Single-width arrow without variation selector
    return "❓"


def installed_display(state: ToolState) -> str:
    """Installed version as shown in the list."""
    return state.installed_version or NOT_DETECTED


def _pad(text: str, width: int) -> str:
    """Left-align text to a display width (emoji count double)."""
    shown = wcswidth(text)
    if shown < 0:
        shown = len(text)
    return text + " " * max(0, width - shown)


def build_rows(tools: Sequence[ToolDescriptor], states: ToolStates) -> list[dict[str, Any]]:
    """Flatten tools and their states into row dictionaries."""
    rows = []
    for tool in tools:
        state = states.get(tool.id, ToolState())
        tag, _ = status_tag(state.status, state.latest_version)
        rows.append({
            "id": tool.id,
            "title": tool.title,
            "command": tool.command,
            "package": tool.package,
            "tool_url": tool_homepage_url(tool),
            "installed": installed_display(state),
            "installed_version": state.installed_version,
            "latest_version": state.latest_version,
            "status": state.status.value,
            "tag": tag,
        })
    return rows


def render_list(
    tools: Sequence[ToolDescriptor],
    states: ToolStates,
    stream: TextIO | None = None,
) -> None:
    """Render the tool list with an "Update All" header when anything is outdated.

    Args:
        tools: Tools in display order
        states: Current states keyed by tool id
        stream: Output stream (stdout if None)
    """
    out = stream or sys.stdout
    counts = count_by_status(states)
    outdated = counts[VersionStatus.OUTDATED]

    if outdated:
        print("Updates Available", file=out)
        noun = "tool" if outdated == 1 else "tools"
        print(f"  {status_icon(VersionStatus.OUTDATED)} Update All ({outdated} {noun})  "
              f"- run: easy-vibe update-all", file=out)
        print("", file=out)

    print("All Tools" if outdated else "AI CLI Tools", file=out)

    rows = build_rows(tools, states)
    title_width = max((wcswidth(r["title"]) for r in rows), default=0)
    installed_width = max((wcswidth(r["installed"]) for r in rows), default=0)

    for row in rows:
        status = VersionStatus(row["status"])
        tag, color = status_tag(status, row["latest_version"])
        installed_color = BLUE if not row["installed_version"] else (
            GREEN if status == VersionStatus.UP_TO_DATE else YELLOW
        )
        line = "  ".join((
            status_icon(status),
            _pad(row["title"], title_width),
            # Pad before colouring so escape codes don't skew alignment
            colorize(_pad(row["installed"], installed_width), installed_color),
            colorize(tag, color),
        ))
        print(f"  {line}", file=out)


def print_summary(states: ToolStates, stream: TextIO | None = None) -> None:
    """Print a one-line tally of statuses."""
    counts = count_by_status(states)
    parts = [
        f"{len(states)} tools",
        f"{counts[VersionStatus.UP_TO_DATE]} up to date",
        f"{counts[VersionStatus.OUTDATED]} outdated",
        f"{counts[VersionStatus.UNKNOWN]} unknown",
    ]
    print(f"\nSummary: {', '.join(parts)}", file=stream or sys.stderr)
