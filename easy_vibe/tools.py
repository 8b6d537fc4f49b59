"""
Tool definitions for the tracked AI coding assistants.

The table is fixed at import time; descriptors are never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass

UPDATE_NATIVE = "native"
UPDATE_GLOBAL_INSTALL = "global-install"
UPDATE_TYPES = (UPDATE_NATIVE, UPDATE_GLOBAL_INSTALL)


@dataclass(frozen=True)
class ToolDescriptor:
    """
    Static description of one tracked CLI assistant.

    Attributes:
        id: Stable identifier ("claude", "gemini", "qwen")
        title: Display title for list rows
        package: npm package that publishes the tool
        command: Executable run for the installed version
        update_type: "native" (tool updates itself) or "global-install"
        update_command: Argument vector for native updates
        description: One-line description of the assistant
    """
    id: str
    title: str
    package: str
    command: str
    update_type: str = UPDATE_GLOBAL_INSTALL
    update_command: tuple[str, ...] | None = None
    description: str = ""

    def __post_init__(self):
        if self.update_type not in UPDATE_TYPES:
            raise ValueError(
                f"Invalid update_type for {self.id}: {self.update_type}. "
                f"Must be one of: {', '.join(UPDATE_TYPES)}"
            )
        if self.update_type == UPDATE_NATIVE and not self.update_command:
            raise ValueError(f"Tool {self.id} uses native updates but has no update_command")


TOOLS: tuple[ToolDescriptor, ...] = (
    ToolDescriptor(
        id="claude",
        title="Claude Code Version",
        package="@anthropic-ai/claude-code",
        command="claude",
        update_type=UPDATE_NATIVE,
        update_command=("claude", "update"),
        description="Anthropic's AI coding assistant",
    ),
    ToolDescriptor(
        id="gemini",
        title="Gemini CLI Version",
        package="@google/gemini-cli",
        command="gemini",
        description="Google's AI coding assistant",
    ),
    ToolDescriptor(
        id="qwen",
        title="Qwen Code CLI Version",
        package="@qwen-code/qwen-code",
        command="qwen",
        description="Alibaba's AI coding assistant",
    ),
)

TOOL_MAP: dict[str, ToolDescriptor] = {t.id: t for t in TOOLS}


def get_tool(tool_id: str) -> ToolDescriptor | None:
    """Get tool descriptor by identifier (case-insensitive)."""
    return TOOL_MAP.get(tool_id.lower())


def all_tools() -> list[ToolDescriptor]:
    """Get all tool descriptors in display order."""
    return list(TOOLS)


def filter_tools(ids: list[str]) -> list[ToolDescriptor]:
    """
    Filter tools by identifier list.

    Args:
        ids: Tool identifiers (case-insensitive)

    Returns:
        Matching tools in table order
    """
    wanted = {i.lower() for i in ids}
    return [t for t in TOOLS if t.id in wanted]


def tool_homepage_url(tool: ToolDescriptor) -> str:
    """Get the npm package page for a tool."""
    return f"https://www.npmjs.com/package/{tool.package}"
