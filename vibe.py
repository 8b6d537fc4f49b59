#!/usr/bin/env python3
"""
easy-vibe - Track and update command-line AI coding assistants.

Resolves installed and latest versions of Claude Code, Gemini CLI and
Qwen Code CLI through login shells and the npm registry, and runs their
updates.

Usage:
    vibe.py                       # List tools with version status
    vibe.py list --json           # Same, as JSON on stdout
    vibe.py list gemini qwen      # Only the named tools
    vibe.py check gemini          # Check one tool for updates
    vibe.py refresh claude        # Re-detect the installed version
    vibe.py version qwen          # Print the installed version
    vibe.py update gemini         # Update one tool
    vibe.py update-all            # Update every outdated tool
    vibe.py settings              # Show settings
    vibe.py settings package-manager pnpm
"""

import argparse
import asyncio
import json
import os
import sys

# Add current directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from easy_vibe import __version__
from easy_vibe.config import (
    AGENT_IDS,
    Settings,
    SettingsError,
    load_config,
    load_settings,
    save_settings,
    visible_agents,
)
from easy_vibe.coordinator import VersionBoard
from easy_vibe.logging_config import get_logger, setup_logging
from easy_vibe.package_managers import PACKAGE_MANAGERS
from easy_vibe.render import NOT_DETECTED, build_rows, print_summary, render_list
from easy_vibe.reporting import ConsoleReporter, RecordingReporter, Reporter
from easy_vibe.state import VersionStatus
from easy_vibe.tools import TOOLS, all_tools, filter_tools, get_tool, tool_homepage_url


def make_reporter(args: argparse.Namespace) -> Reporter:
    """Console notifications, or recorded ones when output must stay clean."""
    if getattr(args, "json", False) or args.quiet:
        return RecordingReporter()
    return ConsoleReporter()


def make_board(args: argparse.Namespace, reporter: Reporter, tools=None) -> VersionBoard:
    """Build a board from config files and persisted settings."""
    config = load_config(args.config, verbose=args.verbose)
    return VersionBoard(
        tools=tools or all_tools(),
        reporter=reporter,
        preferences=config.preferences,
        settings=load_settings(),
    )


def _run(board: VersionBoard, coro):
    """Drive one board action to completion, then close the board."""
    try:
        return asyncio.run(coro)
    finally:
        board.close()


def cmd_list(args: argparse.Namespace) -> int:
    """Resolve the selected tools (all by default) and render the list."""
    unknown = sorted(set(args.tools) - {t.id for t in TOOLS})
    if unknown:
        get_logger().error(f"Unknown tool(s): {', '.join(unknown)}")
        return 2
    tools_list = filter_tools(args.tools) if args.tools else all_tools()
    board = make_board(args, make_reporter(args), tools_list)
    states = _run(board, board.refresh_all())

    if args.json:
        print(json.dumps(build_rows(board.tools, states), indent=2, ensure_ascii=False))
        return 0

    render_list(board.tools, states)
    print_summary(states)
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Check one tool for updates."""
    tool = get_tool(args.tool)
    board = make_board(args, make_reporter(args))

    async def check():
        await board.resolve_installed(tool)
        return await board.check_for_updates(tool)

    state = _run(board, check())
    if state.status == VersionStatus.OUTDATED:
        print(f"{tool.title}: {state.installed_version} -> {state.latest_version}")
        print(f"  {board.update_title(tool)}")
        print(f"  {tool_homepage_url(tool)}")
    return 0 if state.latest_version else 1


def cmd_refresh(args: argparse.Namespace) -> int:
    """Re-detect the installed version of one tool."""
    tool = get_tool(args.tool)
    board = make_board(args, make_reporter(args))
    state = _run(board, board.refresh_installed(tool))
    return 0 if state.installed_version else 1


def cmd_version(args: argparse.Namespace) -> int:
    """Print the installed version of one tool."""
    tool = get_tool(args.tool)
    board = make_board(args, make_reporter(args))
    state = _run(board, board.resolve_installed(tool))
    if not state.installed_version:
        print(NOT_DETECTED, file=sys.stderr)
        return 1
    print(state.installed_version)
    return 0


def cmd_update(args: argparse.Namespace) -> int:
    """Update one tool when it is outdated (or always with --force)."""
    tool = get_tool(args.tool)
    reporter = make_reporter(args)
    board = make_board(args, reporter)

    async def update():
        state = await board.resolve_both(tool)
        if state.status == VersionStatus.UP_TO_DATE and not args.force:
            reporter.success("You're on the latest version")
            return None
        if state.status == VersionStatus.UNKNOWN and not args.force:
            reporter.failure("Update info unavailable", "use --force to update anyway")
            return None
        return await board.update(tool)

    result = _run(board, update())
    if result is None:
        return 0 if board.state_of(tool).status == VersionStatus.UP_TO_DATE else 1
    return 0 if result.success else 1


def cmd_update_all(args: argparse.Namespace) -> int:
    """Update every outdated tool, then refresh the list."""
    board = make_board(args, make_reporter(args))

    async def update_all():
        await board.refresh_all()
        return await board.update_all()

    result = _run(board, update_all())
    get_logger().info(result.summary())
    if not result.nothing_to_do and not args.quiet:
        render_list(board.tools, board.states)
    return 1 if result.failures else 0


def show_settings(settings: Settings) -> None:
    print("Default Agent")
    for agent in visible_agents(settings):
        marker = "*" if agent.id == settings.default_agent else " "
        print(f"  {marker} {agent.id:<8} {agent.title} - {agent.description}")
    print("")
    print("Package Manager")
    for pm in PACKAGE_MANAGERS:
        marker = "*" if pm.name == settings.package_manager else " "
        available = "" if pm.is_available() else " (not found)"
        print(f"  {marker} {pm.name:<8} {pm.description}{available}")
    print("")
    print(f"YOLO agent: {'enabled' if settings.yolo_enabled else 'disabled'}")


def cmd_settings(args: argparse.Namespace) -> int:
    """Show or change persisted settings."""
    settings = load_settings()
    action = args.settings_action or "show"

    if action == "show":
        show_settings(settings)
        return 0

    reporter = make_reporter(args)
    try:
        if action == "agent":
            if args.value not in {a.id for a in visible_agents(settings)}:
                reporter.failure("Failed to save settings", f"agent '{args.value}' is not enabled")
                return 1
            updated = Settings(args.value, settings.package_manager, settings.yolo_enabled)
        elif action == "package-manager":
            updated = Settings(settings.default_agent, args.value, settings.yolo_enabled)
        else:
            updated = Settings(settings.default_agent, settings.package_manager, args.value == "on")
        save_settings(updated)
    except SettingsError as e:
        reporter.failure("Failed to save settings", str(e))
        return 1

    reporter.success("Settings saved")
    return 0


COMMANDS = {
    "list": cmd_list,
    "check": cmd_check,
    "refresh": cmd_refresh,
    "version": cmd_version,
    "update": cmd_update,
    "update-all": cmd_update_all,
    "settings": cmd_settings,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="easy-vibe",
        description="easy-vibe - Track and update command-line AI coding assistants",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only warnings and errors on the console",
    )
    parser.add_argument(
        "--log-file",
        help="Write a DEBUG log to this file",
    )
    parser.add_argument(
        "--config",
        help="Configuration file (takes precedence over the default locations)",
    )

    tool_ids = [t.id for t in TOOLS]
    sub = parser.add_subparsers(dest="command")

    list_parser = sub.add_parser("list", help="List tools with version status (default)")
    list_parser.add_argument("--json", action="store_true", help="JSON output on stdout")
    list_parser.add_argument(
        "tools",
        nargs="*",
        type=str.lower,
        help="Specific tools to list (" + ", ".join(tool_ids) + ")",
    )

    for name, help_text in (
        ("check", "Check a tool for updates"),
        ("refresh", "Re-detect a tool's installed version"),
        ("version", "Print a tool's installed version"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("tool", choices=tool_ids)

    update_parser = sub.add_parser("update", help="Update a tool")
    update_parser.add_argument("tool", choices=tool_ids)
    update_parser.add_argument(
        "--force",
        action="store_true",
        help="Update even when the tool is not flagged outdated",
    )

    sub.add_parser("update-all", help="Update every outdated tool")

    settings_parser = sub.add_parser("settings", help="Show or change settings")
    settings_sub = settings_parser.add_subparsers(dest="settings_action")
    settings_sub.add_parser("show", help="Show settings")
    settings_sub.add_parser("agent", help="Set the default agent").add_argument(
        "value", choices=list(AGENT_IDS)
    )
    settings_sub.add_parser("package-manager", help="Set the package manager").add_argument(
        "value", choices=[pm.name for pm in PACKAGE_MANAGERS]
    )
    settings_sub.add_parser("yolo", help="Enable or disable the YOLO agent").add_argument(
        "value", choices=["on", "off"]
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for easy-vibe."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        args.command = "list"
        args.json = False
        args.tools = []

    setup_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)

    try:
        return COMMANDS[args.command](args)
    except ValueError as e:
        # Invalid configuration file
        get_logger().error(str(e))
        return 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
