"""
easy-vibe - Version tracking and updates for command-line AI coding assistants.

Core Modules:
- Resolution: installed-version lookups, latest-version registry strategies
- State: per-tool version state with pure transitions, the VersionBoard coordinator
- Updates: native and global-install updates, bulk update of outdated tools
- Foundation: login-shell execution, config, settings storage, package managers
"""

__version__ = "1.0.0"
__author__ = "easy-vibe Contributors"

VERSION = __version__

# Resolution
from .shell import ShellCommandError, ShellResult, run_in_login_shell, build_login_argv
from .detection import extract_semver, extract_installed_version, resolve_installed
from .collectors import (
    CollectionError,
    NetworkError,
    ParseError,
    parse_registry_output,
    default_latest_strategies,
    resolve_latest,
)

# State
from .tools import ToolDescriptor, TOOLS, all_tools, filter_tools, get_tool
from .state import VersionStatus, ToolState, compare_versions, initial_states
from .coordinator import VersionBoard

# Updates
from .upgrade import UpdateResult, BulkUpdateResult, update_command_for, update_tool, update_all
from .reporting import Reporter, ConsoleReporter, LoggingReporter, RecordingReporter

# Foundation
from .config import (
    Config,
    Preferences,
    Settings,
    SettingsError,
    load_config,
    load_settings,
    save_settings,
    visible_agents,
)
from .local_storage import LocalStorage, LocalStorageError
from .package_managers import PackageManager, get_package_manager, get_available_package_managers
from .logging_config import setup_logging, get_logger

__all__ = [
    # Version
    "__version__",
    "VERSION",
    # Resolution
    "ShellCommandError",
    "ShellResult",
    "run_in_login_shell",
    "build_login_argv",
    "extract_semver",
    "extract_installed_version",
    "resolve_installed",
    "CollectionError",
    "NetworkError",
    "ParseError",
    "parse_registry_output",
    "default_latest_strategies",
    "resolve_latest",
    # State
    "ToolDescriptor",
    "TOOLS",
    "all_tools",
    "filter_tools",
    "get_tool",
    "VersionStatus",
    "ToolState",
    "compare_versions",
    "initial_states",
    "VersionBoard",
    # Updates
    "UpdateResult",
    "BulkUpdateResult",
    "update_command_for",
    "update_tool",
    "update_all",
    "Reporter",
    "ConsoleReporter",
    "LoggingReporter",
    "RecordingReporter",
    # Foundation
    "Config",
    "Preferences",
    "Settings",
    "SettingsError",
    "load_config",
    "load_settings",
    "save_settings",
    "visible_agents",
    "LocalStorage",
    "LocalStorageError",
    "PackageManager",
    "get_package_manager",
    "get_available_package_managers",
    "setup_logging",
    "get_logger",
]
