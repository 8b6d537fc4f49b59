"""
Configuration file parsing and persisted user settings.

Two layers live here:

- ``Config``/``Preferences``: tuning knobs read from YAML files with JSON
  fallback, merged from project → user → system → defaults.
- ``Settings``: the user's choices (default agent, package manager, YOLO
  toggle), persisted as one JSON blob in local storage and merged over
  defaults on load so newly added fields pick up their default values.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any

from .common import vlog
from .local_storage import LocalStorage, LocalStorageError

logger = logging.getLogger(__name__)


# Configuration file locations (in priority order)
CONFIG_LOCATIONS = [
    ".easy-vibe.yml",                                       # Project root (highest priority)
    ".easy-vibe.yaml",
    os.path.expanduser("~/.config/easy-vibe/config.yml"),  # User global
    os.path.expanduser("~/.config/easy-vibe/config.yaml"),
    "/etc/easy-vibe/config.yml",                            # System global
    "/etc/easy-vibe/config.yaml",
]

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
DEFAULT_SHELLS = ("zsh", "bash")
SUPPORTED_SHELLS = {"zsh", "bash"}


@dataclass(frozen=True)
class Preferences:
    """
    Tuning knobs for version lookups and updates.

    Attributes:
        timeout_seconds: Timeout for each version command / registry query
        update_timeout_seconds: Timeout for an update command
        http_timeout_seconds: Timeout for registry HTTP requests
        shells: Login shells tried for registry queries, in order
        strict_versions: Reject raw version output that is not a version
        registry_url: Base URL of the npm registry
    """
    timeout_seconds: int = 15
    update_timeout_seconds: int = 600
    http_timeout_seconds: int = 5
    shells: tuple[str, ...] = DEFAULT_SHELLS
    strict_versions: bool = False
    registry_url: str = DEFAULT_REGISTRY_URL

    def __post_init__(self):
        """Validate preferences after initialization."""
        if self.timeout_seconds < 1 or self.timeout_seconds > 120:
            raise ValueError(
                f"Invalid timeout_seconds: {self.timeout_seconds}. "
                "Must be between 1 and 120"
            )

        if self.update_timeout_seconds < 10 or self.update_timeout_seconds > 3600:
            raise ValueError(
                f"Invalid update_timeout_seconds: {self.update_timeout_seconds}. "
                "Must be between 10 and 3600"
            )

        if self.http_timeout_seconds < 1 or self.http_timeout_seconds > 60:
            raise ValueError(
                f"Invalid http_timeout_seconds: {self.http_timeout_seconds}. "
                "Must be between 1 and 60"
            )

        if not self.shells:
            raise ValueError("shells must name at least one shell")
        unknown = [s for s in self.shells if s not in SUPPORTED_SHELLS]
        if unknown:
            raise ValueError(
                f"Invalid shells: {', '.join(unknown)}. "
                f"Must be any of: {', '.join(sorted(SUPPORTED_SHELLS))}"
            )

        if not self.registry_url.startswith(("https://", "http://")):
            raise ValueError(f"Invalid registry_url: {self.registry_url}")

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Preferences:
        """Create Preferences from dictionary."""
        return Preferences(
            timeout_seconds=data.get("timeout_seconds", 15),
            update_timeout_seconds=data.get("update_timeout_seconds", 600),
            http_timeout_seconds=data.get("http_timeout_seconds", 5),
            shells=tuple(data.get("shells", DEFAULT_SHELLS)),
            strict_versions=data.get("strict_versions", False),
            registry_url=str(data.get("registry_url", DEFAULT_REGISTRY_URL)).rstrip("/"),
        )


@dataclass(frozen=True)
class Config:
    """
    Complete easy-vibe configuration.

    Attributes:
        version: Config schema version
        preferences: Global preferences
        source: Path to the configuration file that was loaded
        explicit: Preference keys set by the file (used when merging)
    """
    version: int = 1
    preferences: Preferences = field(default_factory=Preferences)
    source: str = ""
    explicit: frozenset[str] = frozenset()

    def __post_init__(self):
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Config:
        """Create Config from dictionary."""
        preferences_data = data.get("preferences", {}) or {}
        return Config(
            version=data.get("version", 1),
            preferences=Preferences.from_dict(preferences_data),
            source=source,
            explicit=frozenset(preferences_data.keys()),
        )

    def merge_with(self, other: Config) -> Config:
        """
        Merge this config with another, preferring values this config set.

        Args:
            other: Other config to merge (lower priority)

        Returns:
            New merged Config object
        """
        overrides = {
            key: getattr(self.preferences, key)
            for key in self.explicit
            if hasattr(self.preferences, key)
        }
        return Config(
            version=self.version,
            preferences=replace(other.preferences, **overrides),
            source=self.source or other.source,
            explicit=self.explicit | other.explicit,
        )


def _load_yaml(file_path: str) -> dict[str, Any] | None:
    """
    Load YAML configuration file.

    Returns:
        Parsed configuration dictionary, or None if the file is unreadable or invalid
    """
    import yaml

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError) as e:
        logger.debug(f"Could not parse YAML {file_path}: {e}")
        return None


def _load_json(file_path: str) -> dict[str, Any] | None:
    """Load JSON configuration file, or None if invalid."""
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, json.JSONDecodeError):
        return None


def load_config_file(file_path: str, verbose: bool = False) -> Config | None:
    """
    Load configuration from a single file.

    Files ending in .json are read as JSON; anything else is read as YAML,
    falling back to a sibling .json file when the YAML can't be parsed.

    Args:
        file_path: Path to configuration file
        verbose: Enable verbose logging

    Returns:
        Config object, or None if file cannot be loaded
    """
    if not os.path.exists(file_path):
        return None

    vlog(f"Loading config from: {file_path}", verbose)

    if file_path.endswith(".json"):
        data = _load_json(file_path)
    else:
        data = _load_yaml(file_path)
        if data is None:
            json_path = file_path.replace(".yml", ".json").replace(".yaml", ".json")
            if os.path.exists(json_path):
                vlog(f"YAML unreadable, trying JSON: {json_path}", verbose)
                data = _load_json(json_path)

    if data is None:
        vlog(f"Invalid config file: {file_path}", verbose)
        return None

    try:
        config = Config.from_dict(data, source=file_path)
        vlog(f"Loaded config successfully: {file_path}", verbose)
        return config
    except (ValueError, TypeError) as e:
        logger.warning(f"Config validation failed for {file_path}: {e}")
        return None


def load_config(
    custom_path: str | None = None,
    verbose: bool = False,
) -> Config:
    """
    Load and merge configuration from all sources.

    Configuration precedence (highest to lowest):
    1. Custom path (if provided)
    2. Project .easy-vibe.yml
    3. User ~/.config/easy-vibe/config.yml
    4. System /etc/easy-vibe/config.yml
    5. Default configuration

    Args:
        custom_path: Optional path to custom configuration file
        verbose: Enable verbose logging

    Returns:
        Merged Config object (never None, returns defaults if no config found)

    Raises:
        ValueError: If custom_path is provided but file cannot be loaded
    """
    configs: list[Config] = []

    if custom_path:
        config = load_config_file(custom_path, verbose)
        if config is None:
            raise ValueError(f"Could not load config from specified path: {custom_path}")
        configs.append(config)

    for location in CONFIG_LOCATIONS:
        config = load_config_file(location, verbose)
        if config is not None:
            configs.append(config)

    if not configs:
        vlog("No config files found, using defaults", verbose)
        return Config()

    merged = configs[0]
    for config in configs[1:]:
        merged = merged.merge_with(config)

    vlog(f"Merged {len(configs)} config files", verbose)
    return merged


# --- Persisted settings -----------------------------------------------------

SETTINGS_KEY = "easy-vibe-settings"

AGENT_IDS = ("claude", "gemini", "qwen", "yolo")
PACKAGE_MANAGER_IDS = ("npm", "pnpm", "yarn")


@dataclass(frozen=True)
class AgentOption:
    """A selectable default agent."""
    id: str
    title: str
    description: str


AGENT_OPTIONS: tuple[AgentOption, ...] = (
    AgentOption("claude", "Claude Code", "Anthropic's AI coding assistant"),
    AgentOption("gemini", "Gemini CLI", "Google's AI coding assistant"),
    AgentOption("qwen", "Qwen Code CLI", "Alibaba's AI coding assistant"),
    AgentOption("yolo", "YOLO", "You Only Look Once - AI assistant"),
)


class SettingsError(Exception):
    """Raised when settings cannot be persisted."""
    pass


@dataclass(frozen=True)
class Settings:
    """
    User settings persisted between runs.

    Attributes:
        default_agent: Agent launched by default
        package_manager: Package manager used for global installs
        yolo_enabled: Whether the YOLO agent is offered
    """
    default_agent: str = "claude"
    package_manager: str = "npm"
    yolo_enabled: bool = False

    def __post_init__(self):
        if self.default_agent not in AGENT_IDS:
            raise ValueError(
                f"Invalid default agent: {self.default_agent}. "
                f"Must be one of: {', '.join(AGENT_IDS)}"
            )
        if self.package_manager not in PACKAGE_MANAGER_IDS:
            raise ValueError(
                f"Invalid package manager: {self.package_manager}. "
                f"Must be one of: {', '.join(PACKAGE_MANAGER_IDS)}"
            )
        if not isinstance(self.yolo_enabled, bool):
            raise ValueError(f"Invalid yoloEnabled flag: {self.yolo_enabled!r}")

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Settings:
        """Create Settings from the persisted camelCase blob, filling defaults."""
        defaults = Settings()
        return Settings(
            default_agent=data.get("defaultVibeAgent", defaults.default_agent),
            package_manager=data.get("packageManager", defaults.package_manager),
            yolo_enabled=data.get("yoloEnabled", defaults.yolo_enabled),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted camelCase blob."""
        return {
            "defaultVibeAgent": self.default_agent,
            "packageManager": self.package_manager,
            "yoloEnabled": self.yolo_enabled,
        }


DEFAULT_SETTINGS = Settings()


def load_settings(storage: LocalStorage | None = None) -> Settings:
    """
    Load persisted settings merged over defaults.

    Any read or parse failure is logged and yields the defaults.

    Args:
        storage: Local storage to read from (default location if None)

    Returns:
        Settings instance (never raises)
    """
    storage = storage or LocalStorage()
    try:
        raw = storage.get_item(SETTINGS_KEY)
        if not raw:
            return DEFAULT_SETTINGS
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"expected an object, got {type(data).__name__}")
        return Settings.from_dict(data)
    except (LocalStorageError, ValueError, TypeError) as e:
        logger.warning(f"Error loading settings, using defaults: {e}")
        return DEFAULT_SETTINGS


def save_settings(settings: Settings, storage: LocalStorage | None = None) -> None:
    """
    Persist settings as a single JSON blob.

    Raises:
        SettingsError: If the storage file cannot be written
    """
    storage = storage or LocalStorage()
    try:
        storage.set_item(SETTINGS_KEY, json.dumps(settings.to_dict()))
    except LocalStorageError as e:
        logger.error(f"Error saving settings: {e}")
        raise SettingsError(str(e)) from e


def visible_agents(settings: Settings) -> list[AgentOption]:
    """
    Agents offered for selection.

    YOLO is hidden unless enabled or already the default.
    """
    return [
        agent for agent in AGENT_OPTIONS
        if agent.id != "yolo" or settings.yolo_enabled or settings.default_agent == "yolo"
    ]
