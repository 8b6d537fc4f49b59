"""
Package manager registry for global installs.

The tracked assistants are published on npm; any of the Node package
managers can install them globally.
"""

from __future__ import annotations

import shutil
import threading
from dataclasses import dataclass


# Cache for package manager availability checks
_PM_CACHE: dict[str, bool] = {}
_PM_CACHE_LOCK = threading.Lock()


@dataclass(frozen=True)
class PackageManager:
    """
    Package manager definition.

    Attributes:
        name: Package manager identifier ("npm", "pnpm", "yarn")
        display_name: Human-readable name
        check_command: Executable whose presence marks the manager available
        install_command_template: Global install argv (use {package} placeholder)
        description: One-line description
    """
    name: str
    display_name: str
    check_command: str
    install_command_template: tuple[str, ...]
    description: str = ""

    def is_available(self) -> bool:
        """
        Check whether the manager's executable is on PATH.

        Only the non-login PATH is consulted; the login shell may see more.
        """
        with _PM_CACHE_LOCK:
            if self.name in _PM_CACHE:
                return _PM_CACHE[self.name]

        available = shutil.which(self.check_command) is not None

        with _PM_CACHE_LOCK:
            _PM_CACHE[self.name] = available

        return available

    def get_install_command(self, package: str) -> tuple[str, ...]:
        """
        Get the global install command for a package.

        Args:
            package: Package name, substituted as a single argument

        Returns:
            Command tuple to install the package
        """
        return tuple(part.replace("{package}", package) for part in self.install_command_template)


PACKAGE_MANAGERS = (
    PackageManager(
        name="npm",
        display_name="npm",
        check_command="npm",
        install_command_template=("npm", "install", "-g", "{package}"),
        description="Node Package Manager",
    ),
    PackageManager(
        name="pnpm",
        display_name="pnpm",
        check_command="pnpm",
        install_command_template=("pnpm", "add", "-g", "{package}"),
        description="Fast, disk space efficient package manager",
    ),
    PackageManager(
        name="yarn",
        display_name="Yarn",
        check_command="yarn",
        install_command_template=("yarn", "global", "add", "{package}"),
        description="Fast, reliable, and secure dependency management",
    ),
)

PM_MAP: dict[str, PackageManager] = {pm.name: pm for pm in PACKAGE_MANAGERS}

DEFAULT_PACKAGE_MANAGER = "npm"


def get_package_manager(name: str) -> PackageManager:
    """
    Look up a package manager by name.

    Raises:
        ValueError: If the name is not a supported manager
    """
    try:
        return PM_MAP[name]
    except KeyError:
        raise ValueError(
            f"Unknown package manager: {name}. Must be one of: {', '.join(PM_MAP)}"
        ) from None


def get_available_package_managers() -> list[PackageManager]:
    """Managers whose executable is found on PATH."""
    return [pm for pm in PACKAGE_MANAGERS if pm.is_available()]


def clear_availability_cache() -> None:
    """Forget cached availability checks."""
    with _PM_CACHE_LOCK:
        _PM_CACHE.clear()
