"""
Installed-version detection.

Runs a command with each version flag in turn, inside a login shell,
until one produces something that looks like a version.
"""

from __future__ import annotations

import logging
import re
from typing import Sequence

from packaging.version import InvalidVersion, Version

from . import shell
from .common import combine_output
from .shell import ShellCommandError

logger = logging.getLogger(__name__)

VERSION_FLAGS = ("-v", "--version", "version")

# Optional fourth numeric component, dotted pre-release tag, build metadata
SEMVER_RE = re.compile(
    r"\d+\.\d+\.\d+(?:\.\d+)?"
    r"(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
)


def extract_semver(text: str) -> str:
    """Extract the first semantic version from text.

    Args:
        text: Version command output

    Returns:
        Version (e.g. "2.3.1", "0.0.1-alpha.8") or empty string
    """
    if not text:
        return ""
    m = SEMVER_RE.search(text)
    return m.group(0) if m else ""


def _looks_like_version(text: str) -> bool:
    try:
        Version(text.lstrip("vV"))
    except InvalidVersion:
        return False
    return True


def extract_installed_version(text: str, strict: bool = False) -> str:
    """Turn version command output into an installed version string.

    A semantic version wins. Otherwise the trimmed text itself is taken as a
    best-effort version, which lets oddly formatted tools through but can also
    admit help text. With strict=True the raw text is only kept when it parses
    as a version (e.g. "1.2", "v2024.1").

    Args:
        text: Combined, trimmed command output
        strict: Reject raw text that is not a version

    Returns:
        Version string or empty string
    """
    text = text.strip()
    version = extract_semver(text)
    if version:
        return version
    if not text:
        return ""
    if strict and not _looks_like_version(text):
        return ""
    return text


async def resolve_installed(
    command: str,
    flags: Sequence[str] = VERSION_FLAGS,
    shell_name: str = shell.DEFAULT_SHELL,
    strict: bool = False,
    timeout: float | None = None,
) -> str:
    """Resolve the installed version of a command.

    Candidates are run strictly one after another; the first that yields a
    version ends the search. Missing commands and non-zero exits are skipped.

    Args:
        command: Executable name (e.g. "claude")
        flags: Version flags to try, in priority order
        shell_name: Login shell used for the version commands
        strict: See extract_installed_version
        timeout: Per-command timeout in seconds

    Returns:
        Installed version, or empty string when every flag failed
    """
    for flag in flags:
        try:
            result = await shell.run_in_login_shell([command, flag], shell_name, timeout=timeout)
        except ShellCommandError as e:
            logger.debug(f"{command} {flag}: {e}")
            continue
        except ValueError as e:
            logger.debug(f"{command} {flag}: {e}")
            break

        version = extract_installed_version(combine_output(result.stdout, result.stderr), strict)
        if version:
            logger.debug(f"{command}: installed {version} via {flag}")
            return version

    logger.debug(f"{command}: not detected")
    return ""
