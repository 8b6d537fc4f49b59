"""
Common utilities shared across easy_vibe modules.
"""

from __future__ import annotations

import os
import re
import sys

ANSI_ESCAPE_RE = re.compile(r'\x1b\[[0-9;]*m|\033\[[0-9;]*m')


def strip_ansi(text: str) -> str:
    """Remove ANSI colour sequences from command output."""
    return ANSI_ESCAPE_RE.sub('', text)


def combine_output(stdout: str, stderr: str) -> str:
    """
    Concatenate standard output and standard error the way version checks read them.

    Args:
        stdout: Captured standard output
        stderr: Captured standard error

    Returns:
        Trimmed, ANSI-free text
    """
    return strip_ansi(f"{stdout}\n{stderr}").strip()


def last_line(text: str) -> str:
    """Return the last non-empty line of text, or empty string."""
    for line in reversed(text.splitlines()):
        if line.strip():
            return line.strip()
    return ""


def pluralize(count: int, word: str) -> str:
    """Format a count with a naively pluralized noun ("1 tool", "2 tools")."""
    return f"{count} {word}{'s' if count != 1 else ''}"


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log verbose message using structured logging.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose or os.environ.get("EASY_VIBE_DEBUG", "0") == "1":
        try:
            from .logging_config import get_logger
            logger = get_logger()
            logger.info(msg)
        except Exception:
            # Fallback to stderr if logging fails
            try:
                print(f"[easy_vibe] {msg}", file=sys.stderr)
            except Exception:
                pass
