"""
Login-shell command execution.

Commands run inside a login shell so the user's PATH (nvm, Homebrew, npm
prefixes) is honoured. Arguments are handed to the shell as positional
parameters and expanded with "$@"; nothing is ever spliced into the -c
script, so package and command names cannot inject shell syntax.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Sequence

logger = logging.getLogger(__name__)

SHELL_PROGRAMS = {
    "zsh": "/bin/zsh",
    "bash": "/bin/bash",
}

DEFAULT_SHELL = "zsh"
DEFAULT_TIMEOUT_SECONDS = 15.0

# The script only forwards its positional parameters; $0 is a label
LOGIN_SCRIPT = '"$@"'
ARGV0 = "easy-vibe"


class ShellCommandError(Exception):
    """Raised when a login-shell command cannot run or exits non-zero."""

    def __init__(
        self,
        message: str,
        argv: Sequence[str] = (),
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ):
        super().__init__(message)
        self.argv = tuple(argv)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


@dataclass(frozen=True)
class ShellResult:
    """Captured output of a finished command."""
    argv: tuple[str, ...]
    stdout: str
    stderr: str
    returncode: int = 0


def shell_program(shell: str) -> str:
    """
    Resolve a shell name to its interpreter path.

    Args:
        shell: "zsh", "bash", or an absolute interpreter path

    Returns:
        Absolute path to the interpreter

    Raises:
        ValueError: If the shell name is not supported
    """
    if os.path.isabs(shell):
        return shell
    try:
        return SHELL_PROGRAMS[shell]
    except KeyError:
        raise ValueError(
            f"Unsupported shell: {shell}. Must be one of: {', '.join(sorted(SHELL_PROGRAMS))}"
        ) from None


def build_login_argv(argv: Sequence[str], shell: str = DEFAULT_SHELL) -> list[str]:
    """
    Build the process argument vector for running argv in a login shell.

    Args:
        argv: Command and arguments to run
        shell: Shell name or interpreter path

    Returns:
        Argument vector for the process-spawn primitive
    """
    if not argv:
        raise ValueError("Cannot run an empty command")
    return [shell_program(shell), "-l", "-c", LOGIN_SCRIPT, ARGV0, *argv]


async def run_in_login_shell(
    argv: Sequence[str],
    shell: str = DEFAULT_SHELL,
    timeout: float | None = None,
) -> ShellResult:
    """
    Run a command inside a login shell and capture its output.

    Args:
        argv: Command and arguments
        shell: Shell name ("zsh" or "bash") or interpreter path
        timeout: Seconds before the process is killed (default: 15)

    Returns:
        ShellResult with decoded stdout and stderr

    Raises:
        ShellCommandError: If the shell is missing, the command exits non-zero,
            or the timeout expires
    """
    args = build_login_argv(argv, shell)
    label = " ".join(argv)
    logger.debug(f"Running in {shell} login shell: {label}")

    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env={**os.environ, "TERM": "dumb"},  # Disable ANSI/color output from subprocesses
        )
    except OSError as e:
        raise ShellCommandError(f"Could not start {args[0]}: {e}", argv) from e

    try:
        raw_out, raw_err = await asyncio.wait_for(
            proc.communicate(),
            timeout=timeout or DEFAULT_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise ShellCommandError(f"Command timed out: {label}", argv) from None

    stdout = raw_out.decode("utf-8", errors="replace")
    stderr = raw_err.decode("utf-8", errors="replace")

    if proc.returncode != 0:
        detail = stderr.strip() or stdout.strip()
        message = f"Command failed: {label} (exit {proc.returncode})"
        if detail:
            message = f"{message}\n{detail}"
        raise ShellCommandError(
            message,
            argv,
            returncode=proc.returncode,
            stdout=stdout,
            stderr=stderr,
        )

    return ShellResult(argv=tuple(argv), stdout=stdout, stderr=stderr, returncode=0)
